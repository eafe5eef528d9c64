"""Tests for the playback clock."""
import asyncio

import pytest

from svgmotion.errors import ValidationError
from svgmotion.timeline import (
    Player,
    Timeline,
    format_time,
    rewind,
    seek,
    set_duration,
    tick,
    timeline_ticks,
    toggle_playback,
)


def test_default_duration_is_five_seconds():
    assert Timeline().duration == 5000


def test_duration_must_be_positive():
    with pytest.raises(ValidationError):
        Timeline(duration=0)


def test_tick_advances_only_while_playing():
    paused = Timeline(duration=1000)
    assert tick(paused, 16.67) is paused
    playing = toggle_playback(paused)
    assert tick(playing, 16.67).current_time == pytest.approx(16.67)


def test_tick_wraps_to_zero():
    near_end = Timeline(duration=100, current_time=90, playing=True)
    assert tick(near_end, 10).current_time == 0
    assert tick(near_end, 25).current_time == 0
    assert tick(near_end, 5).current_time == 95


def test_seek_clamps():
    timeline = Timeline(duration=1000)
    assert seek(timeline, -50).current_time == 0
    assert seek(timeline, 400).current_time == 400
    assert seek(timeline, 5000).current_time == 1000


def test_rewind_and_shrinking_duration():
    timeline = Timeline(duration=1000, current_time=800)
    assert rewind(timeline).current_time == 0
    assert set_duration(timeline, 500).current_time == 0
    assert set_duration(timeline, 2000).current_time == 800


def test_format_time_and_ticks():
    assert format_time(1500) == "1.50s"
    assert timeline_ticks(5000) == [i * 500.0 for i in range(11)]


def test_player_loops_and_stops():
    frames = []

    async def scenario():
        player = Player(Timeline(duration=30), on_frame=frames.append, frame_ms=10)
        player.start()
        assert player.running
        while len(frames) < 4:
            await asyncio.sleep(0.005)
        stopped = await player.stop()
        assert not player.running
        return stopped

    stopped = asyncio.run(scenario())
    assert [f.current_time for f in frames[:4]] == [10, 20, 0, 10]
    assert stopped.playing is False
