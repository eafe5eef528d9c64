"""Shared playback clock."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

from svgmotion.errors import ValidationError
from svgmotion.utils.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Timeline:
    duration: float = field(default_factory=lambda: settings.default_duration_ms)
    current_time: float = 0.0
    playing: bool = False

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValidationError(f"Timeline duration must be positive, got {self.duration}")

    def to_dict(self) -> dict:
        return {"duration": self.duration, "current_time": self.current_time, "playing": self.playing}


def tick(timeline: Timeline, frame_ms: Optional[float] = None) -> Timeline:
    """Advance one display frame; wraps to 0 at the end so playback loops."""
    if not timeline.playing:
        return timeline
    step = settings.frame_ms if frame_ms is None else frame_ms
    new_time = timeline.current_time + step
    if new_time >= timeline.duration:
        new_time = 0.0
    return replace(timeline, current_time=new_time)


def seek(timeline: Timeline, time: float) -> Timeline:
    """Scrub to `time`, clamped onto the timeline."""
    return replace(timeline, current_time=max(0.0, min(float(time), timeline.duration)))


def rewind(timeline: Timeline) -> Timeline:
    return replace(timeline, current_time=0.0)


def toggle_playback(timeline: Timeline) -> Timeline:
    return replace(timeline, playing=not timeline.playing)


def set_duration(timeline: Timeline, duration: float) -> Timeline:
    updated = replace(timeline, duration=duration)
    if updated.current_time > duration:
        updated = replace(updated, current_time=0.0)
    return updated


def format_time(ms: float) -> str:
    return f"{ms / 1000:.2f}s"


def timeline_ticks(duration: float, count: int = 10) -> List[float]:
    """Evenly spaced ruler marks from 0 to `duration` inclusive."""
    interval = duration / count
    return [i * interval for i in range(count + 1)]


class Player:
    """Drives a Timeline once per frame on the running asyncio loop.

    Each frame is one resumption of the playback task; `stop()` cancels the
    pending one.
    """

    def __init__(
        self,
        timeline: Timeline,
        on_frame: Optional[Callable[[Timeline], None]] = None,
        frame_ms: Optional[float] = None,
    ) -> None:
        self.timeline = timeline
        self.on_frame = on_frame
        self.frame_ms = settings.frame_ms if frame_ms is None else frame_ms
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self.timeline = replace(self.timeline, playing=True)
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> Timeline:
        self.timeline = replace(self.timeline, playing=False)
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        return self.timeline

    async def _run(self) -> None:
        while self.timeline.playing:
            await asyncio.sleep(self.frame_ms / 1000)
            self.timeline = tick(self.timeline, self.frame_ms)
            if self.on_frame is not None:
                self.on_frame(self.timeline)
