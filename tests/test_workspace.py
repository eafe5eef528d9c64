"""Tests for the editing workspace."""
import pytest

from svgmotion.errors import ParseError, ValidationError
from svgmotion.ids import CounterIdSource
from svgmotion.workspace import Workspace

SVG = '<svg xmlns="http://www.w3.org/2000/svg"><path d="M0 0 L5 5"/><rect id="r" width="3" height="3"/></svg>'


@pytest.fixture
def workspace():
    ws = Workspace(id_source=CounterIdSource(), duration=1000)
    ws.load(SVG)
    return ws


def test_load_extracts_layers(workspace):
    assert [layer.id for layer in workspace.tree.layers] == ["path-0-1", "r"]
    assert 'id="path-0-1"' in workspace.markup


def test_failed_load_leaves_state_unchanged(workspace):
    tree, markup = workspace.tree, workspace.markup
    with pytest.raises(ParseError):
        workspace.load("<svg><broken></svg>")
    assert workspace.tree is tree
    assert workspace.markup == markup


def test_capture_at_playhead_then_export(workspace):
    workspace.rename_layer("r", "Box")
    workspace.seek(0)
    workspace.set_property("r", "opacity", 0)
    workspace.capture_keyframe("r")
    workspace.seek(1000)
    workspace.set_property("r", "opacity", 1)
    workspace.capture_keyframe("r")
    assert workspace.resolved_state(500)["r"]["opacity"] == 0.5
    out = workspace.export()
    assert "@keyframes anim-box { 0.0% {" in out
    assert "animation: anim-box 1s linear infinite;" in out


def test_snapshot_taken_before_edit_is_unchanged(workspace):
    before = workspace.tree
    workspace.add_keyframe("r", 0, {"opacity": 0})
    assert before.layers[1].keyframes == ()
    assert workspace.tree.version == before.version + 1


def test_group_validation_surfaces(workspace):
    with pytest.raises(ValidationError):
        workspace.group_layers(["r"], "Solo")


def test_export_requires_document():
    with pytest.raises(ValidationError):
        Workspace().export()


def test_reset(workspace):
    workspace.toggle_playback()
    workspace.reset()
    assert not workspace.loaded
    assert workspace.tree.layers == ()
    assert workspace.timeline.duration == 1000
    assert workspace.timeline.playing is False
