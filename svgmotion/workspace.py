"""Editing session: the loaded document, its layer tree and the playback clock.

The workspace is the only mutable object; it swaps in whole new tree and
timeline values on each edit.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Sequence

from svgmotion import layer_tree
from svgmotion import timeline as playback
from svgmotion.animation.css_compiler import compile_animation
from svgmotion.animation.interpolation import resolve_layer
from svgmotion.animation.preview import render_preview
from svgmotion.animation.svg_parser import parse_svg
from svgmotion.errors import ValidationError
from svgmotion.ids import IdSource, default_id_source
from svgmotion.layer_tree import LayerTree
from svgmotion.timeline import Timeline

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"


class Workspace:
    def __init__(self, id_source: Optional[IdSource] = None, duration: Optional[float] = None) -> None:
        self.id_source = id_source or default_id_source
        self._default_duration = duration
        self.markup = ""
        self.tree = LayerTree()
        self.timeline = self._fresh_timeline()

    def _fresh_timeline(self) -> Timeline:
        return Timeline() if self._default_duration is None else Timeline(duration=self._default_duration)

    @property
    def loaded(self) -> bool:
        return bool(self.markup)

    def load(self, svg_text: str) -> LayerTree:
        """Replace the document. On ParseError nothing changes."""
        parsed = parse_svg(svg_text, id_source=self.id_source)
        self.markup = parsed.markup
        self.tree = layer_tree.from_layers(parsed.layers)
        self.timeline = replace(self.timeline, current_time=0.0, playing=False)
        return self.tree

    def reset(self) -> None:
        self.markup = ""
        self.tree = LayerTree()
        self.timeline = self._fresh_timeline()

    # Tree edits

    def update_layer(self, layer_id: str, **fields: Any) -> LayerTree:
        self.tree = layer_tree.update(self.tree, layer_id, **fields)
        return self.tree

    def rename_layer(self, layer_id: str, new_name: str) -> LayerTree:
        self.tree = layer_tree.rename(self.tree, layer_id, new_name)
        return self.tree

    def set_property(self, layer_id: str, key: str, value: Any) -> LayerTree:
        self.tree = layer_tree.set_property(self.tree, layer_id, key, value)
        return self.tree

    def add_keyframe(self, layer_id: str, time: float, properties: Mapping[str, Any]) -> LayerTree:
        self.tree = layer_tree.add_keyframe(self.tree, layer_id, time, properties, id_source=self.id_source)
        return self.tree

    def capture_keyframe(self, layer_id: str) -> LayerTree:
        self.tree = layer_tree.capture_keyframe(self.tree, layer_id, self.timeline, id_source=self.id_source)
        return self.tree

    def remove_keyframe(self, layer_id: str, keyframe_id: str) -> LayerTree:
        self.tree = layer_tree.remove_keyframe(self.tree, layer_id, keyframe_id)
        return self.tree

    def group_layers(self, layer_ids: Sequence[str], group_name: str) -> LayerTree:
        self.tree = layer_tree.group(self.tree, layer_ids, group_name, id_source=self.id_source)
        return self.tree

    def ungroup_layers(self, group_id: str) -> LayerTree:
        self.tree = layer_tree.ungroup(self.tree, group_id)
        return self.tree

    def select(self, layer_id: Optional[str]) -> LayerTree:
        self.tree = layer_tree.select(self.tree, layer_id)
        return self.tree

    def highlight(self, layer_id: Optional[str]) -> LayerTree:
        self.tree = layer_tree.highlight(self.tree, layer_id)
        return self.tree

    # Timeline

    def seek(self, time: float) -> Timeline:
        self.timeline = playback.seek(self.timeline, time)
        return self.timeline

    def set_duration(self, duration: float) -> Timeline:
        self.timeline = playback.set_duration(self.timeline, duration)
        return self.timeline

    def toggle_playback(self) -> Timeline:
        self.timeline = playback.toggle_playback(self.timeline)
        return self.timeline

    # Outputs

    def resolved_state(self, time: Optional[float] = None) -> Dict[str, Dict[str, Any]]:
        """Resolved properties for every leaf layer at `time` (default: playhead)."""
        at = self.timeline.current_time if time is None else time
        return {
            layer.id: resolve_layer(layer, at)
            for layer in layer_tree.iter_layers(self.tree.layers)
            if not layer.is_group
        }

    def preview(self, time: Optional[float] = None) -> str:
        self._require_document()
        at = self.timeline.current_time if time is None else time
        return render_preview(self.markup, self.tree, at)

    def export(self) -> str:
        self._require_document()
        return compile_animation(self.markup, self.tree, self.timeline.duration)

    def _require_document(self) -> None:
        if not self.loaded:
            raise ValidationError("No SVG document is loaded")
