"""Animation script: a JSON description of keyframes to replay onto a layer tree.

Example::

    {
      "duration": 1000,
      "layers": {
        "p1": {"name": "p1", "keyframes": [{"time": 0, "properties": {"opacity": 0}}]}
      },
      "groups": [{"name": "Leaves", "layers": ["leaf-a", "leaf-b"]}]
    }
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema import ValidationError as SchemaValidationError

from svgmotion import layer_tree
from svgmotion.errors import ValidationError
from svgmotion.ids import IdSource
from svgmotion.layer_tree import LayerTree

logger = logging.getLogger(__name__)

SCRIPT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "duration": {"type": "number", "exclusiveMinimum": 0},
        "layers": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "properties": {"type": "object"},
                    "keyframes": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["time", "properties"],
                            "properties": {
                                "id": {"type": "string"},
                                "time": {"type": "number", "minimum": 0},
                                "properties": {"type": "object"},
                            },
                            "additionalProperties": False,
                        },
                    },
                },
                "additionalProperties": False,
            },
        },
        "groups": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "layers"],
                "properties": {
                    "name": {"type": "string"},
                    "layers": {"type": "array", "items": {"type": "string"}, "minItems": 2},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

_VALIDATOR = Draft202012Validator(SCRIPT_SCHEMA)


@dataclass(frozen=True)
class AnimationScript:
    duration: Optional[float] = None
    layers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    groups: List[Dict[str, Any]] = field(default_factory=list)


def validate_script(payload: Dict[str, Any]) -> None:
    try:
        _VALIDATOR.validate(payload)
    except SchemaValidationError as exc:
        raise ValidationError(f"Animation script validation failed: {exc.message}") from exc


def script_from_dict(payload: Dict[str, Any]) -> AnimationScript:
    validate_script(payload)
    return AnimationScript(
        duration=payload.get("duration"),
        layers=payload.get("layers", {}),
        groups=payload.get("groups", []),
    )


def load_script(text: str) -> AnimationScript:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Animation script is not valid JSON: {exc}") from exc
    return script_from_dict(payload)


def apply_script(tree: LayerTree, script: AnimationScript, id_source: Optional[IdSource] = None) -> LayerTree:
    """Replay renames, base properties, keyframes, then groups onto `tree`."""
    for layer_id, entry in script.layers.items():
        if layer_tree.find_layer(tree, layer_id) is None:
            logger.warning("Script references unknown layer '%s'", layer_id)
            continue
        if "name" in entry:
            tree = layer_tree.rename(tree, layer_id, entry["name"])
        for key, value in (entry.get("properties") or {}).items():
            tree = layer_tree.set_property(tree, layer_id, key, value)
        for kf in entry.get("keyframes", []):
            tree = layer_tree.add_keyframe(
                tree, layer_id, kf["time"], kf["properties"],
                id_source=id_source, keyframe_id=kf.get("id"),
            )
    for group_entry in script.groups:
        tree = layer_tree.group(tree, group_entry["layers"], group_entry["name"], id_source=id_source)
    return tree
