"""Layer and keyframe data structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Properties that compose into a single transform rather than standing alone.
TRANSFORM_PROPERTIES = ("translateX", "translateY", "rotate", "scale")

DEFAULT_PROPERTIES: Dict[str, Any] = {
    "fill": "none",
    "stroke": "#000000",
    "strokeWidth": 1,
    "opacity": 1,
    "translateX": 0,
    "translateY": 0,
    "rotate": 0,
    "scale": 1,
}

# Editable properties with their UI labels and ranges.
ANIMATABLE_PROPERTIES: List[Dict[str, Any]] = [
    {"id": "fill", "label": "Fill Color", "type": "color"},
    {"id": "stroke", "label": "Stroke Color", "type": "color"},
    {"id": "strokeWidth", "label": "Stroke Width", "type": "number", "min": 0, "max": 20, "step": 0.5},
    {"id": "opacity", "label": "Opacity", "type": "number", "min": 0, "max": 1, "step": 0.1},
    {"id": "translateX", "label": "Move X", "type": "number", "min": -500, "max": 500, "step": 1},
    {"id": "translateY", "label": "Move Y", "type": "number", "min": -500, "max": 500, "step": 1},
    {"id": "rotate", "label": "Rotate", "type": "number", "min": -360, "max": 360, "step": 1},
    {"id": "scale", "label": "Scale", "type": "number", "min": 0, "max": 5, "step": 0.1},
]


def _freeze(properties: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(properties))


class LayerKind(str, Enum):
    """Kinds of animatable layers."""
    PATH = "path"
    CIRCLE = "circle"
    RECT = "rect"
    GROUP = "group"


@dataclass(frozen=True)
class Keyframe:
    """A property snapshot pinned to a time (ms) on a layer's timeline."""
    id: str
    time: float
    properties: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _freeze(self.properties))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "time": self.time, "properties": dict(self.properties)}


@dataclass(frozen=True)
class Layer:
    """One animatable primitive, or a named group of layers.

    Instances are never mutated; tree operations build replacements with
    `dataclasses.replace`.
    """
    id: str
    name: str
    kind: LayerKind
    properties: Mapping[str, Any] = field(default_factory=dict, hash=False)
    keyframes: Tuple[Keyframe, ...] = ()
    children: Tuple["Layer", ...] = ()
    path_data: Optional[str] = None
    is_selected: bool = False
    is_highlighted: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _freeze(self.properties))
        object.__setattr__(self, "keyframes", tuple(self.keyframes))
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def is_group(self) -> bool:
        return self.kind == LayerKind.GROUP

    @property
    def is_animated(self) -> bool:
        return bool(self.keyframes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "properties": dict(self.properties),
            "keyframes": [kf.to_dict() for kf in self.keyframes],
            "is_selected": self.is_selected,
            "is_highlighted": self.is_highlighted,
        }
        if self.path_data is not None:
            data["path_data"] = self.path_data
        if self.is_group:
            data["children"] = [child.to_dict() for child in self.children]
        return data
