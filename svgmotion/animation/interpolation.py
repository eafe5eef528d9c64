"""Resolve a layer's property state at an arbitrary time.

Only linear interpolation between adjacent keyframes is supported:

- numbers interpolate linearly
- `#rrggbb` colors interpolate per channel, rounded half-up
- every other pairing steps from the earlier value to the later one once
  progress passes 0.5
- a key defined on only one side holds that side's value
"""
from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from svgmotion.models import Keyframe, Layer

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _lerp(a: float, b: float, progress: float) -> float:
    # Endpoints are returned as-is so a keyframe's own values survive exactly.
    if progress <= 0:
        return a
    if progress >= 1:
        return b
    return a + (b - a) * progress


def interpolate_color(color1: str, color2: str, progress: float) -> str:
    r1, g1, b1 = (int(color1[i:i + 2], 16) for i in (1, 3, 5))
    r2, g2, b2 = (int(color2[i:i + 2], 16) for i in (1, 3, 5))
    r = _round_half_up(r1 + (r2 - r1) * progress)
    g = _round_half_up(g1 + (g2 - g1) * progress)
    b = _round_half_up(b1 + (b2 - b1) * progress)
    return f"#{r:02x}{g:02x}{b:02x}"


def interpolate_value(value1: Any, value2: Any, progress: float) -> Any:
    if is_number(value1) and is_number(value2):
        return _lerp(value1, value2, progress)
    if is_hex_color(value1) and is_hex_color(value2):
        if progress <= 0:
            return value1
        if progress >= 1:
            return value2
        return interpolate_color(value1, value2, progress)
    return value2 if progress > 0.5 else value1


def interpolate_properties(props1: Mapping[str, Any], props2: Mapping[str, Any], progress: float) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key in list(props1) + [k for k in props2 if k not in props1]:
        if key not in props2 or props2[key] is None:
            result[key] = props1[key]
        elif key not in props1 or props1[key] is None:
            result[key] = props2[key]
        else:
            result[key] = interpolate_value(props1[key], props2[key], progress)
    return result


def sort_keyframes(keyframes: Iterable[Keyframe]) -> List[Keyframe]:
    """Stable sort by time with coincident keyframes collapsed.

    When several keyframes share a time the last one inserted wins.
    """
    ordered: List[Keyframe] = []
    for kf in sorted(keyframes, key=lambda k: k.time):
        if ordered and ordered[-1].time == kf.time:
            ordered[-1] = kf
        else:
            ordered.append(kf)
    return ordered


def resolve(
    keyframes: Sequence[Keyframe],
    query_time: float,
    static_properties: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return the property state at `query_time`.

    With no keyframes the static properties are returned unchanged. Times
    outside the keyframe range clamp to the nearest keyframe.
    """
    if not keyframes:
        return dict(static_properties or {})

    ordered = sort_keyframes(keyframes)
    first, last = ordered[0], ordered[-1]
    if query_time <= first.time:
        return dict(first.properties)
    if query_time >= last.time:
        return dict(last.properties)

    prev_kf, next_kf = first, last
    for a, b in zip(ordered, ordered[1:]):
        if a.time <= query_time <= b.time:
            prev_kf, next_kf = a, b
            break

    span = next_kf.time - prev_kf.time
    progress = (query_time - prev_kf.time) / span if span else 0.0
    return interpolate_properties(prev_kf.properties, next_kf.properties, progress)


def resolve_layer(layer: Layer, query_time: float) -> Dict[str, Any]:
    return resolve(layer.keyframes, query_time, layer.properties)
