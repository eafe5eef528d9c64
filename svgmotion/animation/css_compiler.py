"""Compile layer keyframes into CSS animations embedded in the SVG."""
from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union
from xml.etree import ElementTree as ET

from svgmotion.animation.interpolation import is_number
from svgmotion.animation.svg_parser import load_svg_root, serialize_svg
from svgmotion.layer_tree import LayerTree, iter_layers
from svgmotion.models import TRANSFORM_PROPERTIES, Keyframe, Layer

logger = logging.getLogger(__name__)

ANIMATION_STYLE_ID = "svgmotion-animations"

_NON_CLASS_CHARS_RE = re.compile(r"[^a-z0-9]+")
_CAMEL_RE = re.compile(r"([A-Z])")


def _strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _ns_tag(root: ET.Element, tag: str) -> str:
    """Qualify `tag` with the root element's namespace, if it has one."""
    if root.tag.startswith("{"):
        return root.tag[: root.tag.index("}") + 1] + tag
    return tag


def _append_class(el: ET.Element, class_name: str) -> None:
    existing = el.get("class") or ""
    classes = [c for c in existing.split() if c]
    if class_name not in classes:
        classes.append(class_name)
    el.set("class", " ".join(classes))


def class_name_for(name: str) -> str:
    return _NON_CLASS_CHARS_RE.sub("-", name.lower()).strip("-")


def kebab_case(key: str) -> str:
    return _CAMEL_RE.sub(r"-\1", key).lower()


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def format_value(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        text = format_number(value)
        return f"{text}px" if key == "strokeWidth" else text
    return str(value)


def format_percentage(time: float, duration: float) -> str:
    pct = (time / duration) * 100
    # Keyframes past the end of the timeline pin to 100%.
    pct = max(0.0, min(100.0, pct))
    # Ties on the exact binary value round half-up, not to even.
    return f"{Decimal(pct).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}%"


def compose_transform(properties: Mapping[str, Any], unit: bool = True) -> Optional[str]:
    """Combine translate/rotate/scale into one transform value.

    Components absent from `properties` are left out. With `unit=False` the
    SVG attribute syntax (unitless) is produced instead of CSS.
    """
    px = "px" if unit else ""
    deg = "deg" if unit else ""
    parts: List[str] = []
    tx = properties.get("translateX")
    ty = properties.get("translateY")
    if tx is not None or ty is not None:
        parts.append(f"translate({format_number(tx or 0)}{px},{format_number(ty or 0)}{px})")
    if properties.get("rotate") is not None:
        parts.append(f"rotate({format_number(properties['rotate'])}{deg})")
    if properties.get("scale") is not None:
        parts.append(f"scale({format_number(properties['scale'])})")
    return " ".join(parts) if parts else None


def keyframe_declarations(properties: Mapping[str, Any]) -> List[str]:
    declarations = [
        f"{kebab_case(key)}: {format_value(key, value)};"
        for key, value in properties.items()
        if value is not None and key not in TRANSFORM_PROPERTIES
    ]
    transform = compose_transform(properties)
    if transform:
        declarations.append(f"transform: {transform};")
    return declarations


def build_keyframes_block(class_name: str, keyframes: Sequence[Keyframe], duration: float) -> str:
    steps = []
    for kf in sorted(keyframes, key=lambda k: k.time):
        body = " ".join([*keyframe_declarations(kf.properties), "}"])
        steps.append(f"{format_percentage(kf.time, duration)} {{ {body}")
    return f"@keyframes anim-{class_name} {{ {' '.join(steps)} }}"


def build_animation_rule(class_name: str, keyframes: Sequence[Keyframe], duration: float) -> str:
    declarations = [f"animation: anim-{class_name} {format_number(duration / 1000)}s linear infinite;"]
    if any(kf.properties.get("rotate") is not None for kf in keyframes):
        # Rotate around the shape's own box, not the document origin.
        declarations.append("transform-origin: center; transform-box: fill-box;")
    return f".{class_name} {{ {' '.join(declarations)} }}"


def assign_class_names(layers: Iterable[Layer]) -> Dict[str, str]:
    """Map each animated layer id to a unique class name, in traversal order."""
    names: Dict[str, str] = {}
    used: Dict[str, int] = {}
    for layer in iter_layers(layers):
        if not layer.is_animated:
            continue
        base = class_name_for(layer.name) or class_name_for(layer.id) or "layer"
        if base[0].isdigit():
            base = f"layer-{base}"
        count = used.get(base, 0) + 1
        used[base] = count
        names[layer.id] = base if count == 1 else f"{base}-{count}"
        if count > 1:
            logger.info("Class name %s already used; layer %s gets %s", base, layer.id, names[layer.id])
    return names


def _as_layers(layers: Union[LayerTree, Sequence[Layer]]) -> Sequence[Layer]:
    return layers.layers if isinstance(layers, LayerTree) else layers


def build_animation_css(layers: Union[LayerTree, Sequence[Layer]], duration: float) -> str:
    """Generate the @keyframes blocks and class rules for every animated layer."""
    layers = _as_layers(layers)
    class_names = assign_class_names(layers)
    blocks: List[str] = []
    for layer in iter_layers(layers):
        class_name = class_names.get(layer.id)
        if class_name is None:
            continue
        blocks.append(build_keyframes_block(class_name, layer.keyframes, duration))
        blocks.append(build_animation_rule(class_name, layer.keyframes, duration))
    return "\n".join(blocks)


def _collect_elements(layer: Layer, id_map: Dict[str, ET.Element]) -> List[ET.Element]:
    elements: List[ET.Element] = []
    for child in layer.children:
        el = id_map.get(child.id)
        if el is not None:
            elements.append(el)
        elif child.is_group:
            elements.extend(_collect_elements(child, id_map))
    return elements


def _materialize_group(root: ET.Element, id_map: Dict[str, ET.Element], layer: Layer) -> Optional[ET.Element]:
    """Create a <g> for a group that exists only in the layer tree.

    The group's member elements are moved into it, at the first member's
    position.
    """
    members = _collect_elements(layer, id_map)
    if not members:
        return None
    parents = {child: parent for parent in root.iter() for child in parent}
    anchor_parent = parents.get(members[0], root)
    index = list(anchor_parent).index(members[0]) if members[0] in parents else len(anchor_parent)
    group_el = ET.Element(_ns_tag(root, "g"), {"id": layer.id})
    anchor_parent.insert(index, group_el)
    for el in members:
        parent = parents.get(el)
        if parent is not None:
            parent.remove(el)
        group_el.append(el)
    id_map[layer.id] = group_el
    logger.info("Materialized group %s with %d elements", layer.id, len(members))
    return group_el


def _ensure_style_element(root: ET.Element) -> ET.Element:
    style_tag = _ns_tag(root, "style")
    for el in root.iter():
        if _strip_ns(el.tag) == "style" and el.get("id") == ANIMATION_STYLE_ID:
            if len(root) and root[0] is el:
                return el
            for parent in root.iter():
                if el in list(parent):
                    parent.remove(el)
                    break
            root.insert(0, el)
            return el
    style_el = ET.Element(style_tag, {"id": ANIMATION_STYLE_ID})
    root.insert(0, style_el)
    return style_el


def compile_animation(
    source_markup: str,
    layers: Union[LayerTree, Sequence[Layer]],
    duration: float,
) -> str:
    """Bake every layer's keyframes into a standalone animated SVG.

    Args:
        source_markup: The SVG as extracted, carrying the layer ids
        layers: Layer tree (or top-level layers) holding the keyframes
        duration: Timeline duration in ms

    Returns:
        Serialized SVG with a leading <style> block and layer classes applied
    """
    root = load_svg_root(source_markup)
    layers = _as_layers(layers)
    class_names = assign_class_names(layers)
    id_map = {el.get("id"): el for el in root.iter() if el.get("id")}

    for layer in iter_layers(layers):
        class_name = class_names.get(layer.id)
        if class_name is None:
            continue
        el = id_map.get(layer.id)
        if el is None and layer.is_group:
            el = _materialize_group(root, id_map, layer)
        if el is None:
            logger.warning("No element with id '%s' for layer '%s'", layer.id, layer.name)
            continue
        _append_class(el, class_name)

    style_el = _ensure_style_element(root)
    style_el.text = build_animation_css(layers, duration)
    logger.info("Compiled %d animated layers", len(class_names))
    return serialize_svg(root)
