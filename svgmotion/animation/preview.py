"""Attribute-based rendering of a layer tree at a point in time.

The live preview writes the resolved pose straight onto the elements,
unlike the exported file which animates through CSS classes. Both paths
use the same transform component values for a given time.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping
from xml.etree import ElementTree as ET

from svgmotion.animation.css_compiler import compose_transform, format_value, kebab_case
from svgmotion.animation.interpolation import resolve_layer
from svgmotion.animation.svg_parser import load_svg_root, serialize_svg
from svgmotion.layer_tree import LayerTree, iter_layers
from svgmotion.models import TRANSFORM_PROPERTIES

logger = logging.getLogger(__name__)

HIGHLIGHTED_CLASS = "svg-highlighted"
SELECTED_CLASS = "svg-selected"
ROTATE_ORIGIN_STYLE = "transform-box: fill-box; transform-origin: center"


def _set_state_classes(el: ET.Element, selected: bool, highlighted: bool) -> None:
    classes = [
        c for c in (el.get("class") or "").split()
        if c not in (HIGHLIGHTED_CLASS, SELECTED_CLASS)
    ]
    if highlighted:
        classes.append(HIGHLIGHTED_CLASS)
    if selected:
        classes.append(SELECTED_CLASS)
    if classes:
        el.set("class", " ".join(classes))
    elif "class" in el.attrib:
        del el.attrib["class"]


def apply_properties(el: ET.Element, properties: Mapping[str, Any]) -> None:
    """Write a resolved property snapshot onto an element as attributes."""
    for key, value in properties.items():
        if value is None or key in TRANSFORM_PROPERTIES:
            continue
        # Attributes are unitless; px is only added in CSS.
        text = format_value("", value)
        el.set(kebab_case(key), text)
    transform = compose_transform(properties, unit=False)
    if transform:
        el.set("transform", transform)
        style = el.get("style") or ""
        if properties.get("rotate") is not None and ROTATE_ORIGIN_STYLE not in style:
            el.set("style", "; ".join(s for s in (style.strip().rstrip(";"), ROTATE_ORIGIN_STYLE) if s))


def apply_layer_state(root: ET.Element, tree: LayerTree, time: float) -> None:
    """Reset and reapply selection classes and keyframe poses in place."""
    id_map = {el.get("id"): el for el in root.iter() if el.get("id")}
    for layer in iter_layers(tree.layers):
        if layer.is_group:
            continue
        el = id_map.get(layer.id)
        if el is None:
            logger.debug("preview: no element for layer %s", layer.id)
            continue
        _set_state_classes(el, layer.is_selected, layer.is_highlighted)
        if layer.keyframes:
            apply_properties(el, resolve_layer(layer, time))


def render_preview(svg_markup: str, tree: LayerTree, time: float) -> str:
    root = load_svg_root(svg_markup)
    apply_layer_state(root, tree, time)
    return serialize_svg(root)
