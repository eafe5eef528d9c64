"""Parse SVG markup into animatable layers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set
from xml.etree import ElementTree as ET
import logging

from svgmotion.errors import ParseError
from svgmotion.ids import IdSource, default_id_source
from svgmotion.models import Layer, LayerKind
from svgmotion.utils.config import settings

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

DRAWABLE_TAGS = ("path", "circle", "rect", "ellipse", "line", "polyline", "polygon")

_KIND_BY_TAG = {
    "circle": LayerKind.CIRCLE,
    "rect": LayerKind.RECT,
}


@dataclass
class ParsedSvg:
    """A parsed document plus the layers extracted from it.

    Elements that had no id carry the generated one in `root`, so the
    serialized `markup` can be handed to the compiler later.
    """
    root: ET.Element
    layers: List[Layer]

    @property
    def markup(self) -> str:
        return serialize_svg(self.root)


def _strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _parse_float(value: Optional[str], default: float = 0.0) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _number(value: float):
    """Keep integral values as ints so they render as `1`, not `1.0`."""
    return int(value) if float(value).is_integer() else value


def register_svg_namespaces() -> None:
    """Ensure SVG is the default namespace on serialization."""
    ET.register_namespace("", SVG_NS)
    ET.register_namespace("xlink", XLINK_NS)


def serialize_svg(root: ET.Element) -> str:
    register_svg_namespaces()
    return ET.tostring(root, encoding="unicode")


def load_svg_root(svg_text: str) -> ET.Element:
    """Parse markup into an element tree, raising ParseError on bad input."""
    if not svg_text or not svg_text.strip():
        raise ParseError("Invalid SVG content: document is empty")
    register_svg_namespaces()
    try:
        root = ET.fromstring(svg_text.strip())
    except ET.ParseError as exc:
        raise ParseError(f"Invalid SVG content: {exc}") from exc
    if _strip_ns(root.tag).lower() != "svg":
        raise ParseError(f"Invalid SVG content: root element is <{_strip_ns(root.tag)}>, expected <svg>")
    return root


def iter_drawables(root: ET.Element):
    for el in root.iter():
        if _strip_ns(el.tag) in DRAWABLE_TAGS:
            yield el


def _initial_properties(el: ET.Element) -> Dict[str, Any]:
    return {
        "fill": el.get("fill") or "none",
        "stroke": el.get("stroke") or "#000000",
        "strokeWidth": _number(_parse_float(el.get("stroke-width"), 1.0)),
        "opacity": _number(_parse_float(el.get("opacity"), 1.0)),
    }


def _layer_from_element(el: ET.Element, index: int, id_source: IdSource, seen: Set[str]) -> Layer:
    el_id = el.get("id")
    if el_id and el_id in seen:
        logger.warning("Duplicate element id '%s'; assigning a fresh id", el_id)
        el_id = None
    if not el_id:
        el_id = id_source.new_id(f"{settings.id_prefix}-{index}")
        el.set("id", el_id)
        logger.debug("Assigned id %s to <%s> #%d", el_id, _strip_ns(el.tag), index)
    seen.add(el_id)

    tag = _strip_ns(el.tag)
    kind = _KIND_BY_TAG.get(tag, LayerKind.PATH)
    path_data = el.get("d") if tag == "path" else None

    return Layer(
        id=el_id,
        name=f"Layer {index + 1}",
        kind=kind,
        properties=_initial_properties(el),
        path_data=path_data,
    )


def parse_svg(svg_text: str, id_source: Optional[IdSource] = None) -> ParsedSvg:
    """Parse SVG text into a document tree and its ordered layers.

    Every drawable primitive becomes one layer, in document order.
    Elements lacking an id are given one in place.
    """
    root = load_svg_root(svg_text)
    source = id_source or default_id_source
    seen: Set[str] = set()
    layers = [
        _layer_from_element(el, idx, source, seen)
        for idx, el in enumerate(iter_drawables(root))
    ]
    logger.info("Extracted %d layers from SVG", len(layers))
    return ParsedSvg(root=root, layers=layers)


def extract_layers(svg_text: str, id_source: Optional[IdSource] = None) -> List[Layer]:
    return parse_svg(svg_text, id_source=id_source).layers
