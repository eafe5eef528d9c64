"""Tests for compiling keyframes into an animated SVG."""
from xml.etree import ElementTree as ET

import pytest

from svgmotion import layer_tree as lt
from svgmotion.animation.css_compiler import (
    ANIMATION_STYLE_ID,
    assign_class_names,
    build_animation_css,
    build_keyframes_block,
    class_name_for,
    compile_animation,
    compose_transform,
    keyframe_declarations,
)
from svgmotion.animation.svg_parser import parse_svg
from svgmotion.ids import CounterIdSource
from svgmotion.models import Keyframe, Layer, LayerKind

SVG_NS = "{http://www.w3.org/2000/svg}"


@pytest.fixture
def source_svg() -> str:
    return '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
    <path id="p1" d="M0 0 L10 10" class="outline"/>
    <circle id="c1" cx="5" cy="5" r="5"/>
    <rect id="r1" width="4" height="4"/>
</svg>'''


@pytest.fixture
def ids():
    return CounterIdSource()


@pytest.fixture
def fade_tree(source_svg, ids):
    parsed = parse_svg(source_svg, id_source=ids)
    tree = lt.from_layers(parsed.layers)
    tree = lt.rename(tree, "p1", "p1")
    tree = lt.add_keyframe(tree, "p1", 0, {"opacity": 0}, id_source=ids)
    tree = lt.add_keyframe(tree, "p1", 1000, {"opacity": 1}, id_source=ids)
    return parsed.markup, tree


def _by_id(svg_text, el_id):
    root = ET.fromstring(svg_text)
    return next(el for el in root.iter() if el.get("id") == el_id)


# =============================================================================
# Naming and declarations
# =============================================================================

@pytest.mark.parametrize("name,expected", [
    ("p1", "p1"),
    ("Layer 1", "layer-1"),
    ("  My  Fancy__Layer!! ", "my-fancy-layer"),
    ("Über Shape", "ber-shape"),
])
def test_class_name_for(name, expected):
    assert class_name_for(name) == expected


def test_assign_class_names_is_unique_and_valid():
    layers = [
        Layer(id="a", name="Wheel", kind=LayerKind.PATH, keyframes=(Keyframe("k", 0, {}),)),
        Layer(id="b", name="wheel", kind=LayerKind.PATH, keyframes=(Keyframe("k", 0, {}),)),
        Layer(id="c", name="3 dots", kind=LayerKind.PATH, keyframes=(Keyframe("k", 0, {}),)),
        Layer(id="d", name="!!!", kind=LayerKind.PATH, keyframes=(Keyframe("k", 0, {}),)),
        Layer(id="e", name="static", kind=LayerKind.PATH),
    ]
    assert assign_class_names(layers) == {"a": "wheel", "b": "wheel-2", "c": "layer-3-dots", "d": "d"}


def test_transform_components_compose():
    assert compose_transform({"translateX": 10, "translateY": -5, "rotate": 45, "scale": 1.5}) == (
        "translate(10px,-5px) rotate(45deg) scale(1.5)"
    )
    assert compose_transform({"rotate": 90}) == "rotate(90deg)"
    assert compose_transform({"translateY": 3}) == "translate(0px,3px)"
    assert compose_transform({"opacity": 1}) is None


def test_declarations_units_and_kebab_case():
    decls = keyframe_declarations({"strokeWidth": 2.5, "fill": "#ff0000", "opacity": 0.5, "rotate": 30, "dashArray": "4 2"})
    assert decls == [
        "stroke-width: 2.5px;",
        "fill: #ff0000;",
        "opacity: 0.5;",
        "dash-array: 4 2;",
        "transform: rotate(30deg);",
    ]


def test_percentages_one_decimal_and_clamped():
    frames = [Keyframe("a", 0, {"opacity": 0}), Keyframe("b", 1234, {"opacity": 1}), Keyframe("c", 9000, {"opacity": 0})]
    block = build_keyframes_block("x", frames, 5000)
    assert block == "@keyframes anim-x { 0.0% { opacity: 0; } 24.7% { opacity: 1; } 100.0% { opacity: 0; } }"


@pytest.mark.parametrize(
    "time,duration,expected",
    [(5, 2000, "0.3%"), (25, 2000, "1.3%"), (1, 400, "0.3%"), (1, 80, "1.3%"), (15, 2000, "0.8%")],
)
def test_percentage_ties_round_half_up(time, duration, expected):
    block = build_keyframes_block("x", [Keyframe("a", time, {})], duration)
    assert block == f"@keyframes anim-x {{ {expected} {{ }} }}"


# =============================================================================
# Full compile
# =============================================================================

def test_fade_example(fade_tree):
    markup, tree = fade_tree
    css = build_animation_css(tree, 1000)
    assert "@keyframes anim-p1 { 0.0% { opacity: 0; } 100.0% { opacity: 1; } }" in css
    assert ".p1 { animation: anim-p1 1s linear infinite; }" in css
    assert "transform-origin" not in css


def test_compile_adds_class_and_leading_style(fade_tree):
    markup, tree = fade_tree
    out = compile_animation(markup, tree, 1000)
    root = ET.fromstring(out)
    assert root[0].tag == f"{SVG_NS}style"
    assert root[0].get("id") == ANIMATION_STYLE_ID
    assert "anim-p1" in root[0].text
    assert _by_id(out, "p1").get("class") == "outline p1"
    assert _by_id(out, "c1").get("class") is None


def test_compile_is_idempotent(fade_tree):
    markup, tree = fade_tree
    once = compile_animation(markup, tree, 1000)
    twice = compile_animation(once, tree, 1000)
    assert _by_id(twice, "p1").get("class") == "outline p1"
    styles = [el for el in ET.fromstring(twice).iter() if el.tag == f"{SVG_NS}style"]
    assert len(styles) == 1
    assert once == twice


def test_compile_is_deterministic(fade_tree):
    markup, tree = fade_tree
    assert compile_animation(markup, tree, 1000) == compile_animation(markup, tree, 1000)


def test_rotation_rule_gets_fill_box_origin(source_svg, ids):
    parsed = parse_svg(source_svg, id_source=ids)
    tree = lt.from_layers(parsed.layers)
    tree = lt.rename(tree, "c1", "Spinner")
    tree = lt.add_keyframe(tree, "c1", 0, {"rotate": 0}, id_source=ids)
    tree = lt.add_keyframe(tree, "c1", 2500, {"rotate": 360, "translateX": 5}, id_source=ids)
    css = build_animation_css(tree, 5000)
    assert "@keyframes anim-spinner { 0.0% { transform: rotate(0deg); } 50.0% { transform: translate(5px,0px) rotate(360deg); } }" in css
    assert ".spinner { animation: anim-spinner 5s linear infinite; transform-origin: center; transform-box: fill-box; }" in css


def test_nested_layers_are_compiled_and_groups_materialized(source_svg, ids):
    parsed = parse_svg(source_svg, id_source=ids)
    tree = lt.from_layers(parsed.layers)
    tree = lt.group(tree, ["c1", "r1"], "Pair", id_source=ids)
    tree = lt.add_keyframe(tree, "group-1", 0, {"scale": 1}, id_source=ids)
    tree = lt.add_keyframe(tree, "r1", 0, {"fill": "#000000"}, id_source=ids)
    tree = lt.rename(tree, "r1", "Inner Box")
    out = compile_animation(parsed.markup, tree, 2000)

    css = build_animation_css(tree, 2000)
    assert css.index("anim-pair") < css.index("anim-inner-box")
    group_el = _by_id(out, "group-1")
    assert group_el.tag == f"{SVG_NS}g"
    assert group_el.get("class") == "pair"
    assert [child.get("id") for child in group_el] == ["c1", "r1"]
    assert _by_id(out, "r1").get("class") == "inner-box"
    # Recompiling reuses the materialized group.
    again = compile_animation(out, tree, 2000)
    assert sum(1 for el in ET.fromstring(again).iter() if el.get("id") == "group-1") == 1


def test_unanimated_tree_still_gets_empty_style(source_svg, ids):
    parsed = parse_svg(source_svg, id_source=ids)
    out = compile_animation(parsed.markup, lt.from_layers(parsed.layers), 5000)
    root = ET.fromstring(out)
    assert root[0].get("id") == ANIMATION_STYLE_ID
    assert not (root[0].text or "").strip()


def test_existing_user_style_is_kept(ids):
    svg = '<svg xmlns="http://www.w3.org/2000/svg"><style>.a { fill: red; }</style><rect id="r" class="a"/></svg>'
    parsed = parse_svg(svg, id_source=ids)
    tree = lt.add_keyframe(lt.from_layers(parsed.layers), "r", 0, {"opacity": 1}, id_source=ids)
    root = ET.fromstring(compile_animation(parsed.markup, tree, 1000))
    styles = [el for el in root if el.tag == f"{SVG_NS}style"]
    assert len(styles) == 2
    assert styles[1].text == ".a { fill: red; }"


def test_fractional_duration_formatting(fade_tree):
    markup, tree = fade_tree
    assert "anim-p1 2.5s linear infinite" in build_animation_css(tree, 2500)
