"""Layer extraction, interpolation, preview and CSS compilation for SVG animation.

Components:
- svg_parser: Extracts animatable layers from SVG markup
- interpolation: Resolves a keyframe timeline at a point in time
- css_compiler: Bakes keyframes into an embedded stylesheet
- preview: Writes a resolved pose onto the live document
"""

from svgmotion.animation.svg_parser import (
    ParsedSvg,
    extract_layers,
    parse_svg,
)

from svgmotion.animation.interpolation import (
    interpolate_color,
    interpolate_properties,
    resolve,
    resolve_layer,
)

from svgmotion.animation.css_compiler import (
    build_animation_css,
    class_name_for,
    compile_animation,
)

from svgmotion.animation.preview import (
    apply_layer_state,
    render_preview,
)

__all__ = [
    # Extraction
    "ParsedSvg",
    "extract_layers",
    "parse_svg",
    # Interpolation
    "interpolate_color",
    "interpolate_properties",
    "resolve",
    "resolve_layer",
    # Compilation
    "build_animation_css",
    "class_name_for",
    "compile_animation",
    # Preview
    "apply_layer_state",
    "render_preview",
]
