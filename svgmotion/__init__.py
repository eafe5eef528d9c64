"""Keyframe animation for SVG layers."""

__version__ = "0.1.0"
