"""Error taxonomy for layer extraction, tree edits and export."""
from __future__ import annotations


class SvgMotionError(Exception):
    """Base class for all svgmotion errors."""


class ParseError(SvgMotionError, ValueError):
    """Input markup is not a well-formed SVG document."""


class ValidationError(SvgMotionError, ValueError):
    """An operation was rejected because its arguments are invalid."""


class NotFoundError(SvgMotionError, KeyError):
    """A layer, keyframe, group or workspace id does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep messages readable.
        return str(self.args[0]) if self.args else ""
