"""
Path builtins. Each returns a one-segment path; composing paths with `:`
joins their segments into a single primitive, so a path reads left to right:

    move_to -0.5 -0.5 : line_to 0.5 -0.5 : quad_to 0.5 0.5 -0.5 0.5 : close

Paths are stroked with `stroke`; a filled path closes every subpath.
"""

from ..geometry import Close, CubicTo, LineTo, MoveTo, QuadTo, path
from .registry import builtin, expect_real


def _coordinates(who, *values):
    return [expect_real(value, who) for value in values]


@builtin("move_to")
def move_to(x, y):
    return path([MoveTo(*_coordinates("move_to", x, y))])


@builtin("line_to")
def line_to(x, y):
    return path([LineTo(*_coordinates("line_to", x, y))])


@builtin("quad_to")
def quad_to(x1, y1, x, y):
    return path([QuadTo(*_coordinates("quad_to", x1, y1, x, y))])


@builtin("cubic_to")
def cubic_to(x1, y1, x2, y2, x, y):
    return path([CubicTo(*_coordinates("cubic_to", x1, y1, x2, y2, x, y))])


@builtin("close")
def close():
    return path([Close()])
