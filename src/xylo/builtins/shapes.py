"""
Shape builtins: composition and named transforms.

Every transform takes its parameters first and the shape last, so calls
nest and pipe naturally: `SQUARE |> rotate 45 |> ss 0.5`. Angles are degrees,
counter-clockwise. Parameters must be finite; a transform that overflows is
a TypeMismatch.
"""

from dataclasses import replace

from ..geometry import (
    Affine, Shape, collect as collect_shapes, compose as compose_shapes, map_primitives,
    path_shift as shift_shape, transform,
)
from ..runtime.values import type_name
from ..shared.errors import TypeMismatch
from .registry import builtin, expect_real, expect_sequence


def expect_shape(value, who: str) -> Shape:
    if not isinstance(value, Shape):
        raise TypeMismatch(f"`{who}` expected a Shape, found {type_name(value)}")
    return value


def _apply(who: str, matrix: Affine, shape) -> Shape:
    return transform(expect_shape(shape, who), matrix)


@builtin("compose")
def compose(back, front):
    return compose_shapes(expect_shape(back, "compose"), expect_shape(front, "compose"))


@builtin("collect")
def collect(sequence):
    items = expect_sequence(sequence, "collect")
    for index, item in enumerate(items):
        if not isinstance(item, Shape):
            raise TypeMismatch(f"`collect` expected a sequence of Shapes, found {type_name(item)} at index {index}")
    return collect_shapes(items)


@builtin("translate", "t")
def translate(x, y, shape):
    return _apply("translate", Affine.translation(expect_real(x, "translate"), expect_real(y, "translate")), shape)


@builtin("tx", "translatex")
def translate_x(x, shape):
    return _apply("tx", Affine.translation(expect_real(x, "tx"), 0.0), shape)


@builtin("ty", "translatey")
def translate_y(y, shape):
    return _apply("ty", Affine.translation(0.0, expect_real(y, "ty")), shape)


@builtin("tt", "translateb")
def translate_both(offset, shape):
    offset = expect_real(offset, "tt")
    return _apply("tt", Affine.translation(offset, offset), shape)


@builtin("rotate", "r")
def rotate(degrees, shape):
    return _apply("rotate", Affine.rotation(expect_real(degrees, "rotate")), shape)


@builtin("rotate_at", "ra")
def rotate_at(degrees, x, y, shape):
    """Rotate about the point (x, y) instead of the local origin."""
    degrees, x, y = (expect_real(v, "rotate_at") for v in (degrees, x, y))
    matrix = Affine.translation(x, y) @ Affine.rotation(degrees) @ Affine.translation(-x, -y)
    return _apply("rotate_at", matrix, shape)


@builtin("scale", "s")
def scale(x, y, shape):
    return _apply("scale", Affine.scaling(expect_real(x, "scale"), expect_real(y, "scale")), shape)


@builtin("sx", "scalex")
def scale_x(factor, shape):
    return _apply("sx", Affine.scaling(expect_real(factor, "sx"), 1.0), shape)


@builtin("sy", "scaley")
def scale_y(factor, shape):
    return _apply("sy", Affine.scaling(1.0, expect_real(factor, "sy")), shape)


@builtin("ss", "scaleb")
def scale_both(factor, shape):
    factor = expect_real(factor, "ss")
    return _apply("ss", Affine.scaling(factor, factor), shape)


@builtin("skew", "k")
def skew(x_degrees, y_degrees, shape):
    return _apply("skew", Affine.skewing(expect_real(x_degrees, "skew"), expect_real(y_degrees, "skew")), shape)


@builtin("skewx", "kx")
def skew_x(degrees, shape):
    return _apply("skewx", Affine.skewing(expect_real(degrees, "skewx"), 0.0), shape)


@builtin("skewy", "ky")
def skew_y(degrees, shape):
    return _apply("skewy", Affine.skewing(0.0, expect_real(degrees, "skewy")), shape)


@builtin("flip", "f")
def flip(degrees, shape):
    """Mirror about the vertical axis turned `degrees` counter-clockwise."""
    return _apply("flip", Affine.reflection(expect_real(degrees, "flip")), shape)


@builtin("fliph", "fh")
def flip_horizontal(shape):
    return _apply("fliph", Affine.scaling(-1.0, 1.0), shape)


@builtin("flipv", "fv")
def flip_vertical(shape):
    return _apply("flipv", Affine.scaling(1.0, -1.0), shape)


@builtin("flipd", "fd")
def flip_diagonal(shape):
    return _apply("flipd", Affine.scaling(-1.0, -1.0), shape)


@builtin("path_shift", "shift")
def path_shift(fraction, shape):
    return shift_shape(expect_shape(shape, "path_shift"), expect_real(fraction, "path_shift"))


@builtin("zindex", "z")
def zindex(value, shape):
    """Paint at depth `value`; lower z is painted first, ties keep tree order."""
    value = expect_real(value, "zindex")
    return map_primitives(expect_shape(shape, "zindex"), lambda p: replace(p, z=value))


@builtin("zshift")
def zshift(amount, shape):
    amount = expect_real(amount, "zshift")
    return map_primitives(expect_shape(shape, "zshift"), lambda p: replace(p, z=p.z + amount))
