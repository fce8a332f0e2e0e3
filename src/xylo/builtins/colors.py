"""
Color builtins.

`hsl`/`rgb` and friends recolor every primitive of a shape; `hsl_color`
and `rgb_color` build Color values for `color c shape`. Hue is in degrees,
saturation, lightness and `alpha` in 0..1, rgb channels in 0..255.
"""

from dataclasses import replace

from ..geometry import Color, map_primitives, recolor, with_alpha
from ..runtime.values import type_name
from ..shared.errors import TypeMismatch
from .registry import builtin, expect_real
from .shapes import expect_shape


def _numbers(who, *values):
    return [expect_real(v, who) for v in values]


def _adjust(who, shape, change):
    """Rebuild `shape` with each primitive's color replaced by change(color)."""
    return map_primitives(expect_shape(shape, who), lambda p: replace(p, color=change(p.color)))


def _with_hsl(color: Color, hue=None, saturation=None, lightness=None) -> Color:
    h, s, l = color.to_hsl()
    return Color.from_hsl(
        h if hue is None else hue,
        s if saturation is None else saturation,
        l if lightness is None else lightness,
        color.alpha,
    )


@builtin("color")
def color(value, shape):
    if not isinstance(value, Color):
        raise TypeMismatch(f"`color` expected a Color, found {type_name(value)}")
    return recolor(expect_shape(shape, "color"), value)


@builtin("hsl")
def hsl(hue, saturation, lightness, shape):
    """Set hue, saturation and lightness; each primitive keeps its alpha."""
    h, s, l = _numbers("hsl", hue, saturation, lightness)
    return _adjust("hsl", shape, lambda c: Color.from_hsl(h, s, l, c.alpha))


@builtin("hsla")
def hsla(hue, saturation, lightness, alpha, shape):
    return recolor(expect_shape(shape, "hsla"), Color.from_hsl(*_numbers("hsla", hue, saturation, lightness, alpha)))


@builtin("rgb")
def rgb(red, green, blue, shape):
    r, g, b = _numbers("rgb", red, green, blue)
    return _adjust("rgb", shape, lambda c: Color.from_bytes(r, g, b).with_alpha(c.alpha))


@builtin("rgba")
def rgba(red, green, blue, alpha, shape):
    return recolor(expect_shape(shape, "rgba"), Color.from_bytes(*_numbers("rgba", red, green, blue, alpha)))


@builtin("alpha", "a")
def alpha(value, shape):
    return with_alpha(expect_shape(shape, "alpha"), expect_real(value, "alpha"))


@builtin("hue", "h")
def hue(degrees, shape):
    degrees = expect_real(degrees, "hue")
    return _adjust("hue", shape, lambda c: _with_hsl(c, hue=degrees))


@builtin("saturation", "sat")
def saturation(value, shape):
    value = expect_real(value, "saturation")
    return _adjust("saturation", shape, lambda c: _with_hsl(c, saturation=value))


@builtin("lightness", "l")
def lightness(value, shape):
    value = expect_real(value, "lightness")
    return _adjust("lightness", shape, lambda c: _with_hsl(c, lightness=value))


@builtin("hshift")
def hue_shift(degrees, shape):
    degrees = expect_real(degrees, "hshift")
    return _adjust("hshift", shape, lambda c: _with_hsl(c, hue=c.to_hsl()[0] + degrees))


@builtin("satshift")
def saturation_shift(amount, shape):
    amount = expect_real(amount, "satshift")
    return _adjust("satshift", shape, lambda c: _with_hsl(c, saturation=c.to_hsl()[1] + amount))


@builtin("lshift")
def lightness_shift(amount, shape):
    amount = expect_real(amount, "lshift")
    return _adjust("lshift", shape, lambda c: _with_hsl(c, lightness=c.to_hsl()[2] + amount))


@builtin("ashift")
def alpha_shift(amount, shape):
    amount = expect_real(amount, "ashift")
    return _adjust("ashift", shape, lambda c: c.with_alpha(c.alpha + amount))


@builtin("hsl_color")
def hsl_color(hue, saturation, lightness):
    return Color.from_hsl(*_numbers("hsl_color", hue, saturation, lightness))


@builtin("rgb_color")
def rgb_color(red, green, blue):
    return Color.from_bytes(*_numbers("rgb_color", red, green, blue))
