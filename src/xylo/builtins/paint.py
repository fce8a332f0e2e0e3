"""
Paint builtins: fill or stroke, fill rules, stroke styles, blend modes and
anti-aliasing.

Any stroke setting turns a filled primitive into a stroked one with the
default stroke (width 0.05, butt caps, miter joins); `fill`, `winding` and
`even_odd` turn it back into a fill. FILL has no outline and ignores all of
them except `blend` and `anti_alias`. Mode names are strings:

    stroke 0.02 CIRCLE
    line_cap "round" (stroke 0.1 (move_to -0.5 0 : line_to 0.5 0))
    blend "multiply" (color 0xf80 SQUARE)
"""

from dataclasses import replace
from enum import Enum
from typing import Type, TypeVar

from ..geometry import DEFAULT_STROKE, Fill, Stroke, map_primitives, restyle
from ..shared.errors import TypeMismatch
from ..shared.types import BlendMode, FillRule, LineCap, LineJoin
from .registry import builtin, expect_bool, expect_real, expect_sequence, expect_string
from .shapes import expect_shape

E = TypeVar("E", bound=Enum)


def _mode(enum: Type[E], value, who: str) -> E:
    name = expect_string(value, who)
    try:
        return enum(name.lower())
    except ValueError:
        choices = ", ".join(f'"{member.value}"' for member in enum)
        raise TypeMismatch(f'`{who}` does not know "{name}"', note=f"expected one of: {choices}") from None


def _stroked(style) -> Stroke:
    return style if isinstance(style, Stroke) else DEFAULT_STROKE


def _with_stroke(who, shape, **changes):
    return restyle(expect_shape(shape, who), lambda style: replace(_stroked(style), **changes))


@builtin("stroke")
def stroke(width, shape):
    width = expect_real(width, "stroke")
    if width < 0.0:
        raise TypeMismatch(f"`stroke` width must not be negative, found {width}")
    return _with_stroke("stroke", shape, width=width)


@builtin("line_cap")
def line_cap(cap, shape):
    return _with_stroke("line_cap", shape, cap=_mode(LineCap, cap, "line_cap"))


@builtin("line_join")
def line_join(join, shape):
    return _with_stroke("line_join", shape, join=_mode(LineJoin, join, "line_join"))


@builtin("miter_limit")
def miter_limit(limit, shape):
    limit = expect_real(limit, "miter_limit")
    if limit < 1.0:
        raise TypeMismatch(f"`miter_limit` must be at least 1, found {limit}")
    return _with_stroke("miter_limit", shape, miter_limit=limit)


@builtin("dash")
def dash(pattern, offset, shape):
    """Dash the stroke: `pattern` alternates on and off lengths, starting `offset` into it."""
    lengths = tuple(expect_real(length, "dash") for length in expect_sequence(pattern, "dash"))
    if not lengths or any(length < 0.0 for length in lengths) or sum(lengths) <= 0.0:
        raise TypeMismatch("`dash` expected a non-empty sequence of non-negative lengths with a positive sum")
    return _with_stroke("dash", shape, dash=lengths, dash_offset=expect_real(offset, "dash"))


@builtin("no_dash")
def no_dash(shape):
    return _with_stroke("no_dash", shape, dash=(), dash_offset=0.0)


@builtin("fill", "winding")
def winding(shape):
    return restyle(expect_shape(shape, "winding"), lambda style: Fill(FillRule.WINDING))


@builtin("even_odd")
def even_odd(shape):
    return restyle(expect_shape(shape, "even_odd"), lambda style: Fill(FillRule.EVEN_ODD))


@builtin("blend")
def blend(mode, shape):
    mode = _mode(BlendMode, mode, "blend")
    return map_primitives(expect_shape(shape, "blend"), lambda p: replace(p, blend=mode))


@builtin("anti_alias")
def anti_alias(enabled, shape):
    enabled = expect_bool(enabled, "anti_alias")
    return map_primitives(expect_shape(shape, "anti_alias"), lambda p: replace(p, anti_alias=enabled))
