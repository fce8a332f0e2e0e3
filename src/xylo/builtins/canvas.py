"""
Canvas builtins: the dimensions passed to `generate`.
"""

from .registry import builtin


@builtin("width", context=True)
def width(ctx):
    return ctx.width


@builtin("height", context=True)
def height(ctx):
    return ctx.height

