"""
Math builtins. Trigonometry works in radians (`deg_to_rad` converts);
transcendental functions always return floats.
"""

import math

from ..runtime.values import format_value
from ..shared.errors import DivisionByZero, TypeMismatch
from .operators import add, mul, sub
from .registry import builtin, expect_int, expect_number, expect_real

PHI = (1.0 + math.sqrt(5.0)) / 2.0
MAX_FACTORIAL = 5000


def _real(name, function, *args):
    for value in args:
        expect_number(value, name)
    shown = ", ".join(format_value(v) for v in args)
    try:
        return function(*(float(v) for v in args))
    except ZeroDivisionError:
        raise DivisionByZero(f"`{name}` divides by zero for {shown}") from None
    except (ValueError, OverflowError) as e:
        raise TypeMismatch(f"`{name}` is undefined for {shown}: {e}") from None


@builtin("pi")
def pi():
    return math.pi


@builtin("tau")
def tau():
    return math.tau


@builtin("e")
def euler():
    return math.e


@builtin("phi")
def phi():
    return PHI


@builtin("sin")
def sin(x):
    return _real("sin", math.sin, x)


@builtin("cos")
def cos(x):
    return _real("cos", math.cos, x)


@builtin("tan")
def tan(x):
    return _real("tan", math.tan, x)


@builtin("asin")
def asin(x):
    return _real("asin", math.asin, x)


@builtin("acos")
def acos(x):
    return _real("acos", math.acos, x)


@builtin("atan")
def atan(x):
    return _real("atan", math.atan, x)


@builtin("atan2")
def atan2(y, x):
    return _real("atan2", math.atan2, y, x)


@builtin("sqrt")
def sqrt(x):
    return _real("sqrt", math.sqrt, x)


@builtin("exp")
def exp(x):
    return _real("exp", math.exp, x)


@builtin("ln")
def ln(x):
    return _real("ln", math.log, x)


@builtin("log10")
def log10(x):
    return _real("log10", math.log10, x)


@builtin("log")
def log(base, x):
    """Logarithm of `x` in `base`."""
    return _real("log", lambda b, v: math.log(v, b), base, x)


@builtin("hypot")
def hypot(x, y):
    return _real("hypot", math.hypot, x, y)


@builtin("deg_to_rad")
def deg_to_rad(x):
    return _real("deg_to_rad", math.radians, x)


@builtin("rad_to_deg")
def rad_to_deg(x):
    return _real("rad_to_deg", math.degrees, x)


@builtin("sinh")
def sinh(x):
    return _real("sinh", math.sinh, x)


@builtin("cosh")
def cosh(x):
    return _real("cosh", math.cosh, x)


@builtin("tanh")
def tanh(x):
    return _real("tanh", math.tanh, x)


@builtin("asinh")
def asinh(x):
    return _real("asinh", math.asinh, x)


@builtin("acosh")
def acosh(x):
    return _real("acosh", math.acosh, x)


@builtin("atanh")
def atanh(x):
    return _real("atanh", math.atanh, x)


@builtin("cbrt")
def cbrt(x):
    """Real cube root; negative for negative `x`."""
    return _real("cbrt", lambda v: math.copysign(abs(v) ** (1.0 / 3.0), v), x)


@builtin("fact")
def factorial(n):
    n = expect_int(n, "fact")
    if n < 0:
        raise TypeMismatch(f"`fact` is undefined for {n}")
    if n > MAX_FACTORIAL:
        raise TypeMismatch(f"`fact` overflows for {n}", note=f"the largest supported argument is {MAX_FACTORIAL}")
    return math.factorial(n)


@builtin("fact2")
def double_factorial(n):
    """n * (n - 2) * (n - 4) ... down to 1 or 2."""
    n = expect_int(n, "fact2")
    if n < 0:
        raise TypeMismatch(f"`fact2` is undefined for {n}")
    if n > 2 * MAX_FACTORIAL:
        raise TypeMismatch(f"`fact2` overflows for {n}", note=f"the largest supported argument is {2 * MAX_FACTORIAL}")
    return math.prod(range(n, 0, -2))


@builtin("abs")
def absolute(x):
    return abs(expect_number(x, "abs"))


def _rounded(name, x, rounding):
    # ints are already whole, and may be too large for a float
    expect_number(x, name)
    if isinstance(x, int):
        return x
    return rounding(x) if math.isfinite(x) else x


@builtin("floor")
def floor(x):
    return _rounded("floor", x, math.floor)


@builtin("ceil")
def ceil(x):
    return _rounded("ceil", x, math.ceil)


@builtin("round")
def round_half_up(x):
    # half away from zero, unlike Python's banker's rounding
    return _rounded("round", x, lambda v: int(math.copysign(math.floor(abs(v) + 0.5), v)))


@builtin("sign")
def sign(x):
    expect_number(x, "sign")
    return (x > 0) - (x < 0)


@builtin("min")
def minimum(a, b):
    return min(expect_number(a, "min"), expect_number(b, "min"))


@builtin("max")
def maximum(a, b):
    return max(expect_number(a, "max"), expect_number(b, "max"))


@builtin("clamp")
def clamp(x, low, high):
    for value in (x, low, high):
        expect_number(value, "clamp")
    return min(max(x, low), high)


@builtin("lerp")
def lerp(a, b, t):
    for value in (a, b, t):
        expect_number(value, "lerp")
    return add(a, mul(sub(b, a), t))


@builtin("int")
def to_int(x):
    expect_number(x, "int")
    if isinstance(x, int):
        return x
    if not math.isfinite(x):
        raise TypeMismatch(f"`int` cannot convert {x}")
    return int(x)


@builtin("float")
def to_float(x):
    return expect_real(x, "float")
