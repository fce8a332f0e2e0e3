"""
Operator semantics, shared by the evaluator and the operator builtins
(`add`, `sub`, ...).

Integer division truncates toward zero and `%` takes the sign of the
dividend. Division or modulo by zero is an error for ints and floats alike.
Logical operators take booleans only.
"""

import math
from typing import Callable, Dict

from ..geometry import Shape, compose
from ..runtime.values import Value, format_value, is_number, type_name, values_equal
from ..shared.errors import DivisionByZero, TypeMismatch
from ..shared.types import BinaryOp, UnaryOp
from ..utils.config import MAX_INT_BITS
from .registry import builtin, expect_int


def _mismatch(op: str, left: Value, right: Value) -> TypeMismatch:
    return TypeMismatch(
        f"cannot apply `{op}` to {type_name(left)} and {type_name(right)}",
        label=f"{type_name(left)} {op} {type_name(right)}",
    )


def _numbers(op: str, left: Value, right: Value) -> None:
    if not (is_number(left) and is_number(right)):
        raise _mismatch(op, left, right)


def _overflow(op: str) -> TypeMismatch:
    return TypeMismatch(f"`{op}` overflows", note="the result does not fit in a float")


def add(left, right):
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    _numbers("+", left, right)
    try:
        return left + right
    except OverflowError:
        raise _overflow("+") from None


def sub(left, right):
    _numbers("-", left, right)
    try:
        return left - right
    except OverflowError:
        raise _overflow("-") from None


def mul(left, right):
    _numbers("*", left, right)
    if isinstance(left, int) and isinstance(right, int) and left and right \
            and abs(left).bit_length() + abs(right).bit_length() > MAX_INT_BITS:
        raise TypeMismatch("`*` overflows", note=f"integers are limited to {MAX_INT_BITS} bits")
    try:
        return left * right
    except OverflowError:
        raise _overflow("*") from None


def div(left, right):
    _numbers("/", left, right)
    if right == 0:
        raise DivisionByZero()
    if isinstance(left, int) and isinstance(right, int):
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient
    try:
        return left / right
    except OverflowError:
        raise _overflow("/") from None


def mod(left, right):
    _numbers("%", left, right)
    if right == 0:
        raise DivisionByZero("attempt to calculate the remainder with a divisor of zero")
    if isinstance(left, int) and isinstance(right, int):
        remainder = abs(left) % abs(right)
        return remainder if left >= 0 else -remainder
    try:
        return math.fmod(left, right)
    except OverflowError:
        raise _overflow("%") from None


def power(left, right):
    _numbers("**", left, right)
    if isinstance(left, int) and isinstance(right, int) and right >= 0:
        if abs(left) > 1 and right * abs(left).bit_length() > MAX_INT_BITS:
            raise TypeMismatch("`**` overflows", note=f"integers are limited to {MAX_INT_BITS} bits")
        return left ** right
    if left == 0 and right < 0:
        raise DivisionByZero("zero raised to a negative power")
    try:
        return math.pow(left, right)
    except ValueError:
        raise TypeMismatch(f"`{format_value(left)} ** {format_value(right)}` has no real value") from None
    except OverflowError:
        raise _overflow("**") from None


def equal(left, right) -> bool:
    return values_equal(left, right)


def not_equal(left, right) -> bool:
    return not values_equal(left, right)


def _ordered(op: str, left: Value, right: Value) -> None:
    if is_number(left) and is_number(right):
        return
    if isinstance(left, str) and isinstance(right, str):
        return
    raise _mismatch(op, left, right)


def less(left, right) -> bool:
    _ordered("<", left, right)
    return left < right


def less_equal(left, right) -> bool:
    _ordered("<=", left, right)
    return left <= right


def greater(left, right) -> bool:
    _ordered(">", left, right)
    return left > right


def greater_equal(left, right) -> bool:
    _ordered(">=", left, right)
    return left >= right


def logical_and(left, right) -> bool:
    if not (isinstance(left, bool) and isinstance(right, bool)):
        raise _mismatch("&&", left, right)
    return left and right


def logical_or(left, right) -> bool:
    if not (isinstance(left, bool) and isinstance(right, bool)):
        raise _mismatch("||", left, right)
    return left or right


def exclusive_range(start, stop) -> tuple:
    return tuple(range(expect_int(start, ".."), expect_int(stop, "..")))


def inclusive_range(start, stop) -> tuple:
    return tuple(range(expect_int(start, "..="), expect_int(stop, "..=") + 1))


def concat(left, right):
    if isinstance(left, tuple) and isinstance(right, tuple):
        return left + right
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    raise _mismatch("++", left, right)


def prepend(item, sequence) -> tuple:
    if not isinstance(sequence, tuple):
        raise _mismatch("+>", item, sequence)
    return (item,) + sequence


def append(sequence, item) -> tuple:
    if not isinstance(sequence, tuple):
        raise _mismatch("<+", sequence, item)
    return sequence + (item,)


def layer(back, front) -> Shape:
    if not (isinstance(back, Shape) and isinstance(front, Shape)):
        raise _mismatch(":", back, front)
    return compose(back, front)


def negate(operand):
    if not is_number(operand):
        raise TypeMismatch(f"cannot negate {type_name(operand)}")
    return -operand


def logical_not(operand) -> bool:
    if not isinstance(operand, bool):
        raise TypeMismatch(f"cannot apply `!` to {type_name(operand)}")
    return not operand


BINARY_OPERATIONS: Dict[BinaryOp, Callable[[Value, Value], Value]] = {
    BinaryOp.ADD: add,
    BinaryOp.SUB: sub,
    BinaryOp.MUL: mul,
    BinaryOp.DIV: div,
    BinaryOp.MOD: mod,
    BinaryOp.POW: power,
    BinaryOp.EQ: equal,
    BinaryOp.NE: not_equal,
    BinaryOp.LT: less,
    BinaryOp.LE: less_equal,
    BinaryOp.GT: greater,
    BinaryOp.GE: greater_equal,
    BinaryOp.AND: logical_and,
    BinaryOp.OR: logical_or,
    BinaryOp.RANGE: exclusive_range,
    BinaryOp.RANGE_INCLUSIVE: inclusive_range,
    BinaryOp.CONCAT: concat,
    BinaryOp.PREPEND: prepend,
    BinaryOp.APPEND: append,
    BinaryOp.COMPOSE: layer,
}

UNARY_OPERATIONS: Dict[UnaryOp, Callable[[Value], Value]] = {
    UnaryOp.NEG: negate,
    UnaryOp.NOT: logical_not,
}

# Operators as first-class functions
for _name, _operation in {
    "add": add, "sub": sub, "mul": mul, "div": div, "mod": mod, "pow": power,
    "neg": negate, "not": logical_not, "eq": equal, "neq": not_equal,
    "lt": less, "lte": less_equal, "gt": greater, "gte": greater_equal,
    "and": logical_and, "or": logical_or, "concat": concat,
}.items():
    builtin(_name)(_operation)
