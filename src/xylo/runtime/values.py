"""
Runtime values.

Values are plain Python objects:

    Number    int (arbitrary precision) or float
    Boolean   bool
    String    str
    Sequence  tuple
    Color     xylo.geometry.Color
    Shape     xylo.geometry.Shape
    Function  Closure or BuiltinFunction

`bool` is a subclass of `int` in Python; every numeric check here excludes it.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Union, TYPE_CHECKING

from ..geometry import Color, Shape
from ..shared.nodes import Expression

if TYPE_CHECKING:
    from .environment import Environment

Value = Any
Sequence = tuple

# str() refuses integers with more than 4300 digits
_MAX_PRINTED_BITS = 4096


@dataclass(frozen=True)
class Alternative:
    """One body of a function together with its selection weight."""
    body: Expression
    weight: float = 1.0


@dataclass(frozen=True, eq=False)
class Closure:
    """
    A user function: the alternatives of a top-level definition or a local
    `let` function, plus the environment captured where it was created
    (None for top-level definitions, which only see the global table).
    """
    name: str
    parameters: Tuple[str, ...]
    alternatives: Tuple[Alternative, ...]
    env: Optional["Environment"] = field(default=None, repr=False)

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def __repr__(self) -> str:
        return f"<function {self.name}/{self.arity}>"


@dataclass(frozen=True, eq=False)
class BuiltinFunction:
    """
    A builtin from the catalog.

    `needs_context` builtins receive the evaluation context (random stream,
    canvas size) as their first argument. `lazy` builtins are generator
    functions that yield `Apply` requests to call back into the evaluator.
    """
    name: str
    function: Callable[..., Any]
    arity: int
    needs_context: bool = False
    lazy: bool = False

    def __repr__(self) -> str:
        return f"<builtin {self.name}/{self.arity}>"


Function = Union[Closure, BuiltinFunction]


def is_number(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_function(value: Value) -> bool:
    return isinstance(value, (Closure, BuiltinFunction))


def type_name(value: Value) -> str:
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, (int, float)):
        return "Number"
    if isinstance(value, str):
        return "String"
    if isinstance(value, tuple):
        return "Sequence"
    if isinstance(value, Color):
        return "Color"
    if isinstance(value, Shape):
        return "Shape"
    if is_function(value):
        return "Function"
    return type(value).__name__


def values_equal(left: Value, right: Value) -> bool:
    """Structural equality; booleans never equal numbers."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, tuple) and isinstance(right, tuple):
        return len(left) == len(right) and all(values_equal(a, b) for a, b in zip(left, right))
    if type_name(left) != type_name(right):
        return False
    if is_function(left):
        return left is right
    return left == right


def format_value(value: Value) -> str:
    """User-facing rendering, used by error messages and the CLI."""
    if is_number(value) and isinstance(value, int) and value.bit_length() > _MAX_PRINTED_BITS:
        return f"<{value.bit_length()}-bit integer>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, tuple):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)
