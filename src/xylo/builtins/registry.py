"""
Builtin registry.

Builtins are plain Python functions registered under one or more names:

    @builtin("rotate", "r")
    def rotate(degrees, shape): ...

Arity is taken from the signature. `context=True` passes the evaluation
context first; `lazy=True` marks a generator function that yields `Apply`
requests and receives the results, which keeps higher-order builtins on the
evaluator's explicit stack.
"""

import inspect
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..runtime.determinism import Noise, Random
from ..runtime.values import BuiltinFunction, Value, format_value, is_number, type_name
from ..shared.errors import TypeMismatch
from ..shared.source_location import SourceLocation

BUILTINS: Dict[str, BuiltinFunction] = {}


@dataclass
class BuiltinContext:
    """Per-run state visible to builtins."""
    random: Random
    noise: Noise
    width: int
    height: int


@dataclass(frozen=True)
class Apply:
    """Request to call `function` with `arguments` on the evaluator stack."""
    function: Any
    arguments: Tuple[Value, ...]
    location: Optional[SourceLocation] = None
    name: Optional[str] = None


def builtin(*names: str, context: bool = False, lazy: bool = False) -> Callable:
    def register(function: Callable) -> Callable:
        arity = len(inspect.signature(function).parameters) - (1 if context else 0)
        for name in names:
            if name in BUILTINS:
                raise ValueError(f"builtin `{name}` registered twice")
            BUILTINS[name] = BuiltinFunction(name, function, arity, needs_context=context, lazy=lazy)
        return function
    return register


# ---------------------------------------------------------------------------
# Argument checks shared by the catalog modules
# ---------------------------------------------------------------------------

def expect_number(value: Value, who: str) -> Any:
    if not is_number(value):
        raise TypeMismatch(f"`{who}` expected a Number, found {type_name(value)}")
    return value


def expect_real(value: Value, who: str) -> float:
    """A Number as a finite float."""
    expect_number(value, who)
    try:
        number = float(value)
    except OverflowError:
        raise TypeMismatch(f"`{who}` argument {_describe(value)} is too large for a float") from None
    if not math.isfinite(number):
        raise TypeMismatch(f"`{who}` expected a finite Number, found {number}")
    return number


def expect_int(value: Value, who: str) -> int:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not is_number(value) or not isinstance(value, int):
        raise TypeMismatch(f"`{who}` expected an integer, found {_describe(value)}")
    return value


def expect_bool(value: Value, who: str) -> bool:
    if not isinstance(value, bool):
        raise TypeMismatch(f"`{who}` expected a Boolean, found {type_name(value)}")
    return value


def expect_sequence(value: Value, who: str) -> tuple:
    if not isinstance(value, tuple):
        raise TypeMismatch(f"`{who}` expected a Sequence, found {type_name(value)}")
    return value


def expect_string(value: Value, who: str) -> str:
    if not isinstance(value, str):
        raise TypeMismatch(f"`{who}` expected a String, found {type_name(value)}")
    return value


def _describe(value: Value) -> str:
    return format_value(value) if is_number(value) else type_name(value)
