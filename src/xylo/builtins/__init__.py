"""
Builtin catalog.

Importing this package registers every builtin in `BUILTINS`. Lookup order
in the evaluator is local scope, then the program's definitions, then this
catalog, so programs may shadow any builtin.
"""

from .registry import BUILTINS, Apply, BuiltinContext, builtin
from .operators import BINARY_OPERATIONS, UNARY_OPERATIONS
from . import canvas, colors, lists, math_functions, paint, paths, rand, shapes  # noqa: F401  (registration)

__all__ = ["BUILTINS", "Apply", "BuiltinContext", "builtin", "BINARY_OPERATIONS", "UNARY_OPERATIONS"]
