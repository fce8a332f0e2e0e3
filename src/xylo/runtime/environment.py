"""
Execution Environment

A chain of immutable scopes. Each call, loop iteration or `let` binding
creates a new scope whose parent is the scope it closes over; lookup walks
from the innermost scope outward and the first match wins. The global
definition table and the builtin catalog sit behind the chain and are
consulted by the evaluator, not stored here.

Scopes are never mutated once they are visible to other code, so sibling
calls can share a parent without aliasing.
"""

from typing import Any, Dict, Iterator, Mapping, Optional

MISSING = object()


class Environment:
    __slots__ = ('_bindings', 'parent')

    def __init__(self, bindings: Optional[Mapping[str, Any]] = None, parent: Optional['Environment'] = None):
        self._bindings: Dict[str, Any] = dict(bindings) if bindings else {}
        self.parent = parent

    def extend(self, bindings: Optional[Mapping[str, Any]] = None) -> 'Environment':
        """New child scope holding `bindings`."""
        return Environment(bindings, self)

    def get(self, name: str, default: Any = MISSING) -> Any:
        scope: Optional[Environment] = self
        while scope is not None:
            bindings = scope._bindings
            if name in bindings:
                return bindings[name]
            scope = scope.parent
        return default

    def define(self, name: str, value: Any) -> None:
        """
        Bind `name` in this scope while it is being populated.

        Only used to tie the knot for recursive local functions, whose
        closure must capture the very scope that binds them.
        """
        self._bindings[name] = value

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not MISSING

    def names(self) -> Iterator[str]:
        """Visible names, innermost first, shadowed names once."""
        seen = set()
        scope: Optional[Environment] = self
        while scope is not None:
            for name in scope._bindings:
                if name not in seen:
                    seen.add(name)
                    yield name
            scope = scope.parent

    def __repr__(self) -> str:
        return f"Environment({sorted(self._bindings)})"


EMPTY_ENVIRONMENT = Environment()
