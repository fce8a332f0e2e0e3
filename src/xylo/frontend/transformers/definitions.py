"""
Definition Parser - top-level definitions and let bindings
"""

from typing import Any, Callable, List, Sequence, Tuple, Union

from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import Definition, Expression, LetBinding, ParseError, SourceLocation
from ...utils.config import DEFAULT_DEFINITION_WEIGHT

LarkMeta: TypeAlias = Any  # Lark's internal Meta object
LocationExtractor: TypeAlias = Callable[[LarkMeta], SourceLocation]
DefinitionPart: TypeAlias = Union[Token, float, Expression]


class DefinitionParser:
    """Builds Definition and LetBinding nodes and checks parameter lists"""

    def __init__(self, location_extractor: LocationExtractor) -> None:
        self.extract_location = location_extractor

    def parse_weight(self, meta: LarkMeta, number: Token) -> float:
        weight = float(str(number))
        if weight <= 0:
            raise ParseError(
                f"definition weight must be positive, got {number}",
                self.extract_location(meta),
            )
        return weight

    def parse_definition(self, meta: LarkMeta, name: Token, parts: Sequence[DefinitionPart]) -> Definition:
        location = self.extract_location(meta)
        weight = DEFAULT_DEFINITION_WEIGHT
        if parts and isinstance(parts[0], float):
            weight, parts = parts[0], parts[1:]
        params, body = self._split_parameters(str(name), parts, location)
        return Definition(name=str(name), parameters=params, body=body, weight=weight, location=location)

    def parse_let_binding(self, meta: LarkMeta, name: Token, parts: Sequence[DefinitionPart]) -> LetBinding:
        location = self.extract_location(meta)
        params, value = self._split_parameters(str(name), parts, location)
        return LetBinding(name=str(name), parameters=params, value=value, location=location)

    def _split_parameters(self, name: str, parts: Sequence[DefinitionPart],
                          location: SourceLocation) -> Tuple[List[str], Expression]:
        *param_tokens, body = parts
        params = [str(p) for p in param_tokens]
        seen = set()
        for param in params:
            if param in seen:
                raise ParseError(f"parameter `{param}` is bound more than once in `{name}`", location)
            seen.add(param)
        return params, body
