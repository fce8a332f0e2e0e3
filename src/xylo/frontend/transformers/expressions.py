"""
Expression Parser - binary/unary operators and pipe desugaring
"""

from typing import Any, Callable

from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import (
    BinaryExpression, BinaryOp, Call, Expression, Identifier, ParseError, SourceLocation,
    UnaryExpression, UnaryOp,
)

LarkMeta: TypeAlias = Any  # Lark's internal Meta object
LocationExtractor: TypeAlias = Callable[[LarkMeta], SourceLocation]


class BinaryExpressionParser:
    """Builds operator nodes; the operator's own column is used as the location"""

    def __init__(self, location_extractor: LocationExtractor) -> None:
        self.extract_location = location_extractor

    def _operator_location(self, meta: LarkMeta, operator: Token) -> SourceLocation:
        location = self.extract_location(meta)
        return SourceLocation(
            file=location.file,
            line=operator.line or location.line,
            column=operator.column or location.column,
            start=operator.start_pos or 0,
            end=operator.end_pos or 0,
            end_line=operator.end_line or 0,
            end_column=operator.end_column or 0,
        )

    def parse_binary(self, meta: LarkMeta, left: Expression, operator: Token, right: Expression) -> BinaryExpression:
        return BinaryExpression(
            operator=BinaryOp(str(operator)),
            left=left,
            right=right,
            location=self._operator_location(meta, operator),
        )

    def parse_unary(self, meta: LarkMeta, operator: Token, operand: Expression) -> UnaryExpression:
        return UnaryExpression(
            operator=UnaryOp(str(operator)),
            operand=operand,
            location=self._operator_location(meta, operator),
        )

    def parse_compose(self, meta: LarkMeta, left: Expression, right: Expression) -> BinaryExpression:
        return BinaryExpression(BinaryOp.COMPOSE, left, right, location=self.extract_location(meta))

    def parse_pipe(self, meta: LarkMeta, value: Expression, target: Expression) -> Call:
        """
        `value |> f a b` becomes `f a b value`; `value |> f` becomes `f value`.
        """
        location = self.extract_location(meta)
        if isinstance(target, Call):
            return Call(target.name, list(target.arguments) + [value], location=target.location)
        if isinstance(target, Identifier):
            return Call(target.name, [value], location=target.location)
        raise ParseError(
            "right side of `|>` must be a function name or an application",
            location,
            help="write `value |> f arg` to call `f arg value`",
        )
