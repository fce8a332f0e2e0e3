"""
xylo AST Transformer

Converts the Lark parse tree into xylo AST nodes. Literal, operator and
definition handling live in their own helper classes; this class maps
grammar rules to them.
"""

import logging
from typing import Union

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import (
    Call, Definition, Expression, ForExpression, Identifier, IfExpression, LetBinding,
    LetExpression, ListLiteral, Literal, LoopExpression, Program, ShapeKind, ShapeLiteral,
    SourceLocation, XyloImplementationError,
)
from .definitions import DefinitionParser
from .expressions import BinaryExpressionParser
from .literals import LiteralParser

LarkMeta: TypeAlias = Union[None, object]
DefinitionPart: TypeAlias = Union[Token, float, Expression]

logger: logging.Logger = logging.getLogger(__name__)


@v_args(inline=True, meta=True)
class XyloTransformer(Transformer):
    """
    Parse tree -> AST.

    `current_file` must be set by the parser before transform() so that every
    node carries a complete SourceLocation.
    """

    def __init__(self) -> None:
        super().__init__()
        self.definition_parser = DefinitionParser(self._extract_location)
        self.expression_parser = BinaryExpressionParser(self._extract_location)
        self.current_file: str = ""

    def __default__(self, data, children, meta):
        raise XyloImplementationError(f"Missing transformer method for grammar rule '{data}'")

    def _extract_location(self, meta: LarkMeta) -> SourceLocation:
        if not self.current_file:
            raise XyloImplementationError("Parser bug: current_file not set before transform()")
        if meta is None or getattr(meta, 'empty', True):
            return SourceLocation(file=self.current_file, line=0, column=0)
        return SourceLocation(
            file=self.current_file,
            line=meta.line,
            column=meta.column,
            start=meta.start_pos,
            end=meta.end_pos,
            end_line=meta.end_line,
            end_column=meta.end_column,
        )

    # =========================================================================
    # PROGRAM STRUCTURE
    # =========================================================================

    def program(self, meta: LarkMeta, *definitions: Definition) -> Program:
        return Program(definitions=list(definitions), location=self._extract_location(meta))

    def definition(self, meta: LarkMeta, name: Token, *parts: DefinitionPart) -> Definition:
        """Grammar: NAME weight? NAME* "=" block"""
        return self.definition_parser.parse_definition(meta, name, parts)

    def weight(self, meta: LarkMeta, number: Token) -> float:
        """Grammar: "@" NUMBER"""
        return self.definition_parser.parse_weight(meta, number)

    # =========================================================================
    # CONTROL FLOW
    # =========================================================================

    def if_expr(self, meta: LarkMeta, condition: Expression, then_branch: Expression,
                else_branch: Expression) -> IfExpression:
        """Grammar: "if" cond ("then" | "->" | suite) ... "else" "->"? block"""
        return IfExpression(condition, then_branch, else_branch, location=self._extract_location(meta))

    def for_expr(self, meta: LarkMeta, variable: Token, iterable: Expression, body: Expression) -> ForExpression:
        """Grammar: "for" NAME "in" iterable ("->" | ":" | suite) block"""
        return ForExpression(str(variable), iterable, body, location=self._extract_location(meta))

    def loop_expr(self, meta: LarkMeta, count: Expression, body: Expression) -> LoopExpression:
        return LoopExpression(count, body, location=self._extract_location(meta))

    def let_expr(self, meta: LarkMeta, *children: Union[LetBinding, Expression]) -> LetExpression:
        """Grammar: "let" binding (";" binding)* "->" block"""
        *bindings, body = children
        return LetExpression(list(bindings), body, location=self._extract_location(meta))

    def let_binding(self, meta: LarkMeta, name: Token, *parts: DefinitionPart) -> LetBinding:
        return self.definition_parser.parse_let_binding(meta, name, parts)

    # =========================================================================
    # OPERATORS
    # =========================================================================

    def binary_op(self, meta: LarkMeta, left: Expression, operator: Token, right: Expression) -> Expression:
        return self.expression_parser.parse_binary(meta, left, operator, right)

    def unary_op(self, meta: LarkMeta, operator: Token, operand: Expression) -> Expression:
        return self.expression_parser.parse_unary(meta, operator, operand)

    def compose_op(self, meta: LarkMeta, left: Expression, right: Expression) -> Expression:
        return self.expression_parser.parse_compose(meta, left, right)

    def pipe_op(self, meta: LarkMeta, value: Expression, target: Expression) -> Expression:
        return self.expression_parser.parse_pipe(meta, value, target)

    def call(self, meta: LarkMeta, name: Token, *arguments: Expression) -> Call:
        """Grammar: NAME atom+"""
        return Call(str(name), list(arguments), location=self._extract_location(meta))

    # =========================================================================
    # ATOMS
    # =========================================================================

    def number(self, meta: LarkMeta, token: Token) -> Literal:
        return LiteralParser.parse_number(token, self._extract_location(meta))

    def hex_color(self, meta: LarkMeta, token: Token) -> Expression:
        return LiteralParser.parse_hex_color(token, self._extract_location(meta))

    def string(self, meta: LarkMeta, token: Token) -> Literal:
        return LiteralParser.parse_string(token, self._extract_location(meta))

    def true(self, meta: LarkMeta, token: Token) -> Literal:
        return Literal(True, location=self._extract_location(meta))

    def false(self, meta: LarkMeta, token: Token) -> Literal:
        return Literal(False, location=self._extract_location(meta))

    def shape_literal(self, meta: LarkMeta, token: Token) -> ShapeLiteral:
        return ShapeLiteral(ShapeKind[token.type], location=self._extract_location(meta))

    def var(self, meta: LarkMeta, name: Token) -> Identifier:
        return Identifier(str(name), location=self._extract_location(meta))

    def list(self, meta: LarkMeta, *elements: Expression) -> ListLiteral:
        return ListLiteral(list(elements), location=self._extract_location(meta))
