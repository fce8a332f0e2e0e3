"""
AST Visitor Pattern

Abstract visitor with one visit_* method per AST node type. Nodes dispatch
through accept(); subclasses override only what they handle.
"""

from typing import Generic, TypeVar, TYPE_CHECKING

if TYPE_CHECKING:
    from .nodes import (
        Program, Definition, Literal, ColorLiteral, ShapeLiteral, ListLiteral, Identifier,
        Call, BinaryExpression, UnaryExpression, IfExpression, ForExpression,
        LoopExpression, LetExpression,
    )

T = TypeVar('T')


class ASTVisitor(Generic[T]):
    """Base visitor. Unhandled node types fail loudly."""

    def _unhandled(self, node) -> T:
        raise NotImplementedError(f"{self.__class__.__name__} does not handle {node.__class__.__name__}")

    def visit_program(self, node: 'Program') -> T:
        return self._unhandled(node)

    def visit_definition(self, node: 'Definition') -> T:
        return self._unhandled(node)

    def visit_literal(self, node: 'Literal') -> T:
        return self._unhandled(node)

    def visit_color_literal(self, node: 'ColorLiteral') -> T:
        return self._unhandled(node)

    def visit_shape_literal(self, node: 'ShapeLiteral') -> T:
        return self._unhandled(node)

    def visit_list_literal(self, node: 'ListLiteral') -> T:
        return self._unhandled(node)

    def visit_identifier(self, node: 'Identifier') -> T:
        return self._unhandled(node)

    def visit_call(self, node: 'Call') -> T:
        return self._unhandled(node)

    def visit_binary_expression(self, node: 'BinaryExpression') -> T:
        return self._unhandled(node)

    def visit_unary_expression(self, node: 'UnaryExpression') -> T:
        return self._unhandled(node)

    def visit_if_expression(self, node: 'IfExpression') -> T:
        return self._unhandled(node)

    def visit_for_expression(self, node: 'ForExpression') -> T:
        return self._unhandled(node)

    def visit_loop_expression(self, node: 'LoopExpression') -> T:
        return self._unhandled(node)

    def visit_let_expression(self, node: 'LetExpression') -> T:
        return self._unhandled(node)
