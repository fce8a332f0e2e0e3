"""
xylo AST (Abstract Syntax Tree) Definitions

Shared by the frontend (which builds it) and the runtime (which walks it).
The tree is built once per program and is read-only afterwards.

Visitor Pattern Support:
- Every node has accept() dispatching to the matching visit_* method
  of an ASTVisitor (see ast_visitor.py)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, TypeVar, Union, TYPE_CHECKING

from .source_location import SourceLocation
from .types import BinaryOp, UnaryOp, ShapeKind

if TYPE_CHECKING:
    from .ast_visitor import ASTVisitor

T = TypeVar('T')


class NodeType(Enum):
    """AST node types"""
    PROGRAM = "program"
    DEFINITION = "definition"
    LITERAL = "literal"
    COLOR_LITERAL = "color_literal"
    SHAPE_LITERAL = "shape_literal"
    LIST_LITERAL = "list_literal"
    IDENTIFIER = "identifier"
    CALL = "call"
    BINARY_OP = "binary_op"
    UNARY_OP = "unary_op"
    IF_EXPR = "if_expr"
    FOR_EXPR = "for_expr"
    LOOP_EXPR = "loop_expr"
    LET_EXPR = "let_expr"
    LET_BINDING = "let_binding"


class ASTNode:
    """
    Base class for all AST nodes

    Subclasses implement accept() to call the appropriate visit_* method.
    """
    __slots__ = ('node_type', 'location')

    def __init__(self, node_type: NodeType, location: Optional[SourceLocation]):
        self.node_type = node_type
        self.location = location

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        raise NotImplementedError(f"accept() not implemented for {self.__class__.__name__}")


class Expression(ASTNode):
    """Base class for expressions"""
    __slots__ = ()


@dataclass
class Literal(Expression):
    """Number, string or boolean literal. Integers keep arbitrary precision."""
    value: Union[int, float, str, bool]

    def __init__(self, value: Union[int, float, str, bool], location: SourceLocation = None):
        super().__init__(NodeType.LITERAL, location)
        self.value = value

    def __str__(self) -> str:
        return str(self.value)

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_literal(self)


@dataclass
class ColorLiteral(Expression):
    """Hex color literal (0xRGB, 0xRRGGBB, 0xRRGGBBAA); channels 0..255"""
    red: int
    green: int
    blue: int
    alpha: int = 255

    def __init__(self, red: int, green: int, blue: int, alpha: int = 255, location: SourceLocation = None):
        super().__init__(NodeType.COLOR_LITERAL, location)
        self.red = red
        self.green = green
        self.blue = blue
        self.alpha = alpha

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_color_literal(self)


@dataclass
class ShapeLiteral(Expression):
    """Shape constant: SQUARE, CIRCLE, TRIANGLE, FILL or EMPTY"""
    kind: ShapeKind

    def __init__(self, kind: ShapeKind, location: SourceLocation = None):
        super().__init__(NodeType.SHAPE_LITERAL, location)
        self.kind = kind

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_shape_literal(self)


@dataclass
class ListLiteral(Expression):
    """[a, b, c]"""
    elements: List[Expression]

    def __init__(self, elements: List[Expression], location: SourceLocation = None):
        super().__init__(NodeType.LIST_LITERAL, location)
        self.elements = elements

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_list_literal(self)


@dataclass
class Identifier(Expression):
    """Bare name reference. Zero-parameter definitions evaluate on reference."""
    name: str

    def __init__(self, name: str, location: SourceLocation = None):
        super().__init__(NodeType.IDENTIFIER, location)
        self.name = name

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_identifier(self)


@dataclass
class Call(Expression):
    """Application by juxtaposition: `name arg1 arg2 ...` (at least one argument)"""
    name: str
    arguments: List[Expression]

    def __init__(self, name: str, arguments: List[Expression], location: SourceLocation = None):
        super().__init__(NodeType.CALL, location)
        self.name = name
        self.arguments = arguments

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_call(self)


@dataclass
class BinaryExpression(Expression):
    """Binary operation, including ranges (`..`, `..=`) and composition (`:`)"""
    operator: BinaryOp
    left: Expression
    right: Expression

    def __init__(self, operator: BinaryOp, left: Expression, right: Expression, location: SourceLocation = None):
        super().__init__(NodeType.BINARY_OP, location)
        self.operator = operator
        self.left = left
        self.right = right

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_binary_expression(self)


@dataclass
class UnaryExpression(Expression):
    operator: UnaryOp
    operand: Expression

    def __init__(self, operator: UnaryOp, operand: Expression, location: SourceLocation = None):
        super().__init__(NodeType.UNARY_OP, location)
        self.operator = operator
        self.operand = operand

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_unary_expression(self)


@dataclass
class IfExpression(Expression):
    """If expression; both branches are required and only the taken one is evaluated"""
    condition: Expression
    then_branch: Expression
    else_branch: Expression

    def __init__(self, condition: Expression, then_branch: Expression, else_branch: Expression,
                 location: SourceLocation = None):
        super().__init__(NodeType.IF_EXPR, location)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_if_expression(self)


@dataclass
class ForExpression(Expression):
    """Comprehension `for i in iterable -> body`; evaluates to a Sequence"""
    variable: str
    iterable: Expression
    body: Expression

    def __init__(self, variable: str, iterable: Expression, body: Expression, location: SourceLocation = None):
        super().__init__(NodeType.FOR_EXPR, location)
        self.variable = variable
        self.iterable = iterable
        self.body = body

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_for_expression(self)


@dataclass
class LoopExpression(Expression):
    """`loop n -> body`: body evaluated n times, results collected in order"""
    count: Expression
    body: Expression

    def __init__(self, count: Expression, body: Expression, location: SourceLocation = None):
        super().__init__(NodeType.LOOP_EXPR, location)
        self.count = count
        self.body = body

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_loop_expression(self)


@dataclass
class LetBinding(ASTNode):
    """One `name param* = value` binding inside a let expression"""
    name: str
    parameters: List[str]
    value: Expression

    def __init__(self, name: str, parameters: List[str], value: Expression, location: SourceLocation = None):
        super().__init__(NodeType.LET_BINDING, location)
        self.name = name
        self.parameters = parameters
        self.value = value


@dataclass
class LetExpression(Expression):
    """
    `let a = 1; f x = x * a -> body`

    Bindings are evaluated in order; each sees the ones before it. A binding
    with parameters is a local function, closed over the let scope (itself
    included, so it may recurse).
    """
    bindings: List[LetBinding]
    body: Expression

    def __init__(self, bindings: List[LetBinding], body: Expression, location: SourceLocation = None):
        super().__init__(NodeType.LET_EXPR, location)
        self.bindings = bindings
        self.body = body

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_let_expression(self)


@dataclass
class Definition(ASTNode):
    """Top-level definition `name[@weight] param* = body`"""
    name: str
    parameters: List[str]
    body: Expression
    weight: float = 1.0

    def __init__(self, name: str, parameters: List[str], body: Expression, weight: float = 1.0,
                 location: SourceLocation = None):
        super().__init__(NodeType.DEFINITION, location)
        self.name = name
        self.parameters = parameters
        self.body = body
        self.weight = weight

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_definition(self)


@dataclass
class Program(ASTNode):
    """
    Program root node.

    `definitions` keeps source order (duplicates included, they are weighted
    alternatives); `table` maps each name to its alternatives and is filled
    in by the compiler driver.
    """
    definitions: List[Definition]

    def __init__(self, definitions: List[Definition], location: SourceLocation = None, source: str = None):
        super().__init__(NodeType.PROGRAM, location)
        self.definitions = definitions
        self.source = source
        self.table: Dict[str, List[Definition]] = {}
        for definition in definitions:
            self.table.setdefault(definition.name, []).append(definition)

    def __contains__(self, name: str) -> bool:
        return name in self.table

    def lookup(self, name: str) -> Optional[List[Definition]]:
        return self.table.get(name)

    def accept(self, visitor: 'ASTVisitor[T]') -> 'T':
        return visitor.visit_program(self)
