"""
Shared components: AST, operator kinds, source locations and errors.
"""

from .source_location import SourceLocation
from .errors import (
    Error, ErrorReporter, XyloError, XyloSourceError, XyloImplementationError,
    ParseError, XyloRuntimeError, RuntimeErrorKind, UndefinedName, ArityMismatch,
    TypeMismatch, DivisionByZero, RecursionLimitExceeded, InvalidDimensions,
)
from .types import BinaryOp, UnaryOp, ShapeKind, BlendMode, FillRule, LineCap, LineJoin
from .nodes import (
    ASTNode, Expression, NodeType, Program, Definition, Literal, ColorLiteral,
    ShapeLiteral, ListLiteral, Identifier, Call, BinaryExpression, UnaryExpression,
    IfExpression, ForExpression, LoopExpression, LetExpression, LetBinding,
)
from .ast_visitor import ASTVisitor
