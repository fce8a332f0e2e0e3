"""
Compiler Driver

Source text -> validated `Program`.

Phases:
1. Parsing (source -> AST), raises ParseError
2. Definition table check: alternatives of one name share a parameter list
3. Name check (optional, used by `xylo check`): every referenced name
   resolves to a local, a definition or a builtin

Nothing is type-checked or rewritten ahead of evaluation.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Set

from ..builtins import BUILTINS
from ..frontend.parser import Parser
from ..shared.ast_visitor import ASTVisitor
from ..shared.errors import ErrorReporter, TypeMismatch, UndefinedName, XyloSourceError
from ..shared.nodes import (
    BinaryExpression, Call, ColorLiteral, Definition, ForExpression, Identifier, IfExpression,
    LetExpression, ListLiteral, Literal, LoopExpression, Program, ShapeLiteral, UnaryExpression,
)
from ..utils.config import DEFAULT_SOURCE_NAME

logger = logging.getLogger("xylo.compiler.driver")


class CompilationResult:
    """Compilation result"""

    def __init__(self, program: Optional[Program] = None, reporter: Optional[ErrorReporter] = None,
                 success: bool = False):
        self.program = program
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.success = success

    def has_errors(self) -> bool:
        return self.reporter.has_errors() or not self.success

    def get_errors(self) -> List[str]:
        if self.reporter.has_errors():
            return [self.reporter.format_all_errors(color=False)]
        return []


def validate_definitions(program: Program) -> None:
    """Alternatives of one name must declare identical parameter lists."""
    for name, definitions in program.table.items():
        expected = definitions[0].parameters
        for definition in definitions[1:]:
            if definition.parameters != expected:
                raise TypeMismatch(
                    f"alternatives of `{name}` declare different parameters",
                    definition.location,
                    source_code=program.source,
                    label=f"declares ({' '.join(definition.parameters)})",
                    note=f"the first alternative declares ({' '.join(expected)})",
                )


class NameChecker(ASTVisitor[None]):
    """Collects UndefinedName errors for names no scope can provide."""

    def __init__(self, program: Program):
        self.program = program
        self.scopes: List[Set[str]] = []
        self.errors: List[UndefinedName] = []

    def run(self) -> List[UndefinedName]:
        self.program.accept(self)
        return self.errors

    @contextmanager
    def scope(self, names) -> Iterator[None]:
        self.scopes.append(set(names))
        try:
            yield
        finally:
            self.scopes.pop()

    def _check(self, name: str, location) -> None:
        if any(name in scope for scope in self.scopes):
            return
        if name in self.program or name in BUILTINS:
            return
        self.errors.append(UndefinedName(name, location, source_code=self.program.source))

    def visit_program(self, node: Program) -> None:
        for definition in node.definitions:
            definition.accept(self)

    def visit_definition(self, node: Definition) -> None:
        with self.scope(node.parameters):
            node.body.accept(self)

    def visit_literal(self, node: Literal) -> None:
        pass

    def visit_color_literal(self, node: ColorLiteral) -> None:
        pass

    def visit_shape_literal(self, node: ShapeLiteral) -> None:
        pass

    def visit_list_literal(self, node: ListLiteral) -> None:
        for element in node.elements:
            element.accept(self)

    def visit_identifier(self, node: Identifier) -> None:
        self._check(node.name, node.location)

    def visit_call(self, node: Call) -> None:
        self._check(node.name, node.location)
        for argument in node.arguments:
            argument.accept(self)

    def visit_binary_expression(self, node: BinaryExpression) -> None:
        node.left.accept(self)
        node.right.accept(self)

    def visit_unary_expression(self, node: UnaryExpression) -> None:
        node.operand.accept(self)

    def visit_if_expression(self, node: IfExpression) -> None:
        node.condition.accept(self)
        node.then_branch.accept(self)
        node.else_branch.accept(self)

    def visit_for_expression(self, node: ForExpression) -> None:
        node.iterable.accept(self)
        with self.scope([node.variable]):
            node.body.accept(self)

    def visit_loop_expression(self, node: LoopExpression) -> None:
        node.count.accept(self)
        node.body.accept(self)

    def visit_let_expression(self, node: LetExpression) -> None:
        depth = len(self.scopes)
        for binding in node.bindings:
            if binding.parameters:
                # local functions see themselves
                self.scopes.append({binding.name})
                with self.scope(binding.parameters):
                    binding.value.accept(self)
            else:
                binding.value.accept(self)
                self.scopes.append({binding.name})
        node.body.accept(self)
        del self.scopes[depth:]


class XyloCompiler:
    """
    Compiler driver.

    `compile` collects diagnostics in the result; `load` raises the first
    error instead.
    """

    def __init__(self, parser: Optional[Parser] = None):
        self.parser = parser if parser is not None else Parser()

    def load(self, source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Program:
        program = self.parser.parse(source, source_file)
        validate_definitions(program)
        logger.debug("loaded %s: %d definitions, %d names",
                     source_file, len(program.definitions), len(program.table))
        return program

    def compile(self, source: str, source_file: str = DEFAULT_SOURCE_NAME,
                check_names: bool = False) -> CompilationResult:
        reporter = ErrorReporter({source_file: source})
        try:
            program = self.load(source, source_file)
        except XyloSourceError as e:
            reporter.report_exception(e)
            return CompilationResult(reporter=reporter, success=False)

        if check_names:
            for error in NameChecker(program).run():
                reporter.report_exception(error)
            if reporter.has_errors():
                return CompilationResult(program, reporter, success=False)
        return CompilationResult(program, reporter, success=True)
