#!/usr/bin/env python3
"""
Tests for the compiler driver: loading, definition checks, name checks.
"""

import pytest

from xylo.compiler.driver import CompilationResult, NameChecker, XyloCompiler
from xylo.shared import ParseError, TypeMismatch


class TestLoad:

    def test_load_returns_program(self, compiler):
        program = compiler.load("root = petal 3\npetal n = SQUARE\npetal n = CIRCLE\n", "flower.xylo")
        assert "petal" in program
        assert len(program.lookup("petal")) == 2
        assert len(program.definitions) == 3

    def test_load_raises_parse_errors(self, compiler):
        with pytest.raises(ParseError):
            compiler.load("root = (\n")

    def test_alternatives_must_share_parameters(self, compiler):
        with pytest.raises(TypeMismatch, match="alternatives of `f` declare different parameters") as info:
            compiler.load("f x = 1\nf y = 2\nroot = SQUARE\n")
        assert info.value.location.line == 2
        assert info.value.note_text == "the first alternative declares (x)"


class TestCompile:

    def test_success(self, compiler):
        result = compiler.compile("root = SQUARE\n", "ok.xylo")
        assert isinstance(result, CompilationResult)
        assert result.success and not result.has_errors()
        assert result.get_errors() == []

    def test_parse_failure_is_reported(self, compiler):
        result = compiler.compile("root = 1 + * 2\n", "bad.xylo")
        assert not result.success
        assert result.program is None
        [text] = result.get_errors()
        assert "error[E0001]" in text
        assert "bad.xylo:1:12" in text
        assert "1 | root = 1 + * 2" in text

    def test_names_are_not_checked_by_default(self, compiler):
        assert compiler.compile("root = missing\n").success


class TestNameCheck:

    def check(self, compiler, source):
        result = compiler.compile(source, "names.xylo", check_names=True)
        return [e.message for e in result.reporter.errors]

    def test_clean_program(self, compiler):
        source = (
            "root = collect (for i in 0..n -> rotate (i * 30) (leaf i))\n"
            "n = 12\n"
            "leaf k = let s = 0.1 * k; grow x = ss x SQUARE -> grow s\n"
        )
        assert self.check(compiler, source) == []

    def test_reports_every_missing_name(self, compiler):
        source = "root = petl 3 : missing\n"
        assert self.check(compiler, source) == [
            "cannot find `petl` in this scope",
            "cannot find `missing` in this scope",
        ]

    def test_for_variable_is_scoped_to_its_body(self, compiler):
        source = "root = collect (for i in 0..3 -> tx i SQUARE) : tx i SQUARE\n"
        assert self.check(compiler, source) == ["cannot find `i` in this scope"]

    def test_let_bindings_are_sequential(self, compiler):
        assert self.check(compiler, "root = let a = b; b = 1 -> SQUARE\n") == ["cannot find `b` in this scope"]
        assert self.check(compiler, "root = let a = 1; b = a -> SQUARE\n") == []

    def test_local_function_sees_itself(self, compiler):
        source = "root = let spin n = if n == 0 then EMPTY else r 10 (spin (n - 1)) -> spin 3\n"
        assert self.check(compiler, source) == []

    def test_checker_on_program(self, compiler):
        program = compiler.load("root = nope\n", "p.xylo")
        [error] = NameChecker(program).run()
        assert error.name == "nope"
        assert error.location.line == 1
