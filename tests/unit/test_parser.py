#!/usr/bin/env python3
"""
Tests for the parser: definitions, precedence, layout and parse errors.
"""

import pytest

from xylo.frontend.parser import Parser
from xylo.shared import (
    BinaryExpression, BinaryOp, Call, ColorLiteral, ForExpression, Identifier, IfExpression,
    LetExpression, ListLiteral, Literal, LoopExpression, ParseError, ShapeKind, ShapeLiteral,
    UnaryExpression, UnaryOp,
)


@pytest.fixture(scope="module")
def parser():
    return Parser()


def body_of(parser, source: str, name: str = "x"):
    program = parser.parse(source, "<test>")
    return program.lookup(name)[0].body


class TestDefinitions:

    def test_single_definition(self, parser):
        program = parser.parse("root = SQUARE\n", "<test>")
        assert len(program.definitions) == 1
        definition = program.definitions[0]
        assert definition.name == "root"
        assert definition.parameters == []
        assert isinstance(definition.body, ShapeLiteral)
        assert definition.body.kind is ShapeKind.SQUARE

    def test_parameters_and_source_kept(self, parser):
        source = "add3 a b c = a + b + c"
        program = parser.parse(source, "<test>")
        definition = program.lookup("add3")[0]
        assert definition.parameters == ["a", "b", "c"]
        assert definition.arity == 3
        assert program.source == source

    def test_alternatives_share_a_table_entry(self, parser):
        program = parser.parse("petal@2 = SQUARE\npetal = CIRCLE\nroot = petal\n", "<test>")
        alternatives = program.lookup("petal")
        assert [d.weight for d in alternatives] == [2.0, 1.0]
        assert "root" in program
        assert "missing" not in program
        assert len(program.definitions) == 3

    def test_non_positive_weight_rejected(self, parser):
        with pytest.raises(ParseError, match="weight must be positive"):
            parser.parse("petal@0 = SQUARE\n", "<test>")

    def test_duplicate_parameter_rejected(self, parser):
        with pytest.raises(ParseError, match="bound more than once"):
            parser.parse("f x x = x\n", "<test>")

    def test_comments_and_blank_lines(self, parser):
        source = "# a comment\n\nroot = SQUARE  # trailing\n\n\nother = CIRCLE\n"
        program = parser.parse(source, "<test>")
        assert [d.name for d in program.definitions] == ["root", "other"]

    def test_location_points_at_definition(self, parser):
        program = parser.parse("a = 1\n\nb = 2\n", "demo.xylo")
        location = program.lookup("b")[0].location
        assert location.file == "demo.xylo"
        assert location.line == 3
        assert location.column == 1


class TestPrecedence:

    def test_multiplication_binds_tighter(self, parser):
        body = body_of(parser, "x = 1 + 2 * 3")
        assert body.operator is BinaryOp.ADD
        assert isinstance(body.right, BinaryExpression)
        assert body.right.operator is BinaryOp.MUL

    def test_subtraction_is_left_associative(self, parser):
        body = body_of(parser, "x = 10 - 4 - 3")
        assert body.operator is BinaryOp.SUB
        assert body.left.operator is BinaryOp.SUB
        assert body.right.value == 3

    def test_power_is_right_associative(self, parser):
        body = body_of(parser, "x = 2 ** 3 ** 2")
        assert body.operator is BinaryOp.POW
        assert body.right.operator is BinaryOp.POW

    def test_unary_operators(self, parser):
        body = body_of(parser, "x = -y")
        assert isinstance(body, UnaryExpression) and body.operator is UnaryOp.NEG
        body = body_of(parser, "x = !true")
        assert body.operator is UnaryOp.NOT

    def test_logical_below_comparison(self, parser):
        body = body_of(parser, "x = 1 < 2 && 3 >= 4 || false")
        assert body.operator is BinaryOp.OR
        assert body.left.operator is BinaryOp.AND
        assert body.left.left.operator is BinaryOp.LT
        assert body.left.right.operator is BinaryOp.GE

    def test_comparisons_do_not_chain(self, parser):
        with pytest.raises(ParseError):
            parser.parse("x = 1 < 2 < 3\n", "<test>")

    def test_ranges(self, parser):
        body = body_of(parser, "x = 0..n + 1")
        assert body.operator is BinaryOp.RANGE
        assert body.right.operator is BinaryOp.ADD
        assert body_of(parser, "x = 1..=5").operator is BinaryOp.RANGE_INCLUSIVE

    def test_sequence_operators(self, parser):
        assert body_of(parser, "x = [1] ++ [2]").operator is BinaryOp.CONCAT
        assert body_of(parser, "x = 1 +> [2]").operator is BinaryOp.PREPEND
        assert body_of(parser, "x = [1] <+ 2").operator is BinaryOp.APPEND

    def test_parentheses_group(self, parser):
        body = body_of(parser, "x = (1 + 2) * 3")
        assert body.operator is BinaryOp.MUL
        assert body.left.operator is BinaryOp.ADD

    def test_application_binds_tightest(self, parser):
        body = body_of(parser, "x = f 1 + g 2")
        assert body.operator is BinaryOp.ADD
        assert isinstance(body.left, Call) and body.left.name == "f"
        assert isinstance(body.right, Call) and body.right.name == "g"

    def test_call_arguments_are_atoms(self, parser):
        body = body_of(parser, "x = f (g 1) [2, 3] y")
        assert isinstance(body, Call)
        first, second, third = body.arguments
        assert isinstance(first, Call) and first.name == "g"
        assert isinstance(second, ListLiteral)
        assert isinstance(third, Identifier) and third.name == "y"


class TestNegativeLiterals:

    def test_negative_argument(self, parser):
        body = body_of(parser, "x = translate -0.5 0 SQUARE")
        assert isinstance(body, Call)
        assert [a.value for a in body.arguments[:2]] == [-0.5, 0]

    def test_minus_after_name_is_subtraction(self, parser):
        for source in ("x = n-1", "x = n - 1", "x = (n)-1"):
            body = body_of(parser, source)
            assert isinstance(body, BinaryExpression), source
            assert body.operator is BinaryOp.SUB

    def test_spaced_minus_before_digit_is_an_argument(self, parser):
        body = body_of(parser, "x = f -1")
        assert isinstance(body, Call)
        assert body.arguments[0].value == -1

    def test_literal_followed_by_negative_literal(self, parser):
        with pytest.raises(ParseError):
            parser.parse("x = 2 -1\n", "<test>")


class TestComposeAndPipe:

    def test_compose_is_right_associative(self, parser):
        body = body_of(parser, "x = a : b : c")
        assert body.operator is BinaryOp.COMPOSE
        assert isinstance(body.left, Identifier)
        assert body.right.operator is BinaryOp.COMPOSE

    def test_compose_is_loosest(self, parser):
        body = body_of(parser, "x = ss 0.5 SQUARE : rotate 45 CIRCLE")
        assert body.operator is BinaryOp.COMPOSE
        assert body.left.name == "ss"
        assert body.right.name == "rotate"

    def test_pipe_appends_argument(self, parser):
        body = body_of(parser, "x = SQUARE |> rotate 45 |> ss 0.5")
        assert isinstance(body, Call) and body.name == "ss"
        inner = body.arguments[-1]
        assert inner.name == "rotate"
        assert inner.arguments[0].value == 45
        assert isinstance(inner.arguments[1], ShapeLiteral)

    def test_pipe_into_bare_name(self, parser):
        body = body_of(parser, "x = [1, 2] |> reverse")
        assert isinstance(body, Call) and body.name == "reverse"
        assert len(body.arguments) == 1

    def test_pipe_into_literal_rejected(self, parser):
        with pytest.raises(ParseError, match="right side of `\\|>`"):
            parser.parse("x = 3 |> 5\n", "<test>")


class TestControlFlow:

    def test_if_forms(self, parser):
        for source in ("x = if a then 1 else 2", "x = if a -> 1 else -> 2", "x = if a -> 1 else 2"):
            body = body_of(parser, source)
            assert isinstance(body, IfExpression), source
            assert body.then_branch.value == 1
            assert body.else_branch.value == 2

    def test_else_if_chain(self, parser):
        body = body_of(parser, "x = if a then 1 else if b then 2 else 3")
        assert isinstance(body.else_branch, IfExpression)
        assert body.else_branch.else_branch.value == 3

    def test_if_block_form(self, parser):
        source = (
            "root =\n"
            "    if true\n"
            "        SQUARE\n"
            "    else\n"
            "        CIRCLE\n"
            "other = TRIANGLE\n"
        )
        program = parser.parse(source, "<test>")
        body = program.lookup("root")[0].body
        assert isinstance(body, IfExpression)
        assert body.then_branch.kind is ShapeKind.SQUARE
        assert body.else_branch.kind is ShapeKind.CIRCLE
        assert "other" in program

    def test_continuation_lines(self, parser):
        source = (
            "root = if true\n"
            "    then SQUARE\n"
            "    else CIRCLE\n"
        )
        body = body_of(parser, source, "root")
        assert isinstance(body, IfExpression)

    def test_continued_pipe_and_compose(self, parser):
        source = (
            "root = SQUARE\n"
            "    |> rotate 45\n"
            "    : CIRCLE\n"
        )
        body = body_of(parser, source, "root")
        assert body.operator is BinaryOp.COMPOSE
        assert body.left.name == "rotate"

    def test_for_forms(self, parser):
        for source in ("x = for i in 0..3 -> i * 2", "x = for i in xs: i"):
            body = body_of(parser, source)
            assert isinstance(body, ForExpression), source
            assert body.variable == "i"

    def test_for_block_form(self, parser):
        source = (
            "x =\n"
            "    for i in 0..3\n"
            "        i\n"
        )
        body = body_of(parser, source)
        assert isinstance(body, ForExpression)
        assert isinstance(body.body, Identifier)

    def test_loop(self, parser):
        body = body_of(parser, "x = loop 3 -> rand")
        assert isinstance(body, LoopExpression)
        assert body.count.value == 3

    def test_let_with_local_function(self, parser):
        body = body_of(parser, "x = let a = 1; f y = y + a -> f 2")
        assert isinstance(body, LetExpression)
        first, second = body.bindings
        assert (first.name, first.parameters) == ("a", [])
        assert (second.name, second.parameters) == ("f", ["y"])
        assert isinstance(body.body, Call)

    def test_multiline_list(self, parser):
        source = "x = [\n    1,\n    2,\n]\n"
        body = body_of(parser, source)
        assert [e.value for e in body.elements] == [1, 2]


class TestAtoms:

    def test_numbers(self, parser):
        cases = [("42", 42, int), ("1.5", 1.5, float), ("2e3", 2000.0, float),
                 ("123456789012345678901234567890", 123456789012345678901234567890, int)]
        for text, expected, kind in cases:
            body = body_of(parser, f"x = {text}")
            assert isinstance(body, Literal)
            assert body.value == expected and type(body.value) is kind, text

    def test_booleans_and_strings(self, parser):
        assert body_of(parser, "x = true").value is True
        assert body_of(parser, "x = false").value is False
        assert body_of(parser, 'x = "a\\"b\\n"').value == 'a"b\n'

    def test_hex_colors(self, parser):
        cases = [
            ("0xff0000", (255, 0, 0, 255)),
            ("0xF00", (255, 0, 0, 255)),
            ("0xf008", (255, 0, 0, 136)),
            ("0x11223344", (0x11, 0x22, 0x33, 0x44)),
        ]
        for text, channels in cases:
            body = body_of(parser, f"x = {text}")
            assert isinstance(body, ColorLiteral)
            assert (body.red, body.green, body.blue, body.alpha) == channels, text

    def test_bad_hex_length(self, parser):
        with pytest.raises(ParseError, match="invalid color literal"):
            parser.parse("x = 0x12345\n", "<test>")

    def test_shape_constants(self, parser):
        for kind in ShapeKind:
            body = body_of(parser, f"x = {kind.value}")
            assert body.kind is kind

    def test_keywords_are_not_names(self, parser):
        body = body_of(parser, "x = iffy + format")
        assert body.left.name == "iffy"
        assert body.right.name == "format"

    def test_empty_list_and_trailing_comma(self, parser):
        assert body_of(parser, "x = []").elements == []
        assert len(body_of(parser, "x = [1, 2,]").elements) == 2


class TestParseErrors:

    def test_unexpected_token_position(self, parser):
        with pytest.raises(ParseError) as info:
            parser.parse("root = 1 + * 2\n", "<test>")
        assert info.value.line == 1
        assert info.value.column == 12
        assert "unexpected `*`" in info.value.message

    def test_error_on_second_line(self, parser):
        with pytest.raises(ParseError) as info:
            parser.parse("a = 1\nb = )\n", "bad.xylo")
        assert info.value.line == 2
        assert info.value.column == 5
        assert info.value.location.file == "bad.xylo"
        rendered = str(info.value)
        assert "error[E0001]" in rendered
        assert "bad.xylo:2:5" in rendered

    def test_unclosed_parenthesis(self, parser):
        with pytest.raises(ParseError) as info:
            parser.parse("root = (SQUARE\n", "<test>")
        assert info.value.line >= 1

    def test_missing_equals(self, parser):
        with pytest.raises(ParseError):
            parser.parse("root SQUARE\n", "<test>")

    def test_unmatched_dedent_position(self, parser):
        source = "root =\n        SQUARE\n    : CIRCLE\nx = 1\n"
        with pytest.raises(ParseError) as info:
            parser.parse(source, "layout.xylo")
        assert info.value.line == 3
        assert info.value.column == 5
        assert "unindent does not match" in info.value.message
        assert "layout.xylo:3:5" in str(info.value)

    def test_parser_recovers_after_a_layout_error(self, parser):
        with pytest.raises(ParseError):
            parser.parse("root =\n        SQUARE\n    : CIRCLE\n", "<test>")
        assert parser.parse("root = SQUARE\n", "<test>").lookup("root")
