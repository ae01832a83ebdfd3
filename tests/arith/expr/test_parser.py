"""
Tests for expression parser.
"""

import math

import pytest

from arith.expr import (
    AddNode,
    DivideNode,
    ExpressionLimits,
    FunctionCallNode,
    LexError,
    LimitExceededError,
    MultiplyNode,
    NegateNode,
    NumberLiteralNode,
    ParseError,
    Parser,
    SubtractNode,
    Token,
    TokenType,
    VariableNode,
    calculate_ast_depth,
    count_ast_nodes,
    parse,
    to_source,
    tokenize,
)


def var(name: str) -> VariableNode:
    return VariableNode(name)


def num(value: float) -> NumberLiteralNode:
    return NumberLiteralNode(value)


class TestLiterals:
    """Tests for literal parsing."""

    def test_parses_number_literal(self):
        ast = parse("42")
        assert ast.type == "NumberLiteral"
        assert ast.position == 0
        assert ast.value == 42.0

    def test_parses_decimal_number(self):
        ast = parse("3.14")
        assert ast.value == pytest.approx(3.14)

    def test_parses_number_with_trailing_point(self):
        assert parse("2.") == num(2.0)

    def test_parses_variable(self):
        ast = parse("  x")
        assert ast.type == "Variable"
        assert ast.name == "x"
        assert ast.position == 2

    def test_function_name_without_parens_is_a_variable(self):
        assert parse("sin") == var("sin")

    def test_rejects_number_out_of_range(self):
        with pytest.raises(ParseError) as exc_info:
            parse("1 + " + "9" * 400)
        assert exc_info.value.message.startswith('number out of range: "999')
        assert exc_info.value.position == 4

    def test_largest_literals_stay_finite(self):
        ast = parse("9" * 308)
        assert math.isfinite(ast.value)
        assert parse(to_source(ast)) == ast


class TestPrecedence:
    """Tests for operator precedence and associativity."""

    def test_multiplication_binds_tighter_than_addition(self):
        assert parse("a + b * c") == AddNode(var("a"), MultiplyNode(var("b"), var("c")))

    def test_additive_operators_are_left_associative(self):
        assert parse("a + b - c") == SubtractNode(AddNode(var("a"), var("b")), var("c"))

    def test_multiplicative_operators_are_left_associative(self):
        assert parse("a * b / c") == DivideNode(
            MultiplyNode(var("a"), var("b")), var("c")
        )

    def test_parentheses_override_precedence(self):
        assert parse("(a + b) * c") == MultiplyNode(AddNode(var("a"), var("b")), var("c"))

    def test_redundant_parentheses_leave_no_trace(self):
        assert parse("((x))") == var("x")

    def test_operator_position_is_recorded(self):
        ast = parse("1 + 2")
        assert ast.position == 2
        assert ast.left.position == 0
        assert ast.right.position == 4


class TestUnaryMinus:
    """Tests for unary minus, which re-enters at the term level."""

    def test_negation_covers_the_following_product(self):
        assert parse("-a * b") == NegateNode(MultiplyNode(var("a"), var("b")))

    def test_negation_stops_at_addition(self):
        assert parse("-a - b") == SubtractNode(NegateNode(var("a")), var("b"))

    def test_negation_inside_a_product(self):
        assert parse("a * -b * c") == MultiplyNode(
            var("a"), NegateNode(MultiplyNode(var("b"), var("c")))
        )

    def test_double_negation(self):
        assert parse("--a") == NegateNode(NegateNode(var("a")))

    def test_negated_literal_stays_a_negation(self):
        ast = parse("-1")
        assert ast == NegateNode(num(1.0))
        assert ast.position == 0


class TestFunctionCalls:
    """Tests for function call parsing."""

    def test_parses_call_with_arguments(self):
        assert parse("pow(x, 2)") == FunctionCallNode("pow", (var("x"), num(2.0)))

    def test_parses_nested_calls(self):
        assert parse("f(a, g(b + 1))") == FunctionCallNode(
            "f",
            (var("a"), FunctionCallNode("g", (AddNode(var("b"), num(1.0)),))),
        )

    def test_unknown_function_parses(self):
        ast = parse("foo(1)")
        assert ast.type == "FunctionCall"
        assert ast.name == "foo"

    def test_call_position_is_the_name(self):
        assert parse("1 + sin(x)").right.position == 4

    def test_rejects_empty_argument_list(self):
        with pytest.raises(ParseError, match="unexpected token"):
            parse("f()")

    def test_rejects_trailing_comma(self):
        with pytest.raises(ParseError):
            parse("pow(1,)")

    def test_rejects_unclosed_call(self):
        with pytest.raises(ParseError, match="missing \\)"):
            parse("pow(1, 2")


class TestSyntaxErrors:
    """Tests for syntax error reporting."""

    def test_missing_close_paren(self):
        with pytest.raises(ParseError) as exc_info:
            parse("(1 + 2")
        assert exc_info.value.message == "missing )"
        assert exc_info.value.position == 6

    def test_empty_input(self):
        with pytest.raises(ParseError, match="unexpected end of input"):
            parse("")

    def test_dangling_operator(self):
        with pytest.raises(ParseError, match="unexpected end of input"):
            parse("1 +")

    def test_unexpected_close_paren(self):
        with pytest.raises(ParseError) as exc_info:
            parse("1 + )")
        assert exc_info.value.message == 'unexpected token ")"'
        assert exc_info.value.position == 4

    def test_trailing_tokens(self):
        with pytest.raises(ParseError) as exc_info:
            parse("1 2")
        assert exc_info.value.message == 'invalid expression: unexpected token "2"'

    def test_empty_parentheses(self):
        with pytest.raises(ParseError):
            parse("()")

    def test_error_formats_with_context(self):
        with pytest.raises(ParseError) as exc_info:
            parse("1 + )")
        assert exc_info.value.format_with_context() == (
            'unexpected token ")"\n  1 + )\n      ^'
        )


class TestLexErrors:
    """Tests for lexical errors surfaced by the parser."""

    def test_invalid_character(self):
        with pytest.raises(LexError) as exc_info:
            parse("1 $")
        assert exc_info.value.message == 'invalid token: "$"'
        assert exc_info.value.position == 2

    def test_lex_error_is_a_parse_error(self):
        with pytest.raises(ParseError):
            parse("$")

    def test_lex_error_inside_parentheses(self):
        with pytest.raises(LexError):
            parse("(1 $")

    def test_lex_error_after_number(self):
        with pytest.raises(LexError, match='invalid token: "\\."'):
            parse("1.2.3")

    def test_information_separator_is_invalid(self):
        with pytest.raises(LexError) as exc_info:
            parse("1\x1c+ 2")
        assert exc_info.value.message == 'invalid token: "\\x1c"'
        assert exc_info.value.position == 1


class TestParserClass:
    """Tests for the Parser over arbitrary token iterables."""

    def test_parses_token_list(self):
        parser = Parser(list(tokenize("1+2")), "1+2")
        assert parser.parse() == AddNode(num(1.0), num(2.0))

    def test_exhausted_iterator_reads_as_end_of_input(self):
        parser = Parser([Token(TokenType.NUMBER, "1", 0)], "1")
        assert parser.parse() == num(1.0)

    def test_exhausted_iterator_mid_expression(self):
        parser = Parser(
            [Token(TokenType.NUMBER, "1", 0), Token(TokenType.PLUS, "+", 1)], "1+"
        )
        with pytest.raises(ParseError, match="unexpected end of input"):
            parser.parse()


class TestLimits:
    """Tests for parse-time limits."""

    def test_expression_length(self):
        with pytest.raises(LimitExceededError) as exc_info:
            parse("1" * 10, ExpressionLimits(max_expression_length=5))
        assert exc_info.value.limit_name == "max_expression_length"
        assert exc_info.value.actual == 10

    def test_nesting_depth(self):
        limits = ExpressionLimits(max_nesting_depth=2)
        assert parse("((1))", limits) == num(1.0)
        with pytest.raises(LimitExceededError) as exc_info:
            parse("(((1)))", limits)
        assert exc_info.value.limit_name == "max_nesting_depth"
        assert exc_info.value.position == 2

    def test_nesting_depth_counts_unary_minus(self):
        with pytest.raises(LimitExceededError):
            parse("---x", ExpressionLimits(max_nesting_depth=2))

    def test_default_nesting_depth(self):
        with pytest.raises(LimitExceededError):
            parse("(" * 200 + "1" + ")" * 200)

    def test_function_args(self):
        with pytest.raises(LimitExceededError) as exc_info:
            parse("pow(1, 2, 3)", ExpressionLimits(max_function_args=2))
        assert exc_info.value.limit_name == "max_function_args"

    def test_node_count(self):
        with pytest.raises(LimitExceededError) as exc_info:
            parse("1 + 2 + 3", ExpressionLimits(max_ast_nodes=3))
        assert exc_info.value.limit_name == "max_ast_nodes"
        assert exc_info.value.actual == 5

    def test_ast_depth(self):
        limits = ExpressionLimits(max_ast_depth=3)
        parse("1 + 2 + 3", limits)
        with pytest.raises(LimitExceededError) as exc_info:
            parse("1 + 2 + 3 + 4", limits)
        assert exc_info.value.limit_name == "max_ast_depth"

    def test_long_flat_sum_is_accepted(self):
        ast = parse("+".join(["1"] * 2000))
        assert count_ast_nodes(ast) == 3999
        assert calculate_ast_depth(ast) == 2000

    def test_long_chain_respects_configured_depth(self):
        with pytest.raises(LimitExceededError) as exc_info:
            parse("+".join(["1"] * 300), ExpressionLimits(max_ast_depth=256))
        assert exc_info.value.limit_name == "max_ast_depth"
        assert exc_info.value.actual == 300
