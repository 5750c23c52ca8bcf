# =============================================================================
# test_parser.py - Parser Unit Tests
# =============================================================================
# Tests for the Kaleidoscope recursive descent parser.
#
# Test coverage includes:
#   - Primary expressions (numbers, variables, calls, parentheses)
#   - Precedence climbing and left associativity
#   - Custom and per-parser operator tables
#   - Prototypes, definitions, externs and top-level expressions
#   - Failure kinds, messages, locations and the unconsumed token
# =============================================================================

import pytest
from kaleidoscope.frontend.ast import (
    BinaryExpr,
    CallExpr,
    Function,
    NumberExpr,
    Prototype,
    VariableExpr,
    expr_str,
)
from kaleidoscope.frontend.errors import (
    ErrorKind,
    FrontendSyntaxError,
    MalformedArgumentListError,
    MalformedPrototypeError,
    UnclosedParenError,
    UnexpectedTokenError,
)
from kaleidoscope.frontend.lexer import Token, TokenKind
from kaleidoscope.frontend.parser import (
    ANONYMOUS_FUNCTION_NAME,
    Parser,
    parse_expression_source,
)
from kaleidoscope.frontend.precedence import PrecedenceTable


# =============================================================================
# Helper Functions
# =============================================================================

def parse_expr(source: str, **kwargs):
    """Parse an expression, failing the test on a syntax error."""
    result = Parser(source, **kwargs).parse_expression()
    assert result.ok, f"parse failed: {result.message}"
    return result.value


def shape(source: str, **kwargs) -> str:
    """Parse an expression and render it fully parenthesized."""
    return expr_str(parse_expr(source, **kwargs))


def num(value: float) -> NumberExpr:
    return NumberExpr(value)


def var(name: str) -> VariableExpr:
    return VariableExpr(name)


# =============================================================================
# Primary Expression Tests
# =============================================================================

class TestPrimaryExpressions:
    """Test parsing of the primary expression forms."""

    def test_number(self):
        assert parse_expr("4.5") == num(4.5)

    def test_variable(self):
        assert parse_expr("x") == var("x")

    def test_call_no_arguments(self):
        assert parse_expr("foo()") == CallExpr("foo", ())

    def test_call_with_arguments(self):
        assert parse_expr("foo(y, 4.0)") == CallExpr("foo", (var("y"), num(4.0)))

    def test_call_with_expression_arguments(self):
        expr = parse_expr("f(g(x), 1+2)")
        assert expr == CallExpr(
            "f",
            (CallExpr("g", (var("x"),)), BinaryExpr("+", num(1.0), num(2.0))),
        )

    def test_parentheses_produce_no_node(self):
        assert parse_expr("(x)") == var("x")
        assert parse_expr("((4))") == num(4.0)

    def test_parse_primary_dispatch(self):
        assert Parser("7").parse_primary().value == num(7.0)
        assert Parser("a").parse_primary().value == var("a")
        assert Parser("(b)").parse_primary().value == var("b")

    def test_parse_primary_stops_before_operator(self):
        parser = Parser("a+b")
        assert parser.parse_primary().value == var("a")
        assert parser.current.is_symbol("+")

    def test_parse_number_expr(self):
        parser = Parser("3 x")
        assert parser.parse_number_expr().value == num(3.0)
        assert parser.current == Token(TokenKind.IDENTIFIER, "x")

    def test_parse_paren_expr(self):
        parser = Parser("(1+2) rest")
        assert parser.parse_paren_expr().value == BinaryExpr("+", num(1.0), num(2.0))
        assert parser.current == Token(TokenKind.IDENTIFIER, "rest")

    def test_parse_identifier_expr(self):
        assert Parser("sin(a)").parse_identifier_expr().value == CallExpr("sin", (var("a"),))

    def test_call_consumes_closing_paren(self):
        parser = Parser("foo(1) ;")
        parser.parse_expression()
        assert parser.current.is_symbol(";")


# =============================================================================
# Fresh Parser Tests
# =============================================================================

class TestFreshParser:
    """Each public operation works on a parser that has read no token yet."""

    def test_advance_consumes_first_token(self):
        parser = Parser("a b")
        assert parser.advance() == Token(TokenKind.IDENTIFIER, "b")

    def test_definition(self):
        result = Parser("def foo(x) x").parse_definition()
        assert result.ok
        assert result.value.prototype == Prototype("foo", ("x",))

    def test_extern(self):
        assert Parser("extern sin(a)").parse_extern().value == Prototype("sin", ("a",))

    def test_paren_expr(self):
        result = Parser("(1+2)").parse_paren_expr()
        assert result.value == BinaryExpr("+", num(1.0), num(2.0))

    @pytest.mark.parametrize("method, source", [
        ("parse_primary", "x"),
        ("parse_number_expr", "1"),
        ("parse_paren_expr", "(x)"),
        ("parse_identifier_expr", "f(x)"),
        ("parse_expression", "x+1"),
        ("parse_prototype", "f(x)"),
        ("parse_definition", "def f(x) x"),
        ("parse_extern", "extern f(x)"),
        ("parse_top_level_expr", "x*2"),
    ])
    def test_every_operation(self, method, source):
        parser = Parser(source)
        assert getattr(parser, method)().ok
        assert parser.at_end()


# =============================================================================
# Operator Precedence Tests
# =============================================================================

class TestPrecedence:
    """Test precedence climbing with the default operator table."""

    def test_multiplication_binds_tighter(self):
        assert parse_expr("1+2*3") == BinaryExpr(
            "+", num(1.0), BinaryExpr("*", num(2.0), num(3.0))
        )

    def test_multiplication_first(self):
        assert parse_expr("1*2+3") == BinaryExpr(
            "+", BinaryExpr("*", num(1.0), num(2.0)), num(3.0)
        )

    def test_equal_precedence_is_left_associative(self):
        assert parse_expr("1+2+3") == BinaryExpr(
            "+", BinaryExpr("+", num(1.0), num(2.0)), num(3.0)
        )

    def test_subtraction_is_left_associative(self):
        assert shape("x-y-z") == "((x - y) - z)"

    def test_plus_and_minus_share_a_level(self):
        assert shape("a+b-c") == "((a + b) - c)"
        assert shape("a-b+c") == "((a - b) + c)"

    def test_less_than_binds_loosest(self):
        assert shape("a<b+c") == "(a < (b + c))"
        assert shape("a*b<c") == "((a * b) < c)"

    def test_mixed_chain(self):
        assert shape("1*2*3+4*5") == "(((1 * 2) * 3) + (4 * 5))"
        assert shape("a+b*c-d") == "((a + (b * c)) - d)"

    def test_parentheses_override_precedence(self):
        assert shape("(1+2)*3") == "((1 + 2) * 3)"

    def test_operands_can_be_calls(self):
        assert shape("x + foo(y, 4.0)") == "(x + foo(y, 4))"

    def test_unknown_operator_ends_expression(self):
        parser = Parser("1 % 2")
        assert parser.parse_expression().value == num(1.0)
        assert parser.current.is_symbol("%")

    def test_expression_ends_at_semicolon(self):
        parser = Parser("a+b; c")
        assert expr_str(parser.parse_expression().value) == "(a + b)"
        assert parser.current.is_symbol(";")

    def test_bin_op_rhs_folds_into_lhs(self):
        parser = Parser("+ 2 * 3")
        result = parser.parse_bin_op_rhs(0, num(1.0))
        assert expr_str(result.value) == "(1 + (2 * 3))"

    def test_bin_op_rhs_below_minimum_returns_lhs(self):
        parser = Parser("+ 2")
        result = parser.parse_bin_op_rhs(30, var("a"))
        assert result.value == var("a")
        assert parser.current.is_symbol("+")


# =============================================================================
# Custom Operator Table Tests
# =============================================================================

class TestCustomPrecedence:
    """Test parsers built with their own operator tables."""

    def test_table_replaces_defaults(self):
        parser = Parser("a/b+c", precedence={"/": 40})
        assert parser.parse_expression().value == BinaryExpr("/", var("a"), var("b"))
        assert parser.current.is_symbol("+")

    def test_added_operator(self):
        table = PrecedenceTable()
        table["/"] = 40
        assert shape("a+b/c", precedence=table) == "(a + (b / c))"

    def test_disabled_operator(self):
        parser = Parser("1*2", precedence={"+": 20, "*": 0})
        assert parser.parse_expression().value == num(1.0)
        assert parser.current.is_symbol("*")

    def test_table_can_change_between_parses(self):
        parser = Parser("a/b; a/b")
        assert parser.parse_expression().value == var("a")
        parser.precedence["/"] = 40
        parser.advance()  # skip '/'
        parser.advance()  # skip 'b'
        parser.advance()  # skip ';'
        assert shape_of(parser) == "(a / b)"

    def test_parsers_do_not_share_tables(self):
        first = Parser("a/b")
        second = Parser("a/b")
        first.precedence["/"] = 40
        assert expr_str(first.parse_expression().value) == "(a / b)"
        assert second.parse_expression().value == var("a")

    def test_mapping_is_copied(self):
        entries = {"+": 20}
        parser = Parser("a+b", precedence=entries)
        entries["+"] = 0
        assert shape_of(parser) == "(a + b)"

    def test_table_instance_is_shared(self):
        table = PrecedenceTable()
        parser = Parser("a", precedence=table)
        assert parser.precedence is table

    def test_inverted_precedence(self):
        assert shape("1*2+3", precedence={"*": 10, "+": 40}) == "(1 * (2 + 3))"


def shape_of(parser: Parser) -> str:
    result = parser.parse_expression()
    assert result.ok
    return expr_str(result.value)


# =============================================================================
# Prototype, Definition and Extern Tests
# =============================================================================

class TestFunctions:
    """Test parsing of prototypes, definitions and externs."""

    def test_prototype(self):
        result = Parser("foo(x y)").parse_prototype()
        assert result.value == Prototype("foo", ("x", "y"))
        assert result.value.arity == 2

    def test_prototype_without_params(self):
        assert Parser("f()").parse_prototype().value == Prototype("f", ())

    def test_duplicate_params_are_kept(self):
        assert Parser("f(x x)").parse_prototype().value.params == ("x", "x")

    def test_definition(self):
        result = Parser("def foo(x y) x + foo(y, 4.0)").parse_definition()
        assert result.ok
        assert result.value == Function(
            Prototype("foo", ("x", "y")),
            BinaryExpr("+", var("x"), CallExpr("foo", (var("y"), num(4.0)))),
        )

    def test_definition_body_is_one_expression(self):
        parser = Parser("def id(x) x y")
        assert parser.parse_definition().value.body == var("x")
        assert parser.current == Token(TokenKind.IDENTIFIER, "y")

    def test_extern(self):
        result = Parser("extern sin(a)").parse_extern()
        assert result.value == Prototype("sin", ("a",))

    def test_extern_without_params(self):
        assert Parser("extern rand()").parse_extern().value == Prototype("rand")

    def test_top_level_expression(self):
        result = Parser("x+1").parse_top_level_expr()
        assert result.value == Function(
            Prototype(ANONYMOUS_FUNCTION_NAME, ()),
            BinaryExpr("+", var("x"), num(1.0)),
        )

    def test_top_level_expression_custom_name(self):
        result = Parser("1", anonymous_name="main").parse_top_level_expr()
        assert result.value.prototype == Prototype("main", ())


# =============================================================================
# Failure Tests
# =============================================================================

class TestFailures:
    """Test failure kinds, messages and the parser position after failure."""

    def test_unexpected_token(self):
        parser = Parser(")")
        result = parser.parse_expression()
        assert not result.ok
        assert result.kind == ErrorKind.UNEXPECTED_TOKEN
        assert result.message == "unknown token when expecting an expression"
        assert isinstance(result.error, UnexpectedTokenError)
        assert parser.current.is_symbol(")")

    def test_unexpected_end_of_input(self):
        result = Parser("").parse_expression()
        assert result.kind == ErrorKind.UNEXPECTED_TOKEN
        assert result.error.found == "end of input"

    def test_keyword_is_not_an_expression(self):
        result = Parser("def").parse_expression()
        assert result.kind == ErrorKind.UNEXPECTED_TOKEN
        assert "keyword 'def'" in result.error.hint

    @pytest.mark.parametrize("source", ["x", "(", ""])
    def test_number_expr_needs_a_number(self, source):
        parser = Parser(source)
        result = parser.parse_number_expr()
        assert result.kind == ErrorKind.UNEXPECTED_TOKEN
        assert parser.current == Parser(source).current

    def test_unary_minus_is_unsupported(self):
        assert Parser("-1").parse_expression().kind == ErrorKind.UNEXPECTED_TOKEN

    def test_missing_right_operand(self):
        parser = Parser("1+")
        result = parser.parse_expression()
        assert result.kind == ErrorKind.UNEXPECTED_TOKEN
        assert parser.at_end()

    def test_unclosed_paren(self):
        parser = Parser("(1+2")
        result = parser.parse_expression()
        assert result.kind == ErrorKind.UNCLOSED_PAREN
        assert result.message == "expected ')'"
        assert isinstance(result.error, UnclosedParenError)
        assert parser.at_end()

    def test_unclosed_paren_before_other_token(self):
        parser = Parser("(x y")
        assert parser.parse_expression().kind == ErrorKind.UNCLOSED_PAREN
        assert parser.current == Token(TokenKind.IDENTIFIER, "y")

    def test_malformed_argument_list(self):
        parser = Parser("foo(1 2)")
        result = parser.parse_expression()
        assert result.kind == ErrorKind.MALFORMED_ARGUMENT_LIST
        assert result.message == "Expected ')' or ',' in argument list"
        assert isinstance(result.error, MalformedArgumentListError)
        assert (result.error.location.line, result.error.location.column) == (1, 7)
        assert parser.current == Token(TokenKind.NUMBER, 2.0)

    @pytest.mark.parametrize("source", ["foo(", "foo(1,", "foo(1"])
    def test_argument_list_cut_off(self, source):
        result = Parser(source).parse_expression()
        assert result.kind == ErrorKind.MALFORMED_ARGUMENT_LIST

    def test_trailing_comma_in_call(self):
        parser = Parser("foo(1,)")
        assert parser.parse_expression().kind == ErrorKind.UNEXPECTED_TOKEN
        assert parser.current.is_symbol(")")

    def test_prototype_missing_name(self):
        parser = Parser("def 1(x) x")
        result = parser.parse_definition()
        assert result.kind == ErrorKind.MALFORMED_PROTOTYPE
        assert result.message == "Expected function name in prototype"
        assert result.error.hint == "found number 1"
        assert parser.current == Token(TokenKind.NUMBER, 1.0)

    def test_prototype_missing_open_paren(self):
        parser = Parser("def foo x")
        result = parser.parse_definition()
        assert result.kind == ErrorKind.MALFORMED_PROTOTYPE
        assert result.message == "Expected '(' in prototype"
        assert parser.current == Token(TokenKind.IDENTIFIER, "x")

    def test_prototype_with_commas(self):
        parser = Parser("def foo(x, y) x")
        result = parser.parse_definition()
        assert result.kind == ErrorKind.MALFORMED_PROTOTYPE
        assert result.message == "Expected ')' in prototype"
        assert isinstance(result.error, MalformedPrototypeError)
        assert parser.current.is_symbol(",")

    def test_extern_missing_close_paren(self):
        result = Parser("extern sin(a").parse_extern()
        assert result.message == "Expected ')' in prototype"

    def test_extern_missing_name(self):
        result = Parser("extern (a)").parse_extern()
        assert result.message == "Expected function name in prototype"

    def test_body_failure_propagates_innermost_error(self):
        parser = Parser("def foo(x) )")
        result = parser.parse_definition()
        assert result.kind == ErrorKind.UNEXPECTED_TOKEN
        assert result.error.location.column == 12
        assert parser.current.is_symbol(")")

    def test_nested_failure_propagates(self):
        result = Parser("1 + (2 * f(3 4))").parse_top_level_expr()
        assert result.kind == ErrorKind.MALFORMED_ARGUMENT_LIST

    def test_failure_has_no_value(self):
        result = Parser(")").parse_expression()
        assert result.value is None
        assert not result

    def test_error_message_format(self):
        result = Parser("foo(1 2)", filename="repl").parse_expression()
        assert str(result.error) == (
            "repl:1:7: error: Expected ')' or ',' in argument list\n"
            "    foo(1 2)\n"
            "          ^\n"
            "hint: separate arguments with ','"
        )

    def test_unwrap_raises(self):
        result = Parser(")").parse_expression()
        with pytest.raises(FrontendSyntaxError):
            result.unwrap()


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestParseExpressionSource:
    """Test the parse_expression_source() helper."""

    def test_parses(self):
        assert expr_str(parse_expression_source("1+2*3")) == "(1 + (2 * 3))"

    def test_custom_table(self):
        expr = parse_expression_source("a/b", precedence={"/": 40})
        assert expr == BinaryExpr("/", var("a"), var("b"))

    def test_raises_on_error(self):
        with pytest.raises(UnclosedParenError) as exc_info:
            parse_expression_source("(a", filename="expr")
        assert exc_info.value.location.filename == "expr"
