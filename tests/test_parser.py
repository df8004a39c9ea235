# =============================================================================
# test_parser.py - Parser Unit Tests
# =============================================================================
# Tests for the layout script parser.
#
# Test coverage includes:
#   - Statement structure (offset, label, directive, arguments)
#   - Both argument spellings (with and without leading comma)
#   - Left-associative arithmetic
#   - Label references
#   - Structural errors with expected/found details
# =============================================================================

import pytest

from binforge.compiler.ast import (
    BinaryOp,
    BinaryOperator,
    NumberLiteral,
    StringLiteral,
    Variable,
)
from binforge.compiler.lexer import tokenize
from binforge.compiler.parser import Parser, parse, parse_source
from binforge.errors import ParseError


def parse_one(source: str):
    statements = parse_source(source, "<test>")
    assert len(statements) == 1
    return statements[0]


# =============================================================================
# Statement Structure Tests
# =============================================================================

class TestStatements:
    """Test parsing of complete statements."""

    def test_file_statement(self):
        stmt = parse_one('0x20 : second : file "second.bin"')
        assert isinstance(stmt.offset, NumberLiteral)
        assert stmt.offset.value == 0x20
        assert stmt.label == "second"
        assert stmt.directive == "file"
        assert len(stmt.args) == 1
        assert isinstance(stmt.args[0], StringLiteral)
        assert stmt.args[0].value == "second.bin"

    def test_leading_comma_argument_form(self):
        """The 'file,"x"' spelling parses the same as 'file "x"'."""
        with_comma = parse_one('0:first:file,"first.bin"')
        without = parse_one('0 : first : file "first.bin"')
        assert with_comma.args[0].value == without.args[0].value
        assert with_comma.directive == without.directive

    def test_no_arguments(self):
        stmt = parse_one("0 : marker : nothing")
        assert stmt.args == ()

    def test_multiple_arguments(self):
        stmt = parse_one("0x1E : sum : crc16 $second.start, $second.size")
        assert len(stmt.args) == 2
        assert stmt.args[0] == Variable(stmt.args[0].location, "second", "start")
        assert stmt.args[1].label == "second"
        assert stmt.args[1].field == "size"

    def test_multiple_statements_in_order(self):
        statements = parse_source(
            "# layout\n"
            "0 : a : u8 1\n"
            "\n"
            "1 : b : u8 2\n"
            "2 : c : u8 3"
        )
        assert [s.label for s in statements] == ["a", "b", "c"]
        assert [s.location.line for s in statements] == [2, 4, 5]

    def test_empty_script(self):
        assert parse_source("") == []

    def test_comments_only(self):
        assert parse_source("# nothing\n\n   # here\n") == []

    def test_statement_str(self):
        stmt = parse_one("$a.start + 2 : b : crc16 0, 4")
        assert str(stmt) == "$a.start + 2 : b : crc16 0, 4"


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Test expression tree shape."""

    def test_variable_offset(self):
        stmt = parse_one("$first.size : x : u8 0")
        assert isinstance(stmt.offset, Variable)
        assert stmt.offset.label == "first"
        assert stmt.offset.field == "size"

    def test_subtraction(self):
        stmt = parse_one("$second.start - 2 : sum : u8 0")
        expr = stmt.offset
        assert isinstance(expr, BinaryOp)
        assert expr.op == BinaryOperator.MINUS
        assert isinstance(expr.left, Variable)
        assert expr.right.value == 2

    def test_left_associative(self):
        """10 - 2 + 3 is (10 - 2) + 3."""
        expr = parse_one("10 - 2 + 3 : x : u8 0").offset
        assert expr.op == BinaryOperator.PLUS
        assert expr.right.value == 3
        assert isinstance(expr.left, BinaryOp)
        assert expr.left.op == BinaryOperator.MINUS
        assert expr.left.left.value == 10
        assert expr.left.right.value == 2

    def test_expression_arguments(self):
        stmt = parse_one("0 : s : crc16 $a.start + 1, $a.size - 1")
        assert all(isinstance(arg, BinaryOp) for arg in stmt.args)

    def test_string_argument_location(self):
        stmt = parse_one('0 : f : file "x.bin"')
        assert stmt.args[0].location.column == 14


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test structural error reporting."""

    def test_missing_first_colon(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('0 first : file "a.bin"')
        error = exc_info.value
        assert error.expected == "':' after offset"
        assert error.found == "identifier 'first'"
        assert (error.line, error.column) == (1, 3)

    def test_missing_second_colon(self):
        with pytest.raises(ParseError, match="':' after label"):
            parse_source('0 : first file "a.bin"')

    def test_missing_label(self):
        with pytest.raises(ParseError, match="expected label name"):
            parse_source('0 : : file "a.bin"')

    def test_missing_directive(self):
        with pytest.raises(ParseError, match="expected directive name, found end of line"):
            parse_source("0 : a :")

    def test_missing_offset(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source(": a : u8 1")
        assert exc_info.value.expected == "expression"
        assert exc_info.value.found == "':'"

    def test_trailing_comma(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("0 : a : crc16 1,")
        assert exc_info.value.expected == "expression"
        assert exc_info.value.found == "end of line"

    def test_lone_comma(self):
        with pytest.raises(ParseError, match="expected expression"):
            parse_source("0 : a : crc16 ,")

    def test_missing_end_of_line(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('0 : a : file "x" "y"')
        assert exc_info.value.expected == "end of line"
        assert exc_info.value.found == 'string "y"'

    def test_variable_missing_dot(self):
        with pytest.raises(ParseError, match="'.' after label name"):
            parse_source("$a start : b : u8 1")

    def test_variable_missing_field(self):
        with pytest.raises(ParseError, match="field name"):
            parse_source("$a. : b : u8 1")

    def test_dangling_operator(self):
        with pytest.raises(ParseError, match="expected expression"):
            parse_source("1 + : b : u8 1")

    def test_error_on_second_line_aborts(self):
        """No partial result: an error anywhere fails the whole parse."""
        with pytest.raises(ParseError) as exc_info:
            parse_source("0 : a : u8 1\n0 a : u8 1\n2 : c : u8 1")
        assert exc_info.value.line == 2


# =============================================================================
# Parser Object Tests
# =============================================================================

class TestParserObject:

    def test_parse_function_matches_class(self):
        tokens = tokenize("0 : a : u8 1\n")
        assert parse(tokens) == Parser(tokens).parse()

    def test_tokens_without_eof(self):
        """A stream missing EOF still terminates."""
        tokens = [t for t in tokenize("0 : a : u8 1")][:-1]
        statements = Parser(tokens).parse()
        assert len(statements) == 1
