"""
Tests for the Expression Evaluator and Symbol Table
===================================================

Covers evaluation of literals, label references and +/- arithmetic, the
unsigned 64-bit range rules, and the append-only label store behind them.
"""

from dataclasses import FrozenInstanceError

import pytest

from binforge.compiler.expressions import ExpressionEvaluator, evaluate
from binforge.compiler.parser import parse_source
from binforge.compiler.symbols import Label, SymbolTable
from binforge.errors import (
    DuplicateLabelError,
    ExpressionError,
    OverflowError as ScriptOverflowError,
    SourceLocation,
    TypeMismatchError,
    UnderflowError,
    UnknownFieldError,
    UnresolvedLabelError,
)


# =============================================================================
# Helpers
# =============================================================================

def expr(text: str):
    """Parse `text` as the offset expression of a dummy statement."""
    return parse_source(f"{text} : x : u8 0")[0].offset


def arg(text: str):
    """Parse `text` as the first argument of a dummy statement."""
    return parse_source(f"0 : x : u8 {text}")[0].args[0]


@pytest.fixture
def symbols() -> SymbolTable:
    table = SymbolTable()
    table.define("first", 0x00, 0x10)
    table.define("second", 0x20, 0x0C)
    return table


# =============================================================================
# Evaluation Tests
# =============================================================================

class TestEvaluate:
    """Test evaluation of each expression form."""

    def test_number(self, symbols):
        assert evaluate(expr("0x1234"), symbols) == 0x1234

    def test_string(self, symbols):
        assert evaluate(arg('"first.bin"'), symbols) == "first.bin"

    def test_label_start(self, symbols):
        assert evaluate(expr("$second.start"), symbols) == 0x20

    def test_label_size(self, symbols):
        assert evaluate(expr("$second.size"), symbols) == 0x0C

    def test_addition(self, symbols):
        assert evaluate(expr("$second.start + $second.size"), symbols) == 0x2C

    def test_subtraction(self, symbols):
        assert evaluate(expr("$second.start - 2"), symbols) == 0x1E

    def test_chain(self, symbols):
        assert evaluate(expr("10 - 3 - 2 + 1"), symbols) == 6

    def test_subtract_to_zero(self, symbols):
        assert evaluate(expr("5 - 5"), symbols) == 0

    def test_sum_at_u64_max(self, symbols):
        assert evaluate(expr("0xFFFFFFFFFFFFFFFE + 1"), symbols) == 2**64 - 1

    def test_evaluator_sees_later_definitions(self):
        """The evaluator reads the live table, not a snapshot."""
        table = SymbolTable()
        evaluator = ExpressionEvaluator(table)
        table.define("late", 7, 1)
        assert evaluator.evaluate(expr("$late.start")) == 7


# =============================================================================
# Error Tests
# =============================================================================

class TestEvaluateErrors:
    """Test failures during evaluation."""

    def test_unresolved_label(self, symbols):
        with pytest.raises(UnresolvedLabelError) as exc_info:
            evaluate(expr("$third.start"), symbols)
        assert exc_info.value.label == "third"

    def test_unresolved_label_suggestion(self, symbols):
        with pytest.raises(UnresolvedLabelError) as exc_info:
            evaluate(expr("$secnd.start"), symbols)
        assert exc_info.value.similar_labels == ["second"]
        assert "did you mean 'second'?" in str(exc_info.value)

    def test_unknown_field(self, symbols):
        with pytest.raises(UnknownFieldError) as exc_info:
            evaluate(expr("$first.end"), symbols)
        assert exc_info.value.field == "end"
        assert exc_info.value.label == "first"

    def test_unresolved_checked_before_field(self, symbols):
        with pytest.raises(UnresolvedLabelError):
            evaluate(expr("$nope.bogus"), symbols)

    def test_underflow(self, symbols):
        with pytest.raises(UnderflowError):
            evaluate(expr("0 - 1"), symbols)

    def test_underflow_with_labels(self, symbols):
        with pytest.raises(UnderflowError):
            evaluate(expr("$first.start - $second.size"), symbols)

    def test_intermediate_underflow(self, symbols):
        """Left-to-right: 1 - 2 fails even though 1 - 2 + 5 would be 4."""
        with pytest.raises(UnderflowError):
            evaluate(expr("1 - 2 + 5"), symbols)

    def test_overflow(self, symbols):
        with pytest.raises(ScriptOverflowError):
            evaluate(expr("0xFFFFFFFFFFFFFFFF + 1"), symbols)

    def test_arithmetic_errors_share_base(self, symbols):
        with pytest.raises(ExpressionError):
            evaluate(expr("0 - 1"), symbols)

    def test_string_operand(self, symbols):
        with pytest.raises(TypeMismatchError):
            evaluate(expr('"a.bin" + 1'), symbols)

    def test_string_right_operand(self, symbols):
        with pytest.raises(TypeMismatchError):
            evaluate(expr('4 - "a.bin"'), symbols)

    def test_evaluate_number_rejects_string(self, symbols):
        with pytest.raises(TypeMismatchError, match="expected a number"):
            ExpressionEvaluator(symbols).evaluate_number(expr('"a.bin"'))

    def test_error_location(self, symbols):
        with pytest.raises(UnresolvedLabelError) as exc_info:
            evaluate(expr("1 + $zz.start"), symbols)
        assert exc_info.value.column == 5


# =============================================================================
# Symbol Table Tests
# =============================================================================

class TestSymbolTable:
    """Test the append-only label store."""

    def test_define_and_lookup(self):
        table = SymbolTable()
        label = table.define("boot", 0x100, 0x40)
        assert table.lookup("boot") is label
        assert label.start == 0x100
        assert label.size == 0x40
        assert label.end == 0x140

    def test_duplicate(self):
        table = SymbolTable()
        first = SourceLocation("layout.txt", 1, 1)
        table.define("boot", 0, 1, first)
        with pytest.raises(DuplicateLabelError) as exc_info:
            table.define("boot", 4, 1, SourceLocation("layout.txt", 3, 1))
        assert exc_info.value.original_location == first
        assert "first defined at layout.txt:1:1" in str(exc_info.value)

    def test_duplicate_leaves_original(self):
        table = SymbolTable()
        table.define("boot", 0, 1)
        with pytest.raises(DuplicateLabelError):
            table.define("boot", 4, 8)
        assert table.lookup("boot").start == 0
        assert table.lookup("boot").size == 1

    def test_lookup_missing(self):
        with pytest.raises(UnresolvedLabelError):
            SymbolTable().lookup("missing")

    def test_contains_and_len(self, symbols):
        assert "first" in symbols
        assert "third" not in symbols
        assert len(symbols) == 2

    def test_iteration_in_definition_order(self):
        table = SymbolTable()
        for name in ("zeta", "alpha", "mid"):
            table.define(name, 0, 0)
        assert [label.name for label in table] == ["zeta", "alpha", "mid"]

    def test_similar_case_insensitive(self, symbols):
        assert symbols.similar("FIRST") == ["first"]

    def test_similar_none(self, symbols):
        assert symbols.similar("completely_different") == []

    def test_labels_are_immutable(self):
        label = Label("a", 0, 1)
        with pytest.raises(FrozenInstanceError):
            label.start = 5
