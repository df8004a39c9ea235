"""
Layout Expression Evaluator
===========================

Reduces expression AST nodes to values against a symbol table.

Values
------
An expression evaluates to either an unsigned 64-bit integer or a string.
Strings are only meaningful as directive arguments (a file path, a text
literal); they can never take part in arithmetic.

Semantics
---------
- NumberLiteral and StringLiteral evaluate to themselves.
- `$label.start` / `$label.size` read the label from the symbol table.
  Only labels defined by earlier statements exist; there is no second
  pass, so forward references fail exactly like misspelled names.
- `a + b` fails with OverflowError when the sum leaves 64 bits.
- `a - b` fails with UnderflowError when the result would be negative.
- Operands are evaluated strictly left to right.

Example Usage
-------------
>>> from binforge.compiler.expressions import ExpressionEvaluator
>>> from binforge.compiler.parser import parse_source
>>> from binforge.compiler.symbols import SymbolTable
>>> symbols = SymbolTable()
>>> symbols.define("second", 0x20, 0x10)
>>> stmt = parse_source("$second.start - 2 : sum : crc16 0, 1")[0]
>>> ExpressionEvaluator(symbols).evaluate(stmt.offset)
30
"""

from typing import Union

from binforge.errors import (
    OverflowError,
    TypeMismatchError,
    UnderflowError,
    UnknownFieldError,
)
from binforge.compiler.ast import (
    BinaryOp,
    BinaryOperator,
    Expr,
    NumberLiteral,
    StringLiteral,
    Variable,
)
from binforge.compiler.lexer import U64_MAX
from binforge.compiler.symbols import SymbolTable


Value = Union[int, str]


class ExpressionEvaluator:
    """
    Evaluates expression trees against a symbol table.

    The evaluator holds a reference to the table, not a copy, so labels
    defined after construction are visible to later evaluations.
    """

    def __init__(self, symbols: SymbolTable):
        self._symbols = symbols

    def evaluate(self, expr: Expr) -> Value:
        """
        Evaluate an expression to a number or string.

        Raises:
            UnresolvedLabelError: Label not defined by an earlier statement
            UnknownFieldError: Field other than start/size
            TypeMismatchError: String operand in arithmetic
            UnderflowError: Subtraction below zero
            OverflowError: Addition beyond 64 bits
        """
        if isinstance(expr, NumberLiteral):
            return expr.value

        if isinstance(expr, StringLiteral):
            return expr.value

        if isinstance(expr, Variable):
            return self._resolve_variable(expr)

        if isinstance(expr, BinaryOp):
            return self._evaluate_binary(expr)

        raise TypeError(f"unknown expression node {type(expr).__name__}")

    def evaluate_number(self, expr: Expr) -> int:
        """Evaluate an expression that must produce a number (e.g. an offset)."""
        value = self.evaluate(expr)
        if not isinstance(value, int):
            raise TypeMismatchError(
                f"expected a number, found string \"{value}\"",
                expr.location,
            )
        return value

    def _resolve_variable(self, expr: Variable) -> int:
        label = self._symbols.lookup(expr.label, expr.location)

        if expr.field == "start":
            return label.start
        if expr.field == "size":
            return label.size

        raise UnknownFieldError(expr.label, expr.field, expr.location)

    def _evaluate_binary(self, expr: BinaryOp) -> int:
        left = self._operand(expr.left, expr)
        right = self._operand(expr.right, expr)

        if expr.op == BinaryOperator.PLUS:
            result = left + right
            if result > U64_MAX:
                raise OverflowError(
                    f"0x{left:X} + 0x{right:X} does not fit in 64 bits",
                    expr.location,
                )
            return result

        if left < right:
            raise UnderflowError(
                f"0x{left:X} - 0x{right:X} is negative",
                expr.location,
                hint="offsets and sizes are unsigned",
            )
        return left - right

    def _operand(self, operand: Expr, parent: BinaryOp) -> int:
        value = self.evaluate(operand)
        if not isinstance(value, int):
            raise TypeMismatchError(
                f"string \"{value}\" cannot be used with '{parent.op.value}'",
                operand.location,
            )
        return value


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate(expr: Expr, symbols: SymbolTable) -> Value:
    """Evaluate a single expression against a symbol table."""
    return ExpressionEvaluator(symbols).evaluate(expr)
