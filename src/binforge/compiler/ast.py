"""
Layout Script Abstract Syntax Tree
==================================

Node types produced by the parser.

Node Hierarchy
--------------
ASTNode (base)
├── Statement - one script line: offset, label, directive, arguments
└── Expressions
    ├── NumberLiteral - unsigned integer constant
    ├── StringLiteral - string constant (directive arguments only)
    ├── Variable - label field reference ($label.field)
    └── BinaryOp - left-associative + or -

All nodes are frozen dataclasses and carry their source location.
"""

from dataclasses import dataclass, field
from enum import Enum

from binforge.errors import SourceLocation


@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts
    """
    location: SourceLocation


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Expr(ASTNode):
    """Base class for expression nodes."""
    pass


@dataclass(frozen=True)
class NumberLiteral(Expr):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expr):
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class Variable(Expr):
    """
    Reference to a field of an earlier label: $label.field

    Attributes:
        label: Label name
        field: Field name ('start' or 'size' are the valid ones)
    """
    label: str
    field: str

    def __str__(self) -> str:
        return f"${self.label}.{self.field}"


class BinaryOperator(Enum):
    PLUS = "+"
    MINUS = "-"


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: BinaryOperator
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"{self.left} {self.op.value} {self.right}"


# =============================================================================
# Statement Node
# =============================================================================

@dataclass(frozen=True)
class Statement(ASTNode):
    """
    A single script statement.

        offset : label : directive [args]

    Attributes:
        offset: Expression giving the output offset
        label: Name recorded for the directive's output ('_' records nothing)
        directive: Directive name
        args: Argument expressions in source order
    """
    offset: Expr
    label: str
    directive: str
    args: tuple[Expr, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        text = f"{self.offset} : {self.label} : {self.directive}"
        if self.args:
            text += " " + ", ".join(str(arg) for arg in self.args)
        return text
