"""
binforge Error Hierarchy
========================

This module defines the exception hierarchy for binforge. All exceptions
inherit from BinforgeError, allowing callers to catch every compiler error
with a single except clause if desired.

Exception Hierarchy
-------------------
BinforgeError (base)
└── CompileError (any failure while compiling a layout script)
    ├── LexError - unrecognized character, bad string or number literal
    ├── ParseError - token stream does not match the grammar
    ├── DuplicateLabelError - label defined twice
    ├── UnresolvedLabelError - reference to a label not defined earlier
    ├── UnknownFieldError - label field other than start/size
    ├── ExpressionError - arithmetic failure
    │   ├── TypeMismatchError - string used where a number is required
    │   ├── UnderflowError - subtraction below zero
    │   └── OverflowError - addition beyond 64 bits
    ├── UnknownDirectiveError - directive name not registered
    ├── DirectiveArgumentError - wrong argument count or type
    ├── FileReadError - embedded file cannot be read
    │   └── FileNotFoundError - embedded file does not exist
    └── OutOfRangeError - range outside the assembled output

Every error is terminal: the first one raised aborts the compilation.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class BinforgeError(Exception):
    """
    Base exception for all binforge errors.

        try:
            compile_file("layout.txt")
        except BinforgeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in a layout script, used for error reporting.

    Attributes:
        filename: Name of the script file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Compile Exceptions
# =============================================================================

class CompileError(BinforgeError):
    """
    Base exception for all errors raised while compiling a script.

    Carries enough structure for a front end to render a diagnostic:
    the location, the offending source line, an optional hint and the
    error kind (the exception class name).

    Attributes:
        message: The error description
        location: Where in the script the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The script text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def kind(self) -> str:
        """Short error kind, e.g. 'UnresolvedLabelError'."""
        return type(self).__name__

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    @property
    def column(self) -> Optional[int]:
        return self.location.column if self.location else None

    def attach_source(self, source_line: str) -> None:
        """
        Attach the offending source line after the fact.

        Errors raised deep inside the evaluator or a directive handler only
        know their location; the compiler fills in the line text before the
        error leaves the compilation run.
        """
        if self.source_line is None:
            self.source_line = source_line
            self.args = (self._format_message(),)

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            layout.txt:3:1: error: undefined label 'secnd'
                $secnd.start - 2 : sum : crc16 $second.start, $second.size
                ^
            hint: did you mean 'second'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class LexError(CompileError):
    """
    Lexical error in a layout script.

    Examples:
        - Unrecognized character ('@', ';', ...)
        - Unterminated string literal
        - Malformed number ('0x', '12ab', value above 64 bits)
    """
    pass


class ParseError(CompileError):
    """
    Structural error: the token stream does not match the grammar.

    Attributes:
        expected: Description of what the parser wanted
        found: Description of the token it got instead
    """

    def __init__(
        self,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            f"expected {expected}, found {found}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateLabelError(CompileError):
    """
    Label defined more than once.

    Includes the location of the original definition when available.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnresolvedLabelError(CompileError):
    """
    Reference to a label that no earlier statement defined.

    Scripts are compiled in a single pass, so a reference to a label
    defined further down is reported the same way as a typo. Similar
    label names are suggested when available.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        if not hint and self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownFieldError(CompileError):
    """Label field other than 'start' or 'size'."""

    def __init__(
        self,
        label: str,
        field: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.field = field
        super().__init__(
            f"label '{label}' has no field '{field}'",
            location=location,
            hint="available fields: start, size",
            source_line=source_line,
        )


class ExpressionError(CompileError):
    """
    Error evaluating an expression.

    Offsets are unsigned 64-bit values; any arithmetic leaving that
    range, or mixing strings into arithmetic, is reported through a
    subclass of this error.
    """
    pass


class TypeMismatchError(ExpressionError):
    """A string appeared where a number is required."""
    pass


class UnderflowError(ExpressionError):
    """Subtraction produced a negative value."""
    pass


class OverflowError(ExpressionError):
    """
    Addition exceeded the unsigned 64-bit range.

    Note:
        This is a binforge-specific OverflowError, distinct from the
        Python builtin. It is re-exported from the package root as
        ScriptOverflowError.
    """
    pass


class UnknownDirectiveError(CompileError):
    """Directive name not present in the directive registry."""

    def __init__(
        self,
        directive: str,
        location: Optional[SourceLocation] = None,
        available: Optional[list[str]] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        self.available = available or []

        hint = None
        if self.available:
            hint = f"known directives: {', '.join(sorted(self.available))}"

        super().__init__(
            f"unknown directive '{directive}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DirectiveArgumentError(CompileError):
    """
    Wrong argument count or argument type for a directive.

    Attributes:
        directive: Directive name
        index: Zero-based index of the offending argument
        expected: What the directive wanted
        found: What it got
    """

    def __init__(
        self,
        directive: str,
        index: int,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        self.index = index
        self.expected = expected
        self.found = found
        super().__init__(
            f"{directive}: argument {index + 1}: expected {expected}, found {found}",
            location=location,
            source_line=source_line,
        )


class FileReadError(CompileError):
    """
    An embedded file could not be read.

    Raised when:
    - Permission denied reading file
    - Path is a directory
    - Any other I/O failure
    """

    def __init__(
        self,
        path: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.path = path
        self.reason = reason
        super().__init__(
            f"cannot read '{path}': {reason}",
            location=location,
            source_line=source_line,
        )


class FileNotFoundError(FileReadError):
    """
    An embedded file does not exist.

    Note:
        This is a binforge-specific FileNotFoundError, distinct from the
        Python builtin. It is re-exported from the package root as
        ScriptFileNotFoundError.
    """

    def __init__(
        self,
        path: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            path,
            "no such file",
            location=location,
            source_line=source_line,
        )


class OutOfRangeError(CompileError):
    """
    A range lies outside the assembled output.

    Raised when a checksum covers bytes no earlier statement has written,
    or when a write would grow the output beyond the configured limit.
    """
    pass
