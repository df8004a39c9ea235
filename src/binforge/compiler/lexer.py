"""
Layout Script Lexer
===================

This module implements the lexer (tokenizer) for binforge layout scripts.
It converts script text into a stream of tokens that the parser consumes.

Token Types
-----------
- IDENT: Label names, directive names, label fields
- NUMBER: Decimal (123) or hexadecimal (0x7F) unsigned 64-bit integers
- STRING: Double-quoted text ("first.bin"), no escape sequences
- Punctuation: $ . : , + -
- EOL: End of a statement line
- EOF: End of input

Comments and Blank Lines
------------------------
"#" starts a comment running to the end of the line. Blank lines and
comment-only lines produce no tokens at all, not even EOL, so the parser
only ever sees complete statements. A final statement without a trailing
newline still receives an EOL before EOF.

Example
-------
>>> from binforge.compiler.lexer import Lexer
>>> lexer = Lexer('0x20 : second : file "second.bin"', "layout.txt")
>>> for token in lexer.tokenize():
...     print(token)
Token(NUMBER, 0x20, 1:1)
Token(COLON, ':', 1:6)
Token(IDENT, 'second', 1:8)
Token(COLON, ':', 1:15)
Token(IDENT, 'file', 1:17)
Token(STRING, 'second.bin', 1:22)
Token(EOL, 1:34)
Token(EOF, 1:34)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from binforge.errors import LexError, SourceLocation


# Largest value a NUMBER token may carry
U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the layout script language."""

    # Structural tokens
    EOL = auto()        # End of statement line
    EOF = auto()        # End of input

    # Values
    IDENT = auto()      # Labels, directives, fields
    NUMBER = auto()     # Numeric literal (decimal or 0x hex)
    STRING = auto()     # Double-quoted string "..."

    # Operators
    PLUS = auto()       # +
    MINUS = auto()      # -

    # Delimiters
    DOLLAR = auto()     # $ (label reference prefix)
    DOT = auto()        # . (label field separator)
    COLON = auto()      # :
    COMMA = auto()      # ,


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the script.

    Attributes:
        type: The TokenType classification
        value: Lexeme text, the parsed int for NUMBER, the unquoted text
               for STRING, None for EOL/EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the script file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, 0x{self.value:X}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def describe(self) -> str:
        """Human-readable description used in parse errors."""
        if self.type == TokenType.EOL:
            return "end of line"
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.STRING:
            return f'string "{self.value}"'
        if self.type == TokenType.NUMBER:
            return f"number {self.value}"
        if self.type == TokenType.IDENT:
            return f"identifier '{self.value}'"
        return f"'{self.value}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes layout script text.

    The lexer holds no state beyond the text it was constructed with;
    each call to tokenize() starts from the beginning.

    Usage:
        lexer = Lexer(script_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The script text being tokenized
        filename: Name of the script file (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    SINGLE_CHAR_TOKENS = {
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "$": TokenType.DOLLAR,
        ".": TokenType.DOT,
        ":": TokenType.COLON,
        ",": TokenType.COMMA,
    }

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the script text.

        Yields:
            Token objects, ending with EOF

        Raises:
            LexError: If invalid syntax is encountered
        """
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0
        self._line_has_tokens = False

        while not self._at_end():
            char = self._peek()

            if char in " \t\r":
                self._advance()
                continue

            if char == "#":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "\n":
                line, column = self._line, self._column
                self._advance()
                if self._line_has_tokens:
                    self._line_has_tokens = False
                    yield Token(TokenType.EOL, None, line, column, self.filename)
                continue

            token = self._scan_token()
            self._line_has_tokens = True
            yield token

        if self._line_has_tokens:
            yield self._make_token(TokenType.EOL, None)
        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> LexError:
        """Create a LexError at the given (or current) position."""
        location = SourceLocation(
            self.filename, line or self._line, column or self._column
        )
        return LexError(message, location, source_line=self._current_line())

    def _current_line(self) -> str:
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end].rstrip("\r")

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char == '"':
            return self._scan_string(start_line, start_column)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(
                self.SINGLE_CHAR_TOKENS[char],
                char,
                start_line,
                start_column,
            )

        raise self._error(f"unexpected character '{char}'")

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """Identifiers start with a letter or underscore."""
        chars = []
        # Note: Must check for non-empty string first because '' in 'string' is True in Python
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        return self._make_token(TokenType.IDENT, "".join(chars), start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """
        Scan a decimal or 0x-prefixed hexadecimal number.

        A digit run running straight into letters ("12ab", "0x1G") is a
        malformed number rather than a number followed by an identifier.
        """
        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance()  # consume 0
            self._advance()  # consume x
            digits = self._take(string.hexdigits)
            if not digits:
                raise self._error("expected hexadecimal digits after '0x'",
                                  start_line, start_column)
            base = 16
        else:
            digits = self._take(string.digits)
            base = 10

        if self._peek() and self._peek() in self.IDENT_CHARS:
            raise self._error(
                f"malformed number literal '{self._lexeme_from(start_column)}'",
                start_line, start_column,
            )

        value = int(digits, base)
        if value > U64_MAX:
            raise self._error("number literal does not fit in 64 bits",
                              start_line, start_column)

        return self._make_token(TokenType.NUMBER, value, start_line, start_column)

    def _take(self, allowed: str) -> str:
        chars = []
        # Note: Must check for non-empty string first because '' in 'string' is True in Python
        while self._peek() and self._peek() in allowed:
            chars.append(self._advance())
        return "".join(chars)

    def _lexeme_from(self, start_column: int) -> str:
        """Scanned text plus any trailing identifier characters, for messages."""
        start = self._line_start_pos + start_column - 1
        end = self._pos
        while end < len(self.source) and self.source[end] in self.IDENT_CHARS:
            end += 1
        return self.source[start:end]

    def _scan_string(self, start_line: int, start_column: int) -> Token:
        """Scan a double-quoted string. No escape processing."""
        self._advance()  # consume opening "

        chars = []
        while not self._at_end() and self._peek() != "\n":
            char = self._advance()
            if char == '"':
                return self._make_token(
                    TokenType.STRING,
                    "".join(chars),
                    start_line,
                    start_column,
                )
            chars.append(char)

        raise self._error("unterminated string literal", start_line, start_column)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize script text into a list ending with an EOF token."""
    return list(Lexer(source, filename).tokenize())
