"""
Layout Script Parser
====================

This module implements a recursive-descent parser for binforge layout
scripts. It converts the token stream from the lexer into an ordered list
of Statement nodes.

Grammar
-------
```
script    -> statement* EOF
statement -> expr ":" IDENT ":" IDENT args? EOL
args      -> ","? expr ("," expr)*
expr      -> term
term      -> primary (("+" | "-") primary)*
primary   -> NUMBER | STRING | variable
variable  -> "$" IDENT "." IDENT
```

There is a single arithmetic tier, so `term` is a plain left fold:
`a - b + c` parses as `(a - b) + c`.

The comma in front of the first argument is optional, so both spellings
below are accepted:

    0x20 : second : file "second.bin"
    0x20 : second : file,"second.bin"

Example
-------
>>> from binforge.compiler.parser import parse_source
>>> statements = parse_source('0 : first : file "first.bin"')
>>> print(statements[0])
0 : first : file "first.bin"
"""

from typing import Optional

from binforge.errors import ParseError
from binforge.compiler.ast import (
    BinaryOp,
    BinaryOperator,
    Expr,
    NumberLiteral,
    Statement,
    StringLiteral,
    Variable,
)
from binforge.compiler.lexer import Lexer, Token, TokenType


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses a token stream into statements.

    A parse either returns every statement of the script or raises;
    no partial result is ever produced.

    Usage:
        tokens = list(Lexer(source, filename).tokenize())
        statements = Parser(tokens, filename).parse()
    """

    ARITHMETIC_OPERATORS = {
        TokenType.PLUS: BinaryOperator.PLUS,
        TokenType.MINUS: BinaryOperator.MINUS,
    }

    def __init__(self, tokens: list[Token], filename: str = "<input>"):
        self._tokens = tokens
        self._filename = filename
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Parse all tokens into statements.

        Raises:
            ParseError: On any structural mismatch
        """
        statements: list[Statement] = []

        while not self._check(TokenType.EOF):
            statements.append(self._parse_statement())

        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token, synthesizing EOF past the end of the stream."""
        if self._pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else None
            return Token(
                TokenType.EOF, None,
                last.line if last else 1,
                last.column if last else 1,
                last.filename if last else self._filename,
            )
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._current()
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, expected: str) -> Token:
        """Consume a token of the given type or raise ParseError."""
        if not self._check(token_type):
            raise self._error(expected)
        return self._advance()

    def _error(self, expected: str) -> ParseError:
        tok = self._current()
        return ParseError(expected, tok.describe(), tok.location)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """statement -> expr ":" IDENT ":" IDENT args? EOL"""
        location = self._current().location

        offset = self._parse_expression()
        self._expect(TokenType.COLON, "':' after offset")
        label = self._expect(TokenType.IDENT, "label name").value
        self._expect(TokenType.COLON, "':' after label")
        directive = self._expect(TokenType.IDENT, "directive name").value

        args: list[Expr] = []
        if not self._check(TokenType.EOL):
            # Optional comma between the directive name and its first argument
            self._match(TokenType.COMMA)
            args.append(self._parse_expression())
            while self._match(TokenType.COMMA):
                args.append(self._parse_expression())

        self._expect(TokenType.EOL, "end of line")

        return Statement(
            location=location,
            offset=offset,
            label=label,
            directive=directive,
            args=tuple(args),
        )

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expr:
        """term -> primary (("+" | "-") primary)*"""
        left = self._parse_primary()

        while self._check(*self.ARITHMETIC_OPERATORS):
            op_token = self._advance()
            right = self._parse_primary()
            left = BinaryOp(
                location=left.location,
                op=self.ARITHMETIC_OPERATORS[op_token.type],
                left=left,
                right=right,
            )

        return left

    def _parse_primary(self) -> Expr:
        """primary -> NUMBER | STRING | variable"""
        tok = self._current()

        if tok.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(location=tok.location, value=tok.value)

        if tok.type == TokenType.STRING:
            self._advance()
            return StringLiteral(location=tok.location, value=tok.value)

        if tok.type == TokenType.DOLLAR:
            return self._parse_variable()

        raise self._error("expression")

    def _parse_variable(self) -> Variable:
        """variable -> "$" IDENT "." IDENT"""
        dollar = self._advance()
        label = self._expect(TokenType.IDENT, "label name after '$'").value
        self._expect(TokenType.DOT, "'.' after label name")
        field = self._expect(TokenType.IDENT, "field name after '.'").value
        return Variable(location=dollar.location, label=label, field=field)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(tokens: list[Token], filename: str = "<input>") -> list[Statement]:
    """Parse a token list into statements."""
    return Parser(tokens, filename).parse()


def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """Tokenize and parse script text in one step."""
    tokens = list(Lexer(source, filename).tokenize())
    return Parser(tokens, filename).parse()
