"""
Layout Script Compiler
======================

Main Components
---------------
- **Lexer**: Tokenizes script text
- **Parser**: Parses tokens into statements
- **ExpressionEvaluator**: Evaluates offset and argument expressions
- **SymbolTable**: Append-only label store
- **DirectiveRegistry**: Directive name to handler mapping
- **OutputBuffer**: Zero-filled, growing output image
- **Compiler**: Runs the single compilation pass

Script Syntax
-------------
One statement per line:

    offset : label : directive [arg, arg, ...]

    # Two blobs and a checksum of the second one just in front of it
    0x00              : first  : file "first.bin"
    0x20              : second : file "second.bin"
    $second.start - 2 : sum    : crc16 $second.start, $second.size
"""

from binforge.compiler.compiler import Compiler, compile_file, compile_script
from binforge.compiler.lexer import Lexer, Token, TokenType, tokenize
from binforge.compiler.parser import Parser, parse, parse_source
from binforge.compiler.ast import (
    BinaryOp,
    BinaryOperator,
    Expr,
    NumberLiteral,
    Statement,
    StringLiteral,
    Variable,
)
from binforge.compiler.expressions import ExpressionEvaluator, evaluate
from binforge.compiler.symbols import ANONYMOUS_LABEL, Label, SymbolTable
from binforge.compiler.directives import (
    BUILTIN_DIRECTIVES,
    DirectiveContext,
    DirectiveRegistry,
    DirectiveResult,
    default_registry,
)
from binforge.compiler.buffer import OutputBuffer

__all__ = [
    "Compiler",
    "compile_file",
    "compile_script",
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    "Parser",
    "parse",
    "parse_source",
    "BinaryOp",
    "BinaryOperator",
    "Expr",
    "NumberLiteral",
    "Statement",
    "StringLiteral",
    "Variable",
    "ExpressionEvaluator",
    "evaluate",
    "ANONYMOUS_LABEL",
    "Label",
    "SymbolTable",
    "BUILTIN_DIRECTIVES",
    "DirectiveContext",
    "DirectiveRegistry",
    "DirectiveResult",
    "default_registry",
    "OutputBuffer",
]
