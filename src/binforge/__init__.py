"""
binforge - Binary Image Layout Compiler
=======================================

binforge stitches binary blobs into a single image from a small declarative
layout script, patching in derived metadata such as checksums. It is meant
for firmware and embedded work where a full build system is overkill.

Main Components
---------------
- **compiler**: Layout script lexer, parser, evaluator and image assembler
- **crc**: Checksum algorithms used by the crc16/crc32 directives
- **cli**: The `binforge` command-line tool

Quick Start
-----------
Compile a script from Python:
    >>> from binforge import Compiler
    >>> compiler = Compiler()
    >>> image = compiler.compile_file("layout.txt")
    >>> compiler.write_binary("image.bin")

Or use the command-line tool:
    $ binforge layout.txt image.bin -m image.map

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from binforge.compiler import (
    Compiler,
    DirectiveContext,
    DirectiveRegistry,
    DirectiveResult,
    Label,
    OutputBuffer,
    SymbolTable,
    compile_file,
    compile_script,
    default_registry,
)
from binforge.errors import (
    BinforgeError,
    CompileError,
    SourceLocation,
    LexError,
    ParseError,
    DuplicateLabelError,
    UnresolvedLabelError,
    UnknownFieldError,
    ExpressionError,
    TypeMismatchError,
    UnderflowError,
    OverflowError as ScriptOverflowError,  # Avoid collision with builtin
    UnknownDirectiveError,
    DirectiveArgumentError,
    FileReadError,
    FileNotFoundError as ScriptFileNotFoundError,  # Avoid collision with builtin
    OutOfRangeError,
)
from binforge.crc import crc16_ibm_sdlc, crc32_iso_hdlc

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "DirectiveContext",
    "DirectiveRegistry",
    "DirectiveResult",
    "Label",
    "OutputBuffer",
    "SymbolTable",
    "compile_file",
    "compile_script",
    "default_registry",
    # Exception hierarchy
    "BinforgeError",
    "CompileError",
    "SourceLocation",
    "LexError",
    "ParseError",
    "DuplicateLabelError",
    "UnresolvedLabelError",
    "UnknownFieldError",
    "ExpressionError",
    "TypeMismatchError",
    "UnderflowError",
    "ScriptOverflowError",
    "UnknownDirectiveError",
    "DirectiveArgumentError",
    "FileReadError",
    "ScriptFileNotFoundError",
    "OutOfRangeError",
    # Checksums
    "crc16_ibm_sdlc",
    "crc32_iso_hdlc",
]
