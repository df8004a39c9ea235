"""
binforge Compiler - Main Interface
==================================

This module provides the Compiler class, the primary interface for turning
a layout script into a binary image. It coordinates the lexer, parser,
expression evaluator, symbol table, directive registry and output buffer.

Compilation Process
-------------------
A single top-to-bottom pass over the statements:

1. Evaluate the offset expression
2. Look up the directive and evaluate its arguments
3. Run the directive handler
4. Write its bytes into the output buffer at the offset
5. Record the statement's label as {start: offset, size: bytes written}

A statement can only see labels recorded by the statements above it, which
is what makes one pass sufficient. The first error aborts the run; output
is only available once every statement succeeded.

Example Usage
-------------
>>> from binforge.compiler import Compiler
>>> compiler = Compiler(base_dir="firmware/")
>>> image = compiler.compile_string('''
... 0x00 : first  : file "first.bin"
... 0x20 : second : file "second.bin"
... $second.start - 2 : sum : crc16 $second.start, $second.size
... ''')
>>> compiler.write_binary("image.bin")
"""

import builtins
import logging
from pathlib import Path
from typing import Callable, Optional

from binforge.errors import (
    CompileError,
    FileNotFoundError as ScriptFileNotFoundError,
    FileReadError,
)
from binforge.compiler.ast import Statement
from binforge.compiler.buffer import OutputBuffer
from binforge.compiler.directives import (
    DirectiveContext,
    DirectiveRegistry,
    default_registry,
    read_file_bytes,
)
from binforge.compiler.expressions import ExpressionEvaluator
from binforge.compiler.parser import parse_source
from binforge.compiler.symbols import ANONYMOUS_LABEL, Label, SymbolTable

logger = logging.getLogger(__name__)


class Compiler:
    """
    Compiles layout scripts into binary images.

    Each compile call starts from an empty buffer and an empty symbol
    table; nothing is shared between runs. Output and labels are only
    published by a run that succeeds; a failed run leaves both empty.

    Attributes:
        base_dir: Directory relative `file` paths resolve against
        max_size: Largest image the compiler may produce (None for no limit)
    """

    def __init__(
        self,
        base_dir: str | Path | None = None,
        registry: Optional[DirectiveRegistry] = None,
        read_file: Optional[Callable[[Path], bytes]] = None,
        max_size: Optional[int] = None,
    ):
        """
        Initialize the compiler.

        Args:
            base_dir: Directory for relative file paths (default: current
                      directory, or the script's directory for compile_file)
            registry: Directive registry (default: the built-in set)
            read_file: File-reading capability used by the `file` directive
            max_size: Output size limit in bytes
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.max_size = max_size
        self._registry = registry or default_registry()
        self._read_file = read_file or read_file_bytes
        self._output: Optional[bytes] = None
        self._symbols = SymbolTable()

    # =========================================================================
    # Compilation
    # =========================================================================

    def compile_string(
        self,
        source: str,
        filename: str = "<input>",
        base_dir: str | Path | None = None,
    ) -> bytes:
        """
        Compile script text.

        Args:
            source: Script text
            filename: Name used in diagnostics
            base_dir: Overrides the compiler's base directory for this run

        Returns:
            The finished image

        Raises:
            CompileError: On the first error, in source order
        """
        if base_dir is not None:
            directory = Path(base_dir)
        elif self.base_dir is not None:
            directory = self.base_dir
        else:
            directory = Path(".")

        self._output = None
        self._symbols = SymbolTable()
        symbols = SymbolTable()
        # Line numbers count "\n" only, as the lexer does
        lines = [line.rstrip("\r") for line in source.split("\n")]

        try:
            statements = parse_source(source, filename)
            buffer = OutputBuffer(limit=self.max_size)
            evaluator = ExpressionEvaluator(symbols)

            for stmt in statements:
                self._execute(stmt, buffer, evaluator, symbols, directory)

        except CompileError as e:
            if e.location is not None and 0 < e.location.line <= len(lines):
                e.attach_source(lines[e.location.line - 1])
            raise

        self._symbols = symbols
        self._output = buffer.finalize()
        logger.info(
            f"Compiled {filename}: {len(statements)} statements, "
            f"{len(self._output)} bytes"
        )
        return self._output

    def compile_file(self, path: str | Path) -> bytes:
        """
        Compile a script file.

        Relative `file` paths resolve against the script's directory unless
        the compiler was given an explicit base directory.

        Raises:
            FileNotFoundError: The script does not exist
            FileReadError: The script cannot be read or is not UTF-8
            CompileError: On the first compilation error
        """
        path = Path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except builtins.FileNotFoundError:
            raise ScriptFileNotFoundError(str(path))
        except UnicodeDecodeError:
            raise FileReadError(str(path), "not valid UTF-8 text")
        except OSError as e:
            raise FileReadError(str(path), e.strerror or str(e))

        base_dir = self.base_dir if self.base_dir is not None else path.parent
        return self.compile_string(source, str(path), base_dir)

    def _execute(
        self,
        stmt: Statement,
        buffer: OutputBuffer,
        evaluator: ExpressionEvaluator,
        symbols: SymbolTable,
        base_dir: Path,
    ) -> None:
        offset = evaluator.evaluate_number(stmt.offset)
        handler = self._registry.lookup(stmt.directive, stmt.location)
        args = [evaluator.evaluate(arg) for arg in stmt.args]

        context = DirectiveContext(
            directive=stmt.directive,
            location=stmt.location,
            buffer=buffer,
            base_dir=base_dir,
            read_file=self._read_file,
        )
        result = handler(args, context)

        buffer.write(offset, result.data, stmt.location)

        if stmt.label != ANONYMOUS_LABEL:
            symbols.define(stmt.label, offset, result.size, stmt.location)

        logger.debug(
            f"line {stmt.location.line}: {stmt.directive} -> "
            f"{result.size} bytes at 0x{offset:X} ({stmt.label})"
        )

    # =========================================================================
    # Results
    # =========================================================================

    def get_output(self) -> bytes:
        """
        Return the image produced by the last successful compile.

        Raises:
            RuntimeError: If nothing has been compiled successfully
        """
        if self._output is None:
            raise RuntimeError("no successful compilation")
        return self._output

    def get_labels(self) -> list[Label]:
        """Labels from the last compile, in definition order."""
        return list(self._symbols)

    def write_binary(self, filepath: str | Path) -> None:
        """Write the image to a file."""
        output = self.get_output()
        Path(filepath).write_bytes(output)
        logger.info(f"Wrote {len(output)} bytes to {filepath}")

    def format_map(self) -> str:
        """
        Format the label table as a text symbol map.

        One line per label in definition order with start, size and end
        offsets in hexadecimal.
        """
        lines = [
            "; binforge symbol map",
            f"; {'name':<24} {'start':<12} {'size':<12} end",
        ]
        for label in self._symbols:
            lines.append(
                f"{label.name:<26} 0x{label.start:08X}   0x{label.size:08X}   0x{label.end:08X}"
            )
        return "\n".join(lines) + "\n"

    def write_map(self, filepath: str | Path) -> None:
        """Write the symbol map to a file."""
        Path(filepath).write_text(self.format_map(), encoding="utf-8")
        logger.info(f"Wrote symbol map to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_script(
    source: str,
    base_dir: str | Path | None = None,
    filename: str = "<input>",
    **kwargs,
) -> bytes:
    """
    Compile script text to an image.

    Keyword arguments are passed to Compiler (registry, read_file, max_size).
    """
    return Compiler(base_dir=base_dir, **kwargs).compile_string(source, filename)


def compile_file(path: str | Path, **kwargs) -> bytes:
    """Compile a script file to an image."""
    return Compiler(**kwargs).compile_file(path)
