"""
Directive Registry and Built-in Directives
==========================================

A directive is a named operation that turns evaluated arguments into the
bytes a statement writes. Directives form a closed set: the registry is
filled once at startup and is the single place new directives are added.

Handler Contract
----------------
    handler(args: list[int | str], context: DirectiveContext) -> DirectiveResult

`args` are the statement's arguments after evaluation. `context` gives
read access to the output assembled so far, the directory relative paths
are resolved against, and the file-reading capability. The handler
validates its own argument count and types and returns the bytes to write;
the result's size always equals the number of bytes.

Built-in Directives
-------------------
| Directive        | Arguments                  | Output                          |
|------------------|----------------------------|---------------------------------|
| file             | path                       | file contents                   |
| crc16            | start, length              | CRC-16/IBM-SDLC, 2 bytes LE     |
| crc32            | start, length              | CRC-32, 4 bytes LE              |
| fill             | length [, byte]            | `length` copies of byte (def 0) |
| u8/u16/u32/u64   | value                      | little-endian integer           |
| ascii            | text                       | ASCII bytes of text             |

Example
-------
    0x00 : boot  : file "boot.bin"
    0x20 : app   : file "app.bin"
    0x1E : _     : crc16 $app.start, $app.size
"""

import builtins
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from binforge.crc import crc16_ibm_sdlc, crc32_iso_hdlc, crc_to_bytes
from binforge.errors import (
    DirectiveArgumentError,
    FileNotFoundError as ScriptFileNotFoundError,
    FileReadError,
    OutOfRangeError,
    SourceLocation,
    UnknownDirectiveError,
)
from binforge.compiler.buffer import OutputBuffer

logger = logging.getLogger(__name__)

Value = Union[int, str]


# =============================================================================
# Handler Types
# =============================================================================

def read_file_bytes(path: Path) -> bytes:
    """Default file-reading capability: the whole file from disk."""
    return path.read_bytes()


@dataclass
class DirectiveContext:
    """
    Everything a handler may use besides its arguments.

    Attributes:
        directive: Name the handler was invoked under
        location: Location of the statement being executed
        buffer: Output assembled by earlier statements
        base_dir: Directory relative file paths resolve against
        read_file: Capability used to read embedded files
    """
    directive: str
    location: Optional[SourceLocation]
    buffer: OutputBuffer
    base_dir: Path = field(default_factory=Path)
    read_file: Callable[[Path], bytes] = read_file_bytes

    def argument_error(self, index: int, expected: str, found: str) -> DirectiveArgumentError:
        return DirectiveArgumentError(self.directive, index, expected, found, self.location)


@dataclass
class DirectiveResult:
    """
    Bytes produced by a directive.

    Attributes:
        data: Bytes to write at the statement's offset
        size: Bytes occupied, recorded as the label's size
    """
    data: bytes
    size: Optional[int] = None

    def __post_init__(self) -> None:
        if self.size is None:
            self.size = len(self.data)
        elif self.size != len(self.data):
            raise ValueError(
                f"directive result declares {self.size} bytes but carries {len(self.data)}"
            )


DirectiveHandler = Callable[[list[Value], DirectiveContext], DirectiveResult]


# =============================================================================
# Registry
# =============================================================================

class DirectiveRegistry:
    """
    Maps directive names to handlers.

    Usage:
        registry = default_registry()
        handler = registry.lookup("crc16")
    """

    def __init__(self, handlers: Optional[dict[str, DirectiveHandler]] = None):
        self._handlers: dict[str, DirectiveHandler] = {}
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def register(self, name: str, handler: DirectiveHandler) -> None:
        """
        Add a directive.

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._handlers:
            raise ValueError(f"directive '{name}' is already registered")
        self._handlers[name] = handler

    def lookup(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
    ) -> DirectiveHandler:
        """
        Find the handler for a directive name.

        Raises:
            UnknownDirectiveError: If the name is not registered
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownDirectiveError(name, location, available=self.names())
        return handler

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers


# =============================================================================
# Argument Validation Helpers
# =============================================================================

def _describe(value: Value) -> str:
    if isinstance(value, str):
        return f'string "{value}"'
    return f"number 0x{value:X}"


def _expect_count(
    context: DirectiveContext,
    args: list[Value],
    minimum: int,
    maximum: Optional[int] = None,
) -> None:
    """Check the argument count is within [minimum, maximum]."""
    maximum = minimum if maximum is None else maximum
    if minimum <= len(args) <= maximum:
        return

    if minimum == maximum:
        expected = f"{minimum} argument{'s' if minimum != 1 else ''}"
    else:
        expected = f"{minimum} to {maximum} arguments"

    index = len(args) if len(args) < minimum else maximum
    raise context.argument_error(index, expected, f"{len(args)} given")


def _number(context: DirectiveContext, args: list[Value], index: int) -> int:
    value = args[index]
    if not isinstance(value, int):
        raise context.argument_error(index, "number", _describe(value))
    return value


def _string(context: DirectiveContext, args: list[Value], index: int) -> str:
    value = args[index]
    if not isinstance(value, str):
        raise context.argument_error(index, "string", _describe(value))
    return value


# =============================================================================
# Built-in Directives
# =============================================================================

BUILTIN_DIRECTIVES: dict[str, DirectiveHandler] = {}


def builtin(*names: str) -> Callable[[DirectiveHandler], DirectiveHandler]:
    """Register a function as a built-in directive under one or more names."""
    def decorator(handler: DirectiveHandler) -> DirectiveHandler:
        for name in names:
            BUILTIN_DIRECTIVES[name] = handler
        return handler
    return decorator


@builtin("file")
def directive_file(args: list[Value], context: DirectiveContext) -> DirectiveResult:
    """Embed a file. Relative paths resolve against the script's directory."""
    _expect_count(context, args, 1)
    raw_path = _string(context, args, 0)

    path = Path(raw_path)
    if not path.is_absolute():
        path = context.base_dir / path

    logger.debug(f"Embedding {path}")

    try:
        data = context.read_file(path)
    except builtins.FileNotFoundError:
        raise ScriptFileNotFoundError(raw_path, context.location)
    except OSError as e:
        raise FileReadError(raw_path, e.strerror or str(e), context.location)

    return DirectiveResult(bytes(data))


def _checksum_range(args: list[Value], context: DirectiveContext) -> bytes:
    _expect_count(context, args, 2)
    start = _number(context, args, 0)
    length = _number(context, args, 1)
    return context.buffer.read(start, length, context.location)


@builtin("crc16")
def directive_crc16(args: list[Value], context: DirectiveContext) -> DirectiveResult:
    """CRC-16/IBM-SDLC of [start, start + length), written low byte first."""
    data = _checksum_range(args, context)
    return DirectiveResult(crc_to_bytes(crc16_ibm_sdlc(data), 2))


@builtin("crc32")
def directive_crc32(args: list[Value], context: DirectiveContext) -> DirectiveResult:
    """CRC-32 of [start, start + length), written low byte first."""
    data = _checksum_range(args, context)
    return DirectiveResult(crc_to_bytes(crc32_iso_hdlc(data), 4))


@builtin("fill")
def directive_fill(args: list[Value], context: DirectiveContext) -> DirectiveResult:
    """Reserve `length` bytes, all set to `byte` (default 0x00)."""
    _expect_count(context, args, 1, 2)
    length = _number(context, args, 0)
    value = _number(context, args, 1) if len(args) > 1 else 0

    if value > 0xFF:
        raise context.argument_error(1, "byte value 0x00..0xFF", _describe(value))

    limit = context.buffer.limit
    if limit is not None and length > limit:
        raise OutOfRangeError(
            f"fill of 0x{length:X} bytes exceeds the output size limit 0x{limit:X}",
            context.location,
        )

    return DirectiveResult(bytes([value]) * length)


def _integer_writer(width: int) -> DirectiveHandler:
    maximum = (1 << (8 * width)) - 1

    def handler(args: list[Value], context: DirectiveContext) -> DirectiveResult:
        _expect_count(context, args, 1)
        value = _number(context, args, 0)
        if value > maximum:
            raise context.argument_error(
                0, f"value 0..0x{maximum:X}", _describe(value)
            )
        return DirectiveResult(value.to_bytes(width, "little"))

    handler.__doc__ = f"Write a {8 * width}-bit little-endian integer."
    return handler


for _width in (1, 2, 4, 8):
    builtin(f"u{8 * _width}")(_integer_writer(_width))


@builtin("ascii")
def directive_ascii(args: list[Value], context: DirectiveContext) -> DirectiveResult:
    """Write a string's ASCII bytes, without terminator."""
    _expect_count(context, args, 1)
    text = _string(context, args, 0)
    try:
        data = text.encode("ascii")
    except UnicodeEncodeError:
        raise context.argument_error(0, "ASCII text", _describe(text))
    return DirectiveResult(data)


# =============================================================================
# Convenience Functions
# =============================================================================

def default_registry(extra: Optional[Iterable[tuple[str, DirectiveHandler]]] = None) -> DirectiveRegistry:
    """
    Create a registry holding the built-in directives.

    Args:
        extra: Additional (name, handler) pairs to register

    Returns:
        A new, independent DirectiveRegistry
    """
    registry = DirectiveRegistry(BUILTIN_DIRECTIVES)
    for name, handler in extra or ():
        registry.register(name, handler)
    return registry
