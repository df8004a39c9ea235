"""
binforge - Layout Compiler Command-Line Interface
=================================================

This module implements the command-line interface for the layout compiler.
It reads a layout script, compiles it and writes the resulting image.

Usage Examples
--------------
Basic compilation:
    $ binforge layout.txt image.bin

With a symbol map:
    $ binforge layout.txt image.bin -m image.map

Capping the image size:
    $ binforge --max-size 64K layout.txt image.bin

Verbose mode:
    $ binforge -v layout.txt image.bin
"""

import logging
import re
from pathlib import Path
from typing import Optional

import click

from binforge import __version__
from binforge.compiler import Compiler
from binforge.cli.errors import handle_cli_exception

# Default output size limit (256 MiB)
DEFAULT_MAX_SIZE = 256 * 1024 * 1024


# =============================================================================
# Size Parameter Type
# =============================================================================

class SizeParamType(click.ParamType):
    """
    Click parameter type for byte sizes.

    Accepts decimal or 0x-prefixed hex, with an optional K or M suffix
    (binary multiples): 4096, 0x1000, 4K, 16M.
    """
    name = "size"

    SIZE_PATTERN = re.compile(r"^(0[xX][0-9A-Fa-f]+|\d+)([kKmM]?)$")
    MULTIPLIERS = {"": 1, "k": 1024, "m": 1024 * 1024}

    def convert(self, value, param, ctx) -> int:
        if isinstance(value, int):
            return value

        match = self.SIZE_PATTERN.match(value.strip())
        if not match:
            self.fail(f"'{value}' is not a size (e.g. 4096, 0x1000, 64K, 16M)", param, ctx)

        number, suffix = match.groups()
        return int(number, 0) * self.MULTIPLIERS[suffix.lower()]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "script",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-m", "--map", "map_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a symbol map listing every label's start, size and end",
)
@click.option(
    "--max-size",
    type=SizeParamType(),
    default=DEFAULT_MAX_SIZE,
    show_default=True,
    help="Largest image the script may produce, in bytes (K/M suffixes allowed)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="binforge")
def main(
    script: Path,
    output: Path,
    map_file: Optional[Path],
    max_size: int,
    verbose: bool,
) -> None:
    """
    Compile a binary image from a layout script.

    SCRIPT is the layout script. OUTPUT is the image file to write.

    Each script line places one fragment at an offset:

    \b
        0x00              : first  : file "first.bin"
        0x20              : second : file "second.bin"
        $second.start - 2 : sum    : crc16 $second.start, $second.size

    Relative file paths are resolved against the script's directory.
    """
    setup_logging(verbose)

    compiler = Compiler(max_size=max_size)

    try:
        if verbose:
            click.echo(f"Compiling {script}...")

        image = compiler.compile_file(script)
        compiler.write_binary(output)

        if map_file:
            compiler.write_map(map_file)
            if verbose:
                click.echo(f"Wrote symbol map to {map_file}")

        if verbose:
            labels = compiler.get_labels()
            click.echo(f"Wrote {len(image)} bytes to {output}")
            click.echo(f"Defined {len(labels)} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Compilation")


if __name__ == "__main__":
    main()
