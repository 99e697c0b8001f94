"""
Input helpers for line-relay.
"""

from typing import Iterator, TextIO


def strip_line_ending(line: str) -> str:
    """Remove a trailing ``\\n`` or ``\\r\\n``."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def iter_lines(stream: TextIO) -> Iterator[str]:
    """Yield each line of ``stream`` without its terminator, until EOF."""
    for line in stream:
        yield strip_line_ending(line)
