"""
Numeric field parsing shared by the OFF and OBJ readers.

Every failure is reported with the file path and line number it occurred at.
"""

from typing import List, Optional, Sequence

import numpy as np

from ..errors import FormatError
from .line_scanner import LineScanner


def require_line(scanner: LineScanner, what: str, expected: int, found: int) -> str:
    """
    Read the next meaningful line or fail because the file ended early.

    Args:
        scanner: Scanner positioned before the wanted line
        what: Record kind for the error message (e.g. "vertex")
        expected: Number of records the file declared
        found: Number of records read so far
    """
    line = scanner.next_meaningful_line()
    if line is None:
        raise FormatError(
            f"Unexpected end of file: expected {expected} {what} line(s), found {found}",
            path=scanner.path, line_number=scanner.line_number)
    return line


def parse_floats(
    tokens: Sequence[str],
    count: int,
    what: str,
    path: Optional[str] = None,
    line_number: Optional[int] = None,
) -> List[float]:
    """Parse the first ``count`` tokens as floats; extra tokens are ignored."""
    if len(tokens) < count:
        raise FormatError(f"Expected {count} numeric fields for {what}, found {len(tokens)}",
                          path=path, line_number=line_number)
    try:
        return [float(token) for token in tokens[:count]]
    except ValueError:
        raise FormatError(f"Malformed numeric field for {what}: {' '.join(tokens[:count])!r}",
                          path=path, line_number=line_number)


def parse_int(
    token: str,
    what: str,
    path: Optional[str] = None,
    line_number: Optional[int] = None,
) -> int:
    """Parse a single integer field."""
    try:
        return int(token)
    except ValueError:
        raise FormatError(f"Malformed integer field for {what}: {token!r}",
                          path=path, line_number=line_number)


def parse_ints(
    tokens: Sequence[str],
    what: str,
    path: Optional[str] = None,
    line_number: Optional[int] = None,
) -> np.ndarray:
    """Parse all tokens as integers into an int64 array."""
    return np.array([parse_int(token, what, path, line_number) for token in tokens], dtype=np.int64)
