"""
Line-oriented scanning of mesh text files.

The scanner hands out successive meaningful lines (non-empty, not comments)
and can jump back to a remembered position, which lets the readers make
several passes over the same file with a single open handle.
"""

import logging
from typing import BinaryIO, Optional

from pydantic import BaseModel, ConfigDict

from ..common import PathLike
from ..constants import FormatConstants
from ..errors import FormatError

logger = logging.getLogger(__name__)


class ScanPosition(BaseModel):
    """A byte offset in the file and the number of lines before it."""

    model_config = ConfigDict(frozen=True)

    offset: int
    line_number: int


class LineScanner:
    """
    Supplies meaningful lines of a text file.

    The file is opened in binary mode so line endings are not translated;
    trailing ``\\r`` and ``\\n`` are stripped from every line. A leading
    UTF-8 byte order mark is dropped. Use as a context manager so the handle
    is released on every exit path.

    Example:
        >>> with LineScanner("mesh.off") as scanner:
        ...     header = scanner.next_meaningful_line()
        ...     start = scanner.mark()
        ...     scanner.restore(start)
    """

    def __init__(self, path: PathLike, encoding: str = "utf-8-sig"):
        self.path = str(path)
        self.encoding = encoding
        self.line_number = 0
        """Physical 1-based number of the last line read."""
        self._file: BinaryIO = open(path, "rb")
        self._start = ScanPosition(offset=self._file.tell(), line_number=0)

    def __enter__(self) -> "LineScanner":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        self._file.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def next_meaningful_line(self) -> Optional[str]:
        """
        Read up to the next line that is neither empty nor a comment.

        Returns:
            The line without its line terminator, or None at end of file

        Raises:
            FormatError: If the line cannot be decoded as text
        """
        while True:
            raw = self._file.readline()
            if not raw:
                return None
            self.line_number += 1

            raw = raw.rstrip(b"\r\n")
            if not raw:
                continue
            try:
                line = raw.decode(self.encoding)
            except UnicodeDecodeError as e:
                raise FormatError(f"Line is not valid {self.encoding} text: {e}",
                                  path=self.path, line_number=self.line_number)
            if not line or line.startswith(FormatConstants.COMMENT_PREFIX):
                continue
            return line

    def mark(self) -> ScanPosition:
        """Remember the current position so it can be restored later."""
        return ScanPosition(offset=self._file.tell(), line_number=self.line_number)

    def restore(self, position: ScanPosition) -> None:
        """Seek back to a position previously returned by mark()."""
        self._file.seek(position.offset)
        self.line_number = position.line_number

    def rewind(self) -> None:
        """Reset to the start of the file for a fresh pass."""
        logger.debug("Rewinding %s", self.path)
        self.restore(self._start)
