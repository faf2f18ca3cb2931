"""
Exception types raised by the mesh readers, writers and sequence decoder.

I/O failures (missing files, permission errors) are not wrapped: they
propagate as the built-in ``OSError`` family.
"""

from typing import Optional

from .common import PathLike


class MeshIOError(Exception):
    """Base class for all meshcut_io errors."""

    def __init__(
        self,
        message: str,
        path: Optional[PathLike] = None,
        line_number: Optional[int] = None,
    ):
        self.message = message
        self.path = str(path) if path is not None else None
        self.line_number = line_number
        super().__init__(self._format())

    def _detail(self) -> str:
        return self.message

    def _format(self) -> str:
        location = self.path or ""
        if self.line_number is not None:
            location = f"{location}:{self.line_number}" if location else f"line {self.line_number}"
        return f"{location}: {self._detail()}" if location else self._detail()

    def __reduce__(self):
        return type(self), (self.message, self.path, self.line_number)


class FormatError(MeshIOError):
    """Input does not follow the expected grammar or declared counts."""


class BoundsError(MeshIOError):
    """An index lies outside the array it refers to."""

    def __init__(
        self,
        message: str,
        index: int,
        bound: int,
        path: Optional[PathLike] = None,
        line_number: Optional[int] = None,
    ):
        self.index = index
        self.bound = bound
        super().__init__(message, path, line_number)

    def _detail(self) -> str:
        return f"{self.message} (index {self.index}, valid range [0, {self.bound}))"

    def __reduce__(self):
        return type(self), (self.message, self.index, self.bound, self.path, self.line_number)
