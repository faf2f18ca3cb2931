"""
Helpers for raw byte buffers returned by a cutting engine.
"""

from typing import Any

import numpy as np

from ..errors import FormatError


class BufferUtils:
    """Utility class for reading typed arrays out of raw bytes."""

    BYTES_TYPES = (bytes, bytearray, memoryview)

    @staticmethod
    def is_bytes(buffer: Any) -> bool:
        """Check if a buffer is raw bytes rather than an array or sequence."""
        return isinstance(buffer, BufferUtils.BYTES_TYPES)

    @staticmethod
    def from_bytes(buffer: Any, dtype: Any, what: str) -> np.ndarray:
        """
        Read a flat array of the given dtype from raw bytes.

        Args:
            buffer: bytes, bytearray or memoryview
            dtype: Element type, including its byte order (e.g. "<u4")
            what: Buffer name for the error message

        Returns:
            Read-only 1D array viewing the bytes

        Raises:
            FormatError: If the byte count is not a whole number of elements
        """
        dtype = np.dtype(dtype)
        raw = bytes(buffer)
        if len(raw) % dtype.itemsize != 0:
            raise FormatError(f"{what} buffer has {len(raw)} bytes, not a multiple of {dtype.itemsize}")
        return np.frombuffer(raw, dtype=dtype)
