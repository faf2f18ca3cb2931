"""
Utility modules for meshcut_io.

This package contains helpers for flattened (ragged) element arrays and for
raw byte buffers.
"""

from .buffer_utils import BufferUtils
from .element_utils import ElementUtils

__all__ = [
    "BufferUtils",
    "ElementUtils",
]
