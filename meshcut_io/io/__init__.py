"""
Readers and writers for the OFF and OBJ text formats.
"""

from .line_scanner import LineScanner, ScanPosition
from .obj import ObjReader, ObjWriter
from .off import OffReader, OffWriter

__all__ = [
    "LineScanner",
    "ScanPosition",
    "ObjReader",
    "ObjWriter",
    "OffReader",
    "OffWriter",
]
