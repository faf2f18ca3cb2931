"""
Mesh interchange I/O for cutting pipelines.

This package reads and writes the buffers that a mesh cutting engine
consumes and produces, including:

1. Mesh class as a Pydantic model with flattened, densely packed face buffers
2. OffReader/OffWriter and ObjReader/ObjWriter for the OFF and OBJ text formats
3. LineScanner for multi-pass scanning of text files
4. PackedSequenceDecoder/Encoder for packed seam vertex sequence buffers
5. SequenceSerializer for saving decoded sequences as OFF pseudo-faces
6. ConnectedComponent for the per-component buffers returned by the engine
"""

from .constants import FormatConstants
from .errors import (
    BoundsError,
    FormatError,
    MeshIOError,
)
from .mesh import (
    FlatMeshBuffers,
    Mesh,
)
from .io import (
    LineScanner,
    ObjReader,
    ObjWriter,
    OffReader,
    OffWriter,
    ScanPosition,
)
from .sequences import (
    IndexSequence,
    PackedSequenceDecoder,
    PackedSequenceEncoder,
    SequenceSerializer,
)
from .component import ConnectedComponent
from .utils import BufferUtils, ElementUtils

__all__ = [
    # Errors
    "MeshIOError",
    "FormatError",
    "BoundsError",
    # Mesh classes
    "Mesh",
    "FlatMeshBuffers",
    # Readers and writers
    "LineScanner",
    "ScanPosition",
    "OffReader",
    "OffWriter",
    "ObjReader",
    "ObjWriter",
    # Sequences
    "IndexSequence",
    "PackedSequenceDecoder",
    "PackedSequenceEncoder",
    "SequenceSerializer",
    # Engine results
    "ConnectedComponent",
    # File format constants
    "FormatConstants",
    # Array and buffer utilities
    "ElementUtils",
    "BufferUtils",
]
