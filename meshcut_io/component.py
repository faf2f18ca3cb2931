"""
Connected components returned by a mesh cutting engine.

A cutting engine answers a dispatch with a set of connected components, each
queryable for raw buffers: vertex coordinates, triangulated face indices and
a packed buffer of seam vertex sequences. ConnectedComponent gathers those
buffers, validates them and saves them to disk.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .array import IndexArray, PointArray
from .common import PathLike
from .constants import FormatConstants
from .errors import FormatError
from .mesh import Mesh
from .sequences import IndexSequence, PackedBuffer, PackedSequenceDecoder, SequenceSerializer
from .utils import BufferUtils

logger = logging.getLogger(__name__)

RawBuffer = Union[bytes, bytearray, memoryview, np.ndarray, List[float], List[int]]


def _as_array(buffer: RawBuffer, dtype: np.dtype, what: str) -> np.ndarray:
    if BufferUtils.is_bytes(buffer):
        return BufferUtils.from_bytes(buffer, dtype, what)
    return np.asarray(buffer).reshape(-1)


class ConnectedComponent(BaseModel):
    """
    Output mesh of a cut together with its seam sequences.

    Attributes:
        vertices: Vertex positions, shape (n, 3)
        triangle_indices: Flattened triangle corner indices (3 per triangle)
        seams: Ordered seam vertex sequences of this component
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    vertices: PointArray
    triangle_indices: IndexArray
    seams: List[IndexSequence] = Field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        return len(self.triangle_indices) // 3

    @classmethod
    def from_buffers(
        cls,
        vertices: RawBuffer,
        triangle_indices: RawBuffer,
        seam_buffer: Optional[PackedBuffer] = None,
    ) -> "ConnectedComponent":
        """
        Build a component from the raw buffers queried from the engine.

        Byte buffers are read as little-endian float64 (vertices) and uint32
        (indices), matching the double-precision vertex and triangulation
        queries.

        Args:
            vertices: Vertex coordinates, 3 per vertex
            triangle_indices: Triangle corner indices, 3 per triangle
            seam_buffer: Packed seam sequence buffer, if it was queried

        Returns:
            A validated ConnectedComponent

        Raises:
            FormatError: If a buffer is malformed or not a multiple of 3 elements
            BoundsError: If a triangle or seam refers to a missing vertex
        """
        vertex_data = _as_array(vertices, np.dtype("<f8"), "Vertex")
        if len(vertex_data) % 3 != 0:
            raise FormatError(f"Vertex buffer has {len(vertex_data)} values, not a multiple of 3")
        index_data = _as_array(triangle_indices, FormatConstants.WIRE_DTYPE, "Triangle")
        if len(index_data) % 3 != 0:
            raise FormatError(f"Triangle buffer has {len(index_data)} indices, not a multiple of 3")

        vertex_count = len(vertex_data) // 3
        seams = PackedSequenceDecoder.decode(seam_buffer, vertex_count=vertex_count) \
            if seam_buffer is not None else []

        component = cls(vertices=vertex_data, triangle_indices=index_data, seams=seams)
        # Mesh validation checks the triangle indices against the vertices
        component.to_mesh()
        return component

    def to_mesh(self) -> Mesh:
        """Get the component as a triangle mesh."""
        return Mesh(
            vertices=self.vertices,
            face_sizes=np.full(self.triangle_count, 3, dtype=FormatConstants.INDEX_DTYPE),
            face_indices=self.triangle_indices,
        )

    def save(self, path: PathLike, float_format: str = FormatConstants.FLOAT_FORMAT) -> None:
        """Save the triangulated component to an .off or .obj file."""
        self.to_mesh().save(path, float_format=float_format)

    def save_seams(self, directory: PathLike, component_index: int) -> Path:
        """
        Save the seam sequences next to the component.

        The file name records each sequence's loop flag, e.g.
        ``frag-0-seam-vertices-id0_isLOOP.txt``.

        Returns:
            Path of the written file
        """
        path = SequenceSerializer.save(directory, component_index, self.seams)
        logger.info("Saved %d seam sequence(s) of component %d to %s",
                    len(self.seams), component_index, path)
        return path
