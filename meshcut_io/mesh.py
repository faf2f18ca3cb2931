"""
Polygon mesh with flattened, densely packed buffers.

This module provides:
1. Mesh class holding vertex, normal and texture-coordinate arrays plus
   ragged faces stored as face sizes and flattened face-index buffers
2. FlatMeshBuffers, the request-side layout handed to a cutting engine
3. Loading and saving through the OFF and OBJ readers/writers

Faces are stored in two parts: ``face_sizes`` (one entry per face) and a
single ``face_indices`` buffer whose length equals ``sum(face_sizes)``.
Optional ``face_texcoord_indices`` and ``face_normal_indices`` run parallel
to ``face_indices``. All indices are zero-based.
"""

from pathlib import Path
from typing import ClassVar, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .array import FloatArray, IndexArray, PointArray, TexCoordArray
from .common import PathLike
from .constants import FormatConstants
from .errors import BoundsError, FormatError
from .utils import ElementUtils


def _empty_indices() -> np.ndarray:
    return np.zeros(0, dtype=FormatConstants.INDEX_DTYPE)


class FlatMeshBuffers(BaseModel):
    """
    Flattened mesh buffers in the layout a cutting engine's dispatch call takes.

    Attributes:
        vertices: Flat coordinates (x0, y0, z0, x1, ...), length 3 * vertex_count
        face_indices: Flattened face-vertex indices
        face_sizes: Number of vertices per face
        vertex_count: Number of vertices
        face_count: Number of faces
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    vertices: FloatArray
    face_indices: IndexArray
    face_sizes: IndexArray
    vertex_count: int
    face_count: int


class Mesh(BaseModel):
    """
    A Pydantic model representing a polygon mesh.

    Vertices, normals and texture coordinates are identified by their row.
    Faces may mix polygon sizes; each must have at least three vertices when
    read from disk.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _AUX_INDEX_FIELDS: ClassVar[Dict[str, str]] = {
        "face_texcoord_indices": "texcoords",
        "face_normal_indices": "normals",
    }

    vertices: PointArray = Field(
        ...,
        description="Vertex positions, shape (n, 3)",
    )
    normals: Optional[PointArray] = Field(
        None,
        description="Vertex normals, shape (n, 3)",
    )
    texcoords: Optional[TexCoordArray] = Field(
        None,
        description="Texture coordinates, shape (n, 2)",
    )
    face_sizes: IndexArray = Field(
        default_factory=_empty_indices,
        description="Number of vertices of each face",
    )
    face_indices: IndexArray = Field(
        default_factory=_empty_indices,
        description="Flattened face-vertex indices",
    )
    face_texcoord_indices: Optional[IndexArray] = Field(
        None,
        description="Flattened face-vertex texture-coordinate indices, parallel to face_indices",
    )
    face_normal_indices: Optional[IndexArray] = Field(
        None,
        description="Flattened face-vertex normal indices, parallel to face_indices",
    )

    @property
    def vertex_count(self) -> int:
        """Get the number of vertices."""
        return len(self.vertices)

    @property
    def normal_count(self) -> int:
        """Get the number of normals."""
        return len(self.normals) if self.normals is not None else 0

    @property
    def texcoord_count(self) -> int:
        """Get the number of texture coordinates."""
        return len(self.texcoords) if self.texcoords is not None else 0

    @property
    def face_count(self) -> int:
        """Get the number of faces."""
        return len(self.face_sizes)

    @property
    def index_count(self) -> int:
        """Get the number of face-vertex indices."""
        return len(self.face_indices)

    @property
    def face_offsets(self) -> np.ndarray:
        """Start position of each face inside face_indices."""
        return ElementUtils.compute_offsets(self.face_sizes)

    @property
    def is_uniform_faces(self) -> bool:
        """Check if all faces have the same number of vertices."""
        return ElementUtils.is_uniform_elements(self.face_sizes)

    def get_face(self, face_id: int) -> np.ndarray:
        """Get the vertex indices of one face."""
        if not 0 <= face_id < self.face_count:
            raise IndexError(f"Face {face_id} out of range for mesh with {self.face_count} faces")
        offset = int(self.face_offsets[face_id])
        return self.face_indices[offset:offset + int(self.face_sizes[face_id])]

    def get_faces(self) -> List[List[int]]:
        """
        Get face indices in their original polygon structure.

        Returns:
            List of lists where each sublist is one face
        """
        return ElementUtils.get_element_structure(self.face_indices, self.face_sizes)

    @model_validator(mode="after")
    def validate_arrays(self) -> "Mesh":
        """
        Check the ragged-array invariants and index bounds.

        Length mismatches are reported as validation errors; indices that
        point outside their referent array raise BoundsError.
        """
        total = int(np.sum(self.face_sizes, dtype=np.int64))
        if total != len(self.face_indices):
            raise ValueError(
                f"face_sizes sum to {total} but face_indices has {len(self.face_indices)} entries")

        for field_name in self._AUX_INDEX_FIELDS:
            indices = getattr(self, field_name)
            if indices is not None and len(indices) != len(self.face_indices):
                raise ValueError(
                    f"{field_name} has {len(indices)} entries, expected {len(self.face_indices)}")

        position = ElementUtils.find_out_of_bounds(self.face_indices, self.vertex_count)
        if position >= 0:
            raise BoundsError(
                f"Face vertex index at position {position} is out of range",
                index=int(self.face_indices[position]),
                bound=self.vertex_count,
            )

        for field_name, referent_name in self._AUX_INDEX_FIELDS.items():
            indices = getattr(self, field_name)
            if indices is None:
                continue
            referent = getattr(self, referent_name)
            bound = len(referent) if referent is not None else 0
            position = ElementUtils.find_out_of_bounds(indices, bound)
            if position >= 0:
                raise BoundsError(
                    f"Face {referent_name} index at position {position} is out of range",
                    index=int(indices[position]),
                    bound=bound,
                )

        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mesh):
            return NotImplemented
        for name in type(self).model_fields:
            mine, theirs = getattr(self, name), getattr(other, name)
            if mine is None or theirs is None:
                if mine is not theirs:
                    return False
            elif not np.array_equal(mine, theirs):
                return False
        return True

    def to_flat_buffers(self) -> FlatMeshBuffers:
        """Get vertices and faces as flat buffers for a dispatch call."""
        return FlatMeshBuffers(
            vertices=self.vertices.reshape(-1),
            face_indices=self.face_indices,
            face_sizes=self.face_sizes,
            vertex_count=self.vertex_count,
            face_count=self.face_count,
        )

    @staticmethod
    def load(path: PathLike) -> "Mesh":
        """
        Load a mesh from an OFF or OBJ file.

        Args:
            path: File path; the suffix selects the reader

        Returns:
            The parsed mesh

        Raises:
            FormatError: If the suffix is unknown or the file is malformed
            BoundsError: If a face refers to a missing vertex, normal or texcoord
            OSError: If the file cannot be opened or read
        """
        from .io import ObjReader, OffReader

        suffix = Path(path).suffix.lower()
        if suffix == ".off":
            return OffReader.read(path)
        if suffix == ".obj":
            return ObjReader.read(path)
        raise FormatError(f"Unsupported mesh file extension '{suffix}'", path=path)

    def save(self, path: PathLike, float_format: str = FormatConstants.FLOAT_FORMAT) -> None:
        """
        Save the mesh to an OFF or OBJ file.

        Normals and texture coordinates are only written to OBJ files.

        Example:
            >>> mesh.save("cube.off")
            >>> mesh.save("cube.obj")
        """
        from .io import ObjWriter, OffWriter

        suffix = Path(path).suffix.lower()
        if suffix == ".off":
            OffWriter.write(path, self, float_format=float_format)
        elif suffix == ".obj":
            ObjWriter.write(path, self, float_format=float_format)
        else:
            raise FormatError(f"Unsupported mesh file extension '{suffix}'", path=path)
