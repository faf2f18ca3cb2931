"""
Reader and writer for the OFF polygon mesh format.

    OFF
    <vertex count> <face count> <edge count>
    x y z                      (one line per vertex)
    n i0 i1 ... i(n-1)         (one line per face)
    u v                        (one line per edge, optional)

The reader sizes its buffers before filling them: the face block is scanned
twice, first for the per-face sizes and then, after seeking back, for the
indices themselves.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from ..common import PathLike
from ..constants import FormatConstants
from ..errors import BoundsError, FormatError
from ..mesh import Mesh
from .line_scanner import LineScanner
from .tokens import parse_floats, parse_int, parse_ints, require_line

logger = logging.getLogger(__name__)


def _as_rows(values, columns: int, what: str, path: PathLike) -> np.ndarray:
    """Accept a flat buffer or an (n, columns) array; anything else is a FormatError."""
    array = np.asarray(values)
    if array.ndim == 1 and array.size % columns == 0:
        return array.reshape(-1, columns)
    if array.ndim == 2 and array.shape[1] == columns:
        return array
    raise FormatError(f"{what} array of shape {array.shape} does not hold rows of {columns} values",
                      path=path)


class OffReader:
    """Static methods for reading OFF files."""

    @staticmethod
    def read(path: PathLike) -> Mesh:
        """
        Read an OFF file into a mesh.

        Args:
            path: Path to the .off file

        Returns:
            Mesh with vertices, face_sizes and face_indices

        Raises:
            FormatError: If the header, counts or any record is malformed
            BoundsError: If a face refers to a vertex that does not exist
            OSError: If the file cannot be opened or read
        """
        logger.info("Reading OFF file %s", path)

        with LineScanner(path) as scanner:
            vertex_count, face_count, edge_count = OffReader._read_header(scanner)
            logger.debug("%s: %d vertices, %d faces, %d edges",
                         path, vertex_count, face_count, edge_count)

            # Buffers grow with the lines actually read, never with the declared counts
            rows = []
            for vertex_id in range(vertex_count):
                line = require_line(scanner, "vertex", vertex_count, vertex_id)
                rows.append(parse_floats(
                    line.split(), 3, f"vertex {vertex_id}", scanner.path, scanner.line_number))
            vertices = np.array(rows, dtype=FormatConstants.COORD_DTYPE).reshape(-1, 3)

            faces_start = scanner.mark()

            # Stage A: face sizes only
            sizes = []
            for face_id in range(face_count):
                line = require_line(scanner, "face", face_count, face_id)
                sizes.append(OffReader._parse_face_size(line, face_id, scanner))
            face_sizes = np.array(sizes, dtype=FormatConstants.INDEX_DTYPE)

            index_count = int(np.sum(face_sizes, dtype=np.int64))
            face_indices = np.empty(index_count, dtype=FormatConstants.INDEX_DTYPE)
            logger.debug("%s: %d face indices", path, index_count)

            # Stage B: same lines again, now extracting the indices
            scanner.restore(faces_start)
            offset = 0
            for face_id in range(face_count):
                line = require_line(scanner, "face", face_count, face_id)
                size = int(face_sizes[face_id])
                face_indices[offset:offset + size] = OffReader._parse_face_indices(
                    line, face_id, size, vertex_count, scanner)
                offset += size

        return Mesh(vertices=vertices, face_sizes=face_sizes, face_indices=face_indices)

    @staticmethod
    def _read_header(scanner: LineScanner) -> Tuple[int, int, int]:
        header = scanner.next_meaningful_line()
        if header is None:
            raise FormatError("OFF file header not found", path=scanner.path)
        if FormatConstants.OFF_HEADER not in header:
            raise FormatError(f"Unrecognised OFF file header {header!r}",
                              path=scanner.path, line_number=scanner.line_number)

        counts_line = scanner.next_meaningful_line()
        if counts_line is None:
            raise FormatError("OFF element counts not found", path=scanner.path)
        tokens = counts_line.split()
        if len(tokens) < 2:
            raise FormatError(
                f"Expected vertex, face and edge counts, found {counts_line!r}",
                path=scanner.path, line_number=scanner.line_number)

        counts = [parse_int(token, "element count", scanner.path, scanner.line_number)
                  for token in tokens[:3]]
        if len(counts) == 2:
            counts.append(0)
        if any(count < 0 for count in counts):
            raise FormatError(f"Negative element count in {counts_line!r}",
                              path=scanner.path, line_number=scanner.line_number)
        if any(count > FormatConstants.MAX_ELEMENT_COUNT for count in counts):
            raise FormatError(
                f"Element count in {counts_line!r} exceeds {FormatConstants.MAX_ELEMENT_COUNT}",
                path=scanner.path, line_number=scanner.line_number)
        return counts[0], counts[1], counts[2]

    @staticmethod
    def _parse_face_size(line: str, face_id: int, scanner: LineScanner) -> int:
        tokens = line.split()
        if not tokens:
            raise FormatError(f"Face {face_id} is blank",
                              path=scanner.path, line_number=scanner.line_number)
        size = parse_int(tokens[0], f"face {face_id} size", scanner.path, scanner.line_number)
        if size < FormatConstants.MIN_FACE_SIZE:
            raise FormatError(
                f"Face {face_id} has {size} vertices, at least "
                f"{FormatConstants.MIN_FACE_SIZE} are required",
                path=scanner.path, line_number=scanner.line_number)
        if len(tokens) - 1 < size:
            raise FormatError(
                f"Face {face_id} declares {size} vertices but lists {len(tokens) - 1}",
                path=scanner.path, line_number=scanner.line_number)
        return size

    @staticmethod
    def _parse_face_indices(
        line: str, face_id: int, size: int, vertex_count: int, scanner: LineScanner
    ) -> np.ndarray:
        tokens = line.split()
        declared = parse_int(tokens[0], f"face {face_id} size", scanner.path, scanner.line_number)
        if declared != size:
            raise FormatError(
                f"Face {face_id} size changed between passes: {size} then {declared}",
                path=scanner.path, line_number=scanner.line_number)

        indices = parse_ints(tokens[1:size + 1], f"face {face_id}", scanner.path, scanner.line_number)
        for index in indices:
            if not 0 <= index < vertex_count:
                raise BoundsError(f"Face {face_id} refers to a missing vertex",
                                  index=int(index), bound=vertex_count,
                                  path=scanner.path, line_number=scanner.line_number)
        return indices


class OffWriter:
    """Static methods for writing OFF files."""

    @staticmethod
    def write(path: PathLike, mesh: Mesh, float_format: str = FormatConstants.FLOAT_FORMAT) -> None:
        """Write a mesh's vertices and faces to an OFF file."""
        OffWriter.write_arrays(
            path,
            vertices=mesh.vertices,
            face_indices=mesh.face_indices,
            face_sizes=mesh.face_sizes,
            float_format=float_format,
        )

    @staticmethod
    def write_arrays(
        path: PathLike,
        vertices: Optional[np.ndarray] = None,
        face_indices: Optional[np.ndarray] = None,
        face_sizes: Optional[np.ndarray] = None,
        edges: Optional[np.ndarray] = None,
        float_format: str = FormatConstants.FLOAT_FORMAT,
    ) -> None:
        """
        Write raw arrays in OFF layout.

        Vertices and edges may be omitted, which turns the writer into a
        generic serializer for ragged index records.

        Args:
            path: Output file path
            vertices: Vertex coordinates, shape (n, 3) or flat
            face_indices: Flattened face-vertex indices
            face_sizes: Vertices per face; if None every face is a triangle
            edges: Vertex index pairs, shape (n, 2) or flat
            float_format: printf-style format for each coordinate

        Raises:
            FormatError: If vertices or edges have the wrong shape, or the
                face sizes do not match the index buffer
        """
        vertices = np.zeros((0, 3)) if vertices is None else _as_rows(vertices, 3, "Vertex", path)
        face_indices = np.zeros(0, dtype=np.int64) if face_indices is None \
            else np.asarray(face_indices).reshape(-1)
        edges = np.zeros((0, 2), dtype=np.int64) if edges is None else _as_rows(edges, 2, "Edge", path)

        if face_sizes is None:
            if len(face_indices) % 3 != 0:
                raise FormatError(
                    f"{len(face_indices)} face indices cannot form triangles", path=path)
            face_sizes = np.full(len(face_indices) // 3, 3, dtype=np.int64)
        else:
            face_sizes = np.asarray(face_sizes).reshape(-1)
            total = int(np.sum(face_sizes, dtype=np.int64))
            if total != len(face_indices):
                raise FormatError(
                    f"Face sizes sum to {total} but {len(face_indices)} face indices were given",
                    path=path)

        logger.info("Writing OFF file %s", path)
        vertex_line = " ".join([float_format] * 3) + "\n"

        with open(path, "w", newline="\n") as f:
            f.write(f"{FormatConstants.OFF_HEADER}\n")
            f.write(f"{len(vertices)} {len(face_sizes)} {len(edges)}\n")
            for vertex in vertices:
                f.write(vertex_line % tuple(vertex))

            offset = 0
            for size in face_sizes:
                size = int(size)
                face = face_indices[offset:offset + size]
                f.write(" ".join([str(size)] + [str(int(i)) for i in face]) + "\n")
                offset += size

            for edge in edges:
                f.write(f"{int(edge[0])} {int(edge[1])}\n")
