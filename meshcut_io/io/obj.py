"""
Reader and writer for a subset of the Wavefront OBJ format.

Only ``v``, ``vn``, ``vt`` and ``f`` lines are significant; everything else
(``vp``, groups, materials, ...) is skipped. Face slots follow the
``v[/vt][/vn]`` grammar with one-based indices on disk.

OBJ records are unordered and interleaved, so the reader makes three passes
over the file:

1. count the records and allocate the coordinate and face-size buffers
2. parse coordinates and record the slot count of every face
3. allocate the face-index buffers and extract the indices
"""

import logging
from typing import List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict

from ..common import PathLike
from ..constants import FormatConstants
from ..errors import BoundsError, FormatError
from ..mesh import Mesh
from .line_scanner import LineScanner
from .tokens import parse_floats, parse_int

logger = logging.getLogger(__name__)


class ObjCounts(BaseModel):
    """Number of records of each kind found in an OBJ file."""

    vertices: int = 0
    normals: int = 0
    texcoords: int = 0
    faces: int = 0


class FaceSlots(BaseModel):
    """Zero-based indices of one face; texcoords/normals are None when the file has none."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    vertices: np.ndarray
    texcoords: Optional[np.ndarray]
    normals: Optional[np.ndarray]


def _command(line: str) -> Optional[str]:
    for prefix in (
        FormatConstants.OBJ_VERTEX,
        FormatConstants.OBJ_NORMAL,
        FormatConstants.OBJ_TEXCOORD,
        FormatConstants.OBJ_FACE,
    ):
        if line.startswith(prefix):
            return prefix
    return None


class ObjReader:
    """Static methods for reading OBJ files."""

    @staticmethod
    def read(path: PathLike) -> Mesh:
        """
        Read an OBJ file into a mesh.

        Normal and texture-coordinate arrays (and their face-index arrays)
        are only allocated when the file contains ``vn``/``vt`` lines.

        Args:
            path: Path to the .obj file

        Returns:
            Mesh with vertices, optional normals/texcoords and flattened faces

        Raises:
            FormatError: If a record is malformed or a face is inconsistent
            BoundsError: If a face refers to a missing vertex, normal or texcoord
            OSError: If the file cannot be opened or read
        """
        logger.info("Reading OBJ file %s", path)

        with LineScanner(path) as scanner:
            counts = ObjReader._count_records(scanner)
            logger.debug("%s: %d positions, %d normals, %d texture-coords, %d faces",
                         path, counts.vertices, counts.normals, counts.texcoords, counts.faces)

            vertices = np.empty((counts.vertices, 3), dtype=FormatConstants.COORD_DTYPE)
            normals = np.empty((counts.normals, 3), dtype=FormatConstants.COORD_DTYPE) \
                if counts.normals > 0 else None
            texcoords = np.empty((counts.texcoords, 2), dtype=FormatConstants.COORD_DTYPE) \
                if counts.texcoords > 0 else None
            face_sizes = np.empty(counts.faces, dtype=FormatConstants.INDEX_DTYPE)

            scanner.rewind()
            index_count = ObjReader._read_coordinates_and_sizes(
                scanner, vertices, normals, texcoords, face_sizes)
            logger.debug("%s: %d face indices", path, index_count)

            face_indices = np.empty(index_count, dtype=FormatConstants.INDEX_DTYPE)
            face_texcoord_indices = np.empty(index_count, dtype=FormatConstants.INDEX_DTYPE) \
                if texcoords is not None else None
            face_normal_indices = np.empty(index_count, dtype=FormatConstants.INDEX_DTYPE) \
                if normals is not None else None

            scanner.rewind()
            offset = 0
            face_id = 0
            while True:
                line = scanner.next_meaningful_line()
                if line is None:
                    break
                if _command(line) != FormatConstants.OBJ_FACE:
                    continue
                size = int(face_sizes[face_id])
                slots = ObjReader.parse_face(
                    line, size, counts, path=scanner.path, line_number=scanner.line_number)
                face_indices[offset:offset + size] = slots.vertices
                if face_texcoord_indices is not None:
                    face_texcoord_indices[offset:offset + size] = slots.texcoords
                if face_normal_indices is not None:
                    face_normal_indices[offset:offset + size] = slots.normals
                offset += size
                face_id += 1

        return Mesh(
            vertices=vertices,
            normals=normals,
            texcoords=texcoords,
            face_sizes=face_sizes,
            face_indices=face_indices,
            face_texcoord_indices=face_texcoord_indices,
            face_normal_indices=face_normal_indices,
        )

    @staticmethod
    def _count_records(scanner: LineScanner) -> ObjCounts:
        tally = {prefix: 0 for prefix in (
            FormatConstants.OBJ_VERTEX,
            FormatConstants.OBJ_NORMAL,
            FormatConstants.OBJ_TEXCOORD,
            FormatConstants.OBJ_FACE,
        )}
        while True:
            line = scanner.next_meaningful_line()
            if line is None:
                break
            command = _command(line)
            if command is not None:
                tally[command] += 1

        return ObjCounts(
            vertices=tally[FormatConstants.OBJ_VERTEX],
            normals=tally[FormatConstants.OBJ_NORMAL],
            texcoords=tally[FormatConstants.OBJ_TEXCOORD],
            faces=tally[FormatConstants.OBJ_FACE],
        )

    @staticmethod
    def _read_coordinates_and_sizes(
        scanner: LineScanner,
        vertices: np.ndarray,
        normals: Optional[np.ndarray],
        texcoords: Optional[np.ndarray],
        face_sizes: np.ndarray,
    ) -> int:
        """Fill the coordinate buffers and face sizes; return the total slot count."""
        vertex_id = normal_id = texcoord_id = face_id = 0
        index_count = 0

        while True:
            line = scanner.next_meaningful_line()
            if line is None:
                break
            command = _command(line)
            tokens = line.split()[1:]

            if command == FormatConstants.OBJ_VERTEX:
                vertices[vertex_id] = parse_floats(
                    tokens, 3, f"v{vertex_id}", scanner.path, scanner.line_number)
                vertex_id += 1
            elif command == FormatConstants.OBJ_NORMAL:
                normals[normal_id] = parse_floats(
                    tokens, 3, f"vn{normal_id}", scanner.path, scanner.line_number)
                normal_id += 1
            elif command == FormatConstants.OBJ_TEXCOORD:
                texcoords[texcoord_id] = parse_floats(
                    tokens, 2, f"vt{texcoord_id}", scanner.path, scanner.line_number)
                texcoord_id += 1
            elif command == FormatConstants.OBJ_FACE:
                if len(tokens) < FormatConstants.MIN_FACE_SIZE:
                    raise FormatError(
                        f"Face {face_id} has {len(tokens)} vertices, at least "
                        f"{FormatConstants.MIN_FACE_SIZE} are required",
                        path=scanner.path, line_number=scanner.line_number)
                face_sizes[face_id] = len(tokens)
                index_count += len(tokens)
                face_id += 1

        return index_count

    @staticmethod
    def parse_face(
        line: str,
        expected_size: int,
        counts: ObjCounts,
        path: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> FaceSlots:
        """
        Extract the zero-based indices of one ``f`` line.

        When the file has no texture coordinates at all, the second field of
        a two-field slot (``v/x``) is read as the normal index. The rule is
        file-global, not decided per slot.

        Args:
            line: The face line, including the leading ``f``
            expected_size: Slot count recorded for this face in the sizing pass
            counts: Record counts of the whole file
            path: File path for error messages
            line_number: Line number for error messages

        Returns:
            FaceSlots with one entry per slot

        Raises:
            FormatError: If the slot count differs from expected_size, a field
                is not an integer, or a slot lacks an index the file requires
            BoundsError: If an index is outside its referent array
        """
        slots = line.split()[1:]
        if len(slots) != expected_size:
            raise FormatError(
                f"Face has {len(slots)} vertices when there should be {expected_size}",
                path=path, line_number=line_number)

        have_texcoords = counts.texcoords > 0
        have_normals = counts.normals > 0
        vertex_ids = np.empty(expected_size, dtype=np.int64)
        texcoord_ids = np.empty(expected_size, dtype=np.int64) if have_texcoords else None
        normal_ids = np.empty(expected_size, dtype=np.int64) if have_normals else None

        for slot_id, slot in enumerate(slots):
            fields = slot.split(FormatConstants.OBJ_SLOT_SEPARATOR)
            if len(fields) > 3:
                raise FormatError(f"Face slot {slot!r} has more than three fields",
                                  path=path, line_number=line_number)
            if not have_texcoords:
                if len(fields) == 2:
                    fields = [fields[0], "", fields[1]]
                elif len(fields) == 3 and fields[1]:
                    raise FormatError(
                        f"Face slot {slot!r} refers to a texture coordinate but the file has none",
                        path=path, line_number=line_number)
            vertex_field, texcoord_field, normal_field = (fields + ["", ""])[:3]

            vertex_ids[slot_id] = ObjReader._slot_index(
                vertex_field, "vertex", counts.vertices, slot, path, line_number)
            if texcoord_ids is not None:
                texcoord_ids[slot_id] = ObjReader._slot_index(
                    texcoord_field, "texture coordinate", counts.texcoords, slot, path, line_number)
            if normal_ids is not None:
                normal_ids[slot_id] = ObjReader._slot_index(
                    normal_field, "normal", counts.normals, slot, path, line_number)
            elif normal_field:
                raise BoundsError(f"Face slot {slot!r} refers to a normal but the file has none",
                                  index=parse_int(normal_field, "normal index", path, line_number) - 1,
                                  bound=0, path=path, line_number=line_number)

        return FaceSlots(vertices=vertex_ids, texcoords=texcoord_ids, normals=normal_ids)

    @staticmethod
    def _slot_index(
        field: str,
        what: str,
        bound: int,
        slot: str,
        path: Optional[str],
        line_number: Optional[int],
    ) -> int:
        if not field:
            raise FormatError(f"Face slot {slot!r} has no {what} index",
                              path=path, line_number=line_number)
        index = parse_int(field, f"{what} index", path, line_number) - 1
        if not 0 <= index < bound:
            raise BoundsError(f"Face slot {slot!r} refers to a missing {what}",
                              index=index, bound=bound, path=path, line_number=line_number)
        return index


class ObjWriter:
    """Static methods for writing OBJ files."""

    @staticmethod
    def write(path: PathLike, mesh: Mesh, float_format: str = FormatConstants.FLOAT_FORMAT) -> None:
        """
        Write a mesh to an OBJ file.

        Face slots use ``v``, ``v/vt``, ``v//vn`` or ``v/vt/vn`` depending on
        which face-index arrays the mesh carries. Indices are written one-based.
        """
        logger.info("Writing OBJ file %s", path)
        point_line = " ".join([float_format] * 3) + "\n"
        texcoord_line = " ".join([float_format] * 2) + "\n"

        with open(path, "w", newline="\n") as f:
            for vertex in mesh.vertices:
                f.write(FormatConstants.OBJ_VERTEX + point_line % tuple(vertex))
            if mesh.normals is not None:
                for normal in mesh.normals:
                    f.write(FormatConstants.OBJ_NORMAL + point_line % tuple(normal))
            if mesh.texcoords is not None:
                for texcoord in mesh.texcoords:
                    f.write(FormatConstants.OBJ_TEXCOORD + texcoord_line % tuple(texcoord))

            offset = 0
            for size in mesh.face_sizes:
                size = int(size)
                slots = [
                    ObjWriter._format_slot(mesh, position)
                    for position in range(offset, offset + size)
                ]
                f.write(FormatConstants.OBJ_FACE + " ".join(slots) + "\n")
                offset += size

    @staticmethod
    def _format_slot(mesh: Mesh, position: int) -> str:
        fields: List[str] = [str(int(mesh.face_indices[position]) + 1)]
        if mesh.face_texcoord_indices is not None:
            fields.append(str(int(mesh.face_texcoord_indices[position]) + 1))
        if mesh.face_normal_indices is not None:
            if len(fields) == 1:
                fields.append("")
            fields.append(str(int(mesh.face_normal_indices[position]) + 1))
        return FormatConstants.OBJ_SLOT_SEPARATOR.join(fields)
