"""
Ordered vertex sequences (seams, contours) and their packed wire format.

A packed sequence buffer is a flat array of unsigned 32-bit integers:

    [count,
     len_1, is_loop_1, idx_1 ... idx_len_1,
     len_2, is_loop_2, idx_1 ... idx_len_2,
     ...]

The loop flag is 0 or 1. Both the order of the sequences and the order of
the indices inside each sequence are significant.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .array import IndexArray
from .common import PathLike
from .constants import FormatConstants
from .errors import BoundsError, FormatError
from .io import OffWriter
from .utils import BufferUtils, ElementUtils

logger = logging.getLogger(__name__)

PackedBuffer = Union[bytes, bytearray, memoryview, np.ndarray, Sequence[int]]


class IndexSequence(BaseModel):
    """
    An ordered chain of vertex indices.

    Attributes:
        indices: Vertex indices in traversal order
        is_loop: Whether the last vertex connects back to the first
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    indices: IndexArray = Field(..., description="Vertex indices in traversal order")
    is_loop: bool = Field(False, description="Whether the sequence closes on itself")

    def __len__(self) -> int:
        return len(self.indices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexSequence):
            return NotImplemented
        return self.is_loop == other.is_loop and np.array_equal(self.indices, other.indices)


class PackedSequenceDecoder:
    """Static methods for decoding packed sequence buffers."""

    @staticmethod
    def as_array(buffer: PackedBuffer) -> np.ndarray:
        """
        Convert a packed buffer to an int64 array.

        Raw bytes are read as little-endian uint32 values.

        Raises:
            FormatError: If the bytes are not a whole number of elements, or
                values are not unsigned 32-bit integers
        """
        if BufferUtils.is_bytes(buffer):
            return BufferUtils.from_bytes(buffer, FormatConstants.WIRE_DTYPE, "Packed").astype(np.int64)

        array = np.asarray(buffer)
        if array.ndim != 1:
            raise FormatError(f"Packed buffer must be one-dimensional, got shape {array.shape}")
        if array.size == 0:
            return array.astype(np.int64)
        if array.dtype.kind not in "iu":
            raise FormatError(f"Packed buffer must hold integers, got dtype {array.dtype}")
        array = array.astype(np.int64)
        if array.min() < 0 or array.max() > np.iinfo(np.uint32).max:
            raise FormatError("Packed buffer values must be unsigned 32-bit integers")
        return array

    @staticmethod
    def decode(buffer: PackedBuffer, vertex_count: Optional[int] = None) -> List[IndexSequence]:
        """
        Decode a packed buffer into its sequences, in order.

        Args:
            buffer: Packed uint32 data as integers, a numpy array or raw bytes
            vertex_count: If given, every index must be below this value

        Returns:
            List of IndexSequence in buffer order

        Raises:
            FormatError: If the buffer is empty, shorter than the lengths it
                declares, has a loop flag other than 0/1, or has trailing data
            BoundsError: If vertex_count is given and an index reaches it

        Example:
            >>> first, second = PackedSequenceDecoder.decode([2, 3, 1, 5, 6, 7, 2, 0, 9, 10])
            >>> first.indices.tolist(), first.is_loop
            ([5, 6, 7], True)
        """
        data = PackedSequenceDecoder.as_array(buffer)
        if len(data) == 0:
            raise FormatError("Packed buffer is empty, expected a sequence count")

        sequence_count = int(data[0])
        cursor = 1
        sequences = []

        for sequence_id in range(sequence_count):
            if cursor + 2 > len(data):
                raise FormatError(
                    f"Packed buffer ends inside the header of sequence {sequence_id} "
                    f"(need {cursor + 2} elements, have {len(data)})")
            length = int(data[cursor])
            loop_flag = int(data[cursor + 1])
            cursor += 2

            if loop_flag not in (0, 1):
                raise FormatError(f"Sequence {sequence_id} has loop flag {loop_flag}, expected 0 or 1")
            if cursor + length > len(data):
                raise FormatError(
                    f"Sequence {sequence_id} declares {length} indices but only "
                    f"{len(data) - cursor} remain in the buffer")

            indices = data[cursor:cursor + length]
            cursor += length

            if vertex_count is not None:
                position = ElementUtils.find_out_of_bounds(indices, vertex_count)
                if position >= 0:
                    raise BoundsError(f"Sequence {sequence_id} refers to a missing vertex",
                                      index=int(indices[position]), bound=vertex_count)

            sequences.append(IndexSequence(indices=indices, is_loop=bool(loop_flag)))

        if cursor != len(data):
            raise FormatError(
                f"Packed buffer has {len(data) - cursor} trailing element(s) after "
                f"{sequence_count} sequence(s)")

        logger.debug("Decoded %d sequence(s) from %d elements", sequence_count, len(data))
        return sequences


class PackedSequenceEncoder:
    """Static methods for building packed sequence buffers."""

    @staticmethod
    def encode(sequences: Sequence[IndexSequence]) -> np.ndarray:
        """
        Encode sequences into the packed layout; inverse of PackedSequenceDecoder.decode.

        Returns:
            uint32 array [count, len, is_loop, indices..., ...]
        """
        parts = [np.array([len(sequences)], dtype=FormatConstants.INDEX_DTYPE)]
        for sequence in sequences:
            parts.append(np.array([len(sequence), int(sequence.is_loop)], dtype=FormatConstants.INDEX_DTYPE))
            parts.append(sequence.indices.astype(FormatConstants.INDEX_DTYPE))
        return np.concatenate(parts)


class SequenceSerializer:
    """
    Persists sequences for inspection by writing each one as a pseudo-face
    of an OFF file that has no vertices.
    """

    @staticmethod
    def to_ragged(sequences: Sequence[IndexSequence]) -> Tuple[np.ndarray, np.ndarray]:
        """
        Flatten sequences into (face_sizes, face_indices).

        Returns:
            Tuple of uint32 arrays: one size per sequence and all indices concatenated
        """
        face_indices, face_sizes = ElementUtils.convert_list_to_flattened(
            [sequence.indices for sequence in sequences])
        return face_sizes, face_indices

    @staticmethod
    def write(path: PathLike, sequences: Sequence[IndexSequence]) -> None:
        """Write sequences as OFF pseudo-faces; loop flags are not part of the file."""
        face_sizes, face_indices = SequenceSerializer.to_ragged(sequences)
        OffWriter.write_arrays(path, face_indices=face_indices, face_sizes=face_sizes)

    @staticmethod
    def file_name(component_index: int, sequences: Sequence[IndexSequence]) -> str:
        """
        Build the file name recording each sequence's loop flag.

        Example:
            >>> SequenceSerializer.file_name(0, sequences)
            'frag-0-seam-vertices-id0_isLOOP-id1_isOPEN.txt'
        """
        flags = "".join(
            FormatConstants.seam_flag(sequence_id, sequence.is_loop)
            for sequence_id, sequence in enumerate(sequences)
        )
        return FormatConstants.SEAM_FILE_TEMPLATE.format(component=component_index, flags=flags)

    @staticmethod
    def save(directory: PathLike, component_index: int, sequences: Sequence[IndexSequence]) -> Path:
        """
        Write sequences into a directory under their flag-carrying file name.

        Returns:
            Path of the written file
        """
        path = Path(directory) / SequenceSerializer.file_name(component_index, sequences)
        SequenceSerializer.write(path, sequences)
        return path
