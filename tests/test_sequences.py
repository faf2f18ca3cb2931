"""
Tests for packed sequence decoding, encoding and serialization.
"""
import numpy as np
import pytest
from pydantic import ValidationError

from meshcut_io import (
    BoundsError,
    FormatError,
    IndexSequence,
    OffReader,
    PackedSequenceDecoder,
    PackedSequenceEncoder,
    SequenceSerializer,
)


class TestPackedSequenceDecoder:
    """Test cases for PackedSequenceDecoder."""

    @pytest.fixture(autouse=True)
    def setup(self):
        """Set up a buffer holding one closed and one open sequence."""
        self.buffer = [2, 3, 1, 5, 6, 7, 2, 0, 9, 10]

    def test_decode(self):
        """Test decoding two sequences in buffer order."""
        sequences = PackedSequenceDecoder.decode(self.buffer)

        assert len(sequences) == 2
        np.testing.assert_array_equal(sequences[0].indices, [5, 6, 7])
        assert sequences[0].is_loop
        np.testing.assert_array_equal(sequences[1].indices, [9, 10])
        assert not sequences[1].is_loop

    def test_decode_numpy_array(self):
        """Test decoding a uint32 numpy array."""
        sequences = PackedSequenceDecoder.decode(np.array(self.buffer, dtype=np.uint32))

        assert [s.indices.tolist() for s in sequences] == [[5, 6, 7], [9, 10]]

    def test_decode_bytes(self):
        """Test decoding raw little-endian bytes."""
        raw = np.array(self.buffer, dtype="<u4").tobytes()

        sequences = PackedSequenceDecoder.decode(raw)

        assert sequences == PackedSequenceDecoder.decode(self.buffer)

    def test_decode_no_sequences(self):
        """Test a buffer whose count is zero."""
        assert PackedSequenceDecoder.decode([0]) == []

    def test_decode_empty_sequence(self):
        """Test a sequence of length zero."""
        sequences = PackedSequenceDecoder.decode([1, 0, 0])

        assert len(sequences) == 1
        assert len(sequences[0]) == 0
        assert not sequences[0].is_loop

    def test_decode_preserves_order(self):
        """Test that index order inside a sequence is kept."""
        sequences = PackedSequenceDecoder.decode([1, 4, 1, 9, 2, 7, 0])

        np.testing.assert_array_equal(sequences[0].indices, [9, 2, 7, 0])

    def test_empty_buffer(self):
        """Test that a buffer without a count is rejected."""
        with pytest.raises(FormatError):
            PackedSequenceDecoder.decode([])

    def test_overdeclared_length(self):
        """Test a sequence declaring more indices than the buffer holds."""
        with pytest.raises(FormatError, match="declares 5 indices"):
            PackedSequenceDecoder.decode([1, 5, 0, 1, 2])

    def test_overdeclared_count(self):
        """Test a count larger than the number of sequences present."""
        with pytest.raises(FormatError):
            PackedSequenceDecoder.decode([3, 3, 1, 5, 6, 7, 2, 0, 9, 10])

    def test_truncated_header(self):
        """Test a buffer ending between a length and its loop flag."""
        with pytest.raises(FormatError, match="header"):
            PackedSequenceDecoder.decode([1, 3])

    def test_invalid_loop_flag(self):
        """Test that loop flags other than 0 and 1 are rejected."""
        with pytest.raises(FormatError, match="loop flag 2"):
            PackedSequenceDecoder.decode([1, 2, 2, 0, 1])

    def test_trailing_data(self):
        """Test that elements after the last sequence are rejected."""
        with pytest.raises(FormatError, match="trailing"):
            PackedSequenceDecoder.decode([1, 1, 0, 4, 99])

    def test_partial_bytes(self):
        """Test raw bytes that are not a whole number of elements."""
        raw = np.array(self.buffer, dtype="<u4").tobytes()[:-1]

        with pytest.raises(FormatError):
            PackedSequenceDecoder.decode(raw)

    @pytest.mark.parametrize("buffer", [
        [1, 2, 0, -1, 3],
        [1.0, 2.0, 0.0, 1.0, 3.0],
        [[1, 2], [0, 1]],
        [1, 1, 0, 2 ** 32],
    ])
    def test_invalid_values(self, buffer):
        """Test buffers that are not flat unsigned 32-bit integers."""
        with pytest.raises(FormatError):
            PackedSequenceDecoder.decode(buffer)

    def test_vertex_count_bounds(self):
        """Test that indices are checked against the vertex count when given."""
        PackedSequenceDecoder.decode(self.buffer, vertex_count=11)

        with pytest.raises(BoundsError) as exc_info:
            PackedSequenceDecoder.decode(self.buffer, vertex_count=10)
        assert exc_info.value.index == 10
        assert exc_info.value.bound == 10


class TestPackedSequenceEncoder:
    """Test cases for PackedSequenceEncoder."""

    def test_encode(self):
        """Test the packed layout."""
        sequences = [
            IndexSequence(indices=[5, 6, 7], is_loop=True),
            IndexSequence(indices=[9, 10]),
        ]

        packed = PackedSequenceEncoder.encode(sequences)

        assert packed.dtype == np.uint32
        np.testing.assert_array_equal(packed, [2, 3, 1, 5, 6, 7, 2, 0, 9, 10])

    def test_encode_empty(self):
        """Test encoding no sequences."""
        np.testing.assert_array_equal(PackedSequenceEncoder.encode([]), [0])

    def test_decode_inverts_encode(self):
        """Test that decoding an encoded list gives the same sequences."""
        sequences = [
            IndexSequence(indices=[0, 4, 8, 2], is_loop=True),
            IndexSequence(indices=[], is_loop=False),
            IndexSequence(indices=[3], is_loop=False),
        ]

        assert PackedSequenceDecoder.decode(PackedSequenceEncoder.encode(sequences)) == sequences

    def test_encode_inverts_decode(self):
        """Test that encoding a decoded buffer reproduces the buffer."""
        buffer = [3, 2, 0, 1, 2, 4, 1, 7, 6, 5, 4, 0, 0]

        packed = PackedSequenceEncoder.encode(PackedSequenceDecoder.decode(buffer))

        np.testing.assert_array_equal(packed, buffer)


class TestIndexSequence:
    """Test cases for IndexSequence."""

    def test_defaults(self):
        """Test that sequences are open by default."""
        sequence = IndexSequence(indices=[1, 2, 3])

        assert not sequence.is_loop
        assert len(sequence) == 3
        assert sequence.indices.dtype == np.uint32

    def test_negative_indices(self):
        """Test that negative indices are rejected."""
        with pytest.raises(ValidationError):
            IndexSequence(indices=[0, -1])

    def test_equality(self):
        """Test equality on indices and loop flag."""
        assert IndexSequence(indices=[1, 2], is_loop=True) == IndexSequence(indices=[1, 2], is_loop=True)
        assert IndexSequence(indices=[1, 2], is_loop=True) != IndexSequence(indices=[1, 2])
        assert IndexSequence(indices=[1, 2]) != IndexSequence(indices=[2, 1])


class TestSequenceSerializer:
    """Test cases for SequenceSerializer."""

    @pytest.fixture(autouse=True)
    def setup(self):
        """Set up decoded sequences."""
        self.sequences = PackedSequenceDecoder.decode([2, 3, 1, 5, 6, 7, 2, 0, 9, 10])

    def test_to_ragged(self):
        """Test flattening into sizes and concatenated indices."""
        face_sizes, face_indices = SequenceSerializer.to_ragged(self.sequences)

        np.testing.assert_array_equal(face_sizes, [3, 2])
        np.testing.assert_array_equal(face_indices, [5, 6, 7, 9, 10])

    def test_to_ragged_empty(self):
        """Test flattening no sequences."""
        face_sizes, face_indices = SequenceSerializer.to_ragged([])

        assert len(face_sizes) == 0
        assert len(face_indices) == 0

    def test_write(self, tmp_dir):
        """Test writing sequences as pseudo-faces of a vertex-less OFF file."""
        path = tmp_dir / "seams.txt"

        SequenceSerializer.write(path, self.sequences)

        assert path.read_text() == "OFF\n0 2 0\n3 5 6 7\n2 9 10\n"

    def test_written_file_is_off(self, tmp_dir):
        """Test that sequences of three or more vertices read back as OFF faces."""
        path = tmp_dir / "seams.off"
        sequences = [IndexSequence(indices=[0, 1, 2], is_loop=True)]

        SequenceSerializer.write(path, sequences)

        with pytest.raises(BoundsError):
            # No vertices are written, so every index is out of range
            OffReader.read(path)

    def test_file_name(self):
        """Test that the file name records every loop flag."""
        name = SequenceSerializer.file_name(0, self.sequences)

        assert name == "frag-0-seam-vertices-id0_isLOOP-id1_isOPEN.txt"

    def test_file_name_no_sequences(self):
        """Test the file name of an empty sequence list."""
        assert SequenceSerializer.file_name(3, []) == "frag-3-seam-vertices.txt"

    def test_save(self, tmp_dir):
        """Test writing into a directory under the flag-carrying name."""
        path = SequenceSerializer.save(tmp_dir, 2, self.sequences)

        assert path == tmp_dir / "frag-2-seam-vertices-id0_isLOOP-id1_isOPEN.txt"
        assert path.exists()
        assert path.read_text().startswith("OFF\n0 2 0\n")
