"""
Tests for the exception hierarchy and error messages.
"""
import pickle
from pathlib import Path

from meshcut_io import BoundsError, FormatError, MeshIOError


class TestErrors:
    """Test error formatting and inheritance."""

    def test_hierarchy(self):
        """Test that both error kinds share a base class."""
        assert issubclass(FormatError, MeshIOError)
        assert issubclass(BoundsError, MeshIOError)
        assert not issubclass(BoundsError, ValueError)

    def test_message_with_location(self):
        """Test that the path and line number prefix the message."""
        error = FormatError("bad header", path=Path("mesh.off"), line_number=3)

        assert str(error) == "mesh.off:3: bad header"
        assert error.path == "mesh.off"
        assert error.message == "bad header"

    def test_message_with_line_only(self):
        """Test a location without a path."""
        assert str(FormatError("bad face", line_number=9)) == "line 9: bad face"

    def test_message_without_location(self):
        """Test a bare message."""
        assert str(FormatError("empty buffer")) == "empty buffer"

    def test_bounds_message(self):
        """Test that bounds errors report the index and the valid range."""
        error = BoundsError("Face 0 refers to a missing vertex", index=7, bound=4, path="a.off")

        assert error.index == 7
        assert error.bound == 4
        assert str(error) == "a.off: Face 0 refers to a missing vertex (index 7, valid range [0, 4))"
        assert error.message == "Face 0 refers to a missing vertex"

    def test_pickle_format_error(self):
        """Test that format errors survive pickling with their location."""
        error = FormatError("bad header", path="mesh.off", line_number=3)

        restored = pickle.loads(pickle.dumps(error))

        assert type(restored) is FormatError
        assert str(restored) == str(error)
        assert restored.path == "mesh.off"
        assert restored.line_number == 3

    def test_pickle_bounds_error(self):
        """Test that bounds errors survive pickling with index and bound."""
        error = BoundsError("Face 0 refers to a missing vertex", index=7, bound=4,
                            path="a.off", line_number=6)

        restored = pickle.loads(pickle.dumps(error))

        assert type(restored) is BoundsError
        assert str(restored) == str(error)
        assert restored.index == 7
        assert restored.bound == 4
        assert restored.line_number == 6
