"""Pytest configuration and shared fixtures for meshcut_io tests."""

import tempfile
from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def tmp_dir():
    """Temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_file(tmp_dir):
    """Write text (or bytes) to a file in the temporary directory and return its path."""
    def _write(name, content):
        path = tmp_dir / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
        return path
    return _write


@pytest.fixture
def cube_vertices():
    """Vertices for a cube of side 10 centred at the origin."""
    return np.array([
        [-5, -5, 5],
        [5, -5, 5],
        [5, 5, 5],
        [-5, 5, 5],
        [-5, -5, -5],
        [5, -5, -5],
        [5, 5, -5],
        [-5, 5, -5]
    ], dtype=np.float64)


@pytest.fixture
def cube_face_indices():
    """Quad faces of the cube, flattened."""
    return np.array([
        0, 1, 2, 3,  # front
        7, 6, 5, 4,  # back
        1, 5, 6, 2,  # right
        0, 3, 7, 4,  # left
        3, 2, 6, 7,  # top
        4, 5, 1, 0   # bottom
    ], dtype=np.uint32)


@pytest.fixture
def cube_face_sizes():
    """Every cube face is a quad."""
    return np.full(6, 4, dtype=np.uint32)


@pytest.fixture
def quad_off_text():
    """A single quad in OFF format."""
    return (
        "OFF\n"
        "4 1 0\n"
        "0.0 0.0 0.0\n"
        "1.0 0.0 0.0\n"
        "1.0 1.0 0.0\n"
        "0.0 1.0 0.0\n"
        "4 0 1 2 3\n"
    )
