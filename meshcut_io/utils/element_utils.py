"""
Helpers for ragged element arrays.

A ragged collection (faces of varying size, vertex sequences of varying
length) is stored as one flattened index buffer plus a parallel array of
per-element sizes. Element i occupies the window starting at the running sum
of all prior sizes.
"""

from typing import List, Sequence, Tuple

import numpy as np

from ..constants import FormatConstants


class ElementUtils:
    """Utility class for flattened element arrays."""

    @staticmethod
    def compute_offsets(sizes: np.ndarray) -> np.ndarray:
        """
        Compute the start offset of every element.

        Args:
            sizes: Number of indices per element

        Returns:
            Array of the same length as sizes with each element's first index position
        """
        sizes = np.asarray(sizes, dtype=np.int64)
        if len(sizes) == 0:
            return np.zeros(0, dtype=np.int64)
        return np.concatenate([[0], np.cumsum(sizes[:-1])]).astype(np.int64)

    @staticmethod
    def is_uniform_elements(sizes: np.ndarray) -> bool:
        """Check if all elements have the same number of indices."""
        return len(sizes) == 0 or bool(np.all(sizes == sizes[0]))

    @staticmethod
    def get_element_structure(indices: np.ndarray, sizes: np.ndarray) -> List[List[int]]:
        """
        Split a flattened index buffer back into its elements.

        Args:
            indices: Flattened element indices
            sizes: Number of indices per element

        Returns:
            List of lists where each sublist holds one element's indices

        Raises:
            ValueError: If sizes do not add up to the length of indices
        """
        total = int(np.sum(sizes, dtype=np.int64))
        if total != len(indices):
            raise ValueError(
                f"Element sizes sum to {total} but {len(indices)} indices were given")

        elements = []
        offset = 0
        for size in sizes:
            size = int(size)
            elements.append([int(i) for i in indices[offset:offset + size]])
            offset += size
        return elements

    @staticmethod
    def convert_list_to_flattened(elements: Sequence[Sequence[int]]) -> Tuple[np.ndarray, np.ndarray]:
        """
        Flatten a list of index lists.

        Args:
            elements: Sequence of index sequences

        Returns:
            Tuple of (indices, sizes) as uint32 arrays
        """
        sizes = np.array([len(element) for element in elements], dtype=FormatConstants.INDEX_DTYPE)
        if len(elements) == 0 or sizes.sum() == 0:
            return np.zeros(0, dtype=FormatConstants.INDEX_DTYPE), sizes
        indices = np.concatenate([np.asarray(element, dtype=np.int64) for element in elements])
        if indices.min() < 0:
            raise ValueError("Element indices must be non-negative")
        return indices.astype(FormatConstants.INDEX_DTYPE), sizes

    @staticmethod
    def find_out_of_bounds(indices: np.ndarray, bound: int) -> int:
        """
        Find the position of the first index outside [0, bound).

        Args:
            indices: Index buffer to check
            bound: Exclusive upper bound (length of the referenced array)

        Returns:
            Position of the first offending index, or -1 if all are valid
        """
        if len(indices) == 0:
            return -1
        invalid = np.flatnonzero(np.asarray(indices, dtype=np.int64) >= bound)
        return int(invalid[0]) if len(invalid) > 0 else -1
