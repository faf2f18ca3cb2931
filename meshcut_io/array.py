"""
Numpy array field types for the pydantic models.

Each annotated type validates and converts its input (lists, tuples or
arrays) to a numpy array with a fixed dtype and, where relevant, a fixed
number of columns.
"""
from typing import Annotated, Any, Optional

import numpy as np
from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import CoreSchema, core_schema

from .constants import FormatConstants


class _ArrayAnnotation:
    """Pydantic annotation for numpy arrays with dtype and shape hints.

    Used with Annotated to create typed array fields that coerce their input
    and generate a JSON schema carrying the dtype.
    """

    def __init__(self, dtype: Any, columns: Optional[int] = None):
        self.dtype = np.dtype(dtype)
        self.columns = columns

    def __get_pydantic_core_schema__(
        self, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        """Return core schema that converts input to a numpy array."""
        return core_schema.no_info_plain_validator_function(self.validate)

    def __get_pydantic_json_schema__(
        self, core_schema: CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Return JSON schema with the array dtype and column count."""
        schema = {"type": "array", "dtype": self.dtype.name}
        if self.columns is not None:
            schema["columns"] = self.columns
        return schema

    def validate(self, value: Any) -> np.ndarray:
        array = np.asarray(value)
        if self.dtype.kind == "u" and array.size > 0:
            if array.dtype.kind not in "iu":
                raise ValueError(f"expected integer data, got dtype {array.dtype}")
            if array.min() < 0:
                raise ValueError("indices must be non-negative")
        array = array.astype(self.dtype, copy=False)

        if self.columns is None:
            if array.ndim != 1:
                raise ValueError(f"expected a 1D array, got shape {array.shape}")
            return array

        if array.size == 0:
            return array.reshape(0, self.columns)
        if array.ndim == 1 and array.size % self.columns == 0:
            # Flat buffers (x0, y0, z0, x1, ...) are accepted as well
            array = array.reshape(-1, self.columns)
        if array.ndim != 2 or array.shape[1] != self.columns:
            raise ValueError(
                f"expected an array of shape (n, {self.columns}), got shape {array.shape}")
        return array

    def __hash__(self):
        return hash((self.dtype, self.columns))

    def __eq__(self, other):
        return (
            isinstance(other, _ArrayAnnotation)
            and self.dtype == other.dtype
            and self.columns == other.columns
        )


PointArray = Annotated[np.ndarray, _ArrayAnnotation(FormatConstants.COORD_DTYPE, 3)]
"""Vertex positions or normals, shape (n, 3)."""

TexCoordArray = Annotated[np.ndarray, _ArrayAnnotation(FormatConstants.COORD_DTYPE, 2)]
"""Texture coordinates, shape (n, 2)."""

IndexArray = Annotated[np.ndarray, _ArrayAnnotation(FormatConstants.INDEX_DTYPE)]
"""Flat unsigned 32-bit index buffer."""

FloatArray = Annotated[np.ndarray, _ArrayAnnotation(FormatConstants.COORD_DTYPE)]
"""Flat float64 buffer (x0, y0, z0, x1, ...)."""
