"""Slope grid container handed from raster I/O to the projection engine.

Conventions
- **Shape**: `(height, width)`, row-major; row 0 is the first raster row.
- **Units**: slope magnitude in degrees, float64.
- Values are stored as read (nodata sentinels are not masked).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True, slots=True)
class SlopeGrid:
    """Read-only 2D slope raster with optional source metadata."""

    values: np.ndarray
    crs: str | None = None
    nodata: float | None = None

    def __post_init__(self) -> None:
        arr = np.asarray(self.values, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError("values must be a 2D array (height, width)")
        arr = arr.view()
        arr.flags.writeable = False
        object.__setattr__(self, "values", arr)

    @classmethod
    def from_flat(
        cls,
        buffer: Sequence[float] | np.ndarray,
        width: int,
        height: int,
        *,
        crs: str | None = None,
        nodata: float | None = None,
    ) -> "SlopeGrid":
        """Build a grid from a flat row-major buffer of `width * height` values."""
        flat = np.asarray(buffer, dtype=np.float64).ravel()
        if width < 0 or height < 0:
            raise ValueError(f"width/height must be non-negative, got {width}x{height}")
        if flat.size != width * height:
            raise ValueError(
                f"buffer has {flat.size} values, expected width*height={width * height}"
            )
        return cls(values=flat.reshape(height, width), crs=crs, nodata=nodata)

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])
