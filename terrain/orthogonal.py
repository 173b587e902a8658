"""Per-pixel orthogonal projection of slope rasters.

Conventions
- **Input**: slope magnitude in degrees.
- **Gradient**: isotropic, `dz/dx = dz/dy = tan(slope)`.
- **Normal**: `(-dz/dx, -dz/dy, 1)` normalized to unit length (`nz > 0`).
- **Projection angle**: `atan(sqrt(nx^2 + ny^2))` of the unit normal, degrees.
- **Orientation**: `atan2(ny, nx)` in degrees, wrapped to `[0, 360)`.
  This is the mathematical convention (counterclockwise from +x), not a
  compass bearing.

Non-finite slopes propagate as NaN; nothing is masked or rejected.
Cells are independent, so whole rows are evaluated with one vectorized call
while records are still emitted in row-major order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

import numpy as np

from .grid import SlopeGrid

_DEG_TO_RAD = np.pi / 180.0
_RAD_TO_DEG = 180.0 / np.pi


@dataclass(frozen=True, slots=True)
class PixelProjection:
    """Projection result for one grid cell."""

    x: int
    y: int
    slope: float
    projection_angle: float
    orientation: float


@dataclass(frozen=True, slots=True)
class OrthogonalProjection:
    """Whole-grid projection angles and orientations, shaped like the input."""

    projection_angle: np.ndarray
    orientation: np.ndarray


def _unit_normals(slope_deg: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    slope_rad = slope_deg * _DEG_TO_RAD
    dzdx = np.tan(slope_rad)
    dzdy = np.tan(slope_rad)

    # 0.0 - v keeps a flat cell's normal at +0.0 so atan2 yields 0, not 180.
    nx = 0.0 - dzdx
    ny = 0.0 - dzdy
    nz = np.ones_like(slope_deg)

    # length >= 1 because nz == 1.
    length = np.sqrt(nx * nx + ny * ny + nz * nz)
    return nx / length, ny / length, nz / length


def _project(slope_deg: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    with np.errstate(invalid="ignore"):
        nx, ny, _nz = _unit_normals(slope_deg)
        projection_angle = np.arctan(np.sqrt(nx * nx + ny * ny)) * _RAD_TO_DEG
        orientation = np.arctan2(ny, nx) * _RAD_TO_DEG
        orientation = np.where(orientation < 0, orientation + 360.0, orientation)
    return projection_angle, orientation


def surface_normal(slope_deg: float) -> Tuple[float, float, float]:
    """Unit surface normal `(nx, ny, nz)` for a slope in degrees."""
    with np.errstate(invalid="ignore"):
        nx, ny, nz = _unit_normals(np.float64(slope_deg))
    return float(nx), float(ny), float(nz)


def project_slope(slope_deg: float) -> Tuple[float, float]:
    """Return `(projection_angle, orientation)` in degrees for one slope value."""
    projection_angle, orientation = _project(np.float64(slope_deg))
    return float(projection_angle), float(orientation)


def compute_orthogonal_projection(slope: np.ndarray | SlopeGrid) -> OrthogonalProjection:
    """Vectorized projection over an array of slopes (any shape)."""
    values = slope.values if isinstance(slope, SlopeGrid) else slope
    arr = np.asarray(values, dtype=np.float64)
    projection_angle, orientation = _project(arr)
    return OrthogonalProjection(
        projection_angle=np.asarray(projection_angle, dtype=np.float64),
        orientation=np.asarray(orientation, dtype=np.float64),
    )


def iter_orthogonal_projection(
    slope_grid: Sequence[float] | np.ndarray,
    width: int,
    height: int,
) -> Iterator[PixelProjection]:
    """Lazily yield one `PixelProjection` per cell, `y` outer and `x` inner.

    `slope_grid` may be a flat row-major buffer or a `(height, width)` array;
    it is only read. Size mismatches raise `ValueError` before iteration.
    """
    if width < 0 or height < 0:
        raise ValueError(f"width/height must be non-negative, got {width}x{height}")
    arr = np.asarray(slope_grid, dtype=np.float64)
    if arr.size != width * height:
        raise ValueError(f"slope grid has {arr.size} values, expected width*height={width * height}")
    rows = arr.reshape(height, width)
    return _iter_rows(rows)


def iter_grid_projection(grid: SlopeGrid) -> Iterator[PixelProjection]:
    return iter_orthogonal_projection(grid.values, grid.width, grid.height)


def _iter_rows(rows: np.ndarray) -> Iterator[PixelProjection]:
    for y, row in enumerate(rows):
        projection_angle, orientation = _project(row)
        for x in range(row.shape[0]):
            yield PixelProjection(
                x=x,
                y=y,
                slope=float(row[x]),
                projection_angle=float(projection_angle[x]),
                orientation=float(orientation[x]),
            )


def format_pixel_line(record: PixelProjection) -> str:
    """Human-readable console line for one pixel (six significant digits)."""
    return (
        f"Pixel ({record.x}, {record.y}): Slope = {record.slope:g} degrees, "
        f"Orthogonal Projection = {record.projection_angle:g} degrees, "
        f"Orientation = {record.orientation:g} degrees"
    )
