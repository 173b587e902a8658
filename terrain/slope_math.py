"""Slope derivation from an elevation raster (in-process `gdaldem slope`).

Conventions
- **Slope**: degrees, range [0, 90], NaN where the elevation is NaN.
- `z` is shaped (height, width) in raster row/col order.
- Projected rasters: `x_res`/`y_res` are pixel sizes in the same units as `z`
  (metres for the Danish DHM in EPSG:25832).
- Geographic rasters: pass `lat_centers_deg` (len=height); `x_res`/`y_res`
  are then in degrees and are converted to approximate metres.
"""

from __future__ import annotations

import numpy as np

METERS_PER_DEG_AT_EQUATOR = 111_320.0


def compute_slope(
    z: np.ndarray,
    *,
    x_res: float,
    y_res: float,
    lat_centers_deg: np.ndarray | None = None,
) -> np.ndarray:
    """Compute slope in degrees from elevations.

    Parameters
    - **z**: 2D array of elevations. Use NaN for nodata.
    - **x_res**, **y_res**: positive pixel sizes along columns and rows.
    - **lat_centers_deg**: optional row-center latitudes for geographic grids.

    Returns
    - **slope_deg**: float64 array shaped like `z`.
    """
    z = np.asarray(z, dtype=float)
    if z.ndim != 2:
        raise ValueError("z must be a 2D array (height, width)")
    height, width = z.shape
    if height < 2 or width < 2:
        raise ValueError("z must be at least 2x2 to take a gradient")

    x_res = float(x_res)
    y_res = float(y_res)
    for name, res in (("x_res", x_res), ("y_res", y_res)):
        if not np.isfinite(res) or res <= 0:
            raise ValueError(f"{name} must be a positive finite number")

    if lat_centers_deg is None:
        dx = np.full(height, x_res)
        dy = y_res
    else:
        lat_centers_deg = np.asarray(lat_centers_deg, dtype=float)
        if lat_centers_deg.shape != (height,):
            raise ValueError("lat_centers_deg must have shape (height,)")
        dy = METERS_PER_DEG_AT_EQUATOR * y_res
        dx = METERS_PER_DEG_AT_EQUATOR * np.cos(np.deg2rad(lat_centers_deg)) * x_res
        dx = np.where(dx == 0, np.nan, dx)  # poles

    dz_di, dz_dj = np.gradient(z)
    dz_dx = dz_dj / dx[:, None]
    dz_dy = dz_di / dy

    slope_deg = np.rad2deg(np.arctan(np.sqrt(dz_dx * dz_dx + dz_dy * dz_dy)))
    return np.clip(slope_deg, 0.0, 90.0)
