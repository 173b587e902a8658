"""Derive slope rasters from a DEM and read them back as slope grids."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

import numpy as np
import rasterio
from rasterio.errors import RasterioIOError

from ingest.logging_utils import log_event
from terrain.grid import SlopeGrid
from terrain.slope_math import compute_slope

LOGGER = logging.getLogger(__name__)
SLOPE_NODATA = -9999.0


class SlopeToolError(RuntimeError):
    """Raised when the slope derivation step fails."""

    def __init__(self, message: str, *, returncode: int = 1, stderr: str | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class SlopeProvider(Protocol):
    name: str

    def compute(self, dem_path: Path, slope_path: Path) -> Path:
        """Write a slope raster (degrees) for `dem_path` to `slope_path`."""
        ...


class GdalDemSlopeProvider:
    """Runs `gdaldem slope` as a subprocess."""

    name = "gdaldem"

    def __init__(self, executable: str = "gdaldem") -> None:
        self.executable = executable

    def command(self, dem_path: Path, slope_path: Path) -> list[str]:
        return [self.executable, "slope", str(dem_path), str(slope_path)]

    def compute(self, dem_path: Path, slope_path: Path) -> Path:
        cmd = self.command(dem_path, slope_path)
        slope_path.parent.mkdir(parents=True, exist_ok=True)
        log_event(LOGGER, "slope.tool", "Executing slope tool", command=" ".join(cmd))
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except FileNotFoundError as exc:
            raise SlopeToolError(
                f"{self.executable} not found; install GDAL or use the numpy backend",
                returncode=127,
            ) from exc
        except subprocess.CalledProcessError as exc:
            raise SlopeToolError(
                f"gdaldem slope failed with error code: {exc.returncode}",
                returncode=exc.returncode,
                stderr=exc.stderr,
            ) from exc
        return slope_path


class NumpySlopeProvider:
    """Computes slope in-process with numpy and writes it with rasterio."""

    name = "numpy"

    def __init__(self, nodata_value: float = SLOPE_NODATA) -> None:
        self.nodata_value = float(nodata_value)

    def compute(self, dem_path: Path, slope_path: Path) -> Path:
        log_event(LOGGER, "slope.tool", "Computing slope in-process", dem=str(dem_path))
        try:
            with rasterio.open(dem_path) as src:
                z = np.asarray(src.read(1, masked=True).filled(np.nan), dtype=float)
                x_res, y_res = src.res
                lat_centers = None
                if src.crs is not None and src.crs.is_geographic:
                    # Row 0 is north for north-up rasters (transform.e < 0).
                    lat_centers = src.transform.f + (np.arange(src.height) + 0.5) * src.transform.e
                profile = src.profile.copy()
        except RasterioIOError as exc:
            raise SlopeToolError(f"Could not read DEM {dem_path}: {exc}", returncode=1) from exc

        try:
            slope_deg = compute_slope(z, x_res=x_res, y_res=y_res, lat_centers_deg=lat_centers)
        except ValueError as exc:
            raise SlopeToolError(f"Slope computation failed for {dem_path}: {exc}", returncode=1) from exc
        out = np.where(np.isfinite(slope_deg), slope_deg, self.nodata_value).astype(np.float32)

        profile.update(
            {
                "driver": "GTiff",
                "count": 1,
                "dtype": "float32",
                "nodata": self.nodata_value,
            }
        )
        slope_path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(slope_path, "w", **profile) as dst:
            dst.write(out, 1)
        return slope_path


def get_slope_provider(name: str) -> SlopeProvider:
    key = name.strip().lower()
    if key == "gdaldem":
        return GdalDemSlopeProvider()
    if key == "numpy":
        return NumpySlopeProvider()
    raise ValueError(f"Unknown slope backend {name!r} (expected 'gdaldem' or 'numpy')")


def read_slope_grid(path: str | Path, band: int = 1) -> SlopeGrid:
    """Read one band of a slope raster as float64, values unmodified."""
    with rasterio.open(path) as src:
        values = src.read(band).astype(np.float64)
        crs = src.crs.to_string() if src.crs is not None else None
        nodata = float(src.nodata) if src.nodata is not None else None
    return SlopeGrid(values=values, crs=crs, nodata=nodata)


def summarize_slope(grid: SlopeGrid) -> dict[str, float | None]:
    """Log and return min/max/mean over valid cells plus their coverage."""
    arr = grid.values
    mask = np.isfinite(arr)
    if grid.nodata is not None:
        mask &= arr != grid.nodata

    if arr.size == 0 or not bool(mask.any()):
        stats: dict[str, float | None] = {"min": None, "max": None, "mean": None, "coverage": 0.0}
        log_event(
            LOGGER,
            "slope.stats",
            "Slope raster has no valid cells",
            level="warning",
            width=grid.width,
            height=grid.height,
        )
        return stats

    valid = arr[mask]
    stats = {
        "min": float(np.min(valid)),
        "max": float(np.max(valid)),
        "mean": float(np.mean(valid)),
        "coverage": float(mask.mean()),
    }
    log_event(
        LOGGER,
        "slope.stats",
        "Slope raster stats",
        width=grid.width,
        height=grid.height,
        units="degrees",
        **stats,
    )
    return stats
