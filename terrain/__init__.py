"""Terrain core: bbox validation, slope grids and orthogonal projection."""

from .bbox import (
    BoundingBox,
    FormatError,
    OutOfRangeError,
    bbox_within,
    ensure_bbox_within,
    parse_bbox,
    validate_bbox,
)
from .grid import SlopeGrid
from .orthogonal import (
    OrthogonalProjection,
    PixelProjection,
    compute_orthogonal_projection,
    format_pixel_line,
    iter_grid_projection,
    iter_orthogonal_projection,
    project_slope,
    surface_normal,
)
from .slope_math import compute_slope

__all__ = [
    "BoundingBox",
    "FormatError",
    "OutOfRangeError",
    "bbox_within",
    "ensure_bbox_within",
    "parse_bbox",
    "validate_bbox",
    "SlopeGrid",
    "OrthogonalProjection",
    "PixelProjection",
    "compute_orthogonal_projection",
    "format_pixel_line",
    "iter_grid_projection",
    "iter_orthogonal_projection",
    "project_slope",
    "surface_normal",
    "compute_slope",
]
