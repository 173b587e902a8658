"""Download a DHM tile, derive slope, and print per-pixel orthogonal projections."""

from __future__ import annotations

import argparse
import logging
import sys
from itertools import islice
from pathlib import Path
from typing import TextIO

from rasterio.errors import RasterioIOError

from ingest.config import DHM_ALLOWED_BBOX, SLOPE_BACKENDS, ProjectionSettings
from ingest.logging_utils import configure_logging, log_event
from ingest.slope_raster import SlopeToolError, get_slope_provider, read_slope_grid, summarize_slope
from ingest.wcs_client import WCSClientError, build_wcs_url, download_coverage
from terrain.bbox import BoundingBox, FormatError, OutOfRangeError, ensure_bbox_within, parse_bbox
from terrain.orthogonal import format_pixel_line, iter_grid_projection

LOGGER = logging.getLogger("orthogonal_projection")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch a DHM DEM tile, derive slope and print per-pixel orthogonal projection."
    )
    parser.add_argument(
        "--bbox",
        type=str,
        default=None,
        metavar="MIN_LON,MIN_LAT,MAX_LON,MAX_LAT",
        help="Requested bounding box (lon/lat). Must lie within the allowed DHM extent.",
    )
    parser.add_argument("--work-dir", type=str, default=None, help="Directory for DEM/slope rasters.")
    parser.add_argument("--dem-filename", type=str, default=None, help="DEM GeoTIFF filename.")
    parser.add_argument("--slope-filename", type=str, default=None, help="Slope GeoTIFF filename.")
    parser.add_argument(
        "--slope-backend",
        choices=SLOPE_BACKENDS,
        default=None,
        help="Derive slope with gdaldem (subprocess) or numpy (in-process).",
    )
    parser.add_argument(
        "--skip-download",
        action="store_true",
        help="Reuse an existing DEM in the work dir instead of requesting the WCS.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Print at most this many pixels (row-major order).",
    )
    return parser.parse_args(argv)


def _apply_cli_overrides(
    settings: ProjectionSettings, args: argparse.Namespace
) -> ProjectionSettings:
    updates: dict[str, object] = {}
    if args.bbox is not None:
        updates["bbox"] = args.bbox
    if args.work_dir:
        updates["work_dir"] = Path(args.work_dir)
    if args.dem_filename:
        updates["dem_filename"] = args.dem_filename
    if args.slope_filename:
        updates["slope_filename"] = args.slope_filename
    if args.slope_backend:
        updates["slope_backend"] = args.slope_backend
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def resolve_bbox(text: str, allowed: BoundingBox) -> BoundingBox:
    """Parse and gate the requested bbox; raises `FormatError`/`OutOfRangeError`."""
    return ensure_bbox_within(parse_bbox(text), allowed)


def emit_projection(
    settings: ProjectionSettings,
    *,
    limit: int | None = None,
    out: TextIO | None = None,
) -> int:
    """Read the slope raster and write one line per pixel. Returns pixels written."""
    stream = out if out is not None else sys.stdout
    grid = read_slope_grid(settings.slope_path)
    summarize_slope(grid)

    records = iter_grid_projection(grid)
    if limit is not None:
        records = islice(records, max(limit, 0))

    written = 0
    for record in records:
        stream.write(format_pixel_line(record) + "\n")
        written += 1
    return written


def run(
    settings: ProjectionSettings,
    *,
    allowed: BoundingBox = DHM_ALLOWED_BBOX,
    skip_download: bool = False,
    limit: int | None = None,
) -> int:
    """Execute the pipeline against the `allowed` extent; returns the exit status."""
    try:
        bbox = resolve_bbox(settings.bbox, allowed)
    except FormatError as exc:
        print(f"Error: Invalid BBOX {settings.bbox!r}: {exc}", file=sys.stderr)
        return 1
    except OutOfRangeError as exc:
        log_event(
            LOGGER,
            "bbox.rejected",
            "Requested bbox outside allowed extent",
            level="warning",
            requested=exc.requested.as_tuple(),
            allowed=exc.allowed.as_tuple(),
        )
        print("Error: The specified BBOX is out of the allowed range.", file=sys.stderr)
        print(f"Rejected BBOX: {exc.requested.to_text()}", file=sys.stderr)
        return 1

    dem_path = settings.dem_path
    slope_path = settings.slope_path

    if skip_download:
        if not dem_path.exists():
            print(f"Error: DEM not found at {dem_path} (--skip-download)", file=sys.stderr)
            return 1
        LOGGER.info("Reusing existing DEM at %s", dem_path)
    else:
        url = build_wcs_url(
            settings.wcs_url,
            settings.coverage_id,
            bbox,
            token=settings.token,
            subsetting_crs=settings.subsetting_crs,
        )
        try:
            download_coverage(url, dem_path, timeout_seconds=settings.request_timeout_seconds)
        except WCSClientError as exc:
            print(f"Error: DEM download failed: {exc}", file=sys.stderr)
            return 1

    provider = get_slope_provider(settings.slope_backend)
    try:
        provider.compute(dem_path, slope_path)
    except SlopeToolError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.returncode or 1

    try:
        written = emit_projection(settings, limit=limit)
    except RasterioIOError as exc:
        print(f"Error: could not open slope raster {slope_path}: {exc}", file=sys.stderr)
        return 1

    log_event(
        LOGGER,
        "projection.complete",
        "Orthogonal projection complete",
        pixels=written,
        slope_path=str(slope_path),
        backend=provider.name,
    )
    print(f"Slope calculation completed and saved to {slope_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = _apply_cli_overrides(ProjectionSettings(), args)
    configure_logging(settings.log_level)
    return run(
        settings,
        allowed=DHM_ALLOWED_BBOX,
        skip_download=args.skip_download,
        limit=args.limit,
    )


if __name__ == "__main__":
    sys.exit(main())
