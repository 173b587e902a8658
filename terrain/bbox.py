"""Bounding box parsing and containment checks.

Conventions
- **Order**: `(min_lon, min_lat, max_lon, max_lat)` in degrees (WGS84).
- **Containment**: inclusive on every edge; a box touching the allowed
  region's boundary is accepted. There is no clipping or partial acceptance.
- `min <= max` on each axis is a caller contract and is not checked here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


class FormatError(ValueError):
    """Raised when bbox text is not four comma-separated numbers."""


class OutOfRangeError(ValueError):
    """Raised when a requested bbox is not fully inside the allowed region."""

    def __init__(self, requested: "BoundingBox", allowed: "BoundingBox") -> None:
        self.requested = requested
        self.allowed = allowed
        super().__init__(
            f"Requested bbox {requested.to_text()} is outside the allowed bbox {allowed.to_text()}"
        )


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Lon/lat bounding box."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    def to_text(self) -> str:
        return ",".join(repr(float(v)) for v in self.as_tuple())


def parse_bbox(text: str) -> BoundingBox:
    """Parse `'min_lon,min_lat,max_lon,max_lat'` into a `BoundingBox`.

    Every token must parse as a finite float; anything else raises
    `FormatError` instead of silently defaulting to zero.
    """
    if not isinstance(text, str):
        raise FormatError(f"bbox must be a string, got {type(text).__name__}")

    parts = [segment.strip() for segment in text.split(",")]
    if len(parts) != 4:
        raise FormatError(
            f"bbox must be 'min_lon,min_lat,max_lon,max_lat', got {len(parts)} token(s): {text!r}"
        )

    values: list[float] = []
    for part in parts:
        try:
            value = float(part)
        except ValueError as exc:
            raise FormatError(f"bbox token {part!r} is not numeric") from exc
        if not math.isfinite(value):
            raise FormatError(f"bbox token {part!r} is not a finite number")
        values.append(value)

    min_lon, min_lat, max_lon, max_lat = values
    return BoundingBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)


def bbox_within(candidate: BoundingBox, allowed: BoundingBox) -> bool:
    """True iff `candidate` lies inside `allowed` (edges inclusive)."""
    return (
        candidate.min_lon >= allowed.min_lon
        and candidate.max_lon <= allowed.max_lon
        and candidate.min_lat >= allowed.min_lat
        and candidate.max_lat <= allowed.max_lat
    )


def validate_bbox(text: str, allowed: BoundingBox) -> bool:
    """Parse `text` and check it against `allowed`.

    Raises `FormatError` for malformed text; returns the containment result
    otherwise.
    """
    return bbox_within(parse_bbox(text), allowed)


def ensure_bbox_within(candidate: BoundingBox, allowed: BoundingBox) -> BoundingBox:
    if not bbox_within(candidate, allowed):
        raise OutOfRangeError(candidate, allowed)
    return candidate
