"""Helpers for requesting DEM coverages from an OGC WCS 2.0.1 endpoint."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

import httpx

from ingest.logging_utils import log_event
from terrain.bbox import BoundingBox

LOGGER = logging.getLogger(__name__)
WCS_VERSION = "2.0.1"
COVERAGE_FORMAT = "image/tiff"


class WCSClientError(RuntimeError):
    """Raised when the coverage request fails."""


def _fmt(value: float) -> str:
    return repr(float(value))


def build_wcs_url(
    base_url: str,
    coverage_id: str,
    bbox: BoundingBox,
    *,
    token: str | None = None,
    subsetting_crs: str | None = None,
) -> str:
    """Construct a GetCoverage URL trimming the coverage to `bbox`."""
    separator = "&" if "?" in base_url else "?"
    params = [
        "REQUEST=GetCoverage",
        f"VERSION={WCS_VERSION}",
        f"COVERAGEID={quote(coverage_id, safe='')}",
        f"FORMAT={quote(COVERAGE_FORMAT, safe='')}",
        f"SUBSET=x({_fmt(bbox.min_lon)},{_fmt(bbox.max_lon)})",
        f"SUBSET=y({_fmt(bbox.min_lat)},{_fmt(bbox.max_lat)})",
    ]
    if subsetting_crs:
        params.append(f"SUBSETTINGCRS={quote(subsetting_crs, safe='')}")
    if token:
        params.append(f"token={quote(token, safe='')}")
    return base_url + separator + "&".join(params)


def _redact(url: str) -> str:
    head, sep, _tail = url.partition("token=")
    return f"{head}{sep}***" if sep else url


def download_coverage(
    url: str,
    target_path: str | Path,
    *,
    timeout_seconds: float,
    client: httpx.Client | None = None,
) -> Path:
    """Stream the coverage at `url` to `target_path`.

    Bytes land in a sibling `.part` file that is renamed onto `target_path`
    once the body is fully read. On failure the `.part` file is removed.
    """
    target = Path(target_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    part = target.with_name(target.name + ".part")
    log_event(LOGGER, "wcs.download", "Requesting coverage", url=_redact(url), target=str(target))

    owns_client = client is None
    http = client if client is not None else httpx.Client(timeout=timeout_seconds)
    try:
        with http.stream("GET", url) as response:
            if response.is_error:
                response.read()
                snippet = response.text[:300]
                raise WCSClientError(
                    f"Coverage request failed with status {response.status_code}: {snippet}"
                )
            bytes_written = 0
            with part.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)
                    bytes_written += len(chunk)
        part.replace(target)
    except httpx.HTTPError as exc:
        part.unlink(missing_ok=True)
        raise WCSClientError(f"Failed to fetch coverage: {exc}") from exc
    except WCSClientError:
        part.unlink(missing_ok=True)
        raise
    finally:
        if owns_client:
            http.close()

    log_event(
        LOGGER,
        "wcs.download",
        "Coverage written",
        target=str(target),
        bytes=bytes_written,
    )
    return target
