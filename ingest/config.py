"""Configuration for the DHM slope / orthogonal projection pipeline."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from terrain.bbox import BoundingBox

REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env", override=False)

DHM_WCS_URL = "https://api.dataforsyningen.dk/dhm_wcs_DAF?service=WCS"
DHM_COVERAGE_ID = "DHM_Overflade"
# Extent served by the DHM coverage (lon/lat). Fixed; not read from the environment.
DHM_ALLOWED_BBOX = BoundingBox(
    min_lon=8.00830949937517,
    min_lat=54.4354651516217,
    max_lon=15.5979112056959,
    max_lat=57.7690657013977,
)
SLOPE_BACKENDS = ("gdaldem", "numpy")


class ProjectionSettings(BaseSettings):
    """Environment-driven configuration for download, slope and projection."""

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    wcs_url: str = Field(default=DHM_WCS_URL, validation_alias="DHM_WCS_URL")
    coverage_id: str = Field(default=DHM_COVERAGE_ID, validation_alias="DHM_WCS_COVERAGE_ID")
    token: str | None = Field(default=None, validation_alias="DHM_WCS_TOKEN")
    subsetting_crs: str | None = Field(default=None, validation_alias="DHM_WCS_SUBSETTING_CRS")
    bbox: str = Field(default="10.0,54.0,15.0,57.0", validation_alias="DHM_BBOX")
    work_dir: Path = Field(
        default=REPO_ROOT / "data" / "dhm",
        validation_alias="DHM_WORK_DIR",
    )
    dem_filename: str = Field(default="input_dem.tif", validation_alias="DHM_DEM_FILENAME")
    slope_filename: str = Field(default="output_slope.tif", validation_alias="DHM_SLOPE_FILENAME")
    slope_backend: str = Field(default="gdaldem", validation_alias="DHM_SLOPE_BACKEND")
    request_timeout_seconds: float = Field(
        default=120.0,
        validation_alias="DHM_REQUEST_TIMEOUT_SECONDS",
    )
    log_level: str = Field(default="INFO", validation_alias="DHM_LOG_LEVEL")

    @field_validator("token", "subsetting_crs", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("work_dir", mode="before")
    @classmethod
    def _coerce_work_dir(cls, value: object) -> Path:
        if value in (None, ""):
            return REPO_ROOT / "data" / "dhm"
        return Path(value)

    @field_validator("slope_backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: object) -> str:
        backend = str(value).strip().lower()
        if backend not in SLOPE_BACKENDS:
            raise ValueError(f"DHM_SLOPE_BACKEND must be one of {SLOPE_BACKENDS}, got {value!r}")
        return backend

    @field_validator("request_timeout_seconds", mode="before")
    @classmethod
    def _validate_timeout(cls, value: object) -> float:
        val = float(value)
        if val <= 0:
            raise ValueError("DHM_REQUEST_TIMEOUT_SECONDS must be positive")
        return val

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        return str(value).strip().upper() or "INFO"

    @property
    def dem_path(self) -> Path:
        return self.work_dir / self.dem_filename

    @property
    def slope_path(self) -> Path:
        return self.work_dir / self.slope_filename
