import numpy as np
import pytest

from terrain.slope_math import METERS_PER_DEG_AT_EQUATOR, compute_slope


def test_planar_ramp_in_metres_gives_expected_slope():
    # Elevation rises 1 m per 1 m pixel to the east: 45 degrees.
    h, w = 10, 12
    z = np.tile(np.arange(w, dtype=float)[None, :], (h, 1))
    slope = compute_slope(z, x_res=1.0, y_res=1.0)
    assert slope.shape == (h, w)
    assert np.allclose(slope, 45.0)


def test_pixel_size_scales_gradient():
    h, w = 8, 8
    z = np.tile(np.arange(h, dtype=float)[:, None], (1, w)) * 0.4
    slope = compute_slope(z, x_res=0.4, y_res=0.4)
    assert np.allclose(slope, 45.0)
    slope_coarse = compute_slope(z, x_res=0.4, y_res=4.0)
    assert float(np.median(slope_coarse)) == pytest.approx(np.degrees(np.arctan(0.1)))


def test_flat_surface_has_zero_slope():
    slope = compute_slope(np.full((5, 5), 12.0), x_res=0.4, y_res=0.4)
    assert np.nanmax(slope) == pytest.approx(0.0)


def test_geographic_grid_converts_degrees_to_metres():
    h, w = 6, 6
    cell = 0.001
    lat_centers = np.linspace(56.0, 55.995, h)
    # Rise equal to the east-west cell width in metres at each row: 45 degrees.
    dx_m = METERS_PER_DEG_AT_EQUATOR * np.cos(np.deg2rad(lat_centers)) * cell
    z = np.arange(w, dtype=float)[None, :] * dx_m[:, None]
    slope = compute_slope(z, x_res=cell, y_res=cell, lat_centers_deg=lat_centers)
    assert np.allclose(slope, 45.0, atol=1e-6)


def test_nan_elevation_propagates():
    z = np.zeros((4, 4))
    z[1, 1] = np.nan
    slope = compute_slope(z, x_res=1.0, y_res=1.0)
    # Neighbours whose differences touch the NaN cell become NaN.
    assert np.isnan(slope[0, 1])
    assert np.isnan(slope[1, 2])
    assert slope[3, 3] == pytest.approx(0.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"x_res": 0.0, "y_res": 1.0},
        {"x_res": 1.0, "y_res": -1.0},
        {"x_res": float("nan"), "y_res": 1.0},
    ],
)
def test_invalid_resolution_raises(kwargs):
    with pytest.raises(ValueError):
        compute_slope(np.zeros((3, 3)), **kwargs)


def test_rejects_bad_shapes():
    with pytest.raises(ValueError):
        compute_slope(np.zeros(9), x_res=1.0, y_res=1.0)
    with pytest.raises(ValueError):
        compute_slope(np.zeros((1, 5)), x_res=1.0, y_res=1.0)
    with pytest.raises(ValueError):
        compute_slope(np.zeros((3, 3)), x_res=1.0, y_res=1.0, lat_centers_deg=np.zeros(2))
