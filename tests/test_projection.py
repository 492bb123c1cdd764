import numpy as np
import pytest
from pyproj import Proj

from fireradius.exceptions import InvalidCoordinate
from fireradius.spatial.projection import ProjectionParams, reproject, unproject, validate_coordinates


def test_projection_params_proj4():
    params = ProjectionParams()
    assert params.proj4 == "+proj=utm +zone=49 +south +a=6378160.0 +b=6356774.50408554 +units=m +no_defs"
    assert params.crs.is_projected
    assert "+south" not in ProjectionParams(south=False).proj4


def test_reproject_scalar_returns_floats(projection):
    x, y = reproject(109.9619, -1.8166, projection)
    assert isinstance(x, float)
    assert isinstance(y, float)
    # Just west of the zone 49 central meridian (111E), south of the equator
    assert 370000 < x < 400000
    assert 9.78e6 < y < 9.82e6


def test_reproject_matches_plain_utm_without_datum_shift(projection):
    """The transform is a pure projection on the given ellipsoid."""
    lons = np.array([109.9619, 105.5, 114.2])
    lats = np.array([-1.8166, -6.0, 2.5])
    utm = Proj(proj="utm", zone=49, south=True, a=6378160.0, b=6356774.50408554, units="m")
    ex, ey = utm(lons, lats)

    x, y = reproject(lons, lats, projection)
    assert np.allclose(x, ex, atol=1e-6)
    assert np.allclose(y, ey, atol=1e-6)


def test_reproject_preserves_order_and_cardinality(projection):
    lons = [110.0, 109.0, 111.0]
    lats = [-1.0, -2.0, -3.0]
    x, y = reproject(lons, lats, projection)
    assert len(x) == len(y) == 3

    for i in range(3):
        xi, yi = reproject(lons[i], lats[i], projection)
        assert x[i] == xi
        assert y[i] == yi


def test_reproject_is_deterministic(projection):
    assert reproject(109.9619, -1.8166, projection) == reproject(109.9619, -1.8166, projection)


def test_reproject_empty(projection):
    x, y = reproject([], [], projection)
    assert x.size == 0 and y.size == 0


@pytest.mark.parametrize("lon,lat", [
    (110.0, 90.5),
    (110.0, -91.0),
    (180.1, 0.0),
    (-200.0, 0.0),
    (float("nan"), 0.0),
    (110.0, float("inf")),
])
def test_reproject_rejects_invalid_coordinates(projection, lon, lat):
    with pytest.raises(InvalidCoordinate):
        reproject(lon, lat, projection)


def test_reproject_rejects_any_bad_coordinate_in_batch(projection):
    with pytest.raises(InvalidCoordinate, match="index 1"):
        reproject([110.0, 110.0, 110.0], [-1.0, 95.0, -2.0], projection)


def test_reproject_rejects_non_numeric(projection):
    with pytest.raises(InvalidCoordinate):
        reproject("east", -1.0, projection)


def test_reproject_shape_mismatch(projection):
    with pytest.raises(ValueError):
        reproject([110.0, 111.0], [-1.0], projection)


def test_validate_coordinates_accepts_range_limits():
    validate_coordinates([-180.0, 180.0, 0.0], [-90.0, 90.0, 0.0])


def test_unproject_inverts_reproject(projection):
    lons = np.array([109.9619, 106.1, 113.7])
    lats = np.array([-1.8166, -5.9, 2.1])
    x, y = reproject(lons, lats, projection)
    lon2, lat2 = unproject(x, y, projection)
    assert np.allclose(lon2, lons, atol=1e-9)
    assert np.allclose(lat2, lats, atol=1e-9)
