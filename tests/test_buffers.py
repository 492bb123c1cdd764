import math

import numpy as np
import geopandas as gpd
import pytest
from shapely.geometry import Point

from fireradius.config import DEFAULT_RADII_METERS
from fireradius.spatial.buffers import (
    DEFAULT_RELATIVE_TOLERANCE,
    bounds_enclosing,
    buffer_envelope,
    buffers_to_geodataframe,
    build_buffers,
    segments_for_tolerance,
    write_buffers,
)


@pytest.fixture
def buffers(reference_xy):
    return build_buffers(reference_xy, DEFAULT_RADII_METERS)


def test_buffers_ordered_by_radius(reference_xy):
    buffers = build_buffers(reference_xy, [500000, 5000, 250000, 50000])
    assert list(buffers) == [5000.0, 50000.0, 250000.0, 500000.0]
    assert buffers[5000.0].radius_km == 5.0


def test_buffers_are_nested(buffers):
    radii = sorted(buffers)
    for small, large in zip(radii, radii[1:]):
        assert buffers[small].polygon.within(buffers[large].polygon)


def test_reference_point_is_center_of_every_buffer(buffers, reference_xy):
    ref = Point(reference_xy)
    for buffer in buffers.values():
        assert buffer.center == reference_xy
        assert ref.distance(buffer.polygon.centroid) < 1e-3


def test_polygon_approximation_error_is_bounded(buffers):
    for radius, buffer in buffers.items():
        center = Point(buffer.center)
        xs, ys = buffer.polygon.exterior.coords.xy
        vertex_dist = np.hypot(np.asarray(xs) - buffer.center[0], np.asarray(ys) - buffer.center[1])
        # Vertices sit on the circle, edges dip inside by at most the tolerance
        assert np.allclose(vertex_dist, radius, rtol=1e-9)
        assert buffer.polygon.exterior.distance(center) >= radius * (1 - DEFAULT_RELATIVE_TOLERANCE)


def test_segments_for_tolerance_is_minimal():
    for tol in (1e-2, 1e-3, 1e-4):
        q = segments_for_tolerance(tol)
        assert 1 - math.cos(math.pi / (4 * q)) <= tol
        if q > 1:
            assert 1 - math.cos(math.pi / (4 * (q - 1))) > tol


@pytest.mark.parametrize("tol", [0, 1, -0.5])
def test_segments_for_tolerance_rejects_bad_values(tol):
    with pytest.raises(ValueError):
        segments_for_tolerance(tol)


@pytest.mark.parametrize("radius", [0, -5000])
def test_build_buffers_rejects_non_positive_radius(reference_xy, radius):
    with pytest.raises(ValueError):
        build_buffers(reference_xy, [5000, radius])


def test_envelope_contains_reference(buffers, projection):
    env = buffer_envelope(buffers[50000.0], projection)
    assert env.min_lat < -1.8166 < env.max_lat
    assert env.min_lon < 109.9619 < env.max_lon
    # 50 km is a bit under half a degree of latitude
    assert np.isclose(env.max_lat - env.min_lat, 0.9, atol=0.02)


def test_bounds_enclosing_is_strictly_wider(buffers, projection):
    largest = buffers[500000.0]
    env = buffer_envelope(largest, projection)
    bounds = bounds_enclosing(largest, projection, margin_deg=0.05)
    assert bounds.encloses(env)
    assert np.isclose(bounds.max_lat - env.max_lat, 0.05)


def test_buffers_to_geodataframe(buffers, projection):
    gdf = buffers_to_geodataframe(buffers, projection)
    assert list(gdf['radius_km']) == [5.0, 50.0, 250.0, 500.0]
    assert gdf.crs == projection.crs

    geo = buffers_to_geodataframe(buffers, projection, geographic=True)
    assert geo.crs == "EPSG:4326"
    assert geo.geometry.iloc[0].contains(Point(109.9619, -1.8166))


def test_write_buffers_geojson(buffers, projection, tmp_path):
    path = write_buffers(buffers, projection, tmp_path / "out" / "buffers.geojson")
    assert path.exists()
    gdf = gpd.read_file(path)
    assert len(gdf) == 4
    assert sorted(gdf['radius_m']) == sorted(DEFAULT_RADII_METERS)
