import math
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import geopandas as gpd
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from fireradius.spatial.projection import unproject
from fireradius.types import BoundingBox

# Maximum radial gap between the disc and its inscribed polygon, relative to R
DEFAULT_RELATIVE_TOLERANCE = 1e-4


@dataclass(frozen=True)
class Buffer:
    """A disc of `radius_m` around a planar center, with its polygon approximation."""

    radius_m: float
    center: tuple
    polygon: BaseGeometry = field(compare=False, repr=False)

    @property
    def radius_km(self):
        return self.radius_m / 1000.0


def segments_for_tolerance(rel_tol=DEFAULT_RELATIVE_TOLERANCE):
    """
    Number of segments per quarter circle so that the inscribed polygon
    stays within `rel_tol * R` of the true circle.

    A chord spanning angle t sits R * (1 - cos(t / 2)) inside the circle.

    Args:
        rel_tol (float): Allowed radial error as a fraction of R, in (0, 1).

    Returns:
        int: Segment count for shapely's `quad_segs`.
    """
    if not 0 < rel_tol < 1:
        raise ValueError(f"rel_tol must be in (0, 1), got {rel_tol}.")
    half_angle = math.acos(1.0 - rel_tol)
    return max(1, math.ceil(math.pi / (4.0 * half_angle)))


def build_buffers(center, radii_m, quad_segs=None):
    """
    Build one buffer per radius around the same planar center.

    Args:
        center (tuple): (x, y) in planar meters.
        radii_m (iterable): Radii in meters, all > 0.
        quad_segs (int, optional): Segments per quarter circle. Derived from
            DEFAULT_RELATIVE_TOLERANCE when omitted.

    Returns:
        dict: radius (float) -> Buffer, ordered by increasing radius.
    """
    if quad_segs is None:
        quad_segs = segments_for_tolerance()

    cx, cy = float(center[0]), float(center[1])
    origin = Point(cx, cy)

    buffers = {}
    for radius in sorted(float(r) for r in radii_m):
        if radius <= 0:
            raise ValueError(f"Buffer radius must be positive, got {radius}.")
        buffers[radius] = Buffer(
            radius_m=radius,
            center=(cx, cy),
            polygon=origin.buffer(radius, quad_segs=quad_segs),
        )
    return buffers


def buffer_envelope(buffer, projection):
    """
    Geographic bounding box of a buffer polygon.

    Args:
        buffer (Buffer): The buffer.
        projection (ProjectionParams): Projection the buffer is defined in.

    Returns:
        BoundingBox: min/max of the inverse-projected polygon vertices.
    """
    xs, ys = buffer.polygon.exterior.coords.xy
    lon, lat = unproject(np.asarray(xs), np.asarray(ys), projection)
    return BoundingBox(
        min_lat=float(lat.min()),
        min_lon=float(lon.min()),
        max_lat=float(lat.max()),
        max_lon=float(lon.max()),
    )


def bounds_enclosing(buffer, projection, margin_deg=0.1):
    """
    Coarse bounding box guaranteed to contain every point of `buffer`.

    The polygon is inscribed in the true disc, so the margin also has to cover
    that gap (a few meters at most).
    """
    env = buffer_envelope(buffer, projection)
    return BoundingBox(
        min_lat=max(-90.0, env.min_lat - margin_deg),
        min_lon=max(-180.0, env.min_lon - margin_deg),
        max_lat=min(90.0, env.max_lat + margin_deg),
        max_lon=min(180.0, env.max_lon + margin_deg),
    )


def buffers_to_geodataframe(buffers, projection, geographic=False):
    """
    Collect buffers into a GeoDataFrame.

    Args:
        buffers (dict): radius -> Buffer.
        projection (ProjectionParams): Projection the buffers are defined in.
        geographic (bool): Return polygons in EPSG:4326 instead of planar meters.

    Returns:
        geopandas.GeoDataFrame: columns radius_m, radius_km, geometry.
    """
    ordered = [buffers[r] for r in sorted(buffers)]
    gdf = gpd.GeoDataFrame(
        {
            'radius_m': [b.radius_m for b in ordered],
            'radius_km': [b.radius_km for b in ordered],
        },
        geometry=[b.polygon for b in ordered],
        crs=projection.crs,
    )
    if geographic:
        gdf = gdf.to_crs("EPSG:4326")
    return gdf


def write_buffers(buffers, projection, path):
    """Write buffer polygons (EPSG:4326) to a GeoJSON file for mapping tools."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    gdf = buffers_to_geodataframe(buffers, projection, geographic=True)
    gdf.to_file(path, driver="GeoJSON")
    return path
