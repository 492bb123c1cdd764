"""
Geographic <-> planar reprojection.

Fire detections come as WGS84 longitude/latitude. Distances to the reference
point are measured in a transverse Mercator (UTM) zone defined directly on an
ellipsoid, with no datum shift applied between WGS84 and that ellipsoid.
"""

from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import ProjError

from fireradius.exceptions import InvalidCoordinate

GEOGRAPHIC_CRS = "EPSG:4326"


@dataclass(frozen=True)
class ProjectionParams:
    """UTM zone on an explicit ellipsoid, in meters."""

    zone: int = 49
    south: bool = True
    a: float = 6378160.0
    b: float = 6356774.50408554

    @property
    def proj4(self):
        hemisphere = " +south" if self.south else ""
        return f"+proj=utm +zone={self.zone}{hemisphere} +a={self.a} +b={self.b} +units=m +no_defs"

    @property
    def crs(self):
        return _crs(self)


@lru_cache(maxsize=None)
def _crs(params):
    return CRS.from_proj4(params.proj4)


@lru_cache(maxsize=None)
def _forward(params):
    return Transformer.from_crs(GEOGRAPHIC_CRS, _crs(params), always_xy=True)


@lru_cache(maxsize=None)
def _inverse(params):
    return Transformer.from_crs(_crs(params), GEOGRAPHIC_CRS, always_xy=True)


def _as_arrays(first, second, names):
    try:
        a = np.atleast_1d(np.asarray(first, dtype=float))
        b = np.atleast_1d(np.asarray(second, dtype=float))
    except (TypeError, ValueError) as e:
        raise InvalidCoordinate(f"Non-numeric {names[0]}/{names[1]} values: {e}") from e
    if a.shape != b.shape:
        raise ValueError(f"{names[0]} and {names[1]} must have the same shape, got {a.shape} and {b.shape}.")
    return a, b


def validate_coordinates(lon, lat):
    """
    Check that coordinates are finite and inside the geographic range.

    Args:
        lon (array-like): Longitudes in degrees, [-180, 180].
        lat (array-like): Latitudes in degrees, [-90, 90].

    Raises:
        InvalidCoordinate: If any coordinate is non-numeric, non-finite or out of range.
    """
    lon, lat = _as_arrays(lon, lat, ("lon", "lat"))
    bad = ~np.isfinite(lon) | ~np.isfinite(lat) | (np.abs(lat) > 90.0) | (np.abs(lon) > 180.0)
    if bad.any():
        idx = int(np.flatnonzero(bad)[0])
        raise InvalidCoordinate(
            f"{int(bad.sum())} coordinate(s) outside the valid geographic range, "
            f"first at index {idx}: lon={lon[idx]}, lat={lat[idx]}"
        )


def reproject(lon, lat, projection=None):
    """
    Reproject WGS84 longitude/latitude into planar meters.

    Args:
        lon (float or array-like): Longitudes in degrees.
        lat (float or array-like): Latitudes in degrees.
        projection (ProjectionParams, optional): Target projection. Defaults to UTM 49S.

    Returns:
        tuple: (x, y). Floats for scalar input, numpy arrays otherwise,
        in the same order as the input.

    Raises:
        InvalidCoordinate: If any input coordinate is invalid.
    """
    projection = projection or ProjectionParams()
    scalar = np.ndim(lon) == 0 and np.ndim(lat) == 0
    lon_arr, lat_arr = _as_arrays(lon, lat, ("lon", "lat"))
    validate_coordinates(lon_arr, lat_arr)

    if lon_arr.size == 0:
        return np.empty(0), np.empty(0)

    try:
        x, y = _forward(projection).transform(lon_arr, lat_arr, errcheck=True)
    except ProjError as e:
        raise InvalidCoordinate(f"Projection failed: {e}") from e

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if scalar:
        return float(x[0]), float(y[0])
    return x, y


def unproject(x, y, projection=None):
    """
    Inverse of `reproject`: planar meters back to WGS84 longitude/latitude.

    Returns:
        tuple: (lon, lat), floats for scalar input, numpy arrays otherwise.
    """
    projection = projection or ProjectionParams()
    scalar = np.ndim(x) == 0 and np.ndim(y) == 0
    x_arr, y_arr = _as_arrays(x, y, ("x", "y"))
    if x_arr.size == 0:
        return np.empty(0), np.empty(0)

    try:
        lon, lat = _inverse(projection).transform(x_arr, y_arr, errcheck=True)
    except ProjError as e:
        raise InvalidCoordinate(f"Inverse projection failed: {e}") from e

    lon = np.asarray(lon, dtype=float)
    lat = np.asarray(lat, dtype=float)
    if scalar:
        return float(lon[0]), float(lat[0])
    return lon, lat
