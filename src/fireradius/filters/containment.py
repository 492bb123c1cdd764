import numpy as np
import geopandas as gpd
from shapely.geometry import Point

from fireradius.spatial.projection import reproject

# Points this close outside the circle still count as on its edge
EDGE_TOLERANCE_M = 1e-3


def contains(buffer, x, y, method="distance"):
    """
    Boundary-inclusive membership test for planar points.

    Args:
        buffer (Buffer): The buffer to test against.
        x (array-like): Planar x in meters.
        y (array-like): Planar y in meters.
        method (str): 'distance' compares the distance to the center with the
            radius; 'polygon' tests coverage by the buffer polygon.

    Returns:
        numpy.ndarray: Boolean mask, True for points inside or on the edge.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size == 0:
        return np.zeros(0, dtype=bool)

    points = gpd.GeoSeries(gpd.points_from_xy(x, y))
    if method == "distance":
        dist = points.distance(Point(buffer.center))
        return (dist <= buffer.radius_m + EDGE_TOLERANCE_M).to_numpy()
    if method == "polygon":
        return points.covered_by(buffer.polygon).to_numpy()
    raise ValueError(f"Unknown containment method '{method}'.")


def filter_candidates(candidates, buffer, projection, method="distance"):
    """
    Keep the candidates that fall inside one buffer.

    Args:
        candidates (pandas.DataFrame): Records with 'lon' and 'lat' in degrees.
        buffer (Buffer): Buffer in `projection` coordinates.
        projection (ProjectionParams): Planar projection.
        method (str): See `contains`.

    Returns:
        pandas.DataFrame: The matching rows, original order, fresh index.
    """
    return filter_by_radius(candidates, {buffer.radius_m: buffer}, projection, method)[buffer.radius_m]


def filter_by_radius(candidates, buffers, projection, method="distance"):
    """
    Split candidates into one result set per buffer.

    Candidates are reprojected once and tested against every buffer.

    Returns:
        dict: radius -> pandas.DataFrame, ordered by increasing radius.
    """
    if candidates.empty:
        return {r: candidates.copy() for r in sorted(buffers)}

    x, y = reproject(candidates["lon"].to_numpy(), candidates["lat"].to_numpy(), projection)

    results = {}
    for radius in sorted(buffers):
        mask = contains(buffers[radius], x, y, method=method)
        results[radius] = candidates.loc[mask].reset_index(drop=True)
    return results
