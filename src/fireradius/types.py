from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def contains(self, lat, lon):
        """
        Strict containment test: points exactly on an edge are outside.

        Args:
            lat (array-like): Latitudes in degrees.
            lon (array-like): Longitudes in degrees.

        Returns:
            numpy.ndarray: Boolean mask.
        """
        lat = np.asarray(lat, dtype=float)
        lon = np.asarray(lon, dtype=float)
        return (
            (self.min_lat < lat) & (lat < self.max_lat)
            & (self.min_lon < lon) & (lon < self.max_lon)
        )

    def encloses(self, other):
        """True if `other` lies strictly inside this box."""
        return (
            self.min_lat < other.min_lat and other.max_lat < self.max_lat
            and self.min_lon < other.min_lon and other.max_lon < self.max_lon
        )


@dataclass(frozen=True)
class ReferencePoint:
    """The fixed location fire detections are measured against."""

    name: str
    lon: float
    lat: float
    x: Optional[float] = field(default=None, compare=False)
    y: Optional[float] = field(default=None, compare=False)

    @property
    def planar(self):
        if self.x is None or self.y is None:
            raise ValueError(f"Reference point '{self.name}' has not been projected.")
        return (self.x, self.y)
