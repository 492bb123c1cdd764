# config.py
# Defaults for the reference point, projection, buffers and coarse box

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from fireradius.constants import OUTPUT_DELIMITERS
from fireradius.exceptions import ConfigurationError
from fireradius.spatial.projection import ProjectionParams
from fireradius.types import BoundingBox

DEFAULT_PROJECTION = ProjectionParams(zone=49, south=True, a=6378160.0, b=6356774.50408554)

# Ketapang airport, West Kalimantan
DEFAULT_REFERENCE_NAME = "Ketapang Airport"
DEFAULT_REFERENCE_LON = 109.9619
DEFAULT_REFERENCE_LAT = -1.8166

DEFAULT_RADII_METERS = (5000.0, 50000.0, 250000.0, 500000.0)

# "Rough square" around the reference point, in degrees
DEFAULT_COARSE_BOUNDS = BoundingBox(min_lat=-6.5, min_lon=105.0, max_lat=2.7, max_lon=115.0)

DEFAULT_INPUT_PATTERN = "*"
DEFAULT_CANDIDATES_FILENAME = "rough_square.csv"
DEFAULT_OUTPUT_TEMPLATE = "fires_within_{km}km.csv"
DEFAULT_DELIMITER = ","

CONTAINMENT_METHODS = ("distance", "polygon")


@dataclass
class FireRadiusConfig:
    """Everything a pipeline run needs, built once and passed to each stage."""

    reference_name: str = DEFAULT_REFERENCE_NAME
    reference_lon: float = DEFAULT_REFERENCE_LON
    reference_lat: float = DEFAULT_REFERENCE_LAT
    projection: ProjectionParams = DEFAULT_PROJECTION
    radii_m: Tuple[float, ...] = DEFAULT_RADII_METERS
    coarse_bounds: BoundingBox = DEFAULT_COARSE_BOUNDS
    input_dir: Optional[Path] = None
    input_pattern: str = DEFAULT_INPUT_PATTERN
    output_dir: Optional[Path] = None
    candidates_path: Optional[Path] = None
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    delimiter: str = DEFAULT_DELIMITER
    method: str = "distance"
    quad_segs: Optional[int] = None

    def __post_init__(self):
        self.radii_m = tuple(float(r) for r in self.radii_m)
        if self.input_dir is not None:
            self.input_dir = Path(self.input_dir)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        if self.candidates_path is not None:
            self.candidates_path = Path(self.candidates_path)

    def validate(self):
        """
        Check values that do not depend on the filesystem.

        Raises:
            ConfigurationError: On the first invalid option found.
        """
        if not self.radii_m:
            raise ConfigurationError("At least one buffer radius is required.")
        for r in self.radii_m:
            if not r > 0:
                raise ConfigurationError(f"Buffer radius must be > 0 meters, got {r}.")
        if len(set(self.radii_m)) != len(self.radii_m):
            raise ConfigurationError(f"Buffer radii must be unique, got {self.radii_m}.")

        b = self.coarse_bounds
        if not b.min_lat < b.max_lat:
            raise ConfigurationError(f"Coarse box needs min_lat < max_lat, got {b.min_lat} >= {b.max_lat}.")
        if not b.min_lon < b.max_lon:
            raise ConfigurationError(f"Coarse box needs min_lon < max_lon, got {b.min_lon} >= {b.max_lon}.")

        if not -90.0 <= self.reference_lat <= 90.0:
            raise ConfigurationError(f"Reference latitude out of range: {self.reference_lat}.")
        if not -180.0 <= self.reference_lon <= 180.0:
            raise ConfigurationError(f"Reference longitude out of range: {self.reference_lon}.")

        if self.method not in CONTAINMENT_METHODS:
            raise ConfigurationError(
                f"Unknown containment method '{self.method}'. Choose one of {CONTAINMENT_METHODS}."
            )
        if self.quad_segs is not None and self.quad_segs < 1:
            raise ConfigurationError(f"quad_segs must be >= 1, got {self.quad_segs}.")
        if self.delimiter not in OUTPUT_DELIMITERS.values():
            raise ConfigurationError(
                f"Unsupported delimiter {self.delimiter!r}; intermediate tables must read back, "
                f"use one of {sorted(OUTPUT_DELIMITERS.values())}."
            )
        if "{km}" not in self.output_template:
            raise ConfigurationError("output_template must contain a '{km}' placeholder.")
        return self

    def require_input_dir(self):
        if self.input_dir is None:
            raise ConfigurationError("An input directory is required to scan raw detections.")
        if not self.input_dir.is_dir():
            raise ConfigurationError(f"Input directory does not exist: {self.input_dir}")
        return self.input_dir

    def require_output_dir(self):
        if self.output_dir is None:
            raise ConfigurationError("An output directory is required.")
        return self.output_dir

    @property
    def resolved_candidates_path(self):
        if self.candidates_path is not None:
            return self.candidates_path
        return self.require_output_dir() / DEFAULT_CANDIDATES_FILENAME

    def output_path(self, radius_m):
        return self.require_output_dir() / self.output_template.format(km=format_km(radius_m))


def format_km(radius_m):
    """5000.0 -> '5', 2500.0 -> '2.5'"""
    return f"{radius_m / 1000.0:g}"
