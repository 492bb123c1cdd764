import numpy as np
import pandas as pd
import pytest

from fireradius.config import DEFAULT_PROJECTION, DEFAULT_REFERENCE_LAT, DEFAULT_REFERENCE_LON
from fireradius.constants import COLUMNS
from fireradius.io.records import parse_records
from fireradius.spatial.projection import reproject

HEADER = " ".join(COLUMNS)


def detection_row(lat, lon, date="20190815", time="0348", sat="T"):
    return [date, time, sat, str(lat), str(lon), "330.5", "295.1", "512", "12.3", "85", "0"]


@pytest.fixture
def projection():
    return DEFAULT_PROJECTION


@pytest.fixture
def reference_xy(projection):
    return reproject(DEFAULT_REFERENCE_LON, DEFAULT_REFERENCE_LAT, projection)


@pytest.fixture
def fire_file(tmp_path):
    """Factory writing a detection table; rows are lists of field strings or raw lines."""
    def _write(name, rows, header=HEADER, sep=" "):
        path = tmp_path / name
        lines = [header] if header is not None else []
        for row in rows:
            lines.append(row if isinstance(row, str) else sep.join(row))
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write


@pytest.fixture
def make_records():
    """Factory building a parsed detection table from (lat, lon) pairs."""
    def _make(coords):
        raw = pd.DataFrame([detection_row(lat, lon) for lat, lon in coords], columns=COLUMNS, dtype=object)
        records, skipped = parse_records(raw)
        assert skipped == 0
        return records
    return _make


@pytest.fixture
def scattered_coords():
    """(lat, lon) pairs scattered up to ~650 km around the reference point."""
    rng = np.random.default_rng(42)
    lats = DEFAULT_REFERENCE_LAT + rng.uniform(-6.0, 6.0, 4000)
    lons = DEFAULT_REFERENCE_LON + rng.uniform(-6.0, 6.0, 4000)
    return list(zip(lats.round(5), lons.round(5)))
