import os
import tempfile
from pathlib import Path

import pandas as pd

from fireradius.config import format_km
from fireradius.constants import COLUMNS, DATE_FORMAT, OUTPUT_DELIMITERS
from fireradius.io.records import empty_records


def format_records(records):
    """
    Render a detection table with its original field formats:
    8-digit dates and zero-padded HHMM times.
    """
    out = records[COLUMNS].copy()
    out["date"] = out["date"].dt.strftime(DATE_FORMAT)
    out["time"] = out["time"].map("{:04d}".format)
    return out


def write_records(records, path, delimiter=","):
    """
    Persist a detection table atomically.

    The table is written to a temporary file next to `path` and renamed over it
    only once writing succeeded, so an interrupted run never leaves a truncated
    file behind.

    Args:
        records (pandas.DataFrame): Detections in canonical columns.
        path (str or Path): Destination file.
        delimiter (str): Field separator, one of OUTPUT_DELIMITERS so the table
            reads back with `read_records`.

    Returns:
        Path: The written file.
    """
    if delimiter not in OUTPUT_DELIMITERS.values():
        raise ValueError(
            f"Unsupported delimiter {delimiter!r}; use one of {sorted(OUTPUT_DELIMITERS.values())}."
        )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    formatted = format_records(records)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", newline="") as f:
            formatted.to_csv(f, sep=delimiter, index=False)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
    return path


def summary_line(count, radius_m, reference_name):
    return f"{count} fire detections within a {format_km(radius_m)}km radius of {reference_name}"


def concat_records(frames):
    """Concatenate per-file record tables once, keeping file and row order."""
    frames = [f for f in frames if not f.empty]
    if not frames:
        return empty_records()
    return pd.concat(frames, ignore_index=True)
