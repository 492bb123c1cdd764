"""
Coarse bounding-box prefilter.

Scans raw detection files one at a time and keeps only rows strictly inside a
latitude/longitude box. Nothing is reprojected here; the box is chosen wide
enough that the buffer filter downstream never needs a row this stage dropped.
"""

import warnings
from dataclasses import dataclass, field
from pathlib import Path

from fireradius.exceptions import UnreadableFile, UnreadableFileWarning
from fireradius.io.records import read_fire_file
from fireradius.io.writer import concat_records
from fireradius.spatial.buffers import buffer_envelope


@dataclass
class PrefilterStats:
    files_read: int = 0
    files_skipped: list = field(default_factory=list)
    records_read: int = 0
    records_skipped: int = 0
    candidates: int = 0


@dataclass
class PrefilterResult:
    candidates: object
    stats: PrefilterStats


def within_bounds(records, bounds):
    """
    Boolean mask of records strictly inside `bounds`.

    Args:
        records (pandas.DataFrame): Must have 'lat' and 'lon' columns.
        bounds (BoundingBox): Coarse box in degrees.

    Returns:
        numpy.ndarray: True where min < value < max on both axes.
    """
    return bounds.contains(records["lat"].to_numpy(), records["lon"].to_numpy())


def iter_prefilter(paths, bounds, stats=None):
    """
    Yield the in-box records of each readable file, one file at a time.

    Unreadable files are skipped with an UnreadableFileWarning and recorded in
    `stats.files_skipped`.
    """
    stats = stats if stats is not None else PrefilterStats()
    for path in paths:
        path = Path(path)
        try:
            parsed = read_fire_file(path)
        except UnreadableFile as e:
            warnings.warn(f"Skipping unreadable file: {e}", UnreadableFileWarning)
            stats.files_skipped.append((str(path), str(e)))
            continue

        stats.files_read += 1
        stats.records_read += parsed.lines_read
        stats.records_skipped += parsed.lines_skipped

        kept = parsed.records.loc[within_bounds(parsed.records, bounds)]
        stats.candidates += len(kept)
        yield kept


def prefilter(paths, bounds):
    """
    Reduce raw detection files to the records inside a coarse box.

    Args:
        paths (iterable): Input file paths, processed in the given order.
        bounds (BoundingBox): Coarse box in degrees (strict inequality).

    Returns:
        PrefilterResult: candidate records (canonical columns, input order) and counts.
    """
    stats = PrefilterStats()
    candidates = concat_records(list(iter_prefilter(paths, bounds, stats)))
    return PrefilterResult(candidates=candidates, stats=stats)


def bounds_cover_buffer(bounds, buffer, projection):
    """True if `bounds` strictly encloses the geographic envelope of `buffer`."""
    return bounds.encloses(buffer_envelope(buffer, projection))
