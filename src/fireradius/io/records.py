"""
Reading fire detection tables.

Input files are MCD14ML-style text tables: a header row followed by one
detection per line, fields separated by whitespace or commas. Rows that do not
parse are dropped and counted; they are never zero-filled.
"""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from fireradius.constants import (
    COLUMNS,
    COLUMN_ALIASES,
    DATE_FORMAT,
    FLOAT_COLUMNS,
    INT_COLUMNS,
    COMMA_SEPARATOR,
    WHITESPACE_SEPARATOR,
)
from fireradius.exceptions import MalformedRecord, UnreadableFile


@dataclass
class ParsedFile:
    """Valid records of one file plus how many data lines were rejected."""

    path: Path
    records: pd.DataFrame
    lines_skipped: int

    @property
    def lines_read(self):
        return len(self.records) + self.lines_skipped


def empty_records():
    """An empty detection table with canonical columns and dtypes."""
    frame = pd.DataFrame({col: pd.Series(dtype=object) for col in COLUMNS})
    return _apply_dtypes(frame)


def _apply_dtypes(frame):
    frame = frame.copy()
    frame["date"] = pd.to_datetime(frame["date"], format=DATE_FORMAT)
    for col in FLOAT_COLUMNS:
        frame[col] = frame[col].astype("float64")
    for col in INT_COLUMNS:
        frame[col] = frame[col].astype("int64")
    frame["satelliteFlag"] = frame["satelliteFlag"].astype(str)
    return frame[COLUMNS]


def _normalise_header(columns):
    renamed = [COLUMN_ALIASES.get(str(c).strip(), str(c).strip()) for c in columns]
    missing = [c for c in COLUMNS if c not in renamed]
    return renamed, missing


def parse_records(raw):
    """
    Parse and validate a table of raw string fields.

    Args:
        raw (pandas.DataFrame): String columns, canonical names.

    Returns:
        tuple: (records DataFrame in canonical dtypes, number of rejected rows)
    """
    if raw.empty:
        return empty_records(), 0

    raw = raw[COLUMNS].apply(lambda s: s.str.strip())
    # Accumulated in place, so it must not be a read-only view of pandas data
    valid = raw.notna().all(axis=1).to_numpy(dtype=bool, copy=True)

    date_str = raw["date"].astype(str)
    dates = pd.to_datetime(date_str, format=DATE_FORMAT, errors="coerce")
    valid &= date_str.str.fullmatch(r"\d{8}").fillna(False).to_numpy(dtype=bool)
    valid &= dates.notna().to_numpy(dtype=bool)

    numeric = {}
    for col in FLOAT_COLUMNS + INT_COLUMNS:
        values = pd.to_numeric(raw[col], errors="coerce").astype("float64")
        numeric[col] = values
        valid &= np.isfinite(values.to_numpy())

    for col in INT_COLUMNS:
        values = numeric[col].to_numpy()
        with np.errstate(invalid="ignore"):
            valid &= np.floor(values) == values

    lat = numeric["lat"].to_numpy()
    lon = numeric["lon"].to_numpy()
    with np.errstate(invalid="ignore"):
        valid &= (lat >= -90.0) & (lat <= 90.0)
        valid &= (lon >= -180.0) & (lon <= 180.0)

        hhmm = numeric["time"].to_numpy()
        valid &= (hhmm >= 0) & (hhmm <= 2359) & (np.mod(hhmm, 100) < 60)

        conf = numeric["confidence"].to_numpy()
        valid &= (conf >= 0) & (conf <= 100)

    sat = raw["satelliteFlag"].astype(str)
    valid &= (sat != "").to_numpy(dtype=bool)

    records = pd.DataFrame({
        "date": dates[valid],
        "time": numeric["time"][valid],
        "satelliteFlag": sat[valid],
        **{col: numeric[col][valid] for col in FLOAT_COLUMNS},
        **{col: numeric[col][valid] for col in INT_COLUMNS if col != "time"},
    })
    records = _apply_dtypes(records).reset_index(drop=True)
    return records, int((~valid).sum())


def parse_record(fields):
    """
    Parse a single row given as a list of field strings in canonical order.

    Raises:
        MalformedRecord: If the row has the wrong field count or any invalid value.

    Returns:
        pandas.Series: The parsed record.
    """
    if len(fields) != len(COLUMNS):
        raise MalformedRecord(f"Expected {len(COLUMNS)} fields, got {len(fields)}: {fields!r}")
    raw = pd.DataFrame([list(fields)], columns=COLUMNS, dtype=object)
    records, skipped = parse_records(raw)
    if skipped:
        raise MalformedRecord(f"Invalid detection record: {fields!r}")
    return records.iloc[0]


def _scan_layout(path):
    """
    Separator implied by the header line, and the number of non-blank data lines.

    Rows with too many fields are dropped by the parser without a trace, so
    they are counted as the difference between data lines and parsed rows.
    """
    header = None
    data_lines = 0
    with open(path, "rb") as f:
        for line in f:
            if not line.strip():
                continue
            if header is None:
                header = line
            else:
                data_lines += 1
    if header is None:
        raise UnreadableFile(f"{path}: file is empty")
    sep = COMMA_SEPARATOR if b"," in header else WHITESPACE_SEPARATOR
    return sep, data_lines


def read_fire_file(path):
    """
    Read one detection table, keeping only rows that parse.

    Args:
        path (str or Path): Whitespace- or comma-delimited text file with a header row.

    Returns:
        ParsedFile: Valid records (canonical columns) and the skipped line count.

    Raises:
        UnreadableFile: If the file cannot be opened, is empty, or its header
            lacks required columns.
    """
    path = Path(path)
    try:
        sep, data_lines = _scan_layout(path)
        raw = pd.read_csv(
            path,
            sep=sep,
            engine="c",
            skipinitialspace=True,
            dtype=str,
            keep_default_na=False,
            na_values=[""],
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError as e:
        raise UnreadableFile(f"{path}: file is empty") from e
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise UnreadableFile(f"{path}: {e}") from e

    columns, missing = _normalise_header(raw.columns)
    if missing:
        raise UnreadableFile(f"{path}: header is missing columns {missing}")
    raw.columns = columns

    records, invalid = parse_records(raw)
    return ParsedFile(path=path, records=records, lines_skipped=invalid + data_lines - len(raw))


def read_records(path):
    """
    Read a persisted detection table (intermediate or per-radius output).

    Malformed rows are dropped like in `read_fire_file`.

    Returns:
        pandas.DataFrame: Records in canonical column order.
    """
    return read_fire_file(path).records
