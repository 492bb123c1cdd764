# constants.py

# Canonical column order for detection tables (input, intermediate and output)
COLUMNS = [
    "date",
    "time",
    "satelliteFlag",
    "lat",
    "lon",
    "brightness1",
    "brightness2",
    "sampleNumber",
    "fireRadiativePower",
    "confidence",
    "detectionType",
]

# MODIS MCD14ML header names
COLUMN_ALIASES = {
    "YYYYMMDD": "date",
    "HHMM": "time",
    "sat": "satelliteFlag",
    "T21": "brightness1",
    "T31": "brightness2",
    "sample": "sampleNumber",
    "FRP": "fireRadiativePower",
    "conf": "confidence",
    "type": "detectionType",
}

FLOAT_COLUMNS = ["lat", "lon", "brightness1", "brightness2", "fireRadiativePower"]
INT_COLUMNS = ["time", "sampleNumber", "confidence", "detectionType"]

DATE_FORMAT = "%Y%m%d"

# A comma in the header selects comma-separated parsing, otherwise runs of whitespace
COMMA_SEPARATOR = ","
WHITESPACE_SEPARATOR = r"\s+"

# Separators the writer may use; each reads back through one of the above
OUTPUT_DELIMITERS = {"comma": ",", "space": " ", "tab": "\t"}
