import warnings
from dataclasses import dataclass, field

from fireradius.config import FireRadiusConfig
from fireradius.exceptions import CoarseBoundsWarning
from fireradius.filters.containment import filter_by_radius
from fireradius.filters.prefilter import PrefilterStats, bounds_cover_buffer, prefilter
from fireradius.io.records import read_fire_file
from fireradius.io.writer import summary_line, write_records
from fireradius.spatial.buffers import build_buffers, write_buffers
from fireradius.spatial.projection import reproject
from fireradius.types import ReferencePoint


@dataclass
class RunSummary:
    files_read: int = 0
    files_skipped: list = field(default_factory=list)
    records_read: int = 0
    records_skipped: int = 0
    candidates: int = 0
    counts: dict = field(default_factory=dict)


class FireRadius:
    """
    Core class for the fire-detection radius analysis.
    Holds the reference point, its buffers, the coarse candidates and the
    per-radius results of one run.
    """

    def __init__(self, config=None):
        """
        Validate the configuration and build the reference geometry.

        Args:
            config (FireRadiusConfig, optional): Run options. Defaults apply when omitted.

        Raises:
            ConfigurationError: If any option is invalid. No file is touched before this check.
        """
        self.config = (config or FireRadiusConfig()).validate()

        x, y = reproject(self.config.reference_lon, self.config.reference_lat, self.config.projection)
        self.reference = ReferencePoint(
            name=self.config.reference_name,
            lon=self.config.reference_lon,
            lat=self.config.reference_lat,
            x=x,
            y=y,
        )
        self.buffers = build_buffers(self.reference.planar, self.config.radii_m, quad_segs=self.config.quad_segs)

        largest = self.buffers[max(self.buffers)]
        if not bounds_cover_buffer(self.config.coarse_bounds, largest, self.config.projection):
            warnings.warn(
                f"Coarse bounding box {self.config.coarse_bounds} does not enclose the "
                f"{largest.radius_km:g}km buffer; detections near its edge may be dropped by the prefilter.",
                CoarseBoundsWarning,
            )

        self.candidates = None
        self.results = {}
        self.summary = RunSummary()

    def input_files(self):
        """Sorted regular files in the input directory matching the input pattern."""
        input_dir = self.config.require_input_dir()
        return sorted(p for p in input_dir.glob(self.config.input_pattern) if p.is_file())

    def run_prefilter(self, paths=None, persist=True):
        """
        Scan raw files and keep detections inside the coarse box.

        Args:
            paths (list, optional): Files to scan. Defaults to `input_files()`.
            persist (bool): Write the candidates to the intermediate file.

        Returns:
            pandas.DataFrame: The coarse candidates.
        """
        if persist:
            self.config.require_output_dir()
        if paths is None:
            paths = self.input_files()

        print(f"Scanning {len(paths)} file(s) for detections inside {self.config.coarse_bounds}...")
        result = prefilter(paths, self.config.coarse_bounds)
        self._record_stats(result.stats)
        self.candidates = result.candidates
        print(
            f"   Kept {len(self.candidates)} of {result.stats.records_read} records; skipped "
            f"{len(result.stats.files_skipped)} file(s) and {result.stats.records_skipped} malformed record(s)."
        )

        if persist:
            out = write_records(self.candidates, self.config.resolved_candidates_path, self.config.delimiter)
            print(f"   Wrote {len(self.candidates)} candidates to {out}")
        return self.candidates

    def load_candidates(self, path=None):
        """Re-read a persisted candidate set instead of rescanning raw input."""
        path = path or self.config.resolved_candidates_path
        parsed = read_fire_file(path)
        self.candidates = parsed.records
        self.summary.files_read = 1
        self.summary.records_read = parsed.lines_read
        self.summary.records_skipped = parsed.lines_skipped
        self.summary.candidates = len(self.candidates)
        print(
            f"Loaded {len(self.candidates)} candidates from {path}; "
            f"skipped {parsed.lines_skipped} malformed record(s)."
        )
        return self.candidates

    def filter_by_radius(self):
        """
        Run the buffer containment test for every configured radius.

        Returns:
            dict: radius (m) -> pandas.DataFrame of detections within it.
        """
        if self.candidates is None:
            raise ValueError("No candidates loaded. Call run_prefilter() or load_candidates() first.")

        self.results = filter_by_radius(
            self.candidates, self.buffers, self.config.projection, method=self.config.method
        )
        self.summary.counts = {radius: len(frame) for radius, frame in self.results.items()}
        return self.results

    def write_results(self):
        """
        Persist one table per radius and print the summary lines.

        Returns:
            dict: radius (m) -> Path of the written file.
        """
        if not self.results:
            raise ValueError("No results to write. Call filter_by_radius() first.")

        written = {}
        for radius, frame in self.results.items():
            written[radius] = write_records(frame, self.config.output_path(radius), self.config.delimiter)
            print(summary_line(len(frame), radius, self.reference.name))
        return written

    def export_buffers(self, path=None):
        """Write the buffer polygons as GeoJSON (EPSG:4326)."""
        path = path or self.config.require_output_dir() / "buffers.geojson"
        return write_buffers(self.buffers, self.config.projection, path)

    def run(self, reuse_candidates=False):
        """
        Full pipeline: coarse prefilter (or reuse), containment filter, write.

        Args:
            reuse_candidates (bool): Load the intermediate file when it exists
                instead of scanning the raw input again.

        Returns:
            RunSummary: Counts for this run.
        """
        self.config.require_output_dir()
        if reuse_candidates and self.config.resolved_candidates_path.exists():
            self.load_candidates()
        else:
            self.config.require_input_dir()
            self.run_prefilter()

        self.filter_by_radius()
        self.write_results()
        return self.summary

    def _record_stats(self, stats: PrefilterStats):
        self.summary.files_read = stats.files_read
        self.summary.files_skipped = list(stats.files_skipped)
        self.summary.records_read = stats.records_read
        self.summary.records_skipped = stats.records_skipped
        self.summary.candidates = stats.candidates
