"""
Command line entry point.

    fireradius prefilter --input-dir raw/ --output-dir out/
    fireradius filter --output-dir out/
    fireradius run --input-dir raw/ --output-dir out/ --radii-km 5 50 250 500
"""

import argparse
import sys
from pathlib import Path

from fireradius.config import (
    DEFAULT_COARSE_BOUNDS,
    DEFAULT_PROJECTION,
    DEFAULT_RADII_METERS,
    DEFAULT_REFERENCE_LAT,
    DEFAULT_REFERENCE_LON,
    DEFAULT_REFERENCE_NAME,
    CONTAINMENT_METHODS,
    FireRadiusConfig,
)
from fireradius.constants import OUTPUT_DELIMITERS
from fireradius.core import FireRadius
from fireradius.exceptions import ConfigurationError, UnreadableFile
from fireradius.spatial.buffers import bounds_enclosing, build_buffers
from fireradius.spatial.projection import ProjectionParams, reproject
from fireradius.types import BoundingBox


def build_parser():
    parser = argparse.ArgumentParser(
        prog="fireradius",
        description="Select fire detections within fixed radii of a reference point",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--output-dir", type=Path, required=True, help="Directory for intermediate and final tables")
    common.add_argument("--candidates", type=Path, default=None,
                        help="Intermediate 'rough square' table (default: <output-dir>/rough_square.csv)")
    common.add_argument("--name", default=DEFAULT_REFERENCE_NAME, help="Reference point name")
    common.add_argument("--lon", type=float, default=DEFAULT_REFERENCE_LON, help="Reference longitude (degrees)")
    common.add_argument("--lat", type=float, default=DEFAULT_REFERENCE_LAT, help="Reference latitude (degrees)")
    common.add_argument("--radii-km", type=float, nargs="+", default=[r / 1000.0 for r in DEFAULT_RADII_METERS],
                        help="Buffer radii in kilometers")
    common.add_argument("--bounds", type=float, nargs=4, metavar=("MIN_LAT", "MAX_LAT", "MIN_LON", "MAX_LON"),
                        default=None, help="Coarse bounding box in degrees")
    common.add_argument("--auto-bounds", action="store_true",
                        help="Derive the coarse box from the largest buffer instead of --bounds")
    common.add_argument("--zone", type=int, default=DEFAULT_PROJECTION.zone, help="UTM zone")
    common.add_argument("--north", action="store_true", help="Use the northern hemisphere zone")
    common.add_argument("--semi-major", type=float, default=DEFAULT_PROJECTION.a, help="Ellipsoid semi-major axis (m)")
    common.add_argument("--semi-minor", type=float, default=DEFAULT_PROJECTION.b, help="Ellipsoid semi-minor axis (m)")
    common.add_argument("--method", choices=CONTAINMENT_METHODS, default="distance", help="Containment test")
    common.add_argument("--delimiter", choices=sorted(OUTPUT_DELIMITERS), default="comma", help="Output field separator")
    common.add_argument("--export-buffers", action="store_true", help="Also write buffers.geojson")

    raw = argparse.ArgumentParser(add_help=False)
    raw.add_argument("--input-dir", type=Path, required=True, help="Directory of raw detection tables")
    raw.add_argument("--pattern", default="*", help="Glob pattern for input files (default: *)")

    sub.add_parser("prefilter", parents=[common, raw], help="Scan raw files into the coarse candidate table")
    sub.add_parser("filter", parents=[common], help="Filter an existing candidate table by radius")
    run = sub.add_parser("run", parents=[common, raw], help="Prefilter and filter in one go")
    run.add_argument("--reuse-candidates", action="store_true",
                     help="Use the existing candidate table instead of rescanning raw input")
    return parser


def config_from_args(args):
    projection = ProjectionParams(zone=args.zone, south=not args.north, a=args.semi_major, b=args.semi_minor)
    if args.bounds is not None:
        min_lat, max_lat, min_lon, max_lon = args.bounds
        bounds = BoundingBox(min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon)
    else:
        bounds = DEFAULT_COARSE_BOUNDS

    config = FireRadiusConfig(
        reference_name=args.name,
        reference_lon=args.lon,
        reference_lat=args.lat,
        projection=projection,
        radii_m=tuple(km * 1000.0 for km in args.radii_km),
        coarse_bounds=bounds,
        input_dir=getattr(args, "input_dir", None),
        input_pattern=getattr(args, "pattern", "*"),
        output_dir=args.output_dir,
        candidates_path=args.candidates,
        delimiter=OUTPUT_DELIMITERS[args.delimiter],
        method=args.method,
    )

    if args.auto_bounds:
        config.validate()
        center = reproject(config.reference_lon, config.reference_lat, projection)
        largest = build_buffers(center, [max(config.radii_m)])
        config.coarse_bounds = bounds_enclosing(largest[max(config.radii_m)], projection)
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
        lab = FireRadius(config)

        if args.command == "prefilter":
            lab.run_prefilter()
        elif args.command == "filter":
            lab.load_candidates()
            lab.filter_by_radius()
            lab.write_results()
        else:
            lab.run(reuse_candidates=args.reuse_candidates)

        if args.export_buffers:
            print(f"Wrote buffers to {lab.export_buffers()}")
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except UnreadableFile as e:
        print(f"Cannot read candidates: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
