import sys
import warnings
from pathlib import Path

from fireradius import FireRadius, FireRadiusConfig
from fireradius.exceptions import CoarseBoundsWarning


def main(raw_dir, out_dir):
    print("=== fireradius: Fire detections around Ketapang Airport ===")

    config = FireRadiusConfig(input_dir=Path(raw_dir), input_pattern="MCD14ML.*.txt", output_dir=Path(out_dir))

    print("1. Building buffers...")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", CoarseBoundsWarning)
        lab = FireRadius(config)
    for w in caught:
        print(f"   Warning: {w.message}")
    for buffer in lab.buffers.values():
        print(f"   {buffer.radius_km:g} km buffer, {len(buffer.polygon.exterior.coords) - 1} vertices")

    candidates = Path(out_dir) / "rough_square.csv"
    if candidates.exists():
        print(f"2. Reusing rough square from {candidates}")
        lab.load_candidates()
    else:
        print(f"2. Scanning {raw_dir} (this reads the whole corpus once)...")
        lab.run_prefilter()

    print("3. Filtering by radius...")
    lab.filter_by_radius()
    lab.write_results()
    print(f"   Buffers written to {lab.export_buffers()}")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("usage: python 01_ketapang_radius_analysis.py RAW_DIR OUT_DIR")
        sys.exit(1)
    main(sys.argv[1], sys.argv[2])
