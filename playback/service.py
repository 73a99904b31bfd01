"""
Replay service: re-emit .modraw captures to disk at the recorded pace.

Examples:
  # One file at real time
  python -m playback.service -i data/run01.modraw -o out/run01.modraw

  # Every .modraw in a folder, 10x faster, one log line per packet
  python -m playback.service -i data/mission/ -o out/ --speed 10 -v

  # Files listed in a text file (one per line, # comments allowed)
  python -m playback.service -i @data/mission.txt -o out/

  # Older single-run captures without OFFSET_TIME in the header
  python -m playback.service -i old.modraw -o out/ --relative-only
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from common.errors import ReplayError
from common.logging_setup import get_logger, setup_logging
from playback.batch import run_batch
from playback.jobs import JobValidationError, resolve_jobs


log = get_logger("playback")

DEFAULT_CONFIG = "config/params.yaml"


def load_config(path: str = DEFAULT_CONFIG) -> Dict:
    if not Path(path).exists():
        return {
            "replay": {"speed": 1.0, "absolute_dates": True, "extension": ".modraw"},
            "logging": {"level": "INFO"},
        }
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Replay .modraw captures at the recorded cadence")
    ap.add_argument("-i", "--input", required=True,
                    help="Input .modraw file path, or @listOfFiles.txt, or folder to scan for .modraw files")
    ap.add_argument("-o", "--output", required=True, help="Output .modraw file path, or folder to write to")
    ap.add_argument("-s", "--speed", type=float, default=None, help="Time multiplier (default from config, else 1.0)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Show extra information")
    ap.add_argument("--relative-only", action="store_true",
                    help="Do not reconstruct absolute dates; header may omit OFFSET_TIME")
    ap.add_argument("--config", default=DEFAULT_CONFIG)
    ap.add_argument("--log-level", default=None, help="Override logging level (DEBUG/INFO/WARNING/ERROR)")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    P = load_config(args.config)
    R = P.get("replay", {}) or {}
    setup_logging(args.log_level or P.get("logging", {}).get("level", "INFO"), force=True)

    speed = float(args.speed if args.speed is not None else R.get("speed", 1.0))
    absolute_dates = bool(R.get("absolute_dates", True)) and not args.relative_only
    extension = str(R.get("extension", ".modraw"))

    try:
        jobs = resolve_jobs(args.input, args.output, speed=speed, extension=extension)
    except JobValidationError as e:
        raise SystemExit(f"error: {e}")

    if args.verbose:
        for job in jobs:
            print(f"Reading from '{job.input_path}'")
            print(f"Writing to '{job.output_path}'")
        print(f"Running at {speed}x speed")

    try:
        run_batch(jobs, speed, absolute_dates=absolute_dates, verbose=args.verbose)
    except ReplayError as e:
        log.error("Replay aborted", extra={"extra": {"error": type(e).__name__, "detail": str(e)}})
        raise SystemExit(f"error: {e}")
    except KeyboardInterrupt:
        raise SystemExit("Replay interrupted; current output ends at the last complete packet.")

    print("Simulation completed.")


if __name__ == "__main__":
    main()
