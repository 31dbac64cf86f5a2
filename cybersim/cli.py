# cybersim/cli.py

from __future__ import annotations
import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, List

from cybersim.config import SimulationConfig, load_config
from cybersim.engine.models import SimulationSnapshot
from cybersim.errors import ConfigurationError
from cybersim.facade import SimulationFacade
from cybersim.output.adapter import SnapshotAdapter, write_snapshot_logs


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int | None:
    parser = argparse.ArgumentParser(
        prog="cybersim",
        description="Run the cyber warfare simulation headlessly and print what happens",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML configuration file (defaults are used when omitted)",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=50,
        help="Number of ticks to simulate",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the random seed from the configuration",
    )
    parser.add_argument(
        "--output",
        choices=["cli", "json"],
        default="cli",
        help="Output mode: 'cli' prints log lines to stdout; 'json' dumps every snapshot to a JSON file",
    )
    parser.add_argument(
        "--json-file",
        type=Path,
        default=Path("simulation_output.json"),
        help="Path to JSON output file if --output=json",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the rendered log lines to this file",
    )
    parser.add_argument(
        "--quiet-metrics",
        action="store_true",
        help="Only print alert lines, not the per-tick summary",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Sleep one tick period between ticks",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.ticks < 0:
        print("--ticks must not be negative", file=sys.stderr)
        return 2

    if args.config is not None and not args.config.exists():
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config) if args.config is not None else SimulationConfig()
        if args.seed is not None:
            config = config.updated(seed=args.seed)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        print(f"Failed to load configuration: {exc}", file=sys.stderr)
        return 2

    facade = SimulationFacade(config)
    adapter = SnapshotAdapter(include_metrics=not args.quiet_metrics)

    snapshots: List[SimulationSnapshot] = []

    def handle_snapshot(snapshot: SimulationSnapshot) -> None:
        snapshots.append(snapshot)
        if args.output == "cli":
            for line in adapter.transform(snapshot):
                print(line)

    facade.subscribe(handle_snapshot)

    try:
        facade.run(max_ticks=args.ticks, realtime=args.realtime)
    except Exception as exc:
        print(f"Simulation failed: {exc}", file=sys.stderr)
        return 3
    finally:
        facade.close()

    if args.log_file is not None:
        write_snapshot_logs(snapshots, str(args.log_file))

    if args.output == "json":
        payload: dict[str, Any] = {
            "seed": config.seed,
            "ticks": [snapshot.to_dict() for snapshot in snapshots],
        }
        try:
            args.json_file.parent.mkdir(parents=True, exist_ok=True)
            with args.json_file.open("w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            print(f"Simulation JSON dumped to {args.json_file}")
        except Exception as exc:
            print(f"Failed to write JSON file: {exc}", file=sys.stderr)
            return 4

    return 0  # success


if __name__ == "__main__":

    signal.signal(signal.SIGPIPE, signal.SIG_DFL)  # Ignore broken pipe
    sys.exit(main())
