"""Command-line interface for jael."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any

from jael import __version__
from jael.config import ServiceConfig, load_service_config
from jael.errors import ElevationError
from jael.logging_utils import LogOptions, configure_logging
from jael.models import Point
from jael.perf import PerfTracker, resolve_metrics_path
from jael.service import ElevationService
from jael.tiles import locate

LOGGER = logging.getLogger("jael.cli")


def _add_service_arguments(parser: argparse.ArgumentParser) -> None:
    """Register options shared by commands that read tiles."""
    parser.add_argument(
        "--tile-root",
        help="Directory or URL prefix holding ASTGTMV003 tiles (env: JAEL_TILE_ROOT).",
    )
    parser.add_argument("--config", help="Optional JSON service config file.")
    parser.add_argument(
        "--jobs",
        type=int,
        help="Concurrent tile reads (0 = auto, env: JAEL_TILE_JOBS).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for all tile reads (env: JAEL_TIMEOUT).",
    )
    parser.add_argument(
        "--input",
        required=True,
        help='JSON file with {"points": [{"lat": .., "lng": ..}, ...]} or a bare list.',
    )


def _add_lookup_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the lookup subcommand."""
    lookup = subparsers.add_parser("lookup", help="Resolve elevations for a point file.")
    _add_service_arguments(lookup)
    lookup.add_argument("--output", help="Write results to a file instead of stdout.")
    lookup.add_argument("--profile", action="store_true", help="Log timing spans.")


def _add_locate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the locate subcommand."""
    loc = subparsers.add_parser("locate", help="Print the tile and pixel for a coordinate.")
    loc.add_argument("lat", type=float)
    loc.add_argument("lng", type=float)


def _add_bench_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the bench subcommand."""
    bench = subparsers.add_parser("bench", help="Time repeated lookups of a point file.")
    _add_service_arguments(bench)
    bench.add_argument("--runs", type=int, default=250, help="Number of lookups.")
    bench.add_argument(
        "--concurrent",
        action="store_true",
        help="Submit all runs at once instead of one after another.",
    )
    bench.add_argument("--metrics-json", help="Write the benchmark summary to this path.")


def _add_version_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the version subcommand."""
    subparsers.add_parser("version", help="Print the current version.")


def _load_request(path: Path) -> dict[str, Any]:
    """Load a request payload, wrapping a bare point list."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        return {"points": payload}
    return payload


def _service_config(args: argparse.Namespace) -> ServiceConfig:
    return load_service_config(
        Path(args.config) if args.config else None,
        tile_root=args.tile_root,
        tile_jobs=args.jobs,
        timeout=args.timeout,
    )


def _run_lookup(args: argparse.Namespace) -> int:
    request = _load_request(Path(args.input))
    perf = PerfTracker(enabled=bool(args.profile))
    perf.start()
    with ElevationService(_service_config(args), perf=perf) as service:
        points = service.get_elevations(request)
    perf.stop()
    text = json.dumps(points, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
        LOGGER.info("Wrote %s elevation(s) to %s", len(points), output_path)
    else:
        print(text)
    if perf.enabled:
        LOGGER.info("Timing: %s", json.dumps(perf.summary()))
    return 0


def _run_locate(args: argparse.Namespace) -> int:
    try:
        location = locate(Point(latitude=args.lat, longitude=args.lng))
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 1
    payload = {
        "tile": location.tile,
        "column": location.pixel.column,
        "row": location.pixel.row,
    }
    print(json.dumps(payload))
    return 0


def _run_bench(args: argparse.Namespace) -> int:
    if args.runs < 1:
        LOGGER.error("--runs must be at least 1")
        return 2
    request = _load_request(Path(args.input))
    config = _service_config(args)
    perf = PerfTracker(enabled=True, track_memory=True)
    perf.start()
    start = perf_counter()
    with ElevationService(config, perf=perf) as service:
        if args.concurrent:
            futures = [service.submit(request) for _ in range(args.runs)]
            for future in futures:
                future.result()
        else:
            for _ in range(args.runs):
                service.get_elevations(request)
    elapsed = perf_counter() - start
    perf.stop()
    summary = {
        "runs": args.runs,
        "points": len(request.get("points", [])),
        "concurrent": bool(args.concurrent),
        "config": config.as_dict(),
        "total_ms": round(elapsed * 1000, 3),
        "per_run_ms": round(elapsed * 1000 / args.runs, 3),
        "performance": perf.summary(),
    }
    LOGGER.info(
        "Benchmark ran %s lookup(s) in %.0fms (approx %.2fms per lookup)",
        args.runs,
        summary["total_ms"],
        summary["per_run_ms"],
    )
    metrics_path = resolve_metrics_path(args.metrics_json)
    if metrics_path:
        metrics_path.parent.mkdir(parents=True, exist_ok=True)
        metrics_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")
    print(json.dumps(summary, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = argparse.ArgumentParser(
        prog="jael",
        description="JAEL multi-point elevation lookups from ASTER GDEM tiles",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log lookup stages and tile reads.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument("--log-file", help="Optional path for JSON log output.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_lookup_parser(subparsers)
    _add_locate_parser(subparsers)
    _add_bench_parser(subparsers)
    _add_version_parser(subparsers)

    args = parser.parse_args(argv)
    configure_logging(
        LogOptions(
            debug=bool(args.verbose),
            quiet=bool(args.quiet),
            log_file=Path(args.log_file) if args.log_file else None,
            json_console=bool(args.log_json),
        )
    )

    if args.command == "version":
        print(__version__)
        return 0
    if args.command == "locate":
        return _run_locate(args)
    try:
        if args.command == "lookup":
            return _run_lookup(args)
        if args.command == "bench":
            return _run_bench(args)
    except ElevationError as exc:
        LOGGER.error("%s", exc)
        return 1
    except (OSError, json.JSONDecodeError) as exc:
        LOGGER.error("Unable to read input: %s", exc)
        return 1
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
