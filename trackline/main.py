"""Command-line entry point: run the pipeline for one entity-day.

Usage:
    python -m trackline ENTITY_ID YYYY-MM-DD [--json] [--map-html PATH]
"""

from __future__ import annotations

import argparse
from datetime import date, datetime
import logging
from pathlib import Path
import sys
from typing import List, Optional, Sequence

from . import config
from .services import PipelineResult, PipelineStatus, TrackingPipeline
from .utils import format_distance, json_dumps
from .visualization import create_route_map


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trackline",
        description="Refine a day of GPS fixes and reconcile it with road routing services.",
    )
    parser.add_argument("entity_id", help="Identifier of the tracked entity")
    parser.add_argument("day", type=_parse_day, help="Calendar day (YYYY-MM-DD)")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result (all point sequences) as JSON",
    )
    parser.add_argument(
        "--map-html",
        type=Path,
        default=None,
        help="Write an interactive HTML map to this path",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _default_map_path(result: PipelineResult) -> Path:
    return Path(config.MAP_OUTPUT_DIR) / f"{result.entity_id}_{result.day}.html"


def summarize(result: PipelineResult) -> List[str]:
    """Return human-readable summary lines for a result."""

    lines = [
        f"Entity {result.entity_id} on {result.day}: {result.status.value}",
        f"Raw points: {len(result.accepted_fixes)} (fetched {len(result.raw_fixes)})",
        f"Refined points: {len(result.refined_points)}",
        f"Snapped points: {len(result.snapped_points)}",
        f"Route points: {len(result.route_points)}",
        f"Refined distance: {format_distance(result.refined_distance_m)}",
    ]
    if result.routed_distance_m is not None:
        lines.append(f"Routed distance: {format_distance(result.routed_distance_m)}")
    lines.append(f"Distance: {format_distance(result.display_distance_m)}")
    if result.notice:
        lines.append(result.notice)
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    pipeline = TrackingPipeline()
    result = pipeline.run(args.entity_id, args.day)

    if args.json:
        sys.stdout.write(json_dumps(result.to_dict(), indent=2) + "\n")
    else:
        for line in summarize(result):
            print(line)

    map_path = args.map_html
    if map_path is None and config.MAP_EXPORT_ENABLED:
        map_path = _default_map_path(result)
    if map_path is not None and result.status is not PipelineStatus.FETCH_FAILED:
        create_route_map(result, output_html_path=map_path)
        logging.info("Map saved to %s", map_path)

    return 1 if result.status is PipelineStatus.FETCH_FAILED else 0
