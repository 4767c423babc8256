#!/usr/bin/env python3
"""Compute the universe view for an element graph JSON file.

This script:
1. Loads the element graph (nodes, links, dreamDates) from JSON
2. Applies the time slice (or --all-time)
3. Aggregates nebulae and expands the requested ones
4. Relaxes the expanded stars and settles them
5. Prints a metrics report and optionally writes the view as JSON

Example:
    python scripts/compute_layout.py graph.json --all-time --expand family --expand nature -o view.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dreamverse.config import settings
from dreamverse.models import ElementGraph, parse_datetime
from dreamverse.universe import UniverseEngine, get_classifier
from dreamverse.universe.metrics import compute_metrics, format_report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute the universe view for an element graph")
    parser.add_argument("graph", type=Path, help="Element graph JSON file")
    parser.add_argument("--width", type=float, default=1200.0)
    parser.add_argument("--height", type=float, default=800.0)
    parser.add_argument(
        "--expand",
        action="append",
        default=[],
        help="Category or nebula id to expand (repeatable)",
    )
    parser.add_argument("--expand-all", action="store_true", help="Expand every nebula")
    parser.add_argument("--all-time", action="store_true", help="Bypass time slicing")
    parser.add_argument(
        "--slice",
        type=int,
        default=None,
        help="Time-slice preset index (default: configured default preset)",
    )
    parser.add_argument("--now", default=None, help="ISO date the presets end at")
    parser.add_argument("--focus", default=None, help="Node id to focus")
    parser.add_argument("--categories", default=settings.category_table_path, help="Category table JSON")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write view JSON here")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print(f"Loading graph from {args.graph}...")
    try:
        graph = ElementGraph.from_dict(json.loads(args.graph.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
        print(f"Cannot load graph: {e}", file=sys.stderr)
        return 1
    print(f"Found {len(graph.nodes)} nodes, {len(graph.links)} links, {len(graph.record_dates)} dated records")

    engine = UniverseEngine.from_graph(
        graph,
        width=args.width,
        height=args.height,
        classifier=get_classifier(args.categories),
        now=parse_datetime(args.now),
    )

    if args.slice is not None:
        presets = engine.time_slice_presets()
        if not 0 <= args.slice < len(presets):
            print(f"--slice must be in [0, {len(presets) - 1}]", file=sys.stderr)
            return 1
        engine.set_time_slice(presets[args.slice])
    if args.all_time:
        engine.toggle_all_time()
    print(f"Time slice: {'all time' if engine.state.show_all_time else engine.state.time_slice.label}")

    wanted = {e if e.startswith("nebula-") else f"nebula-{e}" for e in args.expand}
    for nebula in list(engine.nebulae):
        if args.expand_all or nebula.id in wanted:
            print(f"Expanding {nebula.id} ({len(nebula.nodes)} members)...")
            engine.click_nebula(nebula.id)

    frames = sum(1 for _ in engine.settle())
    print(f"Settled in {frames} frames")

    if args.focus:
        engine.click_node(args.focus)

    print()
    print(format_report(compute_metrics(engine)))

    if args.output:
        args.output.write_text(
            json.dumps(engine.view().to_dict(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        print(f"\nView written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
