#!/usr/bin/env python3
"""Generate a synthetic diary element graph for local debugging."""

import argparse
import json
import random
from datetime import datetime, timedelta, timezone
from itertools import combinations
from pathlib import Path

# Sample elements by type
ELEMENTS = {
    "person": [
        "mother", "father", "grandma", "sister", "old friend", "classmate",
        "stranger", "neighbor", "妈妈", "同事",
    ],
    "place": [
        "school", "house", "hospital", "river", "mountain", "beach",
        "forest", "library", "车站", "city",
    ],
    "object": [
        "train", "car", "apple", "cake", "moon", "umbrella", "ticket",
        "letter", "key", "mirror",
    ],
    "action": [
        "run", "fly", "swim", "chase", "fall", "climb", "dance",
        "search", "hide", "escape",
    ],
}


def generate(records: int, days: int, seed: int, now: datetime) -> dict:
    """Generate records and derive nodes, links, and record dates from them."""
    rng = random.Random(seed)
    pool = [(t, name) for t, names in ELEMENTS.items() for name in names]

    dream_dates: dict[str, str] = {}
    node_dreams: dict[tuple[str, str], list[str]] = {}
    link_dreams: dict[tuple[str, str], list[str]] = {}

    for i in range(records):
        dream_id = f"dream-{i:04d}"
        dream_dates[dream_id] = (now - timedelta(days=rng.uniform(0, days))).isoformat()

        picked = rng.sample(pool, rng.randint(2, 5))
        ids = sorted(f"{t}-{name}" for t, name in picked)
        for t, name in picked:
            node_dreams.setdefault((t, name), []).append(dream_id)
        for a, b in combinations(ids, 2):
            link_dreams.setdefault((a, b), []).append(dream_id)

    nodes = [
        {
            "id": f"{t}-{name}",
            "name": name,
            "type": t,
            "count": len(dreams),
            "dreamIds": dreams,
        }
        for (t, name), dreams in node_dreams.items()
    ]
    links = [
        {"source": a, "target": b, "weight": len(dreams), "dreamIds": dreams}
        for (a, b), dreams in link_dreams.items()
    ]

    return {
        "nodes": nodes,
        "links": links,
        "totalDreams": records,
        "dreamDates": dream_dates,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic element graph")
    parser.add_argument("-o", "--output", type=Path, default=Path("sample_graph.json"))
    parser.add_argument("--records", type=int, default=60, help="Number of diary records")
    parser.add_argument("--days", type=int, default=200, help="Spread records over this many days")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    graph = generate(args.records, args.days, args.seed, datetime.now(timezone.utc))
    args.output.write_text(json.dumps(graph, ensure_ascii=False, indent=2), encoding="utf-8")

    print(f"Generated {len(graph['nodes'])} nodes and {len(graph['links'])} links")
    print(f"from {args.records} records over {args.days} days -> {args.output}")


if __name__ == "__main__":
    main()
