"""Universe metrics for monitoring and debugging layouts."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dreamverse.universe.engine import UniverseEngine

logger = logging.getLogger(__name__)


@dataclass
class StructuralMetrics:
    """Structural metrics for the input graph."""

    total_nodes: int = 0
    total_links: int = 0
    dropped_links: int = 0  # links referencing absent nodes
    isolated_nodes: int = 0  # nodes with no valid links
    avg_degree: float = 0.0
    max_degree: int = 0


@dataclass
class AggregationMetrics:
    """Metrics for time filtering and nebula aggregation."""

    working_nodes: int = 0
    filtered_out: int = 0
    nebula_count: int = 0
    expanded_count: int = 0
    largest_category: str | None = None
    members_by_category: dict[str, int] = field(default_factory=dict)


@dataclass
class LayoutMetrics:
    """Metrics for the expanded star layout."""

    star_count: int = 0
    visible_links: int = 0
    overlapping_pairs: int = 0
    min_clearance: float | None = None  # smallest gap between collision radii


@dataclass
class UniverseReport:
    """Complete universe report."""

    structural: StructuralMetrics
    aggregation: AggregationMetrics
    layout: LayoutMetrics


def compute_metrics(engine: UniverseEngine, tolerance: float = 0.5) -> UniverseReport:
    """Compute all metrics for the engine's current rebuild."""
    structural = StructuralMetrics(
        total_nodes=len(engine.nodes),
        total_links=len(engine.links),
        dropped_links=len(engine.links) - len(engine.valid_links),
    )
    degree: Counter[str] = Counter()
    for link in engine.valid_links:
        degree[link.source] += 1
        degree[link.target] += 1
    if engine.nodes:
        structural.isolated_nodes = sum(1 for n in engine.nodes if degree[n.id] == 0)
        structural.avg_degree = sum(degree.values()) / len(engine.nodes)
        structural.max_degree = max(degree.values(), default=0)

    aggregation = AggregationMetrics(
        working_nodes=len(engine.working_nodes),
        filtered_out=len(engine.nodes) - len(engine.working_nodes),
        nebula_count=len(engine.nebulae),
        expanded_count=sum(1 for n in engine.nebulae if n.is_expanded),
    )
    for nebula in engine.nebulae:
        aggregation.members_by_category[nebula.category.value] = len(nebula.nodes)
    if aggregation.members_by_category:
        aggregation.largest_category = max(
            aggregation.members_by_category.items(), key=lambda item: item[1]
        )[0]

    view = engine.view()
    layout = LayoutMetrics(star_count=len(engine.converged), visible_links=len(view.links))
    stars = engine.converged
    for i in range(len(stars)):
        for j in range(i + 1, len(stars)):
            a, b = stars[i], stars[j]
            gap = (
                ((a.x - b.x) ** 2 + (a.y - b.y) ** 2) ** 0.5
                - engine.solver.radius_for(a)
                - engine.solver.radius_for(b)
            )
            if layout.min_clearance is None or gap < layout.min_clearance:
                layout.min_clearance = gap
            if gap < -tolerance:
                layout.overlapping_pairs += 1

    if layout.overlapping_pairs:
        logger.warning(f"{layout.overlapping_pairs} star pairs still overlap after relaxation")

    return UniverseReport(structural=structural, aggregation=aggregation, layout=layout)


def format_report(report: UniverseReport) -> str:
    """Format report as human-readable string."""
    clearance = report.layout.min_clearance
    lines = [
        "=== Universe Report ===",
        "",
        "Structural Metrics:",
        f"  Total nodes: {report.structural.total_nodes}",
        f"  Total links: {report.structural.total_links}",
        f"  Dropped links: {report.structural.dropped_links}",
        f"  Isolated nodes: {report.structural.isolated_nodes}",
        f"  Average degree: {report.structural.avg_degree:.2f}",
        f"  Max degree: {report.structural.max_degree}",
        "",
        "Aggregation Metrics:",
        f"  Working nodes: {report.aggregation.working_nodes}",
        f"  Filtered out: {report.aggregation.filtered_out}",
        f"  Nebulae: {report.aggregation.nebula_count}",
        f"  Expanded: {report.aggregation.expanded_count}",
        f"  Largest category: {report.aggregation.largest_category or '-'}",
        "",
        "  Members by category:",
    ]

    for category, count in report.aggregation.members_by_category.items():
        lines.append(f"    {category}: {count}")

    lines.extend([
        "",
        "Layout Metrics:",
        f"  Stars: {report.layout.star_count}",
        f"  Visible links: {report.layout.visible_links}",
        f"  Overlapping pairs: {report.layout.overlapping_pairs}",
        f"  Min clearance: {clearance:.2f}" if clearance is not None else "  Min clearance: -",
    ])

    return "\n".join(lines)
