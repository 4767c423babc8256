"""Semantic aggregation of elements into nebulae."""

import logging
import math
from typing import Iterable

from dreamverse.config import settings
from dreamverse.models import GraphNode, Nebula, SemanticCategory
from dreamverse.universe.categories import SemanticClassifier
from dreamverse.universe.geometry import canvas_center, is_valid_canvas, polar_point

logger = logging.getLogger(__name__)


def nebula_id_for(category: SemanticCategory) -> str:
    return f"nebula-{category.value}"


class NebulaAggregator:
    """
    Groups elements by semantic category into one nebula per category.

    Nebula centers sit evenly on a ring around the canvas middle in the
    order categories are first seen, so the layout is stable for a fixed
    node set. A different node set (e.g. after time filtering) may change
    the number of nebulae and reflow every angle.
    """

    def __init__(
        self,
        classifier: SemanticClassifier | None = None,
        orbit_ratio: float | None = None,
        base_radius: float | None = None,
        radius_per_node: float | None = None,
    ) -> None:
        self.classifier = classifier or SemanticClassifier()
        self.orbit_ratio = orbit_ratio if orbit_ratio is not None else settings.orbit_ratio
        self.base_radius = base_radius if base_radius is not None else settings.nebula_base_radius
        self.radius_per_node = (
            radius_per_node if radius_per_node is not None else settings.nebula_radius_per_node
        )

    def group(self, nodes: Iterable[GraphNode]) -> dict[SemanticCategory, list[GraphNode]]:
        """Group nodes by category, keeping first-seen category order."""
        groups: dict[SemanticCategory, list[GraphNode]] = {}
        for node in nodes:
            category = self.classifier.classify(node.name, node.type)
            groups.setdefault(category, []).append(node)
        return groups

    def nebula_radius(self, member_count: int) -> float:
        return math.sqrt(member_count) * self.radius_per_node + self.base_radius

    def aggregate(
        self,
        nodes: list[GraphNode],
        width: float,
        height: float,
        expanded_ids: set[str] | frozenset[str] = frozenset(),
    ) -> list[Nebula]:
        """
        Aggregate nodes into nebulae.

        Args:
            nodes: Surviving (already time-filtered) elements
            width: Canvas width
            height: Canvas height
            expanded_ids: Nebula ids currently expanded

        Returns:
            One nebula per non-empty category; empty when there are no nodes
            or the canvas has not been measured yet
        """
        if not nodes or not is_valid_canvas(width, height):
            return []

        groups = self.group(nodes)
        categories = list(groups)
        angle_step = 2 * math.pi / max(len(categories), 1)
        orbit_radius = min(width, height) * self.orbit_ratio
        cx, cy = canvas_center(width, height)

        nebulae: list[Nebula] = []
        for index, category in enumerate(categories):
            members = groups[category]
            config = self.classifier.config(category)
            angle = angle_step * index - math.pi / 2
            x, y = polar_point(cx, cy, angle, orbit_radius)
            nebula_id = nebula_id_for(category)

            nebulae.append(
                Nebula(
                    id=nebula_id,
                    category=category,
                    label=config.label,
                    nodes=members,
                    total_count=sum(n.count for n in members),
                    center_x=x,
                    center_y=y,
                    radius=self.nebula_radius(len(members)),
                    color=config.color,
                    icon=config.icon,
                    is_expanded=nebula_id in expanded_ids,
                )
            )

        logger.debug(f"Aggregated {len(nodes)} nodes into {len(nebulae)} nebulae")
        return nebulae
