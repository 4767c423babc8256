"""Spiral placement of a nebula's members when it is expanded."""

import math

from dreamverse.config import settings
from dreamverse.models import Nebula, UniverseNode
from dreamverse.universe.geometry import canvas_center, is_valid_canvas, polar_point


class ExpansionLayout:
    """Initial positions for expanded stars.

    Members are ranked by descending count and laid on a spiral from the
    canvas middle outward, so the most frequent element sits closest to the
    center. The spiral is always centered on the canvas, not on the nebula,
    so the detail view is never clipped.
    """

    def __init__(
        self,
        radius_ratio: float | None = None,
        spiral_turns: float | None = None,
        spread: float | None = None,
        inner_radius: float | None = None,
    ) -> None:
        self.radius_ratio = radius_ratio if radius_ratio is not None else settings.expansion_radius_ratio
        self.spiral_turns = spiral_turns if spiral_turns is not None else settings.expansion_spiral_turns
        self.spread = spread if spread is not None else settings.expansion_spread
        self.inner_radius = inner_radius if inner_radius is not None else settings.expansion_inner_radius

    def expand(self, nebula: Nebula, width: float, height: float) -> list[UniverseNode]:
        """Return one positioned UniverseNode per nebula member."""
        if not nebula.nodes or not is_valid_canvas(width, height):
            return []

        cx, cy = canvas_center(width, height)
        expanded_radius = min(width, height) * self.radius_ratio
        ranked = sorted(nebula.nodes, key=lambda n: n.count, reverse=True)
        last = max(len(ranked) - 1, 1)

        stars: list[UniverseNode] = []
        for rank, node in enumerate(ranked):
            t = rank / last
            angle = t * math.pi * 2 * self.spiral_turns
            distance = t * expanded_radius * self.spread + self.inner_radius
            x, y = polar_point(cx, cy, angle, distance)
            stars.append(
                UniverseNode.from_graph_node(node, nebula.category, nebula.id, x=x, y=y)
            )

        return stars
