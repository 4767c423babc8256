"""Gravity lens: highlight a focused star and its direct neighbors."""

from typing import Iterable

from dreamverse.config import settings
from dreamverse.models import GraphLink, UniverseNode


def neighborhood(links: Iterable[GraphLink], focused_id: str) -> set[str]:
    """The focused id plus the opposite endpoint of every link touching it.

    Direction does not matter: a link A -> B puts A in B's neighborhood and
    B in A's.
    """
    ids = {focused_id}
    for link in links:
        other = link.other_end(focused_id)
        if other is not None:
            ids.add(other)
    return ids


class GravityLensFocus:
    """Computes per-star visibility weights around a focused node."""

    def __init__(
        self,
        dim_opacity: float | None = None,
        out_of_range_opacity: float | None = None,
    ) -> None:
        self.dim_opacity = dim_opacity if dim_opacity is not None else settings.lens_dim_opacity
        self.out_of_range_opacity = (
            out_of_range_opacity if out_of_range_opacity is not None
            else settings.lens_out_of_range_opacity
        )

    def focus(
        self,
        nodes: list[UniverseNode],
        links: list[GraphLink],
        focused_id: str | None,
    ) -> list[UniverseNode]:
        """
        Apply the lens.

        Without a focus every in-range star is fully opaque and nothing is
        highlighted. With a focus, the neighborhood stays opaque, the focused
        star is highlighted and everything else is dimmed.

        Returns:
            New node copies; inputs are not mutated
        """
        if focused_id is None:
            return [
                n.copy(
                    opacity=1.0 if n.is_in_time_range else self.out_of_range_opacity,
                    is_highlighted=False,
                )
                for n in nodes
            ]

        connected = neighborhood(links, focused_id)
        return [
            n.copy(
                opacity=1.0 if n.id in connected else self.dim_opacity,
                is_highlighted=n.id == focused_id,
            )
            for n in nodes
        ]
