"""Universe engine: explicit state transitions over pure derivation steps.

Pipeline per rebuild:
    nodes + record dates -> TimeSliceFilter -> NebulaAggregator
    -> ExpansionLayout (expanded nebulae) -> CollisionSolver
and per view:
    positioned stars -> GravityLensFocus -> UniverseView

Rebuilds happen only on transitions that change the working set, the
expansions or the canvas (load, resize, time slice, nebula toggle, reset).
Focus changes and zoom/pan only re-derive the view.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, Mapping

from dreamverse.models import (
    ElementGraph,
    GraphLink,
    GraphNode,
    Nebula,
    SemanticCategory,
    TimeSlice,
    UniverseNode,
    ViewLevel,
    VisibleLink,
    filter_links,
)
from dreamverse.universe.aggregation import NebulaAggregator
from dreamverse.universe.categories import SemanticClassifier
from dreamverse.universe.collision import CollisionSolver, Simulation
from dreamverse.universe.expansion import ExpansionLayout
from dreamverse.universe.focus import GravityLensFocus
from dreamverse.universe.geometry import distance, is_valid_canvas
from dreamverse.universe.state import UniverseState
from dreamverse.universe.time_slice import TimeSliceFilter, time_slice_presets
from dreamverse.universe.viewport import ViewportController, ViewTransform

logger = logging.getLogger(__name__)

NodeFocusedCallback = Callable[[GraphNode | None], None]

DIMMED_NEBULA_OPACITY = 0.35
LINK_OPACITY_FACTOR = 0.5
LINK_WIDTH_FACTOR = 1.5
LEGEND_SIZE = 6


@dataclass
class UniverseView:
    """Everything the presentation layer needs for one frame."""

    nodes: list[UniverseNode]
    nebulae: list[Nebula]  # collapsed nebulae still drawn as aggregates
    links: list[VisibleLink]
    view_level: ViewLevel
    zoom_scale: float
    transform: ViewTransform
    focused_node_id: str | None = None
    expanded_nebula_ids: list[str] = field(default_factory=list)
    links_visible: bool = False
    nebula_opacity: float = 1.0
    legend: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "nebulae": [n.to_dict() for n in self.nebulae],
            "links": [link.to_dict() for link in self.links],
            "view_level": self.view_level.value,
            "zoom_scale": self.zoom_scale,
            "transform": self.transform.to_dict(),
            "focused_node_id": self.focused_node_id,
            "expanded_nebula_ids": self.expanded_nebula_ids,
            "links_visible": self.links_visible,
            "nebula_opacity": self.nebula_opacity,
            "legend": self.legend,
        }


class UniverseEngine:
    """
    Drives one rendered universe view.

    Holds the input graph, the UniverseState and the viewport, plus the
    results of the last rebuild (working nodes, nebulae, positioned stars).
    Those results are replaced only by the transitions listed in the module
    docstring, never refreshed implicitly.
    """

    def __init__(
        self,
        nodes: list[GraphNode] | None = None,
        links: list[GraphLink] | None = None,
        record_dates: Mapping[str, datetime] | None = None,
        *,
        width: float = 0.0,
        height: float = 0.0,
        classifier: SemanticClassifier | None = None,
        solver: CollisionSolver | None = None,
        layout: ExpansionLayout | None = None,
        lens: GravityLensFocus | None = None,
        state: UniverseState | None = None,
        viewport: ViewportController | None = None,
        on_node_focused: NodeFocusedCallback | None = None,
        now: datetime | None = None,
    ) -> None:
        self.classifier = classifier or SemanticClassifier()
        self.aggregator = NebulaAggregator(classifier=self.classifier)
        self.layout = layout or ExpansionLayout()
        self.solver = solver or CollisionSolver()
        self.time_filter = TimeSliceFilter()
        self.lens = lens or GravityLensFocus()
        self.viewport = viewport or ViewportController(width, height)
        self.viewport.resize(width, height)
        self.state = state or UniverseState.initial(now)
        self.on_node_focused = on_node_focused
        self.now = now

        self.width = width
        self.height = height

        self.nodes: list[GraphNode] = []
        self.links: list[GraphLink] = []
        self.valid_links: list[GraphLink] = []
        self.record_dates: dict[str, datetime] = {}
        self._nodes_by_id: dict[str, GraphNode] = {}

        # Results of the last rebuild
        self.working_nodes: list[GraphNode] = []
        self.nebulae: list[Nebula] = []
        self.stars: list[UniverseNode] = []  # current animation frame
        self.converged: list[UniverseNode] = []  # snapshot used for hit-testing
        self.links_visible = False
        self._simulation: Simulation | None = None

        self.load(nodes or [], links or [], record_dates or {})

    @classmethod
    def from_graph(cls, graph: ElementGraph, **kwargs) -> "UniverseEngine":
        return cls(graph.nodes, graph.links, graph.record_dates, **kwargs)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load(
        self,
        nodes: list[GraphNode],
        links: list[GraphLink],
        record_dates: Mapping[str, datetime],
    ) -> UniverseView:
        """Replace the input graph and rebuild."""
        self.nodes = list(nodes)
        self.links = list(links)
        self.record_dates = dict(record_dates)
        self._nodes_by_id = {n.id: n for n in self.nodes}
        self.valid_links = filter_links(self.links, set(self._nodes_by_id))
        dropped = len(self.links) - len(self.valid_links)
        if dropped:
            logger.debug(f"Dropped {dropped} links referencing absent nodes")
        self._rebuild()
        return self.view()

    def resize(self, width: float, height: float) -> UniverseView:
        """Canvas size observed; triggers a full recompute."""
        if not is_valid_canvas(width, height):
            logger.warning(f"Ignoring invalid canvas size {width}x{height}")
            return self.view()
        self.width = width
        self.height = height
        self.viewport.resize(width, height)
        self._rebuild()
        return self.view()

    def zoom_to(self, k: float, anchor: tuple[float, float] | None = None) -> UniverseView:
        self.viewport.zoom_to(k, anchor)
        return self._after_viewport_change()

    def zoom_in(self) -> UniverseView:
        self.viewport.zoom_in()
        return self._after_viewport_change()

    def zoom_out(self) -> UniverseView:
        self.viewport.zoom_out()
        return self._after_viewport_change()

    def pan(self, dx: float, dy: float) -> UniverseView:
        self.viewport.pan_by(dx, dy)
        return self._after_viewport_change()

    def click_nebula(self, nebula_id: str) -> UniverseView:
        """Toggle a nebula between aggregate and expanded."""
        if nebula_id not in self.state.expanded_nebula_ids and not any(
            n.id == nebula_id for n in self.nebulae
        ):
            logger.warning(f"Ignoring click on unknown nebula {nebula_id}")
            return self.view()

        had_focus = self.state.focused_node_id is not None
        expanded = self.state.toggle_nebula(nebula_id)
        new_ids: set[str] = set()
        if expanded:
            nebula = next(n for n in self.nebulae if n.id == nebula_id)
            new_ids = set(nebula.member_ids)
        logger.debug(f"Nebula {nebula_id} {'expanded' if expanded else 'collapsed'}")

        self._rebuild(new_ids)
        if had_focus:
            self._notify_focus(None)
        return self.view()

    def click_node(self, node_id: str) -> UniverseView:
        """Focus a star, or clear focus when it is already focused."""
        if not any(s.id == node_id for s in self.stars):
            logger.warning(f"Ignoring click on node {node_id} that is not expanded")
            return self.view()

        focused = self.state.toggle_focus(node_id)
        self._notify_focus(self._nodes_by_id.get(focused) if focused else None)
        return self.view()

    def set_time_slice(self, time_slice: TimeSlice) -> UniverseView:
        self.state.set_time_slice(time_slice)
        self._rebuild()
        return self.view()

    def toggle_all_time(self) -> UniverseView:
        self.state.toggle_all_time()
        self._rebuild()
        return self.view()

    def reset(self) -> UniverseView:
        """Clear expansions and focus, back to galaxy with identity transform."""
        had_focus = self.state.focused_node_id is not None
        self.state.reset()
        self.viewport.reset()
        self._rebuild()
        if had_focus:
            self._notify_focus(None)
        return self.view()

    def settle(self, steps: int | None = None) -> Iterator[UniverseView]:
        """
        Animated settle after a rebuild, one view per solver tick.

        When the frames run out, the final positions are made overlap-free,
        the just-expanded marks are cleared and links become visible. A run
        stopped midway keeps its last frame and the previous converged
        snapshot.
        """
        simulation = self._simulation
        if simulation is None:
            self._finish_settle()
            return

        for frame in simulation.frames(steps if steps is not None else self.solver.settle_steps):
            self.stars = frame
            yield self.view()

        if simulation.is_stopped or simulation is not self._simulation:
            return

        simulation.resolve_overlaps()
        self.converged = simulation.snapshot()
        self.stars = list(self.converged)
        self._finish_settle()
        yield self.view()

    def stop(self) -> None:
        """Stop any running simulation (collapse or teardown)."""
        if self._simulation is not None:
            self._simulation.stop()

    # ------------------------------------------------------------------
    # Derived output
    # ------------------------------------------------------------------

    def view(self) -> UniverseView:
        """Derive the presentation state from the current rebuild and state."""
        focused = self.lens.focus(self.stars, self.valid_links, self.state.focused_node_id)
        by_id = {n.id: n for n in focused}

        links = []
        for link in self.valid_links:
            source = by_id.get(link.source)
            target = by_id.get(link.target)
            if source is None or target is None:
                continue
            links.append(
                VisibleLink(
                    source=link.source,
                    target=link.target,
                    weight=link.weight,
                    opacity=min(source.opacity, target.opacity) * LINK_OPACITY_FACTOR,
                    width=math.sqrt(link.weight) * LINK_WIDTH_FACTOR,
                )
            )

        any_expanded = any(n.is_expanded for n in self.nebulae)
        return UniverseView(
            nodes=focused,
            nebulae=[n for n in self.nebulae if not n.is_expanded],
            links=links,
            view_level=self.state.view_level,
            zoom_scale=self.state.zoom_scale,
            transform=self.viewport.transform,
            focused_node_id=self.state.focused_node_id,
            expanded_nebula_ids=sorted(self.state.expanded_nebula_ids),
            links_visible=self.links_visible,
            nebula_opacity=DIMMED_NEBULA_OPACITY if any_expanded else 1.0,
            legend=self.legend(),
        )

    def legend(self) -> list[dict]:
        """Categories present in the current nebulae.

        Table categories come first, in table order; fallback categories missing
        from a replacement table follow in enum order.
        """
        present = {n.category for n in self.nebulae}
        order = list(self.classifier.table)
        order += [c for c in SemanticCategory if c not in self.classifier.table]
        entries = []
        for category in order:
            if category in present:
                config = self.classifier.config(category)
                entries.append({
                    "category": category.value,
                    "label": config.label,
                    "icon": config.icon,
                    "color": config.color,
                })
        return entries[:LEGEND_SIZE]

    def time_slice_presets(self) -> list[TimeSlice]:
        return time_slice_presets(self.now)

    def node_at(self, x: float, y: float) -> UniverseNode | None:
        """Star under a content-space point, using the converged snapshot."""
        for node in reversed(self.converged):
            if node.x is None or node.y is None:
                continue
            if distance(x, y, node.x, node.y) <= node.display_radius:
                return node
        return None

    def nebula_at(self, x: float, y: float) -> Nebula | None:
        """Collapsed nebula whose core contains a content-space point."""
        for nebula in reversed(self.nebulae):
            if nebula.is_expanded:
                continue
            if distance(x, y, nebula.center_x, nebula.center_y) <= nebula.core_radius:
                return nebula
        return None

    def original_node(self, node_id: str) -> GraphNode | None:
        return self._nodes_by_id.get(node_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _after_viewport_change(self) -> UniverseView:
        self.state.apply_zoom(self.viewport.scale, self.viewport.level)
        return self.view()

    def _notify_focus(self, node: GraphNode | None) -> None:
        if self.on_node_focused is not None:
            self.on_node_focused(node)

    def _finish_settle(self) -> None:
        self.stars = [s.copy(is_new=False) if s.is_new else s for s in self.stars]
        self.converged = [s.copy(is_new=False) if s.is_new else s for s in self.converged]
        self.links_visible = bool(self.stars)

    def _rebuild(self, new_ids: set[str] | frozenset[str] = frozenset()) -> None:
        self.stop()
        self._simulation = None

        self.working_nodes = self.time_filter.filter(
            self.nodes,
            self.record_dates,
            self.state.time_slice,
            show_all_time=self.state.show_all_time,
        )
        self.nebulae = self.aggregator.aggregate(
            self.working_nodes,
            self.width,
            self.height,
            expanded_ids=self.state.expanded_nebula_ids,
        )

        initial: list[UniverseNode] = []
        for nebula in self.nebulae:
            if nebula.is_expanded:
                initial.extend(self.layout.expand(nebula, self.width, self.height))
        if new_ids:
            initial = [n.copy(is_new=True) if n.id in new_ids else n for n in initial]

        if initial:
            simulation = self.solver.start(initial, self.valid_links, self.width, self.height)
            simulation.warm_up(self.solver.warmup_steps)
            simulation.resolve_overlaps()
            self._simulation = simulation
            self.converged = simulation.snapshot()
        else:
            self.converged = []
        self.stars = list(self.converged)
        # Links fade in only after the next settle completes
        self.links_visible = False

        focused = self.state.focused_node_id
        if focused is not None and not any(s.id == focused for s in self.stars):
            self.state.clear_focus()
            self._notify_focus(None)

        logger.debug(
            f"Rebuilt universe: {len(self.working_nodes)}/{len(self.nodes)} nodes, "
            f"{len(self.nebulae)} nebulae, {len(self.stars)} stars"
        )
