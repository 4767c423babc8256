"""UniverseState - the only mutable state of a rendered universe view."""

from dataclasses import dataclass, field
from datetime import datetime

from dreamverse.models import TimeSlice, ViewLevel, parse_datetime
from dreamverse.universe.time_slice import default_time_slice
from dreamverse.universe.viewport import ViewportController


@dataclass
class UniverseState:
    """
    Single source of truth for one view.

    Everything else the engine shows is derived from this state, the input
    graph and the record dates.
    """

    view_level: ViewLevel = ViewLevel.GALAXY
    zoom_scale: float = 1.0
    focused_node_id: str | None = None
    expanded_nebula_ids: set[str] = field(default_factory=set)
    time_slice: TimeSlice = field(default_factory=default_time_slice)
    show_all_time: bool = False

    @classmethod
    def initial(cls, now: datetime | None = None) -> "UniverseState":
        """Galaxy level, scale 1, no focus or expansion, default time slice."""
        return cls(time_slice=default_time_slice(now))

    def apply_zoom(self, zoom_scale: float, level: ViewLevel) -> None:
        """Record a zoom/pan event; the level comes from the viewport."""
        self.zoom_scale = zoom_scale
        self.view_level = level

    def toggle_nebula(self, nebula_id: str) -> bool:
        """Expand or collapse a nebula. Focus is cleared either way.

        Returns:
            True if the nebula is now expanded
        """
        self.focused_node_id = None
        if nebula_id in self.expanded_nebula_ids:
            self.expanded_nebula_ids.discard(nebula_id)
            return False
        self.expanded_nebula_ids.add(nebula_id)
        return True

    def toggle_focus(self, node_id: str) -> str | None:
        """Focus a node, or clear focus when it is already focused."""
        self.focused_node_id = None if self.focused_node_id == node_id else node_id
        return self.focused_node_id

    def clear_focus(self) -> None:
        self.focused_node_id = None

    def set_time_slice(self, time_slice: TimeSlice) -> None:
        self.time_slice = time_slice
        self.show_all_time = False

    def toggle_all_time(self) -> bool:
        self.show_all_time = not self.show_all_time
        return self.show_all_time

    def reset(self) -> None:
        """Clear expansions and focus, back to galaxy at scale 1."""
        self.expanded_nebula_ids = set()
        self.focused_node_id = None
        self.view_level = ViewLevel.GALAXY
        self.zoom_scale = 1.0

    def to_dict(self) -> dict:
        return {
            "view_level": self.view_level.value,
            "zoom_scale": self.zoom_scale,
            "focused_node_id": self.focused_node_id,
            "expanded_nebula_ids": sorted(self.expanded_nebula_ids),
            "time_slice": self.time_slice.to_dict(),
            "show_all_time": self.show_all_time,
        }

    @classmethod
    def from_dict(cls, data: dict, viewport: ViewportController | None = None) -> "UniverseState":
        """Restore a snapshot.

        The stored view_level is ignored: the level is derived from the zoom
        scale with the viewport thresholds, and scale 1 is the initial galaxy.
        """
        state = cls()
        state.zoom_scale = float(data.get("zoom_scale", state.zoom_scale))
        if state.zoom_scale != 1.0:
            state.view_level = (viewport or ViewportController()).level_for_scale(state.zoom_scale)
        state.focused_node_id = data.get("focused_node_id")
        state.expanded_nebula_ids = set(data.get("expanded_nebula_ids", []))
        slice_data = data.get("time_slice")
        if slice_data:
            start = parse_datetime(slice_data.get("start_date"))
            end = parse_datetime(slice_data.get("end_date"))
            if start is not None and end is not None:
                state.time_slice = TimeSlice(start, end, str(slice_data.get("label", "")))
        state.show_all_time = bool(data.get("show_all_time", False))
        return state
