"""Time-window filtering of the working node set."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Mapping, Sequence, TypeVar

from dreamverse.config import settings
from dreamverse.models import GraphNode, TimeSlice, UniverseNode

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT", GraphNode, UniverseNode)

PRESET_LABELS: dict[int, str] = {
    7: "Last 7 days",
    30: "Last 30 days",
    90: "Last 3 months",
    180: "Last 6 months",
    365: "Last year",
}


def preset_label(days: int) -> str:
    return PRESET_LABELS.get(days, f"Last {days} days")


def time_slice_presets(
    now: datetime | None = None,
    preset_days: Sequence[int] | None = None,
) -> list[TimeSlice]:
    """Build the preset catalog ending at `now` (defaults to the current UTC time)."""
    end = now or datetime.now(timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    days_list = preset_days if preset_days is not None else settings.time_slice_preset_days
    return [
        TimeSlice(start_date=end - timedelta(days=days), end_date=end, label=preset_label(days))
        for days in days_list
    ]


def default_time_slice(now: datetime | None = None) -> TimeSlice:
    """The preset selected on first render (30 days unless configured otherwise)."""
    presets = time_slice_presets(now)
    if not presets:
        end = now or datetime.now(timezone.utc)
        return TimeSlice(start_date=end - timedelta(days=30), end_date=end, label=preset_label(30))
    index = min(max(settings.default_time_slice_index, 0), len(presets) - 1)
    return presets[index]


def find_preset(presets: Sequence[TimeSlice], label: str) -> int:
    """Index of the preset with this label, or -1."""
    for i, preset in enumerate(presets):
        if preset.label == label:
            return i
    return -1


def format_date_range(start: datetime, end: datetime) -> str:
    """Short range label such as '9/19 - 10/19'."""
    return f"{start.month}/{start.day} - {end.month}/{end.day}"


class TimeSliceFilter:
    """
    Keeps elements tied to at least one record dated inside the window.

    Elements failing the window are removed entirely, not dimmed; a record id
    missing from the date lookup fails only for that id.
    """

    def passes(
        self,
        node: GraphNode | UniverseNode,
        record_dates: Mapping[str, datetime],
        time_slice: TimeSlice,
    ) -> bool:
        for record_id in node.dream_ids:
            moment = record_dates.get(record_id)
            if moment is not None and time_slice.contains(moment):
                return True
        return False

    def filter(
        self,
        nodes: list[NodeT],
        record_dates: Mapping[str, datetime],
        time_slice: TimeSlice,
        show_all_time: bool = False,
    ) -> list[NodeT]:
        """
        Restrict nodes to the time window.

        Args:
            nodes: Elements to filter (input order is preserved)
            record_dates: Record id -> date lookup
            time_slice: Inclusive window
            show_all_time: Bypass slicing entirely

        Returns:
            The surviving nodes
        """
        if show_all_time:
            return list(nodes)

        kept = [n for n in nodes if self.passes(n, record_dates, time_slice)]
        logger.debug(
            f"Time slice '{time_slice.label}' kept {len(kept)}/{len(nodes)} nodes"
        )
        return kept
