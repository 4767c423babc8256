"""Derived universe models - nebulae, positioned stars and view state values."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

from dreamverse.models.graph import ElementType, GraphNode, parse_datetime


class SemanticCategory(str, Enum):
    """Fixed semantic buckets used to aggregate elements into nebulae."""

    FAMILY = "family"
    FRIENDS = "friends"
    STRANGERS = "strangers"
    FOOD = "food"
    NATURE = "nature"
    BUILDINGS = "buildings"
    VEHICLES = "vehicles"
    EMOTIONS = "emotions"
    ACTIONS = "actions"
    ABSTRACT = "abstract"
    OTHER = "other"  # fallback, never matched by keywords


class ViewLevel(str, Enum):
    """Discrete level of detail derived from the zoom factor."""

    GALAXY = "galaxy"  # aggregated nebulae only
    NEBULA = "nebula"  # nebulae being expanded
    STAR = "star"  # individual element detail


@dataclass(frozen=True)
class TimeSlice:
    """Inclusive date window restricting the working node set."""

    start_date: datetime
    end_date: datetime
    label: str

    def contains(self, moment: datetime | date) -> bool:
        # Naive datetimes and plain dates on either side are read as UTC
        start = parse_datetime(self.start_date)
        end = parse_datetime(self.end_date)
        when = parse_datetime(moment)
        if start is None or end is None or when is None:
            return False
        return start <= when <= end

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "label": self.label,
        }


@dataclass
class Nebula:
    """Aggregate of every surviving element in one semantic category."""

    id: str
    category: SemanticCategory
    label: str
    nodes: list[GraphNode]
    total_count: int  # sum of member occurrence counts
    center_x: float
    center_y: float
    radius: float
    color: str
    icon: str
    is_expanded: bool = False

    @property
    def core_radius(self) -> float:
        """Radius of the clickable core."""
        return self.radius * 0.35

    @property
    def member_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category.value,
            "label": self.label,
            "node_ids": self.member_ids,
            "node_count": len(self.nodes),
            "total_count": self.total_count,
            "center_x": self.center_x,
            "center_y": self.center_y,
            "radius": self.radius,
            "is_expanded": self.is_expanded,
            "color": self.color,
            "icon": self.icon,
        }


@dataclass
class UniverseNode:
    """
    An element expanded out of its nebula into an individually placed star.

    Created on expansion and discarded on collapse. Lifetimes of the
    transient flags:
    - is_highlighted: set by the gravity lens for the focused node only,
      recomputed on every focus change.
    - is_new: set on the transition that expands the owning nebula,
      cleared when the following settle() completes.
    """

    id: str
    name: str
    type: ElementType
    count: int
    dream_ids: tuple[str, ...]
    category: SemanticCategory
    nebula_id: str
    x: float | None = None
    y: float | None = None
    opacity: float = 1.0
    scale: float = 1.0
    is_highlighted: bool = False
    is_in_time_range: bool = True
    is_new: bool = False

    @classmethod
    def from_graph_node(
        cls,
        node: GraphNode,
        category: SemanticCategory,
        nebula_id: str,
        x: float | None = None,
        y: float | None = None,
    ) -> "UniverseNode":
        return cls(
            id=node.id,
            name=node.name,
            type=node.type,
            count=node.count,
            dream_ids=node.dream_ids,
            category=category,
            nebula_id=nebula_id,
            x=x,
            y=y,
        )

    @property
    def display_radius(self) -> float:
        """Rendered star radius, grows with occurrence count."""
        return (self.count ** 0.5 * 5 + 8) * self.scale

    def copy(self, **changes) -> "UniverseNode":
        return replace(self, **changes)

    def to_render_dict(self) -> dict:
        """Per-node state consumed by the presentation layer."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "opacity": self.opacity,
            "scale": self.scale,
            "is_highlighted": self.is_highlighted,
        }

    def to_dict(self) -> dict:
        data = self.to_render_dict()
        data.update({
            "name": self.name,
            "type": self.type.value,
            "count": self.count,
            "category": self.category.value,
            "nebula_id": self.nebula_id,
            "is_new": self.is_new,
        })
        return data


@dataclass(frozen=True)
class VisibleLink:
    """A link whose endpoints are both visible, with derived styling."""

    source: str
    target: str
    weight: int
    opacity: float
    width: float = 1.5

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
            "opacity": self.opacity,
            "width": self.width,
        }
