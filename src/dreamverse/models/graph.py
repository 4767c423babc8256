"""Element graph models - recurring diary elements and their co-occurrence links."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class ElementType(str, Enum):
    """Kind of element extracted from a diary record."""

    PERSON = "person"
    PLACE = "place"
    OBJECT = "object"
    ACTION = "action"


def parse_datetime(value: Any) -> datetime | None:
    """Parse a record date into an aware UTC datetime.

    Naive values are assumed to be UTC and plain dates mean midnight UTC.
    Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class GraphNode:
    """
    A recurring element (person, place, object or action) across records.

    Never mutated by the universe engine; derived state lives on UniverseNode.
    """

    id: str
    name: str
    type: ElementType
    count: int  # occurrences across all records
    dream_ids: tuple[str, ...]  # records the element appears in

    def to_dict(self) -> dict:
        """Convert to the collaborator's JSON shape."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "count": self.count,
            "dreamIds": list(self.dream_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphNode":
        """Create from dictionary, accepting camelCase or snake_case keys."""
        try:
            element_type = ElementType(data["type"])
        except ValueError as e:
            raise ValueError(f"Unknown element type for node {data.get('id')!r}: {data['type']!r}") from e

        count = int(data.get("count", 1))
        if count <= 0:
            raise ValueError(f"Node {data['id']!r} has non-positive count {count}")

        dream_ids = data.get("dreamIds", data.get("dream_ids", []))
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            type=element_type,
            count=count,
            dream_ids=tuple(str(d) for d in dream_ids),
        )


@dataclass(frozen=True)
class GraphLink:
    """Co-occurrence link between two elements."""

    source: str
    target: str
    weight: int = 1  # number of records where both elements appear
    dream_ids: tuple[str, ...] = ()

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def other_end(self, node_id: str) -> str | None:
        """Return the endpoint opposite to node_id, or None if not attached."""
        if self.source == node_id:
            return self.target
        if self.target == node_id:
            return self.source
        return None

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
            "dreamIds": list(self.dream_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphLink":
        dream_ids = data.get("dreamIds", data.get("dream_ids", []))
        return cls(
            source=str(data["source"]),
            target=str(data["target"]),
            weight=max(1, int(data.get("weight", 1))),
            dream_ids=tuple(str(d) for d in dream_ids),
        )


def filter_links(links: Iterable[GraphLink], node_ids: set[str] | frozenset[str]) -> list[GraphLink]:
    """Keep only links whose endpoints both exist in node_ids."""
    kept = [link for link in links if link.source in node_ids and link.target in node_ids]
    return kept


@dataclass
class ElementGraph:
    """Element graph payload plus the record -> date lookup."""

    nodes: list[GraphNode] = field(default_factory=list)
    links: list[GraphLink] = field(default_factory=list)
    record_dates: dict[str, datetime] = field(default_factory=dict)
    total_dreams: int = 0

    @property
    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def valid_links(self) -> list[GraphLink]:
        """Links with both endpoints present; dangling ones are dropped."""
        kept = filter_links(self.links, self.node_ids)
        dropped = len(self.links) - len(kept)
        if dropped:
            logger.debug(f"Dropped {dropped} links referencing absent nodes")
        return kept

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
            "totalDreams": self.total_dreams,
            "totalElements": len(self.nodes),
            "dreamDates": {rid: dt.isoformat() for rid, dt in self.record_dates.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ElementGraph":
        """Parse the extraction collaborator's payload.

        Raises:
            ValueError: If the payload is not shaped as nodes, links and a
                record date mapping, or a node has an unknown type or a
                non-positive count.
        """
        if not isinstance(data, dict):
            raise ValueError("Graph payload must be a mapping")
        raw_nodes = data.get("nodes", [])
        raw_links = data.get("links", [])
        raw_dates = data.get("dreamDates", data.get("record_dates", {}))
        if raw_dates is None:
            raw_dates = {}
        if not isinstance(raw_nodes, list) or not isinstance(raw_links, list):
            raise ValueError("Graph nodes and links must be lists")
        if not isinstance(raw_dates, dict):
            raise ValueError("Graph dreamDates must be a mapping of record id to date")

        nodes = [GraphNode.from_dict(n) for n in raw_nodes]
        links = [GraphLink.from_dict(link) for link in raw_links]

        record_dates: dict[str, datetime] = {}
        for record_id, raw in raw_dates.items():
            parsed = parse_datetime(raw)
            if parsed is None:
                logger.warning(f"Skipping unparseable date for record {record_id}: {raw!r}")
                continue
            record_dates[str(record_id)] = parsed

        total_dreams = int(data.get("totalDreams", len(record_dates)))
        return cls(nodes=nodes, links=links, record_dates=record_dates, total_dreams=total_dreams)
