"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from dreamverse.config import Settings, get_test_settings
from dreamverse.models import ElementGraph, ElementType, GraphLink, GraphNode
from dreamverse.universe import UniverseEngine

CANVAS_WIDTH = 800.0
CANVAS_HEIGHT = 600.0


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with defaults."""
    return get_test_settings()


@pytest.fixture
def now() -> datetime:
    """Fixed end of the time-slice presets."""
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_nodes() -> list[GraphNode]:
    """Two family, two nature and two uncategorized elements."""
    return [
        GraphNode("n-mother", "mother", ElementType.PERSON, 5, ("d1", "d2")),
        GraphNode("n-father", "father", ElementType.PERSON, 3, ("d2",)),
        GraphNode("n-river", "river", ElementType.PLACE, 4, ("d3",)),
        GraphNode("n-moon", "moon", ElementType.OBJECT, 2, ("d3", "d4")),
        GraphNode("n-ticket", "ticket", ElementType.OBJECT, 1, ("d5",)),
        GraphNode("n-umbrella", "umbrella", ElementType.OBJECT, 1, ("d6",)),
    ]


@pytest.fixture
def sample_links() -> list[GraphLink]:
    """Co-occurrence links, one of them dangling."""
    return [
        GraphLink("n-mother", "n-father", weight=2, dream_ids=("d2",)),
        GraphLink("n-river", "n-moon", dream_ids=("d3",)),
        GraphLink("n-mother", "n-river", dream_ids=("d1",)),
        GraphLink("n-ticket", "n-umbrella", dream_ids=("d5",)),
        GraphLink("n-father", "n-ghost", dream_ids=("d9",)),
    ]


@pytest.fixture
def record_dates(now: datetime) -> dict[str, datetime]:
    """Record dates: d1-d3 in the last 30 days, d4-d6 older."""
    return {
        "d1": now - timedelta(days=2),
        "d2": now - timedelta(days=20),
        "d3": now - timedelta(days=5),
        "d4": now - timedelta(days=100),
        "d5": now - timedelta(days=200),
        "d6": now - timedelta(days=200),
    }


@pytest.fixture
def sample_graph(
    sample_nodes: list[GraphNode],
    sample_links: list[GraphLink],
    record_dates: dict[str, datetime],
) -> ElementGraph:
    """Sample element graph."""
    return ElementGraph(
        nodes=sample_nodes,
        links=sample_links,
        record_dates=record_dates,
        total_dreams=len(record_dates),
    )


@pytest.fixture
def focus_events() -> list:
    """Collects on_node_focused callback arguments."""
    return []


@pytest.fixture
def engine(
    sample_graph: ElementGraph,
    now: datetime,
    focus_events: list,
) -> UniverseEngine:
    """Engine over the sample graph on an 800x600 canvas, default time slice."""
    return UniverseEngine.from_graph(
        sample_graph,
        width=CANVAS_WIDTH,
        height=CANVAS_HEIGHT,
        now=now,
        on_node_focused=focus_events.append,
    )


@pytest.fixture
def all_time_engine(engine: UniverseEngine) -> UniverseEngine:
    """Engine with time slicing bypassed."""
    engine.toggle_all_time()
    return engine
