"""Unit tests for the gravity lens."""

import pytest

from dreamverse.models import GraphLink, GraphNode, SemanticCategory, UniverseNode
from dreamverse.universe.focus import GravityLensFocus, neighborhood


@pytest.fixture
def stars(sample_nodes: list[GraphNode]) -> list[UniverseNode]:
    return [
        UniverseNode.from_graph_node(n, SemanticCategory.OTHER, "nebula-other", float(i), 0.0)
        for i, n in enumerate(sample_nodes)
    ]


class TestNeighborhood:
    """Tests for neighborhood lookup."""

    def test_direction_independent(self, sample_links: list[GraphLink]) -> None:
        """Test both endpoints see each other."""
        assert neighborhood(sample_links, "n-father") == {"n-father", "n-mother", "n-ghost"}
        assert neighborhood(sample_links, "n-mother") == {"n-mother", "n-father", "n-river"}

    def test_isolated(self) -> None:
        """Test a node without links is its own neighborhood."""
        assert neighborhood([], "a") == {"a"}


class TestGravityLensFocus:
    """Tests for GravityLensFocus."""

    @pytest.fixture
    def lens(self) -> GravityLensFocus:
        return GravityLensFocus()

    def test_no_focus(self, lens: GravityLensFocus, stars: list[UniverseNode], sample_links: list[GraphLink]) -> None:
        """Test everything opaque and nothing highlighted."""
        result = lens.focus(stars, sample_links, None)
        assert all(s.opacity == 1.0 for s in result)
        assert not any(s.is_highlighted for s in result)

    def test_no_focus_out_of_range(self, lens: GravityLensFocus, stars: list[UniverseNode]) -> None:
        """Test upstream-excluded stars stay faint."""
        stars[0] = stars[0].copy(is_in_time_range=False)
        result = lens.focus(stars, [], None)
        assert result[0].opacity == pytest.approx(0.15)
        assert result[1].opacity == 1.0

    def test_focus_neighborhood(
        self, lens: GravityLensFocus, stars: list[UniverseNode], sample_links: list[GraphLink]
    ) -> None:
        """Test neighbors opaque, the rest dimmed, only the focus highlighted."""
        result = {s.id: s for s in lens.focus(stars, sample_links, "n-mother")}

        assert result["n-mother"].is_highlighted
        for node_id in ("n-mother", "n-father", "n-river"):
            assert result[node_id].opacity == 1.0
        for node_id in ("n-moon", "n-ticket", "n-umbrella"):
            assert result[node_id].opacity == pytest.approx(0.1)
        assert [s.id for s in result.values() if s.is_highlighted] == ["n-mother"]

    @pytest.mark.parametrize("focused,neighbor", [("n-mother", "n-father"), ("n-father", "n-mother")])
    def test_focus_symmetry(
        self,
        lens: GravityLensFocus,
        stars: list[UniverseNode],
        sample_links: list[GraphLink],
        focused: str,
        neighbor: str,
    ) -> None:
        """Test a link lights up its other end from either side."""
        result = {s.id: s for s in lens.focus(stars, sample_links, focused)}
        assert result[neighbor].opacity == 1.0
        assert not result[neighbor].is_highlighted

    def test_focus_toggle_restores(
        self, lens: GravityLensFocus, stars: list[UniverseNode], sample_links: list[GraphLink]
    ) -> None:
        """Test clearing focus restores the pre-focus opacities exactly."""
        before = lens.focus(stars, sample_links, None)
        focused = lens.focus(before, sample_links, "n-river")
        after = lens.focus(focused, sample_links, None)
        assert [(s.opacity, s.is_highlighted) for s in after] == [
            (s.opacity, s.is_highlighted) for s in before
        ]

    def test_inputs_not_mutated(
        self, lens: GravityLensFocus, stars: list[UniverseNode], sample_links: list[GraphLink]
    ) -> None:
        """Test the lens returns copies."""
        lens.focus(stars, sample_links, "n-moon")
        assert all(s.opacity == 1.0 and not s.is_highlighted for s in stars)

    def test_unknown_focus_dims_everything(self, lens: GravityLensFocus, stars: list[UniverseNode]) -> None:
        """Test focusing an absent id leaves no star fully visible."""
        result = lens.focus(stars, [], "nobody")
        assert all(s.opacity == pytest.approx(0.1) for s in result)
