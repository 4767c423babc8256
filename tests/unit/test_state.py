"""Unit tests for UniverseState."""

from datetime import datetime

from dreamverse.models import ViewLevel
from dreamverse.universe.state import UniverseState
from dreamverse.universe.time_slice import time_slice_presets
from dreamverse.universe.viewport import ViewportController


class TestUniverseState:
    """Tests for UniverseState transitions."""

    def test_initial(self, now: datetime) -> None:
        """Test galaxy, scale 1, nothing focused or expanded, 30-day slice."""
        state = UniverseState.initial(now)
        assert state.view_level == ViewLevel.GALAXY
        assert state.zoom_scale == 1.0
        assert state.focused_node_id is None
        assert state.expanded_nebula_ids == set()
        assert state.time_slice.label == "Last 30 days"
        assert state.time_slice.end_date == now
        assert state.show_all_time is False

    def test_multiple_expansions(self, now: datetime) -> None:
        """Test several nebulae can be expanded at once."""
        state = UniverseState.initial(now)
        assert state.toggle_nebula("nebula-family") is True
        assert state.toggle_nebula("nebula-nature") is True
        assert state.expanded_nebula_ids == {"nebula-family", "nebula-nature"}
        assert state.toggle_nebula("nebula-family") is False
        assert state.expanded_nebula_ids == {"nebula-nature"}

    def test_toggle_nebula_clears_focus(self, now: datetime) -> None:
        """Test expansion changes drop the focus."""
        state = UniverseState.initial(now)
        state.toggle_focus("n-mother")
        state.toggle_nebula("nebula-family")
        assert state.focused_node_id is None

    def test_toggle_focus(self, now: datetime) -> None:
        """Test clicking the focused node again clears focus."""
        state = UniverseState.initial(now)
        assert state.toggle_focus("a") == "a"
        assert state.toggle_focus("b") == "b"
        assert state.toggle_focus("b") is None

    def test_zoom_does_not_touch_expansions(self, now: datetime) -> None:
        """Test zoom level and expansions are independent."""
        state = UniverseState.initial(now)
        state.toggle_nebula("nebula-family")
        state.apply_zoom(2.0, ViewLevel.STAR)
        assert state.view_level == ViewLevel.STAR
        assert state.expanded_nebula_ids == {"nebula-family"}

    def test_time_slice(self, now: datetime) -> None:
        """Test choosing a preset turns the all-time bypass off."""
        state = UniverseState.initial(now)
        assert state.toggle_all_time() is True
        state.set_time_slice(time_slice_presets(now)[0])
        assert state.show_all_time is False
        assert state.time_slice.label == "Last 7 days"

    def test_reset(self, now: datetime) -> None:
        """Test reset clears expansions and focus but keeps the time slice."""
        state = UniverseState.initial(now)
        state.set_time_slice(time_slice_presets(now)[4])
        state.toggle_nebula("nebula-family")
        state.toggle_focus("n-mother")
        state.apply_zoom(2.0, ViewLevel.STAR)

        state.reset()
        assert state.view_level == ViewLevel.GALAXY
        assert state.zoom_scale == 1.0
        assert state.focused_node_id is None
        assert state.expanded_nebula_ids == set()
        assert state.time_slice.label == "Last year"

    def test_dict_round_trip(self, now: datetime) -> None:
        """Test state snapshots survive serialization."""
        state = UniverseState.initial(now)
        state.toggle_nebula("nebula-nature")
        state.toggle_focus("n-river")
        state.apply_zoom(0.5, ViewLevel.GALAXY)

        restored = UniverseState.from_dict(state.to_dict())
        assert restored == state

    def test_from_dict_derives_level_from_scale(self) -> None:
        """Test a stored level contradicting the zoom scale is ignored."""
        assert UniverseState.from_dict({"view_level": "star", "zoom_scale": 0.5}).view_level == ViewLevel.GALAXY
        assert UniverseState.from_dict({"view_level": "galaxy", "zoom_scale": 1.2}).view_level == ViewLevel.NEBULA
        assert UniverseState.from_dict({"view_level": "galaxy", "zoom_scale": 2.0}).view_level == ViewLevel.STAR

    def test_from_dict_initial_scale_is_galaxy(self, now: datetime) -> None:
        """Test an untouched state restores to galaxy at scale 1."""
        restored = UniverseState.from_dict(UniverseState.initial(now).to_dict())
        assert restored.view_level == ViewLevel.GALAXY
        assert restored.zoom_scale == 1.0

    def test_from_dict_uses_viewport_thresholds(self) -> None:
        """Test custom level thresholds apply when restoring."""
        viewport = ViewportController(galaxy_max_scale=0.4, star_min_scale=3.0)
        restored = UniverseState.from_dict({"zoom_scale": 0.5}, viewport=viewport)
        assert restored.view_level == ViewLevel.NEBULA
