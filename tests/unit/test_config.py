"""Unit tests for configuration."""

import pytest

from dreamverse.config import Settings
from dreamverse.universe import CollisionSolver, ViewportController


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, test_settings: Settings) -> None:
        """Test built-in constants."""
        assert test_settings.orbit_ratio == 0.3
        assert test_settings.solver_link_distance == 80.0
        assert test_settings.zoom_min == 0.3
        assert test_settings.zoom_max == 3.0
        assert test_settings.time_slice_preset_days == [7, 30, 90, 180, 365]
        assert test_settings.default_time_slice_index == 1
        assert test_settings.log_level == "DEBUG"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test DREAMVERSE_ environment variables override defaults."""
        monkeypatch.setenv("DREAMVERSE_ZOOM_MAX", "5")
        monkeypatch.setenv("DREAMVERSE_SOLVER_WARMUP_STEPS", "20")
        settings = Settings()
        assert settings.zoom_max == 5.0
        assert settings.solver_warmup_steps == 20

    def test_explicit_arguments_win(self) -> None:
        """Test components prefer constructor arguments over settings."""
        viewport = ViewportController(800, 600, max_scale=4.0)
        assert viewport.max_scale == 4.0
        viewport.zoom_to(3.5)
        assert viewport.scale == 3.5

        solver = CollisionSolver(warmup_steps=10, seed=7)
        assert solver.warmup_steps == 10
        assert solver.seed == 7
