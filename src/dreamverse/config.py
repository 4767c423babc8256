"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Universe engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DREAMVERSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Nebula aggregation
    orbit_ratio: float = Field(
        default=0.3,
        description="Radius of the nebula ring as a fraction of min(width, height)"
    )
    nebula_base_radius: float = 40.0
    nebula_radius_per_node: float = 20.0  # multiplied by sqrt(member count)

    # Expansion spiral
    expansion_radius_ratio: float = 0.35
    expansion_spiral_turns: float = 2.5
    expansion_spread: float = 0.85
    expansion_inner_radius: float = 40.0

    # Collision solver
    solver_charge_strength: float = Field(
        default=-80.0,
        description="Pairwise many-body strength (negative repels)"
    )
    solver_link_distance: float = 80.0
    solver_link_strength: float = 0.3
    solver_collide_base: float = 25.0
    solver_collide_per_sqrt_count: float = 5.0
    solver_alpha_decay: float = 0.05
    solver_alpha_min: float = 0.001
    solver_velocity_decay: float = 0.4
    solver_warmup_steps: int = Field(
        default=100,
        description="Synchronous steps run before the first paint"
    )
    solver_settle_steps: int = Field(
        default=30,
        description="Animated steps yielded by settle()"
    )
    solver_overlap_tolerance: float = 0.5
    solver_max_overlap_passes: int = Field(
        default=50,
        description="Minimum cap on overlap projection passes; the cap grows to 4 per node"
    )
    solver_seed: int = 42

    # Gravity lens
    lens_dim_opacity: float = 0.1
    lens_out_of_range_opacity: float = 0.15

    # Viewport
    zoom_min: float = 0.3
    zoom_max: float = 3.0
    zoom_in_factor: float = 1.3
    zoom_out_factor: float = 0.7
    galaxy_max_scale: float = Field(
        default=0.6,
        description="Zoom scale below which the view level is galaxy"
    )
    star_min_scale: float = Field(
        default=1.5,
        description="Zoom scale at or above which the view level is star"
    )

    # Time slicing
    time_slice_preset_days: list[int] = Field(
        default_factory=lambda: [7, 30, 90, 180, 365],
        description="Preset window lengths in days, shortest first"
    )
    default_time_slice_index: int = 1

    # Semantic categories
    category_table_path: str | None = Field(
        default=None,
        description="Optional JSON file replacing the built-in category table"
    )

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    log_level: str = "INFO"


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        category_table_path=None,
        api_debug=False,
        log_level="DEBUG",
    )


# Global settings instance
settings = Settings()
