"""Universe engine for the diary element graph.

Provides:
- Semantic classification of elements into fixed categories
- Nebula aggregation and spiral expansion
- Collision relaxation of expanded stars
- Time-slice filtering and gravity-lens focus
- Viewport level of detail and the UniverseState machine
"""

from dreamverse.universe.aggregation import NebulaAggregator
from dreamverse.universe.categories import (
    DEFAULT_CATEGORY_TABLE,
    CategoryConfig,
    CategoryTableError,
    SemanticClassifier,
    classify,
    get_classifier,
)
from dreamverse.universe.collision import CollisionSolver, Simulation
from dreamverse.universe.engine import UniverseEngine, UniverseView
from dreamverse.universe.expansion import ExpansionLayout
from dreamverse.universe.focus import GravityLensFocus, neighborhood
from dreamverse.universe.state import UniverseState
from dreamverse.universe.time_slice import (
    TimeSliceFilter,
    default_time_slice,
    format_date_range,
    time_slice_presets,
)
from dreamverse.universe.viewport import ViewportController, ViewTransform

__all__ = [
    # Classification
    "CategoryConfig",
    "CategoryTableError",
    "DEFAULT_CATEGORY_TABLE",
    "SemanticClassifier",
    "classify",
    "get_classifier",
    # Layout
    "NebulaAggregator",
    "ExpansionLayout",
    "CollisionSolver",
    "Simulation",
    # Filtering and focus
    "TimeSliceFilter",
    "default_time_slice",
    "format_date_range",
    "time_slice_presets",
    "GravityLensFocus",
    "neighborhood",
    # State
    "UniverseState",
    "ViewportController",
    "ViewTransform",
    "UniverseEngine",
    "UniverseView",
]
