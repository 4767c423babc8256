"""Dreamverse data models."""

from dreamverse.models.graph import (
    ElementGraph,
    ElementType,
    GraphLink,
    GraphNode,
    filter_links,
    parse_datetime,
)
from dreamverse.models.universe import (
    Nebula,
    SemanticCategory,
    TimeSlice,
    UniverseNode,
    ViewLevel,
    VisibleLink,
)

__all__ = [
    "ElementGraph",
    "ElementType",
    "GraphLink",
    "GraphNode",
    "filter_links",
    "parse_datetime",
    "Nebula",
    "SemanticCategory",
    "TimeSlice",
    "UniverseNode",
    "ViewLevel",
    "VisibleLink",
]
