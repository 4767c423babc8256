"""Zoom/pan transform and the level of detail derived from it."""

import logging
from dataclasses import dataclass

from dreamverse.config import settings
from dreamverse.models import ViewLevel
from dreamverse.universe.geometry import clamp, is_valid_canvas, safe_ratio

logger = logging.getLogger(__name__)

LEVEL_INFO: dict[ViewLevel, dict[str, str]] = {
    ViewLevel.GALAXY: {"label": "Galaxy view", "icon": "🌌", "description": "Aggregated nebulae"},
    ViewLevel.NEBULA: {"label": "Nebula view", "icon": "✨", "description": "Nebulae expanding"},
    ViewLevel.STAR: {"label": "Star view", "icon": "⭐", "description": "Single element detail"},
}


@dataclass(frozen=True)
class ViewTransform:
    """Uniform scale k followed by translation (x, y)."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: float, py: float) -> tuple[float, float]:
        """Content -> screen coordinates."""
        return px * self.k + self.x, py * self.k + self.y

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        """Screen -> content coordinates."""
        return safe_ratio(sx - self.x, self.k), safe_ratio(sy - self.y, self.k)

    def to_svg(self) -> str:
        return f"translate({self.x},{self.y}) scale({self.k})"

    def to_dict(self) -> dict:
        return {"k": self.k, "x": self.x, "y": self.y}


IDENTITY = ViewTransform()


class ViewportController:
    """
    Owns the zoom/pan transform.

    The view level is a pure function of the current scale:
    galaxy below 0.6, nebula from 0.6 up to 1.5, star from 1.5.
    """

    def __init__(
        self,
        width: float = 0.0,
        height: float = 0.0,
        min_scale: float | None = None,
        max_scale: float | None = None,
        galaxy_max_scale: float | None = None,
        star_min_scale: float | None = None,
        zoom_in_factor: float | None = None,
        zoom_out_factor: float | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.min_scale = min_scale if min_scale is not None else settings.zoom_min
        self.max_scale = max_scale if max_scale is not None else settings.zoom_max
        self.galaxy_max_scale = galaxy_max_scale if galaxy_max_scale is not None else settings.galaxy_max_scale
        self.star_min_scale = star_min_scale if star_min_scale is not None else settings.star_min_scale
        self.zoom_in_factor = zoom_in_factor if zoom_in_factor is not None else settings.zoom_in_factor
        self.zoom_out_factor = zoom_out_factor if zoom_out_factor is not None else settings.zoom_out_factor
        self.transform = IDENTITY

    @property
    def scale(self) -> float:
        return self.transform.k

    @property
    def level(self) -> ViewLevel:
        return self.level_for_scale(self.transform.k)

    def level_for_scale(self, k: float) -> ViewLevel:
        if k < self.galaxy_max_scale:
            return ViewLevel.GALAXY
        if k < self.star_min_scale:
            return ViewLevel.NEBULA
        return ViewLevel.STAR

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def _default_anchor(self) -> tuple[float, float]:
        if is_valid_canvas(self.width, self.height):
            return self.width / 2, self.height / 2
        return 0.0, 0.0

    def zoom_to(self, k: float, anchor: tuple[float, float] | None = None) -> ViewTransform:
        """Set the scale, keeping the anchor's screen position fixed.

        The scale is clamped to the configured extent.
        """
        new_k = clamp(k, self.min_scale, self.max_scale)
        ax, ay = anchor if anchor is not None else self._default_anchor()
        cx, cy = self.transform.invert(ax, ay)
        self.transform = ViewTransform(k=new_k, x=ax - cx * new_k, y=ay - cy * new_k)
        return self.transform

    def zoom_by(self, factor: float, anchor: tuple[float, float] | None = None) -> ViewTransform:
        return self.zoom_to(self.transform.k * factor, anchor)

    def zoom_in(self) -> ViewTransform:
        return self.zoom_by(self.zoom_in_factor)

    def zoom_out(self) -> ViewTransform:
        return self.zoom_by(self.zoom_out_factor)

    def pan_by(self, dx: float, dy: float) -> ViewTransform:
        t = self.transform
        self.transform = ViewTransform(k=t.k, x=t.x + dx, y=t.y + dy)
        return self.transform

    def reset(self) -> ViewTransform:
        self.transform = IDENTITY
        return self.transform

    def to_content(self, sx: float, sy: float) -> tuple[float, float]:
        return self.transform.invert(sx, sy)
