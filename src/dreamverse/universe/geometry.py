"""Small geometry helpers shared by the layout components."""

import math


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the result would not be finite."""
    if denominator == 0:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return result


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def is_valid_canvas(width: float, height: float) -> bool:
    """A canvas is usable once both dimensions have been measured."""
    return width > 0 and height > 0 and math.isfinite(width) and math.isfinite(height)


def canvas_center(width: float, height: float) -> tuple[float, float]:
    return width / 2, height / 2


def polar_point(cx: float, cy: float, angle: float, radius: float) -> tuple[float, float]:
    """Point at angle (radians) and radius from (cx, cy)."""
    return cx + math.cos(angle) * radius, cy + math.sin(angle) * radius


def collide_radius(count: int, base: float = 25.0, per_sqrt_count: float = 5.0) -> float:
    """Minimum-separation radius of an expanded star."""
    return math.sqrt(max(count, 0)) * per_sqrt_count + base
