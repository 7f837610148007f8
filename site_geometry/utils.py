"""Utility functions for the site geometry engine."""

from typing import Any, List, Sequence

from .models.geometry import Point


def is_normalized(points: Sequence[Point]) -> bool:
    """Whether stored coordinates look normalized rather than raw pixels."""
    return len(points) > 0 and all(0 <= p.x <= 1 and 0 <= p.y <= 1 for p in points)


def parse_points(data: Any) -> List[Point]:
    """Parse a list of ``{"x", "y"}`` objects or ``[x, y]`` pairs."""
    if not isinstance(data, list):
        raise ValueError("points must be a list")

    points = []
    for item in data:
        if isinstance(item, dict):
            points.append(Point.from_dict(item))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            points.append(Point(float(item[0]), float(item[1])))
        else:
            raise ValueError(f"Invalid point: {item!r}")
    return points


def parse_image_size(data: Any):
    """Parse an optional ``{"width", "height"}`` object into a (width, height) tuple."""
    if not data:
        return None
    width = float(data["width"])
    height = float(data["height"])
    if width <= 0 or height <= 0:
        raise ValueError("image width and height must be positive")
    return width, height
