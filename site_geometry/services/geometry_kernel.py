"""Geometric predicates and measurements on image-plane points.

Everything here is a pure function of its arguments. Callers supply finite
coordinates and, where a sequence is expected, at least one point.
"""

import math
from enum import Enum
from typing import Optional, Sequence, Tuple

from ..models.geometry import Point


class Orientation(Enum):
    """Turn direction of an ordered point triple."""
    COLLINEAR = 0
    CLOCKWISE = 1
    COUNTERCLOCKWISE = 2


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)


def centroid(points: Sequence[Point]) -> Point:
    """Mean of the points, rounded to whole pixels for display."""
    n = len(points)
    sum_x = sum(p.x for p in points)
    sum_y = sum(p.y for p in points)
    return Point(round(sum_x / n), round(sum_y / n))


def exact_centroid(points: Sequence[Point]) -> Point:
    """Mean of the points without rounding."""
    n = len(points)
    return Point(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def bounding_box(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def orientation(p: Point, q: Point, r: Point) -> Orientation:
    """Classify the turn p -> q -> r by the sign of (q - p) x (r - q).

    In image coordinates (y grows downward) a positive value is a clockwise
    turn on screen.
    """
    value = (q.y - p.y) * (r.x - q.x) - (q.x - p.x) * (r.y - q.y)
    if value == 0:
        return Orientation.COLLINEAR
    return Orientation.CLOCKWISE if value > 0 else Orientation.COUNTERCLOCKWISE


def on_segment(p: Point, q: Point, r: Point) -> bool:
    """True if q lies within the bounding box of segment p-r.

    Only meaningful when p, q and r are already known to be collinear.
    """
    return (min(p.x, r.x) <= q.x <= max(p.x, r.x) and
            min(p.y, r.y) <= q.y <= max(p.y, r.y))


def segments_intersect(a1: Point, a2: Point, b1: Point, b2: Point) -> bool:
    """True if segment a1-a2 touches or crosses segment b1-b2."""
    # Bounding boxes that do not overlap cannot intersect
    if (max(a1.x, a2.x) < min(b1.x, b2.x) or
            min(a1.x, a2.x) > max(b1.x, b2.x) or
            max(a1.y, a2.y) < min(b1.y, b2.y) or
            min(a1.y, a2.y) > max(b1.y, b2.y)):
        return False

    o1 = orientation(a1, a2, b1)
    o2 = orientation(a1, a2, b2)
    o3 = orientation(b1, b2, a1)
    o4 = orientation(b1, b2, a2)

    if o1 != o2 and o3 != o4:
        return True

    # Collinear cases: an endpoint lying on the other segment
    if o1 == Orientation.COLLINEAR and on_segment(a1, b1, a2):
        return True
    if o2 == Orientation.COLLINEAR and on_segment(a1, b2, a2):
        return True
    if o3 == Orientation.COLLINEAR and on_segment(b1, a1, b2):
        return True
    if o4 == Orientation.COLLINEAR and on_segment(b1, a2, b2):
        return True

    return False


def ray_segment_distance(origin: Point, angle: float, s1: Point, s2: Point,
                         parallel_epsilon: float = 1e-4) -> Optional[float]:
    """Distance along a ray to segment s1-s2, or None if the ray misses it.

    Rays (nearly) parallel to the segment never hit it. Only hits strictly in
    front of the origin count.
    """
    dir_x = math.cos(angle)
    dir_y = math.sin(angle)
    edge_x = s2.x - s1.x
    edge_y = s2.y - s1.y

    denominator = dir_x * edge_y - dir_y * edge_x
    if abs(denominator) < parallel_epsilon:
        return None

    dx = s1.x - origin.x
    dy = s1.y - origin.y
    t = (dx * edge_y - dy * edge_x) / denominator
    s = (dx * dir_y - dy * dir_x) / denominator

    if t > 0 and 0 <= s <= 1:
        return t
    return None


def offset_point(origin: Point, angle: float, length: float) -> Point:
    """Point ``length`` away from ``origin`` in direction ``angle``."""
    return Point(origin.x + math.cos(angle) * length, origin.y + math.sin(angle) * length)
