"""Directional arrow geometry for ROI boundaries.

Given a closed polygon and one of its edges, works out which perpendicular
points out of the ROI, how far the opposite boundary is along the arrow, and
where an arrow can be drawn without crossing that boundary. Nothing is cached;
every call recomputes from the polygon.
"""

import math
from typing import Dict, List, Optional, Tuple

from ..config.defaults import GEOMETRY_CONSTANTS, MARKER_SETTINGS
from ..logging_config import get_logger
from ..models.boundary import ArrowPlacement, Direction, VertexMarker
from ..models.config import EngineConfig
from ..models.geometry import Point, Polygon, VERTEX_ALPHABET
from .geometry_kernel import (
    centroid,
    distance,
    midpoint,
    offset_point,
    ray_segment_distance,
)

logger = get_logger("boundary_geometry")

ImageSize = Tuple[float, float]


def edge_index_for_name(boundary_name: str, vertex_count: int) -> int:
    """Resolve a letter-pair edge name (``"AB"``, ``"DA"``) to an edge index.

    Raises ValueError unless the name is one of the polygon's edges.
    """
    letters = [VERTEX_ALPHABET[i % len(VERTEX_ALPHABET)] for i in range(vertex_count)]
    names = [f"{letters[i]}{letters[(i + 1) % vertex_count]}" for i in range(vertex_count)]
    if boundary_name not in names:
        raise ValueError(f"Invalid boundary name: {boundary_name!r}")
    return names.index(boundary_name)


class BoundaryGeometry:
    """Computes arrow placements and vertex markers for a closed polygon."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def outward_angle(self, polygon: Polygon, edge_index: int) -> float:
        """Angle of the edge normal that points away from the centroid."""
        start, end = polygon.edge(edge_index)
        mid = midpoint(start, end)
        center = centroid(polygon.vertices)

        edge_angle = math.atan2(end.y - start.y, end.x - start.x)
        perpendicular = edge_angle + math.pi / 2

        probe = offset_point(mid, perpendicular, self.config.outward_probe_distance)
        if distance(probe, center) > distance(mid, center):
            return perpendicular
        return perpendicular + math.pi

    def arrow_angle(self, polygon: Polygon, edge_index: int, direction: Direction) -> float:
        outward = self.outward_angle(polygon, edge_index)
        if direction == Direction.OUTWARD:
            return outward
        return outward + math.pi

    def distance_to_opposite_boundary(self, polygon: Polygon, edge_index: int,
                                      angle: float) -> float:
        """Closest hit of a ray from the edge midpoint against every other edge."""
        n = len(polygon)
        edge_index %= n
        origin = midpoint(*polygon.edge(edge_index))

        nearest = math.inf
        for i in range(n):
            if i == edge_index:
                continue
            hit = ray_segment_distance(origin, angle, *polygon.edge(i),
                                       parallel_epsilon=GEOMETRY_CONSTANTS["PARALLEL_EPSILON"])
            if hit is not None and hit < nearest:
                nearest = hit

        if nearest == math.inf:
            logger.debug(f"No opposite boundary hit from edge {edge_index}, using fallback distance")
            return self.config.fallback_boundary_distance
        return nearest

    def is_full_view(self, polygon: Polygon, image_size: Optional[ImageSize]) -> bool:
        """Whether the polygon's bounding box covers nearly the whole image."""
        if not image_size:
            return False
        bbox_width, bbox_height = self._bbox_size(polygon)
        image_width, image_height = image_size
        ratio = self.config.full_view_ratio
        return (bbox_width / image_width >= ratio) and (bbox_height / image_height >= ratio)

    def arrow_placement(self, polygon: Polygon, edge_index: int, direction: Direction,
                        image_size: Optional[ImageSize] = None) -> ArrowPlacement:
        """Anchor, rotation and length of the arrow for one edge direction."""
        n = len(polygon)
        edge_index %= n
        angle = self.arrow_angle(polygon, edge_index, direction)
        gap = self.distance_to_opposite_boundary(polygon, edge_index, angle)

        bbox_width, bbox_height = self._bbox_size(polygon)
        diagonal = math.hypot(bbox_width, bbox_height)
        base_length = max(self.config.min_arrow_length,
                          min(self.config.max_arrow_length, diagonal * self.config.arrow_length_ratio))
        length = min(base_length, gap * GEOMETRY_CONSTANTS["ARROW_MAX_FRACTION_OF_GAP"])

        if length <= 0:
            multiplier = 0.0
        elif direction == Direction.INWARD:
            multiplier = min(GEOMETRY_CONSTANTS["INWARD_OFFSET_MAX"],
                             gap * GEOMETRY_CONSTANTS["INWARD_OFFSET_GAP_RATIO"] / length)
        elif self.is_full_view(polygon, image_size):
            # Keep the arrow inside the visible canvas
            multiplier = GEOMETRY_CONSTANTS["FULL_VIEW_OUTWARD_OFFSET"]
        else:
            multiplier = min(GEOMETRY_CONSTANTS["OUTWARD_OFFSET_MAX"],
                             gap * GEOMETRY_CONSTANTS["OUTWARD_OFFSET_GAP_RATIO"] / length)

        anchor = offset_point(midpoint(*polygon.edge(edge_index)), angle, length * multiplier)
        head_width = max(10.0, length * 0.7)

        return ArrowPlacement(
            edge_index=edge_index,
            edge_name=polygon.edge_names()[edge_index],
            direction=direction,
            anchor=anchor,
            angle=angle,
            length=length,
            distance_to_opposite=gap,
            head_width=head_width,
            shaft_length=max(length * 1.2, length + 10),
        )

    def edge_arrows(self, polygon: Polygon,
                    image_size: Optional[ImageSize] = None) -> Dict[str, Dict[str, ArrowPlacement]]:
        """Arrow placements for both directions of every edge, keyed by edge name."""
        arrows: Dict[str, Dict[str, ArrowPlacement]] = {}
        for index, name in enumerate(polygon.edge_names()):
            arrows[name] = {
                direction.value: self.arrow_placement(polygon, index, direction, image_size)
                for direction in Direction
            }
        return arrows

    def vertex_markers(self, polygon: Polygon,
                       image_size: Optional[ImageSize] = None) -> List[VertexMarker]:
        """Letter markers for each vertex.

        Full-view ROIs get slightly smaller markers pulled toward the centroid
        so they stay on screen.
        """
        bbox_width, bbox_height = self._bbox_size(polygon)
        diagonal = math.hypot(bbox_width, bbox_height)
        full_view = self.is_full_view(polygon, image_size)

        if full_view:
            min_radius = MARKER_SETTINGS["full_view_min_radius"]
            max_radius = MARKER_SETTINGS["full_view_max_radius"]
        else:
            min_radius = MARKER_SETTINGS["min_radius"]
            max_radius = MARKER_SETTINGS["max_radius"]
        radius = max(min_radius, min(max_radius, diagonal * MARKER_SETTINGS["radius_ratio"]))
        shift = radius * MARKER_SETTINGS["full_view_inward_shift"] if full_view else 0.0

        center = centroid(polygon.vertices)
        markers = []
        for label, vertex in zip(polygon.vertex_names(), polygon.vertices):
            dist = distance(vertex, center)
            if shift and dist > 0:
                anchor = Point(vertex.x + (center.x - vertex.x) / dist * shift,
                               vertex.y + (center.y - vertex.y) / dist * shift)
            else:
                anchor = vertex
            markers.append(VertexMarker(label=label, anchor=anchor, radius=radius))
        return markers

    @staticmethod
    def _bbox_size(polygon: Polygon) -> Tuple[float, float]:
        min_x, min_y, max_x, max_y = polygon.bounding_box()
        return max(1.0, max_x - min_x), max(1.0, max_y - min_y)
