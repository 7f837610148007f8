"""Image-plane geometry data models."""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

VERTEX_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass(frozen=True)
class Point:
    """A point in image pixel coordinates (or normalized to [0, 1])."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "Point":
        """Build a point from the ``{"x": .., "y": ..}`` wire shape."""
        return cls(x=float(data["x"]), y=float(data["y"]))

    def normalized(self, width: float, height: float) -> "Point":
        """Scale to [0, 1] using the image dimensions, 6 decimal places."""
        return Point(round(self.x / width, 6), round(self.y / height, 6))

    def denormalized(self, width: float, height: float) -> "Point":
        """Scale a normalized point back to the nearest integer pixel."""
        return Point(round(self.x * width), round(self.y * height))


@dataclass(frozen=True)
class Polygon:
    """Closed polygon of at least three vertices.

    The closing edge from the last vertex back to the first is implicit, so
    ``vertices`` never repeats the first point.
    """
    vertices: Tuple[Point, ...]

    def __post_init__(self):
        if len(self.vertices) < 3:
            raise ValueError(f"A polygon needs at least 3 vertices, got {len(self.vertices)}")

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> "Polygon":
        return cls(tuple(points))

    @classmethod
    def from_dicts(cls, data: Sequence[Dict[str, float]]) -> "Polygon":
        return cls(tuple(Point.from_dict(item) for item in data))

    @classmethod
    def from_normalized(cls, data: Sequence[Dict[str, float]],
                        width: float, height: float) -> "Polygon":
        """Rebuild a pixel-space polygon from stored normalized coordinates."""
        return cls(tuple(Point.from_dict(item).denormalized(width, height) for item in data))

    def __len__(self) -> int:
        return len(self.vertices)

    def edge(self, index: int) -> Tuple[Point, Point]:
        """Edge from vertex ``index`` to vertex ``index + 1`` (wrapping)."""
        n = len(self.vertices)
        return self.vertices[index % n], self.vertices[(index + 1) % n]

    def edges(self) -> List[Tuple[Point, Point]]:
        return [self.edge(i) for i in range(len(self.vertices))]

    def vertex_names(self) -> List[str]:
        return [VERTEX_ALPHABET[i % len(VERTEX_ALPHABET)] for i in range(len(self.vertices))]

    def edge_names(self) -> List[str]:
        """Letter-pair edge names: AB, BC, ... and the closing edge back to A."""
        names = self.vertex_names()
        n = len(names)
        return [f"{names[i]}{names[(i + 1) % n]}" for i in range(n)]

    def bounding_box(self) -> Tuple[float, float, float, float]:
        """Return (min_x, min_y, max_x, max_y)."""
        # geometry_kernel imports this module
        from ..services.geometry_kernel import bounding_box

        return bounding_box(self.vertices)

    def is_simple(self) -> bool:
        """Whether no two non-adjacent edges intersect."""
        # geometry_kernel imports this module
        from ..services.geometry_kernel import segments_intersect

        edges = self.edges()
        n = len(edges)
        for i in range(n):
            for j in range(i + 2, n):
                # Edge 0 and the closing edge share the first vertex
                if i == 0 and j == n - 1:
                    continue
                if segments_intersect(*edges[i], *edges[j]):
                    return False
        return True

    def normalized(self, width: float, height: float) -> List[Dict[str, float]]:
        """Coordinates in the normalized form the ROI API stores."""
        return [p.normalized(width, height).to_dict() for p in self.vertices]

    def to_dicts(self) -> List[Dict[str, float]]:
        return [p.to_dict() for p in self.vertices]
