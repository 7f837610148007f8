"""Calibration and verification data models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .geometry import Point

IDENTITY_MATRIX: Tuple[Tuple[float, ...], ...] = (
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
)

CORNER_LABELS = ("A", "B", "C", "D")


@dataclass(frozen=True)
class Rectangle:
    """Four calibration corners plus the real-world size they span.

    Corners are kept in the order fixed when the rectangle was created:
    A-B runs along the height side and A-D along the width side.
    """
    points: Tuple[Point, Point, Point, Point]
    width: float
    height: float

    def __post_init__(self):
        if len(self.points) != 4:
            raise ValueError(f"A calibration rectangle needs exactly 4 points, got {len(self.points)}")

    def with_dimensions(self, width: float, height: float) -> "Rectangle":
        return Rectangle(self.points, width, height)

    def target_points(self) -> Tuple[Point, Point, Point, Point]:
        """Real-world positions of A, B, C, D."""
        return (
            Point(0.0, 0.0),
            Point(0.0, self.height),
            Point(self.width, self.height),
            Point(self.width, 0.0),
        )

    def side_label(self, start: int, end: int) -> str:
        return f"{CORNER_LABELS[start]}{CORNER_LABELS[end]}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rectangle":
        points = tuple(Point.from_dict(p) for p in data["points"])
        return cls(points, float(data["width"]), float(data["height"]))


@dataclass(frozen=True)
class Calibration:
    """A rectangle with the homography and scale derived from it."""
    rectangle: Rectangle
    homography: Tuple[Tuple[float, ...], ...]
    meters_per_pixel: float

    def to_record(self) -> Dict[str, Any]:
        """Blob stored on the camera record."""
        return {
            "rectangle": self.rectangle.to_dict(),
            "homography_matrix": [list(row) for row in self.homography],
            "meters_per_pixel": self.meters_per_pixel,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Calibration":
        """Restore a stored calibration without recomputing it."""
        matrix = tuple(tuple(float(v) for v in row) for row in record["homography_matrix"])
        if len(matrix) != 3 or any(len(row) != 3 for row in matrix):
            raise ValueError("homography_matrix must be a 3x3 array")
        return cls(
            rectangle=Rectangle.from_dict(record["rectangle"]),
            homography=matrix,
            meters_per_pixel=float(record["meters_per_pixel"]),
        )


@dataclass(frozen=True)
class VerificationLine:
    """A measured line compared against its known real-world length."""
    start_point: Point
    end_point: Point
    actual_length: float
    predicted_length: float
    accuracy: float
    label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "start_point": self.start_point.to_dict(),
            "end_point": self.end_point.to_dict(),
            "actual_length": self.actual_length,
            "predicted_length": self.predicted_length,
            "accuracy": self.accuracy,
        }


@dataclass
class VerificationSummary:
    """Snapshot of a verification session."""
    lines: List[VerificationLine] = field(default_factory=list)
    aggregate_accuracy: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "aggregate_accuracy": self.aggregate_accuracy,
        }
