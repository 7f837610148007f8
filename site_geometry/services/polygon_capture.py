"""Incremental ROI polygon capture."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..exceptions import PointTooClose, SelfIntersectingPolygon
from ..logging_config import get_logger, log_with_context
from ..models.config import EngineConfig
from ..models.geometry import Point, Polygon
from .error_handler import ErrorHandler, ErrorSeverity, global_error_handler
from .geometry_kernel import distance, segments_intersect
from .interfaces import PolygonCaptureInterface

logger = get_logger("polygon_capture")


class CaptureState(Enum):
    """Lifecycle of a capture."""
    EMPTY = "empty"
    DRAWING = "drawing"
    CLOSED = "closed"


class CaptureStatus(Enum):
    """Outcome of offering a point to a capture."""
    ACCEPTED = "accepted"
    REJECTED_TOO_CLOSE = "rejected:tooClose"
    REJECTED_SELF_INTERSECTING = "rejected:selfIntersecting"
    CLOSED = "closed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class CaptureResult:
    """Result of ``PolygonCapture.add_point``."""
    status: CaptureStatus
    point: Point
    polygon: Optional[Polygon] = None

    @property
    def rejected(self) -> bool:
        return self.status in (CaptureStatus.REJECTED_TOO_CLOSE,
                               CaptureStatus.REJECTED_SELF_INTERSECTING)

    def raise_for_status(self) -> None:
        """Raise the matching error if the point was rejected."""
        if self.status == CaptureStatus.REJECTED_SELF_INTERSECTING:
            raise SelfIntersectingPolygon()
        if self.status == CaptureStatus.REJECTED_TOO_CLOSE:
            raise PointTooClose()

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "point": self.point.to_dict(),
            "polygon": self.polygon.to_dicts() if self.polygon else None,
        }


class PolygonCapture(PolygonCaptureInterface):
    """Builds a simple polygon one clicked point at a time.

    Every accepted point keeps the open chain free of self-intersections, so
    the polygon is known to be simple the moment it closes. Clicking near the
    first point (from the third point on) closes the polygon.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.config = config or EngineConfig()
        self.error_handler = error_handler or global_error_handler
        self._points: List[Point] = []
        self._state = CaptureState.EMPTY

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def points(self) -> List[Point]:
        return list(self._points)

    @property
    def polygon(self) -> Optional[Polygon]:
        """The finished polygon once closed, otherwise None."""
        if self._state != CaptureState.CLOSED:
            return None
        return Polygon.from_points(self._points)

    def is_near_start(self, point: Point) -> bool:
        """Whether clicking ``point`` now would close the polygon."""
        if self._state != CaptureState.DRAWING or len(self._points) < 3:
            return False
        return distance(self._points[0], point) < self.config.closure_radius

    def add_point(self, candidate: Point) -> CaptureResult:
        """Offer a clicked point to the capture."""
        if self._state == CaptureState.CLOSED:
            logger.debug(f"Ignoring point {candidate} on a closed polygon")
            return CaptureResult(CaptureStatus.IGNORED, candidate)

        if self.is_near_start(candidate):
            return self._close(candidate)

        if any(distance(existing, candidate) < self.config.min_point_distance
               for existing in self._points):
            return self._reject(CaptureStatus.REJECTED_TOO_CLOSE, candidate, PointTooClose())

        if len(self._points) >= 2:
            new_start = self._points[-1]
            # Every edge except the one ending at new_start, which shares it
            for i in range(len(self._points) - 2):
                if segments_intersect(self._points[i], self._points[i + 1], new_start, candidate):
                    return self._reject(CaptureStatus.REJECTED_SELF_INTERSECTING, candidate,
                                        SelfIntersectingPolygon())

        self._points.append(candidate)
        self._state = CaptureState.DRAWING
        logger.debug(f"Accepted point {len(self._points)}: ({candidate.x}, {candidate.y})")
        return CaptureResult(CaptureStatus.ACCEPTED, candidate)

    def undo_last_point(self) -> Optional[Point]:
        """Drop the most recent point of an open capture."""
        if self._state != CaptureState.DRAWING:
            return None

        removed = self._points.pop()
        if not self._points:
            self._state = CaptureState.EMPTY
        logger.debug(f"Removed point ({removed.x}, {removed.y})")
        return removed

    def reset(self) -> None:
        self._points.clear()
        self._state = CaptureState.EMPTY
        logger.debug("Polygon capture reset")

    def _close(self, candidate: Point) -> CaptureResult:
        first = self._points[0]
        last = self._points[-1]

        # Skip edge 0 (starts at first) and the last edge (ends at last)
        for i in range(1, len(self._points) - 2):
            if segments_intersect(self._points[i], self._points[i + 1], last, first):
                return self._reject(CaptureStatus.REJECTED_SELF_INTERSECTING, candidate,
                                    SelfIntersectingPolygon())

        self._state = CaptureState.CLOSED
        polygon = Polygon.from_points(self._points)
        log_with_context(logger, logging.INFO, "Polygon closed",
                         {"vertices": len(polygon), "edges": ",".join(polygon.edge_names())})
        return CaptureResult(CaptureStatus.CLOSED, first, polygon)

    def _reject(self, status: CaptureStatus, candidate: Point, error: Exception) -> CaptureResult:
        self.error_handler.handle_error("polygon_capture", error, ErrorSeverity.LOW)
        return CaptureResult(status, candidate)
