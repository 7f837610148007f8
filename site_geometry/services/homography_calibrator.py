"""Planar homography calibration from four clicked corners.

The operator clicks the corners of a physical rectangle lying on the ground
plane and enters its real width and height. The corners are ordered once,
mapped onto a metric rectangle, and the image-to-world homography is solved
with the direct linear transform (DLT).
"""

import functools
import math
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config.defaults import GEOMETRY_CONSTANTS
from ..exceptions import (
    CalibrationNotReady,
    DegenerateCalibrationRectangle,
    InvalidDimension,
)
from ..logging_config import get_logger
from ..models.calibration import Calibration, Rectangle
from ..models.config import EngineConfig
from ..models.geometry import Point
from .error_handler import with_error_handling
from .geometry_kernel import Orientation, distance, exact_centroid, orientation
from .interfaces import CalibratorInterface, HomogeneousSolverInterface
from .linear_solver import SVDSolver

logger = get_logger("homography_calibrator")

Matrix3 = Tuple[Tuple[float, ...], ...]


def order_points_once(points: Sequence[Point]) -> Tuple[Point, Point, Point, Point]:
    """Order four corners rotationally, starting from the top-left-most one.

    Points are sorted by polar angle around their centroid (angles closer
    than the tie tolerance keep their input order), then rotated so the point
    with the smallest ``x + y`` comes first.
    """
    if len(points) != GEOMETRY_CONSTANTS["CORNER_COUNT"]:
        raise ValueError("Expected exactly 4 points to identify corners")

    center = exact_centroid(points)
    tolerance = GEOMETRY_CONSTANTS["ANGLE_TIE_TOLERANCE"]
    with_angles = [
        (math.atan2(p.y - center.y, p.x - center.x), index, p)
        for index, p in enumerate(points)
    ]

    def compare(a, b):
        angle_diff = a[0] - b[0]
        if abs(angle_diff) < tolerance:
            return a[1] - b[1]
        return -1 if angle_diff < 0 else 1

    with_angles.sort(key=functools.cmp_to_key(compare))
    ordered = [p for _, _, p in with_angles]

    top_left = 0
    for i in range(1, len(ordered)):
        if ordered[i].x + ordered[i].y < ordered[top_left].x + ordered[top_left].y:
            top_left = i

    return tuple(ordered[(top_left + i) % 4] for i in range(4))


def build_dlt_matrix(sources: Sequence[Point], targets: Sequence[Point]) -> np.ndarray:
    """Stack the two DLT rows of every source -> target correspondence."""
    rows = []
    for src, dst in zip(sources, targets):
        x, y = src.x, src.y
        u, v = dst.x, dst.y
        rows.append([-x, -y, -1.0, 0.0, 0.0, 0.0, x * u, y * u, u])
        rows.append([0.0, 0.0, 0.0, -x, -y, -1.0, x * v, y * v, v])
    return np.array(rows, dtype=float)


def compute_homography(rectangle: Rectangle,
                       solver: Optional[HomogeneousSolverInterface] = None) -> Matrix3:
    """Homography mapping the rectangle's corners onto its metric target."""
    solver = solver or SVDSolver()
    a = build_dlt_matrix(rectangle.points, rectangle.target_points())
    h = np.asarray(solver.solve(a), dtype=float).reshape(3, 3)

    scale = h[2, 2]
    if scale != 0:
        h = h / scale

    return tuple(tuple(float(v) for v in row) for row in h)


def transform_point(point: Point, homography) -> Point:
    """Map an image point through the homography, with perspective division."""
    x, y = point.x, point.y
    w = homography[2][0] * x + homography[2][1] * y + homography[2][2]
    tx = (homography[0][0] * x + homography[0][1] * y + homography[0][2]) / w
    ty = (homography[1][0] * x + homography[1][1] * y + homography[1][2]) / w
    return Point(tx, ty)


def real_world_distance(p1: Point, p2: Point, homography) -> float:
    """Metric distance between two image points on the calibrated plane."""
    return distance(transform_point(p1, homography), transform_point(p2, homography))


def check_rectangle_geometry(points: Sequence[Point]) -> Tuple[float, float]:
    """Return (pixel_width, pixel_height) or raise if the corners are degenerate."""
    pixel_width = distance(points[0], points[3])
    pixel_height = distance(points[0], points[1])
    if pixel_width == 0 or pixel_height == 0:
        raise DegenerateCalibrationRectangle()

    for i in range(4):
        a, b, c = points[i], points[(i + 1) % 4], points[(i + 2) % 4]
        if orientation(a, b, c) == Orientation.COLLINEAR:
            raise DegenerateCalibrationRectangle("Invalid region: calibration corners are collinear")

    return pixel_width, pixel_height


def compute_calibration(rectangle: Rectangle,
                        solver: Optional[HomogeneousSolverInterface] = None) -> Calibration:
    """Homography plus meters-per-pixel scale for a dimensioned rectangle."""
    pixel_width, pixel_height = check_rectangle_geometry(rectangle.points)

    homography = compute_homography(rectangle, solver)
    if not all(math.isfinite(v) for row in homography for v in row):
        raise DegenerateCalibrationRectangle("Invalid region: homography is not finite")

    width_mpp = rectangle.width / pixel_width
    height_mpp = rectangle.height / pixel_height
    meters_per_pixel = (width_mpp + height_mpp) / 2

    return Calibration(rectangle=rectangle, homography=homography, meters_per_pixel=meters_per_pixel)


def validate_dimension(value, name: str = "dimension",
                       max_value: float = 99999999.99999, max_decimals: int = 5) -> float:
    """Parse an operator-entered length in meters.

    Accepts numbers or numeric strings; rejects anything non-numeric,
    non-finite, non-positive, above ``max_value`` or with more than
    ``max_decimals`` decimal places.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidDimension(f"{name.capitalize()} must be a number")

    text = value.strip() if isinstance(value, str) else str(value)
    try:
        decimal_value = Decimal(text)
    except InvalidOperation:
        raise InvalidDimension(f"{name.capitalize()} must be a number")

    if not decimal_value.is_finite():
        raise InvalidDimension(f"{name.capitalize()} must be a finite number")
    if decimal_value <= 0:
        raise InvalidDimension(f"{name.capitalize()} must be greater than zero")
    if decimal_value > Decimal(str(max_value)):
        raise InvalidDimension(f"{name.capitalize()} must be less than {max_value:,}")
    if -decimal_value.as_tuple().exponent > max_decimals:
        raise InvalidDimension(f"{name.capitalize()} allows at most {max_decimals} decimal places")

    return float(decimal_value)


class HomographyCalibrator(CalibratorInterface):
    """Four-click calibration session.

    Corners are ordered once, when the fourth one is placed, and are never
    re-sorted afterwards. A failed recomputation leaves the previous
    calibration in place.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 solver: Optional[HomogeneousSolverInterface] = None):
        self.config = config or EngineConfig()
        self.solver = solver or SVDSolver()

        self._clicks: List[Point] = []
        self._corners: Optional[Tuple[Point, Point, Point, Point]] = None
        self._calibration: Optional[Calibration] = None
        self._baseline: Optional[Calibration] = None

    @property
    def clicks(self) -> List[Point]:
        return list(self._clicks)

    @property
    def corners(self) -> Optional[Tuple[Point, Point, Point, Point]]:
        """Ordered corners A, B, C, D once four have been placed."""
        return self._corners

    @property
    def calibration(self) -> Optional[Calibration]:
        return self._calibration

    @property
    def rectangle(self) -> Optional[Rectangle]:
        return self._calibration.rectangle if self._calibration else None

    @property
    def is_complete(self) -> bool:
        return self._calibration is not None

    def add_corner(self, point: Point) -> bool:
        """Register a clicked corner; clicks after the fourth are ignored."""
        if self._corners is not None:
            return False

        min_distance = self.config.calibration_min_corner_distance
        if any(distance(existing, point) < min_distance for existing in self._clicks):
            logger.debug(f"Corner ({point.x}, {point.y}) too close to an existing corner")
            return False

        self._clicks.append(point)
        if len(self._clicks) == 4:
            self._corners = order_points_once(self._clicks)
            logger.info(f"Calibration corners ordered: {[(p.x, p.y) for p in self._corners]}")
        return True

    def remove_last_corner(self) -> Optional[Point]:
        """Undo the latest click while no calibration has been computed."""
        if not self._clicks or self._calibration is not None:
            return None
        removed = self._clicks.pop()
        self._corners = None
        return removed

    @with_error_handling("homography_calibrator")
    def set_dimensions(self, width, height) -> Calibration:
        """Validate the real-world size and recompute the calibration."""
        if self._corners is None:
            raise CalibrationNotReady("Place all four calibration corners first")

        width_value = validate_dimension(width, "width", self.config.max_dimension,
                                         self.config.max_dimension_decimals)
        height_value = validate_dimension(height, "height", self.config.max_dimension,
                                          self.config.max_dimension_decimals)

        return self._recompute(Rectangle(self._corners, width_value, height_value))

    @with_error_handling("homography_calibrator")
    def move_corner(self, index: int, point: Point) -> Optional[Calibration]:
        """Replace one ordered corner in place; the order itself is kept."""
        if self._corners is None:
            raise CalibrationNotReady("Place all four calibration corners first")
        if not 0 <= index < 4:
            raise IndexError(f"Corner index out of range: {index}")

        corners = list(self._corners)
        corners[index] = point

        if self._calibration is None:
            check_rectangle_geometry(corners)
            self._corners = tuple(corners)
            return None

        rectangle = self._calibration.rectangle
        calibration = self._recompute(Rectangle(tuple(corners), rectangle.width, rectangle.height))
        return calibration

    def load_record(self, record) -> Calibration:
        """Restore a stored calibration as both the current state and the baseline."""
        calibration = Calibration.from_record(record)
        self._clicks = list(calibration.rectangle.points)
        self._corners = calibration.rectangle.points
        self._calibration = calibration
        self._baseline = calibration
        logger.info("Loaded stored calibration")
        return calibration

    def has_changes(self) -> bool:
        """Whether the current rectangle differs from the loaded one."""
        current = self.rectangle
        baseline = self._baseline.rectangle if self._baseline else None
        if current is None and baseline is None:
            return False
        if current is None or baseline is None:
            return True
        return current != baseline

    def to_record(self):
        """Calibration blob for the camera-update API."""
        if self._calibration is None:
            raise CalibrationNotReady()
        return self._calibration.to_record()

    def reset(self) -> None:
        self._clicks = []
        self._corners = None
        self._calibration = None
        logger.debug("Calibration reset")

    def _recompute(self, rectangle: Rectangle) -> Calibration:
        calibration = compute_calibration(rectangle, self.solver)
        self._corners = rectangle.points
        self._calibration = calibration
        logger.info(
            f"Calibration computed: {rectangle.width}m x {rectangle.height}m, "
            f"{calibration.meters_per_pixel:.6f} m/px"
        )
        return calibration
