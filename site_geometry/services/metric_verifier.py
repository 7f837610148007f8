"""Accuracy verification for an existing calibration."""

import math
from typing import List, Optional

from ..exceptions import CalibrationNotReady, InsufficientVerificationInput
from ..logging_config import get_logger
from ..models.calibration import Calibration, VerificationLine, VerificationSummary
from ..models.config import EngineConfig
from ..models.geometry import Point
from .error_handler import with_error_handling
from .homography_calibrator import real_world_distance
from .interfaces import VerifierInterface

logger = get_logger("metric_verifier")


def verification_accuracy(actual: float, predicted: float) -> float:
    """Ratio of the smaller to the larger length as a percentage in [0, 100]."""
    larger = max(actual, predicted)
    if larger <= 0:
        return 0.0
    return max(0.0, min(100.0, min(actual, predicted) / larger * 100))


def parse_actual_length(value) -> float:
    """Parse an operator-entered length; must be a positive finite number."""
    if isinstance(value, bool) or value is None:
        raise InsufficientVerificationInput()
    try:
        length = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InsufficientVerificationInput()
    if not math.isfinite(length) or length <= 0:
        raise InsufficientVerificationInput()
    return length


class MetricVerifier(VerifierInterface):
    """Verification session measuring known lengths with a calibration.

    The calibration is only read, never modified, so an operator can verify
    the same calibration as often as needed.
    """

    def __init__(self, calibration: Calibration, config: Optional[EngineConfig] = None):
        if calibration is None:
            raise CalibrationNotReady()
        self.calibration = calibration
        self.config = config or EngineConfig()
        self._lines: List[VerificationLine] = []
        self._start: Optional[Point] = None
        self._end: Optional[Point] = None

    @property
    def lines(self) -> List[VerificationLine]:
        return list(self._lines)

    @property
    def is_full(self) -> bool:
        return len(self._lines) >= self.config.max_verification_lines

    @property
    def pending_start(self) -> Optional[Point]:
        return self._start

    @property
    def pending_end(self) -> Optional[Point]:
        return self._end

    @property
    def awaiting_length(self) -> bool:
        """Both endpoints are placed and the actual length is still missing."""
        return self._start is not None and self._end is not None

    def start_line(self, point: Point) -> bool:
        if self.is_full or self._start is not None:
            return False
        self._start = point
        return True

    def complete_line(self, point: Point) -> bool:
        if self._start is None or self._end is not None:
            return False
        self._end = point
        return True

    def click(self, point: Point) -> bool:
        """Route a click to start or complete the in-progress line."""
        if self._start is None:
            return self.start_line(point)
        return self.complete_line(point)

    def predicted_length(self) -> Optional[float]:
        """Real-world length of the pending segment, if both ends are placed."""
        if not self.awaiting_length:
            return None
        return real_world_distance(self._start, self._end, self.calibration.homography)

    @with_error_handling("metric_verifier")
    def record_actual_length(self, value) -> VerificationLine:
        """Close the pending line with the operator's measured length."""
        if not self.awaiting_length:
            raise InsufficientVerificationInput("Draw both ends of the verification line first")

        try:
            actual = parse_actual_length(value)
        except InsufficientVerificationInput:
            self.cancel_line()
            raise

        predicted = self.predicted_length()
        line = VerificationLine(
            start_point=self._start,
            end_point=self._end,
            actual_length=actual,
            predicted_length=predicted,
            accuracy=verification_accuracy(actual, predicted),
            label=f"L{len(self._lines) + 1}",
        )
        self._lines.append(line)
        self._start = None
        self._end = None
        logger.info(
            f"{line.label}: actual {actual:.2f}m, predicted {predicted:.2f}m, "
            f"accuracy {line.accuracy:.1f}%"
        )
        return line

    def cancel_line(self) -> None:
        self._start = None
        self._end = None

    def aggregate_accuracy(self) -> Optional[float]:
        if not self._lines:
            return None
        return sum(line.accuracy for line in self._lines) / len(self._lines)

    def summary(self) -> VerificationSummary:
        return VerificationSummary(lines=self.lines, aggregate_accuracy=self.aggregate_accuracy())

    def reset(self) -> None:
        self._lines.clear()
        self.cancel_line()
        logger.debug("Verification session reset")
