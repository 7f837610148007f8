"""Routes operator input events to the active geometry tool."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import CalibrationNotReady, GeometryError
from .logging_config import get_logger
from .models.config import EngineConfig
from .models.geometry import Point
from .services.error_handler import ErrorHandler, global_error_handler
from .services.homography_calibrator import HomographyCalibrator
from .services.metric_verifier import MetricVerifier
from .services.polygon_capture import CaptureStatus, PolygonCapture

logger = get_logger("console_session")


class Tool(Enum):
    """Interaction mode of the console canvas."""
    CAPTURE = "capture"
    CALIBRATE = "calibrate"
    VERIFY = "verify"


@dataclass
class EventOutcome:
    """What happened in response to one input event."""
    tool: Tool
    event: str
    accepted: bool
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class ConsoleSession:
    """Owns the in-progress capture, calibration and verification state.

    All events arrive from a single interaction thread; each one is applied in
    full before the next.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.config = config or EngineConfig()
        self.error_handler = error_handler or global_error_handler
        self.capture = PolygonCapture(self.config, self.error_handler)
        self.calibrator = HomographyCalibrator(self.config)
        self.verifier: Optional[MetricVerifier] = None
        self.tool = Tool.CAPTURE
        self.hover: Optional[Point] = None

    def set_tool(self, tool: Tool) -> None:
        """Switch tools; verification needs a finished calibration."""
        if tool == Tool.VERIFY:
            if self.calibrator.calibration is None:
                raise CalibrationNotReady()
            if self.verifier is None or self.verifier.calibration is not self.calibrator.calibration:
                self.verifier = MetricVerifier(self.calibrator.calibration, self.config)
        self.tool = tool
        logger.debug(f"Active tool: {tool.value}")

    def pointer_click(self, point: Point) -> EventOutcome:
        if self.tool == Tool.CAPTURE:
            result = self.capture.add_point(point)
            message = None
            if result.rejected:
                try:
                    result.raise_for_status()
                except GeometryError as e:
                    message = str(e)
            return EventOutcome(
                tool=self.tool,
                event="click",
                accepted=result.status in (CaptureStatus.ACCEPTED, CaptureStatus.CLOSED),
                message=message,
                details=result.to_dict(),
            )

        if self.tool == Tool.CALIBRATE:
            accepted = self.calibrator.add_corner(point)
            corners = self.calibrator.corners
            return EventOutcome(
                tool=self.tool,
                event="click",
                accepted=accepted,
                details={
                    "corner_count": len(self.calibrator.clicks),
                    "corners": [p.to_dict() for p in corners] if corners else None,
                },
            )

        accepted = self.verifier.click(point)
        return EventOutcome(
            tool=self.tool,
            event="click",
            accepted=accepted,
            details={
                "awaiting_length": self.verifier.awaiting_length,
                "predicted_length": self.verifier.predicted_length(),
            },
        )

    def pointer_move(self, point: Point) -> EventOutcome:
        """Track the hover position; reports whether a click would close the ROI."""
        self.hover = point
        details: Dict[str, Any] = {"hover": point.to_dict()}
        if self.tool == Tool.CAPTURE:
            details["near_start"] = self.capture.is_near_start(point)
        return EventOutcome(tool=self.tool, event="move", accepted=True, details=details)

    def key_escape(self) -> EventOutcome:
        """Discard the latest in-progress input of the active tool."""
        if self.tool == Tool.CAPTURE:
            removed = self.capture.undo_last_point()
        elif self.tool == Tool.CALIBRATE:
            removed = self.calibrator.remove_last_corner()
        else:
            removed = self.verifier.pending_start
            self.verifier.cancel_line()

        return EventOutcome(
            tool=self.tool,
            event="escape",
            accepted=removed is not None,
            details={"removed": removed.to_dict() if removed else None},
        )

    def set_dimensions(self, width, height) -> EventOutcome:
        """Enter the real-world size of the calibration rectangle."""
        try:
            calibration = self.calibrator.set_dimensions(width, height)
        except GeometryError as e:
            return EventOutcome(self.tool, "dimensions", False, message=str(e))
        return EventOutcome(self.tool, "dimensions", True, details=calibration.to_record())

    def submit_length(self, value) -> EventOutcome:
        """Enter the actual length of the pending verification line."""
        if self.verifier is None:
            return EventOutcome(self.tool, "length", False, message=CalibrationNotReady.operator_message)
        try:
            line = self.verifier.record_actual_length(value)
        except GeometryError as e:
            return EventOutcome(self.tool, "length", False, message=str(e))
        return EventOutcome(self.tool, "length", True, details={
            "line": line.to_dict(),
            "aggregate_accuracy": self.verifier.aggregate_accuracy(),
        })

    def reset(self) -> None:
        """Discard the active tool's state."""
        if self.tool == Tool.CAPTURE:
            self.capture.reset()
        elif self.tool == Tool.CALIBRATE:
            self.calibrator.reset()
            self.verifier = None
        else:
            self.verifier.reset()
