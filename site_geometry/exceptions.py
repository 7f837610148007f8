"""Custom exceptions for the site geometry engine.

Every error here is recoverable: it is raised before any capture, calibration
or verification state is changed, and is meant to be shown to the operator.
"""


class GeometryError(Exception):
    """Base error for recoverable geometry engine failures."""

    operator_message = "Invalid input"

    def __init__(self, message: str = ""):
        super().__init__(message or self.operator_message)


class SelfIntersectingPolygon(GeometryError):
    """A new polygon edge would cross a non-adjacent edge."""

    operator_message = "ROI lines cannot cross each other!"


class PointTooClose(GeometryError):
    """A clicked point lies on top of an existing point."""

    operator_message = "Point is too close to an existing point"


class DegenerateCalibrationRectangle(GeometryError):
    """Calibration corners collapse to zero width or height."""

    operator_message = "Invalid region: zero width or height"


class InvalidDimension(GeometryError):
    """A real-world width or height is not a positive number."""

    operator_message = "Width and height must be positive numbers"


class InsufficientVerificationInput(GeometryError):
    """A verification line was completed without a valid actual length."""

    operator_message = "Enter a positive length for the verification line"


class CalibrationNotReady(GeometryError):
    """An operation needs a computed calibration that does not exist yet."""

    operator_message = "Complete the calibration first"


class InvalidBoundaryAction(GeometryError):
    """A boundary action violates the notify/counter exclusivity rules."""

    operator_message = "Invalid boundary action"


class ConflictingBoundaryAction(GeometryError):
    """A boundary action clashes with actions already on the same edge direction."""

    operator_message = "Boundary action conflicts with an existing action"
