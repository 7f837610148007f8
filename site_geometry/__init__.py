"""
Site Geometry Engine

Image-plane geometry and calibration for a camera monitoring console:
ROI polygon capture, directional boundary arrows, and planar homography
calibration with accuracy verification.
"""

__version__ = "1.0.0"
__author__ = "Site Geometry Engine"

from .config_manager import ConfigManager
from .console_session import ConsoleSession, Tool
from .exceptions import (
    GeometryError,
    SelfIntersectingPolygon,
    PointTooClose,
    DegenerateCalibrationRectangle,
    InvalidDimension,
    InsufficientVerificationInput,
    CalibrationNotReady,
    InvalidBoundaryAction,
    ConflictingBoundaryAction,
)
from .models import (
    Point,
    Polygon,
    BoundaryAction,
    Direction,
    ActionKind,
    Rectangle,
    Calibration,
    VerificationLine,
    EngineConfig,
)
from .services import (
    PolygonCapture,
    BoundaryGeometry,
    HomographyCalibrator,
    MetricVerifier,
)
from . import utils

__all__ = [
    # Core management
    'ConfigManager',
    'ConsoleSession',
    'Tool',

    # Errors
    'GeometryError',
    'SelfIntersectingPolygon',
    'PointTooClose',
    'DegenerateCalibrationRectangle',
    'InvalidDimension',
    'InsufficientVerificationInput',
    'CalibrationNotReady',
    'InvalidBoundaryAction',
    'ConflictingBoundaryAction',

    # Data models
    'Point',
    'Polygon',
    'BoundaryAction',
    'Direction',
    'ActionKind',
    'Rectangle',
    'Calibration',
    'VerificationLine',
    'EngineConfig',

    # Services
    'PolygonCapture',
    'BoundaryGeometry',
    'HomographyCalibrator',
    'MetricVerifier',

    # Utilities
    'utils'
]
