"""Data models for the site geometry engine."""

from .geometry import Point, Polygon, VERTEX_ALPHABET
from .boundary import (
    ActionKind,
    ArrowPlacement,
    BoundaryAction,
    Direction,
    EdgeRecord,
    VertexMarker,
)
from .calibration import Calibration, Rectangle, VerificationLine, VerificationSummary, IDENTITY_MATRIX
from .config import EngineConfig

__all__ = [
    'Point', 'Polygon', 'VERTEX_ALPHABET',
    'ActionKind', 'ArrowPlacement', 'BoundaryAction', 'Direction', 'EdgeRecord', 'VertexMarker',
    'Calibration', 'Rectangle', 'VerificationLine', 'VerificationSummary', 'IDENTITY_MATRIX',
    'EngineConfig',
]
