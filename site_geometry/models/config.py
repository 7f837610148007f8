"""Configuration data models."""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass
class EngineConfig:
    """Geometry engine settings."""
    # Polygon capture (pixels)
    min_point_distance: float = 3.0  # Anti-duplicate guard between clicks
    closure_radius: float = 40.0  # Click this close to the first point to close

    # Boundary arrows
    outward_probe_distance: float = 50.0
    fallback_boundary_distance: float = 200.0  # Used when the ray hits no edge
    arrow_length_ratio: float = 0.04  # Fraction of the ROI bounding-box diagonal
    min_arrow_length: float = 12.0
    max_arrow_length: float = 120.0
    full_view_ratio: float = 0.95  # ROI bbox / image size above which an ROI is full-view

    # Calibration
    calibration_min_corner_distance: float = 35.0
    max_dimension: float = 99999999.99999
    max_dimension_decimals: int = 5

    # Verification
    max_verification_lines: int = 3

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
