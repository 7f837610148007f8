"""Default configuration values and constants."""

from typing import Dict, Any

# Default engine configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    # Polygon capture
    "min_point_distance": 3.0,
    "closure_radius": 40.0,

    # Boundary arrows
    "outward_probe_distance": 50.0,
    "fallback_boundary_distance": 200.0,
    "arrow_length_ratio": 0.04,
    "min_arrow_length": 12.0,
    "max_arrow_length": 120.0,
    "full_view_ratio": 0.95,

    # Calibration
    "calibration_min_corner_distance": 35.0,
    "max_dimension": 99999999.99999,
    "max_dimension_decimals": 5,

    # Verification
    "max_verification_lines": 3,
}

# Numeric constants shared by the geometry services
GEOMETRY_CONSTANTS = {
    "PARALLEL_EPSILON": 1e-4,  # Ray/edge denominators below this are treated as parallel
    "ANGLE_TIE_TOLERANCE": 0.01,  # Radians; corners closer in angle keep input order
    "ARROW_MAX_FRACTION_OF_GAP": 0.5,
    "INWARD_OFFSET_MAX": 1.2,
    "INWARD_OFFSET_GAP_RATIO": 0.15,
    "OUTWARD_OFFSET_MAX": 0.4,
    "OUTWARD_OFFSET_GAP_RATIO": 0.1,
    "FULL_VIEW_OUTWARD_OFFSET": -0.9,
    "CORNER_COUNT": 4,
}

# Vertex label marker sizes (pixels)
MARKER_SETTINGS = {
    "radius_ratio": 0.04,
    "min_radius": 10.0,
    "max_radius": 23.0,
    "full_view_min_radius": 12.0,
    "full_view_max_radius": 20.0,
    "full_view_inward_shift": 0.9,  # Fraction of the radius
}

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "config.json",
    "logs_dir": "logs",
}
