"""Services for the site geometry engine."""

from .interfaces import (
    PolygonCaptureInterface,
    HomogeneousSolverInterface,
    CalibratorInterface,
    VerifierInterface
)
from .polygon_capture import PolygonCapture, CaptureResult, CaptureState, CaptureStatus
from .boundary_geometry import BoundaryGeometry, edge_index_for_name
from .boundary_actions import check_action_conflicts, build_edge_record
from .homography_calibrator import (
    HomographyCalibrator,
    order_points_once,
    compute_homography,
    compute_calibration,
    transform_point,
    real_world_distance,
)
from .metric_verifier import MetricVerifier, verification_accuracy

__all__ = [
    'PolygonCaptureInterface',
    'HomogeneousSolverInterface',
    'CalibratorInterface',
    'VerifierInterface',
    'PolygonCapture',
    'CaptureResult',
    'CaptureState',
    'CaptureStatus',
    'BoundaryGeometry',
    'edge_index_for_name',
    'check_action_conflicts',
    'build_edge_record',
    'HomographyCalibrator',
    'order_points_once',
    'compute_homography',
    'compute_calibration',
    'transform_point',
    'real_world_distance',
    'MetricVerifier',
    'verification_accuracy',
]
