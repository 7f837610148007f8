"""Unit tests for homography calibration."""

import itertools
import unittest
import sys
import os

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from site_geometry.exceptions import (
    CalibrationNotReady,
    DegenerateCalibrationRectangle,
    InvalidDimension,
)
from site_geometry.models.calibration import Rectangle
from site_geometry.models.config import EngineConfig
from site_geometry.models.geometry import Point
from site_geometry.services.error_handler import global_error_handler
from site_geometry.services.homography_calibrator import (
    HomographyCalibrator,
    compute_calibration,
    order_points_once,
    real_world_distance,
    transform_point,
    validate_dimension,
)
from site_geometry.services.interfaces import HomogeneousSolverInterface
from site_geometry.services.linear_solver import solve_homogeneous_least_squares


SQUARE = (Point(0, 0), Point(0, 100), Point(100, 100), Point(100, 0))


class TestPointOrdering(unittest.TestCase):
    """Test cases for corner ordering."""

    def setUp(self):
        """Set up test fixtures."""
        self.corners = [Point(10, 20), Point(210, 20), Point(210, 120), Point(10, 120)]

    def test_starts_at_top_left(self):
        """Test the corner with the smallest x + y comes first."""
        ordered = order_points_once([Point(210, 120), Point(10, 120), Point(210, 20), Point(10, 20)])
        self.assertEqual(ordered[0], Point(10, 20))
        self.assertEqual(ordered, (Point(10, 20), Point(210, 20), Point(210, 120), Point(10, 120)))

    def test_input_order_does_not_matter(self):
        """Test every permutation of the clicks gives the same corners."""
        expected = order_points_once(self.corners)
        for permutation in itertools.permutations(self.corners):
            self.assertEqual(order_points_once(list(permutation)), expected)

    def test_idempotent(self):
        """Test ordering already ordered corners changes nothing."""
        once = order_points_once(self.corners)
        self.assertEqual(order_points_once(once), once)

    def test_requires_four_points(self):
        """Test ordering rejects the wrong number of points."""
        with self.assertRaises(ValueError):
            order_points_once(self.corners[:3])


class TestComputeCalibration(unittest.TestCase):
    """Test cases for homography computation."""

    def test_square_maps_center(self):
        """Test a 2m square maps its pixel center to (1, 1)."""
        calibration = compute_calibration(Rectangle(SQUARE, 2.0, 2.0))
        center = transform_point(Point(50, 50), calibration.homography)

        self.assertAlmostEqual(center.x, 1.0, places=6)
        self.assertAlmostEqual(center.y, 1.0, places=6)
        self.assertAlmostEqual(calibration.meters_per_pixel, 0.02)
        self.assertAlmostEqual(calibration.homography[2][2], 1.0)

    def test_corners_round_trip(self):
        """Test each corner maps onto its metric target."""
        corners = order_points_once([Point(120, 80), Point(520, 95), Point(560, 400), Point(90, 380)])
        rectangle = Rectangle(corners, 4.0, 3.0)
        calibration = compute_calibration(rectangle)

        for pixel, target in zip(rectangle.points, rectangle.target_points()):
            mapped = transform_point(pixel, calibration.homography)
            self.assertAlmostEqual(mapped.x, target.x, places=6)
            self.assertAlmostEqual(mapped.y, target.y, places=6)

    def test_axis_aligned_rectangle_round_trip(self):
        """Test an axis-aligned rectangle maps exactly onto its metric corners."""
        corners = order_points_once([Point(10, 20), Point(210, 20), Point(210, 120), Point(10, 120)])
        rectangle = Rectangle(corners, 4.0, 2.0)
        calibration = compute_calibration(rectangle)

        for pixel, target in zip(rectangle.points, rectangle.target_points()):
            mapped = transform_point(pixel, calibration.homography)
            self.assertAlmostEqual(mapped.x, target.x, places=6)
            self.assertAlmostEqual(mapped.y, target.y, places=6)

    def test_scale_sanity(self):
        """Test meters per pixel for a square of known size."""
        corners = (Point(0, 0), Point(0, 200), Point(200, 200), Point(200, 0))
        calibration = compute_calibration(Rectangle(corners, 5.0, 5.0))
        self.assertAlmostEqual(calibration.meters_per_pixel, 0.025)

    def test_real_world_distance(self):
        """Test distances are measured on the calibrated plane."""
        calibration = compute_calibration(Rectangle(SQUARE, 2.0, 2.0))
        self.assertAlmostEqual(real_world_distance(Point(0, 0), Point(100, 0), calibration.homography),
                               2.0, places=6)

    def test_zero_width_rejected(self):
        """Test coincident corners are degenerate."""
        corners = (Point(0, 0), Point(0, 100), Point(100, 100), Point(0, 0))
        with self.assertRaises(DegenerateCalibrationRectangle):
            compute_calibration(Rectangle(corners, 1.0, 1.0))

    def test_collinear_corners_rejected(self):
        """Test three corners on one line are degenerate."""
        corners = (Point(0, 0), Point(0, 100), Point(0, 200), Point(100, 0))
        with self.assertRaises(DegenerateCalibrationRectangle):
            compute_calibration(Rectangle(corners, 1.0, 1.0))

    def test_custom_solver(self):
        """Test the null-space solver is swappable."""

        class RecordingSolver(HomogeneousSolverInterface):
            def __init__(self):
                self.calls = 0

            def solve(self, matrix):
                self.calls += 1
                self.shape = matrix.shape
                return solve_homogeneous_least_squares(matrix)

        solver = RecordingSolver()
        compute_calibration(Rectangle(SQUARE, 2.0, 2.0), solver)
        self.assertEqual(solver.calls, 1)
        self.assertEqual(solver.shape, (8, 9))


class TestLinearSolver(unittest.TestCase):
    """Test cases for the SVD null-space solver."""

    def test_null_vector(self):
        """Test the solution spans the null space of a wide matrix."""
        a = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        h = solve_homogeneous_least_squares(a)

        self.assertAlmostEqual(abs(h[2]), 1.0)
        self.assertTrue(np.allclose(a @ h, 0.0))

    def test_rejects_non_matrix(self):
        """Test one-dimensional input is rejected."""
        with self.assertRaises(ValueError):
            solve_homogeneous_least_squares([1.0, 2.0, 3.0])


class TestValidateDimension(unittest.TestCase):
    """Test cases for dimension validation."""

    def test_valid_values(self):
        """Test numbers and numeric strings are accepted."""
        self.assertEqual(validate_dimension("2.5"), 2.5)
        self.assertEqual(validate_dimension(" 3 "), 3.0)
        self.assertEqual(validate_dimension(4), 4.0)
        self.assertEqual(validate_dimension("1.12345"), 1.12345)

    def test_invalid_values(self):
        """Test non-positive, non-numeric and out-of-range values are rejected."""
        for value in ["-1", "0", 0, "abc", "", None, True, float("nan"), "inf",
                      "1.123456", 1e9]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidDimension):
                    validate_dimension(value, "width")

    def test_message_names_the_field(self):
        """Test the error message names the offending dimension."""
        with self.assertRaises(InvalidDimension) as ctx:
            validate_dimension("-2", "height")
        self.assertIn("Height", str(ctx.exception))


class TestHomographyCalibrator(unittest.TestCase):
    """Test cases for the four-click calibration session."""

    def setUp(self):
        """Set up test fixtures."""
        self.calibrator = HomographyCalibrator(EngineConfig())
        global_error_handler.clear_error_history()

    def tearDown(self):
        """Clean up test fixtures."""
        global_error_handler.clear_error_history()

    def place_square(self):
        for point in (Point(100, 0), Point(0, 100), Point(100, 100), Point(0, 0)):
            self.assertTrue(self.calibrator.add_corner(point))

    def test_corners_ordered_on_fourth_click(self):
        """Test corners are ordered once all four are placed."""
        self.calibrator.add_corner(Point(100, 0))
        self.calibrator.add_corner(Point(0, 100))
        self.calibrator.add_corner(Point(100, 100))
        self.assertIsNone(self.calibrator.corners)

        self.calibrator.add_corner(Point(0, 0))
        self.assertEqual(self.calibrator.corners[0], Point(0, 0))
        self.assertEqual(len(self.calibrator.clicks), 4)

    def test_close_and_extra_clicks_ignored(self):
        """Test clicks near an existing corner and after the fourth are ignored."""
        self.calibrator.add_corner(Point(0, 0))
        self.assertFalse(self.calibrator.add_corner(Point(10, 10)))
        self.assertEqual(len(self.calibrator.clicks), 1)

        self.calibrator.add_corner(Point(100, 0))
        self.calibrator.add_corner(Point(100, 100))
        self.calibrator.add_corner(Point(0, 100))
        self.assertFalse(self.calibrator.add_corner(Point(300, 300)))

    def test_remove_last_corner(self):
        """Test escape removes the latest corner before dimensions are set."""
        self.calibrator.add_corner(Point(0, 0))
        self.calibrator.add_corner(Point(100, 0))

        self.assertEqual(self.calibrator.remove_last_corner(), Point(100, 0))
        self.assertEqual(self.calibrator.clicks, [Point(0, 0)])

    def test_set_dimensions(self):
        """Test a complete calibration from clicks and dimensions."""
        self.place_square()
        calibration = self.calibrator.set_dimensions("2", "2")

        self.assertTrue(self.calibrator.is_complete)
        self.assertAlmostEqual(calibration.meters_per_pixel, 0.02)
        center = transform_point(Point(50, 50), calibration.homography)
        self.assertAlmostEqual(center.x, 1.0, places=6)
        self.assertAlmostEqual(center.y, 1.0, places=6)

    def test_set_dimensions_requires_corners(self):
        """Test dimensions cannot be set before four corners exist."""
        with self.assertRaises(CalibrationNotReady):
            self.calibrator.set_dimensions(2, 2)

    def test_invalid_dimensions_leave_state_untouched(self):
        """Test a bad width is rejected and recorded."""
        self.place_square()
        with self.assertRaises(InvalidDimension):
            self.calibrator.set_dimensions("-1", "2")

        self.assertIsNone(self.calibrator.calibration)
        self.assertEqual(
            global_error_handler.get_error_stats()["component_error_counts"]["homography_calibrator"], 1
        )

    def test_move_corner_recomputes(self):
        """Test dragging a corner keeps the order and recomputes."""
        self.place_square()
        before = self.calibrator.set_dimensions(2, 2)

        after = self.calibrator.move_corner(2, Point(120, 110))
        self.assertNotEqual(before.homography, after.homography)
        self.assertEqual(self.calibrator.corners[0], Point(0, 0))
        self.assertEqual(self.calibrator.corners[2], Point(120, 110))

    def test_degenerate_move_keeps_previous_calibration(self):
        """Test a degenerate drag is rejected without losing the calibration."""
        self.place_square()
        before = self.calibrator.set_dimensions(2, 2)

        with self.assertRaises(DegenerateCalibrationRectangle):
            self.calibrator.move_corner(3, Point(0, 0))

        self.assertEqual(self.calibrator.calibration, before)
        self.assertEqual(self.calibrator.corners[3], Point(0, 100))

    def test_load_record_and_has_changes(self):
        """Test a stored record is the baseline for change detection."""
        self.place_square()
        record = self.calibrator.set_dimensions(2, 2).to_record()

        restored = HomographyCalibrator(EngineConfig())
        self.assertFalse(restored.has_changes())

        calibration = restored.load_record(record)
        self.assertEqual(calibration.homography, self.calibrator.calibration.homography)
        self.assertFalse(restored.has_changes())

        restored.set_dimensions(3, 2)
        self.assertTrue(restored.has_changes())

    def test_to_record_requires_calibration(self):
        """Test an incomplete session has nothing to persist."""
        with self.assertRaises(CalibrationNotReady):
            self.calibrator.to_record()

    def test_reset(self):
        """Test reset clears clicks and calibration."""
        self.place_square()
        self.calibrator.set_dimensions(2, 2)
        self.calibrator.reset()

        self.assertEqual(self.calibrator.clicks, [])
        self.assertIsNone(self.calibrator.corners)
        self.assertIsNone(self.calibrator.calibration)


if __name__ == '__main__':
    unittest.main()
