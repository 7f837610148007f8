"""Unit tests for calibration accuracy verification."""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from site_geometry.exceptions import CalibrationNotReady, InsufficientVerificationInput
from site_geometry.models.calibration import Rectangle
from site_geometry.models.config import EngineConfig
from site_geometry.models.geometry import Point
from site_geometry.services.error_handler import global_error_handler
from site_geometry.services.homography_calibrator import compute_calibration
from site_geometry.services.metric_verifier import (
    MetricVerifier,
    parse_actual_length,
    verification_accuracy,
)


class TestVerificationAccuracy(unittest.TestCase):
    """Test cases for the accuracy formula."""

    def test_symmetric(self):
        """Test swapping actual and predicted gives the same accuracy."""
        self.assertAlmostEqual(verification_accuracy(10, 9), 90.0)
        self.assertAlmostEqual(verification_accuracy(9, 10), 90.0)

    def test_bounds(self):
        """Test accuracy stays within 0 to 100."""
        self.assertEqual(verification_accuracy(5, 5), 100.0)
        self.assertEqual(verification_accuracy(5, 0), 0.0)

    def test_parse_actual_length(self):
        """Test operator length parsing."""
        self.assertEqual(parse_actual_length("2.5"), 2.5)
        self.assertEqual(parse_actual_length(3), 3.0)
        for value in ["abc", "", "0", -1, None, False, "nan"]:
            with self.subTest(value=value):
                with self.assertRaises(InsufficientVerificationInput):
                    parse_actual_length(value)


class TestMetricVerifier(unittest.TestCase):
    """Test cases for MetricVerifier."""

    def setUp(self):
        """Set up test fixtures."""
        corners = (Point(0, 0), Point(0, 100), Point(100, 100), Point(100, 0))
        self.calibration = compute_calibration(Rectangle(corners, 2.0, 2.0))
        self.verifier = MetricVerifier(self.calibration, EngineConfig())
        global_error_handler.clear_error_history()

    def tearDown(self):
        """Clean up test fixtures."""
        global_error_handler.clear_error_history()

    def measure(self, start, end, actual):
        self.assertTrue(self.verifier.click(Point(*start)))
        self.assertTrue(self.verifier.click(Point(*end)))
        return self.verifier.record_actual_length(actual)

    def test_requires_calibration(self):
        """Test verification cannot start without a calibration."""
        with self.assertRaises(CalibrationNotReady):
            MetricVerifier(None)

    def test_exact_line(self):
        """Test a line of exactly the predicted length scores 100%."""
        line = self.measure((0, 0), (100, 0), "2")

        self.assertAlmostEqual(line.predicted_length, 2.0, places=6)
        self.assertAlmostEqual(line.accuracy, 100.0, places=4)
        self.assertAlmostEqual(self.verifier.aggregate_accuracy(), 100.0, places=4)

    def test_aggregate_is_mean(self):
        """Test the aggregate averages the per-line accuracies."""
        self.measure((0, 0), (100, 0), 2.0)
        line = self.measure((0, 0), (50, 0), 1.25)

        self.assertAlmostEqual(line.accuracy, 80.0, places=4)
        self.assertEqual(line.label, "L2")
        self.assertAlmostEqual(self.verifier.aggregate_accuracy(), 90.0, places=4)

    def test_aggregate_undefined_without_lines(self):
        """Test the aggregate is None before any line is measured."""
        self.assertIsNone(self.verifier.aggregate_accuracy())
        self.assertIsNone(self.verifier.summary().aggregate_accuracy)

    def test_pending_line_state(self):
        """Test the pending endpoints and predicted length."""
        self.verifier.click(Point(0, 0))
        self.assertFalse(self.verifier.awaiting_length)
        self.assertIsNone(self.verifier.predicted_length())

        self.verifier.click(Point(0, 100))
        self.assertTrue(self.verifier.awaiting_length)
        self.assertAlmostEqual(self.verifier.predicted_length(), 2.0, places=6)
        self.assertFalse(self.verifier.click(Point(50, 50)))

    def test_at_most_three_lines(self):
        """Test a fourth line cannot be started."""
        self.measure((0, 0), (100, 0), 2)
        self.measure((0, 0), (0, 100), 2)
        self.measure((0, 0), (100, 100), 2.8)

        self.assertTrue(self.verifier.is_full)
        self.assertFalse(self.verifier.start_line(Point(10, 10)))
        self.assertEqual(len(self.verifier.lines), 3)

    def test_invalid_length_discards_line(self):
        """Test a bad length cancels the pending line and keeps earlier ones."""
        self.measure((0, 0), (100, 0), 2)
        self.verifier.click(Point(0, 0))
        self.verifier.click(Point(50, 0))

        with self.assertRaises(InsufficientVerificationInput):
            self.verifier.record_actual_length("abc")

        self.assertEqual(len(self.verifier.lines), 1)
        self.assertIsNone(self.verifier.pending_start)
        self.assertIsNone(self.verifier.pending_end)
        self.assertEqual(
            global_error_handler.get_error_stats()["component_error_counts"]["metric_verifier"], 1
        )

    def test_length_without_line_rejected(self):
        """Test a length cannot be entered before both ends exist."""
        with self.assertRaises(InsufficientVerificationInput):
            self.verifier.record_actual_length(2)

    def test_calibration_not_modified(self):
        """Test repeated verification leaves the calibration unchanged."""
        self.measure((0, 0), (100, 0), 2)
        self.verifier.reset()
        self.measure((0, 0), (100, 0), 2)

        self.assertIs(self.verifier.calibration, self.calibration)
        self.assertEqual(len(self.verifier.lines), 1)

    def test_summary_to_dict(self):
        """Test summary serialization."""
        self.measure((0, 0), (100, 0), 2)
        data = self.verifier.summary().to_dict()

        self.assertEqual(len(data["lines"]), 1)
        self.assertAlmostEqual(data["aggregate_accuracy"], 100.0, places=4)


if __name__ == '__main__':
    unittest.main()
