"""Unit tests for polygon capture."""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from site_geometry.exceptions import PointTooClose, SelfIntersectingPolygon
from site_geometry.models.config import EngineConfig
from site_geometry.models.geometry import Point
from site_geometry.services.error_handler import ErrorHandler
from site_geometry.services.polygon_capture import CaptureState, CaptureStatus, PolygonCapture


class TestPolygonCapture(unittest.TestCase):
    """Test cases for PolygonCapture."""

    def setUp(self):
        """Set up test fixtures."""
        self.error_handler = ErrorHandler()
        self.capture = PolygonCapture(EngineConfig(), self.error_handler)

    def add_all(self, points):
        return [self.capture.add_point(Point(x, y)) for x, y in points]

    def test_initial_state(self):
        """Test a new capture is empty."""
        self.assertEqual(self.capture.state, CaptureState.EMPTY)
        self.assertEqual(self.capture.points, [])
        self.assertIsNone(self.capture.polygon)

    def test_interior_fifth_point_is_ordinary_vertex(self):
        """Test an interior, non-closing point is accepted."""
        results = self.add_all([(0, 0), (100, 0), (100, 100), (0, 100), (50, 50)])

        self.assertTrue(all(r.status == CaptureStatus.ACCEPTED for r in results))
        self.assertEqual(self.capture.state, CaptureState.DRAWING)
        self.assertEqual(len(self.capture.points), 5)

    def test_bowtie_rejected(self):
        """Test a self-crossing fourth point is rejected without changing state."""
        results = self.add_all([(0, 0), (100, 100), (100, 0), (0, 100)])

        self.assertEqual([r.status for r in results[:3]], [CaptureStatus.ACCEPTED] * 3)
        self.assertEqual(results[3].status, CaptureStatus.REJECTED_SELF_INTERSECTING)
        self.assertTrue(results[3].rejected)
        with self.assertRaises(SelfIntersectingPolygon):
            results[3].raise_for_status()

        self.assertEqual(len(self.capture.points), 3)
        self.assertEqual(self.capture.state, CaptureState.DRAWING)
        self.assertEqual(self.error_handler.get_error_stats()["component_error_counts"]["polygon_capture"], 1)

    def test_closure_collapses_onto_first_point(self):
        """Test clicking near the first point closes with the original vertices."""
        self.add_all([(0, 0), (200, 0), (100, 150)])
        result = self.capture.add_point(Point(10, 10))

        self.assertEqual(result.status, CaptureStatus.CLOSED)
        self.assertEqual(result.point, Point(0, 0))
        self.assertEqual(self.capture.state, CaptureState.CLOSED)

        polygon = self.capture.polygon
        self.assertEqual(len(polygon), 3)
        self.assertEqual(polygon.vertices, (Point(0, 0), Point(200, 0), Point(100, 150)))
        self.assertEqual(result.polygon, polygon)

    def test_clicking_exactly_on_first_point_closes(self):
        """Test the too-close guard does not block closing on the first point."""
        self.add_all([(0, 0), (200, 0), (100, 150)])
        result = self.capture.add_point(Point(0, 0))
        self.assertEqual(result.status, CaptureStatus.CLOSED)

    def test_closure_not_offered_below_three_points(self):
        """Test a click near the start with two points is an ordinary vertex."""
        self.add_all([(0, 0), (100, 0)])
        result = self.capture.add_point(Point(5, 5))

        self.assertEqual(result.status, CaptureStatus.ACCEPTED)
        self.assertEqual(self.capture.state, CaptureState.DRAWING)
        self.assertEqual(len(self.capture.points), 3)

    def test_closing_edge_intersection_rejected(self):
        """Test a closing edge crossing an earlier edge is rejected."""
        results = self.add_all([
            (0, 0), (100, 0), (100, 100), (-100, 100), (-100, -100), (200, -100), (200, 50)
        ])
        self.assertTrue(all(r.status == CaptureStatus.ACCEPTED for r in results))

        result = self.capture.add_point(Point(5, 5))
        self.assertEqual(result.status, CaptureStatus.REJECTED_SELF_INTERSECTING)
        self.assertEqual(self.capture.state, CaptureState.DRAWING)
        self.assertEqual(len(self.capture.points), 7)

    def test_too_close_rejected(self):
        """Test duplicate clicks are rejected."""
        self.add_all([(0, 0), (100, 0)])
        result = self.capture.add_point(Point(101, 1))

        self.assertEqual(result.status, CaptureStatus.REJECTED_TOO_CLOSE)
        with self.assertRaises(PointTooClose):
            result.raise_for_status()
        self.assertEqual(len(self.capture.points), 2)

    def test_accepted_result_does_not_raise(self):
        """Test raise_for_status is a no-op for accepted points."""
        result = self.capture.add_point(Point(0, 0))
        result.raise_for_status()
        self.assertFalse(result.rejected)

    def test_points_after_close_ignored(self):
        """Test a closed capture ignores further clicks."""
        self.add_all([(0, 0), (200, 0), (100, 150), (0, 0)])
        result = self.capture.add_point(Point(300, 300))

        self.assertEqual(result.status, CaptureStatus.IGNORED)
        self.assertEqual(len(self.capture.polygon), 3)

    def test_is_near_start(self):
        """Test hover feedback for closing."""
        self.add_all([(0, 0), (200, 0)])
        self.assertFalse(self.capture.is_near_start(Point(5, 5)))

        self.capture.add_point(Point(100, 150))
        self.assertTrue(self.capture.is_near_start(Point(5, 5)))
        self.assertFalse(self.capture.is_near_start(Point(100, 100)))

    def test_undo_last_point(self):
        """Test escape removes points one at a time."""
        self.add_all([(0, 0), (100, 0)])

        self.assertEqual(self.capture.undo_last_point(), Point(100, 0))
        self.assertEqual(self.capture.state, CaptureState.DRAWING)
        self.assertEqual(self.capture.undo_last_point(), Point(0, 0))
        self.assertEqual(self.capture.state, CaptureState.EMPTY)
        self.assertIsNone(self.capture.undo_last_point())

    def test_undo_does_not_reopen_closed_polygon(self):
        """Test a finished polygon is not mutated by undo."""
        self.add_all([(0, 0), (200, 0), (100, 150), (0, 0)])
        self.assertIsNone(self.capture.undo_last_point())
        self.assertEqual(self.capture.state, CaptureState.CLOSED)

    def test_reset(self):
        """Test reset discards all points."""
        self.add_all([(0, 0), (200, 0), (100, 150), (0, 0)])
        self.capture.reset()

        self.assertEqual(self.capture.state, CaptureState.EMPTY)
        self.assertEqual(self.capture.points, [])
        self.assertIsNone(self.capture.polygon)

    def test_result_to_dict(self):
        """Test result serialization."""
        self.add_all([(0, 0), (200, 0), (100, 150)])
        data = self.capture.add_point(Point(0, 0)).to_dict()

        self.assertEqual(data["status"], "closed")
        self.assertEqual(len(data["polygon"]), 3)


if __name__ == '__main__':
    unittest.main()
