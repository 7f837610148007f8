"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from ..models.calibration import Calibration, VerificationLine
from ..models.geometry import Point, Polygon


class PolygonCaptureInterface(ABC):
    """Interface for incremental ROI polygon capture."""

    @abstractmethod
    def add_point(self, candidate: Point):
        """Offer a clicked point; returns a capture result."""
        pass

    @abstractmethod
    def undo_last_point(self) -> Optional[Point]:
        """Remove the most recent point of an open capture."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Discard all captured points."""
        pass

    @property
    @abstractmethod
    def polygon(self) -> Optional[Polygon]:
        """The finished polygon, if the capture is closed."""
        pass


class HomogeneousSolverInterface(ABC):
    """Interface for solving A·h = 0 in the least-squares sense."""

    @abstractmethod
    def solve(self, matrix: np.ndarray) -> np.ndarray:
        """Return the unit vector h minimizing |A·h|."""
        pass


class CalibratorInterface(ABC):
    """Interface for four-corner homography calibration."""

    @abstractmethod
    def add_corner(self, point: Point) -> bool:
        """Register a clicked corner; returns False if it was rejected."""
        pass

    @abstractmethod
    def set_dimensions(self, width, height) -> Calibration:
        """Set the real-world size and recompute the calibration."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Discard corners and calibration."""
        pass

    @property
    @abstractmethod
    def calibration(self) -> Optional[Calibration]:
        """The current calibration, if computed."""
        pass


class VerifierInterface(ABC):
    """Interface for calibration accuracy verification sessions."""

    @abstractmethod
    def start_line(self, point: Point) -> bool:
        """Begin a verification line."""
        pass

    @abstractmethod
    def complete_line(self, point: Point) -> bool:
        """Finish the geometry of the in-progress line."""
        pass

    @abstractmethod
    def record_actual_length(self, value) -> VerificationLine:
        """Attach the measured length to the in-progress line."""
        pass

    @abstractmethod
    def aggregate_accuracy(self) -> Optional[float]:
        """Mean accuracy over completed lines."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Clear all lines."""
        pass

    @property
    @abstractmethod
    def lines(self) -> List[VerificationLine]:
        """Completed verification lines."""
        pass
