"""Null-space solver for homogeneous linear systems."""

import numpy as np

from .interfaces import HomogeneousSolverInterface


def solve_homogeneous_least_squares(matrix) -> np.ndarray:
    """Unit vector h minimizing |A·h|, via singular value decomposition.

    Returns the right singular vector paired with the smallest singular value.
    For a wide matrix (fewer rows than columns) the missing singular values
    are zero, so the trailing right singular vectors span the null space.
    """
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2:
        raise ValueError(f"Expected a 2D matrix, got shape {a.shape}")

    _, singular_values, vt = np.linalg.svd(a, full_matrices=True)

    padded = np.zeros(vt.shape[0])
    padded[:singular_values.shape[0]] = singular_values
    # argmin returns the first minimum; the last one is the canonical null vector
    smallest = len(padded) - 1 - int(np.argmin(padded[::-1]))
    return vt[smallest]


class SVDSolver(HomogeneousSolverInterface):
    """Default solver backed by numpy's SVD."""

    def solve(self, matrix: np.ndarray) -> np.ndarray:
        return solve_homogeneous_least_squares(matrix)
