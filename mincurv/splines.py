"""
Spline utilities.

Piecewise cubic splines over 2D control points. Both variants expose the
same capability set used by the optimizer:

- size(): number of control points N
- control_points: (N, 2) array, read-only
- coefficients(): per-segment coefficients (x_coeffs, y_coeffs), each of
  shape (4, N), row k holding the degree-k coefficient
- evaluate(u, derivative): point or derivative at the normalized
  parameter u in [0, 1]
- set_control_points(points): replace the control points

CubicSpline interpolates the control points; CubicBSpline treats them as
de Boor points of a uniform cubic B-spline.
"""

import copy
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np
from scipy.sparse.linalg import splu

from mincurv.exceptions import InvalidSplineError
from mincurv.system_matrix import build_rhs_vector, build_system_matrix


def _validate_control_points(points) -> np.ndarray:
    points = np.array(points, dtype=float)
    if points.ndim != 2 or points.shape[1] != 2:
        raise InvalidSplineError(f"control points must have shape (N, 2), got {points.shape}")
    if points.shape[0] < 2:
        raise InvalidSplineError(f"need at least 2 control points, got {points.shape[0]}")
    if not np.all(np.isfinite(points)):
        raise InvalidSplineError("control points must be finite")
    return points


def _monomial_basis(t: float, derivative: int) -> np.ndarray:
    """Row vector mapping (a, b, c, d) to the given derivative at t."""
    if derivative == 0:
        return np.array([1.0, t, t * t, t * t * t])
    if derivative == 1:
        return np.array([0.0, 1.0, 2.0 * t, 3.0 * t * t])
    if derivative == 2:
        return np.array([0.0, 0.0, 2.0, 6.0 * t])
    return np.array([0.0, 0.0, 0.0, 6.0])


class BaseCubicSpline(ABC):
    """Common behaviour of the piecewise cubic splines."""

    def __init__(self, control_points):
        self._points = np.zeros((0, 2))
        self._x_coeffs = np.zeros((4, 0))
        self._y_coeffs = np.zeros((4, 0))
        self.set_control_points(control_points)

    @abstractmethod
    def _compute_coefficients(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Return (x_coeffs, y_coeffs), each of shape (4, N)."""

    def size(self) -> int:
        return self._points.shape[0]

    def __len__(self) -> int:
        return self.size()

    @property
    def control_points(self) -> np.ndarray:
        view = self._points.view()
        view.flags.writeable = False
        return view

    def coefficients(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._x_coeffs.copy(), self._y_coeffs.copy()

    def set_control_points(self, points) -> None:
        points = _validate_control_points(points)
        x_coeffs, y_coeffs = self._compute_coefficients(points)
        self._points = points
        self._x_coeffs = x_coeffs
        self._y_coeffs = y_coeffs

    def evaluate(self, u: float, derivative: int = 0) -> np.ndarray:
        """
        Evaluate the spline at the normalized parameter u.

        Args:
            u: Parameter in [0, 1], clipped to that range
            derivative: Derivative order 0..3, taken with respect to u

        Returns:
            Array [x, y]
        """
        if derivative not in (0, 1, 2, 3):
            raise InvalidSplineError(f"derivative order must be in 0..3, got {derivative}")

        num_segments = self.size() - 1
        s = float(np.clip(u, 0.0, 1.0)) * num_segments
        segment = min(int(np.floor(s)), num_segments - 1)
        t = s - segment

        basis = _monomial_basis(t, derivative) * num_segments ** derivative
        return np.array([
            basis @ self._x_coeffs[:, segment],
            basis @ self._y_coeffs[:, segment],
        ])

    def sample(self, num_points: int, derivative: int = 0) -> np.ndarray:
        """Evaluate at num_points uniformly spaced parameters, shape (num_points, 2)."""
        if num_points < 2:
            raise InvalidSplineError(f"need at least 2 samples, got {num_points}")
        return np.array([
            self.evaluate(i / (num_points - 1), derivative) for i in range(num_points)
        ])

    def copy(self) -> "BaseCubicSpline":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(num_points={self.size()})"


class CubicSpline(BaseCubicSpline):
    """
    Interpolating cubic spline through the control points, one unit-length
    segment per point, natural at both ends and straight past the last point.

    The coefficients solve the same continuity system the optimizer
    differentiates through, so both agree on the path geometry.
    """

    def _compute_coefficients(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        n = points.shape[0]
        rhs = np.column_stack([build_rhs_vector(points[:, 0]), build_rhs_vector(points[:, 1])])
        solution = splu(build_system_matrix(n)).solve(rhs)
        x_coeffs = solution[:, 0].reshape(n, 4).T
        y_coeffs = solution[:, 1].reshape(n, 4).T
        return x_coeffs, y_coeffs


class CubicBSpline(BaseCubicSpline):
    """
    Uniform cubic B-spline over the control points.

    Phantom points mirrored at both ends make the curve start at the first
    and end at the last control point. Segment i (0..N-2) is driven by the
    points i-1..i+2; the last column is the straight extension past the end.
    """

    BASIS = np.array([
        [1.0, 4.0, 1.0, 0.0],
        [-3.0, 0.0, 3.0, 0.0],
        [3.0, -6.0, 3.0, 0.0],
        [-1.0, 3.0, -3.0, 1.0],
    ]) / 6.0

    def _compute_coefficients(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        n = points.shape[0]
        padded = np.vstack([
            2.0 * points[0] - points[1],
            points,
            2.0 * points[-1] - points[-2],
        ])

        coeffs = np.zeros((n, 4, 2))
        for i in range(n - 1):
            coeffs[i] = self.BASIS @ padded[i:i + 4]

        last = coeffs[n - 2]
        coeffs[n - 1, 0] = last.sum(axis=0)
        coeffs[n - 1, 1] = last[1] + 2.0 * last[2] + 3.0 * last[3]

        return coeffs[:, :, 0].T.copy(), coeffs[:, :, 1].T.copy()
