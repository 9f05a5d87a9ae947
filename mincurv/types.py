"""
Core data structures for the minimum curvature optimizer.

- SplineGeometry: matrices derived from the reference spline
- QuadraticProgram: the box-constrained QP handed to the solver
- OptimizationResult: outcome of a single optimization pass
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import scipy.sparse as sp


@dataclass
class SplineGeometry:
    """
    Geometry of the reference spline in the normal-displacement parametrization.

    Attributes:
        normals: Unit normal vectors, shape (N, 2)
        p_xx: Diagonal weights nx^2 / |n|^2, shape (N, N)
        p_yy: Diagonal weights ny^2 / |n|^2, shape (N, N)
        p_xy: Diagonal weights 2 nx ny / |n|^2, shape (N, N)
        m_x: Places x-displacements in the system right-hand side, shape (4N, N)
        m_y: Places y-displacements in the system right-hand side, shape (4N, N)
        a_ex: Extracts second-order coefficients, shape (N, 4N)
        q_x: System right-hand side of the x coordinates, shape (4N,)
        q_y: System right-hand side of the y coordinates, shape (4N,)
    """
    normals: np.ndarray
    p_xx: sp.spmatrix
    p_yy: sp.spmatrix
    p_xy: sp.spmatrix
    m_x: sp.spmatrix
    m_y: sp.spmatrix
    a_ex: sp.spmatrix
    q_x: np.ndarray
    q_y: np.ndarray

    @property
    def num_points(self) -> int:
        return self.normals.shape[0]


@dataclass
class QuadraticProgram:
    """
    Box-constrained QP over the normal displacements d:

        min  d^T H d + g^T d
        s.t. lower <= A d <= upper

    Attributes:
        hessian: Symmetric positive-semidefinite matrix H, shape (N, N)
        gradient: Linear term g, shape (N,)
        constraint_matrix: Identity A, shape (N, N)
        lower_bound: Shape (N,)
        upper_bound: Shape (N,)
    """
    hessian: np.ndarray
    gradient: np.ndarray
    constraint_matrix: sp.spmatrix
    lower_bound: np.ndarray
    upper_bound: np.ndarray

    @property
    def num_variables(self) -> int:
        return self.hessian.shape[0]

    def objective(self, displacement: np.ndarray) -> float:
        """Evaluate d^T H d + g^T d."""
        d = np.asarray(displacement, dtype=float)
        return float(d @ self.hessian @ d + self.gradient @ d)

    def is_feasible(self, displacement: np.ndarray, tol: float = 1e-6) -> bool:
        d = np.asarray(displacement, dtype=float)
        return bool(np.all(d >= self.lower_bound - tol) and np.all(d <= self.upper_bound + tol))


@dataclass
class OptimizationResult:
    """
    Result of one optimization pass.

    Attributes:
        displacement: Raw solver output along the normals, shape (N,)
        normal_weight: Multiplier applied to the displacement
        control_points: Control points written to the output spline, shape (N, 2)
        status: Solver status string
        iterations: Solver iterations used
        solve_time_ms: Wall time of the solver call
    """
    displacement: np.ndarray
    normal_weight: float
    control_points: np.ndarray
    status: str
    iterations: Optional[int] = None
    solve_time_ms: Optional[float] = None

    @property
    def applied_displacement(self) -> np.ndarray:
        """Displacement actually applied to the control points."""
        return self.normal_weight * self.displacement
