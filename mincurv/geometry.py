"""
Geometry of the reference spline in the normal-displacement parametrization.

Each control point may only move along its unit normal n_i, which is the
forward tangent rotated 90 degrees counter-clockwise, so a positive
displacement moves the point toward the left boundary.
"""

from typing import Optional, Tuple

import numpy as np
import scipy.sparse as sp

from mincurv.exceptions import DegenerateNormalError
from mincurv.splines import BaseCubicSpline
from mincurv.system_matrix import (
    COEFFICIENTS_PER_SEGMENT,
    build_rhs_vector,
    rhs_placement_matrix,
    system_size,
)
from mincurv.types import SplineGeometry

DEFAULT_NORMAL_EPSILON = 1e-9


def compute_normal_vectors(
    x_coeffs: np.ndarray,
    y_coeffs: np.ndarray,
    eps: float = DEFAULT_NORMAL_EPSILON,
) -> np.ndarray:
    """
    Unit normals from the first-derivative coefficients of every segment.

    Args:
        x_coeffs: (4, N) x coefficients, row 1 holds the tangent x component
        y_coeffs: (4, N) y coefficients
        eps: Minimum tangent length

    Returns:
        (N, 2) array of unit normals (-dy, dx) / |(dx, dy)|

    Raises:
        DegenerateNormalError: If a tangent is shorter than eps
    """
    normals = np.column_stack([-y_coeffs[1], x_coeffs[1]]).astype(float)
    norms = np.linalg.norm(normals, axis=1)

    degenerate = np.flatnonzero(~(norms >= eps))
    if degenerate.size:
        index = int(degenerate[0])
        raise DegenerateNormalError(index, float(norms[index]))

    return normals / norms[:, None]


def projection_weights(normals: np.ndarray) -> Tuple[sp.csr_matrix, sp.csr_matrix, sp.csr_matrix]:
    """
    Diagonal matrices projecting the curvature energy onto the normals.

    Returns:
        (P_xx, P_yy, P_xy) with diagonals nx^2, ny^2 and 2 nx ny, each
        divided by nx^2 + ny^2
    """
    nx, ny = normals[:, 0], normals[:, 1]
    square_norms = nx * nx + ny * ny
    p_xx = sp.diags(nx * nx / square_norms, format="csr")
    p_yy = sp.diags(ny * ny / square_norms, format="csr")
    p_xy = sp.diags(2.0 * nx * ny / square_norms, format="csr")
    return p_xx, p_yy, p_xy


def placement_matrices(normals: np.ndarray) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
    """
    (4N, N) matrices M_x, M_y placing a normal displacement of point i into
    every right-hand side row that carries the coordinates of point i.
    """
    placement = rhs_placement_matrix(normals.shape[0])
    m_x = (placement @ sp.diags(normals[:, 0])).tocsr()
    m_y = (placement @ sp.diags(normals[:, 1])).tocsr()
    return m_x, m_y


def extraction_matrix(num_points: int) -> sp.csr_matrix:
    """(N, 4N) matrix selecting the second-order coefficient c_i of every segment."""
    rows = np.arange(num_points)
    cols = COEFFICIENTS_PER_SEGMENT * rows + 2
    return sp.csr_matrix(
        (np.ones(num_points), (rows, cols)), shape=(num_points, system_size(num_points))
    )


def assemble_geometry(
    spline: BaseCubicSpline,
    eps: float = DEFAULT_NORMAL_EPSILON,
    normals: Optional[np.ndarray] = None,
) -> SplineGeometry:
    """
    Build every geometric matrix of the quadratic program for a reference spline.

    Args:
        spline: Reference spline
        eps: Minimum tangent length for the normals
        normals: Precomputed normals, derived from the spline if omitted
    """
    if normals is None:
        x_coeffs, y_coeffs = spline.coefficients()
        normals = compute_normal_vectors(x_coeffs, y_coeffs, eps)

    points = spline.control_points
    p_xx, p_yy, p_xy = projection_weights(normals)
    m_x, m_y = placement_matrices(normals)

    return SplineGeometry(
        normals=normals,
        p_xx=p_xx,
        p_yy=p_yy,
        p_xy=p_xy,
        m_x=m_x,
        m_y=m_y,
        a_ex=extraction_matrix(points.shape[0]),
        q_x=build_rhs_vector(points[:, 0]),
        q_y=build_rhs_vector(points[:, 1]),
    )


def linearized_curvature_energy(spline: BaseCubicSpline, normals: np.ndarray) -> float:
    """
    Sum over the control points of (n_i . r''_i)^2, the second derivative of
    the spline at each knot projected onto a fixed set of normals.

    This is evaluated from the spline's own coefficients and is the energy
    the optimizer minimizes when given the reference normals.
    """
    x_coeffs, y_coeffs = spline.coefficients()
    if normals.shape != (x_coeffs.shape[1], 2):
        raise ValueError(
            f"normals must have shape ({x_coeffs.shape[1]}, 2), got {normals.shape}"
        )
    second_x = 2.0 * x_coeffs[2]
    second_y = 2.0 * y_coeffs[2]
    projected = normals[:, 0] * second_x + normals[:, 1] * second_y
    return float(np.sum(projected ** 2))
