"""
Quadratic form of the curvature energy over the normal displacements.

The spline's second derivatives at the knots are linear in the control
point coordinates through the continuity system:

    x'' = T_c (q_x + M_x d),    y'' = T_c (q_y + M_y d),    T_c = 2 A_ex A^-1

Substituting into sum(P_xx x''^2 + P_xy x'' y'' + P_yy y''^2) gives
d^T H d + g^T d + const.
"""

from typing import Tuple

import numpy as np

from mincurv.types import SplineGeometry


def build_quadratic_form(
    system_inverse: np.ndarray,
    geometry: SplineGeometry,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Hessian and gradient of the curvature energy.

    Args:
        system_inverse: Dense (4N, 4N) inverse of the continuity system
        geometry: Matrices of the reference spline

    Returns:
        (hessian, gradient) with shapes (N, N) and (N,). The Hessian is
        exactly symmetric.
    """
    size = geometry.a_ex.shape[1]
    if system_inverse.shape != (size, size):
        raise ValueError(
            f"system inverse has shape {system_inverse.shape}, expected ({size}, {size})"
        )

    t_c = 2.0 * (geometry.a_ex @ system_inverse)
    t_nx = t_c @ geometry.m_x
    t_ny = t_c @ geometry.m_y

    p_xx, p_yy, p_xy = geometry.p_xx, geometry.p_yy, geometry.p_xy

    form = (
        t_nx.T @ (p_xx @ t_nx)
        + t_ny.T @ (p_xy @ t_nx)
        + t_ny.T @ (p_yy @ t_ny)
    )
    hessian = (form + form.T) / 2.0

    curvature_x = t_c @ geometry.q_x
    curvature_y = t_c @ geometry.q_y
    gradient = (
        2.0 * t_nx.T @ (p_xx.T @ curvature_x)
        + t_ny.T @ (p_xy.T @ curvature_x)
        + 2.0 * t_ny.T @ (p_yy.T @ curvature_y)
        + t_nx.T @ (p_xy.T @ curvature_y)
    )

    return np.asarray(hessian), np.asarray(gradient).ravel()
