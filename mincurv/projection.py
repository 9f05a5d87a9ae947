"""
Map the solver's normal displacements back to control points.
"""

import numpy as np

from mincurv.splines import BaseCubicSpline


def project_solution(
    displacement: np.ndarray,
    normals: np.ndarray,
    control_points: np.ndarray,
    normal_weight: float = 1.0,
) -> np.ndarray:
    """
    New control points p_i + (w * d_i) * n_i.

    Args:
        displacement: (N,) displacements along the normals
        normals: (N, 2) unit normals
        control_points: (N, 2) reference control points
        normal_weight: Fraction of the displacement to apply

    Returns:
        (N, 2) array of moved control points
    """
    displacement = np.asarray(displacement, dtype=float)
    control_points = np.asarray(control_points, dtype=float)
    if displacement.shape != (control_points.shape[0],) or normals.shape != control_points.shape:
        raise ValueError(
            f"shape mismatch: displacement {displacement.shape}, normals {normals.shape}, "
            f"control points {control_points.shape}"
        )
    return control_points + (normal_weight * displacement)[:, None] * normals


def apply_solution(
    output_spline: BaseCubicSpline,
    displacement: np.ndarray,
    normals: np.ndarray,
    control_points: np.ndarray,
    normal_weight: float = 1.0,
) -> np.ndarray:
    """Project the displacement and write the points into output_spline."""
    new_points = project_solution(displacement, normals, control_points, normal_weight)
    output_spline.set_control_points(new_points)
    return new_points
