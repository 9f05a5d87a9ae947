"""
Lateral freedom of the control points between the left and right boundaries.

Each boundary spline is sampled densely and indexed with a k-d tree. For a
control point the k nearest samples on each side are candidates; the one
closest to the line through the point along its normal is taken as the
boundary crossing, and its distance to the point is the freedom on that
side. Picking by distance to the normal line rather than to the point
keeps the estimate correct where the boundary curves.
"""

import numpy as np
from scipy.spatial import cKDTree

from mincurv.logging import get_logger
from mincurv.splines import BaseCubicSpline

logger = get_logger("boundary")


def sample_spline(spline: BaseCubicSpline, num_points: int) -> np.ndarray:
    """Sample a spline at num_points uniformly spaced parameters in [0, 1]."""
    return spline.sample(num_points, derivative=0)


def normal_line_distances(
    control_points: np.ndarray,
    normals: np.ndarray,
    candidates: np.ndarray,
) -> np.ndarray:
    """
    Perpendicular distances from candidate points to the normal lines.

    Args:
        control_points: (N, 2)
        normals: (N, 2)
        candidates: (N, k, 2) candidate points per control point

    Returns:
        (N, k) distances
    """
    a = -normals[:, 1]
    b = normals[:, 0]
    c = -a * control_points[:, 0] - b * control_points[:, 1]
    norm_factor = np.sqrt(a * a + b * b)

    residual = a[:, None] * candidates[..., 0] + b[:, None] * candidates[..., 1] + c[:, None]
    return np.abs(residual) / norm_factor[:, None]


def side_freedom(
    tree: cKDTree,
    samples: np.ndarray,
    control_points: np.ndarray,
    normals: np.ndarray,
    num_nearest: int,
) -> np.ndarray:
    """Distance from every control point to its boundary crossing on one side, shape (N,)."""
    k = min(num_nearest, samples.shape[0])
    # A list of neighbour ranks keeps the (N, k) result shape even for k == 1
    _, indices = tree.query(control_points, k=list(range(1, k + 1)))
    candidates = samples[indices]

    line_distances = normal_line_distances(control_points, normals, candidates)
    selected = np.argmin(line_distances, axis=1)
    crossing = candidates[np.arange(control_points.shape[0]), selected]
    return np.linalg.norm(crossing - control_points, axis=1)


def compute_boundary_distances(
    control_points: np.ndarray,
    normals: np.ndarray,
    left_spline: BaseCubicSpline,
    right_spline: BaseCubicSpline,
    *,
    num_points_evaluate: int = 1000,
    num_nearest: int = 3,
    shrink: float = 0.0,
    leaf_size: int = 10,
) -> np.ndarray:
    """
    Lateral freedom toward both boundaries.

    Args:
        control_points: (N, 2) reference control points
        normals: (N, 2) unit normals of the reference
        left_spline: Left boundary
        right_spline: Right boundary
        num_points_evaluate: Samples per boundary
        num_nearest: Candidates examined per control point and side
        shrink: Margin subtracted from every freedom
        leaf_size: k-d tree leaf size

    Returns:
        (N, 2) array of (left, right) freedom, floored at zero
    """
    control_points = np.asarray(control_points, dtype=float)
    left_points = sample_spline(left_spline, num_points_evaluate)
    right_points = sample_spline(right_spline, num_points_evaluate)

    left_tree = cKDTree(left_points, leafsize=leaf_size)
    right_tree = cKDTree(right_points, leafsize=leaf_size)

    left = side_freedom(left_tree, left_points, control_points, normals, num_nearest)
    right = side_freedom(right_tree, right_points, control_points, normals, num_nearest)

    distances = np.maximum(0.0, np.column_stack([left, right]) - shrink)

    pinched = np.flatnonzero(np.any(distances == 0.0, axis=1))
    if pinched.size:
        logger.debug("Control points without lateral freedom on one side: %s", pinched.tolist())
    return distances
