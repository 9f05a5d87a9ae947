"""
Box constraints on the normal displacements.

Positive displacements move toward the left boundary, so the left freedom
bounds from above and the right freedom from below. The first point is
pinned; the last point's range is scaled by a taper factor so consecutive
optimization windows can be stitched together.
"""

import math
from typing import Tuple

import numpy as np
import scipy.sparse as sp

from mincurv.exceptions import PreconditionViolationError


def validate_taper(last_point_taper: float) -> float:
    """Check that the taper factor is a finite number in [0, 1]."""
    try:
        value = float(last_point_taper)
    except (TypeError, ValueError) as e:
        raise PreconditionViolationError(
            "last_point_taper", "must be a number", last_point_taper
        ) from e
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise PreconditionViolationError("last_point_taper", "must lie in [0, 1]", last_point_taper)
    return value


def build_box_constraints(
    distances: np.ndarray,
    last_point_taper: float = 1.0,
) -> Tuple[sp.csc_matrix, np.ndarray, np.ndarray]:
    """
    Args:
        distances: (N, 2) array of (left, right) freedom
        last_point_taper: Scale of the last point's range, in [0, 1]

    Returns:
        (constraint_matrix, lower_bound, upper_bound), the matrix being the
        sparse N x N identity
    """
    taper = validate_taper(last_point_taper)
    distances = np.asarray(distances, dtype=float)
    num_points = distances.shape[0]

    lower_bound = -distances[:, 1].copy()
    upper_bound = distances[:, 0].copy()

    lower_bound[0] = 0.0
    upper_bound[0] = 0.0

    lower_bound[-1] *= taper
    upper_bound[-1] *= taper

    constraint_matrix = sp.identity(num_points, format="csc")
    return constraint_matrix, lower_bound, upper_bound
