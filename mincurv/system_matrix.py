"""
Continuity system of a piecewise cubic spline and its inverse.

Every control point i owns one cubic segment with coefficients
(a_i, b_i, c_i, d_i) on a local parameter t in [0, 1]. The unknown vector
stacks them as [a_0, b_0, c_0, d_0, a_1, ...], so coefficient k of segment i
lives at column 4 * i + k. The 4N equations are grouped per segment into
block rows with a fixed role:

    segment 0:      start position, start curvature, end position,
                    slope continuity, curvature continuity
    segment 1..N-2: start position, end position,
                    slope continuity, curvature continuity
    segment N-1:    start position, end curvature, tail linear

Start and end curvature rows give natural boundary conditions; the tail
segment past the last point is a straight extension.
"""

from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import splu

from mincurv.exceptions import SystemMatrixError
from mincurv.logging import get_logger

logger = get_logger("system_matrix")

COEFFICIENTS_PER_SEGMENT = 4


class BlockRowRole(Enum):
    """Role of one equation within a segment's block of rows."""
    START_POSITION = "start_position"              # a_i = p_i
    START_CURVATURE = "start_curvature"            # 2 c_0 = 0
    END_POSITION = "end_position"                  # a_i + b_i + c_i + d_i = p_{i+1}
    SLOPE_CONTINUITY = "slope_continuity"          # b_i + 2 c_i + 3 d_i = b_{i+1}
    CURVATURE_CONTINUITY = "curvature_continuity"  # c_i + 3 d_i = c_{i+1}
    END_CURVATURE = "end_curvature"                # 2 c_{N-1} = 0
    TAIL_LINEAR = "tail_linear"                    # d_{N-1} = 0


FIRST_SEGMENT_ROLES = (
    BlockRowRole.START_POSITION,
    BlockRowRole.START_CURVATURE,
    BlockRowRole.END_POSITION,
    BlockRowRole.SLOPE_CONTINUITY,
    BlockRowRole.CURVATURE_CONTINUITY,
)
INTERIOR_SEGMENT_ROLES = (
    BlockRowRole.START_POSITION,
    BlockRowRole.END_POSITION,
    BlockRowRole.SLOPE_CONTINUITY,
    BlockRowRole.CURVATURE_CONTINUITY,
)
LAST_SEGMENT_ROLES = (
    BlockRowRole.START_POSITION,
    BlockRowRole.END_CURVATURE,
    BlockRowRole.TAIL_LINEAR,
)


def system_size(num_points: int) -> int:
    return COEFFICIENTS_PER_SEGMENT * num_points


def _check_num_points(num_points: int) -> None:
    if num_points < 2:
        raise SystemMatrixError(
            system_size(max(num_points, 0)), f"need at least 2 control points, got {num_points}"
        )


def segment_block_rows(segment: int, num_points: int) -> List[Tuple[int, BlockRowRole]]:
    """
    Rows owned by one segment together with their roles.

    Args:
        segment: Segment index in [0, num_points - 1]
        num_points: Number of control points N

    Returns:
        List of (row, role) pairs
    """
    _check_num_points(num_points)
    if not 0 <= segment < num_points:
        raise IndexError(f"segment {segment} out of range for {num_points} control points")

    if segment == 0:
        return list(enumerate(FIRST_SEGMENT_ROLES))
    if segment == num_points - 1:
        first_row = system_size(num_points) - len(LAST_SEGMENT_ROLES)
        return [(first_row + k, role) for k, role in enumerate(LAST_SEGMENT_ROLES)]
    first_row = COEFFICIENTS_PER_SEGMENT * segment + 1
    return [(first_row + k, role) for k, role in enumerate(INTERIOR_SEGMENT_ROLES)]


def role_entries(role: BlockRowRole, segment: int) -> List[Tuple[int, float]]:
    """Nonzero (column, value) pairs of a block row of the given segment."""
    o = COEFFICIENTS_PER_SEGMENT * segment
    if role is BlockRowRole.START_POSITION:
        return [(o, 1.0)]
    if role in (BlockRowRole.START_CURVATURE, BlockRowRole.END_CURVATURE):
        return [(o + 2, 2.0)]
    if role is BlockRowRole.END_POSITION:
        return [(o, 1.0), (o + 1, 1.0), (o + 2, 1.0), (o + 3, 1.0)]
    if role is BlockRowRole.SLOPE_CONTINUITY:
        return [(o + 1, 1.0), (o + 2, 2.0), (o + 3, 3.0), (o + 5, -1.0)]
    if role is BlockRowRole.CURVATURE_CONTINUITY:
        return [(o + 2, 1.0), (o + 3, 3.0), (o + 6, -1.0)]
    if role is BlockRowRole.TAIL_LINEAR:
        return [(o + 3, 1.0)]
    raise ValueError(f"Unknown block row role: {role}")


def role_point_index(role: BlockRowRole, segment: int) -> Optional[int]:
    """Control point whose coordinate is the right-hand side of the row, if any."""
    if role is BlockRowRole.START_POSITION:
        return segment
    if role is BlockRowRole.END_POSITION:
        return segment + 1
    return None


def _iter_block_rows(num_points: int):
    for segment in range(num_points):
        for row, role in segment_block_rows(segment, num_points):
            yield segment, row, role


def build_system_matrix(num_points: int) -> sp.csc_matrix:
    """Sparse continuity system of size 4N x 4N."""
    _check_num_points(num_points)
    size = system_size(num_points)

    rows, cols, data = [], [], []
    for segment, row, role in _iter_block_rows(num_points):
        for col, value in role_entries(role, segment):
            rows.append(row)
            cols.append(col)
            data.append(value)

    return sp.csc_matrix((data, (rows, cols)), shape=(size, size))


def rhs_placement_matrix(num_points: int) -> sp.csr_matrix:
    """
    0/1 matrix R of shape (4N, N) such that R @ v is the system right-hand
    side for the coordinate values v of the control points.
    """
    _check_num_points(num_points)
    rows, cols = [], []
    for segment, row, role in _iter_block_rows(num_points):
        point = role_point_index(role, segment)
        if point is not None:
            rows.append(row)
            cols.append(point)

    return sp.csr_matrix(
        (np.ones(len(rows)), (rows, cols)), shape=(system_size(num_points), num_points)
    )


def build_rhs_vector(values: np.ndarray) -> np.ndarray:
    """System right-hand side for one coordinate of the control points."""
    values = np.asarray(values, dtype=float)
    return rhs_placement_matrix(values.shape[0]) @ values


def invert_system_matrix(num_points: int) -> np.ndarray:
    """
    Dense inverse of the continuity system, computed from a sparse LU
    factorization solved against the identity.

    Raises:
        SystemMatrixError: If the system is singular or the inverse is not finite
    """
    _check_num_points(num_points)
    size = system_size(num_points)
    matrix = build_system_matrix(num_points)

    try:
        lu = splu(matrix)
    except RuntimeError as e:
        raise SystemMatrixError(size, str(e)) from e

    inverse = lu.solve(np.eye(size))
    if not np.all(np.isfinite(inverse)):
        raise SystemMatrixError(size, "inverse contains non-finite values")

    logger.debug("Inverted spline system matrix for %d control points", num_points)
    return inverse


class SystemInverseCache:
    """
    Holds the system inverse between optimizations.

    With constant_shape enabled the inverse is reused for as long as the
    control point count does not change. Without it every request rebuilds
    the inverse.
    """

    def __init__(self, constant_shape: bool = False):
        self.constant_shape = constant_shape
        self._size: Optional[int] = None
        self._inverse: Optional[np.ndarray] = None

    @property
    def size(self) -> Optional[int]:
        """Control point count of the cached inverse."""
        return self._size

    @property
    def inverse(self) -> Optional[np.ndarray]:
        return self._inverse

    def get(self, num_points: int) -> np.ndarray:
        """Return the inverse for num_points control points."""
        if self.constant_shape and self._inverse is not None and self._size == num_points:
            return self._inverse

        if self._size is not None and self._size != num_points:
            logger.debug(
                "Control point count changed from %d to %d, rebuilding system inverse",
                self._size, num_points,
            )
        self._inverse = invert_system_matrix(num_points)
        self._size = num_points
        return self._inverse

    def invalidate(self) -> None:
        self._size = None
        self._inverse = None
