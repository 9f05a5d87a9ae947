"""
Tests for the spline continuity system.
"""

from __future__ import annotations

import numpy as np
import pytest
import scipy.sparse as sp

from mincurv import system_matrix
from mincurv.exceptions import SystemMatrixError
from mincurv.system_matrix import (
    BlockRowRole,
    SystemInverseCache,
    build_rhs_vector,
    build_system_matrix,
    invert_system_matrix,
    rhs_placement_matrix,
    segment_block_rows,
)


def dense_entries(matrix):
    coo = sp.coo_matrix(matrix)
    return {(int(r), int(c)): float(v) for r, c, v in zip(coo.row, coo.col, coo.data)}


class TestSystemMatrix:
    def test_two_point_layout(self):
        """Two points: one full segment followed by the tail."""
        matrix = build_system_matrix(2)
        assert matrix.shape == (8, 8)
        assert dense_entries(matrix) == {
            (0, 0): 1.0,
            (1, 2): 2.0,
            (2, 0): 1.0, (2, 1): 1.0, (2, 2): 1.0, (2, 3): 1.0,
            (3, 1): 1.0, (3, 2): 2.0, (3, 3): 3.0, (3, 5): -1.0,
            (4, 2): 1.0, (4, 3): 3.0, (4, 6): -1.0,
            (5, 4): 1.0,
            (6, 6): 2.0,
            (7, 7): 1.0,
        }

    def test_three_point_rows(self):
        matrix = build_system_matrix(3).toarray()
        assert matrix.shape == (12, 12)

        # segment 0
        np.testing.assert_array_equal(matrix[0, :4], [1, 0, 0, 0])
        np.testing.assert_array_equal(matrix[1, :4], [0, 0, 2, 0])
        np.testing.assert_array_equal(matrix[2, :4], [1, 1, 1, 1])
        np.testing.assert_array_equal(matrix[3, :8], [0, 1, 2, 3, 0, -1, 0, 0])
        np.testing.assert_array_equal(matrix[4, :8], [0, 0, 1, 3, 0, 0, -1, 0])
        # segment 1
        np.testing.assert_array_equal(matrix[5, 4:8], [1, 0, 0, 0])
        np.testing.assert_array_equal(matrix[6, 4:8], [1, 1, 1, 1])
        np.testing.assert_array_equal(matrix[7, 4:12], [0, 1, 2, 3, 0, -1, 0, 0])
        np.testing.assert_array_equal(matrix[8, 4:12], [0, 0, 1, 3, 0, 0, -1, 0])
        # tail
        np.testing.assert_array_equal(matrix[9, 8:12], [1, 0, 0, 0])
        np.testing.assert_array_equal(matrix[10, 8:12], [0, 0, 2, 0])
        np.testing.assert_array_equal(matrix[11, 8:12], [0, 0, 0, 1])

    def test_rows_partitioned_by_segments(self):
        num_points = 6
        owned = [row for segment in range(num_points)
                 for row, _ in segment_block_rows(segment, num_points)]
        assert sorted(owned) == list(range(4 * num_points))

    def test_segment_roles(self):
        assert [role for _, role in segment_block_rows(0, 4)][1] is BlockRowRole.START_CURVATURE
        assert [role for _, role in segment_block_rows(3, 4)] == [
            BlockRowRole.START_POSITION,
            BlockRowRole.END_CURVATURE,
            BlockRowRole.TAIL_LINEAR,
        ]
        with pytest.raises(IndexError):
            segment_block_rows(4, 4)

    def test_deterministic(self):
        a = build_system_matrix(7).toarray()
        b = build_system_matrix(7).toarray()
        np.testing.assert_array_equal(a, b)

    def test_too_few_points(self):
        with pytest.raises(SystemMatrixError):
            build_system_matrix(1)


class TestRightHandSide:
    def test_placement(self):
        rhs = build_rhs_vector(np.array([10.0, 20.0, 30.0]))
        np.testing.assert_array_equal(
            rhs, [10, 0, 20, 0, 0, 20, 30, 0, 0, 30, 0, 0]
        )

    def test_placement_matrix_shape(self):
        placement = rhs_placement_matrix(5)
        assert placement.shape == (20, 5)
        # every point after the first also ends the previous segment
        np.testing.assert_array_equal(
            np.asarray(placement.sum(axis=0)).ravel(), [1, 2, 2, 2, 2]
        )


class TestInverse:
    @pytest.mark.parametrize("num_points", [2, 3, 10, 25])
    def test_inverse_times_matrix_is_identity(self, num_points):
        matrix = build_system_matrix(num_points).toarray()
        inverse = invert_system_matrix(num_points)
        np.testing.assert_allclose(inverse @ matrix, np.eye(4 * num_points), atol=1e-9)

    def test_singular_matrix(self, monkeypatch):
        def singular(num_points):
            diagonal = np.ones(4 * num_points)
            diagonal[3] = 0.0
            return sp.diags(diagonal, format="csc")

        monkeypatch.setattr(system_matrix, "build_system_matrix", singular)
        with pytest.raises(SystemMatrixError):
            invert_system_matrix(3)


class TestSystemInverseCache:
    def test_constant_shape_reuses_inverse(self):
        cache = SystemInverseCache(constant_shape=True)
        first = cache.get(5)
        assert cache.get(5) is first
        assert cache.size == 5

    def test_constant_shape_rebuilds_on_size_change(self):
        cache = SystemInverseCache(constant_shape=True)
        first = cache.get(5)
        second = cache.get(6)
        assert second is not first
        assert second.shape == (24, 24)
        assert cache.size == 6

    def test_variable_shape_always_rebuilds(self):
        cache = SystemInverseCache(constant_shape=False)
        first = cache.get(4)
        second = cache.get(4)
        assert second is not first
        np.testing.assert_array_equal(first, second)

    def test_invalidate(self):
        cache = SystemInverseCache(constant_shape=True)
        first = cache.get(4)
        cache.invalidate()
        assert cache.inverse is None
        assert cache.get(4) is not first
