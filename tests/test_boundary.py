"""
Tests for the boundary distance estimation.
"""

from __future__ import annotations

import numpy as np
import pytest
from scipy.spatial import cKDTree

from mincurv.boundary import (
    compute_boundary_distances,
    normal_line_distances,
    sample_spline,
    side_freedom,
)

UP = np.array([[0.0, 1.0]])


class TestNormalLineDistances:
    def test_perpendicular_distance(self):
        candidates = np.array([[[0.5, 1.0], [0.0, 3.0], [-2.0, 0.0]]])
        distances = normal_line_distances(np.array([[0.0, 0.0]]), UP, candidates)
        np.testing.assert_allclose(distances, [[0.5, 0.0, 2.0]])


class TestSideFreedom:
    def test_picks_crossing_not_nearest_point(self):
        """The candidate on the normal line wins over a closer off-line sample."""
        samples = np.array([[0.5, 1.0], [0.0, 1.2], [3.0, 3.0]])
        tree = cKDTree(samples)
        freedom = side_freedom(tree, samples, np.array([[0.0, 0.0]]), UP, num_nearest=2)
        np.testing.assert_allclose(freedom, [1.2])

    def test_single_neighbor(self):
        samples = np.array([[0.5, 1.0], [0.0, 1.2]])
        tree = cKDTree(samples)
        freedom = side_freedom(tree, samples, np.array([[0.0, 0.0]]), UP, num_nearest=1)
        np.testing.assert_allclose(freedom, [np.hypot(0.5, 1.0)])

    def test_more_neighbors_than_samples(self):
        samples = np.array([[0.0, 2.0], [1.0, 2.0]])
        tree = cKDTree(samples)
        freedom = side_freedom(tree, samples, np.array([[0.0, 0.0]]), UP, num_nearest=5)
        np.testing.assert_allclose(freedom, [2.0])


class TestComputeBoundaryDistances:
    def test_unit_corridor(self, straight_reference, unit_corridor):
        left, right = unit_corridor
        normals = np.array([[0.0, 1.0]] * 3)
        distances = compute_boundary_distances(
            straight_reference.control_points, normals, left, right, num_points_evaluate=1001
        )
        assert distances.shape == (3, 2)
        np.testing.assert_allclose(distances, 1.0, atol=1e-9)

    def test_shrink_margin(self, straight_reference, unit_corridor):
        left, right = unit_corridor
        normals = np.array([[0.0, 1.0]] * 3)
        distances = compute_boundary_distances(
            straight_reference.control_points, normals, left, right,
            num_points_evaluate=1001, shrink=0.2,
        )
        np.testing.assert_allclose(distances, 0.8, atol=1e-9)

    def test_floored_at_zero(self, straight_reference, unit_corridor):
        left, right = unit_corridor
        normals = np.array([[0.0, 1.0]] * 3)
        distances = compute_boundary_distances(
            straight_reference.control_points, normals, left, right,
            num_points_evaluate=1001, shrink=5.0,
        )
        np.testing.assert_array_equal(distances, 0.0)

    def test_asymmetric_corridor(self, straight_reference, line_spline):
        left = line_spline(2.0, 0.0, 2.0)
        right = line_spline(-0.5, 0.0, 2.0)
        normals = np.array([[0.0, 1.0]] * 3)
        distances = compute_boundary_distances(
            straight_reference.control_points, normals, left, right, num_points_evaluate=1001
        )
        np.testing.assert_allclose(distances[:, 0], 2.0, atol=1e-9)
        np.testing.assert_allclose(distances[:, 1], 0.5, atol=1e-9)

    @pytest.mark.parametrize("leaf_size", [1, 10, 64])
    def test_leaf_size_does_not_change_result(self, straight_reference, unit_corridor, leaf_size):
        left, right = unit_corridor
        normals = np.array([[0.0, 1.0]] * 3)
        distances = compute_boundary_distances(
            straight_reference.control_points, normals, left, right,
            num_points_evaluate=1001, leaf_size=leaf_size,
        )
        np.testing.assert_allclose(distances, 1.0, atol=1e-9)


def test_sample_spline(unit_corridor):
    left, _ = unit_corridor
    samples = sample_spline(left, 3)
    np.testing.assert_allclose(samples, [[0.0, 1.0], [1.0, 1.0], [2.0, 1.0]], atol=1e-12)
