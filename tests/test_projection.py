"""
Tests for mapping displacements back to control points.
"""

from __future__ import annotations

import numpy as np
import pytest

from mincurv.projection import apply_solution, project_solution
from mincurv.splines import CubicSpline

POINTS = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])
NORMALS = np.array([[0.0, 1.0], [0.0, 1.0], [0.6, 0.8]])


def test_project_solution():
    moved = project_solution(np.array([0.0, 0.5, 1.0]), NORMALS, POINTS)
    np.testing.assert_allclose(moved, [[0.0, 0.0], [1.0, 0.5], [2.6, 0.8]])


def test_normal_weight_scales_displacement():
    moved = project_solution(np.array([0.0, 0.5, 1.0]), NORMALS, POINTS, normal_weight=0.5)
    np.testing.assert_allclose(moved, [[0.0, 0.0], [1.0, 0.25], [2.3, 0.4]])


def test_zero_weight_keeps_points():
    moved = project_solution(np.array([3.0, 2.0, 1.0]), NORMALS, POINTS, normal_weight=0.0)
    np.testing.assert_array_equal(moved, POINTS)


def test_shape_mismatch():
    with pytest.raises(ValueError):
        project_solution(np.zeros(2), NORMALS, POINTS)


def test_apply_solution_writes_output():
    output = CubicSpline(POINTS)
    moved = apply_solution(output, np.array([0.0, 1.0, 0.0]), NORMALS, POINTS)
    np.testing.assert_array_equal(output.control_points, moved)
    np.testing.assert_allclose(output.evaluate(0.5), [1.0, 1.0], atol=1e-12)
