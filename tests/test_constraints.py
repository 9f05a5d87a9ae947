"""
Tests for the box constraints on the normal displacements.
"""

from __future__ import annotations

import numpy as np
import pytest

from mincurv.constraints import build_box_constraints, validate_taper
from mincurv.exceptions import PreconditionViolationError

DISTANCES = np.array([
    [1.0, 2.0],
    [1.5, 0.5],
    [0.8, 0.4],
])


class TestBuildBoxConstraints:
    def test_identity_matrix(self):
        matrix, _, _ = build_box_constraints(DISTANCES)
        assert matrix.shape == (3, 3)
        np.testing.assert_array_equal(matrix.toarray(), np.eye(3))

    def test_first_point_pinned(self):
        _, lower, upper = build_box_constraints(DISTANCES)
        assert lower[0] == 0.0
        assert upper[0] == 0.0

    def test_left_bounds_above_right_below(self):
        _, lower, upper = build_box_constraints(DISTANCES)
        assert upper[1] == 1.5
        assert lower[1] == -0.5

    @pytest.mark.parametrize("taper,expected", [(1.0, (-0.4, 0.8)), (0.5, (-0.2, 0.4)), (0.0, (0.0, 0.0))])
    def test_last_point_taper(self, taper, expected):
        _, lower, upper = build_box_constraints(DISTANCES, taper)
        assert lower[-1] == pytest.approx(expected[0])
        assert upper[-1] == pytest.approx(expected[1])

    def test_input_not_modified(self):
        distances = DISTANCES.copy()
        build_box_constraints(distances, 0.5)
        np.testing.assert_array_equal(distances, DISTANCES)


class TestValidateTaper:
    @pytest.mark.parametrize("taper", [1.5, -0.1, float("nan"), float("inf"), "half", None])
    def test_rejects(self, taper):
        with pytest.raises(PreconditionViolationError) as excinfo:
            validate_taper(taper)
        assert excinfo.value.details["argument"] == "last_point_taper"

    @pytest.mark.parametrize("taper", [0, 0.0, 0.3, 1])
    def test_accepts(self, taper):
        assert validate_taper(taper) == float(taper)
