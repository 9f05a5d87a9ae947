"""
Pytest configuration and fixtures for mincurv tests.

This module provides shared fixtures for testing:
- Reference path fixtures
- Corridor (boundary) fixtures
- Optimizer fixtures
"""

from __future__ import annotations

import numpy as np
import pytest

from mincurv.splines import CubicSpline


def horizontal_line(y: float, x_start: float, x_end: float, num_points: int = 3) -> CubicSpline:
    """Straight spline along y = const from x_start to x_end."""
    xs = np.linspace(x_start, x_end, num_points)
    return CubicSpline(np.column_stack([xs, np.full_like(xs, y)]))


# =============================================================================
# Reference Path Fixtures
# =============================================================================


@pytest.fixture
def straight_reference() -> CubicSpline:
    """Three collinear control points along the x axis."""
    return CubicSpline([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])


@pytest.fixture
def zigzag_reference() -> CubicSpline:
    """Sharp zig-zag between y = -1 and y = +1."""
    return CubicSpline([
        [0.0, 0.0],
        [1.0, 1.0],
        [2.0, -1.0],
        [3.0, 1.0],
        [4.0, -1.0],
        [5.0, 1.0],
        [6.0, 0.0],
    ])


# =============================================================================
# Corridor Fixtures
# =============================================================================


@pytest.fixture
def line_spline():
    """Factory for straight boundary splines."""
    return horizontal_line


@pytest.fixture
def unit_corridor():
    """Left boundary at y = +1 and right boundary at y = -1 over x in [0, 2]."""
    return horizontal_line(1.0, 0.0, 2.0), horizontal_line(-1.0, 0.0, 2.0)


@pytest.fixture
def wide_corridor():
    """Left boundary at y = +4 and right boundary at y = -4 over x in [-2, 8]."""
    return horizontal_line(4.0, -2.0, 8.0, 11), horizontal_line(-4.0, -2.0, 8.0, 11)


# =============================================================================
# Optimizer Fixtures
# =============================================================================


@pytest.fixture
def optimizer_overrides():
    """Settings that put boundary samples exactly on integer x for the unit corridor."""
    return {"num_points_evaluate": 1001, "num_control_points": 3}
