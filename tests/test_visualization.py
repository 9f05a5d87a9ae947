"""
Tests for plotting helpers.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from mincurv.visualization import plot_optimization  # noqa: E402


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_reference_only(straight_reference, unit_corridor):
    ax = plot_optimization(straight_reference, *unit_corridor)
    # two boundaries, reference and its control points
    assert len(ax.lines) == 4


def test_plot_with_optimized(straight_reference, unit_corridor):
    optimized = straight_reference.copy()
    ax = plot_optimization(straight_reference, *unit_corridor, optimized=optimized, show_control_points=False)
    assert len(ax.lines) == 4
    assert "Optimized" in [line.get_label() for line in ax.lines]


def test_plot_into_existing_axes(straight_reference, unit_corridor):
    _, ax = plt.subplots()
    assert plot_optimization(straight_reference, *unit_corridor, ax=ax) is ax
