"""
Plotting helpers for inspecting an optimization.
"""

from typing import Optional

import matplotlib.pyplot as plt

from mincurv.splines import BaseCubicSpline


def plot_optimization(
    reference: BaseCubicSpline,
    left: BaseCubicSpline,
    right: BaseCubicSpline,
    optimized: Optional[BaseCubicSpline] = None,
    ax: Optional[plt.Axes] = None,
    num_points: int = 200,
    show_control_points: bool = True,
) -> plt.Axes:
    """
    Draw the corridor, the reference path and optionally the optimized path.

    Args:
        reference: Reference spline
        left: Left boundary
        right: Right boundary
        optimized: Optimized spline, if available
        ax: Axes to draw into (a new figure is created if None)
        num_points: Samples per curve
        show_control_points: Mark the control points of reference and optimized path

    Returns:
        The axes drawn into
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))

    for spline, style, label in (
        (left, "k-", "Left boundary"),
        (right, "k-", "Right boundary"),
        (reference, "b--", "Reference"),
    ):
        samples = spline.sample(num_points)
        ax.plot(samples[:, 0], samples[:, 1], style, linewidth=1.0, label=label)

    if show_control_points:
        points = reference.control_points
        ax.plot(points[:, 0], points[:, 1], "bo", markersize=3)

    if optimized is not None:
        samples = optimized.sample(num_points)
        ax.plot(samples[:, 0], samples[:, 1], "r-", linewidth=2.0, label="Optimized")
        if show_control_points:
            points = optimized.control_points
            ax.plot(points[:, 0], points[:, 1], "ro", markersize=3)

    ax.set_aspect("equal")
    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    ax.legend(loc="best")
    ax.grid(True, alpha=0.3)
    return ax
