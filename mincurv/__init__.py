"""
mincurv - Minimum curvature trajectory optimization.

Displaces the control points of a reference path along their normals,
inside the corridor of a left and a right boundary, so that the curvature
energy of the resulting cubic spline is minimal.

Basic Usage:
    from mincurv import CubicSpline, MinCurvatureOptimizer

    optimizer = MinCurvatureOptimizer(shrink_margin=0.2)
    optimizer.set_splines(reference, left, right)
    optimizer.prepare(last_point_taper=1.0)
    result = optimizer.solve(output_spline)

For more control:
    from mincurv.config import MinCurvatureConfig, load_config
    from mincurv.logging import setup_logging, TimeTracker
    from mincurv.exceptions import InfeasibleProblemError, SolverNotConvergedError
"""

from __future__ import annotations

__version__ = "0.1.0"

from mincurv.config import (
    ConfigManager,
    MinCurvatureConfig,
    create_default_config,
    load_config,
)
from mincurv.exceptions import (
    ConfigNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    DegenerateNormalError,
    GeometryError,
    InfeasibleProblemError,
    InvalidSplineError,
    MinCurvError,
    NumericalError,
    PreconditionViolationError,
    SolverError,
    SolverFailedError,
    SolverNotConvergedError,
    SolverNotInitializedError,
    SplineError,
    SplinesNotSetError,
    SystemMatrixError,
)
from mincurv.logging import TimeTracker, get_logger, profile_scope, setup_logging
from mincurv.optimizer import MinCurvatureOptimizer
from mincurv.splines import BaseCubicSpline, CubicBSpline, CubicSpline
from mincurv.types import OptimizationResult, QuadraticProgram, SplineGeometry

__all__ = [
    "__version__",
    # Optimizer
    "MinCurvatureOptimizer",
    # Splines
    "BaseCubicSpline",
    "CubicSpline",
    "CubicBSpline",
    # Types
    "OptimizationResult",
    "QuadraticProgram",
    "SplineGeometry",
    # Config
    "ConfigManager",
    "MinCurvatureConfig",
    "create_default_config",
    "load_config",
    # Logging
    "TimeTracker",
    "get_logger",
    "profile_scope",
    "setup_logging",
    # Exceptions
    "MinCurvError",
    "ConfigurationError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "PreconditionViolationError",
    "SystemMatrixError",
    "GeometryError",
    "DegenerateNormalError",
    "SplineError",
    "InvalidSplineError",
    "SplinesNotSetError",
    "SolverError",
    "SolverNotInitializedError",
    "SolverFailedError",
    "SolverNotConvergedError",
    "InfeasibleProblemError",
    "NumericalError",
]
