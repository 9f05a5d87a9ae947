"""
mincurv Exception Hierarchy.

This module defines all custom exceptions used in the mincurv package.
The hierarchy separates:
- Configuration and precondition errors (caller mistakes)
- Construction errors (singular system matrix, degenerate geometry)
- Solver failures, split into "no feasible trajectory" and
  "solver did not converge" so callers can decide whether a retry with
  relaxed constraints makes sense
"""

from typing import Any, Optional


class MinCurvError(Exception):
    """Base exception for all mincurv errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MinCurvError):
    """Error in configuration loading or validation."""

    pass


class ConfigNotFoundError(ConfigurationError):
    """Configuration file not found."""

    def __init__(self, config_path: str):
        super().__init__(
            f"Configuration file not found: {config_path}",
            details={"path": config_path},
        )


class ConfigValidationError(ConfigurationError):
    """Configuration validation failed."""

    def __init__(self, key: str, reason: str, value: Any = None):
        details = {"key": key, "reason": reason}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            f"Invalid configuration for '{key}': {reason}",
            details=details,
        )


# =============================================================================
# Precondition Errors
# =============================================================================


class PreconditionViolationError(MinCurvError):
    """An argument violates a documented precondition."""

    def __init__(self, name: str, reason: str, value: Any = None):
        details = {"argument": name, "reason": reason}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            f"Precondition violated for '{name}': {reason}",
            details=details,
        )


# =============================================================================
# Construction Errors
# =============================================================================


class SystemMatrixError(MinCurvError):
    """The spline continuity system could not be built or inverted.

    This indicates a defect in the input or the implementation, not a
    recoverable runtime condition.
    """

    def __init__(self, size: int, reason: str):
        super().__init__(
            f"Cannot invert spline system matrix of size {size}: {reason}",
            details={"size": size, "reason": reason},
        )


class GeometryError(MinCurvError):
    """Base class for errors in the reference path geometry."""

    pass


class DegenerateNormalError(GeometryError):
    """A control point has a (near) zero-length tangent."""

    def __init__(self, index: int, norm: float):
        super().__init__(
            f"Degenerate tangent at control point {index}, cannot build a normal vector",
            details={"index": index, "norm": norm},
        )


# =============================================================================
# Spline Errors
# =============================================================================


class SplineError(MinCurvError):
    """Base class for spline-related errors."""

    pass


class InvalidSplineError(SplineError):
    """Control points or evaluation arguments are invalid."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid spline: {reason}",
            details={"reason": reason},
        )


class SplinesNotSetError(SplineError):
    """Reference and boundary splines have not been provided."""

    def __init__(self):
        super().__init__("Splines have not been set. Call set_splines() first.")


# =============================================================================
# Solver Errors
# =============================================================================


class SolverError(MinCurvError):
    """Base class for solver-related errors."""

    pass


class SolverNotInitializedError(SolverError):
    """Solver has not been loaded with a problem."""

    def __init__(self):
        super().__init__("Solver has no problem loaded. Call prepare() first.")


class SolverFailedError(SolverError):
    """Solver failed to find a solution."""

    def __init__(
        self,
        reason: str = "Unknown",
        status: Optional[str] = None,
        iterations: Optional[int] = None,
    ):
        details = {"reason": reason}
        if status is not None:
            details["status"] = status
        if iterations is not None:
            details["iterations"] = iterations
        super().__init__(
            f"Solver failed to find a solution: {reason}",
            details=details,
        )
        self.status = status
        self.iterations = iterations


class InfeasibleProblemError(SolverFailedError):
    """No trajectory satisfies the corridor constraints."""

    def __init__(self, status: Optional[str] = None, iterations: Optional[int] = None):
        super().__init__("optimization problem is infeasible", status, iterations)


class SolverNotConvergedError(SolverFailedError):
    """Solver stopped before convergence (iteration or time limit)."""

    def __init__(self, status: Optional[str] = None, iterations: Optional[int] = None):
        super().__init__("solver did not converge", status, iterations)


class NumericalError(SolverError):
    """Numerical issues during optimization."""

    def __init__(self, description: str):
        super().__init__(
            f"Numerical error during optimization: {description}",
            details={"description": description},
        )
