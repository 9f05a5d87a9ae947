"""
Minimum curvature optimizer.

Moves the control points of a reference spline along their normals, inside
the corridor given by a left and a right boundary spline, so that the
curvature energy of the resulting spline is minimal.

One optimization pass:
1. prepare(): normals and geometry of the reference, system inverse (cached),
   Hessian and gradient, boundary distances, box constraints, solver setup
2. solve(): QP solution, projection onto the normals, write into the
   output spline

An optimizer instance holds mutable state and must not be shared between
threads; use one instance per thread.
"""

import logging
from typing import Any, Optional

import numpy as np

from mincurv.boundary import compute_boundary_distances
from mincurv.config import MinCurvatureConfig
from mincurv.constraints import build_box_constraints, validate_taper
from mincurv.exceptions import InvalidSplineError, SolverNotInitializedError, SplinesNotSetError
from mincurv.geometry import assemble_geometry
from mincurv.logging import TimeTracker, get_logger, profile_scope
from mincurv.projection import apply_solution
from mincurv.quadratic_form import build_quadratic_form
from mincurv.solver import QPSolver, SolverOptions
from mincurv.splines import BaseCubicSpline
from mincurv.system_matrix import SystemInverseCache
from mincurv.types import OptimizationResult, QuadraticProgram, SplineGeometry

logger = get_logger("optimizer")


class MinCurvatureOptimizer:
    """
    Minimum curvature trajectory optimizer.

    Example:
        optimizer = MinCurvatureOptimizer(shrink_margin=0.2)
        optimizer.set_splines(centerline, left_edge, right_edge)
        optimizer.prepare(last_point_taper=0.5)
        result = optimizer.solve(racing_line, normal_weight=1.0)
    """

    def __init__(self, config: Optional[MinCurvatureConfig] = None, **overrides: Any):
        """
        Initialize the optimizer.

        Args:
            config: Configuration parameters (defaults if None)
            **overrides: Individual configuration fields replacing those of config
        """
        if config is None:
            config = MinCurvatureConfig()
        if overrides:
            config = MinCurvatureConfig.from_dict({**config.to_dict(), **overrides})
        config.validate()
        self.config = config

        self._inverse_cache = SystemInverseCache(constant_shape=config.constant_system_matrix)
        if config.constant_system_matrix:
            self._inverse_cache.get(config.num_control_points)

        self._solver = QPSolver(SolverOptions(
            max_iterations=config.max_iterations,
            warm_start=config.warm_start,
            verbose=config.verbose,
            eps_abs=config.eps_abs,
            eps_rel=config.eps_rel,
        ))

        self._reference: Optional[BaseCubicSpline] = None
        self._left: Optional[BaseCubicSpline] = None
        self._right: Optional[BaseCubicSpline] = None

        self._geometry: Optional[SplineGeometry] = None
        self._problem: Optional[QuadraticProgram] = None
        self._boundary_distances: Optional[np.ndarray] = None
        self._prepared_points: Optional[np.ndarray] = None

        self.setup_timer = TimeTracker("setup")
        self.solve_timer = TimeTracker("solve")

    @property
    def _timing_level(self) -> int:
        return logging.INFO if self.config.verbose else logging.DEBUG

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def system_inverse(self) -> Optional[np.ndarray]:
        """System inverse used by the last prepare() (or pre-built at construction)."""
        return self._inverse_cache.inverse

    @property
    def normals(self) -> Optional[np.ndarray]:
        return None if self._geometry is None else self._geometry.normals

    @property
    def problem(self) -> Optional[QuadraticProgram]:
        return self._problem

    @property
    def boundary_distances(self) -> Optional[np.ndarray]:
        """(N, 2) lateral freedom (left, right) computed by the last prepare()."""
        return self._boundary_distances

    # ------------------------------------------------------------------
    # Optimization
    # ------------------------------------------------------------------

    def set_splines(
        self,
        reference: BaseCubicSpline,
        left: BaseCubicSpline,
        right: BaseCubicSpline,
    ) -> None:
        """
        Provide the splines of the next optimization. They are referenced,
        not copied, and the reference spline is never modified.
        """
        for name, spline in (("reference", reference), ("left", left), ("right", right)):
            if not isinstance(spline, BaseCubicSpline):
                raise InvalidSplineError(f"{name} spline must be a BaseCubicSpline, got {type(spline).__name__}")

        self._reference = reference
        self._left = left
        self._right = right
        self._problem = None

    def prepare(self, last_point_taper: float = 1.0) -> QuadraticProgram:
        """
        Build the quadratic program and load it into the solver.

        Args:
            last_point_taper: Scale of the last control point's freedom, in [0, 1]

        Returns:
            The loaded QuadraticProgram

        Raises:
            PreconditionViolationError: If the taper lies outside [0, 1]
            SplinesNotSetError: If set_splines() was not called
            DegenerateNormalError: If a reference tangent vanishes
            SystemMatrixError: If the continuity system cannot be inverted
        """
        taper = validate_taper(last_point_taper)
        if self._reference is None:
            raise SplinesNotSetError()

        with self.setup_timer.measure(), profile_scope("setup", self._timing_level, logger):
            reference = self._reference
            num_points = reference.size()
            control_points = np.array(reference.control_points)

            geometry = assemble_geometry(reference, eps=self.config.normal_epsilon)
            system_inverse = self._inverse_cache.get(num_points)
            hessian, gradient = build_quadratic_form(system_inverse, geometry)

            distances = compute_boundary_distances(
                control_points,
                geometry.normals,
                self._left,
                self._right,
                num_points_evaluate=self.config.num_points_evaluate,
                num_nearest=self.config.num_nearest_neighbors,
                shrink=self.config.shrink_margin,
                leaf_size=self.config.kdtree_leaf_size,
            )
            constraint_matrix, lower_bound, upper_bound = build_box_constraints(distances, taper)

            problem = QuadraticProgram(
                hessian=hessian,
                gradient=gradient,
                constraint_matrix=constraint_matrix,
                lower_bound=lower_bound,
                upper_bound=upper_bound,
            )
            self._solver.set_problem(
                problem.hessian,
                problem.gradient,
                problem.constraint_matrix,
                problem.lower_bound,
                problem.upper_bound,
            )

        self._geometry = geometry
        self._boundary_distances = distances
        self._prepared_points = control_points
        self._problem = problem
        logger.debug("Prepared QP with %d variables (taper=%.3f)", num_points, taper)
        return problem

    def solve(self, output_spline: BaseCubicSpline, normal_weight: float = 1.0) -> OptimizationResult:
        """
        Solve the prepared problem and write the optimized control points
        into output_spline.

        Args:
            output_spline: Spline receiving the new control points; must not
                be the reference spline
            normal_weight: Fraction of the optimal displacement to apply

        Returns:
            OptimizationResult of this pass

        Raises:
            SolverNotInitializedError: If prepare() was not called
            InfeasibleProblemError: If no trajectory fits the corridor
            SolverNotConvergedError: If the solver hit its iteration limit
            NumericalError: On numerical breakdown
        """
        if self._problem is None or not self._solver.is_ready:
            raise SolverNotInitializedError()
        if output_spline is self._reference:
            raise InvalidSplineError("output spline must not be the reference spline")

        with self.solve_timer.measure(), profile_scope("solve", self._timing_level, logger):
            displacement = self._solver.solve()

        new_points = apply_solution(
            output_spline,
            displacement,
            self._geometry.normals,
            self._prepared_points,
            normal_weight,
        )

        return OptimizationResult(
            displacement=displacement,
            normal_weight=normal_weight,
            control_points=new_points,
            status=self._solver.status,
            iterations=self._solver.iterations,
            solve_time_ms=self.solve_timer.last,
        )
