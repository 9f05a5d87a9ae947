"""
OSQP adapter for the box-constrained curvature QP.

OSQP minimizes 1/2 x^T P x + q^T x, the curvature energy is d^T H d + g^T d,
hence P = 2 H. Solver outcomes are translated into the mincurv exception
hierarchy so callers can tell an infeasible corridor from a solver that ran
out of iterations.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import osqp
import scipy.sparse as sp

from mincurv.exceptions import (
    InfeasibleProblemError,
    NumericalError,
    SolverNotConvergedError,
    SolverNotInitializedError,
)
from mincurv.logging import get_logger

logger = get_logger("solver")

SOLVED_STATUSES = {"solved"}
INACCURATE_STATUSES = {"solved inaccurate"}
INFEASIBLE_STATUSES = {
    "primal infeasible",
    "primal infeasible inaccurate",
    "dual infeasible",
    "dual infeasible inaccurate",
}
NOT_CONVERGED_STATUSES = {"maximum iterations reached", "run time limit reached"}


@dataclass
class SolverOptions:
    """Solver configuration options."""
    max_iterations: int = 4000
    warm_start: bool = True
    verbose: bool = False
    eps_abs: float = 1e-6
    eps_rel: float = 1e-6


class QPSolver:
    """
    Convex QP solver wrapper.

    Usage:
        solver = QPSolver(SolverOptions(max_iterations=1000))
        solver.set_problem(H, g, A, lower, upper)
        displacement = solver.solve()
    """

    def __init__(self, options: Optional[SolverOptions] = None):
        self.options = options or SolverOptions()
        self._solver: Optional[osqp.OSQP] = None
        self._num_variables: Optional[int] = None
        self._previous_solution: Optional[np.ndarray] = None

        self.status: Optional[str] = None
        self.iterations: Optional[int] = None

    @property
    def is_ready(self) -> bool:
        return self._solver is not None

    def set_problem(
        self,
        hessian: np.ndarray,
        gradient: np.ndarray,
        constraint_matrix: sp.spmatrix,
        lower_bound: np.ndarray,
        upper_bound: np.ndarray,
    ) -> None:
        """Load a new problem, replacing any previous one."""
        num_variables = hessian.shape[0]
        if hessian.shape != (num_variables, num_variables):
            raise ValueError(f"Hessian must be square, got {hessian.shape}")
        if constraint_matrix.shape[1] != num_variables:
            raise ValueError(
                f"constraint matrix has {constraint_matrix.shape[1]} columns, "
                f"expected {num_variables}"
            )

        objective = sp.triu(sp.csc_matrix(2.0 * np.asarray(hessian)), format="csc")

        self._solver = osqp.OSQP()
        self._solver.setup(
            P=objective,
            q=np.asarray(gradient, dtype=float),
            A=sp.csc_matrix(constraint_matrix),
            l=np.asarray(lower_bound, dtype=float),
            u=np.asarray(upper_bound, dtype=float),
            verbose=self.options.verbose,
            max_iter=self.options.max_iterations,
            eps_abs=self.options.eps_abs,
            eps_rel=self.options.eps_rel,
        )
        self._num_variables = num_variables
        self.status = None
        self.iterations = None

        if (
            self.options.warm_start
            and self._previous_solution is not None
            and self._previous_solution.shape[0] == num_variables
        ):
            self._solver.warm_start(x=self._previous_solution)
            logger.debug("Warm starting from the previous solution")

    def solve(self) -> np.ndarray:
        """
        Solve the loaded problem.

        Returns:
            Optimal displacement vector

        Raises:
            SolverNotInitializedError: If no problem is loaded
            InfeasibleProblemError: If the constraints cannot be satisfied
            SolverNotConvergedError: If the iteration or time limit was hit
            NumericalError: On any other failure or a non-finite solution
        """
        if self._solver is None:
            raise SolverNotInitializedError()

        # Failed solves are reported through the status, not OSQPException
        result = self._solver.solve(raise_error=False)
        self.status = str(result.info.status).lower()
        self.iterations = int(result.info.iter)

        if self.status in INFEASIBLE_STATUSES:
            raise InfeasibleProblemError(self.status, self.iterations)
        if self.status in NOT_CONVERGED_STATUSES:
            raise SolverNotConvergedError(self.status, self.iterations)
        if self.status not in SOLVED_STATUSES | INACCURATE_STATUSES:
            raise NumericalError(f"unexpected solver status '{self.status}'")

        solution = None if result.x is None else np.asarray(result.x, dtype=float)
        if solution is None or solution.shape != (self._num_variables,) or not np.all(np.isfinite(solution)):
            raise NumericalError("solver returned a non-finite solution")

        if self.status in INACCURATE_STATUSES:
            logger.warning("Solver finished inaccurately after %d iterations", self.iterations)

        self._previous_solution = solution
        return solution

    def reset(self) -> None:
        """Drop the loaded problem and the warm start."""
        self._solver = None
        self._num_variables = None
        self._previous_solution = None
        self.status = None
        self.iterations = None
