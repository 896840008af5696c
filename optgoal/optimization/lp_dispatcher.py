# optgoal/optimization/lp_dispatcher.py
"""
Solver adapter for the reservoir goal program.

Submits a LinearProgram to an LP backend and maps the flat solution vector
back to release, storage and deviation series.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union
import logging

import numpy as np
import pandas as pd

from ..schema import GoalWeights, ReservoirConstraints
from .lp_interface import LinearProgram, ModelBuilder
from .solvers import InfeasibleModelError, LPSolver, get_solver

logger = logging.getLogger(__name__)


@dataclass
class SolveResult:
    """Container for optimization results"""
    release: np.ndarray                 # R_t
    storage: np.ndarray                 # S_t
    deviations_positive: np.ndarray     # d⁺_t
    deviations_negative: np.ndarray     # d⁻_t
    objective_value: float
    feasible: bool

    # Solver bookkeeping
    status: int = 0
    solver: str = ""
    solve_time: float = 0.0

    @property
    def horizon(self) -> int:
        return len(self.release)

    @property
    def unmet_demand(self) -> float:
        """Total shortfall Σ d⁻_t"""
        return float(np.sum(self.deviations_negative))

    @property
    def surplus_release(self) -> float:
        """Total release above demand Σ d⁺_t"""
        return float(np.sum(self.deviations_positive))

    def to_dataframe(self, months: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """One row per period."""
        df = pd.DataFrame({
            "release": self.release,
            "storage": self.storage,
            "deviation_positive": self.deviations_positive,
            "deviation_negative": self.deviations_negative,
        })
        df.index = pd.Index(list(months) if months is not None else range(1, self.horizon + 1),
                            name="period")
        return df


class SolverAdapter:
    """
    Solves a LinearProgram with a pluggable LP backend.

    Example:
        adapter = SolverAdapter("highs", time_limit=30)
        result = adapter.solve(lp)
    """

    def __init__(self, solver: Union[str, LPSolver] = "highs", **solver_options):
        """
        Args:
            solver: Backend name ("highs", "gurobi") or an LPSolver instance
            **solver_options: time_limit, verbose (ignored for instances)
        """
        if isinstance(solver, LPSolver):
            self.solver = solver
        else:
            self.solver = get_solver(solver, **solver_options)

    def solve(self, lp: LinearProgram) -> SolveResult:
        """
        Solve the LP and return the release schedule.

        Raises:
            InfeasibleModelError: If the backend reports a non-optimal status
        """
        logger.info(f"Solving {lp.n_vars}x{lp.n_rows} goal program with {self.solver.name}")
        output = self.solver.minimize(lp.objective, lp.A, lp.senses, lp.rhs)

        if not output.optimal:
            logger.error(f"Solver {self.solver.name} failed: status {output.status} ({output.message})")
            raise InfeasibleModelError(output.status, output.message, self.solver.name)

        x = np.asarray(output.solution, dtype=float)
        if x.shape != (lp.n_vars,):
            raise RuntimeError(f"Solver returned {x.shape} solution for {lp.n_vars} variables")

        return self._extract_results(lp, x, output)

    def _extract_results(self, lp: LinearProgram, x: np.ndarray, output) -> SolveResult:
        """Slice the flat solution into the four variable blocks"""
        v = lp.variables
        return SolveResult(
            release=x[v.slice("release")].copy(),
            storage=x[v.slice("storage")].copy(),
            deviations_positive=x[v.slice("deviation_positive")].copy(),
            deviations_negative=x[v.slice("deviation_negative")].copy(),
            objective_value=float(output.objective_value),
            feasible=True,
            status=output.status,
            solver=self.solver.name,
            solve_time=output.solve_time,
        )


def optimize_release(inflow,
                     demand,
                     constraints: ReservoirConstraints,
                     goals: Optional[GoalWeights] = None,
                     solver: Union[str, LPSolver] = "highs",
                     **solver_options) -> SolveResult:
    """
    Optimize water release using goal programming.

    Args:
        inflow: Inflow amounts per period
        demand: Demand amounts per period
        constraints: Initial storage and storage (and optional release) bounds
        goals: Deviation penalty weights, defaults to (1, 1)
        solver: Backend name or LPSolver instance
        **solver_options: time_limit, verbose

    Returns:
        SolveResult with the optimized release schedule
    """
    lp = ModelBuilder(goals).build(inflow, demand, constraints)
    result = SolverAdapter(solver, **solver_options).solve(lp)

    logger.info(f"Optimization complete: objective {result.objective_value:,.2f}")
    logger.info(f"Unmet demand: {result.unmet_demand:,.2f}")
    logger.info(f"Solve time: {result.solve_time:.3f}s")

    return result
