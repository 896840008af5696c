# optgoal/optimization/solvers.py
"""
LP solver backends.

Every backend implements the same capability:

    minimize c·x  subject to  A x {=,<=,>=} b,  x >= 0

and reports a raw status code, the solution vector and the objective value.
The default backend is HiGHS through ``scipy.optimize.linprog``; Gurobi is
available when ``gurobipy`` is installed (``pip install optgoal[gurobi]``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import logging
import time

import numpy as np
from scipy.optimize import linprog

logger = logging.getLogger(__name__)


class SolverUnavailableError(RuntimeError):
    """The requested solver backend cannot be invoked."""
    pass


class InfeasibleModelError(RuntimeError):
    """The solver found no optimal point; carries the raw solver status."""

    def __init__(self, status, message: str = "", solver: str = ""):
        self.status = status
        self.message = message
        self.solver = solver
        super().__init__(f"{solver or 'Solver'} returned non-optimal status {status}: {message}")


@dataclass
class SolverOutput:
    """Raw result of one solver call"""
    status: int
    message: str
    optimal: bool
    solution: Optional[np.ndarray]
    objective_value: Optional[float]
    solve_time: float


class LPSolver(ABC):
    """Interface of an LP backend."""

    name = "abstract"

    def __init__(self, time_limit: Optional[float] = None, verbose: bool = False):
        self.time_limit = time_limit
        self.verbose = verbose

    @abstractmethod
    def minimize(self,
                 objective: np.ndarray,
                 A: np.ndarray,
                 senses: np.ndarray,
                 rhs: np.ndarray) -> SolverOutput:
        """Solve min c·x s.t. A x (sense) b, x >= 0."""
        ...


class HighsSolver(LPSolver):
    """HiGHS dual simplex / IPM via scipy.optimize.linprog"""

    name = "highs"

    # scipy.optimize.linprog status codes
    STATUS_MESSAGES = {
        0: "optimal",
        1: "iteration or time limit reached",
        2: "problem is infeasible",
        3: "problem is unbounded",
        4: "numerical difficulties",
    }

    def minimize(self, objective, A, senses, rhs) -> SolverOutput:
        senses = np.asarray(senses)
        eq = senses == "="
        le = senses == "<="
        ge = senses == ">="
        if not np.all(eq | le | ge):
            raise ValueError(f"Unknown constraint senses: {set(senses[~(eq | le | ge)])}")

        # linprog only takes <= rows: flip >= rows
        A_ub = np.vstack([A[le], -A[ge]])
        b_ub = np.concatenate([rhs[le], -rhs[ge]])
        A_eq, b_eq = A[eq], rhs[eq]

        options = {"disp": self.verbose}
        if self.time_limit is not None:
            options["time_limit"] = self.time_limit

        start = time.perf_counter()
        res = linprog(
            objective,
            A_ub=A_ub if len(b_ub) else None,
            b_ub=b_ub if len(b_ub) else None,
            A_eq=A_eq if len(b_eq) else None,
            b_eq=b_eq if len(b_eq) else None,
            bounds=(0, None),
            method="highs",
            options=options,
        )
        elapsed = time.perf_counter() - start

        optimal = res.status == 0
        return SolverOutput(
            status=int(res.status),
            message=str(res.message) or self.STATUS_MESSAGES.get(res.status, ""),
            optimal=optimal,
            solution=np.asarray(res.x) if optimal else None,
            objective_value=float(res.fun) if optimal else None,
            solve_time=elapsed,
        )


class GurobiSolver(LPSolver):
    """Gurobi through gurobipy's matrix API"""

    name = "gurobi"

    def __init__(self, time_limit: Optional[float] = None, verbose: bool = False):
        super().__init__(time_limit, verbose)
        try:
            import gurobipy as gp
        except ImportError as e:
            raise SolverUnavailableError(
                "Gurobi backend requires gurobipy (pip install optgoal[gurobi])"
            ) from e
        self._gp = gp

    def minimize(self, objective, A, senses, rhs) -> SolverOutput:
        gp = self._gp
        GRB = gp.GRB

        try:
            model = gp.Model("reservoir_release")
        except gp.GurobiError as e:
            raise SolverUnavailableError(f"Gurobi cannot create a model: {e}") from e

        try:
            model.setParam("OutputFlag", 1 if self.verbose else 0)
            if self.time_limit is not None:
                model.setParam("TimeLimit", self.time_limit)

            x = model.addMVar(len(objective), lb=0.0, ub=GRB.INFINITY, name="x")
            model.setObjective(np.asarray(objective) @ x, GRB.MINIMIZE)

            sense_map = {"=": GRB.EQUAL, "<=": GRB.LESS_EQUAL, ">=": GRB.GREATER_EQUAL}
            model.addMConstr(np.asarray(A), x,
                             np.array([sense_map[str(s)] for s in senses]),
                             np.asarray(rhs))

            try:
                model.optimize()
            except gp.GurobiError as e:
                # e.g. size-limited licence
                raise SolverUnavailableError(f"Gurobi cannot solve the model: {e}") from e

            optimal = model.Status == GRB.OPTIMAL
            return SolverOutput(
                status=int(model.Status),
                message="optimal" if optimal else f"Gurobi status {model.Status}",
                optimal=optimal,
                solution=np.array(x.X) if optimal else None,
                objective_value=float(model.ObjVal) if optimal else None,
                solve_time=float(model.Runtime),
            )
        finally:
            model.dispose()


SOLVERS = {
    "highs": HighsSolver,
    "gurobi": GurobiSolver,
}


def get_solver(name: str = "highs", **kwargs) -> LPSolver:
    """
    Return a solver backend by name.

    Args:
        name: "highs" (default) or "gurobi"
        **kwargs: time_limit, verbose

    Raises:
        SolverUnavailableError: Unknown name or backend library not installed
    """
    try:
        solver_cls = SOLVERS[name.lower()]
    except KeyError:
        raise SolverUnavailableError(
            f"Unknown solver '{name}', expected one of {sorted(SOLVERS)}"
        ) from None
    return solver_cls(**kwargs)
