# optgoal/optimization/lp_interface.py
"""
Clean interface between reservoir input series and the LP solver.

Builds the goal-programming model as plain numpy data: an objective vector,
a dense constraint matrix, per-row senses and right-hand sides. The decision
vector is laid out in four blocks of length T (release, storage, d⁺, d⁻)
and rows are pre-sized from a fixed (block, t) -> row mapping.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple
import logging

import numpy as np

from ..schema import GoalWeights, ReservoirConstraints
from ..utils.validators import DataValidator, as_float_array
from .registry import get_symbol

logger = logging.getLogger(__name__)

EQ = "="
LE = "<="
GE = ">="
SENSES = (EQ, LE, GE)


class VariableLayout:
    """Column layout of the decision vector: R block, S block, d⁺ block, d⁻ block."""

    BLOCKS = ("release", "storage", "deviation_positive", "deviation_negative")

    def __init__(self, T: int):
        self.T = T
        self.offsets = {block: i * T for i, block in enumerate(self.BLOCKS)}

    @property
    def n_vars(self) -> int:
        return len(self.BLOCKS) * self.T

    def index(self, block: str, t: int) -> int:
        """Column of variable ``block[t]`` (t is 0-based)."""
        return self.offsets[block] + t

    def slice(self, block: str) -> slice:
        start = self.offsets[block]
        return slice(start, start + self.T)


class RowLayout:
    """Row layout of the constraint matrix, computed once per horizon."""

    BLOCKS = (
        ("continuity", EQ),
        ("goal", EQ),
        ("storage_min", GE),
        ("storage_max", LE),
        ("release_min", GE),
        ("release_max", LE),
        ("deviation_positive_min", GE),
        ("deviation_negative_min", GE),
    )

    def __init__(self, T: int, release_cap: bool = False):
        self.T = T
        self.blocks = tuple(
            (name, sense) for name, sense in self.BLOCKS
            if release_cap or name != "release_max"
        )
        self.offsets = {name: i * T for i, (name, _) in enumerate(self.blocks)}
        self.senses = dict(self.blocks)

    @property
    def n_rows(self) -> int:
        return len(self.blocks) * self.T

    def index(self, block: str, t: int) -> int:
        """Row of constraint ``block[t]`` (t is 0-based)."""
        return self.offsets[block] + t

    def label(self, row: int) -> str:
        """Diagnostic name of a row, e.g. ``continuity[3]`` (1-based period)."""
        name, _ = self.blocks[row // self.T]
        return f"{name}[{row % self.T + 1}]"


@dataclass(frozen=True, eq=False)
class LinearProgram:
    """minimize c·x subject to A x {=,<=,>=} b, x >= 0"""
    objective: np.ndarray       # c, length n_vars
    A: np.ndarray               # (n_rows, n_vars)
    senses: np.ndarray          # n_rows entries of "=", "<=", ">="
    rhs: np.ndarray             # b, length n_rows
    variables: VariableLayout
    rows: RowLayout

    @property
    def T(self) -> int:
        return self.variables.T

    @property
    def n_vars(self) -> int:
        return self.A.shape[1]

    @property
    def n_rows(self) -> int:
        return self.A.shape[0]

    def constraint_rows(self) -> Iterator[Tuple[np.ndarray, str, float]]:
        """Yield (coefficients, sense, rhs) for every row, in matrix order."""
        for i in range(self.n_rows):
            yield self.A[i], str(self.senses[i]), float(self.rhs[i])

    def row_label(self, row: int) -> str:
        return self.rows.label(row)

    def describe(self) -> str:
        """Block-by-block summary of the model for debugging."""
        lines = [f"LP: {self.n_vars} variables, {self.n_rows} rows (T={self.T})"]
        for block in self.variables.BLOCKS:
            s = self.variables.slice(block)
            lines.append(f"  x[{s.start}:{s.stop}]  {get_symbol(block)}")
        for name, sense in self.rows.blocks:
            start = self.rows.offsets[name]
            lines.append(f"  rows[{start}:{start + self.T}] {sense:2s} {get_symbol(name)}")
        return "\n".join(lines)


class _RowWriter:
    """Pre-sized matrix storage; every row must be written exactly once."""

    def __init__(self, variables: VariableLayout, rows: RowLayout):
        self.variables = variables
        self.rows = rows
        self.A = np.zeros((rows.n_rows, variables.n_vars))
        self.senses = np.empty(rows.n_rows, dtype="<U2")
        self.rhs = np.zeros(rows.n_rows)
        self.written = np.zeros(rows.n_rows, dtype=bool)

    def set(self, block: str, t: int, coeffs: Dict[Tuple[str, int], float], rhs: float):
        i = self.rows.index(block, t)
        if self.written[i]:
            raise RuntimeError(f"Constraint row {self.rows.label(i)} written twice")
        for (var_block, s), value in coeffs.items():
            self.A[i, self.variables.index(var_block, s)] = value
        self.senses[i] = self.rows.senses[block]
        self.rhs[i] = rhs
        self.written[i] = True

    def finish(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if not self.written.all():
            missing = [self.rows.label(i) for i in np.flatnonzero(~self.written)]
            raise RuntimeError(f"Constraint rows never written: {missing[:5]}")
        for arr in (self.A, self.senses, self.rhs):
            arr.setflags(write=False)
        return self.A, self.senses, self.rhs


class ModelBuilder:
    """
    Builds the goal-programming LP for one reservoir and one planning horizon.

    Example:
        builder = ModelBuilder(GoalWeights.shortfall_only())
        lp = builder.build(inflow, demand, constraints)
    """

    def __init__(self, weights: Optional[GoalWeights] = None):
        """
        Args:
            weights: Deviation penalty weights, defaults to (1, 1)
        """
        self.weights = weights if weights is not None else GoalWeights()

    def build(self, inflow, demand, constraints: ReservoirConstraints) -> LinearProgram:
        """
        Translate input series into a LinearProgram.

        Raises:
            ValidationError: On length mismatches, S_min > S_max or invalid values
        """
        DataValidator(strict=True).validate_inputs(inflow, demand, constraints)

        inflow = as_float_array(inflow, "inflow")
        demand = as_float_array(demand, "demand")
        s_min = as_float_array(constraints.s_min, "s_min")
        s_max = as_float_array(constraints.s_max, "s_max")
        r_max = None if constraints.r_max is None else as_float_array(constraints.r_max, "r_max")

        T = len(inflow)
        variables = VariableLayout(T)
        rows = RowLayout(T, release_cap=r_max is not None)
        writer = _RowWriter(variables, rows)

        objective = self._build_objective(variables)
        self._build_continuity(writer, inflow, constraints.initial_storage)
        self._build_goals(writer, demand)
        self._build_storage_bounds(writer, s_min, s_max)
        self._build_release_bounds(writer, r_max)
        self._build_deviation_bounds(writer)

        A, senses, rhs = writer.finish()
        lp = LinearProgram(objective=objective, A=A, senses=senses, rhs=rhs,
                           variables=variables, rows=rows)

        logger.debug(lp.describe())
        logger.info(f"Built goal program: {lp.n_vars} variables, {lp.n_rows} constraints")
        return lp

    def _build_objective(self, variables: VariableLayout) -> np.ndarray:
        """min Σ_t w⁺·d⁺_t + w⁻·d⁻_t; R and S carry no cost"""
        c = np.zeros(variables.n_vars)
        c[variables.slice("deviation_positive")] = self.weights.surplus
        c[variables.slice("deviation_negative")] = self.weights.shortfall
        c.setflags(write=False)
        return c

    def _build_continuity(self, writer: _RowWriter, inflow: np.ndarray, initial_storage: float):
        """S_t - S_{t-1} + R_t = I_t, with S_0 moved to the right-hand side"""
        for t in range(writer.rows.T):
            if t == 0:
                writer.set("continuity", t,
                           {("storage", t): 1.0, ("release", t): 1.0},
                           initial_storage + inflow[t])
            else:
                writer.set("continuity", t,
                           {("storage", t): 1.0, ("storage", t - 1): -1.0, ("release", t): 1.0},
                           inflow[t])

    def _build_goals(self, writer: _RowWriter, demand: np.ndarray):
        """R_t - d⁺_t + d⁻_t = D_t"""
        for t in range(writer.rows.T):
            writer.set("goal", t,
                       {("release", t): 1.0,
                        ("deviation_positive", t): -1.0,
                        ("deviation_negative", t): 1.0},
                       demand[t])

    def _build_storage_bounds(self, writer: _RowWriter, s_min: np.ndarray, s_max: np.ndarray):
        for t in range(writer.rows.T):
            writer.set("storage_min", t, {("storage", t): 1.0}, s_min[t])
            writer.set("storage_max", t, {("storage", t): 1.0}, s_max[t])

    def _build_release_bounds(self, writer: _RowWriter, r_max: Optional[np.ndarray]):
        for t in range(writer.rows.T):
            writer.set("release_min", t, {("release", t): 1.0}, 0.0)
            if r_max is not None:
                writer.set("release_max", t, {("release", t): 1.0}, r_max[t])

    def _build_deviation_bounds(self, writer: _RowWriter):
        for t in range(writer.rows.T):
            writer.set("deviation_positive_min", t, {("deviation_positive", t): 1.0}, 0.0)
            writer.set("deviation_negative_min", t, {("deviation_negative", t): 1.0}, 0.0)


def build_model(inflow, demand, constraints: ReservoirConstraints,
                weights: Optional[GoalWeights] = None) -> LinearProgram:
    """Shorthand for ``ModelBuilder(weights).build(inflow, demand, constraints)``."""
    return ModelBuilder(weights).build(inflow, demand, constraints)
