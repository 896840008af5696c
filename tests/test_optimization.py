# tests/test_optimization.py
"""End-to-end release optimization tests"""

import numpy as np
import pytest

from optgoal import (
    ReleaseOptimizer, GoalWeights, ReservoirConstraints, SolverAdapter,
    InfeasibleModelError, SolverUnavailableError, optimize_release,
)
from optgoal.optimization.lp_interface import build_model
from optgoal.optimization.solvers import (
    LPSolver, SolverOutput, HighsSolver, GurobiSolver, get_solver,
)

TOL = 1e-6


def check_schedule(result, inflow, demand, constraints):
    """Continuity, goal identity and bounds hold at the solution"""
    inflow = np.asarray(inflow, dtype=float)
    demand = np.asarray(demand, dtype=float)
    R, S = result.release, result.storage
    d_pos, d_neg = result.deviations_positive, result.deviations_negative

    previous = np.concatenate([[constraints.initial_storage], S[:-1]])
    np.testing.assert_allclose(S - previous + R, inflow, atol=1e-5)
    np.testing.assert_allclose(R - d_pos + d_neg, demand, atol=1e-5)

    assert np.all(S >= np.asarray(constraints.s_min) - 1e-5)
    assert np.all(S <= np.asarray(constraints.s_max) + 1e-5)
    assert np.all(R >= -TOL)
    assert np.all(d_pos >= -TOL)
    assert np.all(d_neg >= -TOL)


def test_mahaweli_default_weights(mahaweli, mahaweli_constraints):
    result = optimize_release(mahaweli["Inflow"], mahaweli["Demand"], mahaweli_constraints)

    assert result.feasible
    assert result.status == 0
    assert result.solver == "highs"
    assert result.horizon == 12
    check_schedule(result, mahaweli["Inflow"], mahaweli["Demand"], mahaweli_constraints)

    # January shortfall is unavoidable; the rest is surplus that cannot be stored
    assert result.unmet_demand == pytest.approx(6342.27, abs=1e-2)
    assert result.surplus_release == pytest.approx(23287.84, abs=1e-2)
    assert result.objective_value == pytest.approx(29630.11, abs=1e-2)
    shortfall = np.maximum(mahaweli["Demand"].to_numpy() - result.release, 0).sum()
    assert shortfall == pytest.approx(result.unmet_demand, abs=1e-4)


def test_mahaweli_shortfall_only(mahaweli, mahaweli_constraints):
    result = optimize_release(mahaweli["Inflow"], mahaweli["Demand"], mahaweli_constraints,
                              goals=GoalWeights.shortfall_only())

    check_schedule(result, mahaweli["Inflow"], mahaweli["Demand"], mahaweli_constraints)
    assert result.objective_value == pytest.approx(6342.27, abs=1e-2)
    assert result.objective_value == pytest.approx(result.unmet_demand, abs=1e-6)
    shortfall = np.maximum(mahaweli["Demand"].to_numpy() - result.release, 0).sum()
    assert shortfall == pytest.approx(result.unmet_demand, abs=1e-4)
    # Only January falls short
    assert result.deviations_negative[0] == pytest.approx(6342.27, abs=1e-2)
    assert np.all(result.deviations_negative[1:] < 1e-5)


def test_release_cap_respected():
    constraints = ReservoirConstraints(initial_storage=0, s_min=[0, 0, 0], s_max=[100, 100, 100],
                                       r_max=[5, 5, 5])
    result = optimize_release([20, 20, 20], [10, 10, 10], constraints)

    assert np.all(result.release <= 5 + 1e-6)
    assert result.unmet_demand == pytest.approx(15.0)
    check_schedule(result, [20, 20, 20], [10, 10, 10], constraints)


def test_demand_met_exactly_when_water_available():
    constraints = ReservoirConstraints(initial_storage=50, s_min=[0, 0], s_max=[100, 100])
    result = optimize_release([10, 10], [20, 20], constraints)

    np.testing.assert_allclose(result.release, [20, 20], atol=1e-6)
    assert result.objective_value == pytest.approx(0.0, abs=1e-6)


@pytest.mark.parametrize("inflow, demand, constraints", [
    # S_min[1] cannot be reached from S_0 + I_1
    ([10], [5], ReservoirConstraints(initial_storage=0, s_min=[50], s_max=[100])),
    # Water must go somewhere but storage and release are both capped
    ([100], [5], ReservoirConstraints(initial_storage=0, s_min=[0], s_max=[50], r_max=[10])),
])
def test_infeasible_model(inflow, demand, constraints):
    with pytest.raises(InfeasibleModelError) as excinfo:
        optimize_release(inflow, demand, constraints)

    assert excinfo.value.status == 2
    assert excinfo.value.solver == "highs"


class FixedSolver(LPSolver):
    """Returns a canned SolverOutput"""

    name = "fixed"

    def __init__(self, output):
        super().__init__()
        self.output = output
        self.calls = 0

    def minimize(self, objective, A, senses, rhs):
        self.calls += 1
        return self.output


def test_adapter_slices_solution_blocks(small_constraints):
    lp = build_model([20, 5, 30], [10, 15, 10], small_constraints)
    x = np.arange(12, dtype=float)
    solver = FixedSolver(SolverOutput(0, "optimal", True, x, 42.0, 0.5))

    result = SolverAdapter(solver).solve(lp)

    assert solver.calls == 1
    np.testing.assert_array_equal(result.release, [0, 1, 2])
    np.testing.assert_array_equal(result.storage, [3, 4, 5])
    np.testing.assert_array_equal(result.deviations_positive, [6, 7, 8])
    np.testing.assert_array_equal(result.deviations_negative, [9, 10, 11])
    assert result.objective_value == 42.0
    assert result.solver == "fixed"
    assert result.solve_time == 0.5


def test_adapter_reports_non_optimal_status(small_constraints):
    lp = build_model([20, 5, 30], [10, 15, 10], small_constraints)
    solver = FixedSolver(SolverOutput(3, "problem is unbounded", False, None, None, 0.0))

    with pytest.raises(InfeasibleModelError, match="unbounded") as excinfo:
        SolverAdapter(solver).solve(lp)
    assert excinfo.value.status == 3


def test_adapter_rejects_wrong_solution_length(small_constraints):
    lp = build_model([20, 5, 30], [10, 15, 10], small_constraints)
    solver = FixedSolver(SolverOutput(0, "optimal", True, np.zeros(5), 0.0, 0.0))

    with pytest.raises(RuntimeError, match="solution"):
        SolverAdapter(solver).solve(lp)


def test_unknown_solver():
    with pytest.raises(SolverUnavailableError, match="Unknown solver"):
        get_solver("cplex")


def test_get_solver_options():
    solver = get_solver("HiGHS", time_limit=10, verbose=True)
    assert isinstance(solver, HighsSolver)
    assert solver.time_limit == 10
    assert solver.verbose


class _FakeGurobiError(Exception):
    pass


class _FakeGRB:
    INFINITY = float("inf")
    MINIMIZE = 1
    EQUAL = "="
    LESS_EQUAL = "<"
    GREATER_EQUAL = ">"
    OPTIMAL = 2


class _FakeVar:
    __array_ufunc__ = None

    def __rmatmul__(self, other):
        return 0.0


class _SizeLimitedModel:
    """Fails in optimize() the way a size-limited licence does"""

    def __init__(self, name):
        self.disposed = False
        _FakeGurobi.models.append(self)

    def setParam(self, name, value):
        pass

    def addMVar(self, n, **kwargs):
        return _FakeVar()

    def setObjective(self, expr, sense):
        pass

    def addMConstr(self, A, x, senses, rhs):
        pass

    def optimize(self):
        raise _FakeGurobiError("Model too large for size-limited license")

    def dispose(self):
        self.disposed = True


class _FakeGurobi:
    GRB = _FakeGRB
    GurobiError = _FakeGurobiError
    Model = _SizeLimitedModel
    models = []


def test_gurobi_solve_failure_is_unavailable(small_constraints):
    lp = build_model([20, 5, 30], [10, 15, 10], small_constraints)
    solver = GurobiSolver.__new__(GurobiSolver)
    LPSolver.__init__(solver)
    solver._gp = _FakeGurobi

    with pytest.raises(SolverUnavailableError, match="size-limited"):
        SolverAdapter(solver).solve(lp)
    assert _FakeGurobi.models[-1].disposed


def test_gurobi_backend(mahaweli, mahaweli_constraints):
    try:
        import gurobipy  # noqa: F401
    except ImportError:
        with pytest.raises(SolverUnavailableError, match="gurobipy"):
            get_solver("gurobi")
        return

    try:
        result = optimize_release(mahaweli["Inflow"], mahaweli["Demand"], mahaweli_constraints,
                                  goals=GoalWeights.shortfall_only(), solver="gurobi")
    except SolverUnavailableError:
        pytest.skip("gurobipy installed but no usable license")
    assert result.objective_value == pytest.approx(6342.27, abs=1e-2)


def test_release_optimizer_kpis(mahaweli_problem, tmp_path):
    optimizer = ReleaseOptimizer(mahaweli_problem)
    results = optimizer.optimize()

    kpis = optimizer.get_kpis()
    assert kpis["objective_value"] == pytest.approx(29630.11, abs=1e-2)
    assert kpis["unmet_demand"] == pytest.approx(6342.27, abs=1e-2)
    assert kpis["periods_short"] == 1
    assert kpis["time_reliability"] == pytest.approx(11 / 12)
    assert kpis["total_release"] == pytest.approx(float(np.sum(results.release)))
    assert kpis["min_storage"] >= 2824.55 - 1e-5
    assert kpis["max_storage"] <= 26864.25 + 1e-5

    output = tmp_path / "results.csv"
    optimizer.save_results(output)
    assert output.exists()
    assert output.with_suffix(".meta.json").exists()


def test_release_optimizer_requires_results(mahaweli_problem):
    optimizer = ReleaseOptimizer(mahaweli_problem)
    with pytest.raises(ValueError, match="optimize"):
        optimizer.get_kpis()
    with pytest.raises(ValueError, match="optimize"):
        optimizer.save_results("unused.csv")


def test_release_optimizer_caches_model(mahaweli_problem):
    optimizer = ReleaseOptimizer(mahaweli_problem)
    assert optimizer.build() is optimizer.build()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
