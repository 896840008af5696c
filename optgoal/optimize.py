# optgoal/optimize.py
"""
High-level optimization interface for reservoir release scheduling.
Provides simple API for common optimization scenarios.
"""

import logging
from typing import Dict, Optional, Union
from pathlib import Path
import numpy as np

from .schema import ReservoirProblem
from .optimization.lp_interface import ModelBuilder, LinearProgram
from .optimization.lp_dispatcher import SolverAdapter, SolveResult
from .io import DataLoader, DataWriter
from .utils.validators import validate_problem
from .utils.reliability import assess_reliability

logger = logging.getLogger(__name__)


class ReleaseOptimizer:
    """
    High-level optimizer providing simple interface to release optimization.

    Example:
        optimizer = ReleaseOptimizer.from_config('config.yaml')
        results = optimizer.optimize()
        optimizer.save_results('results.csv')
    """

    def __init__(self, problem: ReservoirProblem):
        """
        Initialize optimizer with a reservoir problem.

        Args:
            problem: ReservoirProblem with series, constraints and goals

        Raises:
            ValidationError: If the problem inputs are inconsistent
        """
        self.problem = problem
        self.results = None
        self.lp = None

        self._validate()

        self.builder = ModelBuilder(problem.goals)

    @classmethod
    def from_config(cls, config_path: Union[str, Path],
                    timeseries_path: Optional[Union[str, Path]] = None) -> 'ReleaseOptimizer':
        """
        Create optimizer from configuration files.

        Args:
            config_path: Path to configuration YAML/JSON
            timeseries_path: Optional path to time series CSV

        Returns:
            Configured ReleaseOptimizer instance
        """
        problem = DataLoader.load_problem(config_path, timeseries_path)
        return cls(problem)

    def _validate(self):
        """Validate problem for optimization."""
        validate_problem(self.problem, strict=True)
        logger.info("Data validation successful")

    def build(self) -> LinearProgram:
        """Build (or return the already built) goal program."""
        if self.lp is None:
            p = self.problem
            self.lp = self.builder.build(p.inflow, p.demand, p.constraints)
        return self.lp

    def optimize(self,
                 solver: Optional[str] = None,
                 time_limit: Optional[float] = None,
                 verbose: Optional[bool] = None) -> SolveResult:
        """
        Run optimization.

        Args:
            solver: Solver backend ('highs' or 'gurobi'), defaults to the problem setting
            time_limit: Maximum solve time in seconds
            verbose: Whether to show solver output

        Returns:
            SolveResult with solution

        Raises:
            InfeasibleModelError: If no feasible schedule exists
            SolverUnavailableError: If the backend cannot be used
        """
        settings = self.problem.solver
        solver = solver or settings.name
        time_limit = time_limit if time_limit is not None else settings.time_limit
        verbose = verbose if verbose is not None else settings.verbose

        summary = self.problem.get_summary()
        logger.info(f"Optimizing {summary['name']}")
        logger.info(f"  Horizon: {summary['horizon']} periods")
        logger.info(f"  Storage: {summary['storage_range']} (initial {summary['initial_storage']:,.2f})")
        logger.info(f"  Goals: {summary['weights']}")

        lp = self.build()
        adapter = SolverAdapter(solver, time_limit=time_limit, verbose=verbose)

        logger.info("Starting optimization...")
        self.results = adapter.solve(lp)

        self._log_results_summary()

        return self.results

    def _log_results_summary(self):
        """Log summary of optimization results."""
        if not self.results:
            return

        r = self.results
        logger.info(f"Optimization complete: status {r.status} ({r.solver})")
        logger.info(f"  Objective value: {r.objective_value:,.2f}")
        logger.info(f"  Unmet demand: {r.unmet_demand:,.2f}")
        logger.info(f"  Surplus release: {r.surplus_release:,.2f}")
        logger.info(f"  Final storage: {r.storage[-1]:,.2f}")
        logger.info(f"  Solve time: {r.solve_time:.3f}s")

    def save_results(self, output_path: Union[str, Path],
                     format: str = 'csv',
                     include_metadata: bool = True):
        """
        Save optimization results to file.

        Args:
            output_path: Where to save results
            format: Output format ('csv', 'json')
            include_metadata: Whether to include metadata
        """
        if not self.results:
            raise ValueError("No results to save. Run optimize() first.")

        DataWriter.save_results(self.results, output_path, format, include_metadata,
                                demand=self.problem.demand, months=self.problem.months)

    def get_kpis(self) -> Dict[str, float]:
        """
        Calculate key performance indicators.

        Returns:
            Dictionary of KPIs
        """
        if not self.results:
            raise ValueError("No results available. Run optimize() first.")

        r = self.results
        p = self.problem

        reliability = assess_reliability(r.release, p.demand).iloc[0]

        return {
            'objective_value': r.objective_value,
            'time_reliability': float(reliability['time_reliability']),
            'volume_reliability': float(reliability['volume_reliability']),
            'total_release': float(np.sum(r.release)),
            'total_demand': float(np.sum(p.demand)),
            'unmet_demand': r.unmet_demand,
            'surplus_release': r.surplus_release,
            'periods_short': int(np.sum(r.deviations_negative > 1e-6)),
            'min_storage': float(np.min(r.storage)),
            'max_storage': float(np.max(r.storage)),
            'final_storage': float(r.storage[-1]),
        }

    def plot_release(self, save_path: Optional[Union[str, Path]] = None,
                     show: bool = True, compare_demand: bool = True):
        """
        Create release visualization.

        Args:
            save_path: Optional path to save figure
            show: Whether to display the plot
            compare_demand: Draw demand next to release

        Returns:
            Matplotlib figure
        """
        from .utils import plotting

        if not self.results:
            raise ValueError("No results to plot. Run optimize() first.")

        if compare_demand:
            return plotting.plot_release_vs_demand(self.results.release, self.problem.demand,
                                                   months=self.problem.months,
                                                   save_path=save_path, show=show)
        return plotting.plot_release(self.results.release, months=self.problem.months,
                                     save_path=save_path, show=show)

    def plot_storage(self, save_path: Optional[Union[str, Path]] = None, show: bool = True):
        """Storage trajectory against its bounds."""
        from .utils import plotting

        if not self.results:
            raise ValueError("No results to plot. Run optimize() first.")

        c = self.problem.constraints
        return plotting.plot_storage(self.results.storage, c.s_min, c.s_max,
                                     months=self.problem.months,
                                     save_path=save_path, show=show)


def quick_optimize(config_path: Union[str, Path],
                   output_path: Optional[Union[str, Path]] = None,
                   **kwargs) -> SolveResult:
    """
    Quick one-line optimization from config file.

    Args:
        config_path: Path to configuration file
        output_path: Optional path to save results
        **kwargs: Additional arguments for optimize()

    Returns:
        SolveResult

    Example:
        results = quick_optimize('config.yaml', 'results.csv')
    """
    optimizer = ReleaseOptimizer.from_config(config_path)
    results = optimizer.optimize(**kwargs)

    if output_path:
        optimizer.save_results(output_path)

    kpis = optimizer.get_kpis()
    print("\n=== Optimization Results ===")
    for key, value in kpis.items():
        if isinstance(value, int):
            print(f"{key:25s}: {value}")
        elif 'reliability' in key:
            print(f"{key:25s}: {value:.1%}")
        else:
            print(f"{key:25s}: {value:,.2f}")

    return results
