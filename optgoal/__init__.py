"""
OptGoal
Reservoir release scheduling with goal programming.
"""

__version__ = "0.1.0"

# Main API exports
from .optimize import ReleaseOptimizer, quick_optimize
from .schema import ReservoirProblem, ReservoirConstraints, GoalWeights, SolverSettings
from .io import DataLoader, DataWriter, generate_template

# Convenience imports
from .optimization.lp_interface import ModelBuilder, LinearProgram
from .optimization.lp_dispatcher import SolverAdapter, SolveResult, optimize_release
from .optimization.solvers import InfeasibleModelError, SolverUnavailableError
from .utils.validators import ValidationError, validate_inputs, generate_validation_report
from .utils.reliability import assess_reliability
from .data_sources import load_reservoir_data

__all__ = [
    "ReleaseOptimizer",
    "quick_optimize",
    "ReservoirProblem",
    "ReservoirConstraints",
    "GoalWeights",
    "SolverSettings",
    "DataLoader",
    "DataWriter",
    "generate_template",
    "ModelBuilder",
    "LinearProgram",
    "SolverAdapter",
    "SolveResult",
    "optimize_release",
    "InfeasibleModelError",
    "SolverUnavailableError",
    "ValidationError",
    "validate_inputs",
    "generate_validation_report",
    "assess_reliability",
    "load_reservoir_data",
]
