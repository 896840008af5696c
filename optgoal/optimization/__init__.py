"""
Goal-programming LP core for reservoir release scheduling.
"""

from .lp_interface import ModelBuilder, LinearProgram, VariableLayout, RowLayout, build_model
from .lp_dispatcher import SolverAdapter, SolveResult, optimize_release
from .solvers import (
    LPSolver, HighsSolver, GurobiSolver, SolverOutput, get_solver,
    InfeasibleModelError, SolverUnavailableError,
)

__all__ = [
    "ModelBuilder",
    "LinearProgram",
    "VariableLayout",
    "RowLayout",
    "build_model",
    "SolverAdapter",
    "SolveResult",
    "optimize_release",
    "LPSolver",
    "HighsSolver",
    "GurobiSolver",
    "SolverOutput",
    "get_solver",
    "InfeasibleModelError",
    "SolverUnavailableError",
]
