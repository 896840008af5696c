"""
Data validation utilities for reservoir release optimization.
Provides validation for input series, storage bounds and problem configurations.
"""

import numpy as np
import pandas as pd
from typing import List, Optional, Tuple, Sequence
import logging
from pathlib import Path

from optgoal.schema import ReservoirConstraints, ReservoirProblem

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Malformed or inconsistent input shapes or values."""
    pass


def as_float_array(values, name: str) -> np.ndarray:
    """
    Convert a time series to a 1-D float array.

    Raises:
        ValidationError: If the values are not numeric or not one-dimensional
    """
    if isinstance(values, (str, bytes)):
        raise ValidationError(f"{name} must be a numeric vector.")
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a numeric vector.")
    if arr.ndim != 1:
        raise ValidationError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return arr


class DataValidator:
    """Input validation for the goal-programming release model."""

    def __init__(self, strict: bool = True):
        """
        Initialize validator.

        Args:
            strict: If True, raise ValidationError on errors. If False, only collect them.
        """
        self.strict = strict
        self.errors = []
        self.warnings = []

    def validate_inputs(self,
                        inflow: Sequence[float],
                        demand: Sequence[float],
                        constraints: ReservoirConstraints) -> Tuple[bool, List[str], List[str]]:
        """
        Validate the series and storage constraints of one planning horizon.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        series = self._validate_numeric(inflow, demand, constraints)
        if series is not None:
            self._validate_lengths(series)
            if not self.errors:
                self._validate_values(series, constraints)
                self._validate_storage_bounds(series, constraints)
                self._validate_release_bounds(series)

        is_valid = len(self.errors) == 0

        if not is_valid and self.strict:
            raise ValidationError(f"Validation failed with {len(self.errors)} errors:\n" +
                                  "\n".join(self.errors))

        return is_valid, self.errors, self.warnings

    def validate_problem(self, problem: ReservoirProblem) -> Tuple[bool, List[str], List[str]]:
        """Validate a complete ReservoirProblem."""
        result = self.validate_inputs(problem.inflow, problem.demand, problem.constraints)
        if problem.months is not None and len(problem.months) != problem.T:
            self.errors.append(f"months: length {len(problem.months)} != expected {problem.T}")
            if self.strict:
                raise ValidationError(f"Validation failed with {len(self.errors)} errors:\n" +
                                      "\n".join(self.errors))
            return False, self.errors, self.warnings
        return result

    def _validate_numeric(self, inflow, demand, constraints: ReservoirConstraints) -> Optional[dict]:
        """Coerce every series to a float array, recording non-numeric ones."""
        raw = {
            "inflow": inflow,
            "demand": demand,
            "s_min": constraints.s_min,
            "s_max": constraints.s_max,
        }
        if constraints.r_max is not None:
            raw["r_max"] = constraints.r_max

        series = {}
        for name, values in raw.items():
            try:
                series[name] = as_float_array(values, name)
            except ValidationError as e:
                self.errors.append(str(e))
        return series if len(series) == len(raw) else None

    def _validate_lengths(self, series: dict):
        """Check all series have the horizon length T = len(inflow)."""
        T = len(series["inflow"])
        if T == 0:
            self.errors.append("inflow: planning horizon must contain at least one period")
            return

        for name in ("demand", "s_min", "s_max", "r_max"):
            if name in series and len(series[name]) != T:
                self.errors.append(f"{name}: length {len(series[name])} != expected {T}")

    def _validate_values(self, series: dict, constraints: ReservoirConstraints):
        """Check values are finite and within physical ranges."""
        for name, arr in series.items():
            if np.any(~np.isfinite(arr)):
                self.errors.append(f"{name} contains NaN or infinite values")

        if not np.isfinite(constraints.initial_storage) or constraints.initial_storage < 0:
            self.errors.append(f"initial_storage must be finite and >= 0, got {constraints.initial_storage}")

        if np.any(series["demand"] < 0):
            self.warnings.append("Negative demand values: the goal will target a negative release")
        if np.any(series["inflow"] < 0):
            self.warnings.append("Negative inflow values (net losses) present")

    def _validate_storage_bounds(self, series: dict, constraints: ReservoirConstraints):
        """Check S_min[t] <= S_max[t] for every period."""
        s_min, s_max = series["s_min"], series["s_max"]
        bad = np.flatnonzero(s_min > s_max)
        for t in bad:
            self.errors.append(f"S_min[{t + 1}] = {s_min[t]} exceeds S_max[{t + 1}] = {s_max[t]}")

        if np.any(s_min < 0):
            self.warnings.append("Negative S_min values are never binding (storage is non-negative)")

        # Period 1 can hold at most S_0 + I[1]
        reachable = constraints.initial_storage + series["inflow"][0]
        if len(bad) == 0 and s_min[0] > reachable:
            self.warnings.append(
                f"S_min[1] = {s_min[0]} exceeds initial storage plus first inflow ({reachable}); "
                "the model will be infeasible"
            )

    def _validate_release_bounds(self, series: dict):
        """Check the optional release cap."""
        if "r_max" not in series:
            return
        r_max = series["r_max"]
        for t in np.flatnonzero(r_max < 0):
            self.errors.append(f"R_max[{t + 1}] = {r_max[t]} must be >= 0")

        shortfall = np.flatnonzero(r_max < series["demand"])
        if len(shortfall) > 0:
            self.warnings.append(
                f"Release cap below demand in {len(shortfall)} periods; shortfall is unavoidable there"
            )


def validate_inputs(inflow, demand, constraints: ReservoirConstraints, strict: bool = True) -> bool:
    """
    Convenience function to validate one planning horizon.

    Args:
        inflow: Inflow series
        demand: Demand series
        constraints: Storage constraints
        strict: If True, raise ValidationError on errors

    Returns:
        True if valid, False otherwise
    """
    validator = DataValidator(strict=strict)
    is_valid, errors, warnings = validator.validate_inputs(inflow, demand, constraints)

    for warning in warnings:
        logger.warning(warning)

    for error in errors:
        logger.error(error)

    return is_valid


def validate_problem(problem: ReservoirProblem, strict: bool = True) -> Tuple[bool, List[str], List[str]]:
    """Validate a ReservoirProblem, logging warnings and errors."""
    validator = DataValidator(strict=strict)
    is_valid, errors, warnings = validator.validate_problem(problem)

    for warning in warnings:
        logger.warning(warning)
    for error in errors:
        logger.error(error)

    return is_valid, errors, warnings


def generate_validation_report(
    problem: ReservoirProblem,
    output_path: Optional[Path] = None
) -> str:
    """
    Generate a validation report for a reservoir problem.

    Args:
        problem: ReservoirProblem to analyze
        output_path: Optional path to save report

    Returns:
        Report as string
    """
    validator = DataValidator(strict=False)
    is_valid, errors, warnings = validator.validate_problem(problem)
    c = problem.constraints

    lines = [
        "=" * 60,
        "RESERVOIR RELEASE OPTIMIZATION - DATA VALIDATION REPORT",
        "=" * 60,
        f"Generated: {pd.Timestamp.now()}",
        "",
        "CONFIGURATION SUMMARY",
        "-" * 40,
        f"Problem: {problem.name}",
        f"Periods: {problem.T}",
        f"Initial storage: {c.initial_storage:,.2f}",
        f"Release cap: {'none' if c.r_max is None else 'per period'}",
        f"Goal weights: surplus={problem.goals.surplus}, shortfall={problem.goals.shortfall}",
        f"Solver: {problem.solver.name}",
        "",
        "VALIDATION RESULTS",
        "-" * 40,
        f"Status: {'✓ VALID' if is_valid else '✗ INVALID'}",
        f"Errors: {len(errors)}",
        f"Warnings: {len(warnings)}",
        "",
    ]

    if errors:
        lines.extend([
            "ERRORS (must fix)",
            "-" * 40,
        ])
        for error in errors:
            lines.append(f"  ✗ {error}")
        lines.append("")

    if warnings:
        lines.extend([
            "WARNINGS (review)",
            "-" * 40,
        ])
        for warning in warnings:
            lines.append(f"  ⚠ {warning}")
        lines.append("")

    if is_valid:
        total_inflow = float(np.sum(problem.inflow))
        total_demand = float(np.sum(problem.demand))
        lines.extend([
            "STATISTICS",
            "-" * 40,
            f"Total inflow: {total_inflow:,.2f}",
            f"Total demand: {total_demand:,.2f}",
            f"Water available / demand: {(c.initial_storage + total_inflow) / total_demand:.2f}"
            if total_demand > 0 else "Water available / demand: n/a",
            "",
        ])

    lines.append("=" * 60)

    report = "\n".join(lines)

    if output_path:
        output_path = Path(output_path)
        output_path.write_text(report, encoding="utf-8")
        logger.info(f"Validation report saved to {output_path}")

    return report
