"""
Utility functions for validation, reliability scoring and plotting.
"""

from .validators import (
    validate_inputs, validate_problem, generate_validation_report,
    DataValidator, ValidationError,
)
from .reliability import assess_reliability

__all__ = [
    "validate_inputs",
    "validate_problem",
    "generate_validation_report",
    "DataValidator",
    "ValidationError",
    "assess_reliability",
]
