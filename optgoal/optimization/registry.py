# optgoal/optimization/registry.py
"""
Registry mapping between model blocks and canonical notation of the goal program.
Maps variable and constraint blocks of the LP to their mathematical symbols.
"""

from typing import Dict

# Symbol mapping from model blocks to canonical notation
SYMBOLS = {
    # ============================================================
    # PARAMETERS
    # ============================================================
    "T": "T - Number of periods in the planning horizon",
    "initial_storage": "S_0 - Storage at the start of the horizon",
    "inflow": "I_t - Inflow volume in period t",
    "demand": "D_t - Demand target in period t",
    "s_min": "S^min_t - Minimum storage in period t",
    "s_max": "S^max_t - Maximum storage in period t",
    "r_max": "R^max_t - Maximum release in period t (optional)",
    "w_surplus": "w⁺ - Penalty weight on release above demand",
    "w_shortfall": "w⁻ - Penalty weight on release below demand",

    # ============================================================
    # DECISION VARIABLES (column blocks, in vector order)
    # ============================================================
    "release": "R_t - Release in period t",
    "storage": "S_t - Storage at the end of period t",
    "deviation_positive": "d⁺_t - Release surplus over demand",
    "deviation_negative": "d⁻_t - Release shortfall under demand",

    # ============================================================
    # CONSTRAINTS (row blocks, in matrix order)
    # ============================================================
    "continuity": "S_t - S_{t-1} + R_t = I_t (S_0 given)",
    "goal": "R_t - d⁺_t + d⁻_t = D_t",
    "storage_min": "S_t ≥ S^min_t",
    "storage_max": "S_t ≤ S^max_t",
    "release_min": "R_t ≥ 0",
    "release_max": "R_t ≤ R^max_t",
    "deviation_positive_min": "d⁺_t ≥ 0",
    "deviation_negative_min": "d⁻_t ≥ 0",
}


def get_symbol(field_name: str) -> str:
    """
    Get the canonical symbol for a model block or parameter.

    Args:
        field_name: Name of the block or parameter

    Returns:
        Canonical notation symbol with description
    """
    return SYMBOLS.get(field_name, f"Unknown field: {field_name}")


def describe_mapping() -> str:
    """
    Generate a human-readable description of the goal-programming model.

    Returns:
        Formatted string describing blocks and their notation
    """
    lines = ["Goal Programming Model Notation", "=" * 40]

    categories = [
        ("Parameters", ["T", "initial_storage", "inflow", "demand", "s_min", "s_max", "r_max",
                        "w_surplus", "w_shortfall"]),
        ("Decision Variables", ["release", "storage", "deviation_positive", "deviation_negative"]),
        ("Constraints", ["continuity", "goal", "storage_min", "storage_max", "release_min",
                         "release_max", "deviation_positive_min", "deviation_negative_min"]),
    ]

    for category, fields in categories:
        lines.append(f"\n{category}:")
        lines.append("-" * len(category))
        for field in fields:
            lines.append(f"  {field:24s} → {SYMBOLS[field]}")

    return "\n".join(lines)


__all__ = ["SYMBOLS", "get_symbol", "describe_mapping"]
