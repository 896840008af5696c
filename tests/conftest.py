# tests/conftest.py
"""Shared fixtures for the reservoir optimization tests"""

import sys
from pathlib import Path

import matplotlib
import pytest

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

matplotlib.use("Agg")

from optgoal import ReservoirConstraints, DataLoader, load_reservoir_data


@pytest.fixture
def mahaweli():
    """The bundled 12-month dataset as a DataFrame"""
    return load_reservoir_data()


@pytest.fixture
def mahaweli_constraints(mahaweli):
    return ReservoirConstraints(
        initial_storage=500,
        s_min=mahaweli["S_min"],
        s_max=mahaweli["S_max"],
    )


@pytest.fixture
def mahaweli_problem():
    return DataLoader.example_problem()


@pytest.fixture
def small_constraints():
    """Three periods, loose storage bounds"""
    return ReservoirConstraints(initial_storage=10, s_min=[0, 0, 0], s_max=[100, 100, 100])
