# tests/test_io.py
"""Configuration, CSV and results I/O"""

import json

import pandas as pd
import pytest

from optgoal import (
    DataLoader, DataWriter, GoalWeights, ReleaseOptimizer, ValidationError,
    generate_template, generate_validation_report,
)
from optgoal.data_sources import CSVDataLoader, create_sample_csv, load_reservoir_data


def test_bundled_data():
    df = load_reservoir_data()
    assert list(df.columns) == ["Month", "Inflow", "Demand", "S_min", "S_max"]
    assert len(df) == 12
    assert df["Month"].iloc[0] == "Jan"
    assert df["Inflow"].sum() == 90908


def test_template_round_trip(tmp_path):
    config_path = tmp_path / "config.yaml"
    generate_template(config_path, shortfall_only=True)

    problem = DataLoader.load_problem(config_path)
    assert problem.name == "mahaweli"
    assert problem.T == 12
    assert problem.constraints.initial_storage == 500
    # Scalar bounds broadcast over the horizon
    assert problem.constraints.s_min == [2824.55] * 12
    assert problem.constraints.s_max == [26864.25] * 12
    assert problem.goals == GoalWeights.shortfall_only()
    assert problem.solver.time_limit == 60


def test_json_config(tmp_path):
    config = {
        "name": "tiny",
        "reservoir": {"initial_storage": 5, "s_min": 0, "s_max": 50, "r_max": 8},
        "series": {"inflow": [10, 10], "demand": 6},
        "solver": {"name": "highs"},
    }
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config))

    problem = DataLoader.load_problem(config_path)
    assert problem.demand == [6.0, 6.0]
    assert problem.constraints.r_max == [8.0, 8.0]
    assert problem.months is None


def test_config_with_separate_csv(tmp_path):
    config_path = tmp_path / "config.yaml"
    csv_path = tmp_path / "series.csv"
    generate_template(config_path)
    pd.DataFrame({
        "Period": ["p1", "p2", "p3"],
        "Inflows": [100, 200, 300],
        "Target": [150, 150, 150],
        "Storage Min": [10, 10, 10],
        "Storage Max": [1000, 1000, 1000],
    }).to_csv(csv_path, index=False)

    problem = DataLoader.load_problem(config_path, csv_path)
    assert problem.T == 3
    assert problem.months == ["p1", "p2", "p3"]
    assert problem.inflow == [100.0, 200.0, 300.0]
    assert problem.demand == [150.0] * 3
    assert problem.constraints.s_max == [1000.0] * 3


def test_invalid_config_rejected(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "reservoir:\n  initial_storage: 0\n  s_min: 100\n  s_max: 50\n"
        "series:\n  inflow: [1, 2]\n  demand: [1, 2]\n"
    )
    with pytest.raises(ValidationError, match="exceeds"):
        DataLoader.load_problem(config_path)


def test_missing_required_values(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "reservoir:\n  initial_storage: 0\n  s_min: 0\n"
        "series:\n  inflow: [1, 2]\n"
    )
    with pytest.raises(ValidationError, match="series.demand, reservoir.s_max"):
        DataLoader.load_problem(config_path)


def test_unsupported_config_format(tmp_path):
    path = tmp_path / "config.txt"
    path.write_text("")
    with pytest.raises(ValueError, match="Unsupported config format"):
        DataLoader.load_config(path)


def test_csv_loader_requires_demand():
    df = pd.DataFrame({"inflow": [1, 2]})
    with pytest.raises(ValueError, match="'demand'"):
        CSVDataLoader.from_dataframe(df)


def test_csv_loader_numbers_periods_without_month_column():
    series = CSVDataLoader.from_dataframe(pd.DataFrame({"inflow": [1, 2], "demand": [3, 4]}))
    assert series.months == ["1", "2"]
    assert series.s_min is None
    assert series.n_periods == 2


def test_csv_problem(tmp_path):
    csv_path = tmp_path / "data.csv"
    create_sample_csv(csv_path)

    problem = DataLoader.load_csv_problem(csv_path, initial_storage=500)
    assert problem.name == "data"
    assert problem.T == 12
    assert problem.months[0] == "Jan"
    assert problem.constraints.s_min[0] == 2824.55


def test_save_and_load_results(mahaweli_problem, tmp_path):
    optimizer = ReleaseOptimizer(mahaweli_problem)
    results = optimizer.optimize()

    csv_path = tmp_path / "results.csv"
    json_path = tmp_path / "results.json"
    optimizer.save_results(csv_path)
    optimizer.save_results(json_path, format="json")

    for path in (csv_path, json_path):
        df = DataWriter.load_results(path)
        assert list(df.index) == mahaweli_problem.months
        assert list(df.columns) == ["release", "storage", "deviation_positive",
                                    "deviation_negative", "demand"]
        assert df["release"].sum() == pytest.approx(results.release.sum())

    meta = json.loads(csv_path.with_suffix(".meta.json").read_text())
    assert meta["solver"] == "highs"
    assert meta["totals"]["unmet_demand"] == pytest.approx(results.unmet_demand)


def test_unsupported_results_format(mahaweli_problem, tmp_path):
    optimizer = ReleaseOptimizer(mahaweli_problem)
    optimizer.optimize()
    with pytest.raises(ValueError, match="Unsupported format"):
        optimizer.save_results(tmp_path / "results.xlsx", format="xlsx")


def test_validation_report(mahaweli_problem, tmp_path):
    output = tmp_path / "report.txt"
    report = generate_validation_report(mahaweli_problem, output)

    assert "✓ VALID" in report
    assert "Periods: 12" in report
    assert output.read_text(encoding="utf-8") == report
