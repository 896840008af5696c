# tests/test_plotting.py
"""Release and storage plots"""

import matplotlib.pyplot as plt
import pytest

from optgoal import ValidationError
from optgoal.utils import plotting


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_default_month_labels():
    assert plotting.time_labels(12) == plotting.MONTH_ABBREVIATIONS
    assert plotting.time_labels(3) == ["1", "2", "3"]
    assert plotting.time_labels(2, ["Q1", "Q2"]) == ["Q1", "Q2"]


def test_plot_release_labels():
    fig = plotting.plot_release(range(12))
    ax = fig.axes[0]

    assert ax.get_title() == "Release Over Time"
    assert [t.get_text() for t in ax.get_xticklabels()] == plotting.MONTH_ABBREVIATIONS


def test_plot_release_label_mismatch():
    with pytest.raises(ValidationError, match="Length of 'months' must match"):
        plotting.plot_release([1, 2, 3], months=["Jan", "Feb"])


def test_plot_release_non_numeric():
    with pytest.raises(ValidationError, match="numeric"):
        plotting.plot_release(["a", "b"])


def test_plot_release_vs_demand(tmp_path):
    output = tmp_path / "release.png"
    fig = plotting.plot_release_vs_demand([1, 2, 3], [2, 2, 2], months=["a", "b", "c"],
                                          save_path=output)

    assert output.exists()
    ax = fig.axes[0]
    assert ax.get_title() == "Release vs. Demand Over Time"
    assert [line.get_label() for line in ax.get_lines()] == ["Release", "Demand"]


def test_plot_release_vs_demand_mismatch():
    with pytest.raises(ValidationError, match="same length"):
        plotting.plot_release_vs_demand([1, 2, 3], [1, 2])


def test_plot_storage_on_given_axes():
    fig, ax = plt.subplots()
    returned = plotting.plot_storage([5, 6], [1, 1], [10, 10], ax=ax)

    assert returned is fig
    assert ax.get_title() == "Storage Over Time"


def test_optimizer_plots(mahaweli_problem, tmp_path):
    from optgoal import ReleaseOptimizer

    optimizer = ReleaseOptimizer(mahaweli_problem)
    optimizer.optimize()

    optimizer.plot_release(tmp_path / "release.png", show=False)
    optimizer.plot_storage(tmp_path / "storage.png", show=False)
    assert (tmp_path / "release.png").exists()
    assert (tmp_path / "storage.png").exists()
