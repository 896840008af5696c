"""
Time-series plots for release schedules.

Every function returns the matplotlib Figure so it can be embedded in
reports; pass ``show=True`` for an interactive window or ``save_path`` to
write an image.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np

from .validators import ValidationError, as_float_array

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                       "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def time_labels(n: int, months: Optional[Sequence[str]] = None, what: str = "release") -> list:
    """
    Axis labels for an n-period series.

    Month abbreviations are used when no labels are given and n == 12,
    otherwise the period numbers 1..n.
    """
    if months is None and n == 12:
        months = MONTH_ABBREVIATIONS
    if months is not None:
        if len(months) != n:
            raise ValidationError(f"Length of 'months' must match length of {what}.")
        return [str(m) for m in months]
    return [str(t) for t in range(1, n + 1)]


def _finish(fig, save_path: Optional[Union[str, Path]], show: bool):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
        logger.info(f"Plot saved to {save_path}")
    if show:
        plt.show()
    return fig


def plot_release(release,
                 months: Optional[Sequence[str]] = None,
                 ax=None,
                 save_path: Optional[Union[str, Path]] = None,
                 show: bool = False):
    """
    Plot release over time.

    Args:
        release: Release amounts over time
        months: Optional labels, one per period
        ax: Optional axes to draw on
        save_path: Optional path to save figure
        show: Whether to display the plot

    Returns:
        Matplotlib figure
    """
    release = as_float_array(release, "release")
    labels = time_labels(len(release), months, "'release'")
    time = np.arange(1, len(release) + 1)

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    ax.plot(time, release, color="red", linewidth=2, label="Release")
    ax.scatter(time, release, color="red", zorder=3)
    ax.set_xticks(time)
    ax.set_xticklabels(labels)
    ax.set_title("Release Over Time")
    ax.set_xlabel("Month")
    ax.set_ylabel("Release Volume (Cubic meters)")
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, show)


def plot_release_vs_demand(release,
                           demand,
                           months: Optional[Sequence[str]] = None,
                           ax=None,
                           save_path: Optional[Union[str, Path]] = None,
                           show: bool = False):
    """
    Plot release and demand on the same axes for comparison.

    Args:
        release: Release amounts over time
        demand: Demand amounts over time
        months: Optional labels, one per period
        ax: Optional axes to draw on
        save_path: Optional path to save figure
        show: Whether to display the plot

    Returns:
        Matplotlib figure
    """
    release = as_float_array(release, "release")
    demand = as_float_array(demand, "demand")
    if len(release) != len(demand):
        raise ValidationError("release and demand must be of the same length.")

    labels = time_labels(len(release), months, "'release' and 'demand'")
    time = np.arange(1, len(release) + 1)

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    for name, values, color in [("Release", release, "tab:red"), ("Demand", demand, "tab:blue")]:
        ax.plot(time, values, color=color, linewidth=2, label=name)
        ax.scatter(time, values, color=color, zorder=3)

    ax.set_xticks(time)
    ax.set_xticklabels(labels)
    ax.set_title("Release vs. Demand Over Time")
    ax.set_xlabel("Month")
    ax.set_ylabel("Volume (Cubic meters)")
    ax.legend(title="Legend", loc="upper right")
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, show)


def plot_storage(storage,
                 s_min,
                 s_max,
                 months: Optional[Sequence[str]] = None,
                 ax=None,
                 save_path: Optional[Union[str, Path]] = None,
                 show: bool = False):
    """Storage trajectory with its lower and upper bounds."""
    storage = as_float_array(storage, "storage")
    s_min = as_float_array(s_min, "s_min")
    s_max = as_float_array(s_max, "s_max")
    if not len(storage) == len(s_min) == len(s_max):
        raise ValidationError("storage, s_min and s_max must be of the same length.")

    labels = time_labels(len(storage), months, "'storage'")
    time = np.arange(1, len(storage) + 1)

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    ax.plot(time, storage, color="purple", linewidth=2, marker="o", label="Storage")
    ax.fill_between(time, s_min, s_max, color="grey", alpha=0.15, label="Storage bounds")
    ax.step(time, s_min, where="mid", ls="--", color="green", label="S_min")
    ax.step(time, s_max, where="mid", ls="--", color="red", label="S_max")
    ax.set_xticks(time)
    ax.set_xticklabels(labels)
    ax.set_title("Storage Over Time")
    ax.set_xlabel("Month")
    ax.set_ylabel("Storage (Cubic meters)")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, show)
