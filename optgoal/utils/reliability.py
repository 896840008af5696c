"""
Reliability metrics for a release schedule against demand.
"""

import numpy as np
import pandas as pd

from .validators import ValidationError, as_float_array


def assess_reliability(release, demand) -> pd.DataFrame:
    """
    Assess the reliability of a release strategy against demand.

    * time-based reliability: share of periods where release meets demand
    * volume-based reliability: total release over total demand

    Args:
        release: Release amounts over time
        demand: Demand amounts over time

    Returns:
        One-row DataFrame with ``time_reliability`` and ``volume_reliability``

    Example:
        >>> assess_reliability([10, 10], [10, 20])
           time_reliability  volume_reliability
        0               0.5            0.666667
    """
    release = as_float_array(release, "release")
    demand = as_float_array(demand, "demand")

    if len(release) != len(demand):
        raise ValidationError("Release and demand vectors must be of the same length.")
    T = len(release)
    if T == 0:
        raise ValidationError("Release and demand vectors must not be empty.")

    total_demand = np.sum(demand)
    if total_demand == 0:
        raise ValidationError("Total demand is zero; volume reliability is undefined.")

    time_reliability = np.sum(release >= demand) / T
    volume_reliability = np.sum(release) / total_demand

    return pd.DataFrame({
        "time_reliability": [float(time_reliability)],
        "volume_reliability": [float(volume_reliability)],
    })
