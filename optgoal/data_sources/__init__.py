# optgoal/data_sources/__init__.py
"""
Data source loaders and bundled datasets.
"""

from .csv_loader import CSVDataLoader, ReservoirTimeSeries, create_sample_csv, load_reservoir_data

__all__ = [
    "CSVDataLoader",
    "ReservoirTimeSeries",
    "create_sample_csv",
    "load_reservoir_data",
]
