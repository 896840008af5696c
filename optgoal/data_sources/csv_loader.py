"""
CSV Data Loader for reservoir release optimization.
Handles loading and validation of monthly time series from CSV files.
"""

import pandas as pd
import numpy as np
from pathlib import Path
from typing import List, Optional, Union
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass
class ReservoirTimeSeries:
    """Container for validated reservoir time series."""

    # Core time series
    months: List[str]
    inflow: np.ndarray
    demand: np.ndarray

    # Storage bounds (may come from the configuration instead)
    s_min: Optional[np.ndarray] = None
    s_max: Optional[np.ndarray] = None
    r_max: Optional[np.ndarray] = None

    def __post_init__(self):
        """Validate data consistency after initialization."""
        self._validate_lengths()
        self._validate_values()

    def _validate_lengths(self):
        """Ensure all arrays have consistent length."""
        n = len(self.months)

        for name in ("inflow", "demand", "s_min", "s_max", "r_max"):
            arr = getattr(self, name)
            if arr is not None and len(arr) != n:
                raise ValueError(f"{name} length {len(arr)} != months length {n}")

    def _validate_values(self):
        """Validate data ranges and values."""
        for name in ("inflow", "demand", "s_min", "s_max", "r_max"):
            arr = getattr(self, name)
            if arr is not None and np.any(np.isnan(arr)):
                raise ValueError(f"{name} contains NaN values")

        if np.any(self.inflow < 0):
            logger.warning("Negative inflow detected - treating as net loss")

    @property
    def n_periods(self) -> int:
        """Number of periods in the data."""
        return len(self.months)


class CSVDataLoader:
    """Load and process reservoir time series from CSV files."""

    # Accepted column names (compared lower-case, spaces as underscores)
    COLUMN_MAPPINGS = {
        # Required columns
        'inflow': ['inflow', 'inflows', 'inflow_m3', 'q_in'],
        'demand': ['demand', 'demand_m3', 'target', 'water_demand'],

        # Optional columns
        'month': ['month', 'period', 'date', 'time'],
        's_min': ['s_min', 'smin', 'storage_min', 'min_storage'],
        's_max': ['s_max', 'smax', 'storage_max', 'max_storage'],
        'r_max': ['r_max', 'rmax', 'release_max', 'max_release'],
    }

    @classmethod
    def load_from_file(
        cls,
        filepath: Union[str, Path],
        **kwargs
    ) -> ReservoirTimeSeries:
        """
        Load reservoir time series from a single CSV file.

        Args:
            filepath: Path to CSV file
            **kwargs: Additional pandas.read_csv arguments

        Returns:
            ReservoirTimeSeries object with validated data
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"CSV file not found: {filepath}")

        logger.info(f"Loading time series from {filepath}")

        df = pd.read_csv(filepath, **kwargs)
        return cls.from_dataframe(df)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> ReservoirTimeSeries:
        """Extract reservoir series from a DataFrame using the column mappings."""
        month_col = cls._find_column(df, 'month')
        if month_col is not None:
            months = [str(m) for m in df[month_col]]
        else:
            months = [str(t) for t in range(1, len(df) + 1)]

        return ReservoirTimeSeries(
            months=months,
            inflow=cls._extract_column(df, 'inflow', required=True),
            demand=cls._extract_column(df, 'demand', required=True),
            s_min=cls._extract_column(df, 's_min', required=False),
            s_max=cls._extract_column(df, 's_max', required=False),
            r_max=cls._extract_column(df, 'r_max', required=False),
        )

    @classmethod
    def _find_column(cls, df: pd.DataFrame, column_type: str) -> Optional[str]:
        """Find column by type using mappings."""
        possible_names = cls.COLUMN_MAPPINGS[column_type]

        for col in df.columns:
            normalized = str(col).strip().lower().replace(' ', '_')
            if normalized in possible_names:
                return col

        return None

    @classmethod
    def _extract_column(
        cls,
        df: pd.DataFrame,
        column_type: str,
        required: bool = True
    ) -> Optional[np.ndarray]:
        """Extract a numeric column as a float array."""
        col = cls._find_column(df, column_type)

        if col is None:
            if required:
                raise ValueError(f"Required column '{column_type}' not found in CSV "
                                 f"(accepted names: {cls.COLUMN_MAPPINGS[column_type]})")
            return None

        return pd.to_numeric(df[col], errors='raise').to_numpy(dtype=float)


def load_reservoir_data() -> pd.DataFrame:
    """
    Monthly reservoir inflows, demands and storage limits.

    Twelve months of inflow and demand volumes (cubic meters) with constant
    storage bounds, from the Mahaweli Authority of Sri Lanka.

    Returns:
        DataFrame with columns Month, Inflow, Demand, S_min, S_max
    """
    return pd.read_csv(DATA_DIR / "reservoir_data.csv")


def create_sample_csv(output_path: Union[str, Path]):
    """
    Write the bundled 12-month dataset as a template CSV.

    Args:
        output_path: Where to save the CSV
    """
    output_path = Path(output_path)

    df = load_reservoir_data()
    df.columns = [c.lower() for c in df.columns]
    df.to_csv(output_path, index=False)

    logger.info(f"Sample CSV created: {output_path}")
