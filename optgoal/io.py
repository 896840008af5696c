# optgoal/io.py
"""
I/O utilities for loading reservoir problems and saving optimization results.
Supports YAML, JSON, and CSV formats with validation.
"""

import json
import yaml
import pandas as pd
import numpy as np
from pathlib import Path
from typing import Dict, Any, Optional, Union, Sequence
import logging

from .schema import ReservoirProblem, ReservoirConstraints, GoalWeights, SolverSettings
from .data_sources.csv_loader import CSVDataLoader, load_reservoir_data
from .utils.validators import ValidationError, validate_problem

logger = logging.getLogger(__name__)


class DataLoader:
    """Loads a ReservoirProblem from configuration and time series files."""

    @staticmethod
    def load_problem(config_path: Union[str, Path],
                     timeseries_path: Optional[Union[str, Path]] = None,
                     validate: bool = True) -> ReservoirProblem:
        """
        Load ReservoirProblem from configuration and time series files.

        Args:
            config_path: Path to configuration file (YAML/JSON)
            timeseries_path: Optional path to time series data (CSV)
            validate: Whether to validate the loaded data

        Returns:
            ReservoirProblem ready for optimization
        """
        config = DataLoader.load_config(config_path)

        # Load time series if provided separately
        if timeseries_path:
            timeseries = CSVDataLoader.load_from_file(timeseries_path)
            config = DataLoader._merge_timeseries(config, timeseries)

        problem = DataLoader.config_to_problem(config)

        if validate:
            validate_problem(problem, strict=True)
            logger.info(f"Data validation successful for {Path(config_path).name}")

        return problem

    @staticmethod
    def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
        """Read a YAML or JSON configuration file."""
        config_path = Path(config_path)

        if config_path.suffix in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        elif config_path.suffix == '.json':
            with open(config_path, 'r') as f:
                config = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {config_path.suffix}")

        return config or {}

    @staticmethod
    def load_csv_problem(csv_path: Union[str, Path],
                         initial_storage: float = 0.0,
                         goals: Optional[GoalWeights] = None) -> ReservoirProblem:
        """Build a problem from a CSV that carries all series, including storage bounds."""
        config = {'reservoir': {'initial_storage': initial_storage}}
        if goals is not None:
            config['goals'] = goals.model_dump()
        timeseries = CSVDataLoader.load_from_file(csv_path)
        config = DataLoader._merge_timeseries(config, timeseries)
        config.setdefault('name', Path(csv_path).stem)
        return DataLoader.config_to_problem(config)

    @staticmethod
    def _merge_timeseries(config: Dict, timeseries) -> Dict:
        """Merge time series data into configuration."""
        column_mapping = {
            'inflow': 'series.inflow',
            'demand': 'series.demand',
            's_min': 'reservoir.s_min',
            's_max': 'reservoir.s_max',
            'r_max': 'reservoir.r_max',
        }

        for attr, path in column_mapping.items():
            values = getattr(timeseries, attr)
            if values is not None:
                DataLoader._set_nested(config, path, values.tolist())

        DataLoader._set_nested(config, 'series.months', list(timeseries.months))
        return config

    @staticmethod
    def _set_nested(dict_obj: Dict, path: str, value: Any):
        """Set nested dictionary value using dot notation."""
        keys = path.split('.')
        for key in keys[:-1]:
            dict_obj = dict_obj.setdefault(key, {})
        dict_obj[keys[-1]] = value

    @staticmethod
    def config_to_problem(config: Dict) -> ReservoirProblem:
        """Convert configuration dictionary to ReservoirProblem."""
        if 'series' not in config or 'reservoir' not in config:
            raise ValueError("Configuration requires 'series' and 'reservoir' sections")

        series_cfg = config['series']
        reservoir_cfg = config['reservoir']

        missing = [f"series.{key}" for key in ('inflow', 'demand') if key not in series_cfg]
        missing += [f"reservoir.{key}" for key in ('s_min', 's_max') if key not in reservoir_cfg]
        if missing:
            raise ValidationError(
                f"Missing required values: {', '.join(missing)} "
                "(set them in the configuration or supply the matching CSV columns)"
            )

        inflow = list(series_cfg['inflow'])
        T = len(inflow)

        # Scalars broadcast over the horizon
        def broadcast(val):
            if val is None:
                return None
            if np.isscalar(val):
                return [float(val)] * T
            return list(val)

        constraints = ReservoirConstraints(
            initial_storage=reservoir_cfg.get('initial_storage', 0.0),
            s_min=broadcast(reservoir_cfg['s_min']),
            s_max=broadcast(reservoir_cfg['s_max']),
            r_max=broadcast(reservoir_cfg.get('r_max')),
        )

        return ReservoirProblem(
            name=config.get('name', 'reservoir'),
            inflow=inflow,
            demand=broadcast(series_cfg['demand']),
            months=series_cfg.get('months'),
            constraints=constraints,
            goals=GoalWeights(**config.get('goals', {})),
            solver=SolverSettings(**config.get('solver', {})),
        )

    @staticmethod
    def example_problem(goals: Optional[GoalWeights] = None) -> ReservoirProblem:
        """The bundled 12-month Mahaweli example with 500 m³ initial storage."""
        df = load_reservoir_data()
        return ReservoirProblem(
            name="mahaweli",
            inflow=df['Inflow'],
            demand=df['Demand'],
            months=df['Month'],
            constraints=ReservoirConstraints(
                initial_storage=500,
                s_min=df['S_min'],
                s_max=df['S_max'],
            ),
            goals=goals or GoalWeights(),
        )


class DataWriter:
    """Write optimization results to various formats."""

    @staticmethod
    def save_results(results, output_path: Union[str, Path],
                     format: str = 'csv', include_metadata: bool = True,
                     demand: Optional[Sequence[float]] = None,
                     months: Optional[Sequence[str]] = None):
        """
        Save optimization results to file.

        Args:
            results: SolveResult object
            output_path: Output file path
            format: Output format ('csv', 'json')
            include_metadata: Whether to include metadata
            demand: Optional demand series stored next to the release
            months: Optional period labels for the index
        """
        output_path = Path(output_path)

        df = DataWriter._results_to_dataframe(results, demand, months)

        if format == 'csv':
            df.to_csv(output_path)

            # Save metadata separately if requested
            if include_metadata:
                meta_path = output_path.with_suffix('.meta.json')
                DataWriter._save_metadata(results, meta_path)

        elif format == 'json':
            output = {
                'data': df.reset_index().to_dict('records'),
                'metadata': DataWriter._get_metadata_dict(results) if include_metadata else {}
            }
            with open(output_path, 'w') as f:
                json.dump(output, f, indent=2, default=str)
        else:
            raise ValueError(f"Unsupported format: {format}")

        logger.info(f"Results saved to {output_path}")

    @staticmethod
    def _results_to_dataframe(results, demand=None, months=None) -> pd.DataFrame:
        """Convert SolveResult to DataFrame."""
        df = results.to_dataframe(months)
        if demand is not None:
            df['demand'] = np.asarray(demand, dtype=float)
        return df

    @staticmethod
    def _get_metadata_dict(results) -> Dict:
        """Extract metadata dictionary from results."""
        return {
            'objective_value': results.objective_value,
            'feasible': results.feasible,
            'status': results.status,
            'solver': results.solver,
            'solve_time': results.solve_time,
            'totals': {
                'release': float(np.sum(results.release)),
                'unmet_demand': results.unmet_demand,
                'surplus_release': results.surplus_release,
                'final_storage': float(results.storage[-1]),
            }
        }

    @staticmethod
    def _save_metadata(results, path: Path):
        """Save metadata to JSON file."""
        metadata = DataWriter._get_metadata_dict(results)
        with open(path, 'w') as f:
            json.dump(metadata, f, indent=2, default=str)

    @staticmethod
    def load_results(path: Union[str, Path]) -> pd.DataFrame:
        """Read a results file written by save_results."""
        path = Path(path)
        if path.suffix == '.csv':
            return pd.read_csv(path, index_col=0)
        elif path.suffix == '.json':
            with open(path, 'r') as f:
                payload = json.load(f)
            return pd.DataFrame(payload['data']).set_index('period')
        raise ValueError(f"Unsupported results format: {path.suffix}")


def generate_template(output_path: Union[str, Path], shortfall_only: bool = False):
    """
    Generate a template configuration file.

    Args:
        output_path: Where to save the template
        shortfall_only: Penalize only releases below demand
    """
    df = load_reservoir_data()

    template = {
        'name': 'mahaweli',
        'reservoir': {
            'initial_storage': 500,
            's_min': float(df['S_min'].iloc[0]),
            's_max': float(df['S_max'].iloc[0]),
        },
        'series': {
            'months': df['Month'].tolist(),
            'inflow': df['Inflow'].astype(float).tolist(),
            'demand': df['Demand'].astype(float).tolist(),
        },
        'goals': {
            'surplus': 0.0 if shortfall_only else 1.0,
            'shortfall': 1.0,
        },
        'solver': {
            'name': 'highs',
            'time_limit': 60,
        },
    }

    output_path = Path(output_path)
    with open(output_path, 'w') as f:
        yaml.dump(template, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Template saved to {output_path}")
