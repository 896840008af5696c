# examples/csv_example.py
"""Run the optimizer from a CSV time series and a YAML configuration"""

import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from optgoal import ReleaseOptimizer, generate_template
from optgoal.data_sources import create_sample_csv


def main():
    with tempfile.TemporaryDirectory() as tmp:
        tmp = Path(tmp)
        config_path = tmp / "config.yaml"
        csv_path = tmp / "data.csv"

        generate_template(config_path, shortfall_only=True)
        create_sample_csv(csv_path)

        optimizer = ReleaseOptimizer.from_config(config_path, csv_path)
        results = optimizer.optimize()

        print(results.to_dataframe(optimizer.problem.months).round(2))
        print(f"\nUnmet demand: {results.unmet_demand:,.2f} m³")


if __name__ == "__main__":
    main()
