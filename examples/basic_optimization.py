# examples/basic_optimization.py
"""Example of using the reservoir release optimization API"""

import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from optgoal import (
    ReservoirProblem, ReservoirConstraints, GoalWeights, ReleaseOptimizer,
    load_reservoir_data,
)


def main():
    """Run the Mahaweli example with both goal weightings"""

    print("=== Reservoir Release Goal Programming Example ===\n")

    data = load_reservoir_data()
    INITIAL_STORAGE = 500

    print(f"Horizon: {len(data)} months")
    print(f"Total inflow: {data['Inflow'].sum():,.0f} m³")
    print(f"Total demand: {data['Demand'].sum():,.2f} m³\n")

    for label, goals in [("penalize surplus and shortfall", GoalWeights()),
                         ("penalize shortfall only", GoalWeights.shortfall_only())]:
        problem = ReservoirProblem(
            name="mahaweli",
            inflow=data['Inflow'],
            demand=data['Demand'],
            months=data['Month'],
            constraints=ReservoirConstraints(
                initial_storage=INITIAL_STORAGE,
                s_min=data['S_min'],
                s_max=data['S_max'],
            ),
            goals=goals,
        )

        optimizer = ReleaseOptimizer(problem)
        results = optimizer.optimize()
        kpis = optimizer.get_kpis()

        print(f"--- Goals: {label} ---")
        print(f"Objective:          {results.objective_value:12,.2f}")
        print(f"Unmet demand:       {kpis['unmet_demand']:12,.2f}")
        print(f"Surplus release:    {kpis['surplus_release']:12,.2f}")
        print(f"Time reliability:   {kpis['time_reliability']:12.1%}")
        print(f"Volume reliability: {kpis['volume_reliability']:12.1%}\n")

    # Monthly schedule of the last run
    print("Month | Inflow  | Demand   | Release  | Storage")
    print("------|---------|----------|----------|---------")
    for m, month in enumerate(problem.months):
        print(f" {month:4s} | {problem.inflow[m]:7.0f} | {problem.demand[m]:8.2f} | "
              f"{results.release[m]:8.2f} | {results.storage[m]:8.2f}")

    print("\nSaving results...")
    optimizer.save_results("example_results.csv")

    optimizer.plot_release("example_release.png", show=False)
    optimizer.plot_storage("example_storage.png", show=False)
    print("Plots saved to example_release.png and example_storage.png")

    print("\n✅ Example completed successfully!")


if __name__ == "__main__":
    main()
