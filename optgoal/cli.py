#!/usr/bin/env python3
"""
Command-line interface for reservoir release optimization.
Provides convenient commands for common operations.
"""

import click
import json
import logging
import sys
from pathlib import Path

from optgoal import ReleaseOptimizer, __version__
from optgoal.io import DataLoader, DataWriter, generate_template
from optgoal.data_sources.csv_loader import create_sample_csv
from optgoal.schema import GoalWeights
from optgoal.optimization.registry import describe_mapping
from optgoal.optimization.solvers import InfeasibleModelError, SolverUnavailableError
from optgoal.utils.validators import ValidationError, validate_problem, generate_validation_report
from optgoal.utils.reliability import assess_reliability

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _load_problem(input_file, csv_file=None, initial_storage=None):
    """Load a problem from a YAML/JSON config or a self-contained CSV."""
    input_path = Path(input_file)
    if input_path.suffix == '.csv':
        return DataLoader.load_csv_problem(input_path, initial_storage=initial_storage or 0.0)
    elif input_path.suffix in ['.yaml', '.yml', '.json']:
        problem = DataLoader.load_problem(input_path, csv_file, validate=False)
        if initial_storage is not None:
            problem.constraints.initial_storage = initial_storage
        return problem
    raise ValueError(f"Unsupported file type: {input_path.suffix}")


@click.group()
@click.version_option(version=__version__, prog_name="optgoal")
def cli():
    """OptGoal - reservoir release scheduling with goal programming."""
    pass


@cli.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--csv', 'csv_file', type=click.Path(exists=True),
              help='CSV file with time series data')
@click.option('--output', '-o', type=click.Path(),
              default='results.csv', help='Output file for results')
@click.option('--solver', type=click.Choice(['highs', 'gurobi']),
              default=None, help='LP solver backend (default: from config)')
@click.option('--time-limit', type=float, default=None,
              help='Maximum solve time in seconds')
@click.option('--initial-storage', type=float, default=None,
              help='Override the initial storage')
@click.option('--shortfall-only', is_flag=True,
              help='Penalize only releases below demand')
@click.option('--plot', 'plot_file', type=click.Path(),
              help='Save a release vs. demand plot to this file')
@click.option('--verbose', '-v', is_flag=True,
              help='Show detailed output')
def optimize(config_file, csv_file, output, solver, time_limit, initial_storage,
             shortfall_only, plot_file, verbose):
    """
    Run release optimization from a configuration or CSV file.

    Example:
        optgoal optimize config.yaml --csv data.csv -o results.csv
    """
    try:
        if verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        click.echo(f"Loading problem from {config_file}...")
        problem = _load_problem(config_file, csv_file, initial_storage)
        if shortfall_only:
            problem.goals = GoalWeights.shortfall_only()

        optimizer = ReleaseOptimizer(problem)
        if verbose:
            click.echo(optimizer.build().describe())

        click.echo("Running optimization...")
        results = optimizer.optimize(solver=solver, time_limit=time_limit, verbose=verbose)

        click.echo(f"Saving results to {output}...")
        fmt = 'json' if Path(output).suffix == '.json' else 'csv'
        optimizer.save_results(output, format=fmt)

        click.echo("\n" + "=" * 50)
        click.echo("OPTIMIZATION RESULTS")
        click.echo("=" * 50)
        click.echo(f"Status: {results.status} ({results.solver})")
        click.echo(f"Objective: {results.objective_value:,.2f}")
        click.echo(f"Solve Time: {results.solve_time:.3f}s")

        kpis = optimizer.get_kpis()
        click.echo("\nKey Performance Indicators:")
        click.echo(f"  Time reliability: {kpis['time_reliability']:.1%}")
        click.echo(f"  Volume reliability: {kpis['volume_reliability']:.1%}")
        click.echo(f"  Unmet demand: {kpis['unmet_demand']:,.2f}")
        click.echo(f"  Surplus release: {kpis['surplus_release']:,.2f}")
        click.echo(f"  Storage range: {kpis['min_storage']:,.2f} - {kpis['max_storage']:,.2f}")

        if plot_file:
            optimizer.plot_release(save_path=plot_file, show=False)
            click.echo(f"✓ Plot saved to {plot_file}")

        click.echo(f"\n✓ Results saved to {output}")

    except (ValidationError, InfeasibleModelError, SolverUnavailableError, ValueError) as e:
        click.echo(f"✗ Optimization failed: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--csv', 'csv_file', type=click.Path(exists=True),
              help='CSV file with time series data')
@click.option('--initial-storage', type=float, default=None,
              help='Initial storage (CSV inputs default to 0)')
@click.option('--report', '-r', type=click.Path(),
              help='Save validation report to file')
@click.option('--strict/--no-strict', default=True,
              help='Fail on validation errors')
def validate(input_file, csv_file, initial_storage, report, strict):
    """
    Validate input data for release optimization.

    Example:
        optgoal validate data.csv --initial-storage 500 --report validation.txt
    """
    try:
        click.echo(f"Loading data from {input_file}...")
        problem = _load_problem(input_file, csv_file, initial_storage)
        click.echo(f"Loaded {problem.T} periods")

        click.echo("Running validation...")
        is_valid, errors, warnings = validate_problem(problem, strict=False)

        if errors:
            click.echo(f"\n✗ Found {len(errors)} errors:", err=True)
            for error in errors:
                click.echo(f"  - {error}", err=True)

        if warnings:
            click.echo(f"\n⚠ Found {len(warnings)} warnings:")
            for warning in warnings:
                click.echo(f"  - {warning}")

        if is_valid:
            click.echo("\n✓ Data validation passed")
        else:
            click.echo("\n✗ Data validation failed", err=True)

        if report:
            click.echo("\nGenerating validation report...")
            generate_validation_report(problem, report)
            click.echo(f"Report saved to {report}")

        if strict and not is_valid:
            sys.exit(1)

    except ValueError as e:
        click.echo(f"✗ Validation failed: {e}", err=True)
        sys.exit(1)


@cli.command('generate-template')
@click.option('--type', 'template_type',
              type=click.Choice(['config', 'csv', 'both']),
              default='both', help='Type of template to generate')
@click.option('--output-dir', '-o', type=click.Path(),
              default='.', help='Output directory')
@click.option('--shortfall-only', is_flag=True,
              help='Template penalizes only releases below demand')
def generate_template_cmd(template_type, output_dir, shortfall_only):
    """
    Generate template configuration and data files.

    Example:
        optgoal generate-template --type both -o templates/
    """
    try:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        if template_type in ['config', 'both']:
            config_path = output_path / 'config_template.yaml'
            click.echo("Generating configuration template...")
            generate_template(config_path, shortfall_only=shortfall_only)
            click.echo(f"✓ Config template saved to {config_path}")

        if template_type in ['csv', 'both']:
            csv_path = output_path / 'data_template.csv'
            click.echo("Generating CSV template...")
            create_sample_csv(csv_path)
            click.echo(f"✓ CSV template saved to {csv_path}")

        click.echo("\nTemplates generated successfully!")
        click.echo("Edit the templates with your data and run:")
        click.echo(f"  optgoal optimize {output_path}/config_template.yaml "
                   f"--csv {output_path}/data_template.csv")

    except OSError as e:
        click.echo(f"✗ Template generation failed: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('results_file', type=click.Path(exists=True))
@click.option('--format', 'output_format',
              type=click.Choice(['summary', 'json']),
              default='summary', help='Output format')
def analyze(results_file, output_format):
    """
    Analyze optimization results: reliability and totals.

    Example:
        optgoal analyze results.csv --format json
    """
    try:
        df = DataWriter.load_results(results_file)
        if 'demand' not in df.columns:
            raise ValueError("Results file has no 'demand' column")

        reliability = assess_reliability(df['release'], df['demand']).iloc[0]
        stats = {
            'periods': len(df),
            'time_reliability': float(reliability['time_reliability']),
            'volume_reliability': float(reliability['volume_reliability']),
            'total_release': float(df['release'].sum()),
            'total_demand': float(df['demand'].sum()),
            'unmet_demand': float(df['deviation_negative'].sum()),
            'surplus_release': float(df['deviation_positive'].sum()),
            'min_storage': float(df['storage'].min()),
            'max_storage': float(df['storage'].max()),
        }

        if output_format == 'json':
            click.echo(json.dumps(stats, indent=2))
        else:
            click.echo("\n" + "=" * 50)
            click.echo("RESULTS SUMMARY")
            click.echo("=" * 50)
            for key, value in stats.items():
                click.echo(f"{key}: {value:.3f}" if isinstance(value, float)
                           else f"{key}: {value}")

    except (ValueError, KeyError) as e:
        click.echo(f"✗ Analysis failed: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('results_file', type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(), required=True,
              help='Image file to write')
@click.option('--kind', type=click.Choice(['release', 'release-vs-demand']),
              default='release-vs-demand', help='Which chart to draw')
def plot(results_file, output, kind):
    """
    Plot release (and demand) from a results file.

    Example:
        optgoal plot results.csv -o release.png
    """
    from optgoal.utils import plotting

    try:
        df = DataWriter.load_results(results_file)
        months = [str(m) for m in df.index]

        if kind == 'release':
            plotting.plot_release(df['release'], months=months, save_path=output)
        else:
            if 'demand' not in df.columns:
                raise ValueError("Results file has no 'demand' column")
            plotting.plot_release_vs_demand(df['release'], df['demand'], months=months,
                                            save_path=output)
        click.echo(f"✓ Plot saved to {output}")

    except (ValueError, KeyError) as e:
        click.echo(f"✗ Plotting failed: {e}", err=True)
        sys.exit(1)


@cli.command()
def notation():
    """Print the goal-programming model notation."""
    click.echo(describe_mapping())


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
