"""
Command line interface for pylongleaf.

Examples:
  pylongleaf simulate --hdom0 14 --age0 17 --n0 1200 --final-age 28
  pylongleaf simulate --si 30 --age0 10 --n0 1500 --thin-age 20 --thin-intensity 0.3
  pylongleaf trees plot.csv --area 500 --age0 23 --final-age 32 --output yield.csv
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .exceptions import LongleafError, ValidationError
from .logging_config import setup_logging
from .simulation import Trajectory, simulate
from .stand_input import SimulationParameters, normalize_initial_state
from .tree_data import read_tree_table

console = Console()


def _add_simulation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--si", type=float, help="Site index (m, base age 50)")
    parser.add_argument("--age0", type=float, help="Initial stand age (years)")
    parser.add_argument("--final-age", type=float, help="Final simulation age (default 50)")
    parser.add_argument("--thin-age", type=float, help="Age of a single thinning (years)")
    parser.add_argument("--thin-intensity", type=float,
                        help="Fraction (0-1) of basal area removed by the thinning")
    parser.add_argument("--top-diameter", type=float,
                        help="Top diameter for merchantable volume (cm, default 5)")
    parser.add_argument("--dbh-threshold", type=float,
                        help="Minimum DBH of merchantable trees (cm, default 15)")
    parser.add_argument("--output", type=Path, help="Write the trajectory to a CSV or JSON file")
    parser.add_argument("--format", choices=["csv", "json"], default=None,
                        help="Output format (default: from --output extension, else csv)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every simulated year")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pylongleaf",
        description="Growth and yield simulation for longleaf pine plantations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pylongleaf simulate --hdom0 14 --age0 17 --n0 1200 --final-age 28
  pylongleaf trees plot.csv --area 500 --age0 23 --final-age 32 --output yield.csv
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    stand = subparsers.add_parser("simulate", help="Simulate from stand-level values")
    stand.add_argument("--hdom0", type=float, help="Dominant height at age0 (m)")
    stand.add_argument("--ba0", type=float, help="Basal area at age0 (m2/ha); predicted if omitted")
    stand.add_argument("--n0", type=float, required=True, help="Trees per hectare at age0")
    _add_simulation_arguments(stand)

    trees = subparsers.add_parser("trees", help="Simulate from a plot tree list (CSV)")
    trees.add_argument("path", type=Path, help="CSV with PLOTID, TREEID, DBH, HT columns")
    trees.add_argument("--area", type=float, required=True, help="Plot area (m2)")
    trees.add_argument("--plot-id", help="Plot to use when the file holds several plots")
    trees.add_argument("--method", type=int, choices=[1, 2], default=None,
                       help="Height imputation: 1 parametric, 2 fitted ln(HT) ~ 1/DBH (default 2)")
    _add_simulation_arguments(trees)

    return parser


def _thinning_settings(args) -> dict:
    thinning = args.thin_age is not None or args.thin_intensity is not None
    return {
        'thinning': thinning,
        'thinning_age': args.thin_age,
        'thinning_intensity': args.thin_intensity,
    }


def _parameters_from_args(args) -> SimulationParameters:
    common = dict(
        si=args.si,
        age0=args.age0,
        final_age=args.final_age,
        top_diameter=args.top_diameter,
        dbh_threshold=args.dbh_threshold,
        **_thinning_settings(args),
    )
    if args.command == "simulate":
        return normalize_initial_state('PLOT', hdom0=args.hdom0, ba0=args.ba0, n0=args.n0, **common)

    frame = read_tree_table(args.path)
    if args.plot_id is not None:
        frame = frame[frame['PLOTID'].astype(str) == str(args.plot_id)]
        if frame.empty:
            raise ValidationError(f"Plot {args.plot_id} not found in {args.path}")
    return normalize_initial_state('TREE', tree_data=frame, area=args.area,
                                   height_method=args.method, **common)


def display_initial_state(parameters: SimulationParameters) -> None:
    """Display the normalized initial stand in a panel."""
    state = parameters.initial_state
    lines = [
        f"Age: {state.age:.2f} years    SI: {state.si:.2f} m    HDOM: {state.hdom:.2f} m",
        f"N: {state.n:.0f} trees/ha    BA: {state.ba:.2f} m2/ha    QD: {state.qd:.2f} cm",
        f"SDIR: {state.sdir:.1f}%    VOL OB/IB: {state.vol_ob:.1f} / {state.vol_ib:.1f} m3/ha",
    ]
    plot = parameters.tree_plot
    if plot is not None:
        n_imputed = int(plot.tree_table['HT_IMPUTED'].sum())
        fit = f", r2 = {plot.r2:.3f}" if plot.r2 is not None else ""
        lines.append(f"Trees: {len(plot.tree_table)} ({n_imputed} heights estimated{fit})")
    if parameters.thinning:
        lines.append(f"Thinning at age {parameters.thinning_age:g}: "
                     f"{parameters.thinning_intensity:.0%} of basal area removed")
    console.print(Panel("\n".join(lines), title="Initial stand", expand=False))


def display_trajectory(trajectory: Trajectory) -> None:
    """Display the simulated trajectory as a yield table."""
    table = Table(title="Stand Trajectory", show_header=True, header_style="bold")
    table.add_column("Age", style="cyan", justify="right")
    table.add_column("N", style="green", justify="right")
    table.add_column("BA", style="green", justify="right")
    table.add_column("QD", style="green", justify="right")
    table.add_column("HDOM", style="green", justify="right")
    table.add_column("SDIR", style="magenta", justify="right")
    table.add_column("VOL OB", style="yellow", justify="right")
    table.add_column("VOL IB", style="yellow", justify="right")
    table.add_column("VOLm OB", style="yellow", justify="right")
    table.add_column("VOLm IB", style="yellow", justify="right")

    for state in trajectory:
        age = f"{state.age:g}" + (" [red]T[/red]" if state.thinned else "")
        table.add_row(
            age,
            f"{state.n:.0f}",
            f"{state.ba:.2f}",
            f"{state.qd:.2f}",
            f"{state.hdom:.2f}",
            f"{state.sdir:.1f}",
            f"{state.vol_ob:.1f}",
            f"{state.vol_ib:.1f}",
            f"{state.volm_ob:.1f}",
            f"{state.volm_ib:.1f}",
        )

    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``pylongleaf`` command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        parameters = _parameters_from_args(args)
        display_initial_state(parameters)
        trajectory = simulate(parameters)
    except (LongleafError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    display_trajectory(trajectory)

    if args.output is not None:
        fmt = args.format or ('json' if args.output.suffix.lower() == '.json' else 'csv')
        path = trajectory.export(args.output, format=fmt)
        console.print(f"[green]Trajectory written to {path}[/green]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
