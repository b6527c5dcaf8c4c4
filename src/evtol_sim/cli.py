"""
eVTOL Fleet Simulation - command line entry point.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .data_structures import (
    DEFAULT_LOG_VERBOSITY,
    DEFAULT_NUM_CHARGERS,
    DEFAULT_NUM_VEHICLES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SIM_HOURS,
    DEFAULT_TIME_STEP_SECONDS,
    SimulationConfig,
)
from .report import format_report, write_report
from .simulation import SimulationLoop
from .utils import format_progress_bar


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. `-h` is hours, so help is `--help` only."""
    parser = argparse.ArgumentParser(
        prog="evtol-sim",
        description="eVTOL fleet simulation with shared charging stations",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        "--help", action="help",
        help="Show this help message and exit"
    )
    parser.add_argument(
        "-v", "--vehicles", type=int, default=DEFAULT_NUM_VEHICLES,
        help="Number of vehicles"
    )
    parser.add_argument(
        "-h", "--hours", type=float, default=DEFAULT_SIM_HOURS,
        help="Simulation duration in hours, decimal values supported"
    )
    parser.add_argument(
        "-c", "--chargers", type=int, default=DEFAULT_NUM_CHARGERS,
        help="Number of charging stations"
    )
    parser.add_argument(
        "-t", "--timestep", type=float, default=DEFAULT_TIME_STEP_SECONDS,
        help="Time step in seconds"
    )
    parser.add_argument(
        "-l", "--log-verbosity", type=int, default=DEFAULT_LOG_VERBOSITY,
        choices=[1, 2],
        help="Report log verbosity; 2 adds per-vehicle lines for every step"
    )
    parser.add_argument(
        "-e", "--equal", action="store_true",
        help="Use equal (round robin) vehicle type distribution instead of random"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for a reproducible run"
    )
    parser.add_argument(
        "--output-dir", type=str, default=DEFAULT_OUTPUT_DIR,
        help="Directory for report files"
    )
    parser.add_argument(
        "--vehicle-table", action="store_true",
        help="Include the per-vehicle table in the report"
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Also export cohort statistics and snapshots as JSON"
    )
    parser.add_argument(
        "--csv", action="store_true",
        help="Also export per-step charging metrics as CSV"
    )
    parser.add_argument(
        "--plot", action="store_true",
        help="Save a cohort comparison chart (PNG)"
    )
    parser.add_argument(
        "--no-progress", action="store_true",
        help="Do not print the progress bar"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        num_vehicles=args.vehicles,
        sim_hours=args.hours,
        num_chargers=args.chargers,
        time_step_seconds=args.timestep,
        randomize_vehicles=not args.equal,
        seed=args.seed,
        log_verbosity=args.log_verbosity,
        output_dir=args.output_dir,
        enable_logging=False,
    )


def configure_logging(output_dir: str, log_file: str, verbosity: int) -> List[logging.Handler]:
    """Console at INFO; the run log file also gets DEBUG detail at verbosity 2."""
    os.makedirs(output_dir, exist_ok=True)
    fmt = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbosity > 1 else logging.INFO)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(fmt)
    root.addHandler(console)

    file_handler = logging.FileHandler(os.path.join(output_dir, log_file))
    file_handler.setLevel(logging.DEBUG if verbosity > 1 else logging.INFO)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)
    return [console, file_handler]


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = config_from_args(args)
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    handlers = configure_logging(config.output_dir, "evtol_sim.log", config.log_verbosity)
    try:
        return _run(args, config)
    finally:
        root = logging.getLogger()
        for handler in handlers:
            root.removeHandler(handler)
            handler.close()


def _run(args: argparse.Namespace, config: SimulationConfig) -> int:
    def show_progress(current: float, total: float) -> None:
        sys.stdout.write("\r" + format_progress_bar(current, total))
        sys.stdout.flush()

    loop = SimulationLoop(config)
    report = loop.run(progress_callback=None if args.no_progress else show_progress)
    if not args.no_progress:
        sys.stdout.write("\n")

    print(format_report(report))
    path = write_report(report, include_vehicles=args.vehicle_table)

    if args.json:
        json_path = os.path.splitext(path)[0] + ".json"
        loop.aggregator.export_to_json(json_path)

    if args.csv:
        csv_path = os.path.splitext(path)[0] + "_charging.csv"
        loop.scheduler.metrics_dataframe().to_csv(csv_path, index=False)
        logger.info(f"Charging metrics written to {csv_path}")

    if args.plot:
        from .visualization import plot_cohort_summary
        plot_cohort_summary(report.cohorts, os.path.splitext(path)[0] + ".png")

    return 0


if __name__ == "__main__":
    sys.exit(main())
