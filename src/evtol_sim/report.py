"""
Text report for a finished simulation run.

The report lists the run inputs, fleet composition, the per-archetype
results table and final status. Tables are rendered with pandas.
"""

import logging
import os
from datetime import datetime
from typing import List, Optional

import pandas as pd

from .data_structures import CohortStatistics
from .simulation import SimulationReport


logger = logging.getLogger(__name__)

SECTION_WIDTH = 110
SUBSECTION_WIDTH = 60


def section_divider(title: str = "", width: int = SECTION_WIDTH) -> str:
    divider = "=" * width
    if not title:
        return f"{divider}\n{divider}"
    return f"{divider}\n{title}\n{divider}"


def cohort_table(cohorts: List[CohortStatistics]) -> pd.DataFrame:
    """
    Build the per-archetype results table.

    Columns follow the printed report: averages are per completed flight or
    charge session, and the fault column shows the count with faults per
    vehicle as a percentage.
    """
    rows = []
    for c in cohorts:
        rows.append({
            'Vehicle Type': c.name,
            'Count': c.vehicle_count,
            'Avg Flight Time (hrs)': round(c.avg_flight_time_per_flight, 4),
            'Avg Dist (miles)': round(c.avg_distance_per_flight, 2),
            'Avg Charge Time (hrs)': round(c.avg_charging_time_per_session, 4),
            'Faults (Count %)': f"{c.faults} ({c.faults_per_vehicle * 100.0:.1f}%)",
            'Fault Rate (obs/nom per hr)': (
                f"{c.observed_fault_rate:.3f}/{c.nominal_fault_rate:.2f}"
            ),
            'PAX Miles': round(c.passenger_miles, 2),
        })
    return pd.DataFrame(rows)


def vehicle_table(report: SimulationReport) -> pd.DataFrame:
    """Per-vehicle final state and lifetime statistics."""
    frame = pd.DataFrame(report.vehicles)
    if frame.empty:
        return frame
    return frame.round({
        'battery_level': 2,
        'battery_percent': 1,
        'flight_time': 4,
        'queued_time': 4,
        'charging_time': 4,
        'faulted_time': 4,
        'distance_traveled': 2,
        'passenger_miles': 2,
    })


def format_report(report: SimulationReport, include_vehicles: bool = False) -> str:
    """
    Render a SimulationReport as text.

    Args:
        report: Results of a finished run
        include_vehicles: Append the per-vehicle table

    Returns:
        The report text
    """
    config = report.config
    lines = [
        section_divider("eVTOL Simulation Report"),
        "Inputs:",
        f"  Number of vehicles: {config.num_vehicles}",
        f"  Simulation hours: {config.sim_hours}",
        f"  Number of chargers: {config.num_chargers}",
        f"  Time step: {config.time_step_seconds} seconds "
        f"({config.time_step_hours:.6f} hours)",
        f"  Vehicle selection: {'random' if config.randomize_vehicles else 'round robin'}",
        "",
        "Vehicle type counts:",
    ]
    for name, count in report.fleet_composition.items():
        lines.append(f"  {name}: {count}")
    lines.append(f"  Total vehicles: {sum(report.fleet_composition.values())}")
    lines.append("")

    lines.append(section_divider("Simulation Results by Vehicle Type"))
    table = cohort_table(report.cohorts)
    lines.append(table.to_string(index=False) if not table.empty else "(no vehicles)")
    lines.append("")

    if include_vehicles and report.vehicles:
        lines.append("=" * SUBSECTION_WIDTH)
        lines.append("Vehicles")
        lines.append("=" * SUBSECTION_WIDTH)
        lines.append(vehicle_table(report).to_string(index=False))
        lines.append("")

    lines.extend([
        "Final Status:",
        f"  Time: {report.current_time:.6f}",
        f"  Step Count: {report.step_count}",
        f"  Charger utilization: {report.charger_utilization * 100.0:.1f}%",
        "",
        section_divider("eVTOL Simulation DONE"),
    ])
    return "\n".join(lines) + "\n"


def report_filename(timestamp: Optional[datetime] = None) -> str:
    timestamp = timestamp or datetime.now()
    return f"evtol_sim_report_{timestamp.strftime('%Y%m%d_%H%M%S')}.txt"


def write_report(
    report: SimulationReport,
    output_dir: Optional[str] = None,
    filename: Optional[str] = None,
    include_vehicles: bool = False
) -> str:
    """
    Write the report text to a file, creating the directory if needed.

    Args:
        report: Results of a finished run
        output_dir: Target directory (config.output_dir if None)
        filename: File name (timestamped name if None)
        include_vehicles: Append the per-vehicle table

    Returns:
        Path of the written file
    """
    output_dir = output_dir or report.config.output_dir
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename or report_filename())

    with open(path, 'w') as f:
        f.write(format_report(report, include_vehicles=include_vehicles))

    logger.info(f"Report written to {path}")
    return path
