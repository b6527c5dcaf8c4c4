"""
Cohort comparison chart for a finished simulation run.
"""

import logging
import os
from typing import List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .data_structures import CohortStatistics


logger = logging.getLogger(__name__)

# Suppress matplotlib font warnings
logging.getLogger("matplotlib.font_manager").setLevel(logging.ERROR)


def plot_cohort_summary(cohorts: List[CohortStatistics], output_path: str) -> str:
    """
    Save a four-panel bar chart comparing archetypes.

    Panels: average flight time per flight, average distance per flight,
    average charge time per session, and observed versus nominal fault rate.

    Args:
        cohorts: Cohort statistics in display order
        output_path: PNG file to write

    Returns:
        The output path
    """
    names = [c.name for c in cohorts]
    x = range(len(names))

    fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(14, 10))

    ax1.bar(x, [c.avg_flight_time_per_flight for c in cohorts], color="#2E86AB")
    ax1.set_title("Avg Flight Time per Flight", fontweight="bold")
    ax1.set_ylabel("Hours")

    ax2.bar(x, [c.avg_distance_per_flight for c in cohorts], color="#A23B72")
    ax2.set_title("Avg Distance per Flight", fontweight="bold")
    ax2.set_ylabel("Miles")

    ax3.bar(x, [c.avg_charging_time_per_session for c in cohorts], color="#F18F01")
    ax3.set_title("Avg Charge Time per Session", fontweight="bold")
    ax3.set_ylabel("Hours")

    width = 0.35
    ax4.bar([i - width / 2 for i in x], [c.observed_fault_rate for c in cohorts],
            width, label="Observed", color="#C73E1D")
    ax4.bar([i + width / 2 for i in x], [c.nominal_fault_rate for c in cohorts],
            width, label="Nominal", color="#6C757D")
    ax4.set_title("Fault Rate per Flight Hour", fontweight="bold")
    ax4.legend()

    for ax in (ax1, ax2, ax3, ax4):
        ax.set_xticks(list(x))
        ax.set_xticklabels(names)
        ax.grid(axis="y", alpha=0.3)

    plt.tight_layout()
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Saved cohort chart to {output_path}")
    return output_path
