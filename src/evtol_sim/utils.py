"""
Utility functions for the eVTOL fleet simulation.

This module provides fleet composition counts, progress display text
and the per-vehicle summary used by the statistics aggregator.
"""

from typing import Any, Dict, Iterable, List

import numpy as np


def count_by_manufacturer(vehicles: Iterable[Any]) -> Dict[str, int]:
    """
    Count vehicles per manufacturer name.

    Args:
        vehicles: Vehicles exposing `manufacturer_name`

    Returns:
        Dictionary mapping manufacturer name to vehicle count, in the order
        each manufacturer is first seen
    """
    counts: Dict[str, int] = {}
    for vehicle in vehicles:
        name = vehicle.manufacturer_name
        counts[name] = counts.get(name, 0) + 1
    return counts


def format_progress_bar(
    current_time: float,
    total_time: float,
    width: int = 50
) -> str:
    """
    Render a text progress bar for the simulation clock.

    Args:
        current_time: Elapsed simulated time (hours)
        total_time: Simulation horizon (hours)
        width: Bar width in characters

    Returns:
        String such as "[=====>    ] 50.0% (1.50/3.00 hours)"

    Examples:
        >>> format_progress_bar(1.5, 3.0, width=10)
        '[=====>    ] 50.0% (1.50/3.00 hours)'
    """
    progress = current_time / total_time if total_time > 0 else 1.0
    progress = min(max(progress, 0.0), 1.0)
    pos = int(width * progress)

    bar = "".join(
        "=" if i < pos else ">" if i == pos else " "
        for i in range(width)
    )
    return f"[{bar}] {progress * 100.0:.1f}% ({current_time:.2f}/{total_time:.2f} hours)"


def calculate_summary_statistics(values: List[float]) -> Dict[str, float]:
    """
    Describe a per-vehicle distribution for the run summary.

    Args:
        values: One value per vehicle

    Returns:
        Dictionary with min, max, mean, sum and count (zeros when empty)
    """
    if not values:
        return {'min': 0.0, 'max': 0.0, 'mean': 0.0, 'sum': 0.0, 'count': 0}

    arr = np.asarray(values, dtype=float)
    return {
        'min': float(arr.min()),
        'max': float(arr.max()),
        'mean': float(arr.mean()),
        'sum': float(arr.sum()),
        'count': int(arr.size),
    }
