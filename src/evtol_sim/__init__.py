"""
eVTOL Fleet Simulation

A discrete-time simulation of a heterogeneous eVTOL fleet sharing a small
pool of charging stations. Each vehicle runs its own state machine; a
charging scheduler arbitrates the scarce slots in FIFO order, and per-
archetype statistics are aggregated for the final report.

Main Components:
- Vehicle: Per-vehicle state machine (Ready, Flying, Queued, Charging, Faulted)
- VehicleProfile: Immutable archetype constants (five fixed archetypes)
- ChargingScheduler: Charging slot arbitration
- QueueManager: FIFO wait queue with membership set
- StatisticsAggregator: Per-cohort totals and completed flight/charge counts
- SimulationLoop: Tick orchestration and final report
- FleetGenerator: Random or round-robin fleet construction

Quick Start:
    >>> from evtol_sim import SimulationConfig, SimulationLoop, format_report
    >>>
    >>> config = SimulationConfig(num_vehicles=20, sim_hours=3.0, num_chargers=3, seed=7)
    >>> report = SimulationLoop(config).run()
    >>> print(format_report(report))
"""

from .data_structures import (
    EPSILON,
    SECONDS_TO_HOURS,
    VehicleState,
    Manufacturer,
    InvalidStateError,
    VehicleProfile,
    VehicleStatistics,
    CohortStatistics,
    ChargingMetrics,
    SimulationConfig,
)
from .profiles import (
    PROFILES,
    PROFILES_BY_MANUFACTURER,
    NUM_VEHICLE_TYPES,
    get_profile,
    list_profiles,
)
from .random_source import RandomSource, NumpyRandomSource
from .vehicle import Vehicle
from .queue_manager import QueueManager
from .scheduler import ChargingScheduler
from .statistics_tracker import StatisticsAggregator, TickSnapshot, VehicleRecord
from .fleet_generator import FleetGenerator, generate_fleet
from .simulation import SimulationLoop, SimulationReport
from .report import format_report, write_report
from .utils import (
    count_by_manufacturer,
    format_progress_bar,
    calculate_summary_statistics,
)

__version__ = "0.1.0"

__all__ = [
    # Data structures
    'EPSILON',
    'SECONDS_TO_HOURS',
    'VehicleState',
    'Manufacturer',
    'InvalidStateError',
    'VehicleProfile',
    'VehicleStatistics',
    'CohortStatistics',
    'ChargingMetrics',
    'SimulationConfig',

    # Archetype catalog
    'PROFILES',
    'PROFILES_BY_MANUFACTURER',
    'NUM_VEHICLE_TYPES',
    'get_profile',
    'list_profiles',

    # Randomness
    'RandomSource',
    'NumpyRandomSource',

    # Core
    'Vehicle',
    'QueueManager',
    'ChargingScheduler',
    'StatisticsAggregator',
    'TickSnapshot',
    'VehicleRecord',
    'FleetGenerator',
    'generate_fleet',
    'SimulationLoop',
    'SimulationReport',

    # Reporting
    'format_report',
    'write_report',

    # Utilities
    'count_by_manufacturer',
    'format_progress_bar',
    'calculate_summary_statistics',
]
