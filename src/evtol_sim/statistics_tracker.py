"""
Statistics aggregation for the eVTOL fleet simulation.

This module folds each vehicle's per-tick step statistics into per-archetype
cohort totals and detects completed flights and charge sessions from state
changes between ticks.

Key Metrics Tracked:
- Flight, queue, charge and grounded hours per cohort
- Distance and passenger-miles per cohort
- Completed flights and charge sessions
- Observed versus nominal fault rates
- Per-tick fleet snapshots (state counts, queue length, slot occupancy)

A flight that ends in a fault still counts as a completed flight.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from .data_structures import (
    CohortStatistics,
    Manufacturer,
    VehicleState,
)
from .utils import calculate_summary_statistics
from .vehicle import Vehicle


logger = logging.getLogger(__name__)


@dataclass
class VehicleRecord:
    """
    Aggregator-owned bookkeeping for one vehicle.

    Attributes:
        vehicle: The tracked vehicle
        previous_state: State observed at the end of the previous fold
        flights: Completed flights for this vehicle
        charges: Completed charge sessions for this vehicle
    """
    vehicle: Vehicle
    previous_state: VehicleState
    flights: int = 0
    charges: int = 0


@dataclass
class TickSnapshot:
    """
    Fleet state at the end of a single tick.

    Attributes:
        step: Tick index (1-based)
        time: Simulated time at the end of the tick (hours)
        state_counts: Vehicles per lifecycle state
        queue_length: Vehicles waiting for a charger
        occupied_slots: Charging slots in use
        assigned: Vehicles that started charging this tick
    """
    step: int
    time: float
    state_counts: Dict[str, int] = field(default_factory=dict)
    queue_length: int = 0
    occupied_slots: int = 0
    assigned: int = 0

    def to_dict(self) -> Dict:
        """Convert to dictionary for DataFrame/JSON export."""
        data = {
            'step': self.step,
            'time': self.time,
            'queue_length': self.queue_length,
            'occupied_slots': self.occupied_slots,
            'assigned': self.assigned,
        }
        for state in VehicleState:
            data[state.value.lower()] = self.state_counts.get(state.value, 0)
        return data


class StatisticsAggregator:
    """
    Per-cohort statistics for a simulation run.

    Cohorts are created the first time a vehicle of their archetype is
    observed and live for the rest of the run.

    Usage:
        aggregator = StatisticsAggregator()
        for vehicle in fleet:
            aggregator.register(vehicle)

        # Every tick, right after each vehicle advances
        aggregator.record(vehicle)

        # After the run
        cohorts = aggregator.get_cohorts()

    Attributes:
        cohorts: CohortStatistics keyed by manufacturer
        snapshots: TickSnapshot per recorded tick
        enable_snapshots: Whether per-tick snapshots are kept
    """

    def __init__(self, enable_snapshots: bool = True):
        self.enable_snapshots = enable_snapshots
        self.cohorts: Dict[Manufacturer, CohortStatistics] = {}
        self.snapshots: List[TickSnapshot] = []
        self._records: Dict[Vehicle, VehicleRecord] = {}

    def register(self, vehicle: Vehicle) -> VehicleRecord:
        """
        Start tracking a vehicle and count it in its cohort.

        Registering the same vehicle twice returns the existing record.
        """
        record = self._records.get(vehicle)
        if record is not None:
            return record

        record = VehicleRecord(vehicle=vehicle, previous_state=vehicle.state)
        self._records[vehicle] = record
        self.cohort_for(vehicle).vehicle_count += 1
        return record

    def cohort_for(self, vehicle: Vehicle) -> CohortStatistics:
        cohort = self.cohorts.get(vehicle.manufacturer)
        if cohort is None:
            cohort = CohortStatistics(
                manufacturer=vehicle.manufacturer,
                nominal_fault_rate=vehicle.profile.fault_rate_per_hour,
            )
            self.cohorts[vehicle.manufacturer] = cohort
        return cohort

    def record(self, vehicle: Vehicle) -> None:
        """
        Fold one vehicle's step statistics into its cohort.

        Must be called once per tick, right after the vehicle's advance.
        Leaving Flying completes a flight; leaving Charging completes a
        charge session.
        """
        record = self.register(vehicle)
        cohort = self.cohort_for(vehicle)
        current = vehicle.state

        if record.previous_state is VehicleState.CHARGING and current is not VehicleState.CHARGING:
            cohort.total_charges += 1
            record.charges += 1
        elif record.previous_state is VehicleState.FLYING and current is not VehicleState.FLYING:
            cohort.total_flights += 1
            record.flights += 1

        cohort.fold(vehicle.step_stats)
        record.previous_state = current

    def sync_state(self, vehicle: Vehicle) -> None:
        """Update the remembered state after a change made outside `advance`."""
        self.register(vehicle).previous_state = vehicle.state

    def record_tick(
        self,
        step: int,
        time: float,
        queue_length: int = 0,
        occupied_slots: int = 0,
        assigned: int = 0
    ) -> Optional[TickSnapshot]:
        """
        Record a fleet snapshot at the end of a tick.

        Returns:
            The snapshot, or None if snapshots are disabled
        """
        if not self.enable_snapshots:
            return None

        counts: Dict[str, int] = {}
        for record in self._records.values():
            name = record.vehicle.state_name
            counts[name] = counts.get(name, 0) + 1

        snapshot = TickSnapshot(
            step=step,
            time=time,
            state_counts=counts,
            queue_length=queue_length,
            occupied_slots=occupied_slots,
            assigned=assigned,
        )
        self.snapshots.append(snapshot)
        return snapshot

    def get_record(self, vehicle: Vehicle) -> Optional[VehicleRecord]:
        return self._records.get(vehicle)

    def get_cohorts(self) -> List[CohortStatistics]:
        """Cohorts in catalog order."""
        return [self.cohorts[m] for m in Manufacturer if m in self.cohorts]

    def get_summary_statistics(self) -> Dict:
        """
        Get fleet-wide summary statistics.

        Returns:
            Dictionary of fleet totals plus per-vehicle distributions
        """
        if not self._records:
            return {'error': 'No vehicles registered'}

        cohorts = self.get_cohorts()
        vehicles = [r.vehicle for r in self._records.values()]

        stats = {
            'total_vehicles': len(vehicles),
            'total_flights': sum(c.total_flights for c in cohorts),
            'total_charges': sum(c.total_charges for c in cohorts),
            'total_flight_time': sum(c.flight_time for c in cohorts),
            'total_distance': sum(c.distance for c in cohorts),
            'total_passenger_miles': sum(c.passenger_miles for c in cohorts),
            'total_faults': sum(c.faults for c in cohorts),
            'faulted_vehicles': sum(1 for v in vehicles if v.state is VehicleState.FAULTED),
            'flight_time_per_vehicle': calculate_summary_statistics(
                [v.total_stats.flight_time for v in vehicles]
            ),
            'queued_time_per_vehicle': calculate_summary_statistics(
                [v.total_stats.queued_time for v in vehicles]
            ),
            'battery_percent': calculate_summary_statistics(
                [v.battery_percent for v in vehicles]
            ),
        }

        if self.snapshots:
            queue_lengths = [s.queue_length for s in self.snapshots]
            stats['avg_queue_length'] = sum(queue_lengths) / len(queue_lengths)
            stats['max_queue_length'] = max(queue_lengths)

        return stats

    def to_dataframe(self) -> pd.DataFrame:
        """Cohort totals and derived metrics, one row per archetype."""
        return pd.DataFrame([c.to_dict() for c in self.get_cohorts()])

    def snapshots_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([s.to_dict() for s in self.snapshots])

    def export_for_visualization(self) -> Dict:
        """
        Export all data in a format suitable for plotting.

        Returns:
            Dictionary with separate keys for cohorts, snapshots and summary
        """
        return {
            'summary': self.get_summary_statistics(),
            'cohorts': [c.to_dict() for c in self.get_cohorts()],
            'snapshots': [s.to_dict() for s in self.snapshots],
        }

    def export_to_json(self, filepath: str) -> None:
        """
        Export all tracking data to a JSON file.

        Args:
            filepath: Path to output JSON file
        """
        data = self.export_for_visualization()
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2, default=str)
        logger.info(f"Exported fleet statistics to {filepath}")

    def reset(self) -> None:
        """Reset all tracking data."""
        self.cohorts.clear()
        self.snapshots.clear()
        self._records.clear()
        logger.info("Statistics aggregator reset")

    def __repr__(self) -> str:
        return (
            f"StatisticsAggregator("
            f"vehicles={len(self._records)}, "
            f"cohorts={len(self.cohorts)}, "
            f"snapshots={len(self.snapshots)})"
        )
