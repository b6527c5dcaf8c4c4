"""
Charging Scheduler - slot arbitration for the eVTOL fleet.

This module assigns a fixed number of identical charging slots to vehicles
that have run their batteries down. Each tick the scheduler:

1. Releases slots whose occupant is no longer Charging
2. Enqueues newly Queued vehicles (FIFO, at most once each)
3. Fills empty slots in index order from the head of the queue

Slot index carries no priority; assignment order is enqueue order.
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from .data_structures import ChargingMetrics, VehicleState
from .queue_manager import QueueManager
from .vehicle import Vehicle


logger = logging.getLogger(__name__)


class ChargingScheduler:
    """
    Arbitrates the charging slots among Queued vehicles.

    The scheduler never owns vehicles: slots and queue entries are
    references whose lifetime is guaranteed by the fleet collection. A
    vehicle is never queued and occupying a slot at the same time.

    Attributes:
        num_chargers: Number of charging slots
        slots: One entry per slot, either a Vehicle or None
        queue_manager: FIFO wait queue
        metrics_history: ChargingMetrics from every scheduler pass

    Examples:
        >>> scheduler = ChargingScheduler(num_chargers=3)
        >>> scheduler.release()
        >>> scheduler.enqueue(vehicles)
        >>> scheduler.assign()
    """

    def __init__(self, num_chargers: int):
        """
        Initialize the scheduler.

        Args:
            num_chargers: Number of charging slots (positive)
        """
        if num_chargers <= 0:
            raise ValueError("num_chargers must be positive")

        self.num_chargers = num_chargers
        self.slots: List[Optional[Vehicle]] = [None] * num_chargers
        self.queue_manager = QueueManager()
        self.metrics_history: List[ChargingMetrics] = []

        self._current_step = 0
        self._current_metrics = ChargingMetrics(step=0)

    def begin_step(self, step: int) -> None:
        """Start collecting metrics for a new tick."""
        self._current_step = step
        self._current_metrics = ChargingMetrics(step=step)

    def release(self) -> List[Vehicle]:
        """
        Free every slot whose occupant has stopped charging.

        No notification is sent; the vehicle already moved on by itself.

        Returns:
            Vehicles removed from their slots
        """
        released = []
        for i, vehicle in enumerate(self.slots):
            if vehicle is not None and vehicle.state is not VehicleState.CHARGING:
                self.slots[i] = None
                released.append(vehicle)
                self._current_metrics.released.append(vehicle.id)
                logger.debug(f"Released slot S{i} from Vehicle {vehicle.id} ({vehicle.state_name})")
        return released

    def enqueue(self, vehicles: Iterable[Vehicle]) -> List[Vehicle]:
        """
        Add newly Queued vehicles to the tail of the wait queue.

        Args:
            vehicles: Fleet in its fixed iteration order

        Returns:
            Vehicles appended by this call
        """
        added = self.queue_manager.enqueue_queued(vehicles)
        self._current_metrics.enqueued.extend(v.id for v in added)
        logger.debug(f"Charging Queue: [{self._format_queue()}]")
        return added

    def assign(self) -> List[Vehicle]:
        """
        Fill empty slots, in index order, from the head of the queue.

        A popped vehicle that is no longer Queued is dropped and its slot
        stays empty for this tick.

        Returns:
            Vehicles that started charging
        """
        assigned = []
        for i in range(self.num_chargers):
            if not len(self.queue_manager):
                break
            if self.slots[i] is not None:
                continue

            vehicle = self.queue_manager.pop_next()
            if vehicle.state is not VehicleState.QUEUED:
                message = (
                    f"Vehicle {vehicle.id} left the queue in state "
                    f"{vehicle.state_name}; slot S{i} stays empty"
                )
                logger.warning(message)
                self._current_metrics.dropped.append(vehicle.id)
                self._current_metrics.add_warning(message)
                continue

            self.slots[i] = vehicle
            vehicle.start_charging()
            assigned.append(vehicle)
            self._current_metrics.assigned.append(vehicle.id)

        logger.debug(f"Charging Stations: {self._format_slots()}")
        return assigned

    def end_step(self) -> ChargingMetrics:
        """Close the current tick's metrics and append them to the history."""
        metrics = self._current_metrics
        metrics.queue_length = len(self.queue_manager)
        metrics.occupied_slots = self.occupied_count
        self.metrics_history.append(metrics)
        return metrics

    def reconcile(self, vehicles: Iterable[Vehicle]) -> ChargingMetrics:
        """
        Run one full pass (release, enqueue, assign) after vehicles advanced.

        Args:
            vehicles: Fleet in its fixed iteration order

        Returns:
            Metrics for the pass
        """
        self.begin_step(self._current_step + 1)
        self.release()
        self.enqueue(vehicles)
        self.assign()
        return self.end_step()

    @property
    def occupied_count(self) -> int:
        return sum(1 for v in self.slots if v is not None)

    @property
    def free_count(self) -> int:
        return self.num_chargers - self.occupied_count

    def occupant(self, index: int) -> Optional[Vehicle]:
        if not 0 <= index < self.num_chargers:
            raise ValueError(f"Slot index out of range: {index}")
        return self.slots[index]

    def queue_snapshot(self) -> List[int]:
        """Ids of waiting vehicles in FIFO order."""
        return self.queue_manager.snapshot()

    def slot_snapshot(self) -> List[Optional[int]]:
        """Occupant id per slot, None for an empty slot."""
        return [v.id if v is not None else None for v in self.slots]

    def is_queued(self, vehicle: Vehicle) -> bool:
        return vehicle in self.queue_manager

    def get_utilization(self) -> float:
        """Average slot occupancy over all recorded passes (0-1)."""
        if not self.metrics_history:
            return 0.0
        occupied = sum(m.occupied_slots for m in self.metrics_history)
        return occupied / (len(self.metrics_history) * self.num_chargers)

    def get_current_metrics(self) -> Optional[ChargingMetrics]:
        return self.metrics_history[-1] if self.metrics_history else None

    def metrics_dataframe(self) -> pd.DataFrame:
        """Per-pass metrics history, one row per tick."""
        return pd.DataFrame([m.to_dict() for m in self.metrics_history])

    def _format_queue(self) -> str:
        return ", ".join(f"Vehicle {vid}" for vid in self.queue_snapshot())

    def _format_slots(self) -> str:
        return " ".join(
            f"S{i}:[Vehicle {vid}]" if vid is not None else f"S{i}:[--]"
            for i, vid in enumerate(self.slot_snapshot())
        )

    def __repr__(self) -> str:
        return (f"ChargingScheduler(chargers={self.num_chargers}, "
                f"occupied={self.occupied_count}, "
                f"queued={len(self.queue_manager)})")
