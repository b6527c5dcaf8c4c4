"""
Queue management for the charging scheduler.

This module holds the FIFO wait queue of vehicles that need a charger,
together with a membership set that keeps each vehicle in the queue at most
once.
"""

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set

from .data_structures import VehicleState
from .vehicle import Vehicle


class QueueManager:
    """
    Manages the charging wait queue.

    The QueueManager is responsible for:
    1. Sweeping the fleet for newly Queued vehicles
    2. Appending them in encounter order (idempotent per vehicle)
    3. Handing out the head of the queue in strict FIFO order

    The queue holds references only; vehicle lifetime belongs to the fleet.
    The deque and the membership set always hold the same vehicles. Both
    are keyed on the vehicle object, so two vehicles sharing an id are
    still tracked separately.
    """

    def __init__(self):
        self._queue: Deque[Vehicle] = deque()
        self._members: Set[Vehicle] = set()

    def enqueue_queued(self, vehicles: Iterable[Vehicle]) -> List[Vehicle]:
        """
        Append every Queued vehicle that is not already waiting.

        Calling this twice without new Queued vehicles leaves the queue
        unchanged.

        Args:
            vehicles: Fleet in its fixed iteration order

        Returns:
            Vehicles appended by this sweep, in queue order
        """
        added = []
        for vehicle in vehicles:
            if vehicle.state is VehicleState.QUEUED and vehicle not in self._members:
                self._queue.append(vehicle)
                self._members.add(vehicle)
                added.append(vehicle)
        return added

    def pop_next(self) -> Optional[Vehicle]:
        """
        Remove and return the head of the queue.

        Returns:
            The longest-waiting vehicle, or None if the queue is empty
        """
        if not self._queue:
            return None
        vehicle = self._queue.popleft()
        self._members.discard(vehicle)
        return vehicle

    def peek(self) -> Optional[Vehicle]:
        return self._queue[0] if self._queue else None

    def snapshot(self) -> List[int]:
        """Vehicle ids in FIFO order."""
        return [v.id for v in self._queue]

    def clear(self) -> None:
        self._queue.clear()
        self._members.clear()

    def get_queue_statistics(self) -> Dict:
        """
        Calculate statistics about the current queue.

        Returns:
            Dictionary with queue length and per-manufacturer counts
        """
        by_manufacturer: Dict[str, int] = {}
        for vehicle in self._queue:
            name = vehicle.manufacturer_name
            by_manufacturer[name] = by_manufacturer.get(name, 0) + 1

        stats = {
            'queue_length': len(self._queue),
            'by_manufacturer': by_manufacturer,
        }
        if self._queue:
            stats['head_vehicle_id'] = self._queue[0].id
        return stats

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, vehicle: Vehicle) -> bool:
        return vehicle in self._members

    def __repr__(self) -> str:
        return f"QueueManager(queue={self.snapshot()})"
