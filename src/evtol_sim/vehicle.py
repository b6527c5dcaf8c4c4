"""
Vehicle state machine for the eVTOL fleet simulation.

A vehicle consumes a time budget through `advance`, moving between the
Ready, Flying, Queued, Charging and Faulted states. Ready -> Flying and a
full-charge Charging -> Ready are free transitions taken inside the same
call; every other hour of the budget lands in exactly one statistics bucket.

State graph:

    Ready --(battery > 0)--> Flying --(battery empty)--> Queued
      ^                        |                           |
      |                        +--(fault)--> Faulted       | start_charging()
      |                                                    v
      +-------------------(battery full)---------------- Charging
"""

import itertools
import logging
from typing import Optional

from .data_structures import (
    EPSILON,
    InvalidStateError,
    VehicleProfile,
    VehicleState,
    VehicleStatistics,
)
from .random_source import NumpyRandomSource, RandomSource


logger = logging.getLogger(__name__)

_id_counter = itertools.count(1)
_default_rng: Optional[RandomSource] = None


def default_rng() -> RandomSource:
    """Shared unseeded source for vehicles created without one."""
    global _default_rng
    if _default_rng is None:
        _default_rng = NumpyRandomSource()
    return _default_rng


class Vehicle:
    """
    A single eVTOL vehicle with its battery, lifecycle state and statistics.

    Vehicles start Ready with a full battery. All behaviour is the same for
    every archetype; only the constants in `profile` differ.

    Attributes:
        id: Unique, monotonically assigned vehicle id
        profile: Immutable archetype constants
        state: Current lifecycle state
        step_stats: Statistics of the most recent `advance` call
        total_stats: Lifetime statistics (sum of all step statistics)
    """

    def __init__(
        self,
        profile: VehicleProfile,
        rng: Optional[RandomSource] = None,
        vehicle_id: Optional[int] = None
    ):
        """
        Create a vehicle.

        Args:
            profile: Archetype the vehicle belongs to
            rng: Source for fault trials (shared unseeded source if None)
            vehicle_id: Explicit id; assigned from a global counter if None
        """
        self.id = vehicle_id if vehicle_id is not None else next(_id_counter)
        self.profile = profile
        self.rng = rng or default_rng()

        self.state = VehicleState.READY
        self._battery_level = profile.battery_capacity

        self.step_stats = VehicleStatistics()
        self.total_stats = VehicleStatistics()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def manufacturer(self):
        return self.profile.manufacturer

    @property
    def manufacturer_name(self) -> str:
        return self.profile.name

    @property
    def state_name(self) -> str:
        return self.state.value

    @property
    def battery_capacity(self) -> float:
        return self.profile.battery_capacity

    @property
    def battery_level(self) -> float:
        """Current battery energy (kWh), always within [0, capacity]."""
        return self._battery_level

    @battery_level.setter
    def battery_level(self, level: float) -> None:
        self._battery_level = min(max(level, 0.0), self.profile.battery_capacity)

    @property
    def battery_percent(self) -> float:
        return self._battery_level / self.profile.battery_capacity * 100.0

    @property
    def power_consumption_rate(self) -> float:
        """Energy drawn per flight hour (kWh/hour)."""
        return self.profile.power_consumption_rate

    @property
    def max_flight_time(self) -> float:
        """Hours of flight the current battery can sustain."""
        return self._battery_level / self.profile.power_consumption_rate

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def advance(self, hours: float) -> None:
        """
        Consume a time budget, applying transitions until it is spent.

        Step statistics are zeroed first. The loop repeats only after a
        transition that used no time of its own (Ready -> Flying and a
        full-charge Charging -> Ready), so the budget is consumed at most
        once per time-consuming state.

        Args:
            hours: Non-negative time budget (hours)

        Raises:
            ValueError: If hours is negative
        """
        if hours < 0:
            raise ValueError(f"Time budget must be non-negative, got {hours}")

        self.step_stats.reset()
        remaining = hours
        free_transition = True

        while free_transition:
            free_transition = False

            if self.state is VehicleState.READY:
                if self._battery_level > 0:
                    self.state = VehicleState.FLYING
                    free_transition = True

            elif self.state is VehicleState.FLYING:
                if remaining > 0:
                    remaining -= self.fly(remaining)
                    if self.state is VehicleState.QUEUED and remaining > 0:
                        self._accrue(queued_time=remaining)
                        remaining = 0.0
                    elif self.state is VehicleState.FAULTED:
                        self._accrue(faulted_time=remaining)
                        remaining = 0.0

            elif self.state is VehicleState.CHARGING:
                if remaining > 0:
                    remaining -= self.charge(remaining)
                    if self.state is VehicleState.READY:
                        free_transition = True
                elif self._battery_level >= self.profile.battery_capacity:
                    self._battery_level = self.profile.battery_capacity
                    self.state = VehicleState.READY
                    free_transition = True

            elif self.state is VehicleState.QUEUED:
                if remaining > 0:
                    self._accrue(queued_time=remaining)
                    remaining = 0.0

            elif self.state is VehicleState.FAULTED:
                if remaining > 0:
                    self._accrue(faulted_time=remaining)
                    remaining = 0.0

    def fly(self, hours: float) -> float:
        """
        Fly for up to `hours`, limited by the battery.

        A single fault trial covers the whole segment. A fault is placed at
        the segment midpoint: half the segment is credited and the vehicle
        is grounded. Otherwise the vehicle lands in Queued once the battery
        is empty.

        Args:
            hours: Requested flight time (hours)

        Returns:
            Hours actually flown

        Raises:
            InvalidStateError: If the vehicle is not Flying
        """
        if self.state is not VehicleState.FLYING:
            raise InvalidStateError(self.id, "fly", VehicleState.FLYING, self.state)

        if hours <= 0:
            return 0.0

        duration = min(hours, self.max_flight_time)
        if duration <= 0:
            self._battery_level = 0.0
            self.state = VehicleState.QUEUED
            return 0.0

        if self.check_fault(duration):
            flown = duration * 0.5
            self._credit_flight(flown)
            self._accrue(faults=1)
            self.state = VehicleState.FAULTED
            logger.debug(
                f"Vehicle {self.id} ({self.manufacturer_name}) faulted after "
                f"{flown:.4f}h of flight"
            )
            return flown

        self._credit_flight(duration)
        if self._battery_level <= EPSILON:
            self._battery_level = 0.0
            self.state = VehicleState.QUEUED
        return duration

    def check_fault(self, hours: float) -> bool:
        """Single fault trial with probability fault_rate_per_hour * hours."""
        return self.rng.bernoulli(self.profile.fault_rate_per_hour * hours)

    def start_charging(self) -> None:
        """
        Move a Queued vehicle onto a charger.

        Raises:
            InvalidStateError: If the vehicle is not Queued
        """
        if self.state is not VehicleState.QUEUED:
            raise InvalidStateError(
                self.id, "start charging", VehicleState.QUEUED, self.state
            )
        self.state = VehicleState.CHARGING
        self.advance(0.0)

    def charge(self, hours: float) -> float:
        """
        Charge for up to `hours`, stopping early once the battery is full.

        Args:
            hours: Available charging time (hours)

        Returns:
            Hours actually spent charging

        Raises:
            InvalidStateError: If the vehicle is not Charging
        """
        if self.state is not VehicleState.CHARGING:
            raise InvalidStateError(self.id, "charge", VehicleState.CHARGING, self.state)

        if hours <= 0:
            return 0.0

        rate = self.profile.charge_rate
        needed = self.profile.battery_capacity - self._battery_level
        added = min(needed, rate * hours)
        used = added / rate

        self.battery_level = self._battery_level + added
        self._accrue(charging_time=used)

        if self._battery_level >= self.profile.battery_capacity:
            self._battery_level = self.profile.battery_capacity
            self.state = VehicleState.READY

        return used

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def _credit_flight(self, hours: float) -> None:
        distance = self.profile.cruise_speed * hours
        self.battery_level = self._battery_level - distance * self.profile.energy_per_mile
        self._accrue(
            flight_time=hours,
            distance_traveled=distance,
            passenger_miles=distance * self.profile.passenger_count,
        )

    def _accrue(self, **amounts) -> None:
        # Step and lifetime totals move together
        for name, amount in amounts.items():
            setattr(self.step_stats, name, getattr(self.step_stats, name) + amount)
            setattr(self.total_stats, name, getattr(self.total_stats, name) + amount)

    def __repr__(self) -> str:
        return (f"Vehicle({self.id}, {self.manufacturer_name}, "
                f"state={self.state_name}, battery={self.battery_percent:.0f}%)")
