"""
Data structures for the eVTOL fleet simulation.

This module defines the core data structures shared by the vehicle state
machine, the charging scheduler and the statistics aggregator: lifecycle
states, archetype profiles, statistics accumulators, per-tick metrics and
the run configuration.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional


# Tolerance for floating point comparisons to zero
EPSILON = 1e-10

# Conversion factor from seconds to hours
SECONDS_TO_HOURS = 1.0 / 3600.0

DEFAULT_NUM_VEHICLES = 20
DEFAULT_SIM_HOURS = 3.0
DEFAULT_NUM_CHARGERS = 3
DEFAULT_TIME_STEP_SECONDS = 1.0
DEFAULT_LOG_VERBOSITY = 1
DEFAULT_OUTPUT_DIR = "output"


class VehicleState(Enum):
    """Lifecycle states of a vehicle."""
    READY = "Ready"
    FLYING = "Flying"
    QUEUED = "Queued"
    CHARGING = "Charging"
    FAULTED = "Faulted"


class Manufacturer(Enum):
    """The five vehicle archetypes, one per manufacturer."""
    ALPHA = "Alpha"
    BRAVO = "Bravo"
    CHARLIE = "Charlie"
    DELTA = "Delta"
    ECHO = "Echo"


class InvalidStateError(RuntimeError):
    """
    Raised when a vehicle operation is called from the wrong state.

    This signals a bug in the caller (usually the scheduler), not a runtime
    condition of the simulated system.

    Attributes:
        vehicle_id: Id of the vehicle the operation was called on
        operation: Name of the rejected operation
        expected: State the operation requires
        actual: State the vehicle was in
    """

    def __init__(
        self,
        vehicle_id: int,
        operation: str,
        expected: VehicleState,
        actual: VehicleState
    ):
        self.vehicle_id = vehicle_id
        self.operation = operation
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vehicle {vehicle_id} must be {expected.value} to {operation} "
            f"(current state: {actual.value})"
        )


@dataclass(frozen=True)
class VehicleProfile:
    """
    Immutable performance constants shared by every vehicle of an archetype.

    Attributes:
        manufacturer: Archetype identifier
        cruise_speed: Cruise speed (miles/hour)
        battery_capacity: Battery capacity (kWh)
        full_charge_time: Hours to charge from empty to full
        energy_per_mile: Energy used per distance unit (kWh/mile)
        passenger_count: Passengers carried per flight
        fault_rate_per_hour: Probability of fault per flight hour
    """
    manufacturer: Manufacturer
    cruise_speed: float
    battery_capacity: float
    full_charge_time: float
    energy_per_mile: float
    passenger_count: int
    fault_rate_per_hour: float

    @property
    def name(self) -> str:
        return self.manufacturer.value

    @property
    def power_consumption_rate(self) -> float:
        """Energy drawn per hour at cruise speed (kWh/hour)."""
        return self.energy_per_mile * self.cruise_speed

    @property
    def charge_rate(self) -> float:
        """Energy added per hour on a charger (kWh/hour)."""
        return self.battery_capacity / self.full_charge_time

    @property
    def max_flight_time(self) -> float:
        """Hours a full battery sustains at cruise speed."""
        return self.battery_capacity / self.power_consumption_rate


@dataclass
class VehicleStatistics:
    """
    Summable per-vehicle operating statistics.

    Used twice by each vehicle: once as a step accumulator that is zeroed at
    the start of every advance, and once as the lifetime total.

    Attributes:
        flight_time: Hours spent flying
        queued_time: Hours spent waiting for a charger
        charging_time: Hours spent charging
        faulted_time: Hours spent grounded by a fault
        distance_traveled: Miles flown
        passenger_miles: Miles flown multiplied by passengers carried
        faults: Number of faults
    """
    flight_time: float = 0.0
    queued_time: float = 0.0
    charging_time: float = 0.0
    faulted_time: float = 0.0
    distance_traveled: float = 0.0
    passenger_miles: float = 0.0
    faults: int = 0

    @property
    def total_time(self) -> float:
        """Sum of all time buckets (hours)."""
        return self.flight_time + self.queued_time + self.charging_time + self.faulted_time

    def reset(self) -> None:
        """Zero every field."""
        for f in fields(self):
            setattr(self, f.name, f.default)

    def add(self, other: 'VehicleStatistics') -> None:
        """Accumulate another set of statistics into this one."""
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def copy(self) -> 'VehicleStatistics':
        return VehicleStatistics(**self.to_dict())

    def to_dict(self) -> Dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_short_string(self) -> str:
        """Compact form used in per-tick log lines."""
        return (f"F {self.flight_time:.4f}h Q {self.queued_time:.4f}h "
                f"C {self.charging_time:.4f}h X {self.faulted_time:.4f}h")

    def to_long_string(self) -> str:
        return (f"Flight Time: {self.flight_time:.4f}, "
                f"Queued Time: {self.queued_time:.4f}, "
                f"Distance: {self.distance_traveled:.2f}, "
                f"Charging Time: {self.charging_time:.4f}, "
                f"Faulted Time: {self.faulted_time:.4f}, "
                f"Faults: {self.faults}, "
                f"Passenger Miles: {self.passenger_miles:.2f}")


@dataclass
class CohortStatistics:
    """
    Running totals for every vehicle sharing one archetype.

    Derived averages and rates are computed on demand from the sums.

    Attributes:
        manufacturer: Archetype identifier
        nominal_fault_rate: Archetype fault rate per hour, for comparison
        vehicle_count: Number of vehicles in the cohort
        total_flights: Completed flights (a flight ended by a fault counts)
        total_charges: Completed charge sessions
        flight_time: Summed flight hours
        queued_time: Summed queue wait hours
        charging_time: Summed charging hours
        faulted_time: Summed grounded hours
        distance: Summed miles flown
        passenger_miles: Summed passenger-miles
        faults: Summed fault count
    """
    manufacturer: Manufacturer
    nominal_fault_rate: float = 0.0
    vehicle_count: int = 0
    total_flights: int = 0
    total_charges: int = 0
    flight_time: float = 0.0
    queued_time: float = 0.0
    charging_time: float = 0.0
    faulted_time: float = 0.0
    distance: float = 0.0
    passenger_miles: float = 0.0
    faults: int = 0

    @property
    def name(self) -> str:
        return self.manufacturer.value

    def fold(self, step: VehicleStatistics) -> None:
        """Add one vehicle's step statistics to the cohort totals."""
        self.flight_time += step.flight_time
        self.queued_time += step.queued_time
        self.charging_time += step.charging_time
        self.faulted_time += step.faulted_time
        self.distance += step.distance_traveled
        self.passenger_miles += step.passenger_miles
        self.faults += step.faults

    @property
    def avg_flight_time_per_flight(self) -> float:
        return self.flight_time / self.total_flights if self.total_flights > 0 else 0.0

    @property
    def avg_distance_per_flight(self) -> float:
        return self.distance / self.total_flights if self.total_flights > 0 else 0.0

    @property
    def avg_charging_time_per_session(self) -> float:
        return self.charging_time / self.total_charges if self.total_charges > 0 else 0.0

    @property
    def observed_fault_rate(self) -> float:
        """Faults per flight hour."""
        return self.faults / self.flight_time if self.flight_time > 0 else 0.0

    @property
    def faults_per_vehicle(self) -> float:
        return self.faults / self.vehicle_count if self.vehicle_count > 0 else 0.0

    def to_dict(self) -> Dict:
        """Convert to dictionary for DataFrame/JSON export."""
        return {
            'manufacturer': self.name,
            'vehicle_count': self.vehicle_count,
            'total_flights': self.total_flights,
            'total_charges': self.total_charges,
            'flight_time': self.flight_time,
            'queued_time': self.queued_time,
            'charging_time': self.charging_time,
            'faulted_time': self.faulted_time,
            'distance': self.distance,
            'passenger_miles': self.passenger_miles,
            'faults': self.faults,
            'avg_flight_time_per_flight': self.avg_flight_time_per_flight,
            'avg_distance_per_flight': self.avg_distance_per_flight,
            'avg_charging_time_per_session': self.avg_charging_time_per_session,
            'observed_fault_rate': self.observed_fault_rate,
            'nominal_fault_rate': self.nominal_fault_rate,
            'faults_per_vehicle': self.faults_per_vehicle,
        }

    def __repr__(self) -> str:
        return (f"CohortStatistics({self.name}, vehicles={self.vehicle_count}, "
                f"flights={self.total_flights}, charges={self.total_charges}, "
                f"faults={self.faults})")


@dataclass
class ChargingMetrics:
    """
    Metrics collected during one scheduler pass.

    Attributes:
        step: Tick index the pass belongs to
        released: Ids of vehicles whose slots were freed
        enqueued: Ids of vehicles appended to the wait queue
        assigned: Ids of vehicles that started charging
        dropped: Ids popped from the queue that were no longer queued
        queue_length: Queue length after the pass
        occupied_slots: Occupied slot count after the pass
        warnings: Warning messages from this pass
    """
    step: int
    released: List[int] = field(default_factory=list)
    enqueued: List[int] = field(default_factory=list)
    assigned: List[int] = field(default_factory=list)
    dropped: List[int] = field(default_factory=list)
    queue_length: int = 0
    occupied_slots: int = 0
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> Dict:
        return {
            'step': self.step,
            'released': len(self.released),
            'enqueued': len(self.enqueued),
            'assigned': len(self.assigned),
            'dropped': len(self.dropped),
            'queue_length': self.queue_length,
            'occupied_slots': self.occupied_slots,
        }

    def __repr__(self) -> str:
        return (f"ChargingMetrics(step={self.step}, "
                f"queue={self.queue_length}, "
                f"occupied={self.occupied_slots}, "
                f"assigned={self.assigned})")


@dataclass
class SimulationConfig:
    """
    Configuration for a simulation run.

    Attributes:
        num_vehicles: Fleet size
        sim_hours: Simulation horizon (hours)
        num_chargers: Number of charging slots
        time_step_seconds: Tick size (seconds)
        randomize_vehicles: Random archetype selection if True, round-robin if False
        seed: Seed for the default random source
        log_verbosity: 1 for summary logging, 2 adds per-vehicle tick lines
        output_dir: Directory for report files
        enable_logging: Whether to configure logging on construction
    """
    num_vehicles: int = DEFAULT_NUM_VEHICLES
    sim_hours: float = DEFAULT_SIM_HOURS
    num_chargers: int = DEFAULT_NUM_CHARGERS
    time_step_seconds: float = DEFAULT_TIME_STEP_SECONDS
    randomize_vehicles: bool = True
    seed: Optional[int] = None
    log_verbosity: int = DEFAULT_LOG_VERBOSITY
    output_dir: str = DEFAULT_OUTPUT_DIR
    enable_logging: bool = True

    @property
    def time_step_hours(self) -> float:
        return self.time_step_seconds * SECONDS_TO_HOURS

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.num_vehicles <= 0:
            raise ValueError("num_vehicles must be positive")
        if self.sim_hours <= 0:
            raise ValueError("sim_hours must be positive")
        if self.num_chargers <= 0:
            raise ValueError("num_chargers must be positive")
        if self.time_step_seconds <= 0:
            raise ValueError("time_step_seconds must be positive")
        if self.log_verbosity not in (1, 2):
            raise ValueError("log_verbosity must be 1 or 2")
