"""
Simulation loop for the eVTOL fleet.

This module drives the discrete-time run. Each tick:

1. Release charging slots whose occupant stopped charging
2. Advance every vehicle by the tick's time delta, folding its step
   statistics into the cohort totals right after its advance
3. Enqueue newly Queued vehicles
4. Assign freed slots from the head of the queue

The tick size is the configured step, shrunk on the final tick so the
horizon is never overrun.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .data_structures import EPSILON, CohortStatistics, SimulationConfig
from .fleet_generator import FleetGenerator
from .random_source import NumpyRandomSource, RandomSource
from .scheduler import ChargingScheduler
from .statistics_tracker import StatisticsAggregator
from .utils import count_by_manufacturer
from .vehicle import Vehicle


logger = logging.getLogger(__name__)


@dataclass
class SimulationReport:
    """
    Final results of a simulation run.

    Attributes:
        config: Configuration the run used
        current_time: Simulated time reached (hours)
        step_count: Number of ticks executed
        cohorts: Per-archetype statistics in catalog order
        vehicles: Per-vehicle final state, battery and lifetime statistics
        fleet_composition: Vehicles per manufacturer name
        summary: Fleet-wide summary statistics
        charger_utilization: Average slot occupancy over the run (0-1)
    """
    config: SimulationConfig
    current_time: float
    step_count: int
    cohorts: List[CohortStatistics]
    vehicles: List[Dict] = field(default_factory=list)
    fleet_composition: Dict[str, int] = field(default_factory=dict)
    summary: Dict = field(default_factory=dict)
    charger_utilization: float = 0.0


class SimulationLoop:
    """
    Orchestrates vehicles, the charging scheduler and statistics.

    Execution is single-threaded; vehicles advance in fleet insertion order.
    With a fixed random source the run is fully reproducible.

    Attributes:
        config: Run configuration
        rng: Random source shared by fleet construction and vehicles
        vehicles: The fleet, owned by the loop for the run's lifetime
        scheduler: Charging slot scheduler
        aggregator: Cohort statistics aggregator
        current_time: Simulated time (hours)
        step_count: Ticks executed so far
        time_step: Size of the next tick (hours)

    Examples:
        >>> config = SimulationConfig(num_vehicles=20, sim_hours=3.0, num_chargers=3)
        >>> loop = SimulationLoop(config)
        >>> report = loop.run()
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[RandomSource] = None,
        vehicles: Optional[List[Vehicle]] = None
    ):
        """
        Initialize the simulation.

        Args:
            config: Run configuration (uses defaults if None)
            rng: Random source (numpy source seeded from config if None)
            vehicles: Prebuilt fleet; generated from config if None
        """
        self.config = config or SimulationConfig()
        self.config.validate()

        if self.config.enable_logging:
            logging.basicConfig(level=logging.INFO)

        self.rng = rng or NumpyRandomSource(self.config.seed)
        self.scheduler = ChargingScheduler(self.config.num_chargers)
        self.aggregator = StatisticsAggregator()

        self.current_time = 0.0
        self.step_count = 0
        self.time_step = self.next_time_step()

        self.vehicles: List[Vehicle] = []
        self._prebuilt = vehicles
        self._initialized = False

    def initialize_vehicles(self) -> List[Vehicle]:
        """
        Build (or adopt) the fleet and register it with the aggregator.

        Returns:
            The fleet in iteration order
        """
        if self._prebuilt is not None:
            self.vehicles = list(self._prebuilt)
        else:
            policy = 'random' if self.config.randomize_vehicles else 'round_robin'
            generator = FleetGenerator(self.rng)
            self.vehicles = generator.generate(self.config.num_vehicles, policy)

        self.aggregator.reset()
        for vehicle in self.vehicles:
            self.aggregator.register(vehicle)

        counts = count_by_manufacturer(self.vehicles)
        logger.info("Vehicle type counts:")
        for name, count in counts.items():
            logger.info(f"  {name}: {count}")
        logger.info(f"  Total vehicles: {len(self.vehicles)}")

        self._initialized = True
        return self.vehicles

    def next_time_step(self) -> float:
        """Size of the next tick: the configured step, capped at the time left."""
        return min(self.config.time_step_hours, self.config.sim_hours - self.current_time)

    @property
    def finished(self) -> bool:
        return self.current_time >= self.config.sim_hours

    def step(self) -> None:
        """Execute one tick. Does nothing once the horizon is reached."""
        if self.finished:
            return
        if not self._initialized:
            self.initialize_vehicles()

        dt = self.time_step
        self.scheduler.begin_step(self.step_count + 1)
        logger.debug(
            f"Simulation Step {self.step_count + 1}: time {self.current_time:.6f}h "
            f"(delta +{dt:.6f}h)"
        )

        self.scheduler.release()
        self.update_all_vehicles(dt)
        self.scheduler.enqueue(self.vehicles)
        assigned = self.scheduler.assign()
        for vehicle in assigned:
            self.aggregator.sync_state(vehicle)
        metrics = self.scheduler.end_step()

        # Land exactly on the horizon after the final (possibly clipped) tick
        if self.config.sim_hours - self.current_time - dt <= EPSILON:
            self.current_time = self.config.sim_hours
        else:
            self.current_time += dt
        self.step_count += 1
        self.time_step = self.next_time_step()

        self.aggregator.record_tick(
            step=self.step_count,
            time=self.current_time,
            queue_length=metrics.queue_length,
            occupied_slots=metrics.occupied_slots,
            assigned=len(metrics.assigned),
        )

    def update_all_vehicles(self, dt: float) -> None:
        """Advance each vehicle and fold its step statistics immediately."""
        detailed = self.config.log_verbosity > 1 and logger.isEnabledFor(logging.DEBUG)
        for vehicle in self.vehicles:
            vehicle.advance(dt)
            self.aggregator.record(vehicle)
            if detailed:
                logger.debug(
                    f"Vehicle {vehicle.id} ({vehicle.manufacturer_name}) "
                    f"[{vehicle.state_name:<8}] "
                    f"[Battery {vehicle.battery_percent:.0f}%] "
                    f"Step: {vehicle.step_stats.to_short_string()} | "
                    f"Total: {vehicle.total_stats.to_long_string()}"
                )

    def run(
        self,
        progress_callback: Optional[Callable[[float, float], None]] = None
    ) -> SimulationReport:
        """
        Run until the horizon is reached.

        Args:
            progress_callback: Called as (current_time, sim_hours) every
                5 ticks and on the final tick

        Returns:
            SimulationReport with cohort and per-vehicle results
        """
        logger.info(
            f"eVTOL simulation start: {self.config.num_vehicles} vehicles, "
            f"{self.config.num_chargers} chargers, {self.config.sim_hours} hours, "
            f"{self.config.time_step_seconds}s step"
        )
        if not self._initialized:
            self.initialize_vehicles()

        while not self.finished:
            self.step()
            if progress_callback is not None and (
                self.step_count % 5 == 0 or self.finished
            ):
                progress_callback(self.current_time, self.config.sim_hours)

        logger.info(
            f"eVTOL simulation done: {self.step_count} steps, "
            f"time {self.current_time:.4f}h"
        )
        return self.build_report()

    def build_report(self) -> SimulationReport:
        """Collect the current results into a SimulationReport."""
        vehicles = [
            {
                'id': v.id,
                'manufacturer': v.manufacturer_name,
                'state': v.state_name,
                'battery_level': v.battery_level,
                'battery_percent': v.battery_percent,
                **v.total_stats.to_dict(),
            }
            for v in self.vehicles
        ]
        return SimulationReport(
            config=self.config,
            current_time=self.current_time,
            step_count=self.step_count,
            cohorts=self.aggregator.get_cohorts(),
            vehicles=vehicles,
            fleet_composition=count_by_manufacturer(self.vehicles),
            summary=self.aggregator.get_summary_statistics(),
            charger_utilization=self.scheduler.get_utilization(),
        )

    def __repr__(self) -> str:
        return (f"SimulationLoop(step={self.step_count}, "
                f"time={self.current_time:.4f}/{self.config.sim_hours}h, "
                f"vehicles={len(self.vehicles)})")
