"""
Tests for the SimulationLoop.

This module tests:
- Tick sizing and horizon handling
- End-to-end charger contention with a single slot
- Fleet-wide time accounting
- Reproducibility with a fixed seed
"""

import pytest

from evtol_sim import (
    Manufacturer,
    NumpyRandomSource,
    PROFILES_BY_MANUFACTURER,
    RandomSource,
    SimulationConfig,
    SimulationLoop,
    Vehicle,
    VehicleState,
)


BRAVO = PROFILES_BY_MANUFACTURER[Manufacturer.BRAVO]


class NeverFault(RandomSource):
    def bernoulli(self, probability):
        return False

    def uniform_int(self, low, high):
        return low


def quiet_config(**kwargs):
    kwargs.setdefault('enable_logging', False)
    return SimulationConfig(**kwargs)


class TestSimulationConfig:

    def test_defaults(self):
        config = SimulationConfig()
        assert config.num_vehicles == 20
        assert config.sim_hours == 3.0
        assert config.num_chargers == 3
        assert config.time_step_seconds == 1.0
        assert config.time_step_hours == pytest.approx(1.0 / 3600.0)

    @pytest.mark.parametrize("field,value", [
        ('num_vehicles', 0),
        ('sim_hours', 0.0),
        ('num_chargers', -1),
        ('time_step_seconds', 0.0),
        ('log_verbosity', 3),
    ])
    def test_invalid_values(self, field, value):
        config = quiet_config(**{field: value})
        with pytest.raises(ValueError):
            config.validate()

    def test_loop_validates_config(self):
        with pytest.raises(ValueError):
            SimulationLoop(quiet_config(num_chargers=0))


class TestTimeStep:
    """Tick sizing near the horizon."""

    def setup_method(self):
        self.loop = SimulationLoop(quiet_config(sim_hours=1.0, time_step_seconds=360.0))

    def test_full_step_at_start(self):
        assert self.loop.next_time_step() == pytest.approx(0.1)

    def test_full_step_when_room_remains(self):
        self.loop.current_time = 0.85
        assert self.loop.next_time_step() == pytest.approx(0.1)

    def test_final_step_is_clipped(self):
        self.loop.current_time = 0.95
        assert self.loop.next_time_step() == pytest.approx(0.05)

    def test_zero_at_horizon(self):
        self.loop.current_time = 1.0
        assert self.loop.next_time_step() == 0.0
        assert self.loop.finished

    def test_run_stops_exactly_at_horizon(self):
        loop = SimulationLoop(quiet_config(num_vehicles=2, sim_hours=1.05,
                                           time_step_seconds=600.0, seed=1))
        report = loop.run()

        assert report.step_count == 7
        assert report.current_time == pytest.approx(1.05)
        assert len(loop.aggregator.snapshots) == 7


class TestChargerContention:
    """Three identical vehicles sharing one charger for an hour."""

    def setup_method(self):
        rng = NeverFault()
        self.fleet = [Vehicle(BRAVO, rng=rng) for _ in range(3)]
        self.loop = SimulationLoop(
            quiet_config(num_vehicles=3, sim_hours=1.0, num_chargers=1,
                         time_step_seconds=1.0),
            rng=rng,
            vehicles=self.fleet,
        )

    def states(self):
        return [v.state for v in self.fleet]

    def test_single_slot_contention(self):
        first_queue_seen = False

        while not self.loop.finished:
            self.loop.step()
            states = self.states()
            assert states.count(VehicleState.CHARGING) <= 1
            assert self.loop.scheduler.occupied_count <= 1

            if not first_queue_seen and VehicleState.QUEUED in states:
                first_queue_seen = True
                assert states.count(VehicleState.CHARGING) == 1
                assert states.count(VehicleState.QUEUED) == 2
                # All three deplete on the same tick; fleet order decides
                assert self.fleet[0].state is VehicleState.CHARGING

        assert first_queue_seen
        assert self.states() == [
            VehicleState.FLYING,
            VehicleState.CHARGING,
            VehicleState.QUEUED,
        ]

    def test_counts_and_time_accounting(self):
        report = self.loop.run()

        cohort = report.cohorts[0]
        assert cohort.manufacturer is Manufacturer.BRAVO
        assert cohort.vehicle_count == 3
        assert cohort.total_flights == 3
        assert cohort.total_charges == 1
        # Only the first vehicle finished a session; the second is mid-charge
        assert self.fleet[0].total_stats.charging_time == pytest.approx(
            BRAVO.full_charge_time, rel=1e-3
        )
        assert cohort.charging_time > BRAVO.full_charge_time

        for vehicle in self.fleet:
            assert vehicle.total_stats.total_time == pytest.approx(1.0, abs=1e-6)
            assert 0.0 <= vehicle.battery_level <= BRAVO.battery_capacity

        assert cohort.flight_time == pytest.approx(
            sum(v.total_stats.flight_time for v in self.fleet)
        )
        assert cohort.queued_time > 0

    def test_report_contents(self):
        report = self.loop.run()

        assert report.step_count == 3600
        assert report.fleet_composition == {"Bravo": 3}
        assert len(report.vehicles) == 3
        assert report.vehicles[2]['state'] == "Queued"
        assert 0.0 < report.charger_utilization <= 1.0
        assert report.summary['total_vehicles'] == 3


class TestSharedVehicleIds:
    """Vehicles built with the same explicit id still get their own charger."""

    def test_both_vehicles_charge(self):
        rng = NeverFault()
        fleet = [Vehicle(BRAVO, rng=rng, vehicle_id=7) for _ in range(2)]
        loop = SimulationLoop(
            quiet_config(num_vehicles=2, sim_hours=1.0, num_chargers=2),
            rng=rng,
            vehicles=fleet,
        )

        while not loop.finished:
            loop.step()
            states = [v.state for v in fleet]
            if VehicleState.QUEUED in states or VehicleState.CHARGING in states:
                break

        assert [v.state for v in fleet] == [VehicleState.CHARGING, VehicleState.CHARGING]
        assert loop.scheduler.occupied_count == 2
        assert loop.aggregator.get_cohorts()[0].vehicle_count == 2
        assert loop.aggregator.get_cohorts()[0].total_flights == 2


class TestSimulationLoop:

    def test_step_after_horizon_is_noop(self):
        loop = SimulationLoop(quiet_config(num_vehicles=2, sim_hours=0.5,
                                           time_step_seconds=600.0, seed=1))
        loop.run()
        steps, snapshots = loop.step_count, len(loop.aggregator.snapshots)
        history = len(loop.scheduler.metrics_history)

        loop.step()

        assert loop.step_count == steps == 3
        assert len(loop.aggregator.snapshots) == snapshots
        assert len(loop.scheduler.metrics_history) == history
        assert loop.current_time == 0.5

    def test_round_robin_composition(self):
        loop = SimulationLoop(quiet_config(num_vehicles=12, sim_hours=0.1,
                                           randomize_vehicles=False, seed=3))
        fleet = loop.initialize_vehicles()

        names = [v.manufacturer_name for v in fleet]
        assert names[:5] == ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]
        assert names.count("Alpha") == 3
        assert names.count("Echo") == 2

    def test_random_fleet_size(self):
        loop = SimulationLoop(quiet_config(num_vehicles=15, sim_hours=0.1, seed=5))
        report = loop.run()

        assert sum(report.fleet_composition.values()) == 15
        assert sum(c.vehicle_count for c in report.cohorts) == 15

    def test_seed_reproducibility(self):
        def run_once():
            config = quiet_config(num_vehicles=10, sim_hours=1.5, num_chargers=2,
                                  time_step_seconds=30.0, seed=42)
            return SimulationLoop(config).run()

        first, second = run_once(), run_once()

        assert [c.to_dict() for c in first.cohorts] == [c.to_dict() for c in second.cohorts]
        assert [v['state'] for v in first.vehicles] == [v['state'] for v in second.vehicles]

    def test_explicit_random_source(self):
        config = quiet_config(num_vehicles=4, sim_hours=0.5, time_step_seconds=60.0)
        report = SimulationLoop(config, rng=NumpyRandomSource(seed=9)).run()

        assert report.step_count == 30
        assert report.current_time == pytest.approx(0.5)

    def test_progress_callback(self):
        calls = []
        loop = SimulationLoop(quiet_config(num_vehicles=2, sim_hours=1.0,
                                           time_step_seconds=300.0, seed=1))

        loop.run(progress_callback=lambda current, total: calls.append((current, total)))

        # 12 ticks: reported after ticks 5, 10 and the final tick
        assert len(calls) == 3
        assert calls[-1][0] == pytest.approx(1.0)
        assert all(total == 1.0 for _, total in calls)

    def test_snapshots_track_fleet(self):
        loop = SimulationLoop(quiet_config(num_vehicles=5, sim_hours=0.2,
                                           time_step_seconds=60.0, seed=2))
        loop.run()

        df = loop.aggregator.snapshots_dataframe()
        assert len(df) == loop.step_count
        state_columns = ['ready', 'flying', 'queued', 'charging', 'faulted']
        assert (df[state_columns].sum(axis=1) == 5).all()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
