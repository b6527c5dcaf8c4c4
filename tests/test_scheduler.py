"""
Unit tests for ChargingScheduler.
"""

import unittest

from evtol_sim import (
    ChargingScheduler,
    Manufacturer,
    PROFILES_BY_MANUFACTURER,
    RandomSource,
    Vehicle,
    VehicleState,
)


BRAVO = PROFILES_BY_MANUFACTURER[Manufacturer.BRAVO]


class NeverFault(RandomSource):
    def bernoulli(self, probability):
        return False

    def uniform_int(self, low, high):
        return low


def queued_vehicle(profile=BRAVO):
    vehicle = Vehicle(profile, rng=NeverFault())
    vehicle.advance(profile.max_flight_time + 0.01)
    return vehicle


def finish_charging(vehicle):
    """Charge past full so the vehicle leaves its slot by itself."""
    vehicle.advance(vehicle.profile.full_charge_time + 0.05)


class TestChargingScheduler(unittest.TestCase):
    """Test charging slot arbitration."""

    def setUp(self):
        """Set up test scheduler."""
        self.scheduler = ChargingScheduler(num_chargers=1)
        self.a, self.b, self.c = queued_vehicle(), queued_vehicle(), queued_vehicle()
        self.fleet = [self.a, self.b, self.c]

    def test_invalid_charger_count(self):
        with self.assertRaises(ValueError):
            ChargingScheduler(num_chargers=0)

    def test_empty_fleet(self):
        """A pass with nothing to do leaves every slot empty."""
        metrics = self.scheduler.reconcile([])

        self.assertEqual(self.scheduler.slot_snapshot(), [None])
        self.assertEqual(metrics.queue_length, 0)
        self.assertEqual(metrics.occupied_slots, 0)

    def test_assign_starts_charging(self):
        self.scheduler.enqueue(self.fleet)
        assigned = self.scheduler.assign()

        self.assertEqual(assigned, [self.a])
        self.assertEqual(self.a.state, VehicleState.CHARGING)
        self.assertIs(self.scheduler.occupant(0), self.a)
        self.assertEqual(self.scheduler.queue_snapshot(), [self.b.id, self.c.id])

    def test_fifo_assignment_one_slot(self):
        """With a single slot, vehicles charge strictly in enqueue order."""
        order = []

        self.scheduler.reconcile(self.fleet)
        order.append(self.scheduler.occupant(0))

        for _ in range(2):
            finish_charging(self.scheduler.occupant(0))
            self.scheduler.reconcile(self.fleet)
            order.append(self.scheduler.occupant(0))

        self.assertEqual([v.id for v in order], [self.a.id, self.b.id, self.c.id])
        self.assertEqual(self.a.state, VehicleState.FLYING)
        self.assertEqual(self.b.state, VehicleState.FLYING)
        self.assertEqual(self.c.state, VehicleState.CHARGING)

    def test_occupancy_never_exceeds_slots(self):
        scheduler = ChargingScheduler(num_chargers=2)
        fleet = [queued_vehicle() for _ in range(5)]

        scheduler.reconcile(fleet)

        self.assertEqual(scheduler.occupied_count, 2)
        self.assertEqual(scheduler.free_count, 0)
        self.assertEqual(len(scheduler.queue_manager), 3)
        self.assertEqual(
            sum(1 for v in fleet if v.state == VehicleState.CHARGING), 2
        )

    def test_vehicle_never_queued_and_charging(self):
        scheduler = ChargingScheduler(num_chargers=2)
        fleet = [queued_vehicle() for _ in range(4)]

        scheduler.reconcile(fleet)
        scheduler.reconcile(fleet)

        for vehicle in fleet:
            in_slot = vehicle.id in scheduler.slot_snapshot()
            self.assertFalse(in_slot and scheduler.is_queued(vehicle))

    def test_release_frees_finished_vehicles(self):
        self.scheduler.reconcile(self.fleet)
        finish_charging(self.a)

        released = self.scheduler.release()

        self.assertEqual(released, [self.a])
        self.assertIsNone(self.scheduler.occupant(0))

    def test_release_keeps_charging_vehicles(self):
        self.scheduler.reconcile(self.fleet)
        self.a.advance(0.05)

        released = self.scheduler.release()

        self.assertEqual(released, [])
        self.assertIs(self.scheduler.occupant(0), self.a)

    def test_dropped_vehicle_leaves_slot_empty(self):
        """A popped vehicle that is no longer Queued is dropped with a warning."""
        scheduler = ChargingScheduler(num_chargers=2)
        scheduler.begin_step(1)
        scheduler.enqueue(self.fleet[:2])
        self.a.state = VehicleState.FAULTED

        with self.assertLogs('evtol_sim.scheduler', level='WARNING'):
            assigned = scheduler.assign()
        metrics = scheduler.end_step()

        self.assertEqual(assigned, [self.b])
        self.assertEqual(scheduler.slot_snapshot(), [None, self.b.id])
        self.assertEqual(metrics.dropped, [self.a.id])
        self.assertEqual(len(metrics.warnings), 1)
        self.assertIn(f"Vehicle {self.a.id}", metrics.warnings[0])
        self.assertFalse(scheduler.is_queued(self.a))

    def test_metrics_history(self):
        self.scheduler.reconcile(self.fleet)
        self.scheduler.reconcile(self.fleet)

        self.assertEqual(len(self.scheduler.metrics_history), 2)
        first, second = self.scheduler.metrics_history
        self.assertEqual(first.assigned, [self.a.id])
        self.assertEqual(first.enqueued, [self.a.id, self.b.id, self.c.id])
        self.assertEqual(second.enqueued, [])
        self.assertIs(self.scheduler.get_current_metrics(), second)
        self.assertAlmostEqual(self.scheduler.get_utilization(), 1.0)

    def test_metrics_dataframe(self):
        self.scheduler.reconcile(self.fleet)
        self.scheduler.reconcile(self.fleet)

        df = self.scheduler.metrics_dataframe()

        self.assertEqual(len(df), 2)
        self.assertEqual(list(df['assigned']), [1, 0])
        self.assertEqual(list(df['queue_length']), [2, 2])
        self.assertEqual(list(df['occupied_slots']), [1, 1])

    def test_occupant_out_of_range(self):
        with self.assertRaises(ValueError):
            self.scheduler.occupant(1)

    def test_slot_log_format(self):
        self.scheduler.enqueue(self.fleet)
        with self.assertLogs('evtol_sim.scheduler', level='DEBUG') as cm:
            self.scheduler.assign()

        self.assertTrue(any(f"S0:[Vehicle {self.a.id}]" in line for line in cm.output))


if __name__ == '__main__':
    unittest.main()
