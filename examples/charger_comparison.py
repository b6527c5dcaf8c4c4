"""
Charger Comparison Example for the eVTOL fleet simulation.

This example runs the same seeded fleet against 1 to 6 charging slots and
compares queueing, utilization and fleet output.
"""

from evtol_sim import SimulationConfig, SimulationLoop


def run_case(num_chargers: int, seed: int = 42):
    """Run one configuration and collect headline metrics."""
    config = SimulationConfig(
        num_vehicles=20,
        sim_hours=3.0,
        num_chargers=num_chargers,
        time_step_seconds=5.0,
        seed=seed,
        enable_logging=False  # Disable for cleaner output
    )
    report = SimulationLoop(config).run()
    summary = report.summary

    return {
        'chargers': num_chargers,
        'flights': summary['total_flights'],
        'charges': summary['total_charges'],
        'passenger_miles': summary['total_passenger_miles'],
        'avg_queue': summary.get('avg_queue_length', 0.0),
        'max_queue': summary.get('max_queue_length', 0),
        'utilization': report.charger_utilization * 100.0,
        'faults': summary['total_faults'],
    }


def main():
    print("=" * 70)
    print("eVTOL Charger Comparison")
    print("=" * 70)

    results = []
    print("\nRunning configurations...")
    for num_chargers in range(1, 7):
        print(f"  {num_chargers} chargers...", end=" ")
        results.append(run_case(num_chargers))
        print("Done")

    print("\n" + "=" * 70)
    print("Results Summary")
    print("=" * 70)
    print(f"{'Chargers':<10} {'Flights':<9} {'Charges':<9} {'PAX Miles':<12} "
          f"{'AvgQ':<7} {'MaxQ':<6} {'Util%':<7} {'Faults':<6}")
    print("-" * 70)

    for result in results:
        print(
            f"{result['chargers']:<10} "
            f"{result['flights']:<9} "
            f"{result['charges']:<9} "
            f"{result['passenger_miles']:<12.1f} "
            f"{result['avg_queue']:<7.2f} "
            f"{result['max_queue']:<6} "
            f"{result['utilization']:<7.1f} "
            f"{result['faults']:<6}"
        )

    # Smallest slot count whose queue never holds more than one vehicle
    print("\n" + "=" * 70)
    print("Queue Analysis")
    print("=" * 70)

    short_queue = [r for r in results if r['max_queue'] <= 1]
    if short_queue:
        print(f"Queue stays at or below one vehicle from {short_queue[0]['chargers']} chargers")
    else:
        print("Every configuration queued more than one vehicle at some point")

    best = max(results, key=lambda r: r['passenger_miles'])
    print(f"Most passenger-miles: {best['chargers']} chargers "
          f"({best['passenger_miles']:.1f})")

    print("\n" + "=" * 70)
    print("Comparison completed!")
    print("=" * 70)


if __name__ == '__main__':
    main()
