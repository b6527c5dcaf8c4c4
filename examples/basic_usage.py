"""
Basic Usage Example for the eVTOL fleet simulation.

This example demonstrates how to:
1. Create a simulation configuration
2. Build a fleet
3. Step the simulation and watch the charging queue
4. Examine cohort results and the text report
"""

from evtol_sim import (
    SimulationConfig,
    SimulationLoop,
    VehicleState,
    count_by_manufacturer,
    format_report,
)


def main():
    print("=" * 60)
    print("eVTOL Simulation Basic Usage Example")
    print("=" * 60)

    # Step 1: Create configuration
    print("\n1. Creating simulation configuration...")
    config = SimulationConfig(
        num_vehicles=20,            # Fleet size
        sim_hours=3.0,              # Simulation horizon (hours)
        num_chargers=3,             # Shared charging slots
        time_step_seconds=1.0,      # Tick size
        seed=42,                    # Reproducible run
        enable_logging=False
    )
    print(f"   Config: {config.num_vehicles} vehicles, {config.num_chargers} chargers, "
          f"{config.sim_hours} hours")

    # Step 2: Build the fleet
    print("\n2. Building the fleet...")
    loop = SimulationLoop(config)
    fleet = loop.initialize_vehicles()
    for name, count in count_by_manufacturer(fleet).items():
        print(f"   {name}: {count}")

    # Step 3: Run the first simulated hour, reporting every 15 minutes
    print("\n3. Stepping through the first hour...")
    checkpoint = 0.25
    while loop.current_time < 1.0:
        loop.step()
        if loop.current_time >= checkpoint:
            states = [v.state for v in fleet]
            print(
                f"   t={loop.current_time:.2f}h  "
                f"flying={states.count(VehicleState.FLYING)}  "
                f"queued={states.count(VehicleState.QUEUED)}  "
                f"charging={states.count(VehicleState.CHARGING)}  "
                f"faulted={states.count(VehicleState.FAULTED)}"
            )
            print(f"     slots: {loop.scheduler.slot_snapshot()}  "
                  f"queue: {loop.scheduler.queue_snapshot()}")
            checkpoint += 0.25

    # Step 4: Finish the run
    print("\n4. Running to the horizon...")
    report = loop.run()
    print(f"   Steps: {report.step_count}, time: {report.current_time:.2f}h")

    # Step 5: Cohort results
    print("\n5. Cohort Results:")
    for cohort in report.cohorts:
        print(
            f"   {cohort.name:<8} flights={cohort.total_flights:<3} "
            f"charges={cohort.total_charges:<3} "
            f"avg flight={cohort.avg_flight_time_per_flight:.3f}h "
            f"faults={cohort.faults}"
        )

    # Step 6: Full report
    print("\n6. Report:")
    print(format_report(report))

    print("=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == '__main__':
    main()
