"""
Archetype catalog for the eVTOL fleet.

The five profiles are fixed at build time. Vehicles differ only by the
profile they carry; there is no per-manufacturer behaviour.
"""

from typing import Dict, List

from .data_structures import Manufacturer, VehicleProfile


ALPHA = VehicleProfile(
    manufacturer=Manufacturer.ALPHA,
    cruise_speed=120.0,
    battery_capacity=320.0,
    full_charge_time=0.6,
    energy_per_mile=1.6,
    passenger_count=4,
    fault_rate_per_hour=0.25,
)

BRAVO = VehicleProfile(
    manufacturer=Manufacturer.BRAVO,
    cruise_speed=100.0,
    battery_capacity=100.0,
    full_charge_time=0.2,
    energy_per_mile=1.5,
    passenger_count=5,
    fault_rate_per_hour=0.10,
)

CHARLIE = VehicleProfile(
    manufacturer=Manufacturer.CHARLIE,
    cruise_speed=160.0,
    battery_capacity=220.0,
    full_charge_time=0.8,
    energy_per_mile=2.2,
    passenger_count=3,
    fault_rate_per_hour=0.05,
)

DELTA = VehicleProfile(
    manufacturer=Manufacturer.DELTA,
    cruise_speed=90.0,
    battery_capacity=120.0,
    full_charge_time=0.62,
    energy_per_mile=0.8,
    passenger_count=2,
    fault_rate_per_hour=0.22,
)

ECHO = VehicleProfile(
    manufacturer=Manufacturer.ECHO,
    cruise_speed=30.0,
    battery_capacity=150.0,
    full_charge_time=0.3,
    energy_per_mile=5.8,
    passenger_count=2,
    fault_rate_per_hour=0.61,
)

# Index order is the archetype index used by fleet construction
PROFILES: List[VehicleProfile] = [ALPHA, BRAVO, CHARLIE, DELTA, ECHO]

PROFILES_BY_MANUFACTURER: Dict[Manufacturer, VehicleProfile] = {
    p.manufacturer: p for p in PROFILES
}

NUM_VEHICLE_TYPES = len(PROFILES)


def get_profile(index: int) -> VehicleProfile:
    """
    Look up an archetype by catalog index.

    Args:
        index: Archetype index in [0, NUM_VEHICLE_TYPES)

    Returns:
        The matching VehicleProfile

    Raises:
        ValueError: If the index is outside the catalog
    """
    if not 0 <= index < NUM_VEHICLE_TYPES:
        raise ValueError(
            f"Unknown archetype index: {index}. "
            f"Valid range: 0-{NUM_VEHICLE_TYPES - 1}"
        )
    return PROFILES[index]


def list_profiles() -> List[str]:
    """List archetype names in catalog order."""
    return [p.name for p in PROFILES]
