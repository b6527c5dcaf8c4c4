"""
Fleet generator for the eVTOL simulation.

This module builds the vehicle fleet for a run, choosing each vehicle's
archetype either at random or round-robin through the catalog.
"""

import logging
from typing import List, Optional

from .data_structures import VehicleProfile
from .profiles import PROFILES
from .random_source import NumpyRandomSource, RandomSource
from .utils import count_by_manufacturer
from .vehicle import Vehicle


logger = logging.getLogger(__name__)


class FleetGenerator:
    """
    Generate the vehicle fleet for a simulation run.

    Selection policies:
    - 'random': each vehicle draws its archetype with `uniform_int`
    - 'round_robin': archetypes cycle in catalog order, so every archetype
      appears equally often (up to the remainder)

    Attributes:
        rng: Source used for archetype draws and handed to every vehicle
        profiles: Archetype catalog to select from
    """

    POLICIES = ('random', 'round_robin')

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        profiles: Optional[List[VehicleProfile]] = None
    ):
        """
        Initialize the fleet generator.

        Args:
            rng: Random source (unseeded numpy source if None)
            profiles: Archetypes to select from (full catalog if None)
        """
        self.rng = rng or NumpyRandomSource()
        self.profiles = list(profiles) if profiles is not None else list(PROFILES)
        if not self.profiles:
            raise ValueError("At least one vehicle profile is required")

    def create_vehicle(self, type_index: int) -> Vehicle:
        """
        Create one vehicle of the archetype at `type_index`.

        Raises:
            ValueError: If the index is outside the catalog
        """
        if not 0 <= type_index < len(self.profiles):
            raise ValueError(
                f"Unknown archetype index: {type_index}. "
                f"Valid range: 0-{len(self.profiles) - 1}"
            )
        return Vehicle(self.profiles[type_index], rng=self.rng)

    def generate(self, n_vehicles: int, policy: str = 'random') -> List[Vehicle]:
        """
        Generate a fleet.

        Args:
            n_vehicles: Number of vehicles to create
            policy: 'random' or 'round_robin'

        Returns:
            Vehicles in creation order (this is the fleet iteration order)

        Examples:
            >>> generator = FleetGenerator(NumpyRandomSource(seed=42))
            >>> fleet = generator.generate(20, policy='round_robin')
        """
        if policy not in self.POLICIES:
            raise ValueError(
                f"Unknown selection policy: {policy}. "
                f"Valid options: {list(self.POLICIES)}"
            )

        n_types = len(self.profiles)
        vehicles = []
        for i in range(n_vehicles):
            if policy == 'random':
                type_index = self.rng.uniform_int(0, n_types - 1)
            else:
                type_index = i % n_types
            vehicles.append(self.create_vehicle(type_index))

        counts = count_by_manufacturer(vehicles)
        logger.info(
            f"Generated {len(vehicles)} vehicles ({policy}): "
            + ", ".join(f"{name}={n}" for name, n in counts.items())
        )
        return vehicles


def generate_fleet(
    n_vehicles: int,
    randomize: bool = True,
    seed: Optional[int] = None
) -> List[Vehicle]:
    """
    Convenience function to generate a fleet over the full catalog.

    Args:
        n_vehicles: Number of vehicles
        randomize: Random archetype selection if True, round-robin if False
        seed: Random seed

    Returns:
        List of Vehicle objects
    """
    generator = FleetGenerator(NumpyRandomSource(seed))
    return generator.generate(n_vehicles, 'random' if randomize else 'round_robin')
