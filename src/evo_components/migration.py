"""
Migration Module

Exchange of individuals between populations. Migration runs after every
population has finished evolving and uses the run's master random stream.
"""

import random
from abc import ABC, abstractmethod
from typing import List

from ga_exceptions import ConfigurationError, MigrationError


class Migrator(ABC):
    """
    Contract for migration policies.

    apply() must leave the number of individuals in every population
    unchanged.
    """

    min_populations = 2

    def validate(self) -> None:
        """Check the parameters; raise ConfigurationError if they are unusable."""

    def check_populations(self, n_pops: int, pop_size: int) -> None:
        """Check that the policy can run on n_pops populations of pop_size individuals."""
        if n_pops < self.min_populations:
            raise ConfigurationError(
                f"{type(self).__name__} needs at least {self.min_populations} populations, got {n_pops}")

    @abstractmethod
    def apply(self, populations: List, rng: random.Random) -> None:
        """Move individuals between populations in place."""


class MigRing(Migrator):
    """
    Closed ring topology.

    Population i sends n_migrants individuals, taken from random distinct
    slots, to population i + 1; the last one sends to the first. Arrivals
    take the slots the receiving population emptied.
    """

    def __init__(self, n_migrants: int):
        self.n_migrants = n_migrants

    def __repr__(self) -> str:
        return f"MigRing(n_migrants={self.n_migrants})"

    def validate(self) -> None:
        if self.n_migrants < 1:
            raise ConfigurationError(f"Number of migrants ({self.n_migrants}) must be positive")

    def check_populations(self, n_pops: int, pop_size: int) -> None:
        super().check_populations(n_pops, pop_size)
        if self.n_migrants > pop_size:
            raise ConfigurationError(
                f"Number of migrants ({self.n_migrants}) exceeds the population size ({pop_size})")

    def apply(self, populations: List, rng: random.Random) -> None:
        if len(populations) < self.min_populations:
            raise MigrationError(
                f"Ring migration needs at least {self.min_populations} populations, got {len(populations)}")
        for pop in populations:
            if len(pop) < self.n_migrants:
                raise MigrationError(
                    f"Population {pop.id} has {len(pop)} individuals, "
                    f"cannot send {self.n_migrants} migrants")

        slots = [rng.sample(range(len(pop)), self.n_migrants) for pop in populations]
        emigrants = [[pop.individuals[s] for s in pop_slots]
                     for pop, pop_slots in zip(populations, slots)]

        for i, pop in enumerate(populations):
            arrivals = emigrants[i - 1]
            for slot, individual in zip(slots[i], arrivals):
                pop.individuals[slot] = individual
