"""
Genome Contract

The engine never knows the concrete candidate representation. A Genome is
any object that can evaluate itself, mutate, cross over with a peer and
clone itself. encode() is only required when runs are persisted.
"""

import random
from abc import ABC, abstractmethod


class Genome(ABC):
    """
    Capability contract for a candidate solution.

    evaluate() is called from worker threads when parallel evaluation is
    enabled, so it must not touch shared mutable state.
    """

    @abstractmethod
    def evaluate(self) -> float:
        """Return the fitness of the genome; lower is better."""

    @abstractmethod
    def mutate(self, rng: random.Random) -> None:
        """Mutate the genome in place."""

    @abstractmethod
    def crossover(self, other: "Genome", rng: random.Random) -> None:
        """Cross the genome with other, modifying both in place."""

    @abstractmethod
    def clone(self) -> "Genome":
        """Return an independent copy of the genome."""

    def encode(self) -> bytes:
        """Return the genome as UTF-8 JSON text."""
        raise NotImplementedError(f"{type(self).__name__} does not support encoding")
