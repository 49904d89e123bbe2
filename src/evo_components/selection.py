"""
Selection Methods Module

Implements the selection strategies used by evolution models. Fitness is
minimized, so "best" always means lowest fitness.

Features:
- Tournament selection with configurable selection pressure
- Elitist selection of the n best individuals
- Fitness-proportionate (roulette wheel) selection favouring low fitness
"""

import random
from abc import ABC, abstractmethod
from typing import List, Tuple

import numpy as np

from ga_exceptions import ConfigurationError, SelectionError
from evo_components.individual import Individual, fitness_array


Selection = Tuple[List[Individual], List[int]]


class Selector(ABC):
    """
    Contract for selection strategies.

    apply() returns the selected individuals together with their indexes in
    the input list; the same individual may be selected more than once.
    """

    def validate(self) -> None:
        """Check the parameters; raise ConfigurationError if they are unusable."""

    @abstractmethod
    def apply(self, n: int, individuals: List[Individual],
              rng: random.Random) -> Selection:
        """Select n individuals."""

    def _check(self, n: int, individuals: List[Individual]) -> None:
        if not individuals:
            raise SelectionError("Cannot select from an empty group",
                                 population_size=0, selection_type=type(self).__name__)
        if n < 0:
            raise SelectionError(f"Cannot select {n} individuals",
                                 population_size=len(individuals),
                                 selection_type=type(self).__name__)


class SelTournament(Selector):
    """Tournament selection: the best of n_contestants random individuals wins."""

    def __init__(self, n_contestants: int = 3):
        self.n_contestants = n_contestants

    def __repr__(self) -> str:
        return f"SelTournament(n_contestants={self.n_contestants})"

    def validate(self) -> None:
        if self.n_contestants < 1:
            raise ConfigurationError(
                f"Tournament size ({self.n_contestants}) must be at least 1")

    def apply(self, n: int, individuals: List[Individual],
              rng: random.Random) -> Selection:
        self._check(n, individuals)

        # Tournament size can't exceed the group
        k = min(self.n_contestants, len(individuals))

        selected, indexes = [], []
        for _ in range(n):
            contestants = rng.sample(range(len(individuals)), k)
            winner = min(contestants, key=lambda i: individuals[i].fitness)
            selected.append(individuals[winner])
            indexes.append(winner)
        return selected, indexes


class SelElitism(Selector):
    """Select the n best individuals, best first."""

    def __repr__(self) -> str:
        return "SelElitism()"

    def apply(self, n: int, individuals: List[Individual],
              rng: random.Random) -> Selection:
        self._check(n, individuals)
        if n > len(individuals):
            raise SelectionError(
                f"Elitism cannot pick {n} distinct individuals out of {len(individuals)}",
                population_size=len(individuals), selection_type="elitism")

        order = sorted(range(len(individuals)), key=lambda i: individuals[i].fitness)[:n]
        return [individuals[i] for i in order], order


class SelRoulette(Selector):
    """
    Fitness-proportionate selection for minimization.

    Each individual is weighted by its distance to the worst fitness in the
    group; when every fitness is equal the draw is uniform.
    """

    def __repr__(self) -> str:
        return "SelRoulette()"

    def apply(self, n: int, individuals: List[Individual],
              rng: random.Random) -> Selection:
        self._check(n, individuals)

        fitnesses = fitness_array(individuals)
        if not np.all(np.isfinite(fitnesses)):
            raise SelectionError("Roulette selection needs evaluated individuals",
                                 population_size=len(individuals), selection_type="roulette")

        weights = fitnesses.max() - fitnesses
        total = float(weights.sum())
        if total <= 0:
            indexes = [rng.randrange(len(individuals)) for _ in range(n)]
        else:
            cumulative = np.cumsum(weights)
            indexes = []
            for _ in range(n):
                point = rng.uniform(0, total)
                idx = int(np.searchsorted(cumulative, point, side='right'))
                indexes.append(min(idx, len(individuals) - 1))

        return [individuals[i] for i in indexes], indexes
