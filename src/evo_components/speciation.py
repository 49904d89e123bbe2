"""
Speciation Module

Partition a population into species (niches) that are evolved separately.
Every speciator returns disjoint groups whose union is exactly its input:
the same Individual objects, evaluated state untouched.

Features:
- K-medoids clustering over a user supplied distance metric
- Fitness-interval speciation (contiguous fitness bands)
"""

import random
from abc import ABC, abstractmethod
from typing import Callable, List

import numpy as np

from ga_exceptions import ConfigurationError, SpeciationError
from evo_components.individual import Individual, sort_by_fitness


Metric = Callable[[Individual, Individual], float]
Species = List[List[Individual]]


class Speciator(ABC):
    """Contract for speciation policies."""

    def validate(self) -> None:
        """Check the parameters; raise ConfigurationError if they are unusable."""

    def check_population(self, pop_size: int) -> None:
        """Raise ConfigurationError if populations of pop_size cannot be split."""

    @abstractmethod
    def apply(self, individuals: List[Individual], rng: random.Random) -> Species:
        """Split individuals into species."""


class SpecKMedoids(Speciator):
    """
    K-medoids speciation.

    Medoids start as k random individuals and are refined until they stop
    changing or max_iterations is reached. Species smaller than
    min_per_cluster then receive the members of the largest species that are
    closest to their medoid.
    """

    def __init__(self, k: int, min_per_cluster: int, metric: Metric,
                 max_iterations: int = 100):
        self.k = k
        self.min_per_cluster = min_per_cluster
        self.metric = metric
        self.max_iterations = max_iterations

    def __repr__(self) -> str:
        return (f"SpecKMedoids(k={self.k}, min_per_cluster={self.min_per_cluster}, "
                f"max_iterations={self.max_iterations})")

    def validate(self) -> None:
        if self.k < 1:
            raise ConfigurationError(f"Number of species k ({self.k}) must be positive")
        if self.min_per_cluster < 1:
            raise ConfigurationError(
                f"Minimum species size ({self.min_per_cluster}) must be positive")
        if not callable(self.metric):
            raise ConfigurationError("K-medoids speciation needs a distance metric")
        if self.max_iterations < 1:
            raise ConfigurationError(
                f"Maximum iterations ({self.max_iterations}) must be positive")

    def check_population(self, pop_size: int) -> None:
        if self.k * self.min_per_cluster > pop_size:
            raise ConfigurationError(
                f"Cannot split populations of {pop_size} into {self.k} species of at least "
                f"{self.min_per_cluster} individuals")

    def distance_matrix(self, individuals: List[Individual]) -> np.ndarray:
        """Symmetric matrix of pairwise metric values."""
        n = len(individuals)
        distances = np.zeros((n, n), dtype=float)
        for i in range(n):
            for j in range(i + 1, n):
                d = self.metric(individuals[i], individuals[j])
                distances[i, j] = d
                distances[j, i] = d
        return distances

    def apply(self, individuals: List[Individual], rng: random.Random) -> Species:
        n = len(individuals)
        if n < self.k * self.min_per_cluster:
            raise SpeciationError(
                f"Cannot split {n} individuals into {self.k} species of at least "
                f"{self.min_per_cluster}", n_individuals=n, n_species=self.k)

        distances = self.distance_matrix(individuals)
        medoids = rng.sample(range(n), self.k)

        for _ in range(self.max_iterations):
            labels = self._assign(distances, medoids)
            new_medoids = []
            for cluster in range(self.k):
                members = np.flatnonzero(labels == cluster)
                costs = distances[np.ix_(members, members)].sum(axis=1)
                new_medoids.append(int(members[int(np.argmin(costs))]))
            if new_medoids == medoids:
                break
            medoids = new_medoids

        labels = self._assign(distances, medoids)
        clusters = [list(np.flatnonzero(labels == c)) for c in range(self.k)]
        self._fill(clusters, medoids, distances)

        return [[individuals[i] for i in sorted(cluster)] for cluster in clusters]

    def _assign(self, distances: np.ndarray, medoids: List[int]) -> np.ndarray:
        labels = np.argmin(distances[:, medoids], axis=1)
        # A medoid always belongs to its own species, even on ties
        for cluster, medoid in enumerate(medoids):
            labels[medoid] = cluster
        return labels

    def _fill(self, clusters: List[List[int]], medoids: List[int],
              distances: np.ndarray) -> None:
        while True:
            deficient = [c for c in range(self.k) if len(clusters[c]) < self.min_per_cluster]
            if not deficient:
                return
            target = deficient[0]
            donor = max(range(self.k), key=lambda c: len(clusters[c]))
            candidates = [i for i in clusters[donor] if i != medoids[donor]]
            moved = min(candidates, key=lambda i: distances[i, medoids[target]])
            clusters[donor].remove(moved)
            clusters[target].append(moved)


class SpecFitnessInterval(Speciator):
    """
    Sort by fitness and cut into k contiguous intervals of len // k
    individuals; the last interval also takes the remainder.
    """

    def __init__(self, k: int):
        self.k = k

    def __repr__(self) -> str:
        return f"SpecFitnessInterval(k={self.k})"

    def validate(self) -> None:
        if self.k < 1:
            raise ConfigurationError(f"Number of species k ({self.k}) must be positive")

    def check_population(self, pop_size: int) -> None:
        if self.k > pop_size:
            raise ConfigurationError(
                f"Cannot split populations of {pop_size} into {self.k} species")

    def apply(self, individuals: List[Individual], rng: random.Random) -> Species:
        n = len(individuals)
        if n < self.k:
            raise SpeciationError(f"Cannot split {n} individuals into {self.k} species",
                                  n_individuals=n, n_species=self.k)

        ordered = sort_by_fitness(individuals)
        width = n // self.k
        species = [ordered[i * width:(i + 1) * width] for i in range(self.k - 1)]
        species.append(ordered[(self.k - 1) * width:])
        return species
