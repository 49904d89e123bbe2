"""
Genetic Operations Module

Sequence-level crossover and mutation operators that genomes can build on.
Every operator takes an explicit random.Random so results stay reproducible
when populations evolve on their own streams.

Features:
- Uniform and k-point crossover on equal-length sequences
- Gaussian mutation for float vectors
"""

import random
from typing import List, MutableSequence, Tuple


def cross_uniform(parent1: MutableSequence, parent2: MutableSequence,
                  rng: random.Random, p: float = 0.5) -> None:
    """
    Perform uniform crossover in place.

    Each position is swapped between the parents with probability p.

    Args:
        parent1: First parent's genes (modified)
        parent2: Second parent's genes (modified)
        rng: Random stream
        p: Per-position swap probability
    """
    if len(parent1) != len(parent2):
        raise ValueError(f"Crossover error: parent lengths differ ({len(parent1)} != {len(parent2)})")

    for i in range(len(parent1)):
        if rng.random() < p:
            parent1[i], parent2[i] = parent2[i], parent1[i]


def cross_point(parent1: MutableSequence, parent2: MutableSequence,
                n_points: int, rng: random.Random) -> None:
    """
    Perform n-point crossover in place.

    Cut points are drawn without replacement from the inner positions and
    every other segment is exchanged between the parents.

    Args:
        parent1: First parent's genes (modified)
        parent2: Second parent's genes (modified)
        n_points: Number of cut points
        rng: Random stream
    """
    length = len(parent1)
    if length != len(parent2):
        raise ValueError(f"Crossover error: parent lengths differ ({length} != {len(parent2)})")
    if n_points < 1 or n_points >= length:
        raise ValueError(f"Cannot cut a sequence of length {length} at {n_points} points")

    points = sorted(rng.sample(range(1, length), n_points))
    bounds = _segments(points, length)

    for segment_idx, (start, end) in enumerate(bounds):
        if segment_idx % 2 == 1:
            parent1[start:end], parent2[start:end] = parent2[start:end], parent1[start:end]


def _segments(points: List[int], length: int) -> List[Tuple[int, int]]:
    """Turn sorted cut points into (start, end) slices covering [0, length)."""
    edges = [0] + points + [length]
    return [(edges[i], edges[i + 1]) for i in range(len(edges) - 1)]


def mut_normal_float(genes: MutableSequence, rate: float, rng: random.Random,
                     sigma: float = 1.0) -> int:
    """
    Apply Gaussian mutation in place.

    Each gene is perturbed by a N(0, sigma * |gene|) draw with probability
    rate; zero genes use sigma directly.

    Returns:
        Number of genes mutated
    """
    mutated = 0
    for i in range(len(genes)):
        if rng.random() < rate:
            scale = sigma * abs(genes[i]) if genes[i] != 0 else sigma
            genes[i] += rng.gauss(0.0, scale)
            mutated += 1
    return mutated
