"""
Float Vector Genome

Reference genome for continuous minimization problems, used by the demo CLI
and the tests. Ships the usual benchmark objectives and a Euclidean metric
for k-medoids speciation.
"""

import json
import math
import random
from typing import Callable, Dict, List, Sequence

import numpy as np

from ga_constants import VectorConstants
from evo_components.genetic_operations import cross_point, cross_uniform, mut_normal_float
from evo_components.genome import Genome
from evo_components.individual import canonical_json


Objective = Callable[[np.ndarray], float]


def sphere(x: np.ndarray) -> float:
    """Sum of squares; minimum 0 at the origin."""
    return float(np.sum(x ** 2))


def rastrigin(x: np.ndarray) -> float:
    """Rastrigin function; minimum 0 at the origin."""
    return float(10 * len(x) + np.sum(x ** 2 - 10 * np.cos(2 * math.pi * x)))


def ackley(x: np.ndarray) -> float:
    """Ackley function; minimum 0 at the origin."""
    n = len(x)
    term1 = -20 * math.exp(-0.2 * math.sqrt(float(np.sum(x ** 2)) / n))
    term2 = -math.exp(float(np.sum(np.cos(2 * math.pi * x))) / n)
    return term1 + term2 + 20 + math.e


def drop_wave(x: np.ndarray) -> float:
    """Drop-wave function; minimum -1 at the origin."""
    squares = float(np.sum(x ** 2))
    return -(1 + math.cos(12 * math.sqrt(squares))) / (0.5 * squares + 2)


OBJECTIVES: Dict[str, Objective] = {
    'sphere': sphere,
    'rastrigin': rastrigin,
    'ackley': ackley,
    'drop_wave': drop_wave,
}


class FloatVector(Genome):
    """
    A bounded vector of floats minimizing objective.

    Crossover is uniform unless points is set, in which case parents exchange
    alternate segments between that many cut points (capped by the length).
    """

    def __init__(self, values: Sequence[float], objective: Objective,
                 sigma: float = VectorConstants.MUTATION_SIGMA,
                 low: float = VectorConstants.LOWER_BOUND,
                 high: float = VectorConstants.UPPER_BOUND,
                 points: int = 0):
        self.values: List[float] = [float(v) for v in values]
        self.objective = objective
        self.sigma = sigma
        self.low = low
        self.high = high
        self.points = points

    def __repr__(self) -> str:
        return f"FloatVector({self.values})"

    def evaluate(self) -> float:
        return self.objective(np.asarray(self.values, dtype=float))

    def mutate(self, rng: random.Random) -> None:
        mut_normal_float(self.values, VectorConstants.GENE_MUTATION_RATE, rng, self.sigma)
        self.values = [min(max(v, self.low), self.high) for v in self.values]

    def crossover(self, other: "FloatVector", rng: random.Random) -> None:
        if self.points > 0 and len(self.values) > 1:
            cross_point(self.values, other.values, min(self.points, len(self.values) - 1), rng)
        else:
            cross_uniform(self.values, other.values, rng)

    def clone(self) -> "FloatVector":
        return FloatVector(list(self.values), self.objective, self.sigma, self.low, self.high,
                           self.points)

    def encode(self) -> bytes:
        return canonical_json({
            'high': self.high,
            'low': self.low,
            'points': self.points,
            'sigma': self.sigma,
            'values': self.values,
        }).encode('utf-8')


def vector_factory(n: int, low: float, high: float, objective: Objective,
                   sigma: float = VectorConstants.MUTATION_SIGMA,
                   points: int = 0) -> Callable[[random.Random], FloatVector]:
    """Genome factory drawing n uniform values in [low, high]."""
    def factory(rng: random.Random) -> FloatVector:
        return FloatVector([rng.uniform(low, high) for _ in range(n)], objective,
                           sigma=sigma, low=low, high=high, points=points)
    return factory


def vector_decoder(objective: Objective) -> Callable[[bytes], FloatVector]:
    """Genome decoder for FloatVector.encode() output."""
    def decode(data: bytes) -> FloatVector:
        value = json.loads(data)
        return FloatVector(value['values'], objective, sigma=value['sigma'],
                           low=value['low'], high=value['high'],
                           points=value.get('points', 0))
    return decode


def euclidean_distance(a, b) -> float:
    """Distance between the vectors of two individuals holding FloatVector genomes."""
    return float(np.linalg.norm(np.subtract(a.genome.values, b.genome.values)))
