"""
Individual Module

An Individual wraps a Genome with its fitness, an evaluated flag and a short
random identifier. Also holds the helpers for random IDs and for deriving
independent random streams from a parent stream.
"""

import json
import math
import random
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ga_constants import GAConstants
from ga_exceptions import EvaluationError, GAException, SerializationError, validate_fitness
from evo_components.genome import Genome


GenomeDecoder = Callable[[bytes], Genome]


def rand_string(length: int, rng: random.Random) -> str:
    """Draw a random identifier of the given length from rng."""
    return ''.join(rng.choice(GAConstants.ID_ALPHABET) for _ in range(length))


def derive_rng(rng: random.Random) -> random.Random:
    """Create an independent stream seeded from the next draw of rng."""
    return random.Random(rng.getrandbits(GAConstants.SEED_BITS))


def canonical_json(value: Any) -> str:
    """Serialize value with sorted keys and no optional whitespace."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


class Individual:
    """A genome together with its fitness and evaluation state."""

    __slots__ = ('genome', 'fitness', 'evaluated', 'id')

    def __init__(self, genome: Genome, rng: Optional[random.Random] = None,
                 individual_id: Optional[str] = None):
        if individual_id is None:
            if rng is None:
                raise ValueError("An individual needs either an rng or an explicit id")
            individual_id = rand_string(GAConstants.INDIVIDUAL_ID_LENGTH, rng)
        self.genome = genome
        self.fitness = math.inf
        self.evaluated = False
        self.id = individual_id

    def __repr__(self) -> str:
        state = f"{self.fitness:.6f}" if self.evaluated else "unevaluated"
        return f"Individual(id={self.id!r}, fitness={state})"

    def clone(self, rng: Optional[random.Random] = None) -> "Individual":
        """
        Copy the individual with an independent genome.

        With rng the copy receives a fresh ID (offspring); without it the copy
        keeps the ID (snapshot).
        """
        copy = Individual(self.genome.clone(), rng=rng,
                          individual_id=None if rng is not None else self.id)
        copy.fitness = self.fitness
        copy.evaluated = self.evaluated
        return copy

    def evaluate(self) -> float:
        """Evaluate the genome if needed and cache the fitness."""
        if self.evaluated:
            return self.fitness
        try:
            fitness = self.genome.evaluate()
        except GAException:
            raise
        except Exception as e:
            raise EvaluationError(f"Evaluation failed for individual {self.id}: {e}",
                                  individual_id=self.id) from e
        self.fitness = validate_fitness(fitness, self.id)
        self.evaluated = True
        return self.fitness

    def mutate(self, rng: random.Random) -> None:
        """Mutate the genome and invalidate the cached fitness."""
        self.genome.mutate(rng)
        self._invalidate()

    def crossover(self, mate: "Individual", rng: random.Random) -> None:
        """Cross the genome with mate's, invalidating both fitnesses."""
        self.genome.crossover(mate.genome, rng)
        self._invalidate()
        mate._invalidate()

    def _invalidate(self) -> None:
        self.fitness = math.inf
        self.evaluated = False

    def to_record(self) -> Dict[str, Any]:
        """Encode the individual as a JSON-compatible record."""
        try:
            genome_value = json.loads(self.genome.encode())
        except (TypeError, ValueError, NotImplementedError) as e:
            raise SerializationError(f"Cannot encode genome of individual {self.id}: {e}") from e
        return {
            'evaluated': self.evaluated,
            'fitness': self.fitness if self.evaluated else None,
            'genome': genome_value,
            'id': self.id,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], genome_decoder: GenomeDecoder) -> "Individual":
        """
        Decode an individual record produced by to_record().

        Raises:
            SerializationError: If the record is malformed or the genome fails to decode
        """
        try:
            individual_id = record['id']
            evaluated = record['evaluated']
            fitness = record['fitness']
            genome_value = record['genome']
        except (KeyError, TypeError) as e:
            raise SerializationError(f"Malformed individual record: {e}") from e

        if not isinstance(individual_id, str) or not isinstance(evaluated, bool):
            raise SerializationError(f"Malformed individual record: {record!r}")
        if evaluated and (isinstance(fitness, bool) or not isinstance(fitness, (int, float))):
            raise SerializationError(f"Evaluated individual {individual_id} has no numeric fitness")

        try:
            genome = genome_decoder(canonical_json(genome_value).encode('utf-8'))
        except GAException:
            raise
        except Exception as e:
            raise SerializationError(f"Cannot decode genome of individual {individual_id}: {e}") from e

        individual = cls(genome, individual_id=individual_id)
        if evaluated:
            individual.fitness = float(fitness)
            individual.evaluated = True
        return individual


def sort_by_fitness(individuals: List[Individual]) -> List[Individual]:
    """Return the individuals ordered from best (lowest) to worst fitness."""
    return sorted(individuals, key=lambda indi: indi.fitness)


def fitness_array(individuals: List[Individual]) -> np.ndarray:
    """Current fitness values as a float array."""
    return np.array([indi.fitness for indi in individuals], dtype=float)


def fitness_statistics(individuals: List[Individual]) -> Dict[str, float]:
    """
    Min, max, mean and population standard deviation of the fitnesses.

    Raises:
        ValueError: If there are no individuals
    """
    if not individuals:
        raise ValueError("Cannot compute statistics of an empty group")
    fitnesses = fitness_array(individuals)
    return {
        'min': float(np.min(fitnesses)),
        'max': float(np.max(fitnesses)),
        'avg': float(np.mean(fitnesses)),
        'std': float(np.std(fitnesses)),
    }
