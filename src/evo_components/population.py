"""
Population Management Module

Handles population creation, statistics and persistence for the
multi-population genetic algorithm.

Features:
- Deterministic population IDs drawn from the population's random stream
- Sequential or fork-join creation of individuals on derived streams
- Fitness statistics and the per-population log line
- Canonical JSON encoding with an injected genome decoder
"""

import json
import random
from typing import Any, Callable, Dict, List, Optional

from ga_constants import GAConstants
from ga_exceptions import PopulationError, SerializationError
from evo_components.evaluation import evaluate_individuals, fork_join
from evo_components.genome import Genome
from evo_components.individual import (
    GenomeDecoder, Individual, canonical_json, derive_rng,
    fitness_statistics, rand_string, sort_by_fitness
)


GenomeFactory = Callable[[random.Random], Genome]


class Population:
    """
    An ordered, fixed-size group of individuals evolved together.

    The population owns its random stream; models, selectors and speciators
    working on it draw from population.rng only.
    """

    def __init__(self, individuals: List[Individual], rng: random.Random,
                 population_id: Optional[str] = None, generation: int = 0):
        if not individuals:
            raise PopulationError("A population needs at least one individual")
        self.individuals = individuals
        self.rng = rng
        self.id = population_id if population_id is not None else rand_string(
            GAConstants.POPULATION_ID_LENGTH, rng)
        self.generation = generation

    def __len__(self) -> int:
        return len(self.individuals)

    def __repr__(self) -> str:
        return f"Population(id={self.id!r}, generation={self.generation}, size={len(self)})"

    def evaluate(self, parallel: bool = False) -> int:
        """Evaluate the pending individuals; see evaluate_individuals()."""
        return evaluate_individuals(self.individuals, parallel)

    def best(self) -> Individual:
        """Return the individual with the lowest fitness."""
        return min(self.individuals, key=lambda indi: indi.fitness)

    def sorted_individuals(self) -> List[Individual]:
        """Individuals ordered from best to worst."""
        return sort_by_fitness(self.individuals)

    def statistics(self) -> Dict[str, float]:
        """Min, max, mean and standard deviation of the current fitnesses."""
        return fitness_statistics(self.individuals)

    def log(self, sink) -> None:
        """
        Write the statistics line for this population to sink.

        Args:
            sink: Anything with an info(str) method (logging.Logger, GALogger)
        """
        stats = self.statistics()
        precision = GAConstants.LOG_PRECISION
        sink.info(
            f"pop_id={self.id} "
            f"min={stats['min']:.{precision}f} "
            f"max={stats['max']:.{precision}f} "
            f"avg={stats['avg']:.{precision}f} "
            f"std={stats['std']:.{precision}f}"
        )

    def to_record(self) -> Dict[str, Any]:
        """Encode the population as a JSON-compatible record."""
        return {
            'generation': self.generation,
            'id': self.id,
            'individuals': [indi.to_record() for indi in self.individuals],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], genome_decoder: GenomeDecoder,
                    rng: random.Random) -> "Population":
        """
        Decode a record produced by to_record().

        Raises:
            SerializationError: If the record is malformed or a genome fails to decode
        """
        if not isinstance(record, dict):
            raise SerializationError(f"Population record must be an object, got {type(record).__name__}")
        try:
            population_id = record['id']
            generation = record['generation']
            individual_records = record['individuals']
        except KeyError as e:
            raise SerializationError(f"Population record is missing {e}") from e

        if not isinstance(population_id, str):
            raise SerializationError(f"Population id must be a string, got {population_id!r}")
        if isinstance(generation, bool) or not isinstance(generation, int) or generation < 0:
            raise SerializationError(f"Population generation must be a non-negative integer, got {generation!r}")
        if not isinstance(individual_records, list) or not individual_records:
            raise SerializationError(f"Population {population_id} has no individuals")

        individuals = [Individual.from_record(item, genome_decoder) for item in individual_records]
        return cls(individuals, rng=rng, population_id=population_id, generation=generation)


def new_population(size: int, parallel: bool, genome_factory: GenomeFactory,
                   rng: random.Random) -> Population:
    """
    Create a population of size fresh, unevaluated individuals.

    The ID is drawn first from rng, then one stream per individual is derived
    from rng in index order, so sequential and parallel creation give the
    same population.

    Args:
        size: Number of individuals
        parallel: Build genomes with a thread pool of at most size workers
        genome_factory: Callable building a random genome from a stream
        rng: Stream owned by the new population
    """
    if size < 1:
        raise PopulationError(f"Population size ({size}) must be positive")

    population_id = rand_string(GAConstants.POPULATION_ID_LENGTH, rng)
    streams = [derive_rng(rng) for _ in range(size)]

    def create(stream: random.Random) -> Individual:
        return Individual(genome_factory(stream), rng=stream)

    individuals = fork_join(create, streams, parallel)
    return Population(individuals, rng=rng, population_id=population_id)


def _load_json(data) -> Any:
    try:
        return json.loads(data)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Malformed population data: {e}") from e


def encode_population(population: Population) -> bytes:
    """Canonical JSON encoding of one population."""
    return canonical_json(population.to_record()).encode('utf-8')


def decode_population(data, genome_decoder: GenomeDecoder, rng: random.Random,
                      expected_size: Optional[int] = None) -> Population:
    """
    Decode a population encoded by encode_population().

    Raises:
        SerializationError: On malformed data, decoder failure or size mismatch
    """
    population = Population.from_record(_load_json(data), genome_decoder, rng)
    if expected_size is not None and len(population) != expected_size:
        raise SerializationError(
            f"Population {population.id} has {len(population)} individuals, expected {expected_size}")
    return population


def encode_populations(populations: List[Population]) -> bytes:
    """Canonical JSON encoding of a populations collection."""
    return canonical_json([pop.to_record() for pop in populations]).encode('utf-8')


def populations_from_records(records: Any, n_pops: int, genome_decoder: GenomeDecoder,
                             rng: random.Random,
                             expected_size: Optional[int] = None) -> List[Population]:
    """
    Decode a list of population records, giving each population a stream
    derived from rng in order.

    Raises:
        SerializationError: If the count, a size or any record is invalid
    """
    if not isinstance(records, list):
        raise SerializationError("Populations must be encoded as a list")
    if len(records) != n_pops:
        raise SerializationError(f"Expected {n_pops} populations, found {len(records)}")

    populations = []
    for record in records:
        population = Population.from_record(record, genome_decoder, derive_rng(rng))
        if expected_size is not None and len(population) != expected_size:
            raise SerializationError(
                f"Population {population.id} has {len(population)} individuals, expected {expected_size}")
        populations.append(population)
    return populations


def decode_populations(data, n_pops: int, genome_decoder: GenomeDecoder,
                       rng: random.Random, expected_size: Optional[int] = None) -> List[Population]:
    """Decode a collection encoded by encode_populations()."""
    return populations_from_records(_load_json(data), n_pops, genome_decoder, rng, expected_size)
