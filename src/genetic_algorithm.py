"""
Multi-Population Genetic Algorithm

Orchestrates a run: creates the populations, then evaluates, records,
evolves and migrates them generation after generation until the budget is
spent or the early-stop predicate fires.
"""

import json
import random
import time
from typing import Callable, List, Optional

from tqdm import tqdm

from ga_config import GAConfig
from ga_exceptions import ConfigurationError, ModelError, SerializationError
from ga_logging import get_logger
from evo_components.evaluation import EvaluationEngine, fork_join
from evo_components.genome import Genome
from evo_components.hall_of_fame import HallOfFame
from evo_components.individual import Individual, canonical_json, derive_rng
from evo_components.population import Population, new_population, populations_from_records


class GeneticAlgorithm:
    """
    Orchestrator of a multi-population run.

    Attributes:
        populations: The populations, created by initialize() or load_json()
        hall_of_fame: Best individuals seen so far
        generations: Number of completed generations
        age: Seconds spent in the generational loop
    """

    def __init__(self, config: GAConfig) -> None:
        if not isinstance(config, GAConfig):
            raise ConfigurationError(f"Expected a GAConfig, got {type(config).__name__}")
        config.validate()

        self.config = config
        self.logger = get_logger("GeneticAlgorithm")
        self.rng = config.rng if config.rng is not None else random.Random(time.time_ns())

        self.populations: List[Population] = []
        self.hall_of_fame = HallOfFame(config.hof_size)
        self.generations = 0
        self.age = 0.0

        self.evaluation_engine = EvaluationEngine(parallel=config.parallel_eval)

        config.model.bind(self)

    def __repr__(self) -> str:
        return f"GeneticAlgorithm({self.config}, generations={self.generations})"

    @property
    def current_best(self) -> Optional[Individual]:
        """Best individual recorded in the hall of fame, if any."""
        return self.hall_of_fame.best

    def initialize(self, genome_factory: Callable[[random.Random], Genome]) -> None:
        """
        Create n_pops fresh populations.

        Each population gets a stream seeded from the master stream in index
        order before any work starts.
        """
        streams = [derive_rng(self.rng) for _ in range(self.config.n_pops)]

        def create(stream: random.Random) -> Population:
            return new_population(self.config.pop_size, False, genome_factory, stream)

        self.populations = fork_join(create, streams, self.config.parallel_init)
        self.logger.debug("Populations initialized",
                          populations=len(self.populations),
                          ids=",".join(pop.id for pop in self.populations))

    def minimize(self, genome_factory: Callable[[random.Random], Genome]) -> Optional[Individual]:
        """
        Run the genetic algorithm.

        Populations restored with load_json() are evolved as they are;
        otherwise new ones are built with genome_factory.

        Args:
            genome_factory: Callable building a random genome from a stream

        Returns:
            The best individual found
        """
        config = self.config
        if not self.populations:
            self.initialize(genome_factory)

        self.logger.log_config_summary(config)

        generations = range(config.n_generations)
        if config.show_progress:
            generations = tqdm(generations, total=config.n_generations, desc="Evolving Populations")

        for generation in generations:
            start_time = time.time()
            self.logger.log_generation_start(generation, config.n_pops, config.pop_size)

            self.evaluation_engine.evaluate_populations(self.populations)

            for pop in self.populations:
                self.hall_of_fame.update(pop.individuals)

            if config.logger is not None:
                for pop in self.populations:
                    pop.log(config.logger)

            fork_join(self._evolve, self.populations, config.parallel_eval)

            if config.migrator is not None and generation > 0 and generation % config.mig_frequency == 0:
                config.migrator.apply(self.populations, self.rng)
                self.logger.log_migration(generation, type(config.migrator).__name__, len(self.populations))

            for pop in self.populations:
                pop.generation += 1
            self.generations += 1
            elapsed = time.time() - start_time
            self.age += elapsed

            best = self.current_best
            self.logger.log_generation_complete(
                generation, best.fitness if best is not None else float('inf'), elapsed,
                self.evaluation_engine.stats['peak_memory_usage'])

            if config.callback is not None:
                config.callback(self)

            if config.early_stop is not None and config.early_stop(self):
                self.logger.log_early_stop(generation)
                break

        return self.current_best

    def _evolve(self, population: Population) -> None:
        """Apply the model to a population, species by species when speciating."""
        config = self.config
        size = len(population)

        if config.speciator is None:
            config.model.apply(population)
        else:
            species = config.speciator.apply(population.individuals, population.rng)
            individuals = []
            for members in species:
                group = Population(list(members), rng=population.rng,
                                   population_id=population.id,
                                   generation=population.generation)
                config.model.apply(group)
                individuals.extend(group.individuals)
            population.individuals = individuals

        if len(population) != size:
            raise ModelError(f"{type(config.model).__name__} changed the size of population "
                             f"{population.id} from {size} to {len(population)}")

    def to_json(self) -> bytes:
        """Canonical JSON snapshot of the run: counters, hall of fame and populations."""
        return canonical_json({
            'generations': self.generations,
            'hall_of_fame': self.hall_of_fame.to_records(),
            'populations': [pop.to_record() for pop in self.populations],
        }).encode('utf-8')

    def load_json(self, data, genome_decoder=None) -> None:
        """
        Restore a snapshot written by to_json().

        Nothing is changed unless the whole snapshot decodes. Restored
        populations receive fresh streams derived from the master stream.

        Raises:
            SerializationError: On malformed data, a decoder failure or a
                population count or size that does not match the config
        """
        decoder = genome_decoder or self.config.genome_decoder
        if decoder is None:
            raise SerializationError("Restoring a snapshot needs a genome decoder")

        try:
            snapshot = json.loads(data)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Malformed snapshot: {e}") from e
        if not isinstance(snapshot, dict):
            raise SerializationError("Snapshot must be a JSON object")

        try:
            generations = snapshot['generations']
            hof_records = snapshot['hall_of_fame']
            pop_records = snapshot['populations']
        except KeyError as e:
            raise SerializationError(f"Snapshot is missing {e}") from e
        if isinstance(generations, bool) or not isinstance(generations, int) or generations < 0:
            raise SerializationError(f"Snapshot generations must be a non-negative integer, got {generations!r}")

        populations = populations_from_records(pop_records, self.config.n_pops, decoder,
                                               self.rng, expected_size=self.config.pop_size)
        hall_of_fame = HallOfFame.from_records(self.config.hof_size, hof_records, decoder)

        self.populations = populations
        self.hall_of_fame = hall_of_fame
        self.generations = generations
        self.logger.info("Snapshot restored", generations=generations,
                         populations=len(populations))
