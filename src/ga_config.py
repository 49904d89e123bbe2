"""
Configuration Management for the Genetic Algorithm

Validates and organizes the options of a run into a single config object.
Every problem found is reported at once, before any orchestrator exists.
"""

import random
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ga_constants import DefaultConfig
from ga_exceptions import ConfigurationError
from evo_components.genome import Genome
from evo_components.migration import Migrator, MigRing
from evo_components.models import (
    Model, ModDownToSize, ModGenerational, ModMutationOnly, ModRing,
    ModSimulatedAnnealing, ModSteadyState
)
from evo_components.selection import SelElitism, SelTournament
from evo_components.speciation import SpecFitnessInterval, SpecKMedoids, Speciator


MODEL_CHOICES = ["generational", "steady_state", "down_to_size", "ring",
                 "annealing", "mutation_only"]
SPECIATION_CHOICES = ["interval", "kmedoids"]


@dataclass
class GAConfig:
    """
    Configuration container for a multi-population run.

    n_pops, pop_size, n_generations and hof_size are required; the model is
    required too, although it defaults to None so that a missing model is
    reported together with the other problems.
    """

    # Core parameters
    n_pops: int
    pop_size: int
    n_generations: int
    hof_size: int
    model: Optional[Model] = None

    # Concurrency
    parallel_init: bool = False
    parallel_eval: bool = False

    # Optional strategies
    migrator: Optional[Migrator] = None
    mig_frequency: int = 0
    speciator: Optional[Speciator] = None

    # Hooks
    callback: Optional[Callable[[Any], None]] = None
    early_stop: Optional[Callable[[Any], bool]] = None

    # Run context
    rng: Optional[random.Random] = None
    logger: Any = None                   # Statistics sink, anything with info(str)
    genome_decoder: Optional[Callable[[bytes], Genome]] = None
    show_progress: bool = False

    def __post_init__(self):
        """Validate the configuration after initialization."""
        self._validate()

    def validate(self):
        """Re-run validation, e.g. after fields were changed in place."""
        self._validate()

    def _validate(self):
        errors = []

        counts_valid = True
        for name, label in (('n_pops', "Number of populations"),
                            ('pop_size', "Population size"),
                            ('n_generations', "Number of generations"),
                            ('hof_size', "Hall of fame size")):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                errors.append(f"{label} ({name}={value!r}) must be a positive integer")
                counts_valid = False

        if self.model is None:
            errors.append("Model is required")
        elif not isinstance(self.model, Model):
            errors.append(f"Model must be a Model instance, got {type(self.model).__name__}")
        else:
            self._collect(errors, self.model.validate)

        if self.migrator is not None:
            if not isinstance(self.migrator, Migrator):
                errors.append(f"Migrator must be a Migrator instance, got {type(self.migrator).__name__}")
            else:
                self._collect(errors, self.migrator.validate)
                if counts_valid:
                    self._collect(errors, lambda: self.migrator.check_populations(self.n_pops, self.pop_size))
            if isinstance(self.mig_frequency, bool) or not isinstance(self.mig_frequency, int) \
                    or self.mig_frequency < 1:
                errors.append(f"Migration frequency ({self.mig_frequency!r}) must be positive "
                              f"when a migrator is set")

        if self.speciator is not None:
            if not isinstance(self.speciator, Speciator):
                errors.append(f"Speciator must be a Speciator instance, got {type(self.speciator).__name__}")
            else:
                self._collect(errors, self.speciator.validate)
                if counts_valid:
                    self._collect(errors, lambda: self.speciator.check_population(self.pop_size))

        for name in ('callback', 'early_stop', 'genome_decoder'):
            value = getattr(self, name)
            if value is not None and not callable(value):
                errors.append(f"{name} must be callable")

        if self.rng is not None and not isinstance(self.rng, random.Random):
            errors.append(f"rng must be a random.Random, got {type(self.rng).__name__}")
        if self.logger is not None and not callable(getattr(self.logger, 'info', None)):
            errors.append("logger must provide an info() method")

        if errors:
            raise ConfigurationError("Configuration validation failed:\n" +
                                     "\n".join(f"  - {error}" for error in errors))

    @staticmethod
    def _collect(errors, check):
        try:
            check()
        except ConfigurationError as e:
            errors.append(str(e))

    @classmethod
    def default(cls) -> 'GAConfig':
        """A valid single-population configuration with a generational model."""
        return cls(
            n_pops=DefaultConfig.N_POPS,
            pop_size=DefaultConfig.POP_SIZE,
            n_generations=DefaultConfig.N_GENERATIONS,
            hof_size=DefaultConfig.HOF_SIZE,
            model=ModGenerational(
                selector=SelTournament(DefaultConfig.TOURNAMENT_SIZE),
                mut_rate=DefaultConfig.MUTATION_RATE,
                cross_rate=DefaultConfig.CROSSOVER_RATE
            )
        )

    @classmethod
    def from_args(cls, args, genome_decoder=None, metric=None) -> 'GAConfig':
        """
        Create configuration from parsed CLI arguments.

        Args:
            args: argparse.Namespace from CLI parsing
            genome_decoder: Decoder used when a snapshot is restored
            metric: Distance between individuals, for k-medoids speciation

        Returns:
            Validated GAConfig instance
        """
        migrator = None
        if args.n_pops > 1 and args.mig_frequency > 0:
            migrator = MigRing(args.n_migrants)

        speciator = None
        if args.species > 0:
            if args.speciation == "kmedoids":
                speciator = SpecKMedoids(args.species, min_per_cluster=1, metric=metric)
            else:
                speciator = SpecFitnessInterval(args.species)

        return cls(
            n_pops=args.n_pops,
            pop_size=args.pop_size,
            n_generations=args.generations,
            hof_size=args.hof_size,
            model=build_model(args),
            parallel_init=args.parallel,
            parallel_eval=args.parallel,
            migrator=migrator,
            mig_frequency=args.mig_frequency if migrator is not None else 0,
            speciator=speciator,
            rng=random.Random(args.seed) if args.seed is not None else None,
            genome_decoder=genome_decoder,
            show_progress=args.progress
        )

    def new_ga(self):
        """Build a GeneticAlgorithm from this configuration."""
        from genetic_algorithm import GeneticAlgorithm
        return GeneticAlgorithm(self)

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        summary = f"""GA Configuration:
  Populations: {self.n_pops} x {self.pop_size} individuals
  Generations: {self.n_generations}
  Hall of fame: {self.hof_size}
  Model: {self.model!r}
  Parallel: init={'enabled' if self.parallel_init else 'disabled'}, eval={'enabled' if self.parallel_eval else 'disabled'}"""

        if self.migrator is not None:
            summary += f"""
  Migration: {self.migrator!r} every {self.mig_frequency} generations"""
        if self.speciator is not None:
            summary += f"""
  Speciation: {self.speciator!r}"""
        if self.early_stop is not None:
            summary += f"""
  Early stop: {type(self.early_stop).__name__}"""

        return summary

    def __str__(self) -> str:
        return (f"GAConfig(pops={self.n_pops}, pop_size={self.pop_size}, "
                f"gen={self.n_generations}, hof={self.hof_size})")


def build_model(args) -> Model:
    """Map the CLI model options to a Model instance."""
    selector = SelTournament(args.tournament_size)
    if args.model == "generational":
        return ModGenerational(selector, args.mutation_rate, args.crossover_rate)
    if args.model == "steady_state":
        return ModSteadyState(selector, keep_best=True, mut_rate=args.mutation_rate,
                              cross_rate=args.crossover_rate)
    if args.model == "down_to_size":
        return ModDownToSize(args.pop_size, selector, SelElitism(),
                             args.mutation_rate, args.crossover_rate)
    if args.model == "ring":
        return ModRing(selector, args.mutation_rate)
    if args.model == "annealing":
        return ModSimulatedAnnealing(t=args.temperature, t_min=args.min_temperature,
                                     alpha=args.cooling)
    if args.model == "mutation_only":
        return ModMutationOnly(max(1, args.pop_size // 2), selector, strict=True)
    raise ConfigurationError(f"Unknown model '{args.model}', expected one of {MODEL_CHOICES}")
