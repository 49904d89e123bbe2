"""
Custom Exception Classes for the Genetic Algorithm Engine

Provides specific, meaningful exceptions for each failure mode of a run so
callers can tell configuration mistakes from evaluation or policy failures.
"""

import math
import numbers


class GAException(Exception):
    """Base exception for all genetic algorithm related errors."""
    pass


class ConfigurationError(GAException):
    """Raised when GA configuration is invalid or inconsistent."""
    pass


class EvaluationError(GAException):
    """Raised when a genome fails to evaluate."""

    def __init__(self, message: str, individual_id: str = None,
                 population_id: str = None):
        super().__init__(message)
        self.individual_id = individual_id
        self.population_id = population_id


class InvalidFitnessError(EvaluationError):
    """Raised when fitness evaluation returns an unusable value."""

    def __init__(self, fitness_value, individual_id: str = None):
        super().__init__(f"Invalid fitness value: {fitness_value!r}",
                         individual_id=individual_id)
        self.fitness_value = fitness_value


class PopulationError(GAException):
    """Raised when a population invariant is broken."""
    pass


class ModelError(GAException):
    """Raised when an evolution model cannot apply or breaks its contract."""
    pass


class SelectionError(GAException):
    """Raised when selection operations fail."""

    def __init__(self, message: str, population_size: int = None,
                 selection_type: str = None):
        super().__init__(message)
        self.population_size = population_size
        self.selection_type = selection_type


class MigrationError(GAException):
    """Raised when a migrator fails while exchanging individuals."""
    pass


class SpeciationError(GAException):
    """Raised when a speciator cannot partition a population."""

    def __init__(self, message: str, n_individuals: int = None,
                 n_species: int = None):
        super().__init__(message)
        self.n_individuals = n_individuals
        self.n_species = n_species


class SerializationError(GAException):
    """Raised when encoding or decoding populations fails."""
    pass


def validate_fitness(fitness, individual_id: str = None) -> float:
    """
    Validate a fitness value returned by a genome.

    Args:
        fitness: Value returned by Genome.evaluate()
        individual_id: ID of the individual for error context

    Returns:
        The fitness as a float

    Raises:
        InvalidFitnessError: If fitness is not a real number or is NaN
    """
    if isinstance(fitness, bool) or not isinstance(fitness, numbers.Real):
        raise InvalidFitnessError(fitness, individual_id=individual_id)

    fitness = float(fitness)
    if math.isnan(fitness):
        raise InvalidFitnessError(fitness, individual_id=individual_id)

    return fitness
