"""
Configuration Constants for the Multi-Population Genetic Algorithm

Centralizes magic numbers and default values so the orchestrator, the
components and the CLI agree on them.
"""

import string


class GAConstants:
    """Core engine constants."""

    # Identifiers
    POPULATION_ID_LENGTH = 3        # Letters in a population ID
    INDIVIDUAL_ID_LENGTH = 6        # Letters in an individual ID
    ID_ALPHABET = string.ascii_letters

    # Statistics log line
    LOG_PRECISION = 6               # Fractional digits in the stats line

    # Stream derivation
    SEED_BITS = 63                  # Bits drawn from a parent stream per child seed


class DefaultConfig:
    """Values used by GAConfig.default() and the CLI."""

    N_POPS = 1
    POP_SIZE = 30
    N_GENERATIONS = 50
    HOF_SIZE = 1
    TOURNAMENT_SIZE = 3
    MUTATION_RATE = 0.5
    CROSSOVER_RATE = 0.7


class VectorConstants:
    """Defaults for the reference float-vector genome."""

    DIMENSION = 2
    LOWER_BOUND = -10.0
    UPPER_BOUND = 10.0
    MUTATION_SIGMA = 1.0
    GENE_MUTATION_RATE = 0.8


class ConvergenceConstants:
    """Defaults for stagnation-based early stopping."""

    MIN_GENERATIONS = 20
    PATIENCE = 10
    THRESHOLD = 1e-6


class MemoryConstants:
    """Memory-related unit conversions."""

    BYTES_PER_GB = 1024 ** 3


def bytes_to_gb(bytes_value: int) -> float:
    """Convert bytes to gigabytes."""
    return bytes_value / MemoryConstants.BYTES_PER_GB
