"""
Evolution Components Module

Modular components of the multi-population genetic algorithm.
Each component handles a specific aspect of the evolutionary process:

- Genome / Individual: candidate contract and its evaluated wrapper
- Population: population lifecycle, statistics and JSON codec
- EvaluationEngine: sequential or fork-join fitness evaluation
- Selectors: tournament, elitism and roulette selection
- Models: generational, steady-state, down-to-size, ring, annealing, mutation-only
- Migrators: ring migration between populations
- Speciators: k-medoids and fitness-interval niching
- HallOfFame: best individuals seen during a run
- ConvergenceDetector: stagnation-based early stop

Usage:
    from evo_components import ModGenerational, SelTournament
    from evo_components.vector_genome import vector_factory, sphere
"""

# Core components
from .genome import Genome
from .individual import Individual
from .population import Population, new_population
from .evaluation import EvaluationEngine, evaluate_individuals, fork_join
from .hall_of_fame import HallOfFame
from .convergence_detection import ConvergenceDetector

# Strategies
from .selection import Selector, SelTournament, SelElitism, SelRoulette
from .models import (
    Model,
    ModGenerational,
    ModSteadyState,
    ModDownToSize,
    ModRing,
    ModSimulatedAnnealing,
    ModMutationOnly
)
from .migration import Migrator, MigRing
from .speciation import Speciator, SpecKMedoids, SpecFitnessInterval

__all__ = [
    # Core components
    'Genome',
    'Individual',
    'Population',
    'new_population',
    'EvaluationEngine',
    'evaluate_individuals',
    'fork_join',
    'HallOfFame',
    'ConvergenceDetector',

    # Strategies
    'Selector',
    'SelTournament',
    'SelElitism',
    'SelRoulette',
    'Model',
    'ModGenerational',
    'ModSteadyState',
    'ModDownToSize',
    'ModRing',
    'ModSimulatedAnnealing',
    'ModMutationOnly',
    'Migrator',
    'MigRing',
    'Speciator',
    'SpecKMedoids',
    'SpecFitnessInterval'
]

# Version information
__version__ = '1.0.0'
