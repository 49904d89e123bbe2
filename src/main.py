"""
Multi-Population Genetic Algorithm Demo

Command-line interface running the engine on a continuous benchmark
function with the reference float-vector genome.

Features:
- Benchmark objectives (sphere, rastrigin, ackley, drop_wave)
- Any of the bundled evolution models
- Ring migration, speciation and parallel populations
- Stagnation-based early stopping
- JSON snapshots of a run that can be restored and continued

Usage:
    python main.py --objective rastrigin --n_pops 4 --pop_size 40 --mig_frequency 5
"""

import argparse
import os
from pathlib import Path
from typing import List, Optional

from genetic_algorithm import GeneticAlgorithm
from ga_config import GAConfig, MODEL_CHOICES, SPECIATION_CHOICES
from ga_constants import ConvergenceConstants, DefaultConfig, VectorConstants
from ga_exceptions import GAException
from ga_logging import get_logger, setup_logging
from evo_components.convergence_detection import ConvergenceDetector
from evo_components.vector_genome import OBJECTIVES, euclidean_distance, vector_decoder, vector_factory


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser of the demo CLI."""
    parser = argparse.ArgumentParser(
        description='Minimize a benchmark function with a multi-population genetic algorithm.')

    # Problem
    parser.add_argument('--objective', '-f', choices=sorted(OBJECTIVES), default='rastrigin',
                        help="Benchmark function to minimize (default: rastrigin)")
    parser.add_argument('--dimension', '-d', type=int, default=VectorConstants.DIMENSION,
                        help=f"Number of variables (default: {VectorConstants.DIMENSION})")
    parser.add_argument('--low', type=float, default=VectorConstants.LOWER_BOUND,
                        help=f"Lower bound of every variable (default: {VectorConstants.LOWER_BOUND})")
    parser.add_argument('--high', type=float, default=VectorConstants.UPPER_BOUND,
                        help=f"Upper bound of every variable (default: {VectorConstants.UPPER_BOUND})")

    # GA parameters
    parser.add_argument('--n_pops', '-np', type=int, default=DefaultConfig.N_POPS,
                        help=f"Number of populations (default: {DefaultConfig.N_POPS})")
    parser.add_argument('--pop_size', '-ps', type=int, default=DefaultConfig.POP_SIZE,
                        help=f"Individuals per population (default: {DefaultConfig.POP_SIZE})")
    parser.add_argument('--generations', '-g', type=int, default=DefaultConfig.N_GENERATIONS,
                        help=f"Number of generations (default: {DefaultConfig.N_GENERATIONS})")
    parser.add_argument('--hof_size', type=int, default=DefaultConfig.HOF_SIZE,
                        help=f"Hall of fame size (default: {DefaultConfig.HOF_SIZE})")
    parser.add_argument('--model', '-m', choices=MODEL_CHOICES, default='generational',
                        help="Evolution model (default: generational)")
    parser.add_argument('--mutation_rate', '-mr', type=float, default=DefaultConfig.MUTATION_RATE,
                        help=f"Mutation rate (default: {DefaultConfig.MUTATION_RATE})")
    parser.add_argument('--crossover_rate', '-mcr', type=float, default=DefaultConfig.CROSSOVER_RATE,
                        help=f"Crossover rate (default: {DefaultConfig.CROSSOVER_RATE})")
    parser.add_argument('--tournament_size', type=int, default=DefaultConfig.TOURNAMENT_SIZE,
                        help=f"Tournament size (default: {DefaultConfig.TOURNAMENT_SIZE})")
    parser.add_argument('--crossover_points', type=int, default=0,
                        help="Cut points of n-point crossover, 0 uses uniform crossover (default: 0)")

    # Simulated annealing
    parser.add_argument('--temperature', type=float, default=10.0,
                        help="Initial temperature for the annealing model (default: 10.0)")
    parser.add_argument('--min_temperature', type=float, default=0.01,
                        help="Minimum temperature for the annealing model (default: 0.01)")
    parser.add_argument('--cooling', type=float, default=0.95,
                        help="Cooling factor for the annealing model (default: 0.95)")

    # Migration and speciation
    parser.add_argument('--mig_frequency', type=int, default=0,
                        help="Migrate every N generations, 0 disables migration (default: 0)")
    parser.add_argument('--n_migrants', type=int, default=1,
                        help="Migrants sent by each population (default: 1)")
    parser.add_argument('--species', type=int, default=0,
                        help="Number of species per population, 0 disables speciation (default: 0)")
    parser.add_argument('--speciation', choices=SPECIATION_CHOICES, default='interval',
                        help="Speciation policy (default: interval)")

    # Stopping
    parser.add_argument('--early_stop', action='store_true',
                        help="Stop when the best fitness stagnates")
    parser.add_argument('--patience', type=int, default=ConvergenceConstants.PATIENCE,
                        help=f"Generations without improvement before stopping (default: {ConvergenceConstants.PATIENCE})")

    # Run context
    parser.add_argument('--parallel', action='store_true',
                        help="Initialize, evaluate and evolve populations in parallel threads")
    parser.add_argument('--seed', type=int, default=None, help="Random seed")
    parser.add_argument('--progress', action='store_true', help="Show a progress bar")
    parser.add_argument('--log_level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help="Log level (default: INFO)")
    parser.add_argument('--log_populations', action='store_true',
                        help="Log the fitness statistics of every population each generation")
    parser.add_argument('--log_to_file', action='store_true', help="Also write logs to the output directory")
    parser.add_argument('--output_dir', '-o', type=str, default="ga_results",
                        help="Folder for log files and snapshots (default: 'ga_results')")
    parser.add_argument('--snapshot', type=str, default=None,
                        help="Write a JSON snapshot of the run to this path")
    parser.add_argument('--restore', type=str, default=None,
                        help="Continue the run stored in this JSON snapshot")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point of the demo.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    logger = setup_logging(
        level=args.log_level,
        log_to_file=args.log_to_file,
        output_dir=args.output_dir,
        console_colors=True
    )

    objective = OBJECTIVES[args.objective]
    try:
        config = GAConfig.from_args(args, genome_decoder=vector_decoder(objective),
                                    metric=euclidean_distance)
    except GAException as e:
        logger.critical("Invalid configuration", exception=e)
        return 2

    if args.early_stop:
        config.early_stop = ConvergenceDetector(patience=args.patience)
    if args.log_populations:
        config.logger = get_logger("populations")

    logger.info(config.summary())

    ga = GeneticAlgorithm(config)

    snapshot = None
    if args.restore:
        try:
            snapshot = Path(args.restore).read_bytes()
        except OSError as e:
            logger.critical("Cannot read snapshot", exception=e, path=args.restore)
            return 1

    try:
        if snapshot is not None:
            ga.load_json(snapshot)
        best = ga.minimize(vector_factory(args.dimension, args.low, args.high, objective,
                                          points=args.crossover_points))
    except GAException as e:
        logger.critical("GA execution failed", exception=e)
        return 1

    if best is not None:
        logger.info(f"GA completed - Best fitness: {best.fitness:.6f}")
        logger.info(f"Best solution: {best.genome.values}", individual=best.id)
    logger.info(f"Generations: {ga.generations}, elapsed: {ga.age:.2f}s")

    if args.snapshot:
        try:
            snapshot_dir = os.path.dirname(args.snapshot)
            if snapshot_dir:
                os.makedirs(snapshot_dir, exist_ok=True)
            Path(args.snapshot).write_bytes(ga.to_json())
        except OSError as e:
            logger.critical("Cannot write snapshot", exception=e, path=args.snapshot)
            return 1
        logger.info(f"Snapshot written to {args.snapshot}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
