"""
Evaluation Module

Handles fitness evaluation with optional fork-join parallelism, memory
monitoring and evaluation statistics.

Features:
- Thread-based fork-join helper with a join barrier and ordered results
- Sequential or parallel evaluation of individuals
- One evaluation task per population for multi-population runs
- Memory usage tracking through psutil
"""

import concurrent.futures
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import psutil

from ga_constants import bytes_to_gb
from ga_exceptions import EvaluationError
from ga_logging import get_logger
from evo_components.individual import Individual


T = TypeVar('T')
R = TypeVar('R')


def fork_join(task: Callable[[T], R], items: Sequence[T], parallel: bool,
              max_workers: Optional[int] = None) -> List[R]:
    """
    Run task over items, in parallel threads or sequentially.

    In parallel mode every task runs to completion before anything is
    returned or raised. Results keep the order of items; on failure the
    exception of the lowest-index failing task is raised.

    Args:
        task: Function applied to each item
        items: Work items, one task each
        parallel: Whether to use a thread pool
        max_workers: Upper bound on threads (defaults to len(items))

    Returns:
        Task results in item order
    """
    if not parallel or len(items) <= 1:
        return [task(item) for item in items]

    workers = min(len(items), max_workers or len(items))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(task, item) for item in items]
        concurrent.futures.wait(futures)

    return [future.result() for future in futures]


def evaluate_individuals(individuals: List[Individual], parallel: bool = False) -> int:
    """
    Evaluate every individual that is not evaluated yet.

    Raises:
        EvaluationError: The error of the first failing individual (by position)

    Returns:
        Number of evaluations performed
    """
    pending = [indi for indi in individuals if not indi.evaluated]
    fork_join(lambda indi: indi.evaluate(), pending, parallel)
    return len(pending)


class EvaluationEngine:
    """
    Evaluation engine for multi-population runs.

    Evaluates populations with at most one task per population and keeps
    statistics about the work done.
    """

    def __init__(self, parallel: bool = False):
        """
        Initialize evaluation engine.

        Args:
            parallel: Whether populations are evaluated concurrently
        """
        self.parallel = parallel
        self.logger = get_logger("EvaluationEngine")
        self._stats_lock = threading.Lock()
        self._process = psutil.Process()

        self.stats = {
            'evaluations_performed': 0,
            'parallel_batches': 0,
            'evaluation_errors': 0,
            'total_evaluation_time': 0.0,
            'peak_memory_usage': 0.0
        }

    def evaluate_population(self, population) -> int:
        """
        Evaluate one population's pending individuals sequentially.

        Raises:
            EvaluationError: Tagged with the population ID
        """
        try:
            performed = evaluate_individuals(population.individuals, parallel=False)
        except EvaluationError as e:
            if e.population_id is None:
                e.population_id = population.id
            with self._stats_lock:
                self.stats['evaluation_errors'] += 1
            raise

        with self._stats_lock:
            self.stats['evaluations_performed'] += performed
        return performed

    def evaluate_populations(self, populations: List) -> int:
        """
        Evaluate all populations, joining every task before returning.

        Returns:
            Total number of evaluations performed
        """
        start_time = time.time()
        performed = fork_join(self.evaluate_population, populations, self.parallel)
        elapsed = time.time() - start_time

        self.stats['total_evaluation_time'] += elapsed
        if self.parallel and len(populations) > 1:
            self.stats['parallel_batches'] += 1
            self.logger.log_parallel_processing(len(populations), len(populations), elapsed)
        self.update_memory_usage()

        return sum(performed)

    def update_memory_usage(self) -> float:
        """Sample the resident memory of the process and track the peak (GB)."""
        current = bytes_to_gb(self._process.memory_info().rss)
        if current > self.stats['peak_memory_usage']:
            self.stats['peak_memory_usage'] = current
        return current

    def get_statistics(self) -> Dict[str, float]:
        """Get evaluation statistics."""
        stats = self.stats.copy()
        if stats['evaluations_performed'] > 0:
            stats['avg_evaluation_time'] = stats['total_evaluation_time'] / stats['evaluations_performed']
        else:
            stats['avg_evaluation_time'] = 0.0
        return stats

    def reset_statistics(self):
        """Reset evaluation statistics."""
        with self._stats_lock:
            for key in self.stats:
                self.stats[key] = 0 if isinstance(self.stats[key], int) else 0.0
