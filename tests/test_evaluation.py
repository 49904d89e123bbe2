"""
Individual and Evaluation Engine Tests
"""

import math
import os
import random
import sys
import threading
import time
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from ga_exceptions import EvaluationError, InvalidFitnessError, validate_fitness
from evo_components.evaluation import EvaluationEngine, fork_join
from evo_components.individual import Individual, derive_rng, rand_string
from evo_components.population import new_population
from test_fixtures import FailingGenome, ScalarGenome, TestFixtures, scalar_factory


class NaNGenome(ScalarGenome):
    def evaluate(self):
        return float('nan')


class TestIndividual(unittest.TestCase):
    """Test individual bookkeeping."""

    def test_evaluation_is_cached(self):
        indi = Individual(ScalarGenome(2.0), rng=random.Random(0))
        self.assertFalse(indi.evaluated)
        self.assertTrue(math.isinf(indi.fitness))
        self.assertEqual(indi.evaluate(), 2.0)
        indi.genome.value = 5.0
        self.assertEqual(indi.evaluate(), 2.0)

    def test_mutation_and_crossover_invalidate(self):
        a, b = TestFixtures.create_individuals([1.0, 3.0])
        a.crossover(b, random.Random(0))
        self.assertFalse(a.evaluated or b.evaluated)
        self.assertEqual(a.evaluate(), 2.0)
        a.mutate(random.Random(0))
        self.assertFalse(a.evaluated)

    def test_clone_ids(self):
        indi = TestFixtures.create_individuals([1.0])[0]
        snapshot = indi.clone()
        offspring = indi.clone(random.Random(4))

        self.assertEqual(snapshot.id, indi.id)
        self.assertNotEqual(offspring.id, indi.id)
        self.assertTrue(snapshot.evaluated and offspring.evaluated)
        self.assertIsNot(snapshot.genome, indi.genome)

    def test_invalid_fitness(self):
        with self.assertRaises(InvalidFitnessError):
            Individual(NaNGenome(0.0), rng=random.Random(0)).evaluate()
        for value in (None, "1.0", True, float('nan')):
            with self.assertRaises(InvalidFitnessError):
                validate_fitness(value)
        self.assertEqual(validate_fitness(3), 3.0)

    def test_needs_id_source(self):
        with self.assertRaises(ValueError):
            Individual(ScalarGenome(1.0))

    def test_random_helpers_are_reproducible(self):
        self.assertEqual(rand_string(6, random.Random(1)), rand_string(6, random.Random(1)))
        self.assertEqual(derive_rng(random.Random(1)).random(), derive_rng(random.Random(1)).random())


class TestForkJoin(unittest.TestCase):
    """Test the fork-join helper."""

    def test_results_keep_order(self):
        def slow_square(x):
            time.sleep(0.01 * (5 - x))
            return x * x

        self.assertEqual(fork_join(slow_square, list(range(5)), parallel=True), [0, 1, 4, 9, 16])

    def test_all_tasks_join_before_raising(self):
        finished = []
        lock = threading.Lock()

        def task(x):
            if x in (1, 3):
                raise ValueError(f"task {x}")
            time.sleep(0.02)
            with lock:
                finished.append(x)

        with self.assertRaises(ValueError) as ctx:
            fork_join(task, list(range(5)), parallel=True)
        self.assertEqual(str(ctx.exception), "task 1")
        self.assertEqual(sorted(finished), [0, 2, 4])


class TestEvaluationEngine(unittest.TestCase):
    """Test the multi-population evaluation engine."""

    def test_counts_evaluations(self):
        pops = [new_population(5, False, scalar_factory, random.Random(seed)) for seed in range(3)]
        engine = EvaluationEngine(parallel=True)

        self.assertEqual(engine.evaluate_populations(pops), 15)
        self.assertEqual(engine.evaluate_populations(pops), 0)

        stats = engine.get_statistics()
        self.assertEqual(stats['evaluations_performed'], 15)
        self.assertEqual(stats['parallel_batches'], 2)
        self.assertGreater(stats['peak_memory_usage'], 0.0)

        engine.reset_statistics()
        self.assertEqual(engine.get_statistics()['evaluations_performed'], 0)

    def test_error_tagged_with_population(self):
        rng = random.Random(0)
        pop = new_population(3, False, lambda r: FailingGenome(r.random()), rng)
        engine = EvaluationEngine()

        with self.assertRaises(EvaluationError) as ctx:
            engine.evaluate_populations([pop])
        self.assertEqual(ctx.exception.population_id, pop.id)
        self.assertEqual(engine.stats['evaluation_errors'], 1)


if __name__ == '__main__':
    unittest.main()
