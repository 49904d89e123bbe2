"""
Configuration Tests

Validation of GAConfig and orchestrator construction.
"""

import os
import random
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from ga_config import GAConfig
from ga_exceptions import ConfigurationError
from genetic_algorithm import GeneticAlgorithm
from main import build_parser
from evo_components.migration import MigRing
from evo_components.models import ModGenerational, ModSimulatedAnnealing
from evo_components.selection import SelTournament
from evo_components.speciation import SpecFitnessInterval, SpecKMedoids
from evo_components.vector_genome import euclidean_distance
from test_fixtures import TestFixtures


def model():
    return ModGenerational(SelTournament(3), 0.5, 0.7)


class TestGAConfigValidation(unittest.TestCase):
    """Test that invalid configurations are rejected with descriptive errors."""

    def assertRejected(self, expected_fragment, **overrides):
        params = dict(n_pops=2, pop_size=10, n_generations=5, hof_size=1, model=model())
        params.update(overrides)
        with self.assertRaises(ConfigurationError) as ctx:
            GAConfig(**params)
        self.assertIn(expected_fragment, str(ctx.exception))

    def test_zero_counts(self):
        self.assertRejected("n_pops=0", n_pops=0)
        self.assertRejected("pop_size=0", pop_size=0)
        self.assertRejected("n_generations=0", n_generations=0)
        self.assertRejected("hof_size=0", hof_size=0)

    def test_missing_model(self):
        self.assertRejected("Model is required", model=None)

    def test_invalid_model(self):
        self.assertRejected("Mutation rate", model=ModGenerational(SelTournament(3), 2.0, 0.5))
        self.assertRejected("Model must be a Model", model="generational")

    def test_migrator_without_frequency(self):
        self.assertRejected("Migration frequency", migrator=MigRing(1), mig_frequency=0)

    def test_migrator_incompatible_layout(self):
        self.assertRejected("at least 2 populations", n_pops=1, migrator=MigRing(1), mig_frequency=2)
        self.assertRejected("exceeds the population size", migrator=MigRing(11), mig_frequency=2)

    def test_invalid_speciator(self):
        self.assertRejected("species", speciator=SpecFitnessInterval(0))

    def test_speciator_incompatible_layout(self):
        self.assertRejected("Cannot split populations of 10 into 50 species",
                            speciator=SpecFitnessInterval(50))
        self.assertRejected("into 4 species of at least 3",
                            speciator=SpecKMedoids(4, 3, euclidean_distance))
        GAConfig(n_pops=2, pop_size=10, n_generations=5, hof_size=1, model=model(),
                 speciator=SpecFitnessInterval(10))
        GAConfig(n_pops=2, pop_size=10, n_generations=5, hof_size=1, model=model(),
                 speciator=SpecKMedoids(5, 2, euclidean_distance))

    def test_errors_are_aggregated(self):
        with self.assertRaises(ConfigurationError) as ctx:
            GAConfig(n_pops=0, pop_size=0, n_generations=5, hof_size=1, model=None)
        message = str(ctx.exception)
        self.assertIn("n_pops=0", message)
        self.assertIn("pop_size=0", message)
        self.assertIn("Model is required", message)

    def test_non_callable_hooks(self):
        self.assertRejected("early_stop must be callable", early_stop=True)
        self.assertRejected("rng must be a random.Random", rng=42)

    def test_valid_configurations(self):
        GAConfig.default()
        TestFixtures.get_test_config(migrator=MigRing(2), mig_frequency=3,
                                     speciator=SpecKMedoids(2, 2, euclidean_distance))


class TestGAConfigHelpers(unittest.TestCase):
    """Test defaults, CLI mapping and summaries."""

    def test_default(self):
        config = GAConfig.default()
        self.assertEqual((config.n_pops, config.pop_size, config.n_generations, config.hof_size),
                         (1, 30, 50, 1))
        self.assertIsInstance(config.model, ModGenerational)
        self.assertEqual(config.model.selector.n_contestants, 3)
        self.assertEqual((config.model.mut_rate, config.model.cross_rate), (0.5, 0.7))

    def test_from_args(self):
        args = build_parser().parse_args([
            '--n_pops', '3', '--pop_size', '20', '--generations', '7', '--hof_size', '4',
            '--mig_frequency', '2', '--n_migrants', '3', '--species', '2',
            '--model', 'annealing', '--seed', '5', '--parallel'])
        config = GAConfig.from_args(args, metric=euclidean_distance)

        self.assertEqual((config.n_pops, config.pop_size, config.n_generations, config.hof_size),
                         (3, 20, 7, 4))
        self.assertIsInstance(config.model, ModSimulatedAnnealing)
        self.assertIsInstance(config.migrator, MigRing)
        self.assertEqual(config.migrator.n_migrants, 3)
        self.assertEqual(config.mig_frequency, 2)
        self.assertIsInstance(config.speciator, SpecFitnessInterval)
        self.assertTrue(config.parallel_init and config.parallel_eval)
        self.assertEqual(config.rng.random(), random.Random(5).random())

    def test_single_population_skips_migration(self):
        args = build_parser().parse_args(['--mig_frequency', '2'])
        config = GAConfig.from_args(args)
        self.assertIsNone(config.migrator)

    def test_summary(self):
        config = TestFixtures.get_test_config(migrator=MigRing(2), mig_frequency=3)
        summary = config.summary()
        self.assertIn("Populations: 2 x 10 individuals", summary)
        self.assertIn("MigRing(n_migrants=2) every 3 generations", summary)
        self.assertEqual(str(config), "GAConfig(pops=2, pop_size=10, gen=5, hof=3)")


class TestOrchestratorConstruction(unittest.TestCase):
    """Test GeneticAlgorithm construction."""

    def test_rejects_non_config(self):
        with self.assertRaises(ConfigurationError):
            GeneticAlgorithm({'n_pops': 1})

    def test_revalidates_changed_config(self):
        config = TestFixtures.get_test_config()
        config.n_pops = 0
        with self.assertRaises(ConfigurationError):
            GeneticAlgorithm(config)

    def test_new_ga_binds_model(self):
        annealing = ModSimulatedAnnealing(10.0, 0.1, 0.9)
        ga = TestFixtures.get_test_config(model=annealing).new_ga()
        self.assertIs(annealing.ga, ga)
        self.assertEqual(ga.generations, 0)
        self.assertEqual(ga.populations, [])


if __name__ == '__main__':
    unittest.main()
