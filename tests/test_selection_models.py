"""
Selection and Evolution Model Tests
"""

import os
import random
import sys
import unittest
from unittest.mock import Mock

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from ga_exceptions import ConfigurationError, ModelError, SelectionError
from evo_components.models import (
    ModDownToSize, ModGenerational, ModMutationOnly, ModRing, ModSimulatedAnnealing,
    ModSteadyState, generate_offsprings, select_parents
)
from evo_components.selection import SelElitism, SelRoulette, SelTournament
from test_fixtures import TestFixtures


class TestSelectors(unittest.TestCase):
    """Test selection strategies."""

    def setUp(self):
        self.individuals = TestFixtures.create_individuals([4.0, 1.0, 3.0, 0.0, 2.0])

    def test_tournament_full_size_picks_best(self):
        selected, indexes = SelTournament(5).apply(3, self.individuals, random.Random(0))
        self.assertEqual(indexes, [3, 3, 3])
        self.assertTrue(all(indi is self.individuals[3] for indi in selected))

    def test_tournament_larger_than_group(self):
        _, indexes = SelTournament(50).apply(2, self.individuals, random.Random(0))
        self.assertEqual(indexes, [3, 3])

    def test_tournament_indexes_match(self):
        selected, indexes = SelTournament(2).apply(20, self.individuals, random.Random(4))
        self.assertEqual(len(selected), 20)
        for indi, idx in zip(selected, indexes):
            self.assertIs(indi, self.individuals[idx])

    def test_elitism(self):
        selected, indexes = SelElitism().apply(3, self.individuals, random.Random(0))
        self.assertEqual([i.fitness for i in selected], [0.0, 1.0, 2.0])
        self.assertEqual(indexes, [3, 1, 4])
        with self.assertRaises(SelectionError):
            SelElitism().apply(6, self.individuals, random.Random(0))

    def test_roulette_never_picks_worst(self):
        _, indexes = SelRoulette().apply(200, self.individuals, random.Random(1))
        self.assertNotIn(0, indexes)
        self.assertGreater(indexes.count(3), indexes.count(2))

    def test_roulette_uniform_on_ties(self):
        individuals = TestFixtures.create_individuals([1.0, 1.0, 1.0])
        _, indexes = SelRoulette().apply(60, individuals, random.Random(1))
        self.assertEqual(set(indexes), {0, 1, 2})

    def test_roulette_requires_evaluation(self):
        individuals = TestFixtures.create_individuals([1.0, 2.0], evaluated=False)
        with self.assertRaises(SelectionError):
            SelRoulette().apply(1, individuals, random.Random(0))

    def test_empty_group(self):
        with self.assertRaises(SelectionError):
            SelTournament(2).apply(1, [], random.Random(0))

    def test_validation(self):
        with self.assertRaises(ConfigurationError):
            SelTournament(0).validate()


class TestModels(unittest.TestCase):
    """Test that every model keeps the population size and draws from the population stream."""

    def all_models(self):
        tournament = SelTournament(3)
        return [
            ModGenerational(tournament, 0.5, 0.7),
            ModSteadyState(tournament, True, 0.5, 0.7),
            ModSteadyState(tournament, False, 0.5, 0.7),
            ModDownToSize(8, tournament, SelElitism(), 0.5, 0.7),
            ModRing(tournament, 0.5),
            ModSimulatedAnnealing(10.0, 0.1, 0.9, ga=Mock(generations=0)),
            ModMutationOnly(3, tournament, True),
            ModMutationOnly(3, tournament, False),
        ]

    def test_size_preserved(self):
        for model in self.all_models():
            with self.subTest(model=repr(model)):
                model.validate()
                pop = TestFixtures.create_population([float(v) for v in range(10)], seed=7)
                for _ in range(3):
                    model.apply(pop)
                    pop.evaluate()
                self.assertEqual(len(pop), 10)
                self.assertEqual(len({id(i) for i in pop.individuals}), 10)

    def test_deterministic_for_same_stream(self):
        for model in self.all_models():
            with self.subTest(model=repr(model)):
                first = TestFixtures.create_population([float(v) for v in range(10)], seed=3)
                second = TestFixtures.create_population([float(v) for v in range(10)], seed=3)
                model.apply(first)
                model.apply(second)
                self.assertEqual([i.id for i in first.individuals], [i.id for i in second.individuals])

    def test_generational_replaces_everyone(self):
        pop = TestFixtures.create_population([float(v) for v in range(6)])
        before = {i.id for i in pop.individuals}
        ModGenerational(SelTournament(2), 0.5, 0.7).apply(pop)
        self.assertFalse(before & {i.id for i in pop.individuals})

    def test_elitist_models_keep_the_best(self):
        models = [ModSteadyState(SelTournament(3), True, 1.0, 1.0),
                  ModDownToSize(4, SelTournament(3), SelElitism(), 1.0, 1.0),
                  ModMutationOnly(5, SelTournament(3), True)]
        for model in models:
            with self.subTest(model=repr(model)):
                pop = TestFixtures.create_population([float(v) for v in range(5)], seed=11)
                for _ in range(5):
                    model.apply(pop)
                    pop.evaluate()
                    self.assertLessEqual(pop.best().fitness, 0.0)

    def test_single_individual_groups(self):
        models = [ModGenerational(SelElitism(), 0.5, 0.7),
                  ModSteadyState(SelElitism(), True, 0.5, 0.7),
                  ModSteadyState(SelElitism(), False, 0.5, 0.7),
                  ModDownToSize(3, SelElitism(), SelElitism(), 0.5, 0.7),
                  ModRing(SelElitism(), 0.5),
                  ModMutationOnly(2, SelElitism(), True)]
        for model in models:
            with self.subTest(model=repr(model)):
                pop = TestFixtures.create_population([5.0], seed=5)
                for _ in range(3):
                    model.apply(pop)
                    pop.evaluate()
                self.assertEqual(len(pop), 1)

    def test_lone_parent_is_paired_with_itself(self):
        individuals = TestFixtures.create_individuals([2.0])
        parents, indexes = select_parents(SelElitism(), individuals, random.Random(0))
        self.assertEqual(indexes, [0, 0])
        self.assertIs(parents[0], parents[1])

        pop = TestFixtures.create_population([2.0], seed=1)
        ModSteadyState(SelElitism(), True, 1.0, 1.0).apply(pop)
        self.assertLessEqual(pop.individuals[0].fitness, 2.0)

    def test_generate_offsprings_count(self):
        individuals = TestFixtures.create_individuals([1.0, 2.0, 3.0])
        offsprings = generate_offsprings(5, individuals, SelTournament(2), 0.0, 0.0, random.Random(0))
        self.assertEqual(len(offsprings), 5)
        self.assertEqual(len({i.id for i in offsprings}), 5)

    def test_annealing_temperature_follows_generations(self):
        ga = Mock(generations=0)
        model = ModSimulatedAnnealing(10.0, 1.0, 0.5)
        model.bind(ga)
        self.assertAlmostEqual(model.temperature(), 10.0)
        ga.generations = 1
        self.assertAlmostEqual(model.temperature(), 5.0)
        ga.generations = 10
        self.assertAlmostEqual(model.temperature(), 1.0)

    def test_annealing_requires_binding(self):
        pop = TestFixtures.create_population([1.0, 2.0])
        with self.assertRaises(ModelError):
            ModSimulatedAnnealing(10.0, 1.0, 0.5).apply(pop)

    def test_validation(self):
        invalid = [
            ModGenerational(None, 0.5, 0.5),
            ModGenerational(SelTournament(2), 1.5, 0.5),
            ModGenerational(SelTournament(2), 0.5, -0.1),
            ModSteadyState(SelTournament(0), True, 0.5, 0.5),
            ModDownToSize(0, SelTournament(2), SelElitism(), 0.5, 0.5),
            ModRing(SelTournament(2), 2.0),
            ModSimulatedAnnealing(1.0, 0.0, 0.5),
            ModSimulatedAnnealing(1.0, 2.0, 0.5),
            ModSimulatedAnnealing(1.0, 0.1, 1.0),
            ModMutationOnly(0, SelTournament(2), True),
        ]
        for model in invalid:
            with self.subTest(model=repr(model)):
                with self.assertRaises(ConfigurationError):
                    model.validate()


if __name__ == '__main__':
    unittest.main()
