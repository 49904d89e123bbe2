"""
Speciation Tests
"""

import os
import random
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from ga_exceptions import ConfigurationError, SpeciationError
from evo_components.individual import Individual
from evo_components.speciation import SpecFitnessInterval, SpecKMedoids
from evo_components.vector_genome import FloatVector, euclidean_distance, sphere
from test_fixtures import TestFixtures


def scalar_distance(a, b):
    return abs(a.genome.value - b.genome.value)


class SpeciationAssertions:

    def assertPartition(self, species, individuals):
        flat = [indi for group in species for indi in group]
        self.assertEqual(len(flat), len(individuals))
        self.assertEqual({id(i) for i in flat}, {id(i) for i in individuals})


class TestSpecKMedoids(unittest.TestCase, SpeciationAssertions):
    """Test k-medoids speciation."""

    def test_separates_clusters(self):
        individuals = TestFixtures.create_individuals([0.0, 0.1, 0.2, 10.0, 10.1, 10.2])
        species = SpecKMedoids(2, 1, scalar_distance).apply(individuals, random.Random(0))

        self.assertPartition(species, individuals)
        groups = sorted(sorted(i.fitness for i in group) for group in species)
        self.assertEqual(groups, [[0.0, 0.1, 0.2], [10.0, 10.1, 10.2]])

    def test_minimum_cluster_size(self):
        individuals = TestFixtures.create_individuals([0.0, 0.1, 0.2, 0.3, 0.4, 50.0])
        species = SpecKMedoids(2, 3, scalar_distance).apply(individuals, random.Random(1))

        self.assertPartition(species, individuals)
        self.assertTrue(all(len(group) >= 3 for group in species))

    def test_keeps_evaluated_state(self):
        individuals = TestFixtures.create_individuals([1.0, 2.0, 3.0, 4.0], evaluated=False)
        species = SpecKMedoids(2, 1, scalar_distance).apply(individuals, random.Random(0))
        self.assertTrue(all(not indi.evaluated for group in species for indi in group))

    def test_vector_metric(self):
        rng = random.Random(3)
        individuals = [Individual(FloatVector([x, x], sphere), rng=rng) for x in (-5.0, -4.5, 4.5, 5.0)]
        species = SpecKMedoids(2, 2, euclidean_distance).apply(individuals, random.Random(2))

        self.assertPartition(species, individuals)
        self.assertEqual(sorted(len(group) for group in species), [2, 2])

    def test_too_few_individuals(self):
        individuals = TestFixtures.create_individuals([1.0, 2.0, 3.0])
        with self.assertRaises(SpeciationError):
            SpecKMedoids(4, 1, scalar_distance).apply(individuals, random.Random(0))
        with self.assertRaises(SpeciationError):
            SpecKMedoids(2, 2, scalar_distance).apply(individuals, random.Random(0))

    def test_validation(self):
        with self.assertRaises(ConfigurationError):
            SpecKMedoids(0, 1, scalar_distance).validate()
        with self.assertRaises(ConfigurationError):
            SpecKMedoids(2, 0, scalar_distance).validate()
        with self.assertRaises(ConfigurationError):
            SpecKMedoids(2, 1, None).validate()


class TestSpecFitnessInterval(unittest.TestCase, SpeciationAssertions):
    """Test fitness-interval speciation."""

    def test_contiguous_intervals(self):
        individuals = TestFixtures.create_individuals([7.0, 1.0, 5.0, 3.0, 2.0, 6.0, 4.0])
        species = SpecFitnessInterval(3).apply(individuals, random.Random(0))

        self.assertPartition(species, individuals)
        self.assertEqual([[i.fitness for i in group] for group in species],
                         [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0, 7.0]])

    def test_too_few_individuals(self):
        with self.assertRaises(SpeciationError):
            SpecFitnessInterval(3).apply(TestFixtures.create_individuals([1.0, 2.0]), random.Random(0))

    def test_validation(self):
        with self.assertRaises(ConfigurationError):
            SpecFitnessInterval(0).validate()


if __name__ == '__main__':
    unittest.main()
