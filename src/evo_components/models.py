"""
Evolution Models Module

A model turns one generation of a population into the next. The orchestrator
applies the model once per population (or once per species) and generation;
models only draw randomness from population.rng and must leave the number
of individuals unchanged.

Features:
- Generational replacement (reference strategy)
- Steady-state replacement with optional elitism
- Down-to-size (mu + lambda style) selection
- Ring crossover between neighbours
- Simulated annealing driven by the run's generation counter
- Mutation-only evolution
"""

import math
import random
from abc import ABC, abstractmethod
from typing import List, Optional

from ga_exceptions import ConfigurationError, ModelError
from evo_components.individual import Individual, sort_by_fitness
from evo_components.selection import Selector


def _check_rate(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} ({value}) must be within [0, 1]")


def _check_selector(name: str, selector: Optional[Selector]) -> None:
    if selector is None:
        raise ConfigurationError(f"{name} is required")
    if not isinstance(selector, Selector):
        raise ConfigurationError(f"{name} must be a Selector, got {type(selector).__name__}")
    selector.validate()


def select_parents(selector: Selector, individuals: List[Individual], rng: random.Random):
    """Draw two parents with selector; a lone individual is paired with itself."""
    if len(individuals) == 1:
        selected, indexes = selector.apply(1, individuals, rng)
        return selected * 2, indexes * 2
    return selector.apply(2, individuals, rng)


def generate_offsprings(n: int, individuals: List[Individual], selector: Selector,
                        mut_rate: float, cross_rate: float,
                        rng: random.Random) -> List[Individual]:
    """
    Breed n offspring from individuals.

    Parents are drawn two at a time with selector and cloned under new IDs;
    each pair is crossed with probability cross_rate and every child is
    mutated with probability mut_rate. Children are not evaluated.
    """
    offsprings: List[Individual] = []
    while len(offsprings) < n:
        parents, _ = select_parents(selector, individuals, rng)
        offspring1, offspring2 = breed_pair(parents[0], parents[1], mut_rate, cross_rate, rng)
        offsprings.append(offspring1)
        if len(offsprings) < n:
            offsprings.append(offspring2)
    return offsprings


def breed_pair(parent1: Individual, parent2: Individual, mut_rate: float,
               cross_rate: float, rng: random.Random):
    """Clone two parents under new IDs, then cross and mutate the clones."""
    offspring1 = parent1.clone(rng)
    offspring2 = parent2.clone(rng)

    if rng.random() < cross_rate:
        offspring1.crossover(offspring2, rng)
    if rng.random() < mut_rate:
        offspring1.mutate(rng)
    if rng.random() < mut_rate:
        offspring2.mutate(rng)
    return offspring1, offspring2


class Model(ABC):
    """Contract for evolution strategies."""

    def validate(self) -> None:
        """Check the parameters; raise ConfigurationError if they are unusable."""

    def bind(self, ga) -> None:
        """Receive the orchestrator running this model. Most models ignore it."""

    @abstractmethod
    def apply(self, population) -> None:
        """Evolve population in place by one generation."""


class ModGenerational(Model):
    """Replace the whole population with offspring bred from it."""

    def __init__(self, selector: Selector, mut_rate: float, cross_rate: float):
        self.selector = selector
        self.mut_rate = mut_rate
        self.cross_rate = cross_rate

    def __repr__(self) -> str:
        return (f"ModGenerational(selector={self.selector!r}, "
                f"mut_rate={self.mut_rate}, cross_rate={self.cross_rate})")

    def validate(self) -> None:
        _check_selector("Generational model selector", self.selector)
        _check_rate("Mutation rate", self.mut_rate)
        _check_rate("Crossover rate", self.cross_rate)

    def apply(self, population) -> None:
        population.individuals = generate_offsprings(
            len(population), population.individuals, self.selector,
            self.mut_rate, self.cross_rate, population.rng)


class ModSteadyState(Model):
    """
    Steady-state model: two parents breed two offspring which take the
    parents' places.

    With keep_best the two best of parents and offspring are kept instead, so
    the population never loses its best individual.
    """

    def __init__(self, selector: Selector, keep_best: bool,
                 mut_rate: float, cross_rate: float):
        self.selector = selector
        self.keep_best = keep_best
        self.mut_rate = mut_rate
        self.cross_rate = cross_rate

    def __repr__(self) -> str:
        return (f"ModSteadyState(selector={self.selector!r}, keep_best={self.keep_best}, "
                f"mut_rate={self.mut_rate}, cross_rate={self.cross_rate})")

    def validate(self) -> None:
        _check_selector("Steady-state model selector", self.selector)
        _check_rate("Mutation rate", self.mut_rate)
        _check_rate("Crossover rate", self.cross_rate)

    def apply(self, population) -> None:
        rng = population.rng
        parents, indexes = select_parents(self.selector, population.individuals, rng)
        offsprings = list(breed_pair(parents[0], parents[1], self.mut_rate,
                                     self.cross_rate, rng))
        for offspring in offsprings:
            offspring.evaluate()

        if self.keep_best:
            survivors = sort_by_fitness(parents + offsprings)[:2]
        else:
            survivors = offsprings

        population.individuals[indexes[0]] = survivors[0]
        # The same parent may have been drawn twice; it only frees one slot
        if indexes[1] != indexes[0]:
            population.individuals[indexes[1]] = survivors[1]


class ModDownToSize(Model):
    """
    Breed n_offsprings evaluated offspring with selector_a, then select the
    next population out of parents and offspring with selector_b.
    """

    def __init__(self, n_offsprings: int, selector_a: Selector, selector_b: Selector,
                 mut_rate: float, cross_rate: float):
        self.n_offsprings = n_offsprings
        self.selector_a = selector_a
        self.selector_b = selector_b
        self.mut_rate = mut_rate
        self.cross_rate = cross_rate

    def __repr__(self) -> str:
        return (f"ModDownToSize(n_offsprings={self.n_offsprings}, "
                f"selector_a={self.selector_a!r}, selector_b={self.selector_b!r}, "
                f"mut_rate={self.mut_rate}, cross_rate={self.cross_rate})")

    def validate(self) -> None:
        if self.n_offsprings < 1:
            raise ConfigurationError(f"Number of offsprings ({self.n_offsprings}) must be positive")
        _check_selector("Down-to-size breeding selector", self.selector_a)
        _check_selector("Down-to-size survivor selector", self.selector_b)
        _check_rate("Mutation rate", self.mut_rate)
        _check_rate("Crossover rate", self.cross_rate)

    def apply(self, population) -> None:
        rng = population.rng
        offsprings = generate_offsprings(self.n_offsprings, population.individuals,
                                         self.selector_a, self.mut_rate,
                                         self.cross_rate, rng)
        for offspring in offsprings:
            offspring.evaluate()

        pool = population.individuals + offsprings
        survivors, _ = self.selector_b.apply(len(population), pool, rng)
        # Survivors may repeat, so each one gets its own copy
        population.individuals = [indi.clone(rng) for indi in survivors]


class ModRing(Model):
    """
    Ring model: every individual is crossed with its right-hand neighbour and
    the selector keeps one of the pair and the two offspring in its place.
    """

    def __init__(self, selector: Selector, mut_rate: float):
        self.selector = selector
        self.mut_rate = mut_rate

    def __repr__(self) -> str:
        return f"ModRing(selector={self.selector!r}, mut_rate={self.mut_rate})"

    def validate(self) -> None:
        _check_selector("Ring model selector", self.selector)
        _check_rate("Mutation rate", self.mut_rate)

    def apply(self, population) -> None:
        rng = population.rng
        individuals = population.individuals
        size = len(individuals)

        for i in range(size):
            neighbour = individuals[(i + 1) % size]
            offspring1 = individuals[i].clone(rng)
            offspring2 = neighbour.clone(rng)
            offspring1.crossover(offspring2, rng)
            if rng.random() < self.mut_rate:
                offspring1.mutate(rng)
            if rng.random() < self.mut_rate:
                offspring2.mutate(rng)
            offspring1.evaluate()
            offspring2.evaluate()

            candidates = [individuals[i], neighbour, offspring1, offspring2]
            _, chosen = self.selector.apply(1, candidates, rng)
            winner = candidates[chosen[0]]
            if chosen[0] == 1 and neighbour is not individuals[i]:
                winner = winner.clone(rng)
            individuals[i] = winner


class ModSimulatedAnnealing(Model):
    """
    Simulated annealing: each individual proposes a mutated copy of itself.

    Improvements are always accepted, deteriorations with probability
    exp(-delta / T) where T = max(t * alpha ** generations, t_min) and
    generations is read from the bound orchestrator.
    """

    def __init__(self, t: float, t_min: float, alpha: float, ga=None):
        self.t = t
        self.t_min = t_min
        self.alpha = alpha
        self.ga = ga

    def __repr__(self) -> str:
        return f"ModSimulatedAnnealing(t={self.t}, t_min={self.t_min}, alpha={self.alpha})"

    def validate(self) -> None:
        if self.t_min <= 0:
            raise ConfigurationError(f"Minimum temperature ({self.t_min}) must be positive")
        if self.t < self.t_min:
            raise ConfigurationError(
                f"Initial temperature ({self.t}) must not be below the minimum ({self.t_min})")
        if not 0.0 < self.alpha < 1.0:
            raise ConfigurationError(f"Cooling factor alpha ({self.alpha}) must be within (0, 1)")

    def bind(self, ga) -> None:
        self.ga = ga

    def temperature(self) -> float:
        """Current temperature of the bound run."""
        if self.ga is None:
            raise ModelError("Simulated annealing needs a bound GeneticAlgorithm")
        return max(self.t * self.alpha ** self.ga.generations, self.t_min)

    def apply(self, population) -> None:
        rng = population.rng
        temperature = self.temperature()

        for i, individual in enumerate(population.individuals):
            candidate = individual.clone(rng)
            candidate.mutate(rng)
            candidate.evaluate()

            delta = candidate.fitness - individual.fitness
            if delta < 0 or rng.random() < math.exp(-delta / temperature):
                population.individuals[i] = candidate


class ModMutationOnly(Model):
    """
    Mutate copies of n_chosen selected individuals.

    In strict mode a mutant only replaces its parent when it is strictly
    better; otherwise it always does.
    """

    def __init__(self, n_chosen: int, selector: Selector, strict: bool):
        self.n_chosen = n_chosen
        self.selector = selector
        self.strict = strict

    def __repr__(self) -> str:
        return (f"ModMutationOnly(n_chosen={self.n_chosen}, selector={self.selector!r}, "
                f"strict={self.strict})")

    def validate(self) -> None:
        if self.n_chosen < 1:
            raise ConfigurationError(f"Number of chosen individuals ({self.n_chosen}) must be positive")
        _check_selector("Mutation-only model selector", self.selector)

    def apply(self, population) -> None:
        rng = population.rng
        n = min(self.n_chosen, len(population))
        selected, indexes = self.selector.apply(n, population.individuals, rng)

        for parent, idx in zip(selected, indexes):
            mutant = parent.clone(rng)
            mutant.mutate(rng)
            if self.strict:
                mutant.evaluate()
                if mutant.fitness >= population.individuals[idx].fitness:
                    continue
            population.individuals[idx] = mutant
