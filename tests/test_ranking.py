"""
Property-based tests for individual rankers.

Tests totality, antisymmetry, tolerance handling and stable sorting.
"""

import math

import pytest
from hypothesis import given, strategies as st, settings

from geneforge.evolution.chromosomes import IntChromosome
from geneforge.evolution.genes import IntGene
from geneforge.evolution.models import Genotype, Individual
from geneforge.evolution.ranking import FitnessMaxRanker, FitnessMinRanker, update_steady


def individual(fitness: float, tag: int = 0) -> Individual:
    return Individual(Genotype((IntChromosome((IntGene(tag),)),)), fitness=fitness)


fitness_strategy = st.one_of(
    st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False),
    st.just(math.nan),
)

ranker_strategy = st.sampled_from([FitnessMaxRanker(), FitnessMinRanker()])


class TestRankerProperties:
    """Properties every ranker must satisfy."""

    @given(ranker=ranker_strategy, a=fitness_strategy, b=fitness_strategy)
    @settings(max_examples=200)
    def test_totality_and_antisymmetry(self, ranker, a: float, b: float):
        """compare returns -1, 0 or 1 and compare(a, b) == -compare(b, a)."""
        first, second = individual(a), individual(b)
        result = ranker.compare(first, second)
        assert result in (-1, 0, 1)
        assert result == -ranker.compare(second, first)

    @given(ranker=ranker_strategy,
           value=st.floats(min_value=-1e3, max_value=1e3, allow_nan=False, allow_infinity=False))
    @settings(max_examples=100)
    def test_equal_within_tolerance(self, ranker, value: float):
        """Fitness values closer than the tolerance compare as equal."""
        assert ranker.compare(individual(value), individual(value + ranker.tolerance / 2)) == 0

    @given(ranker=ranker_strategy, values=st.lists(fitness_strategy, min_size=0, max_size=30))
    @settings(max_examples=100)
    def test_sort_is_ordered_best_first(self, ranker, values):
        """Every adjacent pair of a sorted population satisfies compare(i, i+1) >= 0."""
        ordered = ranker.sort([individual(v, i) for i, v in enumerate(values)])
        assert len(ordered) == len(values)
        for current, following in zip(ordered, ordered[1:]):
            assert ranker.compare(current, following) >= 0

    @given(ranker=ranker_strategy, value=fitness_strategy, count=st.integers(min_value=1, max_value=10))
    @settings(max_examples=50)
    def test_sort_is_stable(self, ranker, value: float, count: int):
        """Ties keep their input order."""
        population = [individual(value, i) for i in range(count)]
        assert ranker.sort(population) == population


class TestFitnessMaxRanker:
    """Tests for the maximizing ranker."""

    def test_higher_is_better(self):
        """Higher fitness ranks first."""
        ranker = FitnessMaxRanker()
        assert ranker.compare(individual(2.0), individual(1.0)) == 1
        assert ranker.compare(individual(1.0), individual(2.0)) == -1

    def test_nan_is_worst(self):
        """An unevaluated individual ranks below any number."""
        ranker = FitnessMaxRanker()
        assert ranker.compare(individual(math.nan), individual(-1e9)) == -1
        assert ranker.compare(individual(math.nan), individual(math.nan)) == 0

    def test_best_returns_first_of_ties(self):
        """best returns the first individual among equals."""
        population = [individual(1.0, 0), individual(3.0, 1), individual(3.0, 2)]
        assert FitnessMaxRanker().best(population) is population[1]
        assert FitnessMaxRanker().best([]) is None

    def test_equality(self):
        """Rankers of the same kind and tolerance are equal."""
        assert FitnessMaxRanker() == FitnessMaxRanker()
        assert FitnessMaxRanker() != FitnessMinRanker()
        assert FitnessMaxRanker(tolerance=0.1) != FitnessMaxRanker()


class TestFitnessMinRanker:
    """Tests for the minimizing ranker."""

    def test_lower_is_better(self):
        """Lower fitness ranks first."""
        ranker = FitnessMinRanker()
        ordered = ranker.sort([individual(3.0), individual(1.0), individual(2.0)])
        assert [i.fitness for i in ordered] == [1.0, 2.0, 3.0]

    def test_nan_is_worst(self):
        """NaN ranks last when minimizing as well."""
        ranker = FitnessMinRanker()
        assert ranker.compare(individual(math.nan), individual(1e9)) == -1

    def test_fitness_transform_negates(self):
        """Weights for proportional selection grow as fitness shrinks."""
        assert FitnessMinRanker().fitness_transform([1.0, -2.0]) == [-1.0, 2.0]


class TestUpdateSteady:
    """Tests for the steady-generation counter."""

    def test_first_generation_resets(self):
        """Without a previous best the counter starts at zero."""
        assert update_steady(FitnessMaxRanker(), math.nan, 4.0, 7) == (4.0, 0)

    def test_strict_improvement_resets(self):
        """A strictly better fitness resets the counter."""
        assert update_steady(FitnessMaxRanker(), 1.0, 2.0, 3) == (2.0, 0)
        assert update_steady(FitnessMinRanker(), 1.0, 0.5, 3) == (0.5, 0)

    def test_no_improvement_increments(self):
        """Equal or worse fitness increments the counter and keeps the best."""
        assert update_steady(FitnessMaxRanker(), 2.0, 2.0, 3) == (2.0, 4)
        assert update_steady(FitnessMaxRanker(), 2.0, 1.0, 0) == (2.0, 1)
        assert update_steady(FitnessMinRanker(), 1.0, 2.0, 0) == (1.0, 1)

    def test_tolerance_counts_as_no_improvement(self):
        """Improvements within the tolerance do not reset the counter."""
        ranker = FitnessMaxRanker(tolerance=0.01)
        assert update_steady(ranker, 1.0, 1.005, 2) == (1.0, 3)
