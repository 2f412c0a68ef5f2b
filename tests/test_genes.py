"""
Tests for genes.

Covers the duplicate-with-value contract, seeded mutation determinism,
numeric averaging and the uninhabited NothingGene.
"""

import math
import random

import pytest
from hypothesis import given, strategies as st, settings

from geneforge.evolution.context import EvolutionContext
from geneforge.evolution.exceptions import AbsurdOperationError, ConstraintViolationError
from geneforge.evolution.genes import (
    BooleanGene,
    CharGene,
    DoubleGene,
    GeneBounds,
    IntGene,
    NothingGene,
)


INT_BOUNDS = GeneBounds(-1000, 1000)
DOUBLE_BOUNDS = GeneBounds(-100.0, 100.0)
CHAR_BOUNDS = GeneBounds("a", "z")


# =============================================================================
# Hypothesis Strategies
# =============================================================================

@st.composite
def int_gene_strategy(draw):
    """Generate valid IntGenes within INT_BOUNDS."""
    return IntGene(draw(st.integers(min_value=-1000, max_value=1000)), bounds=INT_BOUNDS)


@st.composite
def double_gene_strategy(draw):
    """Generate valid DoubleGenes within DOUBLE_BOUNDS."""
    value = draw(st.floats(min_value=-100.0, max_value=100.0, allow_nan=False, allow_infinity=False))
    return DoubleGene(value, bounds=DOUBLE_BOUNDS)


@st.composite
def char_gene_strategy(draw):
    """Generate valid CharGenes within CHAR_BOUNDS."""
    return CharGene(draw(st.characters(min_codepoint=ord("a"), max_codepoint=ord("z"))), bounds=CHAR_BOUNDS)


any_gene_strategy = st.one_of(
    int_gene_strategy(),
    double_gene_strategy(),
    char_gene_strategy(),
    st.booleans().map(BooleanGene),
)


class TestGeneBounds:
    """Tests for GeneBounds."""

    def test_inverted_bounds_rejected(self):
        """A lower bound above the upper bound is a constraint violation."""
        with pytest.raises(ConstraintViolationError):
            GeneBounds(5, 1)

    def test_validate_is_inclusive(self):
        """Both ends of the range are valid."""
        bounds = GeneBounds(0, 10)
        assert bounds.validate(0)
        assert bounds.validate(10)
        assert not bounds.validate(11)

    def test_clamp(self):
        """Values outside the range are clamped to the nearest bound."""
        bounds = GeneBounds(0.0, 1.0)
        assert bounds.clamp(-3.0) == 0.0
        assert bounds.clamp(0.5) == 0.5
        assert bounds.clamp(7.0) == 1.0


class TestDuplicateWithValue:
    """Tests for the duplicate_with_value contract."""

    @given(gene=int_gene_strategy(), value=st.integers(min_value=-1000, max_value=1000))
    @settings(max_examples=100)
    def test_int_gene_duplicate(self, gene: IntGene, value: int):
        """The duplicate holds the new value and keeps validity, bounds and the original gene."""
        original = gene.value
        duplicate = gene.duplicate_with_value(value)

        assert duplicate.value == value
        assert duplicate.verify() == gene.verify()
        assert duplicate.bounds == gene.bounds
        assert gene.value == original

    @given(gene=double_gene_strategy(),
           value=st.floats(min_value=-100.0, max_value=100.0, allow_nan=False, allow_infinity=False))
    @settings(max_examples=100)
    def test_double_gene_duplicate(self, gene: DoubleGene, value: float):
        """DoubleGene duplicates hold the new value and stay valid."""
        duplicate = gene.duplicate_with_value(value)
        assert duplicate.value == value
        assert duplicate.verify() == gene.verify()

    @given(gene=char_gene_strategy(), value=st.characters(min_codepoint=ord("a"), max_codepoint=ord("z")))
    @settings(max_examples=100)
    def test_char_gene_duplicate(self, gene: CharGene, value: str):
        """CharGene duplicates hold the new value and stay valid."""
        duplicate = gene.duplicate_with_value(value)
        assert duplicate.value == value
        assert duplicate.verify() == gene.verify()

    def test_predicate_and_generator_are_carried(self):
        """The validity predicate and generator travel with the duplicate."""
        def even(x):
            return x % 2 == 0

        def step(value, rng):
            return value + 2

        gene = IntGene(2, bounds=INT_BOUNDS, predicate=even, generator_fn=step)
        duplicate = gene.duplicate_with_value(4)

        assert duplicate.predicate is even
        assert duplicate.generator_fn is step
        assert duplicate.verify()
        assert not gene.duplicate_with_value(3).verify()


class TestMutation:
    """Tests for gene mutation."""

    @given(gene=any_gene_strategy, seed=st.integers(min_value=0, max_value=2 ** 32 - 1))
    @settings(max_examples=100)
    def test_mutate_is_deterministic_under_seed(self, gene, seed: int):
        """Mutating with a seeded context equals calling the generator with Random(seed)."""
        mutated = gene.mutate(EvolutionContext.seeded(seed))
        assert mutated.value == gene.generator(gene.value, random.Random(seed))

    @given(gene=any_gene_strategy, seed=st.integers(min_value=0, max_value=10_000))
    @settings(max_examples=100)
    def test_mutate_keeps_gene_valid(self, gene, seed: int):
        """Default generators produce values within the gene's bounds."""
        assert gene.mutate(EvolutionContext.seeded(seed)).verify()

    @given(seed=st.integers(min_value=0, max_value=10_000))
    @settings(max_examples=50)
    def test_char_generator_respects_predicate(self, seed: int):
        """Generated characters satisfy the gene predicate."""
        gene = CharGene("a", bounds=CHAR_BOUNDS, predicate=lambda c: c in "aeiou")
        assert gene.mutate(EvolutionContext.seeded(seed)).value in "aeiou"

    def test_unsatisfiable_predicate_raises(self):
        """A predicate no value in range satisfies fails instead of looping forever."""
        gene = IntGene(0, bounds=GeneBounds(0, 1), predicate=lambda x: x > 5)
        with pytest.raises(ValueError):
            gene.generator(0, random.Random(1))

    def test_mutate_leaves_receiver_unchanged(self):
        """Mutation returns a new gene."""
        gene = IntGene(5, bounds=INT_BOUNDS, generator_fn=lambda v, rng: v + 1)
        mutated = gene.mutate(EvolutionContext.seeded(0))
        assert mutated.value == 6
        assert gene.value == 5


class TestBooleanGene:
    """Tests for BooleanGene."""

    def test_flip(self):
        """Flip negates the value."""
        assert BooleanGene(True).flip().value is False
        assert BooleanGene(False).flip().value is True

    def test_flatten(self):
        """Flatten yields the single value."""
        assert BooleanGene(True).flatten() == [True]


class TestNumberGene:
    """Tests for numeric averaging."""

    def test_double_mean(self):
        """Unweighted average of doubles."""
        assert DoubleGene(1.0).average([DoubleGene(3.0)]).value == pytest.approx(2.0)

    def test_double_weighted_mean(self):
        """Weighted average of doubles."""
        gene = DoubleGene(1.0).average([DoubleGene(3.0)], weights=[3.0, 1.0])
        assert gene.value == pytest.approx(1.5)

    def test_int_mean_rounds_half_away_from_zero(self):
        """Integer means round halves away from zero."""
        assert IntGene(1).average([IntGene(2)]).value == 2
        assert IntGene(-1).average([IntGene(-2)]).value == -2
        assert IntGene(1).average([IntGene(2), IntGene(2)]).value == 2

    def test_average_keeps_template_bounds(self):
        """The averaged gene keeps the receiver's bounds."""
        gene = IntGene(0, bounds=GeneBounds(0, 10)).average([IntGene(10, bounds=GeneBounds(0, 10))])
        assert gene.bounds == GeneBounds(0, 10)
        assert gene.value == 5

    def test_weight_count_mismatch(self):
        """Weights must match the number of genes."""
        with pytest.raises(ValueError):
            DoubleGene(1.0).average([DoubleGene(2.0)], weights=[1.0])

    def test_zero_weights(self):
        """Weights summing to zero are rejected."""
        with pytest.raises(ValueError):
            DoubleGene(1.0).average([DoubleGene(2.0)], weights=[0.0, 0.0])

    def test_nan_double_is_invalid(self):
        """NaN is never a valid double gene value."""
        assert not DoubleGene(math.nan).verify()


class TestNothingGene:
    """Tests for the uninhabited gene."""

    def test_value_raises(self):
        """Reading the value is absurd."""
        with pytest.raises(AbsurdOperationError):
            NothingGene().value

    def test_mutate_raises(self):
        """Mutation is absurd."""
        with pytest.raises(AbsurdOperationError):
            NothingGene().mutate(EvolutionContext.seeded(0))

    def test_flatten_raises(self):
        """Flattening is absurd."""
        with pytest.raises(AbsurdOperationError):
            NothingGene().flatten()

    def test_other_operations_raise(self):
        """Every remaining operation is absurd as well."""
        gene = NothingGene()
        with pytest.raises(AbsurdOperationError):
            gene.verify()
        with pytest.raises(AbsurdOperationError):
            gene.duplicate_with_value(1)
        with pytest.raises(AbsurdOperationError):
            gene.generator(None, random.Random(0))

    def test_error_names_operation(self):
        """The error carries the name of the failing operation."""
        with pytest.raises(AbsurdOperationError) as info:
            NothingGene().flatten()
        assert info.value.operation == "flatten"
