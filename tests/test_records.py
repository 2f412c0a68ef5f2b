"""
Tests for evolution state, records and listeners.
"""

import logging
import math

import pandas as pd
import pytest
from hypothesis import given, strategies as st, settings

from geneforge.evolution.chromosomes import IntChromosome
from geneforge.evolution.exceptions import ConstraintViolationError, RecordTimingError
from geneforge.evolution.generation import (
    EvolutionRecord,
    EvolutionState,
    GenerationRecord,
    GenerationStats,
    IndividualRecord,
    TimedRecord,
)
from geneforge.evolution.genes import IntGene
from geneforge.evolution.listeners import CallbackListener, EvolutionRecorder, LoggingListener
from geneforge.evolution.models import Genotype, Individual
from geneforge.evolution.ranking import FitnessMaxRanker, FitnessMinRanker


def individual(fitness: float, tag: int = 0) -> Individual:
    return Individual(Genotype((IntChromosome((IntGene(tag),)),)), fitness=fitness)


def state_with(*fitness, generation=0, ranker=None):
    population = tuple(individual(f, i) for i, f in enumerate(fitness))
    return EvolutionState(population, ranker or FitnessMaxRanker(), generation)


class TestEvolutionState:
    """Tests for EvolutionState."""

    @given(generation=st.integers(max_value=-1))
    @settings(max_examples=50)
    def test_negative_generation_rejected(self, generation):
        """A negative generation is a constraint violation."""
        with pytest.raises(ConstraintViolationError):
            EvolutionState((), FitnessMaxRanker(), generation)

    def test_empty(self):
        """The empty state has no population and generation 0."""
        state = EvolutionState.empty(FitnessMaxRanker())
        assert state.is_empty()
        assert state.size == 0
        assert state.generation == 0
        assert state.best is None

    def test_best_follows_ranker(self):
        """best uses the state's ranker."""
        assert state_with(1.0, 3.0, 2.0).best.fitness == 3.0
        assert state_with(1.0, 3.0, 2.0, ranker=FitnessMinRanker()).best.fitness == 1.0

    def test_replace(self):
        """replace builds a new state and leaves the original untouched."""
        state = state_with(1.0)
        advanced = state.replace(generation=4)
        assert advanced.generation == 4
        assert state.generation == 0
        assert advanced.population == state.population


class TestTimedRecord:
    """Tests for timed records."""

    def test_start_time_before_start(self):
        """start_time cannot be read before start()."""
        with pytest.raises(RecordTimingError):
            TimedRecord().start_time

    def test_duration_before_stop(self):
        """duration cannot be read before stop()."""
        record = TimedRecord()
        record.start()
        with pytest.raises(RecordTimingError) as info:
            record.duration
        assert info.value.field_name == "duration"

    def test_stop_before_start(self):
        """stop() needs a start time."""
        with pytest.raises(RecordTimingError):
            TimedRecord().stop()

    def test_duration_after_stop(self):
        """A finished record has a non-negative duration."""
        record = TimedRecord()
        record.start()
        record.stop()
        assert record.is_finished
        assert record.duration >= 0.0


class TestGenerationRecord:
    """Tests for GenerationRecord."""

    @given(generation=st.integers(max_value=-1))
    @settings(max_examples=50)
    def test_negative_generation_rejected(self, generation):
        """Generation numbers must not be negative."""
        with pytest.raises(ConstraintViolationError):
            GenerationRecord(generation)

    @given(steady=st.integers(max_value=-1))
    @settings(max_examples=50)
    def test_negative_steady_rejected(self, steady):
        """The steady counter must not be negative."""
        record = GenerationRecord(0)
        with pytest.raises(ConstraintViolationError):
            record.steady = steady
        assert record.steady == 0

    @given(steady=st.integers(min_value=0, max_value=10_000))
    @settings(max_examples=50)
    def test_steady_assignment(self, steady):
        """Non-negative steady counters are stored."""
        record = GenerationRecord(3)
        record.steady = steady
        assert record.steady == steady

    def test_compute_stats_uses_offspring(self):
        """Statistics describe the population at the end of the generation."""
        record = GenerationRecord(1)
        record.population.offspring = [
            IndividualRecord.from_individual(individual(f)) for f in (1.0, 2.0, 6.0)
        ]
        stats = record.compute_stats(FitnessMaxRanker())
        assert stats.best_fitness == 6.0
        assert stats.worst_fitness == 1.0
        assert stats.average_fitness == pytest.approx(3.0)


class TestGenerationStats:
    """Tests for GenerationStats."""

    def test_maximizing(self):
        """Best is the highest fitness when maximizing."""
        population = [individual(f, i) for i, f in enumerate((4.0, 1.0, 7.0))]
        stats = GenerationStats.from_population(2, population, FitnessMaxRanker())
        assert (stats.best_fitness, stats.worst_fitness) == (7.0, 1.0)
        assert stats.best_genotype == population[2].genotype
        assert stats.generation == 2

    def test_minimizing(self):
        """Best is the lowest fitness when minimizing."""
        population = [individual(f) for f in (4.0, 1.0, 7.0)]
        stats = GenerationStats.from_population(0, population, FitnessMinRanker())
        assert (stats.best_fitness, stats.worst_fitness) == (1.0, 7.0)

    def test_ignores_unevaluated(self):
        """Unevaluated individuals are left out of the statistics."""
        population = [individual(f) for f in (math.nan, 2.0, 4.0)]
        stats = GenerationStats.from_population(0, population, FitnessMaxRanker())
        assert stats.average_fitness == pytest.approx(3.0)
        assert stats.worst_fitness == 2.0

    def test_all_unevaluated(self):
        """A population without fitness yields NaN statistics."""
        stats = GenerationStats.from_population(0, [individual(math.nan)], FitnessMaxRanker())
        assert math.isnan(stats.best_fitness)
        assert stats.best_genotype is None


class TestEvolutionRecorder:
    """Tests for EvolutionRecorder and EvolutionRecord."""

    def run_generations(self, recorder, bests):
        recorder.on_evolution_started(state_with())
        for generation, best in enumerate(bests):
            recorder.on_generation_started(state_with(best, 0.0, generation=generation))
            recorder.on_evaluation_started(state_with())
            recorder.on_evaluation_ended(state_with())
            recorder.on_generation_ended(state_with(best, 0.0, generation=generation + 1))
        recorder.on_evolution_ended(state_with())

    def test_records_each_generation(self):
        """One generation record per generation, with parents, offspring and timing."""
        recorder = EvolutionRecorder()
        self.run_generations(recorder, [1.0, 2.0, 2.0])

        generations = recorder.record.generations
        assert [g.generation for g in generations] == [0, 1, 2]
        assert [g.steady for g in generations] == [0, 0, 1]
        assert all(len(g.population.offspring) == 2 for g in generations)
        assert all(g.evaluation.is_finished for g in generations)
        assert recorder.record.is_finished

    def test_both_evaluation_passes_are_timed(self, monkeypatch):
        """The evaluation before selection and the offspring evaluation are recorded separately."""
        import geneforge.evolution.generation as generation

        clock = [0.0]
        monkeypatch.setattr(generation.time, "perf_counter", lambda: clock[0])

        recorder = EvolutionRecorder()
        recorder.on_evolution_started(state_with())
        recorder.on_generation_started(state_with(1.0))
        recorder.on_evaluation_started(state_with())
        clock[0] = 0.08
        recorder.on_evaluation_ended(state_with())
        clock[0] = 0.10
        recorder.on_evaluation_started(state_with())
        clock[0] = 0.18
        recorder.on_evaluation_ended(state_with())
        recorder.on_generation_ended(state_with(1.0, generation=1))

        record = recorder.current
        assert record.evaluation.duration == pytest.approx(0.08)
        assert record.offspring_evaluation.duration == pytest.approx(0.08)
        assert record.evaluation_duration == pytest.approx(0.16)
        assert recorder.record.to_dataframe()["evaluation_duration"].tolist() == pytest.approx([0.16])

    def test_records_keep_evaluation_flag(self):
        """Individual records restore the evaluated flag of NaN-fitness individuals."""
        recorder = EvolutionRecorder()
        recorder.on_evolution_started(state_with())
        recorder.on_generation_started(state_with())
        nan_evaluated = individual(math.nan).with_fitness(math.nan)
        recorder.on_generation_ended(EvolutionState((nan_evaluated,), FitnessMaxRanker(), 1))
        assert recorder.current.population.offspring[0].to_individual().is_evaluated()

    def test_to_dataframe(self):
        """The record exports one row per generation."""
        recorder = EvolutionRecorder()
        self.run_generations(recorder, [1.0, 3.0])
        frame = recorder.record.to_dataframe()

        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == list(EvolutionRecord.COLUMNS)
        assert frame["generation"].tolist() == [0, 1]
        assert frame["best_fitness"].tolist() == [1.0, 3.0]
        assert frame["average_fitness"].tolist() == pytest.approx([0.5, 1.5])

    def test_empty_record_dataframe(self):
        """An empty record exports an empty frame with the expected columns."""
        frame = EvolutionRecord().to_dataframe()
        assert frame.empty
        assert list(frame.columns) == list(EvolutionRecord.COLUMNS)

    def test_restarting_clears_previous_run(self):
        """Starting a new evolution discards the previous record."""
        recorder = EvolutionRecorder()
        self.run_generations(recorder, [1.0, 2.0])
        self.run_generations(recorder, [5.0])
        assert len(recorder.record.generations) == 1


class TestReportingListeners:
    """Tests for LoggingListener and CallbackListener."""

    def test_callback_receives_stats(self):
        """The callback is invoked with the generation and its statistics."""
        calls = []
        listener = CallbackListener(lambda generation, stats: calls.append((generation, stats)))
        listener.on_generation_ended(state_with(1.0, 5.0, generation=3))

        assert len(calls) == 1
        generation, stats = calls[0]
        assert generation == 3
        assert stats.best_fitness == 5.0

    def test_logging_listener(self, caplog):
        """Generation statistics are logged at the configured level."""
        listener = LoggingListener(level=logging.WARNING)
        with caplog.at_level(logging.WARNING):
            listener.on_generation_ended(state_with(2.0, generation=1))
            listener.on_evolution_ended(state_with(2.0, generation=1))
        assert "Generation 1" in caplog.text
        assert "best fitness 2.0" in caplog.text
