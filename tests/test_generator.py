"""Tests for SequenceGenerator and SequentialStrategy."""

from __future__ import annotations

import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as hst

from lockstep import (
    GenerationExhausted,
    RunConfig,
    SequenceGenerator,
    SequentialStrategy,
    SequentialValueTree,
    is_valid_sequence,
)
from lockstep.core import strategies as st
from tests.models import BagModel, BankModel, CounterModel, Increment, Reset


class ResetOnlyModel(CounterModel):
    """Proposes only Reset, which is never valid from zero."""

    def transition_strategy(self, state):
        return st.just(Reset())


class CappedModel(CounterModel):
    """Increment is only allowed below three."""

    def transition_strategy(self, state):
        return st.just(Increment())

    def precondition(self, state, transition):
        return state < 3


class TestGenerate:
    @settings(max_examples=50, deadline=None)
    @given(seed=hst.integers(min_value=0, max_value=2**32), sizes=hst.tuples(hst.integers(0, 15), hst.integers(0, 15)))
    def test_candidates_are_valid_and_sized(self, seed: int, sizes: tuple[int, int]) -> None:
        min_size, max_size = sorted(sizes)
        model = CounterModel(init=st.integers(0, 3))
        generator = SequenceGenerator(model, RunConfig(min_size=min_size, max_size=max_size))
        candidate = generator.generate(random.Random(seed)).current()

        assert min_size <= len(candidate) <= max_size
        assert is_valid_sequence(model, candidate.initial_state, candidate.transitions)

    def test_reset_never_first_from_zero(self) -> None:
        generator = SequenceGenerator(CounterModel(reset_weight=3), RunConfig(min_size=1, max_size=5))
        rng = random.Random(99)
        for _ in range(100):
            candidate = generator.generate(rng).current()
            assert candidate.transitions[0] == Increment()

    def test_returns_shrinkable_value(self) -> None:
        value = SequenceGenerator(BankModel(), RunConfig(min_size=2, max_size=4)).generate(random.Random(1))
        assert isinstance(value, SequentialValueTree)
        assert value.min_size == 2
        assert value.original_length == len(value)

    def test_same_seed_same_candidate(self) -> None:
        generator = SequenceGenerator(BankModel(init=st.integers(0, 100)), RunConfig(min_size=1, max_size=20))
        first = generator.generate(random.Random(42)).current()
        second = generator.generate(random.Random(42)).current()
        assert first == second

    def test_in_place_apply_leaves_drawn_states_alone(self) -> None:
        value = SequenceGenerator(BagModel(), RunConfig(min_size=10, max_size=10)).generate(random.Random(3))
        candidate = value.current()

        assert candidate.initial_state == list(range(10))
        assert sorted(t.item for t in candidate.transitions) == list(range(10))

    def test_zero_length_range(self) -> None:
        generator = SequenceGenerator(CounterModel(), RunConfig(min_size=0, max_size=0))
        assert len(generator.generate(random.Random(0))) == 0


class TestUnfillableSlots:
    def test_stops_when_slots_cannot_be_filled(self) -> None:
        generator = SequenceGenerator(CappedModel(), RunConfig(min_size=3, max_size=10))
        candidate = generator.generate(random.Random(3)).current()
        assert candidate.transitions == (Increment(),) * 3

    def test_exhausted_when_min_size_unreachable(self) -> None:
        config = RunConfig(min_size=5, max_size=10, max_generation_attempts=4)
        with pytest.raises(GenerationExhausted) as exc_info:
            SequenceGenerator(CappedModel(), config).generate(random.Random(3))

        assert exc_info.value.min_size == 5
        assert exc_info.value.generated == 3
        assert exc_info.value.attempts == 4

    def test_no_valid_transition_at_all(self) -> None:
        with pytest.raises(GenerationExhausted, match="precondition"):
            SequenceGenerator(ResetOnlyModel(), RunConfig(min_size=1)).generate(random.Random(0))

    def test_empty_allowed_when_min_size_zero(self) -> None:
        generator = SequenceGenerator(ResetOnlyModel(), RunConfig(min_size=0, max_size=5))
        assert len(generator.generate(random.Random(0))) == 0


class TestSequentialStrategy:
    def test_model_builds_strategy(self) -> None:
        strategy = CounterModel().sequential_strategy(min_size=2, max_size=4)
        assert isinstance(strategy, SequentialStrategy)
        assert strategy.config.size_range == (2, 4)
        assert 2 <= len(strategy.example(random.Random(5))) <= 4

    def test_keeps_other_settings(self) -> None:
        base = RunConfig(max_precondition_retries=2, seed=7)
        strategy = CounterModel().sequential_strategy(0, 3, config=base)
        assert strategy.config.max_precondition_retries == 2
        assert strategy.config.seed == 7
        assert strategy.config.size_range == (0, 3)

    def test_rejects_inverted_range(self) -> None:
        from lockstep import ConfigValidationError

        with pytest.raises(ConfigValidationError):
            CounterModel().sequential_strategy(min_size=5, max_size=2)
