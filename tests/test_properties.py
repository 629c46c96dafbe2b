"""Property tests for shrinking, driven by hypothesis."""

from __future__ import annotations

import random

from hypothesis import given, settings
from hypothesis import strategies as hst

from lockstep import RunConfig, SequenceGenerator, ShrinkController, TestExecutor, is_valid_sequence
from lockstep.core import strategies as st
from tests.models import BankModel, BankTest


@settings(max_examples=40, deadline=None)
@given(seed=hst.integers(min_value=0, max_value=2**32), bug_from=hst.integers(min_value=1, max_value=60))
def test_shrinking_never_loses_the_failure(seed: int, bug_from: int) -> None:
    model = BankModel(init=st.integers(0, 20))
    config = RunConfig(min_size=1, max_size=12)
    executor = TestExecutor(model, BankTest(bug_from=bug_from), config)
    value = SequenceGenerator(model, config).generate(random.Random(seed))
    original = value.current()
    first = executor.run_sequential(original)
    if first.passed:
        return

    result = ShrinkController(executor).minimize(value, first)
    candidate = result.candidate

    assert result.reproduced
    assert len(candidate) <= len(original)
    assert result.outcome.index <= first.index
    assert is_valid_sequence(model, candidate.initial_state, candidate.transitions)
    replay = executor.run_sequential(candidate)
    assert replay.failed
    assert replay.index == result.outcome.index


@settings(max_examples=40, deadline=None)
@given(seed=hst.integers(min_value=0, max_value=2**32))
def test_exhaustive_shrink_stays_valid(seed: int) -> None:
    model = BankModel(init=st.integers(0, 20))
    value = SequenceGenerator(model, RunConfig(min_size=0, max_size=10)).generate(random.Random(seed))
    while value.shrink():
        candidate = value.current()
        assert is_valid_sequence(model, candidate.initial_state, candidate.transitions)
    assert value.cursor.exhausted
    assert len(value) == 0


@settings(max_examples=40, deadline=None)
@given(seed=hst.integers(min_value=0, max_value=2**32), undo_every=hst.integers(min_value=1, max_value=4))
def test_complicate_undoes_shrink(seed: int, undo_every: int) -> None:
    model = BankModel(init=st.integers(0, 20))
    value = SequenceGenerator(model, RunConfig(min_size=0, max_size=10)).generate(random.Random(seed))
    original_length = len(value)
    step = 0
    while True:
        before = value.current()
        if not value.shrink():
            break
        assert len(value) <= original_length
        step += 1
        if step % undo_every == 0:
            assert value.complicate()
            assert value.current() == before
            assert not value.complicate()
