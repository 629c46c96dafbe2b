"""Pytest fixtures for lockstep tests."""

from __future__ import annotations

import pytest

from lockstep import RunConfig, ShrinkController, TestExecutor
from tests.models import BankModel, BankTest, CounterModel, CounterTest


@pytest.fixture
def config() -> RunConfig:
    return RunConfig(cases=32, min_size=1, max_size=20, seed=1234)


@pytest.fixture
def counter_model() -> CounterModel:
    return CounterModel()


@pytest.fixture
def bounded_counter() -> CounterTest:
    """Counter SUT with the invariant "counter <= 10"."""
    return CounterTest(limit=10)


@pytest.fixture
def bank_model() -> BankModel:
    return BankModel()


@pytest.fixture
def buggy_bank() -> BankTest:
    return BankTest(bug_from=7)


@pytest.fixture
def counter_executor(counter_model: CounterModel, bounded_counter: CounterTest, config: RunConfig) -> TestExecutor:
    return TestExecutor(counter_model, bounded_counter, config)


@pytest.fixture
def counter_controller(counter_executor: TestExecutor) -> ShrinkController:
    return ShrinkController(counter_executor)
