"""The case loop: generate, replay, shrink on failure, report."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from lockstep.config import RunConfig
from lockstep.core.model import ReferenceModel, SystemAdapter
from lockstep.core.result import FailureReport, RunResult
from lockstep.engine.controller import ShrinkController
from lockstep.engine.executor import TestExecutor
from lockstep.engine.generator import SequenceGenerator
from lockstep.errors import ShrinkTimeout, TestFailure

if TYPE_CHECKING:
    from lockstep.reporters.protocol import Reporter

logger = logging.getLogger(__name__)


class StateMachineRunner:
    """Runs a reference model against a SUT for ``config.cases`` cases.

    Each case is generated from one seeded random source, so a run is
    reproducible from its seed. The first failing case is shrunk, handed to
    the reporters, and raised as TestFailure (or ShrinkTimeout when the
    shrink budget ran out). Later cases are not run.
    """

    def __init__(
        self,
        model: ReferenceModel[Any, Any],
        test: SystemAdapter[Any, Any, Any],
        config: RunConfig | None = None,
        reporters: Sequence[Reporter] | None = None,
    ) -> None:
        self.model = model
        self.test = test
        self.config = config or RunConfig()
        self.reporters = list(reporters or [])
        self.generator = SequenceGenerator(model, self.config)
        self.executor = TestExecutor(model, test, self.config)
        self.controller = ShrinkController(self.executor, self.config)

    def run(self) -> RunResult:
        """Run every case.

        Returns:
            RunResult if every case passed.

        Raises:
            TestFailure: A case failed; carries the minimal failing case.
            ShrinkTimeout: As TestFailure, but shrinking ran out of budget.
            GenerationExhausted: A candidate could not be generated.
        """
        seed = self.config.seed if self.config.seed is not None else random.randrange(2**32)
        rng = random.Random(seed)
        result = RunResult(seed=seed)
        logger.info("Running %d case(s) with seed %d", self.config.cases, seed)

        for case in range(self.config.cases):
            value = self.generator.generate(rng)
            candidate = value.current()
            outcome = self.executor.run_sequential(candidate)
            result.cases += 1
            result.transitions += len(candidate)

            if outcome.passed:
                continue

            logger.info(
                "Case %d failed at index %s with %s; shrinking %d transition(s)",
                case,
                outcome.index,
                type(outcome.cause).__name__,
                len(candidate),
            )
            shrink = self.controller.minimize(value, outcome)
            report = FailureReport.from_shrink(shrink, seed=seed, case=case)
            self._report(report)

            error_cls = ShrinkTimeout if shrink.timed_out else TestFailure
            raise error_cls(report) from report.cause

        result.finish()
        logger.info("All %d case(s) passed in %.0f ms", result.cases, result.duration_ms)
        return result

    def _report(self, report: FailureReport) -> None:
        for reporter in self.reporters:
            try:
                reporter.report(report)
            except Exception:
                # A broken reporter must not hide the test failure
                logger.exception("Reporter %s failed", type(reporter).__name__)


def run_state_machine_test(
    model: ReferenceModel[Any, Any],
    test: SystemAdapter[Any, Any, Any],
    config: RunConfig | None = None,
    reporters: Sequence[Reporter] | None = None,
    **overrides: Any,
) -> RunResult:
    """Convenience function for running a state machine test.

    This is the simplest way to run lockstep. It:
    1. Builds a RunConfig from ``overrides`` (and the environment) if none given
    2. Generates ``cases`` candidates and replays each one
    3. Shrinks the first failure and raises it as TestFailure

    Example:
        from lockstep import run_state_machine_test

        def test_counter():
            run_state_machine_test(CounterModel(), CounterTest(), max_size=30)
    """
    if config is None:
        config = RunConfig(**overrides)
    elif overrides:
        config = RunConfig(**{**config.model_dump(), **overrides})
    return StateMachineRunner(model, test, config, reporters).run()
