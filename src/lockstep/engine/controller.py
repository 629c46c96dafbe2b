"""Shrink controller: drives a SequentialValueTree toward a minimal failure."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from lockstep.config import RunConfig
from lockstep.core.result import Outcome, ShrinkResult
from lockstep.engine.executor import TestExecutor
from lockstep.engine.shrinkable import SequentialValueTree

logger = logging.getLogger(__name__)


class ShrinkController:
    """Minimises a failing candidate.

    The loop:
    1. Ask the value for its next reduction (``shrink``)
    2. Replay the reduced candidate
    3. Still failing (at the same or an earlier index) -> keep it, minus any
       transitions after the failing one
    4. Passing -> ``complicate`` back to the last failing candidate
    5. Repeat until the value has no reductions left or the budget is spent

    The candidate held at the end is always one that was observed to fail.
    """

    def __init__(
        self,
        executor: TestExecutor,
        config: RunConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.executor = executor
        self.config = config or executor.config
        self._clock = clock

    def minimize(self, value: SequentialValueTree, failure: Outcome | None = None) -> ShrinkResult:
        """Shrink ``value`` in place and return the smallest failing candidate.

        Args:
            value: The generated value to shrink.
            failure: The outcome of the value's current candidate, if it was
                already replayed. Replayed here when omitted.

        Returns:
            ShrinkResult. ``timed_out`` is set when the shrink budget ran out
            first; the candidate is then the smallest failure found so far.
            If the starting candidate passes, it is returned unchanged with
            its passing outcome.
        """
        started = self._clock()
        best = value.current()
        original_length = len(best)

        if failure is None:
            failure = self.executor.run_sequential(best)
        if failure.passed:
            logger.debug("Candidate passes; nothing to minimise")
            return ShrinkResult(candidate=best, outcome=failure, original_length=original_length)

        if self._drop_tail(value, failure):
            best = value.current()
        result = ShrinkResult(candidate=best, outcome=failure, original_length=original_length)

        while value.shrink():
            if self._budget_exhausted(result.iterations, started):
                # The reduction just made was never replayed
                value.complicate()
                result.timed_out = True
                logger.warning(
                    "Shrink budget exhausted after %d iteration(s); reporting best failure so far",
                    result.iterations,
                )
                break

            result.iterations += 1
            candidate = value.current()
            outcome = self.executor.run_sequential(candidate)

            if self._still_fails(outcome, result.outcome):
                self._drop_tail(value, outcome)
                result.candidate = value.current()
                result.outcome = outcome
                result.accepted += 1
                logger.debug(
                    "Kept reduction: %d transition(s), failing at %s", len(candidate), outcome.index
                )
            else:
                value.complicate()
                result.rejected += 1

        result.duration_ms = (self._clock() - started) * 1000
        logger.debug(
            "Shrunk %d -> %d transition(s) in %d iteration(s) (%d kept, %d undone)",
            original_length,
            len(result.candidate),
            result.iterations,
            result.accepted,
            result.rejected,
        )
        return result

    @staticmethod
    def _drop_tail(value: SequentialValueTree, outcome: Outcome) -> bool:
        # Transitions after the failing one never ran
        return outcome.index is not None and value.truncate(outcome.index + 1)

    @staticmethod
    def _still_fails(outcome: Outcome, best: Outcome) -> bool:
        if outcome.passed:
            return False
        # A reduction must not move the failure later in the sequence
        return outcome.index is not None and best.index is not None and outcome.index <= best.index

    def _budget_exhausted(self, iterations: int, started: float) -> bool:
        max_iters = self.config.max_shrink_iters
        if max_iters and iterations >= max_iters:
            return True
        max_time = self.config.max_shrink_time
        return bool(max_time) and self._clock() - started >= max_time
