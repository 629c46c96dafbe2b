"""Sequential replay of a candidate against the model and the SUT."""

from __future__ import annotations

import copy
import logging
from typing import Any

from lockstep.config import RunConfig
from lockstep.core.candidate import Candidate, first_invalid_index
from lockstep.core.model import ReferenceModel, SystemAdapter
from lockstep.core.result import INITIAL_STATE_INDEX, Outcome
from lockstep.errors import PreconditionViolation

logger = logging.getLogger(__name__)

_NO_SUT = object()


class TestExecutor:
    """Replays candidates through the reference model and the SUT in lock-step.

    The replay for one candidate:
    1. Copy the initial reference state and build a fresh SUT from it
    2. Check invariants on the initial SUT
    3. For each transition:
       a. Advance the reference state with ``model.apply``
       b. Apply the transition to the SUT (post-conditions are asserted here)
       c. Check invariants
    4. Tear the SUT down

    The first exception raised by steps 1-3 stops the replay; later
    transitions are never applied. The SUT is torn down either way.

    Reference state and SUT state are separate values: the SUT is built from
    a copy of the reference state and never shares it.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        model: ReferenceModel[Any, Any],
        test: SystemAdapter[Any, Any, Any],
        config: RunConfig | None = None,
    ) -> None:
        self.model = model
        self.test = test
        self.config = config or RunConfig()
        self.runs = 0

    def run_sequential(self, candidate: Candidate) -> Outcome:
        """Replay ``candidate`` and return Pass or Fail(index, cause).

        Raises:
            PreconditionViolation: The candidate is not valid for the model.
        """
        invalid = first_invalid_index(self.model, candidate.initial_state, candidate.transitions)
        if invalid is not None:
            raise PreconditionViolation(invalid, candidate.transitions[invalid])

        self.runs += 1
        verbose = self.config.verbose
        total = len(candidate.transitions)
        if verbose:
            logger.info("Running a test case with %d transitions.", total)

        ref_state = copy.deepcopy(candidate.initial_state)
        sut: Any = _NO_SUT
        index = INITIAL_STATE_INDEX

        try:
            sut = self.test.init_test(copy.deepcopy(ref_state))
            self.test.check_invariants(sut, ref_state)

            for index, transition in enumerate(candidate.transitions):
                if verbose:
                    logger.info("Applying transition %d/%d: %r", index + 1, total, transition)
                ref_state = self.model.apply(ref_state, transition)
                sut = self.test.apply(sut, ref_state, transition)
                self.test.check_invariants(sut, ref_state)

        except Exception as e:
            if verbose:
                logger.info("Transition %d failed: %s: %s", index, type(e).__name__, e)
            if sut is not _NO_SUT:
                self._teardown_after_failure(sut, ref_state)
            return Outcome.failure(index, e)

        try:
            self.test.teardown(sut, ref_state)
        except Exception as e:
            return Outcome.failure(total, e)

        return Outcome.ok()

    def _teardown_after_failure(self, sut: Any, ref_state: Any) -> None:
        try:
            self.test.teardown(sut, ref_state)
        except Exception as e:
            # The transition failure is what gets reported
            logger.warning("Teardown raised after a failed test case: %s: %s", type(e).__name__, e)
