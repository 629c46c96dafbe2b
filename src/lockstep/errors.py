"""Exceptions raised by the lockstep engine.

Test failures are the designed outcome of a run and always carry the minimal
failing case; the remaining errors describe runs that could not be carried out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lockstep.core.result import FailureReport


class LockstepError(Exception):
    """Base class for all lockstep errors."""


class ConfigValidationError(LockstepError):
    """Raised when a configuration value is out of range."""

    def __init__(self, message: str, field: str, value: Any = None) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field}: {message} (got {value!r})")


class GenerationExhausted(LockstepError):
    """Raised when no candidate with at least ``min_size`` valid transitions
    could be generated within the configured number of attempts.

    Usually the model's preconditions reject almost every transition its
    strategy proposes. Either loosen the preconditions, make
    ``transition_strategy(state)`` state-aware, or lower ``min_size``.
    """

    def __init__(self, min_size: int, generated: int, attempts: int) -> None:
        self.min_size = min_size
        self.generated = generated
        self.attempts = attempts
        super().__init__(
            f"Could not generate {min_size} valid transition(s) after {attempts} attempt(s); "
            f"the longest sequence produced had {generated}.\n"
            f"  - Does transition_strategy(state) only propose transitions that can pass precondition()?\n"
            f"  - Is min_size reachable from every initial state?"
        )


class PreconditionViolation(LockstepError):
    """Raised when a candidate reaching the executor breaks a precondition.

    Generation and shrinking both reject such candidates, so seeing this error
    means a candidate was built by hand or the model is not deterministic.
    """

    def __init__(self, index: int, transition: Any) -> None:
        self.index = index
        self.transition = transition
        super().__init__(
            f"Transition {index} ({transition!r}) does not satisfy its precondition "
            "against the state folded from the preceding transitions."
        )


class TooManyRejects(LockstepError):
    """Raised when a filtered strategy cannot produce an acceptable value."""

    def __init__(self, whence: str, rejects: int) -> None:
        self.whence = whence
        self.rejects = rejects
        super().__init__(f"Filter '{whence}' rejected {rejects} values in a row")


class TestFailure(LockstepError):
    """A test case failed; carries the minimal failing case.

    Attributes:
        report: The FailureReport with the minimal initial state, the
            transitions, the failing index and the original cause.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, report: FailureReport) -> None:
        self.report = report
        super().__init__(report.summary())

    @property
    def cause(self) -> BaseException:
        return self.report.cause

    @property
    def index(self) -> int:
        return self.report.index


class ShrinkTimeout(TestFailure):
    """The shrink budget ran out before a minimal case was reached.

    The carried report holds the smallest failing case found so far.
    """
