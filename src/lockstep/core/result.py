"""Outcome, ShrinkResult, FailureReport and RunResult dataclasses."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from lockstep.core.candidate import Candidate

# Failure index reported when the freshly initialised SUT already breaks an
# invariant, before any transition ran.
INITIAL_STATE_INDEX = -1


@dataclass(frozen=True)
class Outcome:
    """Result of replaying one candidate: either a pass or a failure at
    ``index`` with ``cause``.

    ``index`` is the position of the failing transition. It is
    ``INITIAL_STATE_INDEX`` when the initial state failed, and
    ``len(transitions)`` when only teardown failed.
    """

    passed: bool
    index: int | None = None
    cause: BaseException | None = None

    @classmethod
    def ok(cls) -> Outcome:
        return cls(passed=True)

    @classmethod
    def failure(cls, index: int, cause: BaseException) -> Outcome:
        return cls(passed=False, index=index, cause=cause)

    @property
    def failed(self) -> bool:
        return not self.passed

    def __str__(self) -> str:
        if self.passed:
            return "Pass"
        return f"Fail({self.index}, {self.cause!r})"


@dataclass
class ShrinkResult:
    """Output of a shrink session."""

    candidate: Candidate
    outcome: Outcome
    original_length: int
    iterations: int = 0
    accepted: int = 0
    rejected: int = 0
    timed_out: bool = False
    duration_ms: float = 0.0

    @property
    def reproduced(self) -> bool:
        """True if the candidate fails; False if the input never failed."""
        return self.outcome.failed


@dataclass
class FailureReport:
    """Everything needed to reproduce a minimal failing case.

    This is what the engine hands to reporters and to the TestFailure
    exception. It holds live objects; serialising them is the reporter's
    business.
    """

    initial_state: Any
    transitions: list[Any]
    index: int
    cause: BaseException
    seed: int | None = None
    case: int = 0
    original_length: int = 0
    shrink_iterations: int = 0
    timed_out: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_shrink(cls, shrink: ShrinkResult, seed: int | None = None, case: int = 0) -> FailureReport:
        outcome = shrink.outcome
        if outcome.passed or outcome.cause is None or outcome.index is None:
            raise ValueError("Cannot build a FailureReport from a passing outcome")
        return cls(
            initial_state=shrink.candidate.initial_state,
            transitions=list(shrink.candidate.transitions),
            index=outcome.index,
            cause=outcome.cause,
            seed=seed,
            case=case,
            original_length=shrink.original_length,
            shrink_iterations=shrink.iterations,
            timed_out=shrink.timed_out,
        )

    @property
    def failing_transition(self) -> Any:
        """The transition that failed, or None for initial-state/teardown failures."""
        if 0 <= self.index < len(self.transitions):
            return self.transitions[self.index]
        return None

    @property
    def location(self) -> str:
        if self.index == INITIAL_STATE_INDEX:
            return "initial state"
        if self.index >= len(self.transitions):
            return "teardown"
        return f"transition {self.index + 1}/{len(self.transitions)}"

    @property
    def cause_traceback(self) -> str:
        return "".join(traceback.format_exception(type(self.cause), self.cause, self.cause.__traceback__))

    def summary(self) -> str:
        """Human-readable multi-line summary."""
        lines = [
            f"Test failed at {self.location}: {type(self.cause).__name__}: {self.cause}",
            "",
            "Minimal failing input:",
            f"  initial state: {self.initial_state!r}",
            f"  transitions ({len(self.transitions)}):",
        ]
        for ix, transition in enumerate(self.transitions):
            marker = "  <-- failed here" if ix == self.index else ""
            lines.append(f"    {ix}: {transition!r}{marker}")
        shrunk = f"shrunk from {self.original_length} transition(s) in {self.shrink_iterations} step(s)"
        if self.timed_out:
            shrunk += ", shrink budget exhausted"
        lines.append("")
        lines.append(f"  seed={self.seed} case={self.case} ({shrunk})")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "initial_state": repr(self.initial_state),
            "transitions": [repr(t) for t in self.transitions],
            "index": self.index,
            "location": self.location,
            "cause": {"type": type(self.cause).__name__, "message": str(self.cause)},
            "seed": self.seed,
            "case": self.case,
            "original_length": self.original_length,
            "shrink_iterations": self.shrink_iterations,
            "timed_out": self.timed_out,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RunResult:
    """Summary of a run in which every case passed."""

    seed: int
    cases: int = 0
    transitions: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return True

    def finish(self) -> None:
        """Mark the run as finished."""
        self.finished_at = datetime.now()
        self.duration_ms = (self.finished_at - self.started_at).total_seconds() * 1000

    def summary(self) -> dict[str, int | float | bool]:
        return {
            "seed": self.seed,
            "cases": self.cases,
            "transitions": self.transitions,
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
        }
