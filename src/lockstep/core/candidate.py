"""Candidate test cases and the precondition fold."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from lockstep.core.model import ReferenceModel


@dataclass(frozen=True)
class Candidate:
    """An initial reference state plus the transitions to run from it.

    Equality is structural, so two candidates compare equal when their
    initial states and transitions do. Candidates are not hashable: states
    are often lists or dicts.
    """

    initial_state: Any
    transitions: tuple[Any, ...] = ()

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self.transitions)

    @property
    def transition_names(self) -> list[str]:
        """Short names of the transitions, for reports."""
        return [getattr(t, "name", None) or type(t).__name__ for t in self.transitions]


def first_invalid_index(
    model: ReferenceModel[Any, Any],
    initial_state: Any,
    transitions: Sequence[Any],
    start: int = 0,
) -> int | None:
    """Index of the first transition at or after ``start`` whose precondition
    fails against the state folded from the transitions before it.

    Returns None when the sequence is valid. The fold always begins from a
    copy of ``initial_state``; the caller's state is never handed to
    ``model.apply``.
    """
    state = copy.deepcopy(initial_state)
    for ix, transition in enumerate(transitions):
        if ix >= start and not model.precondition(state, transition):
            return ix
        state = model.apply(state, transition)
    return None


def is_valid_sequence(
    model: ReferenceModel[Any, Any],
    initial_state: Any,
    transitions: Sequence[Any],
    start: int = 0,
) -> bool:
    return first_invalid_index(model, initial_state, transitions, start) is None


def longest_valid_prefix(
    model: ReferenceModel[Any, Any],
    initial_state: Any,
    transitions: Sequence[Any],
) -> int:
    """Length of the longest prefix of ``transitions`` that is valid."""
    ix = first_invalid_index(model, initial_state, transitions)
    return len(transitions) if ix is None else ix
