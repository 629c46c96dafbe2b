"""The shrinkable (initial state, transitions) value.

Shrinking runs through three phases, in order, never revisiting one:

1. DELETE_TRANSITION - drop transitions from the back while the sequence is
   longer than ``min_size``.
2. SHRINK_TRANSITION - simplify each transition, front to back, through its
   own value tree.
3. SHRINK_INITIAL_STATE - simplify the initial state.

Every proposed reduction is checked against the model's preconditions before
it becomes the current candidate, so ``current()`` is always a sequence the
model accepts. The last accepted reduction is kept as an ``Edit`` so that
``complicate()`` can put the previous candidate back exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lockstep.core.candidate import Candidate, is_valid_sequence, longest_valid_prefix
from lockstep.core.model import ReferenceModel
from lockstep.core.value_tree import ValueTree

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Shrink phases, in the order they run."""

    DELETE_TRANSITION = "delete_transition"
    SHRINK_TRANSITION = "shrink_transition"
    SHRINK_INITIAL_STATE = "shrink_initial_state"
    DONE = "done"


@dataclass
class ShrinkCursor:
    """Where the next shrink attempt happens."""

    phase: Phase = Phase.DELETE_TRANSITION
    index: int = 0

    def advance(self, phase: Phase, index: int = 0) -> None:
        logger.debug("Shrink phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase
        self.index = index

    @property
    def exhausted(self) -> bool:
        return self.phase is Phase.DONE


@dataclass(frozen=True)
class Edit:
    """The most recent accepted reduction.

    ``prior`` is the previous sequence length for DELETE_TRANSITION and the
    previous value for the two shrink phases.
    """

    phase: Phase
    index: int
    prior: Any


class SequentialValueTree:
    """A generated candidate that can shrink and undo its last shrink.

    Only one level of undo is kept: a successful ``shrink()`` forgets the edit
    before it. Also implements the ValueTree protocol (``simplify`` is an
    alias of ``shrink``), so it can be driven like any other value.
    """

    def __init__(
        self,
        model: ReferenceModel[Any, Any],
        initial_tree: ValueTree[Any],
        initial_state: Any,
        transition_trees: Sequence[ValueTree[Any]],
        transitions: Sequence[Any],
        min_size: int = 0,
    ) -> None:
        if len(transition_trees) != len(transitions):
            raise ValueError("Every transition needs its value tree")
        self._model = model
        self._initial_tree = initial_tree
        self._initial_state = initial_state
        self._trees = list(transition_trees)
        self._transitions = list(transitions)
        self._length = len(self._transitions)
        self._min_size = min_size
        self._original_length = self._length
        self._cursor = ShrinkCursor()
        self._last_edit: Edit | None = None
        # Set when complicate() left the sub-value tree at the cursor on an
        # untested value; the next shrink proposes it instead of simplifying.
        self._retry_pending = False

    # ── Read access ───────────────────────────────────────────────────────

    def current(self) -> Candidate:
        return Candidate(self._initial_state, tuple(self._transitions[: self._length]))

    @property
    def cursor(self) -> ShrinkCursor:
        return self._cursor

    @property
    def last_edit(self) -> Edit | None:
        return self._last_edit

    @property
    def min_size(self) -> int:
        return self._min_size

    @property
    def original_length(self) -> int:
        return self._original_length

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return (
            f"SequentialValueTree(length={self._length}, phase={self._cursor.phase.value}, "
            f"index={self._cursor.index})"
        )

    # ── Shrink protocol ───────────────────────────────────────────────────

    def shrink(self) -> bool:
        """Apply the next reduction in place.

        Returns False once every phase is exhausted; ``current()`` is then
        the smallest candidate this value can reach.
        """
        self._last_edit = None
        cursor = self._cursor

        while not cursor.exhausted:
            if cursor.phase is Phase.DELETE_TRANSITION:
                edit = self._delete_from_back()
                if edit is None:
                    cursor.advance(Phase.SHRINK_TRANSITION)
                    continue
            elif cursor.phase is Phase.SHRINK_TRANSITION:
                if cursor.index >= self._length:
                    cursor.advance(Phase.SHRINK_INITIAL_STATE)
                    continue
                edit = self._shrink_transition(cursor.index)
                if edit is None:
                    self._retry_pending = False
                    cursor.index += 1
                    continue
            else:
                edit = self._shrink_initial_state()
                if edit is None:
                    self._retry_pending = False
                    cursor.advance(Phase.DONE)
                    continue

            self._last_edit = edit
            return True

        return False

    def complicate(self) -> bool:
        """Undo the most recent reduction.

        Returns False if there is nothing to undo. After undoing, the cursor
        moves past the reduction: the delete phase ends, and a sub-value is
        given up unless its own tree can offer a less aggressive value.
        """
        edit = self._last_edit
        if edit is None:
            return False
        self._last_edit = None

        if edit.phase is Phase.DELETE_TRANSITION:
            self._length = edit.prior
            self._cursor.advance(Phase.SHRINK_TRANSITION)
        elif edit.phase is Phase.SHRINK_TRANSITION:
            self._transitions[edit.index] = edit.prior
            if self._can_retry(self._trees[edit.index], edit.prior):
                self._retry_pending = True
            else:
                self._cursor.index = edit.index + 1
        else:
            self._initial_state = edit.prior
            if self._can_retry(self._initial_tree, edit.prior):
                self._retry_pending = True
            else:
                self._cursor.advance(Phase.DONE)

        logger.debug("Undid %s at index %d", edit.phase.value, edit.index)
        return True

    def truncate(self, length: int) -> bool:
        """Drop every transition from ``length`` on, keeping ``min_size``.

        Used once a replay showed the failure happens before those
        transitions run. The shorter candidate becomes the new baseline, so
        there is nothing left to undo afterwards. Returns False if nothing
        was dropped.
        """
        length = max(length, self._min_size)
        if length >= self._length:
            return False
        logger.debug("Dropped transitions %d..%d after the failure", length, self._length - 1)
        self._length = length
        self._last_edit = None
        return True

    # ValueTree protocol
    simplify = shrink

    @staticmethod
    def _can_retry(tree: ValueTree[Any], restored: Any) -> bool:
        # A tree that backs off all the way to the restored value has nothing new to offer
        return tree.complicate() and tree.current() != restored

    # ── Phases ────────────────────────────────────────────────────────────

    def _delete_from_back(self) -> Edit | None:
        if self._length <= self._min_size:
            return None
        prior = self._length
        new_length = prior - 1
        # Trim further if what remains is not valid on its own
        new_length = min(
            new_length,
            longest_valid_prefix(self._model, self._initial_state, self._transitions[:new_length]),
        )
        if new_length < self._min_size:
            logger.debug("No valid deletion keeps %d transition(s)", self._min_size)
            return None
        self._length = new_length
        logger.debug("Deleted transitions %d..%d", new_length, prior - 1)
        return Edit(Phase.DELETE_TRANSITION, new_length, prior)

    def _next_proposal(self, tree: ValueTree[Any]) -> tuple[bool, Any]:
        if self._retry_pending:
            self._retry_pending = False
            return True, tree.current()
        if tree.simplify():
            return True, tree.current()
        return False, None

    def _shrink_transition(self, ix: int) -> Edit | None:
        found, proposed = self._next_proposal(self._trees[ix])
        if not found:
            return None
        transitions = self._transitions[: self._length]
        transitions[ix] = proposed
        if not is_valid_sequence(self._model, self._initial_state, transitions, start=ix):
            logger.debug("Rejected shrink of transition %d: precondition no longer holds", ix)
            return None
        prior = self._transitions[ix]
        self._transitions[ix] = proposed
        return Edit(Phase.SHRINK_TRANSITION, ix, prior)

    def _shrink_initial_state(self) -> Edit | None:
        found, proposed = self._next_proposal(self._initial_tree)
        if not found:
            return None
        if not is_valid_sequence(self._model, proposed, self._transitions[: self._length]):
            logger.debug("Rejected shrink of initial state: precondition no longer holds")
            return None
        prior = self._initial_state
        self._initial_state = proposed
        return Edit(Phase.SHRINK_INITIAL_STATE, 0, prior)
