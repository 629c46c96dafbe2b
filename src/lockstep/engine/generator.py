"""Sequence generation: an initial state plus precondition-valid transitions."""

from __future__ import annotations

import copy
import logging
import random
from typing import Any, Generic, TypeVar

from lockstep.config import RunConfig
from lockstep.core.candidate import Candidate
from lockstep.core.model import ReferenceModel
from lockstep.core.value_tree import Strategy, ValueTree
from lockstep.engine.shrinkable import SequentialValueTree
from lockstep.errors import GenerationExhausted

logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T")


class SequenceGenerator:
    """Builds candidates by threading state through the reference model.

    For each slot the transition strategy is asked for a transition in the
    current state; draws whose precondition fails are retried up to
    ``max_precondition_retries`` times before the slot counts as
    unfillable. After ``max_unfillable_slots`` unfillable slots in a row the
    sequence ends early. A sequence shorter than ``min_size`` is thrown away
    and the whole candidate is drawn again, up to
    ``max_generation_attempts`` times.
    """

    def __init__(self, model: ReferenceModel[Any, Any], config: RunConfig | None = None) -> None:
        self.model = model
        self.config = config or RunConfig()

    def generate(self, rng: random.Random) -> SequentialValueTree:
        """Generate one shrinkable candidate.

        Raises:
            GenerationExhausted: No attempt reached ``min_size`` transitions.
        """
        min_size, max_size = self.config.size_range
        longest = 0
        for attempt in range(1, self.config.max_generation_attempts + 1):
            initial_tree = self.model.init_strategy().new_tree(rng)
            initial_state = initial_tree.current()
            trees, transitions = self._generate_transitions(initial_state, rng.randint(min_size, max_size), rng)

            if len(transitions) >= min_size:
                logger.debug("Generated %d transition(s) on attempt %d", len(transitions), attempt)
                return SequentialValueTree(
                    self.model,
                    initial_tree,
                    initial_state,
                    trees,
                    transitions,
                    min_size=min_size,
                )

            longest = max(longest, len(transitions))
            logger.debug(
                "Attempt %d produced %d transition(s), need %d; retrying",
                attempt,
                len(transitions),
                min_size,
            )

        raise GenerationExhausted(min_size, longest, self.config.max_generation_attempts)

    def _generate_transitions(
        self,
        initial_state: Any,
        target: int,
        rng: random.Random,
    ) -> tuple[list[ValueTree[Any]], list[Any]]:
        state = copy.deepcopy(initial_state)
        trees: list[ValueTree[Any]] = []
        transitions: list[Any] = []
        unfillable = 0

        for slot in range(target):
            drawn = self._draw_transition(state, rng)
            if drawn is None:
                unfillable += 1
                logger.debug("Slot %d unfillable (%d in a row)", slot, unfillable)
                if unfillable >= self.config.max_unfillable_slots:
                    break
                continue

            unfillable = 0
            tree, transition = drawn
            trees.append(tree)
            transitions.append(transition)
            # Drawn trees may close over the state; each keeps the snapshot it was drawn from
            state = self.model.apply(copy.deepcopy(state), transition)

        return trees, transitions

    def _draw_transition(self, state: Any, rng: random.Random) -> tuple[ValueTree[Any], Any] | None:
        for _ in range(self.config.max_precondition_retries):
            tree = self.model.transition_strategy(state).new_tree(rng)
            transition = tree.current()
            if self.model.precondition(state, transition):
                return tree, transition
        return None


class SequentialStrategy(Strategy[Candidate], Generic[S, T]):
    """Strategy whose value trees are SequentialValueTrees for ``model``."""

    def __init__(self, model: ReferenceModel[S, T], config: RunConfig) -> None:
        self.model = model
        self.config = config

    def new_tree(self, rng: random.Random) -> SequentialValueTree:
        return SequenceGenerator(self.model, self.config).generate(rng)

    def __repr__(self) -> str:
        return f"SequentialStrategy({type(self.model).__name__}, {self.config.min_size}..={self.config.max_size})"
