"""Reference model and system-under-test interfaces.

The engine is generic over the model's ``State`` and ``Transition`` types and
only ever talks to them through the two protocols below. The ABC base
classes are a convenience for writing models; they fill in the optional
operations with no-op defaults.

Example:
    class CounterModel(ReferenceStateMachine[int, str]):
        def init_strategy(self):
            return st.just(0)

        def transition_strategy(self, state):
            return st.sampled_from(["inc", "reset"])

        def apply(self, state, transition):
            return state + 1 if transition == "inc" else 0

        def precondition(self, state, transition):
            return transition != "reset" or state > 0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar, runtime_checkable

from lockstep.core.value_tree import Strategy

if TYPE_CHECKING:
    from lockstep.config import RunConfig
    from lockstep.engine.generator import SequentialStrategy

S = TypeVar("S")  # reference state
T = TypeVar("T")  # transition
SUT = TypeVar("SUT")  # concrete system state


@runtime_checkable
class ReferenceModel(Protocol[S, T]):
    """Protocol for an abstract reference state machine."""

    def init_strategy(self) -> Strategy[S]:
        """Strategy for the initial reference state."""
        ...

    def transition_strategy(self, state: S) -> Strategy[T]:
        """Strategy for the next transition, given the current state."""
        ...

    def apply(self, state: S, transition: T) -> S:
        """Return the state after ``transition``.

        The engine hands ``apply`` a private copy of the state, so in-place
        mutation followed by ``return state`` is fine.
        """
        ...

    def precondition(self, state: S, transition: T) -> bool:
        """Whether ``transition`` may be applied in ``state``."""
        ...


@runtime_checkable
class SystemAdapter(Protocol[SUT, S, T]):
    """Protocol for driving the concrete system under test.

    Post-conditions are asserted inside ``apply`` and invariants inside
    ``check_invariants``; any exception raised there fails the test case and
    becomes its cause.
    """

    def init_test(self, ref_state: S) -> SUT:
        ...

    def apply(self, state: SUT, ref_state: S, transition: T) -> SUT:
        ...

    def check_invariants(self, state: SUT, ref_state: S) -> None:
        ...

    def teardown(self, state: SUT, ref_state: S) -> None:
        ...


class ReferenceStateMachine(ABC, Generic[S, T]):
    """Base class for reference models.

    Every transition is allowed unless ``precondition`` is overridden.
    """

    @abstractmethod
    def init_strategy(self) -> Strategy[S]:
        ...

    @abstractmethod
    def transition_strategy(self, state: S) -> Strategy[T]:
        ...

    @abstractmethod
    def apply(self, state: S, transition: T) -> S:
        ...

    def precondition(self, state: S, transition: T) -> bool:  # noqa: ARG002
        return True

    def sequential_strategy(
        self,
        min_size: int = 1,
        max_size: int = 20,
        config: RunConfig | None = None,
    ) -> SequentialStrategy[S, T]:
        """Strategy for (initial state, transitions) candidates of this model.

        Its value trees shrink with the sequence shrinking algorithm, so they
        can be handed to any code that speaks the ValueTree protocol.
        """
        from lockstep.config import RunConfig
        from lockstep.engine.generator import SequentialStrategy

        if config is None:
            config = RunConfig(min_size=min_size, max_size=max_size)
        else:
            config = RunConfig(**{**config.model_dump(), "min_size": min_size, "max_size": max_size})
        return SequentialStrategy(self, config)


class StateMachineTest(ABC, Generic[SUT, S, T]):
    """Base class for system-under-test adapters.

    Note that ``apply`` receives the reference state *after* the transition
    has been applied to the model, so post-conditions can compare the SUT
    against the expected outcome directly.
    """

    @abstractmethod
    def init_test(self, ref_state: S) -> SUT:
        """Create a fresh SUT matching ``ref_state``."""
        ...

    @abstractmethod
    def apply(self, state: SUT, ref_state: S, transition: T) -> SUT:
        """Apply ``transition`` to the SUT and assert post-conditions."""
        ...

    def check_invariants(self, state: SUT, ref_state: S) -> None:  # noqa: ARG002
        """Assert invariants after every transition (and once after init)."""
        return None

    def teardown(self, state: SUT, ref_state: S) -> None:  # noqa: ARG002
        """Release SUT resources at the end of a test case."""
        return None

