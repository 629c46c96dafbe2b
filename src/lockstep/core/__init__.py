"""Core data objects for lockstep.

This module contains the fundamental data structures:
- Strategy, ValueTree: Generated values that can shrink
- ReferenceStateMachine, StateMachineTest: Model and SUT interfaces
- Candidate: An initial state plus a transition sequence
- Outcome, ShrinkResult, FailureReport, RunResult: Results
"""

from lockstep.core.candidate import Candidate, first_invalid_index, is_valid_sequence
from lockstep.core.model import (
    ReferenceModel,
    ReferenceStateMachine,
    StateMachineTest,
    SystemAdapter,
)
from lockstep.core.result import (
    INITIAL_STATE_INDEX,
    FailureReport,
    Outcome,
    RunResult,
    ShrinkResult,
)
from lockstep.core.value_tree import Strategy, ValueTree

__all__ = [
    "Strategy",
    "ValueTree",
    "ReferenceModel",
    "ReferenceStateMachine",
    "SystemAdapter",
    "StateMachineTest",
    "Candidate",
    "first_invalid_index",
    "is_valid_sequence",
    "Outcome",
    "ShrinkResult",
    "FailureReport",
    "RunResult",
    "INITIAL_STATE_INDEX",
]
