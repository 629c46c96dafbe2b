"""lockstep - sequential state machine testing against a reference model.

Generate random transition sequences from a reference model, replay them
against the system under test in lock-step, and shrink the first failure to
a minimal counterexample.

Example:
    from lockstep import ReferenceStateMachine, StateMachineTest, run_state_machine_test
    from lockstep import strategies as st
"""

from lockstep.config import RunConfig, load_config
from lockstep.core import strategies
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
from lockstep.engine import (
    Phase,
    SequenceGenerator,
    SequentialStrategy,
    SequentialValueTree,
    ShrinkController,
    ShrinkCursor,
    StateMachineRunner,
    TestExecutor,
    run_state_machine_test,
)
from lockstep.errors import (
    ConfigValidationError,
    GenerationExhausted,
    LockstepError,
    PreconditionViolation,
    ShrinkTimeout,
    TestFailure,
    TooManyRejects,
)
from lockstep.reporters import ConsoleReporter, JSONReporter, Reporter

__version__ = "0.1.0"

__all__ = [
    # Core
    "Strategy",
    "ValueTree",
    "strategies",
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
    # Engine
    "SequenceGenerator",
    "SequentialStrategy",
    "SequentialValueTree",
    "ShrinkCursor",
    "Phase",
    "TestExecutor",
    "ShrinkController",
    "StateMachineRunner",
    "run_state_machine_test",
    # Config
    "RunConfig",
    "load_config",
    # Errors
    "LockstepError",
    "ConfigValidationError",
    "GenerationExhausted",
    "PreconditionViolation",
    "TestFailure",
    "ShrinkTimeout",
    "TooManyRejects",
    # Reporters
    "Reporter",
    "ConsoleReporter",
    "JSONReporter",
]
