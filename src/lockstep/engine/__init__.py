"""Engine module - generation, replay and shrinking."""

from lockstep.engine.controller import ShrinkController
from lockstep.engine.executor import TestExecutor
from lockstep.engine.generator import SequenceGenerator, SequentialStrategy
from lockstep.engine.runner import StateMachineRunner, run_state_machine_test
from lockstep.engine.shrinkable import Edit, Phase, SequentialValueTree, ShrinkCursor

__all__ = [
    "SequenceGenerator",
    "SequentialStrategy",
    "SequentialValueTree",
    "ShrinkCursor",
    "Phase",
    "Edit",
    "TestExecutor",
    "ShrinkController",
    "StateMachineRunner",
    "run_state_machine_test",
]
