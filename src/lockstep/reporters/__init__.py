"""Reporters for minimal failing cases."""

from lockstep.reporters.console import ConsoleReporter
from lockstep.reporters.json import JSONReporter
from lockstep.reporters.protocol import Reporter

__all__ = [
    "Reporter",
    "ConsoleReporter",
    "JSONReporter",
]
