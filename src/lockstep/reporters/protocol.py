"""Reporter protocol - Interface for rendering minimal failing cases."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from lockstep.core.result import FailureReport


@runtime_checkable
class Reporter(Protocol):
    """Protocol for rendering failure reports.

    The runner hands every minimal failing case to each registered reporter.
    Storing or forwarding the result is up to the reporter.

    Example::

        class ListReporter:
            def __init__(self):
                self.reports = []

            def report(self, report: FailureReport) -> str:
                self.reports.append(report)
                return report.summary()

        run_state_machine_test(model, sut, reporters=[ListReporter()])

    Built-in reporters:
    - ConsoleReporter: Terminal output via rich
    - JSONReporter: Machine-readable JSON
    """

    def report(self, report: FailureReport) -> str:
        """Render the failure report.

        Args:
            report: The minimal failing case.

        Returns:
            The rendered report.
        """
        ...


__all__ = ["Reporter"]
