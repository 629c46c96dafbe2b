"""Console reporter for terminal output."""

from __future__ import annotations

from itertools import groupby
from typing import TextIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from lockstep.core.result import FailureReport, RunResult


class ConsoleReporter:
    """Renders failure reports in the terminal.

    Features:
    - Collapsible repeated transitions (e.g., "Increment ×11")
    - The failing transition highlighted in place
    - Optional traceback of the failure cause
    """

    def __init__(
        self,
        file: TextIO | None = None,
        color: bool = True,
        show_traceback: bool = False,
    ) -> None:
        self.console = Console(file=file, no_color=not color, highlight=False, record=True)
        self.show_traceback = show_traceback

    @staticmethod
    def _collapse(labels: list[str]) -> list[tuple[str, int]]:
        """Collapse repeated consecutive labels.

        Example: ['a', 'b', 'b', 'b', 'c'] -> [('a', 1), ('b', 3), ('c', 1)]
        """
        return [(label, len(list(group))) for label, group in groupby(labels)]

    def _transition_lines(self, report: FailureReport) -> list[str]:
        lines = []
        failing = report.index
        ix = 0
        for label, count in self._collapse([repr(t) for t in report.transitions]):
            end = ix + count - 1
            text = escape(label) if count == 1 else f"{escape(label)} ×{count}"
            span = f"{ix}" if count == 1 else f"{ix}..{end}"
            if ix <= failing <= end:
                where = "" if count == 1 else f" (#{failing - ix + 1})"
                lines.append(f"  [red]✗ {span}  {text}[/red]  [dim]failed here{where}[/dim]")
            else:
                lines.append(f"  [green]✓[/green] {span}  {text}")
            ix = end + 1
        return lines

    def report(self, report: FailureReport) -> str:
        """Print the failure report and return it as plain text."""
        cause = report.cause
        lines = [
            f"[bold]{escape(type(cause).__name__)}[/bold]: {escape(str(cause))}",
            f"[dim]at {report.location}[/dim]",
            "",
            f"Initial state: {escape(repr(report.initial_state))}",
            f"Transitions ({len(report.transitions)}):",
            *self._transition_lines(report),
            "",
            f"[dim]seed={report.seed} case={report.case} "
            f"shrunk from {report.original_length} transition(s) "
            f"in {report.shrink_iterations} step(s)[/dim]",
        ]
        if report.timed_out:
            lines.append("[yellow]Shrink budget exhausted; this may not be minimal.[/yellow]")
        if self.show_traceback:
            lines += ["", escape(report.cause_traceback.rstrip())]

        self.console.print(
            Panel(
                "\n".join(lines),
                title="[red]MINIMAL FAILING CASE[/red]",
                border_style="red",
            )
        )
        return self.console.export_text(clear=True)

    def report_run(self, result: RunResult) -> str:
        """Print a one-line summary of a passing run."""
        self.console.print(
            f"[green]✓[/green] {result.cases} case(s), {result.transitions} transition(s) "
            f"passed [dim](seed={result.seed}, {result.duration_ms:.0f} ms)[/dim]"
        )
        return self.console.export_text(clear=True)
