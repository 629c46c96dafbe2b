"""JSON reporter for machine-readable failure reports."""

from __future__ import annotations

import json
from typing import TextIO

from lockstep.core.result import FailureReport


class JSONReporter:
    """Renders failure reports as JSON.

    States and transitions are written as their ``repr``; the engine does not
    know how to serialise model types. Each report is written to ``file``
    (one document per line when ``indent`` is None) if one is given.
    """

    def __init__(self, file: TextIO | None = None, indent: int | None = 2) -> None:
        self.file = file
        self.indent = indent

    def report(self, report: FailureReport) -> str:
        output = json.dumps(report.to_dict(), indent=self.indent)
        if self.file is not None:
            self.file.write(output + "\n")
        return output
