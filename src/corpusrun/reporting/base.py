"""Reporter hooks for the batch lifecycle."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from corpusrun.core.models import TestCase
from corpusrun.core.results import BatchResult, CaseResult

if TYPE_CHECKING:
    from corpusrun.plan.models import HarnessPlan


class Reporter:
    """Receives batch events; every hook is optional.

    ``batch_finished`` only fires for a batch that ran to completion. An
    interrupted batch never gets a summary.
    """

    def batch_started(self, cases: Sequence[TestCase], plan: "HarnessPlan") -> None:
        pass

    def case_finished(self, result: CaseResult, index: int, total: int) -> None:
        pass

    def batch_finished(self, batch: BatchResult) -> None:
        pass


class ReporterGroup:
    """Fans batch events out to several reporters.

    The group is itself the driver's ``on_result`` callback.
    """

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        if not reporters:
            raise ValueError("at least one reporter is required")
        self._reporters = tuple(reporters)

    def __call__(self, result: CaseResult, index: int, total: int) -> None:
        for reporter in self._reporters:
            reporter.case_finished(result, index, total)

    def batch_started(self, cases: Sequence[TestCase], plan: "HarnessPlan") -> None:
        for reporter in self._reporters:
            reporter.batch_started(cases, plan)

    def batch_finished(self, batch: BatchResult) -> None:
        for reporter in self._reporters:
            reporter.batch_finished(batch)
