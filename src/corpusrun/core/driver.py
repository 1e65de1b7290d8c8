"""Batch driver: runs the corpus in order and folds outcomes into a tally."""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from corpusrun.utils.logging import get_logger

from .classifier import Classifier
from .interrupts import CancelToken
from .models import InvocationResult, OutcomeKind, TestCase
from .results import BatchResult, CaseResult
from .runner import InvocationRunner

log = get_logger(__name__)

DETAIL_LINES = 3

ResultCallback = Callable[[CaseResult, int, int], None]


class BatchDriver:
    """Executes a collection of test cases sequentially.

    Per-test outcomes never raise. ``LaunchError`` and ``BatchInterrupted``
    propagate to the caller.
    """

    def __init__(
        self,
        runner: InvocationRunner,
        classifier: Classifier,
        *,
        token: Optional[CancelToken] = None,
    ) -> None:
        self._runner = runner
        self._classifier = classifier
        self._token = token or runner.token

    def run(
        self,
        cases: Sequence[TestCase],
        *,
        on_result: Optional[ResultCallback] = None,
    ) -> BatchResult:
        batch = BatchResult()
        total = len(cases)
        for index, case in enumerate(cases, start=1):
            self._token.raise_if_cancelled()
            result = self._execute_case(case)
            batch.tally.record(result.outcome)
            batch.results.append(result)
            if on_result:
                on_result(result, index, total)
        self._token.raise_if_cancelled()
        return batch

    def _execute_case(self, case: TestCase) -> CaseResult:
        if not case.exists():
            log.debug("Input missing for %s: %s", case.name, case.path)
            return CaseResult(
                case=case,
                outcome=OutcomeKind.MISSING_INPUT,
                details=f"input not found: {case.path}",
            )
        invocation = self._runner.run(case)
        outcome = self._classifier.classify(invocation)
        return CaseResult(
            case=case,
            outcome=outcome,
            duration_s=invocation.duration_s,
            exit_status=invocation.exit_status,
            details=_describe(invocation, outcome, self._runner.timeout),
        )


def _describe(invocation: InvocationResult, outcome: OutcomeKind, timeout: float) -> str:
    if invocation.timed_out:
        return f"no exit within {timeout:g}s"
    if outcome is OutcomeKind.PASSED:
        return ""
    return "\n".join(invocation.tail(DETAIL_LINES))
