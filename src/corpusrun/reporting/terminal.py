"""Terminal reporter rendering per-test lines and the final tally."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING, Sequence

import click
from colorama import Fore, Style, just_fix_windows_console

from corpusrun.core.models import OutcomeKind, TestCase
from corpusrun.core.results import BatchResult, CaseResult

from .base import Reporter

if TYPE_CHECKING:
    from corpusrun.plan.models import HarnessPlan


STATUS_LABELS = {
    OutcomeKind.PASSED: "PASS",
    OutcomeKind.FAILED: "FAIL",
    OutcomeKind.TIMED_OUT: "TIMEOUT",
    OutcomeKind.UNKNOWN: "UNKNOWN",
    OutcomeKind.MISSING_INPUT: "MISSING",
}

STATUS_COLORS = {
    OutcomeKind.PASSED: Fore.GREEN,
    OutcomeKind.FAILED: Fore.RED,
    OutcomeKind.TIMED_OUT: Fore.YELLOW,
    OutcomeKind.UNKNOWN: Fore.YELLOW,
    OutcomeKind.MISSING_INPUT: Fore.RED,
}


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color
        self._start_time = 0.0
        self._failures: list[tuple[int, CaseResult]] = []
        if use_color:
            just_fix_windows_console()

    def batch_started(self, cases: Sequence[TestCase], plan: "HarnessPlan") -> None:
        self._start_time = time.perf_counter()
        self._failures.clear()
        command = " ".join(plan.command.argv) if plan.command else "?"
        click.echo(
            self._paint(
                f"Starting run: {len(cases)} case(s) command='{command}' "
                f"classifier={plan.classifier} timeout={plan.timeout:g}s",
                Fore.CYAN,
            )
        )

    def case_finished(self, result: CaseResult, index: int, total: int) -> None:
        label = self._paint(f"{STATUS_LABELS[result.outcome]:<8}", STATUS_COLORS[result.outcome])
        ms = result.duration_s * 1000
        click.echo(f"[{index}/{total}] {label} {result.case.name} ({ms:.0f} ms)")
        if not result.passed:
            self._failures.append((index, result))
            self._print_details(result)

    def batch_finished(self, batch: BatchResult) -> None:
        duration = time.perf_counter() - self._start_time
        summary = batch.tally.summary()
        counts = " ".join(f"{kind.value}={summary.count(kind)}" for kind in OutcomeKind)
        color = Fore.GREEN if batch.clean else Fore.RED
        click.echo(self._paint(f"Summary: total={summary.total} {counts} duration={duration:.2f}s", color))
        if self._failures:
            click.echo(self._paint("Not passed:", Fore.RED))
            for index, result in self._failures:
                status = "" if result.exit_status is None else f" (exit {result.exit_status})"
                click.echo(f"  [{index}] {result.case.name} -> {result.outcome.value}{status}")
        if batch.clean:
            click.echo(self._paint("All cases passed.", Fore.GREEN))
        else:
            click.echo(self._paint("Some cases did not pass.", Fore.RED))

    def _paint(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"

    def _print_details(self, result: CaseResult, *, indent: str = "    ") -> None:
        if result.outcome is OutcomeKind.MISSING_INPUT:
            click.echo(f"{indent}path: {result.case.path}")
        for line in result.details.splitlines():
            click.echo(f"{indent}detail: {line}")
