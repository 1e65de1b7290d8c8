"""Executor wiring a harness plan to discovery, the batch driver and reporters."""
from __future__ import annotations

import fnmatch
from typing import List, Optional, Sequence

import click

from corpusrun.core.classifier import build_classifier
from corpusrun.core.discovery import cases_from_paths, discover_cases
from corpusrun.core.driver import BatchDriver
from corpusrun.core.interrupts import CancelToken, InterruptHandler
from corpusrun.core.models import TestCase
from corpusrun.core.runner import InvocationRunner
from corpusrun.reporting import JsonReporter, Reporter, ReporterGroup, TerminalReporter
from corpusrun.utils.logging import get_logger

from .loader import apply_options
from .models import HarnessPlan, PlanOptions

log = get_logger(__name__)


def run_plan(
    plan: HarnessPlan,
    options: Optional[PlanOptions] = None,
    *,
    report_format: str = "terminal",
    report_path: str | None = None,
    use_color: bool = True,
    token: Optional[CancelToken] = None,
    install_signal_handlers: bool = True,
) -> int:
    """Execute the plan; returns the process exit code (0 clean, 1 otherwise).

    Raises ``LaunchError`` when the program cannot be spawned and
    ``BatchInterrupted`` when a termination signal stops the batch.
    """

    options = options or PlanOptions()
    plan = apply_options(plan, options)
    cases = resolve_cases(plan, options)
    if options.list_only:
        for case in cases:
            click.echo(f"{case.name}\t{case.path}")
        return 0
    if plan.command is None:
        raise ValueError("No command configured: set 'command' in the plan or pass --command")

    classifier = build_classifier(plan.classifier, exit_codes=plan.exit_codes, markers=plan.markers)
    token = token or CancelToken()
    runner = InvocationRunner(
        plan.command.argv,
        flags=plan.flags,
        timeout=plan.timeout,
        capture_output=classifier.needs_output,
        workdir=plan.workdir,
        env=plan.env,
        token=token,
    )
    driver = BatchDriver(runner, classifier, token=token)
    reports = ReporterGroup(_build_reporters(report_format, report_path, use_color))
    log.info(
        "Running %d case(s) with classifier=%s timeout=%gs",
        len(cases),
        classifier.name or plan.classifier,
        plan.timeout,
    )

    reports.batch_started(cases, plan)
    if install_signal_handlers:
        with InterruptHandler(token):
            batch = driver.run(cases, on_result=reports)
    else:
        batch = driver.run(cases, on_result=reports)
    reports.batch_finished(batch)
    return batch.exit_code


def resolve_cases(plan: HarnessPlan, options: PlanOptions) -> List[TestCase]:
    """Discovered cases first, then explicit files, filtered by name globs."""

    cases: List[TestCase] = []
    if plan.corpus.root is not None:
        cases.extend(discover_cases(plan.corpus.root, plan.corpus.extension))
    cases.extend(cases_from_paths(plan.corpus.files))
    if options.cases:
        cases = [
            case
            for case in cases
            if any(fnmatch.fnmatchcase(case.name, pattern) for pattern in options.cases)
        ]
    return cases


def _build_reporters(report_format: str, report_path: str | None, use_color: bool) -> Sequence[Reporter]:
    if report_format == "json":
        return (JsonReporter(path=report_path),)
    if report_format == "terminal":
        reporters: List[Reporter] = [TerminalReporter(use_color=use_color)]
        if report_path:
            reporters.append(JsonReporter(path=report_path))
        return reporters
    raise ValueError(f"Unknown report format '{report_format}'")
