from __future__ import annotations

import json
from pathlib import Path

import pytest
from colorama import Fore, Style
from jsonschema import ValidationError

from corpusrun.core.models import OutcomeKind, TestCase
from corpusrun.core.results import BatchResult, CaseResult
from corpusrun.plan import CommandConfig, HarnessPlan
from corpusrun.reporting import JsonReporter, Reporter, ReporterGroup, TerminalReporter


def _plan() -> HarnessPlan:
    return HarnessPlan(command=CommandConfig(argv=("emu",)), timeout=60)


def _batch(*results: CaseResult) -> BatchResult:
    batch = BatchResult()
    for result in results:
        batch.tally.record(result.outcome)
        batch.results.append(result)
    return batch


def _results() -> list[CaseResult]:
    return [
        CaseResult(case=TestCase.from_path("roms/cpu_instrs.gb"), outcome=OutcomeKind.PASSED, duration_s=0.25, exit_status=0),
        CaseResult(
            case=TestCase.from_path("roms/mem_timing.gb"),
            outcome=OutcomeKind.UNKNOWN,
            duration_s=0.5,
            exit_status=2,
            details="Serial: 01 02\nstuck at $C000",
        ),
        CaseResult(
            case=TestCase.from_path("roms/halt_bug.gb"),
            outcome=OutcomeKind.MISSING_INPUT,
            details="input not found: roms/halt_bug.gb",
        ),
    ]


def test_terminal_reporter_renders_lines_and_summary(capsys) -> None:
    results = _results()
    cases = [result.case for result in results]
    reporter = TerminalReporter(use_color=False)
    reporter.batch_started(cases, _plan())
    for index, result in enumerate(results, start=1):
        reporter.case_finished(result, index, len(results))
    reporter.batch_finished(_batch(*results))
    output = capsys.readouterr().out
    assert "Starting run: 3 case(s) command='emu' classifier=exit-code timeout=60s" in output
    assert "[1/3] PASS     cpu_instrs (250 ms)" in output
    assert "[2/3] UNKNOWN  mem_timing (500 ms)" in output
    assert "    detail: stuck at $C000" in output
    assert "    path: roms/halt_bug.gb" in output
    assert "total=3 passed=1 failed=0 timed_out=0 unknown=1 missing_input=1" in output
    assert "  [2] mem_timing -> unknown (exit 2)" in output
    assert "  [3] halt_bug -> missing_input" in output
    assert "Some cases did not pass." in output
    assert "\x1b[" not in output


def test_terminal_reporter_colors_when_enabled(capsys) -> None:
    result = _results()[0]
    reporter = TerminalReporter(use_color=True)
    reporter.batch_started([result.case], _plan())
    reporter.case_finished(result, 1, 1)
    reporter.batch_finished(_batch(result))
    assert "All cases passed." in capsys.readouterr().out
    assert reporter._paint("PASS", Fore.GREEN) == f"{Fore.GREEN}PASS{Style.RESET_ALL}"
    assert TerminalReporter(use_color=False)._paint("PASS", Fore.GREEN) == "PASS"


def test_json_reporter_writes_validated_file(tmp_path: Path) -> None:
    results = _results()
    path = tmp_path / "reports" / "run.json"
    manager = ReporterGroup([JsonReporter(path=str(path))])
    manager.batch_started([result.case for result in results], _plan())
    for index, result in enumerate(results, start=1):
        manager(result, index, len(results))
    manager.batch_finished(_batch(*results))
    payload = json.loads(path.read_text(encoding="utf-8"))
    summary = payload["summary"]
    assert summary["total"] == 3
    assert summary["passed"] == 1
    assert summary["unknown"] == 1
    assert summary["missing_input"] == 1
    assert summary["clean"] is False
    assert summary["command"] == "emu"
    assert [case["outcome"] for case in payload["cases"]] == ["passed", "unknown", "missing_input"]
    assert payload["cases"][2]["exit_status"] is None
    assert payload["generated_at"].endswith("Z")


def test_json_reporter_prints_without_path(capsys) -> None:
    reporter = JsonReporter()
    reporter.batch_started([], _plan())
    reporter.batch_finished(BatchResult())
    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"]["total"] == 0
    assert payload["summary"]["clean"] is True


def test_json_reporter_rejects_invalid_records(tmp_path: Path) -> None:
    reporter = JsonReporter(path=str(tmp_path / "r.json"))
    reporter.batch_started([], _plan())
    result = _results()[0]
    reporter.case_finished(result, 1, 1)
    reporter._records[0]["outcome"] = "flaky"
    with pytest.raises(ValidationError):
        reporter.batch_finished(_batch(result))


def test_reporter_group_requires_a_reporter() -> None:
    with pytest.raises(ValueError):
        ReporterGroup([])


def test_reporter_group_forwards_case_events_to_partial_reporters() -> None:
    class CaseCounter(Reporter):
        def __init__(self) -> None:
            self.seen: list[tuple[str, int, int]] = []

        def case_finished(self, result: CaseResult, index: int, total: int) -> None:
            self.seen.append((result.case.name, index, total))

    counter = CaseCounter()
    group = ReporterGroup([counter])
    results = _results()
    group.batch_started([result.case for result in results], _plan())
    for index, result in enumerate(results, start=1):
        group(result, index, len(results))
    group.batch_finished(_batch(*results))
    assert counter.seen == [("cpu_instrs", 1, 3), ("mem_timing", 2, 3), ("halt_bug", 3, 3)]
