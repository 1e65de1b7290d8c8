"""JSON reporter emitting structured batch results."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

import click
from jsonschema import validate

from corpusrun.core.models import OutcomeKind, TestCase
from corpusrun.core.results import BatchResult, CaseResult

from .base import Reporter
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION

if TYPE_CHECKING:
    from corpusrun.plan.models import HarnessPlan


class JsonReporter(Reporter):
    """Writes results to a JSON file (or stdout) validated against the schema."""

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = pathlib.Path(path) if path else None
        self._records: list[Dict[str, Any]] = []
        self._plan: HarnessPlan | None = None
        self._start_time = 0.0

    def batch_started(self, cases: Sequence[TestCase], plan: "HarnessPlan") -> None:
        self._plan = plan
        self._records.clear()
        self._start_time = time.perf_counter()

    def case_finished(self, result: CaseResult, index: int, total: int) -> None:
        self._records.append(_case_to_dict(result))

    def batch_finished(self, batch: BatchResult) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "summary": _build_summary(self._plan, batch, time.perf_counter() - self._start_time),
            "cases": self._records,
        }
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        if self._path is None:
            click.echo(text)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem protection
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc
        click.echo(f"JSON report written to {self._path}", err=True)


def _build_summary(plan: Optional["HarnessPlan"], batch: BatchResult, duration: float) -> Dict[str, Any]:
    summary = batch.tally.summary()
    record: Dict[str, Any] = {"total": summary.total}
    for kind in OutcomeKind:
        record[kind.value] = summary.count(kind)
    record["clean"] = batch.clean
    record["duration_s"] = duration
    if plan is not None:
        record["command"] = " ".join(plan.command.argv) if plan.command else None
        record["classifier"] = plan.classifier
        record["timeout_s"] = plan.timeout
    return record


def _case_to_dict(result: CaseResult) -> Dict[str, Any]:
    return {
        "name": result.case.name,
        "path": str(result.case.path),
        "outcome": result.outcome.value,
        "exit_status": result.exit_status,
        "duration_ms": result.duration_s * 1000,
        "details": result.details,
    }
