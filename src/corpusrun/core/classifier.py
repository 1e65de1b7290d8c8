"""Outcome classification strategies and their registry."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

from .models import TIMEOUT_EXIT_STATUS, InvocationResult, OutcomeKind


@dataclass(frozen=True)
class MarkerRule:
    """A case-sensitive substring that maps captured output to an outcome."""

    marker: str
    outcome: OutcomeKind


DEFAULT_EXIT_CODES: Mapping[int, OutcomeKind] = {
    0: OutcomeKind.PASSED,
    1: OutcomeKind.FAILED,
    TIMEOUT_EXIT_STATUS: OutcomeKind.TIMED_OUT,
}

DEFAULT_MARKERS: Mapping[OutcomeKind, Tuple[str, ...]] = {
    OutcomeKind.TIMED_OUT: ("Teste deu timeout", "Timeout", "timeout", "⏱️"),
    OutcomeKind.PASSED: ("Teste passou",),
    OutcomeKind.FAILED: ("Teste falhou", "Failed"),
}

# Earlier kinds win when several markers are present.
MARKER_PRIORITY: Tuple[OutcomeKind, ...] = (
    OutcomeKind.TIMED_OUT,
    OutcomeKind.PASSED,
    OutcomeKind.FAILED,
)


def build_marker_rules(markers: Optional[Mapping[OutcomeKind, Sequence[str]]] = None) -> Tuple[MarkerRule, ...]:
    """Flatten per-kind marker lists into one priority-ordered rule table.

    Kinds missing from ``markers`` keep their default markers.
    """

    merged: Dict[OutcomeKind, Tuple[str, ...]] = dict(DEFAULT_MARKERS)
    for kind, values in (markers or {}).items():
        if kind not in MARKER_PRIORITY:
            raise ValueError(f"Markers cannot map to outcome '{kind.value}'")
        merged[kind] = tuple(str(value) for value in values)
    rules: list[MarkerRule] = []
    for kind in MARKER_PRIORITY:
        for marker in merged.get(kind, ()):
            if marker:
                rules.append(MarkerRule(marker=marker, outcome=kind))
    return tuple(rules)


class Classifier:
    """Base interface: a pure mapping from InvocationResult to OutcomeKind."""

    name: str = ""
    needs_output: bool = False

    def classify(self, result: InvocationResult) -> OutcomeKind:
        if result.timed_out:
            return OutcomeKind.TIMED_OUT
        return self._classify(result)

    def _classify(self, result: InvocationResult) -> OutcomeKind:  # pragma: no cover - interface
        raise NotImplementedError


class ExitCodeClassifier(Classifier):
    """Looks only at the numeric exit status."""

    name = "exit-code"

    def __init__(self, table: Optional[Mapping[int, OutcomeKind]] = None) -> None:
        merged = dict(DEFAULT_EXIT_CODES)
        merged.update(table or {})
        self._table = merged

    def _classify(self, result: InvocationResult) -> OutcomeKind:
        if result.exit_status is None:
            return OutcomeKind.UNKNOWN
        return self._table.get(result.exit_status, OutcomeKind.UNKNOWN)


class TextPatternClassifier(Classifier):
    """Searches captured output for recognized markers, in rule order."""

    name = "text"
    needs_output = True

    def __init__(self, rules: Optional[Sequence[MarkerRule]] = None) -> None:
        self._rules = tuple(rules) if rules is not None else build_marker_rules()

    def _classify(self, result: InvocationResult) -> OutcomeKind:
        text = result.output or ""
        for rule in self._rules:
            if rule.marker in text:
                return rule.outcome
        return OutcomeKind.UNKNOWN


class FallbackClassifier(Classifier):
    """Exit status first; captured text decides only when the status is ambiguous."""

    name = "fallback"
    needs_output = True

    def __init__(
        self,
        primary: Optional[ExitCodeClassifier] = None,
        secondary: Optional[TextPatternClassifier] = None,
    ) -> None:
        self._primary = primary or ExitCodeClassifier()
        self._secondary = secondary or TextPatternClassifier()

    def _classify(self, result: InvocationResult) -> OutcomeKind:
        outcome = self._primary.classify(result)
        if outcome is OutcomeKind.UNKNOWN and result.output is not None:
            return self._secondary.classify(result)
        return outcome


ClassifierFactory = Callable[..., Classifier]


def _exit_code_factory(*, exit_codes=None, markers=None) -> Classifier:
    return ExitCodeClassifier(exit_codes)


def _text_factory(*, exit_codes=None, markers=None) -> Classifier:
    return TextPatternClassifier(build_marker_rules(markers))


def _fallback_factory(*, exit_codes=None, markers=None) -> Classifier:
    return FallbackClassifier(
        ExitCodeClassifier(exit_codes),
        TextPatternClassifier(build_marker_rules(markers)),
    )


_REGISTRY: Dict[str, ClassifierFactory] = {
    "exit-code": _exit_code_factory,
    "text": _text_factory,
    "fallback": _fallback_factory,
}

DEFAULT_CLASSIFIER = "exit-code"


def register_classifier(name: str, factory: ClassifierFactory) -> None:
    """Make a classifier strategy selectable by name (used by plugins)."""

    key = name.strip().lower()
    if not key:
        raise ValueError("Classifier name cannot be empty")
    if key in _REGISTRY:
        raise ValueError(f"Classifier '{key}' already registered")
    _REGISTRY[key] = factory


def available_classifiers() -> Tuple[str, ...]:
    return tuple(sorted(_REGISTRY))


def build_classifier(
    name: str = DEFAULT_CLASSIFIER,
    *,
    exit_codes: Optional[Mapping[int, OutcomeKind]] = None,
    markers: Optional[Mapping[OutcomeKind, Sequence[str]]] = None,
) -> Classifier:
    key = (name or DEFAULT_CLASSIFIER).strip().lower()
    factory = _REGISTRY.get(key)
    if factory is None:
        supported = ", ".join(available_classifiers())
        raise ValueError(f"Unknown classifier '{name}'. Supported: {supported}")
    return factory(exit_codes=exit_codes, markers=markers)
