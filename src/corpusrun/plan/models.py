"""Data models for harness plans and command line overrides."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

from corpusrun.core.classifier import DEFAULT_CLASSIFIER
from corpusrun.core.discovery import DEFAULT_EXTENSION
from corpusrun.core.models import OutcomeKind
from corpusrun.core.runner import DEFAULT_FLAGS, DEFAULT_TIMEOUT_S


@dataclass(frozen=True)
class CommandConfig:
    argv: Sequence[str]


@dataclass(frozen=True)
class CorpusConfig:
    root: Optional[Path] = None
    extension: str = DEFAULT_EXTENSION
    files: Sequence[Path] = field(default_factory=tuple)


@dataclass(frozen=True)
class HarnessPlan:
    command: Optional[CommandConfig]
    flags: Sequence[str] = DEFAULT_FLAGS
    timeout: float = DEFAULT_TIMEOUT_S
    workdir: Optional[Path] = None
    env: Mapping[str, str] = field(default_factory=dict)
    classifier: str = DEFAULT_CLASSIFIER
    exit_codes: Mapping[int, OutcomeKind] = field(default_factory=dict)
    markers: Mapping[OutcomeKind, Sequence[str]] = field(default_factory=dict)
    corpus: CorpusConfig = field(default_factory=CorpusConfig)
    plan_dir: Path = field(default_factory=Path.cwd)


@dataclass(frozen=True)
class PlanOptions:
    command: Optional[str] = None
    corpus_root: Optional[str] = None
    extension: Optional[str] = None
    files: Sequence[str] = field(default_factory=tuple)
    flags: Sequence[str] = field(default_factory=tuple)
    timeout: Optional[float] = None
    classifier: Optional[str] = None
    cases: Sequence[str] = field(default_factory=tuple)
    list_only: bool = False
