"""YAML loader and validation for harness plans."""
from __future__ import annotations

import dataclasses
import shlex
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml
from jsonschema import Draft7Validator

from corpusrun.core.classifier import MARKER_PRIORITY
from corpusrun.core.discovery import normalize_extension
from corpusrun.core.models import OutcomeKind

from .models import CommandConfig, CorpusConfig, HarnessPlan, PlanOptions

_COMMAND_SCHEMA = {
    "oneOf": [
        {"type": "string", "minLength": 1},
        {"type": "array", "minItems": 1, "items": {"type": "string"}},
        {
            "type": "object",
            "properties": {
                "binary": {"type": "string", "minLength": 1},
                "executable": {"type": "string", "minLength": 1},
                "args": {"type": ["string", "array"]},
            },
        },
    ]
}

PLAN_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "command": _COMMAND_SCHEMA,
        "flags": {"type": "array", "items": {"type": "string"}},
        "timeout": {"type": "number", "exclusiveMinimum": 0},
        "workdir": {"type": "string"},
        "env": {"type": "object", "additionalProperties": {"type": ["string", "number", "boolean"]}},
        "classifier": {"type": "string", "minLength": 1},
        "exit_codes": {
            "type": "object",
            "propertyNames": {"pattern": "^-?[0-9]+$"},
            "additionalProperties": {"type": "string"},
        },
        "markers": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                kind.value: {"type": "array", "items": {"type": "string", "minLength": 1}}
                for kind in MARKER_PRIORITY
            },
        },
        "corpus": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "root": {"type": "string"},
                "extension": {"type": "string", "minLength": 1},
                "files": {"type": "array", "items": {"type": "string"}},
            },
        },
    },
}
_validator = Draft7Validator(PLAN_SCHEMA)


def load_plan(path: str) -> HarnessPlan:
    """Load and validate a plan file."""
    plan_path = Path(path).expanduser().resolve()
    raw = yaml.safe_load(plan_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, Mapping):
        raise ValueError("Plan file must contain a mapping at the top level")
    return build_plan(raw, plan_path.parent)


def build_plan(raw: Mapping[str, Any], base: Path) -> HarnessPlan:
    """Validate ``raw`` and resolve relative paths against ``base``."""
    errors = sorted(_validator.iter_errors(raw), key=lambda e: [str(part) for part in e.path])
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise ValueError(f"Plan schema validation failed: {messages}")
    command = CommandConfig(argv=_normalize_command(raw["command"])) if "command" in raw else None
    workdir_raw = raw.get("workdir")
    defaults = HarnessPlan(command=None)
    return HarnessPlan(
        command=command,
        flags=tuple(raw.get("flags", defaults.flags)),
        timeout=float(raw.get("timeout", defaults.timeout)),
        workdir=_resolve_path(workdir_raw, base) if workdir_raw else None,
        env={str(k): str(v) for k, v in (raw.get("env") or {}).items()},
        classifier=str(raw.get("classifier", defaults.classifier)),
        exit_codes=_parse_exit_codes(raw.get("exit_codes")),
        markers=_parse_markers(raw.get("markers")),
        corpus=_parse_corpus(raw.get("corpus"), base),
        plan_dir=base,
    )


def apply_options(plan: HarnessPlan, options: PlanOptions) -> HarnessPlan:
    """Return ``plan`` with command line overrides applied; CLI paths are cwd-relative."""
    changes: Dict[str, Any] = {}
    if options.command:
        changes["command"] = CommandConfig(argv=_normalize_command(options.command))
    if options.flags:
        changes["flags"] = tuple(options.flags)
    if options.timeout is not None:
        if options.timeout <= 0:
            raise ValueError("timeout must be positive")
        changes["timeout"] = float(options.timeout)
    if options.classifier:
        changes["classifier"] = options.classifier
    corpus = plan.corpus
    if options.corpus_root:
        corpus = dataclasses.replace(corpus, root=Path(options.corpus_root).expanduser().resolve())
    if options.extension:
        corpus = dataclasses.replace(corpus, extension=normalize_extension(options.extension))
    if options.files:
        corpus = dataclasses.replace(
            corpus, files=tuple(Path(item).expanduser().resolve() for item in options.files)
        )
    if corpus is not plan.corpus:
        changes["corpus"] = corpus
    return dataclasses.replace(plan, **changes) if changes else plan


def _resolve_path(value: str, base: Path) -> Path:
    p = Path(value).expanduser()
    if not p.is_absolute():
        p = base / p
    return p.resolve()


def _normalize_command(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, (str, Path)):
        argv = tuple(shlex.split(str(raw)))
    elif isinstance(raw, Mapping):
        executable = raw.get("binary") or raw.get("executable")
        if not executable:
            raise ValueError("command mapping requires 'binary' or 'executable'")
        args = raw.get("args", [])
        args_list = shlex.split(args) if isinstance(args, str) else [str(part) for part in args]
        argv = tuple([str(executable)] + args_list)
    elif isinstance(raw, (list, tuple)):
        argv = tuple(str(part) for part in raw)
    else:
        raise ValueError("command must be string, list, or mapping")
    if not argv:
        raise ValueError("command cannot be empty")
    return argv


def _parse_exit_codes(raw: Optional[Mapping[str, str]]) -> Dict[int, OutcomeKind]:
    table: Dict[int, OutcomeKind] = {}
    for key, value in (raw or {}).items():
        outcome = OutcomeKind.parse(value)
        if outcome is OutcomeKind.MISSING_INPUT:
            raise ValueError("exit_codes cannot map to missing_input")
        table[int(key)] = outcome
    return table


def _parse_markers(raw: Optional[Mapping[str, Sequence[str]]]) -> Dict[OutcomeKind, tuple[str, ...]]:
    return {OutcomeKind.parse(key): tuple(values) for key, values in (raw or {}).items()}


def _parse_corpus(raw: Optional[Mapping[str, Any]], base: Path) -> CorpusConfig:
    if not raw:
        return CorpusConfig()
    root = raw.get("root")
    extension = raw.get("extension")
    files = tuple(_resolve_path(item, base) for item in raw.get("files", []) or [])
    return CorpusConfig(
        root=_resolve_path(root, base) if root else None,
        extension=normalize_extension(extension) if extension else CorpusConfig().extension,
        files=files,
    )
