"""Corpus discovery: turn a directory tree or a path list into ordered test cases."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from .models import TestCase

DEFAULT_EXTENSION = ".gb"


def normalize_extension(extension: str) -> str:
    text = extension.strip()
    if not text:
        raise ValueError("extension cannot be empty")
    return text if text.startswith(".") else f".{text}"


def discover_cases(root: Path, extension: str = DEFAULT_EXTENSION) -> List[TestCase]:
    """Find regular files under ``root`` ending in ``extension``, in lexical path order."""

    base = Path(root)
    if not base.is_dir():
        raise ValueError(f"Corpus root is not a directory: {base}")
    suffix = normalize_extension(extension)
    matches = [path for path in base.rglob(f"*{suffix}") if path.is_file()]
    return [TestCase.from_path(path) for path in sorted(matches, key=lambda p: p.as_posix())]


def cases_from_paths(paths: Iterable[Path | str]) -> List[TestCase]:
    """Build cases for explicit paths, keeping the given order; paths may not exist."""

    return [TestCase.from_path(path) for path in paths]
