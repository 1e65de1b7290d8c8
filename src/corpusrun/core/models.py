"""Core dataclasses shared across corpusrun subsystems."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


# Status reported by coreutils ``timeout`` when it kills the command.
TIMEOUT_EXIT_STATUS = 124


class OutcomeKind(str, Enum):
    """Fixed classification of one test's result."""

    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    UNKNOWN = "unknown"
    MISSING_INPUT = "missing_input"

    @classmethod
    def parse(cls, value: str) -> "OutcomeKind":
        text = str(value).strip().lower().replace("-", "_")
        try:
            return cls(text)
        except ValueError as exc:
            choices = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown outcome '{value}'. Expected one of: {choices}") from exc


@dataclass(frozen=True)
class TestCase:
    """One corpus entry: a named input file fed to the program under test."""

    __test__ = False  # not a pytest class

    name: str
    path: Path

    @classmethod
    def from_path(cls, path: Path | str) -> "TestCase":
        p = Path(path)
        return cls(name=p.stem, path=p)

    def exists(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class InvocationResult:
    """Raw signals of one run.

    ``exit_status`` is ``None`` when the run was cut off by the wall-clock
    budget; ``timed_out`` is then set. ``output`` is only populated when the
    runner captured text.
    """

    exit_status: Optional[int]
    output: Optional[str] = None
    timed_out: bool = False
    duration_s: float = 0.0

    def tail(self, lines: int = 3) -> Tuple[str, ...]:
        if not self.output:
            return tuple()
        stripped = [line for line in self.output.splitlines() if line.strip()]
        return tuple(stripped[-lines:])
