"""Exceptions that abort a batch instead of becoming a per-test outcome."""
from __future__ import annotations

from typing import Sequence


class HarnessError(Exception):
    """Base class for batch-level failures."""


class LaunchError(HarnessError, RuntimeError):
    """The program under test could not be spawned at all."""

    def __init__(self, argv: Sequence[str], reason: str) -> None:
        self.argv = tuple(argv)
        self.reason = reason
        super().__init__(f"cannot launch '{' '.join(self.argv)}': {reason}")


class BatchInterrupted(HarnessError):
    """A termination signal stopped the batch."""

    def __init__(self, signum: int) -> None:
        self.signum = int(signum)
        super().__init__(f"batch interrupted by signal {self.signum}")

    @property
    def exit_code(self) -> int:
        return 128 + self.signum
