"""Result data structures produced by the batch driver."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .models import OutcomeKind, TestCase
from .tally import CorpusTally


@dataclass
class CaseResult:
    """Outcome of executing a single test case."""

    case: TestCase
    outcome: OutcomeKind
    duration_s: float = 0.0
    exit_status: Optional[int] = None
    details: str = ""

    @property
    def passed(self) -> bool:
        return self.outcome is OutcomeKind.PASSED


@dataclass
class BatchResult:
    """Per-case results in corpus order plus the tally they were folded into."""

    results: List[CaseResult] = field(default_factory=list)
    tally: CorpusTally = field(default_factory=CorpusTally)

    @property
    def clean(self) -> bool:
        return self.tally.is_clean()

    @property
    def exit_code(self) -> int:
        return 0 if self.clean else 1
