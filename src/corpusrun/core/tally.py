"""Running counts of outcomes across a batch."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

from .models import OutcomeKind


@dataclass(frozen=True)
class TallySummary:
    counts: Mapping[OutcomeKind, int]
    total: int

    def count(self, kind: OutcomeKind) -> int:
        return self.counts.get(kind, 0)


class CorpusTally:
    """Accumulates one OutcomeKind per case; there is no decrement or reset."""

    def __init__(self) -> None:
        self._counts: Dict[OutcomeKind, int] = {kind: 0 for kind in OutcomeKind}
        self._total = 0

    def record(self, kind: OutcomeKind) -> None:
        self._counts[OutcomeKind(kind)] += 1
        self._total += 1

    @property
    def total(self) -> int:
        return self._total

    def count(self, kind: OutcomeKind) -> int:
        return self._counts[OutcomeKind(kind)]

    def summary(self) -> TallySummary:
        return TallySummary(counts=MappingProxyType(dict(self._counts)), total=self._total)

    def is_clean(self) -> bool:
        return self._total == self._counts[OutcomeKind.PASSED]
