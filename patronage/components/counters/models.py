"""
Counter reconciliation models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from patronage.domain.entities import TargetType


@dataclass(frozen=True)
class StoredCounters:
    """Denormalised counters as currently stored on a row."""

    target_type: TargetType
    target_id: UUID
    likes_count: int
    comments_count: int | None = None


@dataclass(frozen=True)
class CounterRepair:
    target_type: TargetType
    target_id: UUID
    field: str
    stored: int
    actual: int


@dataclass(frozen=True)
class ReconcileReport:
    posts_checked: int = 0
    comments_checked: int = 0
    repairs: list[CounterRepair] = field(default_factory=list)

    @property
    def repaired_rows(self) -> int:
        return len({(r.target_type, r.target_id) for r in self.repairs})
