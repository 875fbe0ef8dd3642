"""
Counter reconciliation port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from patronage.domain.entities import TargetType

from .models import StoredCounters


class CounterRepoPort(Protocol):
    """Stored counters and the fact tables they summarise."""

    def stored_post_counters(self) -> list[StoredCounters]: ...

    def stored_comment_counters(self) -> list[StoredCounters]: ...

    def like_counts(self, target_type: TargetType) -> dict[UUID, int]:
        """Number of like facts per target of the given type."""
        ...

    def comment_counts(self) -> dict[UUID, int]:
        """Number of comment rows per post."""
        ...

    def write_counters(
        self,
        target_type: TargetType,
        target_id: UUID,
        likes_count: int,
        comments_count: int | None = None,
    ) -> None: ...
