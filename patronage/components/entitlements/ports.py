"""
Entitlement component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from patronage.domain.entities import Subscription, TargetType


class EntitlementStorePort(Protocol):
    """Read-only query surface over purchase and subscription facts."""

    def completed_purchase_keys(
        self, user_id: UUID, target_ids: Sequence[UUID]
    ) -> set[tuple[TargetType, UUID]]:
        """
        One query: which of target_ids the user holds a completed purchase for.

        Returns (target_type, target_id) pairs so a Post and a Collection
        sharing an id can never grant each other.
        """
        ...

    def subscriptions_for(
        self, subscriber_id: UUID, creator_ids: Sequence[UUID]
    ) -> list[Subscription]:
        """One query: the subscriber's active-status subscriptions to any of creator_ids."""
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
