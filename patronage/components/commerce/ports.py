"""
Commerce component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from patronage.domain.entities import (
    ContentItem,
    Purchase,
    Subscription,
    SubscriptionStatus,
    TargetType,
    Tier,
)


class CommerceRepoPort(Protocol):
    """Purchase, subscription and tier facts."""

    # --- Purchases ---

    def find_content(self, target_type: TargetType, target_id: UUID) -> ContentItem | None:
        """Fetch the purchasable item, or None if it does not exist."""
        ...

    def find_completed_purchase(
        self, user_id: UUID, target_type: TargetType, target_id: UUID
    ) -> Purchase | None: ...

    def save_purchase(self, purchase: Purchase) -> Purchase:
        """Insert a purchase. Raises ConflictError on a second completed purchase."""
        ...

    def list_completed_purchases(self, user_id: UUID) -> list[Purchase]:
        """All completed purchases of a user, newest first."""
        ...

    # --- Subscriptions ---

    def get_active_subscription(
        self, subscriber_id: UUID, creator_id: UUID
    ) -> Subscription | None:
        """The active-status subscription for the pair, whatever its period says."""
        ...

    def save_subscription(self, subscription: Subscription) -> Subscription:
        """Insert a subscription. Raises ConflictError if one is already active."""
        ...

    def set_subscription_status(
        self, subscription_id: UUID, status: SubscriptionStatus
    ) -> Subscription | None: ...

    def list_active_subscriptions(self, subscriber_id: UUID) -> list[Subscription]: ...

    def expire_lapsed(self, now: datetime) -> int:
        """Move active subscriptions with current_period_end <= now to expired."""
        ...

    # --- Tiers ---

    def user_exists(self, user_id: UUID) -> bool: ...

    def get_tier(self, tier_id: UUID) -> Tier | None: ...

    def list_tiers(self, creator_id: UUID, include_inactive: bool = False) -> list[Tier]: ...

    def save_tier(self, tier: Tier) -> Tier:
        """Insert or update a tier."""
        ...

    def delete_tier(self, tier_id: UUID) -> bool: ...

    def count_active_subscriptions(self, tier_id: UUID) -> int:
        """Subscriptions with status active on the tier."""
        ...
