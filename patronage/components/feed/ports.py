"""
Feed component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from patronage.domain.entities import Collection, Post, Purchase, Subscription


class ContentReadRepoPort(Protocol):
    """Content query surface. Every row comes back with its creator inlined."""

    def list_feed(self, limit: int, offset: int) -> tuple[list[Post], int]:
        """Published posts newest first. Returns (page, total)."""
        ...

    def get_post(self, post_id: UUID) -> Post | None: ...

    def get_posts_by_ids(self, post_ids: Sequence[UUID]) -> list[Post]:
        """One query. Missing ids are simply absent from the result."""
        ...

    def list_creator_posts(self, creator_id: UUID, include_drafts: bool = False) -> list[Post]: ...

    def get_collection(self, collection_id: UUID) -> Collection | None: ...

    def get_collections_by_ids(self, collection_ids: Sequence[UUID]) -> list[Collection]: ...

    def list_creator_collections(
        self, creator_id: UUID, include_drafts: bool = False
    ) -> list[Collection]: ...

    def user_exists(self, user_id: UUID) -> bool: ...


class DashboardFactsPort(Protocol):
    """Viewer-owned facts shown on the dashboard."""

    def list_completed_purchases(self, user_id: UUID) -> list[Purchase]: ...

    def list_active_subscriptions(self, subscriber_id: UUID) -> list[Subscription]: ...
