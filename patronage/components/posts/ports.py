"""
Posts component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from patronage.domain.entities import Collection, Post


class ContentWriteRepoPort(Protocol):
    """Owner-scoped writes for posts and collections."""

    def get_post(self, post_id: UUID) -> Post | None: ...

    def save_post(self, post: Post) -> Post:
        """
        Insert or update a post.

        Updates never write likes_count or comments_count; those move only
        through the interaction and comment operations.
        """
        ...

    def delete_post(self, post_id: UUID) -> bool: ...

    def get_collection(self, collection_id: UUID) -> Collection | None: ...

    def save_collection(self, collection: Collection) -> Collection: ...

    def delete_collection(self, collection_id: UUID) -> bool: ...

    def owned_post_ids(self, creator_id: UUID, post_ids: Sequence[UUID]) -> set[UUID]:
        """Which of post_ids belong to creator_id."""
        ...

    def owned_tier_ids(self, creator_id: UUID, tier_ids: Sequence[UUID]) -> set[UUID]:
        """Which of tier_ids belong to creator_id."""
        ...
