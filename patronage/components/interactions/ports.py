"""
Interactions component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from patronage.domain.entities import CreatorSummary, TargetType


class InteractionStorePort(Protocol):
    """Like/save/follow facts plus the like counters they drive."""

    # --- Batch reads (annotator) ---

    def liked_target_ids(
        self, user_id: UUID, target_type: TargetType, target_ids: Sequence[UUID]
    ) -> set[UUID]:
        """One query: which of target_ids the user has liked."""
        ...

    def saved_post_ids(self, user_id: UUID, post_ids: Sequence[UUID]) -> set[UUID]:
        """One query: which of post_ids the user has saved."""
        ...

    # --- Likes ---

    def target_exists(self, target_type: TargetType, target_id: UUID) -> bool: ...

    def has_like(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> bool: ...

    def add_like_counted(
        self, user_id: UUID, target_type: TargetType, target_id: UUID
    ) -> int | None:
        """
        Insert a like fact and increment the target's counter in one transaction.

        Returns the counter read back inside that transaction, or None if the
        target row no longer exists. Raises ConflictError if the like already
        exists; a conflicting insert only fails once the other transaction has
        committed, so its increment is visible to a follow-up read.
        """
        ...

    def remove_like(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> bool:
        """Delete a like fact. Returns False if there was nothing to delete."""
        ...

    def adjust_likes(self, target_type: TargetType, target_id: UUID, delta: int) -> int | None:
        """
        Atomically add delta to the target's likes counter (floored at 0).

        Returns the stored value read back after the update, or None if the
        target row no longer exists.
        """
        ...

    def get_likes_count(self, target_type: TargetType, target_id: UUID) -> int | None: ...

    # --- Saves ---

    def has_save(self, user_id: UUID, post_id: UUID) -> bool: ...

    def add_save(self, user_id: UUID, post_id: UUID) -> None:
        """Insert a save fact. Raises ConflictError if it already exists."""
        ...

    def remove_save(self, user_id: UUID, post_id: UUID) -> bool: ...

    def list_saved_post_ids(self, user_id: UUID) -> list[UUID]:
        """All posts the user has saved, most recent first."""
        ...

    # --- Follows ---

    def user_exists(self, user_id: UUID) -> bool: ...

    def is_following(self, follower_id: UUID, followee_id: UUID) -> bool: ...

    def add_follow(self, follower_id: UUID, followee_id: UUID) -> None:
        """
        Record follower in followee's followers and followee in follower's
        following, in one write. Raises ConflictError if already present.
        """
        ...

    def remove_follow(self, follower_id: UUID, followee_id: UUID) -> bool: ...

    def list_following(self, follower_id: UUID) -> list[CreatorSummary]: ...

    def list_followers(self, followee_id: UUID) -> list[CreatorSummary]: ...
