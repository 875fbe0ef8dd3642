"""
Comments component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from patronage.domain.entities import Comment


class CommentRepoPort(Protocol):
    """Storage for comments and the post comment counter."""

    def post_exists(self, post_id: UUID) -> bool: ...

    def get_by_id(self, comment_id: UUID) -> Comment | None: ...

    def save(self, comment: Comment) -> Comment: ...

    def list_for_post(
        self, post_id: UUID, limit: int, offset: int
    ) -> tuple[list[Comment], int]:
        """Newest first with author inlined. Returns (page, total)."""
        ...

    def delete_thread(self, comment_id: UUID) -> int:
        """
        Delete the comment and every reply beneath it in one statement.

        Returns the number of rows the delete removed.
        """
        ...

    def adjust_post_comments(self, post_id: UUID, delta: int) -> int | None:
        """Atomically add delta to the post's comments counter and read it back."""
        ...
