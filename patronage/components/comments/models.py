"""
Comments component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from patronage.domain.entities import Comment, Viewer

MAX_COMMENT_LENGTH = 2000


@dataclass(frozen=True)
class AddCommentInput:
    viewer: Viewer
    post_id: UUID
    content: str
    parent_comment_id: UUID | None = None


@dataclass(frozen=True)
class ListCommentsInput:
    post_id: UUID
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class DeleteCommentInput:
    viewer: Viewer
    comment_id: UUID


@dataclass(frozen=True)
class CommentPage:
    comments: list[Comment] = field(default_factory=list)
    page: int = 1
    has_more: bool = False
    total: int = 0


@dataclass(frozen=True)
class DeleteCommentOutput:
    """
    Result of deleting a comment thread.

    total_deleted counts the comment plus every reply below it; the post's
    comments counter was decremented by exactly this amount.
    """

    comment_id: UUID
    post_id: UUID
    total_deleted: int
    comments_count: int | None = None
