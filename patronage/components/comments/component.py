"""
Comments component - threaded comments on posts.

Counting contract: the post's commentsCount moves by exactly the number of
comment rows that appear or disappear. Deleting a comment removes its whole
reply thread and decrements by the count the delete reports.
"""

from __future__ import annotations

import logging

from patronage.domain.entities import Comment
from patronage.domain.errors import DomainValidationError, ForbiddenError, NotFoundError

from .models import (
    MAX_COMMENT_LENGTH,
    AddCommentInput,
    CommentPage,
    DeleteCommentInput,
    DeleteCommentOutput,
    ListCommentsInput,
)
from .ports import CommentRepoPort

logger = logging.getLogger(__name__)


def add_comment(inp: AddCommentInput, *, repo: CommentRepoPort) -> Comment:
    """Create a comment (or reply) and bump the post's counter."""
    content = (inp.content or "").strip()
    if not content:
        raise DomainValidationError("Comment content is required", field="content")
    if len(content) > MAX_COMMENT_LENGTH:
        raise DomainValidationError(
            f"Comment must be at most {MAX_COMMENT_LENGTH} characters", field="content"
        )

    if not repo.post_exists(inp.post_id):
        raise NotFoundError("Post not found")

    if inp.parent_comment_id is not None:
        parent = repo.get_by_id(inp.parent_comment_id)
        if parent is None or parent.post_id != inp.post_id:
            raise NotFoundError("Parent comment not found")

    comment = repo.save(
        Comment(
            post_id=inp.post_id,
            user_id=inp.viewer.id,
            parent_comment_id=inp.parent_comment_id,
            content=content,
        )
    )
    repo.adjust_post_comments(inp.post_id, 1)

    # Re-read so the author summary is inlined for the response
    return repo.get_by_id(comment.id) or comment


def list_comments(inp: ListCommentsInput, *, repo: CommentRepoPort) -> CommentPage:
    """Page through a post's comments, newest first."""
    page = max(inp.page, 1)
    limit = max(inp.limit, 1)
    offset = (page - 1) * limit

    comments, total = repo.list_for_post(inp.post_id, limit, offset)
    return CommentPage(
        comments=comments,
        page=page,
        has_more=total > offset + len(comments),
        total=total,
    )


def delete_comment(inp: DeleteCommentInput, *, repo: CommentRepoPort) -> DeleteCommentOutput:
    """Delete a comment with all replies and decrement the post by the rows removed."""
    comment = repo.get_by_id(inp.comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")

    if comment.user_id != inp.viewer.id:
        raise ForbiddenError("You are not authorized to delete this comment")

    total_deleted = repo.delete_thread(comment.id)
    count = None
    if total_deleted:
        count = repo.adjust_post_comments(comment.post_id, -total_deleted)

    logger.info(
        "Deleted comment thread %s on post %s (%d rows)",
        comment.id,
        comment.post_id,
        total_deleted,
    )
    return DeleteCommentOutput(
        comment_id=comment.id,
        post_id=comment.post_id,
        total_deleted=total_deleted,
        comments_count=count,
    )


def run(
    inp: AddCommentInput | ListCommentsInput | DeleteCommentInput,
    *,
    repo: CommentRepoPort,
) -> Comment | CommentPage | DeleteCommentOutput:
    """Main entry point for the comments component."""
    if isinstance(inp, AddCommentInput):
        return add_comment(inp, repo=repo)
    if isinstance(inp, ListCommentsInput):
        return list_comments(inp, repo=repo)
    if isinstance(inp, DeleteCommentInput):
        return delete_comment(inp, repo=repo)
    raise TypeError(f"Unknown input type: {type(inp)}")
