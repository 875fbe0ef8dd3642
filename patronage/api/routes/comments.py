from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from patronage.api.deps import get_comment_repo, get_current_viewer, get_rules
from patronage.api.schemas import CommentCreateRequest, dump, ok
from patronage.components.comments import (
    AddCommentInput,
    DeleteCommentInput,
    ListCommentsInput,
    add_comment,
    delete_comment,
    list_comments,
)
from patronage.components.comments.ports import CommentRepoPort
from patronage.domain.entities import Viewer
from patronage.rules.models import Rules

router = APIRouter()


@router.get("/posts/{post_id}/comments")
def read_comments(
    post_id: UUID,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    repo: CommentRepoPort = Depends(get_comment_repo),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    size = min(limit or rules.pagination.comments_default_limit, rules.pagination.max_limit)
    result = list_comments(ListCommentsInput(post_id=post_id, page=page, limit=size), repo=repo)
    return ok(
        {
            "comments": [dump(c) for c in result.comments],
            "page": result.page,
            "hasMore": result.has_more,
            "total": result.total,
        },
        "Comments fetched",
    )


@router.post("/posts/{post_id}/comments", status_code=status.HTTP_201_CREATED)
def create(
    post_id: UUID,
    body: CommentCreateRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommentRepoPort = Depends(get_comment_repo),
) -> dict[str, Any]:
    comment = add_comment(
        AddCommentInput(
            viewer=viewer,
            post_id=post_id,
            content=body.content,
            parent_comment_id=body.parent_comment_id,
        ),
        repo=repo,
    )
    return ok(dump(comment), "Comment added", status.HTTP_201_CREATED)


@router.delete("/comments/{comment_id}")
def delete(
    comment_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommentRepoPort = Depends(get_comment_repo),
) -> dict[str, Any]:
    """Delete a comment together with every reply below it."""
    result = delete_comment(DeleteCommentInput(viewer=viewer, comment_id=comment_id), repo=repo)
    return ok(
        {
            "commentId": str(result.comment_id),
            "postId": str(result.post_id),
            "deletedCount": result.total_deleted,
            "commentsCount": result.comments_count,
        },
        "Comment deleted",
    )
