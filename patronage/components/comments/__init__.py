"""
Comments component.

Public API for adding, listing and deleting threaded comments.
"""

from .component import add_comment, delete_comment, list_comments, run
from .models import (
    MAX_COMMENT_LENGTH,
    AddCommentInput,
    CommentPage,
    DeleteCommentInput,
    DeleteCommentOutput,
    ListCommentsInput,
)
from .ports import CommentRepoPort

__all__ = [
    "add_comment",
    "list_comments",
    "delete_comment",
    "run",
    "AddCommentInput",
    "ListCommentsInput",
    "DeleteCommentInput",
    "CommentPage",
    "DeleteCommentOutput",
    "MAX_COMMENT_LENGTH",
    "CommentRepoPort",
]
