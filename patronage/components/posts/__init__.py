"""
Posts component.

Public API for owner-scoped post and collection writes.
"""

from .component import (
    create_collection,
    create_post,
    delete_collection,
    delete_post,
    run,
    update_collection,
    update_post,
)
from .models import (
    COLLECTION_EDITABLE_FIELDS,
    POST_EDITABLE_FIELDS,
    CreateCollectionInput,
    CreatePostInput,
    DeleteCollectionInput,
    DeletePostInput,
    UpdateCollectionInput,
    UpdatePostInput,
)
from .ports import ContentWriteRepoPort

__all__ = [
    "create_post",
    "update_post",
    "delete_post",
    "create_collection",
    "update_collection",
    "delete_collection",
    "run",
    "CreatePostInput",
    "UpdatePostInput",
    "DeletePostInput",
    "CreateCollectionInput",
    "UpdateCollectionInput",
    "DeleteCollectionInput",
    "POST_EDITABLE_FIELDS",
    "COLLECTION_EDITABLE_FIELDS",
    "ContentWriteRepoPort",
]
