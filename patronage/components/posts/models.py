"""
Posts component input models.

Creation inputs carry raw field values as received from the client; all
checks happen in the component so the same rules apply to create and edit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from patronage.domain.entities import Viewer

MAX_TITLE_LENGTH = 150
MIN_POLL_OPTIONS = 2

# Fields an owner may change through an edit. Counters and ownership are
# never writable here.
POST_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "content",
        "type",
        "media",
        "attachments",
        "cover_image",
        "poll_options",
        "is_paid",
        "price",
        "is_members_only",
        "allowed_tiers",
        "is_draft",
    }
)

COLLECTION_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "cover_image", "posts", "is_paid", "price", "is_draft"}
)


@dataclass(frozen=True)
class CreatePostInput:
    viewer: Viewer
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdatePostInput:
    viewer: Viewer
    post_id: UUID
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeletePostInput:
    viewer: Viewer
    post_id: UUID


@dataclass(frozen=True)
class CreateCollectionInput:
    viewer: Viewer
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateCollectionInput:
    viewer: Viewer
    collection_id: UUID
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteCollectionInput:
    viewer: Viewer
    collection_id: UUID
