"""
Preview component models.

Configuration for the locked projection of posts and collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from patronage.domain.entities import TargetType

# --- Allow-lists ---

# Fields a locked item may expose, by target type. Anything not listed here is
# dropped from the locked view, including fields added to entities later.
LOCKED_FIELDS: dict[TargetType, frozenset[str]] = {
    TargetType.POST: frozenset(
        {
            "id",
            "creator_id",
            "creator",
            "title",
            "type",
            "is_paid",
            "price",
            "is_members_only",
            "allowed_tiers",
            "likes_count",
            "comments_count",
            "created_at",
            "updated_at",
        }
    ),
    TargetType.COLLECTION: frozenset(
        {
            "id",
            "creator_id",
            "creator",
            "title",
            "is_paid",
            "price",
            "is_members_only",
            "allowed_tiers",
            "created_at",
            "updated_at",
        }
    ),
}

# Body text field that is truncated rather than dropped.
BODY_FIELD: dict[TargetType, str] = {
    TargetType.POST: "content",
    TargetType.COLLECTION: "description",
}

# Payload fields that are emptied (not omitted) so clients see a stable shape.
EMPTIED_FIELDS: dict[TargetType, tuple[str, ...]] = {
    TargetType.POST: ("media", "poll_options", "attachments"),
    TargetType.COLLECTION: ("posts",),
}


# --- Configuration ---


@dataclass(frozen=True)
class PreviewConfig:
    """Locked preview configuration from rules."""

    body_chars: int = 120
    truncation_marker: str = "..."
    cover_hidden_for_types: frozenset[str] = field(default_factory=lambda: frozenset({"image"}))


WireContentItem = dict[str, Any]
