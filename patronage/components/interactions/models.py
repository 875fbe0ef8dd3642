"""
Interactions component input/output models.

Likes, saves and follows are fact rows; a toggle flips presence of one row.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from patronage.domain.entities import TargetType, Viewer

LIKEABLE_TARGETS: frozenset[TargetType] = frozenset({TargetType.POST, TargetType.COMMENT})


@dataclass(frozen=True)
class InteractionFlags:
    """The viewer's own interaction state for one item."""

    is_liked: bool = False
    is_saved: bool = False


# --- Input Models ---


@dataclass(frozen=True)
class ToggleLikeInput:
    viewer: Viewer
    target_id: UUID
    target_type: TargetType = TargetType.POST


@dataclass(frozen=True)
class ToggleSaveInput:
    viewer: Viewer
    post_id: UUID


@dataclass(frozen=True)
class ToggleFollowInput:
    viewer: Viewer
    creator_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class ToggleOutput:
    """
    State after a toggle.

    count is the authoritative counter read back from the store, or None for
    interactions without a counter (saves).
    """

    target_id: UUID
    active: bool
    count: int | None = None


@dataclass(frozen=True)
class FollowOutput:
    creator_id: UUID
    is_followed: bool
