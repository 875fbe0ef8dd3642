"""
Interactions component - like/save annotation and toggles.

Annotation:
- anonymous viewer or empty batch: every item is (liked=False, saved=False)
  and nothing is queried
- otherwise exactly one like query and one save query for the whole batch

Toggles flip a (viewer, target) fact between absent and present. A duplicate
insert caused by a concurrent request is a ConflictError from the store and is
reported as "already present" without touching the counter. Counters are
read back from the store after the atomic adjustment.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from patronage.domain.entities import ContentItem, CreatorSummary, TargetType, Viewer
from patronage.domain.errors import ConflictError, DomainValidationError, NotFoundError

from .models import (
    LIKEABLE_TARGETS,
    FollowOutput,
    InteractionFlags,
    ToggleFollowInput,
    ToggleLikeInput,
    ToggleOutput,
    ToggleSaveInput,
)
from .ports import InteractionStorePort

logger = logging.getLogger(__name__)


def _not_found(target_type: TargetType) -> NotFoundError:
    return NotFoundError(f"{target_type.value} not found")


# --- Annotation ---


def annotate_interactions(
    items: Sequence[ContentItem],
    viewer: Viewer | None,
    *,
    store: InteractionStorePort,
) -> list[InteractionFlags]:
    """
    Attach the viewer's liked/saved state to a batch.

    Returns one InteractionFlags per item, aligned with items. Only posts can
    be liked or saved; other items always get empty flags.
    """
    post_ids = [i.id for i in items if i.target_type is TargetType.POST]

    if viewer is None or not post_ids:
        return [InteractionFlags() for _ in items]

    liked = store.liked_target_ids(viewer.id, TargetType.POST, post_ids)
    saved = store.saved_post_ids(viewer.id, post_ids)

    return [
        InteractionFlags(
            is_liked=i.target_type is TargetType.POST and i.id in liked,
            is_saved=i.target_type is TargetType.POST and i.id in saved,
        )
        for i in items
    ]


# --- Toggles ---


def toggle_like(inp: ToggleLikeInput, *, store: InteractionStorePort) -> ToggleOutput:
    """Like or unlike a post or comment."""
    viewer, target_type, target_id = inp.viewer, inp.target_type, inp.target_id

    if target_type not in LIKEABLE_TARGETS:
        raise DomainValidationError(f"{target_type.value} cannot be liked", field="targetType")
    if not store.target_exists(target_type, target_id):
        raise _not_found(target_type)

    if store.has_like(viewer.id, target_type, target_id):
        if store.remove_like(viewer.id, target_type, target_id):
            count = store.adjust_likes(target_type, target_id, -1)
        else:
            # Removed concurrently by another request; that request owns the decrement
            count = store.get_likes_count(target_type, target_id)
        if count is None:
            raise _not_found(target_type)
        return ToggleOutput(target_id=target_id, active=False, count=count)

    try:
        count = store.add_like_counted(viewer.id, target_type, target_id)
    except ConflictError:
        logger.info(
            "Duplicate like absorbed: user=%s %s=%s", viewer.id, target_type.value, target_id
        )
        # The winning insert committed together with its increment
        count = store.get_likes_count(target_type, target_id)

    if count is None:
        raise _not_found(target_type)
    return ToggleOutput(target_id=target_id, active=True, count=count)


def toggle_save(inp: ToggleSaveInput, *, store: InteractionStorePort) -> ToggleOutput:
    """Save or unsave a post."""
    viewer, post_id = inp.viewer, inp.post_id

    if not store.target_exists(TargetType.POST, post_id):
        raise _not_found(TargetType.POST)

    if store.has_save(viewer.id, post_id):
        store.remove_save(viewer.id, post_id)
        return ToggleOutput(target_id=post_id, active=False)

    try:
        store.add_save(viewer.id, post_id)
    except ConflictError:
        logger.info("Duplicate save absorbed: user=%s post=%s", viewer.id, post_id)

    return ToggleOutput(target_id=post_id, active=True)


def toggle_follow(inp: ToggleFollowInput, *, store: InteractionStorePort) -> FollowOutput:
    """Follow or unfollow a creator. Both sides of the relationship change together."""
    viewer, creator_id = inp.viewer, inp.creator_id

    if creator_id == viewer.id:
        raise DomainValidationError("You cannot follow yourself", field="creatorId")
    if not store.user_exists(creator_id):
        raise NotFoundError("User not found")

    if store.is_following(viewer.id, creator_id):
        store.remove_follow(viewer.id, creator_id)
        return FollowOutput(creator_id=creator_id, is_followed=False)

    try:
        store.add_follow(viewer.id, creator_id)
    except ConflictError:
        logger.info("Duplicate follow absorbed: user=%s creator=%s", viewer.id, creator_id)

    return FollowOutput(creator_id=creator_id, is_followed=True)


def list_following(viewer: Viewer, *, store: InteractionStorePort) -> list[CreatorSummary]:
    return store.list_following(viewer.id)


def list_followers(user_id: UUID, *, store: InteractionStorePort) -> list[CreatorSummary]:
    if not store.user_exists(user_id):
        raise NotFoundError("User not found")
    return store.list_followers(user_id)


def run(
    inp: ToggleLikeInput | ToggleSaveInput | ToggleFollowInput,
    *,
    store: InteractionStorePort,
) -> ToggleOutput | FollowOutput:
    """
    Main entry point for interaction toggles.

    Dispatches to the appropriate toggle based on input type.
    """
    if isinstance(inp, ToggleLikeInput):
        return toggle_like(inp, store=store)
    if isinstance(inp, ToggleSaveInput):
        return toggle_save(inp, store=store)
    if isinstance(inp, ToggleFollowInput):
        return toggle_follow(inp, store=store)
    raise TypeError(f"Unknown input type: {type(inp)}")
