from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from patronage.api.deps import get_current_viewer, get_interaction_repo
from patronage.api.schemas import dump, ok
from patronage.components.interactions import (
    ToggleFollowInput,
    ToggleLikeInput,
    ToggleSaveInput,
    list_followers,
    list_following,
    toggle_follow,
    toggle_like,
    toggle_save,
)
from patronage.components.interactions.ports import InteractionStorePort
from patronage.domain.entities import TargetType, Viewer

router = APIRouter()


def _like(
    viewer: Viewer, target_type: TargetType, target_id: UUID, store: InteractionStorePort
) -> dict[str, Any]:
    result = toggle_like(
        ToggleLikeInput(viewer=viewer, target_id=target_id, target_type=target_type), store=store
    )
    return ok(
        {"isLiked": result.active, "likesCount": result.count},
        "Liked" if result.active else "Unliked",
    )


@router.post("/posts/{post_id}/like")
def like_post(
    post_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    store: InteractionStorePort = Depends(get_interaction_repo),
) -> dict[str, Any]:
    return _like(viewer, TargetType.POST, post_id, store)


@router.post("/comments/{comment_id}/like")
def like_comment(
    comment_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    store: InteractionStorePort = Depends(get_interaction_repo),
) -> dict[str, Any]:
    return _like(viewer, TargetType.COMMENT, comment_id, store)


@router.post("/posts/{post_id}/save")
def save_post(
    post_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    store: InteractionStorePort = Depends(get_interaction_repo),
) -> dict[str, Any]:
    result = toggle_save(ToggleSaveInput(viewer=viewer, post_id=post_id), store=store)
    return ok({"isSaved": result.active}, "Saved" if result.active else "Removed from saved")


@router.post("/users/{user_id}/follow")
def follow_user(
    user_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    store: InteractionStorePort = Depends(get_interaction_repo),
) -> dict[str, Any]:
    result = toggle_follow(ToggleFollowInput(viewer=viewer, creator_id=user_id), store=store)
    return ok(
        {"isFollowed": result.is_followed},
        "Followed" if result.is_followed else "Unfollowed",
    )


@router.get("/following")
def read_following(
    viewer: Viewer = Depends(get_current_viewer),
    store: InteractionStorePort = Depends(get_interaction_repo),
) -> dict[str, Any]:
    return ok([dump(u) for u in list_following(viewer, store=store)], "Following list fetched")


@router.get("/users/{user_id}/followers")
def read_followers(
    user_id: UUID,
    store: InteractionStorePort = Depends(get_interaction_repo),
) -> dict[str, Any]:
    return ok([dump(u) for u in list_followers(user_id, store=store)], "Followers fetched")
