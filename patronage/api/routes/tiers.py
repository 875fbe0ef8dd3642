from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from patronage.api.deps import get_commerce_repo, get_current_viewer
from patronage.api.schemas import TierCreateRequest, TierUpdateRequest, dump, ok
from patronage.components.commerce import (
    CreateTierInput,
    DeactivateTierInput,
    DeleteTierInput,
    UpdateTierInput,
    create_tier,
    deactivate_tier,
    delete_tier,
    list_tiers,
    update_tier,
)
from patronage.components.commerce.ports import CommerceRepoPort
from patronage.domain.entities import Viewer

router = APIRouter()


@router.get("/tiers")
def read_my_tiers(
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    """The caller's tiers, inactive ones included."""
    tiers = list_tiers(viewer.id, repo=repo, include_inactive=True)
    return ok([dump(t) for t in tiers], "Tiers fetched")


@router.get("/tiers/{creator_id}")
def read_creator_tiers(
    creator_id: UUID,
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    tiers = list_tiers(creator_id, repo=repo)
    return ok([dump(t) for t in tiers], "Tiers fetched")


@router.post("/tiers", status_code=status.HTTP_201_CREATED)
def create(
    body: TierCreateRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    tier = create_tier(
        CreateTierInput(
            viewer=viewer,
            name=body.name,
            price=body.price,
            benefits=body.benefits,
            is_popular=body.is_popular,
        ),
        repo=repo,
    )
    return ok(dump(tier), "Tier created", status.HTTP_201_CREATED)


@router.put("/tiers/{tier_id}")
def update(
    tier_id: UUID,
    body: TierUpdateRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    tier = update_tier(
        UpdateTierInput(viewer=viewer, tier_id=tier_id, updates=body.fields_set()), repo=repo
    )
    return ok(dump(tier), "Tier updated")


@router.delete("/tiers/{tier_id}")
def delete(
    tier_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    delete_tier(DeleteTierInput(viewer=viewer, tier_id=tier_id), repo=repo)
    return ok(None, "Tier deleted")


@router.post("/tiers/{tier_id}/deactivate")
def deactivate(
    tier_id: UUID,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    tier = deactivate_tier(DeactivateTierInput(viewer=viewer, tier_id=tier_id), repo=repo)
    return ok(dump(tier), "Tier deactivated")
