from typing import Any

from fastapi import APIRouter, Depends, status

from patronage.adapters.clock import SystemClock
from patronage.api.deps import get_clock, get_commerce_config, get_commerce_repo, get_current_viewer
from patronage.api.schemas import (
    PurchaseRequest,
    SubscribeRequest,
    UnsubscribeRequest,
    dump,
    ok,
)
from patronage.components.commerce import (
    CommerceConfig,
    PurchaseInput,
    SubscribeInput,
    UnsubscribeInput,
    purchase_item,
    subscribe,
    unsubscribe,
)
from patronage.components.commerce.ports import CommerceRepoPort
from patronage.domain.entities import Viewer

router = APIRouter()


@router.post("/purchase")
def purchase(
    body: PurchaseRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    fact = purchase_item(
        PurchaseInput(viewer=viewer, target_type=body.item_type, target_id=body.item_id),
        repo=repo,
    )
    return ok(dump(fact), "Purchase successful")


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe_to_creator(
    body: SubscribeRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
    clock: SystemClock = Depends(get_clock),
    config: CommerceConfig = Depends(get_commerce_config),
) -> dict[str, Any]:
    subscription = subscribe(
        SubscribeInput(viewer=viewer, creator_id=body.creator_id, tier_id=body.tier_id),
        repo=repo,
        time=clock,
        config=config,
    )
    return ok(dump(subscription), "Subscribed successfully", status.HTTP_201_CREATED)


@router.post("/unsubscribe")
def unsubscribe_from_creator(
    body: UnsubscribeRequest,
    viewer: Viewer = Depends(get_current_viewer),
    repo: CommerceRepoPort = Depends(get_commerce_repo),
) -> dict[str, Any]:
    subscription = unsubscribe(
        UnsubscribeInput(viewer=viewer, creator_id=body.creator_id), repo=repo
    )
    return ok(dump(subscription), "Unsubscribed successfully")
