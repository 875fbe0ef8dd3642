"""
Entitlement component - decides whether a viewer may see an item's full payload.

Policy, first match wins:
1. anonymous viewer: access iff the item is free
2. viewer owns the item: access
3. item is free: access
4. item is paid and viewer holds a completed purchase of this exact item: access
5. item is members-only and viewer holds a subscription to the item's creator
   that is active, inside its period, and on one of the item's allowed tiers:
   access
6. otherwise: no access

Paths 4 and 5 are alternatives; an item that is both paid and members-only
unlocks through either.

Batches issue one purchase query and one subscription query regardless of
size; the decision pass is pure.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from patronage.domain.entities import ContentItem, Subscription, TargetType, Viewer

from .models import AccessCheckOutput, EntitlementIndex, EvaluateAccessInput
from .ports import EntitlementStorePort, TimePort

# --- Pure Functions ---


def holds_tier_access(
    item: ContentItem,
    subscriptions: Sequence[Subscription],
    now: datetime,
) -> bool:
    """True if any subscription is current and on one of the item's allowed tiers."""
    allowed = set(item.allowed_tiers)
    return any(
        sub.creator_id == item.creator_id and sub.is_current(now) and sub.tier_id in allowed
        for sub in subscriptions
    )


def decide_access(
    item: ContentItem,
    viewer: Viewer | None,
    index: EntitlementIndex,
    now: datetime,
) -> AccessCheckOutput:
    """Apply the access policy to one item using pre-fetched facts."""
    if viewer is None:
        if item.is_free:
            return AccessCheckOutput(item_id=item.id, has_access=True, reason="free")
        return AccessCheckOutput(item_id=item.id, has_access=False, reason="anonymous")

    if item.creator_id == viewer.id:
        return AccessCheckOutput(item_id=item.id, has_access=True, reason="owner")

    if item.is_free:
        return AccessCheckOutput(item_id=item.id, has_access=True, reason="free")

    if item.is_paid and (item.target_type, item.id) in index.purchased:
        return AccessCheckOutput(item_id=item.id, has_access=True, reason="purchased")

    if item.is_members_only and holds_tier_access(
        item, index.subscriptions.get(item.creator_id, []), now
    ):
        return AccessCheckOutput(item_id=item.id, has_access=True, reason="subscribed")

    return AccessCheckOutput(item_id=item.id, has_access=False, reason="locked")


def build_index(
    items: Sequence[ContentItem],
    viewer: Viewer,
    store: EntitlementStorePort,
) -> EntitlementIndex:
    """
    Fetch the viewer's facts for a batch with at most two queries.

    Only items that could need a grant (not owned, not free) contribute ids;
    a batch with nothing gated issues no queries at all.
    """
    gated = [i for i in items if i.creator_id != viewer.id and not i.is_free]

    purchase_ids = list(dict.fromkeys(i.id for i in gated if i.is_paid))
    creator_ids = list(dict.fromkeys(i.creator_id for i in gated if i.is_members_only))

    purchased: frozenset[tuple[TargetType, UUID]] = frozenset()
    if purchase_ids:
        purchased = frozenset(store.completed_purchase_keys(viewer.id, purchase_ids))

    by_creator: dict[UUID, list[Subscription]] = {}
    if creator_ids:
        for sub in store.subscriptions_for(viewer.id, creator_ids):
            by_creator.setdefault(sub.creator_id, []).append(sub)

    return EntitlementIndex(purchased=purchased, subscriptions=by_creator)


# --- Component Entry Points ---


def evaluate_access(
    items: Sequence[ContentItem],
    viewer: Viewer | None,
    *,
    store: EntitlementStorePort,
    time: TimePort,
) -> list[AccessCheckOutput]:
    """
    Evaluate access for a batch of items.

    Args:
        items: Posts and/or collections, in display order
        viewer: Current viewer, or None for anonymous
        store: Purchase/subscription query surface
        time: Clock used for subscription period checks

    Returns:
        One AccessCheckOutput per item, aligned with items
    """
    if not items:
        return []

    if viewer is None:
        index = EntitlementIndex()
    else:
        index = build_index(items, viewer, store)

    now = time.now_utc()
    return [decide_access(item, viewer, index, now) for item in items]


def evaluate_access_one(
    item: ContentItem,
    viewer: Viewer | None,
    *,
    store: EntitlementStorePort,
    time: TimePort,
) -> AccessCheckOutput:
    """Single-item variant of evaluate_access."""
    return evaluate_access([item], viewer, store=store, time=time)[0]


def run(
    inp: EvaluateAccessInput,
    *,
    store: EntitlementStorePort,
    time: TimePort,
) -> list[AccessCheckOutput]:
    """Main entry point for the entitlement component."""
    return evaluate_access(inp.items, inp.viewer, store=store, time=time)
