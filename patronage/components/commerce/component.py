"""
Commerce component - purchases, subscriptions and creator tiers.

Purchases and subscriptions are the facts the entitlement evaluator reads.
Subscriptions are time-windowed: a subscription whose period has lapsed is
moved to expired the next time the pair is touched, or by the
expire_lapsed_subscriptions repair job. Access checks never depend on either
having happened.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from patronage.domain.entities import Purchase, Subscription, Tier, utcnow
from patronage.domain.errors import (
    ConflictError,
    DomainValidationError,
    ForbiddenError,
    NotFoundError,
)
from patronage.rules.models import SubscriptionRules

from ..entitlements.ports import TimePort
from .models import (
    MAX_TIER_NAME_LENGTH,
    PURCHASABLE_TARGETS,
    TIER_EDITABLE_FIELDS,
    CommerceConfig,
    CreateTierInput,
    DeactivateTierInput,
    DeleteTierInput,
    PurchaseInput,
    SubscribeInput,
    UnsubscribeInput,
    UpdateTierInput,
)
from .ports import CommerceRepoPort

logger = logging.getLogger(__name__)


# --- Validation ---


def validate_price(value: Any, field: str = "price") -> float:
    """Return value as a float, or raise if it is not a non-negative number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DomainValidationError("Price must be a number", field=field)
    if value < 0:
        raise DomainValidationError("Price must be non-negative", field=field)
    return float(value)


def validate_tier_name(value: Any) -> str:
    name = value.strip() if isinstance(value, str) else ""
    if not name:
        raise DomainValidationError("Tier name is required", field="name")
    if len(name) > MAX_TIER_NAME_LENGTH:
        raise DomainValidationError(
            f"Tier name must be at most {MAX_TIER_NAME_LENGTH} characters", field="name"
        )
    return name


def validate_benefits(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(b, str) for b in value):
        raise DomainValidationError("Benefits must be a list of strings", field="benefits")
    return [b.strip() for b in value if b.strip()]


# --- Purchases ---


def purchase_item(inp: PurchaseInput, *, repo: CommerceRepoPort) -> Purchase:
    """
    Record a completed purchase of a post or collection.

    A repeat purchase of an item the viewer already owns returns the existing
    fact instead of creating a second one.
    """
    viewer, target_type, target_id = inp.viewer, inp.target_type, inp.target_id

    if target_type not in PURCHASABLE_TARGETS:
        raise DomainValidationError(
            f"{target_type.value} cannot be purchased", field="targetType"
        )

    item = repo.find_content(target_type, target_id)
    if item is None or (item.is_draft and item.creator_id != viewer.id):
        raise NotFoundError(f"{target_type.value} not found")
    if item.creator_id == viewer.id:
        raise DomainValidationError("You cannot purchase your own content")
    if not item.is_paid:
        raise DomainValidationError(f"This {target_type.value.lower()} is not for sale")

    existing = repo.find_completed_purchase(viewer.id, target_type, target_id)
    if existing is not None:
        return existing

    try:
        purchase = repo.save_purchase(
            Purchase(
                user_id=viewer.id,
                creator_id=item.creator_id,
                target_id=target_id,
                target_type=target_type,
                amount=item.price,
                status="completed",
            )
        )
    except ConflictError:
        logger.info(
            "Duplicate purchase absorbed: user=%s %s=%s", viewer.id, target_type.value, target_id
        )
        existing = repo.find_completed_purchase(viewer.id, target_type, target_id)
        if existing is None:
            raise
        return existing

    logger.info(
        "Purchase recorded: user=%s %s=%s amount=%.2f",
        viewer.id,
        target_type.value,
        target_id,
        purchase.amount,
    )
    return purchase


# --- Subscriptions ---


def subscribe(
    inp: SubscribeInput,
    *,
    repo: CommerceRepoPort,
    time: TimePort,
    config: CommerceConfig | None = None,
) -> Subscription:
    """Start a subscription to a creator on one of their active tiers."""
    config = config or CommerceConfig()
    viewer = inp.viewer

    if inp.creator_id == viewer.id:
        raise DomainValidationError("You cannot subscribe to yourself", field="creatorId")

    tier = repo.get_tier(inp.tier_id)
    if tier is None or not tier.is_active or tier.creator_id != inp.creator_id:
        raise NotFoundError("Tier not found")

    now = time.now_utc()
    existing = repo.get_active_subscription(viewer.id, inp.creator_id)
    if existing is not None:
        if existing.is_current(now):
            raise DomainValidationError("Already subscribed")
        repo.set_subscription_status(existing.id, "expired")
        logger.info("Expired lapsed subscription %s before resubscribe", existing.id)

    subscription = repo.save_subscription(
        Subscription(
            subscriber_id=viewer.id,
            creator_id=inp.creator_id,
            tier_id=tier.id,
            status="active",
            current_period_end=now + timedelta(days=config.period_days),
            started_at=now,
        )
    )
    logger.info(
        "Subscription started: subscriber=%s creator=%s tier=%s",
        viewer.id,
        inp.creator_id,
        tier.id,
    )
    return subscription


def unsubscribe(inp: UnsubscribeInput, *, repo: CommerceRepoPort) -> Subscription:
    """Cancel the viewer's active subscription to a creator."""
    existing = repo.get_active_subscription(inp.viewer.id, inp.creator_id)
    if existing is None:
        raise NotFoundError("Subscription not found")

    updated = repo.set_subscription_status(existing.id, "cancelled")
    if updated is None:
        raise NotFoundError("Subscription not found")
    return updated


def expire_lapsed_subscriptions(*, repo: CommerceRepoPort, time: TimePort) -> int:
    """Repair job: mark active subscriptions whose period has ended as expired."""
    count = repo.expire_lapsed(time.now_utc())
    if count:
        logger.info("Expired %d lapsed subscriptions", count)
    return count


# --- Tiers ---


def _owned_tier(repo: CommerceRepoPort, tier_id: UUID, owner_id: UUID) -> Tier:
    tier = repo.get_tier(tier_id)
    # Not-mine is reported as not found so tier ids of other creators are not confirmed
    if tier is None or tier.creator_id != owner_id:
        raise NotFoundError("Tier not found")
    return tier


def _guard_active_subscribers(repo: CommerceRepoPort, tier: Tier, action: str) -> None:
    if repo.count_active_subscriptions(tier.id) > 0:
        raise DomainValidationError(f"Cannot {action} a tier with active subscribers")


def list_tiers(
    creator_id: UUID, *, repo: CommerceRepoPort, include_inactive: bool = False
) -> list[Tier]:
    if not repo.user_exists(creator_id):
        raise NotFoundError("User not found")
    return repo.list_tiers(creator_id, include_inactive=include_inactive)


def create_tier(inp: CreateTierInput, *, repo: CommerceRepoPort) -> Tier:
    if inp.viewer.role != "creator":
        raise ForbiddenError("Only creators can create tiers")

    tier = Tier(
        creator_id=inp.viewer.id,
        name=validate_tier_name(inp.name),
        price=validate_price(inp.price),
        benefits=validate_benefits(inp.benefits),
        is_popular=bool(inp.is_popular),
    )
    return repo.save_tier(tier)


def update_tier(inp: UpdateTierInput, *, repo: CommerceRepoPort) -> Tier:
    """Apply an allow-listed edit to one of the viewer's tiers."""
    tier = _owned_tier(repo, inp.tier_id, inp.viewer.id)

    unknown = set(inp.updates) - TIER_EDITABLE_FIELDS
    if unknown:
        raise DomainValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")

    changes: dict[str, Any] = {}
    for key, value in inp.updates.items():
        if key == "name":
            changes["name"] = validate_tier_name(value)
        elif key == "price":
            changes["price"] = validate_price(value)
        elif key == "benefits":
            changes["benefits"] = validate_benefits(value)
        else:
            changes[key] = bool(value)

    if tier.is_active and changes.get("is_active") is False:
        _guard_active_subscribers(repo, tier, "deactivate")

    updated = tier.model_copy(update={**changes, "updated_at": utcnow()})
    return repo.save_tier(updated)


def deactivate_tier(inp: DeactivateTierInput, *, repo: CommerceRepoPort) -> Tier:
    tier = _owned_tier(repo, inp.tier_id, inp.viewer.id)
    if not tier.is_active:
        return tier
    _guard_active_subscribers(repo, tier, "deactivate")
    return repo.save_tier(tier.model_copy(update={"is_active": False, "updated_at": utcnow()}))


def delete_tier(inp: DeleteTierInput, *, repo: CommerceRepoPort) -> None:
    tier = _owned_tier(repo, inp.tier_id, inp.viewer.id)
    _guard_active_subscribers(repo, tier, "delete")
    repo.delete_tier(tier.id)
    logger.info("Deleted tier %s of creator %s", tier.id, tier.creator_id)


# --- Configuration Loader ---


def load_config_from_rules(rules: SubscriptionRules) -> CommerceConfig:
    return CommerceConfig(period_days=rules.period_days)


def run(
    inp: PurchaseInput
    | SubscribeInput
    | UnsubscribeInput
    | CreateTierInput
    | UpdateTierInput
    | DeactivateTierInput
    | DeleteTierInput,
    *,
    repo: CommerceRepoPort,
    time: TimePort,
    config: CommerceConfig | None = None,
) -> Purchase | Subscription | Tier | None:
    """Main entry point for the commerce component."""
    if isinstance(inp, PurchaseInput):
        return purchase_item(inp, repo=repo)
    if isinstance(inp, SubscribeInput):
        return subscribe(inp, repo=repo, time=time, config=config)
    if isinstance(inp, UnsubscribeInput):
        return unsubscribe(inp, repo=repo)
    if isinstance(inp, CreateTierInput):
        return create_tier(inp, repo=repo)
    if isinstance(inp, UpdateTierInput):
        return update_tier(inp, repo=repo)
    if isinstance(inp, DeactivateTierInput):
        return deactivate_tier(inp, repo=repo)
    if isinstance(inp, DeleteTierInput):
        return delete_tier(inp, repo=repo)
    raise TypeError(f"Unknown input type: {type(inp)}")
