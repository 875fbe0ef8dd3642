"""
Entitlement component input/output models.

Access is decided per item against a viewer, from three independent grants:
ownership, a completed purchase, and a current tier subscription.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from uuid import UUID

from patronage.domain.entities import ContentItem, Subscription, TargetType, Viewer

AccessReason = Literal[
    "free",
    "owner",
    "purchased",
    "subscribed",
    "anonymous",
    "locked",
]


@dataclass(frozen=True)
class AccessCheckOutput:
    """Access decision for one item."""

    item_id: UUID
    has_access: bool
    reason: AccessReason


@dataclass(frozen=True)
class EvaluateAccessInput:
    """Batch of items to evaluate for one viewer (None = anonymous)."""

    items: list[ContentItem]
    viewer: Viewer | None = None


@dataclass(frozen=True)
class EntitlementIndex:
    """
    Facts for one viewer, indexed for the in-memory decision pass.

    purchased holds (target_type, target_id) pairs of completed purchases.
    subscriptions maps creator id to that viewer's subscriptions for it.
    """

    purchased: frozenset[tuple[TargetType, UUID]] = frozenset()
    subscriptions: dict[UUID, list[Subscription]] = field(default_factory=dict)
