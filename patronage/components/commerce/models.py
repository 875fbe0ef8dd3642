"""
Commerce component input/output models.

Purchases and subscriptions are recorded as already-settled facts; there is
no payment gateway behind them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from patronage.domain.entities import TargetType, Viewer

PURCHASABLE_TARGETS: frozenset[TargetType] = frozenset({TargetType.POST, TargetType.COLLECTION})

# Tier fields a creator may change through an edit.
TIER_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"name", "price", "benefits", "is_popular", "is_active"}
)

MAX_TIER_NAME_LENGTH = 80


@dataclass(frozen=True)
class CommerceConfig:
    """Commerce configuration from rules."""

    period_days: int = 30


# --- Purchases ---


@dataclass(frozen=True)
class PurchaseInput:
    viewer: Viewer
    target_type: TargetType
    target_id: UUID


# --- Subscriptions ---


@dataclass(frozen=True)
class SubscribeInput:
    viewer: Viewer
    creator_id: UUID
    tier_id: UUID


@dataclass(frozen=True)
class UnsubscribeInput:
    viewer: Viewer
    creator_id: UUID


# --- Tiers ---


@dataclass(frozen=True)
class CreateTierInput:
    viewer: Viewer
    name: str
    price: float
    benefits: list[str] = field(default_factory=list)
    is_popular: bool = False


@dataclass(frozen=True)
class UpdateTierInput:
    viewer: Viewer
    tier_id: UUID
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeactivateTierInput:
    viewer: Viewer
    tier_id: UUID


@dataclass(frozen=True)
class DeleteTierInput:
    viewer: Viewer
    tier_id: UUID
