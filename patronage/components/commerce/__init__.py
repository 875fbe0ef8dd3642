"""
Commerce component.

Public API for purchases, tier subscriptions and tier management.
"""

from .component import (
    create_tier,
    deactivate_tier,
    delete_tier,
    expire_lapsed_subscriptions,
    list_tiers,
    load_config_from_rules,
    purchase_item,
    run,
    subscribe,
    unsubscribe,
    update_tier,
    validate_price,
)
from .models import (
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

__all__ = [
    # Functions
    "purchase_item",
    "subscribe",
    "unsubscribe",
    "expire_lapsed_subscriptions",
    "list_tiers",
    "create_tier",
    "update_tier",
    "deactivate_tier",
    "delete_tier",
    "validate_price",
    "load_config_from_rules",
    "run",
    # Models
    "CommerceConfig",
    "PurchaseInput",
    "SubscribeInput",
    "UnsubscribeInput",
    "CreateTierInput",
    "UpdateTierInput",
    "DeactivateTierInput",
    "DeleteTierInput",
    "PURCHASABLE_TARGETS",
    "TIER_EDITABLE_FIELDS",
    # Ports
    "CommerceRepoPort",
]
