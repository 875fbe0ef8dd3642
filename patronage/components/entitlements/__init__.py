"""
Entitlement component.

Public API for deciding content access from ownership, purchases and
tier subscriptions.
"""

from .component import (
    build_index,
    decide_access,
    evaluate_access,
    evaluate_access_one,
    holds_tier_access,
    run,
)
from .models import (
    AccessCheckOutput,
    AccessReason,
    EntitlementIndex,
    EvaluateAccessInput,
)
from .ports import EntitlementStorePort, TimePort

__all__ = [
    # Functions
    "evaluate_access",
    "evaluate_access_one",
    "decide_access",
    "build_index",
    "holds_tier_access",
    "run",
    # Models
    "AccessCheckOutput",
    "AccessReason",
    "EntitlementIndex",
    "EvaluateAccessInput",
    # Ports
    "EntitlementStorePort",
    "TimePort",
]
