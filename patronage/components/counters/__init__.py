"""
Counters component.

Public API for recomputing denormalised like and comment counters.
"""

from .component import find_drift, reconcile_counters, run
from .models import CounterRepair, ReconcileReport, StoredCounters
from .ports import CounterRepoPort

__all__ = [
    "reconcile_counters",
    "find_drift",
    "run",
    "CounterRepair",
    "ReconcileReport",
    "StoredCounters",
    "CounterRepoPort",
]
