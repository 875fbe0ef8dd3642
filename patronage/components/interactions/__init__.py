"""
Interactions component.

Public API for like/save annotation of content batches and for the
like, save and follow toggles.
"""

from .component import (
    annotate_interactions,
    list_followers,
    list_following,
    run,
    toggle_follow,
    toggle_like,
    toggle_save,
)
from .models import (
    LIKEABLE_TARGETS,
    FollowOutput,
    InteractionFlags,
    ToggleFollowInput,
    ToggleLikeInput,
    ToggleOutput,
    ToggleSaveInput,
)
from .ports import InteractionStorePort

__all__ = [
    # Functions
    "annotate_interactions",
    "toggle_like",
    "toggle_save",
    "toggle_follow",
    "list_following",
    "list_followers",
    "run",
    # Models
    "InteractionFlags",
    "ToggleLikeInput",
    "ToggleSaveInput",
    "ToggleFollowInput",
    "ToggleOutput",
    "FollowOutput",
    "LIKEABLE_TARGETS",
    # Ports
    "InteractionStorePort",
]
