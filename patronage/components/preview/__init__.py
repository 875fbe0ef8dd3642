"""
Preview component.

Public API for turning evaluated content into full or locked wire items.
"""

from .component import (
    hides_cover,
    load_config_from_rules,
    locked_view,
    sanitize,
    truncate_body,
)
from .models import (
    BODY_FIELD,
    EMPTIED_FIELDS,
    LOCKED_FIELDS,
    PreviewConfig,
    WireContentItem,
)

__all__ = [
    # Functions
    "sanitize",
    "locked_view",
    "truncate_body",
    "hides_cover",
    "load_config_from_rules",
    # Models
    "PreviewConfig",
    "WireContentItem",
    "LOCKED_FIELDS",
    "BODY_FIELD",
    "EMPTIED_FIELDS",
]
