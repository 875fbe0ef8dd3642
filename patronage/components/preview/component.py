"""
Preview component - wire projection of content after the access decision.

With access the full item is returned. Without access the item is reduced to
an allow-listed projection: payload lists are emptied, the body is cut to a
short prefix, and the cover image is dropped where the cover is the content.
"""

from __future__ import annotations

from pydantic.alias_generators import to_camel

from patronage.components.interactions.models import InteractionFlags
from patronage.domain.entities import ContentItem, Post
from patronage.rules.models import PreviewRules

from .models import (
    BODY_FIELD,
    EMPTIED_FIELDS,
    LOCKED_FIELDS,
    PreviewConfig,
    WireContentItem,
)

# --- Pure Functions ---


def truncate_body(text: str, limit: int, marker: str = "...") -> str:
    """
    Cut body text to a preview prefix.

    The full body is never returned: text that already fits the budget is cut
    to half its length instead.
    """
    if not text:
        return ""
    cut = limit if len(text) > limit else len(text) // 2
    return text[:cut].rstrip() + marker


def hides_cover(item: ContentItem, config: PreviewConfig) -> bool:
    """True when the cover image is itself the paid content."""
    return isinstance(item, Post) and item.type in config.cover_hidden_for_types


def locked_view(item: ContentItem, config: PreviewConfig) -> WireContentItem:
    """Build the allow-listed projection of an item the viewer cannot access."""
    target = item.target_type

    wire: WireContentItem = item.model_dump(
        mode="json", by_alias=True, include=set(LOCKED_FIELDS[target])
    )

    body_field = BODY_FIELD[target]
    wire[to_camel(body_field)] = truncate_body(
        getattr(item, body_field), config.body_chars, config.truncation_marker
    )

    for name in EMPTIED_FIELDS[target]:
        wire[to_camel(name)] = []

    if item.cover_image is None or hides_cover(item, config):
        wire["coverImage"] = None
    else:
        wire["coverImage"] = item.cover_image.model_dump(mode="json", by_alias=True)

    return wire


def sanitize(
    item: ContentItem,
    has_access: bool,
    flags: InteractionFlags | None = None,
    config: PreviewConfig | None = None,
) -> WireContentItem:
    """
    Produce the wire-safe form of an item.

    Args:
        item: Post or collection with creator inlined
        has_access: Result of the entitlement decision for the current viewer
        flags: Viewer's own like/save state (reported even when locked)
        config: Preview configuration

    Returns:
        Dict with camelCase keys, always carrying hasAccess and isLocked
    """
    flags = flags or InteractionFlags()
    config = config or PreviewConfig()

    if has_access:
        wire = item.model_dump(mode="json", by_alias=True)
    else:
        wire = locked_view(item, config)

    wire["isLiked"] = flags.is_liked
    wire["isSaved"] = flags.is_saved
    wire["hasAccess"] = has_access
    wire["isLocked"] = not has_access
    return wire


# --- Configuration Loader ---


def load_config_from_rules(rules: PreviewRules) -> PreviewConfig:
    """Build PreviewConfig from the preview section of rules.yaml."""
    return PreviewConfig(
        body_chars=rules.body_chars,
        truncation_marker=rules.truncation_marker,
        cover_hidden_for_types=frozenset(rules.cover_hidden_for_types),
    )
