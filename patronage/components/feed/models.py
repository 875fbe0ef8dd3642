"""
Feed component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from patronage.components.entitlements.ports import EntitlementStorePort, TimePort
from patronage.components.interactions.ports import InteractionStorePort
from patronage.components.preview.models import PreviewConfig, WireContentItem

from .ports import ContentReadRepoPort, DashboardFactsPort


@dataclass(frozen=True)
class ReadContext:
    """Ports and configuration shared by every content read."""

    content: ContentReadRepoPort
    entitlements: EntitlementStorePort
    interactions: InteractionStorePort
    time: TimePort
    commerce: DashboardFactsPort | None = None
    preview: PreviewConfig = field(default_factory=PreviewConfig)


@dataclass(frozen=True)
class FeedPage:
    items: list[WireContentItem] = field(default_factory=list)
    page: int = 1
    has_more: bool = False
    total: int = 0


@dataclass(frozen=True)
class CollectionDetail:
    """
    A collection plus its member posts.

    items is only populated when the viewer has access to the collection.
    """

    collection: WireContentItem
    items: list[WireContentItem] = field(default_factory=list)


@dataclass(frozen=True)
class Dashboard:
    saved_posts: list[WireContentItem] = field(default_factory=list)
    purchased_items: list[dict[str, Any]] = field(default_factory=list)
    subscriptions: list[dict[str, Any]] = field(default_factory=list)
