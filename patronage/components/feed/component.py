"""
Feed component - the content read paths.

Every read runs the same pipeline over a batch of rows:

    fetch -> annotate interactions -> evaluate access -> sanitize

Annotation and evaluation each cost a constant number of queries per batch,
so a feed page and a single post go through identical code.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from uuid import UUID

from patronage.components.entitlements import evaluate_access
from patronage.components.interactions import annotate_interactions
from patronage.components.preview import WireContentItem, sanitize
from patronage.domain.entities import (
    Collection,
    ContentItem,
    Post,
    Purchase,
    TargetType,
    Viewer,
)
from patronage.domain.errors import NotFoundError

from .models import CollectionDetail, Dashboard, FeedPage, ReadContext

logger = logging.getLogger(__name__)


# --- Pipeline ---


def present(
    items: Sequence[ContentItem],
    viewer: Viewer | None,
    *,
    ctx: ReadContext,
) -> list[WireContentItem]:
    """
    Turn a batch of content rows into wire items for one viewer.

    Args:
        items: Posts and/or collections with creator inlined
        viewer: Current viewer, or None for anonymous
        ctx: Read ports and preview configuration

    Returns:
        Wire items aligned with items
    """
    if not items:
        return []

    flags = annotate_interactions(items, viewer, store=ctx.interactions)
    decisions = evaluate_access(items, viewer, store=ctx.entitlements, time=ctx.time)

    return [
        sanitize(item, decision.has_access, flag, ctx.preview)
        for item, decision, flag in zip(items, decisions, flags, strict=True)
    ]


def _visible(item: ContentItem, viewer: Viewer | None) -> bool:
    """Drafts are visible to their owner only."""
    return not item.is_draft or (viewer is not None and item.creator_id == viewer.id)


# --- Reads ---


def get_feed(
    viewer: Viewer | None,
    page: int = 1,
    limit: int = 10,
    *,
    ctx: ReadContext,
) -> FeedPage:
    """Published posts, newest first, one page at a time."""
    page = max(page, 1)
    limit = max(limit, 1)
    offset = (page - 1) * limit

    posts, total = ctx.content.list_feed(limit, offset)
    return FeedPage(
        items=present(posts, viewer, ctx=ctx),
        page=page,
        has_more=total > offset + len(posts),
        total=total,
    )


def get_post(viewer: Viewer | None, post_id: UUID, *, ctx: ReadContext) -> WireContentItem:
    post = ctx.content.get_post(post_id)
    if post is None or not _visible(post, viewer):
        raise NotFoundError("Post not found")
    return present([post], viewer, ctx=ctx)[0]


def get_creator_posts(
    viewer: Viewer | None, creator_id: UUID, *, ctx: ReadContext
) -> list[WireContentItem]:
    """A creator's posts; the creator also sees their drafts."""
    if not ctx.content.user_exists(creator_id):
        raise NotFoundError("User not found")
    is_self = viewer is not None and viewer.id == creator_id
    posts = ctx.content.list_creator_posts(creator_id, include_drafts=is_self)
    return present(posts, viewer, ctx=ctx)


def get_my_posts(viewer: Viewer, *, ctx: ReadContext) -> list[WireContentItem]:
    posts = ctx.content.list_creator_posts(viewer.id, include_drafts=True)
    return present(posts, viewer, ctx=ctx)


def get_creator_collections(
    viewer: Viewer | None, creator_id: UUID, *, ctx: ReadContext
) -> list[WireContentItem]:
    if not ctx.content.user_exists(creator_id):
        raise NotFoundError("User not found")
    is_self = viewer is not None and viewer.id == creator_id
    collections = ctx.content.list_creator_collections(creator_id, include_drafts=is_self)
    return present(collections, viewer, ctx=ctx)


def get_collection(
    viewer: Viewer | None, collection_id: UUID, *, ctx: ReadContext
) -> CollectionDetail:
    """
    A collection and, when the viewer may open it, its member posts.

    Member posts are evaluated individually: buying a collection does not by
    itself unlock paid posts inside it. Ids of posts that no longer exist are
    skipped.
    """
    collection = ctx.content.get_collection(collection_id)
    if collection is None or not _visible(collection, viewer):
        raise NotFoundError("Collection not found")

    wire = present([collection], viewer, ctx=ctx)[0]
    if not wire["hasAccess"]:
        return CollectionDetail(collection=wire)

    by_id = {p.id: p for p in ctx.content.get_posts_by_ids(collection.posts)}
    members = [
        by_id[pid] for pid in collection.posts if pid in by_id and _visible(by_id[pid], viewer)
    ]
    return CollectionDetail(collection=wire, items=present(members, viewer, ctx=ctx))


# --- Dashboard ---


def _unavailable(purchase: Purchase) -> dict[str, object]:
    return {
        "id": str(purchase.target_id),
        "targetType": purchase.target_type.value,
        "unavailable": True,
    }


async def get_dashboard(viewer: Viewer, *, ctx: ReadContext) -> Dashboard:
    """
    Saved posts, purchased items and current subscriptions for the viewer.

    The three fact lookups are independent and run concurrently. Purchases
    whose target has since been deleted are reported as unavailable.
    """
    if ctx.commerce is None:
        raise RuntimeError("Dashboard reads need a commerce store")

    saved_ids, purchases, subscriptions = await asyncio.gather(
        asyncio.to_thread(ctx.interactions.list_saved_post_ids, viewer.id),
        asyncio.to_thread(ctx.commerce.list_completed_purchases, viewer.id),
        asyncio.to_thread(ctx.commerce.list_active_subscriptions, viewer.id),
    )

    purchased_post_ids = [p.target_id for p in purchases if p.target_type is TargetType.POST]
    purchased_collection_ids = [
        p.target_id for p in purchases if p.target_type is TargetType.COLLECTION
    ]

    saved_rows, post_rows, collection_rows = await asyncio.gather(
        asyncio.to_thread(ctx.content.get_posts_by_ids, saved_ids),
        asyncio.to_thread(ctx.content.get_posts_by_ids, purchased_post_ids),
        asyncio.to_thread(ctx.content.get_collections_by_ids, purchased_collection_ids),
    )

    saved_by_id = {p.id: p for p in saved_rows}
    saved_posts = [
        saved_by_id[pid]
        for pid in saved_ids
        if pid in saved_by_id and _visible(saved_by_id[pid], viewer)
    ]

    targets: dict[tuple[TargetType, UUID], Post | Collection] = {}
    for row in [*post_rows, *collection_rows]:
        targets[(row.target_type, row.id)] = row

    available = [
        targets[(p.target_type, p.target_id)]
        for p in purchases
        if (p.target_type, p.target_id) in targets
    ]
    # Presentation queries the stores too, so it stays off the event loop
    saved_view, purchased_view = await asyncio.gather(
        asyncio.to_thread(present, saved_posts, viewer, ctx=ctx),
        asyncio.to_thread(present, available, viewer, ctx=ctx),
    )
    presented = iter(purchased_view)

    purchased_items: list[dict[str, object]] = []
    for purchase in purchases:
        if (purchase.target_type, purchase.target_id) in targets:
            purchased_items.append(next(presented))
        else:
            logger.info(
                "Purchased %s %s no longer exists", purchase.target_type.value, purchase.target_id
            )
            purchased_items.append(_unavailable(purchase))

    now = ctx.time.now_utc()
    current = [
        s.model_dump(mode="json", by_alias=True) for s in subscriptions if s.is_current(now)
    ]

    return Dashboard(
        saved_posts=saved_view,
        purchased_items=purchased_items,
        subscriptions=current,
    )
