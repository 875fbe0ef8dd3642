from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from patronage.api.deps import get_current_viewer, get_optional_viewer, get_read_context, get_rules
from patronage.api.schemas import ok
from patronage.components.feed import ReadContext, get_dashboard, get_feed, get_post
from patronage.domain.entities import Viewer
from patronage.rules.models import Rules

router = APIRouter()


@router.get("/feed")
def read_feed(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    viewer: Viewer | None = Depends(get_optional_viewer),
    ctx: ReadContext = Depends(get_read_context),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Published posts, newest first, with pagination metadata."""
    size = min(limit or rules.pagination.default_limit, rules.pagination.max_limit)
    result = get_feed(viewer, page, size, ctx=ctx)
    return ok(
        {
            "items": result.items,
            "page": result.page,
            "hasMore": result.has_more,
            "total": result.total,
        },
        "Feed fetched",
    )


@router.get("/posts/detail/{post_id}")
def read_post(
    post_id: UUID,
    viewer: Viewer | None = Depends(get_optional_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    return ok(get_post(viewer, post_id, ctx=ctx), "Post fetched")


@router.get("/dashboard")
async def read_dashboard(
    viewer: Viewer = Depends(get_current_viewer),
    ctx: ReadContext = Depends(get_read_context),
) -> dict[str, Any]:
    """Saved posts, purchased items and current subscriptions of the caller."""
    dashboard = await get_dashboard(viewer, ctx=ctx)
    return ok(
        {
            "savedPosts": dashboard.saved_posts,
            "purchasedItems": dashboard.purchased_items,
            "subscriptions": dashboard.subscriptions,
        },
        "Dashboard fetched",
    )
