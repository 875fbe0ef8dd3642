"""
Posts component - owner-scoped create, edit and delete of posts and collections.

Every write goes through the same preparation step: unknown fields are
rejected, monetization is normalised (price is 0 unless paid), referenced
tiers and posts must belong to the author, and the result is re-validated as
a domain entity. Requests against content the caller does not own are
reported as not found.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from patronage.domain.entities import Collection, Post, Viewer, utcnow
from patronage.domain.errors import DomainValidationError, ForbiddenError, NotFoundError

from ..commerce.component import validate_price
from .models import (
    COLLECTION_EDITABLE_FIELDS,
    MAX_TITLE_LENGTH,
    MIN_POLL_OPTIONS,
    POST_EDITABLE_FIELDS,
    CreateCollectionInput,
    CreatePostInput,
    DeleteCollectionInput,
    DeletePostInput,
    UpdateCollectionInput,
    UpdatePostInput,
)
from .ports import ContentWriteRepoPort

logger = logging.getLogger(__name__)


# --- Validation Helpers ---


def _reject_unknown(data: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise DomainValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")


def _validated(model_cls: type[Post] | type[Collection], data: dict[str, Any]):
    """Build the entity, converting pydantic errors into a domain validation error."""
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or None
        raise DomainValidationError(f"Invalid {field}: {first['msg']}", field=field) from e


def normalize_title(value: Any) -> str:
    title = value.strip() if isinstance(value, str) else ""
    if not title:
        raise DomainValidationError("Title is required", field="title")
    if len(title) > MAX_TITLE_LENGTH:
        raise DomainValidationError(
            f"Title must be at most {MAX_TITLE_LENGTH} characters", field="title"
        )
    return title


def normalize_monetization(data: dict[str, Any]) -> None:
    """Coerce is_paid/price in place; price is only meaningful when paid."""
    data["is_paid"] = bool(data.get("is_paid", False))
    if data["is_paid"]:
        data["price"] = validate_price(data.get("price"))
    else:
        data["price"] = 0


def normalize_poll_options(options: Iterable[Any]) -> list[dict[str, Any]]:
    normalized = []
    for option in options:
        if isinstance(option, str):
            option = {"text": option}
        elif not isinstance(option, dict):
            option = dict(option)
        text = str(option.get("text", "")).strip()
        if text:
            normalized.append({**option, "text": text})
    return normalized


def _dedupe(ids: Iterable[UUID]) -> list[UUID]:
    return list(dict.fromkeys(ids))


# --- Posts ---


def _prepare_post(
    data: dict[str, Any], viewer: Viewer, repo: ContentWriteRepoPort
) -> Post:
    data["title"] = normalize_title(data.get("title"))
    data["content"] = (data.get("content") or "").strip()
    normalize_monetization(data)

    data["poll_options"] = normalize_poll_options(data.get("poll_options") or [])
    if data.get("type") == "poll":
        if len(data["poll_options"]) < MIN_POLL_OPTIONS:
            raise DomainValidationError(
                f"Polls need at least {MIN_POLL_OPTIONS} options", field="pollOptions"
            )

    post = _validated(Post, data)

    if post.allowed_tiers:
        tier_ids = _dedupe(post.allowed_tiers)
        owned = repo.owned_tier_ids(viewer.id, tier_ids)
        if len(owned) != len(tier_ids):
            raise DomainValidationError(
                "Allowed tiers must be your own tiers", field="allowedTiers"
            )
        post.allowed_tiers = tier_ids

    return post


def _owned_post(repo: ContentWriteRepoPort, post_id: UUID, viewer: Viewer) -> Post:
    post = repo.get_post(post_id)
    if post is None or post.creator_id != viewer.id:
        raise NotFoundError("Post not found")
    return post


def create_post(inp: CreatePostInput, *, repo: ContentWriteRepoPort) -> Post:
    """
    Create a post owned by the viewer.

    Args:
        inp: Viewer plus raw field values (snake_case keys)
        repo: Content write repository

    Returns:
        The stored post with counters at zero
    """
    _reject_unknown(inp.fields, POST_EDITABLE_FIELDS)
    data = {**inp.fields, "creator_id": inp.viewer.id}
    post = _prepare_post(data, inp.viewer, repo)

    saved = repo.save_post(post)
    logger.info("Post %s created by %s", saved.id, inp.viewer.id)
    return saved


def update_post(inp: UpdatePostInput, *, repo: ContentWriteRepoPort) -> Post:
    """Apply an allow-listed edit to one of the viewer's posts."""
    _reject_unknown(inp.updates, POST_EDITABLE_FIELDS)
    post = _owned_post(repo, inp.post_id, inp.viewer)

    data = post.model_dump(exclude={"creator"})
    data.update(inp.updates)
    data["updated_at"] = utcnow()
    updated = _prepare_post(data, inp.viewer, repo)

    return repo.save_post(updated)


def delete_post(inp: DeletePostInput, *, repo: ContentWriteRepoPort) -> None:
    """Delete one of the viewer's posts. Facts referencing it are kept."""
    post = _owned_post(repo, inp.post_id, inp.viewer)
    repo.delete_post(post.id)
    logger.info("Post %s deleted by %s", post.id, inp.viewer.id)


# --- Collections ---


def _prepare_collection(
    data: dict[str, Any], viewer: Viewer, repo: ContentWriteRepoPort
) -> Collection:
    data["title"] = normalize_title(data.get("title"))
    data["description"] = (data.get("description") or "").strip()
    normalize_monetization(data)

    collection = _validated(Collection, data)

    if collection.posts:
        post_ids = _dedupe(collection.posts)
        owned = repo.owned_post_ids(viewer.id, post_ids)
        if len(owned) != len(post_ids):
            raise ForbiddenError("You can only add your own posts")
        collection.posts = post_ids

    return collection


def _owned_collection(
    repo: ContentWriteRepoPort, collection_id: UUID, viewer: Viewer
) -> Collection:
    collection = repo.get_collection(collection_id)
    if collection is None or collection.creator_id != viewer.id:
        raise NotFoundError("Collection not found")
    return collection


def create_collection(inp: CreateCollectionInput, *, repo: ContentWriteRepoPort) -> Collection:
    _reject_unknown(inp.fields, COLLECTION_EDITABLE_FIELDS)
    data = {**inp.fields, "creator_id": inp.viewer.id}
    collection = _prepare_collection(data, inp.viewer, repo)

    saved = repo.save_collection(collection)
    logger.info("Collection %s created by %s", saved.id, inp.viewer.id)
    return saved


def update_collection(inp: UpdateCollectionInput, *, repo: ContentWriteRepoPort) -> Collection:
    _reject_unknown(inp.updates, COLLECTION_EDITABLE_FIELDS)
    collection = _owned_collection(repo, inp.collection_id, inp.viewer)

    data = collection.model_dump(exclude={"creator"})
    data.update(inp.updates)
    data["updated_at"] = utcnow()
    updated = _prepare_collection(data, inp.viewer, repo)

    return repo.save_collection(updated)


def delete_collection(inp: DeleteCollectionInput, *, repo: ContentWriteRepoPort) -> None:
    collection = _owned_collection(repo, inp.collection_id, inp.viewer)
    repo.delete_collection(collection.id)
    logger.info("Collection %s deleted by %s", collection.id, inp.viewer.id)


def run(
    inp: CreatePostInput
    | UpdatePostInput
    | DeletePostInput
    | CreateCollectionInput
    | UpdateCollectionInput
    | DeleteCollectionInput,
    *,
    repo: ContentWriteRepoPort,
) -> Post | Collection | None:
    """Main entry point for the posts component."""
    if isinstance(inp, CreatePostInput):
        return create_post(inp, repo=repo)
    if isinstance(inp, UpdatePostInput):
        return update_post(inp, repo=repo)
    if isinstance(inp, DeletePostInput):
        return delete_post(inp, repo=repo)
    if isinstance(inp, CreateCollectionInput):
        return create_collection(inp, repo=repo)
    if isinstance(inp, UpdateCollectionInput):
        return update_collection(inp, repo=repo)
    if isinstance(inp, DeleteCollectionInput):
        return delete_collection(inp, repo=repo)
    raise TypeError(f"Unknown input type: {type(inp)}")
