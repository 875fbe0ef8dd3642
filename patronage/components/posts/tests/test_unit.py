"""
Unit tests for the Posts component.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID, uuid4

import pytest

from patronage.domain.entities import Collection, Post, Viewer
from patronage.domain.errors import DomainValidationError, ForbiddenError, NotFoundError

from ..component import (
    create_collection,
    create_post,
    delete_collection,
    delete_post,
    update_collection,
    update_post,
)
from ..models import (
    CreateCollectionInput,
    CreatePostInput,
    DeleteCollectionInput,
    DeletePostInput,
    UpdateCollectionInput,
    UpdatePostInput,
)

# --- Test Fixtures ---


class FakeContentRepo:
    """In-memory posts, collections and tier ownership."""

    def __init__(self) -> None:
        self.posts: dict[UUID, Post] = {}
        self.collections: dict[UUID, Collection] = {}
        self.tier_owner: dict[UUID, UUID] = {}

    def get_post(self, post_id: UUID) -> Post | None:
        return self.posts.get(post_id)

    def save_post(self, post: Post) -> Post:
        existing = self.posts.get(post.id)
        if existing is not None:
            # Counters are not written by edits
            post = post.model_copy(
                update={
                    "likes_count": existing.likes_count,
                    "comments_count": existing.comments_count,
                }
            )
        self.posts[post.id] = post
        return post

    def delete_post(self, post_id: UUID) -> bool:
        return self.posts.pop(post_id, None) is not None

    def get_collection(self, collection_id: UUID) -> Collection | None:
        return self.collections.get(collection_id)

    def save_collection(self, collection: Collection) -> Collection:
        self.collections[collection.id] = collection
        return collection

    def delete_collection(self, collection_id: UUID) -> bool:
        return self.collections.pop(collection_id, None) is not None

    def owned_post_ids(self, creator_id: UUID, post_ids: Sequence[UUID]) -> set[UUID]:
        return {pid for pid in post_ids if pid in self.posts and self.posts[pid].creator_id == creator_id}

    def owned_tier_ids(self, creator_id: UUID, tier_ids: Sequence[UUID]) -> set[UUID]:
        return {tid for tid in tier_ids if self.tier_owner.get(tid) == creator_id}


@pytest.fixture
def repo() -> FakeContentRepo:
    return FakeContentRepo()


@pytest.fixture
def creator() -> Viewer:
    return Viewer(id=uuid4(), role="creator")


def new_post(repo: FakeContentRepo, creator: Viewer, **fields) -> Post:
    fields.setdefault("title", "Hello")
    return create_post(CreatePostInput(viewer=creator, fields=fields), repo=repo)


# --- Create ---


class TestCreatePost:
    def test_defaults(self, repo, creator) -> None:
        post = new_post(repo, creator, title="  Hello  ", content=" body ")

        assert post.title == "Hello"
        assert post.content == "body"
        assert post.creator_id == creator.id
        assert post.likes_count == 0
        assert post.comments_count == 0
        assert post.id in repo.posts

    def test_title_required(self, repo, creator) -> None:
        with pytest.raises(DomainValidationError):
            new_post(repo, creator, title="   ")

    def test_title_length(self, repo, creator) -> None:
        with pytest.raises(DomainValidationError):
            new_post(repo, creator, title="x" * 151)

    def test_unknown_type(self, repo, creator) -> None:
        with pytest.raises(DomainValidationError):
            new_post(repo, creator, type="hologram")

    def test_price_forced_to_zero_when_free(self, repo, creator) -> None:
        post = new_post(repo, creator, is_paid=False, price=99)

        assert post.price == 0

    @pytest.mark.parametrize("price", [-5, "abc", None])
    def test_paid_requires_valid_price(self, repo, creator, price) -> None:
        with pytest.raises(DomainValidationError):
            new_post(repo, creator, is_paid=True, price=price)

    def test_counters_cannot_be_set(self, repo, creator) -> None:
        with pytest.raises(DomainValidationError):
            new_post(repo, creator, likes_count=100)

    def test_poll_needs_two_options(self, repo, creator) -> None:
        with pytest.raises(DomainValidationError):
            new_post(repo, creator, type="poll", poll_options=["only one"])

    def test_poll_options_from_strings(self, repo, creator) -> None:
        post = new_post(repo, creator, type="poll", poll_options=["Yes", " No ", ""])

        assert [o.text for o in post.poll_options] == ["Yes", "No"]
        assert all(o.votes == 0 for o in post.poll_options)

    def test_allowed_tiers_must_be_owned(self, repo, creator) -> None:
        foreign = uuid4()
        repo.tier_owner[foreign] = uuid4()

        with pytest.raises(DomainValidationError):
            new_post(repo, creator, is_members_only=True, allowed_tiers=[foreign])

    def test_allowed_tiers_deduplicated(self, repo, creator) -> None:
        tier = uuid4()
        repo.tier_owner[tier] = creator.id

        post = new_post(repo, creator, is_members_only=True, allowed_tiers=[tier, str(tier)])

        assert post.allowed_tiers == [tier]


# --- Update / Delete ---


class TestUpdatePost:
    def test_updates_allowed_fields(self, repo, creator) -> None:
        post = new_post(repo, creator)

        updated = update_post(
            UpdatePostInput(
                viewer=creator, post_id=post.id, updates={"title": "New", "is_draft": True}
            ),
            repo=repo,
        )

        assert updated.title == "New"
        assert updated.is_draft is True
        assert updated.created_at == post.created_at

    def test_counters_are_not_editable(self, repo, creator) -> None:
        post = new_post(repo, creator)

        with pytest.raises(DomainValidationError):
            update_post(
                UpdatePostInput(viewer=creator, post_id=post.id, updates={"comments_count": 9}),
                repo=repo,
            )

    def test_counters_survive_edit(self, repo, creator) -> None:
        post = new_post(repo, creator)
        repo.posts[post.id] = post.model_copy(update={"likes_count": 7})

        updated = update_post(
            UpdatePostInput(viewer=creator, post_id=post.id, updates={"content": "x"}),
            repo=repo,
        )

        assert updated.likes_count == 7

    def test_unpaying_clears_price(self, repo, creator) -> None:
        post = new_post(repo, creator, is_paid=True, price=10)

        updated = update_post(
            UpdatePostInput(viewer=creator, post_id=post.id, updates={"is_paid": False}),
            repo=repo,
        )

        assert updated.price == 0

    def test_not_mine_is_not_found(self, repo, creator) -> None:
        post = new_post(repo, creator)

        with pytest.raises(NotFoundError):
            update_post(
                UpdatePostInput(viewer=Viewer(id=uuid4()), post_id=post.id, updates={}),
                repo=repo,
            )


class TestDeletePost:
    def test_owner_deletes(self, repo, creator) -> None:
        post = new_post(repo, creator)

        delete_post(DeletePostInput(viewer=creator, post_id=post.id), repo=repo)

        assert post.id not in repo.posts

    def test_not_mine_is_not_found(self, repo, creator) -> None:
        post = new_post(repo, creator)

        with pytest.raises(NotFoundError):
            delete_post(DeletePostInput(viewer=Viewer(id=uuid4()), post_id=post.id), repo=repo)
        assert post.id in repo.posts


# --- Collections ---


class TestCollections:
    def test_create_with_own_posts(self, repo, creator) -> None:
        a = new_post(repo, creator)
        b = new_post(repo, creator)

        collection = create_collection(
            CreateCollectionInput(
                viewer=creator,
                fields={"title": "Set", "posts": [a.id, b.id, a.id], "is_paid": True, "price": 30},
            ),
            repo=repo,
        )

        assert collection.posts == [a.id, b.id]
        assert collection.price == 30

    def test_foreign_posts_are_forbidden(self, repo, creator) -> None:
        other = Viewer(id=uuid4(), role="creator")
        theirs = new_post(repo, other)

        with pytest.raises(ForbiddenError):
            create_collection(
                CreateCollectionInput(viewer=creator, fields={"title": "Set", "posts": [theirs.id]}),
                repo=repo,
            )

    def test_members_only_is_not_settable(self, repo, creator) -> None:
        with pytest.raises(DomainValidationError):
            create_collection(
                CreateCollectionInput(
                    viewer=creator, fields={"title": "Set", "is_members_only": True}
                ),
                repo=repo,
            )

    def test_update_and_delete(self, repo, creator) -> None:
        collection = create_collection(
            CreateCollectionInput(viewer=creator, fields={"title": "Set"}), repo=repo
        )

        updated = update_collection(
            UpdateCollectionInput(
                viewer=creator, collection_id=collection.id, updates={"description": "about"}
            ),
            repo=repo,
        )
        assert updated.description == "about"

        delete_collection(
            DeleteCollectionInput(viewer=creator, collection_id=collection.id), repo=repo
        )
        assert collection.id not in repo.collections

    def test_other_creators_collection_is_not_found(self, repo, creator) -> None:
        collection = create_collection(
            CreateCollectionInput(viewer=creator, fields={"title": "Set"}), repo=repo
        )

        with pytest.raises(NotFoundError):
            delete_collection(
                DeleteCollectionInput(viewer=Viewer(id=uuid4()), collection_id=collection.id),
                repo=repo,
            )
