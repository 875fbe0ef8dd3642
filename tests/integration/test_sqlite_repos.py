"""
Repository behaviour against a real migrated SQLite database.
"""

import sqlite3
from datetime import timedelta
from uuid import uuid4

import pytest

from patronage.adapters.sqlite.repos import SQLiteInteractionRepo
from patronage.components.comments import (
    AddCommentInput,
    DeleteCommentInput,
    add_comment,
    delete_comment,
)
from patronage.components.counters import reconcile_counters
from patronage.domain.entities import (
    Collection,
    Comment,
    ImageRef,
    MediaAsset,
    Post,
    Purchase,
    Subscription,
    TargetType,
    Tier,
    User,
    Viewer,
    utcnow,
)
from patronage.domain.errors import ConflictError


@pytest.fixture
def post(content_repo, creator) -> Post:
    return content_repo.save_post(
        Post(
            creator_id=creator.id,
            title="Studio tour",
            content="Full body",
            type="image",
            media=[MediaAsset(public_id="m1", secure_url="https://cdn/m1.jpg", type="image")],
            cover_image=ImageRef(public_id="c1", secure_url="https://cdn/c1.jpg"),
            is_paid=True,
            price=10,
        )
    )


class TestContentRepo:
    def test_post_round_trip_inlines_creator(self, content_repo, creator, post) -> None:
        loaded = content_repo.get_post(post.id)

        assert loaded is not None
        assert loaded.creator is not None
        assert loaded.creator.username == "maya"
        assert loaded.media[0].secure_url == "https://cdn/m1.jpg"
        assert loaded.cover_image == ImageRef(public_id="c1", secure_url="https://cdn/c1.jpg")
        assert loaded.price == 10

    def test_feed_is_newest_first_without_drafts(self, content_repo, creator) -> None:
        base = utcnow()
        for i in range(3):
            content_repo.save_post(
                Post(creator_id=creator.id, title=f"p{i}", created_at=base + timedelta(minutes=i))
            )
        content_repo.save_post(Post(creator_id=creator.id, title="draft", is_draft=True))

        posts, total = content_repo.list_feed(limit=2, offset=0)

        assert total == 3
        assert [p.title for p in posts] == ["p2", "p1"]

    def test_edit_never_overwrites_counters(self, content_repo, interaction_repo, post) -> None:
        interaction_repo.adjust_likes(TargetType.POST, post.id, 1)

        stale = post.model_copy(update={"title": "Renamed", "likes_count": 0})
        saved = content_repo.save_post(stale)

        assert saved.title == "Renamed"
        assert saved.likes_count == 1

    def test_get_posts_by_ids_skips_missing(self, content_repo, post) -> None:
        rows = content_repo.get_posts_by_ids([post.id, uuid4(), post.id])

        assert [r.id for r in rows] == [post.id]

    def test_creator_listing_respects_drafts(self, content_repo, creator, post) -> None:
        content_repo.save_post(Post(creator_id=creator.id, title="wip", is_draft=True))

        public = content_repo.list_creator_posts(creator.id)
        everything = content_repo.list_creator_posts(creator.id, include_drafts=True)

        assert len(public) == 1
        assert len(everything) == 2

    def test_collection_round_trip(self, content_repo, creator, post) -> None:
        collection = content_repo.save_collection(
            Collection(
                creator_id=creator.id, title="Bundle", posts=[post.id], is_paid=True, price=5
            )
        )

        loaded = content_repo.get_collection(collection.id)

        assert loaded is not None
        assert loaded.posts == [post.id]
        assert loaded.creator is not None

    def test_owned_ids_filter_foreign_rows(self, content_repo, creator, fan, post) -> None:
        foreign = content_repo.save_post(Post(creator_id=fan.id, title="not yours"))

        owned = content_repo.owned_post_ids(creator.id, [post.id, foreign.id])

        assert owned == {post.id}

    def test_delete_post_keeps_facts(self, content_repo, commerce_repo, fan, post) -> None:
        commerce_repo.save_purchase(
            Purchase(
                user_id=fan.id,
                creator_id=post.creator_id,
                target_id=post.id,
                target_type=TargetType.POST,
                amount=10,
                status="completed",
            )
        )

        assert content_repo.delete_post(post.id) is True
        assert content_repo.get_post(post.id) is None
        assert len(commerce_repo.list_completed_purchases(fan.id)) == 1


class TestCommerceRepo:
    def _purchase(self, fan, post) -> Purchase:
        return Purchase(
            user_id=fan.id,
            creator_id=post.creator_id,
            target_id=post.id,
            target_type=TargetType.POST,
            amount=post.price,
            status="completed",
        )

    def test_second_completed_purchase_conflicts(self, commerce_repo, fan, post) -> None:
        commerce_repo.save_purchase(self._purchase(fan, post))

        with pytest.raises(ConflictError):
            commerce_repo.save_purchase(self._purchase(fan, post))

    def test_completed_purchase_keys_by_type(self, commerce_repo, fan, post) -> None:
        commerce_repo.save_purchase(self._purchase(fan, post))
        commerce_repo.save_purchase(
            Purchase(
                user_id=fan.id,
                creator_id=post.creator_id,
                target_id=post.id,
                target_type=TargetType.POST,
                status="pending",
            )
        )

        keys = commerce_repo.completed_purchase_keys(fan.id, [post.id])

        assert keys == {(TargetType.POST, post.id)}

    def test_one_active_subscription_per_pair(self, commerce_repo, creator, fan) -> None:
        tier = commerce_repo.save_tier(Tier(creator_id=creator.id, name="Gold", price=5))
        end = utcnow() + timedelta(days=30)
        commerce_repo.save_subscription(
            Subscription(
                subscriber_id=fan.id, creator_id=creator.id, tier_id=tier.id, current_period_end=end
            )
        )

        with pytest.raises(ConflictError):
            commerce_repo.save_subscription(
                Subscription(
                    subscriber_id=fan.id,
                    creator_id=creator.id,
                    tier_id=tier.id,
                    current_period_end=end,
                )
            )

    def test_expire_lapsed_only_touches_past_periods(self, commerce_repo, creator, fan, user_repo):
        other = user_repo.save(User(username="kim", email="kim@example.com"))
        tier = commerce_repo.save_tier(Tier(creator_id=creator.id, name="Gold", price=5))
        now = utcnow()
        lapsed = commerce_repo.save_subscription(
            Subscription(
                subscriber_id=fan.id,
                creator_id=creator.id,
                tier_id=tier.id,
                current_period_end=now - timedelta(days=1),
            )
        )
        current = commerce_repo.save_subscription(
            Subscription(
                subscriber_id=other.id,
                creator_id=creator.id,
                tier_id=tier.id,
                current_period_end=now + timedelta(days=1),
            )
        )

        assert commerce_repo.expire_lapsed(now) == 1
        assert commerce_repo.get_active_subscription(fan.id, creator.id) is None
        assert commerce_repo.get_active_subscription(other.id, creator.id).id == current.id
        assert lapsed.id != current.id

    def test_tier_listing_hides_inactive(self, commerce_repo, creator) -> None:
        commerce_repo.save_tier(Tier(creator_id=creator.id, name="Gold", price=10))
        commerce_repo.save_tier(Tier(creator_id=creator.id, name="Old", price=1, is_active=False))

        assert [t.name for t in commerce_repo.list_tiers(creator.id)] == ["Gold"]
        assert len(commerce_repo.list_tiers(creator.id, include_inactive=True)) == 2


class SnapshotInteractionRepo(SQLiteInteractionRepo):
    """Looks at the database from a second connection just before the counter moves."""

    snapshots: list[tuple[int, int]]

    def _bump_likes(self, conn, target_type, target_id, delta):
        other = sqlite3.connect(self.db_path)
        try:
            likes = other.execute(
                "SELECT COUNT(*) FROM likes WHERE target_id = ?", (str(target_id),)
            ).fetchone()[0]
            counter = other.execute(
                "SELECT likes_count FROM posts WHERE id = ?", (str(target_id),)
            ).fetchone()[0]
        finally:
            other.close()
        self.snapshots.append((likes, counter))
        return super()._bump_likes(conn, target_type, target_id, delta)


class TestInteractionRepo:
    def test_duplicate_like_conflicts(self, interaction_repo, fan, post) -> None:
        interaction_repo.add_like(fan.id, TargetType.POST, post.id)

        with pytest.raises(ConflictError):
            interaction_repo.add_like(fan.id, TargetType.POST, post.id)

    def test_like_on_post_and_comment_with_same_id_are_distinct(
        self, interaction_repo, fan, post
    ) -> None:
        interaction_repo.add_like(fan.id, TargetType.POST, post.id)
        interaction_repo.add_like(fan.id, TargetType.COMMENT, post.id)

        assert interaction_repo.liked_target_ids(fan.id, TargetType.POST, [post.id]) == {post.id}
        assert interaction_repo.has_like(fan.id, TargetType.COMMENT, post.id)

    def test_like_and_increment_commit_together(self, db_path, fan, post) -> None:
        repo = SnapshotInteractionRepo(db_path)
        repo.snapshots = []

        count = repo.add_like_counted(fan.id, TargetType.POST, post.id)

        # Another connection never sees the like without its increment
        assert repo.snapshots == [(0, 0)]
        assert count == 1
        assert repo.has_like(fan.id, TargetType.POST, post.id)
        assert repo.get_likes_count(TargetType.POST, post.id) == 1

    def test_duplicate_counted_like_leaves_counter_alone(self, interaction_repo, fan, post):
        interaction_repo.add_like_counted(fan.id, TargetType.POST, post.id)

        with pytest.raises(ConflictError):
            interaction_repo.add_like_counted(fan.id, TargetType.POST, post.id)

        assert interaction_repo.get_likes_count(TargetType.POST, post.id) == 1

    def test_adjust_likes_never_goes_negative(self, interaction_repo, post) -> None:
        assert interaction_repo.adjust_likes(TargetType.POST, post.id, -1) == 0
        assert interaction_repo.adjust_likes(TargetType.POST, post.id, 1) == 1

    def test_adjust_likes_on_missing_row_is_none(self, interaction_repo) -> None:
        assert interaction_repo.adjust_likes(TargetType.POST, uuid4(), 1) is None

    def test_follow_row_is_both_sides(self, interaction_repo, creator, fan) -> None:
        interaction_repo.add_follow(fan.id, creator.id)

        assert [u.id for u in interaction_repo.list_following(fan.id)] == [creator.id]
        assert [u.id for u in interaction_repo.list_followers(creator.id)] == [fan.id]

        assert interaction_repo.remove_follow(fan.id, creator.id) is True
        assert interaction_repo.list_followers(creator.id) == []

    def test_saves(self, interaction_repo, fan, post) -> None:
        interaction_repo.add_save(fan.id, post.id)

        assert interaction_repo.saved_post_ids(fan.id, [post.id]) == {post.id}
        assert interaction_repo.list_saved_post_ids(fan.id) == [post.id]
        with pytest.raises(ConflictError):
            interaction_repo.add_save(fan.id, post.id)


class TestCommentRepo:
    def test_delete_with_three_replies_decrements_by_four(
        self, comment_repo, content_repo, creator, fan, post
    ) -> None:
        author = Viewer(id=fan.id)
        other = Viewer(id=creator.id)
        root = add_comment(AddCommentInput(author, post.id, "root"), repo=comment_repo)
        reply = add_comment(AddCommentInput(other, post.id, "r1", root.id), repo=comment_repo)
        add_comment(AddCommentInput(other, post.id, "r2", root.id), repo=comment_repo)
        add_comment(AddCommentInput(author, post.id, "nested", reply.id), repo=comment_repo)
        add_comment(AddCommentInput(other, post.id, "unrelated"), repo=comment_repo)

        assert content_repo.get_post(post.id).comments_count == 5

        result = delete_comment(DeleteCommentInput(author, root.id), repo=comment_repo)

        assert result.total_deleted == 4
        assert result.comments_count == 1
        assert content_repo.get_post(post.id).comments_count == 1
        remaining, total = comment_repo.list_for_post(post.id, limit=10, offset=0)
        assert total == 1
        assert remaining[0].content == "unrelated"

    def test_listing_inlines_author(self, comment_repo, fan, post) -> None:
        comment_repo.save(Comment(post_id=post.id, user_id=fan.id, content="hi"))

        comments, total = comment_repo.list_for_post(post.id, limit=10, offset=0)

        assert total == 1
        assert comments[0].author is not None
        assert comments[0].author.username == "sam"


class TestCounterReconciliation:
    def test_drifted_counters_are_rewritten(
        self, counter_repo, interaction_repo, comment_repo, content_repo, fan, post
    ) -> None:
        interaction_repo.add_like(fan.id, TargetType.POST, post.id)
        comment_repo.save(Comment(post_id=post.id, user_id=fan.id, content="hi"))
        # Counters never incremented: simulates a crash between fact and counter writes

        report = reconcile_counters(repo=counter_repo)

        assert report.repaired_rows == 1
        loaded = content_repo.get_post(post.id)
        assert loaded.likes_count == 1
        assert loaded.comments_count == 1

    def test_second_run_finds_nothing(self, counter_repo, interaction_repo, fan, post) -> None:
        interaction_repo.add_like(fan.id, TargetType.POST, post.id)
        reconcile_counters(repo=counter_repo)

        assert reconcile_counters(repo=counter_repo).repairs == []
