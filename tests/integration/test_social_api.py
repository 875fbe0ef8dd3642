"""
Likes, saves, follows and comments through the HTTP surface.
"""

from uuid import UUID, uuid4

import pytest

from patronage.adapters.sqlite.repos import SQLiteInteractionRepo
from patronage.components.interactions import ToggleLikeInput, toggle_like
from patronage.domain.entities import TargetType, Viewer

BASE = "/api/content"


class RacingInteractionRepo(SQLiteInteractionRepo):
    """Reports a like as absent while the row already exists."""

    stale_reads = 0

    def has_like(self, user_id, target_type: TargetType, target_id) -> bool:
        if self.stale_reads:
            self.stale_reads -= 1
            return False
        return super().has_like(user_id, target_type, target_id)


@pytest.fixture
def post(client, auth, creator) -> dict:
    response = client.post(
        f"{BASE}/posts", json={"title": "Hello", "content": "Free for all"}, headers=auth(creator)
    )
    return response.json()["data"]


class TestLikes:
    def test_toggle_twice_restores_state(self, client, auth, fan, post) -> None:
        url = f"{BASE}/posts/{post['id']}/like"

        liked = client.post(url, headers=auth(fan)).json()["data"]
        unliked = client.post(url, headers=auth(fan)).json()["data"]

        assert liked == {"isLiked": True, "likesCount": 1}
        assert unliked == {"isLiked": False, "likesCount": 0}

    def test_feed_reports_viewer_like_state(self, client, auth, fan, creator, post) -> None:
        client.post(f"{BASE}/posts/{post['id']}/like", headers=auth(fan))

        fan_view = client.get(f"{BASE}/feed", headers=auth(fan)).json()["data"]["items"][0]
        creator_view = client.get(f"{BASE}/feed", headers=auth(creator)).json()["data"]["items"][0]

        assert fan_view["isLiked"] is True
        assert fan_view["likesCount"] == 1
        assert creator_view["isLiked"] is False

    def test_like_missing_post_is_404(self, client, auth, fan) -> None:
        assert client.post(f"{BASE}/posts/{uuid4()}/like", headers=auth(fan)).status_code == 404

    def test_racing_like_increments_once(self, fan, post, db_path, content_repo) -> None:
        store = RacingInteractionRepo(db_path)
        viewer = Viewer(id=fan.id)
        inp = ToggleLikeInput(viewer=viewer, target_id=UUID(post["id"]))

        first = toggle_like(inp, store=store)
        # Second request passed the existence check before the first committed
        store.stale_reads = 1
        second = toggle_like(inp, store=store)

        assert first.active is True
        assert second.active is True
        assert second.count == 1
        assert content_repo.get_post(post["id"]).likes_count == 1

    def test_comment_like(self, client, auth, fan, post) -> None:
        comment = client.post(
            f"{BASE}/posts/{post['id']}/comments", json={"content": "nice"}, headers=auth(fan)
        ).json()["data"]

        data = client.post(f"{BASE}/comments/{comment['id']}/like", headers=auth(fan)).json()[
            "data"
        ]

        assert data == {"isLiked": True, "likesCount": 1}


class TestSaves:
    def test_save_toggle_and_flag(self, client, auth, fan, post) -> None:
        saved = client.post(f"{BASE}/posts/{post['id']}/save", headers=auth(fan)).json()
        item = client.get(f"{BASE}/feed", headers=auth(fan)).json()["data"]["items"][0]
        removed = client.post(f"{BASE}/posts/{post['id']}/save", headers=auth(fan)).json()

        assert saved["data"] == {"isSaved": True}
        assert item["isSaved"] is True
        assert removed["data"] == {"isSaved": False}


class TestFollows:
    def test_follow_both_sides(self, client, auth, fan, creator) -> None:
        followed = client.post(f"{BASE}/users/{creator.id}/follow", headers=auth(fan)).json()

        following = client.get(f"{BASE}/following", headers=auth(fan)).json()["data"]
        followers = client.get(f"{BASE}/users/{creator.id}/followers").json()["data"]

        assert followed["data"] == {"isFollowed": True}
        assert [u["username"] for u in following] == ["maya"]
        assert [u["username"] for u in followers] == ["sam"]

        unfollowed = client.post(f"{BASE}/users/{creator.id}/follow", headers=auth(fan)).json()
        assert unfollowed["data"] == {"isFollowed": False}
        assert client.get(f"{BASE}/users/{creator.id}/followers").json()["data"] == []

    def test_cannot_follow_self(self, client, auth, fan) -> None:
        assert client.post(f"{BASE}/users/{fan.id}/follow", headers=auth(fan)).status_code == 400


class TestComments:
    def test_thread_delete_cascades(self, client, auth, fan, creator, post) -> None:
        url = f"{BASE}/posts/{post['id']}/comments"
        root = client.post(url, json={"content": "root"}, headers=auth(fan)).json()["data"]
        for text in ("a", "b", "c"):
            client.post(
                url, json={"content": text, "parentCommentId": root["id"]}, headers=auth(creator)
            )

        listing = client.get(url).json()["data"]
        assert listing["total"] == 4

        forbidden = client.delete(f"{BASE}/comments/{root['id']}", headers=auth(creator))
        assert forbidden.status_code == 403

        deleted = client.delete(f"{BASE}/comments/{root['id']}", headers=auth(fan)).json()["data"]
        assert deleted["deletedCount"] == 4
        assert deleted["commentsCount"] == 0

        detail = client.get(f"{BASE}/posts/detail/{post['id']}").json()["data"]
        assert detail["commentsCount"] == 0

    def test_empty_comment_rejected(self, client, auth, fan, post) -> None:
        response = client.post(
            f"{BASE}/posts/{post['id']}/comments", json={"content": "   "}, headers=auth(fan)
        )

        assert response.status_code == 400

    def test_listing_is_paginated_newest_first(self, client, auth, fan, post) -> None:
        url = f"{BASE}/posts/{post['id']}/comments"
        for i in range(3):
            client.post(url, json={"content": f"c{i}"}, headers=auth(fan))

        page = client.get(url, params={"limit": 2}).json()["data"]

        assert page["hasMore"] is True
        assert [c["content"] for c in page["comments"]] == ["c2", "c1"]
        assert page["comments"][0]["author"]["username"] == "sam"
