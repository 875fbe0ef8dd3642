"""
Content routes end to end: posts, collections, feed and locked previews.
"""

from uuid import uuid4

import pytest

from patronage.domain.entities import User

BASE = "/api/content"
LONG_BODY = "The whole walkthrough, shelf by shelf. " * 10


@pytest.fixture
def paid_image_post(client, auth, creator) -> dict:
    response = client.post(
        f"{BASE}/posts",
        json={
            "title": "Studio tour",
            "content": LONG_BODY,
            "type": "image",
            "media": [{"publicId": "m1", "secureUrl": "https://cdn/m1.jpg", "type": "image"}],
            "coverImage": {"publicId": "c1", "secureUrl": "https://cdn/c1.jpg"},
            "isPaid": True,
            "price": 10,
        },
        headers=auth(creator),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok", "service": "api"}


class TestAuth:
    def test_writes_need_a_viewer(self, client) -> None:
        response = client.post(f"{BASE}/posts", json={"title": "x"})

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["error"] == "unauthorized"

    def test_bad_token_is_anonymous(self, client) -> None:
        response = client.post(
            f"{BASE}/posts", json={"title": "x"}, headers={"Authorization": "Bearer junk"}
        )

        assert response.status_code == 401

    def test_cookie_token_is_accepted(self, client, auth, creator) -> None:
        token = auth(creator)["Authorization"].removeprefix("Bearer ")
        client.cookies.set("accessToken", token)

        response = client.get(f"{BASE}/posts/me")

        assert response.status_code == 200

    def test_anonymous_can_read_feed(self, client) -> None:
        response = client.get(f"{BASE}/feed")

        assert response.status_code == 200
        assert response.json()["data"] == {"items": [], "page": 1, "hasMore": False, "total": 0}


class TestPaidPostScenario:
    def test_locked_then_unlocked_after_purchase(
        self, client, auth, fan, paid_image_post
    ) -> None:
        post_id = paid_image_post["id"]

        locked = client.get(f"{BASE}/posts/detail/{post_id}", headers=auth(fan)).json()["data"]

        assert locked["hasAccess"] is False
        assert locked["isLocked"] is True
        assert locked["coverImage"] is None
        assert locked["media"] == []
        assert locked["pollOptions"] == []
        assert locked["content"] != LONG_BODY
        assert locked["content"].endswith("...")
        assert len(locked["content"]) <= 120 + len("...")
        assert locked["price"] == 10

        bought = client.post(
            f"{BASE}/purchase",
            json={"itemId": post_id, "itemType": "Post"},
            headers=auth(fan),
        )
        assert bought.status_code == 200, bought.text
        assert bought.json()["data"]["status"] == "completed"
        assert bought.json()["data"]["amount"] == 10

        full = client.get(f"{BASE}/posts/detail/{post_id}", headers=auth(fan)).json()["data"]

        assert full["hasAccess"] is True
        assert full["content"] == LONG_BODY
        assert full["media"][0]["secureUrl"] == "https://cdn/m1.jpg"
        assert full["coverImage"]["publicId"] == "c1"

    def test_anonymous_sees_locked_preview(self, client, paid_image_post) -> None:
        data = client.get(f"{BASE}/posts/detail/{paid_image_post['id']}").json()["data"]

        assert data["hasAccess"] is False
        assert data["isLiked"] is False

    def test_owner_always_has_access(self, client, auth, creator, paid_image_post) -> None:
        data = client.get(
            f"{BASE}/posts/detail/{paid_image_post['id']}", headers=auth(creator)
        ).json()["data"]

        assert data["hasAccess"] is True
        assert data["content"] == LONG_BODY

    def test_repeat_purchase_returns_same_fact(self, client, auth, fan, paid_image_post) -> None:
        body = {"itemId": paid_image_post["id"], "itemType": "Post"}

        first = client.post(f"{BASE}/purchase", json=body, headers=auth(fan)).json()["data"]
        second = client.post(f"{BASE}/purchase", json=body, headers=auth(fan)).json()["data"]

        assert first["id"] == second["id"]

    def test_cannot_buy_own_post(self, client, auth, creator, paid_image_post) -> None:
        response = client.post(
            f"{BASE}/purchase",
            json={"itemId": paid_image_post["id"], "itemType": "Post"},
            headers=auth(creator),
        )

        assert response.status_code == 400


class TestPostWrites:
    def test_invalid_price_is_400(self, client, auth, creator) -> None:
        response = client.post(
            f"{BASE}/posts",
            json={"title": "Paid", "isPaid": True, "price": "abc"},
            headers=auth(creator),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_unpaid_price_forced_to_zero(self, client, auth, creator) -> None:
        response = client.post(
            f"{BASE}/posts", json={"title": "Free", "price": 99}, headers=auth(creator)
        )

        assert response.json()["data"]["price"] == 0

    def test_counters_are_not_editable(self, client, auth, creator, paid_image_post) -> None:
        response = client.put(
            f"{BASE}/posts/{paid_image_post['id']}",
            json={"likesCount": 1000},
            headers=auth(creator),
        )

        assert response.status_code == 400

    def test_update_someone_elses_post_is_not_found(
        self, client, auth, fan, paid_image_post
    ) -> None:
        response = client.put(
            f"{BASE}/posts/{paid_image_post['id']}", json={"title": "Mine now"}, headers=auth(fan)
        )

        assert response.status_code == 404

    def test_update_keeps_untouched_fields(self, client, auth, creator, paid_image_post) -> None:
        response = client.put(
            f"{BASE}/posts/{paid_image_post['id']}",
            json={"title": "Renamed"},
            headers=auth(creator),
        )

        data = response.json()["data"]
        assert data["title"] == "Renamed"
        assert data["isPaid"] is True
        assert data["price"] == 10

    def test_delete_then_not_found(self, client, auth, creator, paid_image_post) -> None:
        post_id = paid_image_post["id"]

        assert client.delete(f"{BASE}/posts/{post_id}", headers=auth(creator)).status_code == 200
        assert client.get(f"{BASE}/posts/detail/{post_id}").status_code == 404

    def test_poll_needs_two_options(self, client, auth, creator) -> None:
        response = client.post(
            f"{BASE}/posts",
            json={"title": "Vote", "type": "poll", "pollOptions": ["only one"]},
            headers=auth(creator),
        )

        assert response.status_code == 400

    def test_foreign_tier_rejected(self, client, auth, creator, fan, user_repo) -> None:
        other_creator = user_repo.save(
            User(username="lee", email="lee@example.com", role="creator")
        )
        tier = client.post(
            f"{BASE}/tiers", json={"name": "Gold", "price": 5}, headers=auth(other_creator)
        ).json()["data"]

        response = client.post(
            f"{BASE}/posts",
            json={"title": "Members", "isMembersOnly": True, "allowedTiers": [tier["id"]]},
            headers=auth(creator),
        )

        assert response.status_code == 400


class TestReads:
    def test_drafts_only_visible_to_owner(self, client, auth, creator, fan) -> None:
        draft = client.post(
            f"{BASE}/posts", json={"title": "WIP", "isDraft": True}, headers=auth(creator)
        ).json()["data"]

        url = f"{BASE}/posts/detail/{draft['id']}"
        assert client.get(url, headers=auth(fan)).status_code == 404
        assert client.get(url, headers=auth(creator)).status_code == 200
        assert client.get(f"{BASE}/feed").json()["data"]["total"] == 0

        mine = client.get(f"{BASE}/posts/me", headers=auth(creator)).json()["data"]
        theirs = client.get(f"{BASE}/posts/{creator.id}", headers=auth(fan)).json()["data"]
        assert [p["id"] for p in mine] == [draft["id"]]
        assert theirs == []

    def test_feed_pagination(self, client, auth, creator) -> None:
        for i in range(3):
            client.post(f"{BASE}/posts", json={"title": f"p{i}"}, headers=auth(creator))

        first = client.get(f"{BASE}/feed", params={"page": 1, "limit": 2}).json()["data"]
        second = client.get(f"{BASE}/feed", params={"page": 2, "limit": 2}).json()["data"]

        assert first["total"] == 3
        assert first["hasMore"] is True
        assert len(first["items"]) == 2
        assert second["hasMore"] is False
        assert len(second["items"]) == 1

    def test_unknown_creator_is_404(self, client) -> None:
        assert client.get(f"{BASE}/posts/{uuid4()}").status_code == 404


class TestCollections:
    def test_members_listed_only_with_access(
        self, client, auth, creator, fan, paid_image_post
    ) -> None:
        free = client.post(
            f"{BASE}/posts", json={"title": "Free", "content": "hello"}, headers=auth(creator)
        ).json()["data"]
        collection = client.post(
            f"{BASE}/collections",
            json={
                "title": "Bundle",
                "posts": [free["id"], paid_image_post["id"]],
                "isPaid": True,
                "price": 15,
            },
            headers=auth(creator),
        ).json()["data"]

        locked = client.get(
            f"{BASE}/collections/detail/{collection['id']}", headers=auth(fan)
        ).json()["data"]
        assert locked["collection"]["hasAccess"] is False
        assert locked["collection"]["posts"] == []
        assert locked["items"] == []

        client.post(
            f"{BASE}/purchase",
            json={"itemId": collection["id"], "itemType": "Collection"},
            headers=auth(fan),
        )
        opened = client.get(
            f"{BASE}/collections/detail/{collection['id']}", headers=auth(fan)
        ).json()["data"]

        assert opened["collection"]["hasAccess"] is True
        by_id = {item["id"]: item for item in opened["items"]}
        assert by_id[free["id"]]["hasAccess"] is True
        # Buying the collection does not unlock paid posts inside it
        assert by_id[paid_image_post["id"]]["hasAccess"] is False

    def test_cannot_collect_foreign_posts(self, client, auth, creator, fan) -> None:
        theirs = client.post(f"{BASE}/posts", json={"title": "fan post"}, headers=auth(fan))

        response = client.post(
            f"{BASE}/collections",
            json={"title": "Stolen", "posts": [theirs.json()["data"]["id"]]},
            headers=auth(creator),
        )

        assert response.status_code == 403

    def test_my_and_creator_collections(self, client, auth, creator, fan) -> None:
        client.post(f"{BASE}/collections", json={"title": "Mine"}, headers=auth(creator))

        mine = client.get(f"{BASE}/collections", headers=auth(creator)).json()["data"]
        public = client.get(f"{BASE}/collections/{creator.id}", headers=auth(fan)).json()["data"]

        assert [c["title"] for c in mine] == ["Mine"]
        assert [c["title"] for c in public] == ["Mine"]
