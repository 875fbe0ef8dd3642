"""
Seed a local database with a creator, a fan and some monetised content.

Prints access tokens for both users so the API can be exercised by hand.
"""

import logging
import os

from patronage.adapters.clock import SystemClock
from patronage.adapters.sqlite.migrator import SQLiteMigrator
from patronage.adapters.sqlite.repos import (
    SQLiteCommerceRepo,
    SQLiteContentRepo,
    SQLiteUserRepo,
)
from patronage.api.auth_utils import create_access_token
from patronage.components.commerce import CreateTierInput, create_tier
from patronage.components.posts import (
    CreateCollectionInput,
    CreatePostInput,
    create_collection,
    create_post,
)
from patronage.domain.entities import User, Viewer


def seed() -> None:
    data_dir = os.environ.get("PATRONAGE_DATA_DIR", "./data")
    db_path = f"{data_dir}/patronage.db"
    print(f"Seeding to {db_path}")

    SQLiteMigrator(db_path, "migrations").run_migrations()

    users = SQLiteUserRepo(db_path)
    content = SQLiteContentRepo(db_path)
    commerce = SQLiteCommerceRepo(db_path)

    creator = users.save(
        User(username="maya", display_name="Maya Rao", email="maya@example.com", role="creator")
    )
    fan = users.save(User(username="sam", display_name="Sam", email="sam@example.com"))
    creator_viewer = Viewer(id=creator.id, role=creator.role)

    tier = create_tier(
        CreateTierInput(
            viewer=creator_viewer,
            name="Supporter",
            price=199,
            benefits=["Members-only posts", "Monthly Q&A"],
            is_popular=True,
        ),
        repo=commerce,
    )

    free = create_post(
        CreatePostInput(
            viewer=creator_viewer,
            fields={"title": "Welcome", "content": "Everything starts here."},
        ),
        repo=content,
    )
    paid = create_post(
        CreatePostInput(
            viewer=creator_viewer,
            fields={
                "title": "Studio walkthrough",
                "content": "A long look at how the studio is set up, shelf by shelf. " * 5,
                "is_paid": True,
                "price": 49,
            },
        ),
        repo=content,
    )
    create_post(
        CreatePostInput(
            viewer=creator_viewer,
            fields={
                "title": "Members update",
                "content": "Notes for supporters only.",
                "is_members_only": True,
                "allowed_tiers": [tier.id],
            },
        ),
        repo=content,
    )
    create_collection(
        CreateCollectionInput(
            viewer=creator_viewer,
            fields={
                "title": "Starter pack",
                "description": "The first two posts, bundled.",
                "posts": [free.id, paid.id],
                "is_paid": True,
                "price": 79,
            },
        ),
        repo=content,
    )

    now = SystemClock().now_utc()
    for user in (creator, fan):
        token = create_access_token({"sub": str(user.id), "role": user.role}, now_utc=now)
        print(f"{user.username} ({user.role}): {token}")

    print("Seeding complete.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
