import json
import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from patronage.components.counters.models import StoredCounters
from patronage.domain.entities import (
    Collection,
    Comment,
    ContentItem,
    CreatorSummary,
    Post,
    Purchase,
    Subscription,
    SubscriptionStatus,
    TargetType,
    Tier,
    User,
    utcnow,
)
from patronage.domain.errors import ConflictError, UpstreamFailureError

logger = logging.getLogger(__name__)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _iso(dt: datetime) -> str:
    # Fixed-width UTC strings so SQL text comparison orders like the datetimes
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def _dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


def _placeholders(values: Sequence[Any]) -> str:
    return ",".join("?" for _ in values)


def _ids(values: Sequence[UUID]) -> list[str]:
    return [str(v) for v in dict.fromkeys(values)]


class SQLiteRepo:
    """Base for repositories: one connection per call, errors mapped to domain errors."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.OperationalError as e:
            raise UpstreamFailureError("Database unavailable") from e

        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError(f"Constraint violated: {e}") from e
        except sqlite3.OperationalError as e:
            conn.rollback()
            logger.error("SQLite operational error: %s", e)
            raise UpstreamFailureError("Database unavailable") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


# --- Row mapping ---

CREATOR_COLUMNS = """
    u.username AS creator_username,
    u.display_name AS creator_display_name,
    u.avatar_url AS creator_avatar_url,
    u.role AS creator_role
"""

POST_SELECT = f"SELECT p.*, {CREATOR_COLUMNS} FROM posts p LEFT JOIN users u ON u.id = p.creator_id"

COLLECTION_SELECT = (
    f"SELECT c.*, {CREATOR_COLUMNS} FROM collections c LEFT JOIN users u ON u.id = c.creator_id"
)

COMMENT_SELECT = (
    f"SELECT c.*, {CREATOR_COLUMNS} FROM comments c LEFT JOIN users u ON u.id = c.user_id"
)


def _creator_from_row(row: dict[str, Any], id_column: str) -> CreatorSummary | None:
    if row.get("creator_username") is None:
        return None
    return CreatorSummary(
        id=UUID(row[id_column]),
        username=row["creator_username"],
        display_name=row["creator_display_name"] or "",
        avatar_url=row["creator_avatar_url"],
        role=row["creator_role"],
    )


def _json_or_none(value: str | None) -> Any:
    return json.loads(value) if value else None


def _post_from_row(row: dict[str, Any]) -> Post:
    return Post(
        id=UUID(row["id"]),
        creator_id=UUID(row["creator_id"]),
        creator=_creator_from_row(row, "creator_id"),
        title=row["title"],
        content=row["content"],
        type=row["type"],
        media=json.loads(row["media_json"]),
        attachments=json.loads(row["attachments_json"]),
        cover_image=_json_or_none(row["cover_image_json"]),
        poll_options=json.loads(row["poll_options_json"]),
        is_paid=bool(row["is_paid"]),
        price=row["price"],
        is_members_only=bool(row["is_members_only"]),
        allowed_tiers=json.loads(row["allowed_tiers_json"]),
        likes_count=row["likes_count"],
        comments_count=row["comments_count"],
        is_draft=bool(row["is_draft"]),
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
    )


def _collection_from_row(row: dict[str, Any]) -> Collection:
    return Collection(
        id=UUID(row["id"]),
        creator_id=UUID(row["creator_id"]),
        creator=_creator_from_row(row, "creator_id"),
        title=row["title"],
        description=row["description"],
        cover_image=_json_or_none(row["cover_image_json"]),
        posts=json.loads(row["post_ids_json"]),
        is_paid=bool(row["is_paid"]),
        price=row["price"],
        is_draft=bool(row["is_draft"]),
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
    )


def _comment_from_row(row: dict[str, Any]) -> Comment:
    return Comment(
        id=UUID(row["id"]),
        post_id=UUID(row["post_id"]),
        user_id=UUID(row["user_id"]),
        author=_creator_from_row(row, "user_id"),
        parent_comment_id=UUID(row["parent_comment_id"]) if row["parent_comment_id"] else None,
        content=row["content"],
        likes_count=row["likes_count"],
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
    )


def _tier_from_row(row: dict[str, Any]) -> Tier:
    return Tier(
        id=UUID(row["id"]),
        creator_id=UUID(row["creator_id"]),
        name=row["name"],
        price=row["price"],
        benefits=json.loads(row["benefits_json"]),
        is_popular=bool(row["is_popular"]),
        is_active=bool(row["is_active"]),
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
    )


def _purchase_from_row(row: dict[str, Any]) -> Purchase:
    return Purchase(
        id=UUID(row["id"]),
        user_id=UUID(row["user_id"]),
        creator_id=UUID(row["creator_id"]),
        target_id=UUID(row["target_id"]),
        target_type=TargetType(row["target_type"]),
        amount=row["amount"],
        currency=row["currency"],
        status=row["status"],
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
    )


def _subscription_from_row(row: dict[str, Any]) -> Subscription:
    return Subscription(
        id=UUID(row["id"]),
        subscriber_id=UUID(row["subscriber_id"]),
        creator_id=UUID(row["creator_id"]),
        tier_id=UUID(row["tier_id"]),
        status=row["status"],
        current_period_end=_dt(row["current_period_end"]),
        started_at=_dt(row["started_at"]),
        created_at=_dt(row["created_at"]),
        updated_at=_dt(row["updated_at"]),
    )


def _summary_from_user_row(row: dict[str, Any]) -> CreatorSummary:
    return CreatorSummary(
        id=UUID(row["id"]),
        username=row["username"],
        display_name=row["display_name"] or "",
        avatar_url=row["avatar_url"],
        role=row["role"],
    )


def _dump_list(models: Sequence[Any]) -> str:
    return json.dumps([m.model_dump(mode="json") for m in models])


# --- Users ---


class SQLiteUserRepo(SQLiteRepo):
    def save(self, user: User) -> User:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO users (
                    id, username, display_name, email, role, avatar_url,
                    is_active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    username=excluded.username,
                    display_name=excluded.display_name,
                    email=excluded.email,
                    role=excluded.role,
                    avatar_url=excluded.avatar_url,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at
                """,
                (
                    str(user.id),
                    user.username,
                    user.display_name,
                    user.email,
                    user.role,
                    user.avatar_url,
                    int(user.is_active),
                    _iso(user.created_at),
                    _iso(user.updated_at),
                ),
            )
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        if not row:
            return None
        return User(
            id=UUID(row["id"]),
            username=row["username"],
            display_name=row["display_name"],
            email=row["email"],
            role=row["role"],
            avatar_url=row["avatar_url"],
            is_active=bool(row["is_active"]),
            created_at=_dt(row["created_at"]),
            updated_at=_dt(row["updated_at"]),
        )

    def exists(self, user_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM users WHERE id = ? AND is_active = 1", (str(user_id),)
            ).fetchone()
        return row is not None


# --- Content ---


class SQLiteContentRepo(SQLiteRepo):
    """Posts and collections, read with the creator summary joined in."""

    # Reads

    def list_feed(self, limit: int, offset: int) -> tuple[list[Post], int]:
        with self._session() as conn:
            total = conn.execute(
                "SELECT COUNT(*) AS n FROM posts WHERE is_draft = 0"
            ).fetchone()["n"]
            rows = conn.execute(
                f"{POST_SELECT} WHERE p.is_draft = 0 "
                "ORDER BY p.created_at DESC, p.id DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        return [_post_from_row(r) for r in rows], total

    def get_post(self, post_id: UUID) -> Post | None:
        with self._session() as conn:
            row = conn.execute(f"{POST_SELECT} WHERE p.id = ?", (str(post_id),)).fetchone()
        return _post_from_row(row) if row else None

    def get_posts_by_ids(self, post_ids: Sequence[UUID]) -> list[Post]:
        ids = _ids(post_ids)
        if not ids:
            return []
        with self._session() as conn:
            rows = conn.execute(
                f"{POST_SELECT} WHERE p.id IN ({_placeholders(ids)})", ids
            ).fetchall()
        return [_post_from_row(r) for r in rows]

    def list_creator_posts(self, creator_id: UUID, include_drafts: bool = False) -> list[Post]:
        sql = f"{POST_SELECT} WHERE p.creator_id = ?"
        if not include_drafts:
            sql += " AND p.is_draft = 0"
        with self._session() as conn:
            rows = conn.execute(
                sql + " ORDER BY p.created_at DESC", (str(creator_id),)
            ).fetchall()
        return [_post_from_row(r) for r in rows]

    def get_collection(self, collection_id: UUID) -> Collection | None:
        with self._session() as conn:
            row = conn.execute(
                f"{COLLECTION_SELECT} WHERE c.id = ?", (str(collection_id),)
            ).fetchone()
        return _collection_from_row(row) if row else None

    def get_collections_by_ids(self, collection_ids: Sequence[UUID]) -> list[Collection]:
        ids = _ids(collection_ids)
        if not ids:
            return []
        with self._session() as conn:
            rows = conn.execute(
                f"{COLLECTION_SELECT} WHERE c.id IN ({_placeholders(ids)})", ids
            ).fetchall()
        return [_collection_from_row(r) for r in rows]

    def list_creator_collections(
        self, creator_id: UUID, include_drafts: bool = False
    ) -> list[Collection]:
        sql = f"{COLLECTION_SELECT} WHERE c.creator_id = ?"
        if not include_drafts:
            sql += " AND c.is_draft = 0"
        with self._session() as conn:
            rows = conn.execute(
                sql + " ORDER BY c.created_at DESC", (str(creator_id),)
            ).fetchall()
        return [_collection_from_row(r) for r in rows]

    def user_exists(self, user_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM users WHERE id = ? AND is_active = 1", (str(user_id),)
            ).fetchone()
        return row is not None

    def find_content(self, target_type: TargetType, target_id: UUID) -> ContentItem | None:
        if target_type is TargetType.POST:
            return self.get_post(target_id)
        if target_type is TargetType.COLLECTION:
            return self.get_collection(target_id)
        return None

    # Writes

    def save_post(self, post: Post) -> Post:
        with self._session() as conn:
            # Counters are inserted once and never overwritten by an edit
            conn.execute(
                """
                INSERT INTO posts (
                    id, creator_id, title, content, type, media_json, attachments_json,
                    cover_image_json, poll_options_json, is_paid, price, is_members_only,
                    allowed_tiers_json, likes_count, comments_count, is_draft,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    content=excluded.content,
                    type=excluded.type,
                    media_json=excluded.media_json,
                    attachments_json=excluded.attachments_json,
                    cover_image_json=excluded.cover_image_json,
                    poll_options_json=excluded.poll_options_json,
                    is_paid=excluded.is_paid,
                    price=excluded.price,
                    is_members_only=excluded.is_members_only,
                    allowed_tiers_json=excluded.allowed_tiers_json,
                    is_draft=excluded.is_draft,
                    updated_at=excluded.updated_at
                """,
                (
                    str(post.id),
                    str(post.creator_id),
                    post.title,
                    post.content,
                    post.type,
                    _dump_list(post.media),
                    _dump_list(post.attachments),
                    post.cover_image.model_dump_json() if post.cover_image else None,
                    _dump_list(post.poll_options),
                    int(post.is_paid),
                    post.price,
                    int(post.is_members_only),
                    json.dumps([str(t) for t in post.allowed_tiers]),
                    post.likes_count,
                    post.comments_count,
                    int(post.is_draft),
                    _iso(post.created_at),
                    _iso(post.updated_at),
                ),
            )
        saved = self.get_post(post.id)
        return saved or post

    def delete_post(self, post_id: UUID) -> bool:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))
        return cur.rowcount > 0

    def save_collection(self, collection: Collection) -> Collection:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO collections (
                    id, creator_id, title, description, cover_image_json, post_ids_json,
                    is_paid, price, is_draft, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    description=excluded.description,
                    cover_image_json=excluded.cover_image_json,
                    post_ids_json=excluded.post_ids_json,
                    is_paid=excluded.is_paid,
                    price=excluded.price,
                    is_draft=excluded.is_draft,
                    updated_at=excluded.updated_at
                """,
                (
                    str(collection.id),
                    str(collection.creator_id),
                    collection.title,
                    collection.description,
                    collection.cover_image.model_dump_json() if collection.cover_image else None,
                    json.dumps([str(p) for p in collection.posts]),
                    int(collection.is_paid),
                    collection.price,
                    int(collection.is_draft),
                    _iso(collection.created_at),
                    _iso(collection.updated_at),
                ),
            )
        saved = self.get_collection(collection.id)
        return saved or collection

    def delete_collection(self, collection_id: UUID) -> bool:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM collections WHERE id = ?", (str(collection_id),))
        return cur.rowcount > 0

    def owned_post_ids(self, creator_id: UUID, post_ids: Sequence[UUID]) -> set[UUID]:
        ids = _ids(post_ids)
        if not ids:
            return set()
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT id FROM posts WHERE creator_id = ? AND id IN ({_placeholders(ids)})",
                [str(creator_id), *ids],
            ).fetchall()
        return {UUID(r["id"]) for r in rows}

    def owned_tier_ids(self, creator_id: UUID, tier_ids: Sequence[UUID]) -> set[UUID]:
        ids = _ids(tier_ids)
        if not ids:
            return set()
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT id FROM tiers WHERE creator_id = ? AND id IN ({_placeholders(ids)})",
                [str(creator_id), *ids],
            ).fetchall()
        return {UUID(r["id"]) for r in rows}


# --- Commerce (purchases, subscriptions, tiers) ---


class SQLiteCommerceRepo(SQLiteRepo):
    """Purchase/subscription facts and tiers; also the entitlement query surface."""

    def __init__(self, db_path: str):
        super().__init__(db_path)
        self._content = SQLiteContentRepo(db_path)

    # Entitlement queries

    def completed_purchase_keys(
        self, user_id: UUID, target_ids: Sequence[UUID]
    ) -> set[tuple[TargetType, UUID]]:
        ids = _ids(target_ids)
        if not ids:
            return set()
        with self._session() as conn:
            rows = conn.execute(
                f"""
                SELECT target_type, target_id FROM purchases
                WHERE user_id = ? AND status = 'completed'
                  AND target_id IN ({_placeholders(ids)})
                """,
                [str(user_id), *ids],
            ).fetchall()
        return {(TargetType(r["target_type"]), UUID(r["target_id"])) for r in rows}

    def subscriptions_for(
        self, subscriber_id: UUID, creator_ids: Sequence[UUID]
    ) -> list[Subscription]:
        ids = _ids(creator_ids)
        if not ids:
            return []
        with self._session() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM subscriptions
                WHERE subscriber_id = ? AND status = 'active'
                  AND creator_id IN ({_placeholders(ids)})
                """,
                [str(subscriber_id), *ids],
            ).fetchall()
        return [_subscription_from_row(r) for r in rows]

    # Purchases

    def find_content(self, target_type: TargetType, target_id: UUID) -> ContentItem | None:
        return self._content.find_content(target_type, target_id)

    def find_completed_purchase(
        self, user_id: UUID, target_type: TargetType, target_id: UUID
    ) -> Purchase | None:
        with self._session() as conn:
            row = conn.execute(
                """
                SELECT * FROM purchases
                WHERE user_id = ? AND target_type = ? AND target_id = ? AND status = 'completed'
                """,
                (str(user_id), target_type.value, str(target_id)),
            ).fetchone()
        return _purchase_from_row(row) if row else None

    def save_purchase(self, purchase: Purchase) -> Purchase:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO purchases (
                    id, user_id, creator_id, target_id, target_type, amount, currency,
                    status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(purchase.id),
                    str(purchase.user_id),
                    str(purchase.creator_id),
                    str(purchase.target_id),
                    purchase.target_type.value,
                    purchase.amount,
                    purchase.currency,
                    purchase.status,
                    _iso(purchase.created_at),
                    _iso(purchase.updated_at),
                ),
            )
        return purchase

    def list_completed_purchases(self, user_id: UUID) -> list[Purchase]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM purchases WHERE user_id = ? AND status = 'completed'
                ORDER BY created_at DESC
                """,
                (str(user_id),),
            ).fetchall()
        return [_purchase_from_row(r) for r in rows]

    # Subscriptions

    def get_active_subscription(
        self, subscriber_id: UUID, creator_id: UUID
    ) -> Subscription | None:
        with self._session() as conn:
            row = conn.execute(
                """
                SELECT * FROM subscriptions
                WHERE subscriber_id = ? AND creator_id = ? AND status = 'active'
                """,
                (str(subscriber_id), str(creator_id)),
            ).fetchone()
        return _subscription_from_row(row) if row else None

    def save_subscription(self, subscription: Subscription) -> Subscription:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO subscriptions (
                    id, subscriber_id, creator_id, tier_id, status, current_period_end,
                    started_at, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(subscription.id),
                    str(subscription.subscriber_id),
                    str(subscription.creator_id),
                    str(subscription.tier_id),
                    subscription.status,
                    _iso(subscription.current_period_end),
                    _iso(subscription.started_at),
                    _iso(subscription.created_at),
                    _iso(subscription.updated_at),
                ),
            )
        return subscription

    def set_subscription_status(
        self, subscription_id: UUID, status: SubscriptionStatus
    ) -> Subscription | None:
        with self._session() as conn:
            conn.execute(
                "UPDATE subscriptions SET status = ?, updated_at = ? WHERE id = ?",
                (status, _iso(utcnow()), str(subscription_id)),
            )
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE id = ?", (str(subscription_id),)
            ).fetchone()
        return _subscription_from_row(row) if row else None

    def list_active_subscriptions(self, subscriber_id: UUID) -> list[Subscription]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM subscriptions WHERE subscriber_id = ? AND status = 'active'
                ORDER BY started_at DESC
                """,
                (str(subscriber_id),),
            ).fetchall()
        return [_subscription_from_row(r) for r in rows]

    def expire_lapsed(self, now: datetime) -> int:
        with self._session() as conn:
            cur = conn.execute(
                """
                UPDATE subscriptions SET status = 'expired', updated_at = ?
                WHERE status = 'active' AND current_period_end <= ?
                """,
                (_iso(now), _iso(now)),
            )
        return cur.rowcount

    # Tiers

    def user_exists(self, user_id: UUID) -> bool:
        return self._content.user_exists(user_id)

    def get_tier(self, tier_id: UUID) -> Tier | None:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM tiers WHERE id = ?", (str(tier_id),)).fetchone()
        return _tier_from_row(row) if row else None

    def list_tiers(self, creator_id: UUID, include_inactive: bool = False) -> list[Tier]:
        sql = "SELECT * FROM tiers WHERE creator_id = ?"
        if not include_inactive:
            sql += " AND is_active = 1"
        with self._session() as conn:
            rows = conn.execute(sql + " ORDER BY price ASC", (str(creator_id),)).fetchall()
        return [_tier_from_row(r) for r in rows]

    def save_tier(self, tier: Tier) -> Tier:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO tiers (
                    id, creator_id, name, price, benefits_json, is_popular, is_active,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    price=excluded.price,
                    benefits_json=excluded.benefits_json,
                    is_popular=excluded.is_popular,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at
                """,
                (
                    str(tier.id),
                    str(tier.creator_id),
                    tier.name,
                    tier.price,
                    json.dumps(tier.benefits),
                    int(tier.is_popular),
                    int(tier.is_active),
                    _iso(tier.created_at),
                    _iso(tier.updated_at),
                ),
            )
        return tier

    def delete_tier(self, tier_id: UUID) -> bool:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM tiers WHERE id = ?", (str(tier_id),))
        return cur.rowcount > 0

    def count_active_subscriptions(self, tier_id: UUID) -> int:
        with self._session() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM subscriptions WHERE tier_id = ? AND status = 'active'",
                (str(tier_id),),
            ).fetchone()
        return row["n"]


# --- Interactions ---

# Tables holding a likes_count for each likeable target type
LIKE_COUNTER_TABLES: dict[TargetType, str] = {
    TargetType.POST: "posts",
    TargetType.COMMENT: "comments",
}


class SQLiteInteractionRepo(SQLiteRepo):
    """Like, save and follow facts. Uniqueness is enforced by the schema."""

    def liked_target_ids(
        self, user_id: UUID, target_type: TargetType, target_ids: Sequence[UUID]
    ) -> set[UUID]:
        ids = _ids(target_ids)
        if not ids:
            return set()
        with self._session() as conn:
            rows = conn.execute(
                f"""
                SELECT target_id FROM likes
                WHERE user_id = ? AND target_type = ? AND target_id IN ({_placeholders(ids)})
                """,
                [str(user_id), target_type.value, *ids],
            ).fetchall()
        return {UUID(r["target_id"]) for r in rows}

    def saved_post_ids(self, user_id: UUID, post_ids: Sequence[UUID]) -> set[UUID]:
        ids = _ids(post_ids)
        if not ids:
            return set()
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT post_id FROM saves WHERE user_id = ? AND post_id IN ({_placeholders(ids)})",
                [str(user_id), *ids],
            ).fetchall()
        return {UUID(r["post_id"]) for r in rows}

    # Likes

    def target_exists(self, target_type: TargetType, target_id: UUID) -> bool:
        table = LIKE_COUNTER_TABLES.get(target_type)
        if table is None:
            return False
        with self._session() as conn:
            row = conn.execute(
                f"SELECT 1 AS found FROM {table} WHERE id = ?", (str(target_id),)
            ).fetchone()
        return row is not None

    def has_like(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM likes WHERE user_id = ? AND target_type = ? AND target_id = ?",
                (str(user_id), target_type.value, str(target_id)),
            ).fetchone()
        return row is not None

    def add_like(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> None:
        """Insert the like fact alone; the counter is left to the caller."""
        with self._session() as conn:
            self._insert_like(conn, user_id, target_type, target_id)

    def remove_like(self, user_id: UUID, target_type: TargetType, target_id: UUID) -> bool:
        with self._session() as conn:
            cur = conn.execute(
                "DELETE FROM likes WHERE user_id = ? AND target_type = ? AND target_id = ?",
                (str(user_id), target_type.value, str(target_id)),
            )
        return cur.rowcount > 0

    def add_like_counted(
        self, user_id: UUID, target_type: TargetType, target_id: UUID
    ) -> int | None:
        """Insert the like and bump the counter in one transaction."""
        with self._session() as conn:
            self._insert_like(conn, user_id, target_type, target_id)
            return self._bump_likes(conn, target_type, target_id, 1)

    def adjust_likes(self, target_type: TargetType, target_id: UUID, delta: int) -> int | None:
        with self._session() as conn:
            return self._bump_likes(conn, target_type, target_id, delta)

    def _insert_like(
        self, conn: sqlite3.Connection, user_id: UUID, target_type: TargetType, target_id: UUID
    ) -> None:
        conn.execute(
            """
            INSERT INTO likes (id, user_id, target_id, target_type, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (str(uuid4()), str(user_id), str(target_id), target_type.value, _iso(utcnow())),
        )

    def _bump_likes(
        self, conn: sqlite3.Connection, target_type: TargetType, target_id: UUID, delta: int
    ) -> int | None:
        table = LIKE_COUNTER_TABLES[target_type]
        conn.execute(
            f"UPDATE {table} SET likes_count = MAX(likes_count + ?, 0) WHERE id = ?",
            (delta, str(target_id)),
        )
        # Read back inside the same write transaction
        row = conn.execute(
            f"SELECT likes_count FROM {table} WHERE id = ?", (str(target_id),)
        ).fetchone()
        return row["likes_count"] if row else None

    def get_likes_count(self, target_type: TargetType, target_id: UUID) -> int | None:
        table = LIKE_COUNTER_TABLES[target_type]
        with self._session() as conn:
            row = conn.execute(
                f"SELECT likes_count FROM {table} WHERE id = ?", (str(target_id),)
            ).fetchone()
        return row["likes_count"] if row else None

    # Saves

    def has_save(self, user_id: UUID, post_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM saves WHERE user_id = ? AND post_id = ?",
                (str(user_id), str(post_id)),
            ).fetchone()
        return row is not None

    def add_save(self, user_id: UUID, post_id: UUID) -> None:
        with self._session() as conn:
            conn.execute(
                "INSERT INTO saves (id, user_id, post_id, created_at) VALUES (?, ?, ?, ?)",
                (str(uuid4()), str(user_id), str(post_id), _iso(utcnow())),
            )

    def remove_save(self, user_id: UUID, post_id: UUID) -> bool:
        with self._session() as conn:
            cur = conn.execute(
                "DELETE FROM saves WHERE user_id = ? AND post_id = ?",
                (str(user_id), str(post_id)),
            )
        return cur.rowcount > 0

    def list_saved_post_ids(self, user_id: UUID) -> list[UUID]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT post_id FROM saves WHERE user_id = ? ORDER BY created_at DESC",
                (str(user_id),),
            ).fetchall()
        return [UUID(r["post_id"]) for r in rows]

    # Follows

    def user_exists(self, user_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM users WHERE id = ? AND is_active = 1", (str(user_id),)
            ).fetchone()
        return row is not None

    def is_following(self, follower_id: UUID, followee_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM follows WHERE follower_id = ? AND followee_id = ?",
                (str(follower_id), str(followee_id)),
            ).fetchone()
        return row is not None

    def add_follow(self, follower_id: UUID, followee_id: UUID) -> None:
        # One row is both the follower's "following" entry and the followee's
        # "followers" entry, so both sides change in a single write.
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO follows (id, follower_id, followee_id, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (str(uuid4()), str(follower_id), str(followee_id), _iso(utcnow())),
            )

    def remove_follow(self, follower_id: UUID, followee_id: UUID) -> bool:
        with self._session() as conn:
            cur = conn.execute(
                "DELETE FROM follows WHERE follower_id = ? AND followee_id = ?",
                (str(follower_id), str(followee_id)),
            )
        return cur.rowcount > 0

    def list_following(self, follower_id: UUID) -> list[CreatorSummary]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT u.* FROM follows f JOIN users u ON u.id = f.followee_id
                WHERE f.follower_id = ? ORDER BY f.created_at DESC
                """,
                (str(follower_id),),
            ).fetchall()
        return [_summary_from_user_row(r) for r in rows]

    def list_followers(self, followee_id: UUID) -> list[CreatorSummary]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT u.* FROM follows f JOIN users u ON u.id = f.follower_id
                WHERE f.followee_id = ? ORDER BY f.created_at DESC
                """,
                (str(followee_id),),
            ).fetchall()
        return [_summary_from_user_row(r) for r in rows]


# --- Comments ---


class SQLiteCommentRepo(SQLiteRepo):
    def post_exists(self, post_id: UUID) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT 1 AS found FROM posts WHERE id = ?", (str(post_id),)
            ).fetchone()
        return row is not None

    def get_by_id(self, comment_id: UUID) -> Comment | None:
        with self._session() as conn:
            row = conn.execute(
                f"{COMMENT_SELECT} WHERE c.id = ?", (str(comment_id),)
            ).fetchone()
        return _comment_from_row(row) if row else None

    def save(self, comment: Comment) -> Comment:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO comments (
                    id, post_id, user_id, parent_comment_id, content, likes_count,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(comment.id),
                    str(comment.post_id),
                    str(comment.user_id),
                    str(comment.parent_comment_id) if comment.parent_comment_id else None,
                    comment.content,
                    comment.likes_count,
                    _iso(comment.created_at),
                    _iso(comment.updated_at),
                ),
            )
        return comment

    def list_for_post(
        self, post_id: UUID, limit: int, offset: int
    ) -> tuple[list[Comment], int]:
        with self._session() as conn:
            total = conn.execute(
                "SELECT COUNT(*) AS n FROM comments WHERE post_id = ?", (str(post_id),)
            ).fetchone()["n"]
            rows = conn.execute(
                f"""
                {COMMENT_SELECT} WHERE c.post_id = ?
                ORDER BY c.created_at DESC, c.id DESC LIMIT ? OFFSET ?
                """,
                (str(post_id), limit, offset),
            ).fetchall()
        return [_comment_from_row(r) for r in rows], total

    def delete_thread(self, comment_id: UUID) -> int:
        with self._session() as conn:
            cur = conn.execute(
                """
                WITH RECURSIVE thread(id) AS (
                    SELECT id FROM comments WHERE id = ?
                    UNION ALL
                    SELECT c.id FROM comments c JOIN thread t ON c.parent_comment_id = t.id
                )
                DELETE FROM comments WHERE id IN (SELECT id FROM thread)
                """,
                (str(comment_id),),
            )
        return cur.rowcount

    def adjust_post_comments(self, post_id: UUID, delta: int) -> int | None:
        with self._session() as conn:
            conn.execute(
                "UPDATE posts SET comments_count = MAX(comments_count + ?, 0) WHERE id = ?",
                (delta, str(post_id)),
            )
            row = conn.execute(
                "SELECT comments_count FROM posts WHERE id = ?", (str(post_id),)
            ).fetchone()
        return row["comments_count"] if row else None


# --- Counters ---


class SQLiteCounterRepo(SQLiteRepo):
    def stored_post_counters(self) -> list[StoredCounters]:
        with self._session() as conn:
            rows = conn.execute("SELECT id, likes_count, comments_count FROM posts").fetchall()
        return [
            StoredCounters(TargetType.POST, UUID(r["id"]), r["likes_count"], r["comments_count"])
            for r in rows
        ]

    def stored_comment_counters(self) -> list[StoredCounters]:
        with self._session() as conn:
            rows = conn.execute("SELECT id, likes_count FROM comments").fetchall()
        return [StoredCounters(TargetType.COMMENT, UUID(r["id"]), r["likes_count"]) for r in rows]

    def like_counts(self, target_type: TargetType) -> dict[UUID, int]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT target_id, COUNT(*) AS n FROM likes WHERE target_type = ? GROUP BY target_id",
                (target_type.value,),
            ).fetchall()
        return {UUID(r["target_id"]): r["n"] for r in rows}

    def comment_counts(self) -> dict[UUID, int]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT post_id, COUNT(*) AS n FROM comments GROUP BY post_id"
            ).fetchall()
        return {UUID(r["post_id"]): r["n"] for r in rows}

    def write_counters(
        self,
        target_type: TargetType,
        target_id: UUID,
        likes_count: int,
        comments_count: int | None = None,
    ) -> None:
        table = LIKE_COUNTER_TABLES[target_type]
        with self._session() as conn:
            if comments_count is None:
                conn.execute(
                    f"UPDATE {table} SET likes_count = ? WHERE id = ?",
                    (likes_count, str(target_id)),
                )
            else:
                conn.execute(
                    f"UPDATE {table} SET likes_count = ?, comments_count = ? WHERE id = ?",
                    (likes_count, comments_count, str(target_id)),
                )
