from datetime import UTC, datetime
from enum import Enum
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Enums / Literals ---
RoleType = Literal["user", "creator"]
PostType = Literal["text", "image", "video", "audio", "poll"]
MediaType = Literal["image", "video", "audio"]
PurchaseStatus = Literal["pending", "completed", "failed", "refunded"]
SubscriptionStatus = Literal["active", "past_due", "cancelled", "expired"]


class TargetType(str, Enum):
    """Discriminator for polymorphic fact rows (likes, purchases)."""

    POST = "Post"
    COLLECTION = "Collection"
    COMMENT = "Comment"
    TIER = "Tier"


class WireModel(BaseModel):
    """Base for entities that are serialised to clients with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Users ---


class User(WireModel):
    id: UUID = Field(default_factory=uuid4)
    username: str
    display_name: str = ""
    email: str
    role: RoleType = "user"
    avatar_url: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class CreatorSummary(WireModel):
    """Creator identity inlined into content rows at read time."""

    id: UUID
    username: str
    display_name: str = ""
    avatar_url: str | None = None
    role: RoleType = "user"


# --- Content ---


class ImageRef(WireModel):
    public_id: str
    secure_url: str


class MediaAsset(WireModel):
    public_id: str
    secure_url: str
    type: MediaType


class PollOption(WireModel):
    id: UUID = Field(default_factory=uuid4)
    text: str
    votes: int = 0


class Post(WireModel):
    id: UUID = Field(default_factory=uuid4)
    creator_id: UUID
    creator: CreatorSummary | None = None
    title: str
    content: str = ""
    type: PostType = "text"
    media: list[MediaAsset] = Field(default_factory=list)
    attachments: list[MediaAsset] = Field(default_factory=list)
    cover_image: ImageRef | None = None
    poll_options: list[PollOption] = Field(default_factory=list)

    is_paid: bool = False
    price: float = Field(default=0, ge=0)
    is_members_only: bool = False
    allowed_tiers: list[UUID] = Field(default_factory=list)

    likes_count: int = 0
    comments_count: int = 0
    is_draft: bool = False

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def target_type(self) -> TargetType:
        return TargetType.POST

    @property
    def is_free(self) -> bool:
        return not self.is_paid and not self.is_members_only

    @model_validator(mode="after")
    def _unpaid_has_no_price(self) -> "Post":
        if not self.is_paid:
            self.price = 0
        return self


class Collection(WireModel):
    id: UUID = Field(default_factory=uuid4)
    creator_id: UUID
    creator: CreatorSummary | None = None
    title: str
    description: str = ""
    cover_image: ImageRef | None = None
    posts: list[UUID] = Field(default_factory=list)

    is_paid: bool = False
    price: float = Field(default=0, ge=0)
    # Collections are sold individually; tier gating applies to posts only.
    is_members_only: bool = False
    allowed_tiers: list[UUID] = Field(default_factory=list)

    is_draft: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def target_type(self) -> TargetType:
        return TargetType.COLLECTION

    @property
    def is_free(self) -> bool:
        return not self.is_paid and not self.is_members_only

    @model_validator(mode="after")
    def _unpaid_has_no_price(self) -> "Collection":
        if not self.is_paid:
            self.price = 0
        return self


ContentItem = Post | Collection


class Comment(WireModel):
    id: UUID = Field(default_factory=uuid4)
    post_id: UUID
    user_id: UUID
    author: CreatorSummary | None = None
    parent_comment_id: UUID | None = None
    content: str
    likes_count: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Monetization ---


class Tier(WireModel):
    id: UUID = Field(default_factory=uuid4)
    creator_id: UUID
    name: str
    price: float = Field(ge=0)
    benefits: list[str] = Field(default_factory=list)
    is_popular: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Purchase(WireModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    creator_id: UUID
    target_id: UUID
    target_type: TargetType
    amount: float = Field(default=0, ge=0)
    currency: str = "INR"
    status: PurchaseStatus = "pending"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Subscription(WireModel):
    id: UUID = Field(default_factory=uuid4)
    subscriber_id: UUID
    creator_id: UUID
    tier_id: UUID
    status: SubscriptionStatus = "active"
    current_period_end: datetime
    started_at: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_current(self, now: datetime) -> bool:
        """Active and inside its paid period; the status field alone is not trusted."""
        return self.status == "active" and self.current_period_end > now


# --- Identity ---


class Viewer(BaseModel):
    """Authenticated caller, as resolved by the auth dependency."""

    id: UUID
    role: RoleType = "user"
