from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from patronage.domain.entities import ImageRef, MediaAsset, PostType, TargetType


class RequestModel(BaseModel):
    """Request bodies arrive camelCased; fields are read snake_cased."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def fields_set(self) -> dict[str, Any]:
        """Only the fields the client actually sent, as snake_case keys."""
        return self.model_dump(exclude_unset=True)


# --- Envelope ---
def ok(data: Any = None, message: str = "OK", status_code: int = 200) -> dict[str, Any]:
    return {"statusCode": status_code, "success": True, "message": message, "data": data}


# --- Posts ---
class PostWriteRequest(RequestModel):
    title: str | None = None
    content: str | None = None
    type: PostType | None = None
    media: list[MediaAsset] | None = None
    attachments: list[MediaAsset] | None = None
    cover_image: ImageRef | None = None
    poll_options: list[Any] | None = None
    is_paid: bool | None = None
    price: Any = None
    is_members_only: bool | None = None
    allowed_tiers: list[UUID] | None = None
    is_draft: bool | None = None


# --- Collections ---
class CollectionWriteRequest(RequestModel):
    title: str | None = None
    description: str | None = None
    cover_image: ImageRef | None = None
    posts: list[UUID] | None = None
    is_paid: bool | None = None
    price: Any = None
    is_draft: bool | None = None


# --- Tiers ---
class TierCreateRequest(RequestModel):
    name: str
    price: Any
    benefits: list[str] = []
    is_popular: bool = False


class TierUpdateRequest(RequestModel):
    name: str | None = None
    price: Any = None
    benefits: list[str] | None = None
    is_popular: bool | None = None
    is_active: bool | None = None


# --- Commerce ---
class PurchaseRequest(RequestModel):
    item_id: UUID
    item_type: TargetType


class SubscribeRequest(RequestModel):
    creator_id: UUID
    tier_id: UUID


class UnsubscribeRequest(RequestModel):
    creator_id: UUID


# --- Comments ---
class CommentCreateRequest(RequestModel):
    content: str
    parent_comment_id: UUID | None = None


def dump(model: BaseModel) -> dict[str, Any]:
    """Serialise an entity the way clients read it: camelCase, JSON types."""
    return model.model_dump(mode="json", by_alias=True)
