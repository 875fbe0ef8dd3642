from pydantic import BaseModel, Field


class PreviewRules(BaseModel):
    body_chars: int = Field(default=120, ge=0)
    truncation_marker: str = "..."
    cover_hidden_for_types: list[str] = Field(default_factory=lambda: ["image"])


class PaginationRules(BaseModel):
    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=50, ge=1)
    comments_default_limit: int = Field(default=20, ge=1)


class SubscriptionRules(BaseModel):
    period_days: int = Field(default=30, ge=1)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    preview: PreviewRules = Field(default_factory=PreviewRules)
    pagination: PaginationRules = Field(default_factory=PaginationRules)
    subscriptions: SubscriptionRules = Field(default_factory=SubscriptionRules)
    ops: OpsRules = Field(default_factory=OpsRules)
