import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from patronage.adapters.clock import SystemClock
from patronage.adapters.sqlite.repos import (
    SQLiteCommentRepo,
    SQLiteCommerceRepo,
    SQLiteContentRepo,
    SQLiteInteractionRepo,
    SQLiteUserRepo,
)
from patronage.api.auth_utils import decode_access_token
from patronage.components.commerce import CommerceConfig
from patronage.components.commerce import load_config_from_rules as load_commerce_config
from patronage.components.feed import ReadContext
from patronage.components.preview import PreviewConfig
from patronage.components.preview import load_config_from_rules as load_preview_config
from patronage.domain.entities import Viewer
from patronage.domain.errors import UnauthorizedError
from patronage.rules.loader import load_rules
from patronage.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("PATRONAGE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "patronage.db")
        self.migrations_dir = self.base_dir / "migrations"
        self.rules_path = Path(os.environ.get("PATRONAGE_RULES_PATH", "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


def get_preview_config(rules: Rules = Depends(get_rules)) -> PreviewConfig:
    return load_preview_config(rules.preview)


def get_commerce_config(rules: Rules = Depends(get_rules)) -> CommerceConfig:
    return load_commerce_config(rules.subscriptions)


# --- Repos ---
def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_content_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentRepo:
    return SQLiteContentRepo(settings.db_path)


def get_commerce_repo(settings: Settings = Depends(get_settings)) -> SQLiteCommerceRepo:
    return SQLiteCommerceRepo(settings.db_path)


def get_interaction_repo(settings: Settings = Depends(get_settings)) -> SQLiteInteractionRepo:
    return SQLiteInteractionRepo(settings.db_path)


def get_comment_repo(settings: Settings = Depends(get_settings)) -> SQLiteCommentRepo:
    return SQLiteCommentRepo(settings.db_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_read_context(
    content: SQLiteContentRepo = Depends(get_content_repo),
    commerce: SQLiteCommerceRepo = Depends(get_commerce_repo),
    interactions: SQLiteInteractionRepo = Depends(get_interaction_repo),
    clock: SystemClock = Depends(get_clock),
    preview: PreviewConfig = Depends(get_preview_config),
) -> ReadContext:
    """Bundle the ports every content read needs."""
    return ReadContext(
        content=content,
        entitlements=commerce,
        interactions=interactions,
        time=clock,
        commerce=commerce,
        preview=preview,
    )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_optional_viewer(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> Viewer | None:
    """
    Resolve the caller from the access token, or None for anonymous callers.

    The cookie wins over the Authorization header. A token that does not
    decode, or names a missing or inactive user, is treated as anonymous;
    routes that need a viewer turn that into a 401 via get_current_viewer.
    """
    cookie_token = request.cookies.get("accessToken")
    if cookie_token:
        token = cookie_token.removeprefix("Bearer ")

    if not token:
        return None

    payload = decode_access_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if user_id is None or not isinstance(user_id, str):
        return None

    try:
        uid = UUID(user_id)
    except ValueError:
        return None

    user = user_repo.get_by_id(uid)
    if user is None or not user.is_active:
        return None

    return Viewer(id=user.id, role=user.role)


def get_current_viewer(viewer: Viewer | None = Depends(get_optional_viewer)) -> Viewer:
    if viewer is None:
        raise UnauthorizedError("Not authenticated")
    return viewer
