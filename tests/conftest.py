from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from patronage.adapters.sqlite.migrator import SQLiteMigrator
from patronage.adapters.sqlite.repos import (
    SQLiteCommentRepo,
    SQLiteCommerceRepo,
    SQLiteContentRepo,
    SQLiteCounterRepo,
    SQLiteInteractionRepo,
    SQLiteUserRepo,
)
from patronage.api.auth_utils import create_access_token
from patronage.api.deps import Settings, get_clock, get_rules, get_settings
from patronage.api.main import app
from patronage.domain.entities import User
from patronage.rules.loader import load_rules


class FixedClock:
    """Clock pinned to one instant; tests move it explicitly."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "patronage.db")
    SQLiteMigrator(path, "migrations").run_migrations()
    return path


@pytest.fixture
def rules():
    # Tests run from the project root
    return load_rules(Path("rules.yaml").resolve())


@pytest.fixture
def user_repo(db_path) -> SQLiteUserRepo:
    return SQLiteUserRepo(db_path)


@pytest.fixture
def content_repo(db_path) -> SQLiteContentRepo:
    return SQLiteContentRepo(db_path)


@pytest.fixture
def commerce_repo(db_path) -> SQLiteCommerceRepo:
    return SQLiteCommerceRepo(db_path)


@pytest.fixture
def interaction_repo(db_path) -> SQLiteInteractionRepo:
    return SQLiteInteractionRepo(db_path)


@pytest.fixture
def comment_repo(db_path) -> SQLiteCommentRepo:
    return SQLiteCommentRepo(db_path)


@pytest.fixture
def counter_repo(db_path) -> SQLiteCounterRepo:
    return SQLiteCounterRepo(db_path)


@pytest.fixture
def creator(user_repo) -> User:
    return user_repo.save(
        User(username="maya", display_name="Maya", email="maya@example.com", role="creator")
    )


@pytest.fixture
def fan(user_repo) -> User:
    return user_repo.save(User(username="sam", display_name="Sam", email="sam@example.com"))


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def client(db_path, rules, clock, monkeypatch):
    """API client bound to the temporary database and a fixed clock."""
    monkeypatch.setenv("PATRONAGE_DATA_DIR", str(Path(db_path).parent))
    settings = Settings()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth():
    return auth_headers
