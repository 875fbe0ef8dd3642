"""
SQL migration runner for the SQLite store.

Each ``migrations/NNNN_name.sql`` file holds an ``-- Up`` section and an
optional ``-- Down`` section; only the Up part is ever executed. Applied files
are recorded in ``_migrations`` with a checksum of their Up part, so a
migration edited after it shipped is refused instead of silently diverging.
"""

import hashlib
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class MigrationError(RuntimeError):
    """A migration file could not be applied, or no longer matches its record."""


@dataclass(frozen=True)
class Migration:
    filename: str
    up_sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.up_sql.encode("utf-8")).hexdigest()


def load_migration(path: Path) -> Migration:
    content = path.read_text(encoding="utf-8")
    up_sql = content.split(DOWN_MARKER, 1)[0]
    return Migration(filename=path.name, up_sql=up_sql)


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = migrations_dir

    def _connect(self) -> sqlite3.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                filename TEXT PRIMARY KEY,
                checksum TEXT NOT NULL,
                applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        return conn

    def discover(self) -> list[Migration]:
        """All migration files, in filename order."""
        return [load_migration(p) for p in sorted(Path(self.migrations_dir).glob("*.sql"))]

    def _recorded(self, conn: sqlite3.Connection) -> dict[str, str]:
        rows = conn.execute("SELECT filename, checksum FROM _migrations").fetchall()
        return {filename: checksum for filename, checksum in rows}

    def _pending(self, conn: sqlite3.Connection) -> list[Migration]:
        recorded = self._recorded(conn)
        pending: list[Migration] = []
        for migration in self.discover():
            stored = recorded.get(migration.filename)
            if stored is None:
                pending.append(migration)
            elif stored != migration.checksum:
                raise MigrationError(
                    f"Migration {migration.filename} changed after it was applied"
                )
        return pending

    def pending_migrations(self) -> list[str]:
        """Filenames that run_migrations would apply, without applying them."""
        conn = self._connect()
        try:
            return [m.filename for m in self._pending(conn)]
        finally:
            conn.close()

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        conn = self._connect()
        try:
            applied: list[str] = []
            for migration in self._pending(conn):
                logger.info("Applying migration: %s", migration.filename)
                self._apply(conn, migration)
                applied.append(migration.filename)
            logger.info("Migrations up to date (%d applied this run)", len(applied))
            return applied
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            conn.executescript(migration.up_sql)
            conn.execute(
                "INSERT INTO _migrations (filename, checksum) VALUES (?, ?)",
                (migration.filename, migration.checksum),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise MigrationError(f"Migration {migration.filename} failed: {e}") from e
