# ABOUTME: SQLite database connection management for the Folio catalog.
# ABOUTME: Opens or creates the database, applies schema, and configures locking.

import sqlite3
from pathlib import Path

from folio.db.schema import SCHEMA_V1, SCHEMA_VERSION
from folio.errors import PersistenceFailedError

DEFAULT_DB_PATH = Path.home() / ".folio" / "library.db"

# Seconds a writer waits for a competing transaction before giving up.
DEFAULT_BUSY_TIMEOUT = 10.0


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Execute the DDL to create all tables, indexes, and triggers."""
    conn.executescript(SCHEMA_V1)


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def open_library(
    path: Path | None = None, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT
) -> sqlite3.Connection:
    """Open or create the Folio catalog database.

    Creates the database file and parent directories if they don't exist.
    Applies the schema on first creation. Sets WAL journal mode and
    sqlite3.Row factory for dict-like column access. Refuses a database
    whose stored schema version differs from SCHEMA_VERSION.

    Each thread or process should open its own connection; concurrent
    writers are serialized by SQLite's locking, waiting up to busy_timeout.

    Args:
        path: Path to the database file. Defaults to ~/.folio/library.db.
        busy_timeout: Seconds to wait on a locked database.

    Returns:
        A configured sqlite3.Connection.

    Raises:
        PersistenceFailedError: If the schema version is not SCHEMA_VERSION.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=busy_timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    if not _schema_exists(conn):
        _apply_schema(conn)

    version = get_schema_version(conn)
    if version != SCHEMA_VERSION:
        conn.close()
        raise PersistenceFailedError(
            f"Catalog {db_path} has schema version {version}; "
            f"this release supports version {SCHEMA_VERSION}"
        )

    return conn
