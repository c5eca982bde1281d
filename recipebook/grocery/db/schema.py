"""Database schema for grocery lists, applied as numbered migrations."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Entry N upgrades a database from user_version N to N + 1. Append only.
_MIGRATIONS: tuple[str, ...] = (
    """
    CREATE TABLE grocery_lists (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        created_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
    );

    CREATE TABLE grocery_list_items (
        id TEXT PRIMARY KEY,
        grocery_list_id TEXT NOT NULL REFERENCES grocery_lists(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        quantity TEXT,
        unit TEXT,
        notes TEXT,
        is_completed INTEGER NOT NULL DEFAULT 0,
        category TEXT,
        item_order INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime')),
        completed_at TEXT
    );

    CREATE TABLE grocery_list_recipes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        grocery_list_id TEXT NOT NULL REFERENCES grocery_lists(id) ON DELETE CASCADE,
        recipe_id TEXT NOT NULL,
        variant_id TEXT,
        multiplier REAL NOT NULL DEFAULT 1.0,
        added_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
    );

    CREATE INDEX idx_list_recipes_list ON grocery_list_recipes(grocery_list_id);
    """,
    # get_items reads a whole list in display order
    """
    CREATE INDEX idx_items_list_order
        ON grocery_list_items(grocery_list_id, item_order);
    """,
)

SCHEMA_VERSION = len(_MIGRATIONS)


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def _migrate(conn: sqlite3.Connection) -> None:
    version = schema_version(conn)
    if version > SCHEMA_VERSION:
        raise RuntimeError(
            f"database schema version {version} is newer than supported"
            f" version {SCHEMA_VERSION}"
        )
    for target, script in enumerate(_MIGRATIONS[version:], start=version + 1):
        logger.info("Migrating grocery database to schema version %d", target)
        # user_version is set inside the same transaction as the DDL
        conn.executescript(
            f"BEGIN;\n{script}\nPRAGMA user_version = {target};\nCOMMIT;"
        )


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open the grocery database, creating or upgrading it as needed.

    Migrations past the stored ``user_version`` run in order, each in its
    own transaction, so an interrupted upgrade resumes where it stopped.

    Args:
        db_path: Path to the SQLite database file. Parent directories are
            created.

    Returns:
        An open sqlite3.Connection with rows as sqlite3.Row and foreign
        keys enforced.
    """
    db_path = Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        _migrate(conn)
    except Exception:
        conn.close()
        raise
    return conn
