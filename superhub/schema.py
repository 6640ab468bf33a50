"""
Local SQLite Schema Initialization.

Defines the schema of the client's local database and provides a single
entry-point, :func:`initialize_schema`, that creates every table
idempotently.  A ``schema_version`` table records the applied version so
future changes can be rolled forward without losing the stored token.

Usage::

    from superhub.database import LocalDatabase
    from superhub.schema import initialize_schema

    initialize_schema(db.sqlite, logger)
"""

from __future__ import annotations

import sqlite3

from superhub.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

CURRENT_SCHEMA_VERSION: int = 1

_TABLE_DEFINITIONS: list[str] = [
    # -- single-row version tracker -------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # -- client_storage (encrypted key/value slots) ---------------------------
    """
    CREATE TABLE IF NOT EXISTS client_storage (
        key TEXT PRIMARY KEY,
        encrypted_value BLOB NOT NULL,
        nonce BLOB NOT NULL,
        tag BLOB NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


def _get_schema_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return int(row[0]) if row else 0


def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Ensure the local database matches :data:`CURRENT_SCHEMA_VERSION`.

    Safe to call on every startup.  The upgrade runs in one transaction;
    on failure it is rolled back and the next startup retries.
    """
    conn.execute(_TABLE_DEFINITIONS[0])
    conn.commit()

    current: int = _get_schema_version(conn)
    if current >= CURRENT_SCHEMA_VERSION:
        logger.info("Schema is up to date (version %d).", current)
        return

    try:
        for ddl in _TABLE_DEFINITIONS[1:]:
            conn.execute(ddl)
        conn.execute(
            """
            INSERT INTO schema_version (id, version) VALUES (1, ?)
            ON CONFLICT(id) DO UPDATE SET
                version = excluded.version,
                applied_at = CURRENT_TIMESTAMP
            """,
            (CURRENT_SCHEMA_VERSION,),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        logger.error(
            "Schema initialisation failed, rolled back to version %d.", current,
        )
        raise

    logger.info("Schema initialised at version %d.", CURRENT_SCHEMA_VERSION)
