"""
Local Database Connection Manager.

The client keeps exactly one piece of long-lived state, the bearer
token, and it lives in a small local SQLite database so that a restart
does not force re-authentication.  This module only manages the raw
connection; the schema lives in :mod:`superhub.schema` and the slot
semantics in :class:`superhub.services.token_store.TokenStore`.

Usage (dependency injection at app startup)::

    from superhub.database import LocalDatabase
    from superhub.logger import StructuredLogger

    db = LocalDatabase(
        sqlite_path=Path("superhub_local.db"),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Union

from superhub.logger import StructuredLogger


class LocalDatabase:
    """Owns the local SQLite connection.

    Parameters
    ----------
    sqlite_path:
        Filesystem path for the database file, or ``":memory:"``.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(
        self,
        sqlite_path: Union[Path, str],
        logger: StructuredLogger,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._closed: bool = False
        self._sqlite_conn: sqlite3.Connection = self._connect_sqlite(sqlite_path)

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Return the initialised SQLite connection."""
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Lock that every INSERT/UPDATE/DELETE + ``commit()`` must hold.

        Worker threads and the UI thread share one connection::

            with db.write_lock:
                db.sqlite.execute("DELETE ...")
                db.sqlite.commit()
        """
        return self._write_lock

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the connection.  Subsequent calls are no-ops."""
        with self._write_lock:
            if self._closed:
                return
            try:
                self._sqlite_conn.close()
                self._logger.info("SQLite connection closed.")
            except sqlite3.ProgrammingError:
                pass
            self._closed = True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _connect_sqlite(self, path: Union[Path, str]) -> sqlite3.Connection:
        """Open (or create) the database.

        Raises
        ------
        PermissionError
            If the OS denies access to the database file or its directory,
            re-raised with a message the UI can show as-is.
        """
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            if str(path) != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL;")
            self._logger.info("SQLite database opened at %s", path)
            return conn
        except PermissionError as exc:
            msg = (
                f"Cannot open the local database at '{path}'. "
                "The file or its directory may be read-only or locked by "
                "another process.  Please check file permissions and try again."
            )
            self._logger.error(msg)
            raise PermissionError(msg) from exc
