"""
Session Store.

Provides an injectable ``SessionStore`` holding the single
``{token, user}`` slot for the lifetime of the client process.  The
token is mirrored to durable storage so a restart does not force
re-authentication; the profile lives in memory only.

Usage::

    from superhub.session_store import SessionStore

    store = SessionStore(token_store, storage_key="token", logger=logger)
    store.init()                         # load persisted token
    store.replace(Session(token=t, user=u))
    session = store.read()
    store.teardown()
"""

from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol

from superhub.logger import StructuredLogger
from superhub.models.auth_models import Session

SessionListener = Callable[[Session], None]


class KeyValueStorage(Protocol):
    """Minimal durable storage contract (``TokenStore`` in production)."""

    def get(self, key: str) -> Optional[str]: ...  # noqa: E704

    def set(self, key: str, value: str) -> None: ...  # noqa: E704

    def remove(self, key: str) -> None: ...  # noqa: E704


class SessionStore:
    """Single writable slot for the current session.

    Every write replaces the whole ``Session`` object (which is frozen),
    so readers never observe a half-updated session.  Pass one
    ``SessionStore`` through the dependency-injection layer so every
    component shares it.

    Parameters
    ----------
    storage:
        Durable key/value storage (``TokenStore`` in production).
    storage_key:
        Fixed key under which the token is persisted.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str,
        logger: StructuredLogger,
    ) -> None:
        self._storage: KeyValueStorage = storage
        self._storage_key: str = storage_key
        self._logger: StructuredLogger = logger
        self._lock: threading.RLock = threading.RLock()
        self._session: Session = Session.empty()
        self._listeners: list[SessionListener] = []
        self._initialised: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> Session:
        """Load the persisted token (if any) into memory.

        The profile is not persisted, so a restored session holds a
        token and no user until the profile fetch completes.
        """
        with self._lock:
            token: Optional[str] = None
            try:
                token = self._storage.get(self._storage_key)
            except Exception as exc:
                self._logger.warning(
                    "Could not read persisted token; starting signed out: %s", exc,
                )
            self._session = Session(token=token or None, user=None)
            self._initialised = True
            if token:
                self._logger.info("Persisted session token found.")
            return self._session

    def teardown(self) -> None:
        """Drop in-memory state and listeners.  The durable token is kept."""
        with self._lock:
            self._session = Session.empty()
            self._listeners.clear()
            self._initialised = False

    # ------------------------------------------------------------------
    # Read / replace
    # ------------------------------------------------------------------

    def read(self) -> Session:
        """Return the current session (an immutable snapshot)."""
        with self._lock:
            return self._session

    def replace(self, session: Session) -> None:
        """Overwrite token and user together and mirror the token durably.

        A ``None`` token removes the durable slot.  Persistence failures
        are logged; the in-memory session is still replaced so the
        running client stays consistent.
        """
        with self._lock:
            previous_token = self._session.token
            self._session = session

            if session.token != previous_token or session.token is None:
                try:
                    if session.token is None:
                        self._storage.remove(self._storage_key)
                    else:
                        self._storage.set(self._storage_key, session.token)
                except Exception as exc:
                    self._logger.error(
                        "Failed to persist session token: %s", exc,
                    )

            listeners = list(self._listeners)

        for listener in listeners:
            listener(session)

    def clear(self) -> None:
        """Shorthand for ``replace(Session.empty())``."""
        self.replace(Session.empty())

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener* for every replace; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._session.token

    @property
    def is_initialised(self) -> bool:
        with self._lock:
            return self._initialised
