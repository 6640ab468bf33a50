"""
Session Services Package.

The ``create_services()`` factory wires the REST client and the auth
state machine together, returning a typed dict that the shell and its
views consume without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

import requests

from superhub.config import AppConfig
from superhub.logger import get_logger
from superhub.services.api_client import ApiError, AuthApiClient
from superhub.services.auth_service import AuthService
from superhub.services.token_store import TokenStore
from superhub.session_store import KeyValueStorage, SessionStore

__all__ = [
    "ApiError",
    "AuthApiClient",
    "AuthService",
    "KeyValueStorage",
    "ServiceContainer",
    "TokenStore",
    "create_services",
]


class ServiceContainer(TypedDict):
    """Typed container for the session services."""

    session_store: SessionStore
    api_client: AuthApiClient
    auth_service: AuthService


def create_services(
    config: AppConfig,
    session_store: SessionStore,
    http: Optional[requests.Session] = None,
) -> ServiceContainer:
    """
    Wire the API client and the auth service.

    This is the single composition root for the service layer.  The
    entry-point calls this once at startup, after the session store has
    been initialised from durable storage.

    Args:
        config: Application configuration.
        session_store: Initialised session store shared by every service.
        http: Optional pre-built HTTP session (tests inject a fake).

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("superhub.services")

    api_client = AuthApiClient(
        base_url=config.API_BASE_URL,
        timeout=config.API_TIMEOUT_S,
        session_store=session_store,
        logger=logger,
        http=http,
    )
    auth_service = AuthService(
        api=api_client,
        session_store=session_store,
        config=config,
        logger=logger,
    )

    return ServiceContainer(
        session_store=session_store,
        api_client=api_client,
        auth_service=auth_service,
    )
