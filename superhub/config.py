"""
Application Configuration.

Pydantic Settings model for the Super Hub desktop client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Backend REST API ---
    API_BASE_URL: str = "http://localhost:5000/api"
    API_TIMEOUT_S: float = 30.0

    # --- Durable client storage ---
    TOKEN_DB_PATH: str = "superhub_local.db"
    TOKEN_STORAGE_KEY: str = "token"

    # --- OAuth identity provider ---
    OAUTH_PROVIDER_PATH: str = "/auth/google"

    # --- Timers ---
    RESEND_COOLDOWN_S: int = 60
    VERIFY_REDIRECT_DELAY_MS: int = 2000
    RESET_REDIRECT_DELAY_MS: int = 2000
    OAUTH_REDIRECT_DELAY_MS: int = 1000

    # --- Logging ---
    LOG_FILE: str = "superhub.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("API_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when configuration looks incomplete.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        so operators get a hint that the client is talking to the
        development backend.
        """
        _log = logging.getLogger("superhub.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.API_BASE_URL.startswith(("http://", "https://")):
            _log.warning(
                "API_BASE_URL '%s' is not an http(s) URL; every backend "
                "call will fail as a transport error.",
                self.API_BASE_URL,
            )

        return self

    @property
    def oauth_authorize_url(self) -> str:
        """Full URL of the identity provider redirect endpoint."""
        return f"{self.API_BASE_URL}/{self.OAUTH_PROVIDER_PATH.lstrip('/')}"


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern so first initialisation stays thread-safe.

    Prefer direct constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
