"""Auth Callback View: completes a Google sign-in.

Reached through the ``/auth/callback?token=...`` (or ``?error=...``)
deep link handed to the application by the system browser.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from superhub.config import AppConfig
from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult
from superhub.routing import LANDING_ROUTE, LOGIN_ROUTE
from superhub.services.auth_service import AuthService
from superhub.ui.components.auth_card import AuthCard, link_button, primary_button
from superhub.ui.components.base_view import BaseView
from superhub.ui.theme import CARD_WIDTH, ERROR_TEXT, FONT_BODY, SUCCESS_TEXT
from superhub.utils.countdown import DelayedAction


class AuthCallbackView(BaseView):
    """Processing / success / error states of the OAuth hand-off."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        config: AppConfig,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
        token: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        super().__init__(parent, logger)
        self._navigate = navigate
        self._config = config
        self._redirect = DelayedAction(self)

        self._card = AuthCard(
            self, "Completing sign in...", "Please wait while we finish signing you in",
            icon="⟳",
        )
        self._card.place_centered(self)

        self.run_in_background(
            lambda: auth_service.complete_oauth(token, error),
            self._on_result,
            name="oauth-callback",
        )

    def _on_result(self, result: AuthResult) -> None:
        if result.stale:
            return
        body = self._card.body
        self._card.clear_body()

        if result.success:
            self._card.set_header("Success!", "", icon="✓")
            ctk.CTkLabel(
                body, text=result.error_message or "Signed in", font=FONT_BODY,
                text_color=SUCCESS_TEXT,
            ).pack(fill="x")
            target = result.next_route or LANDING_ROUTE
            self._redirect.schedule(
                self._config.OAUTH_REDIRECT_DELAY_MS, lambda: self._navigate(target),
            )
            return

        self._card.set_header("Sign in failed", "", icon="!")
        ctk.CTkLabel(
            body,
            text=result.error_message or "Failed to complete sign in",
            font=FONT_BODY,
            text_color=ERROR_TEXT,
            wraplength=CARD_WIDTH - 80,
            justify="center",
        ).pack(fill="x", pady=(0, 12))
        primary_button(body, "Back to login", lambda: self._navigate(LOGIN_ROUTE))
        link_button(body, "Go home", lambda: self._navigate(LANDING_ROUTE))

    def teardown(self) -> None:
        self._redirect.cancel()
        super().teardown()
