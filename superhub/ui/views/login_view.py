"""Login View: sign-in screen.

Gathers credentials, delegates to ``AuthService.login`` on a worker
thread and navigates to wherever the result says.  Also offers the
Google sign-in redirect and links to registration and password
recovery.

**Thin UI Rule**: this module contains zero session logic.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult, LoginDraft
from superhub.routing import FORGOT_PASSWORD_ROUTE, REGISTER_ROUTE
from superhub.services.auth_service import AuthService
from superhub.ui.components.auth_card import (
    AuthCard,
    FormField,
    link_button,
    message_label,
    primary_button,
)
from superhub.ui.components.base_view import BaseView
from superhub.ui.theme import ERROR_TEXT, HINT_TEXT, INPUT_BORDER, LINK_HOVER, TEXT_PRIMARY

_BUTTON_TEXT: str = "Sign In  →"


class LoginView(BaseView):
    """Email/password sign-in form.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    auth_service:
        Session state machine.
    navigate:
        Shell navigation callback.
    open_oauth:
        Opens the identity provider page in the system browser.
    logger:
        Structured logger.
    return_to:
        Location to go back to after signing in.
    notice:
        One-off message shown above the form (e.g. session expired).
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        navigate: Callable[[str], None],
        open_oauth: Callable[[], None],
        logger: StructuredLogger,
        return_to: Optional[str] = None,
        notice: Optional[str] = None,
    ) -> None:
        super().__init__(parent, logger)
        self._auth_service = auth_service
        self._navigate = navigate
        self._open_oauth = open_oauth
        self._return_to = return_to

        card = AuthCard(self, "Welcome back", "Sign in to continue to AI Super Hub")
        card.place_centered(self)
        body = card.body

        self._notice_label = message_label(body, color=HINT_TEXT)
        self.show_label(self._notice_label, notice or "")

        self._email = FormField(body, "Email address", "you@example.com")
        self._password = FormField(body, "Password", "••••••••", show="*")

        self._login_button = primary_button(body, _BUTTON_TEXT, self._handle_login)
        self._error_label = message_label(body)

        ctk.CTkButton(
            body,
            text="G   Continue with Google",
            fg_color="transparent",
            border_width=1,
            border_color=INPUT_BORDER,
            hover_color=LINK_HOVER,
            text_color=TEXT_PRIMARY,
            height=40,
            command=self._open_oauth,
        ).pack(fill="x", pady=(4, 0))

        link_button(body, "Forgot password?", lambda: self._navigate(FORGOT_PASSWORD_ROUTE))
        link_button(
            body, "Don't have an account? Sign up", lambda: self._navigate(REGISTER_ROUTE),
        )

        for field in (self._email, self._password):
            field.on_submit(self._handle_login)
            field.on_change(lambda f=field: f.clear_message())
        self._email.focus()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_login(self) -> None:
        if self._login_button.cget("state") == "disabled":
            return
        draft = LoginDraft(email=self._email.value.strip(), password=self._password.value)
        self.show_label(self._error_label, "")
        self._set_loading(True)
        self.run_in_background(
            lambda: self._auth_service.login(draft, return_to=self._return_to),
            self._on_login_result,
            name="login",
        )

    def _on_login_result(self, result: AuthResult) -> None:
        self._set_loading(False)
        if result.stale:
            return
        if result.success:
            self._navigate(result.next_route or "/")
            return

        self._email.show_error(result.field_errors.get("email", ""))
        self._password.show_error(result.field_errors.get("password", ""))
        if not result.field_errors:
            self.show_label(self._error_label, result.error_message or "Login failed", ERROR_TEXT)

    def _set_loading(self, loading: bool) -> None:
        if loading:
            self._login_button.configure(text="Signing in...", state="disabled")
        else:
            self._login_button.configure(text=_BUTTON_TEXT, state="normal")
