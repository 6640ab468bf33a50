"""Forgot Password View: request a reset link by email."""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult
from superhub.routing import LOGIN_ROUTE
from superhub.services.auth_service import AuthService
from superhub.ui.components.auth_card import (
    AuthCard,
    FormField,
    link_button,
    message_label,
    primary_button,
)
from superhub.ui.components.base_view import BaseView
from superhub.ui.theme import ERROR_TEXT, FONT_BODY, TEXT_SECONDARY, CARD_WIDTH

_BUTTON_TEXT: str = "Send Reset Link"


class ForgotPasswordView(BaseView):
    """Email form, then a "check your email" confirmation.

    The confirmation is shown for every submitted address; whether an
    account exists is never revealed.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._auth_service = auth_service
        self._navigate = navigate

        self._card = AuthCard(self, "", "")
        self._card.place_centered(self)
        self._show_form()

    def _show_form(self, email: str = "") -> None:
        self._card.clear_body()
        self._card.set_header(
            "Forgot password?",
            "Enter your email and we'll send you a reset link",
            icon="🔑",
        )
        body = self._card.body

        self._email = FormField(body, "Email address", "you@example.com")
        self._email.set_value(email)
        self._email.on_submit(self._handle_submit)
        self._email.on_change(self._email.clear_message)

        self._submit_button = primary_button(body, _BUTTON_TEXT, self._handle_submit)
        self._error_label = message_label(body)
        link_button(body, "←  Back to login", lambda: self._navigate(LOGIN_ROUTE))
        self._email.focus()

    def _show_sent(self, email: str) -> None:
        self._card.clear_body()
        self._card.set_header("Check your email", "", icon="✉")
        body = self._card.body

        ctk.CTkLabel(
            body,
            text=(
                f"If an account exists for {email}, you will receive a "
                "password reset link shortly."
            ),
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            wraplength=CARD_WIDTH - 80,
            justify="center",
        ).pack(fill="x", pady=(0, 12))

        primary_button(body, "Try another email", lambda: self._show_form())
        link_button(body, "←  Back to login", lambda: self._navigate(LOGIN_ROUTE))

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _handle_submit(self) -> None:
        if self._submit_button.cget("state") == "disabled":
            return
        email = self._email.value.strip()
        self.show_label(self._error_label, "")
        self._submit_button.configure(text="Sending...", state="disabled")
        self.run_in_background(
            lambda: self._auth_service.forgot_password(email),
            lambda result: self._on_result(email, result),
            name="forgot-password",
        )

    def _on_result(self, email: str, result: AuthResult) -> None:
        if result.success:
            self._show_sent(email)
            return
        self._submit_button.configure(text=_BUTTON_TEXT, state="normal")
        if "email" in result.field_errors:
            self._email.show_error(result.field_errors["email"])
        else:
            self.show_label(
                self._error_label, result.error_message or "Request failed", ERROR_TEXT,
            )
