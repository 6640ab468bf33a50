"""Reset Password View: set a new password from an emailed link.

The single-use token arrives in the route's ``token`` query parameter.
A rejected token is terminal: the screen offers to request a new link
instead of retrying.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from superhub.config import AppConfig
from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult, PasswordResetRequest
from superhub.routing import FORGOT_PASSWORD_ROUTE, LOGIN_ROUTE
from superhub.services.auth_service import AuthService
from superhub.ui.components.auth_card import (
    AuthCard,
    FormField,
    link_button,
    message_label,
    primary_button,
)
from superhub.ui.components.base_view import BaseView
from superhub.ui.components.strength_meter import PasswordStrengthMeter
from superhub.ui.theme import CARD_WIDTH, ERROR_TEXT, FONT_BODY, TEXT_SECONDARY
from superhub.utils.countdown import DelayedAction
from superhub.validators import password_strength, validate_confirm_password

_BUTTON_TEXT: str = "Reset Password"


class ResetPasswordView(BaseView):
    """New-password form bound to a reset token.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    auth_service:
        Session state machine.
    config:
        Redirect delay settings.
    navigate:
        Shell navigation callback.
    logger:
        Structured logger.
    token:
        Reset token from the link; ``None`` when the link carried none.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        config: AppConfig,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
        token: Optional[str] = None,
    ) -> None:
        super().__init__(parent, logger)
        self._auth_service = auth_service
        self._config = config
        self._navigate = navigate
        self._token = token
        self._redirect = DelayedAction(self)

        self._card = AuthCard(self, "", "")
        self._card.place_centered(self)

        if token:
            self._show_form()
        else:
            self._show_terminal(
                "Invalid Reset Link",
                "This password reset link is invalid or has expired. "
                "Please request a new one.",
                "Request new link",
            )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _show_form(self) -> None:
        self._card.clear_body()
        self._card.set_header("Set a new password", "Choose a strong password you haven't used before")
        body = self._card.body

        self._password = FormField(body, "New password", "Create a strong password", show="*")
        self._meter = PasswordStrengthMeter(self._password)
        self._confirm = FormField(body, "Confirm password", "Repeat your password", show="*")

        self._password.on_change(self._check_password)
        self._confirm.on_change(self._check_confirm)
        for field in (self._password, self._confirm):
            field.on_submit(self._handle_submit)

        self._submit_button = primary_button(body, _BUTTON_TEXT, self._handle_submit)
        self._error_label = message_label(body)
        link_button(body, "←  Back to login", lambda: self._navigate(LOGIN_ROUTE))
        self._password.focus()

    def _show_terminal(self, title: str, message: str, action_text: str) -> None:
        self._card.clear_body()
        self._card.set_header(title, "", icon="!")
        body = self._card.body
        ctk.CTkLabel(
            body, text=message, font=FONT_BODY, text_color=TEXT_SECONDARY,
            wraplength=CARD_WIDTH - 80, justify="center",
        ).pack(fill="x", pady=(0, 12))
        primary_button(body, action_text, lambda: self._navigate(FORGOT_PASSWORD_ROUTE))
        link_button(body, "←  Back to login", lambda: self._navigate(LOGIN_ROUTE))

    def _show_success(self, message: str) -> None:
        self._card.clear_body()
        self._card.set_header(message, "Redirecting you to sign in...", icon="✓")
        self._redirect.schedule(
            self._config.RESET_REDIRECT_DELAY_MS, lambda: self._navigate(LOGIN_ROUTE),
        )

    # ------------------------------------------------------------------
    # Live checks
    # ------------------------------------------------------------------

    def _check_password(self) -> None:
        self._meter.update_strength(password_strength(self._password.value))
        self._password.clear_message()
        if self._confirm.value:
            self._check_confirm()

    def _check_confirm(self) -> None:
        result = validate_confirm_password(self._password.value, self._confirm.value)
        if result.is_valid:
            self._confirm.show_success(result.message)
        else:
            self._confirm.show_error(result.message)

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _handle_submit(self) -> None:
        if self._submit_button.cget("state") == "disabled":
            return
        request = PasswordResetRequest(
            token=self._token,
            new_password=self._password.value,
            confirm_password=self._confirm.value,
        )
        self.show_label(self._error_label, "")
        self._submit_button.configure(text="Resetting...", state="disabled")
        self.run_in_background(
            lambda: self._auth_service.reset_password(request),
            self._on_result,
            name="reset-password",
        )

    def _on_result(self, result: AuthResult) -> None:
        if result.success:
            self._show_success(result.error_message or "Password reset successful!")
            return

        if result.field_errors:
            self._submit_button.configure(text=_BUTTON_TEXT, state="normal")
            if "password" in result.field_errors:
                self._password.show_error(result.field_errors["password"])
            if "confirm_password" in result.field_errors:
                self._confirm.show_error(result.field_errors["confirm_password"])
            return

        if result.next_route != FORGOT_PASSWORD_ROUTE:
            # Not a verdict on the token: keep the form for another try.
            self._submit_button.configure(text=_BUTTON_TEXT, state="normal")
            self.show_label(
                self._error_label, result.error_message or "Please try again.", ERROR_TEXT,
            )
            return

        self._show_terminal(
            "Reset failed",
            result.error_message or "Failed to reset password. The link may have expired.",
            "Request a new link",
        )

    def teardown(self) -> None:
        self._redirect.cancel()
        super().teardown()
