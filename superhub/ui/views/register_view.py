"""Register View: account creation with live credential checks.

Every keystroke re-runs the pure validators and renders their result
inline: name rules, email shape / typo suggestion / disposable domain,
password strength, and confirmation match.  Submission goes through
``AuthService.register``, which re-validates and refuses to call the
backend while any field is invalid.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult, RegistrationDraft
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
from superhub.ui.components.strength_meter import PasswordStrengthMeter
from superhub.ui.theme import ACCENT_PRIMARY, ERROR_TEXT, FONT_SMALL, HINT_TEXT, LINK_HOVER
from superhub.validators import (
    password_strength,
    validate_confirm_password,
    validate_email,
    validate_name,
)

_BUTTON_TEXT: str = "Create Account  →"


class RegisterView(BaseView):
    """Registration form.

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
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        navigate: Callable[[str], None],
        open_oauth: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._auth_service = auth_service
        self._navigate = navigate
        self._suggestion: Optional[str] = None

        card = AuthCard(self, "Create your account", "Join AI Super Hub in under a minute")
        card.place_centered(self)
        body = card.body

        self._name = FormField(body, "Full name", "Jane Doe")
        self._email = FormField(body, "Email address", "you@example.com")

        self._suggestion_button = ctk.CTkButton(
            self._email,
            text="",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=LINK_HOVER,
            text_color=ACCENT_PRIMARY,
            height=24,
            anchor="w",
            command=self._apply_suggestion,
        )

        self._password = FormField(body, "Password", "Create a strong password", show="*")
        self._meter = PasswordStrengthMeter(self._password)
        self._confirm = FormField(body, "Confirm password", "Repeat your password", show="*")

        self._submit_button = primary_button(body, _BUTTON_TEXT, self._handle_submit)
        self._error_label = message_label(body)

        link_button(body, "Sign up with Google", open_oauth)
        link_button(
            body, "Already have an account? Sign in", lambda: self._navigate(LOGIN_ROUTE),
        )

        self._name.on_change(self._check_name)
        self._email.on_change(self._check_email)
        self._password.on_change(self._check_password)
        self._confirm.on_change(self._check_confirm)
        for field in (self._name, self._email, self._password, self._confirm):
            field.on_submit(self._handle_submit)
        self._name.focus()

    # ------------------------------------------------------------------
    # Live validation
    # ------------------------------------------------------------------

    def _check_name(self) -> None:
        result = validate_name(self._name.value)
        if result.is_valid:
            self._name.show_success(result.message)
        else:
            self._name.show_error(result.message)

    def _check_email(self) -> None:
        result = validate_email(self._email.value)
        self._suggestion = result.suggestion
        if result.is_valid:
            self._email.show_success(result.message)
        elif result.suggestion:
            self._email.show_hint(result.message, HINT_TEXT)
        else:
            self._email.show_error(result.message)

        if self._suggestion:
            self._suggestion_button.configure(text=f"Use {self._suggestion}")
            self._suggestion_button.pack(fill="x")
        else:
            self._suggestion_button.pack_forget()

    def _apply_suggestion(self) -> None:
        if self._suggestion:
            self._email.set_value(self._suggestion)
            self._check_email()

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
        draft = RegistrationDraft(
            name=self._name.value,
            email=self._email.value,
            password=self._password.value,
            confirm_password=self._confirm.value,
        )
        self.show_label(self._error_label, "")
        self._set_loading(True)
        self.run_in_background(
            lambda: self._auth_service.register(draft),
            self._on_register_result,
            name="register",
        )

    def _on_register_result(self, result: AuthResult) -> None:
        self._set_loading(False)
        if result.stale:
            return
        if result.success:
            self._navigate(result.next_route or LOGIN_ROUTE)
            return

        fields = {
            "name": self._name,
            "email": self._email,
            "password": self._password,
            "confirm_password": self._confirm,
        }
        for key, field in fields.items():
            if key in result.field_errors:
                field.show_error(result.field_errors[key])
        self.show_label(
            self._error_label, result.error_message or "Registration failed", ERROR_TEXT,
        )

    def _set_loading(self, loading: bool) -> None:
        if loading:
            self._submit_button.configure(text="Creating account...", state="disabled")
        else:
            self._submit_button.configure(text=_BUTTON_TEXT, state="normal")
