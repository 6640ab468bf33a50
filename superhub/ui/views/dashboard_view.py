"""Dashboard View: the landing screen for verified accounts.

Shows the signed-in profile and hosts the account maintenance forms
(display name, password), account deletion and logout.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult
from superhub.routing import ADMIN_ROUTE, LOGIN_ROUTE
from superhub.services.auth_service import DELETE_CONFIRMATION, AuthService
from superhub.ui.components.auth_card import FormField, message_label, primary_button
from superhub.ui.components.base_view import BaseView
from superhub.ui.components.strength_meter import PasswordStrengthMeter
from superhub.ui.theme import (
    ACCENT_PRIMARY,
    CARD_BORDER,
    CONTENT_CARD_BG,
    ERROR_TEXT,
    FONT_BODY,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    LINK_HOVER,
    LOGOUT_HOVER,
    LOGOUT_PRIMARY,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from superhub.validators import password_strength

_DELETE_BUTTON_TEXT: str = "Delete my account"


class DashboardView(BaseView):
    """Profile summary and account settings."""

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

        user = auth_service.user
        name = user.name if user is not None else ""

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        # -- Header --------------------------------------------------------
        header = ctk.CTkFrame(scroll, fg_color="transparent")
        header.pack(fill="x", pady=(0, PADDING_MD))
        self._welcome_label = ctk.CTkLabel(
            header, text=f"Welcome, {name}!", font=FONT_HEADING,
            text_color=TEXT_PRIMARY, anchor="w",
        )
        self._welcome_label.pack(side="left")

        self._logout_button = ctk.CTkButton(
            header,
            text="Log out",
            font=FONT_SMALL,
            fg_color=LOGOUT_PRIMARY,
            hover_color=LOGOUT_HOVER,
            width=90,
            height=32,
            command=self._handle_logout,
        )
        self._logout_button.pack(side="right")

        if user is not None and user.is_admin:
            ctk.CTkButton(
                header,
                text="Admin console",
                font=FONT_SMALL,
                fg_color="transparent",
                hover_color=LINK_HOVER,
                text_color=ACCENT_PRIMARY,
                width=120,
                height=32,
                command=lambda: self._navigate(ADMIN_ROUTE),
            ).pack(side="right", padx=(0, 8))

        # -- Profile -------------------------------------------------------
        profile = self._section(scroll, "Profile")
        self._profile_rows: dict[str, ctk.CTkLabel] = {}
        for key, caption in (("name", "Name"), ("email", "Email"), ("role", "Role")):
            row = ctk.CTkFrame(profile, fg_color="transparent")
            row.pack(fill="x", pady=2)
            ctk.CTkLabel(
                row, text=caption, font=FONT_LABEL, text_color=TEXT_SECONDARY,
                width=80, anchor="w",
            ).pack(side="left")
            value = ctk.CTkLabel(row, text="", font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w")
            value.pack(side="left", fill="x", expand=True)
            self._profile_rows[key] = value
        self._render_profile()

        # -- Display name --------------------------------------------------
        name_section = self._section(scroll, "Display name")
        self._name = FormField(name_section, "Name", "Your name")
        self._name.set_value(name)
        self._name.on_submit(self._handle_update_name)
        self._name_button = primary_button(name_section, "Save name", self._handle_update_name)
        self._name_message = message_label(name_section)

        # -- Password ------------------------------------------------------
        password_section = self._section(scroll, "Change password")
        self._current = FormField(password_section, "Current password", show="*")
        self._new = FormField(password_section, "New password", show="*")
        self._meter = PasswordStrengthMeter(self._new)
        self._new.on_change(
            lambda: self._meter.update_strength(password_strength(self._new.value)),
        )
        self._confirm = FormField(password_section, "Confirm new password", show="*")
        self._password_button = primary_button(
            password_section, "Update password", self._handle_change_password,
        )
        self._password_message = message_label(password_section)

        # -- Delete account ------------------------------------------------
        danger = self._section(scroll, "Delete account")
        ctk.CTkLabel(
            danger,
            text="This permanently removes your account, chats and enrollments.",
            font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w", justify="left",
        ).pack(fill="x", pady=(0, 8))
        self._delete_confirmation = FormField(
            danger, f"Type {DELETE_CONFIRMATION} to confirm", DELETE_CONFIRMATION,
        )
        self._delete_password: Optional[FormField] = None
        if user is None or user.has_password:
            self._delete_password = FormField(
                danger, "Password", "Enter your password", show="*",
            )
        self._delete_button = ctk.CTkButton(
            danger,
            text=_DELETE_BUTTON_TEXT,
            font=FONT_SMALL,
            fg_color=LOGOUT_PRIMARY,
            hover_color=LOGOUT_HOVER,
            height=36,
            command=self._handle_delete_account,
        )
        self._delete_button.pack(fill="x", pady=(PADDING_SM, 0))
        self._delete_message = message_label(danger)

    @staticmethod
    def _section(parent: ctk.CTkFrame, title: str) -> ctk.CTkFrame:
        card = ctk.CTkFrame(
            parent, fg_color=CONTENT_CARD_BG, corner_radius=12,
            border_width=1, border_color=CARD_BORDER,
        )
        card.pack(fill="x", pady=(0, PADDING_MD))
        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)
        ctk.CTkLabel(
            inner, text=title, font=FONT_LABEL, text_color=ACCENT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(0, 8))
        return inner

    def _render_profile(self) -> None:
        user = self._auth_service.user
        if user is None:
            return
        self._profile_rows["name"].configure(text=user.name)
        self._profile_rows["email"].configure(text=user.email)
        self._profile_rows["role"].configure(text=user.role.value.title())
        self._welcome_label.configure(text=f"Welcome, {user.name}!")

    # ------------------------------------------------------------------
    # Display name
    # ------------------------------------------------------------------

    def _handle_update_name(self) -> None:
        if self._name_button.cget("state") == "disabled":
            return
        name = self._name.value
        self._name.clear_message()
        self.show_label(self._name_message, "")
        self._name_button.configure(state="disabled")
        self.run_in_background(
            lambda: self._auth_service.update_profile(name),
            self._on_name_result,
            name="update-profile",
        )

    def _on_name_result(self, result: AuthResult) -> None:
        self._name_button.configure(state="normal")
        if result.stale:
            return
        if result.success:
            self._render_profile()
            self.show_label(self._name_message, result.error_message or "Saved", SUCCESS_TEXT)
            return
        if "name" in result.field_errors:
            self._name.show_error(result.field_errors["name"])
        else:
            self.show_label(
                self._name_message, result.error_message or "Update failed", ERROR_TEXT,
            )

    # ------------------------------------------------------------------
    # Password
    # ------------------------------------------------------------------

    def _handle_change_password(self) -> None:
        if self._password_button.cget("state") == "disabled":
            return
        current, new, confirm = self._current.value, self._new.value, self._confirm.value
        for field in (self._current, self._new, self._confirm):
            field.clear_message()
        self.show_label(self._password_message, "")
        self._password_button.configure(state="disabled")
        self.run_in_background(
            lambda: self._auth_service.change_password(current, new, confirm),
            self._on_password_result,
            name="change-password",
        )

    def _on_password_result(self, result: AuthResult) -> None:
        self._password_button.configure(state="normal")
        if result.stale:
            return
        if result.success:
            for field in (self._current, self._new, self._confirm):
                field.set_value("")
            self._meter.update_strength(password_strength(""))
            self.show_label(
                self._password_message, result.error_message or "Password changed", SUCCESS_TEXT,
            )
            return

        fields = {
            "current_password": self._current,
            "password": self._new,
            "confirm_password": self._confirm,
        }
        for key, field in fields.items():
            if key in result.field_errors:
                field.show_error(result.field_errors[key])
        if not result.field_errors:
            self.show_label(
                self._password_message, result.error_message or "Update failed", ERROR_TEXT,
            )

    # ------------------------------------------------------------------
    # Delete account
    # ------------------------------------------------------------------

    def _handle_delete_account(self) -> None:
        if self._delete_button.cget("state") == "disabled":
            return
        confirmation = self._delete_confirmation.value
        password = self._delete_password.value if self._delete_password is not None else ""
        self._delete_confirmation.clear_message()
        if self._delete_password is not None:
            self._delete_password.clear_message()
        self.show_label(self._delete_message, "")
        self._delete_button.configure(state="disabled", text="Deleting...")
        self.run_in_background(
            lambda: self._auth_service.delete_account(password, confirmation),
            self._on_delete_result,
            name="delete-account",
        )

    def _on_delete_result(self, result: AuthResult) -> None:
        self._delete_button.configure(state="normal", text=_DELETE_BUTTON_TEXT)
        if result.stale:
            return
        if result.success:
            self._navigate(result.next_route or LOGIN_ROUTE)
            return
        if "confirmation" in result.field_errors:
            self._delete_confirmation.show_error(result.field_errors["confirmation"])
        if "password" in result.field_errors and self._delete_password is not None:
            self._delete_password.show_error(result.field_errors["password"])
        if not result.field_errors:
            self.show_label(
                self._delete_message, result.error_message or "Failed to delete account",
                ERROR_TEXT,
            )

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------

    def _handle_logout(self) -> None:
        self._logout_button.configure(state="disabled", text="Logging out...")
        self.run_in_background(
            self._auth_service.logout,
            lambda result: self._navigate(result.next_route or LOGIN_ROUTE),
            name="logout",
        )
