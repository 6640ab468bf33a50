"""Verify Email View: six-box OTP entry.

Key and paste events are forwarded to ``OtpEntryController``; the view
re-renders the slots, focus and resend button from the controller's
state after every change.  A completed code is verified on a worker
thread; success shows a confirmation and moves on to the landing view
after a short delay.
"""

from __future__ import annotations

import tkinter as tk
from typing import Callable

import customtkinter as ctk

from superhub.config import AppConfig
from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult
from superhub.otp import OTP_LENGTH, OtpEntryController
from superhub.routing import LANDING_ROUTE, LOGIN_ROUTE
from superhub.services.auth_service import AuthService
from superhub.ui.components.auth_card import AuthCard, link_button, message_label
from superhub.ui.components.base_view import BaseView
from superhub.ui.theme import (
    ACCENT_PRIMARY,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_OTP,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    LINK_HOVER,
    OTP_SLOT_SIZE,
    PADDING_MD,
    SUCCESS_TEXT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from superhub.utils.countdown import DelayedAction

# Keys that never change a slot's content.
_IGNORED_KEYS: frozenset[str] = frozenset({
    "BackSpace", "Tab", "ISO_Left_Tab", "Left", "Right", "Up", "Down",
    "Shift_L", "Shift_R", "Control_L", "Control_R", "Alt_L", "Alt_R",
    "Return", "Escape", "Home", "End",
})


class VerifyEmailView(BaseView):
    """OTP entry with resend cooldown.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    auth_service:
        Session state machine.
    config:
        Cooldown and redirect delay settings.
    navigate:
        Shell navigation callback.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        config: AppConfig,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._auth_service = auth_service
        self._config = config
        self._navigate = navigate
        self._redirect = DelayedAction(self)
        self._verified: bool = False

        user = auth_service.user
        email = user.email if user is not None else "your email"

        card = AuthCard(
            self,
            "Verify your email",
            f"We sent a 6-digit code to {email}",
            icon="✉",
        )
        card.place_centered(self)
        body = card.body

        slot_row = ctk.CTkFrame(body, fg_color="transparent")
        slot_row.pack(pady=(0, PADDING_MD))
        self._slots: list[ctk.CTkEntry] = []
        for index in range(OTP_LENGTH):
            slot = ctk.CTkEntry(
                slot_row,
                width=OTP_SLOT_SIZE,
                height=OTP_SLOT_SIZE + 8,
                font=FONT_OTP,
                justify="center",
                fg_color=INPUT_BG,
                border_color=INPUT_BORDER,
                text_color=TEXT_PRIMARY,
                corner_radius=CORNER_RADIUS,
            )
            slot.pack(side="left", padx=4)
            slot.bind("<KeyRelease>", lambda event, i=index: self._on_key(i, event))
            slot.bind("<KeyPress-BackSpace>", lambda _event, i=index: self._on_backspace(i))
            slot.bind("<<Paste>>", lambda _event: self._on_paste())
            slot.bind("<FocusIn>", lambda _event, i=index: self._controller.focus(i))
            self._slots.append(slot)

        self._status_label = message_label(body)

        self._resend_button = ctk.CTkButton(
            body,
            text="Resend code",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=LINK_HOVER,
            text_color=ACCENT_PRIMARY,
            text_color_disabled=TEXT_SECONDARY,
            height=28,
            command=self._handle_resend,
        )
        self._resend_button.pack(pady=(4, 0))

        link_button(body, "Use a different account? Log out", self._handle_logout)

        self._controller = OtpEntryController(
            on_submit=self._submit,
            scheduler=self,
            cooldown_seconds=config.RESEND_COOLDOWN_S,
            on_change=self._render,
        )
        self._render()

    # ------------------------------------------------------------------
    # Slot events
    # ------------------------------------------------------------------

    def _on_key(self, index: int, event: tk.Event) -> None:
        if event.keysym in _IGNORED_KEYS:
            return
        self._controller.input_digit(index, self._slots[index].get())
        # A rejected character is still in the entry.
        self._render()

    def _on_backspace(self, index: int) -> str:
        self._controller.backspace(index)
        return "break"

    def _on_paste(self) -> str:
        try:
            text = self.clipboard_get()
        except tk.TclError:
            return "break"
        self._controller.paste(text)
        return "break"

    def _render(self) -> None:
        if not self.alive:
            return
        locked = self._verified or self._controller.pending
        for slot, digit in zip(self._slots, self._controller.digits):
            # A disabled entry ignores delete/insert.
            slot.configure(state="normal")
            if slot.get() != digit:
                slot.delete(0, "end")
                if digit:
                    slot.insert(0, digit)
            if locked:
                slot.configure(state="disabled")

        if not locked:
            self._slots[self._controller.focus_index].focus_set()

        if self._controller.can_resend:
            self._resend_button.configure(text="Resend code", state="normal")
        else:
            remaining = self._controller.cooldown_remaining
            self._resend_button.configure(text=f"Resend in {remaining}s", state="disabled")

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def _submit(self, code: str) -> None:
        self.show_label(self._status_label, "Verifying...", TEXT_SECONDARY)
        self.run_in_background(
            lambda: self._auth_service.verify_email(code),
            self._on_verify_result,
            name="verify-email",
        )

    def _on_verify_result(self, result: AuthResult) -> None:
        if result.stale:
            return
        if result.success:
            self._verified = True
            self._controller.verification_succeeded()
            self.show_label(
                self._status_label,
                result.error_message or "Email verified successfully!",
                SUCCESS_TEXT,
            )
            target = result.next_route or LANDING_ROUTE
            self._redirect.schedule(
                self._config.VERIFY_REDIRECT_DELAY_MS, lambda: self._navigate(target),
            )
            return

        if result.next_route == LOGIN_ROUTE:
            self._navigate(LOGIN_ROUTE)
            return
        self._controller.verification_failed()
        self.show_label(
            self._status_label, result.error_message or "Invalid verification code", ERROR_TEXT,
        )

    # ------------------------------------------------------------------
    # Resend / logout
    # ------------------------------------------------------------------

    def _handle_resend(self) -> None:
        if not self._controller.can_resend:
            return
        self._resend_button.configure(state="disabled", text="Sending...")
        self.run_in_background(
            self._auth_service.resend_otp, self._on_resend_result, name="resend-otp",
        )

    def _on_resend_result(self, result: AuthResult) -> None:
        if result.stale:
            return
        if result.success:
            self._controller.reset_for_resend()
            self.show_label(
                self._status_label,
                result.error_message or "New verification code sent!",
                SUCCESS_TEXT,
            )
            return
        if result.next_route == LOGIN_ROUTE:
            self._navigate(LOGIN_ROUTE)
            return
        self.show_label(
            self._status_label, result.error_message or "Failed to resend code", ERROR_TEXT,
        )
        self._render()

    def _handle_logout(self) -> None:
        self._redirect.cancel()
        self.run_in_background(
            self._auth_service.logout,
            lambda result: self._navigate(result.next_route or LOGIN_ROUTE),
            name="logout",
        )

    def teardown(self) -> None:
        self._redirect.cancel()
        self._controller.teardown()
        super().teardown()
