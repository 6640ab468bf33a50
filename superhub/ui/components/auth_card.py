"""Auth card layout and form widgets.

Every public auth screen is the same centred card: brand mark, title,
subtitle, then a form body.  ``FormField`` bundles a caption, an entry
and an inline message label in one container so that showing or hiding
the message never reorders the form.
"""

from __future__ import annotations

import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from superhub.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CARD_BORDER,
    CARD_WIDTH,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    BUTTON_HEIGHT,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BRAND,
    FONT_BUTTON,
    FONT_ICON_LG,
    FONT_LABEL,
    FONT_SMALL,
    FONT_SUBTITLE,
    INPUT_BG,
    INPUT_BORDER,
    INPUT_BORDER_ERROR,
    INPUT_BORDER_VALID,
    INPUT_HEIGHT,
    LINK_HOVER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_ON_ACCENT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_BRAND_ICON_SIZE: int = 56


class AuthCard(ctk.CTkFrame):
    """Centred card with a brand header.  Put the form into ``body``."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        title: str,
        subtitle: str = "",
        icon: str = "✦",
    ) -> None:
        super().__init__(
            parent,
            width=CARD_WIDTH,
            fg_color=CONTENT_CARD_BG,
            corner_radius=16,
            border_width=1,
            border_color=CARD_BORDER,
        )

        inner = ctk.CTkFrame(self, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        icon_frame = ctk.CTkFrame(
            inner,
            width=_BRAND_ICON_SIZE,
            height=_BRAND_ICON_SIZE,
            corner_radius=14,
            fg_color=ACCENT_PRIMARY,
        )
        icon_frame.pack(pady=(0, 12))
        icon_frame.pack_propagate(False)
        self._icon_label = ctk.CTkLabel(
            icon_frame, text=icon, font=FONT_ICON_LG, text_color=TEXT_ON_ACCENT,
        )
        self._icon_label.place(relx=0.5, rely=0.5, anchor="center")

        self._title_label = ctk.CTkLabel(
            inner, text=title, font=FONT_BRAND, text_color=TEXT_PRIMARY,
        )
        self._title_label.pack(pady=(0, 2))

        self._subtitle_label = ctk.CTkLabel(
            inner,
            text=subtitle,
            font=FONT_SUBTITLE,
            text_color=TEXT_SECONDARY,
            wraplength=CARD_WIDTH - 80,
        )
        self._subtitle_label.pack(pady=(0, PADDING_LG))

        self.body = ctk.CTkFrame(inner, fg_color="transparent")
        self.body.pack(fill="both", expand=True)

    def set_header(self, title: str, subtitle: str = "", icon: Optional[str] = None) -> None:
        self._title_label.configure(text=title)
        self._subtitle_label.configure(text=subtitle)
        if icon is not None:
            self._icon_label.configure(text=icon)

    def clear_body(self) -> None:
        for child in self.body.winfo_children():
            child.destroy()

    def place_centered(self, parent: ctk.CTkFrame) -> None:
        """Grid the card in the middle of *parent*."""
        parent.grid_rowconfigure(0, weight=1)
        parent.grid_rowconfigure(1, weight=0)
        parent.grid_rowconfigure(2, weight=1)
        parent.grid_columnconfigure(0, weight=1)
        self.grid(row=1, column=0, pady=PADDING_SM)


class FormField(ctk.CTkFrame):
    """Caption + entry + inline validation message."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        caption: str,
        placeholder: str = "",
        show: Optional[str] = None,
    ) -> None:
        super().__init__(parent, fg_color="transparent")

        ctk.CTkLabel(
            self, text=caption.upper(), font=FONT_LABEL,
            text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(0, 4))

        self.entry = ctk.CTkEntry(
            self,
            placeholder_text=placeholder,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            height=INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
            show=show or "",
        )
        self.entry.pack(fill="x")

        self._message = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=ERROR_TEXT,
            anchor="w", justify="left", wraplength=CARD_WIDTH - 80,
        )

        self.pack(fill="x", pady=(0, PADDING_MD))

    @property
    def value(self) -> str:
        return self.entry.get()

    def set_value(self, value: str) -> None:
        self.entry.delete(0, "end")
        if value:
            self.entry.insert(0, value)

    def on_change(self, callback: Callable[[], None]) -> None:
        self.entry.bind("<KeyRelease>", lambda _event: callback())

    def on_submit(self, callback: Callable[[], None]) -> None:
        self.entry.bind("<Return>", lambda _event: callback())

    def focus(self) -> None:
        self.entry.focus_set()

    def show_error(self, message: str) -> None:
        self._show(message, ERROR_TEXT, INPUT_BORDER_ERROR if message else INPUT_BORDER)

    def show_success(self, message: str) -> None:
        self._show(message, SUCCESS_TEXT, INPUT_BORDER_VALID)

    def show_hint(self, message: str, color: str) -> None:
        self._show(message, color, INPUT_BORDER)

    def clear_message(self) -> None:
        self._show("", ERROR_TEXT, INPUT_BORDER)

    def _show(self, message: str, text_color: str, border_color: str) -> None:
        self.entry.configure(border_color=border_color)
        self._message.configure(text=message, text_color=text_color)
        if message:
            self._message.pack(fill="x", pady=(4, 0))
        else:
            self._message.pack_forget()


def primary_button(
    parent: tk.Misc, text: str, command: Callable[[], None],
) -> ctk.CTkButton:
    button = ctk.CTkButton(
        parent,
        text=text,
        font=FONT_BUTTON,
        fg_color=ACCENT_PRIMARY,
        hover_color=ACCENT_HOVER,
        text_color=TEXT_ON_ACCENT,
        height=BUTTON_HEIGHT,
        corner_radius=CORNER_RADIUS,
        command=command,
    )
    button.pack(fill="x", pady=(PADDING_SM, PADDING_SM))
    return button


def link_button(
    parent: tk.Misc, text: str, command: Callable[[], None],
) -> ctk.CTkButton:
    button = ctk.CTkButton(
        parent,
        text=text,
        font=FONT_SMALL,
        fg_color="transparent",
        hover_color=LINK_HOVER,
        text_color=ACCENT_PRIMARY,
        height=28,
        corner_radius=CORNER_RADIUS,
        command=command,
    )
    button.pack(pady=(PADDING_SM, 0))
    return button


def message_label(parent: tk.Misc, color: str = ERROR_TEXT) -> ctk.CTkLabel:
    """Form-level message label; not packed until it has text.

    The label sits in its own holder frame so it reappears in place.
    """
    holder = ctk.CTkFrame(parent, fg_color="transparent", height=1)
    holder.pack(fill="x")
    return ctk.CTkLabel(
        holder, text="", font=FONT_SMALL, text_color=color,
        wraplength=CARD_WIDTH - 80, justify="center",
    )
