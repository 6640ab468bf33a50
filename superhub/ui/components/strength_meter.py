"""Password strength meter: coloured bar, label and requirement checklist."""

from __future__ import annotations

import customtkinter as ctk

from superhub.models.auth_models import PasswordStrength
from superhub.ui.theme import (
    FONT_CAPTION,
    FONT_SMALL,
    STRENGTH_COLORS,
    STRENGTH_EMPTY,
    SUCCESS_TEXT,
    TEXT_SECONDARY,
)


class PasswordStrengthMeter(ctk.CTkFrame):
    """Renders a ``PasswordStrength`` report.  Hidden while it is empty."""

    def __init__(self, parent: ctk.CTkFrame) -> None:
        super().__init__(parent, fg_color="transparent")

        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x")
        self._bar = ctk.CTkProgressBar(header, height=6, progress_color=STRENGTH_EMPTY)
        self._bar.set(0)
        self._bar.pack(side="left", fill="x", expand=True, padx=(0, 8))
        self._label = ctk.CTkLabel(header, text="", font=FONT_SMALL, width=60)
        self._label.pack(side="right")

        self._checklist = ctk.CTkFrame(self, fg_color="transparent")
        self._checklist.pack(fill="x", pady=(4, 0))
        self._rows: list[ctk.CTkLabel] = []

    def update_strength(self, strength: PasswordStrength) -> None:
        if not strength.requirements:
            self.pack_forget()
            return
        if not self.winfo_manager():
            self.pack(fill="x", pady=(6, 0))

        color = STRENGTH_COLORS.get(strength.label, STRENGTH_EMPTY)
        self._bar.configure(progress_color=color)
        self._bar.set(strength.score / 100)
        self._label.configure(text=strength.label, text_color=color)

        for row in self._rows:
            row.destroy()
        self._rows = []
        for requirement in strength.requirements:
            mark = "✓" if requirement.met else "✗"
            suffix = "" if requirement.required else "  (bonus)"
            row = ctk.CTkLabel(
                self._checklist,
                text=f"{mark}  {requirement.label}{suffix}",
                font=FONT_CAPTION,
                text_color=SUCCESS_TEXT if requirement.met else TEXT_SECONDARY,
                anchor="w",
            )
            row.pack(fill="x")
            self._rows.append(row)
