"""Admin View: role-gated console placeholder.

Only reachable by accounts with the ``admin`` role; the route guard
sends everyone else to the landing view.
"""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.routing import LANDING_ROUTE
from superhub.services.auth_service import AuthService
from superhub.ui.components.auth_card import AuthCard, link_button
from superhub.ui.components.base_view import BaseView
from superhub.ui.theme import CARD_WIDTH, FONT_BODY, TEXT_SECONDARY


class AdminView(BaseView):
    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        user = auth_service.user

        card = AuthCard(self, "Admin console", user.email if user else "", icon="⚙")
        card.place_centered(self)
        ctk.CTkLabel(
            card.body,
            text="Administrative tools are managed from the web portal.",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            wraplength=CARD_WIDTH - 80,
        ).pack(fill="x", pady=(0, 12))
        link_button(card.body, "←  Back to dashboard", lambda: navigate(LANDING_ROUTE))
