"""Base frame for routed screens.

Network calls run on daemon worker threads; every UI mutation is
dispatched back to the Tk main loop via ``self.after(0, ...)``.  Once
the shell tears a screen down, late results and timer callbacks are
dropped instead of touching destroyed widgets.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult
from superhub.ui.theme import CONTENT_BG


class BaseView(ctk.CTkFrame):
    """``CTkFrame`` with a background-work helper and a teardown hook.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    logger:
        Structured logger.
    """

    def __init__(self, parent: ctk.CTkFrame, logger: StructuredLogger) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._logger: StructuredLogger = logger
        self._alive: bool = True

    @property
    def alive(self) -> bool:
        return self._alive

    def run_in_background(
        self,
        work: Callable[[], AuthResult],
        on_done: Callable[[AuthResult], None],
        name: str = "view-worker",
    ) -> None:
        """Run *work* off the main thread, then *on_done(result)* on it.

        *on_done* always runs: if *work* raises, it receives a failed
        result so the view can re-enable its controls.
        """

        def runner() -> None:
            try:
                result = work()
            except Exception:
                self._logger.logger.exception("Background task '%s' failed.", name)
                result = AuthResult.unexpected()
            self.dispatch(lambda: on_done(result))

        threading.Thread(target=runner, name=name, daemon=True).start()

    def dispatch(self, func: Callable[[], None]) -> None:
        """Schedule *func* on the Tk loop; skipped if the view is gone."""
        if not self._alive:
            return

        def guarded() -> None:
            if self._alive:
                func()

        try:
            self.after(0, guarded)
        except (RuntimeError, tk.TclError):
            # Widget destroyed between the check and the call.
            pass

    def teardown(self) -> None:
        """Cancel timers; subclasses extend and call ``super().teardown()``."""
        self._alive = False

    def destroy(self) -> None:
        self.teardown()
        super().destroy()

    # ------------------------------------------------------------------
    # Small widget helpers shared by the forms
    # ------------------------------------------------------------------

    @staticmethod
    def show_label(label: Optional[ctk.CTkLabel], text: str, color: Optional[str] = None) -> None:
        if label is None:
            return
        if color is not None:
            label.configure(text=text, text_color=color)
        else:
            label.configure(text=text)
        if text:
            label.pack(fill="x")
        else:
            label.pack_forget()
