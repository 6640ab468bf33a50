"""Application Host Shell.

The top-level ``CTk`` window.  Owns the single content container and
the navigator: every navigation resolves the path against the
``RouteRegistry``, asks the route guard for a decision and then shows
the loading frame, follows a redirect or renders the route's view.

All dependencies are injected via the constructor.  The shell contains
no session logic; it reacts to ``AuthService`` phase changes and
forced-expiry notifications.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Callable, Optional
from urllib.parse import urlsplit

import customtkinter as ctk

from superhub import __version__ as _APP_VERSION
from superhub.config import AppConfig
from superhub.logger import StructuredLogger
from superhub.models.auth_models import AuthResult
from superhub.models.enums import AuthPhase, RouteAction
from superhub.routing import LOGIN_ROUTE, RouteRequirements, evaluate_route, parse_route
from superhub.services import ServiceContainer
from superhub.services.auth_service import AuthService
from superhub.ui.route_registry import RouteContext, RouteRegistry
from superhub.ui.theme import (
    ACCENT_PRIMARY,
    CONTENT_BG,
    FONT_BODY,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    MIN_WINDOW_HEIGHT,
    MIN_WINDOW_WIDTH,
    TEXT_SECONDARY,
)

_APP_TITLE: str = "AI Super Hub"
_SESSION_EXPIRED_NOTICE: str = "Your session has expired. Please sign in again."
_MAX_REDIRECTS: int = 5


def normalize_location(location: str) -> str:
    """Reduce a deep link or full URL to an in-app ``path?query``.

    ``https://portal/reset-password?token=x`` and
    ``superhub://reset-password?token=x`` both become
    ``/reset-password?token=x``.
    """
    parts = urlsplit((location or "").strip())
    path = parts.path
    if parts.scheme and parts.scheme not in ("http", "https") and parts.netloc:
        path = f"/{parts.netloc}{parts.path}"
    path = "/" + path.lstrip("/")
    return f"{path}?{parts.query}" if parts.query else path


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Lifecycle
    ---------
    1. On boot: shows the loading frame and resolves the persisted
       session on a worker thread.
    2. Then navigates to *initial_route* through the route guard.
    3. Re-runs the guard when the session resolves or ends, so a
       protected screen never stays visible after logout or expiry.
    4. On close: tears down the current view and the HTTP session.

    Parameters
    ----------
    config:
        Application configuration.
    services:
        Fully-wired service container.
    registry:
        Route registry populated before shell launch.
    logger:
        Structured logger instance.
    initial_route:
        First location to open (a deep link when launched from one).
    """

    def __init__(
        self,
        config: AppConfig,
        services: ServiceContainer,
        registry: RouteRegistry,
        logger: StructuredLogger,
        initial_route: str = "/",
    ) -> None:
        super().__init__()

        self._config = config
        self._services = services
        self._registry = registry
        self._logger = logger
        self._auth_service: AuthService = services["auth_service"]

        self._current_path: str = normalize_location(initial_route)
        self._current_requirements: RouteRequirements = RouteRequirements()
        self._current_view: Optional[ctk.CTkFrame] = None
        self._loading_frame: Optional[ctk.CTkFrame] = None
        self._booted: bool = False

        # Window defaults
        self.title(_APP_TITLE)
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("green")
        self.configure(fg_color=CONTENT_BG)
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)

        self._container = ctk.CTkFrame(self, fg_color=CONTENT_BG, corner_radius=0)
        self._container.pack(fill="both", expand=True)

        services["api_client"].set_route_provider(lambda: self._current_path)
        self._unsubscribe_phase = self._auth_service.subscribe(self._on_phase_changed)
        self._auth_service.on_session_expired(
            lambda: self._dispatch(self._handle_session_expired),
        )

        # Graceful shutdown on window close
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self._start()

    # ==================================================================
    # Startup
    # ==================================================================

    def _start(self) -> None:
        """Show the loading frame and restore the session off-thread."""
        self._show_loading()

        def _bootstrap_in_background() -> None:
            try:
                result = self._auth_service.bootstrap()
            except Exception:
                self._logger.logger.exception("Session bootstrap crashed.")
                result = None
            self._dispatch(lambda: self._handle_bootstrap_result(result))

        threading.Thread(
            target=_bootstrap_in_background, name="session-bootstrap", daemon=True,
        ).start()

    def _handle_bootstrap_result(self, result: Optional[AuthResult]) -> None:
        self._booted = True
        if result is not None and not result.success:
            self._logger.info("Starting signed out: %s", result.error_message)
        self._logger.info(
            "Super Hub %s ready (phase=%s).", _APP_VERSION, self._auth_service.phase.value,
        )
        self.navigate(self._current_path)

    # ==================================================================
    # Navigation
    # ==================================================================

    def navigate(self, location: str, notice: Optional[str] = None) -> None:
        """Go to *location* through the route guard.  Main thread only."""
        self._navigate(normalize_location(location), notice, depth=0)

    def _navigate(self, path: str, notice: Optional[str], depth: int) -> None:
        route, query = parse_route(path)
        if route not in self._registry:
            if route != "/":
                self._logger.warning("Unknown route '%s'; using default.", route)
            route, query = self._registry.default_route, {}
            path = route

        entry = self._registry.get(route)
        self._current_path = path
        self._current_requirements = entry.requirements

        decision = evaluate_route(
            self._auth_service.phase, self._auth_service.user, path, entry.requirements,
        )

        if decision.action == RouteAction.LOADING:
            self._show_loading()
            return

        if decision.action == RouteAction.REDIRECT:
            target = decision.redirect_path or self._registry.default_route
            if depth >= _MAX_REDIRECTS:
                self._logger.error("Redirect loop at '%s' -> '%s'.", path, target)
                target = LOGIN_ROUTE
                self._navigate(target, notice, depth=depth)
                return
            self._logger.debug("Redirect %s -> %s", path, target)
            self._navigate(target, notice, depth + 1)
            return

        self._clear_content()
        context = RouteContext(path=path, query=query, navigate=self.navigate, notice=notice)
        view = entry.factory(self._container, context)
        view.pack(fill="both", expand=True)
        self._current_view = view
        self.title(f"{_APP_TITLE} · {entry.title}")
        self._logger.info("Showing route: %s", route)

    def _show_loading(self) -> None:
        self._clear_content()
        frame = ctk.CTkFrame(self._container, fg_color=CONTENT_BG)
        frame.pack(fill="both", expand=True)
        inner = ctk.CTkFrame(frame, fg_color="transparent")
        inner.place(relx=0.5, rely=0.5, anchor="center")
        bar = ctk.CTkProgressBar(inner, mode="indeterminate", width=180, progress_color=ACCENT_PRIMARY)
        bar.pack(pady=(0, 10))
        bar.start()
        ctk.CTkLabel(inner, text="Loading...", font=FONT_BODY, text_color=TEXT_SECONDARY).pack()
        self._loading_frame = frame

    def _clear_content(self) -> None:
        if self._current_view is not None:
            self._current_view.destroy()
            self._current_view = None
        if self._loading_frame is not None:
            self._loading_frame.destroy()
            self._loading_frame = None

    # ==================================================================
    # Session events
    # ==================================================================

    def _on_phase_changed(self, phase: AuthPhase) -> None:
        # May run on a worker thread.
        self._dispatch(lambda: self._reevaluate(phase))

    def _reevaluate(self, phase: AuthPhase) -> None:
        """Re-run the guard for the current location after a phase change.

        Only the loading frame and protected screens losing their session
        are re-evaluated; views that follow up a success themselves keep
        control of their own timing.
        """
        if not self._booted:
            return
        if self._loading_frame is not None or (
            phase == AuthPhase.UNAUTHENTICATED and self._current_requirements.require_auth
        ):
            self.navigate(self._current_path)

    def _handle_session_expired(self) -> None:
        self._logger.warning("Session expired; returning to login.")
        route, _ = parse_route(self._current_path)
        target = self._current_path if route == LOGIN_ROUTE else LOGIN_ROUTE
        self.navigate(target, notice=_SESSION_EXPIRED_NOTICE)

    # ==================================================================
    # Helpers
    # ==================================================================

    def _dispatch(self, func: Callable[[], None]) -> None:
        try:
            self.after(0, func)
        except (RuntimeError, tk.TclError):
            # Main loop already gone.
            pass

    # ==================================================================
    # Window close
    # ==================================================================

    def _on_close(self) -> None:
        """Tear down the current screen and network resources."""
        self._unsubscribe_phase()
        self._clear_content()
        self._services["api_client"].close()
        self._services["session_store"].teardown()
        self.destroy()

