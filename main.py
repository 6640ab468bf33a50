"""
AI Super Hub Desktop Client Entry Point.

Bootstraps the entire dependency graph via constructor injection,
initialises the local SQLite schema, restores the persisted session
token and launches the CustomTkinter GUI.  Every subsystem is wired
here; there are no module-level globals.

Usage::

    python main.py
    python main.py "/reset-password?token=..."      # open a deep link
    python main.py "superhub://auth/callback?token=..."
"""

from __future__ import annotations

import atexit
import sys
import traceback
import webbrowser

from superhub.config import get_config
from superhub.database import LocalDatabase
from superhub.logger import StructuredLogger, get_logger
from superhub.routing import (
    ADMIN_ROUTE,
    CALLBACK_ROUTE,
    FORGOT_PASSWORD_ROUTE,
    LANDING_ROUTE,
    LOGIN_ROUTE,
    REGISTER_ROUTE,
    RESET_PASSWORD_ROUTE,
    VERIFY_ROUTE,
    RouteRequirements,
)
from superhub.schema import initialize_schema
from superhub.services import create_services
from superhub.services.token_store import TokenStore
from superhub.session_store import SessionStore
from superhub.ui.app_shell import AppShell
from superhub.ui.route_registry import RouteRegistry
from superhub.ui.views import (
    AdminView,
    AuthCallbackView,
    DashboardView,
    ForgotPasswordView,
    LoginView,
    RegisterView,
    ResetPasswordView,
    VerifyEmailView,
)


def main() -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting AI Super Hub...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Local database (holds the encrypted token slot)
    # ------------------------------------------------------------------
    db = LocalDatabase(
        sqlite_path=config.TOKEN_DB_PATH,
        logger=StructuredLogger(name="database"),
    )

    # db.close() is idempotent; this covers exits that skip the finally below.
    atexit.register(db.close)

    initialize_schema(db.sqlite, StructuredLogger(name="schema"))

    # ------------------------------------------------------------------
    # 3. Session store, restored from the encrypted token slot
    # ------------------------------------------------------------------
    token_store = TokenStore(db=db, logger=StructuredLogger(name="token_store"))
    session_store = SessionStore(
        storage=token_store,
        storage_key=config.TOKEN_STORAGE_KEY,
        logger=StructuredLogger(name="session_store"),
    )
    session_store.init()

    # ------------------------------------------------------------------
    # 4. Service container (API client + auth state machine)
    # ------------------------------------------------------------------
    services = create_services(config=config, session_store=session_store)
    auth_service = services["auth_service"]

    def open_oauth() -> None:
        url = auth_service.oauth_authorize_url()
        logger.info("Opening OAuth sign-in in the browser: %s", url)
        webbrowser.open(url)

    # ------------------------------------------------------------------
    # 5. Route registry (one entry per screen)
    # ------------------------------------------------------------------
    registry = RouteRegistry(logger=get_logger("routes"))
    view_logger = get_logger("ui")

    registry.register(
        LOGIN_ROUTE,
        "Sign in",
        lambda parent, ctx: LoginView(
            parent=parent,
            auth_service=auth_service,
            navigate=ctx.navigate,
            open_oauth=open_oauth,
            logger=view_logger,
            return_to=ctx.query.get("return_to"),
            notice=ctx.notice,
        ),
    )
    registry.register(
        REGISTER_ROUTE,
        "Create account",
        lambda parent, ctx: RegisterView(
            parent=parent,
            auth_service=auth_service,
            navigate=ctx.navigate,
            open_oauth=open_oauth,
            logger=view_logger,
        ),
    )
    registry.register(
        VERIFY_ROUTE,
        "Verify email",
        lambda parent, ctx: VerifyEmailView(
            parent=parent,
            auth_service=auth_service,
            config=config,
            navigate=ctx.navigate,
            logger=view_logger,
        ),
        RouteRequirements(require_auth=True),
    )
    registry.register(
        FORGOT_PASSWORD_ROUTE,
        "Forgot password",
        lambda parent, ctx: ForgotPasswordView(
            parent=parent,
            auth_service=auth_service,
            navigate=ctx.navigate,
            logger=view_logger,
        ),
    )
    registry.register(
        RESET_PASSWORD_ROUTE,
        "Reset password",
        lambda parent, ctx: ResetPasswordView(
            parent=parent,
            auth_service=auth_service,
            config=config,
            navigate=ctx.navigate,
            logger=view_logger,
            token=ctx.query.get("token"),
        ),
    )
    registry.register(
        CALLBACK_ROUTE,
        "Signing in",
        lambda parent, ctx: AuthCallbackView(
            parent=parent,
            auth_service=auth_service,
            config=config,
            navigate=ctx.navigate,
            logger=view_logger,
            token=ctx.query.get("token"),
            error=ctx.query.get("error"),
        ),
    )
    registry.register(
        LANDING_ROUTE,
        "Dashboard",
        lambda parent, ctx: DashboardView(
            parent=parent,
            auth_service=auth_service,
            navigate=ctx.navigate,
            logger=view_logger,
        ),
        RouteRequirements(require_auth=True, require_verification=True),
        default=True,
    )
    registry.register(
        ADMIN_ROUTE,
        "Admin",
        lambda parent, ctx: AdminView(
            parent=parent,
            auth_service=auth_service,
            navigate=ctx.navigate,
            logger=view_logger,
        ),
        RouteRequirements(require_auth=True, require_verification=True, admin_only=True),
    )

    # ------------------------------------------------------------------
    # 6. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    initial_route = sys.argv[1] if len(sys.argv) > 1 else "/"
    logger.info("Launching GUI...")
    app = AppShell(
        config=config,
        services=services,
        registry=registry,
        logger=get_logger("shell"),
        initial_route=initial_route,
    )
    try:
        app.mainloop()
    finally:
        db.close()
        logger.info("AI Super Hub shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Display a fatal-error dialog so double-click users get feedback.

    Uses ``tkinter.messagebox`` rather than CustomTkinter so the dialog
    works even when CTk initialisation itself is the thing that failed.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="AI Super Hub: Fatal Error",
            message=(
                "The application encountered an unexpected error and "
                "cannot continue.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: fall back to stderr.
        sys.stderr.write(
            f"FATAL: {type(exc).__name__}: {exc}\n{detail}"
        )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
