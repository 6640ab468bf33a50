"""
Authentication Service.

Single orchestrator for every session concern of the client: bootstrap
from a persisted token, registration, login, email verification, OTP
resend, password recovery, OAuth completion, logout and forced expiry.

Holds the canonical auth phase (``unauthenticated | authenticating |
authenticated-unverified | authenticated-verified``) and is the only
writer of the ``SessionStore``.  Sits between the UI layer and
``AuthApiClient`` so that views remain thin form handlers.

All methods return typed ``AuthResult`` models; the UI never inspects
raw exceptions.  Methods are synchronous and thread-safe: views call
them from worker threads and marshal the result back to the Tk loop.

Responses that arrive after the session they belong to was torn down
(logout, forced expiry, a newer sign-in) are discarded and reported
with ``stale=True``.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from superhub.config import AppConfig
from superhub.logger import StructuredLogger
from superhub.models.auth_models import (
    AuthResult,
    LoginDraft,
    PasswordResetRequest,
    RegistrationDraft,
    Session,
)
from superhub.models.enums import ApiErrorKind, AuthPhase
from superhub.models.user import UserProfile
from superhub.routing import (
    FORGOT_PASSWORD_ROUTE,
    LANDING_ROUTE,
    LOGIN_ROUTE,
    REGISTER_ROUTE,
    VERIFY_ROUTE,
    parse_route,
)
from superhub.services.api_client import ApiError, AuthApiClient
from superhub.session_store import SessionStore
from superhub.utils.audit import AuditAction, log_audit_event
from superhub.validators import (
    normalize_email,
    validate_forgot_password,
    validate_login,
    validate_name,
    validate_password_reset,
    validate_registration,
)

PhaseListener = Callable[[AuthPhase], None]

DELETE_CONFIRMATION: str = "DELETE"

# Failures that say nothing about the credential or token being used.
_RETRYABLE_KINDS: frozenset[ApiErrorKind] = frozenset({
    ApiErrorKind.TRANSPORT,
    ApiErrorKind.SERVER,
})

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

_FORM_ERRORS_MESSAGE: str = "Please fix the errors in the form"
_NOT_SIGNED_IN_MESSAGE: str = "Your session has ended. Please sign in again."
_OTP_INCOMPLETE_MESSAGE: str = "Please enter the 6-digit code"
_OTP_FAILED_MESSAGE: str = "Invalid verification code"
_RESEND_FAILED_MESSAGE: str = "Failed to resend code"
_RESET_FAILED_MESSAGE: str = "Failed to reset password. The link may have expired."
_RESET_RETRY_MESSAGE: str = "Could not reset your password right now. Please try again."
_RESET_NO_TOKEN_MESSAGE: str = (
    "This password reset link is invalid or has expired. Please request a new one."
)
_DELETE_FAILED_MESSAGE: str = "Failed to delete account"
_OAUTH_NO_TOKEN_MESSAGE: str = "No authentication token received"
_OAUTH_FAILED_MESSAGE: str = "Failed to complete sign in"

OAUTH_ERROR_MESSAGES: dict[str, str] = {
    "google_auth_failed": "Google authentication failed. Please try again.",
    "access_denied": "Access was denied. Please grant permission to continue.",
    "no_email": "No email found in your Google account.",
}
_OAUTH_GENERIC_ERROR: str = "An error occurred during sign in. Please try again."


class AuthService:
    """Centralised session state machine.

    Parameters
    ----------
    api:
        REST client for the ``/auth`` endpoints.  The service registers
        itself as the client's 401 handler.
    session_store:
        The single ``{token, user}`` slot.
    config:
        Application configuration (OAuth URL).
    logger:
        Structured JSON logger for the audit trail.
    """

    def __init__(
        self,
        api: AuthApiClient,
        session_store: SessionStore,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        self._api: AuthApiClient = api
        self._store: SessionStore = session_store
        self._config: AppConfig = config
        self._logger: StructuredLogger = logger

        self._lock: threading.RLock = threading.RLock()
        self._phase: AuthPhase = AuthPhase.UNAUTHENTICATED
        # Incremented whenever a session ends or a new one begins; results
        # computed under an older epoch are discarded.
        self._epoch: int = 0
        self._listeners: list[PhaseListener] = []
        self._expiry_handlers: list[Callable[[], None]] = []

        self._api.set_unauthorized_handler(self.handle_unauthorized)

    # ==================================================================
    # Observation
    # ==================================================================

    @property
    def phase(self) -> AuthPhase:
        with self._lock:
            return self._phase

    @property
    def user(self) -> Optional[UserProfile]:
        return self._store.read().user

    @property
    def session(self) -> Session:
        return self._store.read()

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        """Call *listener* with the new phase on every phase change.

        Listeners run on whichever thread caused the change.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def on_session_expired(self, handler: Callable[[], None]) -> None:
        """Register *handler* for forced logouts caused by a 401."""
        with self._lock:
            self._expiry_handlers.append(handler)

    # ==================================================================
    # Bootstrap
    # ==================================================================

    def bootstrap(self) -> AuthResult:
        """Resolve the initial phase from the persisted token.

        Without a token the machine starts ``unauthenticated``.  With one
        it enters ``authenticating``, fetches the profile and resolves
        from the result; any failure (including a network error) clears
        the stale token.
        """
        session = self._store.read()
        if not session.token:
            self._set_phase(AuthPhase.UNAUTHENTICATED)
            return self._result(success=True)

        with self._lock:
            epoch = self._epoch
        self._set_phase(AuthPhase.AUTHENTICATING)

        try:
            user = self._api.me()
        except ApiError as exc:
            with self._lock:
                if epoch != self._epoch:
                    return self._stale()
                self._store.clear()
                self._set_phase(AuthPhase.UNAUTHENTICATED)
            self._logger.warning(
                "Persisted session could not be restored (%s); signed out.",
                exc.kind.value,
            )
            return self._failure(exc)

        with self._lock:
            if epoch != self._epoch:
                return self._stale()
            self._store.replace(Session(token=session.token, user=user))
            phase = self._phase_for(user)
            self._set_phase(phase)

        log_audit_event(self._logger, AuditAction.SESSION_RESTORED, user_id=user.id)
        return self._result(success=True, user=user)

    # ==================================================================
    # Registration / login
    # ==================================================================

    def register(self, draft: RegistrationDraft) -> AuthResult:
        """Validate *draft* and create the account.

        Nothing is sent to the backend while the draft has field errors.
        """
        errors = validate_registration(draft)
        if errors:
            return self._validation_failure(errors)

        email = normalize_email(draft.email)
        with self._lock:
            epoch = self._epoch

        try:
            response = self._api.register(draft.name.strip(), email, draft.password)
        except ApiError as exc:
            self._logger.warning(
                "Registration failed for %s: %s", email, exc.kind.value,
            )
            return self._failure(exc)

        with self._lock:
            if epoch != self._epoch:
                return self._stale()
            self._epoch += 1
            self._store.replace(Session(token=response.token, user=response.user))
            phase = (
                AuthPhase.AUTHENTICATED_UNVERIFIED
                if response.requires_verification
                else AuthPhase.AUTHENTICATED_VERIFIED
            )
            self._set_phase(phase)

        log_audit_event(
            self._logger, AuditAction.REGISTER,
            user_id=response.user.id, details={"email": response.user.email},
        )
        return self._result(
            success=True,
            user=response.user,
            requires_verification=response.requires_verification,
            next_route=VERIFY_ROUTE if response.requires_verification else LANDING_ROUTE,
            error_message=(
                "Please check your email for verification code!"
                if response.requires_verification
                else "Account created successfully!"
            ),
        )

    def login(self, draft: LoginDraft, return_to: Optional[str] = None) -> AuthResult:
        """Exchange credentials for a session.

        Bad credentials produce a generic message that does not reveal
        which field was wrong.  On success ``next_route`` is the
        verification page for unverified accounts, otherwise *return_to*
        (when it is a safe in-app location) or the landing view.
        """
        errors = validate_login(draft)
        if errors:
            return self._validation_failure(errors)

        email = normalize_email(draft.email)
        with self._lock:
            epoch = self._epoch

        try:
            response = self._api.login(email, draft.password)
        except ApiError as exc:
            log_audit_event(
                self._logger, AuditAction.LOGIN_FAILED,
                details={"email": email, "reason": exc.kind.value},
            )
            return self._failure(exc)

        requires_verification = (
            response.requires_verification or not response.user.is_email_verified
        )

        with self._lock:
            if epoch != self._epoch:
                return self._stale()
            self._epoch += 1
            self._store.replace(Session(token=response.token, user=response.user))
            self._set_phase(
                AuthPhase.AUTHENTICATED_UNVERIFIED
                if requires_verification
                else AuthPhase.AUTHENTICATED_VERIFIED
            )

        log_audit_event(
            self._logger, AuditAction.LOGIN,
            user_id=response.user.id, details={"email": response.user.email},
        )

        if requires_verification:
            next_route = VERIFY_ROUTE
            message = "Please verify your email to continue"
        else:
            next_route = self._safe_return_to(return_to) or LANDING_ROUTE
            message = f"Welcome back, {response.user.name}!"

        return self._result(
            success=True,
            user=response.user,
            requires_verification=requires_verification,
            next_route=next_route,
            error_message=message,
        )

    # ==================================================================
    # Email verification
    # ==================================================================

    def verify_email(self, otp: str) -> AuthResult:
        """Submit the six-digit code.

        On failure the phase is unchanged and the caller clears the OTP
        input.  The error may be specific since the account is known.
        """
        if not self._store.read().token:
            return self._not_signed_in()

        code = (otp or "").strip()
        if len(code) != 6 or not code.isdigit():
            return self._result(
                success=False,
                error_kind=ApiErrorKind.VALIDATION,
                error_message=_OTP_INCOMPLETE_MESSAGE,
                field_errors={"otp": _OTP_INCOMPLETE_MESSAGE},
            )

        with self._lock:
            epoch = self._epoch

        try:
            user = self._api.verify_email(code)
        except ApiError as exc:
            with self._lock:
                if epoch != self._epoch:
                    return self._stale()
            return self._failure(exc, default_message=_OTP_FAILED_MESSAGE)

        with self._lock:
            session = self._store.read()
            if epoch != self._epoch or not session.token:
                return self._stale()
            if not user.is_email_verified:
                user = user.model_copy(update={"is_email_verified": True})
            self._store.replace(Session(token=session.token, user=user))
            self._set_phase(AuthPhase.AUTHENTICATED_VERIFIED)

        log_audit_event(self._logger, AuditAction.EMAIL_VERIFIED, user_id=user.id)
        return self._result(
            success=True,
            user=user,
            next_route=LANDING_ROUTE,
            error_message="Email verified successfully!",
        )

    def resend_otp(self) -> AuthResult:
        """Ask the backend for a fresh code.

        The caller owns the advisory cooldown; the server stays the
        authority.
        """
        session = self._store.read()
        if not session.token:
            return self._not_signed_in()

        with self._lock:
            epoch = self._epoch

        try:
            self._api.resend_otp()
        except ApiError as exc:
            with self._lock:
                if epoch != self._epoch:
                    return self._stale()
            return self._failure(exc, default_message=_RESEND_FAILED_MESSAGE)

        with self._lock:
            if epoch != self._epoch:
                return self._stale()

        log_audit_event(
            self._logger, AuditAction.OTP_RESENT,
            user_id=session.user.id if session.user else None,
        )
        return self._result(success=True, error_message="New verification code sent!")

    # ==================================================================
    # Password recovery
    # ==================================================================

    def forgot_password(self, email: str) -> AuthResult:
        """Request a reset link.

        Any backend outcome, including transport failure, reports
        success so the response never reveals whether an account exists.
        """
        errors = validate_forgot_password(email)
        if errors:
            return self._result(
                success=False,
                error_kind=ApiErrorKind.VALIDATION,
                error_message=errors["email"],
                field_errors=errors,
            )

        normalized = normalize_email(email)
        try:
            self._api.forgot_password(normalized)
        except ApiError as exc:
            self._logger.warning(
                "Forgot-password request not confirmed by backend (%s).",
                exc.kind.value,
            )

        log_audit_event(
            self._logger, AuditAction.PASSWORD_RESET_REQUESTED,
            details={"email": normalized},
        )
        return self._result(
            success=True, error_message="Reset link sent! Check your email.",
        )

    def reset_password(self, request: PasswordResetRequest) -> AuthResult:
        """Set a new password using the single-use token from the link.

        A rejected token is terminal: ``next_route`` points at the
        forgot-password page so the user requests a new link instead of
        retrying.  Transport and server failures say nothing about the
        token, so they come back retryable with no ``next_route``.
        """
        if not request.token:
            return self._result(
                success=False,
                error_kind=ApiErrorKind.VALIDATION,
                error_message=_RESET_NO_TOKEN_MESSAGE,
                next_route=FORGOT_PASSWORD_ROUTE,
            )

        errors = validate_password_reset(request)
        if errors:
            return self._validation_failure(errors, message=next(iter(errors.values())))

        try:
            self._api.reset_password(request.token, request.new_password)
        except ApiError as exc:
            if exc.kind in _RETRYABLE_KINDS:
                self._logger.warning("Password reset not completed (%s).", exc.kind.value)
                return self._failure(exc, default_message=_RESET_RETRY_MESSAGE)
            self._logger.warning("Password reset rejected (%s).", exc.kind.value)
            message = exc.detail.message or _RESET_FAILED_MESSAGE
            return self._result(
                success=False,
                error_kind=exc.kind,
                error_message=message,
                next_route=FORGOT_PASSWORD_ROUTE,
            )

        log_audit_event(self._logger, AuditAction.PASSWORD_RESET)
        return self._result(
            success=True,
            next_route=LOGIN_ROUTE,
            error_message="Password reset successful!",
        )

    # ==================================================================
    # OAuth
    # ==================================================================

    def oauth_authorize_url(self) -> str:
        """URL of the identity provider redirect, opened in the browser."""
        return self._config.oauth_authorize_url

    def complete_oauth(self, token: Optional[str], error: Optional[str] = None) -> AuthResult:
        """Turn the callback route's ``token`` / ``error`` into a session."""
        if error:
            message = OAUTH_ERROR_MESSAGES.get(error, _OAUTH_GENERIC_ERROR)
            self._logger.warning("OAuth sign-in failed: %s", error)
            return self._result(
                success=False,
                error_kind=ApiErrorKind.AUTHENTICATION,
                error_message=message,
                next_route=LOGIN_ROUTE,
            )
        if not token:
            return self._result(
                success=False,
                error_kind=ApiErrorKind.AUTHENTICATION,
                error_message=_OAUTH_NO_TOKEN_MESSAGE,
                next_route=LOGIN_ROUTE,
            )

        with self._lock:
            self._epoch += 1
            epoch = self._epoch
            self._store.replace(Session(token=token, user=None))
            self._set_phase(AuthPhase.AUTHENTICATING)

        try:
            user = self._api.me()
        except ApiError as exc:
            with self._lock:
                if epoch != self._epoch:
                    return self._stale()
                self._store.clear()
                self._set_phase(AuthPhase.UNAUTHENTICATED)
            return self._failure(
                exc, default_message=_OAUTH_FAILED_MESSAGE, next_route=LOGIN_ROUTE,
            )

        with self._lock:
            if epoch != self._epoch:
                return self._stale()
            self._store.replace(Session(token=token, user=user))
            phase = self._phase_for(user)
            self._set_phase(phase)

        log_audit_event(self._logger, AuditAction.OAUTH_LOGIN, user_id=user.id)
        unverified = phase == AuthPhase.AUTHENTICATED_UNVERIFIED
        return self._result(
            success=True,
            user=user,
            requires_verification=unverified,
            next_route=VERIFY_ROUTE if unverified else LANDING_ROUTE,
            error_message=f"Welcome, {user.name or 'back'}!",
        )

    # ==================================================================
    # Account maintenance
    # ==================================================================

    def update_profile(self, name: str) -> AuthResult:
        """Rename the account; the returned profile replaces the old one."""
        session = self._store.read()
        if not session.is_complete:
            return self._not_signed_in()

        check = validate_name(name)
        if not check.is_valid:
            return self._validation_failure(
                {"name": check.message or "Name is required"},
            )

        with self._lock:
            epoch = self._epoch

        try:
            user = self._api.update_profile(name.strip())
        except ApiError as exc:
            return self._failure(exc)

        with self._lock:
            current = self._store.read()
            if epoch != self._epoch or not current.token:
                return self._stale()
            self._store.replace(Session(token=current.token, user=user))

        log_audit_event(self._logger, AuditAction.PROFILE_UPDATED, user_id=user.id)
        return self._result(
            success=True, user=user, error_message="Profile updated successfully",
        )

    def change_password(
        self,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> AuthResult:
        session = self._store.read()
        if not session.is_complete:
            return self._not_signed_in()

        errors: dict[str, str] = {}
        if not current_password:
            errors["current_password"] = "Current password is required"
        errors.update(validate_password_reset(PasswordResetRequest(
            new_password=new_password, confirm_password=confirm_password,
        )))
        if errors:
            return self._validation_failure(errors)

        try:
            self._api.change_password(current_password, new_password)
        except ApiError as exc:
            return self._failure(exc)

        log_audit_event(
            self._logger, AuditAction.PASSWORD_CHANGED,
            user_id=session.user.id if session.user else None,
        )
        return self._result(
            success=True, error_message="Password changed successfully",
        )

    def delete_account(self, password: str, confirmation: str) -> AuthResult:
        """Permanently delete the account and end the session.

        The user must type ``DELETE``; accounts with a local password
        must also re-enter it.  A wrong password is a credential failure
        and leaves the session intact.
        """
        session = self._store.read()
        if not session.is_complete or session.user is None:
            return self._not_signed_in()

        errors: dict[str, str] = {}
        if confirmation.strip() != DELETE_CONFIRMATION:
            errors["confirmation"] = f"Please type {DELETE_CONFIRMATION} to confirm"
        if session.user.has_password and not password:
            errors["password"] = "Please enter your password"
        if errors:
            return self._validation_failure(errors, message=next(iter(errors.values())))

        with self._lock:
            epoch = self._epoch

        try:
            self._api.delete_account(password, DELETE_CONFIRMATION)
        except ApiError as exc:
            return self._failure(exc, default_message=_DELETE_FAILED_MESSAGE)

        with self._lock:
            if epoch != self._epoch:
                return self._stale()
            self._epoch += 1
            self._store.clear()
            self._set_phase(AuthPhase.UNAUTHENTICATED)

        log_audit_event(self._logger, AuditAction.ACCOUNT_DELETED, user_id=session.user.id)
        return self._result(
            success=True, next_route=LOGIN_ROUTE, error_message="Account deleted successfully",
        )

    # ==================================================================
    # Session teardown
    # ==================================================================

    def logout(self) -> AuthResult:
        """End the session.

        The backend is told first on a best-effort basis; the local
        session is cleared regardless of the outcome.
        """
        session = self._store.read()
        with self._lock:
            self._epoch += 1

        if session.token:
            try:
                self._api.logout()
            except ApiError as exc:
                self._logger.info(
                    "Backend logout not confirmed (%s); clearing locally.",
                    exc.kind.value,
                )

        with self._lock:
            self._store.clear()
            self._set_phase(AuthPhase.UNAUTHENTICATED)

        log_audit_event(
            self._logger, AuditAction.LOGOUT,
            user_id=session.user.id if session.user else None,
        )
        return self._result(
            success=True, next_route=LOGIN_ROUTE, error_message="Logged out successfully",
        )

    def handle_unauthorized(self) -> None:
        """401 on an authenticated call: drop the session and notify.

        Registered as the API client's hook, which already skips the
        public login and registration routes.
        """
        with self._lock:
            session = self._store.read()
            if not session.token and self._phase == AuthPhase.UNAUTHENTICATED:
                return
            self._epoch += 1
            self._store.clear()
            self._set_phase(AuthPhase.UNAUTHENTICATED)
            handlers = list(self._expiry_handlers)

        log_audit_event(
            self._logger, AuditAction.SESSION_EXPIRED,
            user_id=session.user.id if session.user else None,
        )
        for handler in handlers:
            handler()

    # ==================================================================
    # Private helpers
    # ==================================================================

    @staticmethod
    def _phase_for(user: UserProfile) -> AuthPhase:
        if user.is_email_verified:
            return AuthPhase.AUTHENTICATED_VERIFIED
        return AuthPhase.AUTHENTICATED_UNVERIFIED

    @staticmethod
    def _safe_return_to(return_to: Optional[str]) -> Optional[str]:
        """Accept only in-app paths that are not themselves auth pages."""
        if not return_to or not return_to.startswith("/") or return_to.startswith("//"):
            return None
        route, _ = parse_route(return_to)
        if route in (LOGIN_ROUTE, REGISTER_ROUTE, VERIFY_ROUTE):
            return None
        return return_to

    def _set_phase(self, phase: AuthPhase) -> None:
        with self._lock:
            if phase == self._phase:
                return
            self._phase = phase
            listeners = list(self._listeners)
        self._logger.debug("Auth phase -> %s", phase.value)
        for listener in listeners:
            listener(phase)

    def _result(self, success: bool, **fields: object) -> AuthResult:
        fields.setdefault("phase", self.phase)
        if "user" not in fields:
            fields["user"] = self._store.read().user
        return AuthResult(success=success, **fields)

    def _failure(
        self,
        exc: ApiError,
        default_message: Optional[str] = None,
        next_route: Optional[str] = None,
    ) -> AuthResult:
        message = exc.detail.message
        if default_message and exc.kind in (ApiErrorKind.SERVER, ApiErrorKind.NOT_FOUND):
            message = default_message
        return self._result(
            success=False,
            error_kind=exc.kind,
            error_message=message,
            next_route=next_route,
        )

    def _validation_failure(
        self,
        errors: dict[str, str],
        message: str = _FORM_ERRORS_MESSAGE,
    ) -> AuthResult:
        return self._result(
            success=False,
            error_kind=ApiErrorKind.VALIDATION,
            error_message=message,
            field_errors=errors,
        )

    def _not_signed_in(self) -> AuthResult:
        return self._result(
            success=False,
            error_kind=ApiErrorKind.AUTHORIZATION,
            error_message=_NOT_SIGNED_IN_MESSAGE,
            next_route=LOGIN_ROUTE,
        )

    def _stale(self) -> AuthResult:
        self._logger.info("Discarded a response that outlived its session.")
        return self._result(success=False, stale=True)
