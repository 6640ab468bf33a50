"""
Auth REST Client.

The RPC boundary between the desktop client and the portal backend.
Each session operation maps onto exactly one HTTP call; the bearer
token held by the ``SessionStore`` is attached to every request.

Backend responses use the envelope ``{success, message, data}``.  The
``data`` member is validated into a typed payload model here so that no
caller ever branches on loose dictionaries.

Every failure (transport exception, non-2xx status, unparseable body)
is normalised into a single :class:`ApiError` carrying an
``ApiErrorDetail``.  Raw ``requests`` exceptions never leave this
module.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import requests
from pydantic import BaseModel, ValidationError

from superhub.logger import StructuredLogger
from superhub.models.auth_models import (
    ApiErrorDetail,
    LoginResponse,
    ProfileResponse,
    RegisterResponse,
)
from superhub.models.enums import ApiErrorKind
from superhub.models.user import UserProfile
from superhub.routing import LOGIN_ROUTE, REGISTER_ROUTE, parse_route
from superhub.session_store import SessionStore

# Routes on which a 401 is an expected answer (bad credentials) rather
# than a dead session.
PUBLIC_AUTH_ROUTES: frozenset[str] = frozenset({LOGIN_ROUTE, REGISTER_ROUTE})

_TRANSPORT_MESSAGE: str = "Cannot reach the server. Check your internet connection."
_SERVER_MESSAGE: str = "The server returned an unexpected response. Please try again later."
_INVALID_CREDENTIALS_MESSAGE: str = "Invalid email or password"

_STATUS_KINDS: dict[int, ApiErrorKind] = {
    400: ApiErrorKind.VALIDATION,
    401: ApiErrorKind.AUTHORIZATION,
    403: ApiErrorKind.AUTHORIZATION,
    404: ApiErrorKind.NOT_FOUND,
    409: ApiErrorKind.CONFLICT,
    422: ApiErrorKind.VALIDATION,
}


class ApiError(Exception):
    """Single failure type raised by :class:`AuthApiClient`."""

    def __init__(self, detail: ApiErrorDetail) -> None:
        super().__init__(detail.message)
        self.detail: ApiErrorDetail = detail

    @property
    def kind(self) -> ApiErrorKind:
        return self.detail.kind

    @property
    def status_code(self) -> Optional[int]:
        return self.detail.status_code


class AuthApiClient:
    """Typed client for the ``/auth`` endpoints of the portal backend.

    Parameters
    ----------
    base_url:
        API root, e.g. ``http://localhost:5000/api``.
    timeout:
        Per-request timeout in seconds.
    session_store:
        Source of the bearer token attached to outgoing requests.
    logger:
        Structured logger.  Request bodies are never logged.
    http:
        Object with the ``requests.Session.request`` signature.  A fresh
        ``requests.Session`` is created when omitted.
    current_route:
        Returns the route currently shown by the UI; consulted before
        firing ``on_unauthorized``.
    on_unauthorized:
        Invoked (with no arguments) when an authenticated call is
        rejected with HTTP 401 outside the public auth routes.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        session_store: SessionStore,
        logger: StructuredLogger,
        http: Optional[requests.Session] = None,
        current_route: Optional[Callable[[], str]] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ) -> None:
        self._base_url: str = base_url.rstrip("/")
        self._timeout: float = timeout
        self._session_store: SessionStore = session_store
        self._logger: StructuredLogger = logger
        self._http: requests.Session = http or requests.Session()
        self._current_route: Callable[[], str] = current_route or (lambda: "")
        self._on_unauthorized: Optional[Callable[[], None]] = on_unauthorized

    def set_unauthorized_handler(self, handler: Optional[Callable[[], None]]) -> None:
        self._on_unauthorized = handler

    def set_route_provider(self, provider: Callable[[], str]) -> None:
        self._current_route = provider

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Auth operations
    # ------------------------------------------------------------------

    def register(self, name: str, email: str, password: str) -> RegisterResponse:
        data = self._request(
            "POST", "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return self._parse(RegisterResponse, data)

    def login(self, email: str, password: str) -> LoginResponse:
        """Exchange credentials for a token.

        A 401 here always means bad credentials: it is reported with a
        generic message that does not reveal which field was wrong, and
        never triggers the forced-logout hook.
        """
        data = self._request(
            "POST", "/auth/login",
            json={"email": email, "password": password},
            credential_check=True,
            credential_message=_INVALID_CREDENTIALS_MESSAGE,
        )
        return self._parse(LoginResponse, data)

    def me(self) -> UserProfile:
        data = self._request("GET", "/auth/me")
        return self._parse(ProfileResponse, data).user

    def verify_email(self, otp: str) -> UserProfile:
        data = self._request("POST", "/auth/verify-email", json={"otp": otp})
        return self._parse(ProfileResponse, data).user

    def resend_otp(self) -> None:
        self._request("POST", "/auth/resend-otp")

    def forgot_password(self, email: str) -> None:
        self._request("POST", "/auth/forgot-password", json={"email": email})

    def reset_password(self, token: str, password: str) -> None:
        self._request(
            "POST", "/auth/reset-password",
            json={"token": token, "password": password},
        )

    def logout(self) -> None:
        """Best-effort server-side logout; a 401 here is not a forced expiry."""
        self._request("POST", "/auth/logout", notify_unauthorized=False)

    def update_profile(self, name: str) -> UserProfile:
        data = self._request("PUT", "/auth/profile", json={"name": name})
        return self._parse(ProfileResponse, data).user

    def change_password(self, current_password: str, new_password: str) -> None:
        """A 401 here means the current password was wrong, not that the
        session died, so it is reported as a credential failure."""
        self._request(
            "PUT", "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
            credential_check=True,
        )

    def delete_account(self, password: Optional[str], confirmation: str) -> None:
        """Permanently delete the signed-in account.

        Like ``change_password``, a 401 means the password was wrong.
        """
        self._request(
            "DELETE", "/auth/delete-account",
            json={"password": password or "", "confirmation": confirmation},
            credential_check=True,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict[str, Any]] = None,
        credential_check: bool = False,
        credential_message: Optional[str] = None,
        notify_unauthorized: bool = True,
    ) -> Any:
        """Perform one HTTP call and return the envelope's ``data`` member.

        Raises
        ------
        ApiError
            For every failure mode.
        """
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        headers: dict[str, str] = {"Accept": "application/json"}
        token = self._session_store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._logger.debug("%s %s", method, url)

        try:
            response = self._http.request(
                method=method,
                url=url,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as exc:
            self._logger.warning(
                "API request failed: %s %s - %s", method, url, type(exc).__name__,
            )
            raise ApiError(ApiErrorDetail(
                kind=ApiErrorKind.TRANSPORT, message=_TRANSPORT_MESSAGE,
            )) from exc

        body = self._decode(response)

        if 200 <= response.status_code < 300:
            if body is None:
                raise ApiError(ApiErrorDetail(
                    kind=ApiErrorKind.SERVER,
                    message=_SERVER_MESSAGE,
                    status_code=response.status_code,
                ))
            return body.get("data")

        raise self._classify(
            response.status_code, body, credential_check, credential_message,
            notify_unauthorized,
        )

    def _classify(
        self,
        status_code: int,
        body: Optional[dict[str, Any]],
        credential_check: bool,
        credential_message: Optional[str] = None,
        notify_unauthorized: bool = True,
    ) -> ApiError:
        """Map a non-2xx response to an ``ApiError`` and fire the 401 hook."""
        server_message: Optional[str] = None
        if body is not None and isinstance(body.get("message"), str):
            server_message = body["message"]

        if status_code == 401 and credential_check:
            kind = ApiErrorKind.AUTHENTICATION
            message = (
                credential_message or server_message or _INVALID_CREDENTIALS_MESSAGE
            )
        elif status_code >= 500:
            kind = ApiErrorKind.SERVER
            message = server_message or _SERVER_MESSAGE
        else:
            kind = _STATUS_KINDS.get(status_code, ApiErrorKind.SERVER)
            message = server_message or "Request failed. Please try again."

        self._logger.warning(
            "API error %d (%s): %s", status_code, kind.value, message,
        )

        if status_code == 401 and notify_unauthorized and not credential_check:
            self._handle_unauthorized()

        return ApiError(ApiErrorDetail(
            kind=kind, message=message, status_code=status_code,
        ))

    def _handle_unauthorized(self) -> None:
        if self._is_public_route():
            return
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    def _is_public_route(self) -> bool:
        path, _query = parse_route(self._current_route() or "/")
        return path in PUBLIC_AUTH_ROUTES

    @staticmethod
    def _decode(response: requests.Response) -> Optional[dict[str, Any]]:
        """Return the JSON body as a dict, or ``None`` when it is not one."""
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    def _parse(self, model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            self._logger.error(
                "Malformed %s payload from backend: %d validation error(s).",
                model.__name__,
                exc.error_count(),
            )
            raise ApiError(ApiErrorDetail(
                kind=ApiErrorKind.SERVER, message=_SERVER_MESSAGE,
            )) from exc
