"""
REST client tests: envelope parsing, error normalisation and the 401 hook.
"""

import pytest

from superhub.models.auth_models import Session
from superhub.models.enums import ApiErrorKind
from superhub.services.api_client import ApiError
from tests.fakes import FakeResponse, envelope, failure, user_payload


@pytest.fixture
def expired(api_client):
    calls = []
    api_client.set_unauthorized_handler(lambda: calls.append("expired"))
    return calls


class TestRequests:
    def test_login_parses_token_and_user(self, api_client, http):
        http.on("POST", "/auth/login", envelope({"token": "t1", "user": user_payload()}))
        response = api_client.login("jane@example.com", "Secret123")
        assert response.token == "t1"
        assert response.user.id == "u-1"
        assert response.user.is_email_verified
        assert http.calls[0]["json"] == {"email": "jane@example.com", "password": "Secret123"}
        assert http.calls[0]["timeout"] == 5.0

    def test_bearer_token_attached(self, api_client, http, session_store):
        session_store.replace(Session(token="t1"))
        http.on("GET", "/auth/me", envelope({"user": user_payload()}))
        api_client.me()
        assert http.calls[0]["headers"]["Authorization"] == "Bearer t1"

    def test_no_token_no_header(self, api_client, http):
        http.on("POST", "/auth/forgot-password", envelope())
        api_client.forgot_password("jane@example.com")
        assert "Authorization" not in http.calls[0]["headers"]

    def test_change_password_body(self, api_client, http):
        http.on("PUT", "/auth/change-password", envelope())
        api_client.change_password("Old12345", "New12345")
        assert http.calls[0]["json"] == {
            "currentPassword": "Old12345", "newPassword": "New12345",
        }

    def test_register_requires_verification_by_default(self, api_client, http):
        http.on("POST", "/auth/register", envelope(
            {"token": "t1", "user": user_payload(verified=False)}, status=201,
        ))
        assert api_client.register("Jane Doe", "jane@example.com", "Secret123").requires_verification


class TestErrors:
    def test_transport_failure(self, api_client, http, connection_error):
        http.on("GET", "/auth/me", connection_error)
        with pytest.raises(ApiError) as info:
            api_client.me()
        assert info.value.kind == ApiErrorKind.TRANSPORT
        assert info.value.status_code is None

    @pytest.mark.parametrize(
        "status, kind",
        [
            (400, ApiErrorKind.VALIDATION),
            (403, ApiErrorKind.AUTHORIZATION),
            (404, ApiErrorKind.NOT_FOUND),
            (409, ApiErrorKind.CONFLICT),
            (500, ApiErrorKind.SERVER),
            (503, ApiErrorKind.SERVER),
        ],
    )
    def test_status_mapping_keeps_server_message(self, api_client, http, status, kind):
        http.on("POST", "/auth/register", failure(status, "User already exists"))
        with pytest.raises(ApiError) as info:
            api_client.register("Jane Doe", "jane@example.com", "Secret123")
        assert info.value.kind == kind
        assert info.value.detail.message == "User already exists"
        assert info.value.status_code == status

    def test_login_401_is_generic_credential_error(self, api_client, http, expired):
        http.on("POST", "/auth/login", failure(401, "No user with that email"))
        with pytest.raises(ApiError) as info:
            api_client.login("jane@example.com", "wrong")
        assert info.value.kind == ApiErrorKind.AUTHENTICATION
        assert info.value.detail.message == "Invalid email or password"
        assert expired == []

    def test_change_password_401_keeps_session(self, api_client, http, expired):
        http.on("PUT", "/auth/change-password", failure(401, "Current password is incorrect"))
        with pytest.raises(ApiError) as info:
            api_client.change_password("wrong", "New12345")
        assert info.value.kind == ApiErrorKind.AUTHENTICATION
        assert info.value.detail.message == "Current password is incorrect"
        assert expired == []

    def test_malformed_success_body(self, api_client, http):
        http.on("GET", "/auth/me", FakeResponse(200, None))
        with pytest.raises(ApiError) as info:
            api_client.me()
        assert info.value.kind == ApiErrorKind.SERVER

    def test_unexpected_payload_shape(self, api_client, http):
        http.on("GET", "/auth/me", envelope({"profile": {}}))
        with pytest.raises(ApiError) as info:
            api_client.me()
        assert info.value.kind == ApiErrorKind.SERVER


class TestUnauthorizedHook:
    def test_401_on_protected_call_fires_hook(self, api_client, http, expired):
        api_client.set_route_provider(lambda: "/dashboard")
        http.on("GET", "/auth/me", failure(401, "Token expired"))
        with pytest.raises(ApiError) as info:
            api_client.me()
        assert info.value.kind == ApiErrorKind.AUTHORIZATION
        assert expired == ["expired"]

    @pytest.mark.parametrize("route", ["/login", "/register", "/login?return_to=%2Fdashboard"])
    def test_public_routes_are_exempt(self, api_client, http, expired, route):
        api_client.set_route_provider(lambda: route)
        http.on("GET", "/auth/me", failure(401, "Token expired"))
        with pytest.raises(ApiError):
            api_client.me()
        assert expired == []

    @pytest.mark.parametrize("route", ["/dashboard?from=/login", "/admin?return_to=%2Fregister"])
    def test_only_the_path_decides_exemption(self, api_client, http, expired, route):
        api_client.set_route_provider(lambda: route)
        http.on("GET", "/auth/me", failure(401, "Token expired"))
        with pytest.raises(ApiError):
            api_client.me()
        assert expired == ["expired"]

    def test_delete_account_401_is_wrong_password(self, api_client, http, expired):
        api_client.set_route_provider(lambda: "/dashboard")
        http.on("DELETE", "/auth/delete-account", failure(401, "Incorrect password"))
        with pytest.raises(ApiError) as info:
            api_client.delete_account("wrong", "DELETE")
        assert info.value.kind == ApiErrorKind.AUTHENTICATION
        assert expired == []

    def test_logout_401_does_not_fire_hook(self, api_client, http, expired):
        api_client.set_route_provider(lambda: "/dashboard")
        http.on("POST", "/auth/logout", failure(401, "Token expired"))
        with pytest.raises(ApiError):
            api_client.logout()
        assert expired == []

    def test_403_does_not_fire_hook(self, api_client, http, expired):
        api_client.set_route_provider(lambda: "/admin")
        http.on("PUT", "/auth/profile", failure(403, "Forbidden"))
        with pytest.raises(ApiError):
            api_client.update_profile("Jane")
        assert expired == []

    def test_close_closes_http_session(self, api_client, http):
        api_client.close()
        assert http.closed
