"""
Auth service tests: the session state machine end to end against a
scripted backend.
"""

import pytest

from superhub.models.auth_models import LoginDraft, PasswordResetRequest, RegistrationDraft
from superhub.models.enums import ApiErrorKind, AuthPhase
from superhub.routing import FORGOT_PASSWORD_ROUTE, LANDING_ROUTE, LOGIN_ROUTE, VERIFY_ROUTE
from superhub.services.api_client import ApiError
from tests.fakes import envelope, failure, user_payload

GOOD_DRAFT = RegistrationDraft(
    name="Jane Doe",
    email="Jane@Example.com",
    password="Secret123",
    confirm_password="Secret123",
)


@pytest.fixture
def phases(auth_service):
    seen = []
    auth_service.subscribe(seen.append)
    return seen


@pytest.fixture
def signed_in(auth_service, http):
    """A verified session established through a normal login."""
    http.on("POST", "/auth/login", envelope({"token": "t1", "user": user_payload()}))
    result = auth_service.login(LoginDraft(email="jane@example.com", password="Secret123"))
    assert result.success
    http.calls.clear()
    return result


class TestBootstrap:
    def test_without_token_starts_signed_out(self, auth_service, http):
        result = auth_service.bootstrap()
        assert result.success
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert http.calls == []

    def test_restores_verified_session(self, auth_service, session_store, http, phases):
        session_store.replace(session_store.read().model_copy(update={"token": "t1"}))
        http.on("GET", "/auth/me", envelope({"user": user_payload()}))

        result = auth_service.bootstrap()

        assert result.success
        assert phases == [AuthPhase.AUTHENTICATING, AuthPhase.AUTHENTICATED_VERIFIED]
        assert auth_service.user.email == "jane@example.com"
        assert auth_service.session.token == "t1"

    def test_restores_unverified_session(self, auth_service, session_store, http):
        session_store.replace(session_store.read().model_copy(update={"token": "t1"}))
        http.on("GET", "/auth/me", envelope({"user": user_payload(verified=False)}))
        auth_service.bootstrap()
        assert auth_service.phase == AuthPhase.AUTHENTICATED_UNVERIFIED

    def test_failed_profile_fetch_clears_token(
        self, auth_service, session_store, storage, http, connection_error,
    ):
        session_store.replace(session_store.read().model_copy(update={"token": "t1"}))
        http.on("GET", "/auth/me", connection_error)

        result = auth_service.bootstrap()

        assert not result.success
        assert result.error_kind == ApiErrorKind.TRANSPORT
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert storage.data == {}


class TestRegister:
    def test_invalid_draft_makes_no_call(self, auth_service, http):
        draft = GOOD_DRAFT.model_copy(update={"confirm_password": "Secret124"})
        result = auth_service.register(draft)
        assert not result.success
        assert result.error_kind == ApiErrorKind.VALIDATION
        assert result.field_errors == {"confirm_password": "Passwords do not match"}
        assert http.calls == []

    def test_success_requires_verification(self, auth_service, http, storage):
        http.on("POST", "/auth/register", envelope(
            {"token": "t1", "user": user_payload(verified=False), "requiresVerification": True},
            status=201,
        ))
        result = auth_service.register(GOOD_DRAFT)

        assert result.success
        assert result.requires_verification
        assert result.next_route == VERIFY_ROUTE
        assert auth_service.phase == AuthPhase.AUTHENTICATED_UNVERIFIED
        assert storage.data == {"token": "t1"}
        assert http.calls[0]["json"] == {
            "name": "Jane Doe", "email": "jane@example.com", "password": "Secret123",
        }

    def test_duplicate_email(self, auth_service, http):
        http.on("POST", "/auth/register", failure(400, "User already exists with this email"))
        result = auth_service.register(GOOD_DRAFT)
        assert not result.success
        assert result.error_message == "User already exists with this email"
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED


class TestLogin:
    def test_verified_login_goes_to_landing(self, auth_service, signed_in):
        assert signed_in.next_route == LANDING_ROUTE
        assert signed_in.error_message == "Welcome back, Jane Doe!"
        assert auth_service.phase == AuthPhase.AUTHENTICATED_VERIFIED

    def test_unverified_login_goes_to_verification(self, auth_service, http):
        http.on("POST", "/auth/login", envelope(
            {"token": "t1", "user": user_payload(verified=False)},
        ))
        result = auth_service.login(LoginDraft(email="jane@example.com", password="Secret123"))
        assert result.requires_verification
        assert result.next_route == VERIFY_ROUTE
        assert auth_service.phase == AuthPhase.AUTHENTICATED_UNVERIFIED

    @pytest.mark.parametrize(
        "return_to, expected",
        [
            ("/admin", "/admin"),
            ("//evil.example.com", LANDING_ROUTE),
            ("https://evil.example.com", LANDING_ROUTE),
            ("/login", LANDING_ROUTE),
            (None, LANDING_ROUTE),
        ],
    )
    def test_return_to(self, auth_service, http, return_to, expected):
        http.on("POST", "/auth/login", envelope({"token": "t1", "user": user_payload()}))
        result = auth_service.login(
            LoginDraft(email="jane@example.com", password="Secret123"), return_to=return_to,
        )
        assert result.next_route == expected

    def test_bad_credentials(self, auth_service, http, storage):
        http.on("POST", "/auth/login", failure(401, "Invalid credentials"))
        result = auth_service.login(LoginDraft(email="jane@example.com", password="nope"))
        assert not result.success
        assert result.error_kind == ApiErrorKind.AUTHENTICATION
        assert result.error_message == "Invalid email or password"
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert storage.data == {}

    def test_missing_fields_make_no_call(self, auth_service, http):
        result = auth_service.login(LoginDraft())
        assert set(result.field_errors) == {"email", "password"}
        assert http.calls == []


class TestVerifyEmail:
    @pytest.fixture
    def unverified(self, auth_service, http):
        http.on("POST", "/auth/login", envelope(
            {"token": "t1", "user": user_payload(verified=False)},
        ))
        auth_service.login(LoginDraft(email="jane@example.com", password="Secret123"))
        http.calls.clear()

    def test_incomplete_code_makes_no_call(self, auth_service, http, unverified):
        result = auth_service.verify_email("123")
        assert result.error_message == "Please enter the 6-digit code"
        assert http.calls == []

    def test_success_marks_profile_verified(self, auth_service, http, unverified):
        # Backend echoes a stale flag; the client still records the account as verified.
        http.on("POST", "/auth/verify-email", envelope({"user": user_payload(verified=False)}))
        result = auth_service.verify_email("123456")
        assert result.success
        assert result.next_route == LANDING_ROUTE
        assert auth_service.user.is_email_verified
        assert auth_service.phase == AuthPhase.AUTHENTICATED_VERIFIED
        assert http.calls[0]["json"] == {"otp": "123456"}

    def test_wrong_code_keeps_phase(self, auth_service, http, unverified):
        http.on("POST", "/auth/verify-email", failure(400, "Invalid or expired OTP"))
        result = auth_service.verify_email("000000")
        assert not result.success
        assert result.error_message == "Invalid or expired OTP"
        assert auth_service.phase == AuthPhase.AUTHENTICATED_UNVERIFIED

    def test_response_after_logout_is_stale(self, auth_service, http, unverified, storage):
        http.on("POST", "/auth/verify-email", envelope({"user": user_payload()}))
        http.on("POST", "/auth/logout", envelope())

        def logout_mid_flight(method, path):
            if path == "/auth/verify-email":
                auth_service.logout()

        http.before_response = logout_mid_flight
        result = auth_service.verify_email("123456")

        assert result.stale
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert auth_service.user is None
        assert storage.data == {}

    def test_requires_session(self, auth_service, http):
        result = auth_service.verify_email("123456")
        assert not result.success
        assert result.next_route == LOGIN_ROUTE
        assert http.calls == []

    def test_resend(self, auth_service, http, unverified):
        http.on("POST", "/auth/resend-otp", envelope())
        result = auth_service.resend_otp()
        assert result.success
        assert result.error_message == "New verification code sent!"


class TestPasswordRecovery:
    @pytest.mark.parametrize(
        "response",
        [envelope(), failure(404, "No user found with that email"), failure(500, "boom")],
    )
    def test_forgot_password_never_reveals_accounts(self, auth_service, http, response):
        http.on("POST", "/auth/forgot-password", response)
        result = auth_service.forgot_password(" Nobody@Example.com ")
        assert result.success
        assert result.error_message == "Reset link sent! Check your email."
        assert http.calls[0]["json"] == {"email": "nobody@example.com"}

    def test_forgot_password_transport_failure(self, auth_service, http, connection_error):
        http.on("POST", "/auth/forgot-password", connection_error)
        assert auth_service.forgot_password("jane@example.com").success

    def test_forgot_password_invalid_email(self, auth_service, http):
        result = auth_service.forgot_password("jane")
        assert not result.success
        assert result.field_errors == {"email": "Please enter a valid email address"}
        assert http.calls == []

    def test_reset_without_token(self, auth_service, http):
        result = auth_service.reset_password(PasswordResetRequest(
            new_password="Secret123", confirm_password="Secret123",
        ))
        assert not result.success
        assert result.next_route == FORGOT_PASSWORD_ROUTE
        assert http.calls == []

    def test_reset_rejected_token_is_terminal(self, auth_service, http):
        http.on("POST", "/auth/reset-password", failure(400, "Invalid or expired reset token"))
        result = auth_service.reset_password(PasswordResetRequest(
            token="r1", new_password="Secret123", confirm_password="Secret123",
        ))
        assert not result.success
        assert result.error_message == "Invalid or expired reset token"
        assert result.next_route == FORGOT_PASSWORD_ROUTE

    def test_reset_transport_failure_is_retryable(self, auth_service, http, connection_error):
        http.on("POST", "/auth/reset-password", connection_error)
        result = auth_service.reset_password(PasswordResetRequest(
            token="r1", new_password="Secret123", confirm_password="Secret123",
        ))
        assert not result.success
        assert result.error_kind == ApiErrorKind.TRANSPORT
        assert result.next_route is None
        assert "expired" not in result.error_message

    def test_reset_server_error_is_retryable(self, auth_service, http):
        http.on("POST", "/auth/reset-password", failure(503, "Service unavailable"))
        result = auth_service.reset_password(PasswordResetRequest(
            token="r1", new_password="Secret123", confirm_password="Secret123",
        ))
        assert result.error_kind == ApiErrorKind.SERVER
        assert result.next_route is None
        assert result.error_message == "Could not reset your password right now. Please try again."

    def test_reset_success(self, auth_service, http):
        http.on("POST", "/auth/reset-password", envelope())
        result = auth_service.reset_password(PasswordResetRequest(
            token="r1", new_password="Secret123", confirm_password="Secret123",
        ))
        assert result.success
        assert result.next_route == LOGIN_ROUTE
        assert http.calls[0]["json"] == {"token": "r1", "password": "Secret123"}


class TestOAuth:
    def test_authorize_url(self, auth_service):
        assert auth_service.oauth_authorize_url() == "http://backend.test/api/auth/google"

    @pytest.mark.parametrize(
        "error, message",
        [
            ("access_denied", "Access was denied. Please grant permission to continue."),
            ("something_else", "An error occurred during sign in. Please try again."),
        ],
    )
    def test_error_codes(self, auth_service, error, message):
        result = auth_service.complete_oauth(None, error)
        assert not result.success
        assert result.error_message == message
        assert result.next_route == LOGIN_ROUTE

    def test_missing_token(self, auth_service):
        result = auth_service.complete_oauth(None)
        assert result.error_message == "No authentication token received"

    def test_success(self, auth_service, http, phases, storage):
        http.on("GET", "/auth/me", envelope({"user": user_payload()}))
        result = auth_service.complete_oauth("g1")
        assert result.success
        assert result.next_route == LANDING_ROUTE
        assert result.error_message == "Welcome, Jane Doe!"
        assert phases == [AuthPhase.AUTHENTICATING, AuthPhase.AUTHENTICATED_VERIFIED]
        assert http.calls[0]["headers"]["Authorization"] == "Bearer g1"
        assert storage.data == {"token": "g1"}

    def test_profile_failure_clears_session(self, auth_service, http, storage):
        http.on("GET", "/auth/me", failure(500, "boom"))
        result = auth_service.complete_oauth("g1")
        assert not result.success
        assert result.error_message == "Failed to complete sign in"
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert storage.data == {}


class TestAccount:
    def test_update_profile_replaces_user(self, auth_service, http, signed_in):
        http.on("PUT", "/auth/profile", envelope({"user": user_payload(name="Janet Doe")}))
        result = auth_service.update_profile("Janet Doe")
        assert result.success
        assert auth_service.user.name == "Janet Doe"

    def test_update_profile_validates_name(self, auth_service, http, signed_in):
        result = auth_service.update_profile("J4ne")
        assert result.field_errors == {"name": "Name cannot contain numbers"}
        assert http.calls == []

    def test_change_password_mismatch_makes_no_call(self, auth_service, http, signed_in):
        result = auth_service.change_password("Old12345", "New12345", "New12346")
        assert result.field_errors == {"confirm_password": "Passwords do not match"}
        assert http.calls == []

    def test_change_password_wrong_current(self, auth_service, http, signed_in):
        http.on("PUT", "/auth/change-password", failure(401, "Current password is incorrect"))
        result = auth_service.change_password("wrong", "New12345", "New12345")
        assert result.error_message == "Current password is incorrect"
        assert auth_service.phase == AuthPhase.AUTHENTICATED_VERIFIED

    def test_delete_account_ends_session(self, auth_service, http, signed_in, storage, phases):
        http.on("DELETE", "/auth/delete-account", envelope(message="Account deleted successfully"))
        result = auth_service.delete_account("Secret123", "DELETE")
        assert result.success
        assert result.next_route == LOGIN_ROUTE
        assert http.calls[0]["json"] == {"password": "Secret123", "confirmation": "DELETE"}
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert phases[-1] == AuthPhase.UNAUTHENTICATED
        assert storage.data == {}

    def test_delete_account_wrong_password_keeps_session(
        self, auth_service, api_client, http, signed_in, storage,
    ):
        expired = []
        auth_service.on_session_expired(lambda: expired.append(True))
        api_client.set_route_provider(lambda: "/dashboard")
        http.on("DELETE", "/auth/delete-account", failure(401, "Incorrect password"))
        result = auth_service.delete_account("wrong", "DELETE")
        assert not result.success
        assert result.error_kind == ApiErrorKind.AUTHENTICATION
        assert result.error_message == "Incorrect password"
        assert expired == []
        assert auth_service.phase == AuthPhase.AUTHENTICATED_VERIFIED
        assert storage.data == {"token": "t1"}

    def test_delete_account_requires_confirmation_and_password(
        self, auth_service, http, signed_in,
    ):
        result = auth_service.delete_account("", "delete")
        assert result.field_errors == {
            "confirmation": "Please type DELETE to confirm",
            "password": "Please enter your password",
        }
        assert http.calls == []

    def test_google_account_deletes_without_password(self, auth_service, http, storage):
        http.on("POST", "/auth/login", envelope(
            {"token": "t1", "user": user_payload(googleId="g-123")},
        ))
        auth_service.login(LoginDraft(email="jane@example.com", password="Secret123"))
        http.on("DELETE", "/auth/delete-account", envelope())
        assert auth_service.delete_account("", "DELETE").success
        assert storage.data == {}

    def test_delete_account_signed_out(self, auth_service, http):
        result = auth_service.delete_account("Secret123", "DELETE")
        assert result.next_route == LOGIN_ROUTE
        assert http.calls == []


class TestSessionEnd:
    def test_logout_clears_even_when_backend_fails(
        self, auth_service, http, signed_in, storage, connection_error,
    ):
        http.on("POST", "/auth/logout", connection_error)
        result = auth_service.logout()
        assert result.success
        assert result.next_route == LOGIN_ROUTE
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert storage.data == {}

    def test_401_forces_logout(self, auth_service, api_client, http, signed_in, storage):
        expired = []
        auth_service.on_session_expired(lambda: expired.append(True))
        api_client.set_route_provider(lambda: "/dashboard")
        http.on("PUT", "/auth/profile", failure(401, "Token expired"))

        result = auth_service.update_profile("Janet Doe")

        assert not result.success
        assert expired == [True]
        assert auth_service.phase == AuthPhase.UNAUTHENTICATED
        assert storage.data == {}

    def test_401_on_login_screen_keeps_state(self, auth_service, api_client, http, signed_in):
        expired = []
        auth_service.on_session_expired(lambda: expired.append(True))
        api_client.set_route_provider(lambda: "/login")
        http.on("GET", "/auth/me", failure(401, "Token expired"))
        with pytest.raises(ApiError):
            api_client.me()
        assert expired == []
        assert auth_service.phase == AuthPhase.AUTHENTICATED_VERIFIED


class TestFullJourney:
    def test_register_verify_logout_login(self, auth_service, http, phases, storage):
        http.on("POST", "/auth/register", envelope(
            {"token": "t1", "user": user_payload(verified=False)}, status=201,
        ))
        http.on("POST", "/auth/verify-email", envelope({"user": user_payload()}))
        http.on("POST", "/auth/logout", envelope())
        http.on("POST", "/auth/login", envelope({"token": "t2", "user": user_payload()}))

        assert auth_service.register(GOOD_DRAFT).next_route == VERIFY_ROUTE
        assert auth_service.verify_email("123456").next_route == LANDING_ROUTE
        assert auth_service.logout().next_route == LOGIN_ROUTE
        login = auth_service.login(LoginDraft(email="jane@example.com", password="Secret123"))

        assert login.next_route == LANDING_ROUTE
        assert storage.data == {"token": "t2"}
        assert phases == [
            AuthPhase.AUTHENTICATED_UNVERIFIED,
            AuthPhase.AUTHENTICATED_VERIFIED,
            AuthPhase.UNAUTHENTICATED,
            AuthPhase.AUTHENTICATED_VERIFIED,
        ]
        assert http.paths() == [
            "/auth/register", "/auth/verify-email", "/auth/logout", "/auth/login",
        ]
