"""Routed screens, one class per route."""

from superhub.ui.views.admin_view import AdminView
from superhub.ui.views.auth_callback_view import AuthCallbackView
from superhub.ui.views.dashboard_view import DashboardView
from superhub.ui.views.forgot_password_view import ForgotPasswordView
from superhub.ui.views.login_view import LoginView
from superhub.ui.views.register_view import RegisterView
from superhub.ui.views.reset_password_view import ResetPasswordView
from superhub.ui.views.verify_email_view import VerifyEmailView

__all__ = [
    "AdminView",
    "AuthCallbackView",
    "DashboardView",
    "ForgotPasswordView",
    "LoginView",
    "RegisterView",
    "ResetPasswordView",
    "VerifyEmailView",
]
