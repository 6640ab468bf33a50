"""
Audit trail tests.
"""

import logging

import pytest

from superhub.utils.audit import AuditAction, AuditEvent, log_audit_event


class TestLogAuditEvent:
    def test_returns_event_and_logs_structured_fields(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger="superhub.tests"):
            event = log_audit_event(
                logger, AuditAction.LOGIN, user_id="u-1", details={"method": "password"},
            )

        assert event.action == AuditAction.LOGIN
        assert event.user_id == "u-1"
        record = caplog.records[-1]
        assert record.getMessage() == "AUDIT: LOGIN"
        assert record.event == "LOGIN"
        assert record.user_id == "u-1"
        assert record.detail_method == "password"

    def test_anonymous_event_has_no_user_field(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger="superhub.tests"):
            log_audit_event(logger, AuditAction.PASSWORD_RESET)
        assert not hasattr(caplog.records[-1], "user_id")

    @pytest.mark.parametrize("key", ["password", "Token", "otp", "new_password"])
    def test_secret_details_are_rejected(self, logger, key):
        with pytest.raises(ValueError):
            log_audit_event(logger, AuditAction.LOGIN_FAILED, details={key: "x"})

    def test_action_is_coerced_from_string(self):
        event = AuditEvent(timestamp="2026-01-01T00:00:00+00:00", action="LOGOUT")
        assert event.action is AuditAction.LOGOUT
        assert event.details == {}
