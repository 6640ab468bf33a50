"""
JSON formatter tests.
"""

import json
import logging

from superhub.logger import REDACTED, JSONFormatter, redact_message


def make_record(msg, *args, **extra):
    record = logging.LogRecord(
        name="superhub.tests", level=logging.INFO, pathname=__file__, lineno=1,
        msg=msg, args=args, exc_info=None,
    )
    record.__dict__.update(extra)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record("Hello %s", "Jane")))
        assert entry["level"] == "INFO"
        assert entry["logger_name"] == "superhub.tests"
        assert entry["message"] == "Hello Jane"
        assert "extra" not in entry

    def test_extra_keeps_scalar_types(self):
        record = make_record("AUDIT: LOGIN", event="LOGIN", user_id="u-1", detail_attempt=2)
        extra = json.loads(JSONFormatter().format(record))["extra"]
        assert extra == {"event": "LOGIN", "user_id": "u-1", "detail_attempt": 2}

    def test_secret_extras_are_masked(self):
        record = make_record("x", detail_password="hunter2", token="abc", otp=None)
        extra = json.loads(JSONFormatter().format(record))["extra"]
        assert extra["detail_password"] == REDACTED
        assert extra["token"] == REDACTED
        assert extra["otp"] is None

    def test_bearer_in_message_is_masked(self):
        entry = json.loads(JSONFormatter().format(
            make_record("Header was %s", "Bearer eyJhbGciOi.payload.sig"),
        ))
        assert entry["message"] == f"Header was Bearer {REDACTED}"


def test_redact_message_leaves_plain_text():
    assert redact_message("Signed in as jane@example.com") == "Signed in as jane@example.com"
