"""
Screen logic tests.

View methods are exercised against lightweight stand-ins for their
widgets, so no Tk window is ever created.
"""

import threading
from types import SimpleNamespace

import pytest

pytest.importorskip("tkinter")

from superhub.models.enums import ApiErrorKind  # noqa: E402
from superhub.otp import OtpEntryController  # noqa: E402
from superhub.ui.components.base_view import BaseView  # noqa: E402
from superhub.ui.views.verify_email_view import VerifyEmailView  # noqa: E402


class FakeEntry:
    """Mimics a Tk entry: a disabled entry ignores edits."""

    def __init__(self):
        self.text = ""
        self.state = "normal"
        self.focused = False

    def configure(self, **options):
        self.state = options.get("state", self.state)

    def get(self):
        return self.text

    def delete(self, first, last):
        if self.state == "normal":
            self.text = ""

    def insert(self, index, value):
        if self.state == "normal":
            self.text = value + self.text

    def focus_set(self):
        self.focused = True


class FakeButton:
    def __init__(self):
        self.options = {}

    def configure(self, **options):
        self.options.update(options)


@pytest.fixture
def submitted():
    return []


@pytest.fixture
def verify_screen(scheduler, submitted):
    screen = SimpleNamespace(
        alive=True,
        _verified=False,
        _slots=[FakeEntry() for _ in range(6)],
        _resend_button=FakeButton(),
    )
    screen._controller = OtpEntryController(
        on_submit=submitted.append, scheduler=scheduler, cooldown_seconds=60,
    )
    return screen


def render(screen):
    VerifyEmailView._render(screen)


class TestVerifyEmailScreen:
    def test_resend_enabled_on_arrival(self, verify_screen):
        render(verify_screen)
        assert verify_screen._resend_button.options == {"text": "Resend code", "state": "normal"}

    def test_resend_counts_down_after_sending(self, verify_screen, scheduler):
        verify_screen._controller.reset_for_resend()
        scheduler.advance(5_000)
        render(verify_screen)
        assert verify_screen._resend_button.options == {
            "text": "Resend in 55s", "state": "disabled",
        }

    def test_slots_locked_while_code_is_checked(self, verify_screen, submitted):
        verify_screen._controller.paste("123456")
        render(verify_screen)
        assert submitted == ["123456"]
        assert [slot.text for slot in verify_screen._slots] == list("123456")
        assert all(slot.state == "disabled" for slot in verify_screen._slots)

    def test_failed_code_unlocks_clears_and_refocuses(self, verify_screen):
        verify_screen._controller.paste("123456")
        render(verify_screen)
        verify_screen._controller.verification_failed()
        render(verify_screen)
        assert [slot.text for slot in verify_screen._slots] == [""] * 6
        assert all(slot.state == "normal" for slot in verify_screen._slots)
        assert verify_screen._slots[0].focused

    def test_verified_screen_stays_locked(self, verify_screen):
        verify_screen._controller.paste("123456")
        verify_screen._controller.verification_succeeded()
        verify_screen._verified = True
        render(verify_screen)
        assert all(slot.state == "disabled" for slot in verify_screen._slots)


class TestRunInBackground:
    def run(self, logger, work):
        done = threading.Event()
        results = []

        def on_done(result):
            results.append(result)
            done.set()

        host = SimpleNamespace(_logger=logger, dispatch=lambda func: func())
        BaseView.run_in_background(host, work, on_done, name="test-worker")
        assert done.wait(timeout=5)
        return results

    def test_result_is_delivered(self, logger):
        from superhub.models.auth_models import AuthResult

        results = self.run(logger, lambda: AuthResult(success=True))
        assert results[0].success

    def test_crashing_work_still_reports_failure(self, logger):
        def explode():
            raise RuntimeError("worker crashed")

        results = self.run(logger, explode)
        assert len(results) == 1
        assert not results[0].success
        assert results[0].error_kind == ApiErrorKind.SERVER
        assert results[0].error_message
