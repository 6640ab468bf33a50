"""
OTP Entry Controller.

State machine behind the six-box email verification code input.  The
verification view forwards raw key/paste events here and re-renders
from the controller's state; no Tk widget is touched in this module.

Rules
-----
- Typing a digit into slot *i* stores it and moves focus to *i + 1*.
- Backspace on an empty slot *i* moves focus to *i - 1*.
- Paste strips non-digits, keeps the first six, fills slots from the
  left and focuses the last filled slot.
- A completed code is submitted automatically, exactly once per fill.
  A failed verification clears every slot and refocuses slot 0.
- Resend is available on arrival.  Each successful resend starts a
  cooldown; resend stays disabled until it counts down to zero.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, Optional

from superhub.utils.countdown import Countdown, Scheduler

OTP_LENGTH: int = 6
_NON_DIGIT_RE: re.Pattern[str] = re.compile(r"\D")


class OtpEntryController:
    """Owns the digit slots, focus index and resend cooldown.

    Parameters
    ----------
    on_submit:
        Receives the six-digit code when the slots become complete.
    scheduler:
        Timer source for the resend cooldown (the view widget in the app).
    cooldown_seconds:
        Length of the resend cooldown.
    on_change:
        Called after every state change so the view can re-render.
    """

    def __init__(
        self,
        on_submit: Callable[[str], None],
        scheduler: Scheduler,
        cooldown_seconds: int = 60,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._on_submit = on_submit
        self._on_change = on_change
        self._cooldown_seconds: int = cooldown_seconds
        self._digits: list[str] = [""] * OTP_LENGTH
        self._focus_index: int = 0
        self._pending: bool = False
        self._submitted_code: Optional[str] = None
        self._submitted_at: Optional[datetime] = None
        self._active: bool = True
        self._cooldown = Countdown(
            scheduler,
            on_tick=lambda _remaining: self._notify(),
            on_finish=self._notify,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def digits(self) -> tuple[str, ...]:
        return tuple(self._digits)

    @property
    def code(self) -> str:
        return "".join(self._digits)

    @property
    def is_complete(self) -> bool:
        return all(self._digits)

    @property
    def focus_index(self) -> int:
        return self._focus_index

    @property
    def pending(self) -> bool:
        """``True`` while a submitted code awaits its verification result."""
        return self._pending

    @property
    def submitted_at(self) -> Optional[datetime]:
        return self._submitted_at

    @property
    def cooldown_remaining(self) -> int:
        return self._cooldown.remaining

    @property
    def can_resend(self) -> bool:
        return self._active and not self._cooldown.running

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def input_digit(self, index: int, value: str) -> bool:
        """Handle the content of slot *index* changing to *value*.

        Only the last typed character is kept.  An empty *value* clears
        the slot; a non-digit is rejected and leaves the slot untouched.
        Returns ``True`` when the slot was updated.
        """
        if not self._active or not 0 <= index < OTP_LENGTH:
            return False

        char = value[-1:] if value else ""
        if char and not char.isdigit():
            return False

        self._digits[index] = char
        if not char:
            self._rearm()
        elif index < OTP_LENGTH - 1:
            self._focus_index = index + 1
        else:
            self._focus_index = index

        self._maybe_submit()
        self._notify()
        return True

    def backspace(self, index: int) -> None:
        """Backspace pressed in slot *index*.

        A filled slot is cleared in place; an empty slot hands focus to
        its left neighbour.
        """
        if not self._active or not 0 <= index < OTP_LENGTH:
            return
        if self._digits[index]:
            self._digits[index] = ""
            self._focus_index = index
            self._rearm()
        elif index > 0:
            self._focus_index = index - 1
        self._notify()

    def paste(self, text: str) -> None:
        """Fill slots from pasted text, wherever the paste happened."""
        if not self._active:
            return
        pasted = _NON_DIGIT_RE.sub("", text or "")[:OTP_LENGTH]
        if not pasted:
            return
        for position, char in enumerate(pasted):
            self._digits[position] = char
        self._focus_index = min(len(pasted), OTP_LENGTH) - 1
        self._maybe_submit()
        self._notify()

    def focus(self, index: int) -> None:
        if 0 <= index < OTP_LENGTH:
            self._focus_index = index

    # ------------------------------------------------------------------
    # Verification outcome
    # ------------------------------------------------------------------

    def verification_failed(self) -> None:
        """Wrong or expired code: clear every slot and refocus slot 0."""
        if not self._active:
            return
        self._clear_slots()
        self._notify()

    def verification_succeeded(self) -> None:
        self._pending = False
        self._notify()

    # ------------------------------------------------------------------
    # Resend cooldown
    # ------------------------------------------------------------------

    def reset_for_resend(self) -> None:
        """A new code was sent: clear the slots and restart the cooldown."""
        if not self._active:
            return
        self._clear_slots()
        self._cooldown.start(self._cooldown_seconds)
        self._notify()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def teardown(self) -> None:
        """Cancel timers and ignore every later event."""
        self._active = False
        self._cooldown.cancel()
        self._on_change = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _maybe_submit(self) -> None:
        if not self.is_complete or self._pending:
            return
        code = self.code
        if code == self._submitted_code:
            return
        self._pending = True
        self._submitted_code = code
        self._submitted_at = datetime.now(timezone.utc)
        self._on_submit(code)

    def _rearm(self) -> None:
        # A slot emptied after a submission starts a new fill.
        if not self._pending:
            self._submitted_code = None

    def _clear_slots(self) -> None:
        self._digits = [""] * OTP_LENGTH
        self._focus_index = 0
        self._pending = False
        self._submitted_code = None
        self._submitted_at = None

    def _notify(self) -> None:
        if self._active and self._on_change is not None:
            self._on_change()
