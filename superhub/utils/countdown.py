"""
Scheduler-driven timers.

Widgets expose ``after(ms, fn)`` / ``after_cancel(job)``; anything with
those two methods satisfies :class:`Scheduler`, which lets the timers
below run under the Tk main loop in the app and under a manual fake in
tests.

Both timers become inert once cancelled: a callback that was already
queued when ``cancel()`` ran is swallowed instead of touching a screen
that no longer exists.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol


class Scheduler(Protocol):
    def after(self, ms: int, func: Callable[[], None]) -> Any: ...  # noqa: E704

    def after_cancel(self, job: Any) -> None: ...  # noqa: E704


class Countdown:
    """Whole-second countdown decremented by a recurring scheduled tick.

    Parameters
    ----------
    scheduler:
        Object providing ``after`` / ``after_cancel``.
    on_tick:
        Called with the remaining seconds, immediately on ``start`` and
        then once per interval while the value is above zero.
    on_finish:
        Called once when the value reaches zero.
    interval_ms:
        Tick period.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Optional[Callable[[int], None]] = None,
        on_finish: Optional[Callable[[], None]] = None,
        interval_ms: int = 1000,
    ) -> None:
        self._scheduler: Scheduler = scheduler
        self._on_tick = on_tick
        self._on_finish = on_finish
        self._interval_ms: int = interval_ms
        self._remaining: int = 0
        self._job: Any = None
        # Bumped on every start/cancel so queued ticks from an older run die.
        self._generation: int = 0

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._remaining > 0

    def start(self, seconds: int) -> None:
        """(Re)start from *seconds*, replacing any countdown in progress."""
        self.cancel()
        self._remaining = max(0, int(seconds))
        generation = self._generation
        if self._remaining == 0:
            if self._on_finish is not None:
                self._on_finish()
            return
        if self._on_tick is not None:
            self._on_tick(self._remaining)
        self._job = self._scheduler.after(
            self._interval_ms, lambda: self._tick(generation),
        )

    def cancel(self) -> None:
        """Stop without firing ``on_finish``.  Safe to call repeatedly."""
        self._generation += 1
        if self._job is not None:
            try:
                self._scheduler.after_cancel(self._job)
            except ValueError:
                pass
            self._job = None
        self._remaining = 0

    def _tick(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._job = None
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            if self._on_finish is not None:
                self._on_finish()
            return
        if self._on_tick is not None:
            self._on_tick(self._remaining)
        self._job = self._scheduler.after(
            self._interval_ms, lambda: self._tick(generation),
        )


class DelayedAction:
    """One-shot callback after *delay_ms*; ``cancel()`` makes it a no-op.

    Used for the auto-redirects that follow a successful verification,
    password reset or OAuth sign-in.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler: Scheduler = scheduler
        self._job: Any = None
        self._generation: int = 0

    @property
    def pending(self) -> bool:
        return self._job is not None

    def schedule(self, delay_ms: int, action: Callable[[], None]) -> None:
        self.cancel()
        generation = self._generation

        def fire() -> None:
            if generation != self._generation:
                return
            self._job = None
            action()

        self._job = self._scheduler.after(delay_ms, fire)

    def cancel(self) -> None:
        self._generation += 1
        if self._job is not None:
            try:
                self._scheduler.after_cancel(self._job)
            except ValueError:
                pass
            self._job = None
