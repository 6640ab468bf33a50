"""
Scheduler-driven timer tests.
"""

from superhub.utils.countdown import Countdown, DelayedAction


class TestCountdown:
    def test_ticks_down_and_finishes_once(self, scheduler):
        ticks, finished = [], []
        countdown = Countdown(scheduler, on_tick=ticks.append, on_finish=lambda: finished.append(True))
        countdown.start(3)
        scheduler.advance(10_000)
        assert ticks == [3, 2, 1]
        assert finished == [True]
        assert not countdown.running

    def test_restart_replaces_previous_run(self, scheduler):
        ticks = []
        countdown = Countdown(scheduler, on_tick=ticks.append)
        countdown.start(5)
        scheduler.advance(1_000)
        countdown.start(2)
        scheduler.advance(5_000)
        assert ticks == [5, 4, 2, 1]
        assert scheduler.pending == 0

    def test_cancel_suppresses_finish(self, scheduler):
        finished = []
        countdown = Countdown(scheduler, on_finish=lambda: finished.append(True))
        countdown.start(2)
        countdown.cancel()
        scheduler.advance(5_000)
        assert finished == []
        assert countdown.remaining == 0

    def test_zero_finishes_immediately(self, scheduler):
        finished = []
        Countdown(scheduler, on_finish=lambda: finished.append(True)).start(0)
        assert finished == [True]
        assert scheduler.pending == 0


class TestDelayedAction:
    def test_fires_after_delay(self, scheduler):
        fired = []
        action = DelayedAction(scheduler)
        action.schedule(2_000, lambda: fired.append(True))
        scheduler.advance(1_999)
        assert fired == []
        assert action.pending
        scheduler.advance(1)
        assert fired == [True]
        assert not action.pending

    def test_cancel_before_fire(self, scheduler):
        fired = []
        action = DelayedAction(scheduler)
        action.schedule(2_000, lambda: fired.append(True))
        action.cancel()
        scheduler.advance(5_000)
        assert fired == []

    def test_reschedule_replaces(self, scheduler):
        fired = []
        action = DelayedAction(scheduler)
        action.schedule(1_000, lambda: fired.append("first"))
        action.schedule(1_000, lambda: fired.append("second"))
        scheduler.advance(1_000)
        assert fired == ["second"]
