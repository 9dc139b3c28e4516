"""Tests for the tick-driven scheduler."""


class TestScheduler:
    def test_callback_runs_only_when_due(self, clock, scheduler):
        calls = []
        scheduler.call_later(0.5, lambda: calls.append("a"))

        assert scheduler.run_due() == 0
        clock.now += 0.25
        assert scheduler.run_due() == 0
        clock.now += 0.25
        assert scheduler.run_due() == 1
        assert calls == ["a"]

        # Fires once only
        clock.now += 1.0
        assert scheduler.run_due() == 0

    def test_deadline_order_then_fifo(self, clock, scheduler):
        calls = []
        scheduler.call_later(1.0, lambda: calls.append("late"))
        scheduler.call_later(0.5, lambda: calls.append("first"))
        scheduler.call_later(0.5, lambda: calls.append("second"))

        clock.now += 1.0
        scheduler.run_due()
        assert calls == ["first", "second", "late"]

    def test_cancelled_handle_never_fires(self, clock, scheduler):
        calls = []
        handle = scheduler.call_later(0.5, lambda: calls.append("x"))
        handle.cancel()

        assert handle.cancelled
        assert scheduler.pending == 0
        clock.now += 1.0
        assert scheduler.run_due() == 0
        assert calls == []

    def test_rescheduling_from_callback(self, clock, scheduler):
        calls = []

        def tick():
            calls.append(clock.now)
            scheduler.call_later(0.5, tick)

        scheduler.call_later(0.5, tick)
        start = clock.now
        for _ in range(4):
            clock.now += 0.5
            scheduler.run_due()

        assert calls == [start + 0.5, start + 1.0, start + 1.5, start + 2.0]
        assert scheduler.pending == 1

    def test_explicit_now(self, scheduler, clock):
        calls = []
        scheduler.call_later(2.0, lambda: calls.append(1))
        assert scheduler.run_due(now=clock.now + 2.0) == 1

    def test_cancel_all(self, clock, scheduler):
        handles = [scheduler.call_later(d, lambda: None) for d in (0.5, 1.0)]
        scheduler.cancel_all()
        assert all(h.cancelled for h in handles)
        assert scheduler.pending == 0

    def test_call_at_absolute_deadline(self, clock, scheduler):
        calls = []
        handle = scheduler.call_at(clock.now + 1.5, lambda: calls.append("due"))
        assert handle.deadline == clock.now + 1.5

        clock.now += 1.0
        assert scheduler.run_due() == 0
        clock.now += 0.5
        assert scheduler.run_due() == 1
        assert calls == ["due"]
