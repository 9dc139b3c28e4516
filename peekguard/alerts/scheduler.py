"""Deadline-based callbacks driven from the alert thread's tick loop.

Nothing runs on its own: the owner calls run_due() every tick, so callbacks
execute on the same thread that handles events. Pass a fake clock in tests.
"""

import heapq
import itertools
import time


class TimerHandle:
    """A scheduled callback that can be invalidated before it fires."""

    def __init__(self, deadline: float, callback):
        self.deadline = deadline
        self._callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        self._cancelled = True
        self._callback = None

    def _fire(self):
        callback = self._callback
        self._callback = None
        callback()


class Scheduler:
    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._heap: list = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay: float, callback) -> TimerHandle:
        return self.call_at(self._clock() + delay, callback)

    def call_at(self, deadline: float, callback) -> TimerHandle:
        handle = TimerHandle(deadline, callback)
        # seq keeps equal deadlines in scheduling order
        heapq.heappush(self._heap, (handle.deadline, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def run_due(self, now: float | None = None) -> int:
        """Run every callback whose deadline has passed. Returns how many ran."""
        if now is None:
            now = self._clock()

        ran = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            handle._fire()
            ran += 1
        return ran

    def cancel_all(self):
        for _, _, handle in self._heap:
            handle.cancel()
        self._heap.clear()
