import logging
import threading

from peekguard.alerts.events import PeepingCountChanged
from peekguard.gaze.aggregator import PeepingAggregator, PeepingResult

log = logging.getLogger("peekguard")


class FrameProcessor:
    """Aggregates each frame and reports the peeping count only when it changes.

    Frames arrive one at a time from the tracking thread. The last reported
    count is the only state kept across frames.
    """

    def __init__(self, aggregator: PeepingAggregator, on_change):
        self._aggregator = aggregator
        self._on_change = on_change
        self._lock = threading.Lock()
        self._last_count = 0

    @property
    def last_count(self) -> int:
        with self._lock:
            return self._last_count

    def process(self, faces) -> PeepingResult:
        result = self._aggregator.aggregate(faces)

        with self._lock:
            if result.count == self._last_count:
                return result
            self._last_count = result.count

        log.info(f"Peeping count changed to {result.count}")
        self._on_change(PeepingCountChanged(result.count, result.faces))
        return result
