"""
In-process counters for transfers and sessions

Only running totals are kept so a long-lived server stays at constant memory.
"""
from collections import Counter
from threading import Lock


class Telemetry:
    """Per-name metric totals and event counts"""

    def __init__(self):
        self._lock = Lock()
        self._totals: Counter = Counter()
        self._events: Counter = Counter()

    def record_metric(self, name: str, value: float) -> None:
        """Add a value to a metric's running total"""
        with self._lock:
            self._totals[name] += value

    def record_event(self, name: str, count: int = 1) -> None:
        """Count an occurrence of an event"""
        with self._lock:
            self._events[name] += count

    def total(self, name: str) -> float:
        """Sum of every recorded value of a metric"""
        return self._totals[name]

    def count_events(self, name: str) -> int:
        """Number of events recorded under a name"""
        return self._events[name]

    def clear(self) -> None:
        """Reset all totals and counts"""
        with self._lock:
            self._totals.clear()
            self._events.clear()


# Global telemetry instance
_telemetry = Telemetry()


def get_telemetry() -> Telemetry:
    """Get global telemetry instance"""
    return _telemetry
