"""Observability: GitHub call metrics and run summary logging."""

import time
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")


class Metrics:
    """Simple dict-based metrics collector for counters and timers."""

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._timers: dict[str, list[float]] = {}

    def counter(self, name: str, value: int = 1):
        """Increment a counter by the given value."""
        self._counters[name] = self._counters.get(name, 0) + value

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    @contextmanager
    def timer(self, name: str):
        """Time the wrapped block and append the duration under ``name``."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._timers.setdefault(name, []).append(time.monotonic() - start)

    def summary(self) -> dict[str, Any]:
        """Return counters plus count/total/avg/max per timer."""
        timer_summary = {}
        for name, durations in self._timers.items():
            if not durations:
                timer_summary[name] = {"count": 0}
                continue
            timer_summary[name] = {
                "count": len(durations),
                "total": round(sum(durations), 3),
                "avg": round(sum(durations) / len(durations), 3),
                "max": round(max(durations), 3),
            }
        return {"counters": dict(self._counters), "timers": timer_summary}

    def reset(self):
        """Clear all metrics."""
        self._counters.clear()
        self._timers.clear()


# Module-level singleton
metrics = Metrics()


def log_run_summary():
    """Log the current metrics summary via structlog."""
    logger.info("run_summary", **metrics.summary())
