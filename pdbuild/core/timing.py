"""Per-phase build timings, kept in whole milliseconds."""

import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional


def elapsed_millis(started_at: float, now: Optional[float] = None) -> int:
    """Milliseconds between a time.monotonic() reading and now."""
    if now is None:
        now = time.monotonic()
    return max(0, int(round((now - started_at) * 1000)))


def format_millis(millis: int) -> str:
    """Format a millisecond count for the verbose summary.

    Examples:
        850 -> "850ms"
        2400 -> "2.4s"
        65300 -> "1m 5.3s"
    """
    if millis < 1000:
        return f"{millis}ms"
    seconds = millis / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, remaining = divmod(seconds, 60)
    return f"{int(minutes)}m {remaining:.1f}s"


class PhaseTimer:
    """Wall-clock duration of each phase a build entered.

    A phase's duration is recorded whether it succeeds or raises, so a
    failed build still reports where its time went.

    Usage:
        timer = PhaseTimer()
        with timer.measure("packaging"):
            run_pdc()
        timer.durations  # {"packaging": 1234}
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.durations: dict[str, int] = {}

    @contextmanager
    def measure(self, phase: str) -> Iterator[None]:
        started_at = self._clock()
        try:
            yield
        finally:
            self.durations[phase] = elapsed_millis(started_at, self._clock())

    @property
    def total(self) -> int:
        return sum(self.durations.values())

    def summary(self) -> str:
        """One line, e.g. "cleaning: 3ms | packaging: 1.4s | total: 1.4s"."""
        if not self.durations:
            return "no phases timed"
        parts = [f"{name}: {format_millis(ms)}" for name, ms in self.durations.items()]
        parts.append(f"total: {format_millis(self.total)}")
        return " | ".join(parts)
