from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable

from syncstats.core.errors import (
    AlreadyEndedError,
    AlreadyStartedError,
    NotStartedError,
    UsageError,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SessionState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    ENDED = "ended"


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class TimedSession:
    """Start/end timing on a monotonic clock.

    Usage errors (ending before starting, starting or ending twice) are
    recorded in ``usage_errors`` and logged, leaving the session unchanged.
    With ``strict=True`` they are raised instead.
    """

    def __init__(self, clock: Clock = time.perf_counter, strict: bool = False) -> None:
        self._clock = clock
        self._strict = strict
        self._start: float | None = None
        self.when: int | None = None  # wall-clock start, epoch milliseconds
        self.duration: float = 0.0  # seconds, fixed by end()
        self.state = SessionState.NOT_STARTED
        self.usage_errors: list[UsageError] = []

    def start(self, at: float | None = None, when: int | None = None) -> "TimedSession":
        """Record the start point. `at` is a reading from this session's clock."""
        if self.state is not SessionState.NOT_STARTED:
            self.record_usage_error(
                AlreadyStartedError(f"start() called on a {self.state.value} session")
            )
            return self
        self._start = self._clock() if at is None else at
        self.when = _wall_clock_ms() if when is None else when
        self.state = SessionState.RUNNING
        return self

    def has_started(self) -> bool:
        return self._start is not None

    def end(self) -> "TimedSession":
        if self.state is SessionState.NOT_STARTED:
            self.record_usage_error(NotStartedError("end() called without first calling start()"))
            return self
        if self.state is SessionState.ENDED:
            self.record_usage_error(AlreadyEndedError("end() called twice"))
            return self
        self.duration = self._clock() - self._start
        self.state = SessionState.ENDED
        return self

    def record_usage_error(self, error: UsageError) -> None:
        self.keep_usage_error(error)
        self.surface_usage_error(error)

    def keep_usage_error(self, error: UsageError) -> None:
        """Store `error` for the report. Strict sessions raise instead of storing."""
        if not self._strict:
            self.usage_errors.append(error)

    def surface_usage_error(self, error: UsageError) -> None:
        if self._strict:
            raise error
        logger.error("Session usage error: %s", error)
