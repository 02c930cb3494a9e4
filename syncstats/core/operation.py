from __future__ import annotations

import enum
import logging
import threading
import time

from syncstats.core.engine import EngineStatsSession
from syncstats.core.errors import (
    AlreadyFinalizedError,
    AttachAfterFinalizeError,
    DuplicateEngineError,
)
from syncstats.core.timing import Clock, SessionState, TimedSession
from syncstats.report import EngineReport, SyncReport

logger = logging.getLogger(__name__)


class SyncReason(str, enum.Enum):
    STARTUP = "startup"
    SCHEDULED = "scheduled"
    BACKGROUNDED = "backgrounded"
    USER = "user"
    SYNC_NOW = "syncNow"
    DID_LOGIN = "didLogin"
    PUSH = "push"


class OperationStatsSession:
    """Stats and metadata for one sync operation.

    Engines attach their sessions as they finish, possibly from several
    threads at once. finalize() is the join barrier: it sees every attach that
    completed before it and rejects every attach after it.
    """

    def __init__(
        self,
        why: SyncReason,
        uid: str,
        device_id: str | None = None,
        *,
        clock: Clock = time.perf_counter,
        strict: bool = False,
    ) -> None:
        if not isinstance(why, SyncReason):
            raise TypeError(f"why must be a SyncReason, not {type(why).__name__}")
        if not uid:
            raise ValueError("uid is required")
        self.why = why
        self.uid = uid
        self.device_id = device_id
        self.timing = TimedSession(clock=clock, strict=strict)
        self._did_login = why is SyncReason.DID_LOGIN
        self._engines: dict[str, EngineStatsSession] = {}
        self._lock = threading.Lock()
        self._report: SyncReport | None = None

    @property
    def did_login(self) -> bool:
        return self._did_login

    @property
    def duration(self) -> float:
        return self.timing.duration

    @property
    def state(self) -> SessionState:
        return self.timing.state

    @property
    def usage_errors(self) -> list:
        return self.timing.usage_errors

    @property
    def engines(self) -> dict[str, EngineStatsSession]:
        with self._lock:
            return dict(self._engines)

    @property
    def finalized(self) -> bool:
        return self._report is not None

    def start(
        self, at: float | None = None, when: int | None = None
    ) -> "OperationStatsSession":
        self.timing.start(at=at, when=when)
        return self

    def has_started(self) -> bool:
        return self.timing.has_started()

    def end(self) -> "OperationStatsSession":
        self.timing.end()
        return self

    def attach(self, engine: EngineStatsSession) -> bool:
        """Register a finished engine session. Returns False if rejected."""
        with self._lock:
            if self._report is not None:
                error = AttachAfterFinalizeError(engine.collection)
            elif engine.collection in self._engines:
                error = DuplicateEngineError(engine.collection)
            else:
                self._engines[engine.collection] = engine
                logger.debug("Attached engine %r to %s sync", engine.collection, self.why.value)
                return True
            # finalize() reads usage_errors under this lock
            self.timing.keep_usage_error(error)
        self.timing.surface_usage_error(error)
        return False

    def finalize(self) -> SyncReport:
        """End the operation and build its report of engines that have data.

        A second call returns the first report unchanged.
        """
        with self._lock:
            if self._report is not None:
                report = self._report
            else:
                if self.timing.state is not SessionState.ENDED:
                    self.timing.end()
                engines = tuple(
                    EngineReport.from_session(engine)
                    for engine in self._engines.values()
                    if engine.has_data()
                )
                report = self._report = SyncReport(
                    why=self.why.value,
                    uid=self.uid,
                    device_id=self.device_id,
                    did_login=self._did_login,
                    when=self.timing.when,
                    took=self.timing.duration,
                    engines=engines,
                    usage_errors=tuple(str(e) for e in self.timing.usage_errors),
                )
                logger.debug(
                    "Finalized %s sync: %d of %d engines reportable",
                    self.why.value,
                    len(engines),
                    len(self._engines),
                )
                return report
        self.timing.record_usage_error(AlreadyFinalizedError("finalize() called twice"))
        return report
