from __future__ import annotations

import enum
import socket
import time
from dataclasses import dataclass

from syncstats.core.timing import Clock, SessionState, TimedSession
from syncstats.stats.model import DownloadStats, UploadStats, ValidationStats

_NETWORK_ERRORS = (ConnectionError, TimeoutError, socket.gaierror, socket.herror)


class FailureKind(str, enum.Enum):
    HTTP = "httperror"
    NETWORK = "nserror"
    AUTH = "autherror"
    SQL = "sqlerror"
    SHUTDOWN = "shutdownerror"
    UNEXPECTED = "unexpectederror"
    OTHER = "othererror"


@dataclass(frozen=True)
class FailureReason:
    kind: FailureKind
    message: str = ""
    code: int | None = None  # HTTP status, only for FailureKind.HTTP

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FailureReason":
        """Classify an exception raised by an engine."""
        if isinstance(exc, _NETWORK_ERRORS):
            kind = FailureKind.NETWORK
        else:
            kind = FailureKind.UNEXPECTED
        return cls(kind=kind, message=f"{type(exc).__name__}: {exc}")

    def to_dict(self) -> dict:
        result: dict = {"name": self.kind.value, "error": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


class EngineStatsSession:
    """Stats for one collection engine within a sync operation.

    Only the owning engine writes to a session; there is no locking here.
    Totals may still be recorded after end(), but the duration stays fixed.
    """

    def __init__(
        self, collection: str, clock: Clock = time.perf_counter, strict: bool = False
    ) -> None:
        self.collection = collection
        self.timing = TimedSession(clock=clock, strict=strict)
        self.failure_reason: FailureReason | None = None
        self.validation_stats: ValidationStats | None = None
        self._upload = UploadStats()
        self._download = DownloadStats()

    @property
    def upload_stats(self) -> UploadStats:
        return self._upload

    @property
    def download_stats(self) -> DownloadStats:
        return self._download

    @property
    def duration(self) -> float:
        return self.timing.duration

    @property
    def state(self) -> SessionState:
        return self.timing.state

    @property
    def usage_errors(self) -> list:
        return self.timing.usage_errors

    def start(
        self, at: float | None = None, when: int | None = None
    ) -> "EngineStatsSession":
        self.timing.start(at=at, when=when)
        return self

    def has_started(self) -> bool:
        return self.timing.has_started()

    def end(self) -> "EngineStatsSession":
        self.timing.end()
        return self

    def record_download(self, stats: DownloadStats) -> None:
        self._download = self._download + stats

    def record_upload(self, stats: UploadStats) -> None:
        self._upload = self._upload + stats

    def fail(self, kind: FailureKind, message: str = "", code: int | None = None) -> None:
        self.failure_reason = FailureReason(kind=kind, message=message, code=code)

    def has_data(self) -> bool:
        return (
            self._upload.has_data()
            or self._download.has_data()
            or (self.validation_stats is not None and self.validation_stats.has_data())
            or self.failure_reason is not None
        )

    def __repr__(self) -> str:
        return (
            f"EngineStatsSession(collection={self.collection!r}, state={self.state.value}, "
            f"upload={self._upload}, download={self._download})"
        )
