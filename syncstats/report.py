from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from syncstats.stats.model import DownloadStats, UploadStats, ValidationStats

if TYPE_CHECKING:
    from syncstats.core.engine import EngineStatsSession, FailureReason
    from syncstats.core.operation import OperationStatsSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineReport:
    name: str  # collection name
    when: int | None  # wall-clock start, epoch milliseconds
    took: float  # seconds
    upload: UploadStats
    download: DownloadStats
    validation: ValidationStats | None = None
    failure_reason: FailureReason | None = None
    usage_errors: tuple[str, ...] = ()

    @classmethod
    def from_session(cls, session: EngineStatsSession) -> "EngineReport":
        return cls(
            name=session.collection,
            when=session.timing.when,
            took=session.duration,
            upload=session.upload_stats,
            download=session.download_stats,
            validation=session.validation_stats,
            failure_reason=session.failure_reason,
            usage_errors=tuple(str(e) for e in session.usage_errors),
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for a transport. Empty stat containers are omitted."""
        result: dict[str, Any] = {"name": self.name, "when": self.when, "took": self.took}
        if self.upload.has_data():
            result["outgoing"] = self.upload.to_dict()
        if self.download.has_data():
            result["incoming"] = self.download.to_dict()
        if self.validation is not None and self.validation.has_data():
            result["validation"] = self.validation.to_dict()
        if self.failure_reason is not None:
            result["failureReason"] = self.failure_reason.to_dict()
        if self.usage_errors:
            result["usageErrors"] = list(self.usage_errors)
        return result


@dataclass(frozen=True)
class SyncReport:
    """Finalized summary of one sync operation.

    `engines` holds only the engine sessions that had data when the operation
    was finalized, in the order they were attached.
    """

    why: str
    uid: str
    device_id: str | None
    did_login: bool
    when: int | None
    took: float
    engines: tuple[EngineReport, ...] = ()
    usage_errors: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.engines and not self.usage_errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "why": self.why,
            "uid": self.uid,
            "deviceID": self.device_id,
            "didLogin": self.did_login,
            "when": self.when,
            "took": self.took,
            "engines": [engine.to_dict() for engine in self.engines],
            "usageErrors": list(self.usage_errors),
        }


class Reporter(Protocol):
    def report(self, report: SyncReport) -> None: ...


class LoggingReporter:
    """Reporter that writes each report as one structured log record."""

    def __init__(
        self, logger: logging.Logger | None = None, suppress_empty: bool = True
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._suppress_empty = suppress_empty

    def report(self, report: SyncReport) -> None:
        if self._suppress_empty and report.is_empty():
            self._logger.debug("Skipping empty %s sync report", report.why)
            return
        payload = report.to_dict()
        self._logger.info(
            "Sync report: why=%s engines=%d took=%.3fs",
            report.why,
            len(report.engines),
            report.took,
            extra={"sync_report": payload},
        )


def submit(session: OperationStatsSession, reporter: Reporter) -> SyncReport:
    """Finalize `session` and hand its report to `reporter`."""
    report = session.finalize()
    reporter.report(report)
    return report
