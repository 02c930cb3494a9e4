from syncstats.core.engine import EngineStatsSession, FailureKind, FailureReason
from syncstats.core.errors import (
    AlreadyEndedError,
    AlreadyFinalizedError,
    AlreadyStartedError,
    AttachAfterFinalizeError,
    DuplicateEngineError,
    NotStartedError,
    UsageError,
)
from syncstats.core.operation import OperationStatsSession, SyncReason
from syncstats.core.timing import SessionState, TimedSession
from syncstats.report import EngineReport, LoggingReporter, Reporter, SyncReport, submit
from syncstats.stats.model import DownloadStats, UploadStats, ValidationStats


def operation(
    why: SyncReason, uid: str, device_id: str | None = None
) -> OperationStatsSession:
    """Create and start the stats session for a sync operation."""
    return OperationStatsSession(why, uid, device_id).start()


def engine(collection: str) -> EngineStatsSession:
    """Create and start the stats session for one collection engine."""
    return EngineStatsSession(collection).start()


__all__ = [
    "operation",
    "engine",
    "OperationStatsSession",
    "EngineStatsSession",
    "TimedSession",
    "SessionState",
    "SyncReason",
    "FailureKind",
    "FailureReason",
    "UploadStats",
    "DownloadStats",
    "ValidationStats",
    "EngineReport",
    "SyncReport",
    "Reporter",
    "LoggingReporter",
    "submit",
    "UsageError",
    "NotStartedError",
    "AlreadyStartedError",
    "AlreadyEndedError",
    "DuplicateEngineError",
    "AttachAfterFinalizeError",
    "AlreadyFinalizedError",
]
