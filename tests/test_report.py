import logging
import pickle

from syncstats import (
    DownloadStats,
    FailureKind,
    LoggingReporter,
    SyncReason,
    SyncReport,
    UploadStats,
    ValidationStats,
    engine,
    operation,
    submit,
)


class RecordingReporter:
    def __init__(self):
        self.reports = []

    def report(self, report):
        self.reports.append(report)


def _finished_operation():
    session = operation(SyncReason.DID_LOGIN, "uid-1", "device-1")
    bookmarks = engine("bookmarks")
    bookmarks.record_upload(UploadStats(sent=7, sent_failed=1))
    bookmarks.validation_stats = ValidationStats({"orphans": 2})
    session.attach(bookmarks.end())
    clients = engine("clients")
    clients.record_download(DownloadStats(applied=1, succeeded=1))
    clients.fail(FailureKind.HTTP, "server error", code=500)
    session.attach(clients.end())
    session.attach(engine("history").end())
    return session


def test_submit_hands_finalized_report_to_reporter():
    reporter = RecordingReporter()
    session = _finished_operation()
    report = submit(session, reporter)
    assert reporter.reports == [report]
    assert session.finalized
    assert report.did_login
    assert [e.name for e in report.engines] == ["bookmarks", "clients"]


def test_report_to_dict():
    payload = submit(_finished_operation(), RecordingReporter()).to_dict()
    assert payload["why"] == "didLogin"
    assert payload["uid"] == "uid-1"
    assert payload["deviceID"] == "device-1"
    assert payload["didLogin"] is True
    assert payload["took"] >= 0
    assert payload["usageErrors"] == []

    bookmarks, clients = payload["engines"]
    assert bookmarks["outgoing"] == {"sent": 7, "sent_failed": 1}
    assert "incoming" not in bookmarks
    assert bookmarks["validation"] == {"problems": {"orphans": 2}}
    assert "failureReason" not in bookmarks
    assert clients["incoming"]["applied"] == 1
    assert clients["failureReason"] == {"name": "httperror", "error": "server error", "code": 500}


def test_empty_report():
    report = SyncReport(
        why="scheduled", uid="uid-1", device_id=None, did_login=False, when=None, took=0.0
    )
    assert report.is_empty()
    assert not SyncReport(
        why="scheduled",
        uid="uid-1",
        device_id=None,
        did_login=False,
        when=None,
        took=0.0,
        usage_errors=("finalize() called twice",),
    ).is_empty()


def test_logging_reporter_logs_report(caplog):
    reporter = LoggingReporter()
    with caplog.at_level(logging.INFO, logger="syncstats.report"):
        report = submit(_finished_operation(), reporter)
    (record,) = [r for r in caplog.records if r.name == "syncstats.report"]
    assert record.levelno == logging.INFO
    assert "why=didLogin engines=2" in record.getMessage()
    assert record.sync_report == report.to_dict()


def test_logging_reporter_suppresses_empty_reports(caplog):
    reporter = LoggingReporter()
    with caplog.at_level(logging.INFO, logger="syncstats.report"):
        submit(operation(SyncReason.SCHEDULED, "uid-1"), reporter)
    assert not [r for r in caplog.records if r.levelno >= logging.INFO]


def test_logging_reporter_can_send_empty_reports(caplog):
    custom = logging.getLogger("sync.telemetry")
    reporter = LoggingReporter(logger=custom, suppress_empty=False)
    with caplog.at_level(logging.INFO, logger="sync.telemetry"):
        submit(operation(SyncReason.SCHEDULED, "uid-1"), reporter)
    (record,) = caplog.records
    assert record.name == "sync.telemetry"
    assert record.sync_report["engines"] == []


def test_report_can_be_queued_across_processes():
    report = submit(_finished_operation(), RecordingReporter())
    assert pickle.loads(pickle.dumps(report)) == report
