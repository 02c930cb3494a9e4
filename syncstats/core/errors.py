from __future__ import annotations


class UsageError(Exception):
    """A session API was called out of order. Never a runtime failure."""


class NotStartedError(UsageError):
    pass


class AlreadyStartedError(UsageError):
    pass


class AlreadyEndedError(UsageError):
    pass


class DuplicateEngineError(UsageError):
    def __init__(self, collection: str) -> None:
        super().__init__(f"engine session for {collection!r} is already attached")
        self.collection = collection


class AttachAfterFinalizeError(UsageError):
    def __init__(self, collection: str) -> None:
        super().__init__(f"cannot attach {collection!r}: operation already finalized")
        self.collection = collection


class AlreadyFinalizedError(UsageError):
    pass
