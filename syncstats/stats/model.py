from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class UploadStats:
    sent: int = 0  # records uploaded
    sent_failed: int = 0  # records the server rejected

    def has_data(self) -> bool:
        return self.sent > 0 or self.sent_failed > 0

    def __add__(self, other: "UploadStats") -> "UploadStats":
        if not isinstance(other, UploadStats):
            return NotImplemented
        return UploadStats(
            sent=self.sent + other.sent,
            sent_failed=self.sent_failed + other.sent_failed,
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class DownloadStats:
    applied: int = 0  # incoming records applied locally
    succeeded: int = 0  # applied records that merged cleanly
    failed: int = 0  # records that failed to apply
    new_failed: int = 0  # failures not seen on a previous sync
    reconciled: int = 0  # records resolved against local changes

    def has_data(self) -> bool:
        return any(getattr(self, f.name) > 0 for f in fields(self))

    def __add__(self, other: "DownloadStats") -> "DownloadStats":
        if not isinstance(other, DownloadStats):
            return NotImplemented
        return DownloadStats(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ValidationStats:
    """Problem counts found by a collection validator, keyed by problem name."""

    problems: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "problems", MappingProxyType(dict(self.problems)))

    def __reduce__(self):
        return (ValidationStats, (dict(self.problems),))

    def has_data(self) -> bool:
        return any(count > 0 for count in self.problems.values())

    def to_dict(self) -> dict[str, Any]:
        return {"problems": dict(self.problems)}
