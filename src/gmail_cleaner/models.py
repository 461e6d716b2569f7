from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CleanupMode(str, Enum):
    DRY_RUN = "dry_run"
    TRASH = "trash"
    PERMANENT_DELETE = "permanent_delete"


@dataclass(frozen=True)
class FilterSpec:
    label: str
    # Gmail "older_than" value, e.g. "1y", "3m", "10d".
    older_than: str
    # Extra Gmail search whose matches are excluded from the result set.
    exclude: str = ""
    # Keep starred threads out of the match set (emits "-is:starred").
    skip_starred: bool = True


@dataclass(frozen=True)
class ThreadSummary:
    thread_id: str
    subject: str
    latest_internal_date_ms: int
    message_count: int

    @property
    def latest_epoch_seconds(self) -> int:
        return self.latest_internal_date_ms // 1000

    @property
    def latest_datetime(self) -> datetime:
        # Local time, as shown to the operator.
        return datetime.fromtimestamp(self.latest_epoch_seconds)


@dataclass
class RunResult:
    mode: CleanupMode
    matched: int = 0
    acted: int = 0
