from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Session:
    id: str
    start_utc: str
    end_utc: str | None = None
    notes: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.end_utc)


@dataclass(slots=True)
class StoreRecord:
    version: int
    sessions: list[Session] = field(default_factory=list)
    user_name: str = ""


@dataclass(frozen=True, slots=True)
class MonthOption:
    year: int
    month: int
    label: str


@dataclass(frozen=True, slots=True)
class TimesheetRow:
    day: str
    day_label: str
    start: str
    end: str
    duration: str
    notes: str
    session_id: str | None = None


@dataclass(frozen=True, slots=True)
class Timesheet:
    year: int
    month: int
    label: str
    total_ms: int
    rows: list[TimesheetRow]


@dataclass(frozen=True, slots=True)
class ImportSummary:
    imported: int
    skipped: int


@dataclass(frozen=True, slots=True)
class StatusMessage:
    text: str
    kind: str = "success"

    @property
    def ok(self) -> bool:
        return self.kind != "error"
