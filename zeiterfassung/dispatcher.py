from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo

from .csv_codec import import_csv
from .errors import NotFound, StorageFailure
from .ledger import Ledger, generate_id
from .models import Session, StatusMessage
from .state import AppState
from .timeconv import local_to_utc, parse_utc_instant


@dataclass(frozen=True, slots=True)
class AddSession:
    date: str
    start_time: str
    end_time: str
    notes: str = ""


@dataclass(frozen=True, slots=True)
class EditNotes:
    session_id: str
    notes: str


@dataclass(frozen=True, slots=True)
class DeleteSession:
    session_id: str


@dataclass(frozen=True, slots=True)
class SetUserName:
    name: str


@dataclass(frozen=True, slots=True)
class ImportCsv:
    content: str


@dataclass(frozen=True, slots=True)
class SelectMonth:
    year: int
    month: int


@dataclass(frozen=True, slots=True)
class ShiftMonth:
    delta: int


@dataclass(frozen=True, slots=True)
class DispatchResult:
    state: AppState
    status: StatusMessage


class Dispatcher:
    """Single owner of the ledger; turns UI intents into ledger calls and status messages."""

    def __init__(self, ledger: Ledger, tz: tzinfo | None = None, logger: logging.Logger | None = None) -> None:
        self.ledger = ledger
        self.tz = tz
        self.logger = logger or logging.getLogger(__name__)
        self._handlers = {
            AddSession: self._add_session,
            EditNotes: self._edit_notes,
            DeleteSession: self._delete_session,
            SetUserName: self._set_user_name,
            ImportCsv: self._import_csv,
            SelectMonth: self._select_month,
            ShiftMonth: self._shift_month,
        }

    def dispatch(self, state: AppState, intent: object) -> DispatchResult:
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Unsupported intent: {type(intent).__name__}")

        try:
            return handler(state, intent)
        except StorageFailure as exc:
            self.logger.error("Storage failure while handling %s: %s", type(intent).__name__, exc)
            return DispatchResult(state, StatusMessage("Failed to save data. Storage may be full.", "error"))
        except NotFound as exc:
            self.logger.warning("%s", exc)
            return DispatchResult(state, StatusMessage(str(exc), "error"))
        except ValueError as exc:
            return DispatchResult(state, StatusMessage(str(exc), "error"))

    def _add_session(self, state: AppState, intent: AddSession) -> DispatchResult:
        if not intent.date or not intent.start_time or not intent.end_time:
            raise ValueError("Please fill in date, start and end time.")

        start_utc = local_to_utc(intent.date, intent.start_time, self.tz)
        end_utc = local_to_utc(intent.date, intent.end_time, self.tz)
        if parse_utc_instant(end_utc) < parse_utc_instant(start_utc):
            raise ValueError("End time must not be before start time.")

        session = Session(id=generate_id(), start_utc=start_utc, end_utc=end_utc, notes=intent.notes or None)
        self.ledger.add(session)
        self.logger.info("Manual session added: id=%s", session.id)
        return DispatchResult(state.reload(self.ledger), StatusMessage(f"Session `{session.id}` added."))

    def _edit_notes(self, state: AppState, intent: EditNotes) -> DispatchResult:
        self.ledger.update(intent.session_id, notes=intent.notes or None)
        return DispatchResult(state.reload(self.ledger), StatusMessage("Notes updated."))

    def _delete_session(self, state: AppState, intent: DeleteSession) -> DispatchResult:
        self.ledger.remove(intent.session_id)
        self.logger.info("Session deleted: id=%s", intent.session_id)
        return DispatchResult(state.reload(self.ledger), StatusMessage("Session deleted."))

    def _set_user_name(self, state: AppState, intent: SetUserName) -> DispatchResult:
        self.ledger.set_user_name(intent.name.strip())
        return DispatchResult(state.reload(self.ledger), StatusMessage("Name saved."))

    def _import_csv(self, state: AppState, intent: ImportCsv) -> DispatchResult:
        try:
            summary = import_csv(self.ledger, intent.content)
        except StorageFailure as exc:
            self.logger.error("Storage failure during CSV import: %s", exc)
            # Rows added before the failure stay persisted.
            return DispatchResult(
                state.reload(self.ledger),
                StatusMessage("Import stopped: failed to save data. Storage may be full.", "error"),
            )

        if summary.imported == 0 and summary.skipped == 0:
            return DispatchResult(state, StatusMessage("CSV file is empty or invalid.", "error"))

        text = f"Imported {summary.imported} sessions"
        if summary.skipped:
            text += f", skipped {summary.skipped} malformed rows"
        kind = "success" if summary.imported else "warning"
        return DispatchResult(state.reload(self.ledger), StatusMessage(text + ".", kind))

    def _select_month(self, state: AppState, intent: SelectMonth) -> DispatchResult:
        state = state.with_month(intent.year, intent.month)
        return DispatchResult(state, StatusMessage(f"Showing {state.year}-{state.month:02}."))

    def _shift_month(self, state: AppState, intent: ShiftMonth) -> DispatchResult:
        state = state.shift_month(intent.delta)
        return DispatchResult(state, StatusMessage(f"Showing {state.year}-{state.month:02}."))
