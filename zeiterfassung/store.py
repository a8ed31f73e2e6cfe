from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from .errors import StorageFailure
from .models import Session, StoreRecord

STORAGE_KEY = "zeiterfassung.store"
CURRENT_VERSION = 1


class KeyValueBackend(Protocol):
    """String storage; ``set`` signals a rejected write with StorageFailure."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def default_record() -> StoreRecord:
    return StoreRecord(version=CURRENT_VERSION, sessions=[], user_name="")


class Store:
    """Versioned single-record persistence on top of a string key/value backend."""

    def __init__(
        self,
        backend: KeyValueBackend,
        key: str = STORAGE_KEY,
        logger: logging.Logger | None = None,
    ) -> None:
        self.backend = backend
        self.key = key
        self.logger = logger or logging.getLogger(__name__)

    def load(self) -> StoreRecord:
        raw = self.backend.get(self.key)
        if not raw:
            return default_record()

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            self.logger.warning("Failed to load store, starting fresh: %s", exc)
            return default_record()

        if not isinstance(payload, dict):
            self.logger.warning("Failed to load store, starting fresh: record is not an object")
            return default_record()

        version = payload.get("version", CURRENT_VERSION)
        if version != CURRENT_VERSION:
            self.logger.warning("Unsupported store version %r, starting fresh", version)
            return default_record()

        entries = payload.get("sessions", [])
        if not isinstance(entries, list):
            self.logger.warning("Failed to load store, starting fresh: sessions is not a list")
            return default_record()

        sessions = []
        for entry in entries:
            session = _session_from_dict(entry)
            if session is None:
                self.logger.warning("Dropping malformed stored session: %r", entry)
                continue
            sessions.append(session)

        user_name = payload.get("userName") or ""
        return StoreRecord(
            version=CURRENT_VERSION,
            sessions=sessions,
            user_name=str(user_name),
        )

    def save(self, record: StoreRecord) -> None:
        blob = json.dumps(
            {
                "version": record.version,
                "sessions": [_session_to_dict(session) for session in record.sessions],
                "userName": record.user_name,
            },
            ensure_ascii=False,
        )
        try:
            self.backend.set(self.key, blob)
        except StorageFailure:
            self.logger.error("Failed to save store (%d sessions)", len(record.sessions))
            raise
        except OSError as exc:
            self.logger.error("Failed to save store (%d sessions): %s", len(record.sessions), exc)
            raise StorageFailure(f"Failed to write {self.key!r}: {exc}") from exc


def _session_to_dict(session: Session) -> dict[str, str]:
    data = {"id": session.id, "startUtc": session.start_utc}
    if session.end_utc:
        data["endUtc"] = session.end_utc
    if session.notes:
        data["notes"] = session.notes
    return data


def _session_from_dict(entry: Any) -> Session | None:
    if not isinstance(entry, dict):
        return None

    session_id = entry.get("id")
    start = entry.get("startUtc")
    if not isinstance(session_id, str) or not isinstance(start, str):
        return None

    end = entry.get("endUtc")
    notes = entry.get("notes")
    return Session(
        id=session_id,
        start_utc=start,
        end_utc=end if isinstance(end, str) and end else None,
        notes=notes if isinstance(notes, str) and notes else None,
    )
