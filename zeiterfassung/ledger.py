from __future__ import annotations

import logging
import secrets
import time
from dataclasses import replace

from .errors import NotFound
from .models import Session
from .store import Store

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Random prefix plus a millisecond timestamp, both base-36."""
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return random_part + _base36(time.time_ns() // 1_000_000)


class Ledger:
    """Session CRUD. Every call is a full read-modify-write of the store record."""

    def __init__(self, store: Store, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def list(self) -> list[Session]:
        return list(self.store.load().sessions)

    def get(self, session_id: str) -> Session:
        for session in self.store.load().sessions:
            if session.id == session_id:
                return session
        raise NotFound(session_id)

    def add(self, session: Session) -> None:
        record = self.store.load()
        record.sessions.append(session)
        self.store.save(record)
        self.logger.debug("Added session %s", session.id)

    def update(self, session_id: str, **changes) -> Session:
        if "id" in changes:
            raise ValueError("Session id is immutable")

        record = self.store.load()
        for index, session in enumerate(record.sessions):
            if session.id == session_id:
                break
        else:
            raise NotFound(session_id)

        # Empty optional fields are stored as absent.
        for name in ("end_utc", "notes"):
            if name in changes and not changes[name]:
                changes[name] = None

        updated = replace(session, **changes)
        record.sessions[index] = updated
        self.store.save(record)
        self.logger.debug("Updated session %s fields=%s", session_id, sorted(changes))
        return updated

    def remove(self, session_id: str) -> None:
        record = self.store.load()
        kept = [session for session in record.sessions if session.id != session_id]
        if len(kept) == len(record.sessions):
            return
        record.sessions = kept
        self.store.save(record)
        self.logger.debug("Removed session %s", session_id)

    def get_user_name(self) -> str:
        return self.store.load().user_name

    def set_user_name(self, name: str) -> None:
        record = self.store.load()
        record.user_name = name
        self.store.save(record)
