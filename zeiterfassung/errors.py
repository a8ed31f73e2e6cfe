from __future__ import annotations


class StorageFailure(Exception):
    """The persistence backend rejected a write."""


class NotFound(LookupError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session with ID {session_id} not found")
        self.session_id = session_id
