from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import MAXYEAR, MINYEAR, date

from .aggregator import shift_month
from .ledger import Ledger
from .models import Session


@dataclass(frozen=True, slots=True)
class AppState:
    """Snapshot the UI renders from; transitions return new values."""

    sessions: tuple[Session, ...]
    user_name: str
    year: int
    month: int

    @classmethod
    def load(cls, ledger: Ledger, today: date) -> AppState:
        return cls(
            sessions=tuple(ledger.list()),
            user_name=ledger.get_user_name(),
            year=today.year,
            month=today.month,
        )

    def reload(self, ledger: Ledger) -> AppState:
        return replace(self, sessions=tuple(ledger.list()), user_name=ledger.get_user_name())

    def with_month(self, year: int, month: int) -> AppState:
        if not MINYEAR <= year <= MAXYEAR:
            raise ValueError(f"Year must be between {MINYEAR} and {MAXYEAR}, got {year}")
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")
        return replace(self, year=year, month=month)

    def shift_month(self, delta: int) -> AppState:
        return self.with_month(*shift_month(self.year, self.month, delta))
