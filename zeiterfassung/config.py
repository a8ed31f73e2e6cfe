from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_DB_PATH = "zeiterfassung.db"


@dataclass(frozen=True, slots=True)
class Config:
    discord_token: str
    guild_id: int
    owner_user_id: int
    timezone: ZoneInfo | None
    db_path: Path

    @property
    def timezone_name(self) -> str:
        return self.timezone.key if self.timezone is not None else "system local"


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value.strip()


def _required_int_env(name: str) -> int:
    value = _required_env(name)
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc

    if parsed <= 0:
        raise ValueError(f"Environment variable {name} must be positive")
    return parsed


def _timezone_from_env(name: str) -> ZoneInfo | None:
    # Unset means the host's local timezone.
    tz_name = (os.getenv(name) or "").strip()
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone in {name}: {tz_name}") from exc


def load_config() -> Config:
    db_path = (os.getenv("LEDGER_DB_PATH") or DEFAULT_DB_PATH).strip()

    return Config(
        discord_token=_required_env("DISCORD_TOKEN"),
        guild_id=_required_int_env("GUILD_ID"),
        owner_user_id=_required_int_env("OWNER_USER_ID"),
        timezone=_timezone_from_env("TIMEZONE"),
        db_path=Path(db_path),
    )
