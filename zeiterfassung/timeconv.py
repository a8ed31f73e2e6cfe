from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today(tz: tzinfo | None = None) -> date:
    """Current calendar date in ``tz`` (host local time when omitted)."""
    return datetime.now(timezone.utc).astimezone(tz).date()


def parse_utc_instant(value: str | None) -> datetime | None:
    """Parse an ISO timestamp and normalize to UTC; ``None`` when unusable."""
    if not value:
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        # Stored values should be timezone-aware; treat naive values as UTC for resilience.
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_utc_instant(value: datetime) -> str:
    """Render an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    utc = value.astimezone(timezone.utc)
    return f"{utc:%Y-%m-%dT%H:%M:%S}.{utc.microsecond // 1000:03d}Z"


def to_local(instant: str | None, tz: tzinfo | None = None) -> datetime | None:
    parsed = parse_utc_instant(instant)
    if parsed is None:
        return None
    return parsed.astimezone(tz)


def utc_to_local_date(instant: str | None, tz: tzinfo | None = None) -> str | None:
    local = to_local(instant, tz)
    if local is None:
        return None
    return local.date().isoformat()


def utc_to_local_time(instant: str | None, tz: tzinfo | None = None) -> str | None:
    local = to_local(instant, tz)
    if local is None:
        return None
    return f"{local:%H:%M}"


def local_to_utc(day: str, clock: str, tz: tzinfo | None = None) -> str:
    """Interpret ``day`` + ``clock`` as local wall-clock time and return the UTC instant.

    Raises ValueError when either part is malformed.
    """
    try:
        naive = datetime.strptime(f"{day.strip()} {clock.strip()}", "%Y-%m-%d %H:%M")
    except ValueError as exc:
        raise ValueError(f"Invalid local date/time: {day!r} {clock!r}") from exc

    if tz is None:
        local = naive.astimezone()
    else:
        local = naive.replace(tzinfo=tz)
    return format_utc_instant(local)
