from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, timedelta, tzinfo

from .models import MonthOption, Session, Timesheet, TimesheetRow
from .timeconv import local_today, parse_utc_instant, to_local, utc_to_local_time

INCOMPLETE_LABEL = "incomplete"
EMPTY_DAY_DURATION = "0h 0m"

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def session_duration_ms(session: Session) -> int | None:
    """Milliseconds between start and end, or None for open/unreadable sessions."""
    if not session.end_utc:
        return None

    start = parse_utc_instant(session.start_utc)
    end = parse_utc_instant(session.end_utc)
    if start is None or end is None:
        return None

    # Reversed intervals count as empty rather than negative.
    return max(0, (end - start) // timedelta(milliseconds=1))


def local_start_date(session: Session, tz: tzinfo | None = None) -> date | None:
    local = to_local(session.start_utc, tz)
    if local is None:
        return None
    return local.date()


def _total_in_range(sessions: Iterable[Session], start: date, end: date, tz: tzinfo | None) -> int:
    """Sum completed sessions whose local start date is in [start, end)."""
    total = 0
    for session in sessions:
        duration = session_duration_ms(session)
        if duration is None:
            continue
        day = local_start_date(session, tz)
        if day is not None and start <= day < end:
            total += duration
    return total


def daily_total(
    sessions: Iterable[Session],
    reference_date: date | None = None,
    tz: tzinfo | None = None,
) -> int:
    day = reference_date or local_today(tz)
    return _total_in_range(sessions, day, day + timedelta(days=1), tz)


def week_start(reference_date: date) -> date:
    """Monday of the ISO week containing ``reference_date``."""
    return reference_date - timedelta(days=reference_date.weekday())


def weekly_total(
    sessions: Iterable[Session],
    reference_date: date | None = None,
    tz: tzinfo | None = None,
) -> int:
    monday = week_start(reference_date or local_today(tz))
    return _total_in_range(sessions, monday, monday + timedelta(days=7), tz)


def monthly_total(
    sessions: Iterable[Session],
    year: int,
    month: int,
    tz: tzinfo | None = None,
) -> int:
    first = date(year, month, 1)
    return _total_in_range(sessions, first, first + timedelta(days=calendar.monthrange(year, month)[1]), tz)


def days_in_month(year: int, month: int) -> list[str]:
    """ISO date keys of every day in the month, newest first."""
    count = calendar.monthrange(year, month)[1]
    return [date(year, month, day).isoformat() for day in range(count, 0, -1)]


def group_by_month(
    sessions: Iterable[Session],
    year: int,
    month: int,
    tz: tzinfo | None = None,
) -> dict[str, list[Session]]:
    grouped: dict[str, list[Session]] = {day: [] for day in days_in_month(year, month)}
    for session in sessions:
        day = local_start_date(session, tz)
        if day is None or (day.year, day.month) != (year, month):
            continue
        grouped[day.isoformat()].append(session)
    return grouped


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def available_months(
    sessions: Iterable[Session],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> list[MonthOption]:
    current = today or local_today(tz)
    months = {(current.year, current.month)}
    for session in sessions:
        day = local_start_date(session, tz)
        if day is not None:
            months.add((day.year, day.month))

    return [
        MonthOption(year=year, month=month, label=month_label(year, month))
        for year, month in sorted(months, reverse=True)
    ]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def format_total(total_ms: int) -> str:
    """Render a duration as ``Xh Ym`` (or ``Ym`` under an hour), floored to minutes."""
    total_minutes = max(0, int(total_ms)) // 60_000
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes}m"


def duration_label(session: Session) -> str:
    duration = session_duration_ms(session)
    if duration is None:
        return INCOMPLETE_LABEL
    return format_total(duration)


def format_day_label(day: str, today: date) -> str:
    if day == today.isoformat():
        return "Today"
    if day == (today - timedelta(days=1)).isoformat():
        return "Yesterday"
    return day


def build_timesheet(
    sessions: Iterable[Session],
    year: int,
    month: int,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> Timesheet:
    """Flatten the month grouping into display rows plus the month total."""
    sessions = list(sessions)
    current = today or local_today(tz)
    rows: list[TimesheetRow] = []

    for day, day_sessions in group_by_month(sessions, year, month, tz).items():
        label = format_day_label(day, current)
        if not day_sessions:
            rows.append(
                TimesheetRow(day=day, day_label=label, start="-", end="-", duration=EMPTY_DAY_DURATION, notes="")
            )
            continue

        for index, session in enumerate(day_sessions):
            rows.append(
                TimesheetRow(
                    day=day,
                    # Only the first row of a day carries the date label.
                    day_label=label if index == 0 else "",
                    start=utc_to_local_time(session.start_utc, tz) or "-",
                    end=utc_to_local_time(session.end_utc, tz) or "-",
                    duration=duration_label(session),
                    notes=session.notes or "",
                    session_id=session.id,
                )
            )

    return Timesheet(
        year=year,
        month=month,
        label=month_label(year, month),
        total_ms=monthly_total(sessions, year, month, tz),
        rows=rows,
    )
