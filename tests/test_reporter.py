from datetime import date, timezone

from zeiterfassung.models import Session
from zeiterfassung.reporter import Reporter, fit_message, report_filename


def make_sessions() -> list[Session]:
    return [
        Session(id="a", start_utc="2026-02-02T08:00:00Z", end_utc="2026-02-02T10:30:00Z", notes="<b>design</b>"),
        Session(id="b", start_utc="2026-02-03T09:00:00Z"),
    ]


def test_totals_content_lists_all_three_windows() -> None:
    reporter = Reporter(tz=timezone.utc)

    content = reporter.build_totals_content(make_sessions(), today=date(2026, 2, 3))

    assert "- Today: `0m`" in content
    assert "- This week: `2h 30m`" in content
    assert "- This month: `2h 30m`" in content


def test_timesheet_content_shows_only_days_with_sessions() -> None:
    reporter = Reporter(tz=timezone.utc)
    sheet = reporter.build_timesheet(make_sessions(), 2026, 2, today=date(2026, 2, 3))

    content = reporter.build_timesheet_content(sheet)

    assert content.splitlines()[0] == "**Timesheet - February 2026** (total `2h 30m`)"
    assert "- `b` 09:00-- `incomplete`" in content
    assert "__Yesterday__" in content
    assert "2026-02-04" not in content


def test_no_activity_message() -> None:
    reporter = Reporter(tz=timezone.utc)
    sheet = reporter.build_timesheet([], 2026, 1, today=date(2026, 2, 3))

    content = reporter.build_timesheet_content(sheet)

    assert "No sessions recorded in January 2026." in content


def test_print_document_escapes_user_content() -> None:
    reporter = Reporter(tz=timezone.utc)
    sheet = reporter.build_timesheet(make_sessions(), 2026, 2, today=date(2026, 2, 3))

    document = reporter.build_print_document(sheet, "Ada & Co", generated_on=date(2026, 2, 3))

    assert "<title>Zeiterfassung - Ada &amp; Co - February 2026</title>" in document
    assert "&lt;b&gt;design&lt;/b&gt;" in document
    assert "<b>design</b>" not in document
    assert "2h 30m" in document
    assert "window.print()" in document
    assert document.count("<tr><td>") == 28


def test_print_document_without_name_uses_generic_title() -> None:
    reporter = Reporter(tz=timezone.utc)
    sheet = reporter.build_timesheet([], 2026, 2, today=date(2026, 2, 3))

    document = reporter.build_print_document(sheet, "", generated_on=date(2026, 2, 3))

    assert "<title>Zeiterfassung - Timesheet - February 2026</title>" in document
    assert 'class="user-name"' not in document


def test_fit_message_truncates_long_output() -> None:
    lines = [f"line {index:04}" for index in range(500)]

    content = fit_message(lines, limit=100)

    assert len(content) < 200
    assert content.endswith("more lines, use /report for the full month)")


def test_report_filename() -> None:
    assert report_filename(2026, 3) == "zeiterfassung-2026-03.html"
