from __future__ import annotations

from collections.abc import Sequence
from datetime import date, tzinfo
from html import escape

from . import aggregator
from .models import Session, Timesheet
from .timeconv import local_today

MESSAGE_LIMIT = 1900

_PRINT_STYLE = """
    @page { margin: 2cm; }
    body { font-family: Arial, sans-serif; margin: 0; padding: 20px; color: #111827; }
    .header { text-align: center; margin-bottom: 30px; border-bottom: 2px solid #2563eb; padding-bottom: 20px; }
    .header h1 { margin: 0 0 10px 0; color: #2563eb; font-size: 28px; }
    .header .user-name { font-size: 20px; font-weight: bold; margin: 10px 0; }
    .header .month { font-size: 18px; font-weight: 600; margin: 10px 0; }
    .header .date { font-size: 14px; color: #6b7280; }
    .totals { text-align: center; margin: 20px 0 30px 0; padding: 20px; background-color: #f9fafb; }
    .total-label { font-size: 12px; color: #6b7280; text-transform: uppercase; letter-spacing: 0.05em; }
    .total-value { font-size: 20px; font-weight: 600; }
    table { width: 100%; border-collapse: collapse; margin-top: 20px; }
    th { background-color: #f9fafb; padding: 12px; text-align: left; border-bottom: 2px solid #e5e7eb; font-size: 12px; }
    td { padding: 10px 12px; border-bottom: 1px solid #e5e7eb; font-size: 13px; }
    tr:nth-child(even) { background-color: #f9fafb; }
    .footer { margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e7eb; text-align: center; font-size: 12px; color: #6b7280; }
    @media print { body { padding: 0; } }
"""


def report_filename(year: int, month: int) -> str:
    return f"zeiterfassung-{year}-{month:02}.html"


def fit_message(lines: Sequence[str], limit: int = MESSAGE_LIMIT) -> str:
    """Join lines, dropping the tail once the Discord message limit would be exceeded."""
    kept: list[str] = []
    size = 0
    for index, line in enumerate(lines):
        if size + len(line) + 1 > limit:
            kept.append(f"... ({len(lines) - index} more lines, use /report for the full month)")
            break
        kept.append(line)
        size += len(line) + 1
    return "\n".join(kept)


class Reporter:
    """Renders aggregator output; never recomputes totals itself."""

    def __init__(self, tz: tzinfo | None = None) -> None:
        self.tz = tz

    def build_timesheet(
        self,
        sessions: Sequence[Session],
        year: int,
        month: int,
        today: date | None = None,
    ) -> Timesheet:
        return aggregator.build_timesheet(sessions, year, month, today=today, tz=self.tz)

    def build_totals_content(self, sessions: Sequence[Session], today: date | None = None) -> str:
        current = today or local_today(self.tz)
        daily = aggregator.daily_total(sessions, current, tz=self.tz)
        weekly = aggregator.weekly_total(sessions, current, tz=self.tz)
        monthly = aggregator.monthly_total(sessions, current.year, current.month, tz=self.tz)
        return "\n".join(
            [
                f"**Totals - {current.isoformat()}**",
                f"- Today: `{aggregator.format_total(daily)}`",
                f"- This week: `{aggregator.format_total(weekly)}`",
                f"- This month: `{aggregator.format_total(monthly)}`",
            ]
        )

    def build_timesheet_content(self, timesheet: Timesheet) -> str:
        header = f"**Timesheet - {timesheet.label}** (total `{aggregator.format_total(timesheet.total_ms)}`)"
        rows = [row for row in timesheet.rows if row.session_id is not None]
        if not rows:
            return f"{header}\nNo sessions recorded in {timesheet.label}."

        lines = [header]
        for row in rows:
            if row.day_label:
                lines.append(f"__{row.day_label}__")
            notes = f" - {row.notes}" if row.notes else ""
            lines.append(f"- `{row.session_id}` {row.start}-{row.end} `{row.duration}`{notes}")
        return fit_message(lines)

    def build_print_document(self, timesheet: Timesheet, user_name: str, generated_on: date) -> str:
        label = escape(timesheet.label)
        name = escape(user_name)
        title = f"Zeiterfassung - {name or 'Timesheet'} - {label}"

        table_rows = []
        for row in timesheet.rows:
            cells = [row.day_label, row.start, row.end, row.duration, row.notes or "-"]
            table_rows.append("<tr>" + "".join(f"<td>{escape(cell)}</td>" for cell in cells) + "</tr>")

        user_block = f'<div class="user-name">{name}</div>' if name else ""
        body_rows = "\n          ".join(table_rows)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>{_PRINT_STYLE}  </style>
</head>
<body>
  <div class="header">
    <h1>Zeiterfassung</h1>
    {user_block}
    <div class="month">{label}</div>
    <div class="date">Generated on {generated_on.isoformat()}</div>
  </div>

  <div class="totals">
    <div class="total-label">Month total</div>
    <div class="total-value">{aggregator.format_total(timesheet.total_ms)}</div>
  </div>

  <table>
    <thead>
      <tr><th>Date</th><th>Start</th><th>End</th><th>Duration</th><th>Notes</th></tr>
    </thead>
    <tbody>
          {body_rows}
    </tbody>
  </table>

  <div class="footer">
    <p>Zeiterfassung timesheet - {label}</p>
  </div>

  <script>
    window.onload = function() {{
      window.print();
    }};
  </script>
</body>
</html>
"""
