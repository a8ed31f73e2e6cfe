from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Iterator
from datetime import date

from .ledger import Ledger, generate_id
from .models import ImportSummary, Session
from .timeconv import parse_utc_instant

HEADER = ["id", "startUtc", "endUtc", "notes"]

logger = logging.getLogger(__name__)


def export_filename(today: date) -> str:
    return f"zeiterfassung-export-{today.isoformat()}.csv"


def encode_sessions(sessions: Iterable[Session]) -> str:
    """Serialize sessions as CSV; fields with commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    for session in sessions:
        writer.writerow([session.id, session.start_utc, session.end_utc or "", session.notes or ""])
    return buffer.getvalue()


def _looks_like_row(line: str) -> bool:
    parts = line.split(",")
    return len(parts) >= 3 and parse_utc_instant(parts[1]) is not None


def _parse_record(chunk: str) -> list[str] | None:
    """Parse ``chunk`` as exactly one CSV record, or None if it is not one."""
    try:
        rows = list(csv.reader(io.StringIO(chunk), strict=True))
    except csv.Error:
        return None
    if len(rows) != 1:
        return None
    return rows[0]


def _iter_rows(text: str) -> Iterator[list[str]]:
    lines = text.lstrip("\ufeff").split("\n")
    # The header is positional metadata only.
    index = 1
    while index < len(lines):
        end = index
        chunk = lines[index]
        # A quoted field may span lines; extend until the quotes balance.
        while chunk.count('"') % 2 and end + 1 < len(lines):
            end += 1
            chunk += "\n" + lines[end]

        fields = None
        swallows_rows = any(_looks_like_row(line) for line in lines[index + 1 : end + 1])
        if chunk.count('"') % 2 == 0 and not swallows_rows:
            fields = _parse_record(chunk)
        if fields is None:
            # Unterminated quote from an unquoted export: the line stands alone.
            end = index
            fields = lines[index].rstrip("\r").split(",")
        index = end + 1

        if not fields or all(not value.strip() for value in fields):
            continue
        yield fields


def decode_row(fields: list[str]) -> Session | None:
    """Turn one CSV row into a Session, or None when the row is malformed."""
    if len(fields) < 3:
        return None

    session_id, start, end = (value.strip() for value in fields[:3])
    if not start:
        return None

    notes = fields[3] if len(fields) > 3 else ""
    return Session(
        id=session_id or generate_id(),
        start_utc=start,
        end_utc=end or None,
        notes=notes or None,
    )


def decode_sessions(text: str) -> list[Session]:
    return [session for session in map(decode_row, _iter_rows(text)) if session is not None]


def import_csv(ledger: Ledger, text: str) -> ImportSummary:
    """Add every well-formed row to the ledger, one save per row."""
    imported = 0
    skipped = 0
    for fields in _iter_rows(text):
        session = decode_row(fields)
        if session is None:
            skipped += 1
            continue
        ledger.add(session)
        imported += 1

    logger.info("CSV import finished: imported=%d skipped=%d", imported, skipped)
    return ImportSummary(imported=imported, skipped=skipped)
