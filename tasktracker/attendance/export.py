"""CSV export of a worker's attendance report."""

from __future__ import annotations

import csv
import io
import re
import unicodedata
from datetime import date
from typing import Iterable, Optional
from urllib.parse import quote

from tasktracker.attendance.schemas import AttendanceRecord
from tasktracker.common.constants import ATTENDANCE_CSV_HEADERS
from tasktracker.common.exceptions import NothingToExport

UNKNOWN = "Unknown"


def report_filename(worker_name: Optional[str], day: Optional[str] = None, today: Optional[date] = None) -> str:
    """``<Name_With_Underscores>_Attendance_Report_<date>.csv``.

    *day* is the active date filter; without one the export date is used.
    """
    name = re.sub(r"\s+", "_", worker_name) if worker_name else "Employee"
    stamp = day or (today or date.today()).isoformat()
    return f"{name}_Attendance_Report_{stamp}.csv"


def content_disposition(filename: str) -> str:
    """Attachment header for *filename*; non-ASCII names go in ``filename*``."""
    quoted = quote(filename, safe="")
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    ascii_name = re.sub(r"[^\w.-]", "_", ascii_name, flags=re.ASCII)
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quoted}"


def _row(record: AttendanceRecord) -> list[str]:
    return [
        record.name or UNKNOWN,
        record.rfid or UNKNOWN,
        record.day or UNKNOWN,
        record.time or UNKNOWN,
        "IN" if record.presence else "OUT",
    ]


def render_csv(records: Iterable[AttendanceRecord]) -> str:
    """Header line plus one line per record; fields quoted only when needed."""
    rows = list(records)
    if not rows:
        raise NothingToExport()

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(ATTENDANCE_CSV_HEADERS)
    writer.writerows(_row(r) for r in rows)
    return buffer.getvalue()
