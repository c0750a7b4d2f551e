# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""CSV export of visits joined with their visitor."""
import csv
import io
from datetime import date, datetime, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from checkin.core.config import settings
from checkin.core.errors import ValidationError
from checkin.repositories.base import VisitorRepository
from checkin.schemas import DISCIPLINES

CSV_HEADERS = ["Timestamp", "Name", "Email", "Disciplines", "Reason"]
DISCIPLINE_SEPARATOR = "; "

DateBound = Union[date, datetime, None]


class ExportService:
    def __init__(self, repo: VisitorRepository, tz_name: Optional[str] = None):
        self._repo = repo
        self._tz = ZoneInfo(tz_name or settings.CHECKIN_TIMEZONE)

    def _bound(self, value: DateBound, end: bool) -> Optional[datetime]:
        """Plain dates cover the whole local day; naive datetimes are local."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=self._tz)
        start = datetime.combine(value, time.min, tzinfo=self._tz)
        if end:
            return start + timedelta(days=1) - timedelta(microseconds=1)
        return start

    def export_csv(self, start_date: DateBound = None, end_date: DateBound = None,
                   discipline: Optional[str] = None,
                   search_term: Optional[str] = None) -> str:
        if discipline and discipline not in DISCIPLINES:
            raise ValidationError("discipline", "Invalid discipline selected")

        visits = self._repo.list_visits(
            start=self._bound(start_date, end=False),
            end=self._bound(end_date, end=True),
        )
        term = (search_term or "").strip().lower()

        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        output.write(",".join(CSV_HEADERS) + "\n")
        for visit in visits:
            if discipline and discipline not in visit["disciplines_at_visit"]:
                continue
            if term and term not in visit["name"].lower() and term not in visit["email"].lower():
                continue
            writer.writerow([
                visit["timestamp"].astimezone(self._tz).isoformat(),
                visit["name"],
                visit["email"],
                DISCIPLINE_SEPARATOR.join(visit["disciplines_at_visit"]),
                visit["reason"],
            ])
        # No trailing newline after the last row.
        return output.getvalue()[:-1]
