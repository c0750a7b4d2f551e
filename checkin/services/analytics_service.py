# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Admin dashboard reads: windowed visit counts, discipline breakdown, listings."""
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from checkin.core.config import settings
from checkin.core.errors import NotFoundError, ValidationError
from checkin.repositories.base import VisitorRepository
from checkin.schemas import DISCIPLINES, USER_SORT_FIELDS
from checkin.services.visitor_service import user_to_public, utcnow, visit_to_public

RECENT_ACTIVITY_LIMIT = 20


def window_starts(now: datetime, tz: ZoneInfo) -> Tuple[datetime, datetime, datetime]:
    """Local (today, week, month) boundaries; weeks start on Sunday."""
    local = now.astimezone(tz)
    today = local.replace(hour=0, minute=0, second=0, microsecond=0)
    # Monday == 0 ... Sunday == 6
    week = today - timedelta(days=(today.weekday() + 1) % 7)
    month = today.replace(day=1)
    return today, week, month


def discipline_breakdown(snapshots: List[List[str]]) -> List[Dict[str, Any]]:
    counts = {d: 0 for d in DISCIPLINES}
    for disciplines in snapshots:
        for discipline in disciplines:
            if discipline in counts:
                counts[discipline] += 1
    return [{"discipline": d, "count": c} for d, c in counts.items()]


class AnalyticsService:
    def __init__(self, repo: VisitorRepository, tz_name: Optional[str] = None,
                 clock: Callable[[], datetime] = utcnow):
        self._repo = repo
        self._tz = ZoneInfo(tz_name or settings.CHECKIN_TIMEZONE)
        self._clock = clock

    def get_analytics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or self._clock()
        today, week, month = window_starts(now, self._tz)
        recent = self._repo.list_visits(limit=RECENT_ACTIVITY_LIMIT)
        return {
            "today_count": self._repo.count_visits_since(today),
            "week_count": self._repo.count_visits_since(week),
            "month_count": self._repo.count_visits_since(month),
            "discipline_breakdown": discipline_breakdown(self._repo.list_visit_disciplines()),
            "recent_activity": [visit_to_public(v) for v in recent],
        }

    def list_users(self, page: int = 1, per_page: int = 50, sort: str = "updated_at",
                   order: str = "desc") -> Tuple[int, List[Dict[str, Any]]]:
        if sort not in USER_SORT_FIELDS:
            raise ValidationError("sort", f"sort must be one of {USER_SORT_FIELDS}")
        if order not in ("asc", "desc"):
            raise ValidationError("order", "order must be 'asc' or 'desc'")

        counts = self._repo.count_visits_by_user()
        rows = []
        for user in self._repo.list_users():
            row = user_to_public(user)
            row["visit_count"] = counts.get(user["id"], 0)
            rows.append(row)

        if sort in ("name", "email"):
            key = lambda r: r[sort].lower()
        else:
            key = lambda r: r[sort]
        rows.sort(key=key, reverse=(order == "desc"))

        offset = (page - 1) * per_page
        return len(rows), rows[offset:offset + per_page]

    def get_user_visits(self, user_id: str) -> List[Dict[str, Any]]:
        if not self._repo.get_user_by_id(user_id):
            raise NotFoundError("User not found")
        return [visit_to_public(v) for v in self._repo.list_user_visits(user_id)]
