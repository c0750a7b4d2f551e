# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shared fixtures: a controllable clock, both repositories, and an API client."""
import re
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from checkin.core.config import settings
from checkin.core.database import create_sql_engine
from checkin.core.dependencies import Container
from checkin.main import create_app
from checkin.repositories.sheet_repository import (
    SheetVisitorRepository, USER_COLUMNS, VISIT_COLUMNS,
)
from checkin.repositories.sql_repository import SQLVisitorRepository
from checkin.services.analytics_service import AnalyticsService
from checkin.services.checkin_service import CheckInService
from checkin.services.export_service import ExportService
from checkin.services.rate_limiter import SlidingWindowRateLimiter
from checkin.services.visitor_service import VisitorService

# Monday
FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
ADMIN_PASSWORD = "letmein-admin"


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)

    def set(self, value: datetime):
        self.now = value


class FakeWorksheet:
    """In-memory stand-in for the slice of ``gspread.Worksheet`` the repository uses."""

    _RANGE = re.compile(r"^[A-Z]+(\d+)(?::[A-Z]+\d*)?$")

    def __init__(self, header):
        self.rows = [list(header)]
        self.appended_with = []

    def get_all_values(self):
        # The real API drops trailing empty cells.
        out = []
        for row in self.rows:
            row = list(row)
            while row and row[-1] == "":
                row.pop()
            out.append(row)
        return out

    def row_values(self, index):
        return self.get_all_values()[index - 1] if index <= len(self.rows) else []

    def append_row(self, values, value_input_option=None):
        self.appended_with.append(value_input_option)
        self.rows.append([str(v) for v in values])

    def update(self, range_name=None, values=None, value_input_option=None):
        start = int(self._RANGE.match(range_name).group(1))
        for offset, row in enumerate(values):
            idx = start - 1 + offset
            while len(self.rows) <= idx:
                self.rows.append([])
            self.rows[idx] = [str(v) for v in row]

    def batch_clear(self, ranges):
        for range_name in ranges:
            start = int(self._RANGE.match(range_name).group(1))
            self.rows = self.rows[:start - 1]


@pytest.fixture(autouse=True)
def fast_pin_hashing(monkeypatch):
    monkeypatch.setattr(settings, "PIN_HASH_ROUNDS", 4)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sql_repo():
    repo = SQLVisitorRepository(create_sql_engine("sqlite://"))
    repo.create_schema()
    yield repo
    repo.dispose()


@pytest.fixture
def sheet_repo():
    return SheetVisitorRepository(FakeWorksheet(USER_COLUMNS), FakeWorksheet(VISIT_COLUMNS))


@pytest.fixture(params=["sql", "sheets"])
def repo(request):
    """Every contract-level test runs against both backing stores."""
    if request.param == "sql":
        return request.getfixturevalue("sql_repo")
    return request.getfixturevalue("sheet_repo")


@pytest.fixture
def services(repo, clock):
    visitors = VisitorService(repo, clock=clock)
    return Container(
        repo=repo,
        visitors=visitors,
        checkins=CheckInService(repo, visitors, clock=clock, window_seconds=60),
        analytics=AnalyticsService(repo, tz_name="UTC", clock=clock),
        exports=ExportService(repo, tz_name="UTC"),
        lookup_limiter=SlidingWindowRateLimiter(10, 60),
    )


@pytest.fixture
def client(services, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    return TestClient(create_app(container=services))


@pytest.fixture
def admin_headers():
    return {"X-Admin-Password": ADMIN_PASSWORD}
