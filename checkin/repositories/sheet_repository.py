# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Data-access layer for identities and visits stored in a Google Sheet.

The spreadsheet holds two worksheets with a header row each:

    Users:  ID | EMAIL | NAME | PREFERRED_NAME | WORKPLACE | DISCIPLINES |
            CREATED_AT | UPDATED_AT | PIN_HASH
    Visits: ID | USER_ID | TIMESTAMP | REASON | DISCIPLINES

Every query reads the whole worksheet and filters in memory. Writes use
``RAW`` input so cell values are never interpreted as formulas.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import gspread
from google.oauth2.service_account import Credentials
from gspread.exceptions import GSpreadException, WorksheetNotFound

from checkin.core.errors import ConflictError, NotFoundError
from checkin.core.logging import get_logger
from checkin.repositories.base import VisitorRepository, as_utc, store_errors

logger = get_logger(__name__)

USERS_SHEET = "Users"
VISITS_SHEET = "Visits"
USER_COLUMNS = [
    "ID", "EMAIL", "NAME", "PREFERRED_NAME", "WORKPLACE", "DISCIPLINES",
    "CREATED_AT", "UPDATED_AT", "PIN_HASH",
]
VISIT_COLUMNS = ["ID", "USER_ID", "TIMESTAMP", "REASON", "DISCIPLINES"]
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _last_column(columns: List[str]) -> str:
    return chr(ord("A") + len(columns) - 1)


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def _split(cell: str) -> List[str]:
    return [d.strip() for d in cell.split(",") if d.strip()] if cell else []


def _pad(row: List[str], width: int) -> List[str]:
    # The Sheets API trims trailing empty cells.
    return list(row) + [""] * (width - len(row))


def _parse_user(row: List[str]) -> Optional[Dict[str, Any]]:
    row = _pad(row, len(USER_COLUMNS))
    if not row[0] or not row[1]:
        return None
    return {
        "id": row[0],
        "email": row[1],
        "name": row[2],
        "preferred_name": row[3],
        "workplace": row[4],
        "disciplines": _split(row[5]),
        "created_at": as_utc(row[6]),
        "updated_at": as_utc(row[7]),
        "pin_hash": row[8],
    }


def _parse_visit(row: List[str]) -> Optional[Dict[str, Any]]:
    row = _pad(row, len(VISIT_COLUMNS))
    if not row[0] or not row[1] or not row[2]:
        return None
    return {
        "id": row[0],
        "user_id": row[1],
        "timestamp": as_utc(row[2]),
        "reason": row[3],
        "disciplines_at_visit": _split(row[4]),
    }


def _user_row(user: Dict[str, Any]) -> List[str]:
    return [
        user["id"],
        user["email"],
        user["name"],
        user.get("preferred_name") or "",
        user.get("workplace") or "",
        ",".join(user["disciplines"]),
        _iso(user["created_at"]),
        _iso(user["updated_at"]),
        user.get("pin_hash") or "",
    ]


def _visit_row(visit: Dict[str, Any]) -> List[str]:
    return [
        visit["id"],
        visit["user_id"],
        _iso(visit["timestamp"]),
        visit["reason"],
        ",".join(visit["disciplines_at_visit"]),
    ]


class SheetVisitorRepository(VisitorRepository):
    backend = "sheets"

    def __init__(self, users_ws, visits_ws):
        self._users_ws = users_ws
        self._visits_ws = visits_ws

    @classmethod
    def from_service_account(cls, credentials_file: str, spreadsheet_id: str) -> "SheetVisitorRepository":
        if not spreadsheet_id:
            raise ValueError("GOOGLE_SPREADSHEET_ID not set")
        credentials = Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
        gc = gspread.authorize(credentials)
        spreadsheet = gc.open_by_key(spreadsheet_id)
        return cls(
            _open_worksheet(spreadsheet, USERS_SHEET, USER_COLUMNS),
            _open_worksheet(spreadsheet, VISITS_SHEET, VISIT_COLUMNS),
        )

    # ── Maintenance ────────────────────────────────────────────────────

    def ensure_headers(self):
        with store_errors("ensure_headers", GSpreadException):
            for ws, columns in ((self._users_ws, USER_COLUMNS), (self._visits_ws, VISIT_COLUMNS)):
                if not ws.row_values(1):
                    ws.update(range_name=f"A1:{_last_column(columns)}1", values=[columns])

    def clear(self):
        """Delete every data row, keeping the header rows."""
        with store_errors("clear", GSpreadException):
            self._users_ws.batch_clear(["A2:Z"])
            self._visits_ws.batch_clear(["A2:Z"])
        logger.info("Worksheets cleared")

    # ── Raw reads ──────────────────────────────────────────────────────

    def _user_rows(self) -> List[Tuple[int, Dict[str, Any]]]:
        """(sheet row number, user) for every parseable user row."""
        with store_errors("read_users", GSpreadException):
            values = self._users_ws.get_all_values()
        out = []
        for idx, row in enumerate(values[1:], start=2):
            user = _parse_user(row)
            if user:
                out.append((idx, user))
        return out

    def _visits(self) -> List[Dict[str, Any]]:
        with store_errors("read_visits", GSpreadException):
            values = self._visits_ws.get_all_values()
        return [v for v in (_parse_visit(r) for r in values[1:]) if v]

    def _write_user(self, row_number: int, user: Dict[str, Any]):
        with store_errors("write_user", GSpreadException):
            self._users_ws.update(
                range_name=f"A{row_number}:{_last_column(USER_COLUMNS)}{row_number}",
                values=[_user_row(user)],
                value_input_option="RAW",
            )

    # ── Identities ─────────────────────────────────────────────────────

    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return next((u for _, u in self._user_rows() if u["id"] == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return next((u for _, u in self._user_rows() if u["email"] == email), None)

    def list_users(self) -> List[Dict[str, Any]]:
        return [u for _, u in self._user_rows()]

    def create_user(self, user: Dict[str, Any]) -> None:
        if self.get_user_by_email(user["email"]):
            raise ConflictError("Email already registered")
        with store_errors("create_user", GSpreadException):
            self._users_ws.append_row(_user_row(user), value_input_option="RAW")

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        for row_number, user in self._user_rows():
            if user["id"] == user_id:
                user.update(fields)
                self._write_user(row_number, user)
                return
        raise NotFoundError("User not found")

    # ── Visits ─────────────────────────────────────────────────────────

    def get_latest_visit(self, user_id: str) -> Optional[Dict[str, Any]]:
        mine = [v for v in self._visits() if v["user_id"] == user_id]
        return max(mine, key=lambda v: v["timestamp"]) if mine else None

    def record_visit(self, visit: Dict[str, Any], since: datetime) -> bool:
        recent = any(
            v["user_id"] == visit["user_id"] and v["timestamp"] >= since
            for v in self._visits()
        )
        if recent:
            return False
        with store_errors("append_visit", GSpreadException):
            self._visits_ws.append_row(_visit_row(visit), value_input_option="RAW")
        self.update_user(visit["user_id"], {"updated_at": visit["timestamp"]})
        return True

    def count_visits_since(self, since: datetime) -> int:
        return sum(1 for v in self._visits() if v["timestamp"] >= since)

    def list_visit_disciplines(self) -> List[List[str]]:
        return [v["disciplines_at_visit"] for v in self._visits()]

    def list_visits(self, start: Optional[datetime] = None, end: Optional[datetime] = None,
                    limit: Optional[int] = None) -> List[Dict[str, Any]]:
        owners = {u["id"]: u for u in self.list_users()}
        out = []
        for visit in self._visits():
            if start is not None and visit["timestamp"] < start:
                continue
            if end is not None and visit["timestamp"] > end:
                continue
            owner = owners.get(visit["user_id"])
            visit["name"] = owner["name"] if owner else "Unknown"
            visit["email"] = owner["email"] if owner else "Unknown"
            out.append(visit)
        out.sort(key=lambda v: v["timestamp"], reverse=True)
        return out[:limit] if limit is not None else out

    def list_user_visits(self, user_id: str) -> List[Dict[str, Any]]:
        mine = [v for v in self._visits() if v["user_id"] == user_id]
        mine.sort(key=lambda v: v["timestamp"], reverse=True)
        return mine

    def count_visits_by_user(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for visit in self._visits():
            counts[visit["user_id"]] = counts.get(visit["user_id"], 0) + 1
        return counts

    # ── Lifecycle ──────────────────────────────────────────────────────

    def verify_connection(self):
        self._users_ws.row_values(1)


def _open_worksheet(spreadsheet, title: str, columns: List[str]):
    try:
        return spreadsheet.worksheet(title)
    except WorksheetNotFound:
        logger.info("Creating worksheet %s", title)
        ws = spreadsheet.add_worksheet(title=title, rows=1000, cols=len(columns))
        ws.update(range_name=f"A1:{_last_column(columns)}1", values=[columns])
        return ws
