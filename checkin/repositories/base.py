# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository contract shared by the relational and spreadsheet stores.

Records travel as plain dicts. Timestamps are timezone-aware UTC datetimes;
``disciplines`` / ``disciplines_at_visit`` are lists of strings.

User keys:  id, email, name, preferred_name, workplace, disciplines,
            pin_hash, created_at, updated_at
Visit keys: id, user_id, timestamp, reason, disciplines_at_visit
            (+ name, email on joined reads)
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from checkin.core.errors import CheckinError, StoreError
from checkin.core.logging import get_logger

logger = get_logger(__name__)


def as_utc(value: Any) -> Optional[datetime]:
    """Coerce a stored timestamp (datetime or ISO string) to aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@contextmanager
def store_errors(operation: str, *exc_types):
    """Translate backend exceptions into StoreError, logging the real cause."""
    try:
        yield
    except CheckinError:
        raise
    except exc_types as exc:
        logger.exception("Store call failed op=%s", operation)
        raise StoreError() from exc


class VisitorRepository(ABC):
    backend: str = ""

    # ── Identities ─────────────────────────────────────────────────────

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def list_users(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def create_user(self, user: Dict[str, Any]) -> None:
        """Insert a new identity; ConflictError if the email is taken."""

    @abstractmethod
    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        """Overwrite the given fields; NotFoundError if the identity is absent."""

    # ── Visits ─────────────────────────────────────────────────────────

    @abstractmethod
    def get_latest_visit(self, user_id: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def record_visit(self, visit: Dict[str, Any], since: datetime) -> bool:
        """
        Append ``visit`` unless the same user already has a visit with
        timestamp >= ``since``. Also stamps the owner's ``updated_at`` with the
        visit timestamp. Returns False when suppressed.
        """

    @abstractmethod
    def count_visits_since(self, since: datetime) -> int: ...

    @abstractmethod
    def list_visit_disciplines(self) -> List[List[str]]: ...

    @abstractmethod
    def list_visits(self, start: Optional[datetime] = None, end: Optional[datetime] = None,
                    limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Visits joined with owner name/email, newest first, bounds inclusive."""

    @abstractmethod
    def list_user_visits(self, user_id: str) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def count_visits_by_user(self) -> Dict[str, int]: ...

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    def verify_connection(self) -> None: ...

    def dispose(self) -> None:
        pass
