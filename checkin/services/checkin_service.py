# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Check-in workflow: validate the reason, suppress duplicates, append a visit.

A visitor may record at most one visit per duplicate window (60 s by
default). The check and the append are two store calls; only the relational
store runs them inside one transaction, so two truly concurrent requests can
still both land on the spreadsheet store.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List

from checkin.core.config import settings
from checkin.core.errors import AuthenticationError, ConflictError, NotFoundError
from checkin.core.logging import get_logger
from checkin.metrics import CHECKINS_TOTAL, DUPLICATE_CHECKINS
from checkin.repositories.base import VisitorRepository
from checkin.services.validation import (
    validate_disciplines, validate_email, validate_name, validate_pin, validate_reason,
)
from checkin.services.visitor_service import VisitorService, utcnow, visit_to_public

logger = get_logger(__name__)

DUPLICATE_MESSAGE = "You have already checked in within the last minute"


class CheckInService:
    def __init__(self, repo: VisitorRepository, visitors: VisitorService,
                 clock: Callable[[], datetime] = utcnow,
                 window_seconds: int = None):
        self._repo = repo
        self._visitors = visitors
        self._clock = clock
        self._window = timedelta(
            seconds=settings.DUPLICATE_WINDOW_SECONDS if window_seconds is None else window_seconds
        )

    def check_in(self, user_id: str, reason: str) -> Dict[str, Any]:
        reason = validate_reason(reason)
        user = self._repo.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return self._record(user, reason, flow="account")

    def pin_check_in(self, pin: str, name: str, email: str,
                     disciplines: List[str], reason: str) -> Dict[str, Any]:
        """Resolve (or create) the visitor from email + PIN, then check in."""
        pin = validate_pin(pin)
        name = validate_name(name)
        email = validate_email(email)
        disciplines = validate_disciplines(disciplines)
        reason = validate_reason(reason)

        try:
            user = self._visitors.verify_credentials(email, pin)
        except AuthenticationError as exc:
            if exc.reason != AuthenticationError.NOT_FOUND:
                raise
            user_id = self._visitors.register(email, name, pin, disciplines)
            user = self._repo.get_user_by_id(user_id)
        else:
            # Profile changes only land once the visit is allowed.
            self._reject_recent(user["id"], self._clock())
            if user["name"] != name or user["disciplines"] != disciplines:
                changes = {"name": name, "disciplines": disciplines, "updated_at": self._clock()}
                self._repo.update_user(user["id"], changes)
                user.update(changes)
        return self._record(user, reason, flow="pin")

    def _reject_recent(self, user_id: str, now: datetime):
        latest = self._repo.get_latest_visit(user_id)
        if latest and latest["timestamp"] >= now - self._window:
            self._duplicate(user_id)

    def _duplicate(self, user_id: str):
        DUPLICATE_CHECKINS.inc()
        logger.info("Duplicate check-in suppressed user=%s", user_id)
        raise ConflictError(DUPLICATE_MESSAGE)

    def _record(self, user: Dict[str, Any], reason: str, flow: str) -> Dict[str, Any]:
        now = self._clock()
        visit = {
            "id": str(uuid.uuid4()),
            "user_id": user["id"],
            "timestamp": now,
            "reason": reason,
            "disciplines_at_visit": list(user["disciplines"]),
        }
        if not self._repo.record_visit(visit, since=now - self._window):
            self._duplicate(user["id"])

        CHECKINS_TOTAL.labels(flow=flow).inc()
        logger.info("Visit recorded id=%s user=%s flow=%s", visit["id"], user["id"], flow)
        return visit_to_public(visit)
