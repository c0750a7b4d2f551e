# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for visitor identity: lookup, login, registration, profile edits."""
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from checkin.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from checkin.core.logging import get_logger
from checkin.core.security import hash_pin, verify_pin
from checkin.metrics import LOGIN_FAILURES, REGISTRATIONS_TOTAL
from checkin.repositories.base import VisitorRepository
from checkin.services.validation import (
    normalize_email, validate_disciplines, validate_email, validate_name, validate_pin,
    validate_preferred_name, validate_workplace,
)

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def user_to_public(user: Dict[str, Any]) -> Dict[str, Any]:
    """Everything except the credential."""
    return {
        "id": user["id"],
        "email": user["email"],
        "name": user["name"],
        "preferred_name": user.get("preferred_name") or "",
        "workplace": user.get("workplace") or "",
        "disciplines": list(user["disciplines"]),
        "created_at": user["created_at"].isoformat() if user.get("created_at") else "",
        "updated_at": user["updated_at"].isoformat() if user.get("updated_at") else "",
    }


def visit_to_public(visit: Dict[str, Any]) -> Dict[str, Any]:
    out = {
        "id": visit["id"],
        "user_id": visit["user_id"],
        "timestamp": visit["timestamp"].isoformat(),
        "reason": visit["reason"],
        "disciplines_at_visit": list(visit["disciplines_at_visit"]),
    }
    if "name" in visit:
        out["name"] = visit["name"]
        out["email"] = visit["email"]
    return out


class VisitorService:
    def __init__(self, repo: VisitorRepository, clock: Callable[[], datetime] = utcnow):
        self._repo = repo
        self._clock = clock

    # ── Lookup ─────────────────────────────────────────────────────────

    def lookup_by_email(self, email: str) -> Dict[str, Any]:
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError("email", "Email is required")
        user = self._repo.get_user_by_email(normalized)
        if not user:
            return {"exists": False}
        last_visit = self._repo.get_latest_visit(user["id"])
        return {
            "exists": True,
            "user": user_to_public(user),
            "last_visit": visit_to_public(last_visit) if last_visit else None,
        }

    def find_user_by_pin(self, pin: str) -> Optional[Dict[str, Any]]:
        """First identity whose stored hash matches ``pin``; PINs are not unique."""
        for user in self._repo.list_users():
            if verify_pin(pin, user.get("pin_hash")):
                return user
        return None

    def lookup_by_pin(self, pin: str) -> Dict[str, Any]:
        validate_pin(pin)
        user = self.find_user_by_pin(pin)
        if not user:
            return {"exists": False}
        return {
            "exists": True,
            "user": {
                "name": user["name"],
                "email": user["email"],
                "disciplines": list(user["disciplines"]),
            },
        }

    # ── Authentication ─────────────────────────────────────────────────

    def verify_credentials(self, email: str, pin: str) -> Dict[str, Any]:
        """Return the stored identity for ``email`` if ``pin`` matches it."""
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError("email", "Email is required")
        validate_pin(pin)

        user = self._repo.get_user_by_email(normalized)
        if not user:
            reason = AuthenticationError.NOT_FOUND
        elif not user.get("pin_hash"):
            reason = AuthenticationError.NO_PIN
        elif not verify_pin(pin, user["pin_hash"]):
            reason = AuthenticationError.WRONG_PIN
        else:
            return user

        LOGIN_FAILURES.labels(reason=reason).inc()
        logger.warning("Login failed email=%s reason=%s", normalized, reason)
        raise AuthenticationError(reason)

    def authenticate(self, email: str, pin: str) -> Dict[str, Any]:
        user = self.verify_credentials(email, pin)
        logger.info("Login ok user=%s", user["id"])
        return user_to_public(user)

    # ── Registration / profile ─────────────────────────────────────────

    def register(self, email: str, name: str, pin: str, disciplines: List[str],
                 workplace: str = "", preferred_name: str = "") -> str:
        email = validate_email(email)
        name = validate_name(name)
        preferred_name = validate_preferred_name(preferred_name)
        workplace = validate_workplace(workplace)
        pin = validate_pin(pin)
        disciplines = validate_disciplines(disciplines)

        if self._repo.get_user_by_email(email):
            raise ConflictError("Email already registered")

        now = self._clock()
        user_id = str(uuid.uuid4())
        self._repo.create_user({
            "id": user_id,
            "email": email,
            "name": name,
            "preferred_name": preferred_name,
            "workplace": workplace,
            "disciplines": disciplines,
            "pin_hash": hash_pin(pin),
            "created_at": now,
            "updated_at": now,
        })
        REGISTRATIONS_TOTAL.inc()
        logger.info("Visitor registered id=%s disciplines=%s", user_id, ",".join(disciplines))
        return user_id

    def update_profile(self, user_id: str, name: str, disciplines: List[str],
                       workplace: str = "", preferred_name: Optional[str] = None,
                       pin: Optional[str] = None) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "name": validate_name(name),
            "workplace": validate_workplace(workplace),
            "disciplines": validate_disciplines(disciplines),
        }
        if preferred_name is not None:
            fields["preferred_name"] = validate_preferred_name(preferred_name)
        if pin:
            fields["pin_hash"] = hash_pin(validate_pin(pin))

        user = self._repo.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        fields["updated_at"] = self._clock()
        self._repo.update_user(user_id, fields)
        logger.info("Profile updated id=%s pin_changed=%s", user_id, "pin_hash" in fields)
        user.update(fields)
        return user_to_public(user)
