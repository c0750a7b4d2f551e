# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Input validation and sanitising.

Every validator returns the cleaned value or raises
:class:`~checkin.core.errors.ValidationError` tagged with the offending field.
"""
import re
from typing import Iterable, List, Optional

from checkin.core.errors import ValidationError
from checkin.schemas import DISCIPLINES

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
PIN_RE = re.compile(r"^[0-9]{4}$")

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)

NAME_MIN, NAME_MAX = 2, 50
REASON_MIN, REASON_MAX = 10, 500
WORKPLACE_MAX = 100


def sanitize_input(value: Optional[str]) -> str:
    """Light XSS scrub: not an HTML sanitiser."""
    if not value:
        return ""
    value = value.strip()
    value = _ANGLE_BRACKETS.sub("", value)
    value = _JS_SCHEME.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()


def normalize_email(email: Optional[str]) -> str:
    return sanitize_input((email or "").lower())


def validate_email(email: Optional[str]) -> str:
    cleaned = normalize_email(email)
    if not cleaned:
        raise ValidationError("email", "Email is required")
    if not EMAIL_RE.match(cleaned):
        raise ValidationError("email", "Please enter a valid email address")
    return cleaned


def validate_name(name: Optional[str], field: str = "name") -> str:
    cleaned = sanitize_input(name)
    if not cleaned:
        raise ValidationError(field, "Name is required")
    if len(cleaned) < NAME_MIN:
        raise ValidationError(field, f"Name must be at least {NAME_MIN} characters")
    if len(cleaned) > NAME_MAX:
        raise ValidationError(field, f"Name must be at most {NAME_MAX} characters")
    if not NAME_RE.match(cleaned):
        raise ValidationError(
            field, "Name can only contain letters, spaces, hyphens, and apostrophes"
        )
    return cleaned


def validate_preferred_name(name: Optional[str]) -> str:
    if not sanitize_input(name):
        return ""
    return validate_name(name, field="preferred_name")


def validate_workplace(workplace: Optional[str]) -> str:
    cleaned = sanitize_input(workplace)
    if len(cleaned) > WORKPLACE_MAX:
        raise ValidationError(
            "workplace", f"Workplace must be at most {WORKPLACE_MAX} characters"
        )
    return cleaned


def validate_pin(pin: Optional[str]) -> str:
    if not pin or not PIN_RE.match(pin):
        raise ValidationError("pin", "PIN must be exactly 4 digits")
    return pin


def validate_disciplines(disciplines: Optional[Iterable[str]]) -> List[str]:
    selected = list(disciplines or [])
    if not selected:
        raise ValidationError("disciplines", "Please select at least one discipline")
    invalid = [d for d in selected if d not in DISCIPLINES]
    if invalid:
        raise ValidationError("disciplines", f"Invalid discipline selected: {', '.join(invalid)}")
    # Keep first-seen order, drop repeats.
    return list(dict.fromkeys(selected))


def validate_reason(reason: Optional[str]) -> str:
    cleaned = sanitize_input(reason)
    if not cleaned:
        raise ValidationError("reason", "Reason for visit is required")
    if len(cleaned) < REASON_MIN:
        raise ValidationError("reason", f"Reason must be at least {REASON_MIN} characters")
    if len(cleaned) > REASON_MAX:
        raise ValidationError("reason", f"Reason must be at most {REASON_MAX} characters")
    return cleaned
