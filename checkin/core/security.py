# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
PIN hashing.

New PINs are stored as bcrypt hashes (``$2b$...``). Rows written by the
earlier salted SHA-256 scheme (``<salt-hex>:<sha256-hex>``) still verify.
"""
import hashlib
import hmac
from typing import Optional

import bcrypt

from checkin.core.config import settings

BCRYPT_PREFIX = "$2"


def _legacy_digest(pin: str, salt: str) -> str:
    return hashlib.sha256((pin + salt).encode("utf-8")).hexdigest()


def hash_pin(pin: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.PIN_HASH_ROUNDS)
    return bcrypt.hashpw(pin.encode("utf-8"), salt).decode("utf-8")


def verify_pin(pin: str, stored: Optional[str]) -> bool:
    if not stored:
        return False
    if stored.startswith(BCRYPT_PREFIX):
        try:
            return bcrypt.checkpw(pin.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            return False
    salt, sep, expected = stored.partition(":")
    if not sep or not salt or not expected:
        return False
    return hmac.compare_digest(_legacy_digest(pin, salt), expected)


def verify_admin_password(supplied: Optional[str], expected: str) -> bool:
    """An empty configured password locks the admin API instead of opening it."""
    if not expected or not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
