# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain exceptions raised by services and repositories.

The app's exception handlers map these onto HTTP status codes; nothing
below the controller layer knows about HTTP.
"""
from typing import Optional

GENERIC_STORE_MESSAGE = "Operation failed, please try again."


class CheckinError(Exception):
    """Base class for every error the service reports to callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CheckinError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(CheckinError):
    pass


class ConflictError(CheckinError):
    pass


class AuthenticationError(CheckinError):
    NOT_FOUND = "not_found"
    NO_PIN = "no_pin"
    WRONG_PIN = "wrong_pin"

    MESSAGES = {
        NOT_FOUND: "Account not found. Please register first.",
        NO_PIN: "Account exists but has no PIN. Please contact support.",
        WRONG_PIN: "Incorrect PIN. Please try again.",
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or self.MESSAGES.get(reason, "Authentication failed"))
        self.reason = reason


class StoreError(CheckinError):
    """A backing-store call failed. The original cause is chained, never shown to users."""

    def __init__(self, message: str = GENERIC_STORE_MESSAGE):
        super().__init__(message)
