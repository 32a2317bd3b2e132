"""
utils/errors.py
---------------
Error taxonomy shared by every layer.

    ValidationError       - bad user input (malformed key, missing argument).
    NotFoundError         - the monitoring API has no record for a key.
    ExternalServiceError  - upstream timeout, non-2xx or transport failure.
    InternalError         - local persistence or decoding failure.

Raw exception text never reaches the user: `user_message()` maps each class
to a fixed reply.
"""

from typing import Any, Optional


class BotError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ValidationError(BotError):
    """User-supplied input is malformed."""


class NotFoundError(BotError):
    """The requested resource does not exist upstream."""


class ExternalServiceError(BotError):
    """A call to an external service failed or timed out."""

    def __init__(
        self,
        service: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        details = {"service": service}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"{service} error: {message}", details)
        self.service = service
        self.status_code = status_code


class InternalError(BotError):
    """Local failure (database, decoding)."""


GENERIC_FAILURE = "❌ Something went wrong. Please try again later."

_USER_MESSAGES = {
    ValidationError: "⚠️ Invalid input. Check the command and try again.",
    NotFoundError: "❌ Not found. Check the server key and try again.",
    ExternalServiceError: "❌ The monitoring service is unavailable right now. Please try again later.",
    InternalError: GENERIC_FAILURE,
}


def user_message(exc: BaseException) -> str:
    """Return the fixed user-facing text for an exception."""
    for cls, text in _USER_MESSAGES.items():
        if isinstance(exc, cls):
            return text
    return GENERIC_FAILURE
