from __future__ import annotations

from typing import Any


class RealtimeError(Exception):
    """Base class for errors raised inside the realtime core."""

    default_message = "Realtime error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class PayloadValidationError(RealtimeError):
    """An inbound event payload is missing fields or malformed."""

    default_message = "Invalid payload"

    def __init__(self, message: str | None = None, errors: Any = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class PersistenceError(RealtimeError):
    """A durable store read or write failed."""

    default_message = "Persistence failure"


class TokenVerificationError(RealtimeError):
    """The authenticate token is invalid, expired, or issued for another user."""

    default_message = "unauthorized"


class RateLimitExceeded(RealtimeError):
    default_message = "Rate limit exceeded"
