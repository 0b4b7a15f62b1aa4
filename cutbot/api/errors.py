from __future__ import annotations

from typing import Optional, Tuple

from .models import Request


class ApiError(Exception):
    """Base error for ladder backend failures."""

    retryable = False

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        request: Optional[Request] = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.request = request
        self.attempts = attempts

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.code:
            parts.append(f"code={self.code}")
        if self.attempts > 1:
            parts.append(f"attempts={self.attempts}")
        return " | ".join(parts)


class ClientError(ApiError):
    """HTTP 4xx: validation, not found, conflict or auth. Never retried."""


class ServerError(ApiError):
    """HTTP 5xx."""

    retryable = True


class TransportError(ApiError):
    """Connection refused, timeout, or no response at all."""

    retryable = True


class DecodeError(ApiError):
    """The backend answered with something that is not a valid envelope."""


def parse_error_message(error: Exception) -> str:
    """
    Map exceptions into short, human-readable messages.
    Used for admin notifications and logs.
    """
    if isinstance(error, ClientError):
        if error.status_code in (401, 403):
            return f"❌ Authentication Error: {error.message} (check API_KEY on both sides)"
        return f"⚠️ Rejected by backend ({error.status_code}, {error.code or 'no code'}): {error.message}"
    if isinstance(error, ServerError):
        return f"❌ Backend Error: HTTP {error.status_code} after {error.attempts} attempt(s): {error.message}"
    if isinstance(error, TransportError):
        return f"❌ Connection Error: backend unreachable after {error.attempts} attempt(s): {error.message}"
    if isinstance(error, DecodeError):
        return f"❌ Malformed backend response: {error.message}"
    s, t = str(error), type(error).__name__
    return f"❌ {t}: {s.split(chr(10))[0][:100]}"


def format_user_friendly_error(error: Exception) -> str:
    """
    Short, safe error message suitable for end users.
    """
    if isinstance(error, ClientError):
        return error.message
    if isinstance(error, (ServerError, TransportError)):
        return "The ladder backend is currently unavailable. Please try again later."
    if isinstance(error, DecodeError):
        return "The ladder backend sent an unexpected response. An administrator has been notified."
    return "An unexpected error occurred. An administrator has been notified."


def error_messages(error: Exception) -> Tuple[str, str]:
    """
    Convenience helper returning (admin_message, user_message).
    """
    return parse_error_message(error), format_user_friendly_error(error)
