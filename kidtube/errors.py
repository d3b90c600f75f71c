"""Error taxonomy for subscription access and YouTube API failures.

Remote failures are classified from the HTTP status and the structured JSON
error body returned by Google APIs, never from free-form message text.
"""

import json
from typing import Optional

REAUTH_HINT = (
    "You need to re-login with additional permissions to manage subscriptions. "
    "Please sign out and sign in again."
)

QUOTA_REASONS = {
    "quotaExceeded",
    "dailyLimitExceeded",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "RATE_LIMIT_EXCEEDED",
    "RESOURCE_EXHAUSTED",
}

SCOPE_REASONS = {
    "insufficientPermissions",
    "ACCESS_TOKEN_SCOPE_INSUFFICIENT",
}


class KidTubeError(Exception):
    """Base class for all KidTube errors."""


class NotAuthenticated(KidTubeError):
    """No usable credential is available; the user must sign in."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class TokenExpired(NotAuthenticated):
    """The stored credential expired or was rejected by the remote API."""

    def __init__(self, message: str = "Authentication token expired"):
        super().__init__(message)


class CacheCorrupt(KidTubeError):
    """Persisted local state could not be decoded."""


class RemoteError(KidTubeError):
    """A non-2xx response from the YouTube or Google APIs."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.reason = reason

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.status}: {self.message}"


class QuotaExceeded(RemoteError):
    """The YouTube API quota or rate limit was exhausted."""


class Unauthorized(RemoteError):
    """The remote API rejected the bearer token."""


class PermissionDenied(RemoteError):
    """The token lacks the OAuth scope required for a write operation."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = 403,
        reason: Optional[str] = None,
        hint: str = REAUTH_HINT,
    ):
        super().__init__(message, status=status, reason=reason)
        self.hint = hint


class NotFound(RemoteError):
    """An expected remote resource does not exist."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = 404,
        reason: Optional[str] = None,
    ):
        super().__init__(message, status=status, reason=reason)


def _error_reasons(payload: dict) -> tuple[str, list[str]]:
    """Pull the message and every machine-readable reason out of an error body."""
    error = payload.get("error")
    if isinstance(error, str):
        # OAuth endpoints use {"error": "invalid_token", "error_description": ...}
        return payload.get("error_description", error), [error]
    if not isinstance(error, dict):
        return "", []

    reasons = []
    for key in ("errors", "details"):
        for entry in error.get(key) or []:
            if isinstance(entry, dict) and entry.get("reason"):
                reasons.append(str(entry["reason"]))
    if error.get("status"):
        reasons.append(str(error["status"]))
    return str(error.get("message", "")), reasons


def classify_http_error(status: int, content: bytes | str | None) -> RemoteError:
    """Map an HTTP status and error body to the matching RemoteError variant.

    Args:
        status: HTTP status code of the failed response.
        content: Raw response body (JSON for Google APIs, but anything is tolerated).

    Returns:
        The most specific RemoteError subclass for the failure.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    content = content or ""

    message, reasons = "", []
    try:
        payload = json.loads(content)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message, reasons = _error_reasons(payload)
    message = message or content.strip() or f"HTTP {status}"

    primary = reasons[0] if reasons else None
    lowered = [r.lower() for r in reasons]

    if status == 401:
        return Unauthorized(message, status=status, reason=primary)

    if status in (403, 429):
        for reason, low in zip(reasons, lowered):
            if reason in QUOTA_REASONS or "quota" in low:
                return QuotaExceeded(message, status=status, reason=reason)
        for reason in reasons:
            if reason in SCOPE_REASONS:
                return PermissionDenied(message, status=status, reason=reason)

    if status == 404:
        return NotFound(message, status=status, reason=primary)

    return RemoteError(message, status=status, reason=primary)
