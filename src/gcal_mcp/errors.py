"""Error hierarchy for Google Calendar tools.

Every error raised by the calendar client, the batch subsystem and the tool
handlers derives from :class:`CalendarError`, so the tool boundary can turn
any of them into a text result with a single ``except`` clause.
"""

from __future__ import annotations

import re

REAUTHENTICATE_HINT = (
    "Authentication token is invalid or expired. "
    "Please re-run the authentication process and retry with a fresh access token."
)


class CalendarError(RuntimeError):
    """Base error raised by Google Calendar client, batch and handler code."""


class CalendarAuthenticationError(CalendarError):
    """Raised when the bearer token is missing, invalid, or expired."""

    def __init__(self, message: str = REAUTHENTICATE_HINT) -> None:
        super().__init__(f"Google API Error: {message}")


class ArgumentValidationError(CalendarError):
    """Raised when tool arguments fail validation outside the pydantic models."""


class CalendarNetworkError(CalendarError):
    """Raised when a request to Google fails at the connection level."""


class CalendarRequestError(CalendarError):
    """Raised when a Google Calendar API request returns a non-2xx status."""

    def __init__(self, *, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Google Calendar API request failed ({status_code}): {message}")


class BatchConfigurationError(CalendarError):
    """Raised when a batch request is built from an out-of-range calendar id set."""


class BatchParseError(CalendarError):
    """Raised when a multipart batch response cannot be fully parsed."""


class BatchInternalError(CalendarError):
    """Raised when batch invariants are violated (a defect, not a user error)."""


_CREDENTIAL_PAIR_PATTERN = re.compile(
    r"(?i)\b(client_secret|refresh_token|access_token|accessToken|token)"
    r"""(['"]?\s*[=:]\s*['"]?)([^\s,;'"]+)"""
)
_BEARER_PATTERN = re.compile(r"(?i)\b(bearer\s+)([^\s,;'\"]+)")


def redact_credentials(message: str) -> str:
    """Redact credential-looking values from *message*."""
    redacted = _CREDENTIAL_PAIR_PATTERN.sub(r"\1\2[REDACTED]", message)
    return _BEARER_PATTERN.sub(r"\1[REDACTED]", redacted)


def sanitize_error_message(message: str, *, limit: int = 200) -> str:
    """Redact credentials, collapse whitespace and truncate to *limit* characters."""
    return " ".join(redact_credentials(message).split())[:limit]
