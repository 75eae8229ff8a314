"""Exceptions raised by commitbot."""

from __future__ import annotations

from typing import Any, Optional

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


class CommitBotError(Exception):
    """Base class for all commitbot errors."""


class UserError(CommitBotError):
    """Actionable problem the user can fix (missing repo, not configured)."""

    def __init__(self, message: str, severity: str = SEVERITY_ERROR) -> None:
        super().__init__(message)
        self.severity = severity


class ConfigError(UserError):
    """Invalid configuration value."""


class ProcessError(CommitBotError):
    """External command was unavailable or exited non-zero."""

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr


class TransportError(CommitBotError):
    """The request never produced an HTTP response."""


class HttpError(TransportError):
    """Endpoint answered with a non-success status code."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"API request failed with status {status_code}: {body}"
        )
        self.status_code = status_code
        self.body = body


class ParseError(CommitBotError):
    """Response body could not be decoded as JSON."""


class EmptyResultError(CommitBotError):
    """Provider response contained no usable candidates."""

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        # Kept for diagnostic logging only.
        self.response = response
