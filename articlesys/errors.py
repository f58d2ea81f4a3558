"""Classified application errors shared by every pipeline stage."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of error categories surfaced to callers."""

    NETWORK = "NETWORK"
    API = "API"
    VALIDATION = "VALIDATION"
    EXTRACTION = "EXTRACTION"
    SUMMARIZATION = "SUMMARIZATION"
    FILE_SYSTEM = "FILE_SYSTEM"
    CONFIGURATION = "CONFIGURATION"
    UNKNOWN = "UNKNOWN"


ERROR_MESSAGES: dict[ErrorKind, dict[str, str]] = {
    ErrorKind.NETWORK: {
        "CONNECTION_FAILED": "Failed to connect to the server",
        "TIMEOUT": "Request timed out",
        "INVALID_URL": "Invalid URL format",
        "INVALID_RESPONSE": "Invalid response from server",
    },
    ErrorKind.API: {
        "AUTHENTICATION_FAILED": "API authentication failed",
        "RATE_LIMIT_EXCEEDED": "API rate limit exceeded",
        "INVALID_RESPONSE": "Invalid API response",
        "SERVICE_UNAVAILABLE": "API service is currently unavailable",
    },
    ErrorKind.VALIDATION: {
        "MISSING_REQUIRED_FIELD": "Missing required field",
        "INVALID_FORMAT": "Invalid format",
        "INVALID_OPTION": "Invalid option value",
        "INVALID_URL": "Invalid URL format",
    },
    ErrorKind.EXTRACTION: {
        "NO_CONTENT_FOUND": "No content could be extracted from the page",
        "PARSING_FAILED": "Failed to parse page content",
    },
    ErrorKind.SUMMARIZATION: {
        "GENERATION_FAILED": "Failed to generate summary",
        "CONTENT_TOO_LONG": "Content is too long for summarization",
        "CONTENT_TOO_SHORT": "Content is too short for summarization",
    },
    ErrorKind.FILE_SYSTEM: {
        "WRITE_FAILED": "Failed to write to file",
        "READ_FAILED": "Failed to read from file",
        "PERMISSION_DENIED": "Permission denied",
        "FILE_NOT_FOUND": "File not found",
    },
    ErrorKind.CONFIGURATION: {
        "INVALID_CONFIG": "Invalid configuration",
        "MISSING_API_KEY": "Missing API key",
        "CONFIG_FILE_ERROR": "Error loading configuration file",
    },
    ErrorKind.UNKNOWN: {
        "GENERAL_ERROR": "An unexpected error occurred",
    },
}


class AppError(Exception):
    """Tagged error carrying a kind, a short message and diagnostic context.

    ``message`` is what the user sees; ``context`` and ``cause`` are kept for
    diagnostic logging only.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        code: str = "GENERAL_ERROR",
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.code = code
        self.message = message
        self.cause = cause
        self.context: dict[str, Any] = dict(context or {})
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value}, code={self.code}, message={self.message!r})"

    def user_message(self) -> str:
        return self.message

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.cause is not None:
            info["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return info


def make_error(
    kind: ErrorKind,
    code: str,
    cause: BaseException | None = None,
    **context: Any,
) -> AppError:
    """Build an :class:`AppError` using the message table for ``kind``/``code``."""

    messages = ERROR_MESSAGES[kind]
    if code not in messages:
        raise KeyError(f"Unknown error code {code!r} for kind {kind.value}")
    return AppError(kind, messages[code], code=code, cause=cause, context=context)


def wrap_error(exc: BaseException) -> AppError:
    """Return ``exc`` when already classified, otherwise wrap it as UNKNOWN."""

    if isinstance(exc, AppError):
        return exc
    message = str(exc) or ERROR_MESSAGES[ErrorKind.UNKNOWN]["GENERAL_ERROR"]
    return AppError(ErrorKind.UNKNOWN, message, code="GENERAL_ERROR", cause=exc)


__all__ = ["AppError", "ErrorKind", "ERROR_MESSAGES", "make_error", "wrap_error"]
