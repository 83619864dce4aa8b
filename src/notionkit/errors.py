"""Error hierarchy for the notionkit client.

Every public error class inherits from :class:`NotionkitError`.  Each carries
a machine-readable ``kind`` (from :class:`ErrorKind`), the HTTP ``status``
(``0`` when no response was received), the upstream ``code`` reported in the
Notion error body (if any), a developer-safe ``message``, an optional
structured ``context`` dict, and an optional ``cause`` (chained exception).

Kinds are defined as a :class:`str` enum so that they serialise naturally to
JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

# ---------------------------------------------------------------------------
# Error kind enum
# ---------------------------------------------------------------------------

class ErrorKind(str, Enum):
    """Machine-readable classification for every error the client can raise."""

    NETWORK_ERROR = "NETWORK_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotionkitError(Exception):
    """Base exception for all notionkit errors.

    Parameters
    ----------
    message:
        A developer-friendly description of what went wrong.  Never
        contains the integration token.
    status:
        HTTP status of the response that produced the error, or ``0`` if
        no response was received.
    code:
        The machine-readable ``code`` field from the Notion error body
        (e.g. ``"rate_limited"``), or ``None`` if the body had none.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN_ERROR
    retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        status: int = 0,
        code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message: str = message
        self.status: int = status
        self.code: str | None = code
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        code = f", code={self.code!r}" if self.code else ""
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"status={self.status}{code}, message={self.message!r})"
        )


# ---------------------------------------------------------------------------
# Transport-level errors
# ---------------------------------------------------------------------------

class NotionkitNetworkError(NotionkitError):
    """No response was received (DNS failure, refused connection, timeout).

    Context keys: ``url``, ``attempt``.
    """

    kind = ErrorKind.NETWORK_ERROR
    retryable = True


# ---------------------------------------------------------------------------
# HTTP status errors
# ---------------------------------------------------------------------------

class NotionkitBadRequestError(NotionkitError):
    """Notion API returned 400: the request was malformed."""

    kind = ErrorKind.BAD_REQUEST


class NotionkitUnauthorizedError(NotionkitError):
    """Notion API returned 401: the integration token is invalid or expired."""

    kind = ErrorKind.UNAUTHORIZED


class NotionkitForbiddenError(NotionkitError):
    """Notion API returned 403: the integration lacks access to the resource.

    Context keys: ``operation``.
    """

    kind = ErrorKind.FORBIDDEN


class NotionkitNotFoundError(NotionkitError):
    """Notion API returned 404: the resource does not exist or is not shared.

    Context keys: ``path``.
    """

    kind = ErrorKind.NOT_FOUND


class NotionkitConflictError(NotionkitError):
    """Notion API returned 409: the resource was modified concurrently."""

    kind = ErrorKind.CONFLICT


class NotionkitValidationError(NotionkitError):
    """Notion API returned 422: the payload failed semantic validation."""

    kind = ErrorKind.VALIDATION_ERROR


class NotionkitRateLimitError(NotionkitError):
    """Notion API returned 429: rate limit exceeded.

    Context keys: ``retry_after``.
    """

    kind = ErrorKind.RATE_LIMITED
    retryable = True


class NotionkitServerError(NotionkitError):
    """Notion API returned a 5xx status."""

    kind = ErrorKind.SERVER_ERROR
    retryable = True


class NotionkitUnknownError(NotionkitError):
    """Notion API returned a status outside the known taxonomy."""

    kind = ErrorKind.UNKNOWN_ERROR


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class NotionkitConfigError(NotionkitError):
    """The client configuration is invalid (e.g. an empty token).

    Context keys: ``field``.
    """

    kind = ErrorKind.CONFIG_ERROR


# ---------------------------------------------------------------------------
# Status classification
# ---------------------------------------------------------------------------

_STATUS_ERRORS: dict[int, type[NotionkitError]] = {
    400: NotionkitBadRequestError,
    401: NotionkitUnauthorizedError,
    403: NotionkitForbiddenError,
    404: NotionkitNotFoundError,
    409: NotionkitConflictError,
    422: NotionkitValidationError,
    429: NotionkitRateLimitError,
}


def error_for_status(status: int) -> type[NotionkitError]:
    """Return the error class that classifies an HTTP *status*.

    Every 5xx status maps to :class:`NotionkitServerError`; statuses with no
    dedicated class map to :class:`NotionkitUnknownError`.
    """
    if 500 <= status <= 599:
        return NotionkitServerError
    return _STATUS_ERRORS.get(status, NotionkitUnknownError)
