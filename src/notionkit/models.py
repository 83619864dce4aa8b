"""Data models shared across notionkit.

* :class:`RequestOptions` -- the typed per-call request descriptor.
* :class:`Ok` / :class:`Err` -- the closed result variant returned by
  ``request_outcome``.
* :class:`CacheEntry` -- one stored cache value with its expiry.
* :class:`ConnectionCheck`, :class:`WorkspaceStats` -- results of the
  client's convenience helpers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from notionkit.errors import ErrorKind, NotionkitError

T = TypeVar("T")

ALLOWED_METHODS: frozenset[str] = frozenset({"GET", "POST", "PATCH", "DELETE"})
QUERY_METHODS: frozenset[str] = frozenset({"GET"})
BODY_METHODS: frozenset[str] = frozenset({"POST", "PATCH"})


# ---------------------------------------------------------------------------
# Request descriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RequestOptions:
    """Optional parts of a single API call.

    Attributes
    ----------
    query:
        Flat string-keyed mapping appended as a query string.  ``GET`` only.
    body:
        JSON-serialisable request body.  ``POST`` / ``PATCH`` only.
    timeout_seconds:
        Per-attempt timeout overriding ``NotionkitConfig.timeout_seconds``.
    """

    query: Mapping[str, str] | None = None
    body: Any | None = None
    timeout_seconds: float | None = None

    def validate_for(self, method: str) -> str:
        """Check the options against *method* and return it upper-cased.

        Raises ``ValueError`` for an unsupported method, a query on a
        non-``GET`` call, a body on a non-``POST``/``PATCH`` call, or a
        non-positive timeout.
        """
        verb = method.upper()
        if verb not in ALLOWED_METHODS:
            raise ValueError(
                f"Unsupported method {method!r}; expected one of "
                f"{', '.join(sorted(ALLOWED_METHODS))}"
            )
        if self.query is not None and verb not in QUERY_METHODS:
            raise ValueError(f"query parameters are only allowed on GET, not {verb}")
        if self.body is not None and verb not in BODY_METHODS:
            raise ValueError(f"a JSON body is only allowed on POST or PATCH, not {verb}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        return verb


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful call carrying the parsed JSON body."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed call carrying the classified error of the final attempt."""

    error: NotionkitError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def code(self) -> str | None:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def retryable(self) -> bool:
        return self.error.retryable


Outcome = Union[Ok[Any], Err]


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CacheEntry:
    """A cached JSON value.

    ``created_at`` and ``expires_at`` are absolute timestamps in seconds on
    the cache's clock.  ``expires_at=None`` means the entry never expires.
    """

    value: Any
    created_at: float
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CacheEntry:
        return cls(
            value=data["value"],
            created_at=float(data["created_at"]),
            expires_at=(
                float(data["expires_at"]) if data.get("expires_at") is not None else None
            ),
        )


# ---------------------------------------------------------------------------
# Helper results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionCheck:
    """Result of :meth:`NotionClient.test_connection`."""

    success: bool
    message: str
    bot: dict[str, Any] | None = None


@dataclass(frozen=True)
class WorkspaceStats:
    """Counts returned by :meth:`NotionClient.workspace_stats`."""

    total_users: int
    total_pages: int
    total_databases: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_users": self.total_users,
            "total_pages": self.total_pages,
            "total_databases": self.total_databases,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkspaceStats:
        return cls(
            total_users=int(data["total_users"]),
            total_pages=int(data["total_pages"]),
            total_databases=int(data["total_databases"]),
        )
