"""notionkit: a small, well-behaved client for the Notion REST API.

Public re-exports
-----------------

* **Clients:** :class:`NotionClient`, :class:`AsyncNotionClient`
* **Configuration:** :class:`NotionkitConfig`, :func:`configure`
* **Errors:** Every :class:`NotionkitError` subclass and :class:`ErrorKind`
* **Models:** :class:`Ok`, :class:`Err`, :class:`RequestOptions`,
  :class:`CacheEntry` and the helper result types
* **Cache:** :class:`ResponseCache` and its stores

Usage::

    from notionkit import NotionClient, configure

    client = NotionClient(config=configure("secret_xxx", "2022-06-28"))
    me = client.request("GET", "/users/me")
"""

from __future__ import annotations

from notionkit.async_client import AsyncNotionClient

# ── Cache ───────────────────────────────────────────────────────────────
from notionkit.cache import DiskStore, MemoryStore, ResponseCache

# ── Clients ────────────────────────────────────────────────────────────
from notionkit.client import NotionClient

# ── Configuration ───────────────────────────────────────────────────────
from notionkit.config import (
    DEFAULT_BASE_URL,
    DEFAULT_NOTION_VERSION,
    NotionkitConfig,
    configure,
)

# ── Errors ──────────────────────────────────────────────────────────────
from notionkit.errors import (
    ErrorKind,
    NotionkitBadRequestError,
    NotionkitConfigError,
    NotionkitConflictError,
    NotionkitError,
    NotionkitForbiddenError,
    NotionkitNetworkError,
    NotionkitNotFoundError,
    NotionkitRateLimitError,
    NotionkitServerError,
    NotionkitUnauthorizedError,
    NotionkitUnknownError,
    NotionkitValidationError,
    error_for_status,
)

# ── Models ──────────────────────────────────────────────────────────────
from notionkit.models import (
    CacheEntry,
    ConnectionCheck,
    Err,
    Ok,
    Outcome,
    RequestOptions,
    WorkspaceStats,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Clients
    "NotionClient",
    "AsyncNotionClient",
    # Configuration
    "NotionkitConfig",
    "configure",
    "DEFAULT_BASE_URL",
    "DEFAULT_NOTION_VERSION",
    # Errors
    "NotionkitError",
    "ErrorKind",
    "error_for_status",
    "NotionkitNetworkError",
    "NotionkitBadRequestError",
    "NotionkitUnauthorizedError",
    "NotionkitForbiddenError",
    "NotionkitNotFoundError",
    "NotionkitConflictError",
    "NotionkitValidationError",
    "NotionkitRateLimitError",
    "NotionkitServerError",
    "NotionkitUnknownError",
    "NotionkitConfigError",
    # Models
    "RequestOptions",
    "Ok",
    "Err",
    "Outcome",
    "CacheEntry",
    "ConnectionCheck",
    "WorkspaceStats",
    # Cache
    "ResponseCache",
    "MemoryStore",
    "DiskStore",
]
