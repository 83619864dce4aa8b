"""Client configuration for notionkit.

:class:`NotionkitConfig` is a frozen dataclass that captures every tuneable
knob exposed by the client.  A config is built once, handed to
:class:`NotionClient` or :class:`AsyncNotionClient` at construction, and
treated as read-only thereafter, so concurrent calls never observe a
credential change mid-flight.

Three ways to build one::

    config = NotionkitConfig(token="secret_xxx")
    config = configure("secret_xxx", "2022-06-28", retry_max_retries=5)
    config = NotionkitConfig.from_env()   # NOTION_TOKEN / NOTION_VERSION
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from notionkit.errors import NotionkitConfigError

DEFAULT_NOTION_VERSION = "2022-06-28"
"""Value of the ``Notion-Version`` header when none is supplied."""

DEFAULT_BASE_URL = "https://api.notion.com/v1"

ENV_TOKEN = "NOTION_TOKEN"
ENV_VERSION = "NOTION_VERSION"
ENV_BASE_URL = "NOTION_BASE_URL"


@dataclass(frozen=True)
class NotionkitConfig:
    """Complete configuration for a notionkit client.

    Every parameter has a sensible default so that the only *required*
    value is ``token``.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**  Never logged.
    notion_version:
        Value of the ``Notion-Version`` header sent with every request.
    base_url:
        API root URL.  Point it at a same-origin reverse proxy or a local
        mock server when needed; the client is otherwise unaware of the
        indirection.
    retry_max_retries:
        Maximum number of *additional* attempts after the first one for
        retryable failures (429, 5xx, network errors).
    retry_base_delay:
        Base delay in seconds.  Retry ``i`` waits ``retry_base_delay * i``.
    timeout_seconds:
        Timeout bounding each individual attempt.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    cache_default_ttl:
        TTL in seconds applied by :meth:`ResponseCache.set` when the caller
        passes no explicit TTL.  ``None`` stores entries without expiry.
    cache_dir:
        If set, responses are cached on disk in this directory instead of
        in memory.
    metrics:
        Optional :class:`~notionkit.observability.MetricsHook` backend.
    debug_dump_payload:
        Write the (redacted) request/response of every attempt to *stderr*.
    """

    # ── Credential ──────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = DEFAULT_NOTION_VERSION

    base_url: str = DEFAULT_BASE_URL

    # ── Retry ───────────────────────────────────────────────────────────
    retry_max_retries: int = 3

    retry_base_delay: float = 1.0

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Cache ───────────────────────────────────────────────────────────
    cache_default_ttl: float | None = 3600.0

    cache_dir: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.token, str) or not self.token.strip():
            raise NotionkitConfigError(
                "token must be a non-empty string",
                context={"field": "token"},
            )
        if not self.notion_version:
            raise NotionkitConfigError(
                "notion_version must be a non-empty string",
                context={"field": "notion_version"},
            )

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise NotionkitConfigError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API token, or target localhost for testing.",
                context={"field": "base_url"},
            )

        if self.retry_max_retries < 0:
            raise NotionkitConfigError(
                f"retry_max_retries must be >= 0, got {self.retry_max_retries}",
                context={"field": "retry_max_retries"},
            )
        if self.retry_base_delay < 0:
            raise NotionkitConfigError(
                f"retry_base_delay must be >= 0, got {self.retry_base_delay}",
                context={"field": "retry_base_delay"},
            )
        if self.timeout_seconds <= 0:
            raise NotionkitConfigError(
                f"timeout_seconds must be > 0, got {self.timeout_seconds}",
                context={"field": "timeout_seconds"},
            )
        if self.cache_default_ttl is not None and self.cache_default_ttl < 0:
            raise NotionkitConfigError(
                f"cache_default_ttl must be >= 0, got {self.cache_default_ttl}",
                context={"field": "cache_default_ttl"},
            )

    def __repr__(self) -> str:
        """Mask the token to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 8 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotionkitConfig({', '.join(parts)})"

    @property
    def headers(self) -> dict[str, str]:
        """Headers attached to every request."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.notion_version,
        }

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> NotionkitConfig:
        """Build a config from ``NOTION_TOKEN``, ``NOTION_VERSION`` and
        ``NOTION_BASE_URL``.

        Explicit *overrides* win over environment values.  Raises
        :class:`NotionkitConfigError` when no token is available.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {"token": env.get(ENV_TOKEN, "")}
        if env.get(ENV_VERSION):
            values["notion_version"] = env[ENV_VERSION]
        if env.get(ENV_BASE_URL):
            values["base_url"] = env[ENV_BASE_URL]
        values.update(overrides)
        return cls(**values)


def configure(
    token: str,
    api_version: str = DEFAULT_NOTION_VERSION,
    **overrides: Any,
) -> NotionkitConfig:
    """Return a new configuration carrying *token* and *api_version*.

    Has no network effect.  Raises :class:`NotionkitConfigError` if the
    token is empty.
    """
    return NotionkitConfig(token=token, notion_version=api_version, **overrides)
