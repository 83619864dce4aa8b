"""Credential scrubbing for anything notionkit writes out.

Error messages, log records and debug dumps all pass through here first:

* :func:`redact_text` masks the integration token (keeping its last four
  characters as a hint) and any ``Bearer <credential>`` pair.
* :func:`redact` returns a scrubbed deep copy of a JSON-like payload,
  blanking the values of credential-looking keys such as
  ``Authorization`` or ``api_key``.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "<redacted>"

# A key is sensitive when its lower-cased name contains any of these.
SENSITIVE_KEY_PARTS: tuple[str, ...] = (
    "authorization",
    "token",
    "secret",
    "password",
    "credential",
    "cookie",
    "private_key",
    "api_key",
    "api-key",
)

_BEARER = re.compile(r"(?P<scheme>Bearer\s+)\S+")


def _mask(token: str) -> str:
    return f"<redacted:...{token[-4:]}>" if len(token) >= 8 else REDACTED


def redact_text(value: str, token: str | None = None) -> str:
    """Return *value* with *token* and every bearer credential masked.

    >>> redact_text("Authorization: Bearer secret_abc123")
    'Authorization: Bearer <redacted>'
    """
    if token:
        value = value.replace(token, _mask(token))
    return _BEARER.sub(rf"\g<scheme>{REDACTED}", value)


def is_sensitive_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    lowered = key.lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def redact(payload: Any, token: str | None = None) -> Any:
    """Return a scrubbed copy of *payload*; the input is never mutated.

    Dicts and lists are copied recursively, strings go through
    :func:`redact_text` and raw bytes are replaced by a length summary.
    A sensitive key keeps a string value only when redaction actually
    changed it (so ``Bearer <redacted>`` stays readable); otherwise the
    value becomes ``"<redacted>"``.

    >>> redact({"api_token": "secret_abc123", "page": {"id": "p1"}})
    {'api_token': '<redacted>', 'page': {'id': 'p1'}}
    """
    if isinstance(payload, dict):
        return {key: _redact_item(key, value, token) for key, value in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [redact(item, token) for item in payload]
    if isinstance(payload, str):
        return redact_text(payload, token)
    if isinstance(payload, (bytes, bytearray)):
        return f"<binary:{len(payload)}_bytes>"
    return payload


def _redact_item(key: Any, value: Any, token: str | None) -> Any:
    if not is_sensitive_key(key):
        return redact(value, token)
    if isinstance(value, str):
        masked = redact_text(value, token)
        return masked if masked != value else REDACTED
    return REDACTED
