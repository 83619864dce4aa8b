"""Plain-text rendering of Notion rich_text and database property values.

Used to show query results in tables, logs or CLIs without having to know
every Notion property shape.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

CHECKED = "\N{CHECK MARK}"
UNCHECKED = "\N{BALLOT X}"
RANGE_ARROW = "\N{RIGHTWARDS ARROW}"


def extract_plain_text(rich_text: Any) -> str:
    """Concatenate the text of a rich_text array.

    Prefers ``plain_text`` (present on API responses) and falls back to
    ``text.content`` (present on request payloads).  Anything that is not a
    list yields ``""``.
    """
    if not isinstance(rich_text, list):
        return ""
    parts: list[str] = []
    for seg in rich_text:
        if not isinstance(seg, dict):
            continue
        text = seg.get("plain_text")
        if text is None:
            text = (seg.get("text") or {}).get("content", "")
        parts.append(text or "")
    return "".join(parts)


def _format_timestamp(value: str | None) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return value


def _names(items: list[dict[str, Any]] | None) -> str:
    return ", ".join(item.get("name") or "" for item in items or [])


def _count(items: list[Any] | None, noun: str) -> str:
    return f"{len(items)} {noun}(s)" if items else ""


def format_property_value(prop: dict[str, Any] | None) -> str:
    """Render one database property value as display text.

    Unknown property types are rendered as compact JSON.
    """
    if not prop:
        return ""

    ptype = prop.get("type")
    value = prop.get(ptype) if ptype else None

    if ptype in ("title", "rich_text"):
        return extract_plain_text(value)
    if ptype == "number":
        return "" if value is None else str(value)
    if ptype in ("select", "status"):
        return (value or {}).get("name", "")
    if ptype == "multi_select":
        return _names(value)
    if ptype == "date":
        if not value:
            return ""
        start, end = value.get("start") or "", value.get("end")
        return f"{start} {RANGE_ARROW} {end}" if end else start
    if ptype in ("checkbox", "boolean"):
        return CHECKED if value else UNCHECKED
    if ptype in ("url", "email", "phone_number", "string"):
        return value or ""
    if ptype == "people":
        return _names(value)
    if ptype == "files":
        return _count(value, "file")
    if ptype in ("created_time", "last_edited_time"):
        return _format_timestamp(value)
    if ptype in ("created_by", "last_edited_by"):
        return (value or {}).get("name", "")
    if ptype == "formula":
        if not value:
            return ""
        inner = value.get("type")
        if not inner:
            return ""
        return format_property_value({"type": inner, inner: value.get(inner)})
    if ptype == "relation":
        return _count(value, "relation")
    if ptype == "rollup":
        return _count((value or {}).get("array"), "item")

    return json.dumps(prop, sort_keys=True, default=str)
