"""Builders for Notion rich_text arrays and common block objects.

A rich_text segment looks like::

    {
        "type": "text",
        "text": {"content": "hello", "link": None},
        "annotations": {"bold": False, "italic": False, "strikethrough": False,
                        "underline": False, "code": False, "color": "default"}
    }

Block builders accept either a plain string (wrapped with :func:`rich_text`)
or a prebuilt rich_text list.
"""

from __future__ import annotations

from typing import Any

RichText = list[dict[str, Any]]

TEXT_CONTENT_LIMIT = 2000


def _default_annotations() -> dict[str, Any]:
    """Return a fresh default Notion annotations dict."""
    return {
        "bold": False,
        "italic": False,
        "strikethrough": False,
        "underline": False,
        "code": False,
        "color": "default",
    }


def rich_text(
    text: str,
    *,
    bold: bool = False,
    italic: bool = False,
    strikethrough: bool = False,
    underline: bool = False,
    code: bool = False,
    color: str = "default",
    link: str | None = None,
) -> RichText:
    """Build a rich_text array from plain *text*.

    Text longer than the 2000-character Notion segment limit is split into
    several segments sharing the same annotations.
    """
    annotations = _default_annotations()
    annotations.update(
        bold=bold,
        italic=italic,
        strikethrough=strikethrough,
        underline=underline,
        code=code,
        color=color,
    )
    chunks = [
        text[i:i + TEXT_CONTENT_LIMIT]
        for i in range(0, len(text), TEXT_CONTENT_LIMIT)
    ] or [""]
    return [
        {
            "type": "text",
            "text": {"content": chunk, "link": {"url": link} if link else None},
            "annotations": dict(annotations),
        }
        for chunk in chunks
    ]


def _as_rich_text(text: str | RichText, **options: Any) -> RichText:
    if isinstance(text, list):
        return text
    return rich_text(text, **options)


def paragraph(text: str | RichText, *, color: str = "default", **options: Any) -> dict[str, Any]:
    return {
        "type": "paragraph",
        "paragraph": {
            "rich_text": _as_rich_text(text, **options),
            "color": color,
        },
    }


def heading(
    text: str | RichText,
    level: int = 1,
    *,
    color: str = "default",
    toggleable: bool = False,
    **options: Any,
) -> dict[str, Any]:
    """Build a ``heading_1`` .. ``heading_3`` block.

    Raises ``ValueError`` for levels outside 1-3; Notion has no deeper
    headings.
    """
    if level not in (1, 2, 3):
        raise ValueError(f"heading level must be 1, 2 or 3, got {level}")
    block_type = f"heading_{level}"
    return {
        "type": block_type,
        block_type: {
            "rich_text": _as_rich_text(text, **options),
            "color": color,
            "is_toggleable": toggleable,
        },
    }


def bulleted_list_item(
    text: str | RichText,
    *,
    color: str = "default",
    children: list[dict[str, Any]] | None = None,
    **options: Any,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "rich_text": _as_rich_text(text, **options),
        "color": color,
    }
    if children:
        body["children"] = children
    return {"type": "bulleted_list_item", "bulleted_list_item": body}


def code_block(code: str, language: str = "plain text") -> dict[str, Any]:
    return {
        "type": "code",
        "code": {
            "rich_text": rich_text(code),
            "language": language,
            "caption": [],
        },
    }


def callout(
    text: str | RichText,
    icon: str = "\N{ELECTRIC LIGHT BULB}",
    *,
    color: str = "default",
    **options: Any,
) -> dict[str, Any]:
    return {
        "type": "callout",
        "callout": {
            "rich_text": _as_rich_text(text, **options),
            "icon": {"type": "emoji", "emoji": icon},
            "color": color,
        },
    }
