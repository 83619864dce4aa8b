"""notionkit.notion_api -- Notion API transport and endpoint wrappers.

This sub-package provides:

* :mod:`.retries` -- Retry decision logic and linear backoff.
* :mod:`.transport` -- HTTP transport with auth, retries and error
  classification.
* :mod:`.users`, :mod:`.databases`, :mod:`.pages`, :mod:`.blocks`,
  :mod:`.search`, :mod:`.comments` -- endpoint wrappers.
"""

from __future__ import annotations

from .blocks import AsyncBlockAPI, BlockAPI
from .comments import AsyncCommentAPI, CommentAPI
from .databases import AsyncDatabaseAPI, DatabaseAPI
from .pages import AsyncPageAPI, PageAPI
from .retries import compute_backoff, should_retry
from .search import AsyncSearchAPI, SearchAPI
from .transport import AsyncNotionTransport, NotionTransport
from .users import AsyncUserAPI, UserAPI

__all__ = [
    "AsyncBlockAPI",
    "AsyncCommentAPI",
    "AsyncDatabaseAPI",
    "AsyncNotionTransport",
    "AsyncPageAPI",
    "AsyncSearchAPI",
    "AsyncUserAPI",
    "BlockAPI",
    "CommentAPI",
    "DatabaseAPI",
    "NotionTransport",
    "PageAPI",
    "SearchAPI",
    "UserAPI",
    "compute_backoff",
    "should_retry",
]
