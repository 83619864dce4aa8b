"""Response caching for notionkit.

:class:`ResponseCache` is a caller-driven, TTL-bounded cache for JSON
responses.  Entries live in a :class:`MemoryStore` by default or in a
:class:`DiskStore` (backed by :mod:`diskcache`) when they must survive a
restart.
"""

from notionkit.cache.response_cache import ResponseCache
from notionkit.cache.stores import CacheStore, DiskStore, MemoryStore

__all__ = ["CacheStore", "DiskStore", "MemoryStore", "ResponseCache"]
