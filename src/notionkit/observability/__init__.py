"""JSON logging and metrics hooks used throughout notionkit."""

from __future__ import annotations

from .logger import LOG_LEVEL_ENV, StructuredFormatter, get_logger
from .metrics import MetricsHook, NoopMetricsHook

__all__ = [
    "LOG_LEVEL_ENV",
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "get_logger",
]
