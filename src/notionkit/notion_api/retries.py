"""Retry decision logic and linear backoff computation.

Two pure functions used by the transport layer:

* :func:`should_retry` -- decide whether a failed attempt is retried.
* :func:`compute_backoff` -- delay before the next attempt.

The policy is linear and jitter-free: retry ``i`` (1-indexed) waits
``base * i`` seconds, so a base of one second yields 1s, 2s, 3s.
"""

from __future__ import annotations

import httpx

# 429 plus every 5xx is retried; see ``is_retryable_status``.
RATE_LIMIT_STATUS = 429

# Network-level exceptions that mean "no response received".
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)


def is_retryable_status(status_code: int) -> bool:
    """Return ``True`` for 429 and any 5xx status."""
    return status_code == RATE_LIMIT_STATUS or 500 <= status_code <= 599


def should_retry(
    status_code: int | None,
    exception: Exception | None,
    retries_done: int,
    max_retries: int,
) -> bool:
    """Decide whether a request should be retried.

    Parameters
    ----------
    status_code:
        HTTP status from the response, or ``None`` if no response arrived.
    exception:
        The exception raised by the attempt, or ``None`` if a response was
        received.
    retries_done:
        Number of retries already performed (``0`` after the first attempt).
    max_retries:
        Maximum number of additional attempts allowed.

    Returns
    -------
    bool
        ``True`` if another attempt should be made.
    """
    if retries_done >= max_retries:
        return False

    if exception is not None:
        return isinstance(exception, RETRYABLE_EXCEPTIONS)

    if status_code is not None:
        return is_retryable_status(status_code)

    return False


def compute_backoff(retry_number: int, base: float = 1.0) -> float:
    """Return the delay in seconds before retry *retry_number* (1-indexed).

    >>> [compute_backoff(i, base=1.0) for i in (1, 2, 3)]
    [1.0, 2.0, 3.0]
    """
    if retry_number < 1:
        raise ValueError(f"retry_number must be >= 1, got {retry_number}")
    return base * retry_number
