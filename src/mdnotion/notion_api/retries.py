"""When to retry a Notion API request, and how long to wait first.

Both helpers are pure so the transport can be tested without sleeping.
Retries are off unless ``MdNotionConfig.retry_max_attempts`` is raised
above ``1``.
"""

from __future__ import annotations

import random

import httpx

RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


def should_retry(
    status_code: int | None,
    exception: Exception | None,
    attempt: int,
    max_attempts: int,
) -> bool:
    """Return whether attempt number *attempt* (0-based) may be followed by another.

    Parameters
    ----------
    status_code:
        Status of the failed response, or ``None`` when no response arrived.
    exception:
        The transport exception, or ``None`` when a response arrived.
    attempt:
        Zero-based index of the attempt that just failed.
    max_attempts:
        Total attempts allowed, the first one included.
    """
    if attempt + 1 >= max_attempts:
        return False
    if exception is not None:
        return isinstance(exception, RETRYABLE_EXCEPTIONS)
    return status_code in RETRYABLE_STATUSES


def compute_backoff(
    attempt: int,
    base: float = 1.0,
    maximum: float = 60.0,
    jitter: bool = True,
    retry_after: float | None = None,
) -> float:
    """Seconds to wait before the next attempt.

    A server-supplied ``Retry-After`` wins.  Otherwise the delay doubles
    with every attempt, starting at *base* and capped at *maximum*.
    Jitter scales the result into the ``[50%, 100%]`` range.
    """
    delay = retry_after if retry_after is not None else min(base * (2 ** attempt), maximum)
    if jitter:
        delay *= 0.5 + random.random() * 0.5
    return delay
