"""Metrics hook protocol and no-op default implementation.

mdnotion reports counters and timings at the points that matter for a
publishing run: every API request, every batch, every image probe.  The
default :class:`NoopMetricsHook` discards them; pass any object that
satisfies :class:`MetricsHook` as ``MdNotionConfig(metrics=...)`` to route
them to StatsD, Prometheus or similar.

Emitted metric names:

* ``mdnotion.requests_total``            -- counter
* ``mdnotion.retries_total``             -- counter
* ``mdnotion.rate_limited_total``        -- counter
* ``mdnotion.request_duration_ms``       -- timing
* ``mdnotion.rate_limit_wait_ms``        -- timing
* ``mdnotion.batches_total``             -- counter
* ``mdnotion.blocks_created_total``      -- counter
* ``mdnotion.image_probe_total``         -- counter (``result`` tag)
* ``mdnotion.conversion_warnings_total`` -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    *tags* is an optional flat ``str -> str`` dict; backends translate it
    into whatever labelling scheme they support.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Metrics backend that silently discards every data point.

    Used when no hook is configured, so call sites never need a ``None``
    check.
    """

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: object | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return hook if hook is not None else NoopMetricsHook()  # type: ignore[return-value]
