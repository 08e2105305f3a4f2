"""Async HTTP transport for the Notion API.

One :meth:`AsyncNotionTransport.request` call goes through these steps:

1. Wait for a token-bucket slot.
2. Send the request with the ``Authorization`` and ``Notion-Version`` headers.
3. ``2xx``: return the decoded JSON body.
4. ``4xx`` other than ``429``: raise the matching typed error at once.
5. ``429``, ``5xx`` or a transport failure: back off and try again while
   ``retry_max_attempts`` allows it.
6. Out of attempts: raise :class:`MdNotionRateLimitError` if the last
   answer was ``429``, :class:`MdNotionRetryExhaustedError` otherwise.
"""

from __future__ import annotations

import asyncio
import json as _json
import sys
import time
from typing import Any

import httpx

from mdnotion.config import MdNotionConfig
from mdnotion.errors import (
    MdNotionAuthError,
    MdNotionNetworkError,
    MdNotionNotFoundError,
    MdNotionPermissionError,
    MdNotionRateLimitError,
    MdNotionRetryExhaustedError,
    MdNotionValidationError,
)
from mdnotion.observability import get_logger, resolve_metrics
from mdnotion.utils.redact import redact

from .rate_limit import AsyncTokenBucket
from .retries import RETRYABLE_STATUSES, compute_backoff, should_retry

log = get_logger("mdnotion.transport")


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Return the ``Retry-After`` header in seconds, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _response_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _success_body(response: httpx.Response, method: str, path: str) -> dict[str, Any]:
    """Decode a ``2xx`` body, which must be a JSON object."""
    try:
        body = response.json()
    except ValueError as exc:
        raise MdNotionNetworkError(
            message=f"Invalid JSON in {response.status_code} response to {method} {path}",
            context={"url": path, "status_code": response.status_code, "body": response.text[:500]},
            cause=exc,
        ) from exc
    if not isinstance(body, dict):
        raise MdNotionNetworkError(
            message=f"Expected a JSON object in response to {method} {path}",
            context={"url": path, "status_code": response.status_code},
        )
    return body


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the typed error for a non-retryable 4xx *response*."""
    status = response.status_code
    body = _response_body(response)
    notion_message = body.get("message") or response.text[:500]
    notion_code = body.get("code", "")
    where = f"{method} {path}"

    if status == 401:
        raise MdNotionAuthError(
            message=f"Authentication failed on {where}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code},
        )
    if status == 403:
        raise MdNotionPermissionError(
            message=f"Permission denied on {where}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code, "operation": where},
        )
    if status == 404:
        raise MdNotionNotFoundError(
            message=f"Resource not found on {where}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code, "path": path},
        )

    label = "Validation error" if status == 400 else f"Client error {status}"
    raise MdNotionValidationError(
        message=f"{label} on {where}: {notion_message}",
        context={"status_code": status, "notion_code": notion_code, "body": body},
    )


def _dump_payload(
    method: str,
    url: str,
    payload: Any,
    response_status: int | None,
    response_body: Any,
    token: str | None = None,
) -> None:
    """Print a redacted request/response pair to *stderr*."""
    dump: dict[str, Any] = {"method": method, "url": url}
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    print(_json.dumps(redact(dump, token), indent=2, default=str), file=sys.stderr)


def _emit_debug_dump(
    config: MdNotionConfig,
    method: str,
    response: httpx.Response,
    json_payload: Any,
) -> None:
    if not config.debug_dump_payload:
        return
    try:
        resp_body: Any = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    _dump_payload(
        method, str(response.url), json_payload,
        response.status_code, resp_body,
        token=config.token,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class AsyncNotionTransport:
    """Authenticated, paced and optionally retrying Notion API client.

    Parameters
    ----------
    config:
        Client configuration.  ``token``, ``notion_version``, ``base_url``,
        ``timeout_seconds``, ``http_proxy``, ``rate_limit_rps`` and the
        ``retry_*`` fields are read here.
    """

    def __init__(self, config: MdNotionConfig) -> None:
        self._config = config
        self._bucket = AsyncTokenBucket(rate_rps=config.rate_limit_rps, burst=10)
        self._metrics = resolve_metrics(config.metrics)
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Notion-Version": config.notion_version,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
        )

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Send one API request and return the decoded JSON body.

        Parameters
        ----------
        method:
            HTTP method, e.g. ``POST`` or ``PATCH``.
        path:
            Path relative to ``base_url``, e.g. ``/pages``.
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request`; use ``json=``
            for request bodies.

        Returns
        -------
        dict
            The response body, or ``{}`` for an empty ``2xx`` answer.

        Raises
        ------
        MdNotionAuthError
            On 401.
        MdNotionPermissionError
            On 403.
        MdNotionNotFoundError
            On 404.
        MdNotionValidationError
            On 400 and any other non-retryable 4xx.
        MdNotionRateLimitError
            When the last allowed attempt was answered with 429.
        MdNotionRetryExhaustedError
            When the last allowed attempt hit a 5xx.
        MdNotionNetworkError
            When the last allowed attempt failed below HTTP, a non-retryable
            transport error occurred, or a ``2xx`` body is not a JSON object.
        """
        max_attempts = self._config.retry_max_attempts
        json_payload = kwargs.get("json")
        tags = {"method": method, "path": path}
        last_status: int | None = None
        retry_after: float | None = None

        for attempt in range(max_attempts):
            wait = await self._bucket.acquire()
            if wait > 0:
                self._metrics.timing("mdnotion.rate_limit_wait_ms", wait * 1000, tags=tags)

            t0 = time.monotonic()
            try:
                response = await self._client.request(method, path, **kwargs)
            except httpx.TransportError as exc:
                await self._on_network_error(method, path, exc, attempt)
                continue
            elapsed_ms = (time.monotonic() - t0) * 1000

            status = response.status_code
            last_status = status
            status_tags = {**tags, "status": str(status)}
            self._metrics.increment("mdnotion.requests_total", tags=status_tags)
            self._metrics.timing("mdnotion.request_duration_ms", elapsed_ms, tags=status_tags)
            _emit_debug_dump(self._config, method, response, json_payload)

            if response.is_success:
                if status == 204 or not response.content:
                    return {}
                return _success_body(response, method, path)

            if status not in RETRYABLE_STATUSES:
                _raise_for_status(response, method, path)

            reason = "server_error"
            retry_after = None
            if status == 429:
                reason = "rate_limited"
                retry_after = _parse_retry_after(response)
                self._metrics.increment("mdnotion.rate_limited_total", tags=tags)
                log.warning(
                    "Rate limited by Notion API",
                    extra={"extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "retry_after": retry_after,
                        "attempt": attempt + 1,
                    }},
                )

            if not should_retry(status, None, attempt, max_attempts):
                break

            self._metrics.increment("mdnotion.retries_total", tags={**tags, "reason": reason})
            await asyncio.sleep(self._backoff(attempt, retry_after))

        ctx: dict[str, Any] = {"attempts": max_attempts, "last_status_code": last_status}
        if last_status == 429:
            raise MdNotionRateLimitError(
                message=f"Rate limited on {method} {path} after {max_attempts} attempt(s)",
                context={**ctx, "retry_after_seconds": retry_after, "attempt": max_attempts},
            )
        raise MdNotionRetryExhaustedError(
            message=(
                f"All {max_attempts} attempt(s) exhausted for {method} {path} "
                f"(last status: {last_status})"
            ),
            context=ctx,
        )

    async def _on_network_error(
        self, method: str, path: str, exc: Exception, attempt: int,
    ) -> None:
        """Sleep before the next attempt, or raise if none is left."""
        max_attempts = self._config.retry_max_attempts
        self._metrics.increment(
            "mdnotion.requests_total",
            tags={"method": method, "path": path, "status": "error"},
        )
        log.warning(
            "Request network error",
            extra={"extra_fields": {
                "op": "request",
                "method": method,
                "path": path,
                "attempt": attempt + 1,
                "error": str(exc),
            }},
        )
        if not should_retry(None, exc, attempt, max_attempts):
            raise MdNotionNetworkError(
                message=f"Network error on {method} {path}: {exc}",
                context={"url": path, "attempt": attempt + 1},
                cause=exc,
            ) from exc
        self._metrics.increment(
            "mdnotion.retries_total",
            tags={"method": method, "path": path, "reason": "network_error"},
        )
        await asyncio.sleep(self._backoff(attempt, None))

    def _backoff(self, attempt: int, retry_after: float | None) -> float:
        return compute_backoff(
            attempt,
            base=self._config.retry_base_delay,
            maximum=self._config.retry_max_delay,
            jitter=self._config.retry_jitter,
            retry_after=retry_after,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
