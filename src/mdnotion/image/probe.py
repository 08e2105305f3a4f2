"""Reachability check for externally hosted images.

Notion embeds external images by URL and fetches them itself.  A URL that
is dead, or that refuses hot-linking, shows up as a broken image on the
page.  :class:`ImageProbe` sends a single ``HEAD`` request that looks like
it comes from a browser on the image's own site.  Only a 2xx answer counts
as reachable.  There is no retry, so one failed probe marks the image as
unavailable for the rest of the run.
"""

from __future__ import annotations

from typing import Any

import httpx

from mdnotion.config import DEFAULT_USER_AGENT
from mdnotion.observability import get_logger, resolve_metrics

log = get_logger("mdnotion.image")


def url_origin(url: str) -> str | None:
    """Return ``scheme://host[:port]`` for an absolute http(s) URL."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        return None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        return None
    port = f":{parsed.port}" if parsed.port is not None else ""
    return f"{parsed.scheme}://{parsed.host}{port}"


class ImageProbe:
    """Probe image URLs with ``HEAD`` requests.

    Parameters
    ----------
    timeout_seconds:
        Timeout applied to each probe.
    user_agent:
        ``User-Agent`` sent with each probe.
    client:
        Optional pre-built ``httpx.AsyncClient``.  When given, the probe
        does not close it.
    metrics:
        Optional metrics hook.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
        metrics: Any | None = None,
    ) -> None:
        self._user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )
        self._metrics = resolve_metrics(metrics)

    async def is_reachable(self, url: str) -> bool:
        """Return ``True`` only if *url* answers a ``HEAD`` with a 2xx status."""
        origin = url_origin(url)
        if origin is None:
            self._record(url, reachable=False, reason="unsupported_url")
            return False

        headers = {"User-Agent": self._user_agent, "Referer": origin}
        try:
            response = await self._client.head(url, headers=headers)
        except httpx.HTTPError as exc:
            self._record(url, reachable=False, reason=type(exc).__name__)
            return False

        if not response.is_success:
            self._record(url, reachable=False, reason=f"status_{response.status_code}")
            return False

        self._record(url, reachable=True)
        return True

    def _record(self, url: str, *, reachable: bool, reason: str = "") -> None:
        self._metrics.increment(
            "mdnotion.image_probe_total",
            tags={"result": "ok" if reachable else "unreachable"},
        )
        if not reachable:
            log.warning(
                "Image URL unreachable",
                extra={"extra_fields": {"op": "image_probe", "url": url, "reason": reason}},
            )

    async def close(self) -> None:
        """Close the HTTP client if this probe created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ImageProbe:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
