"""Configuration for mdnotion.

:class:`MdNotionConfig` is a dataclass that captures every tuneable knob
of the publishing pipeline.  One instance is created per
:class:`~mdnotion.client.AsyncMdNotionClient` and shared, read-only, by
the transport, the block builder, the image probe, and the batch
submitter.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

NOTION_MAX_CHILDREN_PER_REQUEST = 100
"""Notion accepts at most 100 children per ``append_block_children`` call."""

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
"""Browser-like identity sent with image reachability probes.  Some image
hosts refuse requests that do not look like they come from a browser."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class MdNotionConfig:
    """Complete configuration for an mdnotion client.

    Every parameter has a sensible default so that the only *required*
    value is ``token``.

    Parameters
    ----------
    token:
        Notion integration token.  **Required** at publish time.  Never
        logged.
    notion_version:
        Value of the ``Notion-Version`` header sent with every request.
    base_url:
        API root URL.  Override for proxy or testing environments.
    batch_size:
        Maximum number of blocks sent per ``append_block_children`` call.
        Must be between 1 and 100.
    batch_delay_seconds:
        Pause between two consecutive batch submissions.  No pause follows
        the last batch.
    image_verify:
        Probe external image URLs with a HEAD request before embedding
        them.  Unreachable images are rendered as a callout instead.
    image_probe_timeout_seconds:
        Timeout for a single reachability probe.
    image_probe_user_agent:
        ``User-Agent`` header sent with reachability probes.
    timestamp_label:
        Label of the italic timestamp paragraph placed at the top of every
        created page (``"<label>: <local time>"``).
    untitled_placeholder:
        Title used when no title is given and none can be extracted from
        the Markdown source.
    max_markdown_bytes:
        Upper bound on the size of a Markdown file accepted by
        :meth:`~mdnotion.client.AsyncMdNotionClient.create_page_from_file`.
    cleanup_on_failure:
        Archive the freshly created page when a later batch submission
        fails.  Off by default: blocks that were already appended stay on
        the page.
    retry_max_attempts:
        Total attempts per request for retryable HTTP errors.  ``1`` means
        a single attempt, i.e. no automatic retry.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Add random jitter to backoff intervals.
    rate_limit_rps:
        Target requests per second for client-side pacing (token bucket).
    timeout_seconds:
        HTTP request timeout in seconds for Notion API calls.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~mdnotion.observability.MetricsHook` backend.
    debug_dump_html:
        Write the intermediate HTML to *stderr* on each conversion.
    debug_dump_payload:
        Write the (redacted) Notion API payloads to *stderr*.
    """

    # ── Core ────────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = "2025-09-03"

    base_url: str = "https://api.notion.com/v1"

    # ── Batching ────────────────────────────────────────────────────────
    batch_size: int = NOTION_MAX_CHILDREN_PER_REQUEST

    batch_delay_seconds: float = 0.2

    # ── Images ──────────────────────────────────────────────────────────
    image_verify: bool = True

    image_probe_timeout_seconds: float = 10.0

    image_probe_user_agent: str = DEFAULT_USER_AGENT

    # ── Page layout ─────────────────────────────────────────────────────
    timestamp_label: str = "Created"

    untitled_placeholder: str = "Untitled"

    # ── Input ───────────────────────────────────────────────────────────
    max_markdown_bytes: int = 10 * 1024 * 1024  # 10 MiB

    # ── Failure handling ────────────────────────────────────────────────
    cleanup_on_failure: bool = False

    # ── Retry & rate ────────────────────────────────────────────────────
    retry_max_attempts: int = 1

    retry_base_delay: float = 1.0

    retry_max_delay: float = 60.0

    retry_jitter: bool = True

    rate_limit_rps: float = 3.0

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_html: bool = False

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API token, or target localhost for testing."
            )

        if not 1 <= self.batch_size <= NOTION_MAX_CHILDREN_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {NOTION_MAX_CHILDREN_PER_REQUEST}, "
                f"got {self.batch_size}"
            )
        if self.batch_delay_seconds < 0:
            raise ValueError(f"batch_delay_seconds must be >= 0, got {self.batch_delay_seconds}")
        if self.image_probe_timeout_seconds <= 0:
            raise ValueError(
                f"image_probe_timeout_seconds must be > 0, got {self.image_probe_timeout_seconds}"
            )
        if self.max_markdown_bytes <= 0:
            raise ValueError(f"max_markdown_bytes must be > 0, got {self.max_markdown_bytes}")
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.rate_limit_rps <= 0:
            raise ValueError(f"rate_limit_rps must be > 0, got {self.rate_limit_rps}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    def __repr__(self) -> str:
        """Mask the token to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"MdNotionConfig({', '.join(parts)})"
