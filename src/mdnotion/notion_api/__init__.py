"""mdnotion.notion_api -- Notion API transport and endpoint wrappers.

* :mod:`.rate_limit` -- async token bucket.
* :mod:`.retries` -- retry decision and backoff.
* :mod:`.transport` -- HTTP transport with auth, pacing and typed errors.
* :mod:`.pages` -- page creation and archiving.
* :mod:`.blocks` -- appending children.
"""

from __future__ import annotations

from .blocks import AsyncBlockAPI
from .pages import AsyncPageAPI, title_property
from .rate_limit import AsyncTokenBucket
from .retries import compute_backoff, should_retry
from .transport import AsyncNotionTransport

__all__ = [
    "AsyncBlockAPI",
    "AsyncNotionTransport",
    "AsyncPageAPI",
    "AsyncTokenBucket",
    "compute_backoff",
    "should_retry",
    "title_property",
]
