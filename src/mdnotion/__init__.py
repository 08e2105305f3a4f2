"""mdnotion -- publish Markdown documents as Notion sub-pages.

Public re-exports
-----------------

* **Client:** :class:`AsyncMdNotionClient`
* **Configuration:** :class:`MdNotionConfig`
* **Errors:** Every :class:`MdNotionError` subclass and :class:`ErrorCode`
* **Models:** Result dataclasses and the remote block variants

Usage::

    from mdnotion import AsyncMdNotionClient

    async with AsyncMdNotionClient(token="secret_xxx") as client:
        result = await client.create_page_from_markdown(
            "# Hello\\n\\nWorld",
            parent_page_id="<page_id>",
        )
"""

from __future__ import annotations

# ── Client ──────────────────────────────────────────────────────────────
from mdnotion.client import AsyncMdNotionClient

# ── Configuration ───────────────────────────────────────────────────────
from mdnotion.config import NOTION_MAX_CHILDREN_PER_REQUEST, MdNotionConfig

# ── Errors ──────────────────────────────────────────────────────────────
from mdnotion.errors import (
    ErrorCode,
    MdNotionAuthError,
    MdNotionBatchError,
    MdNotionConversionError,
    MdNotionError,
    MdNotionInputError,
    MdNotionNetworkError,
    MdNotionNotFoundError,
    MdNotionPermissionError,
    MdNotionPublishError,
    MdNotionRateLimitError,
    MdNotionRetryExhaustedError,
    MdNotionValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from mdnotion.models import (
    BulletedListItemBlock,
    CalloutBlock,
    CodeBlock,
    ConversionOutput,
    ConversionResult,
    ConversionWarning,
    DividerBlock,
    ElementTag,
    HeadingBlock,
    ImageBlock,
    ParagraphBlock,
    QuoteBlock,
    RemoteBlock,
    RichTextRun,
    ScannedElement,
    TextStyle,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Client
    "AsyncMdNotionClient",
    # Configuration
    "MdNotionConfig",
    "NOTION_MAX_CHILDREN_PER_REQUEST",
    # Error base + code enum
    "MdNotionError",
    "ErrorCode",
    # Caller-facing errors
    "MdNotionInputError",
    "MdNotionPublishError",
    "MdNotionBatchError",
    "MdNotionConversionError",
    # API / transport errors
    "MdNotionValidationError",
    "MdNotionAuthError",
    "MdNotionPermissionError",
    "MdNotionNotFoundError",
    "MdNotionRateLimitError",
    "MdNotionRetryExhaustedError",
    "MdNotionNetworkError",
    # Models -- results
    "ConversionResult",
    "ConversionOutput",
    "ConversionWarning",
    # Models -- pipeline values
    "ElementTag",
    "ScannedElement",
    "TextStyle",
    "RichTextRun",
    # Models -- blocks
    "RemoteBlock",
    "ParagraphBlock",
    "HeadingBlock",
    "CodeBlock",
    "QuoteBlock",
    "BulletedListItemBlock",
    "ImageBlock",
    "CalloutBlock",
    "DividerBlock",
]
