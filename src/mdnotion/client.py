"""Asynchronous client that publishes Markdown as a Notion sub-page.

:class:`AsyncMdNotionClient` wires the pipeline together: it converts the
Markdown into blocks, creates a child page under the given parent, puts a
timestamp line and a divider at the top, and appends everything in
ordered batches.

Usage::

    import asyncio
    from mdnotion import AsyncMdNotionClient

    async def main():
        async with AsyncMdNotionClient(token="secret_xxx") as client:
            result = await client.create_page_from_markdown(
                "# Hello\\n\\nWorld",
                parent_page_id="<page_id>",
            )
            print(result.page_id, result.blocks_created)

    asyncio.run(main())
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mdnotion.batching import BatchSubmitter, SubmitReport
from mdnotion.config import MdNotionConfig
from mdnotion.converter.html_render import HtmlRenderer
from mdnotion.converter.md_to_notion import MarkdownToBlocksConverter
from mdnotion.converter.title import extract_title
from mdnotion.errors import MdNotionBatchError, MdNotionError, MdNotionInputError, MdNotionPublishError
from mdnotion.image.probe import ImageProbe
from mdnotion.models import (
    ConversionOutput,
    ConversionResult,
    DividerBlock,
    ParagraphBlock,
    RemoteBlock,
    RichTextRun,
    TextStyle,
)
from mdnotion.notion_api.blocks import AsyncBlockAPI
from mdnotion.notion_api.pages import AsyncPageAPI, title_property
from mdnotion.notion_api.transport import AsyncNotionTransport
from mdnotion.observability import get_logger
from mdnotion.utils.text_split import NOTION_TEXT_LIMIT

log = get_logger("mdnotion.client")

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})


def timestamp_header(label: str, now: datetime | None = None) -> list[RemoteBlock]:
    """Return the italic gray ``"<label>: <local time>"`` line and a divider."""
    local = (now or datetime.now()).astimezone()
    run = RichTextRun(
        f"{label}: {local.strftime('%Y-%m-%d %H:%M:%S')}",
        frozenset({TextStyle.ITALIC}),
        color="gray",
    )
    return [ParagraphBlock((run,)), DividerBlock()]


class AsyncMdNotionClient:
    """Publish Markdown documents as Notion sub-pages.

    Parameters
    ----------
    token:
        Notion integration token.  Checked when a page is published, so a
        client without one can still :meth:`convert`.
    **kwargs:
        Forwarded to :class:`MdNotionConfig`.
    """

    def __init__(self, token: str, **kwargs: Any) -> None:
        self._config = MdNotionConfig(token=token, **kwargs)
        self._transport = AsyncNotionTransport(self._config)
        self._pages = AsyncPageAPI(self._transport)
        self._blocks = AsyncBlockAPI(self._transport)
        self._renderer = HtmlRenderer()
        self._probe: ImageProbe | None = None
        if self._config.image_verify:
            self._probe = ImageProbe(
                timeout_seconds=self._config.image_probe_timeout_seconds,
                user_agent=self._config.image_probe_user_agent,
                metrics=self._config.metrics,
            )
        self._converter = MarkdownToBlocksConverter(
            self._config,
            renderer=self._renderer,
            check_image=self._probe.is_reachable if self._probe else None,
        )
        self._submitter = BatchSubmitter(
            self._blocks,
            batch_size=self._config.batch_size,
            delay_seconds=self._config.batch_delay_seconds,
            metrics=self._config.metrics,
        )

    @property
    def config(self) -> MdNotionConfig:
        return self._config

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    async def convert(self, content: str) -> ConversionOutput:
        """Convert *content* into blocks without touching any page.

        Image URLs are still probed when ``image_verify`` is on.
        """
        return await self._converter.convert(content)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def create_page_from_markdown(
        self,
        content: str,
        parent_page_id: str,
        title: str | None = None,
    ) -> ConversionResult:
        """Create a sub-page of *parent_page_id* holding *content*.

        Every call creates a new page, even for identical input.

        Parameters
        ----------
        content:
            Markdown source.  Must not be blank.
        parent_page_id:
            ID of the page the new page is created under.
        title:
            Page title.  When omitted it is taken from the first heading
            or line of *content*.

        Returns
        -------
        ConversionResult

        Raises
        ------
        MdNotionInputError
            Blank content, a missing parent page ID or a missing token.
            Raised before any request is sent.
        MdNotionPublishError
            Anything that fails after validation.  The underlying error is
            chained as ``cause``.
        """
        self._validate(content, parent_page_id)
        timestamp = datetime.now(timezone.utc).isoformat()

        page_id: str | None = None
        report = SubmitReport()
        try:
            conversion = await self._converter.convert(content)
            page_title = title or extract_title(content, self._config.untitled_placeholder)
            page_title = page_title[:NOTION_TEXT_LIMIT]

            page = await self._pages.create(
                parent={"type": "page_id", "page_id": parent_page_id},
                properties=title_property(page_title),
            )
            page_id = page["id"]
            page_url = page.get("url", "")
            log.info(
                "Page created",
                extra={"extra_fields": {
                    "op": "create_page",
                    "page_id": page_id,
                    "title": page_title,
                }},
            )

            blocks = timestamp_header(self._config.timestamp_label) + conversion.blocks
            report = await self._submitter.submit(page_id, blocks)
        except MdNotionError as exc:
            if isinstance(exc, MdNotionBatchError):
                report = SubmitReport(
                    batches=exc.context.get("batches_submitted", 0),
                    blocks_submitted=exc.context.get("blocks_submitted", 0),
                )
            cleaned_up = await self._cleanup(page_id) if page_id else False
            raise MdNotionPublishError(
                message=f"Failed to create sub-page: {exc.message}",
                context={
                    "page_id": page_id,
                    "batches_submitted": report.batches,
                    "blocks_submitted": report.blocks_submitted,
                    "cleaned_up": cleaned_up,
                },
                cause=exc,
            ) from exc

        log.info(
            "Sub-page populated",
            extra={"extra_fields": {
                "op": "create_page",
                "page_id": page_id,
                "batches": report.batches,
                "blocks_created": report.blocks_accepted,
                "images_processed": conversion.images_processed,
                "warnings": len(conversion.warnings),
            }},
        )
        return ConversionResult(
            success=True,
            page_id=page_id,
            title=page_title,
            timestamp=timestamp,
            blocks_created=report.blocks_accepted,
            images_processed=conversion.images_processed,
            batches=report.batches,
            url=page_url,
            warnings=conversion.warnings,
        )

    async def create_page_from_file(
        self,
        path: str | Path,
        parent_page_id: str,
        title: str | None = None,
    ) -> ConversionResult:
        """Create a sub-page from a ``.md`` / ``.markdown`` file.

        The file is read as UTF-8 and must not exceed
        ``max_markdown_bytes``.  Without *title*, the file name minus its
        suffix is used.

        Raises
        ------
        MdNotionInputError
            Wrong suffix, missing or oversized file, or undecodable bytes.
        """
        path = Path(path)
        if path.suffix.lower() not in MARKDOWN_SUFFIXES:
            raise MdNotionInputError(
                message=f"Only Markdown files (.md, .markdown) are accepted, got {path.name!r}",
                context={"field": "path", "path": str(path)},
            )
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise MdNotionInputError(
                message=f"Cannot read {path}: {exc.strerror or exc}",
                context={"field": "path", "path": str(path)},
                cause=exc,
            ) from exc
        if size > self._config.max_markdown_bytes:
            raise MdNotionInputError(
                message=(
                    f"{path.name} is {size} bytes, over the "
                    f"{self._config.max_markdown_bytes} byte limit"
                ),
                context={"field": "path", "path": str(path), "size": size},
            )
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MdNotionInputError(
                message=f"Cannot read {path} as UTF-8 text: {exc}",
                context={"field": "path", "path": str(path)},
                cause=exc,
            ) from exc

        return await self.create_page_from_markdown(
            content, parent_page_id, title=title or path.stem
        )

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the Notion transport and the image probe."""
        await self._transport.close()
        if self._probe is not None:
            await self._probe.close()

    async def __aenter__(self) -> AsyncMdNotionClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _validate(self, content: str, parent_page_id: str) -> None:
        if not self._config.token:
            raise MdNotionInputError(
                message="Missing Notion API token",
                context={"field": "token"},
            )
        if not parent_page_id or not parent_page_id.strip():
            raise MdNotionInputError(
                message="Missing parent page ID",
                context={"field": "parent_page_id"},
            )
        if not isinstance(content, str) or not content.strip():
            raise MdNotionInputError(
                message="Markdown content is empty",
                context={"field": "content"},
            )

    async def _cleanup(self, page_id: str) -> bool:
        """Archive a half-populated page when ``cleanup_on_failure`` is set."""
        if not self._config.cleanup_on_failure:
            return False
        try:
            await self._pages.update(page_id, archived=True)
        except MdNotionError as exc:
            log.warning(
                "Cleanup of partially created page failed",
                extra={"extra_fields": {
                    "op": "cleanup",
                    "page_id": page_id,
                    "error": exc.message,
                }},
            )
            return False
        log.info(
            "Partially created page archived",
            extra={"extra_fields": {"op": "cleanup", "page_id": page_id}},
        )
        return True
