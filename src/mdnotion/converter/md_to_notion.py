"""Full Markdown-to-blocks conversion pipeline.

:class:`MarkdownToBlocksConverter` runs the three stages in order:

1. **Render** -- :class:`HtmlRenderer` turns Markdown into HTML.
2. **Scan** -- :func:`scan_html` classifies the HTML line by line.
3. **Build** -- :class:`BlockBuilder` maps each element to a remote block,
   probing image URLs along the way.

Nothing here talks to the Notion API; the result can be inspected as a
dry run before any page is created.
"""

from __future__ import annotations

import json
import sys

from mdnotion.config import MdNotionConfig
from mdnotion.converter.block_builder import BlockBuilder, ReachabilityCheck
from mdnotion.converter.html_render import HtmlRenderer
from mdnotion.converter.scanner import scan_html
from mdnotion.errors import MdNotionConversionError
from mdnotion.models import ConversionOutput, ElementTag
from mdnotion.observability import get_logger, resolve_metrics
from mdnotion.utils.redact import redact

log = get_logger("mdnotion.converter")


class MarkdownToBlocksConverter:
    """Convert Markdown text into remote blocks.

    Parameters
    ----------
    config:
        Client configuration; ``debug_dump_html``, ``debug_dump_payload``
        and ``metrics`` are read here.
    renderer:
        Shared :class:`HtmlRenderer`.  A default one is built when omitted.
    check_image:
        Image reachability check handed to :class:`BlockBuilder`.

    Examples
    --------
    >>> import asyncio
    >>> converter = MarkdownToBlocksConverter(MdNotionConfig())
    >>> out = asyncio.run(converter.convert("# Hello\\n\\nWorld"))
    >>> [b.block_type for b in out.blocks]
    ['heading_1', 'paragraph']
    """

    def __init__(
        self,
        config: MdNotionConfig,
        renderer: HtmlRenderer | None = None,
        check_image: ReachabilityCheck | None = None,
    ) -> None:
        self._config = config
        self._renderer = renderer or HtmlRenderer()
        self._check_image = check_image
        self._metrics = resolve_metrics(config.metrics)

    async def convert(self, markdown: str) -> ConversionOutput:
        """Render, scan and build *markdown*.

        Returns
        -------
        ConversionOutput
            Blocks in document order, the warnings raised while building
            them, the number of ``img`` elements seen, and the
            intermediate HTML.

        Raises
        ------
        MdNotionConversionError
            If scanning or building fails unexpectedly.
        """
        html = self._renderer.render(markdown)

        if self._config.debug_dump_html:
            print("[mdnotion] Intermediate HTML:", html, sep="\n", file=sys.stderr)

        try:
            elements = scan_html(html)
        except Exception as exc:
            raise MdNotionConversionError(
                message=f"Could not scan rendered HTML: {exc}",
                context={"stage": "scan"},
                cause=exc,
            ) from exc

        # A fresh builder per call keeps warnings from leaking between runs.
        builder = BlockBuilder(check_image=self._check_image)
        try:
            blocks = await builder.build_all(elements)
        except Exception as exc:
            raise MdNotionConversionError(
                message=f"Could not build blocks: {exc}",
                context={"stage": "build"},
                cause=exc,
            ) from exc

        if builder.warnings:
            self._metrics.increment(
                "mdnotion.conversion_warnings_total", value=len(builder.warnings)
            )

        if self._config.debug_dump_payload:
            safe = redact({"blocks": [b.to_notion() for b in blocks]}, self._config.token)
            print(
                "[mdnotion] Notion blocks payload:",
                json.dumps(safe["blocks"], indent=2, ensure_ascii=False),
                sep="\n",
                file=sys.stderr,
            )

        images = sum(1 for e in elements if e.tag == ElementTag.IMAGE)
        log.debug(
            "Markdown converted",
            extra={"extra_fields": {
                "op": "convert",
                "elements": len(elements),
                "blocks": len(blocks),
                "images": images,
                "warnings": len(builder.warnings),
            }},
        )
        return ConversionOutput(
            blocks=blocks,
            warnings=list(builder.warnings),
            images_processed=images,
            html=html,
        )
