"""Turn scanned elements into remote blocks.

One element becomes at most one block:

- h1 / h2 / h3 -> heading_1 / heading_2 / heading_3 (h4-h6 are dropped)
- p -> paragraph (blank paragraphs are dropped)
- pre -> code, with the scanner's newline escaping reversed
- blockquote -> quote
- li -> bulleted_list_item (ordered lists are not distinguished)
- table-row -> paragraph holding ``| a | b |`` as inline code, since
  Notion has no flat table block
- img -> external image, or a yellow callout when the URL is unreachable

Building never raises on document content.  Unknown tags and images
without a ``src`` simply produce no block.
"""

from __future__ import annotations

import html as _html
from collections.abc import Awaitable, Callable, Iterable

from mdnotion.converter.languages import PLAIN_TEXT
from mdnotion.converter.rich_text import tokenize_inline
from mdnotion.converter.scanner import unescape_code
from mdnotion.models import (
    BulletedListItemBlock,
    CalloutBlock,
    CodeBlock,
    ConversionWarning,
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

UNREACHABLE_IMAGE_EMOJI = "📷"
UNREACHABLE_IMAGE_COLOR = "yellow_background"

_HEADING_LEVELS: dict[ElementTag, int] = {
    ElementTag.H1: 1,
    ElementTag.H2: 2,
    ElementTag.H3: 3,
}

ReachabilityCheck = Callable[[str], Awaitable[bool]]


class BlockBuilder:
    """Map :class:`ScannedElement` values to remote blocks.

    Parameters
    ----------
    check_image:
        Coroutine function returning whether an image URL is reachable,
        typically :meth:`ImageProbe.is_reachable`.  ``None`` trusts every
        image.
    """

    def __init__(self, check_image: ReachabilityCheck | None = None) -> None:
        self._check_image = check_image
        self.warnings: list[ConversionWarning] = []

    async def build_all(self, elements: Iterable[ScannedElement]) -> list[RemoteBlock]:
        """Build blocks for *elements* in order, one at a time."""
        blocks: list[RemoteBlock] = []
        for element in elements:
            block = await self.build(element)
            if block is not None:
                blocks.append(block)
        return blocks

    async def build(self, element: ScannedElement) -> RemoteBlock | None:
        """Build the block for a single element, or ``None`` to drop it."""
        tag = element.tag

        if tag in _HEADING_LEVELS:
            return HeadingBlock(_HEADING_LEVELS[tag], _runs(element.content))

        if tag == ElementTag.PARAGRAPH:
            if not element.content.strip():
                return None
            return ParagraphBlock(_runs(element.content))

        if tag == ElementTag.CODE:
            return _code_block(element)

        if tag == ElementTag.BLOCKQUOTE:
            return QuoteBlock(_runs(element.content))

        if tag == ElementTag.LIST_ITEM:
            return BulletedListItemBlock(_runs(element.content))

        if tag == ElementTag.TABLE_ROW:
            return _table_row_block(element)

        if tag == ElementTag.IMAGE:
            return await self._image_block(element)

        return None

    async def _image_block(self, element: ScannedElement) -> RemoteBlock | None:
        src = _html.unescape(element.attributes.get("src", "")).strip()
        if not src:
            return None
        alt = _html.unescape(element.attributes.get("alt", ""))

        if self._check_image is None:
            return ImageBlock(url=src, caption=alt)

        context: dict[str, str] = {"src": src, "alt": alt}
        # A failing check counts as unreachable.
        try:
            reachable = await self._check_image(src)
        except Exception as exc:
            reachable = False
            context["error"] = repr(exc)
        if reachable:
            return ImageBlock(url=src, caption=alt)

        self.warnings.append(ConversionWarning(
            code="IMAGE_UNREACHABLE",
            message=f"Image could not be reached and was replaced by a callout: {src}",
            context=context,
        ))
        text = (
            f"Image unavailable: {alt or 'image'}\n"
            f"URL: {src}\n"
            "Reason: the image URL could not be reached or blocks external access"
        )
        return CalloutBlock(
            (RichTextRun(text),),
            emoji=UNREACHABLE_IMAGE_EMOJI,
            color=UNREACHABLE_IMAGE_COLOR,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _runs(content: str) -> tuple[RichTextRun, ...]:
    return tuple(tokenize_inline(content))


def _code_block(element: ScannedElement) -> CodeBlock:
    code = unescape_code(element.content)
    if code.endswith("\n"):
        code = code[:-1]
    return CodeBlock(code, element.attributes.get("language") or PLAIN_TEXT)


def _table_row_block(element: ScannedElement) -> ParagraphBlock | None:
    cells = element.attributes.get("cells") or []
    if not cells:
        return None
    text = f"| {' | '.join(cells)} |"
    return ParagraphBlock((RichTextRun(text, frozenset({TextStyle.CODE})),))
