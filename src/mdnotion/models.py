"""Public data models for mdnotion.

The conversion pipeline passes three kinds of value between stages:

* :class:`ScannedElement` -- one classified line of intermediate HTML.
* :class:`RichTextRun` -- one styled span of inline text.
* :data:`RemoteBlock` -- one Notion block, as a closed union of frozen
  dataclasses.  Each variant knows how to render itself into the dict
  shape the Notion API expects via ``to_notion()``.

:class:`ConversionResult` is what the client hands back to its caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ElementTag(str, Enum):
    """Tags produced by the HTML element scanner."""

    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    PARAGRAPH = "p"
    CODE = "pre"
    BLOCKQUOTE = "blockquote"
    LIST_ITEM = "li"
    TABLE_ROW = "table-row"
    IMAGE = "img"


class TextStyle(str, Enum):
    """Single style flag carried by a :class:`RichTextRun`.

    Values match the Notion ``annotations`` keys.
    """

    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    STRIKETHROUGH = "strikethrough"


# ---------------------------------------------------------------------------
# Scanner / tokenizer values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScannedElement:
    """One element classified by the HTML scanner.

    Attributes
    ----------
    tag:
        The element kind.
    content:
        Inner HTML for text-bearing elements, the escaped code body for
        ``pre``, empty for ``img`` and ``table-row``.
    attributes:
        ``language`` for ``pre``, ``cells`` (a list of strings) for
        ``table-row``, the parsed tag attributes for ``img``.
    """

    tag: ElementTag
    content: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RichTextRun:
    """A span of text with at most one style flag.

    Styles are never composed: ``<strong><em>x</em></strong>`` becomes a
    single bold run with the nested tags stripped.
    """

    text: str
    styles: frozenset[TextStyle] = frozenset()
    color: str = "default"


# ---------------------------------------------------------------------------
# Remote blocks
# ---------------------------------------------------------------------------

def _envelope(block_type: str, body: dict[str, Any]) -> dict[str, Any]:
    return {"object": "block", "type": block_type, block_type: body}


def _rich_text(runs: tuple[RichTextRun, ...]) -> list[dict]:
    from mdnotion.converter.rich_text import runs_to_rich_text, split_rich_text

    return split_rich_text(runs_to_rich_text(runs))


@dataclass(frozen=True)
class ParagraphBlock:
    runs: tuple[RichTextRun, ...]
    block_type: str = field(default="paragraph", init=False)

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {"rich_text": _rich_text(self.runs)})


@dataclass(frozen=True)
class HeadingBlock:
    """Heading of level 1, 2 or 3 (Notion has no deeper headings)."""

    level: int
    runs: tuple[RichTextRun, ...]

    def __post_init__(self) -> None:
        if self.level not in (1, 2, 3):
            raise ValueError(f"heading level must be 1, 2 or 3, got {self.level}")

    @property
    def block_type(self) -> str:
        return f"heading_{self.level}"

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {"rich_text": _rich_text(self.runs)})


@dataclass(frozen=True)
class CodeBlock:
    code: str
    language: str = "plain text"
    block_type: str = field(default="code", init=False)

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {
            "rich_text": _rich_text((RichTextRun(self.code),)),
            "language": self.language,
        })


@dataclass(frozen=True)
class QuoteBlock:
    runs: tuple[RichTextRun, ...]
    block_type: str = field(default="quote", init=False)

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {"rich_text": _rich_text(self.runs)})


@dataclass(frozen=True)
class BulletedListItemBlock:
    runs: tuple[RichTextRun, ...]
    block_type: str = field(default="bulleted_list_item", init=False)

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {"rich_text": _rich_text(self.runs)})


@dataclass(frozen=True)
class ImageBlock:
    """Externally hosted image, optionally captioned."""

    url: str
    caption: str = ""
    block_type: str = field(default="image", init=False)

    def to_notion(self) -> dict[str, Any]:
        caption = _rich_text((RichTextRun(self.caption),)) if self.caption else []
        return _envelope(self.block_type, {
            "type": "external",
            "external": {"url": self.url},
            "caption": caption,
        })


@dataclass(frozen=True)
class CalloutBlock:
    runs: tuple[RichTextRun, ...]
    emoji: str = "💡"
    color: str = "default"
    block_type: str = field(default="callout", init=False)

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {
            "rich_text": _rich_text(self.runs),
            "icon": {"type": "emoji", "emoji": self.emoji},
            "color": self.color,
        })


@dataclass(frozen=True)
class DividerBlock:
    block_type: str = field(default="divider", init=False)

    def to_notion(self) -> dict[str, Any]:
        return _envelope(self.block_type, {})


RemoteBlock = Union[
    ParagraphBlock,
    HeadingBlock,
    CodeBlock,
    QuoteBlock,
    BulletedListItemBlock,
    ImageBlock,
    CalloutBlock,
    DividerBlock,
]
"""Every block variant the pipeline can emit."""


# ---------------------------------------------------------------------------
# Conversion warnings and results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered during conversion.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"IMAGE_UNREACHABLE"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionOutput:
    """Output of the Markdown-to-blocks phase, before anything is sent.

    Attributes
    ----------
    blocks:
        Remote blocks in document order.
    warnings:
        Non-fatal issues discovered during conversion.
    images_processed:
        Number of ``img`` elements the scanner found, whether or not they
        turned into image blocks.
    html:
        The intermediate HTML the blocks were built from.
    """

    blocks: list[RemoteBlock] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)
    images_processed: int = 0
    html: str = ""


@dataclass
class ConversionResult:
    """Result of :meth:`AsyncMdNotionClient.create_page_from_markdown`.

    Attributes
    ----------
    success:
        Always ``True`` on return; failures raise instead.
    page_id:
        The ID of the newly created sub-page.
    title:
        The title the page was created with.
    timestamp:
        ISO-8601 UTC time at which the conversion started.
    blocks_created:
        Blocks accepted by the API across all batches, including the
        timestamp paragraph and the divider.
    images_processed:
        Number of image elements found in the document.
    batches:
        Number of ``append_block_children`` calls made.
    url:
        The URL of the new page, when the API reports one.
    warnings:
        Non-fatal conversion warnings.
    """

    success: bool
    page_id: str
    title: str
    timestamp: str
    blocks_created: int
    images_processed: int
    batches: int
    url: str = ""
    warnings: list[ConversionWarning] = field(default_factory=list)
