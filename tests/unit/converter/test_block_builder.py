"""Tests for mapping scanned elements to remote blocks."""

from unittest.mock import AsyncMock

import pytest

from mdnotion.converter.block_builder import BlockBuilder
from mdnotion.models import (
    BulletedListItemBlock,
    CalloutBlock,
    CodeBlock,
    ElementTag,
    HeadingBlock,
    ImageBlock,
    ParagraphBlock,
    QuoteBlock,
    RichTextRun,
    ScannedElement,
    TextStyle,
)


def el(tag, content="", **attributes):
    return ScannedElement(ElementTag(tag), content, attributes)


class TestTextBlocks:
    @pytest.mark.parametrize("tag,level", [("h1", 1), ("h2", 2), ("h3", 3)])
    async def test_headings(self, tag, level):
        block = await BlockBuilder().build(el(tag, "Title"))
        assert block == HeadingBlock(level, (RichTextRun("Title"),))
        assert block.to_notion()["type"] == f"heading_{level}"

    @pytest.mark.parametrize("tag", ["h4", "h5", "h6"])
    async def test_deep_headings_dropped(self, tag):
        assert await BlockBuilder().build(el(tag, "Deep")) is None

    async def test_paragraph_runs(self):
        block = await BlockBuilder().build(el("p", "a <strong>b</strong>"))
        assert block == ParagraphBlock((
            RichTextRun("a "),
            RichTextRun("b", frozenset({TextStyle.BOLD})),
        ))

    async def test_blank_paragraph_dropped(self):
        assert await BlockBuilder().build(el("p", "   ")) is None

    async def test_quote(self):
        block = await BlockBuilder().build(el("blockquote", "<em>wise</em>"))
        assert isinstance(block, QuoteBlock)
        assert block.runs == (RichTextRun("wise", frozenset({TextStyle.ITALIC})),)

    async def test_list_item(self):
        block = await BlockBuilder().build(el("li", "item"))
        assert block == BulletedListItemBlock((RichTextRun("item"),))


class TestCodeBlocks:
    async def test_escapes_reversed_and_trailing_newline_dropped(self):
        block = await BlockBuilder().build(
            el("pre", "if a &lt; b:\\n    pass\\n", language="python")
        )
        assert block == CodeBlock("if a < b:\n    pass", "python")

    async def test_literal_backslash_n_survives(self):
        block = await BlockBuilder().build(el("pre", 'print("x&#92;n")\\n', language="python"))
        assert block.code == 'print("x\\n")'

    async def test_missing_language_is_plain_text(self):
        block = await BlockBuilder().build(el("pre", "x"))
        assert block.language == "plain text"

    async def test_code_text_has_no_inline_styling(self):
        block = await BlockBuilder().build(el("pre", "**x**", language="markdown"))
        payload = block.to_notion()["code"]
        assert payload["rich_text"] == [{"type": "text", "text": {"content": "**x**"}}]
        assert payload["language"] == "markdown"


class TestTableRows:
    async def test_row_as_code_paragraph(self):
        block = await BlockBuilder().build(el("table-row", cells=["a", "b"]))
        assert block == ParagraphBlock((
            RichTextRun("| a | b |", frozenset({TextStyle.CODE})),
        ))

    async def test_row_without_cells_dropped(self):
        assert await BlockBuilder().build(el("table-row")) is None


class TestImages:
    async def test_unchecked_image_becomes_image_block(self):
        block = await BlockBuilder().build(el("img", src="https://x.y/a.png", alt="A"))
        assert block == ImageBlock("https://x.y/a.png", "A")

    async def test_src_entities_decoded(self):
        block = await BlockBuilder().build(el("img", src="https://x.y/a.png?w=1&amp;h=2"))
        assert block.url == "https://x.y/a.png?w=1&h=2"

    async def test_missing_src_dropped(self):
        assert await BlockBuilder().build(el("img", alt="nothing")) is None

    async def test_reachable_image(self):
        check = AsyncMock(return_value=True)
        builder = BlockBuilder(check_image=check)
        block = await builder.build(el("img", src="https://x.y/a.png", alt=""))
        assert isinstance(block, ImageBlock)
        check.assert_awaited_once_with("https://x.y/a.png")
        assert builder.warnings == []

    async def test_unreachable_image_becomes_callout(self):
        builder = BlockBuilder(check_image=AsyncMock(return_value=False))
        block = await builder.build(el("img", src="https://x.y/b.png", alt="Chart"))

        assert isinstance(block, CalloutBlock)
        assert block.emoji == "📷"
        assert block.color == "yellow_background"
        text = block.runs[0].text
        assert "Chart" in text
        assert "https://x.y/b.png" in text

        [warning] = builder.warnings
        assert warning.code == "IMAGE_UNREACHABLE"
        assert warning.context["src"] == "https://x.y/b.png"

    async def test_unreachable_image_without_alt(self):
        builder = BlockBuilder(check_image=AsyncMock(return_value=False))
        block = await builder.build(el("img", src="https://x.y/c.png"))
        assert block.runs[0].text.startswith("Image unavailable: image\n")

    async def test_failing_check_treated_as_unreachable(self):
        builder = BlockBuilder(check_image=AsyncMock(side_effect=RuntimeError("boom")))
        block = await builder.build(el("img", src="https://x.y/d.png", alt="D"))

        assert isinstance(block, CalloutBlock)
        [warning] = builder.warnings
        assert warning.code == "IMAGE_UNREACHABLE"
        assert "boom" in warning.context["error"]


class TestBuildAll:
    async def test_order_preserved_and_drops_skipped(self):
        elements = [
            el("h1", "T"),
            el("p", ""),
            el("h5", "skip"),
            el("li", "a"),
            el("pre", "x", language="go"),
        ]
        blocks = await BlockBuilder().build_all(elements)
        assert [b.block_type for b in blocks] == [
            "heading_1", "bulleted_list_item", "code",
        ]

    async def test_images_checked_sequentially(self):
        seen = []

        async def check(url):
            seen.append(url)
            return url.endswith("ok.png")

        builder = BlockBuilder(check_image=check)
        blocks = await builder.build_all([
            el("img", src="https://x.y/1-ok.png"),
            el("img", src="https://x.y/2-bad.png"),
            el("img", src="https://x.y/3-ok.png"),
        ])
        assert seen == ["https://x.y/1-ok.png", "https://x.y/2-bad.png", "https://x.y/3-ok.png"]
        assert [b.block_type for b in blocks] == ["image", "callout", "image"]
        assert len(builder.warnings) == 1
