"""Markdown to Notion block conversion pipeline.

Public API:

- :class:`MarkdownToBlocksConverter` -- the three stages below, end to end.
- :class:`HtmlRenderer` -- Markdown → HTML (mistune, with a regex fallback).
- :func:`scan_html` -- HTML → ordered :class:`ScannedElement` list.
- :class:`BlockBuilder` -- elements → remote blocks, probing images.
- :func:`tokenize_inline` -- inline HTML → styled runs.
- :func:`normalize_language` -- code fence language → Notion language.
- :func:`extract_title` -- page title from raw Markdown.
"""

from mdnotion.converter.block_builder import BlockBuilder
from mdnotion.converter.html_render import HtmlRenderer, MarkdownOptions, fallback_markdown_to_html
from mdnotion.converter.languages import normalize_language
from mdnotion.converter.md_to_notion import MarkdownToBlocksConverter
from mdnotion.converter.rich_text import split_rich_text, strip_tags, tokenize_inline
from mdnotion.converter.scanner import scan_html
from mdnotion.converter.title import extract_title

__all__ = [
    "BlockBuilder",
    "HtmlRenderer",
    "MarkdownOptions",
    "MarkdownToBlocksConverter",
    "extract_title",
    "fallback_markdown_to_html",
    "normalize_language",
    "scan_html",
    "split_rich_text",
    "strip_tags",
    "tokenize_inline",
]
