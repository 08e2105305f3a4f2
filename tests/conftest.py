"""Shared test fixtures for the mdnotion test suite."""

from __future__ import annotations

import pytest

from mdnotion.config import MdNotionConfig
from mdnotion.converter.html_render import HtmlRenderer
from mdnotion.converter.md_to_notion import MarkdownToBlocksConverter


@pytest.fixture
def config() -> MdNotionConfig:
    """Default test configuration with a dummy token."""
    return MdNotionConfig(token="test_token_1234")


@pytest.fixture
def renderer() -> HtmlRenderer:
    """Markdown-to-HTML renderer with default options."""
    return HtmlRenderer()


@pytest.fixture
def converter(config: MdNotionConfig, renderer: HtmlRenderer) -> MarkdownToBlocksConverter:
    """Markdown-to-blocks converter that trusts every image URL."""
    return MarkdownToBlocksConverter(config, renderer=renderer)
