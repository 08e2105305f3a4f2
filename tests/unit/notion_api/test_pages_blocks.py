"""Tests for the page and block endpoint wrappers."""

from unittest.mock import AsyncMock, MagicMock

from mdnotion.converter.title import extract_title
from mdnotion.notion_api.blocks import AsyncBlockAPI
from mdnotion.notion_api.pages import AsyncPageAPI, title_property


def _transport(return_value=None):
    transport = MagicMock()
    transport.request = AsyncMock(return_value=return_value or {})
    return transport


def _title_text(props):
    return props["title"]["title"][0]["text"]["content"]


class TestTitleProperty:
    def test_shape(self):
        assert title_property("Notes") == {
            "title": {"title": [{"type": "text", "text": {"content": "Notes"}}]}
        }

    def test_long_title_cut_to_2000(self):
        props = title_property(extract_title("x" * 3000))
        assert _title_text(props) == "x" * 2000

    def test_title_at_limit_kept(self):
        assert len(_title_text(title_property("y" * 2000))) == 2000


class TestAsyncPageAPI:
    async def test_create(self):
        transport = _transport({"id": "new-page"})
        api = AsyncPageAPI(transport)
        parent = {"type": "page_id", "page_id": "parent-1"}
        result = await api.create(parent, title_property("T"))
        assert result == {"id": "new-page"}
        transport.request.assert_awaited_once_with(
            "POST", "/pages", json={"parent": parent, "properties": title_property("T")}
        )

    async def test_update_archived(self):
        transport = _transport()
        await AsyncPageAPI(transport).update("page-9", archived=True)
        transport.request.assert_awaited_once_with(
            "PATCH", "/pages/page-9", json={"archived": True}
        )


class TestAsyncBlockAPI:
    async def test_append_children(self):
        transport = _transport({"results": [{"id": "b1"}]})
        children = [{"object": "block", "type": "divider", "divider": {}}]
        await AsyncBlockAPI(transport).append_children("page-1", children)
        transport.request.assert_awaited_once_with(
            "PATCH", "/blocks/page-1/children", json={"children": children}
        )
