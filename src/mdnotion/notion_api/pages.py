"""Thin async wrapper around the Notion ``/pages`` endpoints."""

from __future__ import annotations

from typing import Any

from mdnotion.utils.text_split import NOTION_TEXT_LIMIT

from .transport import AsyncNotionTransport


def title_property(title: str) -> dict[str, Any]:
    """Return the ``properties`` payload that sets a page title.

    Titles longer than Notion's 2000 character rich_text limit are cut.
    """
    content = title[:NOTION_TEXT_LIMIT]
    return {"title": {"title": [{"type": "text", "text": {"content": content}}]}}


class AsyncPageAPI:
    """Create and archive pages.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport`.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def create(
        self,
        parent: dict[str, Any],
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a page under *parent*, e.g. ``{"page_id": "..."}``.

        Returns the page object, whose ``id`` and ``url`` identify the new
        page.
        """
        body = {"parent": parent, "properties": properties}
        return await self._transport.request("POST", "/pages", json=body)

    async def update(self, page_id: str, archived: bool) -> dict[str, Any]:
        """Move the page to the trash, or restore it."""
        return await self._transport.request(
            "PATCH", f"/pages/{page_id}", json={"archived": archived}
        )
