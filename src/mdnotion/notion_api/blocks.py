"""Thin async wrapper around the Notion ``/blocks`` endpoints."""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport


class AsyncBlockAPI:
    """Append children to a page or block.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport`.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Append *children* to *block_id*.

        Parameters
        ----------
        block_id:
            The page or block receiving the children.
        children:
            Block payloads, at most 100 per call;
            :class:`~mdnotion.batching.BatchSubmitter` takes care of the
            chunking.

        Returns
        -------
        dict
            The API response, whose ``results`` list the created blocks.
        """
        return await self._transport.request(
            "PATCH", f"/blocks/{block_id}/children", json={"children": children}
        )
