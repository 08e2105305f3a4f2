"""Sequential, paced submission of blocks to a page.

Notion caps ``append_block_children`` at 100 children per call.
:class:`BatchSubmitter` splits the block list into contiguous chunks and
appends them one after the other, pausing between calls so long
documents stay under the API rate limit.  Order is preserved: chunk
``n + 1`` is only sent once chunk ``n`` has been accepted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from mdnotion.config import NOTION_MAX_CHILDREN_PER_REQUEST
from mdnotion.errors import MdNotionBatchError, MdNotionError
from mdnotion.models import RemoteBlock
from mdnotion.notion_api.blocks import AsyncBlockAPI
from mdnotion.observability import get_logger, resolve_metrics
from mdnotion.utils.chunk import chunk_children

log = get_logger("mdnotion.batching")

Sleep = Callable[[float], Awaitable[Any]]


@dataclass
class SubmitReport:
    """Counts from one :meth:`BatchSubmitter.submit` run.

    Attributes
    ----------
    batches:
        Number of ``append_block_children`` calls that succeeded.
    blocks_submitted:
        Number of blocks sent in those calls.
    blocks_accepted:
        Number of blocks the API reported back.  A response without a
        ``results`` list counts as the whole chunk being accepted.
    """

    batches: int = 0
    blocks_submitted: int = 0
    blocks_accepted: int = 0


class BatchSubmitter:
    """Append blocks to a page in paced, ordered chunks.

    Parameters
    ----------
    blocks_api:
        The block endpoint wrapper used for ``append_children``.
    batch_size:
        Maximum blocks per call, between 1 and 100.
    delay_seconds:
        Pause between two consecutive calls.
    sleep:
        Coroutine used for the pause.  Tests inject a recorder here.
    metrics:
        Optional metrics hook.
    """

    def __init__(
        self,
        blocks_api: AsyncBlockAPI,
        batch_size: int = NOTION_MAX_CHILDREN_PER_REQUEST,
        delay_seconds: float = 0.2,
        sleep: Sleep = asyncio.sleep,
        metrics: Any | None = None,
    ) -> None:
        if not 1 <= batch_size <= NOTION_MAX_CHILDREN_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {NOTION_MAX_CHILDREN_PER_REQUEST}, "
                f"got {batch_size}"
            )
        self._blocks = blocks_api
        self._batch_size = batch_size
        self._delay = delay_seconds
        self._sleep = sleep
        self._metrics = resolve_metrics(metrics)

    async def submit(self, page_id: str, blocks: Sequence[RemoteBlock]) -> SubmitReport:
        """Append *blocks* to *page_id* and return the submission counts.

        Raises
        ------
        MdNotionBatchError
            When a chunk is rejected.  Its context records how far the
            submission got; chunks sent before the failure stay on the
            page.
        """
        payloads = [block.to_notion() for block in blocks]
        chunks = chunk_children(payloads, self._batch_size)
        report = SubmitReport()

        for index, chunk in enumerate(chunks):
            if index > 0 and self._delay > 0:
                await self._sleep(self._delay)

            try:
                response = await self._blocks.append_children(page_id, chunk)
            except MdNotionError as exc:
                raise MdNotionBatchError(
                    message=f"Batch {index + 1}/{len(chunks)} failed: {exc.message}",
                    context={
                        "page_id": page_id,
                        "batch_index": index,
                        "batches_submitted": report.batches,
                        "blocks_submitted": report.blocks_submitted,
                    },
                    cause=exc,
                ) from exc

            results = response.get("results")
            accepted = len(results) if isinstance(results, list) else len(chunk)
            report.batches += 1
            report.blocks_submitted += len(chunk)
            report.blocks_accepted += accepted

            self._metrics.increment("mdnotion.batches_total")
            self._metrics.increment("mdnotion.blocks_created_total", value=accepted)
            log.info(
                "Batch submitted",
                extra={"extra_fields": {
                    "op": "submit",
                    "page_id": page_id,
                    "batch": index + 1,
                    "of": len(chunks),
                    "size": len(chunk),
                }},
            )

        return report
