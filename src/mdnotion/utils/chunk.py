"""Partition the block list of a page into API-sized batches.

``PATCH /blocks/{id}/children`` accepts at most 100 children per request,
so a long document is sent as a sequence of contiguous batches.  Order is
significant: each batch is appended after the previous one.
"""

from __future__ import annotations

from typing import TypeVar

T = TypeVar("T")


def chunk_children(blocks: list[T], size: int = 100) -> list[list[T]]:
    """Split *blocks* into contiguous batches of at most *size* items.

    Parameters
    ----------
    blocks:
        Blocks in page order.  Items may be remote block objects or
        already-rendered dicts; they are not inspected.
    size:
        Maximum batch length.  Defaults to **100**, the Notion limit.

    Returns
    -------
    list[list]
        Batches in order.  An empty input returns ``[]`` (not ``[[]]``).

    Raises
    ------
    ValueError
        If *size* is less than 1.

    Examples
    --------
    >>> [len(b) for b in chunk_children(list(range(252)))]
    [100, 100, 52]
    """
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")

    if not blocks:
        return []

    return [blocks[i : i + size] for i in range(0, len(blocks), size)]
