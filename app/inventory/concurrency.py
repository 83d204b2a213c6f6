"""
Bounded async worker pool.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def run_with_concurrency(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    max_concurrent: int = 5,
) -> list[R]:
    """
    Run ``worker`` over ``items`` with at most ``max_concurrent`` in flight.

    Workers pull the next index from a shared cursor and write each result at
    the index of its input, so the returned list lines up with ``items`` even
    though completion order does not. A worker exception propagates; callers
    that need per-item isolation catch inside ``worker``.
    """

    if not items:
        return []

    results: list[R | None] = [None] * len(items)
    cursor = 0

    async def run_next() -> None:
        nonlocal cursor
        while cursor < len(items):
            index = cursor
            cursor += 1
            results[index] = await worker(items[index])

    pool_size = min(max(1, max_concurrent), len(items))
    await asyncio.gather(*(run_next() for _ in range(pool_size)))
    return results  # type: ignore[return-value]
