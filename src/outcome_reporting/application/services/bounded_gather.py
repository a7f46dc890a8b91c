"""Concurrent per-item fetch helper with a fixed concurrency ceiling."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


async def gather_bounded(
    items: Sequence[ItemT],
    fetch: Callable[[ItemT], Awaitable[ResultT]],
    *,
    concurrency: int,
) -> list[ResultT]:
    """Run `fetch` for every item concurrently and return results in item order.

    `fetch` is expected to handle its own per-item failures; an exception that
    escapes it propagates to the caller.
    """

    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def _run(item: ItemT) -> ResultT:
        async with semaphore:
            return await fetch(item)

    return list(await asyncio.gather(*(_run(item) for item in items)))
