"""
Bounded fan-out for independent async operations.

Used twice per ingestion: page fetches for enrichment and scoring calls,
each with its own limit. Results land in a pre-sized slot list indexed by
input position, so output order never depends on completion order.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def map_with_concurrency(
    items: Sequence[T],
    limit: int,
    worker: Callable[[T, int], Awaitable[R]],
    label: str = "task",
) -> List[Optional[R]]:
    """
    Run worker(item, index) for every item with at most `limit` in flight.

    A worker that raises leaves None in its slot; siblings keep running and
    nothing is re-raised. Each worker is responsible for its own timeout.

    Args:
        items: Inputs, in order
        limit: Max concurrent workers (values below 1 are treated as 1)
        worker: Coroutine function taking (item, index)
        label: Name used in failure logs

    Returns:
        List with results[i] corresponding to items[i]
    """
    results: List[Optional[R]] = [None] * len(items)
    if not items:
        return results

    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run_one(idx: int, item: T) -> None:
        async with semaphore:
            try:
                results[idx] = await worker(item, idx)
            except Exception as e:
                logger.warning(f"{label} {idx + 1}/{len(items)} failed: {e}")

    await asyncio.gather(*[_run_one(i, item) for i, item in enumerate(items)])
    return results
