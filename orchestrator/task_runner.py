"""
BoundedTaskRunner - concurrent per-item work with failure isolation.

Runs one coroutine per input item on the current event loop, with a
concurrency cap and a per-item timeout. Results are collected positionally,
so output order always matches input order regardless of completion order.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class BoundedTaskRunner:
    """
    Example usage:
        runner = BoundedTaskRunner(max_concurrency=5, timeout_s=30.0)
        results = await runner.run(hits, fetch_one, on_failure=to_error_result)
    """

    def __init__(self, max_concurrency: int = 5, timeout_s: float | None = 30.0):
        """
        Args:
            max_concurrency: Maximum number of items processed at the same time
            timeout_s: Per-item timeout in seconds (None disables it)
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.max_concurrency = max_concurrency
        self.timeout_s = timeout_s

    async def _safe_call(
        self,
        index: int,
        item: ItemT,
        worker: Callable[[ItemT], Awaitable[ResultT]],
        on_failure: Callable[[int, ItemT, BaseException], ResultT],
        semaphore: asyncio.Semaphore,
    ) -> ResultT:
        """
        Run the worker for one item; never raises.

        The timeout only starts once the item holds a concurrency slot.
        """
        async with semaphore:
            try:
                if self.timeout_s is None:
                    return await worker(item)
                return await asyncio.wait_for(worker(item), timeout=self.timeout_s)

            except asyncio.TimeoutError:
                logger.warning(
                    f"Task {index} timed out after {self.timeout_s}s",
                    extra={"extra_fields": {"index": index, "timeout_s": self.timeout_s}},
                )
                return on_failure(
                    index, item, TimeoutError(f"timed out after {self.timeout_s}s")
                )

            except Exception as e:
                logger.warning(
                    f"Task {index} failed: {e}",
                    extra={
                        "extra_fields": {
                            "index": index,
                            "error": str(e),
                            "error_type": type(e).__name__,
                        }
                    },
                )
                return on_failure(index, item, e)

    async def run(
        self,
        items: Sequence[ItemT],
        worker: Callable[[ItemT], Awaitable[ResultT]],
        on_failure: Callable[[int, ItemT, BaseException], ResultT],
    ) -> list[ResultT]:
        """
        Process all items concurrently and return one result per item, in input order.

        Args:
            items: Inputs, in rank order
            worker: Coroutine function producing the result for one item
            on_failure: Maps (index, item, exception) to the result recorded for a
                failed or timed-out item

        Returns:
            List of results, same length and order as `items`
        """
        if not items:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            self._safe_call(index, item, worker, on_failure, semaphore)
            for index, item in enumerate(items)
        ]

        # No return_exceptions: _safe_call converts every failure into a result
        return list(await asyncio.gather(*tasks))
