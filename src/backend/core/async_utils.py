"""
Async utilities for report fan-out and blocking work.

Usage:
    from core.async_utils import gather_all, run_blocking

    totals, by_status = await gather_all(count_task(), status_task())
    csv_text = await run_blocking(render_csv, rows)
"""

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, List, TypeVar

T = TypeVar("T")


async def gather_all(*aws: Awaitable[Any]) -> List[Any]:
    """
    Run awaitables concurrently and join on all of them.

    Results come back in argument order. If any awaitable fails, the
    still-running siblings are cancelled and awaited, then the first failure
    is re-raised, so a report is either complete or not produced at all.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Let cancelled siblings finish unwinding (closing their sessions) first
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking function in a separate thread to avoid blocking the event loop.

    Args:
        func: The synchronous function to run
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The result of the function call
    """
    loop = asyncio.get_running_loop()
    # Use None for the executor to use the default ThreadPoolExecutor
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))
