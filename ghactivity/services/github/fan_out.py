"""
Parallel page fetcher.

Issues every page request of an offset-paginated endpoint at once and
reassembles the results in page order. Used where the page count is known up
front (commit search), so there is nothing to learn from earlier pages.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ghactivity.services.github.constants import MAX_PARALLEL_PAGES
from ghactivity.services.github.exceptions import GitHubAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FanOutResult(Generic[T]):
    """Concatenated records plus the pages that failed or never finished."""

    records: list[T] = field(default_factory=list)
    failed_pages: dict[int, GitHubAPIError | None] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed_pages


async def fetch_pages_parallel(
    fetch_page: Callable[[int], Awaitable[list[T]]],
    pages: Sequence[int],
    timeout: float | None = None,
    max_concurrent: int = MAX_PARALLEL_PAGES,
    on_page: Callable[[int, list[T]], None] | None = None,
) -> FanOutResult[T]:
    """
    Fetch `pages` concurrently and concatenate them in ascending page order.

    A failed page leaves its slot empty and is listed in `failed_pages`; it is
    not retried. On timeout every unfinished fetch is cancelled and listed with
    a None error. Caller cancellation propagates to every in-flight fetch.

    `on_page` receives finished pages in ascending page order as soon as every
    earlier page has finished or failed. When the fetch is cancelled, pages
    that already finished are still delivered before the cancellation
    propagates, so a caller merging through `on_page` keeps them.

    Args:
        fetch_page: Fetches one page by its 1-based number
        pages: Page numbers to fetch
        timeout: Overall deadline in seconds, None for no deadline
        max_concurrent: Upper bound on simultaneous requests
        on_page: Called with (page, records) for each finished page

    Returns:
        FanOutResult with records from every page that succeeded
    """
    ordered = sorted(set(pages))
    if not ordered:
        return FanOutResult()

    slots: list[list[T] | None] = [None] * len(ordered)
    errors: dict[int, GitHubAPIError] = {}
    lock = asyncio.Lock()
    semaphore = asyncio.Semaphore(max(1, min(max_concurrent, len(ordered))))
    next_index = 0

    def deliver(skip_unfinished: bool) -> None:
        nonlocal next_index
        if on_page is None:
            return
        while next_index < len(ordered):
            page = ordered[next_index]
            items = slots[next_index]
            if items is None and page not in errors and not skip_unfinished:
                break
            next_index += 1
            if items is not None:
                on_page(page, items)

    async def fetch_with_limit(index: int, page: int) -> None:
        async with semaphore:
            try:
                items = await fetch_page(page)
            except GitHubAPIError as e:
                logger.debug(f"Page {page} failed: {e.message}")
                async with lock:
                    errors[page] = e
                    deliver(skip_unfinished=False)
                return
            async with lock:
                slots[index] = items
                deliver(skip_unfinished=False)

    tasks = [
        asyncio.create_task(fetch_with_limit(index, page)) for index, page in enumerate(ordered)
    ]
    try:
        _, pending = await asyncio.wait(tasks, timeout=timeout)
    finally:
        # Covers both the deadline and caller cancellation
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        # Every task is done, so no writer can race this flush
        deliver(skip_unfinished=True)

    # Anything other than a GitHubAPIError is a bug, not a page failure
    for task in tasks:
        if not task.cancelled() and (exc := task.exception()) is not None:
            raise exc

    if pending:
        logger.warning(f"Parallel fetch timed out with {len(pending)}/{len(tasks)} pages pending")

    result: FanOutResult[T] = FanOutResult()
    async with lock:
        for index, page in enumerate(ordered):
            items = slots[index]
            if items is None:
                result.failed_pages[page] = errors.get(page)
                continue
            result.records.extend(items)
    return result
