"""
Adaptive pagination engine.

One engine serves every cursor-paginated query: the protocol-specific page
fetch is injected as a strategy, the engine owns cursors, the fetch budget and
the termination policy.

State machine:
    INITIAL -> ACTIVE -> EXHAUSTED | BUDGET_REACHED | TARGET_REACHED | ABORTED

The first page is always fetched for every sub-stream. The budget (how many
additional pages may follow) is chosen once from the record count of that
first page, using ordered tiers: sparse data earns more pages. Each later
iteration advances only the sub-streams that still report more pages.

Plain offset-paginated REST endpoints use `paginate_offset` instead: a short
page ends the loop, together with a fixed page cap.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

from ghactivity.services.github.constants import (
    DEFAULT_BUDGET_FLOOR_PAGES,
    DEFAULT_BUDGET_TIERS,
)
from ghactivity.services.github.exceptions import GitHubAPIError
from ghactivity.services.github.types import PageCursor

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ─────────────────────────────────────────────────────────────
# Budget
# ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BudgetTier:
    """Fewer than `below` records after the first page -> up to `max_pages` more."""

    below: int
    max_pages: int


def _default_tiers() -> tuple[BudgetTier, ...]:
    return tuple(BudgetTier(below, pages) for below, pages in DEFAULT_BUDGET_TIERS)


@dataclass(frozen=True)
class BudgetTiers:
    """Ordered tier table plus the cap used when no tier matches."""

    tiers: tuple[BudgetTier, ...] = field(default_factory=_default_tiers)
    floor: int = DEFAULT_BUDGET_FLOOR_PAGES

    @classmethod
    def from_pairs(
        cls, pairs: Iterable[tuple[int, int]], floor: int = DEFAULT_BUDGET_FLOOR_PAGES
    ) -> "BudgetTiers":
        """Build from `(below, max_pages)` pairs, e.g. from settings."""
        return cls(tiers=tuple(BudgetTier(below, pages) for below, pages in pairs), floor=floor)

    @classmethod
    def fixed(cls, max_pages: int) -> "BudgetTiers":
        """A flat cap regardless of how much the first page returned."""
        return cls(tiers=(), floor=max_pages)

    def select(self, accumulated: int, target: int) -> int:
        """Maximum additional pages for `accumulated` records toward `target`."""
        if accumulated >= target:
            return 0
        for tier in sorted(self.tiers, key=lambda t: t.below):
            if accumulated < tier.below:
                return tier.max_pages
        return self.floor


@dataclass
class FetchBudget:
    """Progress toward the data-point target; pages_fetched counts additional pages only."""

    target: int
    accumulated: int = 0
    pages_fetched: int = 0
    max_additional_pages: int = 0

    @property
    def target_reached(self) -> bool:
        return self.accumulated >= self.target

    @property
    def cap_reached(self) -> bool:
        return self.pages_fetched >= self.max_additional_pages


# ─────────────────────────────────────────────────────────────
# Cursor paginator
# ─────────────────────────────────────────────────────────────


class PaginatorState(StrEnum):
    INITIAL = "initial"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    BUDGET_REACHED = "budget_reached"
    TARGET_REACHED = "target_reached"
    ABORTED = "aborted"


@dataclass
class Page(Generic[T]):
    """One fetched page: its records and the new cursor of every sub-stream it advanced."""

    records: list[T]
    cursors: dict[str, PageCursor] = field(default_factory=dict)


# Receives {stream: cursor} for the streams to advance (None = first page)
PageFetcher = Callable[[Mapping[str, str | None]], Awaitable[Page[T]]]


class AdaptivePaginator(Generic[T]):
    """
    Drive a cursor-paginated query until the target, the budget or the data runs out.

    Usage:
        paginator = AdaptivePaginator(fetch_page, ["pullRequests", "issues"], target=160)
        async for page in paginator.pages():
            merger.extend(page.records)

    A failure on the first page propagates. A failure on any later page stops
    the loop in the ABORTED state; pages already yielded stay valid and the
    error is kept on `error`.
    """

    def __init__(
        self,
        fetch_page: PageFetcher[T],
        streams: Sequence[str],
        *,
        target: int,
        tiers: BudgetTiers | None = None,
        label: str = "pages",
        log: logging.Logger | None = None,
    ):
        if not streams:
            raise ValueError("at least one sub-stream is required")
        self._fetch_page = fetch_page
        self._tiers = tiers or BudgetTiers()
        self._label = label
        self._logger = log or logger
        self.streams = tuple(streams)
        self.cursors: dict[str, PageCursor] = {s: PageCursor() for s in self.streams}
        self.budget = FetchBudget(target=target)
        self.state = PaginatorState.INITIAL
        self.error: GitHubAPIError | None = None

    @property
    def active_streams(self) -> list[str]:
        """Sub-streams that still report more pages."""
        return [s for s in self.streams if self.cursors[s].has_more]

    def _advance(self, requested: Iterable[str], page: Page[T]) -> None:
        for stream in requested:
            cursor = page.cursors.get(stream)
            if cursor is None or (cursor.has_more and not cursor.end_cursor):
                # No way to continue this stream
                cursor = PageCursor(end_cursor=None, has_more=False)
            self.cursors[stream] = cursor
        self.budget.accumulated += len(page.records)

    def _next_state(self) -> PaginatorState:
        if not self.active_streams:
            return PaginatorState.EXHAUSTED
        if self.budget.target_reached:
            return PaginatorState.TARGET_REACHED
        if self.budget.cap_reached:
            return PaginatorState.BUDGET_REACHED
        return PaginatorState.ACTIVE

    async def pages(self) -> AsyncIterator[Page[T]]:
        """Yield pages as they arrive; the state is final once iteration ends."""
        if self.state is not PaginatorState.INITIAL:
            raise RuntimeError("paginator has already run")

        first = await self._fetch_page({s: None for s in self.streams})
        self._advance(self.streams, first)
        self.budget.max_additional_pages = self._tiers.select(
            self.budget.accumulated, self.budget.target
        )
        self.state = self._next_state()

        if self.state is PaginatorState.ACTIVE:
            self._logger.info(
                f"Insufficient {self._label} after first page: {self.budget.accumulated}/"
                f"{self.budget.target}, fetching up to {self.budget.max_additional_pages} more"
            )
        yield first

        while self.state is PaginatorState.ACTIVE:
            requested = self.active_streams
            try:
                page = await self._fetch_page(
                    {s: self.cursors[s].end_cursor for s in requested}
                )
            except GitHubAPIError as e:
                self.error = e
                self.state = PaginatorState.ABORTED
                self._logger.warning(
                    f"Stopped fetching {self._label} at page {self.budget.pages_fetched + 2}: "
                    f"{e.message}"
                )
                return

            self.budget.pages_fetched += 1
            self._advance(requested, page)
            self.state = self._next_state()
            self._logger.debug(
                f"Fetched {self._label} page {self.budget.pages_fetched + 1}: "
                f"+{len(page.records)}, total {self.budget.accumulated}/{self.budget.target}"
            )
            yield page

        self._logger.info(
            f"Finished {self._label}: {self.budget.accumulated} records, "
            f"{self.budget.pages_fetched + 1} pages, state={self.state}"
        )

    async def collect(self) -> list[T]:
        """Run to completion and return every record in fetch order."""
        return [record async for page in self.pages() for record in page.records]


# ─────────────────────────────────────────────────────────────
# Offset paginator
# ─────────────────────────────────────────────────────────────


@dataclass
class OffsetResult(Generic[T]):
    """Outcome of an offset-paginated fetch; `error` is set when a page failed."""

    items: list[T] = field(default_factory=list)
    pages_fetched: int = 0
    exhausted: bool = False
    error: GitHubAPIError | None = None


async def paginate_offset(
    fetch_page: Callable[[int], Awaitable[list[T]]],
    *,
    per_page: int,
    max_pages: int,
    label: str = "pages",
    log: logging.Logger | None = None,
) -> OffsetResult[T]:
    """
    Fetch pages 1..max_pages in order until one comes back short.

    A failed page stops the loop; items from earlier pages are kept and the
    error is returned alongside them rather than raised.
    """
    log = log or logger
    result: OffsetResult[T] = OffsetResult()

    for page in range(1, max_pages + 1):
        try:
            items = await fetch_page(page)
        except GitHubAPIError as e:
            log.debug(f"Failed to fetch {label} page {page}: {e.message}")
            result.error = e
            break

        result.items.extend(items)
        result.pages_fetched += 1

        # Fewer items than requested means this was the last page
        if len(items) < per_page:
            result.exhausted = True
            break

    log.debug(f"Fetched {len(result.items)} {label} in {result.pages_fetched} pages")
    return result
