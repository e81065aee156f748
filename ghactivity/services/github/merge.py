"""
Deduplicating merge of activity batches.

Records are keyed by their provenance URL. Order is baseline first, then
incoming in fetch order; nothing is sorted by time here.
"""

from collections.abc import Callable, Iterable
from typing import Generic, Protocol, TypeVar


class HasURL(Protocol):
    @property
    def url(self) -> str: ...


R = TypeVar("R", bound=HasURL)


def _url_key(item: HasURL) -> str:
    return item.url


def merge(
    baseline: Iterable[R],
    incoming: Iterable[R],
    key: Callable[[R], str] = _url_key,
) -> list[R]:
    """
    Append `incoming` items whose key is not already present in `baseline`.

    Items with an empty key cannot collide by provenance and are always kept.
    Repeated keys inside either input keep their first occurrence only.
    """
    merged: list[R] = []
    seen: set[str] = set()
    for item in (*baseline, *incoming):
        k = key(item)
        if not k:
            merged.append(item)
            continue
        if k in seen:
            continue
        seen.add(k)
        merged.append(item)
    return merged


class SeenKeySet:
    """Provenance keys incorporated so far in one aggregation call."""

    def __init__(self) -> None:
        self._keys: set[str] = set()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, key: str) -> bool:
        """Add `key`; False if it was already present."""
        if key in self._keys:
            return False
        self._keys.add(key)
        return True


class RecordMerger(Generic[R]):
    """
    Merge successive batches into one deduplicated list.

    Holds the call-scoped SeenKeySet so every batch is checked against all
    previous ones, not just the baseline.
    """

    def __init__(self, key: Callable[[R], str] = _url_key) -> None:
        self._key = key
        self.seen = SeenKeySet()
        self.items: list[R] = []

    def extend(self, batch: Iterable[R]) -> int:
        """Merge `batch`; returns how many new items were added."""
        added = 0
        for item in batch:
            k = self._key(item)
            if k and not self.seen.add(k):
                continue
            self.items.append(item)
            added += 1
        return added
