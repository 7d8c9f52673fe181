"""
Recent searches kept by a search session.
"""
from __future__ import annotations

from collections import deque
from typing import Iterator, Optional

from ...config import RECENT_SEARCHES_MAX
from ...utils import dedupe_folded


class RecentSearches:
    """Bounded most-recent-first list of free-text queries, deduped case-insensitively."""

    def __init__(self, max_items: Optional[int] = None):
        limit = RECENT_SEARCHES_MAX if max_items is None else int(max_items)
        self._max = max(1, limit)
        self._items: deque[str] = deque(maxlen=self._max)

    @property
    def max_items(self) -> int:
        return self._max

    def add(self, text: str) -> bool:
        """
        Record a query. Blank text is ignored.

        A query already present (compared case-insensitively) moves to the
        front with its latest spelling. Returns True when something was recorded.
        """
        cleaned = " ".join(str(text or "").split())
        if not cleaned:
            return False
        merged = dedupe_folded([cleaned, *self._items])
        self._items.clear()
        self._items.extend(merged[: self._max])
        return True

    def items(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
