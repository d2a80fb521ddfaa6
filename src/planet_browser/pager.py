"""Pure paging state and slicing for page-turn navigation.

Network and presentation stay outside; this is arithmetic over a length.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

from planet_browser.models import DEFAULT_PAGE_SIZE

T = TypeVar("T")


class Pager:
    """Zero-based page cursor over a sequence of known length."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._page_size = page_size
        self._current_page = 0

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> int:
        return self._current_page

    def reset(self) -> None:
        self._current_page = 0

    def slice(self, items: Sequence[T]) -> list[T]:
        """Return the current window of ``items`` (empty past the end)."""
        start = self._current_page * self._page_size
        return list(items[start : start + self._page_size])

    def has_next(self, total_count: int) -> bool:
        return (self._current_page + 1) * self._page_size < total_count

    def total_pages(self, total_count: int) -> int:
        """Page count for ``total_count`` items; an empty list is one page."""
        return max(1, math.ceil(total_count / self._page_size))

    def step_forward_if_possible(self, total_count: int) -> bool:
        if not self.has_next(total_count):
            return False
        self._current_page += 1
        return True

    def step_backward(self) -> bool:
        if self._current_page <= 0:
            return False
        self._current_page -= 1
        return True

    def __repr__(self) -> str:
        return f"Pager(page_size={self._page_size}, current_page={self._current_page})"


__all__ = ["Pager"]
