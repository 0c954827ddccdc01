"""
View Windowing - expose a bounded slice of the query result

Two mutually exclusive strategies over the same ordered result:

    Paginator       fixed pages of page_size items; page(n) = items[(n-1)*P : n*P]
    InfiniteWindow  growing prefix items[:visible_count]; reveal_more() adds P

Both reset to their initial state when the FilterSpec changes or the
view mode switches. Neither ever reorders or copies the underlying jobs.
"""

import math
from enum import Enum
from typing import List, Sequence, TypeVar, Union

T = TypeVar("T")

PAGE_SIZE = 12
ELLIPSIS = "..."


class ViewMode(str, Enum):
    PAGINATION = "pagination"
    INFINITE = "infinite"


class Paginator:
    """
    Fixed-size pages over a result sequence.

    Attributes:
        page_size: Items per page
        current_page: 1-based page currently shown
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.current_page = 1

    def total_pages(self, total_items: int) -> int:
        return math.ceil(total_items / self.page_size)

    def clamp(self, page: int, total_items: int) -> int:
        """Keep page within [1, total_pages]; 1 when there are no pages."""
        return min(max(page, 1), max(self.total_pages(total_items), 1))

    def page(self, items: Sequence[T], n: int) -> List[T]:
        """Items on page n (1-based). Empty past the last page."""
        if n < 1:
            return []
        start = (n - 1) * self.page_size
        return list(items[start:start + self.page_size])

    def current(self, items: Sequence[T]) -> List[T]:
        return self.page(items, self.current_page)

    def go_to(self, page: int, total_items: int) -> int:
        self.current_page = self.clamp(page, total_items)
        return self.current_page

    def reset(self) -> None:
        self.current_page = 1

    def visible_pages(self, total_items: int, delta: int = 2) -> List[Union[int, str]]:
        """
        Page strip for navigation: first, last and pages within delta of
        the current page, with gaps collapsed to a single "...".

        Returns an empty list when there is at most one page.

        Example (current=6, 12 pages):
            [1, "...", 4, 5, 6, 7, 8, "...", 12]
        """
        total = self.total_pages(total_items)
        if total <= 1:
            return []

        pages: List[Union[int, str]] = []
        for i in range(1, total + 1):
            if i == 1 or i == total or self.current_page - delta <= i <= self.current_page + delta:
                pages.append(i)
            elif pages[-1] != ELLIPSIS:
                pages.append(ELLIPSIS)
        return pages


class InfiniteWindow:
    """
    Monotonically growing prefix of a result sequence.

    visible_count starts at page_size and only grows through reveal_more();
    reset() is the only way back down.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.visible_count = page_size

    def reset(self) -> None:
        self.visible_count = self.page_size

    def shown(self, total_items: int) -> int:
        """Number of items actually visible for a result of total_items."""
        return min(self.visible_count, total_items)

    def has_more(self, total_items: int) -> bool:
        return self.visible_count < total_items

    def all_shown(self, total_items: int) -> bool:
        """Everything is visible and there was more than one page to show."""
        return self.visible_count >= total_items and total_items > self.page_size

    def reveal_more(self, total_items: int) -> int:
        """
        Grow the window by one page, clamped to total_items.

        Called when the consumer nears the end of the visible window. Has
        no effect once everything is visible.
        """
        if self.has_more(total_items):
            self.visible_count = min(self.visible_count + self.page_size, total_items)
        return self.visible_count

    def window(self, items: Sequence[T]) -> List[T]:
        return list(items[:self.visible_count])
