"""Pagination state and page-number window calculation."""

import math
from dataclasses import dataclass


def window_of(current_page: int, total_pages: int, max_visible: int = 5) -> list[int]:
    """Return the page numbers to show as pagination controls.

    The window is centred on ``current_page`` and slides to stay within
    ``[1, total_pages]`` when the current page is near either end.

    Args:
        current_page: Page being displayed (1-based)
        total_pages: Number of pages available
        max_visible: Maximum number of page links to show

    Returns:
        Ascending page numbers, empty when there are no pages
    """
    if total_pages <= 0 or max_visible <= 0:
        return []
    start = max(1, current_page - max_visible // 2)
    end = min(total_pages, start + max_visible - 1)
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)
    return list(range(start, end + 1))


@dataclass
class PaginationState:
    """Current page position of a collection view."""

    current_page: int = 1
    page_size: int = 10
    total_items: int = 0
    total_pages: int = 0

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")

    def update(self, total_items: int, current_page: int | None = None, total_pages: int | None = None) -> None:
        """Record a new item count and clamp the current page into range."""
        self.total_items = max(total_items, 0)
        if total_pages is None:
            total_pages = math.ceil(self.total_items / self.page_size)
        self.total_pages = max(total_pages, 0)
        self.current_page = self.clamp(self.current_page if current_page is None else current_page)

    def clamp(self, page: int) -> int:
        return min(max(page, 1), max(self.total_pages, 1))

    def collapse(self, total_items: int) -> None:
        """Show everything on a single page, as after a search hit."""
        self.total_items = total_items
        self.total_pages = 1 if total_items else 0
        self.current_page = 1

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def window(self, max_visible: int = 5) -> list[int]:
        return window_of(self.current_page, self.total_pages, max_visible)
