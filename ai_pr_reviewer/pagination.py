"""Page-number traversal for list endpoints that cap each page."""

from __future__ import annotations

from typing import Awaitable, Callable, List, Sequence, TypeVar

from ai_pr_reviewer.logger import get_logger

logger = get_logger()

PAGE_SIZE = 100

T = TypeVar("T")


async def collect_pages(
    fetch_page: Callable[[int], Awaitable[Sequence[T]]],
    *,
    page_size: int = PAGE_SIZE,
) -> List[T]:
    """Fetch pages 1, 2, ... and return every item in order.

    Traversal stops at the first page holding fewer than ``page_size`` items
    (an empty page included). A full page always triggers one more fetch.
    Errors from ``fetch_page`` propagate and no partial result is returned.
    """

    if page_size <= 0:
        raise ValueError("page_size must be positive")

    items: List[T] = []
    page = 1
    while True:
        batch = await fetch_page(page)
        items.extend(batch)
        logger.debug(f"Page {page}: {len(batch)} item(s), {len(items)} total")
        if len(batch) < page_size:
            break
        page += 1
    return items
