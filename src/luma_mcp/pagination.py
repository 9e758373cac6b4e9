"""Cursor pagination aggregation for Luma list endpoints"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .errors import ErrorType, LumaError, invalid_response_error
from .models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Largest page the Luma API will return
MAX_PAGE_SIZE = 100

PageFetcher = Callable[[str | None, int], Awaitable[Page[T]]]


async def collect_all_pages(fetch_page: PageFetcher, max_pages: int | None = None) -> list[T]:
    """
    Follow ``next_cursor`` until the API reports ``has_more: false``.

    Args:
        fetch_page: coroutine taking (cursor, page_size) and returning a Page
        max_pages: stop with an error after this many pages (None for no cap)

    Returns:
        Every entry from every page, in arrival order
    """
    entries: list[T] = []
    cursor: str | None = None
    pages = 0

    while True:
        if max_pages is not None and pages >= max_pages:
            logger.error(f"Pagination stopped after {pages} pages; API still reports more results")
            raise LumaError(ErrorType.INVALID_RESPONSE, f"Invalid API response: pagination did not finish after {pages} pages", {"pages": pages, "entries": len(entries)})

        page = await fetch_page(cursor, MAX_PAGE_SIZE)
        pages += 1
        entries.extend(page.entries)

        if not page.has_more:
            break
        if not page.next_cursor:
            raise invalid_response_error("has_more is true but next_cursor is missing", {"pages": pages})
        cursor = page.next_cursor

    logger.debug(f"Collected {len(entries)} entries across {pages} pages")
    return entries
