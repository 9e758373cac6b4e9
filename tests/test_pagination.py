#!/usr/bin/env python3
"""Tests for cursor pagination aggregation"""

import asyncio
import sys
import unittest
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from luma_mcp.errors import ErrorType, LumaError
from luma_mcp.models import Page
from luma_mcp.pagination import MAX_PAGE_SIZE, collect_all_pages


class ScriptedPages:
    """Returns the given pages in order and records the cursors requested"""

    def __init__(self, *pages):
        self.pages = list(pages)
        self.requests = []

    async def __call__(self, cursor, limit):
        self.requests.append((cursor, limit))
        return self.pages.pop(0)


class TestCollectAllPages(unittest.TestCase):
    def test_two_pages_aggregate_in_order(self):
        fetch = ScriptedPages(Page(entries=["e1", "e2"], has_more=True, next_cursor="c1"), Page(entries=["e3"], has_more=False))

        entries = asyncio.run(collect_all_pages(fetch))

        self.assertEqual(entries, ["e1", "e2", "e3"])
        self.assertEqual(fetch.requests, [(None, MAX_PAGE_SIZE), ("c1", MAX_PAGE_SIZE)])

    def test_stops_when_has_more_false_even_with_cursor(self):
        fetch = ScriptedPages(Page(entries=["a"], has_more=False, next_cursor="ignored"), Page(entries=["never"], has_more=False))

        entries = asyncio.run(collect_all_pages(fetch))

        self.assertEqual(entries, ["a"])
        self.assertEqual(len(fetch.requests), 1)

    def test_cursor_is_passed_verbatim(self):
        fetch = ScriptedPages(
            Page(entries=[1], has_more=True, next_cursor="opaque==/+"),
            Page(entries=[2], has_more=True, next_cursor="next"),
            Page(entries=[3], has_more=False),
        )

        entries = asyncio.run(collect_all_pages(fetch))

        self.assertEqual(entries, [1, 2, 3])
        self.assertEqual([cursor for cursor, _ in fetch.requests], [None, "opaque==/+", "next"])

    def test_empty_listing(self):
        entries = asyncio.run(collect_all_pages(ScriptedPages(Page(entries=[], has_more=False))))
        self.assertEqual(entries, [])

    def test_has_more_without_cursor_is_invalid(self):
        fetch = ScriptedPages(Page(entries=[1], has_more=True, next_cursor=None))
        with self.assertRaises(LumaError) as ctx:
            asyncio.run(collect_all_pages(fetch))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_RESPONSE)

    def test_page_cap_stops_endless_listing(self):
        async def endless(cursor, limit):
            return Page(entries=["x"], has_more=True, next_cursor="again")

        with self.assertRaises(LumaError) as ctx:
            asyncio.run(collect_all_pages(endless, max_pages=3))
        self.assertEqual(ctx.exception.error_type, ErrorType.INVALID_RESPONSE)
        self.assertEqual(ctx.exception.details["pages"], 3)
        self.assertEqual(ctx.exception.details["entries"], 3)


if __name__ == "__main__":
    unittest.main()
