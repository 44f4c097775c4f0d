"""Tests for ai_pr_reviewer/pagination.py"""

import asyncio

import pytest
from hypothesis import given, settings, strategies as st

from ai_pr_reviewer.pagination import PAGE_SIZE, collect_pages


def make_source(page_sizes):
    """Page fetcher serving pages of the given sizes; records requested page numbers."""
    requested = []

    async def fetch_page(page):
        requested.append(page)
        offset = sum(page_sizes[:page - 1])
        return list(range(offset, offset + page_sizes[page - 1]))

    return fetch_page, requested


class TestCollectPages:

    @pytest.mark.parametrize(
        "page_sizes, expected_total, expected_fetches",
        [
            ([100, 100, 37], 237, 3),
            ([0], 0, 1),
            ([100, 100, 100, 0], 300, 4),
            ([99], 99, 1),
            ([100, 1], 101, 2),
        ],
    )
    def test_stops_at_first_short_page(self, page_sizes, expected_total, expected_fetches):
        fetch_page, requested = make_source(page_sizes)

        items = asyncio.run(collect_pages(fetch_page))

        assert items == list(range(expected_total))
        assert requested == list(range(1, expected_fetches + 1))

    def test_error_on_later_page_propagates_without_partial_result(self):
        async def fetch_page(page):
            if page == 2:
                raise RuntimeError("boom")
            return list(range(PAGE_SIZE))

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(collect_pages(fetch_page))

    def test_rejects_non_positive_page_size(self):
        fetch_page, requested = make_source([0])

        with pytest.raises(ValueError):
            asyncio.run(collect_pages(fetch_page, page_size=0))
        assert requested == []

    def test_custom_page_size(self):
        fetch_page, requested = make_source([2, 2, 1])

        items = asyncio.run(collect_pages(fetch_page, page_size=2))

        assert items == [0, 1, 2, 3, 4]
        assert requested == [1, 2, 3]


class TestCollectPagesProperty:

    @settings(max_examples=50, deadline=None)
    @given(
        full_pages=st.integers(min_value=0, max_value=4),
        last_page=st.integers(min_value=0, max_value=PAGE_SIZE - 1),
    )
    def test_returns_concatenation_of_all_pages(self, full_pages, last_page):
        """
        Property: every item from every page comes back once, in order, and
        exactly one page past the last full page is fetched.
        """
        page_sizes = [PAGE_SIZE] * full_pages + [last_page]
        fetch_page, requested = make_source(page_sizes)

        items = asyncio.run(collect_pages(fetch_page))

        assert items == list(range(sum(page_sizes)))
        assert len(requested) == full_pages + 1
