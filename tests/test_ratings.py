"""Unit tests for rating aggregation and page arithmetic."""

from __future__ import annotations

import pytest

from bookshelf.services.pagination import BrowseState, clamp_page, page_bounds, page_count
from bookshelf.services.ratings import EMPTY_SUMMARY, summarize_by_book, summarize_ratings


class TestSummarizeRatings:
    def test_mean_of_ratings(self):
        summary = summarize_ratings([3, 5, 4])
        assert summary.average == 4.0
        assert summary.count == 3

    def test_non_integral_mean_is_kept(self):
        assert summarize_ratings([4, 5]).average == 4.5
        assert summarize_ratings([1, 2, 2]).average == pytest.approx(5 / 3)

    def test_no_ratings_is_zero(self):
        assert summarize_ratings([]) == EMPTY_SUMMARY
        assert summarize_ratings([]).average == 0.0

    def test_accepts_generators(self):
        assert summarize_ratings(r for r in (2, 4)).average == 3.0

    def test_grouped_by_book(self):
        summaries = summarize_by_book([(1, 5), (2, 1), (1, 3)])
        assert summaries[1].average == 4.0
        assert summaries[1].count == 2
        assert summaries[2].count == 1
        assert 3 not in summaries


class TestPageArithmetic:
    @pytest.mark.parametrize(
        "total,expected",
        [(0, 0), (1, 1), (6, 1), (7, 2), (12, 2), (13, 3)],
    )
    def test_page_count(self, total, expected):
        assert page_count(total, 6) == expected

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValueError):
            page_count(10, 0)

    def test_clamp(self):
        assert clamp_page(5, 2) == 2
        assert clamp_page(0, 2) == 1
        # Page 1 exists even with no results
        assert clamp_page(3, 0) == 1

    def test_bounds(self):
        assert page_bounds(1, 6) == (0, 6)
        assert page_bounds(2, 6) == (6, 6)


class TestBrowseState:
    def test_search_resets_to_first_page(self):
        state = BrowseState(page_size=6)
        state.update_total(20)
        state.go_to(3)
        assert state.page == 3

        state.search("austen")
        assert state.query == "austen"
        assert state.page == 1

    def test_next_past_last_page_is_a_no_op(self):
        state = BrowseState(page_size=6)
        state.update_total(7)
        state.next_page()
        assert state.page == 2
        assert not state.has_next
        state.next_page()
        assert state.page == 2

    def test_previous_on_first_page_is_a_no_op(self):
        state = BrowseState(page_size=6)
        state.update_total(7)
        assert not state.has_previous
        state.previous_page()
        assert state.page == 1

    def test_shrinking_results_pull_page_back(self):
        state = BrowseState(page_size=6)
        state.update_total(30)
        state.go_to(5)
        state.update_total(8)
        assert state.page == 2
        assert state.total_pages == 2
