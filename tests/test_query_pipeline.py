"""Tests for the pure query pipeline: search → filter → sort → paginate."""

import pytest

from postsync.core.query import (
    DerivedView,
    QueryParams,
    SortDirection,
    SortKey,
    compute_view,
    filter_owner,
    owner_counts,
    page_bounds,
    search,
    sort_records,
    total_pages,
)
from tests.harness import make_record, make_records


ALPHA_BETA = (
    make_record(1, "Alpha", owner_id=1),
    make_record(2, "Beta", owner_id=2),
)


class TestSearch:
    def test_case_insensitive_title_match(self):
        assert [r.id for r in search(ALPHA_BETA, "AL")] == [1]

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_blank_text_passes_everything(self, text):
        assert search(ALPHA_BETA, text) == list(ALPHA_BETA)

    def test_matches_title_only(self):
        records = (make_record(1, "Alpha", body="beta lives here"),)
        assert search(records, "beta") == []

    def test_no_match_is_empty(self):
        assert search(ALPHA_BETA, "gamma") == []


class TestFilter:
    def test_none_passes_everything(self):
        assert filter_owner(ALPHA_BETA, None) == list(ALPHA_BETA)

    def test_exact_owner(self):
        assert [r.id for r in filter_owner(ALPHA_BETA, 2)] == [2]

    def test_unknown_owner_is_empty(self):
        assert filter_owner(ALPHA_BETA, 99) == []


class TestSort:
    def test_numeric_id_order(self):
        records = (make_record(10), make_record(9), make_record(100))
        ordered = sort_records(records, SortKey.ID, SortDirection.ASCENDING)
        assert [r.id for r in ordered] == [9, 10, 100]

    def test_title_descending(self):
        ordered = sort_records(ALPHA_BETA, SortKey.TITLE, SortDirection.DESCENDING)
        assert [r.title for r in ordered] == ["Beta", "Alpha"]

    def test_accepts_string_values(self):
        ordered = sort_records(ALPHA_BETA, "ownerId", "desc")
        assert [r.id for r in ordered] == [2, 1]

    def test_equal_keys_keep_collection_order_both_directions(self):
        records = (
            make_record(3, owner_id=1),
            make_record(1, owner_id=2),
            make_record(2, owner_id=1),
            make_record(4, owner_id=2),
        )
        asc = sort_records(records, SortKey.OWNER_ID, SortDirection.ASCENDING)
        desc = sort_records(records, SortKey.OWNER_ID, SortDirection.DESCENDING)
        assert [r.id for r in asc] == [3, 2, 1, 4]
        assert [r.id for r in desc] == [1, 4, 3, 2]

    def test_double_flip_is_identity(self):
        records = tuple(make_record(i, title="same") for i in (5, 2, 8, 1))
        once = sort_records(records, SortKey.TITLE, SortDirection.DESCENDING)
        twice = sort_records(once, SortKey.TITLE, SortDirection.ASCENDING)
        assert twice == list(records)


class TestPagination:
    @pytest.mark.parametrize(
        "count,size,expected",
        [(0, 10, 1), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5), (26, 5, 6)],
    )
    def test_total_pages(self, count, size, expected):
        assert total_pages(count, size) == expected

    def test_last_partial_page(self):
        view = compute_view(make_records(11), QueryParams(page=2, page_size=10))
        assert [r.id for r in view.items] == [11]
        assert (view.start_index, view.end_index) == (10, 11)

    def test_page_past_end_is_empty_not_error(self):
        view = compute_view(make_records(11), QueryParams(page=5, page_size=10))
        assert view.items == ()
        assert view.total_pages == 2
        assert page_bounds(11, 5, 10) == (40, 40)

    def test_total_pages_counts_filtered_not_collection(self):
        records = make_records(30, owners=3)
        view = compute_view(records, QueryParams(owner=1, page_size=5))
        assert view.filtered_count == 10
        assert view.total_pages == 2

    def test_empty_collection_has_one_page(self):
        view = compute_view((), QueryParams())
        assert view == DerivedView(items=(), total_pages=1, filtered_count=0, start_index=0, end_index=0)


class TestComputeView:
    def test_alpha_beta_scenario(self):
        view = compute_view(ALPHA_BETA, QueryParams(search="al"))
        assert view.items == (ALPHA_BETA[0],)
        assert view.total_pages == 1

    def test_stage_order_search_before_page(self):
        records = make_records(25)
        # "Record 1" matches 1, 10-19 → 11 records, page 2 of size 10 holds one.
        view = compute_view(records, QueryParams(search="record 1", page=2, page_size=10))
        assert view.filtered_count == 11
        assert [r.id for r in view.items] == [19]

    def test_idempotent(self):
        records = make_records(40)
        params = QueryParams(search="1", owner=2, sort_key=SortKey.TITLE, sort_dir=SortDirection.DESCENDING, page=2, page_size=3)
        assert compute_view(records, params) == compute_view(records, params)

    def test_total_pages_property_over_many_params(self):
        records = make_records(37, owners=4)
        for owner in (None, 1, 2, 3, 4, 5):
            for size in (1, 3, 10, 50):
                view = compute_view(records, QueryParams(owner=owner, page_size=size))
                expected_count = sum(1 for r in records if owner is None or r.owner_id == owner)
                assert view.filtered_count == expected_count
                assert view.total_pages == max(1, -(-expected_count // size))


def test_owner_counts():
    records = make_records(7, owners=3)
    assert owner_counts(records) == {1: 3, 2: 2, 3: 2}
    assert owner_counts(()) == {}
