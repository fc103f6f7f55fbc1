"""
Filter -> sort -> paginate semantics of the in-memory evaluator.

These are the reference semantics of a list query; the SQL store is
checked against the same expectations in test_list_api.py.
"""

from datetime import date, datetime

import pytest

from listquery.descriptor import DateRange, QueryDescriptor, SortDirection, SortSpec
from listquery.errors import QueryValidationError
from listquery.evaluator import evaluate, filter_records, paginate, sort_records
from listquery.resources import ResourceSpec, Role

PEOPLE = ResourceSpec(
    name="people",
    path="/people",
    search_fields=("name", "email"),
    filters={"status": "status", "gender": "gender"},
    date_field="createdAt",
    sortable=("name", "totalAmount", "createdAt", "status"),
    roles=frozenset({Role.ADMIN}),
)


def _people(n):
    return [
        {
            "id": f"r{i:03d}",
            "name": f"Person {i:03d}",
            "email": None,
            "status": "ACTIVE" if i % 2 else "INACTIVE",
            "gender": "FEMALE" if i % 3 else "MALE",
            "totalAmount": (i * 7) % 5,
            "createdAt": datetime(2025, 1, 1 + (i % 28), 9, 0),
        }
        for i in range(n)
    ]


class TestPagination:
    """Page/size semantics and derived envelope fields."""

    def test_twenty_five_records_first_page(self):
        env = evaluate(_people(25), QueryDescriptor(page=0, size=10), PEOPLE)
        assert len(env.content) == 10
        assert env.total_elements == 25
        assert env.total_pages == 3
        assert env.last is False

    def test_twenty_five_records_last_page(self):
        env = evaluate(_people(25), QueryDescriptor(page=2, size=10), PEOPLE)
        assert len(env.content) == 5
        assert env.last is True

    def test_page_past_the_end_is_empty_not_clamped(self):
        env = evaluate(_people(25), QueryDescriptor(page=3, size=10), PEOPLE)
        assert env.content == []
        assert env.page == 3
        assert env.total_pages == 3
        assert env.last is True

    def test_empty_dataset_has_one_page(self):
        env = evaluate([], QueryDescriptor(page=0, size=10), PEOPLE)
        assert env.content == []
        assert env.total_elements == 0
        assert env.total_pages == 1
        assert env.last is True

    @pytest.mark.parametrize("total,size,page", [(0, 1, 0), (1, 1, 0), (9, 4, 1), (10, 5, 1), (11, 5, 2), (11, 5, 7), (30, 7, 4)])
    def test_content_length_and_total_pages(self, total, size, page):
        env = paginate(_people(total), page, size)
        expected_len = min(size, total - page * size) if page * size < total else 0
        assert len(env.content) == expected_len
        assert env.total_pages == max(1, -(-total // size))
        assert len(env.content) <= env.size

    def test_paginate_clamps_size_to_one(self):
        env = paginate(_people(3), 0, 0)
        assert env.size == 1
        assert len(env.content) == 1

    def test_same_descriptor_gives_identical_envelopes(self):
        records = _people(25)
        d = QueryDescriptor(page=1, size=7, search="person 0", sort=SortSpec(field="totalAmount"))
        assert evaluate(records, d, PEOPLE) == evaluate(records, d, PEOPLE)


class TestFilter:
    """Search, exact filters and date range."""

    def test_search_is_case_insensitive_substring(self):
        records = [{"id": "1", "name": "Anna"}, {"id": "2", "name": "Bob"}, {"id": "3", "name": "Nancy"}]
        env = evaluate(records, QueryDescriptor(search="an"), PEOPLE)
        assert [r["name"] for r in env.content] == ["Anna", "Nancy"]

    def test_search_matches_any_designated_field(self):
        records = [
            {"id": "1", "name": "Bob", "email": "bob@annex.org"},
            {"id": "2", "name": "Carl", "email": None},
        ]
        env = evaluate(records, QueryDescriptor(search="ANNEX"), PEOPLE)
        assert [r["id"] for r in env.content] == ["1"]

    def test_filters_are_anded(self):
        records = _people(30)
        both = filter_records(records, QueryDescriptor(filters={"status": "ACTIVE", "gender": "MALE"}), PEOPLE)
        assert both
        assert all(r["status"] == "ACTIVE" and r["gender"] == "MALE" for r in both)

    def test_filter_composition_narrows(self):
        records = _people(30)
        a = filter_records(records, QueryDescriptor(filters={"status": "ACTIVE"}), PEOPLE)
        b = filter_records(records, QueryDescriptor(filters={"gender": "FEMALE"}), PEOPLE)
        ab = filter_records(records, QueryDescriptor(filters={"status": "ACTIVE", "gender": "FEMALE"}), PEOPLE)
        assert len(ab) <= min(len(a), len(b))

    def test_all_sentinel_means_no_constraint(self):
        records = _people(12)
        env = evaluate(records, QueryDescriptor(filters={"status": "ALL"}, size=50), PEOPLE)
        assert env.total_elements == 12

    def test_exact_filter_is_case_sensitive(self):
        env = evaluate(_people(10), QueryDescriptor(filters={"status": "active"}), PEOPLE)
        assert env.total_elements == 0

    def test_unknown_filter_is_rejected(self):
        with pytest.raises(QueryValidationError):
            evaluate([], QueryDescriptor(filters={"colour": "red"}), PEOPLE)

    def test_date_range_includes_end_of_last_day(self):
        records = [
            {"id": "1", "createdAt": "2025-01-31T23:59:59"},
            {"id": "2", "createdAt": "2025-02-01T00:00:00"},
            {"id": "3", "createdAt": "2024-12-31T23:59:59"},
            {"id": "4", "createdAt": datetime(2025, 1, 1, 0, 0)},
            {"id": "5", "createdAt": date(2025, 1, 15)},
            {"id": "6", "createdAt": None},
        ]
        d = QueryDescriptor(date_range=DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31)))
        env = evaluate(records, d, PEOPLE)
        assert [r["id"] for r in env.content] == ["1", "4", "5"]

    def test_date_range_normalizes_utc_offsets(self):
        records = [{"id": "1", "createdAt": "2025-02-01T01:00:00+02:00"}]
        d = QueryDescriptor(date_range=DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31)))
        assert evaluate(records, d, PEOPLE).total_elements == 1


class TestSort:
    """Single-key stable sort."""

    def test_sort_by_amount_descending(self):
        records = [
            {"id": "a", "totalAmount": 500000},
            {"id": "b", "totalAmount": 1000000},
            {"id": "c", "totalAmount": 700000},
        ]
        d = QueryDescriptor(sort=SortSpec(field="totalAmount", direction=SortDirection.DESC))
        env = evaluate(records, d, PEOPLE)
        assert [r["totalAmount"] for r in env.content] == [1000000, 700000, 500000]

    @pytest.mark.parametrize("direction", [SortDirection.ASC, SortDirection.DESC])
    def test_sort_is_stable(self, direction):
        records = _people(40)
        filtered = filter_records(records, QueryDescriptor(filters={"status": "ACTIVE"}), PEOPLE)
        ordered = sort_records(filtered, SortSpec(field="totalAmount", direction=direction))
        position = {r["id"]: i for i, r in enumerate(filtered)}
        for prev, cur in zip(ordered, ordered[1:]):
            if prev["totalAmount"] == cur["totalAmount"]:
                assert position[prev["id"]] < position[cur["id"]]

    def test_strings_sort_lexicographically(self):
        records = [{"id": "1", "name": "beta"}, {"id": "2", "name": "Alpha"}, {"id": "3", "name": "alpha"}]
        env = evaluate(records, QueryDescriptor(sort=SortSpec(field="name")), PEOPLE)
        assert [r["name"] for r in env.content] == ["Alpha", "alpha", "beta"]

    def test_missing_values_sort_first_ascending_last_descending(self):
        records = [{"id": "1", "name": "b"}, {"id": "2", "name": None}, {"id": "3", "name": "a"}]
        asc = evaluate(records, QueryDescriptor(sort=SortSpec(field="name")), PEOPLE)
        desc = evaluate(records, QueryDescriptor(sort=SortSpec(field="name", direction=SortDirection.DESC)), PEOPLE)
        assert [r["id"] for r in asc.content] == ["2", "3", "1"]
        assert [r["id"] for r in desc.content] == ["1", "3", "2"]

    def test_unsortable_field_is_rejected(self):
        with pytest.raises(QueryValidationError):
            evaluate(_people(3), QueryDescriptor(sort=SortSpec(field="email")), PEOPLE)

    def test_sort_happens_before_pagination(self):
        records = _people(25)
        d = QueryDescriptor(page=0, size=5, sort=SortSpec(field="name", direction=SortDirection.DESC))
        env = evaluate(records, d, PEOPLE)
        assert env.content[0]["name"] == "Person 024"
