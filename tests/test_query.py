"""
Tests for the list query builder and in-process pagination.

Run with: pytest tests/test_query.py -v
"""

import pytest

from gym_portal.core.query import (
    Filter,
    ListQuery,
    PageParams,
    build_list_query,
    build_pagination,
    paginate_records,
)
from gym_portal.core.security import ValidationError


class TestBuildPagination:
    """Tests for the pagination summary."""

    def test_middle_page(self):
        assert build_pagination(page=2, limit=10, total=25) == {
            "page": 2,
            "limit": 10,
            "total": 25,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_last_page(self):
        summary = build_pagination(page=3, limit=10, total=25)
        assert summary["hasNext"] is False
        assert summary["hasPrev"] is True

    def test_exact_multiple(self):
        assert build_pagination(page=1, limit=10, total=20)["totalPages"] == 2

    def test_empty(self):
        summary = build_pagination(page=1, limit=10, total=0)
        assert summary["totalPages"] == 0
        assert summary["hasNext"] is False
        assert summary["hasPrev"] is False


class TestBuildListQuery:
    """Tests for translating request parameters into a ListQuery."""

    def test_defaults_applied(self):
        query = build_list_query(PageParams(), sortable=("created_at",), default_sort="created_at", default_order="desc")
        assert query.sort == "created_at"
        assert query.descending is True
        assert query.offset == 0

    def test_offset_from_page(self):
        query = build_list_query(PageParams(page=3, limit=20), sortable=("price",), default_sort="price", default_order="asc")
        assert query.offset == 40

    def test_unknown_sort_rejected(self):
        with pytest.raises(ValidationError, match="Invalid sort field"):
            build_list_query(PageParams(sort="password"), sortable=("price",), default_sort="price", default_order="asc")

    def test_bad_order_rejected(self):
        with pytest.raises(ValidationError, match="Invalid sort order"):
            build_list_query(PageParams(order="sideways"), sortable=("price",), default_sort="price", default_order="asc")

    def test_order_is_case_insensitive(self):
        query = build_list_query(PageParams(order="DESC"), sortable=("price",), default_sort="price", default_order="asc")
        assert query.order == "desc"

    def test_blank_search_ignored(self):
        query = build_list_query(PageParams(search="   "), sortable=("price",), default_sort="price", default_order="asc")
        assert query.search is None


class TestFilter:
    """Tests for Filter matching."""

    def test_unsupported_operator(self):
        with pytest.raises(ValueError):
            Filter("price", "!=", 1)

    def test_equality_matches_none(self):
        assert Filter("subscription_plan_id", "==", None).matches({"subscription_plan_id": None})

    def test_range_never_matches_missing(self):
        assert not Filter("subscription_expiry_date", ">=", "2024-01-01").matches({})

    def test_iso_dates_compare_lexically(self):
        f = Filter("subscription_expiry_date", "<", "2024-06-01")
        assert f.matches({"subscription_expiry_date": "2024-05-31"})
        assert not f.matches({"subscription_expiry_date": "2024-06-01"})


class TestPaginateRecords:
    """Tests for in-process filter, search, sort and slice."""

    @pytest.fixture
    def records(self):
        return [
            {"id": str(i), "name": f"Member {i:02d}", "email": f"m{i}@example.com", "created_at": f"2024-01-{i:02d}"}
            for i in range(1, 26)
        ]

    def test_second_page(self, records):
        query = ListQuery(page=2, limit=10, sort="created_at", order="desc")
        page = paginate_records(records, query)
        assert page.total == 25
        assert [r["id"] for r in page.rows] == [str(i) for i in range(15, 5, -1)]

    def test_search_is_case_insensitive_substring(self, records):
        query = ListQuery(sort="created_at", order="asc", search="MEMBER 1", search_fields=("name",))
        page = paginate_records(records, query)
        assert page.total == 10
        assert page.rows[0]["name"] == "Member 10"

    def test_filters_and_search_combine(self, records):
        query = ListQuery(
            sort="created_at",
            order="asc",
            search="example.com",
            search_fields=("email",),
            filters=[Filter("created_at", ">=", "2024-01-20")],
        )
        assert paginate_records(records, query).total == 6
