"""
List Query Builder

Translates query-string parameters (page, limit, sort, order, search and
resource filters) into a store-neutral ``ListQuery``, and provides the
in-process filter/sort/slice used when the store cannot express a query.
"""

import math
import operator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from fastapi import Query

from gym_portal.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from gym_portal.core.security import MAX_SEARCH_LENGTH, ValidationError, sanitize_text

ASC = "asc"
DESC = "desc"

_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}


@dataclass(frozen=True)
class Filter:
    """A single field comparison pushed down to the store."""
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in _COMPARATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")

    def matches(self, record: Dict[str, Any]) -> bool:
        actual = record.get(self.field)
        if self.op == "==":
            return actual == self.value
        # Range comparisons never match missing/null values
        if actual is None or self.value is None:
            return False
        try:
            return _COMPARATORS[self.op](actual, self.value)
        except TypeError:
            return False


@dataclass
class ListQuery:
    """Filtered, sorted and paginated read against one collection."""
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort: str = "created_at"
    order: str = DESC
    filters: List[Filter] = field(default_factory=list)
    search: Optional[str] = None
    search_fields: Tuple[str, ...] = ()

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.order == DESC

    def where(self, field_name: str, op: str, value: Any) -> "ListQuery":
        self.filters.append(Filter(field_name, op, value))
        return self


@dataclass
class Page:
    """One page of records plus the total matching count."""
    rows: List[Dict[str, Any]]
    total: int


@dataclass
class PageParams:
    """Raw pagination/sorting parameters as received on the query string."""
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort: Optional[str] = None
    order: Optional[str] = None
    search: Optional[str] = None


def get_page_params(
    page: int = Query(1, ge=1, description="1-indexed page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Rows per page"),
    sort: Optional[str] = Query(None, max_length=64, description="Column to sort by"),
    order: Optional[str] = Query(None, description="asc or desc"),
    search: Optional[str] = Query(None, max_length=MAX_SEARCH_LENGTH, description="Case-insensitive text search"),
) -> PageParams:
    """FastAPI dependency collecting the common list parameters."""
    return PageParams(page=page, limit=limit, sort=sort, order=order, search=search)


def build_list_query(
    params: PageParams,
    sortable: Sequence[str],
    default_sort: str,
    default_order: str,
    search_fields: Sequence[str] = (),
) -> ListQuery:
    """
    Build a ``ListQuery`` from request parameters.

    Raises:
        ValidationError: If the sort column or order is not allowed.
    """
    sort = (params.sort or default_sort).strip()
    if sort not in sortable:
        raise ValidationError(
            f"Invalid sort field. Allowed: {', '.join(sortable)}",
            field="sort",
        )

    order = (params.order or default_order).strip().lower()
    if order not in (ASC, DESC):
        raise ValidationError("Invalid sort order. Allowed: asc, desc", field="order")

    search = sanitize_text(params.search) if params.search else None

    return ListQuery(
        page=params.page,
        limit=params.limit,
        sort=sort,
        order=order,
        search=search or None,
        search_fields=tuple(search_fields),
    )


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    """Pagination summary returned alongside every list response."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def today_iso() -> str:
    """Current UTC date as ``YYYY-MM-DD``, the format expiry dates are stored in."""
    return datetime.now(timezone.utc).date().isoformat()


def matches_search(record: Dict[str, Any], term: str, fields: Iterable[str]) -> bool:
    needle = term.casefold()
    for name in fields:
        value = record.get(name)
        if value is not None and needle in str(value).casefold():
            return True
    return False


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Nulls sort before any value, as they do in the store
    if value is None:
        return (0, "")
    return (1, value)


def paginate_records(records: Iterable[Dict[str, Any]], query: ListQuery) -> Page:
    """
    Apply filters, search, sort and slicing to already-fetched records.

    Used for text search, which the store cannot evaluate server-side.
    """
    selected = [r for r in records if all(f.matches(r) for f in query.filters)]
    if query.search:
        selected = [r for r in selected if matches_search(r, query.search, query.search_fields)]

    selected.sort(key=lambda r: _sort_key(r.get(query.sort)), reverse=query.descending)

    total = len(selected)
    rows = selected[query.offset:query.offset + query.limit]
    return Page(rows=rows, total=total)
