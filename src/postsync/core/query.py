"""Query pipeline — pure transform from (snapshot, params) to a paginated view.

Stages run in fixed order: search → filter → sort → paginate.
Reordering them changes results.

// [LAW:one-source-of-truth] total_pages is derived from the post-filter,
// pre-paginate length only.
// [LAW:single-enforcer] The pipeline never clamps page; the view store does.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from postsync.core.records import Record


class SortKey(str, Enum):
    ID = "id"
    TITLE = "title"
    OWNER_ID = "ownerId"


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


_SORT_FIELDS = {
    SortKey.ID: lambda r: r.id,
    SortKey.TITLE: lambda r: r.title,
    SortKey.OWNER_ID: lambda r: r.owner_id,
}

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class QueryParams:
    search: str = ""
    owner: int | None = None
    sort_key: SortKey = SortKey.ID
    sort_dir: SortDirection = SortDirection.ASCENDING
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class DerivedView:
    """Read-only result of one pipeline run.

    start_index/end_index are the zero-based half-open bounds of ``items``
    within the filtered sequence.
    """

    items: tuple[Record, ...]
    total_pages: int
    filtered_count: int
    start_index: int
    end_index: int


# ─── Stages ──────────────────────────────────────────────────────────────────


def search(records: Iterable[Record], text: str) -> list[Record]:
    """Case-insensitive substring match on title. Blank text passes everything."""
    if not text.strip():
        return list(records)
    needle = text.lower()
    return [r for r in records if needle in r.title.lower()]


def filter_owner(records: Iterable[Record], owner: int | None) -> list[Record]:
    if owner is None:
        return list(records)
    return [r for r in records if r.owner_id == owner]


def sort_records(
    records: Iterable[Record],
    key: SortKey,
    direction: SortDirection,
) -> list[Record]:
    """Stable sort; equal keys keep collection order in both directions."""
    return sorted(
        records,
        key=_SORT_FIELDS[SortKey(key)],
        reverse=SortDirection(direction) is SortDirection.DESCENDING,
    )


def total_pages(filtered_count: int, page_size: int) -> int:
    return max(1, math.ceil(filtered_count / page_size))


def page_bounds(filtered_count: int, page: int, page_size: int) -> tuple[int, int]:
    start = (page - 1) * page_size
    return start, max(start, min(start + page_size, filtered_count))


def filter_and_sort(snapshot: Iterable[Record], params: QueryParams) -> tuple[Record, ...]:
    """Search, filter and sort; everything except pagination."""
    result = search(snapshot, params.search)
    result = filter_owner(result, params.owner)
    return tuple(sort_records(result, params.sort_key, params.sort_dir))


def paginate(filtered: Sequence[Record], page: int, page_size: int) -> DerivedView:
    """Slice one page. A page past the end yields no items, never an error."""
    count = len(filtered)
    start, end = page_bounds(count, page, page_size)
    return DerivedView(
        items=tuple(filtered[start:end]),
        total_pages=total_pages(count, page_size),
        filtered_count=count,
        start_index=start,
        end_index=end,
    )


def compute_view(snapshot: Iterable[Record], params: QueryParams) -> DerivedView:
    return paginate(filter_and_sort(snapshot, params), params.page, params.page_size)


# ─── Aggregates ──────────────────────────────────────────────────────────────


def owner_counts(snapshot: Iterable[Record]) -> dict[int, int]:
    """Number of records per owner id."""
    return dict(Counter(r.owner_id for r in snapshot))
