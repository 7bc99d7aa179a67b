"""
core/data/inventory/pagination.py - Pagination helpers

Two unrelated kinds of paging live here:

- ``paginate``: slices an already fully fetched, in-memory result set into a
  page view. The continuation token only signals that more data exists; it
  is not a cursor into the remote dataset (every invocation re-fetches).
- ``drain_pages``: follows the provider's own page tokens
  (``NextToken`` / ``Marker``) until the remote listing is exhausted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from core.config import get_settings
from core.exceptions import ListingError
from core.parallel import CancelToken

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Remote page function: page_token ("" for the first page) -> (items, next_token)
ListPageFunc = Callable[[str], tuple[list[T], str]]

MAX_REMOTE_PAGES = 10_000


@dataclass(frozen=True)
class PaginationState:
    """Page view metadata

    Attributes:
        limit: Effective page size
        page: Effective page number (>= 1)
        total_count: Size of the full, unpaginated set
        next_page_token: Non-empty iff ``page * limit < total_count``
    """

    limit: int
    page: int
    total_count: int
    next_page_token: str = ""

    @property
    def has_next(self) -> bool:
        return bool(self.next_page_token)

    @property
    def total_pages(self) -> int:
        if self.total_count == 0:
            return 0
        return -(-self.total_count // self.limit)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of items plus its pagination state"""

    items: list[T]
    state: PaginationState


def paginate(
    items: Sequence[T],
    limit: int,
    page: int,
    default_limit: int | None = None,
) -> Page[T]:
    """Slice ``items`` into the requested page

    ``limit <= 0`` falls back to the configured page size and ``page < 1``
    is treated as 1. A page past the end yields an empty slice, not an
    error, with ``total_count`` still reporting the full set.

    Example:
        page = paginate(["a", "b", "c", "d"], limit=2, page=1)
        page.items                  # ["a", "b"]
        page.state.next_page_token  # "2"
    """
    if limit <= 0:
        limit = default_limit if default_limit and default_limit > 0 else get_settings().page_size
    if page < 1:
        page = 1

    total = len(items)
    start = (page - 1) * limit
    end = start + limit
    page_items = list(items[start:end]) if start < total else []

    next_token = str(page + 1) if page * limit < total else ""

    return Page(
        items=page_items,
        state=PaginationState(limit=limit, page=page, total_count=total, next_page_token=next_token),
    )


def drain_pages(
    list_page: ListPageFunc[T],
    kind: str,
    scope: str = "",
    cancel_token: CancelToken | None = None,
    max_pages: int = MAX_REMOTE_PAGES,
) -> list[T]:
    """Call ``list_page`` until the remote listing is exhausted

    Cancellation is checked between pages. A provider that hands back a
    token it already returned would loop forever, so that is reported as a
    ``ListingError``.

    Args:
        list_page: ``page_token -> (items, next_token)``; "" requests the first page
        kind: Resource kind (error context)
        scope: Session/region scope (error context)
        cancel_token: Cancellation signal (optional)
        max_pages: Upper bound on the number of remote pages

    Returns:
        All items, in remote order
    """
    items: list[T] = []
    seen: set[str] = set()
    token = ""

    for page_number in range(1, max_pages + 1):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(f"{kind}.list_page")

        page_items, next_token = list_page(token)
        items.extend(page_items)

        if not next_token:
            logger.debug(f"{kind} 목록 조회 완료 [{scope}]: {len(items)}개, {page_number}페이지")
            return items

        if next_token in seen:
            raise ListingError(kind, scope, reason=f"페이지 토큰 반복 ({page_number}페이지)")
        seen.add(next_token)
        token = next_token

    raise ListingError(kind, scope, reason=f"페이지 수 상한 초과 ({max_pages})")
