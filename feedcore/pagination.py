"""Keyset pagination over ``(created_at, id)``.

Listings order by creation time with the id as a tie-breaker so the order is
total. A page query asks for rows strictly after the cursor and one row more
than the page size; the surplus row only signals that another page exists.
The cursor handed back is the key of the last item actually returned, so the
next query resumes right after it regardless of rows inserted or deleted in
between.
"""
from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from .schemas.pagination import Cursor, Page

T = TypeVar("T")


def resolve_page_size(requested: int | None, *, default: int, cap: int) -> int:
    if requested is None:
        return min(default, cap)
    return max(1, min(requested, cap))


def after_cursor(
    created_at: ColumnElement,
    row_id: ColumnElement,
    cursor: Cursor | None,
    *,
    descending: bool = False,
) -> ColumnElement | None:
    """Return the predicate selecting rows strictly past ``cursor``."""

    if cursor is None:
        return None
    if descending:
        return or_(created_at < cursor.created_at, and_(created_at == cursor.created_at, row_id < cursor.id))
    return or_(created_at > cursor.created_at, and_(created_at == cursor.created_at, row_id > cursor.id))


def ordering(created_at: ColumnElement, row_id: ColumnElement, *, descending: bool = False) -> tuple:
    if descending:
        return (created_at.desc(), row_id.desc())
    return (created_at.asc(), row_id.asc())


def build_page(rows: Sequence[T], page_size: int, key: Callable[[T], Cursor]) -> Page[T]:
    """Trim the look-ahead row and derive the next cursor from the last kept item."""

    items = list(rows[:page_size])
    has_more = len(rows) > page_size
    next_cursor = key(items[-1]) if has_more else None
    return Page(items=items, next_cursor=next_cursor)


__all__ = ["resolve_page_size", "after_cursor", "ordering", "build_page"]
