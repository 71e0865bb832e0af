"""Helpers shared by the SQLAlchemy repositories."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import delete, insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

_UNIQUE_SQLSTATE = "23505"
_UNIQUE_MESSAGES = ("UNIQUE constraint failed", "duplicate key value", "Duplicate entry")


class DuplicateRecordError(Exception):
    """A unique constraint rejected an insert; another writer got there first."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Duplicate row rejected by {table}")
        self.table = table


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == _UNIQUE_SQLSTATE:
            return True
    message = str(orig)
    return any(marker in message for marker in _UNIQUE_MESSAGES)


async def insert_row(session: AsyncSession, model: Any, values: Mapping[str, Any]) -> None:
    """Insert one row, surfacing a unique violation as :class:`DuplicateRecordError`."""

    try:
        await session.execute(insert(model).values(**values))
    except IntegrityError as exc:
        if is_unique_violation(exc):
            raise DuplicateRecordError(model.__tablename__) from exc
        raise


async def delete_rows(session: AsyncSession, model: Any, *criteria: Any) -> int:
    """Delete matching rows and return how many were actually removed."""

    result = await session.execute(
        delete(model).where(*criteria).execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


async def apply_deltas(session: AsyncSession, model: Any, key: Any, key_value: str, deltas: Mapping[str, int], **extra: Any) -> bool:
    """Apply ``column = column + delta`` atomically; False when no row matched."""

    values: dict[str, Any] = {name: getattr(model, name) + delta for name, delta in deltas.items() if delta}
    if not values:
        return True
    values.update(extra)
    result = await session.execute(
        update(model).where(key == key_value).values(**values).execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0) == 1


__all__ = ["DuplicateRecordError", "is_unique_violation", "insert_row", "delete_rows", "apply_deltas"]
