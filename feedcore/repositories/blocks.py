"""Persistence for directed block edges."""
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Block, Profile
from ..models.base import utcnow
from ..pagination import after_cursor, ordering
from ..schemas.pagination import Cursor
from .base import delete_rows, insert_row


class BlockRepository:
    async def edge_exists(self, session: AsyncSession, blocker_id: str, blocked_id: str) -> bool:
        stmt = select(exists().where(Block.blocker_id == blocker_id, Block.blocked_id == blocked_id))
        return bool(await session.scalar(stmt))

    async def exists_between(self, session: AsyncSession, first: str, second: str) -> bool:
        """True when either profile blocks the other."""

        stmt = select(
            exists().where(
                or_(
                    and_(Block.blocker_id == first, Block.blocked_id == second),
                    and_(Block.blocker_id == second, Block.blocked_id == first),
                )
            )
        )
        return bool(await session.scalar(stmt))

    async def create(self, session: AsyncSession, blocker_id: str, blocked_id: str) -> None:
        await insert_row(
            session,
            Block,
            {"blocker_id": blocker_id, "blocked_id": blocked_id, "created_at": utcnow()},
        )

    async def delete(self, session: AsyncSession, blocker_id: str, blocked_id: str) -> bool:
        removed = await delete_rows(session, Block, Block.blocker_id == blocker_id, Block.blocked_id == blocked_id)
        return removed == 1

    async def page_blocked(
        self, session: AsyncSession, blocker_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        stmt = (
            select(Block.blocked_id.label("user_id"), Profile.username, Block.created_at.label("since"))
            .join(Profile, Profile.id == Block.blocked_id)
            .where(Block.blocker_id == blocker_id)
        )
        predicate = after_cursor(Block.created_at, Block.blocked_id, cursor)
        if predicate is not None:
            stmt = stmt.where(predicate)
        stmt = stmt.order_by(*ordering(Block.created_at, Block.blocked_id)).limit(limit)
        return (await session.execute(stmt)).all()


__all__ = ["BlockRepository"]
