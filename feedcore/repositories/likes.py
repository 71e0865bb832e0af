"""Persistence for post likes."""
from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import PostLike
from ..models.base import new_id, utcnow
from .base import delete_rows, insert_row


class LikeRepository:
    async def has_liked(self, session: AsyncSession, post_id: str, user_id: str) -> bool:
        stmt = select(exists().where(PostLike.post_id == post_id, PostLike.user_id == user_id))
        return bool(await session.scalar(stmt))

    async def create(self, session: AsyncSession, post_id: str, user_id: str) -> None:
        await insert_row(
            session,
            PostLike,
            {"id": new_id(), "post_id": post_id, "user_id": user_id, "created_at": utcnow()},
        )

    async def delete(self, session: AsyncSession, post_id: str, user_id: str) -> bool:
        removed = await delete_rows(session, PostLike, PostLike.post_id == post_id, PostLike.user_id == user_id)
        return removed == 1

    async def delete_for_post(self, session: AsyncSession, post_id: str) -> int:
        return await delete_rows(session, PostLike, PostLike.post_id == post_id)

    async def count_for_post(self, session: AsyncSession, post_id: str) -> int:
        stmt = select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
        return int(await session.scalar(stmt) or 0)


__all__ = ["LikeRepository"]
