"""Persistence for post comments."""
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Post, PostComment, Profile
from ..models.base import new_id, utcnow
from ..pagination import after_cursor, ordering
from ..schemas.pagination import Cursor
from .base import delete_rows, insert_row


class CommentRepository:
    async def get(self, session: AsyncSession, comment_id: str) -> PostComment | None:
        return await session.scalar(select(PostComment).where(PostComment.id == comment_id))

    async def create(self, session: AsyncSession, *, post_id: str, user_id: str, body: str) -> PostComment:
        comment = PostComment(id=new_id(), post_id=post_id, user_id=user_id, body=body, created_at=utcnow())
        await insert_row(
            session,
            PostComment,
            {
                "id": comment.id,
                "post_id": post_id,
                "user_id": user_id,
                "body": body,
                "created_at": comment.created_at,
            },
        )
        return comment

    async def delete(self, session: AsyncSession, comment_id: str) -> bool:
        return await delete_rows(session, PostComment, PostComment.id == comment_id) == 1

    async def delete_for_post(self, session: AsyncSession, post_id: str) -> int:
        return await delete_rows(session, PostComment, PostComment.post_id == post_id)

    async def count_for_post(self, session: AsyncSession, post_id: str) -> int:
        stmt = select(func.count()).select_from(PostComment).where(PostComment.post_id == post_id)
        return int(await session.scalar(stmt) or 0)

    async def count_received(self, session: AsyncSession, profile_id: str) -> int:
        """Comments left on posts that live on ``profile_id``'s profile."""

        stmt = (
            select(func.count())
            .select_from(PostComment)
            .join(Post, Post.id == PostComment.post_id)
            .where(Post.recipient_id == profile_id)
        )
        return int(await session.scalar(stmt) or 0)

    async def page_for_post(
        self, session: AsyncSession, post_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        stmt = (
            select(
                PostComment.id,
                PostComment.post_id,
                PostComment.user_id,
                PostComment.body,
                PostComment.created_at,
                Profile.username,
            )
            .outerjoin(Profile, Profile.id == PostComment.user_id)
            .where(PostComment.post_id == post_id)
        )
        predicate = after_cursor(PostComment.created_at, PostComment.id, cursor, descending=True)
        if predicate is not None:
            stmt = stmt.where(predicate)
        stmt = stmt.order_by(*ordering(PostComment.created_at, PostComment.id, descending=True)).limit(limit)
        return (await session.execute(stmt)).all()


__all__ = ["CommentRepository"]
