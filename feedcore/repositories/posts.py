"""Persistence for posts and their counter rows."""
from __future__ import annotations

from typing import Mapping, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Post, PostStats
from ..models.base import new_id, utcnow
from ..pagination import after_cursor, ordering
from ..schemas.pagination import Cursor
from .base import apply_deltas, delete_rows, insert_row

POST_COUNTERS = ("like_count", "comment_count")


class PostRepository:
    async def get(self, session: AsyncSession, post_id: str) -> Post | None:
        return await session.scalar(select(Post).where(Post.id == post_id))

    async def get_stats(self, session: AsyncSession, post_id: str) -> PostStats | None:
        return await session.scalar(select(PostStats).where(PostStats.post_id == post_id))

    async def create(self, session: AsyncSession, *, author_id: str, recipient_id: str, caption: str) -> Post:
        post = Post(id=new_id(), author_id=author_id, recipient_id=recipient_id, caption=caption, created_at=utcnow())
        await insert_row(
            session,
            Post,
            {
                "id": post.id,
                "author_id": author_id,
                "recipient_id": recipient_id,
                "caption": caption,
                "created_at": post.created_at,
            },
        )
        await insert_row(session, PostStats, {"post_id": post.id, "like_count": 0, "comment_count": 0})
        return post

    async def delete(self, session: AsyncSession, post_id: str) -> bool:
        await delete_rows(session, PostStats, PostStats.post_id == post_id)
        return await delete_rows(session, Post, Post.id == post_id) == 1

    async def adjust(self, session: AsyncSession, post_id: str, deltas: Mapping[str, int]) -> bool:
        """Atomically shift post counters; False when the stats row is missing."""

        unknown = set(deltas) - set(POST_COUNTERS)
        if unknown:
            raise ValueError(f"Unknown post counters: {sorted(unknown)}")
        return await apply_deltas(session, PostStats, PostStats.post_id, post_id, deltas)

    async def overwrite(self, session: AsyncSession, post_id: str, counters: Mapping[str, int]) -> None:
        await session.execute(
            update(PostStats)
            .where(PostStats.post_id == post_id)
            .values(**counters)
            .execution_options(synchronize_session=False)
        )

    async def count_received(self, session: AsyncSession, profile_id: str) -> int:
        stmt = select(func.count()).select_from(Post).where(Post.recipient_id == profile_id)
        return int(await session.scalar(stmt) or 0)

    async def page_for_profile(
        self, session: AsyncSession, profile_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Post]:
        """Posts on ``profile_id``'s profile, newest first."""

        stmt = select(Post).where(Post.recipient_id == profile_id)
        predicate = after_cursor(Post.created_at, Post.id, cursor, descending=True)
        if predicate is not None:
            stmt = stmt.where(predicate)
        stmt = stmt.order_by(*ordering(Post.created_at, Post.id, descending=True)).limit(limit)
        return list(await session.scalars(stmt))


__all__ = ["PostRepository", "POST_COUNTERS"]
