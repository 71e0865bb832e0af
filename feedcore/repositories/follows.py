"""Persistence for follow edges and pending follow requests."""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Follow, FollowRequest, Profile
from ..models.base import utcnow
from ..pagination import after_cursor, ordering
from ..schemas.pagination import Cursor
from .base import delete_rows, insert_row


class FollowRepository:
    async def edge_exists(self, session: AsyncSession, follower_id: str, followee_id: str) -> bool:
        stmt = select(exists().where(Follow.follower_id == follower_id, Follow.followee_id == followee_id))
        return bool(await session.scalar(stmt))

    async def create_edge(self, session: AsyncSession, follower_id: str, followee_id: str) -> None:
        await insert_row(
            session,
            Follow,
            {"follower_id": follower_id, "followee_id": followee_id, "created_at": utcnow()},
        )

    async def delete_edge(self, session: AsyncSession, follower_id: str, followee_id: str) -> bool:
        removed = await delete_rows(
            session, Follow, Follow.follower_id == follower_id, Follow.followee_id == followee_id
        )
        return removed == 1

    async def request_exists(self, session: AsyncSession, sender_id: str, recipient_id: str) -> bool:
        stmt = select(
            exists().where(FollowRequest.sender_id == sender_id, FollowRequest.recipient_id == recipient_id)
        )
        return bool(await session.scalar(stmt))

    async def create_request(self, session: AsyncSession, sender_id: str, recipient_id: str) -> None:
        await insert_row(
            session,
            FollowRequest,
            {"sender_id": sender_id, "recipient_id": recipient_id, "created_at": utcnow()},
        )

    async def delete_request(self, session: AsyncSession, sender_id: str, recipient_id: str) -> bool:
        removed = await delete_rows(
            session,
            FollowRequest,
            FollowRequest.sender_id == sender_id,
            FollowRequest.recipient_id == recipient_id,
        )
        return removed == 1

    async def following_among(self, session: AsyncSession, viewer_id: str, candidate_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``candidate_ids`` that ``viewer_id`` follows."""

        ids = set(candidate_ids)
        if not ids:
            return set()
        stmt = select(Follow.followee_id).where(Follow.follower_id == viewer_id, Follow.followee_id.in_(ids))
        return set(await session.scalars(stmt))

    async def count_followers(self, session: AsyncSession, user_id: str) -> int:
        stmt = select(func.count()).select_from(Follow).where(Follow.followee_id == user_id)
        return int(await session.scalar(stmt) or 0)

    async def count_following(self, session: AsyncSession, user_id: str) -> int:
        stmt = select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        return int(await session.scalar(stmt) or 0)

    async def page_followers(
        self, session: AsyncSession, user_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        return await self._page(
            session, Follow, Follow.follower_id, Follow.followee_id == user_id, cursor, limit
        )

    async def page_following(
        self, session: AsyncSession, user_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        return await self._page(
            session, Follow, Follow.followee_id, Follow.follower_id == user_id, cursor, limit
        )

    async def page_incoming_requests(
        self, session: AsyncSession, user_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        return await self._page(
            session, FollowRequest, FollowRequest.sender_id, FollowRequest.recipient_id == user_id, cursor, limit
        )

    async def _page(
        self,
        session: AsyncSession,
        model: Any,
        listed_id: Any,
        scope: Any,
        cursor: Cursor | None,
        limit: int,
    ) -> Sequence[Row[Any]]:
        stmt = (
            select(listed_id.label("user_id"), Profile.username, model.created_at.label("since"))
            .select_from(model)
            .join(Profile, Profile.id == listed_id)
            .where(scope)
        )
        predicate = after_cursor(model.created_at, listed_id, cursor)
        if predicate is not None:
            stmt = stmt.where(predicate)
        stmt = stmt.order_by(*ordering(model.created_at, listed_id)).limit(limit)
        return (await session.execute(stmt)).all()


__all__ = ["FollowRepository"]
