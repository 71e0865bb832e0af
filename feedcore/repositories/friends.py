"""Persistence for friend edges and friend requests.

Both tables store the unordered pair in canonical order so that a pair of
users maps to exactly one row regardless of who acted first.
"""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from sqlalchemy import case, exists, func, or_, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import FriendRequest, Friendship, Profile
from ..models.base import new_id, utcnow
from ..pagination import after_cursor, ordering
from ..schemas.pagination import Cursor
from .base import delete_rows, insert_row


def canonical_pair(first: str, second: str) -> tuple[str, str]:
    """Order two profile ids so the lower one comes first."""

    if first == second:
        raise ValueError("A pair needs two distinct profiles")
    return (first, second) if first < second else (second, first)


class FriendRepository:
    async def friendship_exists(self, session: AsyncSession, first: str, second: str) -> bool:
        low, high = canonical_pair(first, second)
        stmt = select(exists().where(Friendship.user_a_id == low, Friendship.user_b_id == high))
        return bool(await session.scalar(stmt))

    async def create_friendship(self, session: AsyncSession, first: str, second: str) -> None:
        low, high = canonical_pair(first, second)
        await insert_row(
            session,
            Friendship,
            {"id": new_id(), "user_a_id": low, "user_b_id": high, "created_at": utcnow()},
        )

    async def delete_friendship(self, session: AsyncSession, first: str, second: str) -> bool:
        low, high = canonical_pair(first, second)
        removed = await delete_rows(session, Friendship, Friendship.user_a_id == low, Friendship.user_b_id == high)
        return removed == 1

    async def request_exists(self, session: AsyncSession, sender_id: str, recipient_id: str) -> bool:
        stmt = select(
            exists().where(FriendRequest.sender_id == sender_id, FriendRequest.recipient_id == recipient_id)
        )
        return bool(await session.scalar(stmt))

    async def create_request(self, session: AsyncSession, sender_id: str, recipient_id: str) -> None:
        low, high = canonical_pair(sender_id, recipient_id)
        await insert_row(
            session,
            FriendRequest,
            {
                "sender_id": sender_id,
                "recipient_id": recipient_id,
                "pair_low_id": low,
                "pair_high_id": high,
                "created_at": utcnow(),
            },
        )

    async def delete_request(self, session: AsyncSession, sender_id: str, recipient_id: str) -> bool:
        removed = await delete_rows(
            session,
            FriendRequest,
            FriendRequest.sender_id == sender_id,
            FriendRequest.recipient_id == recipient_id,
        )
        return removed == 1

    async def requested_among(self, session: AsyncSession, viewer_id: str, candidate_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``candidate_ids`` holding a pending request from ``viewer_id``."""

        ids = set(candidate_ids)
        if not ids:
            return set()
        stmt = select(FriendRequest.recipient_id).where(
            FriendRequest.sender_id == viewer_id, FriendRequest.recipient_id.in_(ids)
        )
        return set(await session.scalars(stmt))

    async def count_friends(self, session: AsyncSession, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Friendship)
            .where(or_(Friendship.user_a_id == user_id, Friendship.user_b_id == user_id))
        )
        return int(await session.scalar(stmt) or 0)

    async def count_incoming_requests(self, session: AsyncSession, user_id: str) -> int:
        stmt = select(func.count()).select_from(FriendRequest).where(FriendRequest.recipient_id == user_id)
        return int(await session.scalar(stmt) or 0)

    async def page_friends(
        self, session: AsyncSession, user_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        other_id = case((Friendship.user_a_id == user_id, Friendship.user_b_id), else_=Friendship.user_a_id)
        stmt = (
            select(other_id.label("user_id"), Profile.username, Friendship.created_at.label("since"))
            .select_from(Friendship)
            .join(Profile, Profile.id == other_id)
            .where(or_(Friendship.user_a_id == user_id, Friendship.user_b_id == user_id))
        )
        predicate = after_cursor(Friendship.created_at, other_id, cursor)
        if predicate is not None:
            stmt = stmt.where(predicate)
        stmt = stmt.order_by(*ordering(Friendship.created_at, other_id)).limit(limit)
        return (await session.execute(stmt)).all()

    async def page_incoming_requests(
        self, session: AsyncSession, user_id: str, cursor: Cursor | None, limit: int
    ) -> Sequence[Row[Any]]:
        stmt = (
            select(FriendRequest.sender_id.label("user_id"), Profile.username, FriendRequest.created_at.label("since"))
            .join(Profile, Profile.id == FriendRequest.sender_id)
            .where(FriendRequest.recipient_id == user_id)
        )
        predicate = after_cursor(FriendRequest.created_at, FriendRequest.sender_id, cursor)
        if predicate is not None:
            stmt = stmt.where(predicate)
        stmt = stmt.order_by(*ordering(FriendRequest.created_at, FriendRequest.sender_id)).limit(limit)
        return (await session.execute(stmt)).all()


__all__ = ["FriendRepository", "canonical_pair"]
