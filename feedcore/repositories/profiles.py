"""Persistence for profiles and the profile counter rows."""
from __future__ import annotations

from typing import Iterable, Mapping

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import PROFILE_COUNTERS, Profile, ProfileStats
from ..models.base import utcnow
from .base import apply_deltas, insert_row


class ProfileRepository:
    async def get(self, session: AsyncSession, profile_id: str) -> Profile | None:
        return await session.scalar(select(Profile).where(Profile.id == profile_id))

    async def get_stats(self, session: AsyncSession, profile_id: str) -> ProfileStats | None:
        return await session.scalar(select(ProfileStats).where(ProfileStats.profile_id == profile_id))

    async def load_with_stats(self, session: AsyncSession, profile_ids: Iterable[str]) -> dict[str, Profile]:
        """Return the requested profiles that also own a stats row, keyed by id."""

        ids = set(profile_ids)
        stmt = (
            select(Profile)
            .join(ProfileStats, ProfileStats.profile_id == Profile.id)
            .where(Profile.id.in_(ids))
        )
        return {profile.id: profile for profile in await session.scalars(stmt)}

    def lock_statement(self, first: str, second: str) -> Select:
        return (
            select(ProfileStats.profile_id)
            .where(ProfileStats.profile_id.in_({first, second}))
            .order_by(ProfileStats.profile_id.asc())
            .with_for_update()
        )

    async def lock_pair(self, session: AsyncSession, first: str, second: str) -> list[str]:
        """Row-lock both counter rows in id order until the transaction ends.

        Every transition that creates or removes an edge between two profiles
        takes this lock first, so a block and a follow on the same pair can
        never interleave. Dialects without ``FOR UPDATE`` (SQLite) serialise
        writers on their own.
        """

        return list(await session.scalars(self.lock_statement(first, second)))

    async def create(self, session: AsyncSession, *, profile_id: str, username: str, is_private: bool) -> Profile:
        now = utcnow()
        await insert_row(
            session,
            Profile,
            {"id": profile_id, "username": username, "is_private": is_private, "created_at": now},
        )
        await insert_row(session, ProfileStats, {"profile_id": profile_id, "updated_at": now})
        return Profile(id=profile_id, username=username, is_private=is_private, created_at=now)

    async def set_private(self, session: AsyncSession, profile_id: str, is_private: bool) -> bool:
        result = await session.execute(
            update(Profile)
            .where(Profile.id == profile_id)
            .values(is_private=is_private)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0) == 1

    async def adjust(self, session: AsyncSession, profile_id: str, deltas: Mapping[str, int]) -> bool:
        """Atomically shift counters; False when the stats row is missing."""

        unknown = set(deltas) - set(PROFILE_COUNTERS)
        if unknown:
            raise ValueError(f"Unknown profile counters: {sorted(unknown)}")
        return await apply_deltas(
            session, ProfileStats, ProfileStats.profile_id, profile_id, deltas, updated_at=utcnow()
        )

    async def overwrite(self, session: AsyncSession, profile_id: str, counters: Mapping[str, int]) -> None:
        await session.execute(
            update(ProfileStats)
            .where(ProfileStats.profile_id == profile_id)
            .values(**counters, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    async def list_ids(self, session: AsyncSession) -> list[str]:
        return list(await session.scalars(select(Profile.id).order_by(Profile.id.asc())))


__all__ = ["ProfileRepository"]
