"""Profile lifecycle: creation with a zeroed counter row, privacy and reads."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from ..results import Err, Failure, Ok, Result
from ..schemas import ProfileRecord, ProfileStatsRecord
from .base import TransactionalService


class ProfileService(TransactionalService):
    async def create_profile(self, user_id: str, username: str, *, is_private: bool = False) -> Result[ProfileRecord]:
        async def work(session: AsyncSession) -> Result[ProfileRecord]:
            profile = await self._profiles.create(
                session, profile_id=user_id, username=username, is_private=is_private
            )
            return Ok(ProfileRecord.model_validate(profile))

        return await self._run("create_profile", work, user=user_id)

    async def set_privacy(self, user_id: str, is_private: bool) -> Result[ProfileRecord]:
        async def work(session: AsyncSession) -> Result[ProfileRecord]:
            if not await self._profiles.set_private(session, user_id, is_private):
                return Err(Failure.PROFILE_NOT_FOUND, user_id)
            profile = await self._profiles.get(session, user_id)
            return Ok(ProfileRecord.model_validate(profile))

        return await self._run("set_privacy", work, user=user_id, is_private=is_private)

    async def get_profile(self, user_id: str) -> Result[ProfileRecord]:
        async def work(session: AsyncSession) -> Result[ProfileRecord]:
            profile = await self._profiles.get(session, user_id)
            if profile is None:
                return Err(Failure.PROFILE_NOT_FOUND, user_id)
            return Ok(ProfileRecord.model_validate(profile))

        return await self._read("get_profile", work)

    async def get_profile_stats(self, user_id: str) -> Result[ProfileStatsRecord]:
        async def work(session: AsyncSession) -> Result[ProfileStatsRecord]:
            stats = await self._profiles.get_stats(session, user_id)
            if stats is None:
                return Err(Failure.PROFILE_NOT_FOUND, user_id)
            return Ok(ProfileStatsRecord.model_validate(stats))

        return await self._read("get_profile_stats", work)


__all__ = ["ProfileService"]
