"""Transaction boundary shared by every service.

Each public operation runs inside exactly one ``AsyncSession`` transaction.
The operation body returns a :class:`~feedcore.results.Result`; the boundary
commits on ``Ok`` and rolls back on ``Err``. Unique-constraint races and
unexpected store faults are translated into failures here so no SQLAlchemy
exception reaches the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings, get_settings
from ..pagination import resolve_page_size
from ..repositories import DuplicateRecordError, ProfileRepository
from ..results import Err, Failure, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")
Work = Callable[[AsyncSession], Awaitable[Result[T]]]

# Table whose unique constraint rejected an insert -> failure reported to the caller.
CONFLICT_FAILURES: dict[str, Failure] = {
    "profiles": Failure.PROFILE_ALREADY_EXISTS,
    "profile_stats": Failure.PROFILE_ALREADY_EXISTS,
    "follows": Failure.ALREADY_FOLLOWING,
    "follow_requests": Failure.ALREADY_REQUESTED,
    "friendships": Failure.ALREADY_FRIENDS,
    "friend_requests": Failure.ALREADY_REQUESTED,
    "blocks": Failure.ALREADY_BLOCKED,
    "post_likes": Failure.ALREADY_LIKED,
}


class TransactionalService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        profiles: ProfileRepository,
        *,
        settings: Settings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._profiles = profiles
        self._settings = settings or get_settings()

    def _page_size(self, requested: int | None) -> int:
        return resolve_page_size(
            requested,
            default=self._settings.default_page_size,
            cap=self._settings.max_page_size,
        )

    async def _run(self, operation: str, work: Work[T], **context: Any) -> Result[T]:
        """Execute ``work`` in a fresh transaction and commit only on success."""

        try:
            async with self._session_factory() as session:
                outcome = await work(session)
                if outcome.ok:
                    await session.commit()
                else:
                    await session.rollback()
        except DuplicateRecordError as exc:
            failure = CONFLICT_FAILURES.get(exc.table)
            if failure is None:
                logger.exception("%s hit an unmapped unique constraint on %s", operation, exc.table)
                return Err(Failure.STORE_ERROR, str(exc))
            logger.info("%s rejected by unique constraint on %s %s", operation, exc.table, context)
            return Err(failure, str(exc))
        except SQLAlchemyError:
            logger.exception("%s failed against the store %s", operation, context)
            return Err(Failure.STORE_ERROR, f"{operation} could not be completed")

        if outcome.ok:
            logger.info("%s committed %s", operation, context)
        return outcome

    async def _read(self, operation: str, work: Work[T]) -> Result[T]:
        """Run a read-only ``work`` body; nothing it touches is ever committed."""

        try:
            async with self._session_factory() as session:
                outcome = await work(session)
                await session.rollback()
                return outcome
        except SQLAlchemyError:
            logger.exception("%s failed against the store", operation)
            return Err(Failure.STORE_ERROR, f"{operation} could not be completed")

    async def _require_profiles(self, session: AsyncSession, *profile_ids: str) -> Err | None:
        """Return ``Err(ProfileNotFound)`` unless every profile and its stats row exist."""

        found = await self._profiles.load_with_stats(session, profile_ids)
        missing = sorted(set(profile_ids) - set(found))
        if not missing:
            return None
        for profile_id in missing:
            if await self._profiles.get(session, profile_id) is not None:
                logger.warning("Profile %s has no stats row", profile_id)
        return Err(Failure.PROFILE_NOT_FOUND, ", ".join(missing))

    async def _apply_profile_deltas(self, session: AsyncSession, deltas: Mapping[str, Mapping[str, int]]) -> Err | None:
        """Apply counter deltas per profile in id order; lock order is fixed to avoid deadlocks."""

        for profile_id in sorted(deltas):
            if not await self._profiles.adjust(session, profile_id, deltas[profile_id]):
                logger.warning("Counter update matched no stats row for profile %s", profile_id)
                return Err(Failure.PROFILE_NOT_FOUND, profile_id)
        return None


__all__ = ["TransactionalService", "CONFLICT_FAILURES"]
