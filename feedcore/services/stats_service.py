"""Recount denormalised counters from the rows they summarise.

Counters are kept exact by the services, so a recount is expected to find no
drift. It exists for repairing data written outside the services and for
verifying the counters in tests.
"""
from __future__ import annotations

import logging
from typing import Literal, Mapping

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings
from ..models import PROFILE_COUNTERS
from ..repositories import (
    POST_COUNTERS,
    CommentRepository,
    FollowRepository,
    FriendRepository,
    LikeRepository,
    PostRepository,
    ProfileRepository,
)
from ..results import Err, Failure, Ok, Result
from ..schemas import CounterDrift, StatsDrift
from .base import TransactionalService

logger = logging.getLogger(__name__)


def _diff(
    subject: Literal["profile", "post"], subject_id: str, stored: object, actual: Mapping[str, int], fields: tuple[str, ...]
) -> StatsDrift:
    drift = StatsDrift(subject=subject, subject_id=subject_id)
    for name in fields:
        current = int(getattr(stored, name))
        if current != actual[name]:
            drift.counters[name] = CounterDrift(stored=current, actual=actual[name])
    return drift


class StatsService(TransactionalService):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        profiles: ProfileRepository,
        follows: FollowRepository,
        friends: FriendRepository,
        posts: PostRepository,
        likes: LikeRepository,
        comments: CommentRepository,
        *,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(session_factory, profiles, settings=settings)
        self._follows = follows
        self._friends = friends
        self._posts = posts
        self._likes = likes
        self._comments = comments

    async def recount_profile(self, user_id: str) -> Result[StatsDrift]:
        async def work(session: AsyncSession) -> Result[StatsDrift]:
            stored = await self._profiles.get_stats(session, user_id)
            if stored is None:
                if await self._profiles.get(session, user_id) is not None:
                    logger.warning("Profile %s has no stats row to recount", user_id)
                return Err(Failure.PROFILE_NOT_FOUND, user_id)
            actual = {
                "follower_count": await self._follows.count_followers(session, user_id),
                "following_count": await self._follows.count_following(session, user_id),
                "friend_count": await self._friends.count_friends(session, user_id),
                "post_count": await self._posts.count_received(session, user_id),
                "comment_count": await self._comments.count_received(session, user_id),
            }
            drift = _diff("profile", user_id, stored, actual, PROFILE_COUNTERS)
            if drift.drifted:
                logger.warning("Profile %s counters drifted: %s", user_id, sorted(drift.counters))
                await self._profiles.overwrite(session, user_id, actual)
            return Ok(drift)

        return await self._run("recount_profile", work, user=user_id)

    async def recount_post(self, post_id: str) -> Result[StatsDrift]:
        async def work(session: AsyncSession) -> Result[StatsDrift]:
            stored = await self._posts.get_stats(session, post_id)
            if stored is None:
                return Err(Failure.POST_NOT_FOUND, post_id)
            actual = {
                "like_count": await self._likes.count_for_post(session, post_id),
                "comment_count": await self._comments.count_for_post(session, post_id),
            }
            drift = _diff("post", post_id, stored, actual, POST_COUNTERS)
            if drift.drifted:
                logger.warning("Post %s counters drifted: %s", post_id, sorted(drift.counters))
                await self._posts.overwrite(session, post_id, actual)
            return Ok(drift)

        return await self._run("recount_post", work, post=post_id)

    async def recount_all_profiles(self) -> Result[list[StatsDrift]]:
        """Recount every profile, one transaction each; returns only the drifted ones."""

        async def list_ids(session: AsyncSession) -> Result[list[str]]:
            return Ok(await self._profiles.list_ids(session))

        ids = await self._read("recount_all_profiles", list_ids)
        if not ids.ok:
            return ids

        drifted: list[StatsDrift] = []
        for user_id in ids.value:
            outcome = await self.recount_profile(user_id)
            if not outcome.ok:
                # Deleted between listing and recount.
                if outcome.failure is Failure.PROFILE_NOT_FOUND:
                    continue
                return outcome
            if outcome.value.drifted:
                drifted.append(outcome.value)
        logger.info("Recounted %d profiles, %d drifted", len(ids.value), len(drifted))
        return Ok(drifted)


__all__ = ["StatsService"]
