"""Follow, friendship and block transitions with their counter bookkeeping."""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Any, Sequence

from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings
from ..pagination import build_page
from ..repositories import BlockRepository, FollowRepository, FriendRepository, ProfileRepository
from ..results import Err, Failure, Ok, Result
from ..schemas import BlockSummary, Cursor, FollowState, FriendState, Page, RelatedProfile
from .base import TransactionalService

logger = logging.getLogger(__name__)


def _self_target(first: str, second: str) -> Err | None:
    if first == second:
        return Err(Failure.CANNOT_TARGET_SELF, first)
    return None


class SocialGraphService(TransactionalService):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        profiles: ProfileRepository,
        follows: FollowRepository,
        friends: FriendRepository,
        blocks: BlockRepository,
        *,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(session_factory, profiles, settings=settings)
        self._follows = follows
        self._friends = friends
        self._blocks = blocks

    # ------------------------------------------------------------------
    # Follow dimension
    # ------------------------------------------------------------------
    async def follow(self, sender_id: str, recipient_id: str) -> Result[FollowState]:
        """Follow a public profile, or file a request with a private one."""

        if failure := _self_target(sender_id, recipient_id):
            return failure

        async def work(session: AsyncSession) -> Result[FollowState]:
            await self._profiles.lock_pair(session, sender_id, recipient_id)
            if failure := await self._require_profiles(session, sender_id, recipient_id):
                return failure
            if await self._blocks.exists_between(session, sender_id, recipient_id):
                return Err(Failure.BLOCKED)
            if await self._follows.edge_exists(session, sender_id, recipient_id):
                return Err(Failure.ALREADY_FOLLOWING)

            recipient = await self._profiles.get(session, recipient_id)
            if recipient.is_private:
                if await self._follows.request_exists(session, sender_id, recipient_id):
                    return Err(Failure.ALREADY_REQUESTED)
                await self._follows.create_request(session, sender_id, recipient_id)
                return Ok(FollowState.REQUESTED)

            # A request left over from when the profile was private is superseded by the edge.
            await self._follows.delete_request(session, sender_id, recipient_id)
            await self._follows.create_edge(session, sender_id, recipient_id)
            if failure := await self._apply_profile_deltas(session, _follow_deltas(sender_id, recipient_id, 1)):
                return failure
            return Ok(FollowState.FOLLOWING)

        return await self._run("follow", work, sender=sender_id, recipient=recipient_id)

    async def unfollow(self, follower_id: str, followee_id: str) -> Result[None]:
        if failure := _self_target(follower_id, followee_id):
            return failure
        return await self._run(
            "unfollow", self._drop_follow_edge(follower_id, followee_id), follower=follower_id, followee=followee_id
        )

    async def remove_follower(self, user_id: str, follower_id: str) -> Result[None]:
        """Drop ``follower_id`` from ``user_id``'s followers."""

        if failure := _self_target(user_id, follower_id):
            return failure
        return await self._run(
            "remove_follower", self._drop_follow_edge(follower_id, user_id), user=user_id, follower=follower_id
        )

    def _drop_follow_edge(self, follower_id: str, followee_id: str):
        async def work(session: AsyncSession) -> Result[None]:
            if not await self._follows.delete_edge(session, follower_id, followee_id):
                return Err(Failure.FOLLOW_NOT_FOUND)
            if failure := await self._apply_profile_deltas(session, _follow_deltas(follower_id, followee_id, -1)):
                return failure
            return Ok(None)

        return work

    async def accept_follow_request(self, sender_id: str, recipient_id: str) -> Result[FollowState]:
        if failure := _self_target(sender_id, recipient_id):
            return failure

        async def work(session: AsyncSession) -> Result[FollowState]:
            await self._profiles.lock_pair(session, sender_id, recipient_id)
            if not await self._follows.delete_request(session, sender_id, recipient_id):
                return Err(Failure.FOLLOW_REQUEST_NOT_FOUND)
            await self._follows.create_edge(session, sender_id, recipient_id)
            if failure := await self._apply_profile_deltas(session, _follow_deltas(sender_id, recipient_id, 1)):
                return failure
            return Ok(FollowState.FOLLOWING)

        return await self._run("accept_follow_request", work, sender=sender_id, recipient=recipient_id)

    async def decline_follow_request(self, sender_id: str, recipient_id: str) -> Result[None]:
        return await self._discard_follow_request("decline_follow_request", sender_id, recipient_id)

    async def cancel_follow_request(self, sender_id: str, recipient_id: str) -> Result[None]:
        return await self._discard_follow_request("cancel_follow_request", sender_id, recipient_id)

    async def _discard_follow_request(self, operation: str, sender_id: str, recipient_id: str) -> Result[None]:
        if failure := _self_target(sender_id, recipient_id):
            return failure

        async def work(session: AsyncSession) -> Result[None]:
            if not await self._follows.delete_request(session, sender_id, recipient_id):
                return Err(Failure.FOLLOW_REQUEST_NOT_FOUND)
            return Ok(None)

        return await self._run(operation, work, sender=sender_id, recipient=recipient_id)

    async def follow_status(self, viewer_id: str, target_id: str) -> Result[FollowState]:
        if failure := _self_target(viewer_id, target_id):
            return failure

        async def work(session: AsyncSession) -> Result[FollowState]:
            if failure := await self._require_profiles(session, viewer_id, target_id):
                return failure
            if await self._follows.edge_exists(session, viewer_id, target_id):
                return Ok(FollowState.FOLLOWING)
            if await self._follows.request_exists(session, viewer_id, target_id):
                return Ok(FollowState.REQUESTED)
            return Ok(FollowState.NOT_FOLLOWING)

        return await self._read("follow_status", work)

    # ------------------------------------------------------------------
    # Friend dimension
    # ------------------------------------------------------------------
    async def send_friend_request(self, sender_id: str, recipient_id: str) -> Result[FriendState]:
        """Ask ``recipient_id`` to be friends.

        When the recipient already has a pending request to the sender the two
        requests meet: the reverse request is consumed and the friendship is
        created straight away, yielding ``FriendState.FRIENDS``. Otherwise the
        request is stored and ``FriendState.OUTBOUND_REQUEST`` is returned.
        """

        if failure := _self_target(sender_id, recipient_id):
            return failure

        async def work(session: AsyncSession) -> Result[FriendState]:
            await self._profiles.lock_pair(session, sender_id, recipient_id)
            if failure := await self._require_profiles(session, sender_id, recipient_id):
                return failure
            if await self._blocks.exists_between(session, sender_id, recipient_id):
                return Err(Failure.BLOCKED)
            if await self._friends.friendship_exists(session, sender_id, recipient_id):
                return Err(Failure.ALREADY_FRIENDS)

            if await self._friends.delete_request(session, recipient_id, sender_id):
                await self._friends.create_friendship(session, sender_id, recipient_id)
                if failure := await self._apply_profile_deltas(session, _friend_deltas(sender_id, recipient_id, 1)):
                    return failure
                return Ok(FriendState.FRIENDS)

            if await self._friends.request_exists(session, sender_id, recipient_id):
                return Err(Failure.ALREADY_REQUESTED)
            await self._friends.create_request(session, sender_id, recipient_id)
            return Ok(FriendState.OUTBOUND_REQUEST)

        return await self._run("send_friend_request", work, sender=sender_id, recipient=recipient_id)

    async def accept_friend_request(self, sender_id: str, recipient_id: str) -> Result[FriendState]:
        if failure := _self_target(sender_id, recipient_id):
            return failure

        async def work(session: AsyncSession) -> Result[FriendState]:
            await self._profiles.lock_pair(session, sender_id, recipient_id)
            if not await self._friends.delete_request(session, sender_id, recipient_id):
                return Err(Failure.FRIEND_REQUEST_NOT_FOUND)
            await self._friends.create_friendship(session, sender_id, recipient_id)
            if failure := await self._apply_profile_deltas(session, _friend_deltas(sender_id, recipient_id, 1)):
                return failure
            return Ok(FriendState.FRIENDS)

        return await self._run("accept_friend_request", work, sender=sender_id, recipient=recipient_id)

    async def decline_friend_request(self, sender_id: str, recipient_id: str) -> Result[None]:
        return await self._discard_friend_request("decline_friend_request", sender_id, recipient_id)

    async def cancel_friend_request(self, sender_id: str, recipient_id: str) -> Result[None]:
        return await self._discard_friend_request("cancel_friend_request", sender_id, recipient_id)

    async def _discard_friend_request(self, operation: str, sender_id: str, recipient_id: str) -> Result[None]:
        if failure := _self_target(sender_id, recipient_id):
            return failure

        async def work(session: AsyncSession) -> Result[None]:
            if not await self._friends.delete_request(session, sender_id, recipient_id):
                return Err(Failure.FRIEND_REQUEST_NOT_FOUND)
            return Ok(None)

        return await self._run(operation, work, sender=sender_id, recipient=recipient_id)

    async def remove_friend(self, user_id: str, friend_id: str) -> Result[None]:
        if failure := _self_target(user_id, friend_id):
            return failure

        async def work(session: AsyncSession) -> Result[None]:
            if not await self._friends.delete_friendship(session, user_id, friend_id):
                return Err(Failure.FRIENDSHIP_NOT_FOUND)
            if failure := await self._apply_profile_deltas(session, _friend_deltas(user_id, friend_id, -1)):
                return failure
            return Ok(None)

        return await self._run("remove_friend", work, user=user_id, friend=friend_id)

    async def friend_status(self, viewer_id: str, target_id: str) -> Result[FriendState]:
        if failure := _self_target(viewer_id, target_id):
            return failure

        async def work(session: AsyncSession) -> Result[FriendState]:
            if failure := await self._require_profiles(session, viewer_id, target_id):
                return failure
            if await self._friends.friendship_exists(session, viewer_id, target_id):
                return Ok(FriendState.FRIENDS)
            if await self._friends.request_exists(session, viewer_id, target_id):
                return Ok(FriendState.OUTBOUND_REQUEST)
            if await self._friends.request_exists(session, target_id, viewer_id):
                return Ok(FriendState.INBOUND_REQUEST)
            return Ok(FriendState.NOT_FRIENDS)

        return await self._read("friend_status", work)

    async def count_friend_requests(self, user_id: str) -> Result[int]:
        async def work(session: AsyncSession) -> Result[int]:
            if failure := await self._require_profiles(session, user_id):
                return failure
            return Ok(await self._friends.count_incoming_requests(session, user_id))

        return await self._read("count_friend_requests", work)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------
    async def block(self, blocker_id: str, blocked_id: str) -> Result[BlockSummary]:
        """Block a profile and tear down every relationship between the pair."""

        if failure := _self_target(blocker_id, blocked_id):
            return failure

        async def work(session: AsyncSession) -> Result[BlockSummary]:
            await self._profiles.lock_pair(session, blocker_id, blocked_id)
            if failure := await self._require_profiles(session, blocker_id, blocked_id):
                return failure
            if await self._blocks.edge_exists(session, blocker_id, blocked_id):
                return Err(Failure.ALREADY_BLOCKED)
            await self._blocks.create(session, blocker_id, blocked_id)

            deltas: defaultdict[str, Counter[str]] = defaultdict(Counter)
            edges = requests = friend_requests = 0
            for follower, followee in ((blocker_id, blocked_id), (blocked_id, blocker_id)):
                if await self._follows.delete_edge(session, follower, followee):
                    edges += 1
                    for profile_id, changes in _follow_deltas(follower, followee, -1).items():
                        deltas[profile_id].update(changes)
                if await self._follows.delete_request(session, follower, followee):
                    requests += 1
                if await self._friends.delete_request(session, follower, followee):
                    friend_requests += 1

            friendship_removed = await self._friends.delete_friendship(session, blocker_id, blocked_id)
            if friendship_removed:
                for profile_id, changes in _friend_deltas(blocker_id, blocked_id, -1).items():
                    deltas[profile_id].update(changes)

            if failure := await self._apply_profile_deltas(session, deltas):
                return failure
            return Ok(
                BlockSummary(
                    follow_edges_removed=edges,
                    follow_requests_removed=requests,
                    friendship_removed=friendship_removed,
                    friend_requests_removed=friend_requests,
                )
            )

        return await self._run("block", work, blocker=blocker_id, blocked=blocked_id)

    async def unblock(self, blocker_id: str, blocked_id: str) -> Result[None]:
        if failure := _self_target(blocker_id, blocked_id):
            return failure

        async def work(session: AsyncSession) -> Result[None]:
            if not await self._blocks.delete(session, blocker_id, blocked_id):
                return Err(Failure.BLOCK_NOT_FOUND)
            return Ok(None)

        return await self._run("unblock", work, blocker=blocker_id, blocked=blocked_id)

    async def is_blocked(self, first_id: str, second_id: str) -> Result[bool]:
        if failure := _self_target(first_id, second_id):
            return failure

        async def work(session: AsyncSession) -> Result[bool]:
            return Ok(await self._blocks.exists_between(session, first_id, second_id))

        return await self._read("is_blocked", work)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    async def list_followers(
        self,
        user_id: str,
        *,
        viewer_id: str | None = None,
        cursor: Cursor | None = None,
        page_size: int | None = None,
    ) -> Result[Page[RelatedProfile]]:
        return await self._list("list_followers", self._follows.page_followers, user_id, viewer_id, cursor, page_size)

    async def list_following(
        self,
        user_id: str,
        *,
        viewer_id: str | None = None,
        cursor: Cursor | None = None,
        page_size: int | None = None,
    ) -> Result[Page[RelatedProfile]]:
        return await self._list("list_following", self._follows.page_following, user_id, viewer_id, cursor, page_size)

    async def list_friends(
        self,
        user_id: str,
        *,
        viewer_id: str | None = None,
        cursor: Cursor | None = None,
        page_size: int | None = None,
    ) -> Result[Page[RelatedProfile]]:
        return await self._list("list_friends", self._friends.page_friends, user_id, viewer_id, cursor, page_size)

    async def list_follow_requests(
        self, user_id: str, *, cursor: Cursor | None = None, page_size: int | None = None
    ) -> Result[Page[RelatedProfile]]:
        return await self._list(
            "list_follow_requests", self._follows.page_incoming_requests, user_id, None, cursor, page_size
        )

    async def list_friend_requests(
        self, user_id: str, *, cursor: Cursor | None = None, page_size: int | None = None
    ) -> Result[Page[RelatedProfile]]:
        return await self._list(
            "list_friend_requests", self._friends.page_incoming_requests, user_id, None, cursor, page_size
        )

    async def list_blocked(
        self, user_id: str, *, cursor: Cursor | None = None, page_size: int | None = None
    ) -> Result[Page[RelatedProfile]]:
        return await self._list("list_blocked", self._blocks.page_blocked, user_id, None, cursor, page_size)

    async def _list(
        self,
        operation: str,
        fetch,
        user_id: str,
        viewer_id: str | None,
        cursor: Cursor | None,
        page_size: int | None,
    ) -> Result[Page[RelatedProfile]]:
        size = self._page_size(page_size)

        async def work(session: AsyncSession) -> Result[Page[RelatedProfile]]:
            if failure := await self._require_profiles(session, user_id):
                return failure
            rows = await fetch(session, user_id, cursor, size + 1)
            return Ok(await self._related_page(session, rows, size, viewer_id))

        return await self._read(operation, work)

    async def _related_page(
        self, session: AsyncSession, rows: Sequence[Row[Any]], size: int, viewer_id: str | None
    ) -> Page[RelatedProfile]:
        page = build_page(rows, size, key=lambda row: Cursor(created_at=row.since, id=row.user_id))
        items = [RelatedProfile(user_id=row.user_id, username=row.username, since=row.since) for row in page.items]
        if viewer_id is not None and items:
            listed = [item.user_id for item in items]
            # One query per flag for the whole page.
            following = await self._follows.following_among(session, viewer_id, listed)
            requested = await self._friends.requested_among(session, viewer_id, listed)
            for item in items:
                item.is_following = item.user_id in following
                item.is_friend_requested = item.user_id in requested
        return Page[RelatedProfile](items=items, next_cursor=page.next_cursor)


def _follow_deltas(follower_id: str, followee_id: str, step: int) -> dict[str, dict[str, int]]:
    return {follower_id: {"following_count": step}, followee_id: {"follower_count": step}}


def _friend_deltas(first: str, second: str, step: int) -> dict[str, dict[str, int]]:
    return {first: {"friend_count": step}, second: {"friend_count": step}}


__all__ = ["SocialGraphService"]
