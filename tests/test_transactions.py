"""Atomicity under store faults, cancellation and concurrent writers."""
from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import delete
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from feedcore.models import PostStats, ProfileStats
from feedcore.repositories import BlockRepository, FollowRepository, FriendRepository, ProfileRepository
from feedcore.results import Failure
from feedcore.schemas import FollowState, FriendState
from feedcore.services import SocialGraphService


class _FailingProfiles(ProfileRepository):
    async def adjust(self, session, profile_id, deltas):
        raise OperationalError("UPDATE profile_stats", {}, Exception("disk I/O error"))


class _CancelledProfiles(ProfileRepository):
    async def adjust(self, session, profile_id, deltas):
        await super().adjust(session, profile_id, deltas)
        raise asyncio.CancelledError()


class _RecordingProfiles(ProfileRepository):
    def __init__(self) -> None:
        self.locked: list[list[str]] = []

    async def lock_pair(self, session, first, second):
        locked = await super().lock_pair(session, first, second)
        self.locked.append(locked)
        return locked


def _graph_with(services, settings, profiles: ProfileRepository) -> SocialGraphService:
    return SocialGraphService(
        services.session_factory,
        profiles,
        FollowRepository(),
        FriendRepository(),
        BlockRepository(),
        settings=settings,
    )


async def test_store_error_rolls_back_and_is_retryable(services, settings, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")
    graph = _graph_with(services, settings, _FailingProfiles())

    result = await graph.follow(alice, bob)

    assert result.failure is Failure.STORE_ERROR
    assert result.retryable
    assert (await services.social_graph.follow_status(alice, bob)).unwrap() is FollowState.NOT_FOLLOWING
    assert (await stats_of(alice)).following_count == 0


async def test_cancellation_propagates_and_leaves_nothing_behind(services, settings, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")
    graph = _graph_with(services, settings, _CancelledProfiles())

    with pytest.raises(asyncio.CancelledError):
        await graph.follow(alice, bob)

    assert (await services.social_graph.follow_status(alice, bob)).unwrap() is FollowState.NOT_FOLLOWING
    assert (await stats_of(alice)).following_count == 0
    assert (await stats_of(bob)).follower_count == 0


async def test_missing_profile_stats_row_aborts_the_transition(services, make_profile) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")
    async with services.session_factory() as session:
        await session.execute(delete(ProfileStats).where(ProfileStats.profile_id == bob))
        await session.commit()

    assert (await services.social_graph.follow(alice, bob)).failure is Failure.PROFILE_NOT_FOUND
    assert (await services.social_graph.list_following(alice)).unwrap().items == []


async def test_missing_post_stats_row_undoes_the_like(services, make_profile, make_post) -> None:
    alice = await make_profile("alice")
    post = await make_post(alice)
    async with services.session_factory() as session:
        await session.execute(delete(PostStats).where(PostStats.post_id == post))
        await session.commit()

    assert (await services.posts.like_post(alice, post)).failure is Failure.POST_NOT_FOUND
    assert (await services.posts.has_liked(alice, post)).unwrap() is False


async def test_concurrent_likes_count_once(services, make_profile, make_post) -> None:
    alice = await make_profile("alice")
    post = await make_post(alice)

    results = await asyncio.gather(
        services.posts.like_post(alice, post),
        services.posts.like_post(alice, post),
    )

    assert sorted(result.ok for result in results) == [False, True]
    failed = next(result for result in results if not result.ok)
    assert failed.failure is Failure.ALREADY_LIKED
    assert (await services.posts.get_post_stats(post)).unwrap().like_count == 1


async def test_concurrent_follows_of_one_profile(services, make_profile, stats_of, assert_no_drift) -> None:
    star = await make_profile("star")
    fans = [await make_profile(f"fan{i}") for i in range(4)]

    results = await asyncio.gather(*(services.social_graph.follow(fan, star) for fan in fans))

    assert all(result.unwrap() is FollowState.FOLLOWING for result in results)
    assert (await stats_of(star)).follower_count == 4
    await assert_no_drift()


async def test_crossing_friend_requests_never_leave_two_requests(services, make_profile, assert_no_drift) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")

    results = await asyncio.gather(
        services.social_graph.send_friend_request(alice, bob),
        services.social_graph.send_friend_request(bob, alice),
    )

    outcomes = sorted(result.value if result.ok else result.failure for result in results)
    assert outcomes in (
        sorted([FriendState.OUTBOUND_REQUEST, FriendState.FRIENDS]),
        sorted([FriendState.OUTBOUND_REQUEST, Failure.ALREADY_REQUESTED]),
    )
    pending = (await services.social_graph.count_friend_requests(alice)).unwrap()
    pending += (await services.social_graph.count_friend_requests(bob)).unwrap()
    friends = (await services.social_graph.friend_status(alice, bob)).unwrap() is FriendState.FRIENDS
    assert pending + int(friends) == 1
    await assert_no_drift()


def test_pair_lock_selects_for_update_in_id_order() -> None:
    stmt = ProfileRepository().lock_statement("bob", "alice")
    sql = str(stmt.compile(dialect=postgresql.dialect()))

    assert "FOR UPDATE" in sql
    assert "ORDER BY profile_stats.profile_id ASC" in sql


async def test_edge_transitions_lock_both_profiles_first(services, settings, make_profile) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob", is_private=True)
    carol = await make_profile("carol")
    profiles = _RecordingProfiles()
    graph = _graph_with(services, settings, profiles)

    assert (await graph.follow(alice, bob)).unwrap() is FollowState.REQUESTED
    (await graph.accept_follow_request(alice, bob)).unwrap()
    assert (await graph.send_friend_request(alice, carol)).unwrap() is FriendState.OUTBOUND_REQUEST
    (await graph.accept_friend_request(alice, carol)).unwrap()
    (await graph.block(carol, bob)).unwrap()

    assert profiles.locked == [
        sorted([alice, bob]),
        sorted([alice, bob]),
        sorted([alice, carol]),
        sorted([alice, carol]),
        sorted([bob, carol]),
    ]
