"""Follow edges, follow requests and the counters they drive."""
from __future__ import annotations

from feedcore.results import Failure
from feedcore.schemas import FollowState


async def test_follow_public_profile_updates_both_counters(services, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")

    result = await services.social_graph.follow(alice, bob)

    assert result.unwrap() is FollowState.FOLLOWING
    assert (await stats_of(alice)).following_count == 1
    assert (await stats_of(bob)).follower_count == 1
    assert (await services.social_graph.follow_status(alice, bob)).unwrap() is FollowState.FOLLOWING


async def test_follow_then_unfollow_restores_counters(services, make_profile, stats_of, assert_no_drift) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")

    (await services.social_graph.follow(alice, bob)).unwrap()
    (await services.social_graph.unfollow(alice, bob)).unwrap()

    assert (await stats_of(alice)).following_count == 0
    assert (await stats_of(bob)).follower_count == 0
    assert (await services.social_graph.follow_status(alice, bob)).unwrap() is FollowState.NOT_FOLLOWING
    assert (await services.social_graph.unfollow(alice, bob)).failure is Failure.FOLLOW_NOT_FOUND
    await assert_no_drift()


async def test_second_follow_is_rejected(services, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")
    (await services.social_graph.follow(alice, bob)).unwrap()

    result = await services.social_graph.follow(alice, bob)

    assert result.failure is Failure.ALREADY_FOLLOWING
    assert (await stats_of(bob)).follower_count == 1


async def test_follow_private_profile_files_a_request(services, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob", is_private=True)

    assert (await services.social_graph.follow(alice, bob)).unwrap() is FollowState.REQUESTED
    assert (await services.social_graph.follow(alice, bob)).failure is Failure.ALREADY_REQUESTED
    assert (await stats_of(bob)).follower_count == 0
    assert (await services.social_graph.follow_status(alice, bob)).unwrap() is FollowState.REQUESTED

    requests = (await services.social_graph.list_follow_requests(bob)).unwrap()
    assert [item.user_id for item in requests.items] == [alice]


async def test_accept_follow_request_creates_edge(services, make_profile, stats_of, assert_no_drift) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob", is_private=True)
    (await services.social_graph.follow(alice, bob)).unwrap()

    assert (await services.social_graph.accept_follow_request(alice, bob)).unwrap() is FollowState.FOLLOWING

    assert (await stats_of(alice)).following_count == 1
    assert (await stats_of(bob)).follower_count == 1
    assert (await services.social_graph.list_follow_requests(bob)).unwrap().items == []
    result = await services.social_graph.accept_follow_request(alice, bob)
    assert result.failure is Failure.FOLLOW_REQUEST_NOT_FOUND
    await assert_no_drift()


async def test_decline_and_cancel_remove_the_request(services, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    carol = await make_profile("carol")
    bob = await make_profile("bob", is_private=True)
    (await services.social_graph.follow(alice, bob)).unwrap()
    (await services.social_graph.follow(carol, bob)).unwrap()

    (await services.social_graph.decline_follow_request(alice, bob)).unwrap()
    (await services.social_graph.cancel_follow_request(carol, bob)).unwrap()

    assert (await services.social_graph.list_follow_requests(bob)).unwrap().items == []
    assert (await services.social_graph.decline_follow_request(alice, bob)).failure is Failure.FOLLOW_REQUEST_NOT_FOUND
    assert (await services.social_graph.cancel_follow_request(carol, bob)).failure is Failure.FOLLOW_REQUEST_NOT_FOUND
    assert (await stats_of(bob)).follower_count == 0


async def test_remove_follower_drops_the_inbound_edge(services, make_profile, stats_of) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob")
    (await services.social_graph.follow(alice, bob)).unwrap()

    (await services.social_graph.remove_follower(bob, alice)).unwrap()

    assert (await stats_of(alice)).following_count == 0
    assert (await stats_of(bob)).follower_count == 0
    assert (await services.social_graph.remove_follower(bob, alice)).failure is Failure.FOLLOW_NOT_FOUND


async def test_follow_after_going_public_supersedes_pending_request(services, make_profile) -> None:
    alice = await make_profile("alice")
    bob = await make_profile("bob", is_private=True)
    (await services.social_graph.follow(alice, bob)).unwrap()
    (await services.profiles.set_privacy(bob, False)).unwrap()

    assert (await services.social_graph.follow(alice, bob)).unwrap() is FollowState.FOLLOWING
    assert (await services.social_graph.list_follow_requests(bob)).unwrap().items == []


async def test_self_and_unknown_targets_are_rejected(services, make_profile) -> None:
    alice = await make_profile("alice")

    assert (await services.social_graph.follow(alice, alice)).failure is Failure.CANNOT_TARGET_SELF
    assert (await services.social_graph.unfollow(alice, alice)).failure is Failure.CANNOT_TARGET_SELF
    assert (await services.social_graph.follow(alice, "ghost")).failure is Failure.PROFILE_NOT_FOUND
    assert (await services.social_graph.follow_status(alice, "ghost")).failure is Failure.PROFILE_NOT_FOUND


async def test_listings_annotate_viewer_flags(services, make_profile) -> None:
    star = await make_profile("star")
    viewer = await make_profile("viewer")
    followed = await make_profile("followed")
    requested = await make_profile("requested")
    stranger = await make_profile("stranger")
    for fan in (followed, requested, stranger):
        (await services.social_graph.follow(fan, star)).unwrap()
    (await services.social_graph.follow(viewer, followed)).unwrap()
    (await services.social_graph.send_friend_request(viewer, requested)).unwrap()

    page = (await services.social_graph.list_followers(star, viewer_id=viewer)).unwrap()
    flags = {item.user_id: (item.is_following, item.is_friend_requested) for item in page.items}
    assert flags == {
        followed: (True, False),
        requested: (False, True),
        stranger: (False, False),
    }

    anonymous = (await services.social_graph.list_followers(star)).unwrap()
    assert all(item.is_following is None for item in anonymous.items)

    following = (await services.social_graph.list_following(viewer)).unwrap()
    assert [item.username for item in following.items] == ["followed"]
