"""Keyset pagination: cursor tokens, page sizing and stability across writes."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from feedcore.pagination import build_page, resolve_page_size
from feedcore.schemas import Cursor


def test_resolve_page_size_defaults_and_clamps() -> None:
    assert resolve_page_size(None, default=10, cap=50) == 10
    assert resolve_page_size(None, default=80, cap=50) == 50
    assert resolve_page_size(0, default=10, cap=50) == 1
    assert resolve_page_size(-3, default=10, cap=50) == 1
    assert resolve_page_size(500, default=10, cap=50) == 50
    assert resolve_page_size(7, default=10, cap=50) == 7


def test_cursor_token_is_url_safe_and_decodes_back() -> None:
    cursor = Cursor(created_at=datetime(2026, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc), id="user/+?")
    token = cursor.encode()
    assert "=" not in token
    assert "+" not in token and "/" not in token
    assert Cursor.decode(token) == cursor


@pytest.mark.parametrize("token", ["", "not-a-cursor", "e30", "!!!"])
def test_malformed_cursor_token_raises_value_error(token: str) -> None:
    with pytest.raises(ValueError):
        Cursor.decode(token)


def test_build_page_drops_look_ahead_row_and_keys_on_last_item() -> None:
    rows = [("a", 1), ("b", 2), ("c", 3)]
    stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
    page = build_page(rows, 2, key=lambda row: Cursor(created_at=stamp, id=row[0]))
    assert page.items == [("a", 1), ("b", 2)]
    assert page.has_more
    assert page.next_cursor.id == "b"


def test_build_page_without_surplus_has_no_cursor() -> None:
    stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
    page = build_page([("a", 1)], 2, key=lambda row: Cursor(created_at=stamp, id=row[0]))
    assert page.items == [("a", 1)]
    assert page.next_cursor is None
    assert not page.has_more


async def test_followers_pages_cover_every_item_once_despite_inserts(services, make_profile) -> None:
    star = await make_profile("star")
    fans = [await make_profile(f"fan{i}") for i in range(7)]
    for fan in fans:
        (await services.social_graph.follow(fan, star)).unwrap()

    seen: list[str] = []
    cursor = None
    late = 0
    while True:
        page = (await services.social_graph.list_followers(star, cursor=cursor, page_size=3)).unwrap()
        seen.extend(item.user_id for item in page.items)
        # Unrelated writes between page fetches.
        newcomer = await make_profile(f"late{late}")
        late += 1
        (await services.social_graph.follow(newcomer, star)).unwrap()
        if not page.has_more:
            break
        cursor = page.next_cursor

    assert len(seen) == len(set(seen))
    assert seen[: len(fans)] == fans


async def test_page_size_is_clamped_to_at_least_one(services, make_profile) -> None:
    star = await make_profile("star")
    for i in range(3):
        (await services.social_graph.follow(await make_profile(f"fan{i}"), star)).unwrap()

    page = (await services.social_graph.list_followers(star, page_size=0)).unwrap()
    assert len(page.items) == 1
    assert page.has_more


async def test_comments_page_newest_first_and_skip_deleted(services, make_profile, make_post) -> None:
    owner = await make_profile("owner")
    post = await make_post(owner)
    comment_ids = []
    for i in range(5):
        comment = (await services.posts.comment_on_post(owner, post, f"comment {i}")).unwrap()
        comment_ids.append(comment.id)

    first = (await services.posts.paginate_comments(post, page_size=2)).unwrap()
    assert [item.id for item in first.items] == comment_ids[:-3:-1]
    assert first.items[0].username == "owner"

    # A newer comment lands before the cursor; a not-yet-seen one is deleted.
    (await services.posts.comment_on_post(owner, post, "late")).unwrap()
    (await services.posts.delete_comment(owner, comment_ids[1], post)).unwrap()

    rest: list[str] = []
    cursor = first.next_cursor
    while cursor is not None:
        page = (await services.posts.paginate_comments(post, cursor=Cursor.decode(cursor.encode()), page_size=2)).unwrap()
        rest.extend(item.id for item in page.items)
        cursor = page.next_cursor

    assert rest == [comment_ids[2], comment_ids[0]]


async def test_listing_unknown_post_or_profile_fails(services) -> None:
    assert (await services.posts.paginate_comments("missing")).failure == "PostNotFound"
    assert (await services.social_graph.list_followers("missing")).failure == "ProfileNotFound"


async def test_profile_posts_page_newest_first_and_ignore_new_posts(services, make_profile, make_post) -> None:
    owner = await make_profile("owner")
    friend = await make_profile("friend")
    post_ids = [await make_post(friend if i % 2 else owner, owner, f"post {i}") for i in range(5)]
    await make_post(friend)

    first = (await services.posts.paginate_posts(owner, page_size=2)).unwrap()
    assert [item.id for item in first.items] == post_ids[:-3:-1]
    assert all(item.recipient_id == owner for item in first.items)

    await make_post(owner, owner, "late")

    rest: list[str] = []
    cursor = first.next_cursor
    while cursor is not None:
        page = (await services.posts.paginate_posts(owner, cursor=cursor, page_size=2)).unwrap()
        rest.extend(item.id for item in page.items)
        cursor = page.next_cursor

    assert rest == post_ids[-3::-1]
    assert (await services.posts.paginate_posts("missing")).failure == "ProfileNotFound"
