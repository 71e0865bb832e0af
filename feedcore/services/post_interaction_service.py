"""Posts, likes and comments together with their counters."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings
from ..pagination import build_page
from ..repositories import (
    BlockRepository,
    CommentRepository,
    LikeRepository,
    PostRepository,
    ProfileRepository,
)
from ..results import Err, Failure, Ok, Result
from ..schemas import CommentRecord, Cursor, Page, PostRecord, PostStatsRecord
from .base import TransactionalService

logger = logging.getLogger(__name__)


class PostInteractionService(TransactionalService):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        profiles: ProfileRepository,
        posts: PostRepository,
        likes: LikeRepository,
        comments: CommentRepository,
        blocks: BlockRepository,
        *,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(session_factory, profiles, settings=settings)
        self._posts = posts
        self._likes = likes
        self._comments = comments
        self._blocks = blocks

    async def create_post(self, author_id: str, recipient_id: str, caption: str = "") -> Result[PostRecord]:
        """Publish a post on ``recipient_id``'s profile (the author's own when equal)."""

        async def work(session: AsyncSession) -> Result[PostRecord]:
            if author_id != recipient_id:
                await self._profiles.lock_pair(session, author_id, recipient_id)
            if failure := await self._require_profiles(session, author_id, recipient_id):
                return failure
            if author_id != recipient_id and await self._blocks.exists_between(session, author_id, recipient_id):
                return Err(Failure.BLOCKED)
            post = await self._posts.create(session, author_id=author_id, recipient_id=recipient_id, caption=caption)
            if failure := await self._apply_profile_deltas(session, {recipient_id: {"post_count": 1}}):
                return failure
            return Ok(PostRecord.model_validate(post))

        return await self._run("create_post", work, author=author_id, recipient=recipient_id)

    async def delete_post(self, user_id: str, post_id: str) -> Result[None]:
        async def work(session: AsyncSession) -> Result[None]:
            post = await self._posts.get(session, post_id)
            if post is None:
                return Err(Failure.POST_NOT_FOUND)
            if user_id not in (post.author_id, post.recipient_id):
                return Err(Failure.NOT_POST_OWNER)

            await self._likes.delete_for_post(session, post_id)
            comments_removed = await self._comments.delete_for_post(session, post_id)
            if not await self._posts.delete(session, post_id):
                return Err(Failure.POST_NOT_FOUND)
            deltas = {"post_count": -1, "comment_count": -comments_removed}
            if failure := await self._apply_profile_deltas(session, {post.recipient_id: deltas}):
                return failure
            return Ok(None)

        return await self._run("delete_post", work, user=user_id, post=post_id)

    async def like_post(self, user_id: str, post_id: str) -> Result[None]:
        async def work(session: AsyncSession) -> Result[None]:
            if failure := await self._require_profiles(session, user_id):
                return failure
            if await self._posts.get(session, post_id) is None:
                return Err(Failure.POST_NOT_FOUND)
            if await self._likes.has_liked(session, post_id, user_id):
                return Err(Failure.ALREADY_LIKED)
            await self._likes.create(session, post_id, user_id)
            if not await self._posts.adjust(session, post_id, {"like_count": 1}):
                logger.warning("Post %s has no stats row", post_id)
                return Err(Failure.POST_NOT_FOUND)
            return Ok(None)

        return await self._run("like_post", work, user=user_id, post=post_id)

    async def unlike_post(self, user_id: str, post_id: str) -> Result[None]:
        async def work(session: AsyncSession) -> Result[None]:
            if failure := await self._require_profiles(session, user_id):
                return failure
            if await self._posts.get(session, post_id) is None:
                return Err(Failure.POST_NOT_FOUND)
            if not await self._likes.delete(session, post_id, user_id):
                return Err(Failure.NOT_LIKED)
            if not await self._posts.adjust(session, post_id, {"like_count": -1}):
                logger.warning("Post %s has no stats row", post_id)
                return Err(Failure.POST_NOT_FOUND)
            return Ok(None)

        return await self._run("unlike_post", work, user=user_id, post=post_id)

    async def has_liked(self, user_id: str, post_id: str) -> Result[bool]:
        async def work(session: AsyncSession) -> Result[bool]:
            if failure := await self._require_profiles(session, user_id):
                return failure
            return Ok(await self._likes.has_liked(session, post_id, user_id))

        return await self._read("has_liked", work)

    async def comment_on_post(self, user_id: str, post_id: str, body: str) -> Result[CommentRecord]:
        text = (body or "").strip()
        if not text:
            return Err(Failure.EMPTY_COMMENT)
        if len(text) > self._settings.max_comment_length:
            return Err(Failure.COMMENT_TOO_LONG, f"limit is {self._settings.max_comment_length} characters")

        async def work(session: AsyncSession) -> Result[CommentRecord]:
            author = await self._profiles.get(session, user_id)
            if author is None:
                return Err(Failure.PROFILE_NOT_FOUND, user_id)
            post = await self._posts.get(session, post_id)
            if post is None:
                return Err(Failure.POST_NOT_FOUND)

            comment = await self._comments.create(session, post_id=post_id, user_id=user_id, body=text)
            if not await self._posts.adjust(session, post_id, {"comment_count": 1}):
                logger.warning("Post %s has no stats row", post_id)
                return Err(Failure.POST_NOT_FOUND)
            if failure := await self._apply_profile_deltas(session, {post.recipient_id: {"comment_count": 1}}):
                return failure
            record = CommentRecord.model_validate(comment)
            record.username = author.username
            return Ok(record)

        return await self._run("comment_on_post", work, user=user_id, post=post_id)

    async def delete_comment(self, user_id: str, comment_id: str, post_id: str) -> Result[None]:
        async def work(session: AsyncSession) -> Result[None]:
            comment = await self._comments.get(session, comment_id)
            if comment is None or comment.post_id != post_id:
                return Err(Failure.COMMENT_NOT_FOUND)
            if comment.user_id != user_id:
                return Err(Failure.NOT_COMMENT_OWNER)
            post = await self._posts.get(session, post_id)
            if post is None:
                return Err(Failure.POST_NOT_FOUND)

            if not await self._comments.delete(session, comment_id):
                return Err(Failure.COMMENT_NOT_FOUND)
            if not await self._posts.adjust(session, post_id, {"comment_count": -1}):
                logger.warning("Post %s has no stats row", post_id)
                return Err(Failure.POST_NOT_FOUND)
            if failure := await self._apply_profile_deltas(session, {post.recipient_id: {"comment_count": -1}}):
                return failure
            return Ok(None)

        return await self._run("delete_comment", work, user=user_id, comment=comment_id)

    async def paginate_comments(
        self, post_id: str, *, cursor: Cursor | None = None, page_size: int | None = None
    ) -> Result[Page[CommentRecord]]:
        """Newest comments first."""

        size = self._page_size(page_size)

        async def work(session: AsyncSession) -> Result[Page[CommentRecord]]:
            if await self._posts.get(session, post_id) is None:
                return Err(Failure.POST_NOT_FOUND)
            rows = await self._comments.page_for_post(session, post_id, cursor, size + 1)
            page = build_page(rows, size, key=lambda row: Cursor(created_at=row.created_at, id=row.id))
            items = [CommentRecord(**row._mapping) for row in page.items]
            return Ok(Page[CommentRecord](items=items, next_cursor=page.next_cursor))

        return await self._read("paginate_comments", work)

    async def paginate_posts(
        self, user_id: str, *, cursor: Cursor | None = None, page_size: int | None = None
    ) -> Result[Page[PostRecord]]:
        """Posts on ``user_id``'s profile, newest first."""

        size = self._page_size(page_size)

        async def work(session: AsyncSession) -> Result[Page[PostRecord]]:
            if failure := await self._require_profiles(session, user_id):
                return failure
            posts = await self._posts.page_for_profile(session, user_id, cursor, size + 1)
            page = build_page(posts, size, key=lambda post: Cursor(created_at=post.created_at, id=post.id))
            items = [PostRecord.model_validate(post) for post in page.items]
            return Ok(Page[PostRecord](items=items, next_cursor=page.next_cursor))

        return await self._read("paginate_posts", work)

    async def get_post(self, post_id: str) -> Result[PostRecord]:
        async def work(session: AsyncSession) -> Result[PostRecord]:
            post = await self._posts.get(session, post_id)
            if post is None:
                return Err(Failure.POST_NOT_FOUND)
            return Ok(PostRecord.model_validate(post))

        return await self._read("get_post", work)

    async def get_post_stats(self, post_id: str) -> Result[PostStatsRecord]:
        async def work(session: AsyncSession) -> Result[PostStatsRecord]:
            stats = await self._posts.get_stats(session, post_id)
            if stats is None:
                return Err(Failure.POST_NOT_FOUND)
            return Ok(PostStatsRecord.model_validate(stats))

        return await self._read("get_post_stats", work)


__all__ = ["PostInteractionService"]
