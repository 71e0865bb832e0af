"""Composition point: build the engine, the repositories and the services once."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .config import Settings, get_settings
from .database import create_engine, create_session_factory
from .repositories import (
    BlockRepository,
    CommentRepository,
    FollowRepository,
    FriendRepository,
    LikeRepository,
    PostRepository,
    ProfileRepository,
)
from .services import PostInteractionService, ProfileService, SocialGraphService, StatsService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(slots=True)
class Services:
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    profiles: ProfileService
    social_graph: SocialGraphService
    posts: PostInteractionService
    stats: StatsService

    async def aclose(self) -> None:
        await self.engine.dispose()


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)


def build_services(settings: Settings | None = None, *, engine: AsyncEngine | None = None) -> Services:
    """Wire every service against one engine.

    Repositories are stateless and shared. Pass ``engine`` to reuse an engine
    created elsewhere (tests do this to point at a temporary database).
    """

    settings = settings or get_settings()
    engine = engine or create_engine(settings)
    session_factory = create_session_factory(engine)

    profiles = ProfileRepository()
    follows = FollowRepository()
    friends = FriendRepository()
    blocks = BlockRepository()
    posts = PostRepository()
    likes = LikeRepository()
    comments = CommentRepository()

    services = Services(
        engine=engine,
        session_factory=session_factory,
        profiles=ProfileService(session_factory, profiles, settings=settings),
        social_graph=SocialGraphService(session_factory, profiles, follows, friends, blocks, settings=settings),
        posts=PostInteractionService(session_factory, profiles, posts, likes, comments, blocks, settings=settings),
        stats=StatsService(session_factory, profiles, follows, friends, posts, likes, comments, settings=settings),
    )
    logger.info("%s services ready", settings.app_name)
    return services


__all__ = ["Services", "build_services", "configure_logging"]
