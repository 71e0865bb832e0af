"""Shared fixtures: a fresh SQLite file database and the wired services per test."""
from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio

from feedcore.bootstrap import Services, build_services
from feedcore.config import Settings
from feedcore.database import create_engine, drop_db, init_db
from feedcore.schemas import ProfileStatsRecord


@pytest.fixture
def settings(tmp_path) -> Settings:
    # A file database so concurrent sessions really use separate connections.
    return Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'feedcore.db'}")


@pytest_asyncio.fixture
async def services(settings: Settings) -> AsyncIterator[Services]:
    engine = create_engine(settings)
    await init_db(engine)
    bundle = build_services(settings, engine=engine)
    yield bundle
    await drop_db(engine)
    await bundle.aclose()


@pytest.fixture
def make_profile(services: Services) -> Callable[..., Awaitable[str]]:
    async def _make(username: str, *, is_private: bool = False) -> str:
        result = await services.profiles.create_profile(username, username, is_private=is_private)
        return result.unwrap().id

    return _make


@pytest.fixture
def make_post(services: Services) -> Callable[..., Awaitable[str]]:
    async def _make(author_id: str, recipient_id: str | None = None, caption: str = "hello") -> str:
        result = await services.posts.create_post(author_id, recipient_id or author_id, caption)
        return result.unwrap().id

    return _make


@pytest.fixture
def stats_of(services: Services) -> Callable[[str], Awaitable[ProfileStatsRecord]]:
    async def _stats(user_id: str) -> ProfileStatsRecord:
        return (await services.profiles.get_profile_stats(user_id)).unwrap()

    return _stats


@pytest.fixture
def assert_no_drift(services: Services) -> Callable[[], Awaitable[None]]:
    """Recount every profile and fail if any stored counter disagreed."""

    async def _check() -> None:
        drifted = (await services.stats.recount_all_profiles()).unwrap()
        assert drifted == [], [drift.model_dump() for drift in drifted]

    return _check
