"""Records describing profiles, their counters and related profiles in listings."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    is_private: bool
    created_at: datetime


class ProfileStatsRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    profile_id: str
    follower_count: int
    following_count: int
    friend_count: int
    post_count: int
    comment_count: int


class RelatedProfile(BaseModel):
    """A profile listed in a follower/following/friend/request/block page.

    ``since`` is the creation time of the edge or request that put the profile
    in the listing. The viewer flags stay ``None`` when no viewer was given.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    since: datetime
    is_following: bool | None = None
    is_friend_requested: bool | None = None


__all__ = ["ProfileRecord", "ProfileStatsRecord", "RelatedProfile"]
