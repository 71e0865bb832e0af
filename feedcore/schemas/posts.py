"""Schemas for posts, post counters and comments."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PostRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    recipient_id: str
    caption: str
    created_at: datetime


class PostStatsRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: str
    like_count: int
    comment_count: int


class CommentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    user_id: str
    body: str
    created_at: datetime
    username: str | None = None


__all__ = ["PostRecord", "PostStatsRecord", "CommentRecord"]
