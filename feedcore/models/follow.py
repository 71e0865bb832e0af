"""SQLAlchemy ORM models for follower edges and pending follow requests."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String

from feedcore.database import Base
from .base import CreatedAtMixin


class Follow(CreatedAtMixin, Base):
    __tablename__ = "follows"

    follower_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    followee_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True, index=True)


class FollowRequest(CreatedAtMixin, Base):
    __tablename__ = "follow_requests"

    sender_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    recipient_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True, index=True)


__all__ = ["Follow", "FollowRequest"]
