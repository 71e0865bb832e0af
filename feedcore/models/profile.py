"""SQLAlchemy ORM models for profiles and their denormalised counters."""
from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from feedcore.database import Base
from .base import CreatedAtMixin, utcnow

PROFILE_COUNTERS = ("follower_count", "following_count", "friend_count", "post_count", "comment_count")


class Profile(CreatedAtMixin, Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    is_private = Column(Boolean, nullable=False, default=False, server_default=expression.false())

    stats = relationship("ProfileStats", back_populates="profile", uselist=False, cascade="all, delete-orphan")


class ProfileStats(Base):
    __tablename__ = "profile_stats"

    profile_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    follower_count = Column(Integer, nullable=False, default=0, server_default="0")
    following_count = Column(Integer, nullable=False, default=0, server_default="0")
    friend_count = Column(Integer, nullable=False, default=0, server_default="0")
    post_count = Column(Integer, nullable=False, default=0, server_default="0")
    comment_count = Column(Integer, nullable=False, default=0, server_default="0")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="stats")

    __table_args__ = tuple(
        CheckConstraint(f"{name} >= 0", name=f"ck_profile_stats_{name}_non_negative") for name in PROFILE_COUNTERS
    )


__all__ = ["Profile", "ProfileStats", "PROFILE_COUNTERS"]
