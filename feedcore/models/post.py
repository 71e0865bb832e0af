"""SQLAlchemy ORM models for posts, their counters, likes and comments."""
from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Text, UniqueConstraint

from feedcore.database import Base
from .base import CreatedAtMixin, new_id


class Post(CreatedAtMixin, Base):
    __tablename__ = "posts"

    id = Column(String(64), primary_key=True, default=new_id)
    author_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    caption = Column(Text, nullable=False, default="")


class PostStats(Base):
    __tablename__ = "post_stats"

    post_id = Column(String(64), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    like_count = Column(Integer, nullable=False, default=0, server_default="0")
    comment_count = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_post_stats_like_count_non_negative"),
        CheckConstraint("comment_count >= 0", name="ck_post_stats_comment_count_non_negative"),
    )


class PostLike(CreatedAtMixin, Base):
    __tablename__ = "post_likes"

    id = Column(String(64), primary_key=True, default=new_id)
    post_id = Column(String(64), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),)


class PostComment(CreatedAtMixin, Base):
    __tablename__ = "post_comments"

    id = Column(String(64), primary_key=True, default=new_id)
    post_id = Column(String(64), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False)


__all__ = ["Post", "PostStats", "PostLike", "PostComment"]
