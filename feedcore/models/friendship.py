"""ORM model representing a mutual friendship between two profiles."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from feedcore.database import Base
from .base import CreatedAtMixin, new_id


class Friendship(CreatedAtMixin, Base):
    __tablename__ = "friendships"

    id = Column(String(64), primary_key=True, default=new_id)
    # Canonical ordering: user_a_id is always the lower id.
    user_a_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_b_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (UniqueConstraint("user_a_id", "user_b_id", name="uq_friendship_pair"),)


__all__ = ["Friendship"]
