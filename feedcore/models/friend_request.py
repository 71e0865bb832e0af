"""ORM model representing pending friend invitations between profiles."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from feedcore.database import Base
from .base import CreatedAtMixin


class FriendRequest(CreatedAtMixin, Base):
    __tablename__ = "friend_requests"

    sender_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    recipient_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True, index=True)
    # At most one pending request per unordered pair, whichever side sent it.
    pair_low_id = Column(String(64), nullable=False)
    pair_high_id = Column(String(64), nullable=False)

    __table_args__ = (UniqueConstraint("pair_low_id", "pair_high_id", name="uq_friend_request_pair"),)


__all__ = ["FriendRequest"]
