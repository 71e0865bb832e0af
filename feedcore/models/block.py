"""ORM model for directed block edges."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String

from feedcore.database import Base
from .base import CreatedAtMixin


class Block(CreatedAtMixin, Base):
    __tablename__ = "blocks"

    blocker_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    blocked_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True, index=True)


__all__ = ["Block"]
