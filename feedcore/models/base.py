"""Utility mixins shared across ORM models."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class CreatedAtMixin:
    """Creation timestamp set in Python so keyset cursors keep microsecond precision."""

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


__all__ = ["CreatedAtMixin", "utcnow", "new_id"]
