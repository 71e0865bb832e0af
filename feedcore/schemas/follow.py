"""Schemas describing follow-dimension state."""
from __future__ import annotations

from enum import StrEnum


class FollowState(StrEnum):
    FOLLOWING = "following"
    REQUESTED = "requested"
    NOT_FOLLOWING = "not_following"


__all__ = ["FollowState"]
