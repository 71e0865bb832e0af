"""Schemas describing friend-dimension state and block teardown results."""
from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class FriendState(StrEnum):
    FRIENDS = "friends"
    OUTBOUND_REQUEST = "outbound_request"
    INBOUND_REQUEST = "inbound_request"
    NOT_FRIENDS = "not_friends"


class BlockSummary(BaseModel):
    """What a block removed between the pair."""

    follow_edges_removed: int = 0
    follow_requests_removed: int = 0
    friendship_removed: bool = False
    friend_requests_removed: int = 0


__all__ = ["FriendState", "BlockSummary"]
