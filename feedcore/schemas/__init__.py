"""Convenience exports for record schemas."""
from .follow import FollowState
from .friends import BlockSummary, FriendState
from .pagination import Cursor, Page
from .posts import CommentRecord, PostRecord, PostStatsRecord
from .profiles import ProfileRecord, ProfileStatsRecord, RelatedProfile
from .stats import CounterDrift, StatsDrift

__all__ = [
    "FollowState",
    "FriendState",
    "BlockSummary",
    "Cursor",
    "Page",
    "CommentRecord",
    "PostRecord",
    "PostStatsRecord",
    "ProfileRecord",
    "ProfileStatsRecord",
    "RelatedProfile",
    "CounterDrift",
    "StatsDrift",
]
