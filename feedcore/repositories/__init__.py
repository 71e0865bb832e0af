"""SQLAlchemy repositories used by the services."""
from .base import DuplicateRecordError, is_unique_violation
from .blocks import BlockRepository
from .comments import CommentRepository
from .follows import FollowRepository
from .friends import FriendRepository, canonical_pair
from .likes import LikeRepository
from .posts import POST_COUNTERS, PostRepository
from .profiles import ProfileRepository

__all__ = [
    "DuplicateRecordError",
    "is_unique_violation",
    "BlockRepository",
    "CommentRepository",
    "FollowRepository",
    "FriendRepository",
    "canonical_pair",
    "LikeRepository",
    "POST_COUNTERS",
    "PostRepository",
    "ProfileRepository",
]
