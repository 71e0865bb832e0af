"""Convenience exports for ORM models."""
from .block import Block
from .follow import Follow, FollowRequest
from .friend_request import FriendRequest
from .friendship import Friendship
from .post import Post, PostComment, PostLike, PostStats
from .profile import PROFILE_COUNTERS, Profile, ProfileStats

__all__ = [
    "Block",
    "Follow",
    "FollowRequest",
    "FriendRequest",
    "Friendship",
    "Post",
    "PostComment",
    "PostLike",
    "PostStats",
    "Profile",
    "ProfileStats",
    "PROFILE_COUNTERS",
]
