"""Explicit success/failure values returned by every service operation.

Expected conditions (a missing edge, a duplicate like, a blocked pair) never
surface as exceptions. Callers receive either :class:`Ok` wrapping the value or
:class:`Err` carrying one of the enumerated :class:`Failure` codes. Only
``Failure.STORE_ERROR`` describes an infrastructure fault; it is the sole
failure a caller may retry.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")


class Failure(StrEnum):
    PROFILE_NOT_FOUND = "ProfileNotFound"
    PROFILE_ALREADY_EXISTS = "ProfileAlreadyExists"
    CANNOT_TARGET_SELF = "CannotTargetSelf"
    BLOCKED = "Blocked"
    ALREADY_FOLLOWING = "AlreadyFollowing"
    ALREADY_REQUESTED = "AlreadyRequested"
    FOLLOW_NOT_FOUND = "FollowNotFound"
    FOLLOW_REQUEST_NOT_FOUND = "FollowRequestNotFound"
    ALREADY_FRIENDS = "AlreadyFriends"
    FRIEND_REQUEST_NOT_FOUND = "FriendRequestNotFound"
    FRIENDSHIP_NOT_FOUND = "FriendshipNotFound"
    ALREADY_BLOCKED = "AlreadyBlocked"
    BLOCK_NOT_FOUND = "BlockNotFound"
    POST_NOT_FOUND = "PostNotFound"
    NOT_POST_OWNER = "NotPostOwner"
    ALREADY_LIKED = "AlreadyLiked"
    NOT_LIKED = "NotLiked"
    EMPTY_COMMENT = "EmptyComment"
    COMMENT_TOO_LONG = "CommentTooLong"
    COMMENT_NOT_FOUND = "CommentNotFound"
    NOT_COMMENT_OWNER = "NotCommentOwner"
    STORE_ERROR = "StoreError"

    @property
    def retryable(self) -> bool:
        return self is Failure.STORE_ERROR


class ResultError(RuntimeError):
    """Raised by :meth:`Err.unwrap` for callers that prefer exceptions."""

    def __init__(self, failure: Failure, detail: str = "") -> None:
        super().__init__(f"{failure}: {detail}" if detail else str(failure))
        self.failure = failure
        self.detail = detail


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    failure: Failure
    detail: str = ""

    ok: ClassVar[bool] = False

    @property
    def retryable(self) -> bool:
        return self.failure.retryable

    def unwrap(self) -> NoReturn:
        raise ResultError(self.failure, self.detail)


Result = Union[Ok[T], Err]


__all__ = ["Failure", "Ok", "Err", "Result", "ResultError"]
