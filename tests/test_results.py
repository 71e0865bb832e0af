"""Unit tests for the result values returned at the service boundary."""
from __future__ import annotations

import pytest

from feedcore.results import Err, Failure, Ok, ResultError


def test_only_store_errors_are_retryable() -> None:
    retryable = [failure for failure in Failure if failure.retryable]
    assert retryable == [Failure.STORE_ERROR]
    assert Err(Failure.STORE_ERROR).retryable
    assert not Err(Failure.ALREADY_LIKED).retryable


def test_failure_values_are_stable_names() -> None:
    assert Failure.ALREADY_LIKED == "AlreadyLiked"
    assert Failure.CANNOT_TARGET_SELF.value == "CannotTargetSelf"
    assert Failure("FollowNotFound") is Failure.FOLLOW_NOT_FOUND


def test_ok_unwraps_to_its_value() -> None:
    result = Ok([1, 2])
    assert result.ok
    assert result.unwrap() == [1, 2]


def test_err_unwrap_raises_with_failure_attached() -> None:
    result = Err(Failure.POST_NOT_FOUND, "post-1")
    assert not result.ok
    with pytest.raises(ResultError) as excinfo:
        result.unwrap()
    assert excinfo.value.failure is Failure.POST_NOT_FOUND
    assert excinfo.value.detail == "post-1"
    assert "PostNotFound" in str(excinfo.value)
