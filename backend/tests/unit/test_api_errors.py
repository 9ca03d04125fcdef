"""Tests for the error taxonomy and the error envelope."""

import pytest

from devconnector.core.errors import (
    APIError,
    ConcurrentUpdateError,
    ConflictError,
    DuplicateIdentityError,
    ForbiddenError,
    ForbiddenReason,
    IndexOutOfRangeError,
    NotFoundError,
    ProfileMissingError,
    StorageError,
    ValidationError,
    is_retryable,
)
from devconnector.core.responses import ErrorResponse, error_envelope


class TestErrorCodes:
    """Each error kind has a stable code and status."""

    @pytest.mark.parametrize(
        ("error", "code", "status"),
        [
            (NotFoundError("Post", "1"), "NOT_FOUND", 404),
            (ProfileMissingError(), "PROFILE_MISSING", 404),
            (ForbiddenError(ForbiddenReason.NOT_OWNER), "FORBIDDEN", 403),
            (ValidationError("bad"), "VALIDATION_ERROR", 400),
            (StorageError(), "STORAGE_ERROR", 503),
            (ConcurrentUpdateError("d", 1, 2), "CONCURRENT_UPDATE", 409),
            (ConflictError("HANDLE_EXISTS", "taken"), "HANDLE_EXISTS", 409),
            (DuplicateIdentityError("likes", "x"), "DUPLICATE_IDENTITY", 500),
        ],
    )
    def test_code_and_status(self, error: APIError, code: str, status: int) -> None:
        assert error.code == code
        assert error.status_code == status


class TestForbiddenError:
    """ForbiddenError carries its reason."""

    @pytest.mark.parametrize("reason", list(ForbiddenReason))
    def test_reason_in_details(self, reason: ForbiddenReason) -> None:
        error = ForbiddenError(reason)
        assert error.reason is reason
        assert error.details == [{"reason": reason.value}]
        assert error.message

    def test_reason_values(self) -> None:
        assert {r.value for r in ForbiddenReason} == {
            "not-owner",
            "cannot-act-on-own-resource",
            "already-liked",
            "not-yet-liked",
        }


class TestNotFoundMessage:
    """NotFoundError message formatting."""

    def test_with_id(self) -> None:
        assert NotFoundError("Comment", "abc").message == "Comment with id 'abc' not found"

    def test_without_id(self) -> None:
        assert NotFoundError("Post").message == "Post not found"


class TestRetryable:
    """Only storage failures are retryable."""

    def test_storage_error_retryable(self) -> None:
        assert is_retryable(StorageError())

    @pytest.mark.parametrize(
        "error",
        [
            NotFoundError("Post"),
            ProfileMissingError(),
            ForbiddenError(ForbiddenReason.ALREADY_LIKED),
            ConcurrentUpdateError("d", 1, 2),
            RuntimeError("boom"),
        ],
    )
    def test_others_not_retryable(self, error: Exception) -> None:
        assert not is_retryable(error)


class TestIndexOutOfRange:
    def test_is_index_error(self) -> None:
        error = IndexOutOfRangeError(3, 2)
        assert isinstance(error, IndexError)
        assert error.index == 3
        assert error.length == 2


class TestErrorEnvelope:
    """error_envelope() renders any APIError."""

    def test_forbidden_envelope(self) -> None:
        envelope = error_envelope(ForbiddenError(ForbiddenReason.ALREADY_LIKED))

        assert isinstance(envelope, ErrorResponse)
        assert envelope.model_dump() == {
            "error": {
                "code": "FORBIDDEN",
                "message": "User already liked this post",
                "details": [{"reason": "already-liked"}],
            }
        }

    def test_envelope_without_details(self) -> None:
        envelope = error_envelope(ProfileMissingError())
        assert envelope.error.code == "PROFILE_MISSING"
        assert envelope.error.details is None
