"""API error classes.

Every failure a sub-collection operation can end in is one of these classes,
each with a stable machine-readable code and HTTP status. The excluded HTTP
layer renders them through core.responses.error_envelope().

WHY CUSTOM ERROR CLASSES:
- Consistent error response format for every operation
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in services/repositories
"""

from enum import Enum


class ForbiddenReason(str, Enum):
    """Named reasons an ownership or uniqueness check can deny an operation."""

    NOT_OWNER = "not-owner"
    OWN_RESOURCE = "cannot-act-on-own-resource"
    ALREADY_LIKED = "already-liked"
    NOT_YET_LIKED = "not-yet-liked"


_FORBIDDEN_MESSAGES: dict[ForbiddenReason, str] = {
    ForbiddenReason.NOT_OWNER: "User not authorized",
    ForbiddenReason.OWN_RESOURCE: "User cannot act on own post",
    ForbiddenReason.ALREADY_LIKED: "User already liked this post",
    ForbiddenReason.NOT_YET_LIKED: "You have not yet liked this post",
}


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
        retryable: Whether a caller may retry the same request as-is.
    """

    retryable: bool = False

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Raised upstream of the services; listed here so the HTTP layer can
    render it through the same envelope.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class ForbiddenError(APIError):
    """Ownership or uniqueness rule denied the operation (403).

    Attributes:
        reason: The ForbiddenReason the guard reported.
    """

    def __init__(self, reason: ForbiddenReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(
            code="FORBIDDEN",
            message=message or _FORBIDDEN_MESSAGES[reason],
            status_code=403,
            details=[{"reason": reason.value}],
        )


class NotFoundError(APIError):
    """Parent document or sub-record not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ProfileMissingError(APIError):
    """The actor (or requested user) has no profile yet (404).

    Kept apart from NotFoundError: a new user without a profile is an
    expected condition the client prompts on, not a broken reference.
    """

    def __init__(self, message: str = "There is no profile for this user") -> None:
        super().__init__(
            code="PROFILE_MISSING",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Duplicate or conflicting resource (409).

    Accepts custom code for specific conflict types.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details,
        )


class ConcurrentUpdateError(ConflictError):
    """Stored document version moved between fetch and persist (409).

    Only raised under the optimistic write policy.
    """

    def __init__(self, document_id: str, expected: int, actual: int | None) -> None:
        self.expected_version = expected
        self.actual_version = actual
        super().__init__(
            code="CONCURRENT_UPDATE",
            message=f"Document '{document_id}' was modified by another request",
            details=[{"expected_version": expected, "actual_version": actual}],
        )


class StorageError(APIError):
    """Persistence collaborator failed (503).

    The only error kind a caller may retry. Durable state after a failed
    persist is whatever the store left behind.
    """

    retryable = True

    def __init__(self, message: str = "Document storage is unavailable") -> None:
        super().__init__(
            code="STORAGE_ERROR",
            message=message,
            status_code=503,
        )


class DuplicateIdentityError(APIError):
    """A sub-collection holds two records with the same identity key (500)."""

    def __init__(self, collection: str, key: object) -> None:
        self.collection = collection
        self.key = key
        super().__init__(
            code="DUPLICATE_IDENTITY",
            message=f"Duplicate identity '{key}' in {collection}",
            status_code=500,
        )


class IndexOutOfRangeError(IndexError):
    """remove_at() was given an index outside the sequence."""

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"Index {index} out of range for sequence of length {length}")


def is_retryable(exc: BaseException) -> bool:
    """Return True if the caller may retry the request that raised exc."""
    return isinstance(exc, APIError) and exc.retryable
