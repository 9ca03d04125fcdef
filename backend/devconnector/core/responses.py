"""Response envelope models.

Consistent error envelopes for whatever transport sits in front
of the services. Error envelopes are built from APIError so no raw
exception text reaches a client.
"""

from pydantic import BaseModel

from devconnector.core.errors import APIError


class ErrorDetail(BaseModel):
    """Error information inside the error envelope.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message.
        details: Optional extra detail entries (e.g. the forbidden reason).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error envelope: {"error": {...}}."""

    error: ErrorDetail


def error_envelope(exc: APIError) -> ErrorResponse:
    """Render an APIError as the standard error envelope.

    Args:
        exc: Error raised by a service.

    Returns:
        ErrorResponse carrying the error's code, message and details.
    """
    return ErrorResponse(
        error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details)
    )
