"""Domain exceptions and API error codes."""

from enum import Enum


class RepoRelayError(Exception):
    """Base exception for all service failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UpstreamError(RepoRelayError):
    """Raised when a remote API is unreachable or answers with a non-2xx status.

    ``status_code`` is the upstream status when one was received, otherwise 500.
    """


class NotFoundError(RepoRelayError):
    """Raised when no local metadata row exists for a user or repository."""

    status_code = 404


class UnauthorizedError(RepoRelayError):
    """Raised for a missing, invalid or expired credential."""

    status_code = 401


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Client errors (4xx)
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GATEWAY_ERROR = "GATEWAY_ERROR"


STATUS_TO_ERROR_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION_ERROR,
    429: ErrorCode.RATE_LIMITED,
    500: ErrorCode.INTERNAL_ERROR,
    502: ErrorCode.GATEWAY_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


def get_error_code(status_code: int) -> ErrorCode:
    """Get ErrorCode from HTTP status code."""
    return STATUS_TO_ERROR_CODE.get(status_code, ErrorCode.INTERNAL_ERROR)


def error_body(status_code: int, message: str) -> dict:
    """Build the uniform JSON error body."""
    return {
        "error": {
            "code": get_error_code(status_code).value,
            "message": message,
            "status": status_code,
        }
    }
