"""
Error taxonomy for the post storage façade.

Every failure the façade surfaces is one of these; raw httpx exceptions
never reach callers.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"
    AUTH_ERROR = "AUTH_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class PostStorageError(Exception):
    """
    Base exception for façade errors.

    Attributes:
        kind: Machine-readable error kind
        message: Technical message (server error text or transport error)
        user_message: Message suitable for showing to the operator
        status: HTTP status code, when the server answered
        endpoint: API path of the failed request
        method: HTTP method of the failed request
    """

    kind = ErrorKind.UNKNOWN_ERROR
    default_user_message = "An unexpected error occurred. Please try again."
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        endpoint: Optional[str] = None,
        method: Optional[str] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.endpoint = endpoint
        self.method = method
        self.user_message = user_message or self.default_user_message


class NetworkError(PostStorageError):
    """No connectivity, or the request failed below HTTP."""
    kind = ErrorKind.NETWORK_ERROR
    default_user_message = "Unable to connect to the server. Please check your internet connection."
    retryable = True


class OfflineError(NetworkError):
    """The client is marked offline; no request was attempted."""
    retryable = False

    def __init__(self, **kwargs):
        super().__init__("No internet connection", **kwargs)


class RequestTimeoutError(PostStorageError):
    """The request exceeded its per-attempt timeout."""
    kind = ErrorKind.TIMEOUT_ERROR
    default_user_message = "Request timed out. Please check your connection and try again."
    retryable = True


class ServerError(PostStorageError):
    """5xx response."""
    kind = ErrorKind.SERVER_ERROR
    default_user_message = "Server error occurred. Please try again in a few moments."
    retryable = True


class NotFoundError(PostStorageError):
    """404 response."""
    kind = ErrorKind.NOT_FOUND
    default_user_message = "The requested resource was not found."


class AuthError(PostStorageError):
    """401 or 403 response."""
    kind = ErrorKind.AUTH_ERROR
    default_user_message = "Authentication required. Please log in and try again."


class ClientError(PostStorageError):
    """Any other 4xx response."""
    kind = ErrorKind.CLIENT_ERROR
    default_user_message = "The request was rejected by the server."


class UnknownError(PostStorageError):
    kind = ErrorKind.UNKNOWN_ERROR


class ValidationError(PostStorageError):
    """Post data failed local validation; raised before any request is made."""
    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        joined = ", ".join(self.errors)
        super().__init__(
            f"Validation failed: {joined}",
            user_message=f"Please fix the following issues: {joined}",
        )


def error_for_status(
    status: int,
    message: str,
    *,
    endpoint: Optional[str] = None,
    method: Optional[str] = None,
) -> PostStorageError:
    """Build the error matching an HTTP error status."""
    if status >= 500:
        error_class = ServerError
    elif status == 404:
        error_class = NotFoundError
    elif status in (401, 403):
        error_class = AuthError
    elif status >= 400:
        error_class = ClientError
    else:
        error_class = UnknownError
    return error_class(message, status=status, endpoint=endpoint, method=method)
