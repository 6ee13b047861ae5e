"""Exceptions for the Polar client.

Two families live here:

- ``PolarAPIError`` and its subclasses mirror :class:`~polar_client.errors.models.ErrorKind`.
  They are never raised by network operations directly; they surface only when a
  caller unwraps a failed ``Result``.
- ``ConfigurationError`` and ``InvalidArgumentError`` are precondition violations
  raised before any network attempt.
"""

from typing import TYPE_CHECKING

from polar_client.errors.models import ErrorKind

if TYPE_CHECKING:
    from polar_client.errors.models import ApiError


class PolarAPIError(Exception):
    """Base exception for classified API failures."""

    def __init__(self, error: "ApiError"):
        super().__init__(str(error))
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def status_code(self) -> int | None:
        return self.error.status_code


class AuthenticationError(PolarAPIError):
    """401/403: missing, invalid or insufficient credentials."""

    pass


class NotFoundError(PolarAPIError):
    """404 Not Found."""

    pass


class ValidationError(PolarAPIError):
    """400/422: the request was rejected as invalid."""

    pass


class RateLimitError(PolarAPIError):
    """429 Too Many Requests."""

    @property
    def retry_after(self) -> float | None:
        return self.error.retry_after


class ServerError(PolarAPIError):
    """5xx server errors."""

    pass


class NetworkError(PolarAPIError):
    """Timeouts, refused connections and DNS failures."""

    pass


class CanceledError(PolarAPIError):
    """The call was aborted by a cancellation signal."""

    pass


class UnknownAPIError(PolarAPIError):
    """Any failure outside the other kinds."""

    pass


_EXCEPTION_MAP: dict[ErrorKind, type[PolarAPIError]] = {
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.RATE_LIMITED: RateLimitError,
    ErrorKind.SERVER_ERROR: ServerError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.CANCELED: CanceledError,
    ErrorKind.UNKNOWN: UnknownAPIError,
}


def exception_for(error: "ApiError") -> PolarAPIError:
    """Build the exception matching ``error.kind``."""
    return _EXCEPTION_MAP[error.kind](error)


class ConfigurationError(ValueError):
    """Raised when a client is configured with invalid settings."""

    pass


class InvalidArgumentError(ValueError):
    """Raised when a required argument is missing or empty before any request is made.

    Attributes:
        argument: Name of the offending argument.
    """

    def __init__(self, message: str, argument: str | None = None):
        super().__init__(message)
        self.argument = argument
