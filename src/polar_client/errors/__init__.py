"""Error classification and error types for the Polar client."""

from polar_client.errors.exceptions import (
    AuthenticationError,
    CanceledError,
    ConfigurationError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PolarAPIError,
    RateLimitError,
    ServerError,
    UnknownAPIError,
    ValidationError,
)
from polar_client.errors.handler import (
    canceled_error,
    classify_exception,
    classify_response,
    error_kind_for_status,
    parse_retry_after,
    validation_error,
)
from polar_client.errors.models import ApiError, ErrorKind, ProblemDetail

__all__ = [
    "ApiError",
    "AuthenticationError",
    "CanceledError",
    "ConfigurationError",
    "ErrorKind",
    "InvalidArgumentError",
    "NetworkError",
    "NotFoundError",
    "PolarAPIError",
    "ProblemDetail",
    "RateLimitError",
    "ServerError",
    "UnknownAPIError",
    "ValidationError",
    "canceled_error",
    "classify_exception",
    "classify_response",
    "error_kind_for_status",
    "parse_retry_after",
    "validation_error",
]
