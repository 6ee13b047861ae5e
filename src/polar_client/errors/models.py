"""Error value models: the closed error-kind taxonomy and RFC 7807 problem details."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from polar_client.errors.exceptions import PolarAPIError


class ErrorKind(str, Enum):
    """Why a remote call failed.

    Every failed call is classified into exactly one kind. Callers branch on
    the kind, never on the message text.
    """

    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    CANCELED = "canceled"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        """Whether failures of this kind are eligible for automatic retry."""
        return self in _RETRYABLE_KINDS


_RETRYABLE_KINDS = frozenset([ErrorKind.RATE_LIMITED, ErrorKind.SERVER_ERROR, ErrorKind.NETWORK])


@dataclass(frozen=True)
class ApiError:
    """A classified failure of one API call.

    Attributes:
        kind: The error classification.
        message: Human-readable description, including server detail when available.
        status_code: HTTP status code, or None for transport-level failures.
        retryable: Whether the transport may retry the call.
        error_type: Machine-readable error type reported by the server, if any.
        details: Structured detail from the response body (e.g. validation entries).
        retry_after: Server-requested delay in seconds before retrying, if any.
    """

    kind: ErrorKind
    message: str
    status_code: int | None = None
    retryable: bool = False
    error_type: str | None = None
    details: Any = None
    retry_after: float | None = None

    @classmethod
    def of(cls, kind: ErrorKind, message: str, **kwargs: Any) -> "ApiError":
        """Create an error whose retryable flag follows its kind."""
        return cls(kind=kind, message=message, retryable=kind.retryable, **kwargs)

    def to_exception(self) -> "PolarAPIError":
        """Return the exception mirroring this error's kind."""
        from polar_client.errors.exceptions import exception_for

        return exception_for(self)

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.kind.value} (HTTP {self.status_code}): {self.message}"
        return f"{self.kind.value}: {self.message}"


_STANDARD_FIELDS = frozenset(["type", "title", "status", "detail", "instance"])


@dataclass
class ProblemDetail:
    """RFC 7807 Problem Details object.

    See: https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str | None = None  # URI reference identifying the problem type
    title: str | None = None  # Short, human-readable summary
    status: int | None = None  # HTTP status code
    detail: str | None = None  # Human-readable explanation
    instance: str | None = None  # URI reference identifying specific occurrence

    # Extension members (additional fields from API)
    extensions: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ProblemDetail | None":
        """Parse RFC 7807 problem details from HTTP response.

        Only ``application/problem+json`` bodies, or JSON objects carrying a
        string ``title`` or ``type`` member, are treated as problem details.
        Polar's own ``{"error": ..., "detail": ...}`` bodies are left to the
        classifier.

        Args:
            response: HTTP response object

        Returns:
            ProblemDetail object or None if not RFC 7807 format
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            return None

        if not isinstance(data, dict):
            return None

        content_type = response.headers.get("content-type", "")
        if "application/problem+json" not in content_type:
            if not isinstance(data.get("title"), str) and not isinstance(data.get("type"), str):
                return None

        detail = data.get("detail")
        extensions = {k: v for k, v in data.items() if k not in _STANDARD_FIELDS}

        return cls(
            type=data.get("type"),
            title=data.get("title"),
            status=data.get("status"),
            detail=detail if isinstance(detail, str) else None,
            instance=data.get("instance"),
            extensions=extensions if extensions else None,
        )

    def to_message(self) -> str:
        """Render the problem as a single human-readable message."""
        parts = []

        if self.title:
            parts.append(self.title)
        if self.detail and self.detail != self.title:
            parts.append(self.detail)

        return ": ".join(parts) if parts else "Unknown API error"
