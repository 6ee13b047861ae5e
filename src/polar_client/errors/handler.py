"""Classification of raw transport outcomes into :class:`ApiError` values.

Everything in this module is pure: no I/O, no logging, and every input maps to
exactly one :class:`ErrorKind`.
"""

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from polar_client.errors.models import ApiError, ErrorKind, ProblemDetail

_DEFAULT_MESSAGES = {
    400: "The request was invalid or malformed.",
    401: "Authentication failed or was not provided.",
    403: "Access to the requested resource is forbidden.",
    404: "The requested resource was not found.",
    405: "The HTTP method is not allowed for this endpoint.",
    409: "The request conflicts with the current state of the resource.",
    422: "The request failed validation.",
    429: "Rate limit exceeded. Please try again later.",
    500: "An internal server error occurred.",
    502: "The server received an invalid response.",
    503: "The service is temporarily unavailable.",
    504: "The gateway timed out.",
}

_MESSAGE_FIELDS = ("detail", "message", "description")
_TYPE_FIELDS = ("error", "type", "code", "error_code", "error_type")


def error_kind_for_status(status_code: int) -> ErrorKind:
    """Map an HTTP status code to its error kind.

    Args:
        status_code: Any integer status code.

    Returns:
        The kind; UNKNOWN for codes outside the mapped ranges.
    """
    if status_code in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code in (400, 422):
        return ErrorKind.VALIDATION
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if 500 <= status_code < 600:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN


def parse_retry_after(headers: httpx.Headers, now: datetime | None = None) -> float | None:
    """Parse a Retry-After header into seconds.

    Supports both formats:
    - Delay-seconds: "120" (integer seconds)
    - HTTP-date: "Wed, 21 Oct 2015 07:28:00 GMT"

    Args:
        headers: Response headers.
        now: Reference time for HTTP-date values (defaults to current UTC time).

    Returns:
        Delay in seconds, or None if the header is missing, invalid or in the past.
    """
    retry_after = headers.get("retry-after")
    if not retry_after:
        return None

    try:
        delay = int(retry_after)
        return float(delay) if delay >= 0 else None
    except ValueError:
        pass

    try:
        retry_date = parsedate_to_datetime(retry_after)
    except (ValueError, TypeError):
        return None

    if retry_date.tzinfo is None:
        retry_date = retry_date.replace(tzinfo=UTC)
    delay = (retry_date - (now or datetime.now(UTC))).total_seconds()
    return delay if delay >= 0 else None


def _format_validation_entries(entries: list) -> str:
    messages = []
    for entry in entries:
        if not isinstance(entry, dict):
            messages.append(str(entry))
            continue
        message = entry.get("msg") or entry.get("message") or ""
        loc = entry.get("loc")
        if isinstance(loc, (list, tuple)) and loc:
            messages.append(f"{'.'.join(str(part) for part in loc)}: {message}")
        elif entry.get("field"):
            messages.append(f"{entry['field']}: {message}")
        else:
            messages.append(str(message))
    return "; ".join(m for m in messages if m)


def _parse_body(response: httpx.Response) -> tuple[str | None, str | None, Any]:
    """Extract (message, error_type, details) from an error body."""
    problem = ProblemDetail.from_response(response)
    if problem is not None:
        details = problem.extensions.get("errors") if problem.extensions else None
        message = problem.to_message()
        if details:
            rendered = _format_validation_entries(details)
            if rendered:
                message = f"{message} ({rendered})"
        return message, problem.type, details

    try:
        data = response.json()
    except ValueError:
        return None, None, None

    if not isinstance(data, dict):
        return None, None, None

    message = None
    details = None
    for field in _MESSAGE_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value:
            message = value
            break
        if isinstance(value, list) and value:
            # FastAPI-style validation detail: [{"loc": [...], "msg": "...", "type": "..."}]
            details = value
            message = _format_validation_entries(value)
            break

    if message is None and isinstance(data.get("errors"), list):
        details = data["errors"]
        message = _format_validation_entries(details) or None

    error_type = None
    for field in _TYPE_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value:
            if message is None and field == "error":
                # {"error": "..."} without a detail: the error string is the message
                message = value
            else:
                error_type = value
            break

    return message, error_type, details


def classify_response(response: httpx.Response) -> ApiError:
    """Classify an unsuccessful HTTP response.

    Args:
        response: A response with a non-2xx status code.

    Returns:
        The classified error, with the server's detail in the message.
    """
    status_code = response.status_code
    kind = error_kind_for_status(status_code)
    message, error_type, details = _parse_body(response)

    if not message:
        text = response.text[:200] if response.content else ""
        message = _DEFAULT_MESSAGES.get(status_code) or (
            f"HTTP {status_code}: {text}" if text else f"HTTP {status_code}"
        )

    retry_after = None
    if kind is ErrorKind.RATE_LIMITED:
        retry_after = parse_retry_after(response.headers)
        if retry_after is not None:
            message = f"{message} Retry after {retry_after:.0f} seconds."

    return ApiError.of(
        kind,
        message,
        status_code=status_code,
        error_type=error_type,
        details=details,
        retry_after=retry_after,
    )


def classify_exception(exc: BaseException) -> ApiError:
    """Classify a transport-level exception raised while sending a request.

    Args:
        exc: The exception raised by the HTTP layer.

    Returns:
        NETWORK for timeouts and connection failures, UNKNOWN otherwise.
    """
    if isinstance(exc, (httpx.UnsupportedProtocol, httpx.InvalidURL)):
        return ApiError.of(ErrorKind.UNKNOWN, f"Invalid request target: {exc}")
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ApiError.of(ErrorKind.NETWORK, f"Request timed out: {exc}" if str(exc) else "Request timed out")
    if isinstance(exc, (httpx.TransportError, OSError)):
        return ApiError.of(ErrorKind.NETWORK, f"Connection failed: {exc}")
    return ApiError.of(ErrorKind.UNKNOWN, f"Unexpected transport error: {exc!r}")


def canceled_error(message: str = "The operation was canceled") -> ApiError:
    """Return the error reported when a cancellation signal stops a call."""
    return ApiError.of(ErrorKind.CANCELED, message)


def validation_error(message: str) -> ApiError:
    """Return a client-side VALIDATION error (no request was sent)."""
    return ApiError.of(ErrorKind.VALIDATION, message)
