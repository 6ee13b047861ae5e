"""Retry policy for the Polar HTTP transport.

The policy answers two questions for the transport's retry loop:

- *May this failed attempt be retried?* Only errors whose kind is retryable
  (RATE_LIMITED, SERVER_ERROR, NETWORK), and only while the retry budget lasts.
  Idempotent methods are always eligible; POST is eligible on 429 (the request
  was rejected before processing) and otherwise only when it carries an
  ``Idempotency-Key`` header.
- *How long to wait?* Exponential backoff capped at ``max_backoff``, plus
  random jitter so that many clients do not retry in lockstep. A Retry-After
  value from a 429 response replaces the computed base delay.

## Default backoff sequence

| Retry | Base delay (backoff_factor=1.0) | With jitter=0.1 |
|-------|---------------------------------|-----------------|
| 1     | 1s                              | 1.0s - 1.1s     |
| 2     | 2s                              | 2.0s - 2.2s     |
| 3     | 4s                              | 4.0s - 4.4s     |

Example:
    ```python
    policy = RetryPolicy(max_retries=5, backoff_factor=0.5, max_backoff=30)
    policy.compute_delay(3)  # ~2.0 - 2.2 seconds
    ```
"""

import random
from collections.abc import Mapping
from dataclasses import dataclass, field

from polar_client.errors.models import ApiError, ErrorKind

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff with jitter.

    Args:
        max_retries: Maximum number of retry attempts after the first one.
        backoff_factor: Base delay in seconds for the first retry.
        max_backoff: Upper bound in seconds for any single delay.
        jitter: Fraction of the base delay added as uniform random jitter.
    """

    # Idempotent HTTP methods (per RFC 7231), plus PATCH: Polar updates set fields
    IDEMPOTENT_METHODS = frozenset(["HEAD", "GET", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"])

    max_retries: int = 3
    backoff_factor: float = 1.0
    max_backoff: float = 30.0
    jitter: float = 0.1
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.backoff_factor < 0 or self.max_backoff < 0 or self.jitter < 0:
            raise ValueError("backoff_factor, max_backoff and jitter must be >= 0")

    def should_retry(
        self,
        method: str,
        error: ApiError,
        retries: int,
        headers: Mapping[str, str] | None = None,
    ) -> bool:
        """Determine if a failed attempt should be retried.

        Args:
            method: HTTP method of the request.
            error: Classified error of the failed attempt.
            retries: Number of retries attempted so far.
            headers: Request headers (checked for an idempotency key).

        Returns:
            True if should retry, False otherwise
        """
        if retries >= self.max_retries or not error.retryable:
            return False

        if method.upper() in self.IDEMPOTENT_METHODS:
            return True

        if error.kind is ErrorKind.RATE_LIMITED:
            return True

        return headers is not None and any(k.lower() == IDEMPOTENCY_KEY_HEADER.lower() for k in headers)

    def compute_delay(self, retry_number: int, retry_after: float | None = None) -> float:
        """Calculate the delay before a retry.

        Uses formula: min(backoff_factor * (2 ** (retry_number - 1)), max_backoff) + jitter

        Args:
            retry_number: Current retry attempt (1-indexed)
            retry_after: Server-requested delay, which replaces the computed base.

        Returns:
            Delay in seconds
        """
        if retry_after is not None:
            base = min(retry_after, self.max_backoff)
        else:
            base = min(self.backoff_factor * (2 ** (retry_number - 1)), self.max_backoff)

        if self.jitter and base:
            return base + self.rng.uniform(0, base * self.jitter)
        return base
