"""Client configuration: environment selection and validated settings."""

from dataclasses import dataclass
from enum import Enum

from polar_client.errors.exceptions import ConfigurationError


class Environment(str, Enum):
    """Polar API environment."""

    PRODUCTION = "production"
    SANDBOX = "sandbox"

    @property
    def base_url(self) -> str:
        return _BASE_URLS[self]

    @classmethod
    def from_name(cls, name: str) -> "Environment":
        """Look up an environment by name, case-insensitively.

        Raises:
            ConfigurationError: If the name is not a known environment.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            raise ConfigurationError(f"Unknown Polar environment {name!r} (expected one of: {choices})") from None


_BASE_URLS = {
    Environment.PRODUCTION: "https://api.polar.sh",
    Environment.SANDBOX: "https://sandbox-api.polar.sh",
}

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 1.0
DEFAULT_MAX_BACKOFF = 30.0


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings for one :class:`~polar_client.client.PolarClient`.

    Attributes:
        token: Organization access token (required, non-blank).
        environment: Selects the base URL unless ``base_url`` is given.
        base_url: Explicit base URL, overriding ``environment``.
        user_agent: User-Agent header; defaults to ``polar-client/<version>``.
        timeout: Seconds allowed for one whole request attempt.
        max_retries: Retries after the first attempt for transient failures.
        backoff_factor: Base delay in seconds for the first retry.
        max_backoff: Upper bound in seconds for a single retry delay.
        idempotency_keys: Attach an ``Idempotency-Key`` to create calls so they
            can be retried safely.
    """

    token: str
    environment: Environment = Environment.PRODUCTION
    base_url: str | None = None
    user_agent: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    max_backoff: float = DEFAULT_MAX_BACKOFF
    idempotency_keys: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.token, str) or not self.token.strip():
            raise ConfigurationError("An access token is required and must not be blank")
        if self.base_url is not None and not self.base_url.strip():
            raise ConfigurationError("base_url must not be blank")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.backoff_factor < 0 or self.max_backoff < 0:
            raise ConfigurationError("backoff_factor and max_backoff must be >= 0")

    @property
    def resolved_base_url(self) -> str:
        """The base URL requests are sent to."""
        if self.base_url is not None:
            return self.base_url.strip().rstrip("/")
        return self.environment.base_url

    @property
    def resolved_user_agent(self) -> str:
        if self.user_agent:
            return self.user_agent
        from polar_client import __version__

        return f"polar-client/{__version__}"

    def __repr__(self) -> str:
        return (
            f"ClientConfig(token=***, base_url={self.resolved_base_url!r}, timeout={self.timeout}, "
            f"max_retries={self.max_retries})"
        )
