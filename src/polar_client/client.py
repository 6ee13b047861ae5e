"""The Polar client and its builder.

Example:
    ```python
    from polar_client import Environment, PolarClient

    async with (
        PolarClient.create()
        .with_token(token)
        .with_environment(Environment.SANDBOX)
        .with_max_retries(5)
        .build()
    ) as client:
        page = await client.products.list(limit=20)
        async for result in client.orders.list_all(client.orders.query().with_status("paid")):
            order = result.unwrap()
    ```
"""

import dataclasses
import logging
from typing import Any, Self, TypeVar

import httpx

from polar_client.auth.bearer import BearerTokenAuth
from polar_client.auth.credentials import ACCESS_TOKEN_ENV_VAR, CredentialResolver
from polar_client.config import ClientConfig, Environment
from polar_client.errors.exceptions import ConfigurationError
from polar_client.resources import (
    Benefits,
    CheckoutLinks,
    Checkouts,
    CustomerMeters,
    Customers,
    CustomerSeats,
    CustomerSessions,
    CustomFields,
    Discounts,
    Events,
    Files,
    LicenseKeys,
    Meters,
    Metrics,
    Orders,
    Organizations,
    Payments,
    PortalBenefitGrants,
    PortalCustomer,
    PortalDownloadables,
    PortalLicenseKeys,
    PortalOrders,
    PortalOrganization,
    PortalSubscriptions,
    Products,
    Refunds,
    Seats,
    Subscriptions,
    Webhooks,
)
from polar_client.resources.base import ResourceEndpoints
from polar_client.transport.http import HttpTransport
from polar_client.transport.retry import RetryPolicy

logger = logging.getLogger(__name__)

ENVIRONMENT_ENV_VAR = "POLAR_ENVIRONMENT"
BASE_URL_ENV_VAR = "POLAR_BASE_URL"
TIMEOUT_ENV_VAR = "POLAR_TIMEOUT"
MAX_RETRIES_ENV_VAR = "POLAR_MAX_RETRIES"

E = TypeVar("E", bound=ResourceEndpoints)


class _ApiClient:
    """Connection pool, transport and lifecycle shared by both client kinds."""

    def __init__(self, config: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._custom_transport = transport
        self._http = httpx.AsyncClient(
            base_url=config.resolved_base_url,
            auth=BearerTokenAuth(config.token),
            headers={"User-Agent": config.resolved_user_agent, "Accept": "application/json"},
            timeout=config.timeout,
            transport=transport,
        )
        self.transport = HttpTransport(
            self._http,
            retry_policy=RetryPolicy(
                max_retries=config.max_retries,
                backoff_factor=config.backoff_factor,
                max_backoff=config.max_backoff,
            ),
            timeout=config.timeout,
        )

    def _endpoints(self, cls: type[E]) -> E:
        return cls(self.transport, idempotency_keys=self.config.idempotency_keys)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.config.resolved_base_url!r})"


class PolarClient(_ApiClient):
    """Async client for the Polar API.

    Owns one :class:`ClientConfig` and one ``httpx.AsyncClient`` (the shared
    connection pool). Every resource accessor uses the same transport, and no
    per-call state is kept, so one client can serve concurrent tasks.

    Use :meth:`create` for a builder or :meth:`from_env` to configure from
    ``POLAR_*`` environment variables. Close the client with :meth:`aclose`
    or by using it as an async context manager.
    """

    def __init__(self, config: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(config, transport=transport)

        self.products = self._endpoints(Products)
        self.customers = self._endpoints(Customers)
        self.orders = self._endpoints(Orders)
        self.subscriptions = self._endpoints(Subscriptions)
        self.checkouts = self._endpoints(Checkouts)
        self.checkout_links = self._endpoints(CheckoutLinks)
        self.benefits = self._endpoints(Benefits)
        self.payments = self._endpoints(Payments)
        self.refunds = self._endpoints(Refunds)
        self.discounts = self._endpoints(Discounts)
        self.meters = self._endpoints(Meters)
        self.customer_meters = self._endpoints(CustomerMeters)
        self.custom_fields = self._endpoints(CustomFields)
        self.events = self._endpoints(Events)
        self.license_keys = self._endpoints(LicenseKeys)
        self.files = self._endpoints(Files)
        self.organizations = self._endpoints(Organizations)
        self.webhooks = self._endpoints(Webhooks)
        self.customer_sessions = self._endpoints(CustomerSessions)
        self.metrics = self._endpoints(Metrics)
        self.seats = self._endpoints(Seats)
        self.customer_seats = self._endpoints(CustomerSeats)

        logger.debug(f"Created Polar client for {config.resolved_base_url}")

    def customer_portal(self, customer_access_token: str) -> "CustomerPortalClient":
        """Open a customer portal client with this client's settings and a customer token.

        The portal client has its own connection pool; close it separately.

        Raises:
            ConfigurationError: If the token is empty.
        """
        config = dataclasses.replace(self.config, token=customer_access_token)
        return CustomerPortalClient(config, transport=self._custom_transport)

    @staticmethod
    def create() -> "PolarClientBuilder":
        """Start building a client."""
        return PolarClientBuilder()

    @classmethod
    def from_env(
        cls,
        *,
        dotenv_path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PolarClient":
        """Build a client from ``POLAR_*`` environment variables (and a .env file).

        Reads ``POLAR_ACCESS_TOKEN`` (or ``POLAR_ACCESS_TOKEN_FILE``),
        ``POLAR_ENVIRONMENT``, ``POLAR_BASE_URL``, ``POLAR_TIMEOUT`` and
        ``POLAR_MAX_RETRIES``.

        Raises:
            CredentialNotFoundError: If no access token is configured.
            ConfigurationError: If a setting has an invalid value.
        """
        resolver = CredentialResolver(dotenv_path=dotenv_path)
        builder = cls.create().with_token(resolver.resolve_access_token(required=True))

        environment = resolver.resolve(env_var_name=ENVIRONMENT_ENV_VAR, secret=False)
        if environment:
            builder.with_environment(Environment.from_name(environment))

        base_url = resolver.resolve(env_var_name=BASE_URL_ENV_VAR, secret=False)
        if base_url:
            builder.with_base_url(base_url)

        timeout = resolver.resolve(env_var_name=TIMEOUT_ENV_VAR, secret=False)
        if timeout:
            builder.with_timeout(_parse_number(TIMEOUT_ENV_VAR, timeout, float))

        max_retries = resolver.resolve(env_var_name=MAX_RETRIES_ENV_VAR, secret=False)
        if max_retries:
            builder.with_max_retries(_parse_number(MAX_RETRIES_ENV_VAR, max_retries, int))

        if transport is not None:
            builder.with_transport(transport)
        return builder.build()


class CustomerPortalClient(_ApiClient):
    """Client for the customer portal, authenticated with a customer access token.

    Create one with :meth:`PolarClient.customer_portal` or
    :meth:`PolarClientBuilder.build_customer_portal`. A customer access token
    comes from ``client.customer_sessions.create({"customer_id": ...})``.

    Example:
        ```python
        session = (await client.customer_sessions.create({"customer_id": customer_id})).unwrap()
        async with client.customer_portal(session["token"]) as portal:
            async for result in portal.subscriptions.list_all():
                subscription = result.unwrap()
        ```
    """

    def __init__(self, config: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(config, transport=transport)

        self.customer = self._endpoints(PortalCustomer)
        self.orders = self._endpoints(PortalOrders)
        self.subscriptions = self._endpoints(PortalSubscriptions)
        self.benefit_grants = self._endpoints(PortalBenefitGrants)
        self.license_keys = self._endpoints(PortalLicenseKeys)
        self.downloadables = self._endpoints(PortalDownloadables)
        self.organization = self._endpoints(PortalOrganization)


class PolarClientBuilder:
    """Fluent builder for :class:`PolarClient`.

    Setters return the builder; nothing is validated until :meth:`build`,
    which raises :class:`ConfigurationError` for a missing or blank token or
    any other invalid setting.
    """

    def __init__(self) -> None:
        self._settings: dict[str, Any] = {}
        self._transport: httpx.AsyncBaseTransport | None = None

    def with_token(self, token: str) -> "PolarClientBuilder":
        self._settings["token"] = token
        return self

    def with_token_from_env(
        self,
        env_var_name: str = ACCESS_TOKEN_ENV_VAR,
        *,
        dotenv_path: str | None = None,
    ) -> "PolarClientBuilder":
        """Read the token from an environment variable (or a .env file).

        Raises:
            CredentialNotFoundError: If the variable is not set.
        """
        resolver = CredentialResolver(dotenv_path=dotenv_path)
        return self.with_token(resolver.resolve(env_var_name=env_var_name, required=True))

    def with_environment(self, environment: Environment | str) -> "PolarClientBuilder":
        if isinstance(environment, str) and not isinstance(environment, Environment):
            environment = Environment.from_name(environment)
        self._settings["environment"] = environment
        return self

    def with_base_url(self, base_url: str) -> "PolarClientBuilder":
        """Override the environment's base URL, e.g. for a proxy."""
        self._settings["base_url"] = base_url
        return self

    def with_user_agent(self, user_agent: str) -> "PolarClientBuilder":
        self._settings["user_agent"] = user_agent
        return self

    def with_timeout(self, seconds: float) -> "PolarClientBuilder":
        self._settings["timeout"] = seconds
        return self

    def with_max_retries(self, max_retries: int) -> "PolarClientBuilder":
        self._settings["max_retries"] = max_retries
        return self

    def with_backoff(self, backoff_factor: float, max_backoff: float | None = None) -> "PolarClientBuilder":
        self._settings["backoff_factor"] = backoff_factor
        if max_backoff is not None:
            self._settings["max_backoff"] = max_backoff
        return self

    def with_idempotency_keys(self, enabled: bool) -> "PolarClientBuilder":
        self._settings["idempotency_keys"] = enabled
        return self

    def with_transport(self, transport: httpx.AsyncBaseTransport) -> "PolarClientBuilder":
        """Use a custom httpx transport (proxies, mocking in tests)."""
        self._transport = transport
        return self

    def build(self) -> PolarClient:
        return PolarClient(self._config(), transport=self._transport)

    def build_customer_portal(self) -> CustomerPortalClient:
        """Build a customer portal client; the configured token must be a customer access token."""
        return CustomerPortalClient(self._config(), transport=self._transport)

    def _config(self) -> ClientConfig:
        if "token" not in self._settings:
            raise ConfigurationError("An access token is required; call with_token() or with_token_from_env()")
        return ClientConfig(**self._settings)


def _parse_number(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a {kind.__name__}, got {raw!r}") from None
