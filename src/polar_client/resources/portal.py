"""Customer portal endpoints, called with a customer access token.

A customer access token comes from ``client.customer_sessions.create(...)``
and only grants access to that customer's own data. These families are
exposed by :class:`polar_client.CustomerPortalClient`, never by the
organization client.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

from polar_client.resources.base import GetMixin, ListMixin, ResourceEndpoints, require_body, require_id
from polar_client.resources.customers import LicenseKeyActivationMixin
from polar_client.result import Result


class PortalCustomer(ResourceEndpoints):
    """The authenticated customer and their saved payment methods."""

    path = "/v1/customer-portal/customers"

    def _payment_method_path(self, payment_method_id: str | None = None, suffix: str = "") -> str:
        path = f"{self.path}/payment-methods"
        if payment_method_id is None:
            return path
        return f"{path}/{require_id(payment_method_id, 'payment_method_id')}{suffix}"

    async def get(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._get_optional(self.path, cancel_event)

    async def update(self, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        require_body(body)
        return self._decode(await self._transport.request("PATCH", self.path, json=dict(body), cancel_event=cancel_event))

    async def list_payment_methods(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._transport.request("GET", self._payment_method_path(), cancel_event=cancel_event)

    async def add_payment_method(
        self, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None
    ) -> Result[Any]:
        require_body(body)
        return await self._transport.request(
            "POST",
            self._payment_method_path(),
            json=dict(body),
            headers=self._idempotency_headers(),
            cancel_event=cancel_event,
        )

    async def confirm_payment_method(
        self, payment_method_id: str, *, cancel_event: asyncio.Event | None = None
    ) -> Result[Any]:
        path = self._payment_method_path(payment_method_id, "/confirm")
        return await self._transport.request("POST", path, cancel_event=cancel_event)

    async def delete_payment_method(
        self, payment_method_id: str, *, cancel_event: asyncio.Event | None = None
    ) -> Result[Any]:
        path = self._payment_method_path(payment_method_id)
        return await self._transport.request("DELETE", path, cancel_event=cancel_event)


class PortalOrders(ListMixin, GetMixin, ResourceEndpoints):
    path = "/v1/customer-portal/orders/"


class PortalSubscriptions(ListMixin, GetMixin, ResourceEndpoints):
    path = "/v1/customer-portal/subscriptions/"

    async def cancel(self, subscription_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Cancel a subscription at the end of its current period."""
        path = self._item_path(subscription_id, "/cancel", argument="subscription_id")
        return self._decode(await self._transport.request("POST", path, cancel_event=cancel_event))


class PortalBenefitGrants(ListMixin, GetMixin, ResourceEndpoints):
    path = "/v1/customer-portal/benefit-grants/"


class PortalLicenseKeys(ListMixin, GetMixin, LicenseKeyActivationMixin, ResourceEndpoints):
    path = "/v1/customer-portal/license-keys/"


class PortalDownloadables(ResourceEndpoints):
    path = "/v1/customer-portal/downloadables"

    async def list(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Files the customer may download. Not paginated."""
        return await self._transport.request("GET", self.path, cancel_event=cancel_event)


class PortalOrganization(ResourceEndpoints):
    path = "/v1/customer-portal/organizations"

    async def get(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """The organization the customer belongs to."""
        return await self._get_optional(self.path, cancel_event)
