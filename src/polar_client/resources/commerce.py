"""Catalog and sales endpoints: products, orders, subscriptions, checkouts, payments."""

import asyncio
from collections.abc import Mapping
from typing import Any

from polar_client.resources.base import (
    CreateMixin,
    DeleteMixin,
    ExportMixin,
    GetMixin,
    ListMixin,
    ResourceEndpoints,
    UpdateMixin,
    require_body,
    require_id,
)
from polar_client.result import Result


class Products(ListMixin, GetMixin, CreateMixin, UpdateMixin, ExportMixin, ResourceEndpoints):
    path = "/v1/products/"

    async def archive(self, product_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Archive a product. Archived products can no longer be purchased."""
        return await self.update(product_id, {"is_archived": True}, cancel_event=cancel_event)

    async def create_price(
        self,
        product_id: str,
        body: Mapping[str, Any],
        *,
        idempotency_key: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        path = self._item_path(product_id, "/prices/", argument="product_id")
        require_body(body)
        return await self._transport.request(
            "POST",
            path,
            json=dict(body),
            headers=self._idempotency_headers(idempotency_key),
            cancel_event=cancel_event,
        )


class Orders(ListMixin, GetMixin, UpdateMixin, ExportMixin, ResourceEndpoints):
    path = "/v1/orders/"

    async def get_invoice(self, order_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Fetch the invoice of an order; ``Success(None)`` if none was generated."""
        path = self._item_path(order_id, "/invoice", argument="order_id")
        return await self._get_optional(path, cancel_event, decode=False)

    async def generate_invoice(self, order_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Ask the API to (re)generate the invoice of an order."""
        path = self._item_path(order_id, "/generate_invoice", argument="order_id")
        return await self._transport.request("POST", path, cancel_event=cancel_event)


class Subscriptions(ListMixin, GetMixin, CreateMixin, UpdateMixin, ExportMixin, ResourceEndpoints):
    path = "/v1/subscriptions/"

    async def revoke(self, subscription_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Revoke a subscription immediately."""
        path = self._item_path(subscription_id, argument="subscription_id")
        return await self._transport.request("DELETE", path, cancel_event=cancel_event)


class Checkouts(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ResourceEndpoints):
    """Checkout sessions.

    The ``client_*`` methods address a checkout by its client secret, the way
    a storefront does.
    """

    path = "/v1/checkouts/"

    def _client_path(self, client_secret: str, suffix: str = "") -> str:
        return f"{self.path}client/{require_id(client_secret, 'client_secret')}{suffix}"

    async def client_get(self, client_secret: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._get_optional(self._client_path(client_secret), cancel_event)

    async def client_update(
        self,
        client_secret: str,
        body: Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        path = self._client_path(client_secret)
        require_body(body)
        return self._decode(await self._transport.request("PATCH", path, json=dict(body), cancel_event=cancel_event))

    async def client_confirm(
        self,
        client_secret: str,
        body: Mapping[str, Any] | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        path = self._client_path(client_secret, "/confirm")
        return self._decode(
            await self._transport.request("POST", path, json=dict(body or {}), cancel_event=cancel_event)
        )


class CheckoutLinks(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ResourceEndpoints):
    path = "/v1/checkout_links/"


class Payments(ListMixin, GetMixin, ResourceEndpoints):
    path = "/v1/payments/"


class Refunds(ListMixin, GetMixin, CreateMixin, ResourceEndpoints):
    path = "/v1/refunds/"


class Discounts(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ResourceEndpoints):
    path = "/v1/discounts/"
