"""Customer-facing endpoints: customers, sessions, customer meters, seats and license keys."""

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


class Customers(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ExportMixin, ResourceEndpoints):
    """Customers, addressable by Polar id or by your own external id."""

    path = "/v1/customers/"
    export_method = "POST"

    def _external_path(self, external_id: str, suffix: str = "") -> str:
        return f"{self.path}external/{require_id(external_id, 'external_id')}{suffix}"

    async def get_external(self, external_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._get_optional(self._external_path(external_id), cancel_event)

    async def update_external(
        self,
        external_id: str,
        body: Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        path = self._external_path(external_id)
        require_body(body)
        return self._decode(await self._transport.request("PATCH", path, json=dict(body), cancel_event=cancel_event))

    async def delete_external(self, external_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._transport.request("DELETE", self._external_path(external_id), cancel_event=cancel_event)

    async def get_state(self, customer_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Customer state: active subscriptions, granted benefits and meters."""
        path = self._item_path(customer_id, "/state", argument="customer_id")
        return await self._get_optional(path, cancel_event, decode=False)

    async def get_state_external(self, external_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._get_optional(self._external_path(external_id, "/state"), cancel_event, decode=False)

    async def get_balance(self, customer_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        path = self._item_path(customer_id, "/balance", argument="customer_id")
        return await self._get_optional(path, cancel_event, decode=False)


class CustomerSessions(CreateMixin, ResourceEndpoints):
    path = "/v1/customer-sessions/"


class CustomerMeters(ListMixin, GetMixin, ResourceEndpoints):
    path = "/v1/customer_meters/"


class SeatActionsMixin:
    """``assign``, ``revoke`` and ``resend_invitation`` for seat-based products.

    Each action takes a body naming the seat (or the subscription and the
    customer's email) and posts it to ``{path}<action>``.
    """

    async def _seat_action(
        self: ResourceEndpoints, action: str, body: Mapping[str, Any], cancel_event: asyncio.Event | None
    ) -> Result[Any]:
        require_body(body)
        return await self._transport.request("POST", f"{self.path}{action}", json=dict(body), cancel_event=cancel_event)

    async def assign(self, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._seat_action("assign", body, cancel_event)

    async def revoke(self, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._seat_action("revoke", body, cancel_event)

    async def resend_invitation(
        self, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None
    ) -> Result[Any]:
        return await self._seat_action("resend_invitation", body, cancel_event)


class Seats(ListMixin, SeatActionsMixin, ResourceEndpoints):
    """Seats of seat-based subscriptions, managed by the organization."""

    path = "/v1/seats/"

    async def claimed_subscriptions(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Subscriptions whose seats the authenticated customer has claimed (a plain list)."""
        return await self._transport.request("GET", f"{self.path}claimed_subscriptions", cancel_event=cancel_event)


class CustomerSeats(ListMixin, GetMixin, SeatActionsMixin, ResourceEndpoints):
    """Seats managed by the customer who bought them, and invitation claiming."""

    path = "/v1/customer_seats/"

    async def claim_info(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._get_optional(f"{self.path}claim_info", cancel_event, decode=False)

    async def claim(self, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Claim a seat with the invitation token carried in ``body``."""
        require_body(body)
        return await self._transport.request("POST", f"{self.path}claim", json=dict(body), cancel_event=cancel_event)


class LicenseKeyActivationMixin:
    """The validate/activate/deactivate flow used by licensed software."""

    async def validate(
        self: ResourceEndpoints, body: Mapping[str, Any], *, cancel_event: asyncio.Event | None = None
    ) -> Result[Any]:
        """Validate a key. ``body`` carries at least ``key`` and ``organization_id``."""
        require_body(body)
        return await self._transport.request("POST", f"{self.path}validate", json=dict(body), cancel_event=cancel_event)

    async def activate(
        self: ResourceEndpoints,
        license_key_id: str,
        body: Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        path = self._item_path(license_key_id, "/activate", argument="license_key_id")
        require_body(body)
        return await self._transport.request("POST", path, json=dict(body), cancel_event=cancel_event)

    async def deactivate(
        self: ResourceEndpoints,
        license_key_id: str,
        body: Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        path = self._item_path(license_key_id, "/deactivate", argument="license_key_id")
        require_body(body)
        return await self._transport.request("POST", path, json=dict(body), cancel_event=cancel_event)


class LicenseKeys(ListMixin, GetMixin, UpdateMixin, LicenseKeyActivationMixin, ResourceEndpoints):
    path = "/v1/license-keys/"
