"""Organization-level endpoints: benefits, usage metering, files, webhooks and metrics."""

import asyncio
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Any

from polar_client.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, Page
from polar_client.query import QueryFilter
from polar_client.resources.base import (
    CreateMixin,
    DeleteMixin,
    ExportMixin,
    Filters,
    GetMixin,
    ListMixin,
    ResourceEndpoints,
    UpdateMixin,
    require_body,
)
from polar_client.result import Result


class Benefits(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ExportMixin, ResourceEndpoints):
    path = "/v1/benefits/"

    def _grants_path(self, benefit_id: str) -> str:
        return self._item_path(benefit_id, "/grants/", argument="benefit_id")

    async def list_grants(
        self,
        benefit_id: str,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        filters: Filters = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Page[Any]]:
        """One page of the grants of a benefit. Grants are never decoded."""
        paginator = self._paginator(self._grants_path(benefit_id), decoder=_identity)
        return await paginator.fetch_page(page, limit, filters, cancel_event=cancel_event)

    def list_all_grants(
        self,
        benefit_id: str,
        filters: Filters = None,
        *,
        limit: int = MAX_PAGE_LIMIT,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[Result[Any]]:
        paginator = self._paginator(self._grants_path(benefit_id), decoder=_identity)
        return paginator.fetch_all(filters, limit=limit, cancel_event=cancel_event)


class Meters(ListMixin, GetMixin, CreateMixin, UpdateMixin, ResourceEndpoints):
    path = "/v1/meters/"

    async def quantities(
        self,
        meter_id: str,
        filters: Filters = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        """Aggregated quantities of a meter.

        The API expects ``start_timestamp``, ``end_timestamp`` and ``interval``
        filters.
        """
        path = self._item_path(meter_id, "/quantities", argument="meter_id")
        params = QueryFilter(filters).to_params()
        return await self._transport.request("GET", path, params=params, cancel_event=cancel_event)


class Events(ListMixin, GetMixin, ResourceEndpoints):
    path = "/v1/events/"

    async def ingest(
        self,
        events: Sequence[Mapping[str, Any]],
        *,
        idempotency_key: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        """Ingest usage events in one batch."""
        require_body(events, "events")
        return await self._transport.request(
            "POST",
            f"{self.path}ingest",
            json={"events": [dict(event) for event in events]},
            headers=self._idempotency_headers(idempotency_key),
            cancel_event=cancel_event,
        )


class Metrics(ResourceEndpoints):
    path = "/v1/metrics/"

    async def get(self, filters: Filters = None, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Metrics over a period; filters include ``start_date``, ``end_date`` and ``interval``."""
        params = QueryFilter(filters).to_params()
        return await self._transport.request("GET", self.path, params=params, cancel_event=cancel_event)

    async def limits(self, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        return await self._transport.request("GET", f"{self.path}limits", cancel_event=cancel_event)


class CustomFields(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ResourceEndpoints):
    path = "/v1/custom_fields/"


class Files(ListMixin, CreateMixin, DeleteMixin, ResourceEndpoints):
    path = "/v1/files/"


class Organizations(ListMixin, GetMixin, UpdateMixin, ResourceEndpoints):
    path = "/v1/organizations/"


class Webhooks(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ResourceEndpoints):
    """Webhook endpoints and their delivery log."""

    path = "/v1/webhooks/endpoints/"
    deliveries_path = "/v1/webhooks/deliveries/"

    async def list_deliveries(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        filters: Filters = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Page[Any]]:
        paginator = self._paginator(self.deliveries_path, decoder=_identity)
        return await paginator.fetch_page(page, limit, filters, cancel_event=cancel_event)


def _identity(item: Any) -> Any:
    return item
