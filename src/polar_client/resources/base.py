"""Building blocks for resource endpoint groups.

Each resource family (products, orders, ...) is a :class:`ResourceEndpoints`
subclass that names its base path and mixes in the operations it supports:

```python
class Discounts(ListMixin, GetMixin, CreateMixin, UpdateMixin, DeleteMixin, ResourceEndpoints):
    path = "/v1/discounts/"
```

Not-found convention:

- Reads of one object (``get``, ``get_external``, ``get_state``,
  ``get_balance``, ``get_invoice``, ``client_get``, ``claim_info`` and the
  customer portal's ``get`` methods) return ``Success(None)`` when the object
  does not exist.
- ``update``, ``delete`` and other actions return a NOT_FOUND ``Failure``.
- Collection reads (``list``, ``quantities``, ``limits``, ...) report a 404 as
  a NOT_FOUND ``Failure``.

Empty ids and empty request bodies raise :class:`InvalidArgumentError` before
any request is made.
"""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Callable, Mapping
from enum import Enum
from typing import Any, ClassVar
from urllib.parse import quote

from polar_client.errors.exceptions import InvalidArgumentError
from polar_client.errors.models import ErrorKind
from polar_client.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, Page, Paginator
from polar_client.query import QueryFilter
from polar_client.result import Result, Success
from polar_client.transport.http import HttpTransport
from polar_client.transport.retry import IDEMPOTENCY_KEY_HEADER

logger = logging.getLogger(__name__)

Filters = QueryFilter | Mapping[str, Any] | None


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    EXCEL = "excel"


def require_id(value: str, argument: str = "resource_id") -> str:
    """Validate a path identifier and return it URL-quoted."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{argument} must be a non-empty string", argument=argument)
    return quote(value.strip(), safe="")


def require_body(body: Any, argument: str = "body") -> Any:
    if not body:
        raise InvalidArgumentError(f"{argument} must not be empty", argument=argument)
    return body


class ResourceEndpoints:
    """A named set of endpoints sharing one base path and one transport.

    Args:
        transport: Shared transport of the owning client.
        idempotency_keys: Attach an ``Idempotency-Key`` header to creates.
        decoder: Optional callable turning raw resource mappings into the
            caller's own types. Applied to list items and to the results of
            ``get``, ``create`` and ``update``.
    """

    path: ClassVar[str]

    def __init__(
        self,
        transport: HttpTransport,
        *,
        idempotency_keys: bool = True,
        decoder: Callable[[Any], Any] | None = None,
    ) -> None:
        self._transport = transport
        self._idempotency_keys = idempotency_keys
        self._decoder = decoder

    def with_decoder(self, decoder: Callable[[Any], Any]) -> "ResourceEndpoints":
        """Return a copy of these endpoints that decodes resources with ``decoder``."""
        return type(self)(self._transport, idempotency_keys=self._idempotency_keys, decoder=decoder)

    def _item_path(self, resource_id: str, suffix: str = "", argument: str = "resource_id") -> str:
        return f"{self.path}{require_id(resource_id, argument)}{suffix}"

    def _idempotency_headers(self, idempotency_key: str | None = None) -> dict[str, str] | None:
        if idempotency_key is not None:
            return {IDEMPOTENCY_KEY_HEADER: idempotency_key}
        if self._idempotency_keys:
            return {IDEMPOTENCY_KEY_HEADER: str(uuid.uuid4())}
        return None

    def _decode(self, result: Result[Any]) -> Result[Any]:
        if self._decoder is None:
            return result
        return result.map(self._decoder)

    async def _get_optional(
        self, path: str, cancel_event: asyncio.Event | None, *, decode: bool = True
    ) -> Result[Any]:
        result = await self._transport.request("GET", path, cancel_event=cancel_event)
        if result.is_failure and result.error.kind is ErrorKind.NOT_FOUND:
            logger.debug(f"GET {path} returned 404, treating as absent")
            return Success(None)
        if not decode or (result.is_success and result.value is None):
            return result
        return self._decode(result)

    def _paginator(self, path: str | None = None, decoder: Callable[[Any], Any] | None = None) -> Paginator:
        return Paginator(self._transport, path or self.path, decoder or self._decoder)


class ListMixin:
    """``list``, ``list_all`` and ``query``."""

    def query(self) -> QueryFilter:
        """Start an empty filter set for this resource's list calls."""
        return QueryFilter()

    async def list(
        self: ResourceEndpoints,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        filters: Filters = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Page[Any]]:
        """Fetch one page of the collection."""
        return await self._paginator().fetch_page(page, limit, filters, cancel_event=cancel_event)

    def list_all(
        self: ResourceEndpoints,
        filters: Filters = None,
        *,
        limit: int = MAX_PAGE_LIMIT,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[Result[Any]]:
        """Iterate over every item of the collection, one ``Result`` per item."""
        return self._paginator().fetch_all(filters, limit=limit, cancel_event=cancel_event)


class GetMixin:
    async def get(self: ResourceEndpoints, resource_id: str, *, cancel_event: asyncio.Event | None = None) -> Result[Any]:
        """Fetch one resource; ``Success(None)`` if it does not exist."""
        return await self._get_optional(self._item_path(resource_id), cancel_event)


class CreateMixin:
    async def create(
        self: ResourceEndpoints,
        body: Mapping[str, Any],
        *,
        idempotency_key: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        """Create a resource.

        Unless disabled on the client, a fresh ``Idempotency-Key`` is attached
        and reused across the retries of this call, so server errors and
        network failures can be retried without creating duplicates. Pass
        ``idempotency_key`` to reuse a key across separate calls.
        """
        require_body(body)
        result = await self._transport.request(
            "POST",
            self.path,
            json=dict(body),
            headers=self._idempotency_headers(idempotency_key),
            cancel_event=cancel_event,
        )
        return self._decode(result)


class UpdateMixin:
    async def update(
        self: ResourceEndpoints,
        resource_id: str,
        body: Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        """Update fields of a resource; NOT_FOUND failure if it does not exist."""
        path = self._item_path(resource_id)
        require_body(body)
        result = await self._transport.request("PATCH", path, json=dict(body), cancel_event=cancel_event)
        return self._decode(result)


class DeleteMixin:
    async def delete(
        self: ResourceEndpoints, resource_id: str, *, cancel_event: asyncio.Event | None = None
    ) -> Result[Any]:
        """Delete a resource; NOT_FOUND failure if it does not exist."""
        return await self._transport.request("DELETE", self._item_path(resource_id), cancel_event=cancel_event)


class ExportMixin:
    # Customers take the export request as a POST body
    export_method: ClassVar[str] = "GET"

    async def export(
        self: ResourceEndpoints,
        format: ExportFormat | str = ExportFormat.CSV,
        filters: Filters = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        """Export the collection in the given format."""
        fmt = ExportFormat(format)
        path = f"{self.path}export/"
        filters = QueryFilter(filters).with_filter("format", fmt)

        if self.export_method == "POST":
            body: dict[str, Any] = {}
            for key, value in filters.to_params():
                body.setdefault(key, []).append(value)
            body = {key: values[0] if len(values) == 1 else values for key, values in body.items()}
            return await self._transport.request("POST", path, json=body, cancel_event=cancel_event)
        return await self._transport.request("GET", path, params=filters.to_params(), cancel_event=cancel_event)
