"""Page-based listing and auto-pagination over Polar list endpoints.

Polar list endpoints accept ``page`` (1-based) and ``limit`` query parameters
and answer with an envelope::

    {"items": [...], "pagination": {"total_count": 12, "max_page": 3}}

:meth:`Paginator.fetch_page` performs one bounded call and returns a
:class:`Page`. :meth:`Paginator.fetch_all` walks every page lazily and yields
one ``Result`` per item, stopping after the first failed page.

Items are yielded in server order within a page and in increasing page order.
Nothing is deduplicated or sorted: if the collection changes between page
fetches the traversal may skip or repeat items.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from polar_client.errors.handler import canceled_error, validation_error
from polar_client.errors.models import ApiError, ErrorKind
from polar_client.query import QueryFilter
from polar_client.result import Failure, Result, Success
from polar_client.transport.http import HttpTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_PAGE_LIMIT = 100
DEFAULT_PAGE_LIMIT = 10


@dataclass(frozen=True, slots=True)
class PageInfo:
    """Pagination metadata for one page."""

    page: int
    limit: int
    total_count: int
    max_page: int | None


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """One slice of a server-side collection."""

    items: tuple[T, ...]
    pagination: PageInfo

    @property
    def has_next(self) -> bool:
        """Whether another page is expected after this one."""
        info = self.pagination
        if not self.items:
            return False
        if info.max_page is not None:
            return info.page < info.max_page
        return len(self.items) >= info.limit

    def __len__(self) -> int:
        return len(self.items)


class Paginator(Generic[T]):
    """Fetches pages of one list endpoint.

    Args:
        transport: Transport used for every page request.
        path: List endpoint path, e.g. ``/v1/products/``.
        decoder: Optional callable turning each raw item mapping into ``T``.
            Items are returned as decoded JSON when omitted.
    """

    def __init__(
        self,
        transport: HttpTransport,
        path: str,
        decoder: Callable[[Any], T] | None = None,
    ) -> None:
        self._transport = transport
        self.path = path
        self._decoder = decoder

    async def fetch_page(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        filters: QueryFilter | Mapping[str, Any] | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Page[T]]:
        """Fetch a single page.

        ``limit`` values above :data:`MAX_PAGE_LIMIT` are capped. A page past
        the last one comes back as an empty page, not a failure.

        Returns:
            Success with the page, VALIDATION failure for ``limit <= 0`` or
            ``page < 1`` (no request is sent), or the transport failure.
        """
        if limit <= 0:
            return Failure(validation_error(f"limit must be positive, got {limit}"))
        if page < 1:
            return Failure(validation_error(f"page must be >= 1, got {page}"))
        if limit > MAX_PAGE_LIMIT:
            logger.debug(f"Capping page limit {limit} to {MAX_PAGE_LIMIT}")
            limit = MAX_PAGE_LIMIT

        params: list[tuple[str, Any]] = [("page", page), ("limit", limit)]
        if filters:
            filters = filters if isinstance(filters, QueryFilter) else QueryFilter(filters)
            params.extend(filters.to_params())

        result = await self._transport.request("GET", self.path, params=params, cancel_event=cancel_event)
        if result.is_failure:
            return result
        return self._parse_page(result.value, page, limit)

    async def fetch_all(
        self,
        filters: QueryFilter | Mapping[str, Any] | None = None,
        *,
        limit: int = MAX_PAGE_LIMIT,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[Result[T]]:
        """Iterate over every item of the collection, page by page.

        Each iteration starts a new traversal from page 1. A failed page is
        yielded once as a ``Failure`` and ends the traversal. When
        ``cancel_event`` is set, the next page is not requested and a single
        CANCELED failure is yielded instead.
        """
        page_number = 1
        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.debug(f"Traversal of {self.path} canceled before page {page_number}")
                yield Failure(canceled_error())
                return

            result = await self.fetch_page(page_number, limit, filters, cancel_event=cancel_event)
            if result.is_failure:
                yield result
                return

            page = result.value
            for item in page.items:
                yield Success(item)

            if not page.has_next:
                return
            page_number += 1

    def _parse_page(self, body: Any, page: int, limit: int) -> Result[Page[T]]:
        if not isinstance(body, Mapping) or not isinstance(body.get("items"), list):
            return Failure(
                ApiError.of(ErrorKind.UNKNOWN, f"Unexpected response for {self.path}: not a paginated list")
            )

        meta = body.get("pagination")
        meta = meta if isinstance(meta, Mapping) else {}
        raw_items = body["items"]

        total_count = meta.get("total_count")
        if not isinstance(total_count, int) or total_count < 0:
            total_count = len(raw_items)
        max_page = meta.get("max_page")
        if not isinstance(max_page, int) or max_page < 0:
            max_page = None

        try:
            items = tuple(self._decoder(item) for item in raw_items) if self._decoder else tuple(raw_items)
        except Exception as e:
            return Failure(ApiError.of(ErrorKind.UNKNOWN, f"Failed to decode item from {self.path}: {e}"))

        return Success(Page(items=items, pagination=PageInfo(page, limit, total_count, max_page)))
