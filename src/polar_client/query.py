"""Immutable filter sets for list endpoints.

A :class:`QueryFilter` maps filter names to values. Every ``with_*`` method
returns a new filter with one key set; the last write per key wins and a
``None`` value leaves the filter unchanged, so optional arguments can be
chained without branching:

```python
filters = (
    QueryFilter()
    .with_customer_id(customer_id)
    .with_status("paid")
    .created_after(datetime(2024, 1, 1, tzinfo=UTC))
)
page = await client.orders.list(filters=filters)
```

Filters are not validated here; the API reports bad combinations as
VALIDATION failures.
"""

from collections.abc import Iterator, Mapping
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _freeze(value: Any) -> Any:
    if isinstance(value, list | tuple | set | frozenset):
        return tuple(value)
    return value


def _render(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.strftime(_DATETIME_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class QueryFilter(Mapping[str, Any]):
    """Immutable mapping of filter name to filter value.

    Args:
        filters: Initial filters; ``None`` values are dropped.
    """

    __slots__ = ("_filters",)

    def __init__(self, filters: Mapping[str, Any] | None = None) -> None:
        self._filters: dict[str, Any] = {}
        if filters:
            for key, value in filters.items():
                if value is not None:
                    self._filters[key] = _freeze(value)

    def __getitem__(self, key: str) -> Any:
        return self._filters[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __hash__(self) -> int:
        return hash(frozenset(self._filters.items()))

    def __repr__(self) -> str:
        return f"QueryFilter({self._filters!r})"

    def with_filter(self, key: str, value: Any) -> "QueryFilter":
        """Return a copy with ``key`` set to ``value`` (no-op for None)."""
        if value is None:
            return self
        return QueryFilter({**self._filters, key: value})

    def without(self, key: str) -> "QueryFilter":
        """Return a copy without ``key``."""
        if key not in self._filters:
            return self
        return QueryFilter({k: v for k, v in self._filters.items() if k != key})

    def with_id(self, value: Any) -> "QueryFilter":
        return self.with_filter("id", value)

    def with_status(self, value: Any) -> "QueryFilter":
        return self.with_filter("status", value)

    def with_customer_id(self, value: Any) -> "QueryFilter":
        return self.with_filter("customer_id", value)

    def with_product_id(self, value: Any) -> "QueryFilter":
        return self.with_filter("product_id", value)

    def with_organization_id(self, value: Any) -> "QueryFilter":
        return self.with_filter("organization_id", value)

    def with_external_id(self, value: Any) -> "QueryFilter":
        return self.with_filter("external_id", value)

    def with_email(self, value: str | None) -> "QueryFilter":
        return self.with_filter("email", value)

    def with_name(self, value: str | None) -> "QueryFilter":
        return self.with_filter("name", value)

    def with_query(self, value: str | None) -> "QueryFilter":
        """Free-text search, where the endpoint supports it."""
        return self.with_filter("query", value)

    def with_type(self, value: Any) -> "QueryFilter":
        return self.with_filter("type", value)

    def with_active(self, value: bool | None) -> "QueryFilter":
        return self.with_filter("is_active", value)

    def with_archived(self, value: bool | None) -> "QueryFilter":
        return self.with_filter("is_archived", value)

    def created_after(self, value: datetime | date | None) -> "QueryFilter":
        """Only items created at or after ``value``."""
        return self.with_filter("created_after", value)

    def created_before(self, value: datetime | date | None) -> "QueryFilter":
        """Only items created at or before ``value``."""
        return self.with_filter("created_before", value)

    def to_params(self) -> list[tuple[str, str]]:
        """Render the filters as query-string pairs.

        Sequences become repeated keys. Naive datetimes are taken as UTC.
        """
        params: list[tuple[str, str]] = []
        for key, value in self._filters.items():
            if isinstance(value, tuple):
                params.extend((key, _render(item)) for item in value)
            else:
                params.append((key, _render(value)))
        return params
