"""polar-client - async Python client for the Polar API.

Every network operation returns a :class:`Result` instead of raising:

- Classified errors (:class:`ErrorKind`) with retry, backoff and jitter
- Page-based listing and lazy auto-pagination
- Immutable query filters
- Access token resolution from the environment or a .env file

Example:
    ```python
    from polar_client import PolarClient

    async with PolarClient.from_env() as client:
        result = await client.customers.get("cus_123")
        if result.is_success and result.value is not None:
            print(result.value["email"])
    ```
"""

__version__ = "0.1.0"

from polar_client.client import CustomerPortalClient, PolarClient, PolarClientBuilder  # noqa: E402
from polar_client.config import ClientConfig, Environment  # noqa: E402
from polar_client.errors import ApiError, ErrorKind, PolarAPIError  # noqa: E402
from polar_client.pagination import Page, PageInfo, Paginator  # noqa: E402
from polar_client.query import QueryFilter  # noqa: E402
from polar_client.resources import ExportFormat  # noqa: E402
from polar_client.result import Failure, Result, Success  # noqa: E402

__all__ = [
    "ApiError",
    "ClientConfig",
    "CustomerPortalClient",
    "Environment",
    "ErrorKind",
    "ExportFormat",
    "Failure",
    "Page",
    "PageInfo",
    "Paginator",
    "PolarAPIError",
    "PolarClient",
    "PolarClientBuilder",
    "QueryFilter",
    "Result",
    "Success",
    "__version__",
]
