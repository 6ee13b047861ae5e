"""HTTP transport: request execution, retry policy and backoff.

Example:
    ```python
    import httpx
    from polar_client.transport import HttpTransport, RetryPolicy

    client = httpx.AsyncClient(base_url="https://sandbox-api.polar.sh")
    transport = HttpTransport(client, retry_policy=RetryPolicy(max_retries=5), timeout=30)
    result = await transport.request("GET", "/v1/products/")
    ```
"""

from polar_client.transport.http import HttpTransport, decode_body
from polar_client.transport.retry import IDEMPOTENCY_KEY_HEADER, RetryPolicy

__all__ = ["IDEMPOTENCY_KEY_HEADER", "HttpTransport", "RetryPolicy", "decode_body"]
