"""Testing utilities for code that uses the Polar client.

Example:
    ```python
    from polar_client.testing import MockPolarAPI, build_test_client, create_error_response


    async def test_missing_product_is_absent():
        client = build_test_client(lambda request: create_error_response(404, detail="Not found"))
        result = await client.products.get("prod_missing")
        assert result.value is None
    ```
"""

from polar_client.testing.factories import (
    MockPolarAPI,
    build_test_client,
    create_error_response,
    create_mock_response,
    paginated_body,
)

__all__ = [
    "MockPolarAPI",
    "build_test_client",
    "create_error_response",
    "create_mock_response",
    "paginated_body",
]
