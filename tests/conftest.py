"""Pytest configuration and shared fixtures for polar-client tests."""

import pytest

from polar_client.testing import MockPolarAPI, build_test_client


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear Polar and test environment variables before each test.

    This prevents a developer's real POLAR_ACCESS_TOKEN from leaking into
    credential resolution tests.
    """
    import os

    test_prefixes = ("TEST_", "POLAR_")

    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in test_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def product_items():
    """Twelve products: three pages of 5/5/2 at limit=5."""
    return [{"id": f"prod_{i:02d}", "name": f"Product {i}"} for i in range(1, 13)]


@pytest.fixture
def products_api(product_items):
    return MockPolarAPI(items=product_items, list_path="/v1/products/")


@pytest.fixture
async def products_client(products_api):
    client = build_test_client(products_api)
    yield client
    await client.aclose()
