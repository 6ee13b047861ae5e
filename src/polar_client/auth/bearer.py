"""Bearer token authentication for httpx."""

from collections.abc import Generator

import httpx


class BearerTokenAuth(httpx.Auth):
    """Attach ``Authorization: Bearer <token>`` to every outgoing request.

    The flow runs once per attempt, so retried requests are re-authenticated
    as well.
    """

    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request

    def __repr__(self) -> str:
        return "BearerTokenAuth(token=***)"
