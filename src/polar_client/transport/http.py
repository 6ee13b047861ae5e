"""HTTP transport wrapper: authenticated requests with timeout, retry and cancellation.

Every call goes through :meth:`HttpTransport.send`, which

1. sends the request on the shared ``httpx.AsyncClient`` (the client's auth
   flow injects the bearer token),
2. bounds each attempt by one overall timeout,
3. classifies failures and retries the retryable ones under the
   :class:`RetryPolicy`, sleeping with backoff and jitter between attempts,
4. returns a ``Result`` instead of raising.

Cancellation is cooperative: pass an ``asyncio.Event`` as ``cancel_event`` and
set it from anywhere. The in-flight attempt is abandoned, no further retries
run, and the call returns ``Failure`` with ``ErrorKind.CANCELED``.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from polar_client.errors.handler import canceled_error, classify_exception, classify_response
from polar_client.result import Failure, Result, Success
from polar_client.transport.retry import RetryPolicy

logger = logging.getLogger(__name__)


class _Canceled(Exception):
    """Internal signal: the cancel event fired during an attempt."""


class HttpTransport:
    """Executes API requests against a shared ``httpx.AsyncClient``.

    Args:
        client: Configured client (base URL, auth, headers, connection pool).
        retry_policy: Retry and backoff policy.
        timeout: Seconds allowed for one whole attempt (connect, send, receive).
    """

    def __init__(self, client: httpx.AsyncClient, *, retry_policy: RetryPolicy, timeout: float) -> None:
        self._client = client
        self.retry_policy = retry_policy
        self.timeout = timeout

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[httpx.Response]:
        """Send a request, retrying transient failures.

        Args:
            method: HTTP method.
            path: Path relative to the client's base URL.
            params: Query parameters.
            json: JSON request body.
            headers: Extra request headers.
            cancel_event: Optional cancellation signal.

        Returns:
            Success with the 2xx response, or Failure with the classified error
            of the last attempt.
        """
        method = method.upper()
        retries = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.debug(f"Request {method} {path} canceled before attempt {retries + 1}")
                return Failure(canceled_error())

            logger.debug(f"Sending {method} {path} (attempt {retries + 1}/{self.retry_policy.max_retries + 1})")

            try:
                response = await self._attempt(method, path, params, json, headers, cancel_event)
            except _Canceled:
                logger.debug(f"Request {method} {path} canceled during attempt {retries + 1}")
                return Failure(canceled_error())
            except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
                error = classify_exception(e)
                reason = str(e) or type(e).__name__
            else:
                if response.is_success:
                    return Success(response)
                error = classify_response(response)
                reason = str(response.status_code)

            if not self.retry_policy.should_retry(method, error, retries, headers):
                return Failure(error)

            retries += 1
            delay = self.retry_policy.compute_delay(retries, error.retry_after)

            logger.warning(
                f"Request {method} {path} failed with {reason}, "
                f"retrying in {delay:.2f}s (attempt {retries}/{self.retry_policy.max_retries})"
            )

            if await self._sleep(delay, cancel_event):
                logger.debug(f"Request {method} {path} canceled during backoff")
                return Failure(canceled_error())

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[Any]:
        """Send a request and decode the response body.

        Returns:
            Success with the decoded JSON (None for empty bodies, text for
            non-JSON bodies), or the Failure from :meth:`send`.
        """
        result = await self.send(
            method, path, params=params, json=json, headers=headers, cancel_event=cancel_event
        )
        return result.map(decode_body)

    async def _attempt(
        self,
        method: str,
        path: str,
        params: Any,
        json: Any,
        headers: Mapping[str, str] | None,
        cancel_event: asyncio.Event | None,
    ) -> httpx.Response:
        send = asyncio.wait_for(
            self._client.request(method, path, params=params, json=json, headers=headers),
            timeout=self.timeout,
        )
        if cancel_event is None:
            return await send

        send_task = asyncio.ensure_future(send)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()

        if send_task in done:
            return send_task.result()
        raise _Canceled()

    async def _sleep(self, delay: float, cancel_event: asyncio.Event | None) -> bool:
        """Sleep for ``delay`` seconds; return True if canceled meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except TimeoutError:
            return False
        return True


def decode_body(response: httpx.Response) -> Any:
    """Decode a successful response body."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
