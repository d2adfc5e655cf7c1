"""
Async client for the device-management JSON API.

Every method here talks HTTP and nothing else: each one classifies failures
as permanent or temporary before surfacing them, except the authentication
call whose failures are classified by the authenticator.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import aiohttp

from audiobait_client.exceptions import (
    DecodeError,
    OperationError,
    is_http_client_error,
    is_http_success,
    temporary_error,
)
from audiobait_client.models.config import DEFAULT_REQUEST_TIMEOUT

from .session import DeviceIdentity, Session

log = logging.getLogger(__name__)

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


async def raise_for_classified_status(response: aiohttp.ClientResponse) -> None:
    """
    Raises an OperationError for a non-2xx response.

    4xx responses are permanent, any other failure status is temporary. The
    response body is included in the message; if it cannot be read, the
    failure is reported as temporary.
    """
    if is_http_success(response.status):
        return
    try:
        body = (await response.read()).decode("utf-8", errors="replace")
    except TRANSPORT_ERRORS as e:
        raise OperationError(
            f"request failed ({response.status}) and body read failed: {e}",
            permanent=False,
        ) from e
    raise OperationError(
        f"HTTP request failed ({response.status}): {body}",
        permanent=is_http_client_error(response.status),
    )


class DeviceAPIClient:
    """
    Async client for the device API.

    The client owns the HTTP connection pool only. Which server to talk to and
    which token to present come from the identity or session passed into each
    call, so several logical sessions can share one client.
    """

    def __init__(self, request_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        """
        Initializes the API client.

        Args:
            request_timeout: Seconds allowed for each API request. Content
                downloads use it as the socket read timeout instead.
        """
        self.request_timeout = request_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "DeviceAPIClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept-Encoding": "gzip, deflate"},
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            )

    async def http_session(self) -> aiohttp.ClientSession:
        await self._initialize_session()
        return self._session

    def download_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=None, sock_read=self.request_timeout)

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def authenticate_device(self, identity: DeviceIdentity) -> Any:
        """
        Posts the device credentials and returns the decoded response body.

        The HTTP status is not inspected: the server reports failures in the
        body. Transport errors and undecodable bodies propagate unclassified.
        """
        await self._initialize_session()
        payload = {"devicename": identity.device_name, "password": identity.password}
        async with self._session.post(
            identity.url("authenticate_device"), json=payload
        ) as r:
            log.debug(f"authenticate_device returned {r.status}")
            return await r.json(content_type=None)

    async def get_json(self, session: Session, path: str) -> Any:
        """
        Makes an authenticated GET and returns the decoded JSON body.

        Raises:
            OperationError: temporary for transport failures and non-4xx error
                statuses, permanent for 4xx statuses and undecodable bodies.
        """
        headers = session.authorization_headers()
        await self._initialize_session()
        url = session.url(path)
        start_time = time.monotonic()
        try:
            async with self._session.get(url, headers=headers) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(f"GET {path} returned {r.status} in {duration_ms:.0f}ms")
                await raise_for_classified_status(r)
                try:
                    return await r.json(content_type=None)
                except ValueError as e:
                    raise DecodeError(f"decode: {e}") from e
        except TRANSPORT_ERRORS as e:
            log.debug(f"GET {path} failed: {e}")
            raise temporary_error(e) from e

    async def post_json(self, session: Session, path: str, body: bytes) -> None:
        """
        Makes an authenticated POST of an already serialised JSON body.

        Succeeds on any 2xx status; failures are classified like get_json.
        """
        headers = {"Content-Type": "application/json"}
        headers.update(session.authorization_headers())
        await self._initialize_session()
        try:
            async with self._session.post(
                session.url(path), data=body, headers=headers
            ) as r:
                log.debug(f"POST {path} returned {r.status}")
                await raise_for_classified_status(r)
        except TRANSPORT_ERRORS as e:
            log.debug(f"POST {path} failed: {e}")
            raise temporary_error(e) from e
