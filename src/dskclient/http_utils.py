"""HTTP utilities for talking to the DSK backend with retry logic."""

from __future__ import annotations

import asyncio
from typing import Any, Final, Mapping

import httpx

from dskclient.config import (
    DSK_FETCH_BACKOFF_S,
    DSK_FETCH_MAX_RETRIES,
    DSK_FETCH_TIMEOUT_S,
    DSK_USER_AGENT,
)
from dskclient.exceptions import NetworkError

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

_MAX_REDIRECTS: Final[int] = 5


def new_client(**kwargs: Any) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` with the configured defaults."""
    kwargs.setdefault("timeout", httpx.Timeout(DSK_FETCH_TIMEOUT_S))
    kwargs.setdefault(
        "headers", {"User-Agent": DSK_USER_AGENT, "Accept": "application/json"}
    )
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("max_redirects", _MAX_REDIRECTS)
    return httpx.AsyncClient(**kwargs)


async def fetch_with_retries(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    params: Mapping[str, str] | None = None,
    on_404: type[Exception] | None = None,
    on_404_message: str | None = None,
) -> str:
    """Fetch content from a URL with retry logic for transient failures.

    Args:
        url: The URL to fetch.
        client: Optional httpx.AsyncClient for connection pooling. If not
            provided, a new client is created for this request.
        params: Optional query parameters.
        on_404: Custom exception class to raise on 404. Defaults to NetworkError.
        on_404_message: Custom error message for 404 responses. If None,
            a generic message is used.

    Returns:
        The response body as text.

    Raises:
        NetworkError: If the fetch fails after all retries.
        on_404 exception: If the resource is missing, NetworkError by default.
    """
    last_exc: Exception | None = None
    not_found_exc_class = on_404 or NetworkError

    async def do_fetch(http_client: httpx.AsyncClient) -> str:
        nonlocal last_exc

        for attempt in range(DSK_FETCH_MAX_RETRIES + 1):
            try:
                response = await http_client.get(url, params=params)

                if response.status_code == 404:
                    message = on_404_message or f"Resource not found at {url}"
                    raise not_found_exc_class(message)

                if response.status_code in RETRY_STATUS_CODES:
                    last_exc = NetworkError(f"HTTP {response.status_code} from {url}")
                else:
                    response.raise_for_status()
                    return response.text
            except (httpx.RequestError, httpx.HTTPStatusError) as exc:
                last_exc = exc
            except not_found_exc_class:
                raise

            if attempt < DSK_FETCH_MAX_RETRIES:
                backoff = DSK_FETCH_BACKOFF_S * (2**attempt)
                await asyncio.sleep(backoff)

        raise NetworkError(f"Failed to fetch {url}: {last_exc}") from last_exc

    if client is not None:
        return await do_fetch(client)

    async with new_client() as own_client:
        return await do_fetch(own_client)


async def ping(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    params: Mapping[str, str] | None = None,
) -> bool:
    """Check whether a resource exists using a HEAD request.

    2xx and 3xx mean the resource exists, 4xx mean it does not. Any
    other status, as well as a transport failure, is an error.
    """

    async def do_ping(http_client: httpx.AsyncClient) -> bool:
        try:
            response = await http_client.head(url, params=params)
        except httpx.RequestError as exc:
            raise NetworkError(f"Pinging {url} failed: {exc}") from exc

        if response.status_code >= 500 or response.status_code < 200:
            raise NetworkError(f"Pinging {url} failed: HTTP {response.status_code}")
        return response.status_code < 400

    if client is not None:
        return await do_ping(client)

    async with new_client() as own_client:
        return await do_ping(own_client)
