"""Async client for the DSK API."""

from __future__ import annotations

import json
import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dskclient.config import DSK_API_PREFIX, DSK_BASE_URL, DSK_SOURCE
from dskclient.exceptions import DecodeError, NodeNotFound
from dskclient.http_utils import fetch_with_retries, new_client, ping
from dskclient.schemas import (
    FilterResults,
    Hello,
    Node,
    NodeDetail,
    ProjectConfig,
    SearchResults,
    TreeResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def node_url(url: str) -> str:
    """Turn a path like ``/foo/bar/`` into the node URL ``foo/bar``."""
    if url.startswith("/"):
        url = url[1:]
    if url.endswith("/"):
        url = url[:-1]
    return url


def matched_urls(results: FilterResults | SearchResults) -> frozenset[str]:
    """Collect the node URLs of filter or search results.

    Both API generations are accepted: filter results list ``nodes``,
    full text search results list ``hits``.
    """
    if isinstance(results, FilterResults):
        refs = results.nodes or []
    else:
        refs = results.hits or []
    return frozenset(ref.url for ref in refs)


def decode(model: type[ModelT], text: str, *, url: str) -> ModelT:
    """Decode a JSON response body into the given model.

    Raises:
        DecodeError: If the body is not JSON or does not match the model.
    """
    try:
        return model.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Failed to decode %s response from %s: %s", model.__name__, url, exc)
        raise DecodeError(f"Unexpected response from {url}: {exc}") from exc


class Client:
    """Client for accessing the DSK API.

    The client supports sources (versions of the tree), which can be
    selected per call. Without a source the client default is used, and
    without that the backend's primary source.
    """

    def __init__(
        self,
        base_url: str = DSK_BASE_URL,
        *,
        api_prefix: str = DSK_API_PREFIX,
        source: str | None = DSK_SOURCE,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/")
        self.source = source
        self._http = http_client or new_client()
        self._owns_http = http_client is None

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def endpoint(self, path: str) -> str:
        return f"{self.base_url}{self.api_prefix}/{path.lstrip('/')}"

    def _params(self, source: str | None, **extra: str) -> dict[str, str]:
        params = dict(extra)
        version = source or self.source
        if version:
            params["v"] = version
        return params

    async def _get(
        self,
        model: type[ModelT],
        path: str,
        params: dict[str, str],
        *,
        on_404: type[Exception] | None = None,
    ) -> ModelT:
        url = self.endpoint(path)
        text = await fetch_with_retries(url, client=self._http, params=params, on_404=on_404)
        return decode(model, text, url=url)

    async def hello(self) -> Hello:
        return await self._get(Hello, "hello", {})

    async def config(self) -> ProjectConfig:
        return await self._get(ProjectConfig, "config", {})

    async def tree(self, source: str | None = None) -> Node:
        """Fetch the whole tree and return its root node.

        Raises:
            NetworkError: If the backend cannot be reached.
            DecodeError: If the body is not a tree response.
        """
        response = await self._get(TreeResponse, "tree", self._params(source))
        return response.data.root

    async def get(self, url: str, source: str | None = None) -> NodeDetail:
        """Fetch a single node, including its documents.

        Raises:
            NodeNotFound: If there is no node under the given URL.
        """
        return await self._get(
            NodeDetail,
            f"tree/{node_url(url)}",
            self._params(source),
            on_404=NodeNotFound,
        )

    async def has(self, url: str, source: str | None = None) -> bool:
        """Check whether a node exists under the given URL."""
        return await ping(
            self.endpoint(f"tree/{node_url(url)}"),
            client=self._http,
            params=self._params(source),
        )

    async def filter(self, q: str, source: str | None = None) -> FilterResults:
        """Perform a narrow search against the tree.

        The returned nodes together with ``filter_tree`` can be used to
        create a filtered view of the tree.
        """
        return await self._get(FilterResults, "filter", self._params(source, q=q))

    async def search(self, q: str, source: str | None = None) -> SearchResults:
        """Perform a full text search against the tree."""
        return await self._get(SearchResults, "search", self._params(source, q=q))

    def __repr__(self) -> str:
        return f"Client(base_url={self.base_url!r}, source={self.source!r})"
