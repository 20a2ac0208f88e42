"""Navigation session: keeps tree, filter and current page in sync."""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import ValidationError

from dskclient.client import Client, matched_urls
from dskclient.document import TransformOptions, transform_document
from dskclient.exceptions import DecodeError, NodeNotFound
from dskclient.filtering import NO_FILTER, FilterTo, NoFilter, Selection, filter_tree
from dskclient.registry import TransformRegistry
from dskclient.render import default_options, default_registry
from dskclient.schemas import ChangeMessage, Node, NodeDetail
from dskclient.tree import NodeTreeStore

logger = logging.getLogger(__name__)

_SYNCED_TOPIC = "tree.synced"
_LEGACY_SYNCED_TYPE = "tree-synced"


class RequestSequencer:
    """Hands out increasing tickets so late responses can be recognized.

    Only the response to the most recently issued ticket is current; a
    response arriving for an older ticket is stale and must be dropped.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0

    def issue(self) -> int:
        self._latest = next(self._counter)
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    @property
    def latest(self) -> int:
        return self._latest


@dataclass
class RenderedDoc:
    """A node document transformed into render nodes."""

    title: str
    content: list[Any]
    toc: list[Any] = field(default_factory=list)


@dataclass
class Page:
    """The currently displayed node with its rendered documents."""

    node: NodeDetail
    docs: list[RenderedDoc] = field(default_factory=list)


def decode_message(payload: str | bytes | Mapping[str, Any]) -> ChangeMessage:
    """Decode a message received over the messages channel.

    Raises:
        DecodeError: If the payload is not a message.
    """
    try:
        if isinstance(payload, Mapping):
            return ChangeMessage.model_validate(dict(payload))
        return ChangeMessage.model_validate(json.loads(payload))
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        logger.warning("Failed to decode message %r: %s", payload, exc)
        raise DecodeError(f"Unexpected message: {exc}") from exc


class Navigator:
    """Drives tree filtering and document display for one source.

    All state that influences filtering and display (the filter term,
    the source, the displayed node) is held here explicitly. Requests
    are sequenced so that responses arriving out of order never replace
    the results of a newer request.
    """

    def __init__(
        self,
        client: Client,
        store: NodeTreeStore | None = None,
        *,
        source: str | None = None,
        registry: TransformRegistry | None = None,
        options: TransformOptions | None = None,
    ) -> None:
        self.client = client
        self.source = source
        self.store = store or NodeTreeStore(client, source=source)
        self.registry = registry or default_registry()
        self.options = options or default_options(self.registry)

        self.filter_term: str | None = None
        self.selection: Selection = NO_FILTER
        self.filtered: Node | None = None
        self.active_url: str | None = None
        self.page: Page | None = None
        self.not_found = False

        self._filter_requests = RequestSequencer()
        self._page_requests = RequestSequencer()

    @property
    def visible_tree(self) -> Node | None:
        """The tree as it should be displayed, filtered when a filter is active."""
        if isinstance(self.selection, NoFilter):
            return self.store.root
        return self.filtered

    async def load_tree(self) -> None:
        """Sync the tree and recompute the filtered view from it."""
        await self.store.sync()
        self._refilter()

    async def apply_filter(self, term: str | None) -> Node | None:
        """Filter the tree by a search term.

        An empty term clears the filter. Returns the new visible tree, or
        ``None`` when a newer filter request superseded this one.
        """
        ticket = self._filter_requests.issue()
        self.filter_term = term or None

        if not term:
            self.selection = NO_FILTER
            self._refilter()
            return self.visible_tree

        results = await self.client.filter(term, self.source)
        if not self._filter_requests.is_current(ticket):
            logger.debug("Discarding stale filter results for %r", term)
            return None

        self.selection = FilterTo(matched_urls(results))
        self._refilter()
        return self.visible_tree

    async def open(self, url: str) -> Page | None:
        """Load a node and transform its documents for display.

        Returns ``None`` when a newer open request superseded this one.

        Raises:
            NodeNotFound: If there is no node under the URL.
        """
        ticket = self._page_requests.issue()
        self.active_url = url
        try:
            node = await self.client.get(url, self.source)
        except NodeNotFound:
            if self._page_requests.is_current(ticket):
                self.page = None
                self.not_found = True
            raise

        if not self._page_requests.is_current(ticket):
            logger.debug("Discarding stale page for %r", url)
            return None

        docs = [
            RenderedDoc(
                title=doc.title,
                content=transform_document(
                    doc.html,
                    self.registry,
                    options=self.options,
                    context={"node": node, "doc": doc},
                ),
                toc=doc.toc,
            )
            for doc in node.docs
        ]
        self.page = Page(node=node, docs=docs)
        self.not_found = False
        return self.page

    async def handle_message(self, payload: str | bytes | Mapping[str, Any]) -> bool:
        """React to a pushed message, returns whether it was acted upon.

        When the tree has been synced on the backend, the tree is synced
        again, the last filter re-applied and the displayed node reloaded,
        provided it still exists.
        """
        message = decode_message(payload)
        if not self.is_synced_message(message):
            return False

        logger.info("Tree synced on backend: %s", message.text)
        await self.load_tree()
        if self.filter_term:
            await self.apply_filter(self.filter_term)

        if self.active_url is not None:
            url = self.active_url
            ticket = self._page_requests.latest
            exists = await self.client.has(url, self.source)
            if not self._page_requests.is_current(ticket):
                logger.debug("Another node was opened while checking %r", url)
            elif exists:
                await self.open(url)
            else:
                logger.info("Current node %r has gone away after tree has synced", url)
                self._page_requests.issue()
                self.page = None
                self.not_found = True
        return True

    def is_synced_message(self, message: ChangeMessage) -> bool:
        if self.source:
            return message.topic == f"{self.source}.{_SYNCED_TOPIC}"
        return (
            message.topic == _SYNCED_TOPIC
            or message.topic.endswith(f".{_SYNCED_TOPIC}")
            or message.type == _LEGACY_SYNCED_TYPE
        )

    def _refilter(self) -> None:
        root = self.store.root
        if root is None or isinstance(self.selection, NoFilter):
            self.filtered = None
            return
        self.filtered = filter_tree(root, self.selection)
