"""In-memory store of the design definitions tree."""

from __future__ import annotations

import logging
import time
from typing import Iterator

from dskclient.client import Client
from dskclient.exceptions import NodeNotFound
from dskclient.filtering import NO_FILTER, Selection, count_nodes, filter_tree
from dskclient.schemas import Node

logger = logging.getLogger(__name__)


class NodeTreeStore:
    """Holds the tree as last fetched from the backend.

    The store is the single source of truth for the tree. It is read-only
    for everyone else: the only way to change it is ``sync()``, which
    replaces the whole root. Derived trees, like filtered views, are
    independent copies.
    """

    def __init__(
        self,
        client: Client,
        *,
        source: str | None = None,
        root: Node | None = None,
    ) -> None:
        self.client = client
        self.source = source
        self._root = root
        self._generation = 0 if root is None else 1

    @property
    def root(self) -> Node | None:
        return self._root

    @property
    def generation(self) -> int:
        """Number of roots the store has held, bumped on every sync."""
        return self._generation

    async def sync(self) -> None:
        """One way sync: replace the tree with the backend's current one.

        Raises:
            NetworkError: If the backend cannot be reached.
            DecodeError: If the response is not a tree.

        On failure the previously held root is kept.
        """
        start = time.perf_counter()
        root = await self.client.tree(self.source)

        # Swap late, in event of error we keep the previous state.
        self._root = root
        self._generation += 1

        took = time.perf_counter() - start
        logger.info("Synced tree with %d total node/s in %.3fs", count_nodes(root), took)

    def flatten(self) -> Iterator[Node]:
        """Yield every node except the root in pre-order.

        Each call starts a fresh walk over the current root.
        """
        if self._root is None:
            return
        stack = list(reversed(self._root.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __iter__(self) -> Iterator[Node]:
        return self.flatten()

    def __len__(self) -> int:
        return 0 if self._root is None else count_nodes(self._root)

    def __contains__(self, url: object) -> bool:
        if self._root is not None and url == self._root.url:
            return True
        return any(node.url == url for node in self.flatten())

    def lookup(self, url: str) -> Node:
        """Return the node under the given URL.

        Raises:
            NodeNotFound: If the tree has no such node.
        """
        if self._root is not None and url == self._root.url:
            return self._root
        for node in self.flatten():
            if node.url == url:
                return node
        raise NodeNotFound(f"No node with URL {url!r} in tree")

    def snapshot(self) -> Node | None:
        """Return a deep copy of the current root."""
        return None if self._root is None else self._root.model_copy(deep=True)

    def filtered_by(self, selection: Selection = NO_FILTER) -> Node | None:
        """Return a filtered copy of the current tree, see ``filter_tree``."""
        if self._root is None:
            return None
        return filter_tree(self._root, selection)
