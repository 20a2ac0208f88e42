"""Tests for the node tree store."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from dskclient.client import Client
from dskclient.exceptions import DecodeError, NetworkError, NodeNotFound
from dskclient.filtering import FilterTo
from dskclient.schemas import Node
from dskclient.tree import NodeTreeStore


def mock_client(*roots_or_errors) -> MagicMock:
    client = MagicMock()
    client.tree = AsyncMock(side_effect=list(roots_or_errors))
    return client


class TestSync:
    """Tests for NodeTreeStore.sync."""

    @pytest.mark.asyncio
    async def test_starts_empty(self) -> None:
        store = NodeTreeStore(mock_client())

        assert store.root is None
        assert store.generation == 0
        assert list(store.flatten()) == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_replaces_root(self, tree: Node) -> None:
        other = Node(url="", title="Other")
        store = NodeTreeStore(mock_client(tree, other), source="main")

        await store.sync()
        assert store.root is tree
        await store.sync()
        assert store.root is other

        assert store.generation == 2
        store.client.tree.assert_awaited_with("main")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [NetworkError("down"), DecodeError("garbage")])
    async def test_failure_keeps_previous_root(self, tree: Node, error: Exception) -> None:
        store = NodeTreeStore(mock_client(tree, error))
        await store.sync()

        with pytest.raises(type(error)):
            await store.sync()

        assert store.root is tree
        assert store.generation == 1

    @pytest.mark.asyncio
    async def test_missing_tree_endpoint_keeps_previous_root(self, tree: Node) -> None:
        """A 404 from the tree endpoint is a failed sync, not a missing node."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "not found"})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with Client("https://dsk.example", http_client=http_client) as client:
            store = NodeTreeStore(client, root=tree)

            with pytest.raises(NetworkError) as exc_info:
                await store.sync()

        assert not isinstance(exc_info.value, NodeNotFound)
        assert store.root is tree
        assert store.generation == 1
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_logs_node_count(self, tree: Node, caplog: pytest.LogCaptureFixture) -> None:
        store = NodeTreeStore(mock_client(tree))

        with caplog.at_level(logging.INFO, logger="dskclient.tree"):
            await store.sync()

        assert "Synced tree with 8 total node/s" in caplog.text


class TestFlatten:
    """Tests for NodeTreeStore.flatten."""

    def test_pre_order_without_root(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        assert [node.url for node in store.flatten()] == [
            "colors",
            "colors/primary",
            "colors/secondary",
            "components",
            "components/button",
            "components/button/icon",
            "components/input",
            "voice",
        ]

    def test_is_restartable(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        assert list(store.flatten()) == list(store.flatten())
        assert len(list(store)) == len(store) == 8

    def test_is_lazy(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)
        walk = store.flatten()

        assert next(walk).url == "colors"
        assert next(walk).url == "colors/primary"

    def test_does_not_modify_tree(self, tree: Node) -> None:
        before = tree.model_dump()
        store = NodeTreeStore(mock_client(), root=tree)

        list(store.flatten())

        assert tree.model_dump() == before


class TestReading:
    """Tests for the read helpers."""

    def test_lookup(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        assert store.lookup("components/input").title == "Input"
        assert store.lookup("") is tree
        with pytest.raises(NodeNotFound):
            store.lookup("missing")

    def test_contains(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        assert "voice" in store
        assert "missing" not in store

    def test_contains_agrees_with_lookup_for_root(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        assert store.lookup("") is tree
        assert "" in store
        assert "" not in NodeTreeStore(mock_client())

    def test_snapshot_is_independent(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        snapshot = store.snapshot()
        snapshot.children.clear()

        assert len(store) == 8

    def test_filtered_by_leaves_store_untouched(self, tree: Node) -> None:
        store = NodeTreeStore(mock_client(), root=tree)

        filtered = store.filtered_by(FilterTo(["voice"]))

        assert [child.url for child in filtered.children] == ["voice"]
        assert [child.url for child in store.root.children] == ["colors", "components", "voice"]

    def test_filtered_by_on_empty_store(self) -> None:
        assert NodeTreeStore(mock_client()).filtered_by(FilterTo(["voice"])) is None
