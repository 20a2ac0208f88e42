"""Filtering of the node tree by a set of matched node URLs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from dskclient.schemas import Node


@dataclass(frozen=True)
class NoFilter:
    """No filter was requested, every node is kept."""


@dataclass(frozen=True)
class FilterTo:
    """Keep only the given node URLs, their ancestors and descendants.

    An empty set of URLs filters the tree down to its bare root.
    """

    urls: frozenset[str]

    def __init__(self, urls: Iterable[str]) -> None:
        object.__setattr__(self, "urls", frozenset(urls))


Selection = Union[NoFilter, FilterTo]

NO_FILTER = NoFilter()


def selection_from(urls: Iterable[str] | None) -> Selection:
    """Map ``None`` to ``NoFilter`` and any iterable of URLs to ``FilterTo``."""
    if urls is None:
        return NO_FILTER
    return FilterTo(urls)


def filter_tree(root: Node, selection: Selection = NO_FILTER) -> Node:
    """Return a new non-sparse tree containing only the selected nodes.

    Descends into branches first, then works its way back up, dropping
    every node that neither is selected nor has a kept descendant.

    Selecting a leaf keeps all of its ancestors, but not their other
    children::

                a*
                b*
           c!   d   e

    Selecting a node always keeps its whole subtree::

                a*
                b!
           c*   d*   e*

    The root itself is never matched against the selection, only its
    descendants decide what it shows. URLs that are not part of the tree
    are ignored. The given tree is never modified.
    """
    tree = root.model_copy(deep=True)
    if isinstance(selection, NoFilter):
        return tree

    selected = selection.urls

    def _select(node: Node) -> bool:
        if node.url in selected:
            return True
        node.children = [child for child in node.children if _select(child)]
        return bool(node.children)

    tree.children = [child for child in tree.children if _select(child)]
    return tree


def count_nodes(root: Node) -> int:
    """Count the nodes below the given root."""
    total = 0
    for child in root.children:
        total += 1
        total += count_nodes(child)
    return total
