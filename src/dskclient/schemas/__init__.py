"""Shared schemas for dskclient."""

from dskclient.schemas.node import Node, NodeDetail, NodeDoc, RefNode
from dskclient.schemas.responses import (
    ChangeMessage,
    FilterResults,
    Hello,
    ProjectConfig,
    SearchHit,
    SearchResults,
    TreeData,
    TreeResponse,
)

__all__ = [
    "ChangeMessage",
    "FilterResults",
    "Hello",
    "Node",
    "NodeDetail",
    "NodeDoc",
    "ProjectConfig",
    "RefNode",
    "SearchHit",
    "SearchResults",
    "TreeData",
    "TreeResponse",
]
