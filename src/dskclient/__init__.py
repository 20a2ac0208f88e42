"""dskclient: browse a DSK design definitions tree."""

from dskclient.client import Client, matched_urls
from dskclient.document import OrphanSelector, TransformOptions, transform_document
from dskclient.exceptions import (
    DecodeError,
    DskClientError,
    NetworkError,
    NodeNotFound,
    ParseError,
    TransformFallbackUsed,
)
from dskclient.filtering import NO_FILTER, FilterTo, NoFilter, filter_tree, selection_from
from dskclient.navigator import Navigator, RequestSequencer
from dskclient.registry import TransformRegistry
from dskclient.schemas import Node
from dskclient.tree import NodeTreeStore

__all__ = [
    "Client",
    "DecodeError",
    "DskClientError",
    "FilterTo",
    "NO_FILTER",
    "NetworkError",
    "Navigator",
    "NoFilter",
    "Node",
    "NodeNotFound",
    "NodeTreeStore",
    "OrphanSelector",
    "ParseError",
    "RequestSequencer",
    "TransformFallbackUsed",
    "TransformOptions",
    "TransformRegistry",
    "filter_tree",
    "matched_urls",
    "selection_from",
    "transform_document",
]
