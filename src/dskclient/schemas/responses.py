"""Response envelopes of the DSK API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dskclient.schemas.node import Node, RefNode


class TreeData(BaseModel):
    """Payload of the tree endpoint."""

    root: Node
    hash: str | None = None
    total: int | None = None


class TreeResponse(BaseModel):
    """JSend wrapped tree response: ``{"data": {"root": ...}}``."""

    status: str | None = None
    data: TreeData

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_payload(cls, data: Any) -> Any:
        """Accept the unwrapped ``{"root": ...}`` shape of newer backends."""
        if isinstance(data, dict) and "data" not in data and "root" in data:
            return {"data": data}
        return data


class FilterResults(BaseModel):
    """Narrow search results, the basis for a filtered tree view."""

    nodes: list[RefNode] | None = None
    total: int = 0
    took: int = 0


class SearchHit(RefNode):
    """A full text search hit."""

    description: str = ""
    fragments: list[str] = Field(default_factory=list)

    @field_validator("fragments", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class SearchResults(BaseModel):
    """Full text search results."""

    hits: list[SearchHit] | None = None
    total: int = 0
    took: int = 0


class Hello(BaseModel):
    """Greeting of the backend, used to check connectivity."""

    hello: str = ""
    org: str = ""
    project: str = ""
    version: str = ""


class ProjectConfig(BaseModel):
    """Project configuration as exposed by the backend."""

    model_config = ConfigDict(extra="allow")

    org: str = ""
    project: str = ""
    lang: str = "en"


class ChangeMessage(BaseModel):
    """A message pushed over the messages channel.

    Attributes:
        topic: Dotted topic, e.g. ``"v2.tree.synced"`` with the source as prefix.
        text: Human readable message text.
        type: Legacy dashed variant of the topic (``"tree-synced"``).
    """

    topic: str = ""
    text: str = ""
    type: str | None = None
