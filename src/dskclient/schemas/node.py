"""Tree node models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class RefNode(BaseModel):
    """A reference to a node, as used in crumbs and filter results."""

    url: str = ""
    title: str = ""


class Node(BaseModel):
    """A node of the design definitions tree.

    The root node has an empty ``url``. Leaves carry an empty ``children``
    list; a missing or null ``children`` field is decoded as a leaf.
    """

    url: str = ""
    title: str = ""
    hash: str | None = None
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    children: list["Node"] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def lift_meta_keywords(cls, data: Any) -> Any:
        """Accept keywords nested under ``meta`` as well."""
        if isinstance(data, dict) and "keywords" not in data:
            meta = data.get("meta")
            if isinstance(meta, dict) and meta.get("keywords"):
                data = {**data, "keywords": meta["keywords"]}
        return data

    @field_validator("children", "tags", "keywords", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class NodeDoc(BaseModel):
    """A single document attached to a node."""

    id: str | None = None
    url: str | None = None
    title: str = ""
    html: str = ""
    raw: str = ""
    toc: list[Any] = Field(default_factory=list)

    @field_validator("toc", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class NodeDetail(Node):
    """A node as returned by the single node endpoint."""

    version: str | None = None
    modified: int | None = None
    docs: list[NodeDoc] = Field(default_factory=list)
    crumbs: list[RefNode] = Field(default_factory=list)
    related: list[RefNode] = Field(default_factory=list)
    prev: RefNode | None = None
    next: RefNode | None = None

    @field_validator("docs", "crumbs", "related", mode="before")
    @classmethod
    def none_as_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v
