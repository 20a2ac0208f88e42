"""Transform document markup into a tree of render nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Sequence

from dskclient.exceptions import ParseError, TransformFallbackUsed
from dskclient.registry import RenderFunction, TransformRegistry

try:
    from bs4 import BeautifulSoup
    from bs4.builder import ParserRejectedMarkup
    from bs4.element import (
        Comment,
        Declaration,
        Doctype,
        NavigableString,
        ProcessingInstruction,
        Tag,
    )
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise ParseError(
        "BeautifulSoup4 is required for markup parsing (pip install beautifulsoup4)."
    ) from exc

logger = logging.getLogger(__name__)

# Strings that never carry document content.
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

_PRESERVE_WHITESPACE = frozenset({BeautifulSoup.ROOT_TAG_NAME, "html", "pre", "textarea"})

NoTransform = Callable[[str, dict[str, str], list[Any]], Any]


class OrphanSelector(NamedTuple):
    """An element type that must not be wrapped by the given ancestor type."""

    ancestor: str
    element: str

    def __str__(self) -> str:
        return f"{self.ancestor.lower()} > {self.element.lower()}"


def _never(type_: str) -> bool:
    return False


@dataclass
class TransformOptions:
    """Options for document transformation.

    Attributes:
        orphans: Elements that were incidentally wrapped by the Markdown
            renderer and must be unwrapped from their parent, given as
            ``OrphanSelector`` or ``"p > img"`` strings.
        is_preformatted: Predicate for types whose content must be kept
            as is; these receive their inner markup as the only child.
        no_transform: Called with ``(type, props, children)`` for elements
            without a registered transform. Without it such elements are
            dropped and their children take their place.
        containers: Generic wrapper types, whose first attribute may name
            the actual type, e.g. ``<div ColorCard>``.
        cleanup: Types removed when they end up empty.
    """

    orphans: Sequence[OrphanSelector | str] = ()
    is_preformatted: Callable[[str], bool] = _never
    no_transform: NoTransform | None = None
    containers: tuple[str, ...] = ("div",)
    cleanup: tuple[str, ...] = ("p",)


def transform_document(
    markup: str | bytes,
    registry: TransformRegistry | Mapping[str, RenderFunction],
    *,
    options: TransformOptions | None = None,
    context: Any = None,
) -> list[Any]:
    """Transform markup into a list of render nodes.

    Every element is handed to the render function registered for its
    type, children first. ``context`` is passed through to every render
    function untouched.

    Raises:
        ParseError: If the markup cannot be parsed.
    """
    opts = options or TransformOptions()
    if isinstance(registry, TransformRegistry):
        transforms = registry.freeze()
    else:
        transforms = TransformRegistry(registry).freeze()

    root = parse_markup(markup)

    # Both steps modify the tree above the current node, which would
    # break the walk, so they run as separate passes first.
    promote_orphans(root, opts.orphans)
    clean(root, opts.cleanup)

    return _transform_children(root, transforms, opts, context)


def parse_markup(markup: str | bytes) -> Tag:
    """Parse markup and return the element holding the document's content.

    Text is kept exactly as written. BeautifulSoup collapses whitespace-only
    strings outside its ``preserve_whitespace_tags``; listing the document
    root there turns that off for the whole tree, so preformatted content
    and text fallbacks see the original whitespace.
    """
    if not isinstance(markup, (str, bytes)):
        raise ParseError(f"Markup must be text, got {type(markup).__name__}")
    try:
        soup = BeautifulSoup(
            markup,
            "lxml",
            multi_valued_attributes=None,
            preserve_whitespace_tags=_PRESERVE_WHITESPACE,
        )
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Failed to parse document markup: {exc}") from exc
    return soup.body if soup.body is not None else soup


def promote_orphans(root: Tag, orphans: Iterable[OrphanSelector | str]) -> None:
    """Unwrap orphaned elements, moving each in front of its parent."""
    selectors = [str(orphan).lower() for orphan in orphans]
    if not selectors:
        return
    for element in root.select(", ".join(selectors)):
        parent = element.parent
        if parent is None or parent is root:
            continue
        logger.debug("Unwrapping %s from %s", element.name, parent.name)
        parent.insert_before(element.extract())


def clean(root: Tag, types: Iterable[str]) -> None:
    """Remove elements of the given types that have become empty."""
    names = [type_.lower() for type_ in types]
    if not names:
        return
    # Innermost first, so emptied ancestors are caught as well.
    for tag in reversed(root.find_all(names)):
        if tag.find(True) is None and not tag.get_text().strip():
            tag.decompose()


def _transform_children(
    tag: Tag, transforms: TransformRegistry, opts: TransformOptions, context: Any
) -> list[Any]:
    children: list[Any] = []
    for child in tag.children:
        children.extend(_transform_node(child, transforms, opts, context))
    return children


def _transform_node(
    node: Any, transforms: TransformRegistry, opts: TransformOptions, context: Any
) -> list[Any]:
    if isinstance(node, NavigableString):
        if isinstance(node, _SKIPPED_STRINGS):
            return []
        text = str(node)
        # Allow single spaces, for example between inline elements.
        if not text.strip() and text != " ":
            return []
        return [text]
    if not isinstance(node, Tag):
        return []

    type_, attrs = _element_type(node, transforms, opts)
    props = dict(attrs)

    if opts.is_preformatted(type_):
        inner = node.decode_contents()
        children = [inner] if inner else []
    else:
        children = _transform_children(node, transforms, opts, context)
        if not children:
            text = node.get_text()
            children = [text] if text else []

    try:
        render = transforms.resolve(type_)
    except TransformFallbackUsed as exc:
        if opts.no_transform is not None:
            logger.debug("%s, using fallback", exc)
            result = opts.no_transform(type_, props, children)
            return [] if result is None else [result]
        logger.info("%s, dropping element", exc)
        return children

    return [render(props, children, context)]


def _element_type(
    tag: Tag, transforms: TransformRegistry, opts: TransformOptions
) -> tuple[str, list[tuple[str, str]]]:
    """Determine the type of an element and the attributes to use as props.

    A generic container like ``<div FullColorPlane color="red">`` is
    treated as ``<fullcolorplane color="red">``, when no transform is
    registered for the container type itself.
    """
    type_ = tag.name.lower()
    attrs = list(tag.attrs.items())

    if type_ in opts.containers and type_ not in transforms and attrs:
        inferred = attrs[0][0].lower()
        if inferred in transforms:
            return inferred, attrs[1:]
        logger.debug("Unknown custom element %s", inferred)
    return type_, attrs
