"""Command line interface for browsing a DSK design definitions tree."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections import Counter
from typing import Any, Sequence

from dskclient.client import Client
from dskclient.config import DSK_BASE_URL, DSK_SOURCE
from dskclient.document import parse_markup
from dskclient.exceptions import DskClientError
from dskclient.navigator import Navigator, Page
from dskclient.registry import TransformRegistry
from dskclient.render import RenderElement, to_html
from dskclient.schemas import Node

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dskclient", description="Browse a DSK design definitions tree."
    )
    parser.add_argument("--base-url", default=DSK_BASE_URL, help="Backend origin (default: %(default)s)")
    parser.add_argument("--source", default=DSK_SOURCE, help="Source (version) of the tree to use")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    tree = commands.add_parser("tree", help="Print the tree as an outline")
    tree.add_argument("--filter", dest="term", help="Only show nodes matching the term")

    doc = commands.add_parser("doc", help="Print the documents of a node")
    doc.add_argument("url", help="Node URL, e.g. /the-design-system/colors")
    doc.add_argument("--html", action="store_true", help="Print markup instead of an outline")

    inspect = commands.add_parser("inspect", help="Count element types used in a node's documents")
    inspect.add_argument("url", help="Node URL")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        output = asyncio.run(run(args))
    except DskClientError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


async def run(args: argparse.Namespace) -> str:
    async with Client(args.base_url, source=args.source) as client:
        navigator = Navigator(client, source=args.source)

        if args.command == "tree":
            await navigator.load_tree()
            if args.term:
                await navigator.apply_filter(args.term)
            return format_tree(navigator.visible_tree)

        if args.command == "doc":
            page = await navigator.open(args.url)
            return format_page(page, as_html=args.html)

        node = await client.get(args.url)
        counts = count_types(doc.html for doc in node.docs)
        return format_type_counts(counts, navigator.registry)


def format_tree(root: Node | None) -> str:
    """Render the tree below the root as an indented outline."""
    if root is None or not root.children:
        return "No aspects found"
    return _create_tree(root.children)


def _create_tree(nodes: list[Node], indent: int = 0) -> str:
    lines: list[str] = []
    for node in nodes:
        lines.append(" " * (indent * 4) + node.title)
        if node.children:
            lines.append(_create_tree(node.children, indent + 1))
    return "\n".join(lines)


def format_page(page: Page | None, *, as_html: bool = False) -> str:
    if page is None:
        return ""
    blocks = [f"# {page.node.title}"]
    for doc in page.docs:
        if len(page.docs) > 1:
            blocks.append(f"## {doc.title}")
        if as_html:
            blocks.append(to_html(doc.content))
        else:
            blocks.append(_create_outline(doc.content))
    return "\n\n".join(block for block in blocks if block).strip()


def _create_outline(nodes: list[Any], indent: int = 0) -> str:
    lines: list[str] = []
    for node in nodes:
        prefix = "  " * indent
        if isinstance(node, RenderElement):
            lines.append(f"{prefix}<{node.type}>")
            if node.children:
                lines.append(_create_outline(node.children, indent + 1))
        elif str(node).strip():
            lines.append(prefix + " ".join(str(node).split()))
    return "\n".join(line for line in lines if line)


def count_types(markups: Any) -> Counter:
    """Count element types across document markup."""
    types: Counter = Counter()
    for markup in markups:
        for tag in parse_markup(markup).find_all(True):
            types[tag.name] += 1
    return types


def format_type_counts(types: Counter, registry: TransformRegistry) -> str:
    lines = []
    for name, count in types.most_common():
        marker = "" if name in registry else "  (no transform)"
        lines.append(f"{name}: {count}{marker}")
    return "\n".join(lines)


if __name__ == "__main__":
    sys.exit(main())
