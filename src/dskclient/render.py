"""Default render target: DSK documentation components as plain elements."""

from __future__ import annotations

import html
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Iterable

from dskclient.document import OrphanSelector, TransformOptions
from dskclient.registry import RenderFunction, TransformRegistry

_CODE_OPEN_RE = re.compile(r"^\s*<code(?:\s+class=\"language-(?P<language>[^\"]*?)\")?[^>]*>")
_CODE_CLOSE_RE = re.compile(r"</code>\s*$")
_VOID_ELEMENTS = frozenset({"br", "hr", "img", "input", "meta", "link", "source", "wbr"})
_PREFORMATTED = frozenset({"pre", "codeblock", "playground"})
_HEADING_LEVELS = {"h1": "alpha", "h2": "beta", "h3": "gamma", "h4": "delta"}

# Types that may stay inside a paragraph.
_INLINE_TYPES = frozenset({"a", "color"})


@dataclass
class RenderElement:
    """A rendered element: a component or plain markup element."""

    type: str
    props: dict[str, Any] = field(default_factory=dict)
    children: list[Any] = field(default_factory=list)

    def text(self) -> str:
        """Return the concatenated text of all descendants."""
        parts: list[str] = []
        for child in self.children:
            parts.append(child.text() if isinstance(child, RenderElement) else str(child))
        return "".join(parts)


def component(name: str, **fixed: Any) -> RenderFunction:
    """Create a render function producing the named component."""

    def render(props: dict[str, str], children: list[Any], context: Any) -> RenderElement:
        return RenderElement(name, {**props, **fixed}, children)

    render.__name__ = f"render_{name.lower()}"
    return render


def _heading(level: str) -> RenderFunction:
    def render(props: dict[str, str], children: list[Any], context: Any) -> RenderElement:
        element = RenderElement("Heading", {**props, "level": level, "is_jump_target": True}, children)
        element.props.setdefault("id", slugify(element.text()))
        return element

    return render


def _code_block(props: dict[str, str], children: list[Any], context: Any) -> RenderElement:
    """Turn preformatted content into a CodeBlock.

    Fenced code blocks arrive as ``<pre><code class="language-js">``; the
    language becomes a prop and the inner ``<code>`` wrapper is removed.
    """
    source = "".join(str(child) for child in children)
    props = dict(props)

    match = _CODE_OPEN_RE.match(source)
    if match:
        if match.group("language"):
            props["language"] = match.group("language")
        source = _CODE_CLOSE_RE.sub("", source[match.end():])

    return RenderElement("CodeBlock", props, [html.unescape(source)] if source else [])


def _playground(props: dict[str, str], children: list[Any], context: Any) -> RenderElement:
    source = html.unescape("".join(str(child) for child in children))
    return RenderElement("Playground", dict(props), [source] if source else [])


def default_registry() -> TransformRegistry:
    """Build a registry with the DSK documentation components."""
    registry = TransformRegistry()
    for name in (
        "Asciinema",
        "Banner",
        "CodeSandbox",
        "Color",
        "ColorCard",
        "ColorGroup",
        "Do",
        "DoDontGroup",
        "Dont",
        "FigmaEmbed",
        "Glitch",
        "Image",
        "ImageGrid",
        "TableOfContents",
        "TypographySpecimen",
    ):
        registry.register(name, component(name))

    registry.register("Warning", component("Banner", type="warning"))
    registry.register("CodeBlock", _code_block)
    registry.register("Playground", _playground)
    registry.register("a", component("Link"))
    registry.register("img", component("Image"))
    registry.register("pre", _code_block)
    for tag, level in _HEADING_LEVELS.items():
        registry.register(tag, _heading(level))
    return registry


def default_orphans(registry: TransformRegistry) -> list[OrphanSelector]:
    """Components must not be wrapped in paragraphs, except inline ones."""
    orphans = [OrphanSelector("p", type_) for type_ in registry.types() if type_ not in _INLINE_TYPES]
    orphans.append(OrphanSelector("p", "video"))
    return orphans


def is_preformatted(type_: str) -> bool:
    return type_.lower() in _PREFORMATTED


def passthrough(type_: str, props: dict[str, str], children: list[Any]) -> RenderElement:
    """Keep elements without a transform as plain elements."""
    return RenderElement(type_, dict(props), children)


def default_options(registry: TransformRegistry | None = None) -> TransformOptions:
    """Transform options matching ``default_registry``."""
    return TransformOptions(
        orphans=default_orphans(registry or default_registry()),
        is_preformatted=is_preformatted,
        no_transform=passthrough,
    )


def to_html(nodes: Iterable[Any]) -> str:
    """Serialize render nodes to markup, escaping text exactly once."""
    return "".join(_node_to_html(node) for node in nodes)


def _node_to_html(node: Any) -> str:
    if not isinstance(node, RenderElement):
        return html.escape(str(node), quote=False)

    attrs = []
    for name, value in node.props.items():
        if value is None or value is False:
            continue
        if value is True:
            attrs.append(f" {name}")
        else:
            attrs.append(f' {name}="{html.escape(str(value), quote=True)}"')
    open_tag = f"<{node.type}{''.join(attrs)}>"

    if node.type in _VOID_ELEMENTS and not node.children:
        return open_tag
    return f"{open_tag}{to_html(node.children)}</{node.type}>"


def slugify(text: str) -> str:
    """Turn text into a string usable as a jump anchor."""
    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(char for char in text if not unicodedata.combining(char))
    text = text.replace("ß", "ss").replace("æ", "ae").replace("œ", "oe")
    text = re.sub(r"[\s·/_,:;]+", "-", text)
    text = text.replace("&", "-and-")
    text = re.sub(r"[^\w-]+", "", text, flags=re.ASCII)
    text = re.sub(r"-{2,}", "-", text)
    return text.strip("-")
