"""Document parsing for Inkwell.

Splits a raw document into YAML front-matter and a Markdown body, then turns
the body into a tree of Node objects using mistune's AST mode.

Parsing never fails: a missing or invalid front-matter block leaves the whole
text as the body, and markup the tree does not understand is kept as literal
text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import mistune
import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
ESM_RE = re.compile(r"^(?:import|export)\s")
MARKDOWN_PLUGINS = ["strikethrough", "table", "url"]

# Token types carried into the body tree as-is.
KNOWN_TYPES = frozenset(
    {
        "paragraph",
        "heading",
        "text",
        "emphasis",
        "strong",
        "link",
        "image",
        "codespan",
        "linebreak",
        "softbreak",
        "inline_html",
        "block_text",
        "block_code",
        "block_quote",
        "block_html",
        "thematic_break",
        "list",
        "list_item",
        "strikethrough",
        "table",
        "table_head",
        "table_body",
        "table_row",
        "table_cell",
    }
)


@dataclass(frozen=True)
class Node:
    """One element of a parsed body tree.

    Attributes:
        type: Element kind, e.g. ``document``, ``paragraph`` or ``text``.
        text: Literal source for leaf elements (text, code, raw HTML).
        attrs: Element attributes such as heading ``level`` or link ``url``,
            stored as a read-only mapping.
        children: Child elements in document order.

    Nodes compare by value but are not hashable, because ``attrs`` is a
    mapping.
    """

    type: str
    text: str | None = None
    attrs: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Node, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def text_content(self) -> str:
        """Return the concatenated literal text of this subtree."""
        if self.text is not None:
            return self.text
        return "".join(child.text_content() for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation of the subtree."""
        data: dict[str, Any] = {"type": self.type}
        if self.text is not None:
            data["text"] = self.text
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class ParsedDocument:
    """Front-matter and body tree of one document.

    Attributes:
        front_matter: Metadata from the YAML block, empty if there was none.
            Read-only.
        body: Root ``document`` node of the body tree.
    """

    front_matter: Mapping[str, Any]
    body: Node

    def __post_init__(self):
        object.__setattr__(self, "front_matter", MappingProxyType(dict(self.front_matter)))


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a ``---`` delimited YAML block from the top of a document.

    Args:
        text: Raw document text.

    Returns:
        Tuple of (front-matter dict, body). Without a valid block the
        front-matter is empty and the body is the whole text.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except (yaml.YAMLError, ValueError) as exc:
        logger.warning("Invalid YAML front-matter, treating as body: %s", exc)
        return {}, text
    if not isinstance(data, dict):
        logger.warning(
            "Front-matter is a %s, not a mapping; treating as body", type(data).__name__
        )
        return {}, text
    return {str(k): v for k, v in data.items()}, text[match.end() :]


def split_esm(body: str) -> tuple[list[str], str]:
    """Peel MDX ``import``/``export`` blocks off the start of a body.

    Args:
        body: Document body.

    Returns:
        Tuple of (ESM blocks, remaining body).
    """
    blocks: list[str] = []
    rest = body.lstrip("\n")
    while rest and ESM_RE.match(rest):
        block, sep, remainder = rest.partition("\n\n")
        blocks.append(block.strip())
        rest = remainder.lstrip("\n") if sep else ""
    return blocks, rest


class DocumentParser:
    """Parses raw document text into a ParsedDocument."""

    def __init__(self, plugins: list[str] | None = None):
        """Initialize the parser.

        Args:
            plugins: mistune plugin names; defaults to MARKDOWN_PLUGINS.
        """
        self.plugins = list(MARKDOWN_PLUGINS if plugins is None else plugins)

    def parse(self, text: str, mdx: bool = False) -> ParsedDocument:
        """Parse a document.

        Args:
            text: Raw document text.
            mdx: Whether the document is MDX (ESM lines become ``mdx_esm``).

        Returns:
            ParsedDocument with front-matter and body tree.
        """
        front_matter, body = split_front_matter(text)
        children: list[Node] = []
        if mdx:
            esm, body = split_esm(body)
            children.extend(Node("mdx_esm", text=block) for block in esm)
        children.extend(self.parse_body(body))
        return ParsedDocument(
            front_matter=front_matter,
            body=Node("document", children=tuple(children)),
        )

    def parse_body(self, body: str) -> list[Node]:
        """Parse a Markdown body into top-level nodes.

        Args:
            body: Markdown text without front-matter.

        Returns:
            List of block nodes. If mistune fails the body comes back as a
            single literal paragraph.
        """
        # A fresh instance per call; mistune keeps per-parse state on it.
        markdown = mistune.create_markdown(renderer="ast", plugins=self.plugins)
        try:
            tokens = markdown(body)
        except Exception as exc:
            logger.warning("Markdown parse failed, rendering as text: %s", exc)
            return [Node("paragraph", children=(Node("text", text=body),))]
        return [_to_node(token) for token in tokens if token.get("type") != "blank_line"]


def _to_node(token: dict[str, Any]) -> Node:
    """Convert a mistune AST token to a Node, degrading unknown kinds to text."""
    kind = token.get("type", "")
    if kind not in KNOWN_TYPES:
        return Node("text", text=_literal(token))
    children = tuple(
        _to_node(child)
        for child in token.get("children") or ()
        if child.get("type") != "blank_line"
    )
    return Node(
        kind,
        text=token.get("raw"),
        attrs=dict(token.get("attrs") or {}),
        children=children,
    )


def _literal(token: dict[str, Any]) -> str:
    raw = token.get("raw")
    if raw is not None:
        return str(raw)
    return "".join(_literal(child) for child in token.get("children") or ())
