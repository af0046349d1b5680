"""HTML rendering for Inkwell.

Bound pages are handed to existing libraries for output: mistune renders
the body tree to HTML, Pygments highlights fenced code, and Jinja2 wraps the
result in a layout.

Key classes:
- Heading: A heading collected for table-of-contents generation.
- Head: ``<title>`` and related metadata for a page.
- SiteRenderer: Renders pages through Jinja2 layouts.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import mistune
from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup
from mistune.core import BlockState

from .binder import Page
from .collections import PageCollection, TagCollection
from .config import SiteConfig
from .parser import MARKDOWN_PLUGINS, Node
from .utils import join_root_url

VOID_TYPES = frozenset({"thematic_break", "linebreak", "softbreak"})
SKIPPED_TYPES = frozenset({"mdx_esm"})
LAYOUT_SUFFIXES = (".html.jinja", ".jinja", ".html")

DEFAULT_LAYOUT_TEMPLATE = """<!doctype html>
<html lang="{{ page.metadata.get('lang', 'en') }}">
<head>
<meta charset="utf-8">
<title>{{ head.title }}</title>
{% if head.description %}<meta name="description" content="{{ head.description }}">
{% endif %}{% if head.canonical_url %}<link rel="canonical" href="{{ head.canonical_url }}">
{% endif %}</head>
<body>
<header><a href="{{ url_for('/') }}">{{ site.title }}</a></header>
<main>
<h1>{{ page.title }}</h1>
{{ page_content }}
</main>
</body>
</html>
"""


@dataclass
class Heading:
    """A heading collected while rendering, for TOC generation.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: The text content of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


@dataclass(frozen=True)
class Head:
    """Document head metadata for a page.

    Attributes:
        title: ``<title>`` text.
        description: Meta description.
        canonical_url: Absolute URL of the page, empty without a site URL.
    """

    title: str
    description: str
    canonical_url: str


def build_head(page: Page, config: SiteConfig) -> Head:
    """Build head metadata, titling pages ``"<page> | <site>"``.

    Args:
        page: Bound page.
        config: Site configuration.

    Returns:
        Head for the page.
    """
    parts = [part for part in (page.title, config.title) if part]
    if len(parts) == 2 and parts[0] == parts[1]:
        parts = parts[:1]
    canonical = join_root_url(config.site_url, page.route) if config.site_url else ""
    return Head(
        title=" | ".join(parts),
        description=page.description,
        canonical_url=canonical,
    )


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"<[^>]+>", "", slug)
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _PageHTMLRenderer(mistune.HTMLRenderer):
    """HTML renderer adding heading anchors and Pygments highlighting.

    Attributes:
        headings: Headings collected during rendering.
    """

    def __init__(self):
        super().__init__(escape=False)
        self.headings: list[Heading] = []
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        self.headings.append(Heading(id=heading_id, text=text, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        if info:
            from pygments import highlight
            from pygments.formatters import HtmlFormatter
            from pygments.lexers import get_lexer_by_name
            from pygments.util import ClassNotFound

            try:
                lexer = get_lexer_by_name(info.split()[0], stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                return highlight(code, lexer, HtmlFormatter(cssclass="highlight"))
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{info}"' if info else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


def to_tokens(node: Node) -> list[dict[str, Any]]:
    """Convert a body tree back to mistune AST tokens.

    Args:
        node: Root ``document`` node, or any subtree.

    Returns:
        List of tokens suitable for a mistune renderer.
    """
    if node.type == "document":
        return [_to_token(child) for child in node.children if child.type not in SKIPPED_TYPES]
    return [_to_token(node)]


def _to_token(node: Node) -> dict[str, Any]:
    token: dict[str, Any] = {"type": node.type}
    if node.attrs:
        token["attrs"] = dict(node.attrs)
    if node.text is not None:
        token["raw"] = node.text
    elif node.type not in VOID_TYPES:
        token["children"] = [
            _to_token(child) for child in node.children if child.type not in SKIPPED_TYPES
        ]
    return token


def render_html(content: Node) -> tuple[str, list[Heading]]:
    """Render a body tree to HTML.

    Args:
        content: Root ``document`` node.

    Returns:
        Tuple of (HTML, headings for TOC).
    """
    renderer = _PageHTMLRenderer()
    markdown = mistune.create_markdown(escape=False, renderer=renderer, plugins=MARKDOWN_PLUGINS)
    html = markdown.renderer(to_tokens(content), BlockState())
    return html, renderer.headings


class SiteRenderer:
    """Renders pages through Jinja2 layouts.

    Layouts are looked up in ``config.layouts_dir`` by the page's layout
    name; a built-in ``default`` layout is used when none matches.

    Attributes:
        config: Site configuration.
        env: Jinja2 environment.
        pages: All pages of the site, available to layouts.
        tags: Tag index, available to layouts.
    """

    def __init__(self, config: SiteConfig, pages: Iterable[Page] = ()):
        """Initialize the renderer.

        Args:
            config: Site configuration.
            pages: All pages, exposed to layouts as ``pages`` and ``tags``.
        """
        self.config = config
        self.env = Environment(
            loader=ChoiceLoader(
                [
                    FileSystemLoader(str(config.layouts_dir)),
                    DictLoader({"default.html.jinja": DEFAULT_LAYOUT_TEMPLATE}),
                ]
            ),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )
        self.pages = PageCollection(pages)
        self.tags = TagCollection.from_pages(self.pages)
        self.env.globals["site"] = config.site_metadata
        self.env.globals["pages"] = self.pages
        self.env.globals["tags"] = self.tags
        self.env.globals["url_for"] = self._url_for

    def _url_for(self, route: str) -> str:
        return join_root_url(self.config.site_url, route)

    def _template_for(self, layout: str):
        for name in (layout, "default"):
            for suffix in LAYOUT_SUFFIXES:
                try:
                    return self.env.get_template(f"{name}{suffix}")
                except TemplateNotFound:
                    continue
        raise TemplateNotFound(layout)

    def render_page(self, page: Page) -> str:
        """Render a page with its layout.

        Args:
            page: Bound page.

        Returns:
            Full HTML document.
        """
        html, toc = render_html(page.content)
        template = self._template_for(page.layout)
        return template.render(
            page=page,
            head=build_head(page, self.config),
            page_content=Markup(html),
            toc=toc,
        )
