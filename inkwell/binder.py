"""Page binding for Inkwell.

Maps each parsed document to exactly one route and merges site-wide
defaults with its front-matter.

Key classes:
- Page: Final bound unit ready for rendering.
- RouteDeriver: Pure mapping from a content path to a route.
- LayoutResolver: Picks the layout name for a page.
- PageBinder: Binds documents to pages, detecting route collisions.

Routes are all derived before any page is built, so a collision is reported
with both source paths instead of one page silently replacing the other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Any

from .config import SiteConfig
from .errors import DuplicateRouteError, MissingMetadataWarning
from .parser import Node, ParsedDocument
from .store import ContentNode
from .utils import (
    coerce_datetime,
    extract_date_from_name,
    first_paragraph,
    normalize_tags,
    slugify,
    titleize,
)

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "default"


@dataclass(frozen=True)
class Page:
    """A bound page.

    Attributes:
        route: Unique route, e.g. ``/about``.
        metadata: Site defaults overridden by the document's front-matter,
            as a read-only mapping.
        content: Root node of the body tree.
        source_path: Path of the source document relative to its root.
        source: Name of the content source.
        layout: Layout template name.

    Pages are not hashable; key them by ``route``.
    """

    route: str
    metadata: Mapping[str, Any]
    content: Node
    source_path: str = ""
    source: str = ""
    layout: str = DEFAULT_LAYOUT

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or "")

    @property
    def date(self) -> datetime | None:
        value = self.metadata.get("date")
        return value if isinstance(value, datetime) else None

    @property
    def description(self) -> str:
        return str(self.metadata.get("description") or "")

    @property
    def tags(self) -> list[str]:
        return normalize_tags(self.metadata.get("tags"))

    @property
    def draft(self) -> bool:
        return bool(self.metadata.get("draft", False))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation of the page."""
        metadata = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in self.metadata.items()
        }
        return {
            "route": self.route,
            "source": self.source,
            "source_path": self.source_path,
            "layout": self.layout,
            "metadata": metadata,
            "content": self.content.to_dict(),
        }


@dataclass
class BindResult:
    """Pages produced by a bind, with the warnings raised along the way.

    Attributes:
        pages: Bound pages in source order.
        warnings: One entry per required key that fell back to a default.
    """

    pages: list[Page]
    warnings: list[MissingMetadataWarning] = field(default_factory=list)


class RouteDeriver:
    """Derives routes from content paths.

    The content path's extension and date prefix are dropped, every segment
    is slugified, and a trailing ``index`` segment is removed, so
    ``about.md`` and ``about/index.md`` both map to ``/about``.
    """

    def derive(self, path: str, prefix: str = "") -> str:
        """Derive the route for a content path.

        Args:
            path: POSIX path relative to the content root.
            prefix: Route prefix of the content source.

        Returns:
            Route beginning with ``/`` and without a trailing slash.
        """
        rel = PurePosixPath(path)
        segments = [slugify(part) for part in rel.parent.parts if part not in ("", ".")]
        stem = slugify(rel.stem)
        if stem != "index":
            segments.append(stem)
        segments = [s for s in prefix.strip("/").split("/") if s] + segments
        return "/" + "/".join(segments)


def derive_route(path: str, prefix: str = "") -> str:
    """Module-level shortcut for RouteDeriver().derive()."""
    return RouteDeriver().derive(path, prefix)


class LayoutResolver:
    """Resolves the layout name for a page.

    Looks at the page metadata's ``layout`` key (front-matter or site
    default), falling back to ``default``.
    """

    def resolve(self, metadata: dict[str, Any]) -> str:
        layout = metadata.get("layout")
        return str(layout) if layout else DEFAULT_LAYOUT


FallbackResolver = Callable[[ContentNode, ParsedDocument, SiteConfig], Any]


def _fallback_title(node: ContentNode, doc: ParsedDocument, config: SiteConfig) -> str:
    rel = PurePosixPath(node.path)
    if rel.stem.lower() != "index":
        return titleize(rel.name)
    if rel.parent.name:
        return titleize(rel.parent.name)
    return config.title or "Home"


def _fallback_date(node: ContentNode, doc: ParsedDocument, config: SiteConfig) -> datetime:
    return extract_date_from_name(PurePosixPath(node.path).stem) or node.last_modified


def _fallback_description(node: ContentNode, doc: ParsedDocument, config: SiteConfig) -> str:
    blocks = [child.text_content() for child in doc.body.children if child.type == "paragraph"]
    return first_paragraph("\n\n".join(blocks))


FALLBACKS: dict[str, FallbackResolver] = {
    "title": _fallback_title,
    "date": _fallback_date,
    "description": _fallback_description,
}


class PageBinder:
    """Binds parsed documents to routes and merged metadata.

    Attributes:
        config: Site configuration supplying defaults and route prefixes.
        required_keys: Keys every page should carry.
        route_deriver: Route deriver instance.
        layout_resolver: Layout resolver instance.
    """

    def __init__(
        self,
        config: SiteConfig,
        required_keys: Sequence[str] | None = None,
        route_deriver: RouteDeriver | None = None,
        layout_resolver: LayoutResolver | None = None,
    ):
        """Initialize the binder.

        Args:
            config: Site configuration.
            required_keys: Overrides ``config.required_keys``.
            route_deriver: Optional custom route deriver.
            layout_resolver: Optional custom layout resolver.
        """
        self.config = config
        self.required_keys = tuple(
            config.required_keys if required_keys is None else required_keys
        )
        self.route_deriver = route_deriver or RouteDeriver()
        self.layout_resolver = layout_resolver or LayoutResolver()
        self._prefixes = {source.name: source.route_prefix for source in config.sources}

    def bind(self, documents: Sequence[tuple[ContentNode, ParsedDocument]]) -> BindResult:
        """Bind documents to pages.

        Args:
            documents: ``(ContentNode, ParsedDocument)`` pairs.

        Returns:
            BindResult with pages ordered by source name and path.

        Raises:
            DuplicateRouteError: If two documents derive the same route.
        """
        ordered = sorted(documents, key=lambda pair: (pair[0].source, pair[0].path))
        routes = self._assign_routes(ordered)

        result = BindResult(pages=[])
        for (node, doc), route in zip(ordered, routes):
            result.pages.append(self._build_page(node, doc, route, result.warnings))
        logger.debug("Bound %d pages", len(result.pages))
        return result

    def _assign_routes(self, ordered: Sequence[tuple[ContentNode, ParsedDocument]]) -> list[str]:
        claimed: dict[str, str] = {}
        routes: list[str] = []
        for node, _doc in ordered:
            route = self.route_deriver.derive(node.path, self._prefixes.get(node.source, ""))
            label = _label(node)
            if route in claimed:
                raise DuplicateRouteError(route, claimed[route], label)
            claimed[route] = label
            routes.append(route)
        return routes

    def _build_page(
        self,
        node: ContentNode,
        doc: ParsedDocument,
        route: str,
        warnings: list[MissingMetadataWarning],
    ) -> Page:
        metadata: dict[str, Any] = {**self.config.defaults, **doc.front_matter}
        for key in self.required_keys:
            if metadata.get(key) not in (None, ""):
                continue
            resolver = FALLBACKS.get(key)
            fallback = resolver(node, doc, self.config) if resolver else ""
            warning = MissingMetadataWarning(_label(node), key, fallback)
            logger.warning("%s", warning)
            warnings.append(warning)
            metadata[key] = fallback
        if "date" in metadata:
            metadata["date"] = coerce_datetime(metadata["date"])
        if "tags" in metadata:
            metadata["tags"] = normalize_tags(metadata["tags"])

        return Page(
            route=route,
            metadata=metadata,
            content=doc.body,
            source_path=node.path,
            source=node.source,
            layout=self.layout_resolver.resolve(metadata),
        )


def _label(node: ContentNode) -> str:
    """Return a source-qualified path for messages."""
    return f"{node.source}:{node.path}" if node.source else node.path
