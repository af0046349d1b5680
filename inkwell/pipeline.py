"""Content ingestion pipeline for Inkwell.

Scans every configured source, parses each document independently
(optionally across a thread pool) and then binds all of them in a single
step, which is where route collisions are detected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .binder import BindResult, Page, PageBinder
from .config import SiteConfig
from .errors import MissingMetadataWarning
from .parser import DocumentParser, ParsedDocument
from .protocols import BodyParser
from .store import ContentNode, ContentStore
from .utils import is_mdx

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of running the ingestion pipeline.

    Attributes:
        pages: Bound pages in source order.
        warnings: Missing-metadata warnings raised while binding.
        skipped: Source-qualified paths that vanished or were unreadable.
    """

    pages: list[Page]
    warnings: list[MissingMetadataWarning] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def scan_sources(config: SiteConfig) -> tuple[list[ContentNode], list[str]]:
    """Read every document from every configured source.

    Args:
        config: Site configuration.

    Returns:
        Tuple of (nodes, skipped paths).

    Raises:
        NotFoundError: If any content root is missing.
    """
    nodes: list[ContentNode] = []
    skipped: list[str] = []
    for source in config.sources:
        scan = ContentStore(source.path, source.extensions, source=source.name).scan()
        nodes.extend(scan)
        skipped.extend(f"{source.name}:{rel}" for rel in scan.skipped)
    return nodes, skipped


def parse_nodes(
    nodes: Iterable[ContentNode],
    parser: BodyParser | None = None,
    workers: int | None = None,
) -> list[tuple[ContentNode, ParsedDocument]]:
    """Parse nodes, in parallel when more than one worker is requested.

    Args:
        nodes: Content nodes to parse.
        parser: Optional custom parser.
        workers: Thread count; ``None`` or ``1`` parses sequentially.

    Returns:
        ``(node, parsed)`` pairs in input order.
    """
    parser = parser or DocumentParser()
    items = list(nodes)

    def parse_one(node: ContentNode) -> tuple[ContentNode, ParsedDocument]:
        return node, parser.parse(node.raw_text, mdx=is_mdx(node.path))

    if not workers or workers <= 1:
        return [parse_one(node) for node in items]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(parse_one, items))


def build_pages(
    config: SiteConfig,
    workers: int | None = None,
    parser: BodyParser | None = None,
    binder: PageBinder | None = None,
) -> PipelineResult:
    """Run scan, parse and bind for the whole site.

    Args:
        config: Site configuration.
        workers: Parser thread count.
        parser: Optional custom parser.
        binder: Optional custom binder.

    Returns:
        PipelineResult with pages, warnings and skipped files.

    Raises:
        NotFoundError: If a content root is missing.
        DuplicateRouteError: If two documents derive the same route.
    """
    nodes, skipped = scan_sources(config)
    documents = parse_nodes(nodes, parser=parser, workers=workers)
    bound: BindResult = (binder or PageBinder(config)).bind(documents)
    logger.info(
        "Built %d pages (%d warnings, %d skipped)",
        len(bound.pages),
        len(bound.warnings),
        len(skipped),
    )
    return PipelineResult(pages=bound.pages, warnings=bound.warnings, skipped=skipped)
