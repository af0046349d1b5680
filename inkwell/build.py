"""Site building for Inkwell.

Runs the ingestion pipeline, renders every page through its layout and
writes the result, plus a sitemap when the site URL is known.

Key functions:
- build_site: Main function to build the entire site.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import TemplateSyntaxError

from .binder import Page
from .config import SiteConfig, load_config
from .errors import MissingMetadataWarning, RenderError
from .pipeline import build_pages
from .render import SiteRenderer
from .utils import ensure_clean_dir, join_root_url

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        pages: Pages written to the output directory.
        output_dir: Directory where the site was built.
        warnings: Missing-metadata warnings raised while binding.
        skipped: Source files skipped during the scan.
    """

    pages: list[Page]
    output_dir: Path
    warnings: list[MissingMetadataWarning] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    workers: int | None = None,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include pages marked ``draft: true``.
        workers: Parser thread count.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.

    Returns:
        BuildResult for the written pages.

    Raises:
        NotFoundError: If a content root is missing.
        DuplicateRouteError: If two documents derive the same route.
        RenderError: If a layout fails to render a page.
    """
    config = load_config(project_root)
    output_dir = output_dir_override or config.output_dir
    result = build_pages(config, workers=workers)
    pages = [p for p in result.pages if include_drafts or not p.draft]

    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    renderer = SiteRenderer(config, pages)
    for page in pages:
        try:
            rendered = renderer.render_page(page)
        except TemplateSyntaxError as exc:
            raise RenderError(
                page.source_path,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except Exception as exc:
            raise RenderError(page.source_path, _format_error_message(exc), exc) from exc
        _write_page(output_dir, page, rendered)

    _write_sitemap(output_dir, config, pages)
    logger.info("Wrote %d pages to %s", len(pages), output_dir)
    return BuildResult(
        pages=pages,
        output_dir=output_dir,
        warnings=result.warnings,
        skipped=result.skipped,
    )


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    if error_type == "TemplateNotFound":
        return f"Layout not found: {exc}"
    return f"{error_type}: {exc}"


def _write_page(output_dir: Path, page: Page, rendered: str) -> None:
    """Write a rendered page to ``<output_dir>/<route>/index.html``."""
    target_dir = output_dir / page.route.strip("/")
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / "index.html").write_text(rendered, encoding="utf-8")


def _write_sitemap(output_dir: Path, config: SiteConfig, pages: Iterable[Page]) -> None:
    """Generate and write sitemap.xml.

    Args:
        output_dir: Output directory for the sitemap.
        config: Site configuration; nothing is written without a site URL.
        pages: Pages to list.
    """
    if not config.site_url:
        return
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for page in sorted(pages, key=lambda p: p.route):
        loc = join_root_url(config.site_url, page.route)
        if page.date:
            lastmod = page.date.strftime("%Y-%m-%d")
            lines.append(f"  <url><loc>{loc}</loc><lastmod>{lastmod}</lastmod></url>")
        else:
            lines.append(f"  <url><loc>{loc}</loc></url>")
    lines.append("</urlset>")
    (output_dir / "sitemap.xml").write_text("\n".join(lines), encoding="utf-8")
