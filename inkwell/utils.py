"""Utility functions for Inkwell.

String, path and date helpers shared by the content store, parser and binder.

Key functions:
    slugify: Convert a path segment to a URL slug.
    titleize: Convert a filename to a human-readable title.
    extract_date_from_name: Extract a date from a filename prefix.
    has_extension: Check a path against an extension allow-list.
    normalize_tags: Coerce a front-matter ``tags`` value to a list.
    build_tags_index: Build an index of pages by tag.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Iterable
from datetime import date, datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

_SLUG_SEPARATOR_RE = re.compile(r"[\W_]+", re.UNICODE)


def strip_date_prefix(name: str) -> str:
    """Drop a leading ``YYYY-MM-DD-`` prefix from a filename stem.

    Args:
        name: Filename stem.

    Returns:
        The stem without its date prefix, or unchanged if there is none.
    """
    parts = name.split("-")
    if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
        return "-".join(parts[3:])
    return name


def slugify(name: str) -> str:
    """Convert a filename stem or directory name to a slug, dropping date prefix.

    Word characters from any script are kept, so ``关于`` stays ``关于``.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug, ``index`` if nothing is left.
    """
    cleaned = _SLUG_SEPARATOR_RE.sub("-", strip_date_prefix(name))
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word.

    Args:
        filename: Filename with or without extension.

    Returns:
        Human-readable title string.

    Examples:
        >>> titleize("2024-01-15-hello-world.md")
        'Hello World'

        >>> titleize("getting-started.md")
        'Getting Started'
    """
    base = strip_date_prefix(PurePosixPath(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        datetime object if a valid date prefix is found, None otherwise.

    Examples:
        >>> extract_date_from_name("2024-01-15-hello-world")
        datetime.datetime(2024, 1, 15, 0, 0)

        >>> extract_date_from_name("hello-world") is None
        True
    """
    parts = name.split("-")
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        try:
            return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def coerce_datetime(value: Any) -> Any:
    """Promote a YAML ``date`` to a naive ``datetime``.

    Timezone-aware values are converted to UTC and made naive so every page
    date compares with every other. Other values pass through.

    Examples:
        >>> coerce_datetime(date(2024, 1, 2))
        datetime.datetime(2024, 1, 2, 0, 0)
        >>> coerce_datetime(datetime(2024, 1, 2, 12, tzinfo=timezone.utc))
        datetime.datetime(2024, 1, 2, 12, 0)
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return value


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first paragraph from text.

    Skips headings, images, fences and MDX import/export lines. Strips HTML
    tags, collapses whitespace and truncates to the specified limit.

    Args:
        text: Markdown text to extract from.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to limit characters.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "![", "```", "---", "import ", "export ")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        collapsed = " ".join(para.split())
        if collapsed:
            return collapsed[:limit]
    return ""


def is_hidden_path(path: PurePosixPath | Path) -> bool:
    """Check if any component of a relative path starts with a dot.

    Args:
        path: Relative path to check.

    Returns:
        True for dotfiles and anything inside a dot-directory.
    """
    return any(part.startswith(".") for part in path.parts)


def has_extension(path: Path, extensions: Iterable[str]) -> bool:
    """Check if a path has one of the given extensions (case-insensitive).

    Args:
        path: Path to check.
        extensions: Allowed suffixes including the dot, e.g. ``.md``.

    Returns:
        True if the file suffix is in the allow-list.
    """
    return path.suffix.lower() in {ext.lower() for ext in extensions}


def is_mdx(path: str | Path) -> bool:
    """Check if a path is an MDX document."""
    return PurePosixPath(str(path)).suffix.lower() == ".mdx"


def normalize_tags(value: Any) -> list[str]:
    """Coerce a front-matter ``tags`` value to a list of strings.

    Accepts a list or a comma-separated string; anything else yields ``[]``.

    Examples:
        >>> normalize_tags("python, web")
        ['python', 'web']
    """
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    tags: list[str] = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def extract_number_from_name(name: str) -> int | None:
    """Extract a leading number from a filename for sorting.

    Handles filenames like "01-intro.md", "2-getting-started.md", etc.
    If the filename has a date prefix, extracts number after the date.

    Args:
        name: Filename stem (without extension).

    Returns:
        The extracted number, or None if no number found.
    """
    parts = strip_date_prefix(name).split("-")
    if parts and parts[0].isdigit():
        return int(parts[0])
    return None


def strip_number_prefix(name: str) -> str:
    """Strip date and number prefixes from filename for sorting comparison.

    Args:
        name: Filename stem (without extension).

    Returns:
        Filename with date and number prefixes removed.
    """
    parts = strip_date_prefix(name).split("-")
    if parts and parts[0].isdigit():
        parts = parts[1:]
    return "-".join(parts) if parts else name


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Examples:
        >>> join_root_url('https://example.com/', '/about')
        'https://example.com/about'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def build_tags_index(pages: Iterable) -> dict[str, list]:
    """Build an index mapping tags to lists of pages containing that tag.

    Args:
        pages: Iterable of Page objects with a 'tags' attribute.

    Returns:
        Dictionary mapping tag names to lists of pages.
    """
    tags: dict[str, list] = {}
    for page in pages:
        for tag in page.tags:
            tags.setdefault(tag, []).append(page)
    return tags
