"""Query helpers over bound pages.

PageCollection wraps the pages produced by the binder so layouts and callers
can filter them by route, content source, tag or draft status, and order them
for listings. TagCollection groups pages under each normalised tag.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import datetime
from pathlib import PurePosixPath

from .binder import Page
from .utils import (
    build_tags_index,
    coerce_datetime,
    extract_number_from_name,
    strip_number_prefix,
)


class PageCollection(Sequence[Page]):
    """Read-only sequence of bound pages."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        return self._pages[item]

    def get(self, route: str) -> Page | None:
        """Return the page bound to ``route``, or None."""
        return next((p for p in self._pages if p.route == route), None)

    def from_source(self, name: str) -> PageCollection:
        """Pages read from the content source called ``name``."""
        return PageCollection(p for p in self._pages if p.source == name)

    def with_tag(self, tag: str) -> PageCollection:
        return PageCollection(p for p in self._pages if tag in p.tags)

    def drafts(self) -> PageCollection:
        """Pages whose front-matter sets ``draft: true``."""
        return PageCollection(p for p in self._pages if p.draft)

    def published(self) -> PageCollection:
        return PageCollection(p for p in self._pages if not p.draft)

    def sorted(self, reverse: bool = True) -> PageCollection:
        """Order pages for a listing.

        Pages are compared by their ``date`` metadata, then by a numeric
        file-name prefix (``01-intro.md``), then by the rest of the file
        name. Pages without a date sort as the oldest. Timezone-aware dates
        are compared in UTC alongside naive ones.

        Args:
            reverse: Newest first when True (the default).

        Returns:
            A new PageCollection.
        """

        def sort_key(p: Page):
            stem = PurePosixPath(p.source_path).stem
            number = extract_number_from_name(stem)
            num_key = number if number is not None else (0 if not reverse else float("inf"))
            name_key = strip_number_prefix(stem).lower()
            return (coerce_datetime(p.date) or datetime.min, num_key, name_key)

        return PageCollection(sorted(self._pages, key=sort_key, reverse=reverse))

    def latest(self, count: int = 5) -> PageCollection:
        """The ``count`` most recently dated pages."""
        return PageCollection(self.sorted()[:count])

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


class TagCollection(Mapping[str, PageCollection]):
    """Mapping of tag to the pages that carry it, in binding order."""

    def __init__(self, mapping: dict[str, Iterable[Page]]):
        self._mapping = {k: PageCollection(v) for k, v in mapping.items()}

    @classmethod
    def from_pages(cls, pages: Iterable[Page]) -> TagCollection:
        return cls(build_tags_index(pages))

    def __getitem__(self, key: str) -> PageCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
