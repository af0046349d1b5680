"""Protocol definitions for Inkwell.

These are the seams between pipeline stages. The pipeline depends on them
rather than on the concrete store, parser and renderer, so each stage can be
swapped or faked in tests.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .binder import Page
    from .parser import ParsedDocument
    from .store import ContentNode


@runtime_checkable
class ContentSource(Protocol):
    """Protocol for discovering source documents."""

    @abstractmethod
    def scan(self) -> Iterable[ContentNode]:
        """Return a restartable iterable of content nodes.

        Raises:
            NotFoundError: If the content root does not exist.
        """
        ...


@runtime_checkable
class BodyParser(Protocol):
    """Protocol for turning raw document text into a ParsedDocument."""

    @abstractmethod
    def parse(self, text: str, mdx: bool = False) -> ParsedDocument:
        """Parse a document; must not raise on malformed input."""
        ...


@runtime_checkable
class PageRenderer(Protocol):
    """Protocol for rendering a bound page to a string."""

    @abstractmethod
    def render_page(self, page: Page) -> str:
        """Render a page with its layout."""
        ...
