"""Content store for Inkwell.

Discovers source documents under a content root and exposes each one as an
immutable ContentNode.

Key classes:
- ContentNode: One discovered document and its raw text.
- ContentStore: Scans a content root against an extension allow-list.
- ContentScan: Restartable, lazy sequence of nodes over a fixed snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .config import DEFAULT_EXTENSIONS
from .errors import NotFoundError
from .utils import has_extension, is_hidden_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentNode:
    """A source document read from a content root.

    Attributes:
        path: POSIX path relative to the content root.
        raw_text: Full file contents.
        last_modified: File modification time.
        source: Name of the content source the node came from.
    """

    path: str
    raw_text: str
    last_modified: datetime
    source: str = ""


class ContentScan:
    """Lazy sequence of ContentNodes over a snapshot of the directory listing.

    The listing is fixed when the scan is created; each iteration reads the
    files again, so a scan can be walked more than once. Files that vanish
    or cannot be read are skipped and recorded in ``skipped``.

    Attributes:
        root: Content root directory.
        paths: Snapshot of relative document paths, sorted.
        source: Source name stamped on every node.
        skipped: Relative paths skipped during the last iteration.
    """

    def __init__(self, root: Path, paths: list[str], source: str = ""):
        self.root = root
        self.paths = paths
        self.source = source
        self.skipped: list[str] = []

    def __iter__(self) -> Iterator[ContentNode]:
        self.skipped = []
        for rel in self.paths:
            node = self._read(rel)
            if node is not None:
                yield node

    def __len__(self) -> int:
        return len(self.paths)

    def _read(self, rel: str) -> ContentNode | None:
        path = self.root / rel
        try:
            raw_text = path.read_text(encoding="utf-8")
            mtime = path.stat().st_mtime
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            self.skipped.append(rel)
            return None
        logger.debug("Read %s", path)
        return ContentNode(
            path=rel,
            raw_text=raw_text,
            last_modified=datetime.fromtimestamp(mtime),
            source=self.source,
        )


class ContentStore:
    """File-tree scanner for one content root.

    Attributes:
        root: Directory containing source documents.
        extensions: Allow-list of document suffixes.
        source: Source name stamped on every node.
    """

    def __init__(
        self,
        root: Path,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
        source: str = "",
    ):
        self.root = Path(root)
        self.extensions = extensions
        self.source = source

    def scan(self) -> ContentScan:
        """Snapshot the content root and return a scan over it.

        Returns:
            ContentScan over every document under the root.

        Raises:
            NotFoundError: If the root does not exist or is not a directory.
        """
        if not self.root.is_dir():
            raise NotFoundError(self.root)
        paths: list[str] = []
        for path in self.root.rglob("*"):
            rel = path.relative_to(self.root)
            if is_hidden_path(rel):
                continue
            if not has_extension(path, self.extensions):
                continue
            if path.is_dir():
                continue
            paths.append(rel.as_posix())
        paths.sort()
        logger.debug("Found %d documents under %s", len(paths), self.root)
        return ContentScan(self.root, paths, source=self.source)
