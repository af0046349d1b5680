"""Error types for Inkwell.

Structural failures (a missing content root, two documents claiming the same
route) abort a build. Missing metadata never does: it is reported as a
MissingMetadataWarning and a fallback value is used instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class InkwellError(Exception):
    """Base class for errors that abort a build."""


class NotFoundError(InkwellError, FileNotFoundError):
    """Raised when a content root does not exist.

    Attributes:
        path: The missing directory.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Content root not found: {self.path}")


class DuplicateRouteError(InkwellError):
    """Raised when two documents derive the same route.

    Attributes:
        route: The contested route.
        first_path: Source path of the document that claimed the route first.
        second_path: Source path of the conflicting document.
    """

    def __init__(self, route: str, first_path: str, second_path: str):
        self.route = route
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(
            f"Duplicate route {route!r}: {first_path} and {second_path} "
            "both map to it (routes must be unique)"
        )


class RenderError(InkwellError):
    """Error while rendering a page through its layout.

    Attributes:
        source_path: Source path of the page that failed.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class MissingMetadataWarning(UserWarning):
    """A required metadata key was absent from a page and the site defaults.

    Attributes:
        source_path: Source path of the affected document.
        key: The missing key.
        fallback: The value used in its place.
    """

    def __init__(self, source_path: str, key: str, fallback: Any):
        self.source_path = source_path
        self.key = key
        self.fallback = fallback
        super().__init__(
            f"{source_path}: missing {key!r}, falling back to {fallback!r}"
        )
