"""Site configuration for Inkwell.

Configuration is loaded once from ``inkwell.yaml`` in the project root and
passed explicitly to the binder and renderer.

Example::

    site_metadata:
      title: Ethan Yang
      site_url: https://www.yourdomain.tld
    plugins:
      - mdx
      - resolve: source-filesystem
        options:
          name: blog
          path: blog
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE = "inkwell.yaml"
SOURCE_PLUGIN = "source-filesystem"
DEFAULT_EXTENSIONS = (".md", ".mdx", ".markdown")
DEFAULT_REQUIRED_KEYS = ("title", "date")


class ConfigError(ValueError):
    """Raised when ``inkwell.yaml`` cannot be parsed."""


@dataclass(frozen=True)
class SourceConfig:
    """One content root declared by a ``source-filesystem`` plugin entry.

    Attributes:
        name: Source name, attached to every node it yields.
        path: Absolute path of the content root.
        route_prefix: Prefix prepended to every derived route.
        extensions: Allow-list of document extensions.
    """

    name: str
    path: Path
    route_prefix: str = ""
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS


@dataclass
class SiteConfig:
    """Site-wide configuration.

    Attributes:
        title: Site title.
        site_url: Canonical base URL of the deployed site.
        sources: Content roots to scan.
        defaults: Site-wide metadata defaults, overridden by front-matter.
        required_keys: Keys every page should carry; missing ones fall back.
        output_dir: Directory the renderer writes to.
        layouts_dir: Directory holding Jinja2 layouts.
        plugins: Plugin names declared in the config, verbatim.
        project_root: Directory the config was loaded from.
    """

    title: str = ""
    site_url: str = ""
    sources: list[SourceConfig] = field(default_factory=list)
    defaults: dict[str, Any] = field(default_factory=dict)
    required_keys: tuple[str, ...] = DEFAULT_REQUIRED_KEYS
    output_dir: Path = Path("public")
    layouts_dir: Path = Path("layouts")
    plugins: list[str] = field(default_factory=list)
    project_root: Path = Path(".")

    @property
    def site_metadata(self) -> dict[str, str]:
        """Return the metadata exposed to layouts as ``site``."""
        return {"title": self.title, "site_url": self.site_url}


def load_config(project_root: Path) -> SiteConfig:
    """Load site configuration from inkwell.yaml.

    A missing file yields the defaults with a single ``content`` source.

    Args:
        project_root: Root directory of the project.

    Returns:
        SiteConfig with relative paths resolved against ``project_root``.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config_path = project_root / CONFIG_FILE
    raw: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid {CONFIG_FILE}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"Invalid {CONFIG_FILE}: expected a mapping")
        raw = loaded
    else:
        logger.debug("No %s in %s; using defaults", CONFIG_FILE, project_root)
    return config_from_dict(raw, project_root)


def config_from_dict(raw: dict[str, Any], project_root: Path) -> SiteConfig:
    """Build a SiteConfig from an already-parsed mapping.

    Args:
        raw: Parsed configuration mapping.
        project_root: Directory relative paths resolve against.

    Returns:
        SiteConfig instance.

    Raises:
        ConfigError: If two content sources share a name.
    """
    metadata = raw.get("site_metadata") or {}
    sources: list[SourceConfig] = []
    plugins: list[str] = []
    for entry in raw.get("plugins") or []:
        if isinstance(entry, str):
            plugins.append(entry)
            continue
        if not isinstance(entry, dict) or "resolve" not in entry:
            logger.warning("Ignoring malformed plugin entry: %r", entry)
            continue
        name = str(entry["resolve"])
        plugins.append(name)
        if name == SOURCE_PLUGIN:
            source = _source_from_options(entry.get("options") or {}, project_root)
            if any(existing.name == source.name for existing in sources):
                raise ConfigError(f"Duplicate content source name: {source.name!r}")
            sources.append(source)

    if not sources:
        sources.append(SourceConfig(name="content", path=project_root / "content"))

    required = raw.get("required_keys")
    return SiteConfig(
        title=str(metadata.get("title") or ""),
        site_url=str(metadata.get("site_url") or ""),
        sources=sources,
        defaults=dict(raw.get("defaults") or {}),
        required_keys=tuple(required) if required is not None else DEFAULT_REQUIRED_KEYS,
        output_dir=project_root / str(raw.get("output_dir", "public")),
        layouts_dir=project_root / str(raw.get("layouts_dir", "layouts")),
        plugins=plugins,
        project_root=project_root,
    )


def _source_from_options(options: dict[str, Any], project_root: Path) -> SourceConfig:
    """Translate ``source-filesystem`` options into a SourceConfig."""
    path = str(options.get("path") or "content")
    name = str(options.get("name") or Path(path).name)
    extensions = options.get("extensions")
    return SourceConfig(
        name=name,
        path=project_root / path,
        route_prefix=str(options.get("route_prefix") or ""),
        extensions=tuple(extensions) if extensions else DEFAULT_EXTENSIONS,
    )
