"""Inkwell static content pipeline.

This package turns a tree of Markdown/MDX documents with YAML front-matter
into routed pages for a personal blog or portfolio site.

Pipeline stages:
- store: Discover documents under each content root.
- parser: Split front-matter from the body and parse the body into a tree.
- binder: Map every document to a unique route with merged metadata.

Rendering to HTML is delegated to mistune and Jinja2 (see render and build),
and the CLI module exposes the build from the command line.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
