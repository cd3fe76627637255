"""Folio static site generator.

Folio turns a tree of Markdown documents with YAML front-matter and a
directory of Jinja2 templates into a deployable static website.

The build runs as a pipeline: documents are loaded, rendered and hashed
independently, aggregated into a single site graph, rendered through
templates and finally written atomically into the output directory.

The main entry point is the CLI module; ``folio.build.build_site`` is the
programmatic entry point.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
