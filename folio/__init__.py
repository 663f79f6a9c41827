"""Folio static blog builder.

Folio turns a directory of Markdown posts with YAML front matter into a
static HTML site: each post is rendered into its Jinja2 layout, and an
index page lists every post newest first with its date, category and
excerpt.

The main entry point is the CLI module, which provides commands for
building a site and creating new posts. `folio.build.build_site` runs the
same pipeline from Python.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
